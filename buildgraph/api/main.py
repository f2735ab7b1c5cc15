from __future__ import annotations

from fastapi import FastAPI

from buildgraph import __version__
from buildgraph.api.endpoints import health
from buildgraph.api.endpoints import metrics_export
from buildgraph.api.endpoints.plans import router as plans_router
from buildgraph.api.middleware.error_shaping import install_error_handling
from buildgraph.api.middleware.request_context import RequestContextMiddleware

app = FastAPI(
    title="Build Graph API",
    version=__version__,
)

# ------------------------------------------------------------
# Middleware stack (ORDER MATTERS)
# Starlette reverses add_middleware order: the LAST call is the OUTERMOST.
# Runtime order (outermost -> innermost):
#   SafeErrorMiddleware -> RequestContextMiddleware -> handler
# BuildGraphError is answered by an exception handler inside both, so
# 422s still carry X-Request-Id.
# ------------------------------------------------------------
app.add_middleware(RequestContextMiddleware)
install_error_handling(app)

app.include_router(health.router)
app.include_router(metrics_export.router)
app.include_router(plans_router)
