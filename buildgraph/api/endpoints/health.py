from __future__ import annotations

from fastapi import APIRouter

from buildgraph import __version__
from buildgraph.core.observability.metrics import inc_named
from buildgraph.core.settings import runtime_env

router = APIRouter()


@router.get("/health/live")
async def live():
    inc_named("health_live")
    return {"status": "ok"}


@router.get("/api/v1/health/live")
def liveness():
    inc_named("health_live")
    return {"status": "alive", "version": __version__, "env": runtime_env()}
