"""Serve the build graph API: `python -m buildgraph.main` or `buildgraph-api`."""
import logging

from buildgraph.api.main import app
from buildgraph.core.settings import runtime_env, server_bind


def run() -> None:
    import uvicorn

    logging.basicConfig(
        level=logging.DEBUG if runtime_env() == "dev" else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    host, port = server_bind()
    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    run()
