"""ASGI entry point: ``uvicorn backend.main:app``."""

import os
from typing import Optional

import uvicorn

from backend.app_factory import create_app

app = create_app()


def serve(host: str = "0.0.0.0", port: Optional[int] = None) -> None:
    """Serve the module-level app in this process.

    No autoreload: the simulation thread lives inside the app, and a
    reloader would restart the world on every source change.
    """
    context = app.state.context
    uvicorn.run(
        app,
        host=host,
        port=port if port is not None else context.api_port,
        log_level=os.getenv("SPARKLING_LOG_LEVEL", "info").lower(),
    )


if __name__ == "__main__":
    serve()
