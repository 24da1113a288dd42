"""Application factory and context for the Sparkling Field API.

All runtime state lives in an :class:`AppContext` attached to
``app.state.context`` rather than in module globals, so each test can build
a fresh app with its own runner and relay.

Usage:
------
    # Production (settings from environment)
    app = create_app()

    # Testing (custom configuration)
    app = create_app(context=AppContext(api_key="test-key", autostart=False))
"""

import logging
import os
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from backend.logging_config import configure_logging
from backend.models import HealthResponse
from backend.relay import AnthropicRelay
from backend.security import RATE_LIMIT_REQUESTS, RATE_LIMIT_WINDOW, setup_security_middleware
from backend.simulation_runner import SimulationRunner
from sparkling.config.inference import DEFAULT_API_ENDPOINT
from sparkling.config.simulation_config import SimulationConfig

DEFAULT_API_PORT = 3000


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


@dataclass
class AppContext:
    """Runtime context holding all application state."""

    # Configuration
    api_key: str = field(default_factory=lambda: os.getenv("ANTHROPIC_API_KEY", ""))
    upstream_url: str = field(default_factory=lambda: os.getenv("ANTHROPIC_API_URL", DEFAULT_API_ENDPOINT))
    api_port: int = field(default_factory=lambda: int(os.getenv("SPARKLING_API_PORT", str(DEFAULT_API_PORT))))
    production_mode: bool = field(default_factory=lambda: _env_flag("PRODUCTION", "false"))
    allowed_origins: list = field(default_factory=lambda: os.getenv("ALLOWED_ORIGINS", "*").split(","))
    autostart: bool = field(default_factory=lambda: _env_flag("SPARKLING_AUTOSTART", "true"))
    enable_rate_limiting: bool = True
    rate_limit_requests: int = RATE_LIMIT_REQUESTS
    rate_limit_window: int = RATE_LIMIT_WINDOW
    simulation_config: SimulationConfig = field(default_factory=SimulationConfig.from_env)

    # Services (created in create_app unless supplied)
    relay: Optional[AnthropicRelay] = None
    runner: Optional[SimulationRunner] = None

    # Logging
    logger: logging.Logger = field(default_factory=lambda: logging.getLogger("sparkling.backend"))


def create_app(
    *,
    production_mode: Optional[bool] = None,
    context: Optional[AppContext] = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    The relay and the simulation runner are built from the context unless it
    already carries them. Tests pass a context with ``autostart=False`` so the
    simulation only advances when stepped.

    Args:
        production_mode: Overrides ``PRODUCTION``; hides the docs and applies
            the configured CORS origins
        context: Pre-built context; a fresh one is read from the environment
            when omitted
    """
    logger = configure_logging(extra_loggers=("sparkling",))

    if context is None:
        context = AppContext()
    if production_mode is not None:
        context.production_mode = production_mode
    context.logger = logger

    if context.relay is None:
        context.relay = AnthropicRelay(context.api_key, upstream_url=context.upstream_url)
    if context.runner is None:
        context.runner = SimulationRunner(context.simulation_config)

    if not context.relay.configured:
        logger.warning("ANTHROPIC_API_KEY is not set; relay requests will fail with 500")

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Start the relay client and the simulation; stop both on shutdown."""
        ctx = app.state.context
        try:
            await ctx.relay.start()
            if ctx.autostart:
                ctx.runner.start()
            else:
                ctx.runner.setup()
            mode = "running" if ctx.autostart else "paused"
            ctx.logger.info("API ready on port %d (simulation %s)", ctx.api_port, mode)
            yield
            ctx.logger.info("Shutting down simulation and relay")
        except Exception as e:
            ctx.logger.error("API startup failed: %s", e, exc_info=True)
            raise
        finally:
            ctx.runner.stop()
            await ctx.relay.close()

    app = FastAPI(
        title="Sparkling Field API",
        lifespan=lifespan,
        docs_url=None if context.production_mode else "/docs",
        redoc_url=None if context.production_mode else "/redoc",
    )
    app.state.context = context

    app.add_middleware(
        CORSMiddleware,
        allow_origins=context.allowed_origins if context.production_mode else ["*"],
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

    setup_security_middleware(
        app,
        enable_rate_limiting=context.enable_rate_limiting,
        requests_per_window=context.rate_limit_requests,
        window_seconds=context.rate_limit_window,
    )

    @app.get("/health", response_model=HealthResponse)
    async def health():
        return HealthResponse()

    _setup_routers(app, context)
    return app


def _setup_routers(app: FastAPI, ctx: AppContext) -> None:
    """Setup and include all API routers."""
    from backend.routers import relay, simulation

    app.include_router(simulation.setup_router(ctx.runner))
    app.include_router(relay.setup_router(ctx.relay))
    ctx.logger.debug("API routers configured")
