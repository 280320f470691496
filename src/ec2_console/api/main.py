from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from .. import __version__
from ..core.console import ConsoleSession
from ..utils.config import ConfigManager
from ..utils.exceptions import Ec2ConsoleError, ValidationError
from ..utils.logger import setup_logger
from .dependencies import connect_from_environment
from .routers import health, instances


logger = setup_logger(__name__, "api.log")


def create_app(session: Optional[ConsoleSession] = None, config: Optional[ConfigManager] = None) -> FastAPI:
    config = config or ConfigManager()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if app.state.console is None:
            app.state.console = ConsoleSession.from_config(config)
        if not app.state.console.live:
            try:
                connect_from_environment(app.state.console, config)
            except ValidationError as e:
                logger.warning(f"Unable to connect at startup: {e}")
        yield

    app = FastAPI(title="EC2 Console API", version=__version__, lifespan=lifespan)
    app.state.console = session
    app.state.config = config

    @app.exception_handler(Ec2ConsoleError)
    async def console_error_handler(request: Request, exc: Ec2ConsoleError) -> JSONResponse:
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "error": exc.message, "code": exc.code},
        )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        response = await call_next(request)
        logger.info(f"{request.method} {request.url.path} -> {response.status_code}")
        return response

    app.include_router(health.router)
    app.include_router(instances.router)
    return app
