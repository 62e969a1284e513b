"""
Pasties - Main FastAPI application.
"""
import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from pasties.config import settings
from pasties.database import StorageInitError, init_database
from pasties.errors import PasteError, PasteStorageError
from pasties.manager import PasteManager
from pasties.routes import api, meta, pages

# Configure logging
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


async def paste_error_handler(request: Request, exc: PasteError) -> JSONResponse:
    """Translate paste manager errors into JSON error responses."""
    if isinstance(exc, PasteStorageError):
        logger.error(f"Storage failure on {request.method} {request.url.path}: {exc.cause!r}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


async def not_found_handler(request: Request, exc: StarletteHTTPException):
    """Serve an HTML 404 page outside the API."""
    if exc.status_code == 404 and not request.url.path.startswith("/api"):
        return pages.not_found_page()
    return await http_exception_handler(request, exc)


def create_app(manager: Optional[PasteManager] = None) -> FastAPI:
    """
    Build the application.

    Without an explicit manager the storage gateway is initialized from
    settings; a failure there is fatal and propagates to the caller.
    """
    if manager is None:
        try:
            database = init_database(settings.REDIS_URL)
        except StorageInitError:
            logger.critical("Paste storage could not be initialized, refusing to start")
            raise
        manager = PasteManager(database)

    app = FastAPI(
        title="Pasties",
        description="A pastebin with editable, password-protected pastes",
        version="1.0.0",
        debug=settings.DEBUG,
    )
    app.state.manager = manager

    app.add_exception_handler(PasteError, paste_error_handler)
    app.add_exception_handler(StarletteHTTPException, not_found_handler)

    # Include route modules; meta and API before the catch-all page routes
    app.include_router(meta.router)
    app.include_router(api.router)
    app.include_router(pages.router)

    @app.on_event("startup")
    async def startup_event():
        """Startup event handler."""
        logger.info("Pasties application starting...")
        if manager.database.using_fallback:
            logger.warning("DATABASE: Using IN-MEMORY storage")
            logger.warning("   Data will NOT persist across server restarts!")
        else:
            logger.info("DATABASE: Connected to Redis")

    @app.on_event("shutdown")
    async def shutdown_event():
        """Shutdown event handler."""
        logger.info("Pasties application shutting down...")

    return app


def run():
    import uvicorn
    uvicorn.run(
        "pasties.main:create_app",
        factory=True,
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
    )


if __name__ == "__main__":
    run()
