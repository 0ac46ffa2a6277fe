"""FastAPI application for the training periodization engine."""

from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI

from . import __version__
from .config import get_settings
from .api.routes import programs, techniques
from .api.exception_handlers import register_exception_handlers


logger = logging.getLogger(__name__)


def configure_logging(level: str | None = None) -> None:
    """Configure root logging from settings."""
    logging.basicConfig(
        level=(level or get_settings().log_level).upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    settings = get_settings()
    configure_logging(settings.log_level)
    logger.info("Starting Training Periodizer v%s", __version__)
    logger.info(
        "Fatigue storage: %s",
        settings.sqlite_path if settings.sqlite_path else "in-memory",
    )
    yield
    logger.info("Shutting down Training Periodizer")


app = FastAPI(
    title="Training Periodizer API",
    description="Periodized training programs, set prescriptions and fatigue-driven deloads",
    version=__version__,
    lifespan=lifespan,
)

# Register exception handlers
register_exception_handlers(app)

# Include routers
app.include_router(programs.router, prefix="/api/v1/programs", tags=["programs"])
app.include_router(techniques.router, prefix="/api/v1/techniques", tags=["techniques"])


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "name": "Training Periodizer API",
        "version": __version__,
        "status": "healthy",
    }


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn
    settings = get_settings()
    uvicorn.run(app, host=settings.api_host, port=settings.api_port)
