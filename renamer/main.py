"""
PDF Renamer - Main FastAPI Application

Watches folders for newly arriving PDFs and renames each one from its
metadata using a selectable naming template:
- Folder registry with persisted monitored folders
- Startup sweep plus live creation events per folder
- Status, folder and template endpoints
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from loguru import logger
import sys

from renamer.utils.config import get_settings
from renamer.api import folders, health, templates
from domains.monitoring.registry import get_folder_registry, close_folder_registry


# Configure logging
logger.remove()
logger.add(
    sys.stdout,
    format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>",
    level=get_settings().log_level
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    settings = get_settings()
    logger.info(f"Starting {settings.api_title} v{settings.api_version}")

    registry = get_folder_registry()
    logger.success(f"Monitoring {len(registry.monitored_folders)} folders")

    yield

    # Cleanup
    logger.info("Shutting down application...")
    close_folder_registry()
    logger.success("Application shut down complete")


# Create FastAPI app
settings = get_settings()
app = FastAPI(
    title=settings.api_title,
    version=settings.api_version,
    description="Automatic metadata-driven PDF renaming for monitored folders",
    lifespan=lifespan
)


# Exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler."""
    logger.error(f"Unhandled exception: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal server error",
            "detail": str(exc) if settings.log_level == "DEBUG" else "An error occurred"
        }
    )


# Include routers
app.include_router(health.router, tags=["Health"])
app.include_router(folders.router, prefix="/folders", tags=["Folders"])
app.include_router(templates.router, prefix="/templates", tags=["Templates"])


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "service": "PDF Renamer",
        "version": settings.api_version,
        "status": "operational",
        "docs": "/docs",
        "health": "/health"
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "renamer.main:app",
        host="127.0.0.1",
        port=settings.api_port,
        reload=False,
        log_level=settings.log_level.lower()
    )
