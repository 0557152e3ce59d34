"""
Health and status endpoints.
"""

from fastapi import APIRouter
from pydantic import BaseModel
from datetime import datetime
from typing import Optional

from domains.monitoring.registry import get_folder_registry
from domains.naming.templates import NamingTemplate
from renamer.utils.config import get_settings

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response model."""
    status: str
    timestamp: datetime
    monitoring: bool
    version: str


class StatusResponse(BaseModel):
    """Registry status response model."""
    monitoring: bool
    folder_count: int
    total_processed_files: int
    last_status_message: Optional[str] = None
    default_template: NamingTemplate


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """
    Health check endpoint.

    Reports "healthy" while at least one folder is being watched.
    """
    settings = get_settings()
    monitoring = get_folder_registry().is_monitoring

    return HealthResponse(
        status="healthy" if monitoring else "idle",
        timestamp=datetime.now(),
        monitoring=monitoring,
        version=settings.api_version
    )


@router.get("/status", response_model=StatusResponse)
async def get_status():
    """Aggregate counters and the most recent status message."""
    registry = get_folder_registry()

    return StatusResponse(
        monitoring=registry.is_monitoring,
        folder_count=len(registry.monitored_folders),
        total_processed_files=registry.total_processed_files,
        last_status_message=registry.last_status_message,
        default_template=registry.default_template,
    )
