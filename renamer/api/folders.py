"""
Folder management endpoints.

Includes:
- Adding, listing and removing monitored folders
"""

from pathlib import Path
from typing import List, Optional

from fastapi import APIRouter, HTTPException
from loguru import logger
from pydantic import BaseModel

from domains.monitoring.models import MonitoredFolder
from domains.monitoring.registry import get_folder_registry
from domains.naming.templates import NamingTemplate

router = APIRouter()


class AddFolderRequest(BaseModel):
    """Add folder request model."""
    path: Path
    template: Optional[NamingTemplate] = None


@router.get("/", response_model=List[MonitoredFolder])
async def list_folders():
    """List monitored folders."""
    return get_folder_registry().monitored_folders


@router.post("/", response_model=MonitoredFolder, status_code=201)
async def add_folder(request: AddFolderRequest):
    """
    Start monitoring a folder.

    Args:
        request: Folder path and optional naming template

    Returns:
        The monitored folder
    """
    path = request.path.expanduser()
    if not path.is_dir():
        raise HTTPException(status_code=400, detail=f"Not a directory: {path}")

    try:
        return get_folder_registry().add_folder(path, request.template)
    except ValueError as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.delete("/{folder_id}")
async def remove_folder(folder_id: str):
    """Stop monitoring a folder."""
    if not get_folder_registry().remove_folder(folder_id):
        raise HTTPException(status_code=404, detail=f"Unknown folder: {folder_id}")

    logger.info(f"Folder {folder_id} removed via API")
    return {"status": "removed", "id": folder_id}
