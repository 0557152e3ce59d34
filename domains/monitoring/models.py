"""
Persisted records for monitored folders.
"""

from pathlib import Path
from typing import Optional
from pydantic import BaseModel, Field

from domains.naming.templates import NamingTemplate
from renamer.utils.helpers import generate_uuid


class MonitoredFolder(BaseModel):
    """One watched directory and its naming template."""
    id: str = Field(default_factory=generate_uuid)
    path: Path
    template: NamingTemplate = NamingTemplate.AUTHOR_TITLE_JOURNAL_YEAR
    processed_count: int = 0
    is_active: bool = True


class Preferences(BaseModel):
    """User preferences persisted next to the folder set."""
    default_template: NamingTemplate = NamingTemplate.AUTHOR_TITLE_JOURNAL_YEAR
    last_selected_folder: Optional[Path] = None
