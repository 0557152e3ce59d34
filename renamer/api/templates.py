"""
Naming template endpoints.
"""

from fastapi import APIRouter
from pydantic import BaseModel

from domains.monitoring.registry import get_folder_registry
from domains.naming.templates import NamingTemplate, list_templates

router = APIRouter()


class DefaultTemplateRequest(BaseModel):
    """Default template update model."""
    template: NamingTemplate


@router.get("/")
async def get_templates():
    """List available templates with an example filename each."""
    return {
        "default": get_folder_registry().default_template,
        "templates": list_templates(),
    }


@router.put("/default")
async def set_default_template(request: DefaultTemplateRequest):
    """Change the template used for newly added folders."""
    get_folder_registry().default_template = request.template
    return {"status": "updated", "default": request.template}
