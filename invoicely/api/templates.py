"""Template selector API."""

from fastapi import APIRouter, Depends

from invoicely.api.deps import get_template_registry
from invoicely.pdf.registry import TemplateRegistry

router = APIRouter(prefix="/api/templates", tags=["templates"])


@router.get("")
async def list_templates(registry: TemplateRegistry = Depends(get_template_registry)):
    return {"templates": [template.to_dict() for template in registry.all()]}
