"""
Carrier API routes.

Lets the user pick the carrier and template before uploading.
"""

from fastapi import APIRouter
import structlog

from models.template import CarrierResponse, TemplateListResponse
from services.template_service import get_template_service
from routes.excel import handle_error

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.get("", response_model=list[CarrierResponse])
async def list_carriers():
    """List all carriers."""
    try:
        return get_template_service().list_carriers()

    except Exception as e:
        return handle_error(e)


@router.get("/{carrier_id}/templates", response_model=TemplateListResponse, response_model_exclude_none=True)
async def list_carrier_templates(carrier_id: str):
    """List the spreadsheet templates of one carrier."""
    try:
        templates = get_template_service().list_templates(carrier_id)
        return TemplateListResponse(templates=templates)

    except Exception as e:
        return handle_error(e)
