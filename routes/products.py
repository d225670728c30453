"""
Product API routes.

HS code selection for products of existing companies.
"""

from fastapi import APIRouter
import structlog

from models.reconciliation import SelectHsCodesRequest, MessageResponse
from services.reconciliation_service import get_reconciliation_service
from routes.excel import handle_error

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.post("/select-hs-codes", response_model=MessageResponse)
async def select_hs_codes(data: SelectHsCodesRequest):
    """
    Make each picked HS code its product's default variant.

    Raises:
        404: Company not found
        500: Database write failed, or a product's update was only
             partially applied (retrying the same request repairs it)
    """
    try:
        service = get_reconciliation_service()
        service.select_hs_codes(data.company_id, data.products)
        return MessageResponse(message="Product HS codes updated successfully")

    except Exception as e:
        return handle_error(e)
