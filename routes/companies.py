"""
Company API routes.

Registering new companies and reviewing their catalog.
"""

from typing import Optional

from fastapi import APIRouter, Query
import structlog

from models.company import CompanyResponse, CompanyNameUpdate
from models.catalog import CompanyCatalogResponse
from models.reconciliation import UpdateCompanyRequest, UpdateCompanyResponse
from services.company_service import get_company_service
from services.catalog_service import get_catalog_service
from services.reconciliation_service import get_reconciliation_service
from routes.excel import handle_error

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.post("/update", response_model=UpdateCompanyResponse)
async def update_company(data: UpdateCompanyRequest):
    """
    Register a new company with its confirmed products.

    The caller is expected to have seen isNew=true for this company;
    submitting the same company twice creates it twice.

    Raises:
        500: Database write failed
    """
    try:
        service = get_reconciliation_service()
        company_id = service.commit_new_company(
            data.company_name_en,
            data.company_name_kr,
            data.products
        )
        return UpdateCompanyResponse(
            message="Company and products updated successfully",
            company_id=company_id
        )

    except Exception as e:
        return handle_error(e)


@router.patch("/{company_id}", response_model=CompanyResponse)
async def update_company_name(company_id: str, data: CompanyNameUpdate):
    """
    Correct a company's Korean display name.

    Raises:
        404: Company not found
    """
    try:
        service = get_company_service()
        return service.update_name_kr(company_id, data.company_name_kr)

    except Exception as e:
        return handle_error(e)


@router.get("/{company_id}/products", response_model=CompanyCatalogResponse, response_model_exclude_none=True)
async def list_company_products(
    company_id: str,
    search: Optional[str] = Query(None, description="Product name contains (case-insensitive)")
):
    """
    A company's catalog, grouped by product.

    Raises:
        404: Company not found
    """
    try:
        get_company_service().get_by_id(company_id)
        return get_catalog_service().list_by_company(company_id, search)

    except Exception as e:
        return handle_error(e)
