"""
Schemas for human-confirmed HS code decisions.
"""

from pydantic import Field
from typing import Optional

from models.base import CamelSchema


class NewCompanyProduct(CamelSchema):
    """HS code confirmed for a product of a new company."""

    product_name: str = Field(..., min_length=1)
    hs_code: str = Field(..., min_length=1)
    variant_attributes: Optional[dict[str, str]] = None


class UpdateCompanyRequest(CamelSchema):
    """Register a new company with its confirmed products."""

    company_name_en: str = Field(..., min_length=1, alias="companyNameEN")
    company_name_kr: str = Field(..., min_length=1, alias="companyNameKR")
    products: list[NewCompanyProduct] = Field(default_factory=list)


class UpdateCompanyResponse(CamelSchema):
    message: str
    company_id: str


class SelectedProduct(CamelSchema):
    """HS code picked for an existing company's product."""

    product_name: str = Field(..., min_length=1)
    selected_hs_code: str = Field(..., min_length=1)


class SelectHsCodesRequest(CamelSchema):
    """Apply picked HS codes for one company."""

    company_id: str = Field(..., min_length=1)
    products: list[SelectedProduct] = Field(..., min_length=1)


class MessageResponse(CamelSchema):
    message: str
