"""
HS code catalog schemas.

One CatalogEntry is one HS code variant of a company's product.
"""

from pydantic import Field
from datetime import datetime
from typing import Optional

from models.base import CamelSchema


class CatalogEntry(CamelSchema):
    """Stored HS code variant, keyed by (company_id, product_name, variant_id)."""

    company_id: str = Field(..., description="Owning company UUID")
    product_name: str = Field(..., description="Product name as it appears in spreadsheets")
    variant_id: str = Field(..., description="Derived from variant attributes, or 'default'")
    hs_code: str = Field(..., min_length=1, description="HS tariff code")
    variant_attributes: Optional[dict[str, str]] = Field(None, description="Attributes distinguishing the variant")
    is_default_variant: bool = Field(False, description="Canonical variant for the product")
    last_updated: Optional[datetime] = Field(None, description="Last mutation time")


class ProductVariants(CamelSchema):
    """All catalogued variants of one product."""

    product_name: str
    default_hs_code: Optional[str] = Field(None, description="HS code of the default variant, if any")
    variants: list[CatalogEntry]


class CompanyCatalogResponse(CamelSchema):
    """Catalog of one company grouped by product."""

    company_id: str
    products: list[ProductVariants]
    total: int
