"""
Schemas for spreadsheet processing.

ExtractedProduct and CompanyResolution live for one request only: the
parser creates products, the resolution service classifies them and
the export service writes the resolved codes.
"""

from pydantic import Field
from typing import Optional
from enum import Enum

from models.base import CamelSchema


class ProductStatus(str, Enum):
    """Where a product row stands after catalog lookup."""
    AUTO_RESOLVED = "AUTO_RESOLVED"
    PENDING_NEW = "PENDING_NEW"
    PENDING_MULTI_VARIANT = "PENDING_MULTI_VARIANT"


class VariantOption(CamelSchema):
    """One catalogued HS code the user can pick."""

    hs_code: str
    attributes: Optional[dict[str, str]] = None


class ExtractedProduct(CamelSchema):
    """A spreadsheet row with a non-empty product name."""

    product_name: str = Field(..., min_length=1)
    row_index: int = Field(..., ge=0, description="0-based sheet row")
    hs_code: Optional[str] = None
    has_multiple_hs_codes: Optional[bool] = Field(None, alias="hasMultipleHSCodes")
    variants: Optional[list[VariantOption]] = None
    lookup_error: Optional[str] = Field(
        None,
        description="Catalog read failure that left this row pending"
    )

    @property
    def status(self) -> ProductStatus:
        if self.hs_code:
            return ProductStatus.AUTO_RESOLVED
        if self.has_multiple_hs_codes:
            return ProductStatus.PENDING_MULTI_VARIANT
        return ProductStatus.PENDING_NEW


class CompanyResolution(CamelSchema):
    """Resolution outcome for the company found in a spreadsheet."""

    company_name_en: str = Field(..., alias="companyNameEN")
    company_name_kr: str = Field("", alias="companyNameKR")
    company_id: Optional[str] = None
    is_new: bool
    products: list[ExtractedProduct] = Field(default_factory=list)

    @property
    def pending_products(self) -> list[ExtractedProduct]:
        """Products still waiting for a human decision."""
        return [p for p in self.products if p.status != ProductStatus.AUTO_RESOLVED]


# ===================
# REQUESTS / RESPONSES
# ===================

class VerifiedData(CamelSchema):
    """What the user confirmed on the extraction preview."""

    company_name: str = Field(..., min_length=1)
    first_product_name: Optional[str] = None


class ProcessRequest(CamelSchema):
    """Process an uploaded spreadsheet."""

    file_key: str = Field(..., min_length=1, description="Key returned by the upload endpoint")
    template_id: str = Field(..., min_length=1)
    carrier_id: str = Field(..., min_length=1)
    verified_data: Optional[VerifiedData] = None


class ProcessResponse(CamelSchema):
    """Written-back file handle plus what still needs review."""

    result_file_key: str
    pending_companies: list[CompanyResolution]


class ExtractPreviewResponse(CamelSchema):
    """Read-only extraction shown before processing."""

    company_name: str
    first_product_name: Optional[str] = None


class UploadResponse(CamelSchema):
    """Stored upload handle."""

    file_key: str
