"""
Pydantic models for validation and serialization.
"""

from models.base import BaseSchema, CamelSchema
from models.template import (
    CarrierResponse,
    TemplateMapping,
    TemplateListResponse,
)
from models.company import (
    CompanyResponse,
    CompanyNameUpdate,
)
from models.catalog import (
    CatalogEntry,
    ProductVariants,
    CompanyCatalogResponse,
)
from models.processing import (
    ProductStatus,
    VariantOption,
    ExtractedProduct,
    CompanyResolution,
    VerifiedData,
    ProcessRequest,
    ProcessResponse,
    ExtractPreviewResponse,
    UploadResponse,
)
from models.reconciliation import (
    NewCompanyProduct,
    UpdateCompanyRequest,
    UpdateCompanyResponse,
    SelectedProduct,
    SelectHsCodesRequest,
    MessageResponse,
)

__all__ = [
    # Base
    "BaseSchema",
    "CamelSchema",

    # Templates
    "CarrierResponse",
    "TemplateMapping",
    "TemplateListResponse",

    # Companies
    "CompanyResponse",
    "CompanyNameUpdate",

    # Catalog
    "CatalogEntry",
    "ProductVariants",
    "CompanyCatalogResponse",

    # Processing
    "ProductStatus",
    "VariantOption",
    "ExtractedProduct",
    "CompanyResolution",
    "VerifiedData",
    "ProcessRequest",
    "ProcessResponse",
    "ExtractPreviewResponse",
    "UploadResponse",

    # Reconciliation
    "NewCompanyProduct",
    "UpdateCompanyRequest",
    "UpdateCompanyResponse",
    "SelectedProduct",
    "SelectHsCodesRequest",
    "MessageResponse",
]
