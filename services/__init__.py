"""
Business logic services.

Each service handles one domain area.
"""

from services.template_service import TemplateService, get_template_service
from services.company_service import CompanyService, get_company_service
from services.catalog_service import CatalogService, get_catalog_service, derive_variant_id
from services.resolution_service import ResolutionService, get_resolution_service
from services.hs_code_export_service import HSCodeExportService, get_hs_code_export_service
from services.reconciliation_service import ReconciliationService, get_reconciliation_service
from services.storage_service import StorageService, get_storage_service
from services.processing_service import ProcessingService, get_processing_service

__all__ = [
    "TemplateService",
    "get_template_service",
    "CompanyService",
    "get_company_service",
    "CatalogService",
    "get_catalog_service",
    "derive_variant_id",
    "ResolutionService",
    "get_resolution_service",
    "HSCodeExportService",
    "get_hs_code_export_service",
    "ReconciliationService",
    "get_reconciliation_service",
    "StorageService",
    "get_storage_service",
    "ProcessingService",
    "get_processing_service",
]
