"""
Resolution service: match extracted products against the catalog.

Each product ends up in exactly one of three buckets:

    AUTO_RESOLVED          one catalogued variant; hs_code is filled in
    PENDING_MULTI_VARIANT  several variants; user must pick one
    PENDING_NEW            no tenant, no variants, or the lookup failed

The export service writes only the first bucket; the review UI acts
only on the other two.
"""

from concurrent.futures import ThreadPoolExecutor
from typing import Optional
import structlog

from config import settings
from models.company import CompanyResponse
from models.catalog import CatalogEntry
from models.processing import ExtractedProduct, CompanyResolution, VariantOption
from services.catalog_service import CatalogService, get_catalog_service
from exceptions import CatalogLookupError

logger = structlog.get_logger(__name__)


def classify_product(product: ExtractedProduct, variants: list[CatalogEntry]) -> ExtractedProduct:
    """
    Attach lookup results to a product.

    Returns a new ExtractedProduct; the input is not modified.
    """
    if not variants:
        return product.model_copy()

    if len(variants) == 1:
        return product.model_copy(update={"hs_code": variants[0].hs_code})

    return product.model_copy(update={
        "has_multiple_hs_codes": True,
        "variants": [
            VariantOption(hs_code=v.hs_code, attributes=v.variant_attributes)
            for v in variants
        ],
    })


class ResolutionService:
    """
    Resolution business logic.

    Catalog lookups for one spreadsheet run on a thread pool; results
    keep the spreadsheet's row order.
    """

    def __init__(
        self,
        catalog_service: Optional[CatalogService] = None,
        max_workers: Optional[int] = None
    ):
        self.catalog = catalog_service or get_catalog_service()
        self.max_workers = max_workers or settings.catalog_lookup_workers

    def resolve(
        self,
        company: Optional[CompanyResponse],
        company_name_en: str,
        products: list[ExtractedProduct]
    ) -> CompanyResolution:
        """
        Classify the company and each of its products.

        Args:
            company: Catalogued company, or None if the name is unknown
            company_name_en: Name read from the spreadsheet
            products: Extracted product rows

        Returns:
            CompanyResolution with products in input order
        """
        if company is None:
            # A new company owns no catalog rows, so nothing to look up.
            logger.info("company_is_new", name_en=company_name_en, products=len(products))
            return CompanyResolution(
                company_name_en=company_name_en,
                company_name_kr="",
                company_id=None,
                is_new=True,
                products=[p.model_copy() for p in products],
            )

        resolved = self._lookup_all(company.id, products)

        resolution = CompanyResolution(
            company_name_en=company.name_en,
            company_name_kr=company.name_kr,
            company_id=company.id,
            is_new=False,
            products=resolved,
        )

        logger.info(
            "company_resolved",
            company_id=company.id,
            products=len(resolved),
            pending=len(resolution.pending_products)
        )

        return resolution

    def _lookup_all(self, company_id: str, products: list[ExtractedProduct]) -> list[ExtractedProduct]:
        if not products:
            return []

        def lookup(product: ExtractedProduct) -> ExtractedProduct:
            return self._lookup_one(company_id, product)

        if self.max_workers == 1 or len(products) == 1:
            return [lookup(p) for p in products]

        workers = min(self.max_workers, len(products))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            # map() yields results in submission order
            return list(executor.map(lookup, products))

    def _lookup_one(self, company_id: str, product: ExtractedProduct) -> ExtractedProduct:
        try:
            variants = self.catalog.find_variants(company_id, product.product_name)
        except CatalogLookupError as e:
            logger.warning(
                "product_lookup_failed",
                company_id=company_id,
                product_name=product.product_name,
                row_index=product.row_index,
                error=e.message
            )
            return product.model_copy(update={"lookup_error": e.message})

        return classify_product(product, variants)


# Singleton instance for convenience
_resolution_service: Optional[ResolutionService] = None


def get_resolution_service() -> ResolutionService:
    """Get or create ResolutionService instance."""
    global _resolution_service
    if _resolution_service is None:
        _resolution_service = ResolutionService()
    return _resolution_service
