"""
Reconciliation service: persist human-confirmed HS codes.

Two entry points, both driven by the review screens:

    commit_new_company  - first sighting of a company: create it and its
                          confirmed products
    select_variant      - existing company: make the picked HS code the
                          product's default variant

Default-flag batches:
    The catalog has no multi-row transactions. select_variant writes one
    row at a time and always demotes siblings before promoting or
    creating the chosen variant. A failure part way through therefore
    leaves zero defaults, never two, and is reported as
    PartialBatchError. Calling select_variant again with the same input
    repairs the flags.
"""

from typing import Callable, Optional
import structlog

from models.catalog import CatalogEntry
from models.reconciliation import NewCompanyProduct, SelectedProduct
from services.catalog_service import (
    CatalogService,
    get_catalog_service,
    derive_variant_id,
    selected_variant_id,
    utc_now,
    DEFAULT_VARIANT_ID,
)
from services.company_service import CompanyService, get_company_service
from exceptions import DatabaseError, PartialBatchError

logger = structlog.get_logger(__name__)


class ReconciliationService:
    """
    Reconciliation business logic.

    Writes go straight to the catalog; nothing is retried, since a
    retried commit_new_company would create a second company.
    """

    def __init__(
        self,
        company_service: Optional[CompanyService] = None,
        catalog_service: Optional[CatalogService] = None
    ):
        self.companies = company_service or get_company_service()
        self.catalog = catalog_service or get_catalog_service()

    # ===================
    # NEW COMPANIES
    # ===================

    def commit_new_company(
        self,
        name_en: str,
        name_kr: str,
        products: list[NewCompanyProduct]
    ) -> str:
        """
        Create a company and one catalog entry per confirmed product.

        Products without variant attributes become the default variant.
        There is no duplicate check on name_en: calling this twice for
        the same name creates two companies. Callers check
        CompanyService.find_by_name_en first.

        Returns:
            New company ID

        Raises:
            DatabaseError: If any write fails (earlier writes are kept)
        """
        logger.info("committing_new_company", name_en=name_en, products=len(products))

        company = self.companies.create(name_en, name_kr)
        timestamp = utc_now()

        for product in products:
            attributes = product.variant_attributes or None
            self.catalog.upsert_entry(
                company_id=company.id,
                product_name=product.product_name,
                hs_code=product.hs_code,
                variant_id=derive_variant_id(attributes),
                is_default_variant=attributes is None,
                variant_attributes=attributes,
                timestamp=timestamp,
            )

        logger.info("new_company_committed", company_id=company.id, products=len(products))
        return company.id

    # ===================
    # VARIANT SELECTION
    # ===================

    def select_hs_codes(self, company_id: str, products: list[SelectedProduct]) -> int:
        """
        Apply a picked HS code for each product of an existing company.

        Raises:
            CompanyNotFoundError: If the company doesn't exist
            PartialBatchError: If a product's flag batch stopped part way

        Returns:
            Number of products updated
        """
        self.companies.get_by_id(company_id)

        for product in products:
            self.select_variant(company_id, product.product_name, product.selected_hs_code)

        logger.info("hs_codes_selected", company_id=company_id, products=len(products))
        return len(products)

    def select_variant(self, company_id: str, product_name: str, selected_hs_code: str) -> None:
        """
        Make selected_hs_code the product's default variant.

        - No variants yet: create a 'default' entry with the code.
        - A variant already has the code: it becomes the only default.
        - Otherwise: add a new variant with the code as the only default.

        Re-running with the same input reaches the same flags; only
        last_updated changes.
        """
        variants = self.catalog.find_variants(company_id, product_name)
        timestamp = utc_now()

        if not variants:
            logger.info(
                "creating_first_variant",
                company_id=company_id,
                product_name=product_name,
                hs_code=selected_hs_code
            )
            self.catalog.upsert_entry(
                company_id=company_id,
                product_name=product_name,
                hs_code=selected_hs_code,
                variant_id=DEFAULT_VARIANT_ID,
                is_default_variant=True,
                timestamp=timestamp,
            )
            return

        match = next((v for v in variants if v.hs_code == selected_hs_code), None)
        writes = self._plan_writes(company_id, product_name, selected_hs_code, variants, match, timestamp)
        self._apply(company_id, product_name, writes)

        logger.info(
            "variant_selected",
            company_id=company_id,
            product_name=product_name,
            hs_code=selected_hs_code,
            created=match is None,
            siblings=len(variants) - (1 if match else 0)
        )

    def _plan_writes(
        self,
        company_id: str,
        product_name: str,
        hs_code: str,
        variants: list[CatalogEntry],
        match: Optional[CatalogEntry],
        timestamp: str
    ) -> list[tuple[str, Callable[[], object]]]:
        """Demotions first, then the promotion or creation."""
        writes: list[tuple[str, Callable[[], object]]] = []

        for variant in variants:
            if variant is match:
                continue
            writes.append((
                variant.variant_id,
                lambda v=variant: self.catalog.set_default_flag(
                    company_id, product_name, v.variant_id, False, timestamp
                ),
            ))

        if match is not None:
            writes.append((
                match.variant_id,
                lambda: self.catalog.set_default_flag(
                    company_id, product_name, match.variant_id, True, timestamp
                ),
            ))
        else:
            new_variant_id = selected_variant_id(hs_code)
            writes.append((
                new_variant_id,
                lambda: self.catalog.upsert_entry(
                    company_id=company_id,
                    product_name=product_name,
                    hs_code=hs_code,
                    variant_id=new_variant_id,
                    is_default_variant=True,
                    timestamp=timestamp,
                ),
            ))

        return writes

    def _apply(
        self,
        company_id: str,
        product_name: str,
        writes: list[tuple[str, Callable[[], object]]]
    ) -> None:
        applied: list[str] = []

        for variant_id, write in writes:
            try:
                write()
            except DatabaseError as e:
                if not applied:
                    raise
                logger.error(
                    "variant_batch_partially_applied",
                    company_id=company_id,
                    product_name=product_name,
                    applied=applied,
                    failed=variant_id
                )
                raise PartialBatchError(
                    company_id=company_id,
                    product_name=product_name,
                    applied=applied,
                    failed=variant_id,
                    error=e.message
                ) from e
            applied.append(variant_id)


# Singleton instance for convenience
_reconciliation_service: Optional[ReconciliationService] = None


def get_reconciliation_service() -> ReconciliationService:
    """Get or create ReconciliationService instance."""
    global _reconciliation_service
    if _reconciliation_service is None:
        _reconciliation_service = ReconciliationService()
    return _reconciliation_service
