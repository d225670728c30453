"""
Catalog service: HS code variants per company product.

Store contract:
    Each row is keyed by (company_id, product_name, variant_id) and every
    write touches exactly one key. There are no multi-row transactions,
    so callers that flip default flags on several siblings must order
    their writes themselves (see ReconciliationService.select_variant).
"""

from datetime import datetime, timezone
from typing import Optional
import structlog

from config import get_supabase_client
from models.catalog import CatalogEntry, ProductVariants, CompanyCatalogResponse
from exceptions import CatalogLookupError, DatabaseError

logger = structlog.get_logger(__name__)

DEFAULT_VARIANT_ID = "default"
SELECTED_VARIANT_PREFIX = "selected"
VARIANT_ID_SEPARATOR = "-"


def derive_variant_id(attributes: Optional[dict[str, str]]) -> str:
    """
    Build the variant key from its attributes.

    Attributes are sorted by name so the key does not depend on dict
    order; values are joined with '-'.

    {"material": "plastic"} -> "plastic"
    {"size": "L", "color": "red"} -> "red-L"
    None or {} -> "default"
    """
    if not attributes:
        return DEFAULT_VARIANT_ID

    return VARIANT_ID_SEPARATOR.join(
        str(attributes[name]) for name in sorted(attributes)
    )


def selected_variant_id(hs_code: str) -> str:
    """Key for an attribute-less variant added by picking a new HS code."""
    return f"{SELECTED_VARIANT_PREFIX}{VARIANT_ID_SEPARATOR}{hs_code}"


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


class CatalogService:
    """
    Catalog business logic.

    Read side feeds the resolution service; write side is used by
    reconciliation only.
    """

    def __init__(self):
        self.db = get_supabase_client()
        self.table = "hs_catalog"

    # ===================
    # READ OPERATIONS
    # ===================

    def find_variants(self, company_id: str, product_name: str) -> list[CatalogEntry]:
        """
        Get all variants of a company's product.

        Args:
            company_id: Company UUID
            product_name: Exact product name

        Returns:
            Variants in stable store order (empty if the product is unknown)

        Raises:
            CatalogLookupError: If the read fails
        """
        try:
            result = (
                self.db.table(self.table)
                .select("*")
                .eq("company_id", company_id)
                .eq("product_name", product_name)
                .order("variant_id")
                .execute()
            )
        except Exception as e:
            logger.warning(
                "find_variants_failed",
                company_id=company_id,
                product_name=product_name,
                error=str(e)
            )
            raise CatalogLookupError(company_id, product_name, str(e))

        return [CatalogEntry.model_validate(row) for row in result.data]

    def list_by_company(
        self,
        company_id: str,
        search: Optional[str] = None
    ) -> CompanyCatalogResponse:
        """
        Get a company's catalog grouped by product.

        Args:
            company_id: Company UUID
            search: Case-insensitive product name fragment

        Returns:
            CompanyCatalogResponse ordered by product name
        """
        logger.info("listing_catalog", company_id=company_id, search=search)

        try:
            query = (
                self.db.table(self.table)
                .select("*")
                .eq("company_id", company_id)
            )
            if search:
                query = query.ilike("product_name", f"%{search}%")
            result = query.order("product_name").order("variant_id").execute()

        except Exception as e:
            logger.error("list_catalog_failed", company_id=company_id, error=str(e))
            raise DatabaseError("select", str(e))

        grouped: dict[str, list[CatalogEntry]] = {}
        for row in result.data:
            entry = CatalogEntry.model_validate(row)
            grouped.setdefault(entry.product_name, []).append(entry)

        products = [
            ProductVariants(
                product_name=name,
                default_hs_code=next(
                    (v.hs_code for v in variants if v.is_default_variant), None
                ),
                variants=variants,
            )
            for name, variants in grouped.items()
        ]

        return CompanyCatalogResponse(
            company_id=company_id,
            products=products,
            total=len(products)
        )

    # ===================
    # WRITE OPERATIONS
    # ===================

    def upsert_entry(
        self,
        company_id: str,
        product_name: str,
        hs_code: str,
        variant_id: str,
        is_default_variant: bool,
        variant_attributes: Optional[dict[str, str]] = None,
        timestamp: Optional[str] = None
    ) -> CatalogEntry:
        """
        Create or overwrite one variant row.

        Raises:
            DatabaseError: If the write fails
        """
        row = {
            "company_id": company_id,
            "product_name": product_name,
            "variant_id": variant_id,
            "hs_code": hs_code,
            "variant_attributes": variant_attributes,
            "is_default_variant": is_default_variant,
            "last_updated": timestamp or utc_now(),
        }

        try:
            result = (
                self.db.table(self.table)
                .upsert(row, on_conflict="company_id,product_name,variant_id")
                .execute()
            )
        except Exception as e:
            logger.error(
                "upsert_catalog_entry_failed",
                company_id=company_id,
                product_name=product_name,
                variant_id=variant_id,
                error=str(e)
            )
            raise DatabaseError("upsert", str(e))

        logger.debug(
            "catalog_entry_saved",
            company_id=company_id,
            product_name=product_name,
            variant_id=variant_id,
            is_default_variant=is_default_variant
        )

        return CatalogEntry.model_validate(result.data[0] if result.data else row)

    def set_default_flag(
        self,
        company_id: str,
        product_name: str,
        variant_id: str,
        is_default_variant: bool,
        timestamp: Optional[str] = None
    ) -> None:
        """
        Set one variant's default flag and touch its timestamp.

        Raises:
            DatabaseError: If the write fails
        """
        try:
            (
                self.db.table(self.table)
                .update({
                    "is_default_variant": is_default_variant,
                    "last_updated": timestamp or utc_now(),
                })
                .eq("company_id", company_id)
                .eq("product_name", product_name)
                .eq("variant_id", variant_id)
                .execute()
            )
        except Exception as e:
            logger.error(
                "set_default_flag_failed",
                company_id=company_id,
                product_name=product_name,
                variant_id=variant_id,
                error=str(e)
            )
            raise DatabaseError("update", str(e))


# Singleton instance for convenience
_catalog_service: Optional[CatalogService] = None


def get_catalog_service() -> CatalogService:
    """Get or create CatalogService instance."""
    global _catalog_service
    if _catalog_service is None:
        _catalog_service = CatalogService()
    return _catalog_service
