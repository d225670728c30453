"""
Unit tests for ResolutionService.

Run: pytest tests/unit/test_resolution_service.py -v
"""

import pytest
from unittest.mock import MagicMock

from services.resolution_service import ResolutionService, classify_product
from services.catalog_service import CatalogService
from services.company_service import CompanyService
from models.catalog import CatalogEntry
from models.company import CompanyResponse
from models.processing import ExtractedProduct, ProductStatus
from tests.factories import CatalogEntryFactory


def product(name: str, row_index: int) -> ExtractedProduct:
    return ExtractedProduct(product_name=name, row_index=row_index)


class TestClassifyProduct:
    """Tests for classify_product()"""

    def test_no_variants_is_pending_new(self):
        result = classify_product(product("Widget", 2), [])

        assert result.status == ProductStatus.PENDING_NEW
        assert result.hs_code is None

    def test_single_variant_is_auto_resolved(self):
        entry = CatalogEntry.model_validate(CatalogEntryFactory.create(hs_code="8471.30"))

        result = classify_product(product("Widget", 2), [entry])

        assert result.status == ProductStatus.AUTO_RESOLVED
        assert result.hs_code == "8471.30"
        assert result.variants is None

    def test_multiple_variants_lists_all_options(self):
        """Every variant is offered, even if one is the default."""
        entries = [
            CatalogEntry.model_validate(CatalogEntryFactory.create(
                product_name="Gadget", hs_code="3926.90",
                variant_attributes={"material": "plastic"}, is_default_variant=True
            )),
            CatalogEntry.model_validate(CatalogEntryFactory.create(
                product_name="Gadget", hs_code="7326.90",
                variant_attributes={"material": "steel"}
            )),
        ]

        result = classify_product(product("Gadget", 3), entries)

        assert result.status == ProductStatus.PENDING_MULTI_VARIANT
        assert result.hs_code is None
        assert result.has_multiple_hs_codes is True
        assert [v.hs_code for v in result.variants] == ["3926.90", "7326.90"]
        assert result.variants[1].attributes == {"material": "steel"}

    def test_input_is_not_modified(self):
        original = product("Widget", 2)
        entry = CatalogEntry.model_validate(CatalogEntryFactory.create())

        classify_product(original, [entry])

        assert original.hs_code is None


class TestResolutionServiceResolve:
    """Tests for ResolutionService.resolve()"""

    def test_existing_company_classifies_each_product(self, seeded_db):
        """Widget resolves, Gadget needs a pick, Gizmo is new."""
        # Arrange
        company = CompanyService().get_by_id("company-1")
        service = ResolutionService(catalog_service=CatalogService())
        products = [product("Widget", 2), product("Gadget", 3), product("Gizmo", 4)]

        # Act
        result = service.resolve(company, "ACME TRADING", products)

        # Assert
        assert result.is_new is False
        assert result.company_id == "company-1"
        assert result.company_name_kr == "에이씨엠이"
        assert [p.status for p in result.products] == [
            ProductStatus.AUTO_RESOLVED,
            ProductStatus.PENDING_MULTI_VARIANT,
            ProductStatus.PENDING_NEW,
        ]
        assert [p.product_name for p in result.pending_products] == ["Gadget", "Gizmo"]

    def test_new_company_skips_lookups(self, seeded_db):
        """No catalog reads happen for an unknown company."""
        # Arrange
        service = ResolutionService(catalog_service=CatalogService())
        products = [product("Widget", 2), product("Gadget", 3)]

        # Act
        result = service.resolve(None, "NEW CO", products)

        # Assert
        assert result.is_new is True
        assert result.company_id is None
        assert result.company_name_en == "NEW CO"
        assert all(p.status == ProductStatus.PENDING_NEW for p in result.products)
        assert ("hs_catalog", "select") not in seeded_db.executed

    def test_concurrent_lookups_keep_row_order(self, seeded_db):
        """Results line up with the input rows regardless of completion order."""
        # Arrange
        company = CompanyService().get_by_id("company-1")
        service = ResolutionService(catalog_service=CatalogService(), max_workers=4)
        names = ["Widget", "Gadget", "Gizmo"] * 10
        products = [product(name, i + 2) for i, name in enumerate(names)]

        # Act
        result = service.resolve(company, "ACME TRADING", products)

        # Assert
        assert [p.row_index for p in result.products] == [p.row_index for p in products]
        assert [p.product_name for p in result.products] == names

    def test_failed_lookup_leaves_product_pending(self, seeded_db):
        """One failed read does not fail the request or other products."""
        # Arrange
        seeded_db.fail_on("hs_catalog", "select", {"product_name": "Gadget"})
        company = CompanyService().get_by_id("company-1")
        service = ResolutionService(catalog_service=CatalogService())

        # Act
        result = service.resolve(company, "ACME TRADING", [product("Widget", 2), product("Gadget", 3)])

        # Assert
        widget, gadget = result.products
        assert widget.hs_code == "8471.30"
        assert gadget.status == ProductStatus.PENDING_NEW
        assert gadget.lookup_error is not None

    def test_one_lookup_per_product(self):
        """Each product is looked up exactly once."""
        # Arrange
        catalog = MagicMock(spec=CatalogService)
        catalog.find_variants.return_value = []
        company = CompanyResponse(id="company-1", name_en="ACME TRADING")
        service = ResolutionService(catalog_service=catalog, max_workers=2)

        # Act
        service.resolve(company, "ACME TRADING", [product("Widget", 2), product("Gadget", 3)])

        # Assert
        assert catalog.find_variants.call_count == 2
        catalog.find_variants.assert_any_call("company-1", "Widget")
        catalog.find_variants.assert_any_call("company-1", "Gadget")

    def test_no_products(self, seeded_db):
        company = CompanyService().get_by_id("company-1")
        service = ResolutionService(catalog_service=CatalogService())

        result = service.resolve(company, "ACME TRADING", [])

        assert result.products == []
        assert result.is_new is False
