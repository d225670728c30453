"""
Shared test fixtures.

The mock Supabase client keeps table rows and stored files in memory,
so services can be exercised end to end without a database.
"""

import os
import sys
import importlib
from pathlib import Path

# Add backend directory to Python path
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

# Settings are loaded on import; give them something to validate
os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_KEY", "test-anon-key")

import pytest
from unittest.mock import patch
from typing import Any, Callable, Generator, Optional


# ===================
# MOCK SUPABASE CLIENT
# ===================

class MockSupabaseResponse:
    """Mock Supabase query response."""

    def __init__(self, data: list = None, count: int = None):
        self.data = data or []
        self.count = count if count is not None else len(self.data)


class MockSupabaseQuery:
    """
    Mock Supabase query builder with chainable methods.

    Filters and ordering are applied to the table's rows on execute().
    """

    def __init__(self, client: "MockSupabaseClient", table_name: str, operation: str, payload: Any = None, **options):
        self._client = client
        self._table_name = table_name
        self._operation = operation
        self._payload = payload
        self._options = options
        self._filters: list[tuple[str, str, Any]] = []
        self._order: list[tuple[str, bool]] = []
        self._limit: Optional[int] = None

    # Filters

    def eq(self, column, value):
        self._filters.append(("eq", column, value))
        return self

    def ilike(self, column, pattern):
        self._filters.append(("ilike", column, pattern))
        return self

    def order(self, column, desc: bool = False, **kwargs):
        self._order.append((column, desc))
        return self

    def limit(self, count):
        self._limit = count
        return self

    def _matches(self, row: dict) -> bool:
        for kind, column, value in self._filters:
            if kind == "eq" and row.get(column) != value:
                return False
            if kind == "ilike":
                needle = value.strip("%").lower()
                if needle not in str(row.get(column) or "").lower():
                    return False
        return True

    # Execution

    def execute(self) -> MockSupabaseResponse:
        self._client._check_failure(self._table_name, self._operation, self._filter_values())
        rows = self._client._rows(self._table_name)

        if self._operation == "select":
            return self._execute_select(rows)
        if self._operation == "insert":
            return self._execute_insert(rows)
        if self._operation == "upsert":
            return self._execute_upsert(rows)
        if self._operation == "update":
            return self._execute_update(rows)
        raise AssertionError(f"Unsupported operation {self._operation}")

    def _filter_values(self) -> dict:
        values = {column: value for kind, column, value in self._filters if kind == "eq"}
        if isinstance(self._payload, dict):
            values.update(self._payload)
        return values

    def _execute_select(self, rows: list[dict]) -> MockSupabaseResponse:
        selected = [dict(row) for row in rows if self._matches(row)]
        for column, desc in reversed(self._order):
            selected.sort(key=lambda r: (r.get(column) is None, r.get(column)), reverse=desc)
        total = len(selected)
        if self._limit is not None:
            selected = selected[:self._limit]
        return MockSupabaseResponse(data=selected, count=total)

    def _execute_insert(self, rows: list[dict]) -> MockSupabaseResponse:
        items = self._payload if isinstance(self._payload, list) else [self._payload]
        inserted = [dict(item) for item in items]
        rows.extend(dict(item) for item in inserted)
        return MockSupabaseResponse(data=inserted)

    def _execute_upsert(self, rows: list[dict]) -> MockSupabaseResponse:
        keys = [k.strip() for k in self._options.get("on_conflict", "id").split(",")]
        items = self._payload if isinstance(self._payload, list) else [self._payload]
        saved = []
        for item in items:
            existing = next(
                (row for row in rows if all(row.get(k) == item.get(k) for k in keys)),
                None
            )
            if existing is None:
                rows.append(dict(item))
            else:
                existing.update(item)
            saved.append(dict(item))
        return MockSupabaseResponse(data=saved)

    def _execute_update(self, rows: list[dict]) -> MockSupabaseResponse:
        updated = []
        for row in rows:
            if self._matches(row):
                row.update(self._payload)
                updated.append(dict(row))
        return MockSupabaseResponse(data=updated)


class MockSupabaseTable:
    """Mock Supabase table; each call starts a new query."""

    def __init__(self, client: "MockSupabaseClient", name: str):
        self._client = client
        self._name = name

    def select(self, *args, **kwargs):
        return MockSupabaseQuery(self._client, self._name, "select")

    def insert(self, data):
        return MockSupabaseQuery(self._client, self._name, "insert", data)

    def upsert(self, data, on_conflict: str = "id", **kwargs):
        return MockSupabaseQuery(self._client, self._name, "upsert", data, on_conflict=on_conflict)

    def update(self, data):
        return MockSupabaseQuery(self._client, self._name, "update", data)


class MockStorageBucket:
    """Mock storage bucket backed by the client's file dict."""

    def __init__(self, storage: "MockStorage", name: str):
        self._storage = storage
        self._name = name

    def upload(self, path: str, file: bytes, file_options: Optional[dict] = None):
        if self._storage.broken:
            raise Exception("storage unavailable")
        upsert = (file_options or {}).get("upsert") == "true"
        if (self._name, path) in self._storage.files and not upsert:
            raise Exception("The resource already exists")
        self._storage.files[(self._name, path)] = bytes(file)
        self._storage.content_types[(self._name, path)] = (file_options or {}).get("content-type")
        return {"path": path}

    def download(self, path: str) -> bytes:
        if self._storage.broken:
            raise Exception("storage unavailable")
        if (self._name, path) not in self._storage.files:
            raise Exception("Object not found")
        return self._storage.files[(self._name, path)]


class MockStorage:
    """Mock Supabase storage: files keyed by (bucket, path)."""

    def __init__(self):
        self.files: dict[tuple[str, str], bytes] = {}
        self.content_types: dict[tuple[str, str], Optional[str]] = {}
        self.broken = False

    def from_(self, bucket: str) -> MockStorageBucket:
        return MockStorageBucket(self, bucket)


class MockSupabaseClient:
    """
    Mock Supabase client.

    Rows written through the client are visible to later reads, so
    tests can assert on the final table state.
    """

    def __init__(self):
        self._tables: dict[str, list[dict]] = {}
        self._failures: list[dict] = []
        self.storage = MockStorage()
        self.executed: list[tuple[str, str]] = []

    def set_table_data(self, table_name: str, data: list):
        """Configure rows for a table (copied)."""
        self._tables[table_name] = [dict(row) for row in data]

    def get_table_data(self, table_name: str) -> list[dict]:
        """Current rows of a table."""
        return self._tables.get(table_name, [])

    def table(self, name: str) -> MockSupabaseTable:
        """Get mock table."""
        return MockSupabaseTable(self, name)

    def fail_on(
        self,
        table_name: str,
        operation: str,
        where: Optional[dict] = None,
        message: str = "connection reset by peer"
    ):
        """
        Make matching queries raise.

        `where` is compared against the query's eq filters and payload,
        e.g. fail_on("hs_catalog", "update", {"variant_id": "blue"}).
        """
        self._failures.append({
            "table": table_name,
            "operation": operation,
            "where": where or {},
            "message": message,
        })

    def clear_failures(self):
        self._failures.clear()

    def _rows(self, table_name: str) -> list[dict]:
        return self._tables.setdefault(table_name, [])

    def _check_failure(self, table_name: str, operation: str, values: dict):
        self.executed.append((table_name, operation))
        for failure in self._failures:
            if failure["table"] != table_name or failure["operation"] != operation:
                continue
            if all(values.get(k) == v for k, v in failure["where"].items()):
                raise Exception(failure["message"])


# ===================
# FIXTURES
# ===================

SERVICE_SINGLETONS = {
    "services.template_service": "_template_service",
    "services.company_service": "_company_service",
    "services.catalog_service": "_catalog_service",
    "services.resolution_service": "_resolution_service",
    "services.hs_code_export_service": "_export_service",
    "services.reconciliation_service": "_reconciliation_service",
    "services.storage_service": "_storage_service",
    "services.processing_service": "_processing_service",
}

DB_CLIENT_MODULES = [
    "config.database",
    "services.template_service",
    "services.company_service",
    "services.catalog_service",
    "services.storage_service",
]


def reset_singletons():
    for module_name, attribute in SERVICE_SINGLETONS.items():
        setattr(importlib.import_module(module_name), attribute, None)


@pytest.fixture
def mock_supabase() -> MockSupabaseClient:
    """
    Create a mock Supabase client.

    Usage:
        def test_something(mock_supabase):
            mock_supabase.set_table_data("companies", [
                {"id": "1", "name_en": "ACME", ...}
            ])
    """
    return MockSupabaseClient()


@pytest.fixture
def mock_db(mock_supabase) -> Generator:
    """
    Patch the database client with mock.

    Service singletons are reset so they pick up the mock.
    """
    reset_singletons()
    patches = [
        patch(f"{module}.get_supabase_client", return_value=mock_supabase)
        for module in DB_CLIENT_MODULES
    ]
    for p in patches:
        p.start()
    try:
        yield mock_supabase
    finally:
        for p in reversed(patches):
            p.stop()
        reset_singletons()


@pytest.fixture
def seeded_db(mock_db, mock_supabase) -> MockSupabaseClient:
    """
    Mock database with one carrier, one template and one catalogued company.

    Template: company name in A1, products in column B from row 3,
    HS codes written to column C.

    Catalog for ACME TRADING:
        Widget   -> single variant 8471.30
        Gadget   -> two variants (plastic 3926.90, steel 7326.90)
    """
    from tests.factories import (
        CarrierFactory,
        TemplateFactory,
        CompanyFactory,
        CatalogEntryFactory,
    )

    mock_supabase.set_table_data("carriers", [
        CarrierFactory.create(carrier_id="carrier-1", carrier_name="Blue Freight")
    ])
    mock_supabase.set_table_data("templates", [
        TemplateFactory.create(carrier_id="carrier-1", template_id="tpl-1")
    ])
    mock_supabase.set_table_data("companies", [
        CompanyFactory.create(id="company-1", name_en="ACME TRADING", name_kr="에이씨엠이")
    ])
    mock_supabase.set_table_data("hs_catalog", [
        CatalogEntryFactory.create(
            company_id="company-1",
            product_name="Widget",
            hs_code="8471.30",
            is_default_variant=True
        ),
        CatalogEntryFactory.create(
            company_id="company-1",
            product_name="Gadget",
            hs_code="3926.90",
            variant_attributes={"material": "plastic"}
        ),
        CatalogEntryFactory.create(
            company_id="company-1",
            product_name="Gadget",
            hs_code="7326.90",
            variant_attributes={"material": "steel"}
        ),
    ])
    return mock_supabase


# ===================
# API TEST CLIENT
# ===================

@pytest.fixture
def test_client_with_mock_db(mock_db):
    """
    Create FastAPI test client with mocked database.

    Usage:
        def test_endpoint(test_client_with_mock_db, mock_supabase):
            mock_supabase.set_table_data("carriers", [...])
            response = test_client_with_mock_db.get("/api/carriers")
    """
    from fastapi.testclient import TestClient
    from main import app

    yield TestClient(app)
