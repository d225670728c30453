"""
Custom exceptions module.
"""

from exceptions.errors import (
    # Base exceptions
    AppError,
    NotFoundError,
    ValidationError,
    ExternalServiceError,
    DatabaseError,

    # Templates
    TemplateNotFoundError,

    # Spreadsheet
    MalformedSpreadsheetError,
    SpreadsheetReadError,
    MissingCompanyNameError,
    ExtractionMismatchError,

    # Storage
    StoredFileNotFoundError,
    StorageError,

    # Catalog
    CompanyNotFoundError,
    CatalogLookupError,
    PartialBatchError,
)

__all__ = [
    # Base
    "AppError",
    "NotFoundError",
    "ValidationError",
    "ExternalServiceError",
    "DatabaseError",

    # Templates
    "TemplateNotFoundError",

    # Spreadsheet
    "MalformedSpreadsheetError",
    "SpreadsheetReadError",
    "MissingCompanyNameError",
    "ExtractionMismatchError",

    # Storage
    "StoredFileNotFoundError",
    "StorageError",

    # Catalog
    "CompanyNotFoundError",
    "CatalogLookupError",
    "PartialBatchError",
]
