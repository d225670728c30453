"""
Custom exception classes for the application.

Every error raised by the resolver is an AppError so routes can turn it
into the standard error response.
"""

from typing import Optional, Any
from datetime import datetime, timezone


class AppError(Exception):
    """
    Base exception for all application errors.

    All custom exceptions inherit from this.

    Attributes:
        code: Error code (e.g., "TEMPLATE_NOT_FOUND")
        message: Human-readable message
        status_code: HTTP status code
        details: Additional context
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: Optional[dict[str, Any]] = None
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc).isoformat()
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert to API response format."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
                "timestamp": self.timestamp
            }
        }


class NotFoundError(AppError):
    """Resource not found (404)."""

    def __init__(
        self,
        resource: str,
        identifier: str,
        code: Optional[str] = None,
        message: Optional[str] = None
    ):
        super().__init__(
            code=code or f"{resource.upper()}_NOT_FOUND",
            message=message or f"{resource} not found",
            status_code=404,
            details={"id": identifier}
        )


class ValidationError(AppError):
    """Validation failed (422)."""

    def __init__(
        self,
        message: str,
        code: str = "VALIDATION_ERROR",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=422,
            details=details
        )


class ExternalServiceError(AppError):
    """External service failure (503)."""

    def __init__(
        self,
        service: str,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code=f"{service.upper()}_ERROR",
            message=message,
            status_code=503,
            details={"service": service, **(details or {})}
        )


class DatabaseError(AppError):
    """Database operation failed (500). Never retried by the caller."""

    def __init__(
        self,
        operation: str,
        message: str,
        details: Optional[dict] = None
    ):
        super().__init__(
            code="DATABASE_ERROR",
            message=f"Database {operation} failed: {message}",
            status_code=500,
            details={"operation": operation, **(details or {})}
        )


# ===================
# TEMPLATE ERRORS
# ===================

class TemplateNotFoundError(NotFoundError):
    """No template mapping exists for the carrier/template pair."""

    def __init__(self, carrier_id: str, template_id: str):
        super().__init__(
            resource="Template",
            identifier=f"{carrier_id}/{template_id}",
            code="TEMPLATE_NOT_FOUND",
            message=f"Template not found for carrier {carrier_id} and template {template_id}"
        )
        self.details.update({"carrier_id": carrier_id, "template_id": template_id})


# ===================
# SPREADSHEET ERRORS
# ===================

class MalformedSpreadsheetError(ValidationError):
    """Spreadsheet cannot be processed as-is."""

    def __init__(
        self,
        message: str,
        code: str = "MALFORMED_SPREADSHEET",
        details: Optional[dict] = None
    ):
        super().__init__(message=message, code=code, details=details)


class SpreadsheetReadError(MalformedSpreadsheetError):
    """File could not be opened as a workbook."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(
            message=message,
            code="SPREADSHEET_READ_ERROR",
            details=details
        )


class MissingCompanyNameError(MalformedSpreadsheetError):
    """The template's company name cell is empty."""

    def __init__(self, cell: str):
        super().__init__(
            message="Company name not found in the file",
            code="MISSING_COMPANY_NAME",
            details={"cell": cell}
        )


class ExtractionMismatchError(MalformedSpreadsheetError):
    """File contents no longer match what the user verified in the preview."""

    def __init__(self, field: str, expected: str, actual: Optional[str]):
        super().__init__(
            message=f"Extracted {field} does not match the verified preview",
            code="EXTRACTION_MISMATCH",
            details={"field": field, "expected": expected, "actual": actual}
        )


# ===================
# STORAGE ERRORS
# ===================

class StoredFileNotFoundError(NotFoundError):
    """Uploaded or result file missing from its bucket."""

    def __init__(self, bucket: str, key: str):
        super().__init__(
            resource="File",
            identifier=key,
            code="FILE_NOT_FOUND"
        )
        self.details["bucket"] = bucket


class StorageError(ExternalServiceError):
    """Blob storage read/write failed."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(
            service="storage",
            message=message,
            details=details
        )


# ===================
# CATALOG ERRORS
# ===================

class CompanyNotFoundError(NotFoundError):
    """Company not found."""

    def __init__(self, company_id: str):
        super().__init__(
            resource="Company",
            identifier=company_id,
            code="COMPANY_NOT_FOUND"
        )


class CatalogLookupError(DatabaseError):
    """Reading variants for one product failed."""

    def __init__(self, company_id: str, product_name: str, message: str):
        super().__init__(
            operation="select",
            message=message,
            details={"company_id": company_id, "product_name": product_name}
        )


class PartialBatchError(AppError):
    """
    Some, but not all, writes of a default-flag batch were applied.

    Nothing is rolled back. Re-running the same selection repairs the
    default flags.
    """

    def __init__(
        self,
        company_id: str,
        product_name: str,
        applied: list[str],
        failed: str,
        error: str
    ):
        super().__init__(
            code="PARTIAL_BATCH_FAILURE",
            message=f"Variant update for {product_name} was only partially applied",
            status_code=500,
            details={
                "company_id": company_id,
                "product_name": product_name,
                "applied_variant_ids": applied,
                "failed_variant_id": failed,
                "error": error,
            }
        )
