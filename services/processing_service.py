"""
Processing service: one uploaded spreadsheet in, one result file out.

Pipeline:
    template -> download -> company name -> products -> company lookup
    -> catalog resolution -> write HS codes -> store result

Everything that can reject the file (unknown template, unreadable
workbook, missing company name, preview mismatch) happens before the
result is stored, so a rejected file never leaves partial output.
"""

from typing import Optional
import structlog

from models.processing import (
    ExtractedProduct,
    ExtractPreviewResponse,
    ProcessRequest,
    ProcessResponse,
    UploadResponse,
    VerifiedData,
)
from parsers.shipment_sheet_parser import (
    load_worksheet,
    extract_company_name,
    extract_products,
    extract_preview,
)
from services.template_service import TemplateService, get_template_service
from services.company_service import CompanyService, get_company_service
from services.resolution_service import ResolutionService, get_resolution_service
from services.hs_code_export_service import (
    HSCodeExportService,
    get_hs_code_export_service,
    XLSX_CONTENT_TYPE,
)
from services.storage_service import StorageService, get_storage_service
from exceptions import ValidationError, ExtractionMismatchError

logger = structlog.get_logger(__name__)

SUPPORTED_EXTENSIONS = (".xlsx", ".xlsm")


class ProcessingService:
    """Runs the extraction/resolution/write pipeline for an upload."""

    def __init__(
        self,
        template_service: Optional[TemplateService] = None,
        company_service: Optional[CompanyService] = None,
        resolution_service: Optional[ResolutionService] = None,
        export_service: Optional[HSCodeExportService] = None,
        storage_service: Optional[StorageService] = None
    ):
        self.templates = template_service or get_template_service()
        self.companies = company_service or get_company_service()
        self.resolution = resolution_service or get_resolution_service()
        self.export = export_service or get_hs_code_export_service()
        self.storage = storage_service or get_storage_service()

    # ===================
    # UPLOAD
    # ===================

    def upload_file(self, filename: str, content: bytes, content_type: Optional[str] = None) -> UploadResponse:
        """
        Store a carrier spreadsheet for later processing.

        Raises:
            ValidationError: If the file is empty or not an .xlsx workbook
        """
        if not filename or not filename.lower().endswith(SUPPORTED_EXTENSIONS):
            raise ValidationError(
                message="Only .xlsx spreadsheets are supported",
                code="UNSUPPORTED_FILE_TYPE",
                details={"filename": filename, "supported": list(SUPPORTED_EXTENSIONS)}
            )
        if not content:
            raise ValidationError(
                message="Uploaded file is empty",
                code="EMPTY_FILE",
                details={"filename": filename}
            )

        file_key = self.storage.save_upload(filename, content, content_type or XLSX_CONTENT_TYPE)
        logger.info("file_uploaded", file_key=file_key, size_bytes=len(content))
        return UploadResponse(file_key=file_key)

    # ===================
    # PREVIEW
    # ===================

    def extract_preview(self, file_key: str, template_id: str, carrier_id: str) -> ExtractPreviewResponse:
        """
        Read the company name and first product name without writing anything.

        Raises:
            TemplateNotFoundError: Unknown carrier/template pair
            StoredFileNotFoundError: No upload under file_key
            SpreadsheetReadError: File is not a readable workbook
            MissingCompanyNameError: Company cell is empty
        """
        mapping = self.templates.resolve(carrier_id, template_id)
        sheet = load_worksheet(self.storage.load_upload(file_key))
        preview = extract_preview(sheet, mapping)

        logger.info(
            "preview_extracted",
            file_key=file_key,
            template_id=template_id,
            company_name=preview.company_name
        )

        return preview

    # ===================
    # PROCESSING
    # ===================

    def process_file(self, request: ProcessRequest) -> ProcessResponse:
        """
        Resolve HS codes for an uploaded spreadsheet and store the result.

        Raises:
            TemplateNotFoundError: Unknown carrier/template pair
            StoredFileNotFoundError: No upload under file_key
            SpreadsheetReadError: File is not a readable workbook
            MissingCompanyNameError: Company cell is empty
            ExtractionMismatchError: File differs from the verified preview
        """
        logger.info(
            "processing_file",
            file_key=request.file_key,
            carrier_id=request.carrier_id,
            template_id=request.template_id
        )

        mapping = self.templates.resolve(request.carrier_id, request.template_id)
        sheet = load_worksheet(self.storage.load_upload(request.file_key))

        company_name = extract_company_name(sheet, mapping)
        products = extract_products(sheet, mapping)

        if request.verified_data is not None:
            self._check_verified(request.verified_data, company_name, products)

        company = self.companies.find_by_name_en(company_name)
        resolution = self.resolution.resolve(company, company_name, products)

        # Lookups are all complete here; only now is the sheet written.
        self.export.write_hs_codes(sheet, mapping, [resolution])

        result_file_key = self.storage.save_result(
            request.file_key,
            self.export.workbook_to_bytes(sheet.parent),
            XLSX_CONTENT_TYPE
        )

        response = ProcessResponse(
            result_file_key=result_file_key,
            pending_companies=[resolution]
        )
        self.storage.save_result_metadata(
            result_file_key,
            response.model_dump_json(by_alias=True, exclude_none=True)
        )

        logger.info(
            "file_processed",
            file_key=request.file_key,
            result_file_key=result_file_key,
            is_new_company=resolution.is_new,
            products=len(resolution.products),
            pending=len(resolution.pending_products)
        )

        return response

    def get_process_result(self, result_file_key: str) -> ProcessResponse:
        """Reload the response stored when the file was processed."""
        return ProcessResponse.model_validate_json(
            self.storage.load_result_metadata(result_file_key)
        )

    def download_result(self, result_file_key: str) -> bytes:
        """Get the written-back spreadsheet."""
        return self.storage.load_result(result_file_key)

    def _check_verified(
        self,
        verified: VerifiedData,
        company_name: str,
        products: list[ExtractedProduct]
    ) -> None:
        if verified.company_name != company_name:
            raise ExtractionMismatchError("companyName", verified.company_name, company_name)

        if verified.first_product_name is None:
            return

        first_product_name = products[0].product_name if products else None
        if verified.first_product_name != first_product_name:
            raise ExtractionMismatchError(
                "firstProductName",
                verified.first_product_name,
                first_product_name
            )


_processing_service: Optional[ProcessingService] = None


def get_processing_service() -> ProcessingService:
    """Get or create ProcessingService instance."""
    global _processing_service
    if _processing_service is None:
        _processing_service = ProcessingService()
    return _processing_service
