"""
Spreadsheet processing API routes.

Upload -> preview -> process -> (review) -> download.
"""

from urllib.parse import quote

from fastapi import APIRouter, Query, UploadFile, File
from fastapi.responses import JSONResponse, Response
import structlog

from models.processing import (
    ExtractPreviewResponse,
    ProcessRequest,
    ProcessResponse,
    UploadResponse,
)
from services.processing_service import get_processing_service
from services.hs_code_export_service import XLSX_CONTENT_TYPE
from exceptions import AppError

logger = structlog.get_logger(__name__)

router = APIRouter()


# ===================
# EXCEPTION HANDLER
# ===================

def handle_error(e: Exception) -> JSONResponse:
    """Convert exception to JSON response."""
    if isinstance(e, AppError):
        return JSONResponse(
            status_code=e.status_code,
            content=e.to_dict()
        )
    # Unexpected error
    logger.error("unexpected_error", error=str(e), type=type(e).__name__)
    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred"
            }
        }
    )


# ===================
# ROUTES
# ===================

@router.post("/uploads", response_model=UploadResponse, status_code=201)
async def upload_file(file: UploadFile = File(..., description="Carrier spreadsheet (.xlsx)")):
    """
    Store a carrier spreadsheet.

    Returns the file key used by preview and process.

    Raises:
        422: Empty file or unsupported type
    """
    try:
        content = await file.read()
        service = get_processing_service()
        return service.upload_file(file.filename or "", content, file.content_type)

    except Exception as e:
        return handle_error(e)


@router.get("/excel/extract-preview", response_model=ExtractPreviewResponse, response_model_exclude_none=True)
async def extract_preview(
    file_key: str = Query(..., alias="fileKey", description="Uploaded file key"),
    template_id: str = Query(..., alias="templateId", description="Template identifier"),
    carrier_id: str = Query(..., alias="carrierId", description="Carrier identifier")
):
    """
    Company name and first product name, read without writing anything.

    Raises:
        404: Template or file not found
        422: Unreadable file or empty company name cell
    """
    try:
        service = get_processing_service()
        return service.extract_preview(file_key, template_id, carrier_id)

    except Exception as e:
        return handle_error(e)


@router.post("/excel/process", response_model=ProcessResponse, response_model_exclude_none=True)
async def process_file(data: ProcessRequest):
    """
    Resolve HS codes for an uploaded spreadsheet.

    Rows with exactly one catalogued HS code are written into the result
    file; the rest are returned for review.

    Raises:
        404: Template or file not found
        422: Unreadable file, empty company name cell, or preview mismatch
    """
    try:
        service = get_processing_service()
        return service.process_file(data)

    except Exception as e:
        return handle_error(e)


@router.get("/excel/process-result", response_model=ProcessResponse, response_model_exclude_none=True)
async def get_process_result(key: str = Query(..., description="Result file key")):
    """
    Reload the response of an earlier process call.

    Raises:
        404: No result under this key
    """
    try:
        service = get_processing_service()
        return service.get_process_result(key)

    except Exception as e:
        return handle_error(e)


@router.get("/excel/download")
async def download_result(key: str = Query(..., description="Result file key")):
    """
    Download the written-back spreadsheet.

    Raises:
        404: No result under this key
    """
    try:
        service = get_processing_service()
        content = service.download_result(key)

        filename = key.rsplit("/", 1)[-1]
        return Response(
            content=content,
            media_type=XLSX_CONTENT_TYPE,
            headers={"Content-Disposition": f"attachment; filename*=UTF-8''{quote(filename)}"}
        )

    except Exception as e:
        return handle_error(e)
