"""
Shipment spreadsheet parser.

Reads the company name and product rows out of a carrier spreadsheet,
using the carrier's template mapping to know which cells to look at.

Coordinates:
    Templates use 1-based rows and column letters (company name in A1,
    data from row 3, ...). Everything returned from here uses 0-based
    row and column indexes, so `row_index` on an ExtractedProduct is
    the sheet row minus one. The export service uses the same helpers
    to address the HS code cell of a product row.
"""

from io import BytesIO
from typing import Iterator, Optional, Union
import structlog

from openpyxl import load_workbook
from openpyxl.utils import column_index_from_string, get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from exceptions import SpreadsheetReadError, MissingCompanyNameError
from models.template import TemplateMapping
from models.processing import ExtractedProduct, ExtractPreviewResponse
from utils.text_utils import cell_text

logger = structlog.get_logger(__name__)


# ===================
# COORDINATES
# ===================

def column_to_index(column: str) -> int:
    """
    Translate a column letter to a 0-based index.

    'A' -> 0, 'C' -> 2, 'Z' -> 25, 'AA' -> 26
    """
    return column_index_from_string(column.upper()) - 1


def cell_reference(row_index: int, column_index: int) -> str:
    """0-based (row, column) -> 'C3' style reference."""
    return f"{get_column_letter(column_index + 1)}{row_index + 1}"


def read_cell(sheet: Worksheet, row_index: int, column_index: int) -> Optional[str]:
    """Read a cell as trimmed text (None if empty)."""
    return cell_text(sheet.cell(row=row_index + 1, column=column_index + 1).value)


# ===================
# LOADING
# ===================

def load_worksheet(file: Union[bytes, BytesIO]) -> Worksheet:
    """
    Open a spreadsheet and return its first worksheet.

    The owning workbook stays reachable as `sheet.parent`, which is what
    gets saved after HS codes are written.

    Raises:
        SpreadsheetReadError: If the file is not a readable workbook
    """
    if isinstance(file, bytes):
        file = BytesIO(file)

    try:
        workbook = load_workbook(file)
    except Exception as e:
        logger.error("spreadsheet_read_failed", error=str(e), error_type=type(e).__name__)
        raise SpreadsheetReadError(
            message="Failed to read spreadsheet",
            details={"original_error": str(e)}
        )

    sheet = workbook.worksheets[0]
    logger.debug("worksheet_loaded", sheet=sheet.title, max_row=sheet.max_row)
    return sheet


# ===================
# EXTRACTION
# ===================

def extract_company_name(sheet: Worksheet, mapping: TemplateMapping) -> str:
    """
    Read the company's English name from the template's company cell.

    Raises:
        MissingCompanyNameError: If the cell is empty or blank
    """
    row_index = mapping.company_name_row - 1
    column_index = column_to_index(mapping.company_name_column)

    name = read_cell(sheet, row_index, column_index)
    if name is None:
        cell = cell_reference(row_index, column_index)
        logger.warning("company_name_missing", cell=cell, template_id=mapping.template_id)
        raise MissingCompanyNameError(cell)

    return name


def iter_product_rows(sheet: Worksheet, mapping: TemplateMapping) -> Iterator[ExtractedProduct]:
    """
    Yield product rows from the start row through the last populated row.

    Rows whose product cell is empty or whitespace-only are skipped, but
    scanning continues: a blank row does not end the table.
    """
    product_column = column_to_index(mapping.product_column)
    last_row_index = sheet.max_row - 1

    for row_index in range(mapping.start_row - 1, last_row_index + 1):
        product_name = read_cell(sheet, row_index, product_column)
        if product_name is None:
            continue
        yield ExtractedProduct(product_name=product_name, row_index=row_index)


def extract_products(sheet: Worksheet, mapping: TemplateMapping) -> list[ExtractedProduct]:
    """
    Extract all product rows in ascending row order.

    Returns:
        ExtractedProduct list; `row_index` is the 0-based row read
    """
    products = list(iter_product_rows(sheet, mapping))

    logger.info(
        "products_extracted",
        template_id=mapping.template_id,
        start_row=mapping.start_row,
        last_row=sheet.max_row,
        count=len(products)
    )

    return products


def extract_preview(sheet: Worksheet, mapping: TemplateMapping) -> ExtractPreviewResponse:
    """
    Company name and first product name, for the user to sanity-check
    the template before processing.

    Raises:
        MissingCompanyNameError: If the company cell is empty
    """
    company_name = extract_company_name(sheet, mapping)
    first_product = next(iter_product_rows(sheet, mapping), None)

    return ExtractPreviewResponse(
        company_name=company_name,
        first_product_name=first_product.product_name if first_product else None
    )
