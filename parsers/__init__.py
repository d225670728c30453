"""
Spreadsheet parsers module.
"""

from parsers.shipment_sheet_parser import (
    column_to_index,
    cell_reference,
    load_worksheet,
    extract_company_name,
    extract_products,
    extract_preview,
)

__all__ = [
    "column_to_index",
    "cell_reference",
    "load_worksheet",
    "extract_company_name",
    "extract_products",
    "extract_preview",
]
