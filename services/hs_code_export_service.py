"""
HS code export service: write resolved codes back into the spreadsheet.

Only the HS code column of rows that have a resolved code is touched.
Pending rows keep whatever the carrier put there.
"""

from io import BytesIO
from typing import Optional
from zipfile import ZipFile, ZipInfo, ZIP_DEFLATED
import structlog

from openpyxl.workbook.workbook import Workbook
from openpyxl.worksheet.worksheet import Worksheet
from openpyxl.xml.constants import ARC_CORE
from openpyxl.xml.functions import tostring

from models.template import TemplateMapping
from models.processing import CompanyResolution
from parsers.shipment_sheet_parser import column_to_index, cell_reference

logger = structlog.get_logger(__name__)

XLSX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

# Excel "Text" number format; keeps codes like 0101.21 from being read as numbers
TEXT_FORMAT = "@"

# Timestamp given to every entry of a saved archive (the earliest zip allows)
ZIP_TIMESTAMP = (1980, 1, 1, 0, 0, 0)


class HSCodeExportService:
    """Service for writing HS codes into carrier spreadsheets."""

    def write_hs_codes(
        self,
        sheet: Worksheet,
        mapping: TemplateMapping,
        resolutions: list[CompanyResolution]
    ) -> int:
        """
        Write every resolved HS code into the sheet, in place.

        Writing the same resolutions again leaves the sheet unchanged.

        Args:
            sheet: Worksheet the products were extracted from
            mapping: Template used for extraction
            resolutions: Resolution results for the sheet's companies

        Returns:
            Number of cells written
        """
        hs_code_column = column_to_index(mapping.hs_code_column)
        written = 0

        for resolution in resolutions:
            for product in resolution.products:
                if not product.hs_code:
                    continue

                cell = sheet.cell(row=product.row_index + 1, column=hs_code_column + 1)
                cell.value = str(product.hs_code)
                cell.number_format = TEXT_FORMAT
                written += 1

                logger.debug(
                    "hs_code_written",
                    cell=cell_reference(product.row_index, hs_code_column),
                    product_name=product.product_name
                )

        logger.info(
            "hs_codes_written",
            template_id=mapping.template_id,
            written=written
        )

        return written

    def workbook_to_bytes(self, workbook: Workbook) -> bytes:
        """
        Serialize a workbook to .xlsx bytes.

        The bytes depend only on the workbook's contents. The document
        keeps the modified time it was loaded with and every archive entry
        carries ZIP_TIMESTAMP, so writing the same resolutions into the
        same input always gives the same file.
        """
        modified = workbook.properties.modified

        output = BytesIO()
        workbook.save(output)

        # save() stamps the current time; put the loaded value back
        workbook.properties.modified = modified
        core_xml = tostring(workbook.properties.to_tree())

        return self._repack(output.getvalue(), core_xml)

    def _repack(self, content: bytes, core_xml: bytes) -> bytes:
        """Rewrite a saved archive with fixed entry times, keeping entry order."""
        output = BytesIO()

        with ZipFile(BytesIO(content)) as source, \
                ZipFile(output, "w", ZIP_DEFLATED, allowZip64=True) as archive:
            for info in source.infolist():
                data = core_xml if info.filename == ARC_CORE else source.read(info.filename)

                entry = ZipInfo(info.filename, date_time=ZIP_TIMESTAMP)
                entry.compress_type = ZIP_DEFLATED
                entry.external_attr = info.external_attr
                archive.writestr(entry, data)

        return output.getvalue()


_export_service: Optional[HSCodeExportService] = None


def get_hs_code_export_service() -> HSCodeExportService:
    """Get or create HSCodeExportService instance."""
    global _export_service
    if _export_service is None:
        _export_service = HSCodeExportService()
    return _export_service
