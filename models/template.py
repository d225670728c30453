"""
Carrier and template mapping schemas.
"""

from pydantic import Field, field_validator
from typing import Optional

from models.base import CamelSchema


class CarrierResponse(CamelSchema):
    """Carrier offering one or more spreadsheet templates."""

    carrier_id: str = Field(..., description="Carrier identifier")
    carrier_name: str = Field(..., description="Carrier display name")


class TemplateMapping(CamelSchema):
    """
    Where a carrier's spreadsheet keeps the cells we care about.

    Rows are 1-based and columns are spreadsheet letters, exactly as the
    template is configured. Translation to 0-based indexes happens in
    the sheet parser.
    """

    carrier_id: str = Field(..., description="Carrier identifier")
    template_id: str = Field(..., description="Template identifier")
    template_name: Optional[str] = Field(None, description="Template display name")
    company_name_row: int = Field(..., ge=1, description="Row holding the company name (1-based)")
    company_name_column: str = Field(..., description="Column holding the company name", examples=["A"])
    product_column: str = Field(..., description="Column holding product names", examples=["B"])
    hs_code_column: str = Field(..., description="Column the HS code is written to", examples=["C"])
    start_row: int = Field(..., ge=1, description="First data row (1-based)")

    @field_validator("company_name_column", "product_column", "hs_code_column")
    @classmethod
    def column_letters(cls, v: str) -> str:
        """Columns must be spreadsheet letters (A..XFD)."""
        v = v.upper()
        if not v.isalpha() or not v.isascii() or len(v) > 3:
            raise ValueError(f"Invalid column letter: {v!r}")
        return v


class TemplateListResponse(CamelSchema):
    """Templates offered by one carrier."""

    templates: list[TemplateMapping]
