"""
Company (tenant) schemas.
"""

from pydantic import Field, field_validator
from datetime import datetime
from typing import Optional

from models.base import CamelSchema


class CompanyResponse(CamelSchema):
    """Company as stored in the catalog."""

    id: str = Field(..., alias="companyId", description="Company UUID")
    name_en: str = Field(..., alias="companyNameEN", description="Canonical English name")
    name_kr: str = Field("", alias="companyNameKR", description="Korean display name")
    last_updated: Optional[datetime] = Field(None, description="Last mutation time")

    @field_validator("name_kr", mode="before")
    @classmethod
    def empty_name_kr(cls, v):
        """Rows stored without a Korean name read as empty."""
        if v is None:
            return ""
        return v


class CompanyNameUpdate(CamelSchema):
    """Correct a company's display name."""

    company_name_kr: str = Field(
        ...,
        min_length=1,
        max_length=255,
        alias="companyNameKR",
        description="Korean display name"
    )
