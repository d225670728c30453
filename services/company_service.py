"""
Company service: tenants of the HS code catalog.
"""

import uuid
from datetime import datetime, timezone
from typing import Optional
import structlog

from config import get_supabase_client
from models.company import CompanyResponse
from exceptions import CompanyNotFoundError, DatabaseError

logger = structlog.get_logger(__name__)


class CompanyService:
    """
    Company business logic.

    Companies are looked up by their exact English name, which is what
    carrier spreadsheets carry.
    """

    def __init__(self):
        self.db = get_supabase_client()
        self.table = "companies"

    # ===================
    # READ OPERATIONS
    # ===================

    def find_by_name_en(self, name_en: str) -> Optional[CompanyResponse]:
        """
        Find a company by English name.

        Exact, case-sensitive match. No fuzzy matching.

        Args:
            name_en: Company name as written in the spreadsheet

        Returns:
            CompanyResponse or None if not found
        """
        logger.debug("finding_company", name_en=name_en)

        try:
            result = (
                self.db.table(self.table)
                .select("*")
                .eq("name_en", name_en)
                .limit(1)
                .execute()
            )
        except Exception as e:
            logger.error("find_company_failed", name_en=name_en, error=str(e))
            raise DatabaseError("select", str(e))

        if not result.data:
            return None

        return CompanyResponse.model_validate(result.data[0])

    def get_by_id(self, company_id: str) -> CompanyResponse:
        """
        Get a company by ID.

        Raises:
            CompanyNotFoundError: If company doesn't exist
        """
        try:
            result = (
                self.db.table(self.table)
                .select("*")
                .eq("id", company_id)
                .limit(1)
                .execute()
            )
        except Exception as e:
            logger.error("get_company_failed", company_id=company_id, error=str(e))
            raise DatabaseError("select", str(e))

        if not result.data:
            raise CompanyNotFoundError(company_id)

        return CompanyResponse.model_validate(result.data[0])

    # ===================
    # WRITE OPERATIONS
    # ===================

    def create(self, name_en: str, name_kr: str) -> CompanyResponse:
        """
        Create a company with a fresh ID.

        Does not check for an existing company with the same English
        name; callers look it up first.

        Returns:
            Created CompanyResponse
        """
        logger.info("creating_company", name_en=name_en)

        insert_data = {
            "id": str(uuid.uuid4()),
            "name_en": name_en,
            "name_kr": name_kr,
            "last_updated": datetime.now(timezone.utc).isoformat(),
        }

        try:
            result = self.db.table(self.table).insert(insert_data).execute()
        except Exception as e:
            logger.error("create_company_failed", name_en=name_en, error=str(e))
            raise DatabaseError("insert", str(e))

        company = CompanyResponse.model_validate(result.data[0])
        logger.info("company_created", company_id=company.id, name_en=name_en)
        return company

    def update_name_kr(self, company_id: str, name_kr: str) -> CompanyResponse:
        """
        Set or correct the Korean display name.

        Raises:
            CompanyNotFoundError: If company doesn't exist
        """
        logger.info("updating_company_name_kr", company_id=company_id)

        self.get_by_id(company_id)

        try:
            result = (
                self.db.table(self.table)
                .update({
                    "name_kr": name_kr,
                    "last_updated": datetime.now(timezone.utc).isoformat(),
                })
                .eq("id", company_id)
                .execute()
            )
        except Exception as e:
            logger.error("update_company_failed", company_id=company_id, error=str(e))
            raise DatabaseError("update", str(e))

        return CompanyResponse.model_validate(result.data[0])


# Singleton instance for convenience
_company_service: Optional[CompanyService] = None


def get_company_service() -> CompanyService:
    """Get or create CompanyService instance."""
    global _company_service
    if _company_service is None:
        _company_service = CompanyService()
    return _company_service
