"""
Template service: carrier spreadsheet layouts.

Template rows are maintained outside this application (see
scripts/seed_templates.py); this service only reads them.
"""

from typing import Optional
import structlog

from config import get_supabase_client
from models.template import CarrierResponse, TemplateMapping
from exceptions import TemplateNotFoundError, DatabaseError

logger = structlog.get_logger(__name__)


class TemplateService:
    """
    Template business logic.

    Resolves the coordinate mapping for a (carrier, template) pair.
    """

    def __init__(self):
        self.db = get_supabase_client()
        self.table = "templates"
        self.carriers_table = "carriers"

    def resolve(self, carrier_id: str, template_id: str) -> TemplateMapping:
        """
        Get the mapping for a carrier's template.

        No fallback template is used: a wrong mapping would silently
        read and write the wrong cells.

        Args:
            carrier_id: Carrier identifier
            template_id: Template identifier

        Returns:
            TemplateMapping

        Raises:
            TemplateNotFoundError: If no mapping exists for the pair
        """
        logger.debug("resolving_template", carrier_id=carrier_id, template_id=template_id)

        try:
            result = (
                self.db.table(self.table)
                .select("*")
                .eq("carrier_id", carrier_id)
                .eq("template_id", template_id)
                .limit(1)
                .execute()
            )
        except Exception as e:
            logger.error(
                "resolve_template_failed",
                carrier_id=carrier_id,
                template_id=template_id,
                error=str(e)
            )
            raise DatabaseError("select", str(e))

        if not result.data:
            logger.warning("template_not_found", carrier_id=carrier_id, template_id=template_id)
            raise TemplateNotFoundError(carrier_id, template_id)

        return TemplateMapping.model_validate(result.data[0])

    def list_carriers(self) -> list[CarrierResponse]:
        """Get all carriers ordered by name."""
        try:
            result = (
                self.db.table(self.carriers_table)
                .select("*")
                .order("carrier_name")
                .execute()
            )
            return [CarrierResponse.model_validate(row) for row in result.data]

        except Exception as e:
            logger.error("list_carriers_failed", error=str(e))
            raise DatabaseError("select", str(e))

    def list_templates(self, carrier_id: str) -> list[TemplateMapping]:
        """Get every template configured for a carrier."""
        try:
            result = (
                self.db.table(self.table)
                .select("*")
                .eq("carrier_id", carrier_id)
                .order("template_id")
                .execute()
            )
            return [TemplateMapping.model_validate(row) for row in result.data]

        except Exception as e:
            logger.error("list_templates_failed", carrier_id=carrier_id, error=str(e))
            raise DatabaseError("select", str(e))


# Singleton instance for convenience
_template_service: Optional[TemplateService] = None


def get_template_service() -> TemplateService:
    """Get or create TemplateService instance."""
    global _template_service
    if _template_service is None:
        _template_service = TemplateService()
    return _template_service
