"""
Seed carriers and templates tables.

Template mappings are configured outside the application. Run this
script with a JSON file to add or replace them:

    python scripts/seed_templates.py templates.json

File format:
    {
        "carriers": [{"carrier_id": "cj", "carrier_name": "CJ Logistics"}],
        "templates": [
            {"carrier_id": "cj", "template_id": "manifest-v2",
             "template_name": "Manifest v2",
             "company_name_row": 1, "company_name_column": "A",
             "product_column": "B", "hs_code_column": "C", "start_row": 3}
        ]
    }
"""

import sys
import json
from pathlib import Path

# Add backend to path so we can import modules
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

from config import get_admin_client
from models.template import CarrierResponse, TemplateMapping
import structlog

logger = structlog.get_logger(__name__)


def load_seed_file(path: Path) -> tuple[list[dict], list[dict]]:
    """Read and validate a seed file; returns (carrier rows, template rows)."""
    data = json.loads(path.read_text(encoding="utf-8"))

    carriers = [
        CarrierResponse.model_validate(row).model_dump()
        for row in data.get("carriers", [])
    ]
    templates = [
        TemplateMapping.model_validate(row).model_dump()
        for row in data.get("templates", [])
    ]

    return carriers, templates


def seed_templates(path: Path):
    """Upsert carriers and templates from a seed file."""
    db = get_admin_client()
    if db is None:
        print("✗ SUPABASE_SERVICE_KEY is not configured")
        sys.exit(1)

    carriers, templates = load_seed_file(path)

    try:
        if carriers:
            db.table("carriers").upsert(carriers, on_conflict="carrier_id").execute()
        if templates:
            db.table("templates").upsert(templates, on_conflict="carrier_id,template_id").execute()

        logger.info("templates_seeded", carriers=len(carriers), templates=len(templates))
        print(f"✓ Seeded {len(carriers)} carriers and {len(templates)} templates")

        for template in templates:
            print(
                f"  {template['carrier_id']}/{template['template_id']}: "
                f"company {template['company_name_column']}{template['company_name_row']}, "
                f"products {template['product_column']}{template['start_row']}+, "
                f"HS codes -> {template['hs_code_column']}"
            )

    except Exception as e:
        logger.error("seed_templates_failed", error=str(e))
        print(f"✗ Failed to seed templates: {e}")
        raise


if __name__ == "__main__":
    if len(sys.argv) != 2:
        print("Usage: python scripts/seed_templates.py <seed-file.json>")
        sys.exit(2)

    print("Seeding carriers and templates...")
    seed_templates(Path(sys.argv[1]))
    print("\nDone!")
