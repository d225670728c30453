"""
Text utilities for spreadsheet cell values.
"""

from typing import Any, Optional


def cell_text(value: Any) -> Optional[str]:
    """
    Convert a raw cell value to trimmed text.

    - "  Widget  " → "Widget"
    - 12345.0 → "12345" (numeric cells typed as float by Excel)
    - None / "" / "   " → None

    Args:
        value: Raw value read from the worksheet

    Returns:
        Trimmed string, or None if the cell is empty or whitespace-only
    """
    if value is None:
        return None

    if isinstance(value, float) and value.is_integer():
        value = int(value)

    text = str(value).strip()

    if not text:
        return None

    return text
