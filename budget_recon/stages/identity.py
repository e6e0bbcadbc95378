"""
Identity Builder
Derives the composite key that matches estimate lines to PO lines.
"""

from typing import NamedTuple

from budget_recon.schemas.line_item import LineItem


class ItemKey(NamedTuple):
    """(cost code, item, sequence, location) compared part by part."""
    cost_code_id: str
    item_id: str
    sequence: str
    location_key: str


def build_item_key(item: LineItem) -> ItemKey:
    """
    Build the identity key for a normalized line item.

    Used unchanged on the estimate side and the PO side. Any difference between
    the two would stop every item from matching.
    """
    location_key = item.location_id or item.location_display or ""
    return ItemKey(
        cost_code_id=item.cost_code_id or "",
        item_id=item.item_id or "",
        sequence=item.sequence or "",
        location_key=location_key,
    )


def format_item_key(key: ItemKey) -> str:
    """Readable form of a key for log output."""
    return "_".join(key)
