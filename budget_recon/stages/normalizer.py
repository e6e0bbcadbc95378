"""
Record Normalizer
Extracts a canonical LineItem from estimate and PO item payloads.

Source systems renamed fields over time (quantity / qty / quantity_value, ...) and
old and new names can coexist on one record. The fallback chains below encode
that history: the first present field wins and the order matters.
"""

import math
import re
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

from budget_recon.schemas.line_item import LineItem
from budget_recon.schemas.records import EstimateLineItemRow, ItemTypeRecord, LocationRecord
from budget_recon.utils import is_uuid_like


QUANTITY_FIELDS = ("quantity", "qty", "quantity_value")
UNIT_PRICE_FIELDS = ("unit_price", "unitPrice", "price")
SEQUENCE_FIELDS = ("sequence", "item_sequence", "sequence_uuid")
LOCATION_FIELDS = ("location", "location_uuid")
PO_LOCATION_LABEL_FIELDS = ("location_label", "location")
ITEM_ID_FIELDS = ("item_uuid", "uuid")
ITEM_TYPE_LABEL_FIELDS = ("item_type_label", "item_type_name")
ITEM_TYPE_ID_FIELDS = ("item_type_uuid", "item_type")
ITEM_NAME_FIELDS = ("name", "item_name", "title")


# Leading decimal number of a string, e.g. "10 units" -> "10"
_LEADING_NUMBER = re.compile(r"\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


def parse_number(value: Any) -> float:
    """
    Parse a loosely typed numeric value. Anything unparseable is 0.

    Strings are read up to the end of their leading number, so "10 units" is 10
    and "1,000" is 1.
    """
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, str):
        match = _LEADING_NUMBER.match(value)
        if match is None:
            return 0.0
        number = float(match.group(1))
    else:
        try:
            number = float(value)
        except (TypeError, ValueError):
            return 0.0
    if not math.isfinite(number):
        return 0.0
    return number


def is_blank(value: Any) -> bool:
    """None, "", False and numeric zero count as missing."""
    if value is None or value is False or value == "":
        return True
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value == 0 or value != value
    return False


def first_present(raw: Mapping[str, Any], fields: Iterable[str]) -> Optional[Any]:
    """Return the first field value that is not blank. A quantity of 0 falls through."""
    for field in fields:
        value = raw.get(field)
        if not is_blank(value):
            return value
    return None


def build_item_type_map(item_types: Iterable[ItemTypeRecord]) -> Dict[str, str]:
    return {it.uuid: it.label for it in item_types if it.uuid and it.label}


def build_location_map(locations: Iterable[LocationRecord]) -> Dict[str, str]:
    return {loc.uuid: loc.name for loc in locations if loc.uuid and loc.name}


def _as_text(value: Any) -> str:
    return "" if value is None else str(value)


def _resolve_sequence(value: Optional[Any]) -> Tuple[str, Optional[str]]:
    sequence = _as_text(value)
    return sequence, (sequence if is_uuid_like(sequence) else None)


def _resolve_location(
    raw_location: Optional[Any],
    locations: Mapping[str, str],
) -> Tuple[Optional[str], str]:
    """
    Split a location value into (location_id, display).

    A 36-character string is taken as a location reference. On a lookup miss
    the raw string doubles as the display value.
    """
    if raw_location is None or raw_location == "":
        return None, ""
    if is_uuid_like(raw_location):
        return raw_location, locations.get(raw_location, raw_location)
    return None, str(raw_location)


def _resolve_item_type(
    raw: Mapping[str, Any],
    item_types: Mapping[str, str],
) -> Tuple[Optional[str], str]:
    item_type_id = first_present(raw, ITEM_TYPE_ID_FIELDS)
    item_type_id = None if item_type_id is None else str(item_type_id)

    explicit_label = first_present(raw, ITEM_TYPE_LABEL_FIELDS)
    if explicit_label is not None:
        return item_type_id, str(explicit_label)
    if item_type_id is not None:
        return item_type_id, item_types.get(item_type_id, "")
    return None, ""


def _cost_code_label(number: Optional[str], name: Optional[str]) -> str:
    return " ".join(str(part) for part in (number, name) if part).strip()


def normalize_estimate_item(
    raw: Mapping[str, Any],
    row: EstimateLineItemRow,
    item_types: Mapping[str, str],
    locations: Mapping[str, str],
) -> LineItem:
    """
    Normalize one raw material item of an estimate line-item row.

    Cost code and division come from the parent row, everything else from the
    raw payload.
    """
    sequence, sequence_id = _resolve_sequence(first_present(raw, SEQUENCE_FIELDS))
    location_id, location_display = _resolve_location(
        first_present(raw, LOCATION_FIELDS), locations
    )
    item_type_id, item_type_label = _resolve_item_type(raw, item_types)
    item_id = first_present(raw, ITEM_ID_FIELDS)

    return LineItem(
        cost_code_id=row.cost_code_uuid,
        cost_code_label=_cost_code_label(row.cost_code_number, row.cost_code_name),
        division_name=row.division_name,
        item_id=None if item_id is None else str(item_id),
        item_type_id=item_type_id,
        item_type_label=item_type_label,
        item_name=_as_text(first_present(raw, ITEM_NAME_FIELDS)),
        description=_as_text(first_present(raw, ("description",))),
        sequence=sequence,
        sequence_id=sequence_id,
        location_id=location_id,
        location_display=location_display,
        quantity=parse_number(first_present(raw, QUANTITY_FIELDS)),
        unit_price=parse_number(first_present(raw, UNIT_PRICE_FIELDS)),
    )


def normalize_po_item(
    raw: Mapping[str, Any],
    item_types: Mapping[str, str],
    locations: Mapping[str, str],
) -> LineItem:
    """
    Normalize one purchase-order item record.

    Differences from the estimate side:
    - po_quantity (the ordered quantity) outranks the generic quantity fields
    - sequence is read from the metadata object before the top-level fields
    - location_uuid is a typed reference column and is used as the id directly
    - item identity is item_uuid only; uuid on a PO item is the row's own id
    """
    metadata = raw.get("metadata")
    if not isinstance(metadata, dict):
        metadata = {}

    sequence_value = first_present(metadata, ("sequence",))
    if sequence_value is None:
        sequence_value = first_present(raw, SEQUENCE_FIELDS)
    sequence, sequence_id = _resolve_sequence(sequence_value)

    location_uuid = first_present(raw, ("location_uuid",))
    if location_uuid is not None:
        location_id = str(location_uuid)
        location_display = locations.get(location_id, location_id)
    else:
        location_id, location_display = _resolve_location(
            first_present(raw, PO_LOCATION_LABEL_FIELDS), locations
        )

    quantity = first_present(raw, ("po_quantity",))
    if quantity is None:
        quantity = first_present(raw, QUANTITY_FIELDS)

    item_type_id, item_type_label = _resolve_item_type(raw, item_types)
    item_id = first_present(raw, ("item_uuid",))
    cost_code_id = first_present(raw, ("cost_code_uuid",))

    return LineItem(
        cost_code_id=None if cost_code_id is None else str(cost_code_id),
        item_id=None if item_id is None else str(item_id),
        item_type_id=item_type_id,
        item_type_label=item_type_label,
        item_name=_as_text(first_present(raw, ITEM_NAME_FIELDS)),
        description=_as_text(first_present(raw, ("description",))),
        sequence=sequence,
        sequence_id=sequence_id,
        location_id=location_id,
        location_display=location_display,
        quantity=parse_number(quantity),
        unit_price=parse_number(first_present(raw, UNIT_PRICE_FIELDS)),
    )
