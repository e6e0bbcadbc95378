"""
Estimate Aggregator
Collapses estimate line items into one budget bucket per identity.
"""

from typing import Dict, Iterable, List, Mapping

from budget_recon.state import SummaryState, stage_note
from budget_recon.schemas.line_item import LineItem
from budget_recon.schemas.records import EstimateLineItemRow, EstimateRecord
from budget_recon.stages.identity import ItemKey, build_item_key, format_item_key
from budget_recon.stages.normalizer import normalize_estimate_item
from budget_recon.utils.logging import setup_logging, log_stage_action
from budget_recon.config import get_config


logger = setup_logging(__name__)
config = get_config()


def is_reportable_estimate(estimate: EstimateRecord) -> bool:
    """
    An estimate counts toward the budget only when it is Approved and active.

    status is compared case-sensitively. is_active arrives either as a boolean
    or as a string, and only the string "TRUE" (any case) counts as active.
    """
    if estimate.status != config.REPORTABLE_ESTIMATE_STATUS:
        return False
    return estimate.is_active is True or str(estimate.is_active).upper() == "TRUE"


def flatten_estimate_items(
    rows: Iterable[EstimateLineItemRow],
    item_types: Mapping[str, str],
    locations: Mapping[str, str],
) -> List[LineItem]:
    """Normalize every material item of every row, keeping fetch order."""
    items = []
    for row in rows:
        for raw in row.material_items:
            if not isinstance(raw, dict):
                logger.debug(f"[EstimateAggregator] Skipping non-object item on row {row.id}")
                continue
            items.append(normalize_estimate_item(raw, row, item_types, locations))
    return items


def aggregate_estimate_items(items: Iterable[LineItem]) -> Dict[ItemKey, LineItem]:
    """
    Sum quantities per identity.

    The first item seen for a key supplies the display fields. Later items only
    add to the quantity.
    """
    buckets: Dict[ItemKey, LineItem] = {}
    for item in items:
        key = build_item_key(item)
        existing = buckets.get(key)
        if existing is None:
            buckets[key] = item
        else:
            buckets[key] = existing.model_copy(
                update={"quantity": existing.quantity + item.quantity}
            )
            logger.debug(
                f"[EstimateAggregator] Merged {item.quantity} into {format_item_key(key)}"
            )
    return buckets


async def estimate_aggregation_stage(state: SummaryState) -> dict:
    """
    Estimate aggregation node.

    Updates state:
    - budget_buckets
    """
    items = flatten_estimate_items(state.line_item_rows, state.item_type_map, state.location_map)
    buckets = aggregate_estimate_items(items)

    log_stage_action(
        logger,
        "EstimateAggregator",
        "budget aggregated",
        {"line_items": len(items), "buckets": len(buckets)},
    )

    return {
        "budget_buckets": buckets,
        "stage_log": [
            stage_note(
                "EstimateAggregator",
                f"Aggregated {len(items)} estimate items into {len(buckets)} budget buckets",
            )
        ],
    }
