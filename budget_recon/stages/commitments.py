"""
Commitment Aggregator
Collapses purchase-order items into one committed quantity per identity.
"""

from typing import Any, Dict, Iterable, Mapping, Optional

from budget_recon.state import SummaryState, stage_note
from budget_recon.schemas.line_item import CommitmentBucket
from budget_recon.schemas.records import PurchaseOrderRecord
from budget_recon.stages.identity import ItemKey, build_item_key
from budget_recon.stages.normalizer import normalize_po_item, parse_number
from budget_recon.utils.logging import setup_logging, log_stage_action


logger = setup_logging(__name__)


def build_po_vendor_map(purchase_orders: Iterable[PurchaseOrderRecord]) -> Dict[str, str]:
    """PO uuid -> vendor uuid, for POs that name a vendor."""
    return {po.uuid: po.vendor_uuid for po in purchase_orders if po.uuid and po.vendor_uuid}


def aggregate_po_items(
    po_items: Iterable[Mapping[str, Any]],
    po_vendors: Mapping[str, str],
    item_types: Mapping[str, str],
    locations: Mapping[str, str],
) -> Dict[ItemKey, CommitmentBucket]:
    """
    Sum ordered quantities per identity and attribute a vendor.

    Each item inherits the vendor of its parent PO. A vendor already recorded
    for a key is kept when a later item has none.
    """
    commitments: Dict[ItemKey, CommitmentBucket] = {}
    for raw in po_items:
        item = normalize_po_item(raw, item_types, locations)
        key = build_item_key(item)
        vendor_id: Optional[str] = po_vendors.get(raw.get("purchase_order_uuid"))

        current = commitments.get(key)
        if current is None:
            commitments[key] = CommitmentBucket(quantity=item.quantity, vendor_id=vendor_id)
        else:
            commitments[key] = CommitmentBucket(
                quantity=current.quantity + item.quantity,
                vendor_id=current.vendor_id if current.vendor_id is not None else vendor_id,
            )
    return commitments


async def commitment_aggregation_stage(state: SummaryState) -> dict:
    """
    Commitment aggregation node.

    Updates state:
    - commitments
    """
    po_vendors = build_po_vendor_map(state.purchase_orders)
    commitments = aggregate_po_items(
        state.po_items, po_vendors, state.item_type_map, state.location_map
    )

    log_stage_action(
        logger,
        "CommitmentAggregator",
        "commitments aggregated",
        {"po_items": len(state.po_items), "buckets": len(commitments)},
    )

    return {
        "commitments": commitments,
        "stage_log": [
            stage_note(
                "CommitmentAggregator",
                f"Aggregated {len(state.po_items)} PO items into {len(commitments)} commitment buckets",
            )
        ],
    }


def aggregate_committed_by_item(po_items: Iterable[Mapping[str, Any]]) -> Dict[str, float]:
    """
    Sum ordered quantities per catalog item across PO items.

    Items without an item_uuid and non-positive or unparseable quantities are
    skipped.
    """
    used: Dict[str, float] = {}
    for raw in po_items:
        item_uuid = raw.get("item_uuid")
        if not item_uuid:
            continue
        quantity = parse_number(raw.get("po_quantity"))
        if quantity > 0:
            used[str(item_uuid)] = used.get(str(item_uuid), 0.0) + quantity
    return used
