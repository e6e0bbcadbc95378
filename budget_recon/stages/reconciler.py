"""
Reconciler
Joins budget buckets to commitment buckets and derives a status per item.
"""

from typing import Dict, List, Mapping, Optional

from budget_recon.state import SummaryState, stage_note
from budget_recon.schemas.line_item import CommitmentBucket, LineItem
from budget_recon.schemas.output import ItemStatus, ReconciledRow
from budget_recon.schemas.records import CorporationRecord, ProjectRecord
from budget_recon.stages.identity import ItemKey
from budget_recon.utils.logging import setup_logging, log_stage_action
from budget_recon.config import get_config


logger = setup_logging(__name__)
config = get_config()


def derive_status(budget_qty: float, po_qty: float) -> ItemStatus:
    """
    Status of a budgeted item given its committed quantity.

    A zero budget with zero commitment is Pending, not Complete: there is
    nothing to report as complete.
    """
    if 0 < po_qty < budget_qty:
        return ItemStatus.PARTIAL
    if po_qty >= budget_qty and budget_qty > 0:
        return ItemStatus.COMPLETE
    return ItemStatus.PENDING


def format_project_label(project: Optional[ProjectRecord]) -> str:
    """'<name> #<display id>' when the project carries both, else N/A."""
    if project is None or not project.name or not project.display_id:
        return config.NOT_AVAILABLE
    return f"{project.name} #{project.display_id}"


def format_corporation_name(corporation: Optional[CorporationRecord]) -> str:
    if corporation is None or not corporation.name:
        return config.NOT_AVAILABLE
    return corporation.name


def _resolve_vendor_name(
    vendor_names: Mapping[str, str],
    vendor_filter: Optional[str],
    vendor_id: Optional[str],
) -> str:
    # A requested vendor names every row, committed or not
    if vendor_filter and vendor_filter in vendor_names:
        return vendor_names[vendor_filter] or config.NOT_AVAILABLE
    if vendor_id is not None and vendor_id in vendor_names:
        return vendor_names[vendor_id] or config.NOT_AVAILABLE
    return config.NOT_AVAILABLE


def _matches_location(display: str, location_filter: Optional[str]) -> bool:
    if not location_filter:
        return True
    return display.lower() == location_filter.lower()


def reconcile_rows(
    budget_buckets: Mapping[ItemKey, LineItem],
    commitments: Optional[Mapping[ItemKey, CommitmentBucket]],
    vendor_names: Mapping[str, str],
    corporation_name: str,
    project_label: str,
    location_filter: Optional[str] = None,
    vendor_filter: Optional[str] = None,
) -> List[ReconciledRow]:
    """
    Build one output row per budget bucket.

    commitments is None when no purchase order qualified at all. Every row is
    then Pending with nothing committed. Keys that only exist on the commitment
    side are never emitted. The location filter runs after quantities and status
    are computed, so it can only drop rows. A vendor_filter that resolves to a
    name labels every row, before the vendor of the row's own commitments.
    """
    rows = []
    for key, item in budget_buckets.items():
        budget_qty = item.quantity

        if commitments is None:
            po_qty = 0.0
            status = ItemStatus.PENDING
            vendor_name = config.NOT_AVAILABLE
        else:
            committed = commitments.get(key) or CommitmentBucket()
            po_qty = committed.quantity
            status = derive_status(budget_qty, po_qty)
            vendor_name = _resolve_vendor_name(vendor_names, vendor_filter, committed.vendor_id)

        if not _matches_location(item.location_display, location_filter):
            continue

        rows.append(
            ReconciledRow(
                corporation_name=corporation_name,
                project_label=project_label,
                cost_code_label=item.cost_code_label or config.NOT_AVAILABLE,
                vendor_name=vendor_name,
                sequence=item.sequence,
                item_type_label=item.item_type_label,
                item_name=item.item_name,
                description=item.description,
                location=item.location_display,
                budget_qty=budget_qty,
                po_qty=po_qty,
                pending_qty=max(0.0, budget_qty - po_qty),
                status=status,
            )
        )
    return rows


async def reconciliation_stage(state: SummaryState) -> dict:
    """
    Reconciliation node. Terminal stage of the workflow.

    Updates state:
    - rows
    """
    has_commitments = bool(state.purchase_orders)
    rows = reconcile_rows(
        state.budget_buckets,
        state.commitments if has_commitments else None,
        state.vendor_map,
        corporation_name=format_corporation_name(state.corporation),
        project_label=format_project_label(state.project),
        location_filter=state.location_filter,
        vendor_filter=state.vendor_uuid,
    )

    status_counts: Dict[str, int] = {}
    for row in rows:
        status_counts[row.status.value] = status_counts.get(row.status.value, 0) + 1

    log_stage_action(
        logger,
        "Reconciler",
        "rows reconciled",
        {"rows": len(rows), "statuses": status_counts, "purchase_orders": has_commitments},
    )

    message = f"Produced {len(rows)} rows"
    if not has_commitments:
        message += " (no qualifying purchase orders)"

    return {
        "rows": rows,
        "stage_log": [stage_note("Reconciler", message)],
    }
