"""
Main entry point for the budget reconciliation service.
"""

import asyncio
from typing import Optional

from budget_recon.state import SummaryState
from budget_recon.graph import get_summary_graph
from budget_recon.datasource import DataSourceError, ProjectDataSource, SnapshotDataSource
from budget_recon.exceptions import MissingParameterError, UpstreamReadError
from budget_recon.schemas.output import ProjectItemsSummaryResponse, QuantityAvailabilityResponse
from budget_recon.stages.commitments import aggregate_committed_by_item
from budget_recon.utils.logging import setup_logging
from budget_recon.utils import dict_to_json_string
from budget_recon.config import get_config


logger = setup_logging(__name__)
config = get_config()


def _clean(value: Optional[str]) -> str:
    return str(value or "").strip()


def require_params(**params: Optional[str]) -> None:
    """Raise MissingParameterError naming every required parameter if any is blank."""
    if all(_clean(value) for value in params.values()):
        return
    names = list(params)
    listed = names[0] if len(names) == 1 else f"{', '.join(names[:-1])} and {names[-1]}"
    raise MissingParameterError(f"{listed} {'is' if len(names) == 1 else 'are'} required")


async def build_project_items_summary(
    project_uuid: str,
    corporation_uuid: str,
    data_source: ProjectDataSource,
    vendor_uuid: Optional[str] = None,
    location: Optional[str] = None,
) -> ProjectItemsSummaryResponse:
    """
    Reconcile a project's budget against its purchase-order commitments.

    Args:
        project_uuid: Project identity
        corporation_uuid: Tenant identity
        data_source: Upstream reads
        vendor_uuid: Optional vendor restriction for commitments
        location: Optional display-location filter (case-insensitive exact match)

    Returns:
        ProjectItemsSummaryResponse with one row per budgeted identity. The
        list is empty when the project is unknown or nothing is budgeted.

    Raises:
        MissingParameterError: project_uuid or corporation_uuid is blank
        UpstreamReadError: a required read failed
    """
    require_params(project_uuid=project_uuid, corporation_uuid=corporation_uuid)

    state = SummaryState(
        project_uuid=_clean(project_uuid),
        corporation_uuid=_clean(corporation_uuid),
        vendor_uuid=_clean(vendor_uuid) or None,
        location_filter=_clean(location) or None,
    )

    logger.info(f"Starting project items summary for {state.project_uuid}")

    graph = get_summary_graph()
    result = await graph.ainvoke(
        state,
        config={
            "recursion_limit": config.GRAPH_RECURSION_LIMIT,
            "configurable": {"data_source": data_source},
        },
    )
    # LangGraph hands back the channel values as a dict
    final_state = SummaryState(**result) if isinstance(result, dict) else result

    logger.debug(f"Stage trace for {state.project_uuid}:\n{final_state.get_trace()}")

    if final_state.error:
        raise UpstreamReadError(final_state.error)

    logger.info(f"Project items summary complete: {final_state.get_summary()}")

    return ProjectItemsSummaryResponse(data=final_state.rows)


async def build_estimate_quantity_availability(
    project_uuid: str,
    estimate_uuid: str,
    corporation_uuid: str,
    data_source: ProjectDataSource,
    exclude_po_uuid: Optional[str] = None,
) -> QuantityAvailabilityResponse:
    """
    Report quantities already ordered per catalog item across estimate-imported POs.

    estimate_uuid is required but does not narrow the PO selection. The PO being
    edited can be left out with exclude_po_uuid.
    """
    require_params(
        project_uuid=project_uuid,
        estimate_uuid=estimate_uuid,
        corporation_uuid=corporation_uuid,
    )

    try:
        purchase_orders = await data_source.list_estimate_import_purchase_orders(
            _clean(project_uuid),
            _clean(corporation_uuid),
            config.QUALIFYING_PO_STATUSES,
            _clean(exclude_po_uuid) or None,
        )
    except DataSourceError as e:
        raise UpstreamReadError(str(e) or "Failed to fetch purchase orders")

    if not purchase_orders:
        return QuantityAvailabilityResponse(data={})

    try:
        po_items = await data_source.list_purchase_order_items([po.uuid for po in purchase_orders])
    except DataSourceError as e:
        raise UpstreamReadError(str(e) or "Failed to fetch purchase order items")

    used = aggregate_committed_by_item(po_items)
    logger.info(
        f"Quantity availability for {_clean(project_uuid)}: "
        f"{len(used)} items across {len(purchase_orders)} POs"
    )
    return QuantityAvailabilityResponse(data=used)


if __name__ == "__main__":
    # Example usage
    import sys

    if len(sys.argv) > 2:
        source = SnapshotDataSource.from_file(config.DATA_SOURCE_PATH)
        output = asyncio.run(build_project_items_summary(
            project_uuid=sys.argv[1],
            corporation_uuid=sys.argv[2],
            data_source=source,
            vendor_uuid=sys.argv[3] if len(sys.argv) > 3 else None,
            location=sys.argv[4] if len(sys.argv) > 4 else None,
        ))
        print(dict_to_json_string(output.model_dump(mode="json")))
    else:
        print("Usage: python -m budget_recon.main <project_uuid> <corporation_uuid> [vendor_uuid] [location]")
