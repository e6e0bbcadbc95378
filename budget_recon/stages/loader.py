"""
Upstream loaders
Fetch everything the aggregation stages need, in as few round trips as the
data dependencies allow.

Required reads (project, estimates, line items, purchase orders, PO items) stop
the workflow with state.error set. Optional enrichment reads (corporation, item
types, locations, vendors) fall back to neutral values and are only logged.
"""

import asyncio
from typing import Any, List

from langchain_core.runnables import RunnableConfig

from budget_recon.state import StageNote, SummaryState, stage_note
from budget_recon.datasource import DataSourceError, ProjectDataSource
from budget_recon.stages.estimates import is_reportable_estimate
from budget_recon.stages.normalizer import build_item_type_map, build_location_map
from budget_recon.utils.logging import setup_logging, log_stage_action, log_upstream_failure
from budget_recon.config import get_config


logger = setup_logging(__name__)
settings = get_config()


def get_data_source(config: RunnableConfig) -> ProjectDataSource:
    source = (config or {}).get("configurable", {}).get("data_source")
    if source is None:
        raise RuntimeError("No data source configured for the summary workflow")
    return source


def _raise_unexpected(result: Any) -> None:
    if isinstance(result, BaseException) and not isinstance(result, DataSourceError):
        raise result


def _optional(result: Any, stage_name: str, collaborator: str, fallback: Any, notes: List[StageNote]) -> Any:
    if isinstance(result, DataSourceError):
        log_upstream_failure(logger, collaborator, result, repr(fallback))
        notes.append(stage_note(stage_name, f"{collaborator} unavailable ({result}); continuing without it"))
        return fallback
    _raise_unexpected(result)
    return result


def _failure(stage_name: str, error: DataSourceError, what: str) -> dict:
    message = str(error) or f"Failed to fetch {what}"
    logger.error(f"[{stage_name}] Required read failed: {message}")
    return {
        "error": message,
        "stage_log": [stage_note(stage_name, f"Required read failed: {message}")],
    }


async def context_loading_stage(state: SummaryState, config: RunnableConfig) -> dict:
    """
    Context loading node.

    Round 1 reads the project and its estimates. The workflow ends early when
    the project is missing or no estimate is reportable. Round 2 reads the
    lookups, the estimate line items and the qualifying purchase orders.

    Updates state:
    - project, corporation, approved_estimate_uuids
    - item_type_map, location_map, line_item_rows, purchase_orders
    - error (on a failed required read)
    """
    stage_name = "ContextLoader"
    source = get_data_source(config)
    logger.info(f"[{stage_name}] Loading project {state.project_uuid}")

    try:
        project, estimates = await asyncio.gather(
            source.get_project(state.project_uuid, state.corporation_uuid),
            source.list_estimates(state.project_uuid, state.corporation_uuid),
        )
    except DataSourceError as e:
        return _failure(stage_name, e, "project data")

    if project is None:
        logger.warning(f"[{stage_name}] Project {state.project_uuid} not found")
        return {"stage_log": [stage_note(stage_name, "Project not found")]}

    approved = [estimate.uuid for estimate in estimates if is_reportable_estimate(estimate)]
    if not approved:
        logger.info(f"[{stage_name}] No approved and active estimates for {state.project_uuid}")
        return {
            "project": project,
            "stage_log": [stage_note(stage_name, f"No reportable estimates out of {len(estimates)}")],
        }

    corporation, item_types, locations, line_items, purchase_orders = await asyncio.gather(
        source.get_corporation(state.corporation_uuid),
        source.list_item_types(state.project_uuid, state.corporation_uuid),
        source.list_locations(),
        source.list_estimate_line_items(state.project_uuid, state.corporation_uuid, approved),
        source.list_purchase_orders(
            state.project_uuid,
            state.corporation_uuid,
            settings.QUALIFYING_PO_STATUSES,
            state.vendor_uuid,
        ),
        return_exceptions=True,
    )

    for result, what in ((line_items, "estimate line items"), (purchase_orders, "purchase orders")):
        _raise_unexpected(result)
        if isinstance(result, DataSourceError):
            return _failure(stage_name, result, what)

    notes: List[StageNote] = []
    corporation = _optional(corporation, stage_name, "corporation", None, notes)
    item_types = _optional(item_types, stage_name, "item types", [], notes)
    locations = _optional(locations, stage_name, "locations", [], notes)

    log_stage_action(
        logger,
        stage_name,
        "context loaded",
        {
            "approved_estimates": len(approved),
            "line_item_rows": len(line_items),
            "purchase_orders": len(purchase_orders),
        },
    )
    notes.append(
        stage_note(
            stage_name,
            f"Loaded {len(line_items)} line-item rows from {len(approved)} estimates "
            f"and {len(purchase_orders)} qualifying purchase orders",
        )
    )

    return {
        "project": project,
        "corporation": corporation,
        "approved_estimate_uuids": approved,
        "item_type_map": build_item_type_map(item_types),
        "location_map": build_location_map(locations),
        "line_item_rows": line_items,
        "purchase_orders": purchase_orders,
        "stage_log": notes,
    }


async def commitment_loading_stage(state: SummaryState, config: RunnableConfig) -> dict:
    """
    Commitment loading node. Only runs when at least one PO qualified.

    Updates state:
    - po_items, vendor_map
    - error (on a failed required read)
    """
    stage_name = "CommitmentLoader"
    source = get_data_source(config)

    po_uuids = [po.uuid for po in state.purchase_orders]
    vendor_uuids = sorted({po.vendor_uuid for po in state.purchase_orders if po.vendor_uuid})

    reads = [source.list_purchase_order_items(po_uuids)]
    if vendor_uuids:
        reads.append(source.list_vendors(vendor_uuids))
    results = await asyncio.gather(*reads, return_exceptions=True)

    po_items = results[0]
    _raise_unexpected(po_items)
    if isinstance(po_items, DataSourceError):
        return _failure(stage_name, po_items, "purchase order items")

    notes: List[StageNote] = []
    vendors = _optional(results[1], stage_name, "vendors", [], notes) if vendor_uuids else []
    vendor_map = {vendor.uuid: vendor.name for vendor in vendors if vendor.uuid and vendor.name}

    log_stage_action(
        logger,
        stage_name,
        "commitments loaded",
        {"po_items": len(po_items), "vendors": len(vendor_map)},
    )
    notes.append(stage_note(stage_name, f"Loaded {len(po_items)} PO items for {len(po_uuids)} POs"))

    return {
        "po_items": po_items,
        "vendor_map": vendor_map,
        "stage_log": notes,
    }
