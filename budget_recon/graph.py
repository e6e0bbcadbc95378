"""
LangGraph orchestration for the project items summary workflow.
Defines the graph structure and node routing logic.
"""

from typing import Literal
from langgraph.graph import StateGraph, END
from budget_recon.state import SummaryState
from budget_recon.stages.loader import context_loading_stage, commitment_loading_stage
from budget_recon.stages.estimates import estimate_aggregation_stage
from budget_recon.stages.commitments import commitment_aggregation_stage
from budget_recon.stages.reconciler import reconciliation_stage


def route_after_context(state: SummaryState) -> Literal["estimate_aggregator", "end"]:
    """Route after loading the project context."""
    if state.error or state.project is None or not state.approved_estimate_uuids:
        # Failed read, unknown project or nothing budgeted: the response is decided
        return "end"
    return "estimate_aggregator"


def route_after_budget(state: SummaryState) -> Literal["commitment_loader", "reconciler"]:
    """Route after estimate aggregation."""
    if not state.purchase_orders:
        # No qualifying POs: reconcile against nothing
        return "reconciler"
    return "commitment_loader"


def route_after_commitment_load(state: SummaryState) -> Literal["commitment_aggregator", "end"]:
    """Route after loading PO items."""
    if state.error:
        return "end"
    return "commitment_aggregator"


def build_summary_graph():
    """
    Build the LangGraph workflow for the project items summary.

    Flow:
    1. Context Loader - project, estimates, lookups, line items, POs
    2. Estimate Aggregator - budget bucket per identity
    3. Commitment Loader - PO items and vendors (skipped without POs)
    4. Commitment Aggregator - committed quantity per identity
    5. Reconciler - rows with pending quantity and status
    """

    graph = StateGraph(SummaryState)

    # Add stage nodes
    graph.add_node("context_loader", context_loading_stage)
    graph.add_node("estimate_aggregator", estimate_aggregation_stage)
    graph.add_node("commitment_loader", commitment_loading_stage)
    graph.add_node("commitment_aggregator", commitment_aggregation_stage)
    graph.add_node("reconciler", reconciliation_stage)

    # Set the entry point
    graph.set_entry_point("context_loader")

    # Add edges with routing logic
    graph.add_conditional_edges(
        "context_loader",
        route_after_context,
        {
            "estimate_aggregator": "estimate_aggregator",
            "end": END,
        }
    )

    graph.add_conditional_edges(
        "estimate_aggregator",
        route_after_budget,
        {
            "commitment_loader": "commitment_loader",
            "reconciler": "reconciler",
        }
    )

    graph.add_conditional_edges(
        "commitment_loader",
        route_after_commitment_load,
        {
            "commitment_aggregator": "commitment_aggregator",
            "end": END,
        }
    )

    graph.add_edge("commitment_aggregator", "reconciler")
    graph.add_edge("reconciler", END)

    return graph.compile()


# Global compiled graph (singleton). Holds no request data.
_summary_graph = None


def get_summary_graph():
    """Get or create the compiled summary graph."""
    global _summary_graph
    if _summary_graph is None:
        _summary_graph = build_summary_graph()
    return _summary_graph
