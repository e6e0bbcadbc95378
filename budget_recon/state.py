"""
Request-scoped state for the reconciliation workflow.
Each stage reads what it needs and returns the fields it produced.
"""

import operator
from datetime import datetime
from typing import Annotated, Any, Dict, List, Optional

from pydantic import BaseModel, Field

from budget_recon.schemas.line_item import CommitmentBucket, LineItem
from budget_recon.schemas.output import ReconciledRow
from budget_recon.schemas.records import (
    CorporationRecord,
    EstimateLineItemRow,
    ProjectRecord,
    PurchaseOrderRecord,
)
from budget_recon.stages.identity import ItemKey


class StageNote(BaseModel):
    """A single entry in the stage trace."""
    timestamp: datetime
    stage_name: str
    message: str


def stage_note(stage_name: str, message: str) -> StageNote:
    return StageNote(timestamp=datetime.utcnow(), stage_name=stage_name, message=message)


class SummaryState(BaseModel):
    """
    State of one project items summary request.

    Built fresh per request and discarded once the response is produced.
    Stages never modify it in place. They return updates, and the graph merges
    them. stage_log accumulates across stages; every other field is replaced.
    """

    # Request
    project_uuid: str
    corporation_uuid: str
    vendor_uuid: Optional[str] = None
    location_filter: Optional[str] = None

    # Context loading phase
    project: Optional[ProjectRecord] = None
    corporation: Optional[CorporationRecord] = None
    approved_estimate_uuids: List[str] = Field(default_factory=list)
    item_type_map: Dict[str, str] = Field(default_factory=dict)
    location_map: Dict[str, str] = Field(default_factory=dict)
    line_item_rows: List[EstimateLineItemRow] = Field(default_factory=list)
    purchase_orders: List[PurchaseOrderRecord] = Field(default_factory=list)

    # Commitment loading phase
    po_items: List[Dict[str, Any]] = Field(default_factory=list)
    vendor_map: Dict[str, str] = Field(default_factory=dict)

    # Aggregation phase
    budget_buckets: Dict[ItemKey, LineItem] = Field(default_factory=dict)
    commitments: Dict[ItemKey, CommitmentBucket] = Field(default_factory=dict)

    # Reconciliation phase
    rows: List[ReconciledRow] = Field(default_factory=list)

    # Failure of a required upstream read
    error: Optional[str] = None

    # Trace
    stage_log: Annotated[List[StageNote], operator.add] = Field(default_factory=list)

    def get_trace(self) -> str:
        """Human-readable summary of what each stage did."""
        if not self.stage_log:
            return "No stages ran."
        return "\n".join(f"[{note.stage_name}] {note.message}" for note in self.stage_log)

    def get_summary(self) -> Dict[str, Any]:
        """Get a summary of the current state."""
        return {
            "project_uuid": self.project_uuid,
            "project_found": self.project is not None,
            "approved_estimates": len(self.approved_estimate_uuids),
            "purchase_orders": len(self.purchase_orders),
            "budget_buckets": len(self.budget_buckets),
            "commitment_buckets": len(self.commitments),
            "rows": len(self.rows),
            "error": self.error,
        }
