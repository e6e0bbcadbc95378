"""
Output schemas for the reconciliation results.
Defines the JSON payloads returned by the API.
"""

from enum import Enum
from typing import List, Dict
from pydantic import BaseModel, Field


class ItemStatus(str, Enum):
    """Completion status of a budgeted line item."""
    PENDING = "Pending"
    PARTIAL = "Partial"
    COMPLETE = "Complete"


class ReconciledRow(BaseModel):
    """Budget compared to commitment for one line-item identity."""
    corporation_name: str
    project_label: str
    cost_code_label: str
    vendor_name: str
    sequence: str = ""
    item_type_label: str = ""
    item_name: str = ""
    description: str = ""
    location: str = ""
    budget_qty: float = 0.0
    po_qty: float = 0.0
    pending_qty: float = Field(ge=0.0)
    status: ItemStatus


class ProjectItemsSummaryResponse(BaseModel):
    """Response body of the project items summary endpoint."""
    data: List[ReconciledRow] = Field(default_factory=list)

    class Config:
        json_schema_extra = {
            "example": {
                "data": [
                    {
                        "corporation_name": "Acme Builders",
                        "project_label": "Harbor Tower #P-1001",
                        "cost_code_label": "03-300 Concrete",
                        "vendor_name": "Ready Mix Co",
                        "sequence": "1",
                        "item_type_label": "Material",
                        "item_name": "Rebar #5",
                        "description": "Grade 60",
                        "location": "Level 1",
                        "budget_qty": 10,
                        "po_qty": 4,
                        "pending_qty": 6,
                        "status": "Partial",
                    }
                ]
            }
        }


class QuantityAvailabilityResponse(BaseModel):
    """Committed quantity per catalog item across estimate-imported POs."""
    data: Dict[str, float] = Field(default_factory=dict)
