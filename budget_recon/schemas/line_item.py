"""
Normalized line item and aggregation bucket models.
"""

from typing import Optional
from pydantic import BaseModel


class LineItem(BaseModel):
    """A line item extracted from an estimate or PO payload, in canonical shape."""
    cost_code_id: Optional[str] = None
    cost_code_label: str = ""
    division_name: Optional[str] = None
    item_id: Optional[str] = None
    item_type_id: Optional[str] = None
    item_type_label: str = ""
    item_name: str = ""
    description: str = ""
    sequence: str = ""
    sequence_id: Optional[str] = None  # set when sequence looks like a UUID reference
    location_id: Optional[str] = None
    location_display: str = ""
    quantity: float = 0.0
    unit_price: float = 0.0


class CommitmentBucket(BaseModel):
    """Aggregated purchase-order quantity for one identity."""
    quantity: float = 0.0
    vendor_id: Optional[str] = None
