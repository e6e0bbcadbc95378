"""
Upstream record schemas.
Represents the rows the data source hands back for projects, estimates and POs.
"""

from typing import Optional, List, Any
from pydantic import BaseModel, Field, field_validator


class ProjectRecord(BaseModel):
    """A project scoped to a corporation."""
    uuid: str
    name: Optional[str] = None
    display_id: Optional[str] = None
    corporation_uuid: str

    @field_validator("display_id", mode="before")
    @classmethod
    def _display_id_as_text(cls, value: Any) -> Optional[str]:
        return None if value is None else str(value)


class CorporationRecord(BaseModel):
    """A corporation (tenant)."""
    uuid: str
    name: Optional[str] = None


class EstimateRecord(BaseModel):
    """An estimate header. is_active is loosely typed upstream (bool or string)."""
    uuid: str
    status: Optional[str] = None
    is_active: Any = None


class ItemTypeRecord(BaseModel):
    """An item type used to classify catalog items."""
    uuid: str
    label: Optional[str] = None


class LocationRecord(BaseModel):
    """A named location."""
    uuid: str
    name: Optional[str] = None


class EstimateLineItemRow(BaseModel):
    """
    A cost-code row of an estimate.

    material_items holds the raw item payloads whose field names drifted over time.
    """
    id: int
    estimate_uuid: Optional[str] = None
    cost_code_uuid: Optional[str] = None
    cost_code_number: Optional[str] = None
    cost_code_name: Optional[str] = None
    division_name: Optional[str] = None
    material_items: List[Any] = Field(default_factory=list)

    @field_validator("material_items", mode="before")
    @classmethod
    def _coerce_items(cls, value: Any) -> List[Any]:
        return value if isinstance(value, list) else []

    @field_validator("cost_code_number", "cost_code_name", "division_name", mode="before")
    @classmethod
    def _labels_as_text(cls, value: Any) -> Optional[str]:
        return None if value is None else str(value)


class PurchaseOrderRecord(BaseModel):
    """A purchase order header."""
    uuid: str
    vendor_uuid: Optional[str] = None
    status: Optional[str] = None


class VendorRecord(BaseModel):
    """A vendor."""
    uuid: str
    name: Optional[str] = None
