"""
Read access to projects, estimates, purchase orders and their lookups.

ProjectDataSource lists the reads the reconciliation depends on. SnapshotDataSource
serves them from a JSON snapshot of the backing tables.
"""

import json
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Optional, Sequence

from budget_recon.schemas.records import (
    CorporationRecord,
    EstimateLineItemRow,
    EstimateRecord,
    ItemTypeRecord,
    LocationRecord,
    ProjectRecord,
    PurchaseOrderRecord,
    VendorRecord,
)
from budget_recon.utils.logging import setup_logging
from budget_recon.config import get_config


logger = setup_logging(__name__)
config = get_config()


class DataSourceError(Exception):
    """A read against the backing store failed."""


class ProjectDataSource(ABC):
    """Read-only contracts used by the reconciliation. Implementations raise DataSourceError."""

    @abstractmethod
    async def get_project(self, project_uuid: str, corporation_uuid: str) -> Optional[ProjectRecord]:
        ...

    @abstractmethod
    async def get_corporation(self, corporation_uuid: str) -> Optional[CorporationRecord]:
        ...

    @abstractmethod
    async def list_estimates(self, project_uuid: str, corporation_uuid: str) -> List[EstimateRecord]:
        ...

    @abstractmethod
    async def list_item_types(self, project_uuid: str, corporation_uuid: str) -> List[ItemTypeRecord]:
        """Active item types of the project."""

    @abstractmethod
    async def list_locations(self) -> List[LocationRecord]:
        """Active locations. Locations are global, not scoped to a project."""

    @abstractmethod
    async def list_estimate_line_items(
        self,
        project_uuid: str,
        corporation_uuid: str,
        estimate_uuids: Sequence[str],
    ) -> List[EstimateLineItemRow]:
        """Line-item rows of the given estimates, ascending by row id."""

    @abstractmethod
    async def list_purchase_orders(
        self,
        project_uuid: str,
        corporation_uuid: str,
        statuses: Sequence[str],
        vendor_uuid: Optional[str] = None,
    ) -> List[PurchaseOrderRecord]:
        ...

    @abstractmethod
    async def list_estimate_import_purchase_orders(
        self,
        project_uuid: str,
        corporation_uuid: str,
        statuses: Sequence[str],
        exclude_po_uuid: Optional[str] = None,
    ) -> List[PurchaseOrderRecord]:
        """Active POs that import their items from an estimate."""

    @abstractmethod
    async def list_purchase_order_items(self, po_uuids: Sequence[str]) -> List[Dict[str, Any]]:
        """Raw active PO item records of the given POs."""

    @abstractmethod
    async def list_vendors(self, vendor_uuids: Sequence[str]) -> List[VendorRecord]:
        ...


def _is_true(value: Any) -> bool:
    return value is True or str(value).upper() == "TRUE"


class SnapshotDataSource(ProjectDataSource):
    """
    Serves the read contracts from an in-memory snapshot of the backing tables.

    Tables and columns:
        projects: uuid, project_name, project_id, corporation_uuid
        corporations: uuid, corporation_name
        estimates: uuid, project_uuid, corporation_uuid, status, is_active
        item_types: uuid, item_type, project_uuid, corporation_uuid, is_active
        locations: uuid, location_name, active
        estimate_line_items: id, project_uuid, corporation_uuid, estimate_uuid,
            cost_code_uuid, cost_code_number, cost_code_name, division_name, material_items
        purchase_orders: uuid, project_uuid, corporation_uuid, vendor_uuid, status,
            include_items, is_active
        purchase_order_items: uuid, purchase_order_uuid, cost_code_uuid, item_uuid,
            location_uuid, quantity, po_quantity, metadata, is_active
        vendors: uuid, vendor_name
    """

    TABLES = (
        "projects",
        "corporations",
        "estimates",
        "item_types",
        "locations",
        "estimate_line_items",
        "purchase_orders",
        "purchase_order_items",
        "vendors",
    )

    def __init__(self, tables: Dict[str, List[Dict[str, Any]]]):
        self.tables = {name: list(tables.get(name) or []) for name in self.TABLES}

    @classmethod
    def from_file(cls, path: str) -> "SnapshotDataSource":
        """Load a snapshot from a JSON file."""
        try:
            with open(path, 'r') as f:
                tables = json.load(f)
        except FileNotFoundError:
            raise DataSourceError(f"Snapshot file not found: {path}")
        except json.JSONDecodeError as e:
            raise DataSourceError(f"Snapshot file is not valid JSON: {path} ({e})")

        if not isinstance(tables, dict):
            raise DataSourceError(f"Snapshot file must hold an object of tables: {path}")

        source = cls(tables)
        logger.info(
            f"Loaded snapshot from {path}: "
            + ", ".join(f"{name}={len(rows)}" for name, rows in source.tables.items())
        )
        return source

    def _rows(self, table: str) -> Iterable[Dict[str, Any]]:
        return self.tables[table]

    async def get_project(self, project_uuid, corporation_uuid):
        for row in self._rows("projects"):
            if row.get("uuid") == project_uuid and row.get("corporation_uuid") == corporation_uuid:
                return ProjectRecord(
                    uuid=row["uuid"],
                    name=row.get("project_name"),
                    display_id=row.get("project_id"),
                    corporation_uuid=row["corporation_uuid"],
                )
        return None

    async def get_corporation(self, corporation_uuid):
        for row in self._rows("corporations"):
            if row.get("uuid") == corporation_uuid:
                return CorporationRecord(uuid=row["uuid"], name=row.get("corporation_name"))
        return None

    async def list_estimates(self, project_uuid, corporation_uuid):
        return [
            EstimateRecord(uuid=row["uuid"], status=row.get("status"), is_active=row.get("is_active"))
            for row in self._rows("estimates")
            if row.get("project_uuid") == project_uuid
            and row.get("corporation_uuid") == corporation_uuid
        ]

    async def list_item_types(self, project_uuid, corporation_uuid):
        return [
            ItemTypeRecord(uuid=row["uuid"], label=row.get("item_type"))
            for row in self._rows("item_types")
            if row.get("project_uuid") == project_uuid
            and row.get("corporation_uuid") == corporation_uuid
            and _is_true(row.get("is_active"))
        ]

    async def list_locations(self):
        return [
            LocationRecord(uuid=row["uuid"], name=row.get("location_name"))
            for row in self._rows("locations")
            if _is_true(row.get("active"))
        ]

    async def list_estimate_line_items(self, project_uuid, corporation_uuid, estimate_uuids):
        wanted = set(estimate_uuids)
        rows = [
            row for row in self._rows("estimate_line_items")
            if row.get("project_uuid") == project_uuid
            and row.get("corporation_uuid") == corporation_uuid
            and row.get("estimate_uuid") in wanted
        ]
        rows.sort(key=lambda row: row["id"])
        return [EstimateLineItemRow(**row) for row in rows]

    async def list_purchase_orders(self, project_uuid, corporation_uuid, statuses, vendor_uuid=None):
        return [
            PurchaseOrderRecord(uuid=row["uuid"], vendor_uuid=row.get("vendor_uuid"), status=row.get("status"))
            for row in self._rows("purchase_orders")
            if row.get("project_uuid") == project_uuid
            and row.get("corporation_uuid") == corporation_uuid
            and row.get("status") in statuses
            and (not vendor_uuid or row.get("vendor_uuid") == vendor_uuid)
        ]

    async def list_estimate_import_purchase_orders(
        self, project_uuid, corporation_uuid, statuses, exclude_po_uuid=None
    ):
        return [
            PurchaseOrderRecord(uuid=row["uuid"], vendor_uuid=row.get("vendor_uuid"), status=row.get("status"))
            for row in self._rows("purchase_orders")
            if row.get("project_uuid") == project_uuid
            and row.get("corporation_uuid") == corporation_uuid
            and row.get("status") in statuses
            and row.get("include_items") == config.ESTIMATE_IMPORT_MODE
            and _is_true(row.get("is_active"))
            and (not exclude_po_uuid or row.get("uuid") != exclude_po_uuid)
        ]

    async def list_purchase_order_items(self, po_uuids):
        wanted = set(po_uuids)
        return [
            dict(row) for row in self._rows("purchase_order_items")
            if row.get("purchase_order_uuid") in wanted and _is_true(row.get("is_active"))
        ]

    async def list_vendors(self, vendor_uuids):
        wanted = set(vendor_uuids)
        return [
            VendorRecord(uuid=row["uuid"], name=row.get("vendor_name"))
            for row in self._rows("vendors")
            if row.get("uuid") in wanted
        ]
