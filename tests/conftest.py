"""
Shared fixtures: a small snapshot of the backing tables for one project.
"""

import os

os.environ.setdefault("ENV", "test")

import copy

import pytest


PROJECT_UUID = "11111111-1111-4111-8111-111111111111"
CORPORATION_UUID = "22222222-2222-4222-8222-222222222222"
LOCATION_UUID = "33333333-3333-4333-8333-333333333333"
VENDOR_A = "aaaaaaaa-aaaa-4aaa-8aaa-aaaaaaaaaaaa"
VENDOR_B = "bbbbbbbb-bbbb-4bbb-8bbb-bbbbbbbbbbbb"


def make_estimate(uuid, status="Approved", is_active=True):
    return {
        "uuid": uuid,
        "project_uuid": PROJECT_UUID,
        "corporation_uuid": CORPORATION_UUID,
        "status": status,
        "is_active": is_active,
    }


def make_line_item_row(row_id, estimate_uuid, material_items, cost_code_uuid="CC1"):
    return {
        "id": row_id,
        "project_uuid": PROJECT_UUID,
        "corporation_uuid": CORPORATION_UUID,
        "estimate_uuid": estimate_uuid,
        "cost_code_uuid": cost_code_uuid,
        "cost_code_number": "01-100",
        "cost_code_name": "General Conditions",
        "division_name": "Division 01",
        "material_items": material_items,
    }


def make_purchase_order(uuid, vendor_uuid=VENDOR_A, status="Approved", **extra):
    row = {
        "uuid": uuid,
        "project_uuid": PROJECT_UUID,
        "corporation_uuid": CORPORATION_UUID,
        "vendor_uuid": vendor_uuid,
        "status": status,
        "include_items": "IMPORT_ITEMS_FROM_ESTIMATE",
        "is_active": True,
    }
    row.update(extra)
    return row


def make_po_item(po_uuid, po_quantity, item_uuid="I1", cost_code_uuid="CC1", **extra):
    row = {
        "uuid": f"row-{po_uuid}-{item_uuid}",
        "purchase_order_uuid": po_uuid,
        "cost_code_uuid": cost_code_uuid,
        "item_uuid": item_uuid,
        "location_uuid": None,
        "quantity": None,
        "po_quantity": po_quantity,
        "metadata": {},
        "is_active": True,
    }
    row.update(extra)
    return row


BASE_TABLES = {
    "projects": [
        {
            "uuid": PROJECT_UUID,
            "project_name": "Harbor Tower",
            "project_id": "P-1001",
            "corporation_uuid": CORPORATION_UUID,
        }
    ],
    "corporations": [{"uuid": CORPORATION_UUID, "corporation_name": "Acme Builders"}],
    "estimates": [make_estimate("E1")],
    "item_types": [
        {
            "uuid": "T1",
            "item_type": "Material",
            "project_uuid": PROJECT_UUID,
            "corporation_uuid": CORPORATION_UUID,
            "is_active": True,
        }
    ],
    "locations": [{"uuid": LOCATION_UUID, "location_name": "Level 1", "active": True}],
    "estimate_line_items": [
        make_line_item_row(1, "E1", [{"item_uuid": "I1", "name": "Rebar #5", "qty": 10}]),
    ],
    "purchase_orders": [],
    "purchase_order_items": [],
    "vendors": [
        {"uuid": VENDOR_A, "vendor_name": "Ready Mix Co"},
        {"uuid": VENDOR_B, "vendor_name": "Steel Supply"},
    ],
}


@pytest.fixture
def tables():
    """One approved, active estimate with {cost code CC1, item I1, qty 10}; no POs."""
    return copy.deepcopy(BASE_TABLES)
