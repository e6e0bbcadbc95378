"""
Tests for status derivation and row reconciliation.
"""

import pytest

from budget_recon.schemas.line_item import CommitmentBucket, LineItem
from budget_recon.schemas.output import ItemStatus
from budget_recon.schemas.records import CorporationRecord, ProjectRecord
from budget_recon.stages.identity import ItemKey
from budget_recon.stages.reconciler import (
    derive_status,
    format_corporation_name,
    format_project_label,
    reconcile_rows,
)


KEY_ROOF = ItemKey("CC1", "I1", "", "Roof")
KEY_YARD = ItemKey("CC1", "I2", "", "Yard")


@pytest.fixture
def budget_buckets():
    return {
        KEY_ROOF: LineItem(
            cost_code_id="CC1", cost_code_label="01-100 General", item_id="I1",
            item_name="Rebar", location_display="Roof", quantity=10,
        ),
        KEY_YARD: LineItem(
            cost_code_id="CC1", cost_code_label="01-100 General", item_id="I2",
            item_name="Gravel", location_display="Yard", quantity=5,
        ),
    }


def _reconcile(budget_buckets, commitments, vendor_names=None, location_filter=None):
    return reconcile_rows(
        budget_buckets,
        commitments,
        vendor_names or {},
        corporation_name="Acme Builders",
        project_label="Harbor Tower #P-1001",
        location_filter=location_filter,
    )


class TestDeriveStatus:

    @pytest.mark.parametrize("budget_qty,po_qty,expected", [
        (10, 0, ItemStatus.PENDING),
        (10, 4, ItemStatus.PARTIAL),
        (10, 9.999, ItemStatus.PARTIAL),
        (10, 10, ItemStatus.COMPLETE),
        (10, 15, ItemStatus.COMPLETE),
        (0, 0, ItemStatus.PENDING),
        (0, 3, ItemStatus.PENDING),
    ])
    def test_thresholds(self, budget_qty, po_qty, expected):
        assert derive_status(budget_qty, po_qty) == expected

    def test_status_values(self):
        assert [s.value for s in ItemStatus] == ["Pending", "Partial", "Complete"]


class TestReconcileRows:

    def test_rows_joined_by_identity(self, budget_buckets):
        commitments = {KEY_ROOF: CommitmentBucket(quantity=4, vendor_id="V1")}
        rows = _reconcile(budget_buckets, commitments, {"V1": "Ready Mix Co"})

        roof, yard = rows
        assert (roof.budget_qty, roof.po_qty, roof.pending_qty, roof.status) == (10, 4, 6, ItemStatus.PARTIAL)
        assert roof.vendor_name == "Ready Mix Co"
        assert (yard.budget_qty, yard.po_qty, yard.pending_qty, yard.status) == (5, 0, 5, ItemStatus.PENDING)
        assert yard.vendor_name == "N/A"

    def test_pending_never_negative(self, budget_buckets):
        commitments = {KEY_ROOF: CommitmentBucket(quantity=15)}
        roof = _reconcile(budget_buckets, commitments)[0]
        assert roof.pending_qty == 0
        assert roof.status == ItemStatus.COMPLETE

    def test_commitment_only_identities_are_dropped(self, budget_buckets):
        commitments = {ItemKey("CC9", "I9", "", ""): CommitmentBucket(quantity=100, vendor_id="V1")}
        rows = _reconcile(budget_buckets, commitments)
        assert len(rows) == 2
        assert all(row.po_qty == 0 for row in rows)

    def test_no_purchase_orders_short_circuit(self, budget_buckets):
        rows = _reconcile(budget_buckets, None, {"V1": "Ready Mix Co"})
        for row in rows:
            assert row.po_qty == 0
            assert row.pending_qty == row.budget_qty
            assert row.status == ItemStatus.PENDING
            assert row.vendor_name == "N/A"

    def test_unknown_vendor_is_not_available(self, budget_buckets):
        commitments = {KEY_ROOF: CommitmentBucket(quantity=1, vendor_id="V404")}
        assert _reconcile(budget_buckets, commitments)[0].vendor_name == "N/A"

    def test_requested_vendor_names_every_row(self, budget_buckets):
        commitments = {KEY_ROOF: CommitmentBucket(quantity=4, vendor_id="V1")}
        vendor_names = {"V1": "Ready Mix Co", "V2": "Steel Supply"}

        rows = reconcile_rows(
            budget_buckets, commitments, vendor_names,
            corporation_name="Acme Builders", project_label="Harbor Tower #P-1001",
            vendor_filter="V2",
        )

        assert [row.vendor_name for row in rows] == ["Steel Supply", "Steel Supply"]

    def test_unresolved_requested_vendor_falls_back_to_commitment(self, budget_buckets):
        commitments = {KEY_ROOF: CommitmentBucket(quantity=4, vendor_id="V1")}

        rows = reconcile_rows(
            budget_buckets, commitments, {"V1": "Ready Mix Co"},
            corporation_name="Acme Builders", project_label="Harbor Tower #P-1001",
            vendor_filter="V404",
        )

        assert [row.vendor_name for row in rows] == ["Ready Mix Co", "N/A"]

    def test_requested_vendor_ignored_without_purchase_orders(self, budget_buckets):
        rows = reconcile_rows(
            budget_buckets, None, {"V1": "Ready Mix Co"},
            corporation_name="Acme Builders", project_label="Harbor Tower #P-1001",
            vendor_filter="V1",
        )

        assert all(row.vendor_name == "N/A" for row in rows)

    def test_display_fields(self, budget_buckets):
        row = _reconcile(budget_buckets, {})[0]
        assert row.corporation_name == "Acme Builders"
        assert row.project_label == "Harbor Tower #P-1001"
        assert row.cost_code_label == "01-100 General"
        assert row.item_name == "Rebar"
        assert row.location == "Roof"

    def test_empty_cost_code_label_is_not_available(self):
        buckets = {ItemKey("", "I1", "", ""): LineItem(item_id="I1", quantity=1)}
        assert _reconcile(buckets, {})[0].cost_code_label == "N/A"

    def test_location_filter_is_case_insensitive(self, budget_buckets):
        rows = _reconcile(budget_buckets, {}, location_filter="rOOf")
        assert [row.location for row in rows] == ["Roof"]

    def test_location_filter_only_removes_rows(self, budget_buckets):
        commitments = {
            KEY_ROOF: CommitmentBucket(quantity=4, vendor_id="V1"),
            KEY_YARD: CommitmentBucket(quantity=5, vendor_id="V1"),
        }
        unfiltered = _reconcile(budget_buckets, commitments, {"V1": "Ready Mix Co"})
        filtered = _reconcile(budget_buckets, commitments, {"V1": "Ready Mix Co"}, location_filter="yard")
        assert filtered == [row for row in unfiltered if row.location == "Yard"]

    def test_location_filter_without_match(self, budget_buckets):
        assert _reconcile(budget_buckets, None, location_filter="Basement") == []


class TestDisplayLabels:

    def test_project_label_with_display_id(self):
        project = ProjectRecord(uuid="P", name="Harbor Tower", display_id=1001, corporation_uuid="C")
        assert format_project_label(project) == "Harbor Tower #1001"

    def test_project_label_without_display_id(self):
        project = ProjectRecord(uuid="P", name="Harbor Tower", corporation_uuid="C")
        assert format_project_label(project) == "N/A"
        assert format_project_label(project.model_copy(update={"display_id": ""})) == "N/A"

    def test_project_label_without_name(self):
        assert format_project_label(ProjectRecord(uuid="P", display_id="7", corporation_uuid="C")) == "N/A"
        assert format_project_label(None) == "N/A"

    def test_corporation_name(self):
        assert format_corporation_name(CorporationRecord(uuid="C", name="Acme")) == "Acme"
        assert format_corporation_name(CorporationRecord(uuid="C")) == "N/A"
        assert format_corporation_name(None) == "N/A"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
