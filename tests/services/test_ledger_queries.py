"""
Tests for StockLedger read operations: expiry query, accessors, snapshot.

Verifies:
- expiring_within uses an inclusive now + days horizon and skips drained batches
- Filters on batches(), totals and the stock summary
- snapshot()/from_state() resume every id counter
"""

from datetime import timedelta

import pytest

from stock_kernel.exceptions import BatchNotFoundError, InvalidQuantityError
from stock_services.stock_ledger import LedgerState, StockLedger
from tests.conftest import NOW


class TestExpiringWithin:

    def test_boundary_is_inclusive(self, ledger, hub_id):
        on_edge = ledger.import_stock(1, "Aspirin", hub_id, 1, "1", NOW + timedelta(days=30))
        past_edge = ledger.import_stock(1, "Aspirin", hub_id, 1, "1", NOW + timedelta(days=30, seconds=1))

        ids = [b.id for b in ledger.expiring_within(30)]
        assert on_edge in ids
        assert past_edge not in ids

    def test_already_expired_included(self, import_batch, ledger):
        expired = import_batch(expiry_days=-3)
        assert [b.id for b in ledger.expiring_within(0)] == [expired]

    def test_drained_batches_excluded(self, ledger, import_batch, pos_id):
        source_id = import_batch(quantity=5, expiry_days=10)
        moved = ledger.transfer(source_id, pos_id, 5)
        assert [b.id for b in ledger.expiring_within(30)] == [moved]

    def test_all_warehouses_sorted_by_expiry_then_id(self, ledger, import_batch, pos_id):
        late = import_batch(expiry_days=20)
        early_pos = import_batch(expiry_days=5, warehouse_id=pos_id)
        tie = import_batch(expiry_days=20, medicine_id=2)
        import_batch(expiry_days=400)

        assert [b.id for b in ledger.expiring_within(60)] == [early_pos, late, tie]

    def test_horizon_follows_clock(self, ledger, import_batch, deterministic_clock):
        batch_id = import_batch(expiry_days=100)
        assert ledger.expiring_within(90) == ()
        deterministic_clock.advance_days(10)
        assert [b.id for b in ledger.expiring_within(90)] == [batch_id]

    @pytest.mark.parametrize("days", [-1, 1.5, "30", True])
    def test_invalid_days(self, ledger, days):
        with pytest.raises(InvalidQuantityError):
            ledger.expiring_within(days)


class TestAccessors:

    def test_get_batch_unknown(self, ledger):
        with pytest.raises(BatchNotFoundError):
            ledger.get_batch(1)

    def test_batch_filters(self, ledger, import_batch, pos_id):
        a = import_batch(medicine_id=1)
        b = import_batch(medicine_id=2)
        c = ledger.transfer(a, pos_id, 100)

        assert [x.id for x in ledger.batches()] == [a, b, c]
        assert [x.id for x in ledger.batches(warehouse_id=pos_id)] == [c]
        assert [x.id for x in ledger.batches(medicine_id=2)] == [b]
        assert [x.id for x in ledger.batches(include_depleted=False)] == [b, c]

    def test_total_quantity(self, ledger, import_batch, pos_id, hub_id):
        a = import_batch(quantity=30)
        import_batch(quantity=20)
        ledger.transfer(a, pos_id, 12)
        assert ledger.total_quantity(1) == 50
        assert ledger.total_quantity(1, pos_id) == 12
        assert ledger.total_quantity(1, hub_id) == 38
        assert ledger.total_quantity(42) == 0

    def test_stock_summary(self, ledger, import_batch, pos_id, hub_id):
        a = import_batch(quantity=30)
        import_batch(quantity=5, medicine_id=2)
        ledger.transfer(a, pos_id, 30)
        assert ledger.stock_summary() == {(1, pos_id): 30, (2, hub_id): 5}

    def test_accessors_return_tuples(self, ledger):
        assert isinstance(ledger.batches(), tuple)
        assert isinstance(ledger.import_log(), tuple)
        assert isinstance(ledger.warehouses(), tuple)


class TestSnapshot:

    def test_empty_state(self, empty_ledger):
        assert empty_ledger.snapshot().is_empty
        assert LedgerState().is_empty

    def test_snapshot_is_frozen_copy(self, ledger, import_batch):
        import_batch()
        snap = ledger.snapshot()
        import_batch()
        assert len(snap.batches) == 1
        assert len(ledger.snapshot().batches) == 2

    def test_from_state_resumes_counters(self, ledger, import_batch, pos_id, deterministic_clock):
        a = import_batch(quantity=20)
        ledger.transfer(a, pos_id, 10)
        ledger.sell(1, 3)
        ledger.add_medicine("Aspirin")
        ledger.add_supplier("Acme Pharma")

        restored = StockLedger.from_state(ledger.snapshot(), clock=deterministic_clock)

        assert restored.snapshot() == ledger.snapshot()
        assert restored.import_stock(1, "x", 1, 1, "1", "2026-01-01") == 3
        assert restored.add_warehouse("Annex").id == 4
        assert restored.add_medicine("Ibuprofen").id == 2
        assert restored.add_supplier("Other").id == 2
        assert restored.import_log()[-1].id == 2
        assert restored.sell(1, 1).id == 2
        assert restored.transfer(a, pos_id, 1) == 4
        assert restored.transfer_log()[-1].id == 2

    def test_from_state_seeds_from_max_not_count(self, deterministic_clock, ledger, import_batch):
        for _ in range(3):
            import_batch()
        snap = ledger.snapshot()
        sparse = LedgerState(warehouses=snap.warehouses, batches=(snap.batches[2],))
        restored = StockLedger.from_state(sparse, clock=deterministic_clock)
        assert restored.import_stock(1, "x", 1, 1, "1", "2026-01-01") == 4


class TestMasterDataPassthroughs:

    def test_warehouse_edit(self, ledger, hub_id):
        updated = ledger.edit_warehouse(hub_id, name="North Hub")
        assert ledger.get_warehouse(hub_id) == updated
        assert ledger.warehouse_exists(hub_id)
        assert not ledger.warehouse_exists(99)

    def test_medicine_lifecycle(self, ledger):
        med = ledger.add_medicine("Aspirin")
        ledger.rename_medicine(med.id, "Aspirin 100mg")
        assert ledger.get_medicine(med.id).name == "Aspirin 100mg"
        ledger.delete_medicine(med.id)
        assert ledger.medicines() == ()

    def test_catalog_changes_do_not_touch_batches(self, ledger, hub_id):
        med = ledger.add_medicine("Aspirin")
        batch_id = ledger.import_stock(med.id, med.name, hub_id, 5, "1", "2026-01-01")
        ledger.rename_medicine(med.id, "Acetylsalicylic acid")
        ledger.delete_medicine(med.id)
        assert ledger.get_batch(batch_id).medicine_name == "Aspirin"
        assert ledger.import_log()[0].medicine_name == "Aspirin"
