"""Tests for WarehouseDirectory and point-of-sale resolution."""

import pytest

from stock_kernel.domain.records import Warehouse, WarehouseType
from stock_kernel.exceptions import (
    InvalidNameError,
    InvalidWarehouseError,
    NoPointOfSaleWarehouseError,
    NotPointOfSaleError,
    WarehouseNotFoundError,
)
from stock_services.warehouse_directory import WarehouseDirectory, coerce_warehouse_type


class TestCoerceWarehouseType:

    @pytest.mark.parametrize(
        "value, expected",
        [
            ("hub", WarehouseType.HUB),
            ("HUB", WarehouseType.HUB),
            ("point_of_sale", WarehouseType.POINT_OF_SALE),
            ("pos", WarehouseType.POINT_OF_SALE),
            (WarehouseType.HUB, WarehouseType.HUB),
        ],
    )
    def test_known(self, value, expected):
        assert coerce_warehouse_type(value) is expected

    def test_unknown(self):
        with pytest.raises(InvalidWarehouseError) as exc_info:
            coerce_warehouse_type("depot")
        assert exc_info.value.value == "depot"


class TestWarehouseDirectory:

    def test_add_assigns_sequential_ids(self):
        directory = WarehouseDirectory()
        assert directory.add("A").id == 1
        assert directory.add("B", "pos").id == 2
        assert directory.get(2).type is WarehouseType.POINT_OF_SALE

    def test_default_type_is_hub(self):
        assert WarehouseDirectory().add("A").type is WarehouseType.HUB

    def test_invalid_input_burns_no_id(self):
        directory = WarehouseDirectory()
        with pytest.raises(InvalidNameError):
            directory.add("  ")
        with pytest.raises(InvalidWarehouseError):
            directory.add("A", "depot")
        assert directory.add("A").id == 1

    def test_edit_keeps_id(self):
        directory = WarehouseDirectory()
        w = directory.add("Old")
        edited = directory.edit(w.id, name="New", type="point_of_sale")
        assert edited == Warehouse(w.id, "New", WarehouseType.POINT_OF_SALE)
        assert directory.list() == (edited,)

    def test_edit_unknown(self):
        with pytest.raises(WarehouseNotFoundError):
            WarehouseDirectory().edit(1, name="x")

    def test_seeded_from_existing(self):
        directory = WarehouseDirectory([Warehouse(7, "Old", WarehouseType.HUB)])
        assert directory.exists(7)
        assert directory.add("New").id == 8


class TestPointOfSale:

    @pytest.fixture
    def directory(self):
        directory = WarehouseDirectory()
        directory.add("Hub", "hub")
        directory.add("Counter A", "pos")
        directory.add("Counter B", "pos")
        return directory

    def test_lowest_id_fallback(self, directory):
        assert directory.point_of_sale().id == 2

    def test_explicit(self, directory):
        assert directory.point_of_sale(3).id == 3

    def test_configured_default(self, directory):
        directory.default_point_of_sale = 3
        assert directory.point_of_sale().id == 3

    def test_explicit_beats_default(self, directory):
        directory.default_point_of_sale = 3
        assert directory.point_of_sale(2).id == 2

    def test_hub_rejected(self, directory):
        with pytest.raises(NotPointOfSaleError):
            directory.point_of_sale(1)

    def test_configured_default_must_be_point_of_sale(self, directory):
        directory.default_point_of_sale = 1
        with pytest.raises(NotPointOfSaleError):
            directory.point_of_sale()

    def test_none_available(self):
        directory = WarehouseDirectory()
        directory.add("Hub")
        with pytest.raises(NoPointOfSaleWarehouseError):
            directory.point_of_sale()
