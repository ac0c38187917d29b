"""
Unit tests for price snapshots and stock checks
"""
from decimal import Decimal

import pytest

from flowershop.domain.errors import InsufficientStock, OrderRejected, ProductUnavailable
from flowershop.domain.pricing import CatalogProduct, money, price_items
from flowershop.domain.schemas import OrderItemIn

ROSES = CatalogProduct(id=1, name="Rosas", price=Decimal("45.00"), stock=20)
TULIPS = CatalogProduct(id=7, name="Tulipanes", price=Decimal("25.99"), stock=10)
ORCHID = CatalogProduct(id=3, name="Orquídea", price=Decimal("58.00"), stock=1)
WREATH = CatalogProduct(id=9, name="Corona", price=Decimal("120.00"), stock=4, active=False)


def lines(*pairs):
    return [OrderItemIn(product_id=p, quantity=q) for p, q in pairs]


class TestPriceItems:
    def test_snapshot_and_total(self):
        priced = price_items(lines((7, 2)), [TULIPS])

        assert len(priced.items) == 1
        item = priced.items[0]
        assert item.unit_price == Decimal("25.99")
        assert item.subtotal == Decimal("51.98")
        assert item.product_name == "Tulipanes"
        assert priced.total_amount == Decimal("51.98")

    def test_total_equals_sum_of_subtotals(self):
        cheap = CatalogProduct(id=5, name="Tarjeta", price=Decimal("0.10"), stock=100)
        odd = CatalogProduct(id=6, name="Lazo", price=Decimal("19.99"), stock=100)
        priced = price_items(lines((5, 3), (6, 7), (1, 1), (7, 9)), [cheap, odd, ROSES, TULIPS])

        assert priced.total_amount == sum(i.subtotal for i in priced.items)
        assert priced.total_amount == Decimal("0.30") + Decimal("139.93") + Decimal("45.00") + Decimal("233.91")

    def test_keeps_line_order(self):
        priced = price_items(lines((7, 1), (1, 2)), [ROSES, TULIPS])
        assert [i.product_id for i in priced.items] == [7, 1]

    def test_insufficient_stock(self):
        with pytest.raises(OrderRejected) as exc:
            price_items(lines((3, 3)), [ORCHID])

        [error] = exc.value.errors
        assert isinstance(error, InsufficientStock)
        assert (error.product_id, error.requested, error.available) == (3, 3, 1)

    def test_exact_stock_is_allowed(self):
        priced = price_items(lines((3, 1)), [ORCHID])
        assert priced.total_amount == Decimal("58.00")

    def test_missing_and_inactive_products(self):
        with pytest.raises(OrderRejected) as exc:
            price_items(lines((42, 1), (9, 1)), [WREATH])

        assert [type(e) for e in exc.value.errors] == [ProductUnavailable, ProductUnavailable]
        assert [e.product_id for e in exc.value.errors] == [42, 9]

    def test_errors_are_collected_not_fail_fast(self):
        with pytest.raises(OrderRejected) as exc:
            price_items(lines((3, 2), (7, 11), (1, 1), (42, 1)), [ORCHID, TULIPS, ROSES])

        codes = [e.code for e in exc.value.errors]
        assert codes == ["insufficient_stock", "insufficient_stock", "product_unavailable"]
        report = exc.value.to_dict()
        assert report["code"] == "order_rejected"
        assert report["errors"][1] == {
            "code": "insufficient_stock",
            "message": exc.value.errors[1].message,
            "product_id": 7,
            "requested": 11,
            "available": 10,
        }

    def test_repeated_lines_share_stock(self):
        with pytest.raises(OrderRejected) as exc:
            price_items(lines((7, 6), (7, 5)), [TULIPS])

        [error] = exc.value.errors
        assert error.requested == 11
        assert error.available == 10


class TestMoney:
    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("0.125", "0.12"),
            ("0.135", "0.14"),
            ("2.675", "2.68"),
            ("10", "10.00"),
            (25.99, "25.99"),
        ],
    )
    def test_round_half_even(self, raw, expected):
        assert money(raw) == Decimal(expected)
