"""Tests for order totals: subtotal, tax, shipping and grand total."""

from decimal import Decimal

import pytest
from ordering.errors import InvalidLineItem
from ordering.pricing.engine import OrderTotals, compute_totals
from ordering.pricing.policy import PricingPolicy


class TestComputeTotals:
    def test_two_units_below_free_shipping_threshold(self):
        totals = compute_totals([{"unit_price": 10000, "quantity": 2}])

        assert totals == OrderTotals(subtotal=20000, tax=3600, shipping_cost=5000, total=28600, currency="INR")

    def test_single_item_above_threshold_ships_free(self):
        totals = compute_totals([{"unit_price": 60000, "quantity": 1}])

        assert totals.tax == 10800
        assert totals.shipping_cost == 0
        assert totals.total == 70800

    def test_subtotal_exactly_at_threshold_pays_shipping(self):
        totals = compute_totals([{"unit_price": 25000, "quantity": 2}])

        assert totals.subtotal == 50000
        assert totals.shipping_cost == 5000

    def test_multiple_lines_are_summed(self):
        totals = compute_totals(
            [
                {"unit_price": 1999, "quantity": 3},
                {"unit_price": 500, "quantity": 1},
            ]
        )
        assert totals.subtotal == 6497

    def test_total_is_sum_of_parts(self):
        totals = compute_totals([{"unit_price": 3333, "quantity": 7}])
        assert totals.total == totals.subtotal + totals.tax + totals.shipping_cost

    def test_tax_rounds_half_up(self):
        # 25 * 0.18 = 4.5 minor units
        totals = compute_totals([{"unit_price": 25, "quantity": 1}])
        assert totals.tax == 5

    def test_tax_rounds_down_below_half(self):
        # 13 * 0.18 = 2.34 minor units
        totals = compute_totals([{"unit_price": 13, "quantity": 1}])
        assert totals.tax == 2

    def test_accepts_objects_with_attributes(self):
        class Line:
            unit_price = 10000
            quantity = 1

        assert compute_totals([Line()]).subtotal == 10000

    def test_free_item_is_allowed(self):
        totals = compute_totals([{"unit_price": 0, "quantity": 1}])
        assert totals.subtotal == 0
        assert totals.tax == 0

    def test_custom_policy(self):
        policy = PricingPolicy(
            tax_rate=Decimal("0.05"),
            free_shipping_threshold=1000,
            shipping_fee=99,
            currency="USD",
        )
        totals = compute_totals([{"unit_price": 800, "quantity": 1}], policy)

        assert totals == OrderTotals(subtotal=800, tax=40, shipping_cost=99, total=939, currency="USD")


class TestComputeTotalsRejectsMalformedItems:
    @pytest.mark.parametrize("quantity", [0, -1, 1.5, "2", None, True])
    def test_bad_quantity(self, quantity):
        with pytest.raises(InvalidLineItem) as exc:
            compute_totals([{"unit_price": 100, "quantity": quantity}])
        assert "items[0].quantity" in exc.value.messages

    @pytest.mark.parametrize("unit_price", [-1, 10.5, None])
    def test_bad_unit_price(self, unit_price):
        with pytest.raises(InvalidLineItem) as exc:
            compute_totals([{"unit_price": unit_price, "quantity": 1}])
        assert "items[0].unit_price" in exc.value.messages

    def test_reports_position_of_offending_item(self):
        with pytest.raises(InvalidLineItem) as exc:
            compute_totals(
                [
                    {"unit_price": 100, "quantity": 1},
                    {"unit_price": 100, "quantity": 0},
                ]
            )
        assert "items[1].quantity" in exc.value.messages
