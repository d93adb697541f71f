"""Tests for the order pricing engine."""

import itertools

import pytest

from errors import ContractViolation
from models import CatalogItem, DiscountLine, OrderTotals, PromoCode, PromoKind, ResolvedLine
from pricing import compute_discount, compute_totals


def _line(price_cents: int, quantity: int = 1, pid: str = "P1") -> ResolvedLine:
    return ResolvedLine(
        item=CatalogItem(product_id=pid, name=pid, unit_price_cents=price_cents),
        quantity=quantity,
    )


def _pct(code: str, value) -> PromoCode:
    return PromoCode(code=code, kind=PromoKind.PERCENTAGE, value=value)


def _fixed(code: str, value) -> PromoCode:
    return PromoCode(code=code, kind=PromoKind.FIXED, value=value)


class TestSubtotalAndShipping:
    def test_subtotal_sums_lines(self):
        totals = compute_totals([_line(1999, 2), _line(500, 3, "P2")], 1000, [])
        assert totals.subtotal_cents == 1999 * 2 + 500 * 3
        assert totals.shipping_cents == 1000
        assert totals.total_cents == 5498 + 1000

    def test_empty_cart_has_no_shipping(self):
        totals = compute_totals([], 1000, [_fixed("TEN", 1000)])
        assert totals.subtotal_cents == 0
        assert totals.shipping_cents == 0
        assert totals.discount_cents == 0
        assert totals.total_cents == 0

    def test_free_items_have_no_shipping(self):
        totals = compute_totals([_line(0, 4)], 750, [])
        assert totals.shipping_cents == 0
        assert totals.total_cents == 0


class TestDiscounts:
    def test_discounts_do_not_compound(self):
        totals = compute_totals([_line(10000)], 0, [_pct("SAVE20", 20), _fixed("FIFTEEN", 1500)])
        assert [d.amount_cents for d in totals.discounts] == [2000, 1500]
        assert totals.discount_cents == 3500
        assert totals.total_cents == 6500

    def test_order_of_codes_does_not_matter(self):
        promos = [_pct("A", 20), _fixed("B", 1500), _pct("C", 7.5)]
        forward = compute_totals([_line(10000)], 0, promos)
        backward = compute_totals([_line(10000)], 0, list(reversed(promos)))
        assert forward.discount_cents == backward.discount_cents

    def test_fixed_codes_clamped_in_aggregate(self):
        promos = [_fixed("A", 4000), _fixed("B", 4000), _fixed("C", 4000)]
        totals = compute_totals([_line(10000)], 1000, promos)
        assert [d.amount_cents for d in totals.discounts] == [4000, 4000, 4000]
        assert totals.discount_cents == 10000
        assert totals.total_cents == 1000

    def test_single_fixed_code_capped_at_subtotal(self):
        assert compute_discount(2500, _fixed("BIG", 9000)) == 2500

    def test_percentage_rounds_half_up(self):
        # 10% of 1005 = 100.5
        assert compute_discount(1005, _pct("TEN", 10)) == 101
        # 10% of 1004 = 100.4
        assert compute_discount(1004, _pct("TEN", 10)) == 100

    def test_fractional_percentage_uses_exact_decimal(self):
        # 12.5% of 1001 = 125.125; 0.1 + 0.2 style float noise must not matter
        assert compute_discount(1001, _pct("ODD", 12.5)) == 125
        assert compute_discount(3333, _pct("THIRD", 33.3)) == 1110

    def test_percentage_over_hundred_capped_at_subtotal(self):
        totals = compute_totals([_line(800)], 300, [_pct("ALL", 150)])
        assert totals.discounts[0].amount_cents == 800
        assert totals.discount_cents == 800
        assert totals.total_cents == 300

    def test_huge_fixed_value_capped_at_subtotal(self):
        totals = compute_totals([_line(10000)], 0, [_fixed("HUGE", 10**30)])
        assert totals.discounts[0].amount_cents == 10000
        assert totals.discount_cents == 10000
        assert totals.total_cents == 0

    def test_huge_percentage_capped_at_subtotal(self):
        totals = compute_totals([_line(10000)], 500, [_pct("HUGE", 1e30), _fixed("FIVE", 500)])
        assert [d.amount_cents for d in totals.discounts] == [10000, 500]
        assert totals.discount_cents == 10000
        assert totals.total_cents == 500

    def test_zero_value_promo_applies_nothing(self):
        totals = compute_totals([_line(800)], 0, [_pct("NONE", 0), _fixed("ZERO", 0)])
        assert totals.discount_cents == 0
        assert len(totals.discounts) == 2

    def test_discount_lines_carry_promo_details(self):
        totals = compute_totals([_line(4000)], 0, [_pct("SAVE20", 20)])
        assert totals.discounts == (
            DiscountLine(code="SAVE20", amount_cents=800, kind=PromoKind.PERCENTAGE, value=20),
        )


class TestInvariants:
    @pytest.mark.parametrize("subtotal", [0, 1, 99, 1000, 10000, 123457])
    def test_discount_within_bounds_and_total_consistent(self, subtotal):
        pool = [_pct("P10", 10), _pct("P55", 55.5), _pct("P100", 100), _fixed("F1", 1),
                _fixed("F500", 500), _fixed("F99999", 99999)]
        for size in range(len(pool) + 1):
            for promos in itertools.combinations(pool, size):
                totals = compute_totals([_line(subtotal)], 695, list(promos))
                assert 0 <= totals.discount_cents <= totals.subtotal_cents
                assert totals.total_cents == (
                    totals.subtotal_cents - totals.discount_cents + totals.shipping_cents
                )
                assert totals.total_cents >= 0

    def test_deterministic(self):
        lines = [_line(1999, 3), _line(4550, 1, "P2")]
        promos = [_pct("SAVE20", 20), _fixed("FIFTEEN", 1500)]
        first = compute_totals(lines, 1000, promos)
        second = compute_totals(lines, 1000, promos)
        assert first == second
        assert repr(first) == repr(second)

    def test_totals_reject_discount_above_subtotal(self):
        with pytest.raises(ValueError, match="discount_cents"):
            OrderTotals(subtotal_cents=100, discount_cents=101, shipping_cents=0)

    def test_totals_derive_total(self):
        totals = OrderTotals(
            subtotal_cents=1000,
            discount_cents=200,
            shipping_cents=50,
            discounts=(DiscountLine("X", 200, PromoKind.FIXED, 200),),
        )
        assert totals.total_cents == 850


class TestContractViolations:
    def test_negative_price(self):
        with pytest.raises(ContractViolation, match="negative unit price"):
            compute_totals([_line(-1)], 0, [])

    def test_negative_quantity(self):
        with pytest.raises(ContractViolation, match="negative quantity"):
            compute_totals([_line(100, -2)], 0, [])

    def test_negative_promo_value(self):
        with pytest.raises(ContractViolation, match="negative value"):
            compute_totals([_line(100)], 0, [_fixed("NEG", -5)])

    def test_negative_shipping_rate(self):
        with pytest.raises(ContractViolation, match="shipping"):
            compute_totals([_line(100)], -1, [])

    @pytest.mark.parametrize("value", [float("inf"), float("nan")])
    def test_non_finite_promo_value(self, value):
        with pytest.raises(ContractViolation, match="non-finite"):
            compute_totals([_line(100)], 0, [_pct("BAD", value)])
