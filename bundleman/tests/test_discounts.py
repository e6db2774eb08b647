"""Tests for combo discounts, validity and rules."""

from dataclasses import replace
from datetime import datetime, timedelta, timezone as dt_timezone
from decimal import Decimal

import pytest

from bundleman.discounts import (
    apply_combo,
    check_validity,
    combo_status,
    compute_discount,
    is_currently_valid,
    rule_violations,
    slot_breakdown,
)
from bundleman.exceptions import PricingError
from bundleman.protocols import AssignedItem, BuyXGetY, ComboItem, ComboRules, ComboTerms, DiscountType

NOW = datetime(2024, 6, 15, 12, 0, tzinfo=dt_timezone.utc)


def _terms(budget_slots, **kwargs):
    return ComboTerms(code="CMB-0010", slots=budget_slots, **kwargs)


class TestComputeDiscount:
    """Tests for compute_discount()."""

    def test_percentage(self, percentage_terms):
        assert compute_discount(25000, percentage_terms) == (5000, 20000)

    def test_percentage_capped(self, budget_slots):
        """50% of 1000.00 with a 300.00 cap discounts 300.00, not 500.00."""
        terms = _terms(budget_slots, discount_value=Decimal("50"), max_discount_q=30000)
        assert compute_discount(100000, terms) == (30000, 70000)

    def test_percentage_rounds_half_up(self, budget_slots):
        """15% of 3.33 is 0.4995, rounded to 0.50."""
        terms = _terms(budget_slots, discount_value=Decimal("15"))
        assert compute_discount(333, terms) == (50, 283)

    def test_fixed(self, budget_slots):
        terms = _terms(budget_slots, discount_type=DiscountType.FIXED, discount_value=Decimal("5000"))
        assert compute_discount(20000, terms) == (5000, 15000)

    def test_fixed_never_exceeds_amount(self, budget_slots):
        terms = _terms(budget_slots, discount_type=DiscountType.FIXED, discount_value=Decimal("5000"))
        assert compute_discount(3000, terms) == (3000, 0)

    def test_fixed_capped(self, budget_slots):
        terms = _terms(
            budget_slots,
            discount_type=DiscountType.FIXED,
            discount_value=Decimal("5000"),
            max_discount_q=2000,
        )
        assert compute_discount(20000, terms) == (2000, 18000)

    def test_buy_two_get_one_free(self, budget_slots):
        """Cheapest unit of each complete group of three is free; the leftover unit pays."""
        terms = _terms(
            budget_slots,
            discount_type=DiscountType.BUY_X_GET_Y,
            buy_x_get_y=BuyXGetY(buy_qty=2, get_qty=1),
        )
        assert compute_discount(650, terms, unit_prices_q=[100, 300, 50, 200]) == (100, 550)

    def test_buy_one_get_one_half_off(self, budget_slots):
        terms = _terms(
            budget_slots,
            discount_type=DiscountType.BUY_X_GET_Y,
            buy_x_get_y=BuyXGetY(buy_qty=1, get_qty=1, get_discount_percent=Decimal("50")),
        )
        assert compute_discount(2800, terms, unit_prices_q=[1000, 400, 800, 600]) == (600, 2200)

    def test_buy_x_get_y_ignores_discount_value(self, budget_slots):
        terms = _terms(
            budget_slots,
            discount_type=DiscountType.BUY_X_GET_Y,
            discount_value=Decimal("99"),
            buy_x_get_y=BuyXGetY(buy_qty=1, get_qty=1),
        )
        assert compute_discount(300, terms, unit_prices_q=[200, 100]) == (100, 200)

    def test_buy_x_get_y_without_parameters(self, budget_slots):
        terms = _terms(budget_slots, discount_type=DiscountType.BUY_X_GET_Y)
        with pytest.raises(PricingError) as exc:
            compute_discount(300, terms, unit_prices_q=[200, 100])
        assert exc.value.code == "INVALID_DISCOUNT_POLICY"

    def test_buy_x_get_y_without_unit_prices(self, budget_slots):
        terms = _terms(
            budget_slots,
            discount_type=DiscountType.BUY_X_GET_Y,
            buy_x_get_y=BuyXGetY(buy_qty=1, get_qty=1),
        )
        with pytest.raises(PricingError) as exc:
            compute_discount(300, terms)
        assert exc.value.code == "INVALID_DISCOUNT_POLICY"

    @pytest.mark.parametrize("buy,get", [(0, 1), (1, 0)])
    def test_buy_x_get_y_invalid_quantities(self, buy, get):
        with pytest.raises(PricingError) as exc:
            BuyXGetY(buy_qty=buy, get_qty=get)
        assert exc.value.code == "INVALID_DISCOUNT_POLICY"

    def test_unknown_discount_type(self, budget_slots):
        with pytest.raises(PricingError) as exc:
            _terms(budget_slots, discount_type="bogus")
        assert exc.value.code == "INVALID_DISCOUNT_POLICY"


class TestSlotBreakdown:
    def test_groups_in_first_seen_order(self, budget_slots):
        budget, premium = budget_slots
        rows = [
            AssignedItem(item=ComboItem("P-2", 20000), slot=premium),
            AssignedItem(item=ComboItem("B-1", 4000, quantity=2), slot=budget),
            AssignedItem(item=ComboItem("P-3", 16000), slot=premium),
        ]
        breakdown = slot_breakdown(rows)
        assert [(b.slot_name, b.item_count, b.total_value_q) for b in breakdown] == [
            ("Premium", 2, 36000),
            ("Budget", 2, 8000),
        ]


class TestValidity:
    """Tests for combo_status(), is_currently_valid() and check_validity()."""

    def test_open_ended_window(self, percentage_terms):
        assert is_currently_valid(percentage_terms, NOW)
        assert combo_status(percentage_terms, NOW) == "active"

    def test_window_bounds_inclusive(self, percentage_terms):
        terms = replace(percentage_terms, valid_from=NOW, valid_until=NOW)
        assert is_currently_valid(terms, NOW)

    @pytest.mark.parametrize(
        "changes,status,code",
        [
            ({"is_active": False}, "inactive", "COMBO_INACTIVE"),
            ({"is_paused": True}, "paused", "COMBO_INACTIVE"),
            ({"valid_from": NOW + timedelta(days=1)}, "upcoming", "COMBO_NOT_STARTED"),
            ({"valid_until": NOW - timedelta(seconds=1)}, "expired", "COMBO_EXPIRED"),
            ({"usage_limit": 5, "usage_count": 5}, "exhausted", "COMBO_USAGE_EXCEEDED"),
        ],
    )
    def test_invalid_states(self, percentage_terms, changes, status, code):
        terms = replace(percentage_terms, **changes)
        assert combo_status(terms, NOW) == status
        assert not is_currently_valid(terms, NOW)
        with pytest.raises(PricingError) as exc:
            check_validity(terms, NOW)
        assert exc.value.code == code

    def test_usage_below_limit(self, percentage_terms):
        terms = replace(percentage_terms, usage_limit=5, usage_count=4)
        assert is_currently_valid(terms, NOW)


class TestRules:
    """Tests for rule_violations()."""

    def test_collects_all_violations(self, duo_terms):
        budget = duo_terms.slots[0]
        reasons = rule_violations(duo_terms, [AssignedItem(item=ComboItem("B-1", 5000), slot=budget)])
        assert len(reasons) == 2
        assert "At least 2 items" in reasons[0]
        assert "Premium" in reasons[1]

    def test_duplicates(self, budget_slots):
        terms = _terms(budget_slots)
        budget = budget_slots[0]
        rows = [
            AssignedItem(item=ComboItem("B-1", 5000), slot=budget),
            AssignedItem(item=ComboItem("B-1", 5000), slot=budget),
        ]
        assert rule_violations(terms, rows) == ["Product B-1 appears more than once"]
        allowed = replace(terms, rules=ComboRules(allow_duplicate_products=True))
        assert rule_violations(allowed, rows) == []

    def test_slot_max_items(self, duo_terms):
        budget, premium = duo_terms.slots
        rows = [
            AssignedItem(item=ComboItem("B-1", 5000), slot=budget),
            AssignedItem(item=ComboItem("B-2", 6000), slot=budget),
        ]
        reasons = rule_violations(duo_terms, rows)
        assert any("holds at most 1" in r for r in reasons)

    def test_cart_value_bounds(self, budget_slots):
        terms = _terms(budget_slots, rules=ComboRules(min_cart_value_q=10000, max_cart_value_q=20000))
        budget = budget_slots[0]
        low = [AssignedItem(item=ComboItem("B-1", 5000), slot=budget)]
        assert len(rule_violations(terms, low)) == 1
        ok = [AssignedItem(item=ComboItem("B-1", 5000), slot=budget), AssignedItem(item=ComboItem("B-2", 5000), slot=budget)]
        assert rule_violations(terms, ok) == []

    def test_invalid_rules(self):
        with pytest.raises(PricingError):
            ComboRules(min_total_items=3, max_total_items=2)


class TestApplyCombo:
    """Tests for apply_combo()."""

    def test_prices_matched_items(self, percentage_terms):
        items = [ComboItem("B-1", 5000), ComboItem("P-1", 20000)]
        result = apply_combo(percentage_terms, items, now=NOW)

        assert result.applied.combo_ref == "CMB-0001"
        assert result.applied.original_amount_q == 25000
        assert result.applied.discount_amount_q == 5000
        assert result.applied.final_amount_q == 20000
        assert result.applied.savings_amount_q == 5000
        assert result.applied.items_count == 2
        assert [b.slot_name for b in result.applied.slot_breakdown] == ["Budget", "Premium"]
        assert result.excluded == ()

    def test_assignment_for_item(self, percentage_terms):
        items = [ComboItem("B-1", 5000), ComboItem("P-1", 20000)]
        result = apply_combo(percentage_terms, items, now=NOW)
        assignment = result.assignment_for(items[1])
        assert assignment.slot_name == "Premium"
        assert assignment.slot_price_q == 20000
        assert result.assignment_for(ComboItem("X", 1)) is None

    def test_strict_raises_on_unslottable_item(self, percentage_terms):
        items = [ComboItem("B-1", 5000), ComboItem("GAP", 12000)]
        with pytest.raises(PricingError) as exc:
            apply_combo(percentage_terms, items, now=NOW)
        assert exc.value.code == "NO_SLOT_MATCHED"

    def test_non_strict_excludes_item(self, percentage_terms):
        items = [ComboItem("B-1", 5000), ComboItem("GAP", 12000), ComboItem("LOW", 12500, slot_name="Budget")]
        result = apply_combo(percentage_terms, items, now=NOW, strict=False)
        assert [e.item.product_ref for e in result.excluded] == ["GAP", "LOW"]
        assert [e.reason for e in result.excluded] == ["NO_SLOT_MATCHED", "HIGH_VALUE_REJECTED"]
        assert result.applied.original_amount_q == 5000

    def test_rules_violated(self, duo_terms):
        with pytest.raises(PricingError) as exc:
            apply_combo(duo_terms, [ComboItem("B-1", 5000)], now=NOW)
        assert exc.value.code == "COMBO_RULES_VIOLATED"
        assert len(exc.value.data["reasons"]) == 2

    def test_expired(self, percentage_terms):
        terms = replace(percentage_terms, valid_until=NOW - timedelta(days=1))
        with pytest.raises(PricingError) as exc:
            apply_combo(terms, [ComboItem("B-1", 5000)], now=NOW)
        assert exc.value.code == "COMBO_EXPIRED"

    def test_buy_x_get_y_uses_every_unit(self, budget_slots):
        terms = _terms(
            budget_slots,
            discount_type=DiscountType.BUY_X_GET_Y,
            buy_x_get_y=BuyXGetY(buy_qty=2, get_qty=1),
            rules=ComboRules(allow_duplicate_products=True),
        )
        result = apply_combo(terms, [ComboItem("B-1", 3000, quantity=3)], now=NOW)
        assert result.applied.discount_amount_q == 3000
        assert result.applied.final_amount_q == 6000
