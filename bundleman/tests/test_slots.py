"""Tests for price-slot matching and high-value protection."""

from decimal import Decimal

import pytest

from bundleman.exceptions import PricingError
from bundleman.protocols import ComboTerms
from bundleman.protocols import PriceSlot as Slot
from bundleman.slots import assign_slot, match_slot, slot_bands, validate_assignment


class TestPriceSlot:
    """Invariants checked when a slot is built."""

    def test_min_above_max_rejected(self):
        with pytest.raises(PricingError) as exc:
            Slot(name="Broken", min_price_q=500, max_price_q=100)
        assert exc.value.code == "INVALID_PRICE_SLOT"

    def test_negative_bounds_rejected(self):
        with pytest.raises(PricingError):
            Slot(name="Negative", min_price_q=-1, max_price_q=100)

    def test_band_is_inclusive(self):
        slot = Slot(name="Budget", min_price_q=100, max_price_q=200)
        assert slot.contains(100)
        assert slot.contains(200)
        assert not slot.contains(201)


class TestMatchSlot:
    """Tests for match_slot()."""

    def test_matches_band(self, budget_slots):
        assert match_slot(5000, budget_slots).name == "Budget"
        assert match_slot(20000, budget_slots).name == "Premium"

    def test_no_match(self, budget_slots):
        """12000 falls between the bands."""
        with pytest.raises(PricingError) as exc:
            match_slot(12000, budget_slots)
        assert exc.value.code == "NO_SLOT_MATCHED"
        assert exc.value.data["price_q"] == 12000

    def test_higher_priority_wins_overlap(self):
        slots = [
            Slot(name="Wide", min_price_q=0, max_price_q=50000, priority=1),
            Slot(name="Narrow", min_price_q=1000, max_price_q=2000, priority=5),
        ]
        assert match_slot(1500, slots).name == "Narrow"
        assert match_slot(3000, slots).name == "Wide"

    def test_tie_goes_to_first_declared(self):
        slots = [
            Slot(name="First", min_price_q=0, max_price_q=1000),
            Slot(name="Second", min_price_q=0, max_price_q=1000),
        ]
        assert match_slot(500, slots).name == "First"
        assert match_slot(500, list(reversed(slots))).name == "Second"

    def test_inactive_slots_ignored(self):
        slots = [
            Slot(name="Off", min_price_q=0, max_price_q=1000, priority=9, active=False),
            Slot(name="On", min_price_q=0, max_price_q=1000),
        ]
        assert match_slot(500, slots).name == "On"

    def test_deterministic(self, budget_slots):
        assert match_slot(7000, budget_slots) == match_slot(7000, budget_slots)


class TestHighValueProtection:
    """Tests for validate_assignment()."""

    def test_rejected_above_buffer_when_higher_slot_exists(self, budget_slots):
        """125.00 in the 0-100.00 slot exceeds 120.00 and a 150.00+ slot exists."""
        budget = budget_slots[0]
        assert validate_assignment(12500, budget, budget_slots, prevent_high_value=True) is False

    def test_accepted_inside_buffer(self, budget_slots):
        budget = budget_slots[0]
        assert validate_assignment(10500, budget, budget_slots, prevent_high_value=True) is True
        assert validate_assignment(12000, budget, budget_slots, prevent_high_value=True) is True

    def test_accepted_without_higher_slot(self, budget_slots):
        budget = budget_slots[0]
        assert validate_assignment(99999, budget, [budget], prevent_high_value=True) is True

    def test_inactive_higher_slot_does_not_count(self, budget_slots):
        budget = budget_slots[0]
        premium_off = Slot(name="Premium", min_price_q=15000, max_price_q=30000, active=False)
        assert validate_assignment(12500, budget, [budget, premium_off], prevent_high_value=True) is True

    def test_disabled(self, budget_slots):
        budget = budget_slots[0]
        assert validate_assignment(99999, budget, budget_slots, prevent_high_value=False) is True

    def test_custom_buffer(self, budget_slots):
        budget = budget_slots[0]
        assert validate_assignment(10500, budget, budget_slots, True, buffer=Decimal("0")) is False


class TestAssignSlot:
    """Tests for assign_slot()."""

    def test_auto_assignment(self, percentage_terms):
        assert assign_slot(20000, percentage_terms).name == "Premium"

    def test_manual_assignment_rejected(self, percentage_terms):
        with pytest.raises(PricingError) as exc:
            assign_slot(12500, percentage_terms, slot_name="Budget")
        assert exc.value.code == "HIGH_VALUE_REJECTED"
        assert exc.value.combo == "CMB-0001"

    def test_manual_assignment_accepted(self, percentage_terms):
        assert assign_slot(10500, percentage_terms, slot_name="Budget").name == "Budget"

    def test_manual_assignment_allowed_when_protection_off(self, budget_slots):
        terms = ComboTerms(code="CMB-9", slots=budget_slots, prevent_high_value_in_low_slot=False)
        assert assign_slot(12500, terms, slot_name="Budget").name == "Budget"

    def test_unknown_slot(self, percentage_terms):
        with pytest.raises(PricingError) as exc:
            assign_slot(5000, percentage_terms, slot_name="Gold")
        assert exc.value.code == "NO_SLOT_MATCHED"


class TestSlotBands:
    def test_combined_band(self, budget_slots):
        assert slot_bands(budget_slots) == {"min_q": 15000, "max_q": 40000, "slots": 2}
