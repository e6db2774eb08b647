"""
Combo discounts.

CORE:
    compute_discount(original_q, terms)  - Discount and final amount
    slot_breakdown(assigned)             - Per-slot item count and value
    is_currently_valid(terms, now)       - Validity gate

APPLICATION:
    apply_combo(terms, items)            - Assign, check rules, price
"""

from collections import OrderedDict
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Sequence

from django.utils import timezone

from bundleman.exceptions import PricingError
from bundleman.protocols.combo import (
    AppliedCombo,
    AssignedItem,
    ComboApplication,
    ComboItem,
    ComboTerms,
    DiscountType,
    ExcludedItem,
    SlotBreakdown,
)
from bundleman.slots import HIGH_VALUE_BUFFER, assign_slot


def _round_q(value: Decimal) -> int:
    return int(value.to_integral_value(rounding=ROUND_HALF_UP))


def _cap(discount_q: int, terms: ComboTerms) -> int:
    if terms.max_discount_q is not None:
        discount_q = min(discount_q, terms.max_discount_q)
    return discount_q


def _buy_x_get_y_discount(terms: ComboTerms, unit_prices_q: Sequence[int] | None) -> int:
    policy = terms.buy_x_get_y
    if policy is None:
        raise PricingError(
            "INVALID_DISCOUNT_POLICY",
            "buy_x_get_y combo has no buy/get quantities",
            combo=terms.code,
        )
    if unit_prices_q is None:
        raise PricingError(
            "INVALID_DISCOUNT_POLICY",
            "buy_x_get_y needs the unit price of every matched unit",
            combo=terms.code,
        )

    ordered = sorted(unit_prices_q, reverse=True)
    rate = Decimal(policy.get_discount_percent) / 100
    discounted_q = Decimal("0")
    for start in range(0, len(ordered) - policy.group_size + 1, policy.group_size):
        group = ordered[start:start + policy.group_size]
        discounted_q += sum(Decimal(price) for price in group[-policy.get_qty:]) * rate
    return _round_q(discounted_q)


def compute_discount(
    original_amount_q: int,
    terms: ComboTerms,
    unit_prices_q: Sequence[int] | None = None,
) -> tuple[int, int]:
    """
    Discount for a combo on an amount.

    Args:
        original_amount_q: Sum of matched item values (cents)
        terms: Combo terms
        unit_prices_q: One entry per matched unit; required for buy_x_get_y

    Returns:
        (discount_q, final_q), never discounting more than the amount
        nor more than terms.max_discount_q

    Raises:
        PricingError: INVALID_DISCOUNT_POLICY
    """
    if original_amount_q < 0:
        raise PricingError("INVALID_QUANTITY", "Original amount cannot be negative", combo=terms.code)

    if terms.discount_type == DiscountType.PERCENTAGE:
        discount_q = _round_q(Decimal(original_amount_q) * Decimal(terms.discount_value) / 100)
    elif terms.discount_type == DiscountType.FIXED:
        discount_q = _round_q(Decimal(terms.discount_value))
    elif terms.discount_type == DiscountType.BUY_X_GET_Y:
        discount_q = _buy_x_get_y_discount(terms, unit_prices_q)
    else:
        raise PricingError("INVALID_DISCOUNT_POLICY", combo=terms.code, discount_type=terms.discount_type)

    discount_q = min(_cap(discount_q, terms), original_amount_q)
    return discount_q, original_amount_q - discount_q


def slot_breakdown(assigned: Iterable[AssignedItem]) -> tuple[SlotBreakdown, ...]:
    """Group assigned items by slot, in first-seen order."""
    groups: OrderedDict[str, list[int]] = OrderedDict()
    for row in assigned:
        count_value = groups.setdefault(row.slot.name, [0, 0])
        count_value[0] += row.item.quantity
        count_value[1] += row.item.line_value_q
    return tuple(
        SlotBreakdown(slot_name=name, item_count=count, total_value_q=value)
        for name, (count, value) in groups.items()
    )


# ======================================================================
# Validity
# ======================================================================


def combo_status(terms: ComboTerms, now: datetime | None = None) -> str:
    """One of: inactive, paused, upcoming, expired, exhausted, active."""
    now = now or timezone.now()
    if not terms.is_active:
        return "inactive"
    if terms.is_paused:
        return "paused"
    if terms.valid_from and now < terms.valid_from:
        return "upcoming"
    if terms.valid_until and now > terms.valid_until:
        return "expired"
    if terms.usage_limit is not None and terms.usage_count >= terms.usage_limit:
        return "exhausted"
    return "active"


def is_currently_valid(terms: ComboTerms, now: datetime | None = None) -> bool:
    """Active, not paused, inside [valid_from, valid_until], usage below limit."""
    return combo_status(terms, now) == "active"


_STATUS_ERRORS = {
    "inactive": "COMBO_INACTIVE",
    "paused": "COMBO_INACTIVE",
    "upcoming": "COMBO_NOT_STARTED",
    "expired": "COMBO_EXPIRED",
    "exhausted": "COMBO_USAGE_EXCEEDED",
}


def check_validity(terms: ComboTerms, now: datetime | None = None) -> None:
    """Raise the PricingError matching the combo status, if not active."""
    status = combo_status(terms, now)
    if status != "active":
        raise PricingError(_STATUS_ERRORS[status], combo=terms.code, status=status)


# ======================================================================
# Rules
# ======================================================================


def rule_violations(terms: ComboTerms, assigned: Sequence[AssignedItem]) -> list[str]:
    """Human-readable reasons why the assigned items do not form the combo."""
    rules = terms.rules
    reasons = []

    total_units = sum(row.item.quantity for row in assigned)
    if total_units < rules.min_total_items:
        reasons.append(f"At least {rules.min_total_items} items required, got {total_units}")
    if rules.max_total_items and total_units > rules.max_total_items:
        reasons.append(f"At most {rules.max_total_items} items allowed, got {total_units}")

    if not rules.allow_duplicate_products:
        seen = set()
        for row in assigned:
            ref = row.item.product_ref
            if ref in seen or row.item.quantity > 1:
                reasons.append(f"Product {ref} appears more than once")
            seen.add(ref)

    per_slot: dict[str, int] = {}
    for row in assigned:
        per_slot[row.slot.name] = per_slot.get(row.slot.name, 0) + row.item.quantity
    for slot in terms.active_slots:
        count = per_slot.get(slot.name, 0)
        if slot.max_items and count > slot.max_items:
            reasons.append(f"Slot '{slot.name}' holds at most {slot.max_items} items, got {count}")
        if rules.require_all_slots_filled and count == 0:
            reasons.append(f"Slot '{slot.name}' is empty")

    cart_value_q = sum(row.item.line_value_q for row in assigned)
    if cart_value_q < rules.min_cart_value_q:
        reasons.append(f"Cart value {cart_value_q} below minimum {rules.min_cart_value_q}")
    if rules.max_cart_value_q is not None and cart_value_q > rules.max_cart_value_q:
        reasons.append(f"Cart value {cart_value_q} above maximum {rules.max_cart_value_q}")

    return reasons


# ======================================================================
# Application
# ======================================================================


def apply_combo(
    terms: ComboTerms,
    items: Sequence[ComboItem],
    now: datetime | None = None,
    strict: bool = True,
    buffer: Decimal = HIGH_VALUE_BUFFER,
) -> ComboApplication:
    """
    Price a set of cart items as one combo.

    Args:
        terms: Combo terms
        items: Cart items; slot_name on an item pins a manual assignment
        now: Reference time for the validity gate
        strict: Raise on the first item that cannot be slotted. When False,
            such items are excluded and reported instead.
        buffer: High-value protection buffer

    Raises:
        PricingError: validity, slot, rule or discount policy errors
    """
    check_validity(terms, now)

    assigned = []
    excluded = []
    for item in items:
        try:
            slot = assign_slot(item.unit_price_q, terms, item.slot_name, buffer=buffer)
        except PricingError as exc:
            if strict:
                raise
            excluded.append(ExcludedItem(item=item, reason=exc.code))
            continue
        assigned.append(AssignedItem(item=item, slot=slot))

    reasons = rule_violations(terms, assigned)
    if reasons:
        raise PricingError("COMBO_RULES_VIOLATED", combo=terms.code, reasons=reasons)

    original_q = sum(row.item.line_value_q for row in assigned)
    unit_prices_q = [row.item.unit_price_q for row in assigned for _ in range(row.item.quantity)]
    discount_q, final_q = compute_discount(original_q, terms, unit_prices_q)

    applied = AppliedCombo(
        combo_ref=terms.code,
        original_amount_q=original_q,
        discount_amount_q=discount_q,
        final_amount_q=final_q,
        savings_amount_q=discount_q,
        slot_breakdown=slot_breakdown(assigned),
    )
    return ComboApplication(applied=applied, assigned=tuple(assigned), excluded=tuple(excluded))
