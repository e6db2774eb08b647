"""
Price-slot matching.

A combo is a set of price bands ("slots"). Each cart item lands in the
active slot whose band contains its price; when bands overlap, the higher
priority wins and equal priorities go to the slot declared first.
"""

from decimal import Decimal
from typing import Iterable, Sequence

from bundleman.exceptions import PricingError
from bundleman.protocols.combo import ComboTerms, PriceSlot

HIGH_VALUE_BUFFER = Decimal("0.20")


def match_slot(price_q: int, slots: Sequence[PriceSlot]) -> PriceSlot:
    """
    Return the slot a price belongs to.

    Raises:
        PricingError: NO_SLOT_MATCHED if no active slot contains the price
    """
    best = None
    for slot in slots:
        if not slot.active or not slot.contains(price_q):
            continue
        # Strict comparison keeps the first declared slot on ties.
        if best is None or slot.priority > best.priority:
            best = slot
    if best is None:
        raise PricingError("NO_SLOT_MATCHED", price_q=price_q)
    return best


def validate_assignment(
    price_q: int,
    slot: PriceSlot,
    all_slots: Iterable[PriceSlot],
    prevent_high_value: bool,
    buffer: Decimal = HIGH_VALUE_BUFFER,
) -> bool:
    """
    High-value protection for a slot assignment.

    Rejects the assignment only when the price exceeds slot.max by more than
    the buffer (20% by default) and some other active slot starts above
    slot.max, i.e. the item belonged in a higher slot. A heuristic: callers
    decide whether a rejection blocks the combo or drops the item.
    """
    if not prevent_high_value:
        return True

    ceiling = Decimal(slot.max_price_q) * (1 + Decimal(buffer))
    if Decimal(price_q) <= ceiling:
        return True

    return not any(
        other.active and other is not slot and other.min_price_q > slot.max_price_q
        for other in all_slots
    )


def find_slot(slots: Sequence[PriceSlot], name: str) -> PriceSlot:
    for slot in slots:
        if slot.name == name:
            return slot
    raise PricingError("NO_SLOT_MATCHED", f"Slot '{name}' does not exist", slot=name)


def assign_slot(
    price_q: int,
    terms: ComboTerms,
    slot_name: str | None = None,
    buffer: Decimal = HIGH_VALUE_BUFFER,
) -> PriceSlot:
    """
    Pick the slot for one item of a combo.

    Without slot_name the slot is matched by price. With slot_name (manual
    assignment) the named slot must be active and pass high-value protection.

    Raises:
        PricingError: NO_SLOT_MATCHED or HIGH_VALUE_REJECTED
    """
    if slot_name is None:
        return match_slot(price_q, terms.slots)

    slot = find_slot(terms.slots, slot_name)
    if not slot.active:
        raise PricingError("NO_SLOT_MATCHED", f"Slot '{slot_name}' is inactive", slot=slot_name)
    if not validate_assignment(
        price_q,
        slot,
        terms.slots,
        terms.prevent_high_value_in_low_slot,
        buffer=buffer,
    ):
        raise PricingError(
            "HIGH_VALUE_REJECTED",
            combo=terms.code,
            slot=slot.name,
            price_q=price_q,
        )
    return slot


def slot_bands(slots: Iterable[PriceSlot]) -> dict[str, int]:
    """
    Combined price band of one item per active slot.

    Returns:
        {"min_q": sum of slot minimums, "max_q": sum of slot maximums, "slots": count}
    """
    active = [slot for slot in slots if slot.active]
    return {
        "min_q": sum(slot.min_price_q for slot in active),
        "max_q": sum(slot.max_price_q for slot in active),
        "slots": len(active),
    }
