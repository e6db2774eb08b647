"""Combo value types."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from django.db import models
from django.utils.translation import gettext_lazy as _

from bundleman.exceptions import PricingError


class DiscountType(models.TextChoices):
    """How a combo turns its matched items into a discount."""

    PERCENTAGE = "percentage", _("Percentage")
    FIXED = "fixed", _("Fixed amount")
    BUY_X_GET_Y = "buy_x_get_y", _("Buy X get Y")


@dataclass(frozen=True)
class PriceSlot:
    """Inclusive price band [min_price_q, max_price_q] inside a combo."""

    name: str
    min_price_q: int
    max_price_q: int
    max_items: int = 0
    priority: int = 0
    active: bool = True

    def __post_init__(self):
        if self.min_price_q < 0 or self.max_price_q < 0:
            raise PricingError("INVALID_PRICE_SLOT", "Slot prices cannot be negative", slot=self.name)
        if self.min_price_q > self.max_price_q:
            raise PricingError(
                "INVALID_PRICE_SLOT",
                f"Slot '{self.name}' has min price above max price",
                slot=self.name,
            )
        if self.max_items < 0:
            raise PricingError("INVALID_PRICE_SLOT", "max_items cannot be negative", slot=self.name)

    def contains(self, price_q: int) -> bool:
        return self.min_price_q <= price_q <= self.max_price_q


@dataclass(frozen=True)
class ComboRules:
    """
    Purchase rules for a combo.

    Zero/None upper bounds mean "no limit".
    """

    min_total_items: int = 0
    max_total_items: int | None = None
    allow_duplicate_products: bool = False
    require_all_slots_filled: bool = False
    min_cart_value_q: int = 0
    max_cart_value_q: int | None = None

    def __post_init__(self):
        if self.min_total_items < 0:
            raise PricingError("INVALID_QUANTITY", "min_total_items cannot be negative")
        if self.max_total_items is not None and self.max_total_items < self.min_total_items:
            raise PricingError("INVALID_QUANTITY", "max_total_items is below min_total_items")
        if self.max_cart_value_q is not None and self.max_cart_value_q < self.min_cart_value_q:
            raise PricingError("INVALID_QUANTITY", "max_cart_value_q is below min_cart_value_q")


@dataclass(frozen=True)
class BuyXGetY:
    """
    Buy-X-get-Y policy parameters.

    Every complete group of buy_qty + get_qty units discounts its get_qty
    cheapest units by get_discount_percent (100 = free).
    """

    buy_qty: int
    get_qty: int
    get_discount_percent: Decimal = Decimal("100")

    def __post_init__(self):
        if self.buy_qty < 1 or self.get_qty < 1:
            raise PricingError(
                "INVALID_DISCOUNT_POLICY",
                "buy_qty and get_qty must be at least 1",
                buy_qty=self.buy_qty,
                get_qty=self.get_qty,
            )
        if not Decimal("0") < Decimal(self.get_discount_percent) <= Decimal("100"):
            raise PricingError(
                "INVALID_DISCOUNT_POLICY",
                "get_discount_percent must be in (0, 100]",
            )

    @property
    def group_size(self) -> int:
        return self.buy_qty + self.get_qty


@dataclass(frozen=True)
class ComboTerms:
    """Everything the engine needs to know about a combo, detached from storage."""

    code: str
    slots: tuple[PriceSlot, ...]
    discount_type: str = DiscountType.PERCENTAGE
    discount_value: Decimal = Decimal("0")
    rules: ComboRules = field(default_factory=ComboRules)
    max_discount_q: int | None = None
    buy_x_get_y: BuyXGetY | None = None
    valid_from: datetime | None = None
    valid_until: datetime | None = None
    usage_limit: int | None = None
    usage_count: int = 0
    is_active: bool = True
    is_paused: bool = False
    prevent_high_value_in_low_slot: bool = True

    def __post_init__(self):
        if self.discount_type not in DiscountType.values:
            raise PricingError("INVALID_DISCOUNT_POLICY", f"Unknown discount type '{self.discount_type}'")
        if Decimal(self.discount_value) < 0:
            raise PricingError("INVALID_DISCOUNT_POLICY", "discount_value cannot be negative")
        if self.max_discount_q is not None and self.max_discount_q < 0:
            raise PricingError("INVALID_DISCOUNT_POLICY", "max_discount_q cannot be negative")
        # Tuple keeps the declaration order that breaks priority ties.
        object.__setattr__(self, "slots", tuple(self.slots))

    @property
    def active_slots(self) -> list[PriceSlot]:
        return [slot for slot in self.slots if slot.active]


@dataclass(frozen=True)
class ComboItem:
    """
    A cart line offered to a combo.

    slot_name pins a manual slot assignment; None means auto-assign.
    """

    product_ref: str
    unit_price_q: int
    quantity: int = 1
    slot_name: str | None = None

    def __post_init__(self):
        if self.quantity < 1:
            raise PricingError("INVALID_QUANTITY", product=self.product_ref, quantity=self.quantity)
        if self.unit_price_q < 0:
            raise PricingError("INVALID_QUANTITY", "Unit price cannot be negative", product=self.product_ref)

    @property
    def line_value_q(self) -> int:
        return self.unit_price_q * self.quantity


@dataclass(frozen=True)
class ComboAssignment:
    """Which combo slot a bill line was priced in."""

    combo_ref: str
    slot_name: str
    slot_price_q: int


@dataclass(frozen=True)
class AssignedItem:
    item: ComboItem
    slot: PriceSlot


@dataclass(frozen=True)
class ExcludedItem:
    item: ComboItem
    reason: str


@dataclass(frozen=True)
class SlotBreakdown:
    slot_name: str
    item_count: int
    total_value_q: int


@dataclass(frozen=True)
class AppliedCombo:
    """Priced result of one combo on a bill."""

    combo_ref: str
    original_amount_q: int
    discount_amount_q: int
    final_amount_q: int
    savings_amount_q: int
    slot_breakdown: tuple[SlotBreakdown, ...] = ()

    @property
    def items_count(self) -> int:
        return sum(row.item_count for row in self.slot_breakdown)


@dataclass(frozen=True)
class ComboApplication:
    """AppliedCombo plus the per-item outcome that produced it."""

    applied: AppliedCombo
    assigned: tuple[AssignedItem, ...]
    excluded: tuple[ExcludedItem, ...] = ()

    def assignment_for(self, item: ComboItem) -> ComboAssignment | None:
        for row in self.assigned:
            if row.item is item:
                return ComboAssignment(
                    combo_ref=self.applied.combo_ref,
                    slot_name=row.slot.name,
                    slot_price_q=item.unit_price_q,
                )
        return None
