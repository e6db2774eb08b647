"""Billing value types."""

from dataclasses import dataclass
from decimal import Decimal

from django.db import models
from django.utils.translation import gettext_lazy as _

from bundleman.exceptions import PricingError
from bundleman.protocols.combo import ComboAssignment


class BillType(models.TextChoices):
    NORMAL = "normal", _("Normal")
    COMBO = "combo", _("Combo")
    MIXED = "mixed", _("Mixed")


@dataclass(frozen=True)
class BillLineItem:
    """One line of a bill. Amounts in cents; line_discount_q is per unit."""

    product_ref: str
    quantity: int
    unit_price_q: int
    mrp_q: int = 0
    line_discount_q: int = 0
    tax_rate: Decimal = Decimal("0")
    tax_amount_q: int = 0
    total_amount_q: int = 0
    combo_assignment: ComboAssignment | None = None

    def __post_init__(self):
        if self.quantity < 1:
            raise PricingError("INVALID_QUANTITY", product=self.product_ref, quantity=self.quantity)

    @property
    def is_combo_item(self) -> bool:
        return self.combo_assignment is not None


@dataclass(frozen=True)
class TaxBreakdown:
    tax_rate: Decimal
    taxable_amount_q: int
    cgst_q: int
    sgst_q: int
    igst_q: int
    total_tax_q: int


@dataclass(frozen=True)
class BillTotals:
    """
    Bill close-out figures.

    taxable = subtotal - total_discount - combo_savings
    grand_total = taxable + total_tax
    final_amount = grand_total rounded to a whole currency unit
    round_off = final_amount - grand_total
    """

    subtotal_q: int
    total_discount_q: int
    combo_savings_q: int
    taxable_amount_q: int
    total_tax_q: int
    grand_total_q: int
    round_off_q: int
    final_amount_q: int
    total_item_count: int = 0
    average_item_value_q: int = 0
    is_combo_sale: bool = False
    has_mixed_items: bool = False
    bill_type: str = BillType.NORMAL

    @property
    def total_savings_q(self) -> int:
        return self.total_discount_q + self.combo_savings_q
