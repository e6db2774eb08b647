"""
Bill close-out.

All figures are integer cents. The final amount is the grand total rounded
to a whole currency unit, half away from zero (999.50 + 50.00 tax =
1049.50 -> 1050.00, round-off +0.50).
"""

from collections import OrderedDict
from decimal import ROUND_HALF_UP, Decimal
from typing import Sequence

from bundleman.protocols.billing import BillLineItem, BillTotals, BillType, TaxBreakdown
from bundleman.protocols.combo import AppliedCombo, ComboAssignment

CURRENCY_UNIT_Q = 100


def round_to_unit(amount_q: int, unit_q: int = CURRENCY_UNIT_Q) -> int:
    """Round cents to the nearest multiple of unit_q, half away from zero."""
    units = (Decimal(amount_q) / unit_q).to_integral_value(rounding=ROUND_HALF_UP)
    return int(units) * unit_q


def _round_q(value: Decimal) -> int:
    return int(value.to_integral_value(rounding=ROUND_HALF_UP))


def price_line(
    product_ref: str,
    quantity: int,
    unit_price_q: int,
    mrp_q: int | None = None,
    line_discount_q: int = 0,
    tax_rate: Decimal = Decimal("0"),
    combo_assignment: ComboAssignment | None = None,
) -> BillLineItem:
    """
    Build a bill line, computing its tax and total.

    Tax is charged on (unit_price - line_discount) * quantity.
    """
    taxable_q = (unit_price_q - line_discount_q) * quantity
    tax_q = _round_q(Decimal(taxable_q) * Decimal(tax_rate) / 100)
    return BillLineItem(
        product_ref=product_ref,
        quantity=quantity,
        unit_price_q=unit_price_q,
        mrp_q=unit_price_q if mrp_q is None else mrp_q,
        line_discount_q=line_discount_q,
        tax_rate=Decimal(tax_rate),
        tax_amount_q=tax_q,
        total_amount_q=taxable_q + tax_q,
        combo_assignment=combo_assignment,
    )


def aggregate(
    line_items: Sequence[BillLineItem],
    applied_combos: Sequence[AppliedCombo] = (),
) -> BillTotals:
    """
    Reduce bill lines and applied combos to totals.

    Pure and deterministic: identical inputs give identical totals.
    """
    subtotal_q = sum(line.unit_price_q * line.quantity for line in line_items)
    total_discount_q = sum(line.line_discount_q * line.quantity for line in line_items)
    combo_savings_q = sum(combo.savings_amount_q for combo in applied_combos)
    taxable_q = subtotal_q - total_discount_q - combo_savings_q
    total_tax_q = sum(line.tax_amount_q for line in line_items)
    grand_total_q = taxable_q + total_tax_q
    final_q = round_to_unit(grand_total_q)

    item_count = sum(line.quantity for line in line_items)
    has_combo_lines = any(line.is_combo_item for line in line_items)
    has_plain_lines = any(not line.is_combo_item for line in line_items)
    is_combo_sale = len(applied_combos) > 0

    if not is_combo_sale:
        bill_type = BillType.NORMAL
    elif has_plain_lines:
        bill_type = BillType.MIXED
    else:
        bill_type = BillType.COMBO

    return BillTotals(
        subtotal_q=subtotal_q,
        total_discount_q=total_discount_q,
        combo_savings_q=combo_savings_q,
        taxable_amount_q=taxable_q,
        total_tax_q=total_tax_q,
        grand_total_q=grand_total_q,
        round_off_q=final_q - grand_total_q,
        final_amount_q=final_q,
        total_item_count=item_count,
        average_item_value_q=_round_q(Decimal(subtotal_q) / item_count) if item_count else 0,
        is_combo_sale=is_combo_sale,
        has_mixed_items=has_combo_lines and has_plain_lines,
        bill_type=bill_type,
    )


def tax_breakdown(line_items: Sequence[BillLineItem], inter_state: bool = False) -> list[TaxBreakdown]:
    """
    GST summary per tax rate.

    Intra-state tax splits into CGST + SGST (odd cent goes to CGST);
    inter-state tax is all IGST.
    """
    groups: OrderedDict[Decimal, list[int]] = OrderedDict()
    for line in sorted(line_items, key=lambda line: line.tax_rate):
        taxable_tax = groups.setdefault(line.tax_rate, [0, 0])
        taxable_tax[0] += (line.unit_price_q - line.line_discount_q) * line.quantity
        taxable_tax[1] += line.tax_amount_q

    rows = []
    for rate, (taxable_q, tax_q) in groups.items():
        if inter_state:
            cgst_q = sgst_q = 0
            igst_q = tax_q
        else:
            cgst_q = _round_q(Decimal(tax_q) / 2)
            sgst_q = tax_q - cgst_q
            igst_q = 0
        rows.append(
            TaxBreakdown(
                tax_rate=rate,
                taxable_amount_q=taxable_q,
                cgst_q=cgst_q,
                sgst_q=sgst_q,
                igst_q=igst_q,
                total_tax_q=tax_q,
            )
        )
    return rows
