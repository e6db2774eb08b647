"""Bundleman protocols."""

from bundleman.protocols.billing import BillLineItem, BillTotals, BillType, TaxBreakdown
from bundleman.protocols.bundle import BundleSpec, BundleType, Variant, VariantRole
from bundleman.protocols.combo import (
    AppliedCombo,
    AssignedItem,
    BuyXGetY,
    ComboApplication,
    ComboAssignment,
    ComboItem,
    ComboRules,
    ComboTerms,
    DiscountType,
    ExcludedItem,
    PriceSlot,
    SlotBreakdown,
)
from bundleman.protocols.sequence import SequenceBackend

__all__ = [
    "AppliedCombo",
    "AssignedItem",
    "BillLineItem",
    "BillTotals",
    "BillType",
    "BundleSpec",
    "BundleType",
    "BuyXGetY",
    "ComboApplication",
    "ComboAssignment",
    "ComboItem",
    "ComboRules",
    "ComboTerms",
    "DiscountType",
    "ExcludedItem",
    "PriceSlot",
    "SequenceBackend",
    "SlotBreakdown",
    "TaxBreakdown",
    "Variant",
    "VariantRole",
]
