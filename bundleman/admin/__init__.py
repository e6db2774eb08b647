"""Bundleman admin."""

from bundleman.admin.catalog_item import CatalogItemAdmin, ChildItemInline
from bundleman.admin.combo import ComboAdmin, PriceSlotInline
from bundleman.admin.sequence import SequenceCounterAdmin

__all__ = [
    "CatalogItemAdmin",
    "ChildItemInline",
    "ComboAdmin",
    "PriceSlotInline",
    "SequenceCounterAdmin",
]
