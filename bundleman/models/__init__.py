"""Bundleman models."""

from bundleman.models.catalog_item import CatalogItem
from bundleman.models.combo import Combo, PriceSlot
from bundleman.models.sequence import SequenceCounter

__all__ = [
    "CatalogItem",
    "Combo",
    "PriceSlot",
    "SequenceCounter",
]
