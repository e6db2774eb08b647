"""
Sequence allocation and human-facing code formats.

The allocator only hands out integers; the formatters below turn them into
bill numbers, product codes and so on. Never derive the next number from the
highest existing record: two concurrent writers would read the same value.

Usage:
    from bundleman.sequences import SequenceAllocator, bill_number, bill_scope

    allocator = SequenceAllocator()
    seq = allocator.next(bill_scope(today))
    number = bill_number(seq, today)   # "BILL2406150001"
"""

from __future__ import annotations

import logging
import re
import time
from datetime import date

from bundleman.exceptions import PricingError
from bundleman.protocols.bundle import CHILD_TAG, STANDALONE_TAG

logger = logging.getLogger(__name__)


class SequenceAllocator:
    """Front for a SequenceBackend; validates scope keys."""

    def __init__(self, backend=None):
        self._backend = backend

    @property
    def backend(self):
        if self._backend is None:
            from bundleman.conf import get_sequence_backend

            self._backend = get_sequence_backend()
        return self._backend

    def next(self, scope_key: str) -> int:
        """
        Return the next value for scope_key (1, 2, 3...).

        Raises:
            PricingError: INVALID_SCOPE for blank keys,
                ALLOCATION_UNAVAILABLE when the store is down
        """
        if not scope_key or not scope_key.strip():
            raise PricingError("INVALID_SCOPE", scope_key=scope_key)
        return self.backend.next(scope_key)


def allocate(
    scope_key: str,
    allocator: SequenceAllocator | None = None,
    retries: int | None = None,
    backoff: float | None = None,
) -> int:
    """
    Allocate with retry on ALLOCATION_UNAVAILABLE only.

    Waits backoff, 2*backoff, 4*backoff... between attempts, then re-raises.
    """
    from bundleman.conf import bundleman_settings

    allocator = allocator or SequenceAllocator()
    retries = bundleman_settings.ALLOCATION_RETRIES if retries is None else retries
    delay = bundleman_settings.ALLOCATION_BACKOFF if backoff is None else backoff

    attempt = 0
    while True:
        try:
            return allocator.next(scope_key)
        except PricingError as exc:
            if not exc.is_transient or attempt >= retries:
                raise
            attempt += 1
            logger.warning(
                "Sequence store unavailable for %s, retry %d/%d in %.2fs",
                scope_key,
                attempt,
                retries,
                delay,
            )
            time.sleep(delay)
            delay *= 2


# ======================================================================
# Scope keys
# ======================================================================


def _prefix(name: str, length: int, default: str) -> str:
    cleaned = re.sub(r"[^A-Za-z]", "", name or "").upper()[:length]
    return cleaned or default


def bill_scope(on: date) -> str:
    return f"BILL/{on:%y%m%d}"


def product_scope(category: str, subcategory: str, tag: str) -> str:
    return f"PRODUCT/{category}/{subcategory}/{tag}"


def child_scope(parent_code: str) -> str:
    return f"BUNDLE/{parent_code}"


def category_scope(name: str) -> str:
    return f"CAT/{_prefix(name, 3, 'GEN')}"


def barcode_scope(role: str) -> str:
    return f"BARCODE/{role}"


VENDOR_SCOPE = "VEN"
COMBO_SCOPE = "CMB"


# ======================================================================
# Formatters
# ======================================================================


def bill_number(seq: int, on: date, prefix: str = "BILL") -> str:
    """BILL + YYMMDD + 4-digit sequence (wider once past 9999)."""
    return f"{prefix}{on:%y%m%d}{seq:04d}"


def category_prefix(name: str) -> str:
    """First three letters of a category name, upper-cased ("GEN" if none)."""
    return _prefix(name, 3, "GEN")


def subcategory_prefix(name: str | None) -> str:
    """First two letters of a subcategory name ("XX" if none)."""
    return _prefix(name or "", 2, "XX")


def product_code(seq: int, category: str, subcategory: str | None, tag: str = STANDALONE_TAG) -> str:
    """CATEGORY/SUBCATEGORY/TAG/6-digit serial, e.g. SHI/MW/SC/000001."""
    return f"{category_prefix(category)}/{subcategory_prefix(subcategory)}/{tag}/{seq:06d}"


def child_code(parent_code: str, serial: int) -> str:
    """Parent code plus a 2-digit child serial, e.g. SHI/MW/SC/000001/01."""
    return f"{parent_code}/{serial:02d}"


def vendor_code(seq: int, prefix: str = "VEN") -> str:
    return f"{prefix}{seq:06d}"


def combo_code(seq: int, prefix: str = "CMB") -> str:
    return f"{prefix}-{seq:04d}"


def category_code(seq: int, name: str) -> str:
    return f"CAT{category_prefix(name)}{seq:04d}"


__all__ = [
    "CHILD_TAG",
    "COMBO_SCOPE",
    "STANDALONE_TAG",
    "SequenceAllocator",
    "VENDOR_SCOPE",
    "allocate",
    "bill_number",
    "bill_scope",
    "category_code",
    "category_prefix",
    "category_scope",
    "child_code",
    "child_scope",
    "combo_code",
    "product_code",
    "product_scope",
    "subcategory_prefix",
    "vendor_code",
]
