"""
Database SequenceBackend: default for projects with a Django database.

Each scope key owns one SequenceCounter row. The row is locked and bumped
with an F() expression inside a transaction, so concurrent callers are
serialized by the database rather than by reading and rewriting a value.

Usage in settings.py:
    BUNDLEMAN = {
        "SEQUENCE_BACKEND": "bundleman.adapters.sequence_db.DatabaseSequenceBackend",
    }
"""

from __future__ import annotations

import logging

from django.db import InterfaceError, OperationalError, transaction
from django.db.models import F

from bundleman.exceptions import PricingError
from bundleman.protocols.sequence import SequenceBackend

logger = logging.getLogger(__name__)


class DatabaseSequenceBackend:
    """SequenceBackend storing counters in SequenceCounter rows."""

    def __init__(self, using: str | None = None):
        self.using = using

    def next(self, scope_key: str) -> int:
        from bundleman.models import SequenceCounter

        try:
            with transaction.atomic(using=self.using):
                counters = SequenceCounter.objects.db_manager(self.using)
                counter, _ = counters.select_for_update().get_or_create(scope_key=scope_key)
                counters.filter(pk=counter.pk).update(last_value=F("last_value") + 1)
                counter.refresh_from_db(fields=["last_value"])
                return counter.last_value
        except (OperationalError, InterfaceError) as exc:
            logger.warning("Sequence store unavailable for %s: %s", scope_key, exc)
            raise PricingError("ALLOCATION_UNAVAILABLE", scope_key=scope_key) from exc

    def current(self, scope_key: str) -> int:
        """Last issued value for scope_key (0 if none). Read-only."""
        from bundleman.models import SequenceCounter

        value = (
            SequenceCounter.objects.db_manager(self.using)
            .filter(scope_key=scope_key)
            .values_list("last_value", flat=True)
            .first()
        )
        return value or 0


# Verify protocol compliance at import time.
if not isinstance(DatabaseSequenceBackend(), SequenceBackend):
    raise TypeError("DatabaseSequenceBackend does not implement SequenceBackend protocol")
