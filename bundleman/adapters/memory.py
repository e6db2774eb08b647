"""
In-memory SequenceBackend for tests and processes without a database.

Counters live in this process only and are lost on restart, so never use
it where numbers must stay unique across workers.

Usage in settings.py:
    BUNDLEMAN = {
        "SEQUENCE_BACKEND": "bundleman.adapters.memory.InMemorySequenceBackend",
    }
"""

from __future__ import annotations

import threading
from collections import defaultdict

from bundleman.protocols.sequence import SequenceBackend


class InMemorySequenceBackend:
    """
    SequenceBackend holding counters in a dict.

    One lock per scope key: callers on different scopes never wait on
    each other.
    """

    def __init__(self):
        self._values: dict[str, int] = defaultdict(int)
        self._locks: dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def _lock_for(self, scope_key: str) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(scope_key)
            if lock is None:
                lock = self._locks[scope_key] = threading.Lock()
            return lock

    def next(self, scope_key: str) -> int:
        with self._lock_for(scope_key):
            self._values[scope_key] += 1
            return self._values[scope_key]

    def current(self, scope_key: str) -> int:
        return self._values.get(scope_key, 0)


# Verify protocol compliance at import time.
if not isinstance(InMemorySequenceBackend(), SequenceBackend):
    raise TypeError("InMemorySequenceBackend does not implement SequenceBackend protocol")
