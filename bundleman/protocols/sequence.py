"""
SequenceBackend protocol.

Lets a host project store sequence counters wherever it likes, as long as
every increment is atomic per scope key.

Usage:
    # In settings.py
    BUNDLEMAN = {
        "SEQUENCE_BACKEND": "myproject.sequences.RedisSequenceBackend",
    }

    class RedisSequenceBackend:
        def next(self, scope_key: str) -> int:
            return redis.incr(f"seq:{scope_key}")
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class SequenceBackend(Protocol):
    """
    Interface for atomic per-scope counters.

    Implementations must never return the same value twice for a scope
    and must raise PricingError("ALLOCATION_UNAVAILABLE") when the store
    cannot be reached.
    """

    def next(self, scope_key: str) -> int:
        """
        Increment the counter for scope_key and return the new value.

        The first value for a new scope is 1.
        """
        ...
