"""Bundleman adapters."""

from bundleman.adapters.memory import InMemorySequenceBackend
from bundleman.adapters.sequence_db import DatabaseSequenceBackend

__all__ = [
    "DatabaseSequenceBackend",
    "InMemorySequenceBackend",
]
