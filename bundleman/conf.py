"""
Bundleman configuration.

Usage in settings.py:
    BUNDLEMAN = {
        "SEQUENCE_BACKEND": "bundleman.adapters.sequence_db.DatabaseSequenceBackend",
        "ALLOCATION_RETRIES": 3,
        "HIGH_VALUE_BUFFER": Decimal("0.20"),
        "BARCODE_PREFIXES": {"parent": "8901234", "child": "8901235", "standalone": "8901236"},
    }
"""

import importlib
import threading
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

from django.conf import settings


def _default_barcode_prefixes() -> dict[str, str]:
    return {
        "parent": "8901234",
        "child": "8901235",
        "standalone": "8901236",
    }


@dataclass
class BundlemanSettings:
    """Bundleman configuration settings."""

    SEQUENCE_BACKEND: str = "bundleman.adapters.sequence_db.DatabaseSequenceBackend"
    ALLOCATION_RETRIES: int = 3
    ALLOCATION_BACKOFF: float = 0.05
    HIGH_VALUE_BUFFER: Decimal = Decimal("0.20")
    BARCODE_PREFIXES: dict[str, str] = field(default_factory=_default_barcode_prefixes)
    BARCODE_PAYLOAD_DIGITS: int = 5
    MAX_BUNDLE_CHILDREN: int = 99
    BILL_PREFIX: str = "BILL"
    VENDOR_PREFIX: str = "VEN"
    COMBO_PREFIX: str = "CMB"


def get_bundleman_settings() -> BundlemanSettings:
    """Load settings from Django settings."""
    user_settings: dict[str, Any] = getattr(settings, "BUNDLEMAN", {})
    return BundlemanSettings(**user_settings)


class _LazySettings:
    """Lazy proxy that re-reads settings on every attribute access."""

    def __getattr__(self, name):
        return getattr(get_bundleman_settings(), name)


bundleman_settings = _LazySettings()


# SequenceBackend singleton
_sequence_backend_lock = threading.Lock()
_sequence_backend_instance = None


def get_sequence_backend():
    """
    Return the configured SequenceBackend instance.

    Loads from BUNDLEMAN["SEQUENCE_BACKEND"] setting (dotted path).
    If _sequence_backend_instance was set directly (e.g. in tests), returns it as-is.
    """
    global _sequence_backend_instance
    if _sequence_backend_instance is not None:
        return _sequence_backend_instance
    backend_path = bundleman_settings.SEQUENCE_BACKEND
    with _sequence_backend_lock:
        if _sequence_backend_instance is None:
            module_path, cls_name = backend_path.rsplit(".", 1)
            module = importlib.import_module(module_path)
            cls = getattr(module, cls_name)
            _sequence_backend_instance = cls()
    return _sequence_backend_instance


def reset_sequence_backend():
    """Reset SequenceBackend singleton (for tests)."""
    global _sequence_backend_instance
    _sequence_backend_instance = None
