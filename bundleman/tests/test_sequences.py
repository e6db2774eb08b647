"""Tests for sequence allocation and code formats."""

from concurrent.futures import ThreadPoolExecutor
from datetime import date
from unittest.mock import MagicMock, patch

import pytest
from django.db import OperationalError, connection

from bundleman import conf
from bundleman.adapters.memory import InMemorySequenceBackend
from bundleman.adapters.sequence_db import DatabaseSequenceBackend
from bundleman.exceptions import PricingError
from bundleman.models import SequenceCounter
from bundleman.protocols import SequenceBackend
from bundleman.sequences import (
    SequenceAllocator,
    allocate,
    bill_number,
    bill_scope,
    category_code,
    category_prefix,
    category_scope,
    child_code,
    combo_code,
    product_code,
    product_scope,
    subcategory_prefix,
    vendor_code,
)


class TestInMemoryBackend:
    """Tests for InMemorySequenceBackend."""

    def test_starts_at_one(self, allocator):
        assert allocator.next("BILL/240101") == 1
        assert allocator.next("BILL/240101") == 2

    def test_scopes_are_independent(self, allocator):
        allocator.next("CAT/SHI")
        allocator.next("CAT/SHI")
        assert allocator.next("CAT/PAN") == 1
        assert allocator.next("CAT/SHI") == 3

    def test_concurrent_callers_get_distinct_values(self, allocator):
        """N concurrent calls on one scope return exactly 1..N."""
        n = 200

        with ThreadPoolExecutor(max_workers=20) as pool:
            values = list(pool.map(lambda _: allocator.next("BILL/240101"), range(n)))

        assert sorted(values) == list(range(1, n + 1))

    def test_implements_protocol(self, memory_backend):
        assert isinstance(memory_backend, SequenceBackend)


class TestAllocator:
    """Tests for SequenceAllocator."""

    @pytest.mark.parametrize("scope", ["", "   ", None])
    def test_blank_scope_rejected(self, allocator, scope):
        with pytest.raises(PricingError) as exc:
            allocator.next(scope)
        assert exc.value.code == "INVALID_SCOPE"

    def test_uses_configured_backend(self):
        backend = InMemorySequenceBackend()
        conf._sequence_backend_instance = backend
        assert SequenceAllocator().next("VEN") == 1
        assert backend.current("VEN") == 1

    def test_default_backend_is_database(self):
        assert isinstance(conf.get_sequence_backend(), DatabaseSequenceBackend)

    def test_backend_from_settings(self, settings):
        settings.BUNDLEMAN = {"SEQUENCE_BACKEND": "bundleman.adapters.memory.InMemorySequenceBackend"}
        conf.reset_sequence_backend()
        assert isinstance(conf.get_sequence_backend(), InMemorySequenceBackend)


@pytest.mark.django_db
class TestDatabaseBackend:
    """Tests for DatabaseSequenceBackend."""

    def test_counter_created_lazily(self):
        backend = DatabaseSequenceBackend()
        assert not SequenceCounter.objects.filter(scope_key="BILL/240615").exists()
        assert backend.next("BILL/240615") == 1
        assert SequenceCounter.objects.get(scope_key="BILL/240615").last_value == 1

    def test_monotonic(self):
        backend = DatabaseSequenceBackend()
        values = [backend.next("CAT/SHI") for _ in range(5)]
        assert values == [1, 2, 3, 4, 5]
        assert backend.current("CAT/SHI") == 5
        assert backend.current("CAT/NONE") == 0

    def test_continues_from_stored_value(self):
        SequenceCounter.objects.create(scope_key="VEN", last_value=41)
        assert DatabaseSequenceBackend().next("VEN") == 42

    def test_store_unavailable(self):
        """Database errors surface as ALLOCATION_UNAVAILABLE."""
        backend = DatabaseSequenceBackend()
        with patch.object(SequenceCounter.objects, "db_manager", side_effect=OperationalError("database is locked")):
            with pytest.raises(PricingError) as exc:
                backend.next("BILL/240615")
        assert exc.value.code == "ALLOCATION_UNAVAILABLE"
        assert exc.value.is_transient
        assert isinstance(exc.value.__cause__, OperationalError)


@pytest.mark.django_db(transaction=True)
@pytest.mark.skipif(connection.vendor == "sqlite", reason="sqlite serializes writers without row locks")
class TestDatabaseBackendConcurrency:
    """Row locking on databases that support SELECT ... FOR UPDATE."""

    def test_concurrent_callers_get_distinct_values(self):
        backend = DatabaseSequenceBackend()
        backend.next("BILL/240101")

        def call(_):
            try:
                return backend.next("BILL/240101")
            finally:
                connection.close()

        with ThreadPoolExecutor(max_workers=8) as pool:
            values = list(pool.map(call, range(40)))

        assert sorted(values) == list(range(2, 42))


class TestAllocateRetry:
    """Tests for allocate() caller-side retry."""

    def test_retries_transient_errors(self):
        allocator = MagicMock()
        allocator.next.side_effect = [
            PricingError("ALLOCATION_UNAVAILABLE"),
            PricingError("ALLOCATION_UNAVAILABLE"),
            7,
        ]
        with patch("bundleman.sequences.time.sleep") as sleep:
            assert allocate("VEN", allocator, retries=3, backoff=0.1) == 7
        assert allocator.next.call_count == 3
        assert [c.args[0] for c in sleep.call_args_list] == [0.1, 0.2]

    def test_gives_up_after_retries(self):
        allocator = MagicMock()
        allocator.next.side_effect = PricingError("ALLOCATION_UNAVAILABLE")
        with patch("bundleman.sequences.time.sleep"):
            with pytest.raises(PricingError) as exc:
                allocate("VEN", allocator, retries=2, backoff=0)
        assert exc.value.code == "ALLOCATION_UNAVAILABLE"
        assert allocator.next.call_count == 3

    def test_logic_errors_not_retried(self):
        allocator = MagicMock()
        allocator.next.side_effect = PricingError("INVALID_SCOPE")
        with pytest.raises(PricingError):
            allocate("", allocator, retries=5)
        assert allocator.next.call_count == 1


class TestFormats:
    """Tests for human-facing code formats."""

    def test_bill_number(self):
        on = date(2024, 6, 15)
        assert bill_scope(on) == "BILL/240615"
        assert bill_number(1, on) == "BILL2406150001"
        assert bill_number(12345, on) == "BILL24061512345"

    def test_product_code(self):
        assert product_code(1, "Shirts", "Menswear", "SC") == "SHI/ME/SC/000001"
        assert product_scope("SHI", "ME", "SC") == "PRODUCT/SHI/ME/SC"

    def test_prefix_defaults(self):
        assert category_prefix("") == "GEN"
        assert category_prefix("t-1 shirt") == "TSH"
        assert subcategory_prefix(None) == "XX"

    def test_child_code(self):
        assert child_code("SHI/ME/SC/000001", 3) == "SHI/ME/SC/000001/03"

    def test_vendor_combo_category_codes(self):
        assert vendor_code(1) == "VEN000001"
        assert combo_code(1) == "CMB-0001"
        assert category_code(1, "Shirts") == "CATSHI0001"
        assert category_scope("Shirts") == "CAT/SHI"
