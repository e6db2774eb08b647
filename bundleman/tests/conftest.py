"""Pytest fixtures for Bundleman tests."""

from datetime import timedelta
from decimal import Decimal

import pytest
from django.utils import timezone

from bundleman import conf
from bundleman.adapters.memory import InMemorySequenceBackend
from bundleman.models import Combo, PriceSlot
from bundleman.protocols import ComboRules, ComboTerms, DiscountType
from bundleman.protocols import PriceSlot as Slot
from bundleman.sequences import SequenceAllocator


@pytest.fixture(autouse=True)
def _reset_sequence_backend():
    """Every test starts from the configured backend."""
    conf.reset_sequence_backend()
    yield
    conf.reset_sequence_backend()


@pytest.fixture
def memory_backend():
    return InMemorySequenceBackend()


@pytest.fixture
def allocator(memory_backend):
    """Allocator that needs no database."""
    return SequenceAllocator(memory_backend)


@pytest.fixture
def budget_slots():
    """Budget band 0-100.00 with priority 2, premium band 150.00-300.00 with priority 1."""
    return (
        Slot(name="Budget", min_price_q=0, max_price_q=10000, priority=2),
        Slot(name="Premium", min_price_q=15000, max_price_q=30000, priority=1),
    )


@pytest.fixture
def percentage_terms(budget_slots):
    """20% off, no rules."""
    return ComboTerms(
        code="CMB-0001",
        slots=budget_slots,
        discount_type=DiscountType.PERCENTAGE,
        discount_value=Decimal("20"),
    )


@pytest.fixture
def duo_terms(budget_slots):
    """Exactly one budget + one premium item, 10% off."""
    return ComboTerms(
        code="CMB-0002",
        slots=(
            Slot(name="Budget", min_price_q=0, max_price_q=10000, max_items=1, priority=2),
            Slot(name="Premium", min_price_q=15000, max_price_q=30000, max_items=1, priority=1),
        ),
        discount_type=DiscountType.PERCENTAGE,
        discount_value=Decimal("10"),
        rules=ComboRules(min_total_items=2, max_total_items=2, require_all_slots_filled=True),
    )


@pytest.fixture
def combo(db):
    """Persisted 20% combo with a budget and a premium slot."""
    c = Combo.objects.create(
        code="CMB-0100",
        name="Weekend Duo",
        discount_type=DiscountType.PERCENTAGE,
        discount_value=Decimal("20"),
        min_total_items=2,
    )
    PriceSlot.objects.create(combo=c, name="Budget", min_price_q=0, max_price_q=10000, priority=2, sort_order=1)
    PriceSlot.objects.create(combo=c, name="Premium", min_price_q=15000, max_price_q=30000, priority=1, sort_order=2)
    return c


@pytest.fixture
def limited_combo(db):
    """Fixed 50.00 off, may be used once."""
    c = Combo.objects.create(
        code="CMB-0200",
        name="Once Only",
        discount_type=DiscountType.FIXED,
        discount_value=Decimal("5000"),
        usage_limit=1,
    )
    PriceSlot.objects.create(combo=c, name="Any", min_price_q=0, max_price_q=100000)
    return c


@pytest.fixture
def expired_combo(db):
    c = Combo.objects.create(
        code="CMB-0300",
        name="Last Season",
        discount_type=DiscountType.PERCENTAGE,
        discount_value=Decimal("50"),
        valid_until=timezone.now() - timedelta(days=1),
    )
    PriceSlot.objects.create(combo=c, name="Any", min_price_q=0, max_price_q=100000)
    return c
