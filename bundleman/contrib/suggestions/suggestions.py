"""
Combo suggestions for a cart.

Every currently valid combo is tried against the cart without counting a
use. Items a combo cannot slot are left out of it rather than disqualifying
it. Combos that still break their rules, or save nothing, are not suggested.

Ranking:
    - Savings, highest first
    - Then efficiency (savings / matched value)
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Sequence

from django.utils import timezone

from bundleman.conf import bundleman_settings
from bundleman.discounts import apply_combo
from bundleman.exceptions import PricingError
from bundleman.models import Combo
from bundleman.protocols import ComboApplication, ComboItem

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ComboSuggestion:
    combo: Combo
    application: ComboApplication

    @property
    def savings_q(self) -> int:
        return self.application.applied.savings_amount_q

    @property
    def efficiency(self) -> Decimal:
        original_q = self.application.applied.original_amount_q
        if not original_q:
            return Decimal("0")
        return Decimal(self.savings_q) / original_q


def _try_combo(combo: Combo, items: Sequence[ComboItem], now: datetime) -> ComboApplication | None:
    try:
        return apply_combo(
            combo.to_terms(),
            items,
            now=now,
            strict=False,
            buffer=bundleman_settings.HIGH_VALUE_BUFFER,
        )
    except PricingError as exc:
        logger.debug("Combo %s does not fit cart: %s", combo.code, exc.code)
        return None


def find_suitable_combos(
    items: Sequence[ComboItem],
    now: datetime | None = None,
    limit: int = 5,
) -> list[ComboSuggestion]:
    """
    Rank the combos a cart would qualify for.

    Args:
        items: Cart items
        now: Reference time (defaults to timezone.now())
        limit: Maximum suggestions

    Returns:
        List of ComboSuggestion, best savings first
    """
    if not items:
        return []

    now = now or timezone.now()
    suggestions = []
    for combo in Combo.objects.available(now).prefetch_related("slots"):
        application = _try_combo(combo, items, now)
        if application is None or not application.assigned:
            continue
        if application.applied.savings_amount_q <= 0:
            continue
        suggestions.append(ComboSuggestion(combo=combo, application=application))

    suggestions.sort(key=lambda s: (s.savings_q, s.efficiency), reverse=True)
    return suggestions[:limit]
