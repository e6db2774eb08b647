"""Combo and PriceSlot models."""

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import F, Q
from django.utils import timezone
from django.utils.translation import gettext_lazy as _
from simple_history.models import HistoricalRecords
from taggit.managers import TaggableManager

from bundleman.protocols.combo import BuyXGetY, ComboRules, ComboTerms, DiscountType
from bundleman.protocols.combo import PriceSlot as PriceSlotTerms


class ComboQuerySet(models.QuerySet):
    """Custom QuerySet for Combo with validity filters."""

    def available(self, now=None):
        """Active, not paused, inside validity window, usage below limit."""
        now = now or timezone.now()
        return self.filter(
            Q(valid_from__isnull=True) | Q(valid_from__lte=now),
            Q(valid_until__isnull=True) | Q(valid_until__gte=now),
            Q(usage_limit__isnull=True) | Q(usage_count__lt=F("usage_limit")),
            is_active=True,
            is_paused=False,
        )


class Combo(models.Model):
    """
    Purchasing rule: items matching the price slots, bought together,
    earn a discount.

    Never hard-deleted once a bill references it; deactivate instead.
    """

    code = models.CharField(
        _("código"),
        max_length=20,
        unique=True,
        blank=True,
        help_text=_("Gerado automaticamente (CMB-0001) se vazio"),
    )
    name = models.CharField(_("nome"), max_length=100)
    description = models.TextField(_("descrição"), blank=True)

    # Discount policy
    discount_type = models.CharField(
        _("tipo de desconto"),
        max_length=20,
        choices=DiscountType.choices,
        default=DiscountType.PERCENTAGE,
    )
    discount_value = models.DecimalField(
        _("valor do desconto"),
        max_digits=12,
        decimal_places=2,
        default=Decimal("0"),
        validators=[MinValueValidator(Decimal("0"))],
        help_text=_("Percentual (percentage) ou centavos (fixed)"),
    )
    max_discount_q = models.BigIntegerField(
        _("desconto máximo"),
        null=True,
        blank=True,
        validators=[MinValueValidator(0)],
        help_text=_("Teto do desconto em centavos"),
    )
    buy_qty = models.PositiveIntegerField(_("compre X"), null=True, blank=True)
    get_qty = models.PositiveIntegerField(_("leve Y"), null=True, blank=True)
    get_discount_percent = models.DecimalField(
        _("desconto nos itens Y"),
        max_digits=5,
        decimal_places=2,
        default=Decimal("100"),
    )

    # Rules
    min_total_items = models.PositiveIntegerField(_("mínimo de itens"), default=0)
    max_total_items = models.PositiveIntegerField(_("máximo de itens"), null=True, blank=True)
    allow_duplicate_products = models.BooleanField(_("permite produtos repetidos"), default=False)
    require_all_slots_filled = models.BooleanField(_("exige todas as faixas"), default=False)
    min_cart_value_q = models.BigIntegerField(_("valor mínimo"), default=0, validators=[MinValueValidator(0)])
    max_cart_value_q = models.BigIntegerField(
        _("valor máximo"),
        null=True,
        blank=True,
        validators=[MinValueValidator(0)],
    )
    prevent_high_value_in_low_slot = models.BooleanField(
        _("protege faixas baratas"),
        default=True,
        help_text=_("Recusa itens caros atribuídos manualmente a faixas baratas"),
    )

    # Validity
    valid_from = models.DateTimeField(_("válido de"), null=True, blank=True)
    valid_until = models.DateTimeField(_("válido até"), null=True, blank=True)
    usage_limit = models.PositiveIntegerField(_("limite de uso"), null=True, blank=True)
    usage_count = models.PositiveIntegerField(_("usos"), default=0)

    is_active = models.BooleanField(_("ativo"), default=True, db_index=True)
    is_paused = models.BooleanField(_("pausado"), default=False)

    tags = TaggableManager(blank=True, verbose_name=_("tags"))

    created_at = models.DateTimeField(_("criado em"), auto_now_add=True)
    updated_at = models.DateTimeField(_("atualizado em"), auto_now=True)

    history = HistoricalRecords()

    objects = ComboQuerySet.as_manager()

    class Meta:
        verbose_name = _("combo")
        verbose_name_plural = _("combos")
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["is_active", "is_paused"], name="combo_active_paused_idx"),
            models.Index(fields=["valid_from", "valid_until"], name="combo_validity_idx"),
        ]

    def __str__(self):
        return f"{self.code} - {self.name}"

    def clean(self):
        if self.valid_from and self.valid_until and self.valid_from > self.valid_until:
            raise ValidationError({"valid_until": "Must be after valid_from."})
        if self.discount_type == DiscountType.PERCENTAGE and self.discount_value > 100:
            raise ValidationError({"discount_value": "Percentage cannot exceed 100."})
        if self.discount_type == DiscountType.BUY_X_GET_Y and not (self.buy_qty and self.get_qty):
            raise ValidationError("Buy X get Y combos need buy_qty and get_qty.")
        if self.max_total_items is not None and self.max_total_items < self.min_total_items:
            raise ValidationError({"max_total_items": "Must not be below min_total_items."})

    def save(self, *args, **kwargs):
        if not self.code:
            from bundleman.service import PricingService

            self.code = PricingService.next_combo_code()
        super().save(*args, **kwargs)

    @property
    def rules(self) -> ComboRules:
        return ComboRules(
            min_total_items=self.min_total_items,
            max_total_items=self.max_total_items,
            allow_duplicate_products=self.allow_duplicate_products,
            require_all_slots_filled=self.require_all_slots_filled,
            min_cart_value_q=self.min_cart_value_q,
            max_cart_value_q=self.max_cart_value_q,
        )

    def to_terms(self) -> ComboTerms:
        """Detach into the pure value type used by the pricing engine."""
        buy_x_get_y = None
        if self.buy_qty and self.get_qty:
            buy_x_get_y = BuyXGetY(
                buy_qty=self.buy_qty,
                get_qty=self.get_qty,
                get_discount_percent=self.get_discount_percent,
            )
        return ComboTerms(
            code=self.code,
            slots=tuple(slot.to_slot() for slot in self.slots.all()),
            discount_type=self.discount_type,
            discount_value=self.discount_value,
            rules=self.rules,
            max_discount_q=self.max_discount_q,
            buy_x_get_y=buy_x_get_y,
            valid_from=self.valid_from,
            valid_until=self.valid_until,
            usage_limit=self.usage_limit,
            usage_count=self.usage_count,
            is_active=self.is_active,
            is_paused=self.is_paused,
            prevent_high_value_in_low_slot=self.prevent_high_value_in_low_slot,
        )

    @property
    def status(self) -> str:
        from bundleman.discounts import combo_status

        return combo_status(self.to_terms())


class PriceSlot(models.Model):
    """Price band of a combo. Immutable once a completed sale references it."""

    combo = models.ForeignKey(
        Combo,
        on_delete=models.CASCADE,
        related_name="slots",
        verbose_name=_("combo"),
    )
    name = models.CharField(_("nome"), max_length=60)
    min_price_q = models.BigIntegerField(_("preço mínimo"), validators=[MinValueValidator(0)])
    max_price_q = models.BigIntegerField(_("preço máximo"), validators=[MinValueValidator(0)])
    max_items = models.PositiveIntegerField(_("máximo de itens"), default=0, help_text=_("0 = sem limite"))
    priority = models.IntegerField(_("prioridade"), default=0, help_text=_("Maior vence empates"))
    is_active = models.BooleanField(_("ativo"), default=True)
    sort_order = models.IntegerField(_("ordem"), default=0)

    class Meta:
        verbose_name = _("faixa de preço")
        verbose_name_plural = _("faixas de preço")
        ordering = ["sort_order", "pk"]
        constraints = [
            models.UniqueConstraint(fields=["combo", "name"], name="unique_combo_slot_name"),
        ]

    def __str__(self):
        return f"{self.name} ({self.min_price_q}-{self.max_price_q}) em {self.combo.code}"

    def clean(self):
        if self.min_price_q is not None and self.max_price_q is not None:
            if self.min_price_q > self.max_price_q:
                raise ValidationError({"max_price_q": "Max price must not be below min price."})

    def save(self, *args, **kwargs):
        self.full_clean()
        super().save(*args, **kwargs)

    def to_slot(self) -> PriceSlotTerms:
        return PriceSlotTerms(
            name=self.name,
            min_price_q=self.min_price_q,
            max_price_q=self.max_price_q,
            max_items=self.max_items,
            priority=self.priority,
            active=self.is_active,
        )
