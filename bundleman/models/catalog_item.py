"""CatalogItem model."""

from decimal import ROUND_HALF_UP, Decimal

from django.core.exceptions import ValidationError
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.utils.translation import gettext_lazy as _
from simple_history.models import HistoricalRecords
from taggit.managers import TaggableManager

from bundleman.protocols.bundle import BundleType, VariantRole


class CatalogItemQuerySet(models.QuerySet):
    """Custom QuerySet for CatalogItem."""

    def active(self):
        return self.filter(is_active=True)

    def parents(self):
        return self.filter(role=VariantRole.PARENT)

    def sellable(self):
        """Items that go on a bill: standalone products and bundle variants."""
        return self.filter(is_active=True).exclude(quantity=0)


class CatalogItem(models.Model):
    """
    Inventory record: a standalone product, a bundle parent or a bundle child.

    Children point to their parent; parent.children is the reverse index.
    Quantities of a parent and its children add up to the bundle total.
    """

    code = models.CharField(
        _("código"),
        max_length=100,
        unique=True,
        help_text=_("Ex: SHI/MW/SC/000001 (filho: SHI/MW/SC/000001/01)"),
    )
    barcode = models.CharField(
        _("código de barras"),
        max_length=13,
        unique=True,
        null=True,
        blank=True,
    )
    name = models.CharField(_("nome"), max_length=200)

    role = models.CharField(
        _("papel"),
        max_length=20,
        choices=VariantRole.choices,
        default=VariantRole.STANDALONE,
        db_index=True,
    )
    parent = models.ForeignKey(
        "self",
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="children",
        verbose_name=_("produto pai"),
    )
    bundle_type = models.CharField(
        _("tipo de pacote"),
        max_length=40,
        choices=BundleType.choices,
        blank=True,
    )
    serial_number = models.PositiveIntegerField(_("número de série"), default=0)

    size = models.CharField(_("tamanho"), max_length=40, blank=True)
    color = models.CharField(_("cor"), max_length=40, blank=True)
    quantity = models.PositiveIntegerField(_("quantidade"), default=0)

    category = models.CharField(_("categoria"), max_length=3, default="GEN")
    subcategory = models.CharField(_("subcategoria"), max_length=2, default="XX")

    # Prices (in cents)
    price_q = models.BigIntegerField(
        _("preço de venda"),
        default=0,
        validators=[MinValueValidator(0)],
        help_text=_("Preço em centavos"),
    )
    mrp_q = models.BigIntegerField(
        _("preço máximo de varejo"),
        default=0,
        validators=[MinValueValidator(0)],
        help_text=_("MRP em centavos"),
    )
    tax_rate = models.DecimalField(
        _("alíquota"),
        max_digits=5,
        decimal_places=2,
        default=Decimal("0"),
        validators=[MinValueValidator(Decimal("0")), MaxValueValidator(Decimal("100"))],
    )

    is_active = models.BooleanField(_("ativo"), default=True, db_index=True)
    is_combo_eligible = models.BooleanField(
        _("elegível a combos"),
        default=True,
        help_text=_("Pode ser vendido dentro de combos"),
    )

    keywords = TaggableManager(
        blank=True,
        verbose_name=_("palavras-chave"),
        help_text=_("Tags para busca. Separe por vírgula."),
    )

    created_at = models.DateTimeField(_("criado em"), auto_now_add=True)
    updated_at = models.DateTimeField(_("atualizado em"), auto_now=True)

    history = HistoricalRecords()

    objects = CatalogItemQuerySet.as_manager()

    class Meta:
        verbose_name = _("item de catálogo")
        verbose_name_plural = _("itens de catálogo")
        ordering = ["code"]
        indexes = [
            models.Index(fields=["role", "is_active"], name="catalogitem_role_active_idx"),
        ]

    def __str__(self):
        return f"{self.code} - {self.name}"

    def clean(self):
        if self.role == VariantRole.CHILD and self.parent_id is None:
            raise ValidationError({"parent": "A child item needs a parent."})
        if self.role != VariantRole.CHILD and self.parent_id is not None:
            raise ValidationError({"parent": "Only child items have a parent."})
        if self.parent_id is not None and self.parent_id == self.pk:
            raise ValidationError({"parent": "An item cannot be its own parent."})

    @property
    def price(self) -> Decimal:
        """Selling price in currency units."""
        return Decimal(self.price_q) / 100

    @price.setter
    def price(self, value: Decimal):
        self.price_q = int((Decimal(str(value)) * 100).to_integral_value(rounding=ROUND_HALF_UP))

    @property
    def is_bundle_parent(self) -> bool:
        return self.role == VariantRole.PARENT

    @property
    def stock_value_q(self) -> int:
        return self.price_q * self.quantity
