import decimal

import django.core.validators
import django.db.models.deletion
import simple_history.models
import taggit.managers
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("taggit", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="SequenceCounter",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("scope_key", models.CharField(max_length=120, unique=True, verbose_name="escopo")),
                (
                    "last_value",
                    models.BigIntegerField(
                        default=0,
                        validators=[django.core.validators.MinValueValidator(0)],
                        verbose_name="último valor",
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="criado em")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="atualizado em")),
            ],
            options={
                "verbose_name": "contador de sequência",
                "verbose_name_plural": "contadores de sequência",
                "ordering": ["scope_key"],
            },
        ),
        migrations.CreateModel(
            name="Combo",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "code",
                    models.CharField(
                        blank=True,
                        help_text="Gerado automaticamente (CMB-0001) se vazio",
                        max_length=20,
                        unique=True,
                        verbose_name="código",
                    ),
                ),
                ("name", models.CharField(max_length=100, verbose_name="nome")),
                ("description", models.TextField(blank=True, verbose_name="descrição")),
                (
                    "discount_type",
                    models.CharField(
                        choices=[("percentage", "Percentage"), ("fixed", "Fixed amount"), ("buy_x_get_y", "Buy X get Y")],
                        default="percentage",
                        max_length=20,
                        verbose_name="tipo de desconto",
                    ),
                ),
                (
                    "discount_value",
                    models.DecimalField(
                        decimal_places=2,
                        default=decimal.Decimal("0"),
                        help_text="Percentual (percentage) ou centavos (fixed)",
                        max_digits=12,
                        validators=[django.core.validators.MinValueValidator(decimal.Decimal("0"))],
                        verbose_name="valor do desconto",
                    ),
                ),
                (
                    "max_discount_q",
                    models.BigIntegerField(
                        blank=True,
                        help_text="Teto do desconto em centavos",
                        null=True,
                        validators=[django.core.validators.MinValueValidator(0)],
                        verbose_name="desconto máximo",
                    ),
                ),
                ("buy_qty", models.PositiveIntegerField(blank=True, null=True, verbose_name="compre X")),
                ("get_qty", models.PositiveIntegerField(blank=True, null=True, verbose_name="leve Y")),
                (
                    "get_discount_percent",
                    models.DecimalField(
                        decimal_places=2,
                        default=decimal.Decimal("100"),
                        max_digits=5,
                        verbose_name="desconto nos itens Y",
                    ),
                ),
                ("min_total_items", models.PositiveIntegerField(default=0, verbose_name="mínimo de itens")),
                ("max_total_items", models.PositiveIntegerField(blank=True, null=True, verbose_name="máximo de itens")),
                (
                    "allow_duplicate_products",
                    models.BooleanField(default=False, verbose_name="permite produtos repetidos"),
                ),
                ("require_all_slots_filled", models.BooleanField(default=False, verbose_name="exige todas as faixas")),
                (
                    "min_cart_value_q",
                    models.BigIntegerField(
                        default=0,
                        validators=[django.core.validators.MinValueValidator(0)],
                        verbose_name="valor mínimo",
                    ),
                ),
                (
                    "max_cart_value_q",
                    models.BigIntegerField(
                        blank=True,
                        null=True,
                        validators=[django.core.validators.MinValueValidator(0)],
                        verbose_name="valor máximo",
                    ),
                ),
                (
                    "prevent_high_value_in_low_slot",
                    models.BooleanField(
                        default=True,
                        help_text="Recusa itens caros atribuídos manualmente a faixas baratas",
                        verbose_name="protege faixas baratas",
                    ),
                ),
                ("valid_from", models.DateTimeField(blank=True, null=True, verbose_name="válido de")),
                ("valid_until", models.DateTimeField(blank=True, null=True, verbose_name="válido até")),
                ("usage_limit", models.PositiveIntegerField(blank=True, null=True, verbose_name="limite de uso")),
                ("usage_count", models.PositiveIntegerField(default=0, verbose_name="usos")),
                ("is_active", models.BooleanField(db_index=True, default=True, verbose_name="ativo")),
                ("is_paused", models.BooleanField(default=False, verbose_name="pausado")),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="criado em")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="atualizado em")),
                (
                    "tags",
                    taggit.managers.TaggableManager(
                        blank=True,
                        help_text="A comma-separated list of tags.",
                        through="taggit.TaggedItem",
                        to="taggit.Tag",
                        verbose_name="tags",
                    ),
                ),
            ],
            options={
                "verbose_name": "combo",
                "verbose_name_plural": "combos",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["is_active", "is_paused"], name="combo_active_paused_idx"),
                    models.Index(fields=["valid_from", "valid_until"], name="combo_validity_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="PriceSlot",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=60, verbose_name="nome")),
                (
                    "min_price_q",
                    models.BigIntegerField(
                        validators=[django.core.validators.MinValueValidator(0)],
                        verbose_name="preço mínimo",
                    ),
                ),
                (
                    "max_price_q",
                    models.BigIntegerField(
                        validators=[django.core.validators.MinValueValidator(0)],
                        verbose_name="preço máximo",
                    ),
                ),
                (
                    "max_items",
                    models.PositiveIntegerField(default=0, help_text="0 = sem limite", verbose_name="máximo de itens"),
                ),
                (
                    "priority",
                    models.IntegerField(default=0, help_text="Maior vence empates", verbose_name="prioridade"),
                ),
                ("is_active", models.BooleanField(default=True, verbose_name="ativo")),
                ("sort_order", models.IntegerField(default=0, verbose_name="ordem")),
                (
                    "combo",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="slots",
                        to="bundleman.combo",
                        verbose_name="combo",
                    ),
                ),
            ],
            options={
                "verbose_name": "faixa de preço",
                "verbose_name_plural": "faixas de preço",
                "ordering": ["sort_order", "pk"],
                "constraints": [
                    models.UniqueConstraint(fields=("combo", "name"), name="unique_combo_slot_name"),
                ],
            },
        ),
        migrations.CreateModel(
            name="CatalogItem",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "code",
                    models.CharField(
                        help_text="Ex: SHI/MW/SC/000001 (filho: SHI/MW/SC/000001/01)",
                        max_length=100,
                        unique=True,
                        verbose_name="código",
                    ),
                ),
                (
                    "barcode",
                    models.CharField(
                        blank=True,
                        max_length=13,
                        null=True,
                        unique=True,
                        verbose_name="código de barras",
                    ),
                ),
                ("name", models.CharField(max_length=200, verbose_name="nome")),
                (
                    "role",
                    models.CharField(
                        choices=[("standalone", "Standalone"), ("parent", "Parent"), ("child", "Child")],
                        db_index=True,
                        default="standalone",
                        max_length=20,
                        verbose_name="papel",
                    ),
                ),
                (
                    "bundle_type",
                    models.CharField(
                        blank=True,
                        choices=[
                            ("same_size_different_colors", "Same size, different colors"),
                            ("different_sizes_same_color", "Different sizes, same color"),
                            ("different_sizes_different_colors", "Mixed sizes and colors"),
                            ("custom", "Custom"),
                        ],
                        max_length=40,
                        verbose_name="tipo de pacote",
                    ),
                ),
                ("serial_number", models.PositiveIntegerField(default=0, verbose_name="número de série")),
                ("size", models.CharField(blank=True, max_length=40, verbose_name="tamanho")),
                ("color", models.CharField(blank=True, max_length=40, verbose_name="cor")),
                ("quantity", models.PositiveIntegerField(default=0, verbose_name="quantidade")),
                ("category", models.CharField(default="GEN", max_length=3, verbose_name="categoria")),
                ("subcategory", models.CharField(default="XX", max_length=2, verbose_name="subcategoria")),
                (
                    "price_q",
                    models.BigIntegerField(
                        default=0,
                        help_text="Preço em centavos",
                        validators=[django.core.validators.MinValueValidator(0)],
                        verbose_name="preço de venda",
                    ),
                ),
                (
                    "mrp_q",
                    models.BigIntegerField(
                        default=0,
                        help_text="MRP em centavos",
                        validators=[django.core.validators.MinValueValidator(0)],
                        verbose_name="preço máximo de varejo",
                    ),
                ),
                (
                    "tax_rate",
                    models.DecimalField(
                        decimal_places=2,
                        default=decimal.Decimal("0"),
                        max_digits=5,
                        validators=[
                            django.core.validators.MinValueValidator(decimal.Decimal("0")),
                            django.core.validators.MaxValueValidator(decimal.Decimal("100")),
                        ],
                        verbose_name="alíquota",
                    ),
                ),
                ("is_active", models.BooleanField(db_index=True, default=True, verbose_name="ativo")),
                (
                    "is_combo_eligible",
                    models.BooleanField(
                        default=True,
                        help_text="Pode ser vendido dentro de combos",
                        verbose_name="elegível a combos",
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="criado em")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="atualizado em")),
                (
                    "parent",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="children",
                        to="bundleman.catalogitem",
                        verbose_name="produto pai",
                    ),
                ),
                (
                    "keywords",
                    taggit.managers.TaggableManager(
                        blank=True,
                        help_text="Tags para busca. Separe por vírgula.",
                        through="taggit.TaggedItem",
                        to="taggit.Tag",
                        verbose_name="palavras-chave",
                    ),
                ),
            ],
            options={
                "verbose_name": "item de catálogo",
                "verbose_name_plural": "itens de catálogo",
                "ordering": ["code"],
                "indexes": [
                    models.Index(fields=["role", "is_active"], name="catalogitem_role_active_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="HistoricalCombo",
            fields=[
                ("id", models.BigIntegerField(auto_created=True, blank=True, db_index=True, verbose_name="ID")),
                (
                    "code",
                    models.CharField(
                        blank=True,
                        db_index=True,
                        help_text="Gerado automaticamente (CMB-0001) se vazio",
                        max_length=20,
                        verbose_name="código",
                    ),
                ),
                ("name", models.CharField(max_length=100, verbose_name="nome")),
                ("description", models.TextField(blank=True, verbose_name="descrição")),
                (
                    "discount_type",
                    models.CharField(
                        choices=[("percentage", "Percentage"), ("fixed", "Fixed amount"), ("buy_x_get_y", "Buy X get Y")],
                        default="percentage",
                        max_length=20,
                        verbose_name="tipo de desconto",
                    ),
                ),
                (
                    "discount_value",
                    models.DecimalField(
                        decimal_places=2,
                        default=decimal.Decimal("0"),
                        help_text="Percentual (percentage) ou centavos (fixed)",
                        max_digits=12,
                        validators=[django.core.validators.MinValueValidator(decimal.Decimal("0"))],
                        verbose_name="valor do desconto",
                    ),
                ),
                (
                    "max_discount_q",
                    models.BigIntegerField(
                        blank=True,
                        help_text="Teto do desconto em centavos",
                        null=True,
                        validators=[django.core.validators.MinValueValidator(0)],
                        verbose_name="desconto máximo",
                    ),
                ),
                ("buy_qty", models.PositiveIntegerField(blank=True, null=True, verbose_name="compre X")),
                ("get_qty", models.PositiveIntegerField(blank=True, null=True, verbose_name="leve Y")),
                (
                    "get_discount_percent",
                    models.DecimalField(
                        decimal_places=2,
                        default=decimal.Decimal("100"),
                        max_digits=5,
                        verbose_name="desconto nos itens Y",
                    ),
                ),
                ("min_total_items", models.PositiveIntegerField(default=0, verbose_name="mínimo de itens")),
                ("max_total_items", models.PositiveIntegerField(blank=True, null=True, verbose_name="máximo de itens")),
                (
                    "allow_duplicate_products",
                    models.BooleanField(default=False, verbose_name="permite produtos repetidos"),
                ),
                ("require_all_slots_filled", models.BooleanField(default=False, verbose_name="exige todas as faixas")),
                (
                    "min_cart_value_q",
                    models.BigIntegerField(
                        default=0,
                        validators=[django.core.validators.MinValueValidator(0)],
                        verbose_name="valor mínimo",
                    ),
                ),
                (
                    "max_cart_value_q",
                    models.BigIntegerField(
                        blank=True,
                        null=True,
                        validators=[django.core.validators.MinValueValidator(0)],
                        verbose_name="valor máximo",
                    ),
                ),
                (
                    "prevent_high_value_in_low_slot",
                    models.BooleanField(
                        default=True,
                        help_text="Recusa itens caros atribuídos manualmente a faixas baratas",
                        verbose_name="protege faixas baratas",
                    ),
                ),
                ("valid_from", models.DateTimeField(blank=True, null=True, verbose_name="válido de")),
                ("valid_until", models.DateTimeField(blank=True, null=True, verbose_name="válido até")),
                ("usage_limit", models.PositiveIntegerField(blank=True, null=True, verbose_name="limite de uso")),
                ("usage_count", models.PositiveIntegerField(default=0, verbose_name="usos")),
                ("is_active", models.BooleanField(db_index=True, default=True, verbose_name="ativo")),
                ("is_paused", models.BooleanField(default=False, verbose_name="pausado")),
                ("created_at", models.DateTimeField(blank=True, editable=False, verbose_name="criado em")),
                ("updated_at", models.DateTimeField(blank=True, editable=False, verbose_name="atualizado em")),
                ("history_id", models.AutoField(primary_key=True, serialize=False)),
                ("history_date", models.DateTimeField(db_index=True)),
                ("history_change_reason", models.CharField(max_length=100, null=True)),
                (
                    "history_type",
                    models.CharField(choices=[("+", "Created"), ("~", "Changed"), ("-", "Deleted")], max_length=1),
                ),
                (
                    "history_user",
                    models.ForeignKey(
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "historical combo",
                "verbose_name_plural": "historical combos",
                "ordering": ("-history_date", "-history_id"),
                "get_latest_by": ("history_date", "history_id"),
            },
            bases=(simple_history.models.HistoricalChanges, models.Model),
        ),
        migrations.CreateModel(
            name="HistoricalCatalogItem",
            fields=[
                ("id", models.BigIntegerField(auto_created=True, blank=True, db_index=True, verbose_name="ID")),
                (
                    "code",
                    models.CharField(
                        db_index=True,
                        help_text="Ex: SHI/MW/SC/000001 (filho: SHI/MW/SC/000001/01)",
                        max_length=100,
                        verbose_name="código",
                    ),
                ),
                (
                    "barcode",
                    models.CharField(
                        blank=True,
                        db_index=True,
                        max_length=13,
                        null=True,
                        verbose_name="código de barras",
                    ),
                ),
                ("name", models.CharField(max_length=200, verbose_name="nome")),
                (
                    "role",
                    models.CharField(
                        choices=[("standalone", "Standalone"), ("parent", "Parent"), ("child", "Child")],
                        db_index=True,
                        default="standalone",
                        max_length=20,
                        verbose_name="papel",
                    ),
                ),
                (
                    "bundle_type",
                    models.CharField(
                        blank=True,
                        choices=[
                            ("same_size_different_colors", "Same size, different colors"),
                            ("different_sizes_same_color", "Different sizes, same color"),
                            ("different_sizes_different_colors", "Mixed sizes and colors"),
                            ("custom", "Custom"),
                        ],
                        max_length=40,
                        verbose_name="tipo de pacote",
                    ),
                ),
                ("serial_number", models.PositiveIntegerField(default=0, verbose_name="número de série")),
                ("size", models.CharField(blank=True, max_length=40, verbose_name="tamanho")),
                ("color", models.CharField(blank=True, max_length=40, verbose_name="cor")),
                ("quantity", models.PositiveIntegerField(default=0, verbose_name="quantidade")),
                ("category", models.CharField(default="GEN", max_length=3, verbose_name="categoria")),
                ("subcategory", models.CharField(default="XX", max_length=2, verbose_name="subcategoria")),
                (
                    "price_q",
                    models.BigIntegerField(
                        default=0,
                        help_text="Preço em centavos",
                        validators=[django.core.validators.MinValueValidator(0)],
                        verbose_name="preço de venda",
                    ),
                ),
                (
                    "mrp_q",
                    models.BigIntegerField(
                        default=0,
                        help_text="MRP em centavos",
                        validators=[django.core.validators.MinValueValidator(0)],
                        verbose_name="preço máximo de varejo",
                    ),
                ),
                (
                    "tax_rate",
                    models.DecimalField(
                        decimal_places=2,
                        default=decimal.Decimal("0"),
                        max_digits=5,
                        validators=[
                            django.core.validators.MinValueValidator(decimal.Decimal("0")),
                            django.core.validators.MaxValueValidator(decimal.Decimal("100")),
                        ],
                        verbose_name="alíquota",
                    ),
                ),
                ("is_active", models.BooleanField(db_index=True, default=True, verbose_name="ativo")),
                (
                    "is_combo_eligible",
                    models.BooleanField(
                        default=True,
                        help_text="Pode ser vendido dentro de combos",
                        verbose_name="elegível a combos",
                    ),
                ),
                ("created_at", models.DateTimeField(blank=True, editable=False, verbose_name="criado em")),
                ("updated_at", models.DateTimeField(blank=True, editable=False, verbose_name="atualizado em")),
                ("history_id", models.AutoField(primary_key=True, serialize=False)),
                ("history_date", models.DateTimeField(db_index=True)),
                ("history_change_reason", models.CharField(max_length=100, null=True)),
                (
                    "history_type",
                    models.CharField(choices=[("+", "Created"), ("~", "Changed"), ("-", "Deleted")], max_length=1),
                ),
                (
                    "history_user",
                    models.ForeignKey(
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "parent",
                    models.ForeignKey(
                        blank=True,
                        db_constraint=False,
                        null=True,
                        on_delete=django.db.models.deletion.DO_NOTHING,
                        related_name="+",
                        to="bundleman.catalogitem",
                        verbose_name="produto pai",
                    ),
                ),
            ],
            options={
                "verbose_name": "historical item de catálogo",
                "verbose_name_plural": "historical itens de catálogo",
                "ordering": ("-history_date", "-history_id"),
                "get_latest_by": ("history_date", "history_id"),
            },
            bases=(simple_history.models.HistoricalChanges, models.Model),
        ),
    ]
