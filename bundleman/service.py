"""
Bundleman public API.

COMBOS:
    PricingService.get_combo(code)              - Get combo
    PricingService.match_slot(code, price_q)    - Slot a price belongs to
    PricingService.apply_combo(code, items)     - Price a cart as a combo

BUNDLES:
    PricingService.create_product(...)          - Standalone catalog item
    PricingService.create_bundle(...)           - Parent + child catalog items
    PricingService.bundle_summary(code)         - Stock and value of a bundle

NUMBERING:
    PricingService.next_bill_number()           - BILLyymmdd0001
    PricingService.next_vendor_code()           - VEN000001
    PricingService.next_category_code(name)     - CATSHI0001
    PricingService.next_combo_code()            - CMB-0001

BILLING:
    PricingService.close_bill(lines, combos)    - Bill totals
"""

import logging
from datetime import date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Sequence

from django.db import IntegrityError, models, transaction
from django.utils import timezone

from bundleman import billing, discounts, slots
from bundleman.barcodes import next_barcode
from bundleman.conf import bundleman_settings
from bundleman.exceptions import PricingError
from bundleman.protocols import (
    AppliedCombo,
    BillLineItem,
    BillTotals,
    BundleSpec,
    ComboApplication,
    ComboItem,
    PriceSlot,
    VariantRole,
)
from bundleman.protocols.bundle import STANDALONE_TAG
from bundleman.sequences import (
    COMBO_SCOPE,
    VENDOR_SCOPE,
    SequenceAllocator,
    allocate,
    bill_number,
    bill_scope,
    category_code,
    category_prefix,
    category_scope,
    combo_code,
    product_code,
    product_scope,
    subcategory_prefix,
    vendor_code,
)
from bundleman.variants import generate_variants

if TYPE_CHECKING:
    from bundleman.models import CatalogItem, Combo

logger = logging.getLogger(__name__)


class PricingService:
    """
    Bundleman public API.

    Uses @classmethod so projects can subclass and override single steps.
    """

    # ======================================================================
    # COMBOS
    # ======================================================================

    @classmethod
    def get_combo(cls, code: str) -> "Combo":
        """
        Get a combo with its slots.

        Raises:
            PricingError: COMBO_NOT_FOUND
        """
        from bundleman.models import Combo

        combo = Combo.objects.prefetch_related("slots").filter(code=code).first()
        if combo is None:
            raise PricingError("COMBO_NOT_FOUND", combo=code)
        return combo

    @classmethod
    def match_slot(cls, code: str, price_q: int) -> PriceSlot:
        """
        Slot of combo `code` that a price falls into.

        Raises:
            PricingError: COMBO_NOT_FOUND, NO_SLOT_MATCHED
        """
        return slots.match_slot(price_q, cls.get_combo(code).to_terms().slots)

    @classmethod
    def apply_combo(
        cls,
        code: str,
        items: Sequence[ComboItem],
        now: datetime | None = None,
        strict: bool = True,
        count_usage: bool = True,
    ) -> ComboApplication:
        """
        Price cart items as one combo.

        Checks validity, assigns slots, enforces rules and computes the
        discount. With count_usage the combo's usage counter is bumped in
        the same transaction; a concurrent sale that takes the last use
        makes this call fail instead of overshooting usage_limit. combo_applied
        is sent only for counted uses, never for quotes.

        Args:
            code: Combo code
            items: Cart items (slot_name pins a manual assignment)
            now: Reference time (defaults to timezone.now())
            strict: Raise on unslottable items instead of excluding them
            count_usage: Record the use against usage_limit

        Returns:
            ComboApplication

        Raises:
            PricingError: COMBO_NOT_FOUND, COMBO_* validity codes,
                NO_SLOT_MATCHED, HIGH_VALUE_REJECTED, COMBO_RULES_VIOLATED,
                INVALID_DISCOUNT_POLICY
        """
        from bundleman.models import Combo
        from bundleman.signals import combo_applied

        combo = cls.get_combo(code)
        application = discounts.apply_combo(
            combo.to_terms(),
            items,
            now=now,
            strict=strict,
            buffer=bundleman_settings.HIGH_VALUE_BUFFER,
        )

        if count_usage:
            with transaction.atomic():
                updated = (
                    Combo.objects.filter(pk=combo.pk)
                    .filter(models.Q(usage_limit__isnull=True) | models.Q(usage_count__lt=models.F("usage_limit")))
                    .update(usage_count=models.F("usage_count") + 1)
                )
            if not updated:
                raise PricingError("COMBO_USAGE_EXCEEDED", combo=code, usage_limit=combo.usage_limit)
            combo.refresh_from_db(fields=["usage_count"])
            combo_applied.send(sender=Combo, instance=combo, code=code, applied=application.applied)

        logger.info(
            "Combo %s %s: %d items, discount %d of %d",
            code,
            "applied" if count_usage else "quoted",
            application.applied.items_count,
            application.applied.discount_amount_q,
            application.applied.original_amount_q,
        )
        return application

    # ======================================================================
    # BUNDLES
    # ======================================================================

    @classmethod
    def create_product(
        cls,
        name: str,
        price_q: int,
        category: str = "",
        subcategory: str | None = None,
        mrp_q: int | None = None,
        quantity: int = 0,
        tax_rate: Decimal = Decimal("0"),
        allocator: SequenceAllocator | None = None,
    ) -> "CatalogItem":
        """
        Create a standalone catalog item (code CAT/SUB/ST/000001).

        Raises:
            PricingError: ALLOCATION_UNAVAILABLE, CODE_COLLISION,
                BARCODE_SPACE_EXHAUSTED
        """
        from bundleman.models import CatalogItem

        cat, sub = category_prefix(category), subcategory_prefix(subcategory)
        scope = product_scope(cat, sub, STANDALONE_TAG)

        def write(seq):
            code = product_code(seq, cat, sub, STANDALONE_TAG)
            return CatalogItem.objects.create(
                code=code,
                barcode=next_barcode(VariantRole.STANDALONE, allocator),
                name=name,
                role=VariantRole.STANDALONE,
                quantity=quantity,
                category=cat,
                subcategory=sub,
                price_q=price_q,
                mrp_q=price_q if mrp_q is None else mrp_q,
                tax_rate=tax_rate,
            )

        return cls._write_with_fresh_code(scope, write, allocator)

    @classmethod
    def create_bundle(
        cls,
        name: str,
        spec: BundleSpec,
        price_q: int,
        category: str = "",
        subcategory: str | None = None,
        mrp_q: int | None = None,
        tax_rate: Decimal = Decimal("0"),
        allocator: SequenceAllocator | None = None,
    ) -> "CatalogItem":
        """
        Create a bundle: one parent CatalogItem plus its children.

        All rows are written in one transaction. If the generated code or a
        barcode already exists, a fresh code is allocated and the write is
        retried.

        Args:
            name: Display name (children get "<name> - <size> - <color>")
            spec: Bundle specification
            price_q: Base selling price in cents
            category: Category name (first three letters used)
            subcategory: Subcategory name (first two letters used)
            mrp_q: Base MRP in cents (defaults to price_q)
            tax_rate: GST rate in percent
            allocator: Sequence allocator (defaults to the configured backend)

        Returns:
            The parent CatalogItem

        Raises:
            PricingError: INVALID_BUNDLE_SPEC, QUANTITY_MISMATCH,
                ALLOCATION_UNAVAILABLE, CODE_COLLISION, BARCODE_SPACE_EXHAUSTED
        """
        from bundleman.models import CatalogItem
        from bundleman.signals import bundle_created

        allocator = allocator or SequenceAllocator()
        cat, sub = category_prefix(category), subcategory_prefix(subcategory)
        scope = product_scope(cat, sub, spec.tag)

        def write(seq):
            parent_code = product_code(seq, cat, sub, spec.tag)
            variants = generate_variants(spec, parent_code, price_q, mrp_q, allocator=allocator)
            head, tail = variants[0], variants[1:]
            common = {
                "bundle_type": spec.bundle_type,
                "category": cat,
                "subcategory": sub,
                "tax_rate": tax_rate,
            }
            parent = CatalogItem.objects.create(
                code=head.code,
                barcode=head.barcode,
                name=name,
                role=VariantRole.PARENT,
                size=head.size,
                color=head.color,
                quantity=head.quantity,
                serial_number=head.serial_number,
                price_q=head.price_q,
                mrp_q=head.mrp_q,
                **common,
            )
            children = [
                CatalogItem.objects.create(
                    code=variant.code,
                    barcode=variant.barcode,
                    name=f"{name} - {variant.label}",
                    role=VariantRole.CHILD,
                    parent=parent,
                    size=variant.size,
                    color=variant.color,
                    quantity=variant.quantity,
                    serial_number=variant.serial_number,
                    price_q=variant.price_q,
                    mrp_q=variant.mrp_q,
                    **common,
                )
                for variant in tail
            ]
            return parent, children

        parent, children = cls._write_with_fresh_code(scope, write, allocator)
        logger.info(
            "Bundle %s created: %d children, %d units",
            parent.code,
            len(children),
            spec.total_quantity,
        )
        bundle_created.send(sender=CatalogItem, instance=parent, code=parent.code, children=children)
        return parent

    @classmethod
    def _write_with_fresh_code(cls, scope: str, write, allocator: SequenceAllocator | None):
        """
        Run write(seq) in a transaction, allocating a new seq on IntegrityError.

        Gives up after ALLOCATION_RETRIES collisions.
        """
        retries = bundleman_settings.ALLOCATION_RETRIES
        for attempt in range(retries + 1):
            seq = allocate(scope, allocator)
            try:
                with transaction.atomic():
                    return write(seq)
            except IntegrityError as exc:
                logger.warning("Code collision in %s (seq %d, attempt %d): %s", scope, seq, attempt + 1, exc)
        raise PricingError(
            "CODE_COLLISION",
            "Could not allocate a unique code",
            scope_key=scope,
            attempts=retries + 1,
        )

    @classmethod
    def bundle_summary(cls, code: str) -> dict:
        """
        Stock summary of a bundle.

        Returns:
            {"code", "children", "total_quantity", "total_value_q"}

        Raises:
            PricingError: PRODUCT_NOT_FOUND
        """
        from bundleman.models import CatalogItem

        parent = CatalogItem.objects.filter(code=code, role=VariantRole.PARENT).first()
        if parent is None:
            raise PricingError("PRODUCT_NOT_FOUND", code=code)

        rows = [parent, *parent.children.all()]
        return {
            "code": parent.code,
            "children": len(rows) - 1,
            "total_quantity": sum(row.quantity for row in rows),
            "total_value_q": sum(row.stock_value_q for row in rows),
        }

    # ======================================================================
    # NUMBERING
    # ======================================================================

    @classmethod
    def next_bill_number(cls, on: date | None = None, allocator: SequenceAllocator | None = None) -> str:
        """Next bill number for the day, e.g. BILL2406150001."""
        on = on or timezone.localdate()
        seq = allocate(bill_scope(on), allocator)
        return bill_number(seq, on, prefix=bundleman_settings.BILL_PREFIX)

    @classmethod
    def next_vendor_code(cls, allocator: SequenceAllocator | None = None) -> str:
        seq = allocate(VENDOR_SCOPE, allocator)
        return vendor_code(seq, prefix=bundleman_settings.VENDOR_PREFIX)

    @classmethod
    def next_category_code(cls, name: str, allocator: SequenceAllocator | None = None) -> str:
        seq = allocate(category_scope(name), allocator)
        return category_code(seq, name)

    @classmethod
    def next_combo_code(cls, allocator: SequenceAllocator | None = None) -> str:
        seq = allocate(COMBO_SCOPE, allocator)
        return combo_code(seq, prefix=bundleman_settings.COMBO_PREFIX)

    # ======================================================================
    # BILLING
    # ======================================================================

    @classmethod
    def close_bill(
        cls,
        line_items: Sequence[BillLineItem],
        applied_combos: Sequence[AppliedCombo] = (),
    ) -> BillTotals:
        """
        Totals for a bill.

        Raises:
            PricingError: INVALID_QUANTITY if the bill has no lines
        """
        if not line_items:
            raise PricingError("INVALID_QUANTITY", "A bill needs at least one line")
        totals = billing.aggregate(line_items, applied_combos)
        logger.info(
            "Bill closed: %d items, final %d (round-off %d), type %s",
            totals.total_item_count,
            totals.final_amount_q,
            totals.round_off_q,
            totals.bill_type,
        )
        return totals
