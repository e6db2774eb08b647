"""
Bundle variant generation.

A bundle expands into one parent record and zero or more children, one per
size/color variant. Quantities always add up to spec.total_quantity: the
parent takes whatever the children leave over.

Mixed bundles (different sizes AND different colors) are NOT expanded into
the sizes x colors cross-product. They hold 1 parent unit plus
total_quantity - 1 undifferentiated children of quantity 1 each, sized and
colored "Mixed". Such a bundle needs total_quantity >= 2.
"""

from __future__ import annotations

from dataclasses import dataclass

from bundleman.barcodes import next_barcode
from bundleman.exceptions import PricingError
from bundleman.protocols.bundle import BundleSpec, BundleType, Variant, VariantRole
from bundleman.sequences import SequenceAllocator, child_code, child_scope

MIXED = "Mixed"
STANDARD_SIZE = "Standard"
DEFAULT_COLOR = "Default"


@dataclass
class _Planned:
    size: str
    color: str
    quantity: int
    label: str


def _unique(values) -> list[str]:
    seen = []
    for value in values:
        if value and value not in seen:
            seen.append(value)
    return seen


def _split_axis(spec: BundleSpec, axis: list[str], base: str) -> tuple[int, list[tuple[str, int]]]:
    """
    Quantities along one varying axis.

    The base value belongs to the parent. Children take their explicit
    quantity or an equal share of the total; the parent keeps the rest
    unless it has an explicit quantity of its own.
    """
    values = _unique([base, *axis])
    share = spec.total_quantity // len(values)
    custom = spec.custom_variant_quantities

    children = []
    for value in values:
        if value == base:
            continue
        children.append((value, custom.get(value, share)))

    parent_qty = custom.get(base, spec.total_quantity - sum(qty for _, qty in children))
    return parent_qty, children


def _plan_single_axis(spec: BundleSpec, vary: str) -> tuple[_Planned, list[_Planned]]:
    if vary == "color":
        if not spec.colors and not spec.base_color:
            raise PricingError("INVALID_BUNDLE_SPEC", "Color bundle needs at least one color")
        size = spec.base_size or (spec.sizes[0] if spec.sizes else STANDARD_SIZE)
        base = spec.base_color or spec.colors[0]
        parent_qty, children = _split_axis(spec, list(spec.colors), base)
        parent = _Planned(size=size, color=base, quantity=parent_qty, label=f"{size} - {base}")
        planned = [_Planned(size=size, color=c, quantity=q, label=f"{size} - {c}") for c, q in children]
        return parent, planned

    if not spec.sizes and not spec.base_size:
        raise PricingError("INVALID_BUNDLE_SPEC", "Size bundle needs at least one size")
    color = spec.base_color or (spec.colors[0] if spec.colors else DEFAULT_COLOR)
    base = spec.base_size or spec.sizes[0]
    parent_qty, children = _split_axis(spec, list(spec.sizes), base)
    parent = _Planned(size=base, color=color, quantity=parent_qty, label=f"{base} - {color}")
    planned = [_Planned(size=s, color=color, quantity=q, label=f"{s} - {color}") for s, q in children]
    return parent, planned


def _plan_mixed(spec: BundleSpec) -> tuple[_Planned, list[_Planned]]:
    if spec.total_quantity < 2:
        raise PricingError(
            "INVALID_BUNDLE_SPEC",
            "Mixed bundle must have at least 2 items (1 parent + 1 child)",
            total_quantity=spec.total_quantity,
        )
    size = spec.sizes[0] if spec.sizes else MIXED
    color = spec.colors[0] if spec.colors else MIXED
    parent = _Planned(size=size, color=color, quantity=1, label=f"{size} - {color}")
    children = [
        _Planned(size=MIXED, color=MIXED, quantity=1, label="Mixed Bundle")
        for _ in range(spec.total_quantity - 1)
    ]
    return parent, children


def _plan_numbered(spec: BundleSpec) -> tuple[_Planned, list[_Planned]]:
    custom = spec.custom_variant_quantities
    children = []
    for i in range(1, spec.total_quantity):
        label = f"Item {i:02d}"
        children.append(_Planned(STANDARD_SIZE, DEFAULT_COLOR, custom.get(label, 1), label))
    parent_qty = spec.total_quantity - sum(child.quantity for child in children)
    parent = _Planned(STANDARD_SIZE, DEFAULT_COLOR, parent_qty, STANDARD_SIZE)
    return parent, children


def plan_variants(spec: BundleSpec) -> tuple[_Planned, list[_Planned]]:
    """Decide sizes, colors and quantities without touching any sequence."""
    if spec.bundle_type == BundleType.SAME_SIZE_DIFFERENT_COLORS:
        return _plan_single_axis(spec, "color")
    if spec.bundle_type == BundleType.DIFFERENT_SIZES_SAME_COLOR:
        return _plan_single_axis(spec, "size")
    if spec.bundle_type == BundleType.DIFFERENT_SIZES_DIFFERENT_COLORS:
        return _plan_mixed(spec)
    if len(spec.sizes) > 1:
        return _plan_single_axis(spec, "size")
    if len(spec.colors) > 1:
        return _plan_single_axis(spec, "color")
    return _plan_numbered(spec)


def generate_variants(
    spec: BundleSpec,
    parent_code: str,
    base_price_q: int,
    mrp_q: int | None = None,
    allocator: SequenceAllocator | None = None,
    max_children: int | None = None,
) -> list[Variant]:
    """
    Expand a bundle into parent + child variants.

    Args:
        spec: Bundle specification
        parent_code: Code of the parent catalog item; children append /NN
        base_price_q: Parent selling price in cents
        mrp_q: Parent MRP in cents (defaults to base_price_q)
        allocator: Sequence allocator for child serials (scoped to the parent)
            and barcode payloads (scoped to the role)
        max_children: Child cap (defaults to BUNDLEMAN["MAX_BUNDLE_CHILDREN"])

    Returns:
        [parent, *children]; zero-quantity children are left out

    Raises:
        PricingError: INVALID_BUNDLE_SPEC, QUANTITY_MISMATCH,
            BARCODE_SPACE_EXHAUSTED
    """
    from bundleman.conf import bundleman_settings

    if max_children is None:
        max_children = bundleman_settings.MAX_BUNDLE_CHILDREN
    mrp_q = base_price_q if mrp_q is None else mrp_q

    price_q = base_price_q + spec.price_variation_q
    variant_mrp_q = mrp_q + spec.price_variation_q
    if price_q < 0 or variant_mrp_q < 0:
        raise PricingError(
            "INVALID_BUNDLE_SPEC",
            "Price variation makes the variant price negative",
            price_variation_q=spec.price_variation_q,
        )

    parent, planned = plan_variants(spec)
    children = [child for child in planned if child.quantity > 0]

    if len(children) > max_children:
        raise PricingError(
            "INVALID_BUNDLE_SPEC",
            f"Bundle would have {len(children)} children, limit is {max_children}",
            children=len(children),
        )

    total = parent.quantity + sum(child.quantity for child in children)
    if parent.quantity < 0 or total != spec.total_quantity:
        raise PricingError(
            "QUANTITY_MISMATCH",
            expected=spec.total_quantity,
            got=total,
            parent_quantity=parent.quantity,
        )

    allocator = allocator or SequenceAllocator()
    variants = [
        Variant(
            role=VariantRole.PARENT,
            size=parent.size,
            color=parent.color,
            quantity=parent.quantity,
            serial_number=0,
            code=parent_code,
            barcode=next_barcode(VariantRole.PARENT, allocator),
            price_q=price_q,
            mrp_q=variant_mrp_q,
            label=parent.label,
        )
    ]

    scope = child_scope(parent_code)
    for child in children:
        serial = allocator.next(scope)
        code = child_code(parent_code, serial)
        variants.append(
            Variant(
                role=VariantRole.CHILD,
                size=child.size,
                color=child.color,
                quantity=child.quantity,
                serial_number=serial,
                code=code,
                barcode=next_barcode(VariantRole.CHILD, allocator),
                price_q=price_q,
                mrp_q=variant_mrp_q,
                label=child.label,
            )
        )

    return variants
