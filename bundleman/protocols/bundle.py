"""Bundle value types."""

from dataclasses import dataclass, field

from django.db import models
from django.utils.translation import gettext_lazy as _

from bundleman.exceptions import PricingError


class BundleType(models.TextChoices):
    SAME_SIZE_DIFFERENT_COLORS = "same_size_different_colors", _("Same size, different colors")
    DIFFERENT_SIZES_SAME_COLOR = "different_sizes_same_color", _("Different sizes, same color")
    DIFFERENT_SIZES_DIFFERENT_COLORS = "different_sizes_different_colors", _("Mixed sizes and colors")
    CUSTOM = "custom", _("Custom")


class VariantRole(models.TextChoices):
    STANDALONE = "standalone", _("Standalone")
    PARENT = "parent", _("Parent")
    CHILD = "child", _("Child")


# Tags used in the third segment of product codes.
BUNDLE_TYPE_TAGS = {
    BundleType.SAME_SIZE_DIFFERENT_COLORS: "SC",
    BundleType.DIFFERENT_SIZES_SAME_COLOR: "DS",
    BundleType.DIFFERENT_SIZES_DIFFERENT_COLORS: "DC",
    BundleType.CUSTOM: "CT",
}
CHILD_TAG = "CH"
STANDALONE_TAG = "ST"


@dataclass(frozen=True)
class BundleSpec:
    """
    How a bundle catalog entry expands into variants.

    custom_variant_quantities is keyed by the varying axis value
    (a color, a size, or an "Item NN" label for numbered placeholders).
    """

    bundle_type: str
    total_quantity: int
    base_size: str = ""
    base_color: str = ""
    sizes: tuple[str, ...] = ()
    colors: tuple[str, ...] = ()
    price_variation_q: int = 0
    custom_variant_quantities: dict[str, int] = field(default_factory=dict)

    def __post_init__(self):
        if self.bundle_type not in BundleType.values:
            raise PricingError("INVALID_BUNDLE_SPEC", f"Unknown bundle type '{self.bundle_type}'")
        if self.total_quantity < 1:
            raise PricingError("INVALID_BUNDLE_SPEC", "total_quantity must be at least 1")
        for key, qty in self.custom_variant_quantities.items():
            if qty < 0:
                raise PricingError(
                    "INVALID_BUNDLE_SPEC",
                    f"Negative quantity for variant '{key}'",
                    variant=key,
                )
        object.__setattr__(self, "sizes", tuple(self.sizes))
        object.__setattr__(self, "colors", tuple(self.colors))

    @property
    def tag(self) -> str:
        return BUNDLE_TYPE_TAGS[self.bundle_type]


@dataclass(frozen=True)
class Variant:
    """One generated inventory record of a bundle."""

    role: str
    size: str
    color: str
    quantity: int
    serial_number: int
    code: str
    barcode: str
    price_q: int
    mrp_q: int
    label: str = ""
