"""Bundleman exceptions."""

from typing import Any


ERROR_MESSAGES = {
    "NO_SLOT_MATCHED": "No active price slot matches the price",
    "HIGH_VALUE_REJECTED": "High-value item cannot be placed in a lower slot",
    "QUANTITY_MISMATCH": "Variant quantities do not add up to the bundle total",
    "ALLOCATION_UNAVAILABLE": "Sequence store is unavailable",
    "CODE_COLLISION": "Generated code or barcode already exists",
    "BARCODE_SPACE_EXHAUSTED": "No barcode payload left for this role",
    "INVALID_DISCOUNT_POLICY": "Invalid discount policy",
    "COMBO_NOT_FOUND": "Combo not found",
    "COMBO_INACTIVE": "Combo is inactive or paused",
    "COMBO_NOT_STARTED": "Combo is not valid yet",
    "COMBO_EXPIRED": "Combo expired",
    "COMBO_USAGE_EXCEEDED": "Combo usage limit reached",
    "COMBO_RULES_VIOLATED": "Items do not satisfy the combo rules",
    "INVALID_PRICE_SLOT": "Invalid price slot",
    "INVALID_BUNDLE_SPEC": "Invalid bundle specification",
    "INVALID_DIGITS": "Value must contain decimal digits only",
    "INVALID_SCOPE": "Invalid sequence scope",
    "INVALID_QUANTITY": "Invalid quantity",
    "PRODUCT_NOT_FOUND": "Catalog item not found",
}


class PricingError(Exception):
    """
    Structured exception for pricing and allocation operations.

    Usage:
        try:
            applied = PricingService.apply_combo("CMB-0001", items)
        except PricingError as e:
            if e.code == "COMBO_EXPIRED":
                print(f"Combo {e.combo} is no longer valid")
    """

    def __init__(self, code: str, message: str = "", **data: Any) -> None:
        self.code = code
        self.message = message or ERROR_MESSAGES.get(code, code)
        self.data = data
        super().__init__(f"[{code}] {self.message}")

    @property
    def combo(self) -> str | None:
        return self.data.get("combo")

    @property
    def is_transient(self) -> bool:
        """Only an unavailable sequence store is worth retrying."""
        return self.code == "ALLOCATION_UNAVAILABLE"

    def as_dict(self) -> dict:
        return {
            "code": self.code,
            "message": self.message,
            "data": self.data,
        }
