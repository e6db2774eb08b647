"""
Barcode numbers with a trailing check digit.

Layout (EAN-13 shaped): 7-digit role prefix + N-digit payload + check digit.
The prefix tells a scanner whether it read a parent, a child or a standalone
item without any lookup. The payload is the item's serial in its role's
barcode sequence (scope BARCODE/<role>), so two items of the same role never
share a barcode, whatever their category or parent.
"""

from bundleman.exceptions import PricingError
from bundleman.sequences import SequenceAllocator, allocate, barcode_scope


def _require_digits(digits: str) -> None:
    if not digits or not digits.isascii() or not digits.isdigit():
        raise PricingError("INVALID_DIGITS", value=digits)


def check_digit(digits: str) -> int:
    """
    Weighted mod-10 check digit.

    Weights alternate 1, 3, 1, 3... from the leftmost digit.
    """
    _require_digits(digits)
    total = sum(int(d) * (3 if i % 2 else 1) for i, d in enumerate(digits))
    return (10 - total % 10) % 10


def is_valid_barcode(barcode: str) -> bool:
    """True if the last digit is the check digit of the rest."""
    if len(barcode) < 2 or not barcode.isascii() or not barcode.isdigit():
        return False
    return check_digit(barcode[:-1]) == int(barcode[-1])


def build_barcode(role: str, serial: int, prefixes: dict[str, str] | None = None, width: int | None = None) -> str:
    """
    Build the barcode for a role serial.

    Args:
        role: "parent", "child" or "standalone"
        serial: Value issued by the role's barcode sequence
        prefixes: Role → numeric prefix (defaults to BUNDLEMAN settings)
        width: Payload digits (defaults to BUNDLEMAN settings)

    Raises:
        PricingError: INVALID_DIGITS for an unknown role or negative serial,
            BARCODE_SPACE_EXHAUSTED when the serial needs more than width digits
    """
    if prefixes is None or width is None:
        from bundleman.conf import bundleman_settings

        prefixes = prefixes or bundleman_settings.BARCODE_PREFIXES
        width = width or bundleman_settings.BARCODE_PAYLOAD_DIGITS

    try:
        prefix = prefixes[role]
    except KeyError:
        raise PricingError("INVALID_DIGITS", f"No barcode prefix for role '{role}'", role=role) from None
    _require_digits(prefix)

    if serial < 0:
        raise PricingError("INVALID_DIGITS", value=serial)
    if serial >= 10**width:
        raise PricingError("BARCODE_SPACE_EXHAUSTED", role=role, serial=serial, width=width)

    payload = f"{prefix}{serial:0{width}d}"
    return f"{payload}{check_digit(payload)}"


def next_barcode(role: str, allocator: SequenceAllocator | None = None) -> str:
    """Allocate the next serial in the role's barcode sequence and build its barcode."""
    return build_barcode(role, allocate(barcode_scope(role), allocator))
