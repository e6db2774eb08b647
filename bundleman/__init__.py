"""
Django Bundleman - Bundle & Combo Pricing.

Usage:
    from bundleman import PricingService, PricingError

    application = PricingService.apply_combo("CMB-0001", items)
    number = PricingService.next_bill_number()
"""


def __getattr__(name):
    if name == "PricingService":
        from bundleman.service import PricingService

        return PricingService
    elif name == "PricingError":
        from bundleman.exceptions import PricingError

        return PricingError
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = ["PricingService", "PricingError"]
__version__ = "0.1.0"
