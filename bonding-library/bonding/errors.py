"""Error taxonomy for curve configuration, pricing and swap routing."""


class BondingError(Exception):
    """Base class for all errors raised by the bonding library."""


class ConfigValidationError(BondingError, ValueError):
    """Invalid curve, royalty, context or request configuration."""


class UnsupportedCurveKind(BondingError):
    """No evaluator is registered for the given curve variant."""


class ArithmeticDomainError(BondingError, ValueError):
    """The requested computation has no real solution (e.g. no real root)."""


class NoRouteFound(BondingError):
    """No bonding hierarchy connects the two mints."""


class SourceAccountMissing(BondingError):
    """A holding account required to fund a trade does not exist."""


class StateUnavailable(BondingError):
    """An account referenced by a bonding curve could not be fetched."""


class FrozenCurveError(BondingError):
    """Trading in the requested direction is disabled on this curve."""


class PurchaseCapExceeded(BondingError):
    """The trade would exceed the curve's purchase cap or mint cap."""
