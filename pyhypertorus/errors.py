__all__ = [
    "HypertorusError",
    "DimensionMismatchError",
    "UnsupportedDimensionError",
    "InvalidSampleCountError",
    "ZeroDensityError",
    "IntegrationError",
    "SamplingError",
]


class HypertorusError(Exception):
    """Base class for all errors raised by pyhypertorus."""


class DimensionMismatchError(HypertorusError, ValueError):
    """Samples, shifts or a second distribution disagree with ``dim``."""


class UnsupportedDimensionError(HypertorusError, ValueError):
    """The requested operation is not available for this dimension."""


class InvalidSampleCountError(HypertorusError, ValueError):
    """Fewer than one sample was supplied or requested."""


class ZeroDensityError(HypertorusError, ValueError):
    """The Metropolis-Hastings chain would start in a point of zero density."""


class IntegrationError(HypertorusError, RuntimeError):
    """Adaptive cubature did not reach the requested tolerance."""


class SamplingError(HypertorusError, RuntimeError):
    """The Metropolis-Hastings chain exhausted its proposal budget."""
