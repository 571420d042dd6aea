from importlib import metadata as _metadata

from .distribution import (
    AbstractHypertoroidalDistribution,
    CustomHypertoroidalDistribution,
)
from .errors import (
    DimensionMismatchError,
    HypertorusError,
    IntegrationError,
    InvalidSampleCountError,
    SamplingError,
    UnsupportedDimensionError,
    ZeroDensityError,
)
from .integration import integrate_hypertorus
from .utils import angmod
from .visualization import plot_pdf

try:  # Prefer installed package metadata
    __version__ = _metadata.version("pyhypertorus")
except _metadata.PackageNotFoundError:  # pragma: no cover - during local dev
    __version__ = "0.0.0"

__all__ = [
    "AbstractHypertoroidalDistribution",
    "CustomHypertoroidalDistribution",
    "DimensionMismatchError",
    "HypertorusError",
    "IntegrationError",
    "InvalidSampleCountError",
    "SamplingError",
    "UnsupportedDimensionError",
    "ZeroDensityError",
    "angmod",
    "integrate_hypertorus",
    "plot_pdf",
    "__version__",
]
