from typing import Callable

import numpy as np
from scipy.integrate import cubature

from .errors import IntegrationError, UnsupportedDimensionError

__all__ = [
    "DEFAULT_RTOL",
    "DEFAULT_ATOL",
    "MAX_SUBDIVISIONS",
    "SUPPORTED_DIMS",
    "integrate_hypertorus",
]

DEFAULT_RTOL = 1e-6
DEFAULT_ATOL = 1e-10
MAX_SUBDIVISIONS = 10000

# Cubature rule per supported dimension. Genz-Malik needs far fewer nodes per
# region than the 21^3-point Gauss-Kronrod product rule in 3-D.
_RULES = {
    1: "gk21",
    2: "gk21",
    3: "genz-malik",
}
SUPPORTED_DIMS = tuple(sorted(_RULES))


def integrate_hypertorus(
    func: Callable[[np.ndarray], np.ndarray],
    dim: int,
    *,
    complex_valued: bool = False,
    rtol: float = DEFAULT_RTOL,
    atol: float = DEFAULT_ATOL,
    max_subdivisions: int = MAX_SUBDIVISIONS,
    workers=1,
    what: str = "integral",
):
    r"""
    Adaptive integration of a batched integrand over $[0, 2\pi)^{dim}$.

    Parameters
    ----------
    func : callable
        Integrand. Receives a ``(dim, k)`` batch with one point per column and
        returns an array of shape ``(k, ...)``; the trailing axes are
        integrated independently on the same nodes.
    dim : int
        Dimension of the hypertorus, one of ``SUPPORTED_DIMS``.
    complex_valued : bool, optional
        Set when ``func`` returns complex values. Real and imaginary parts are
        then integrated together. Default is False.
    rtol, atol : float, optional
        Relative and absolute tolerance of the cubature.
    max_subdivisions : int, optional
        Upper bound on the number of region subdivisions.
    workers : int or map-like callable, optional
        Passed to :func:`scipy.integrate.cubature` for parallel evaluation.
    what : str, optional
        Name of the computed quantity, used in error messages.

    Returns
    -------
    estimate : np.ndarray or float
        Integral with the trailing shape of ``func``'s output.

    Raises
    ------
    UnsupportedDimensionError
        If ``dim`` is not in ``SUPPORTED_DIMS``.
    IntegrationError
        If the cubature stops before reaching the tolerance while the
        estimate is still finite. Non-finite estimates (e.g. from a zero
        density inside a logarithm) are returned as they are.
    """
    try:
        rule = _RULES[dim]
    except (KeyError, TypeError):
        raise UnsupportedDimensionError(
            f"Numerical calculation of {what} is currently not supported for "
            f"dim={dim}; supported dimensions are {SUPPORTED_DIMS}."
        ) from None

    def _integrand(x):
        # cubature evaluates points row-wise: (npoints, dim)
        values = np.asarray(func(x.T))
        # trailing axis: (re, im) for complex integrands, singleton otherwise
        if complex_valued:
            return np.stack([values.real, values.imag], axis=-1)
        return values[..., np.newaxis]

    res = cubature(
        _integrand,
        np.zeros(dim),
        np.full(dim, 2 * np.pi),
        rule=rule,
        rtol=rtol,
        atol=atol,
        max_subdivisions=max_subdivisions,
        workers=workers,
    )

    estimate = np.asarray(res.estimate)
    if res.status != "converged" and np.all(np.isfinite(estimate)):
        raise IntegrationError(
            f"Numerical calculation of {what} did not converge in dim={dim}: "
            f"estimate={estimate}, error={np.asarray(res.error)}, "
            f"subdivisions={res.subdivisions}."
        )

    if complex_valued:
        estimate = estimate[..., 0] + 1j * estimate[..., 1]
    else:
        estimate = estimate[..., 0]
    if estimate.ndim == 0:
        return estimate.item()
    return estimate
