import numbers
import warnings
from abc import ABC, abstractmethod
from typing import Callable, Optional, Union

import numpy as np
from scipy.special import rel_entr

from .errors import (
    DimensionMismatchError,
    InvalidSampleCountError,
    SamplingError,
    ZeroDensityError,
)
from .integration import DEFAULT_ATOL, DEFAULT_RTOL, integrate_hypertorus
from .utils import angmod, as_point_batch, init_rng
from .visualization import plot_pdf

__all__ = [
    "AbstractHypertoroidalDistribution",
    "CustomHypertoroidalDistribution",
]

MH_BURNIN = 10
MH_SKIPPING = 5
_MH_PROPOSAL_FACTOR = 1000
_MH_LOW_ACCEPTANCE = 0.01
_ZERO_MOMENT_TOL = 1e-10


class AbstractHypertoroidalDistribution(ABC):
    r"""
    Base class for distributions on the hypertorus $[0, 2\pi)^{dim}$.

    Subclasses implement :meth:`pdf`. Everything else (moments, mean,
    likelihood, sampling, shifting and distances) is derived numerically
    from the density and may be overridden with closed-form versions.

    Parameters
    ----------
    dim : int
        Number of circles in the Cartesian product. ``dim=1`` is the circle,
        ``dim=2`` the torus.

    Methods
    -------
    pdf(xa)
        Probability density function (abstract).

    trigonometric_moment(n)
        n-th trigonometric moment per coordinate.

    circular_mean()
        Mean direction per coordinate.

    mean_2dim()
        E[cos x_1, sin x_1, ..., cos x_d, sin x_d].

    log_likelihood(samples)
        Log-likelihood of a sample batch.

    sample(n, random_state=None)
        Random variates (Metropolis-Hastings unless overridden).

    shift(shift_angles)
        Distribution translated by ``shift_angles``.

    squared_distance_numerical(other), kld_numerical(other),
    hellinger_distance_numerical(other), total_variation_distance_numerical(other)
        Numerical distances to another distribution of the same dimension.

    plot(ax=None, **kwargs)
        Plot the density for ``dim <= 2``.

    Notes
    -----
    ``pdf`` must accept any real input and treat every coordinate as
    periodic; :meth:`shift` passes unreduced angles to it. Densities are
    assumed, not checked, to be non-negative and normalized.
    """

    def __init__(self, dim: int):
        if isinstance(dim, bool) or not isinstance(dim, numbers.Integral):
            raise TypeError(f"dim must be an integer, got {type(dim).__name__}.")
        if dim < 1:
            raise ValueError("dim must be a positive integer.")
        self.dim = int(dim)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(dim={self.dim})"

    @abstractmethod
    def pdf(self, xa) -> np.ndarray:
        """
        Probability density function.

        Parameters
        ----------
        xa : array_like (dim, k)
            Points at which to evaluate the density, one per column.

        Returns
        -------
        pdf_values : np.ndarray (k,)
        """

    def _pdf_batch(self, xa: np.ndarray) -> np.ndarray:
        return np.asarray(self.pdf(xa), dtype=float).reshape(xa.shape[1])

    def _pdf_point(self, x: np.ndarray) -> float:
        return float(self._pdf_batch(x.reshape(self.dim, 1))[0])

    # ------------------------------------------------------------------
    # Moments
    # ------------------------------------------------------------------
    def trigonometric_moment(self, n: int) -> np.ndarray:
        r"""
        n-th trigonometric moment.

        $$
        m_n = \left(E[e^{i n x_1}], \dots, E[e^{i n x_{dim}}]\right)
        $$

        Computed numerically unless a subclass provides a closed form.

        Parameters
        ----------
        n : int
            Order of the moment.

        Returns
        -------
        m : np.ndarray (dim,), complex
        """
        return self.trigonometric_moment_numerical(n)

    def trigonometric_moment_numerical(
        self,
        n: int,
        rtol: float = DEFAULT_RTOL,
        atol: float = DEFAULT_ATOL,
        workers=1,
    ) -> np.ndarray:
        """
        n-th trigonometric moment by adaptive cubature over the hypertorus.

        All ``dim`` components share one cubature, so each coordinate is
        integrated on the same nodes. Supported for ``dim <= 3``.

        Parameters
        ----------
        n : int
            Order of the moment.
        rtol, atol : float, optional
            Tolerances of the cubature.
        workers : int or map-like callable, optional
            Parallel evaluation, see :func:`~pyhypertorus.integration.integrate_hypertorus`.

        Returns
        -------
        m : np.ndarray (dim,), complex
        """

        def _integrand(xa):
            return self._pdf_batch(xa)[:, np.newaxis] * np.exp(1j * n * xa.T)

        m = integrate_hypertorus(
            _integrand,
            self.dim,
            complex_valued=True,
            rtol=rtol,
            atol=atol,
            workers=workers,
            what="trigonometric moments",
        )
        return np.asarray(m, dtype=complex).reshape(self.dim)

    def circular_mean(self) -> np.ndarray:
        r"""
        Circular mean per coordinate.

        $$
        \bar\theta_j = \operatorname{atan2}(\Im m_j, \Re m_j) \bmod 2\pi
        $$

        with $m$ the first trigonometric moment.

        Returns
        -------
        mu : np.ndarray (dim,)
            Mean direction in $[0, 2\pi)$.

        Note
        ----
        A coordinate with vanishing first moment (e.g. a uniform marginal)
        has no mean direction. Components with modulus below 1e-10 are treated
        as exactly zero and ``atan2(0, 0) = 0`` is returned for them, with a
        ``RuntimeWarning``.
        """
        m = np.asarray(self.trigonometric_moment(1), dtype=complex).reshape(self.dim)
        vanishing = np.abs(m) < _ZERO_MOMENT_TOL
        if np.any(vanishing):
            m = np.where(vanishing, 0.0, m)
            warnings.warn(
                "First trigonometric moment is (numerically) zero; "
                "the circular mean is undefined in at least one coordinate.",
                RuntimeWarning,
                stacklevel=2,
            )
        return angmod(np.arctan2(m.imag, m.real))

    def mean_2dim(self) -> np.ndarray:
        r"""
        Mean of the embedding into $\mathbb{R}^{2 dim}$.

        $$
        E[(\cos x_1, \sin x_1, \dots, \cos x_{dim}, \sin x_{dim})]
        $$

        Returns
        -------
        mu : np.ndarray (2 * dim,)
        """
        m = np.asarray(self.trigonometric_moment(1), dtype=complex).reshape(self.dim)
        return np.column_stack([m.real, m.imag]).reshape(-1)

    # ------------------------------------------------------------------
    # Likelihood and sampling
    # ------------------------------------------------------------------
    def log_likelihood(self, samples) -> float:
        """
        Log-likelihood of the given samples.

        Parameters
        ----------
        samples : array_like (dim, n)
            One sample per column. A flat ``(n,)`` array is accepted for
            ``dim == 1``.

        Returns
        -------
        ll : float
            Sum of the log-densities. Zero densities give ``-inf``.
        """
        samples = as_point_batch(samples, self.dim)
        if samples.shape[1] < 1:
            raise InvalidSampleCountError("At least one sample is required.")

        with np.errstate(divide="ignore"):
            return float(np.sum(np.log(self._pdf_batch(samples))))

    def sample(
        self,
        n: int,
        random_state: Optional[Union[int, np.random.Generator, np.random.RandomState]] = None,
    ) -> np.ndarray:
        """
        Draw ``n`` samples.

        Uses :meth:`sample_metropolis_hastings`; distributions with a
        dedicated generator should override this.

        Parameters
        ----------
        n : int
            Number of samples.
        random_state : int, np.random.Generator, np.random.RandomState, or None, optional
            Source of randomness.

        Returns
        -------
        s : np.ndarray (dim, n)
            One sample per column.
        """
        return self.sample_metropolis_hastings(n, random_state=random_state)

    def sample_metropolis_hastings(
        self,
        n: int,
        random_state: Optional[Union[int, np.random.Generator, np.random.RandomState]] = None,
        burnin: int = MH_BURNIN,
        skipping: int = MH_SKIPPING,
        max_proposals: Optional[int] = None,
    ) -> np.ndarray:
        """
        Random-walk Metropolis-Hastings sampler on the hypertorus.

        The chain starts at the circular mean and proposes
        ``x' = (x + eps) mod 2π`` with ``eps ~ N(0, I)``. Only accepted
        proposals count as draws: the first ``burnin`` are discarded and every
        ``skipping``-th of the rest is kept.

        Because rejections do not repeat the current state in the output,
        the draws only approximate the target distribution; moment
        magnitudes in particular come out slightly too small.

        Parameters
        ----------
        n : int
            Number of samples.
        random_state : int, np.random.Generator, np.random.RandomState, or None, optional
            Source of randomness.
        burnin : int, optional
            Accepted draws discarded at the start. Default is 10.
        skipping : int, optional
            Thinning interval. Default is 5.
        max_proposals : int, optional
            Maximum number of proposals before giving up. Defaults to
            1000 times the number of accepted draws needed.

        Returns
        -------
        s : np.ndarray (dim, n)
            One sample per column, every entry in [0, 2π).

        Raises
        ------
        ZeroDensityError
            If the density at the circular mean is zero or not finite.
        SamplingError
            If ``max_proposals`` is exceeded.

        References
        ----------
        Hastings, W. K. Monte Carlo Sampling Methods Using Markov Chains and
        Their Applications. Biometrika, 1970, 57, 97-109
        """
        if isinstance(n, bool) or not isinstance(n, numbers.Integral) or n < 1:
            raise InvalidSampleCountError(f"n must be a positive integer, got {n!r}.")
        if burnin < 0 or skipping < 1:
            raise ValueError("burnin must be >= 0 and skipping must be >= 1.")

        rng = init_rng(random_state)
        total = burnin + n * skipping
        if max_proposals is None:
            max_proposals = _MH_PROPOSAL_FACTOR * total

        x = np.asarray(self.circular_mean(), dtype=float).reshape(self.dim)
        pdfx = self._pdf_point(x)
        if not (np.isfinite(pdfx) and pdfx > 0):
            raise ZeroDensityError(
                f"Density at the starting point {x} is {pdfx}; "
                "Metropolis-Hastings needs a positive density to start from."
            )

        s = np.empty((self.dim, total))
        i = 0
        proposals = 0
        while i < total:
            if proposals >= max_proposals:
                raise SamplingError(
                    f"Metropolis-Hastings accepted only {i} of {total} draws "
                    f"within {max_proposals} proposals."
                )
            proposals += 1
            x_new = angmod(x + rng.standard_normal(self.dim))
            pdfx_new = self._pdf_point(x_new)
            a = pdfx_new / pdfx
            # uniform draw only needed when the proposal is less likely
            if a > 1 or a > rng.uniform():
                s[:, i] = x_new
                x = x_new
                pdfx = pdfx_new
                i += 1

        acceptance = total / proposals
        if acceptance < _MH_LOW_ACCEPTANCE:
            warnings.warn(
                f"Metropolis-Hastings acceptance rate was {acceptance:.2%}; "
                "consecutive samples are strongly correlated.",
                RuntimeWarning,
                stacklevel=2,
            )

        return s[:, burnin::skipping]

    # ------------------------------------------------------------------
    # Shifting
    # ------------------------------------------------------------------
    def shift(self, shift_angles) -> "AbstractHypertoroidalDistribution":
        """
        Distribution of ``x + shift_angles`` for ``x`` from this distribution.

        Subclasses with a location parameter should override this with an
        exact shifted instance.

        Parameters
        ----------
        shift_angles : array_like (dim,)
            Shift per coordinate.

        Returns
        -------
        shifted : CustomHypertoroidalDistribution
        """
        shift_angles = np.asarray(shift_angles, dtype=float)
        if np.atleast_1d(shift_angles).shape not in {(self.dim,), (self.dim, 1)}:
            raise DimensionMismatchError(
                f"shift_angles must have {self.dim} entries, got shape {shift_angles.shape}."
            )
        shift_angles = shift_angles.reshape(self.dim, 1)

        return CustomHypertoroidalDistribution(
            lambda xa: self.pdf(xa - shift_angles), self.dim
        )

    # ------------------------------------------------------------------
    # Distances
    # ------------------------------------------------------------------
    def _check_comparable(self, other):
        if not isinstance(other, AbstractHypertoroidalDistribution):
            raise TypeError(
                "other must be an AbstractHypertoroidalDistribution, "
                f"got {type(other).__name__}."
            )
        if other.dim != self.dim:
            raise DimensionMismatchError(
                f"Cannot compare distributions with differing dimensions "
                f"({self.dim} and {other.dim})."
            )

    def _integrate_pair(self, other, combine, what, **kwargs) -> float:
        self._check_comparable(other)

        def _integrand(xa):
            return combine(self._pdf_batch(xa), other._pdf_batch(xa))

        return float(integrate_hypertorus(_integrand, self.dim, what=what, **kwargs))

    def squared_distance_numerical(
        self,
        other,
        rtol: float = DEFAULT_RTOL,
        atol: float = DEFAULT_ATOL,
        workers=1,
    ) -> float:
        r"""
        Squared $L^2$ distance to another distribution.

        $$
        d = \int (f(x) - g(x))^2 \, dx
        $$

        Parameters
        ----------
        other : AbstractHypertoroidalDistribution
            Distribution to compare to.

        Returns
        -------
        d : float
        """
        return self._integrate_pair(
            other,
            lambda p, q: (p - q) ** 2,
            "squared distance",
            rtol=rtol,
            atol=atol,
            workers=workers,
        )

    def kld_numerical(
        self,
        other,
        rtol: float = DEFAULT_RTOL,
        atol: float = DEFAULT_ATOL,
        workers=1,
    ) -> float:
        r"""
        Kullback-Leibler divergence from this distribution to ``other``.

        $$
        D_{KL}(f \| g) = \int f(x) \log\frac{f(x)}{g(x)} \, dx
        $$

        The divergence is not symmetric: ``p.kld_numerical(q)`` and
        ``q.kld_numerical(p)`` differ in general.

        Parameters
        ----------
        other : AbstractHypertoroidalDistribution
            Distribution to compare to.

        Returns
        -------
        kld : float
            ``inf`` if ``other`` vanishes where this density does not.

        Note
        ----
        Points where this density is zero contribute nothing
        ($0 \log 0 = 0$). The plain integrand $f \log(f / g)$ would give NaN
        wherever both densities vanish; here such points add zero.
        """
        return self._integrate_pair(
            other,
            rel_entr,
            "Kullback-Leibler divergence",
            rtol=rtol,
            atol=atol,
            workers=workers,
        )

    def hellinger_distance_numerical(
        self,
        other,
        rtol: float = DEFAULT_RTOL,
        atol: float = DEFAULT_ATOL,
        workers=1,
    ) -> float:
        r"""
        Hellinger distance to another distribution.

        $$
        H = \frac{1}{2} \int \left(\sqrt{f(x)} - \sqrt{g(x)}\right)^2 dx
        $$

        Returns
        -------
        dist : float
            In [0, 1] for normalized densities.
        """
        return 0.5 * self._integrate_pair(
            other,
            lambda p, q: (np.sqrt(p) - np.sqrt(q)) ** 2,
            "Hellinger distance",
            rtol=rtol,
            atol=atol,
            workers=workers,
        )

    def total_variation_distance_numerical(
        self,
        other,
        rtol: float = DEFAULT_RTOL,
        atol: float = DEFAULT_ATOL,
        workers=1,
    ) -> float:
        r"""
        Total variation distance to another distribution.

        $$
        TV = \frac{1}{2} \int |f(x) - g(x)| \, dx
        $$

        Returns
        -------
        dist : float
            In [0, 1] for normalized densities.
        """
        return 0.5 * self._integrate_pair(
            other,
            lambda p, q: np.abs(p - q),
            "total variation distance",
            rtol=rtol,
            atol=atol,
            workers=workers,
        )

    # ------------------------------------------------------------------
    # Visualization
    # ------------------------------------------------------------------
    def plot(self, ax=None, **kwargs):
        """Plot the density; see :func:`pyhypertorus.visualization.plot_pdf`."""
        return plot_pdf(self, ax=ax, **kwargs)


class CustomHypertoroidalDistribution(AbstractHypertoroidalDistribution):
    r"""
    Distribution given by an arbitrary density callable.

    Parameters
    ----------
    f : callable
        Density. Receives a ``(dim, k)`` batch with angles in $[0, 2\pi)$
        and returns ``k`` values.
    dim : int
        Dimension of the hypertorus.

    Notes
    -----
    Inputs are wrapped into $[0, 2\pi)$ before ``f`` is called, so ``f``
    only needs to be defined on the fundamental domain.
    """

    def __init__(self, f: Callable[[np.ndarray], np.ndarray], dim: int):
        if not callable(f):
            raise TypeError("f must be callable.")
        super().__init__(dim)
        self.f = f

    def pdf(self, xa) -> np.ndarray:
        xa = as_point_batch(xa, self.dim)
        return np.asarray(self.f(angmod(xa)), dtype=float).reshape(xa.shape[1])
