import matplotlib

matplotlib.use("Agg")

import numpy as np
import pytest
from scipy.special import i0e, ive

from pyhypertorus.distribution import AbstractHypertoroidalDistribution
from pyhypertorus.utils import as_point_batch


class UniformDistribution(AbstractHypertoroidalDistribution):
    """Uniform density (2π)^-dim."""

    def pdf(self, xa):
        xa = as_point_batch(xa, self.dim)
        return np.full(xa.shape[1], (2 * np.pi) ** -self.dim)


class VonMisesProductDistribution(AbstractHypertoroidalDistribution):
    """Independent von Mises marginals, only the density is provided."""

    def __init__(self, mu, kappa):
        self.mu = np.atleast_1d(np.asarray(mu, dtype=float))
        self.kappa = np.atleast_1d(np.asarray(kappa, dtype=float))
        super().__init__(self.mu.size)

    def pdf(self, xa):
        xa = as_point_batch(xa, self.dim)
        mu = self.mu[:, np.newaxis]
        kappa = self.kappa[:, np.newaxis]
        marginals = np.exp(kappa * (np.cos(xa - mu) - 1)) / (2 * np.pi * i0e(kappa))
        return np.prod(marginals, axis=0)

    def closed_form_moment(self, n):
        return ive(n, self.kappa) / i0e(self.kappa) * np.exp(1j * n * self.mu)


class ClosedFormVonMisesProductDistribution(VonMisesProductDistribution):
    """Von Mises product overriding the numerical moments."""

    def trigonometric_moment(self, n):
        return self.closed_form_moment(n)


@pytest.fixture
def uniform():
    return UniformDistribution


@pytest.fixture
def vonmises():
    return VonMisesProductDistribution


@pytest.fixture
def vonmises_closed():
    return ClosedFormVonMisesProductDistribution
