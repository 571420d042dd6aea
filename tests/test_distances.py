import numpy as np
import pytest
from scipy.special import i0e, i1e

from pyhypertorus.distribution import CustomHypertoroidalDistribution
from pyhypertorus.errors import DimensionMismatchError, UnsupportedDimensionError

DISTANCES = [
    "squared_distance_numerical",
    "kld_numerical",
    "hellinger_distance_numerical",
    "total_variation_distance_numerical",
]


@pytest.mark.parametrize("method", DISTANCES)
@pytest.mark.parametrize(
    "mu, kappa",
    [
        ([1.0], [2.0]),
        ([0.5, 4.0], [1.0, 3.0]),
    ],
)
def test_distance_to_itself_is_zero(vonmises, method, mu, kappa):
    dist = vonmises(mu, kappa)
    np.testing.assert_allclose(getattr(dist, method)(dist), 0.0, atol=1e-8)


@pytest.mark.parametrize("method", DISTANCES)
def test_distance_to_itself_is_zero_3d(vonmises, method):
    dist = vonmises([2.0, 5.5, 0.2], [0.5, 1.5, 1.0])
    np.testing.assert_allclose(getattr(dist, method)(dist), 0.0, atol=1e-8)


def test_uniform_circle_kld_with_itself(uniform):
    f = uniform(1)
    np.testing.assert_allclose(f.kld_numerical(uniform(1)), 0.0, atol=1e-10)


def test_uniform_torus_distances(uniform):
    g, h = uniform(2), uniform(2)
    np.testing.assert_allclose(g.squared_distance_numerical(h), 0.0, atol=1e-10)
    np.testing.assert_allclose(g.total_variation_distance_numerical(h), 0.0, atol=1e-10)


def test_squared_distance_closed_form(uniform, vonmises):
    # ∫ (f - 1/2π)^2 = I0(2κ) / (2π I0(κ)^2) - 1/2π
    kappa = 2.0
    f = vonmises([1.5], [kappa])
    expected = (
        i0e(2 * kappa) / (2 * np.pi * i0e(kappa) ** 2) - 1 / (2 * np.pi)
    )
    np.testing.assert_allclose(f.squared_distance_numerical(uniform(1)), expected, rtol=1e-5)
    np.testing.assert_allclose(uniform(1).squared_distance_numerical(f), expected, rtol=1e-5)


def test_kld_closed_form_and_asymmetry(vonmises):
    # Equal mean directions: KL(p || q) = log(I0(κq) / I0(κp)) + A1(κp) (κp - κq)
    def kl(kp, kq):
        a1 = i1e(kp) / i0e(kp)
        return np.log(i0e(kq) / i0e(kp)) + (kq - kp) + a1 * (kp - kq)

    p = vonmises([0.7], [1.0])
    q = vonmises([0.7], [4.0])
    kld_pq = p.kld_numerical(q)
    kld_qp = q.kld_numerical(p)

    np.testing.assert_allclose(kld_pq, kl(1.0, 4.0), rtol=1e-5)
    np.testing.assert_allclose(kld_qp, kl(4.0, 1.0), rtol=1e-5)
    assert kld_pq > 0 and kld_qp > 0
    assert abs(kld_pq - kld_qp) > 1e-3


def test_kld_zero_density_contributes_nothing(uniform):
    cardioid = CustomHypertoroidalDistribution(
        lambda xa: (1 + np.cos(xa[0])) / (2 * np.pi), 1
    )
    kld = cardioid.kld_numerical(uniform(1))
    assert np.isfinite(kld)
    # ∫ (1 + cos x) log(1 + cos x) dx / 2π = 1 - log 2
    np.testing.assert_allclose(kld, 1 - np.log(2), rtol=1e-5)


@pytest.mark.parametrize(
    "method", ["hellinger_distance_numerical", "total_variation_distance_numerical"]
)
@pytest.mark.parametrize(
    "mu_p, kappa_p, mu_q, kappa_q",
    [
        ([0.0], [1.0], [np.pi], [1.0]),
        ([1.0], [5.0], [3.0], [5.0]),
        ([0.5, 4.0], [1.0, 3.0], [2.5, 1.0], [2.0, 0.5]),
    ],
)
def test_bounded_distances(vonmises, method, mu_p, kappa_p, mu_q, kappa_q):
    p = vonmises(mu_p, kappa_p)
    q = vonmises(mu_q, kappa_q)
    d_pq = getattr(p, method)(q)
    d_qp = getattr(q, method)(p)
    assert 0.0 < d_pq <= 1.0
    np.testing.assert_allclose(d_pq, d_qp, rtol=1e-5)


def test_total_variation_of_separated_distributions_approaches_one(vonmises):
    p = vonmises([1.0], [200.0])
    q = vonmises([4.0], [200.0])
    np.testing.assert_allclose(p.total_variation_distance_numerical(q), 1.0, atol=1e-5)


@pytest.mark.parametrize("method", DISTANCES)
def test_distance_dimension_mismatch(uniform, method):
    with pytest.raises(DimensionMismatchError, match="differing dimensions"):
        getattr(uniform(1), method)(uniform(2))


@pytest.mark.parametrize("method", DISTANCES)
def test_distance_requires_distribution(uniform, method):
    with pytest.raises(TypeError, match="AbstractHypertoroidalDistribution"):
        getattr(uniform(1), method)(lambda xa: np.ones(xa.shape[1]))


@pytest.mark.parametrize("method", DISTANCES)
def test_distance_unsupported_dimension(uniform, method):
    with pytest.raises(UnsupportedDimensionError, match="dim=4"):
        getattr(uniform(4), method)(uniform(4))


def test_kld_where_both_densities_vanish():
    cardioid = CustomHypertoroidalDistribution(
        lambda xa: (1 + np.cos(xa[0])) / (2 * np.pi), 1
    )
    assert cardioid.pdf(np.pi)[0] == 0.0
    np.testing.assert_allclose(cardioid.kld_numerical(cardioid), 0.0, atol=1e-12)


@pytest.mark.parametrize("method", DISTANCES)
def test_distance_with_map_like_workers(vonmises, method):
    calls = []

    def counting_map(func, iterable):
        calls.append(1)
        return list(map(func, iterable))

    # concentrated densities force the cubature to subdivide
    p = vonmises([1.0], [200.0])
    q = vonmises([1.2], [150.0])
    expected = getattr(p, method)(q)
    np.testing.assert_allclose(
        getattr(p, method)(q, workers=counting_map), expected, rtol=1e-12
    )
    assert calls
