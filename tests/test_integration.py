import numpy as np
import pytest

from pyhypertorus.errors import IntegrationError, UnsupportedDimensionError
from pyhypertorus.integration import SUPPORTED_DIMS, integrate_hypertorus


@pytest.mark.parametrize("dim", SUPPORTED_DIMS)
def test_integrate_constant(dim):
    volume = integrate_hypertorus(lambda xa: np.ones(xa.shape[1]), dim)
    np.testing.assert_allclose(volume, (2 * np.pi) ** dim, rtol=1e-10)


@pytest.mark.parametrize("dim", SUPPORTED_DIMS)
def test_integrand_receives_point_batch(dim):
    shapes = []

    def _integrand(xa):
        shapes.append(xa.shape)
        assert np.all((xa >= 0.0) & (xa <= 2 * np.pi))
        return np.ones(xa.shape[1])

    integrate_hypertorus(_integrand, dim)
    assert shapes
    assert all(len(shape) == 2 and shape[0] == dim for shape in shapes)


def test_integrate_vector_valued():
    # ∫∫ (cos^2 x, sin^2 y, 1) over the torus
    def _integrand(xa):
        return np.column_stack(
            [np.cos(xa[0]) ** 2, np.sin(xa[1]) ** 2, np.ones(xa.shape[1])]
        )

    est = integrate_hypertorus(_integrand, 2)
    np.testing.assert_allclose(
        est, [2 * np.pi**2, 2 * np.pi**2, 4 * np.pi**2], rtol=1e-8
    )


def test_integrate_complex_valued():
    est = integrate_hypertorus(
        lambda xa: np.exp(1j * xa[0]) + 2.0j, 1, complex_valued=True
    )
    assert np.iscomplexobj(est)
    np.testing.assert_allclose(est, 4j * np.pi, atol=1e-10)


@pytest.mark.parametrize("dim", [0, 4, 7])
def test_integrate_unsupported_dimension(dim):
    with pytest.raises(UnsupportedDimensionError, match="not supported"):
        integrate_hypertorus(lambda xa: np.ones(xa.shape[1]), dim)


def test_integrate_not_converged():
    def spike(xa):
        return np.exp(-1e4 * (xa[0] - 1.0) ** 2)

    with pytest.raises(IntegrationError, match="did not converge"):
        integrate_hypertorus(spike, 1, rtol=1e-14, atol=0.0, max_subdivisions=1)
