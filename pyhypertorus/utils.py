from typing import Optional, Sequence, Union

import numpy as np

from .errors import DimensionMismatchError


def angmod(
    rad: Union[np.ndarray, float, int], bounds: Sequence[float] = (0, 2 * np.pi)
) -> Union[np.ndarray, float]:
    """
    Normalize angles to a specified range.

    Parameters:
    -----------
    rad : Union[np.ndarray, float, int]
        An angle or array of angles in radians.
    bounds : sequence, optional
        Two values [min, max] defining the target range. Default is [0, 2π).

    Returns:
    --------
    Union[np.ndarray, float]
        The normalized angle(s), constrained to the specified range.
    """
    if len(bounds) != 2 or bounds[0] >= bounds[1]:
        raise ValueError(
            "bounds must be a list or tuple with two values [min, max] where min < max."
        )

    bound_min, bound_max = bounds
    bound_span = bound_max - bound_min
    result = ((rad - bound_min) % bound_span + bound_span) % bound_span + bound_min

    # Values that round up to bound_max belong to bound_min
    if isinstance(result, np.ndarray):
        result[result == bound_max] = bound_min
    elif result == bound_max:
        result = bound_min

    return result


def init_rng(
    random_state: Optional[Union[int, np.random.Generator, np.random.RandomState]] = None,
) -> np.random.Generator:
    """
    Normalize the ``random_state`` argument to a NumPy ``Generator``.

    Accepts integers, ``RandomState`` instances, ``Generator`` objects, or
    ``None`` (fresh, OS-seeded generator). Generators are returned as is, so
    consecutive calls sharing one generator continue its stream.
    """
    if isinstance(random_state, np.random.Generator):
        return random_state

    if isinstance(random_state, np.random.RandomState):
        seed = random_state.randint(0, 2**32)
        return np.random.default_rng(seed)

    try:
        return np.random.default_rng(random_state)
    except TypeError as err:
        raise TypeError(
            "random_state must be None, an int seed, RandomState, or Generator."
        ) from err


def as_point_batch(xa, dim: int) -> np.ndarray:
    """
    Bring points on the hypertorus into the ``(dim, k)`` batch layout.

    Parameters
    ----------
    xa : array_like
        Either a ``(dim, k)`` batch with one point per column, a single point
        of shape ``(dim,)``, or (only when ``dim == 1``) a scalar or a flat
        ``(k,)`` array of angles.
    dim : int
        Dimension of the hypertorus.

    Returns
    -------
    batch : np.ndarray (dim, k)
    """
    arr = np.asarray(xa, dtype=float)

    if arr.ndim == 0 and dim == 1:
        return arr.reshape(1, 1)
    if arr.ndim == 1:
        if dim == 1:
            return arr.reshape(1, -1)
        if arr.size == dim:
            return arr.reshape(dim, 1)
    if arr.ndim == 2 and arr.shape[0] == dim:
        return arr

    raise DimensionMismatchError(
        f"Expected points with {dim} row(s) (shape ({dim}, k)), got shape {arr.shape}."
    )
