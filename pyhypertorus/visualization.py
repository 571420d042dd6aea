import copy

import matplotlib.pyplot as plt
import numpy as np

from .errors import UnsupportedDimensionError

DEFAULT_PDF_PLOT_CONFIG = {
    "figsize": (5, 4),
    "circle": {
        "n_points": 128,
    },
    "torus": {
        "n_points": 101,
        "cmap": "viridis",
    },
}


def _merge_dicts(defaults, overrides):
    """Recursively merge overrides into defaults without modifying the originals."""
    merged = copy.deepcopy(defaults)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge_dicts(merged[key], value)
        else:
            merged[key] = value
    return merged


def plot_pdf(dist, ax=None, config=None, **kwargs):
    r"""Plot the density of a distribution on the circle or the torus.

    Parameters
    ----------
    dist : AbstractHypertoroidalDistribution
        Distribution with ``dim`` 1 or 2.
    ax : matplotlib.axes.Axes, optional
        Axis to draw on. For ``dim == 2`` it must be a 3-D axis. If None, a
        new figure is created.
    config : dict, optional
        Overrides for ``DEFAULT_PDF_PLOT_CONFIG``.

        - **"figsize"** : tuple, default=(5, 4)
            Size of a newly created figure.

        - **"circle"** : dict
            ``n_points`` angles in $[0, 2\pi]$ for ``dim == 1``.

        - **"torus"** : dict
            ``n_points`` grid lines per axis and ``cmap`` for ``dim == 2``.
    **kwargs
        Passed on to ``ax.plot`` (``dim == 1``) or ``ax.plot_surface``
        (``dim == 2``).

    Returns
    -------
    artist : matplotlib.lines.Line2D or mpl_toolkits.mplot3d.art3d.Poly3DCollection

    Raises
    ------
    UnsupportedDimensionError
        For ``dim > 2``.
    """
    config = _merge_dicts(DEFAULT_PDF_PLOT_CONFIG, config or {})

    if dist.dim == 1:
        theta = np.linspace(0, 2 * np.pi, config["circle"]["n_points"])
        f_theta = np.asarray(dist.pdf(theta[np.newaxis, :])).reshape(-1)

        if ax is None:
            fig, ax = plt.subplots(figsize=config["figsize"])
        (p,) = ax.plot(theta, f_theta, **kwargs)
        ax.set_xlim(0, 2 * np.pi)
        ax.set_xlabel(r"$\theta$")
        ax.set_ylabel(r"$f(\theta)$")
        return p

    elif dist.dim == 2:
        grid = np.linspace(0, 2 * np.pi, config["torus"]["n_points"])
        alpha, beta = np.meshgrid(grid, grid)
        f = np.asarray(dist.pdf(np.vstack([alpha.ravel(), beta.ravel()])))
        f = f.reshape(alpha.shape)

        if ax is None:
            fig = plt.figure(figsize=config["figsize"])
            ax = fig.add_subplot(projection="3d")
        kwargs.setdefault("cmap", config["torus"]["cmap"])
        p = ax.plot_surface(alpha, beta, f, **kwargs)
        ax.set_xlabel(r"$\theta_1$")
        ax.set_ylabel(r"$\theta_2$")
        return p

    raise UnsupportedDimensionError(
        f"Plotting is currently not supported for dim={dist.dim}."
    )
