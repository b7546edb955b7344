"""Beta probability density function."""

import torch
from torch import Tensor

from ._beta_log_probability_density import beta_log_probability_density


def beta_probability_density(
    x: Tensor, a: Tensor | float, b: Tensor | float
) -> Tensor:
    r"""Probability density function of the beta distribution.

    .. math::
        f(x; a, b) = \frac{x^{a-1} (1-x)^{b-1}}{B(a, b)}

    where :math:`B(a, b)` is the beta function. Evaluated as the exponential
    of :func:`beta_log_probability_density`.

    Parameters
    ----------
    x : Tensor
        Points at which to evaluate the density. Values outside [0, 1]
        give 0.
    a : Tensor or float
        First shape parameter. Must be positive.
    b : Tensor or float
        Second shape parameter. Must be positive.

    Returns
    -------
    Tensor
        Density values, broadcast over all inputs. At an endpoint the
        density is 0 when the matching shape parameter exceeds 1 and
        ``inf`` when it is below 1.

    Examples
    --------
    >>> x = torch.tensor([0.25, 0.5, 0.75], dtype=torch.float64)
    >>> beta_probability_density(x, 2.0, 2.0)
    tensor([1.1250, 1.5000, 1.1250], dtype=torch.float64)

    See Also
    --------
    beta_log_probability_density : Log of the density
    beta_cumulative_distribution : Integral of the density
    """
    return torch.exp(beta_log_probability_density(x, a, b))
