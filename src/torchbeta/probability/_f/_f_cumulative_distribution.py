"""F-distribution cumulative distribution function."""

import torch
from torch import Tensor

from torchbeta.special_functions import incomplete_beta


def f_cumulative_distribution(
    x: Tensor, dfn: Tensor | float, dfd: Tensor | float
) -> Tensor:
    r"""Cumulative distribution function of the F-distribution.

    .. math::
        F(x; d_1, d_2) = I_{x'}(d_1/2, d_2/2)

    where :math:`x' = \frac{d_1 x}{d_1 x + d_2}` and :math:`I_x(a,b)` is the
    regularized incomplete beta function.

    Parameters
    ----------
    x : Tensor
        Quantiles. Negative values map to 0.
    dfn : Tensor or float
        Numerator degrees of freedom :math:`d_1`. Must be positive.
    dfd : Tensor or float
        Denominator degrees of freedom :math:`d_2`. Must be positive.

    Returns
    -------
    Tensor
        CDF values :math:`P(X \le x)` where :math:`X \sim F(d_1, d_2)`.

    Examples
    --------
    >>> x = torch.tensor([0.5, 1.0, 2.0], dtype=torch.float64)
    >>> cdf = f_cumulative_distribution(x, dfn=5.0, dfd=10.0)

    See Also
    --------
    f_quantile : Inverse CDF (quantile function)
    """
    if not isinstance(x, Tensor):
        raise TypeError("x must be a torch.Tensor")

    dfn_t = (
        dfn
        if isinstance(dfn, Tensor)
        else torch.as_tensor(dfn, dtype=x.dtype, device=x.device)
    )
    dfd_t = (
        dfd
        if isinstance(dfd, Tensor)
        else torch.as_tensor(dfd, dtype=x.dtype, device=x.device)
    )

    x = torch.clamp(x, min=0.0)
    z = dfn_t * x / (dfn_t * x + dfd_t)
    # inf / inf at x = inf
    z = torch.where(torch.isposinf(x), torch.ones_like(z), z)
    return incomplete_beta(z, dfn_t / 2.0, dfd_t / 2.0)
