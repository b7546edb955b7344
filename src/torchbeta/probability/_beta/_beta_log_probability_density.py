"""Beta log probability density function."""

import torch
from torch import Tensor

from torchbeta.special_functions import log_beta


def beta_log_probability_density(
    x: Tensor, a: Tensor | float, b: Tensor | float
) -> Tensor:
    r"""Log probability density function of the beta distribution.

    Computed directly for numerical stability (not as log(pdf)).

    .. math::
        \log f(x; a, b) = (a-1) \log x + (b-1) \log(1-x) - \log B(a, b)

    where :math:`B(a, b)` is the beta function.

    Parameters
    ----------
    x : Tensor
        Values in [0, 1]. Values outside the support give ``-inf``.
    a : Tensor or float
        First shape parameter. Must be positive.
    b : Tensor or float
        Second shape parameter. Must be positive.

    Returns
    -------
    Tensor
        Log PDF values.

    See Also
    --------
    beta_probability_density : Exp of log PDF
    """
    if not isinstance(x, Tensor):
        raise TypeError("x must be a torch.Tensor")

    a = (
        a
        if isinstance(a, Tensor)
        else torch.as_tensor(a, dtype=x.dtype, device=x.device)
    )
    b = (
        b
        if isinstance(b, Tensor)
        else torch.as_tensor(b, dtype=x.dtype, device=x.device)
    )

    # xlogy keeps (a - 1) * log(0) at 0 for a == 1
    result = (
        torch.special.xlogy(a - 1.0, x)
        + torch.special.xlog1py(b - 1.0, -x)
        - log_beta(a, b)
    )
    outside = (x < 0) | (x > 1)
    return torch.where(outside, torch.full_like(result, float("-inf")), result)
