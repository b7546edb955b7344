"""Beta cumulative distribution function."""

from torch import Tensor

from torchbeta.special_functions import incomplete_beta


def beta_cumulative_distribution(
    x: Tensor, a: Tensor | float, b: Tensor | float
) -> Tensor:
    r"""Lower tail probability :math:`P(X \le x) = I_x(a, b)`.

    Thin alias of :func:`torchbeta.special_functions.incomplete_beta`; see
    there for the evaluation method and autograd support.

    Examples
    --------
    >>> x = torch.tensor([0.25, 0.5, 0.75], dtype=torch.float64)
    >>> beta_cumulative_distribution(x, 2.0, 3.0)
    tensor([0.2617, 0.6875, 0.9492], dtype=torch.float64)

    See Also
    --------
    beta_quantile : Inverse with respect to ``x``
    beta_survival : Complementary tail
    """
    return incomplete_beta(x, a, b)
