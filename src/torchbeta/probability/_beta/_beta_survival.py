"""Beta survival function."""

from torch import Tensor

from torchbeta.special_functions import incomplete_beta


def beta_survival(x: Tensor, a: Tensor | float, b: Tensor | float) -> Tensor:
    r"""Upper tail probability :math:`P(X > x)` of :math:`X \sim \mathrm{Beta}(a, b)`.

    Evaluated as :math:`I_{1-x}(b, a)` rather than as one minus the CDF, so
    small tail probabilities near ``x = 1`` keep their relative accuracy.

    Parameters
    ----------
    x : Tensor
        Evaluation points. Values below 0 give 1, values above 1 give 0.
    a, b : Tensor or float
        Positive shape parameters.

    Returns
    -------
    Tensor
        Tail probabilities, broadcast over all inputs.

    Examples
    --------
    >>> x = torch.tensor([0.25, 0.5, 0.75], dtype=torch.float64)
    >>> beta_survival(x, 2.0, 3.0)
    tensor([0.7383, 0.3125, 0.0508], dtype=torch.float64)
    """
    if not isinstance(x, Tensor):
        raise TypeError("x must be a torch.Tensor")
    return incomplete_beta(1.0 - x, b, a)
