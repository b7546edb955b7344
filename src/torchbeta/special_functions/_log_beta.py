"""Logarithm of the beta function."""

import torch
from torch import Tensor


def log_beta(a: Tensor, b: Tensor) -> Tensor:
    r"""Natural logarithm of the beta function.

    .. math::
        \ln B(a, b) = \ln \Gamma(a) + \ln \Gamma(b) - \ln \Gamma(a + b)

    Parameters
    ----------
    a : Tensor
        First shape parameter. Must be positive.
    b : Tensor
        Second shape parameter. Must be positive.

    Returns
    -------
    Tensor
        :math:`\ln B(a, b)`, broadcast over ``a`` and ``b``.

    Examples
    --------
    >>> log_beta(torch.tensor(2.0), torch.tensor(3.0))
    tensor(-2.4849)
    """
    return torch.lgamma(a) + torch.lgamma(b) - torch.lgamma(a + b)


__all__ = ["log_beta"]
