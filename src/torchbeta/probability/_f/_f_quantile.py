"""F-distribution quantile function."""

from typing import Optional

import torch
from torch import Tensor

from torchbeta.probability._beta import beta_quantile
from torchbeta.probability._exceptions import DomainError


def f_quantile(
    p: Tensor,
    dfn: Tensor | float,
    dfd: Tensor | float,
    *,
    maxiter: int = 1000,
    xtol: Optional[float] = None,
    ftol: Optional[float] = None,
) -> Tensor:
    r"""Percent point function (quantile function) of the F-distribution.

    Returns :math:`x` such that :math:`P(X \le x) = p` for :math:`X \sim F(d_1, d_2)`.

    Parameters
    ----------
    p : Tensor
        Probability values in [0, 1].
    dfn : Tensor or float
        Numerator degrees of freedom :math:`d_1`. Must be positive.
    dfd : Tensor or float
        Denominator degrees of freedom :math:`d_2`. Must be positive.
    maxiter : int, default=1000
        Maximum number of Halley steps per element.
    xtol : float, optional
        Tolerance on the Halley step of the underlying beta quantile.
    ftol : float, optional
        Largest accepted residual of the underlying beta quantile.

    Returns
    -------
    Tensor
        Quantile values. ``p = 1`` maps to ``inf``.

    Raises
    ------
    DomainError
        If a degree of freedom is not positive or ``p`` lies outside [0, 1].

    Examples
    --------
    Upper 5% critical value of F(5, 10):

    >>> p = torch.tensor([0.95], dtype=torch.float64)
    >>> f_quantile(p, dfn=5.0, dfd=10.0)
    tensor([3.3258], dtype=torch.float64)

    Notes
    -----
    With :math:`B = I^{-1}_p(d_1/2, d_2/2)` the beta quantile,

    .. math::
        x = \frac{d_2 B}{d_1 (1 - B)}

    See Also
    --------
    f_cumulative_distribution : Inverse of PPF
    """
    if not isinstance(p, Tensor):
        raise TypeError("p must be a torch.Tensor")

    dfn_t = (
        dfn
        if isinstance(dfn, Tensor)
        else torch.as_tensor(dfn, dtype=p.dtype, device=p.device)
    )
    dfd_t = (
        dfd
        if isinstance(dfd, Tensor)
        else torch.as_tensor(dfd, dtype=p.dtype, device=p.device)
    )

    if bool((dfn_t <= 0).any()) or bool((dfd_t <= 0).any()):
        raise DomainError("Degrees of freedom dfn and dfd must be positive")

    b_val = beta_quantile(
        p, dfn_t / 2.0, dfd_t / 2.0, maxiter=maxiter, xtol=xtol, ftol=ftol
    )
    return dfd_t * b_val / (dfn_t * (1.0 - b_val))
