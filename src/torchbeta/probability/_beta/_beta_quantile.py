"""Beta quantile function."""

import warnings
from typing import Optional

import torch
from torch import Tensor

from torchbeta.probability._exceptions import DomainError, QuantileWarning
from torchbeta.root_finding import default_tolerances
from torchbeta.root_finding._halley import _attach_implicit_grad
from torchbeta.special_functions import incomplete_beta, incomplete_beta_inverse

from ._beta_probability_density import beta_probability_density


class _EndpointQuantileGrad(torch.autograd.Function):
    """Identity on ``x`` with ``dx/dp`` fixed to a precomputed slope."""

    @staticmethod
    def forward(ctx, x: Tensor, p: Tensor, slope: Tensor) -> Tensor:
        ctx.save_for_backward(slope)
        ctx.p_dtype = p.dtype
        return x.clone()

    @staticmethod
    def backward(ctx, grad_output: Tensor) -> tuple[None, Tensor, None]:
        (slope,) = ctx.saved_tensors
        return None, (grad_output * slope).to(ctx.p_dtype), None


def beta_quantile(
    p: Tensor,
    a: Tensor | float,
    b: Tensor | float,
    *,
    maxiter: int = 1000,
    xtol: Optional[float] = None,
    ftol: Optional[float] = None,
) -> Tensor:
    r"""Quantile function (inverse CDF) of the beta distribution.

    Returns :math:`x` such that :math:`I_x(a, b) = p`.

    Parameters
    ----------
    p : Tensor
        Probabilities in [0, 1].
    a : Tensor or float
        First shape parameter. Must be positive.
    b : Tensor or float
        Second shape parameter. Must be positive.
    maxiter : int, default=1000
        Maximum number of Halley steps per element.
    xtol : float, optional
        Tolerance on the Halley step. Default: dtype-aware.
    ftol : float, optional
        Largest accepted residual :math:`|I_x(a, b) - p|`. Default:
        dtype-aware (1e-10 for float64, 1e-5 for float32).

    Returns
    -------
    Tensor
        Quantiles, broadcast over all inputs.

    Raises
    ------
    DomainError
        If ``a`` or ``b`` is not positive or ``p`` lies outside [0, 1].

    Warns
    -----
    QuantileWarning
        If some quantiles could not be resolved. Those elements hold the
        estimate with the smaller residual.

    Examples
    --------
    >>> p = torch.tensor([0.1, 0.5, 0.9], dtype=torch.float64)
    >>> beta_quantile(p, 2.0, 2.0)
    tensor([0.1958, 0.5000, 0.8042], dtype=torch.float64)

    Notes
    -----
    A quantile is accepted when the Halley step met ``xtol`` and the
    residual is within ``ftol``. The step test alone is not enough: where
    the density is very large (``x`` close to 1 with ``b < 1``) a starting
    point far from the root already produces a tiny step. Elements that are
    not accepted are retried on the reflected problem
    :math:`x = 1 - I^{-1}_{1-p}(b, a)`, whose initial guess comes from the
    opposite tail.

    Gradients with respect to ``p``, ``a`` and ``b`` are computed by
    implicit differentiation of :math:`I_x(a, b) - p = 0`. At ``p = 0`` and
    ``p = 1`` the derivative with respect to ``p`` is the reciprocal of the
    density at the endpoint: 0 when the matching shape parameter is below 1
    and ``inf`` when it is above 1. The derivatives with respect to ``a``
    and ``b`` vanish there.

    See Also
    --------
    beta_cumulative_distribution : Inverse of the quantile function
    torchbeta.special_functions.incomplete_beta_inverse : Underlying solver
    """
    if not isinstance(p, Tensor):
        raise TypeError("p must be a torch.Tensor")

    a_t = (
        a
        if isinstance(a, Tensor)
        else torch.as_tensor(a, dtype=p.dtype, device=p.device)
    )
    b_t = (
        b
        if isinstance(b, Tensor)
        else torch.as_tensor(b, dtype=p.dtype, device=p.device)
    )

    if bool((a_t <= 0).any()) or bool((b_t <= 0).any()):
        raise DomainError("Shape parameters a and b must be positive")
    if bool(((p < 0) | (p > 1)).any()):
        raise DomainError("Probabilities p must lie in [0, 1]")

    with torch.no_grad():
        a_d, b_d, p_d = a_t.detach(), b_t.detach(), p.detach()

        result = incomplete_beta_inverse(
            p_d, a_d, b_d, maxiter=maxiter, xtol=xtol
        )
        x = result.x
        if ftol is None:
            ftol = default_tolerances(x.dtype)["ftol"]

        residual = torch.abs(incomplete_beta(x, a_d, b_d) - p_d)
        resolved = result.converged & (residual <= ftol)

        if not bool(resolved.all()):
            reflected = incomplete_beta_inverse(
                1.0 - p_d, b_d, a_d, maxiter=maxiter, xtol=xtol
            )
            x_reflected = 1.0 - reflected.x
            residual_reflected = torch.abs(
                incomplete_beta(x_reflected, a_d, b_d) - p_d
            )
            resolved_reflected = reflected.converged & (
                residual_reflected <= ftol
            )

            # Unresolved elements keep the estimate closer to the target
            use_reflected = ~resolved & (
                resolved_reflected | (residual_reflected < residual)
            )
            x = torch.where(use_reflected, x_reflected, x)

            resolved = resolved | resolved_reflected
            unresolved = int((~resolved).sum())
            if unresolved:
                warnings.warn(
                    f"{unresolved} of {resolved.numel()} beta quantiles could "
                    f"not be resolved within {maxiter} iterations",
                    QuantileWarning,
                    stacklevel=2,
                )

    def f(x_: Tensor) -> Tensor:
        return incomplete_beta(x_, a_t, b_t) - p

    x, _ = _attach_implicit_grad(x, resolved, f, x.shape)

    # The CDF is flat beyond the support, so the implicit slope is useless
    # at the endpoints
    edge = ((p_d <= 0) | (p_d >= 1)).expand(x.shape)
    if p.requires_grad and bool(edge.any()):
        with torch.no_grad():
            density = beta_probability_density(x.detach(), a_d, b_d)
            slope = torch.where(
                edge, 1.0 / density, torch.zeros_like(density)
            )
        x = torch.where(
            edge,
            _EndpointQuantileGrad.apply(
                x.detach(), p.expand(x.shape), slope
            ),
            x,
        )

    return x
