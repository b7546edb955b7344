"""Damped Halley root finding method."""

from typing import Callable

import torch
from torch import Tensor

from ._convergence import check_convergence, default_tolerances


def _derivatives(
    f: Callable[[Tensor], Tensor],
    x: Tensor,
    *,
    df: Callable[[Tensor], Tensor] | None = None,
    ddf: Callable[[Tensor], Tensor] | None = None,
) -> tuple[Tensor, Tensor]:
    """First and second derivative of an element-wise ``f`` at ``x``.

    Explicit callables are used when given. Otherwise the derivatives come
    from autograd: since ``f`` acts element-wise, the gradient of
    ``f(x).sum()`` is the vector of per-element derivatives.
    """
    if df is not None and ddf is not None:
        return df(x), ddf(x)

    x_grad = x.detach().requires_grad_(True)
    with torch.enable_grad():
        first = torch.autograd.grad(
            f(x_grad).sum(), x_grad, create_graph=ddf is None
        )[0]

        if ddf is not None:
            second = ddf(x)
        elif first.grad_fn is None:
            # f is affine in x
            second = torch.zeros_like(x)
        else:
            second = torch.autograd.grad(first.sum(), x_grad)[0]

    if df is not None:
        first = df(x)
    return first.detach(), second.detach()


class _HalleyImplicitGrad(torch.autograd.Function):
    """Identity on the root whose backward applies the implicit function theorem.

    With ``f(x*, theta) = 0`` the parameter gradient is
    ``dL/dtheta = -(dL/dx*) / (df/dx) * df/dtheta``. The backward pass
    evaluates ``f`` once more at the root and pushes the scaled cotangent
    into the parameters ``f`` closes over.
    """

    @staticmethod
    def forward(ctx, root: Tensor, f_callable) -> Tensor:
        ctx.f_callable = f_callable
        ctx.save_for_backward(root)
        return root

    @staticmethod
    def backward(ctx, grad_output: Tensor) -> tuple[None, None]:
        (root,) = ctx.saved_tensors

        with torch.enable_grad():
            x = root.detach().requires_grad_(True)
            fx = ctx.f_callable(x)
            if fx.grad_fn is None:
                return None, None

            (slope,) = torch.autograd.grad(
                fx, x, torch.ones_like(fx), retain_graph=True
            )

            # Keep the sign of the slope, bounded away from zero
            floor = torch.finfo(slope.dtype).eps * 10
            slope = torch.where(
                torch.abs(slope) < floor,
                torch.where(slope < 0, -floor, floor),
                slope,
            )
            torch.autograd.backward(fx, -grad_output / slope)

        return None, None


def _attach_implicit_grad(
    result: Tensor,
    converged: Tensor,
    f: Callable[[Tensor], Tensor],
    orig_shape: tuple,
) -> tuple[Tensor, Tensor]:
    """Route gradients of ``result`` to the parameters captured by ``f``.

    ``result`` is returned unchanged when ``f`` does not depend on any tensor
    that requires gradients. Both outputs are reshaped to ``orig_shape``.
    """
    with torch.enable_grad():
        depends_on_parameters = f(result.detach()).requires_grad

    if depends_on_parameters:
        result = _HalleyImplicitGrad.apply(
            result.detach().requires_grad_(True), f
        )
    return result.reshape(orig_shape), converged.reshape(orig_shape)


def halley_info(
    f: Callable[[Tensor], Tensor],
    x0: Tensor,
    *,
    df: Callable[[Tensor], Tensor] | None = None,
    ddf: Callable[[Tensor], Tensor] | None = None,
    xtol: float | None = None,
    maxiter: int = 30,
    damping: tuple[float, float] = (0.8, 1.2),
    bounds: tuple[float, float] | None = None,
) -> tuple[Tensor, Tensor, Tensor]:
    """
    Damped Halley iteration with per-element bookkeeping.

    Same iteration as :func:`halley`, without autograd support, additionally
    returning the number of iterations each element performed.

    Parameters
    ----------
    f, x0, df, ddf, xtol, maxiter, damping, bounds
        See :func:`halley`.

    Returns
    -------
    tuple[Tensor, Tensor, Tensor]
        - **root** -- Last iterate, same shape as ``x0``.
        - **converged** -- Boolean tensor, True where the step tolerance was
          met before the iteration cap.
        - **num_iterations** -- ``int64`` tensor with the number of Halley
          steps each element performed. Never exceeds ``maxiter``.
    """
    orig_shape = x0.shape

    x = x0.detach().flatten().clone()

    if xtol is None:
        xtol = default_tolerances(x.dtype)["xtol"]
    lower, upper = damping

    converged = torch.zeros(x.shape, dtype=torch.bool, device=x.device)
    active = torch.ones(x.shape, dtype=torch.bool, device=x.device)
    num_iterations = torch.zeros(x.shape, dtype=torch.int64, device=x.device)

    if x.numel() == 0:
        return (
            x.reshape(orig_shape),
            torch.ones(orig_shape, dtype=torch.bool, device=x.device),
            num_iterations.reshape(orig_shape),
        )

    for iteration in range(1, maxiter + 1):
        with torch.no_grad():
            fx = f(x)
            dfx, ddfx = _derivatives(f, x, df=df, ddf=ddf)

        # Newton step and curvature ratio
        ratio_1 = fx / dfx
        ratio_2 = ddfx / dfx

        # Halley correction factor, clamped so the step stays within
        # [1/upper, 1/lower] times the Newton step
        step = ratio_1 / torch.clamp(
            1.0 - 0.5 * ratio_1 * ratio_2, min=lower, max=upper
        )
        x_new = x - step

        if bounds is not None:
            lo, hi = bounds
            # Retreat halfway between the bound and the previous iterate
            x_new = torch.where(x_new <= lo, lo + 0.5 * (x - lo), x_new)
            x_new = torch.where(x_new >= hi, hi - 0.5 * (hi - x), x_new)

        finite = torch.isfinite(step)
        x = torch.where(active & finite, x_new, x)
        num_iterations = num_iterations + active.to(torch.int64)

        small = check_convergence(step, xtol)
        converged = converged | (active & small & (iteration < maxiter))
        active = active & ~small & finite

        if not bool(active.any()):
            break

    return (
        x.reshape(orig_shape),
        converged.reshape(orig_shape),
        num_iterations.reshape(orig_shape),
    )


def halley(
    f: Callable[[Tensor], Tensor],
    x0: Tensor,
    *,
    df: Callable[[Tensor], Tensor] | None = None,
    ddf: Callable[[Tensor], Tensor] | None = None,
    xtol: float | None = None,
    maxiter: int = 30,
    damping: tuple[float, float] = (0.8, 1.2),
    bounds: tuple[float, float] | None = None,
) -> tuple[Tensor, Tensor]:
    """
    Find roots of f(x) = 0 using a damped Halley method.

    Each iteration takes the step

    .. math::

        \\delta_n = \\frac{r_1}{\\operatorname{clamp}(1 - \\tfrac{1}{2} r_1 r_2,
        \\ell, u)}, \\qquad
        r_1 = \\frac{f(x_n)}{f'(x_n)}, \\quad r_2 = \\frac{f''(x_n)}{f'(x_n)}

    and sets :math:`x_{n+1} = x_n - \\delta_n`. Without the clamp this is
    the classical Halley iteration; the clamp ``damping = (l, u)`` keeps the
    curvature correction from amplifying or shrinking the Newton step by
    more than ``1/l`` or ``1/u``.

    Parameters
    ----------
    f : Callable[[Tensor], Tensor]
        Vectorized function. Takes tensor of shape ``(N,)``, returns ``(N,)``.
    x0 : Tensor
        Initial guess for the root. Flattened for processing.
    df : Callable[[Tensor], Tensor], optional
        Explicit first derivative function. If None (default), the derivative
        is computed using autodiff.
    ddf : Callable[[Tensor], Tensor], optional
        Explicit second derivative function. If None (default), the second
        derivative is computed using autodiff.
    xtol : float, optional
        Absolute tolerance on the step. Convergence requires
        ``|x_new - x_old| < xtol``. Default: dtype-aware (1e-3 for
        float16/bfloat16, 1e-5 for float32, 1e-8 for float64).
    maxiter : int, default=30
        Maximum iterations. An element only counts as converged if the
        tolerance is met strictly before the ``maxiter``-th step.
    damping : tuple[float, float], default=(0.8, 1.2)
        Lower and upper clamp of the Halley correction factor.
    bounds : tuple[float, float], optional
        Open interval ``(lo, hi)`` the iterates must stay in. An update
        landing on or beyond a bound is replaced by the midpoint between the
        bound and the previous iterate.

    Returns
    -------
    tuple[Tensor, Tensor]
        - **root** -- Roots with the same shape as input ``x0``.
          For non-converged elements, this is the last iterate.
        - **converged** -- Boolean tensor with the same shape indicating
          which elements converged within maxiter iterations.

    Examples
    --------
    Cube roots of a batch of targets, kept inside (0, 1):

    >>> import torch
    >>> from torchbeta.root_finding import halley
    >>> c = torch.tensor([0.001, 0.125], dtype=torch.float64)
    >>> root, converged = halley(lambda x: x**3 - c, torch.full_like(c, 0.9),
    ...                          bounds=(0.0, 1.0))
    >>> root
    tensor([0.1000, 0.5000], dtype=torch.float64)

    Notes
    -----
    **Convergence**: With damping inactive the method converges cubically
    near simple roots. Elements whose step becomes non-finite stop
    immediately, keep their last finite iterate and are reported as not
    converged.

    **Autograd**: the returned root carries gradients for every tensor
    ``theta`` that ``f`` closes over. Differentiating ``f(x*, theta) = 0``
    gives

    .. math::

        \\frac{dx^*}{d\\theta} = -\\left[\\frac{\\partial f}{\\partial x}\\right]^{-1}
        \\frac{\\partial f}{\\partial \\theta}

    See Also
    --------
    halley_info : Same iteration, also returning iteration counts
    """
    orig_shape = x0.shape

    root, converged, _ = halley_info(
        f,
        x0,
        df=df,
        ddf=ddf,
        xtol=xtol,
        maxiter=maxiter,
        damping=damping,
        bounds=bounds,
    )

    if x0.numel() == 0:
        return root, converged

    return _attach_implicit_grad(
        root.flatten(), converged.flatten(), f, orig_shape
    )
