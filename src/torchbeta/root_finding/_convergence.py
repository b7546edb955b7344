"""Convergence utilities for root finding."""

import torch
from torch import Tensor


def default_tolerances(dtype: torch.dtype) -> dict[str, float]:
    """Return dtype-appropriate default tolerances.

    Parameters
    ----------
    dtype : torch.dtype
        The tensor dtype.

    Returns
    -------
    dict[str, float]
        Dictionary with keys 'xtol', the tolerance on the step magnitude,
        and 'ftol', the tolerance on the residual ``|f(x)|`` used to accept
        a root.
    """
    if dtype in (torch.float16, torch.bfloat16):
        return {"xtol": 1e-3, "ftol": 1e-2}
    elif dtype == torch.float32:
        return {"xtol": 1e-5, "ftol": 1e-5}
    else:  # float64 and others
        return {"xtol": 1e-8, "ftol": 1e-10}


def check_convergence(step: Tensor, xtol: float) -> Tensor:
    """Check convergence for each element.

    An element has converged when the magnitude of its last step is strictly
    below ``xtol``. Non-finite steps never count as converged.

    Parameters
    ----------
    step : Tensor
        Last step taken by the iteration, ``x_old - x_new``.
    xtol : float
        Absolute tolerance on the step.

    Returns
    -------
    Tensor
        Boolean mask where True indicates convergence.
    """
    return torch.abs(step) < xtol
