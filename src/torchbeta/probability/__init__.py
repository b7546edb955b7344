"""Probability distributions reducible to the regularized incomplete beta function.

This module provides functional operators for the beta distribution and for
distributions whose CDF is an incomplete beta function, with quantile
functions built on :func:`torchbeta.special_functions.incomplete_beta_inverse`.

Example
-------
>>> import torch
>>> from torchbeta.probability import beta_cumulative_distribution, beta_quantile
>>>
>>> p = torch.tensor([0.1, 0.5, 0.9], dtype=torch.float64)
>>> x = beta_quantile(p, 2.0, 2.0)  # tensor([0.1958, 0.5000, 0.8042])
>>> beta_cumulative_distribution(x, 2.0, 2.0)  # recovers p
"""

from ._beta import (
    beta_cumulative_distribution,
    beta_log_probability_density,
    beta_probability_density,
    beta_quantile,
    beta_survival,
)
from ._exceptions import DomainError, ProbabilityError, QuantileWarning
from ._f import f_cumulative_distribution, f_quantile

__all__ = [
    "DomainError",
    "ProbabilityError",
    "QuantileWarning",
    # Beta distribution
    "beta_cumulative_distribution",
    "beta_log_probability_density",
    "beta_probability_density",
    "beta_quantile",
    "beta_survival",
    # F distribution
    "f_cumulative_distribution",
    "f_quantile",
]
