"""torchbeta: PyTorch operators for inverting the regularized incomplete beta function."""

from . import (
    probability,
    root_finding,
    special_functions,
)

__all__ = [
    "probability",
    "root_finding",
    "special_functions",
]

__version__ = "0.1.0"
