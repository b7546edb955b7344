from ._incomplete_beta import incomplete_beta
from ._incomplete_beta_inverse import (
    IncompleteBetaInverseResult,
    IncompleteBetaInverseStatus,
    incomplete_beta_inverse,
    solve,
)
from ._log_beta import log_beta

__all__ = [
    "IncompleteBetaInverseResult",
    "IncompleteBetaInverseStatus",
    "incomplete_beta",
    "incomplete_beta_inverse",
    "log_beta",
    "solve",
]
