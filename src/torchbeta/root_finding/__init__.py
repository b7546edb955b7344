from ._convergence import check_convergence, default_tolerances
from ._halley import halley, halley_info

__all__ = [
    "check_convergence",
    "default_tolerances",
    "halley",
    "halley_info",
]
