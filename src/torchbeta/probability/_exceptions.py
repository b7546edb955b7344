"""Probability module exceptions."""

__all__ = ["ProbabilityError", "DomainError", "QuantileWarning"]


class ProbabilityError(ValueError):
    """Base exception for probability module errors."""

    pass


class DomainError(ProbabilityError):
    """Raised when input is outside the valid domain."""

    pass


class QuantileWarning(UserWarning):
    """Warning when quantiles could not be resolved to tolerance."""

    pass
