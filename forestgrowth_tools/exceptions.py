"""
# Errors

Exception types raised by the forest growth model, the integration driver and
the sensitivity estimator. Every error is reported to the caller; nothing in
the package recovers from these silently.

## Classes

- `ForestGrowthError`: Base class for all package errors
- `InvalidParameter`: A parameter set the model cannot be evaluated with
- `IntegrationFailure`: The ODE solver failed or produced non-finite state
- `DegenerateVariance`: Output variance is ~0, Sobol indices are undefined
- `DesignMismatch`: Output vector does not line up with the design matrix
"""


class ForestGrowthError(Exception):
    """
    Base class for errors raised by forestgrowth_tools.

    Attributes:
        index (int | None): Row of the design (or ensemble) the error belongs
            to, when the error was raised while running a batch.
    """
    def __init__(self, message: str = "", index: int = None):
        super().__init__(message)
        self.index = index

    def __str__(self):
        message = super().__str__()
        if self.index is not None:
            return f"[run {self.index}] {message}"
        return message


class InvalidParameter(ForestGrowthError, ValueError):
    """Raised when a parameter set is outside the model's domain (e.g. K <= 0)."""


class IntegrationFailure(ForestGrowthError, RuntimeError):
    """Raised when the solver fails to integrate or returns non-finite carbon."""


class DegenerateVariance(ForestGrowthError, ArithmeticError):
    """Raised when total output variance is too small to normalise indices."""


class DesignMismatch(ForestGrowthError, ValueError):
    """Raised when outputs do not align positionally with the design matrix."""


__all__ = [
    "ForestGrowthError",
    "InvalidParameter",
    "IntegrationFailure",
    "DegenerateVariance",
    "DesignMismatch",
]
