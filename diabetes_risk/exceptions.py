"""
Exception types raised by the diabetes risk analysis.
"""


class MissingDataError(ValueError):
    """A required field is absent, or no complete record remains after exclusion."""


class UndefinedMetric(ValueError):
    """
    A rate cannot be computed because its denominator is zero.

    Attributes:
        metric: Name of the metric that is undefined
    """

    def __init__(self, metric: str, message: str = None):
        self.metric = metric
        super().__init__(message or f"{metric} is undefined: denominator is zero")


class FitConvergenceError(RuntimeError):
    """The regression fit did not converge; downstream steps cannot run."""
