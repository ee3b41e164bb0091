# errors.py
"""
Exception types raised by the special-function kernel, the distributions and
the hypothesis tests.

"Undefined" results (an input outside a function's domain) are never raised;
they are returned as ``None``. The classes below cover the two other failure
kinds: a computation that could not certify an answer, and a test invocation
whose preconditions do not hold.
"""


class StatisticsError(Exception):
    """Base class for every error raised by this package."""


# -------------------------
# Computation failures
# -------------------------
class ComputationError(StatisticsError, ArithmeticError):
    """The numerical method could not certify an answer."""


class ConvergenceError(ComputationError):
    """An iterative method exhausted its iteration budget."""

    def __init__(self, routine: str, iterations: int, tolerance: float):
        self.routine = routine
        self.iterations = iterations
        self.tolerance = tolerance
        super().__init__(
            f"{routine} did not converge within {iterations} iterations (tolerance {tolerance:g})."
        )


class IntegrationError(ComputationError):
    """Composite Simpson's rule was asked for an unusable interval count."""


# -------------------------
# Configuration errors
# -------------------------
class InvalidParameterError(StatisticsError, ValueError):
    """A distribution or test was configured with an invalid parameter."""


# -------------------------
# Test preconditions
# -------------------------
class PreconditionError(StatisticsError, ValueError):
    """A hypothesis test cannot be performed on the given data."""


class ZeroVarianceError(PreconditionError):
    STD_ERROR_MSG = "Standard deviation for the difference or group is zero. Please, reconsider sample contents"

    def __init__(self, message: str = STD_ERROR_MSG):
        super().__init__(message)


class IdenticalSamplesError(PreconditionError):
    def __init__(self, message: str = "Both samples are the same; a paired test carries no information."):
        super().__init__(message)


class SampleSizeMismatchError(PreconditionError):
    pass


class ZeroExpectedCellError(PreconditionError):
    pass


class InsufficientDataError(PreconditionError):
    pass
