"""Exception types used by the test framework."""


class AssertionFailed(AssertionError):
    """Raised by assertion primitives when a checked condition is false.

    The execution engine treats this as "the test author asserted and it was
    false", separate from any other fault escaping a unit body.
    """

    def __init__(self, message: str = "Assertion failed"):
        super().__init__(message)
        self.message = message


class Inconclusive(Exception):
    """Raised by a unit to report that it could not reach a verdict."""

    def __init__(self, message: str = "Test inconclusive"):
        super().__init__(message)
        self.message = message


class UnitTimeout(Exception):
    """Raised from a cooperative checkpoint once a unit's deadline passed."""

    def __init__(self, timeout_ms: float, elapsed_ms: float):
        super().__init__(f"Exceeded timeout of {timeout_ms:.0f}ms (elapsed {elapsed_ms:.2f}ms)")
        self.timeout_ms = timeout_ms
        self.elapsed_ms = elapsed_ms


class InvocationError(Exception):
    """Wrapper raised by invocation layers around a unit body.

    The engine classifies the wrapped cause (``__cause__``), not the wrapper.
    """


class RegistrationError(Exception):
    """Invalid or duplicate suite registration."""


class ResultFrozenError(AttributeError):
    """Attempt to modify a unit result after it reached a terminal status."""
