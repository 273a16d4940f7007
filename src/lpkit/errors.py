"""Exception hierarchy for lpkit."""


class LPKitError(Exception):
    """Base class for errors raised by lpkit."""


class InvalidBoundsError(LPKitError, ValueError):
    """Raised when a variable is declared with lower bound above upper bound."""

    def __init__(self, name: str, lower_bound: float, upper_bound: float) -> None:
        super().__init__(
            f"Variable {name} has inconsistent bounds (lb {lower_bound} > ub {upper_bound})."
        )
        self.name = name
        self.lower_bound = lower_bound
        self.upper_bound = upper_bound


class DuplicateNameError(LPKitError, ValueError):
    """Raised when a variable or constraint name is reused within one model."""


class SolverUnavailableError(LPKitError, RuntimeError):
    """Raised when the requested solver backend cannot be reached."""


class NoSolutionError(LPKitError):
    """Raised when values are requested from a result that carries no solution."""


class UnknownHandleError(LPKitError, KeyError):
    """Raised when a variable or constraint is not part of the model being queried."""

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the plain message instead.
        return str(self.args[0]) if self.args else ""


class UnknownVariableError(UnknownHandleError):
    """Raised when a variable handle does not belong to the model that produced a result."""


class UnknownConstraintError(UnknownHandleError):
    """Raised when a constraint name or handle does not belong to the model."""


class ParseError(LPKitError, ValueError):
    """Raised when LP text cannot be parsed."""
