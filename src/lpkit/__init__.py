"""lpkit: build linear programs, hand them to a solver backend, read typed results."""

from .errors import (
    DuplicateNameError,
    InvalidBoundsError,
    LPKitError,
    NoSolutionError,
    ParseError,
    SolverUnavailableError,
    UnknownConstraintError,
    UnknownHandleError,
    UnknownVariableError,
)
from .expressions import LinearExpression, Relation, Variable, quicksum
from .indexing import IndexedVariableCollection, declare_indexed, sum_over
from .model import Constraint, Model, add_constraint, add_variable, create_model, set_objective
from .results import SolveResult, SolveStatus, get_value
from .schemas import LPModel, LPSolution, SolverConfig
from .solvers import solve

__all__ = [
    "Constraint",
    "DuplicateNameError",
    "IndexedVariableCollection",
    "InvalidBoundsError",
    "LPKitError",
    "LPModel",
    "LPSolution",
    "LinearExpression",
    "Model",
    "NoSolutionError",
    "ParseError",
    "Relation",
    "SolveResult",
    "SolveStatus",
    "SolverConfig",
    "SolverUnavailableError",
    "UnknownConstraintError",
    "UnknownHandleError",
    "UnknownVariableError",
    "Variable",
    "add_constraint",
    "add_variable",
    "create_model",
    "declare_indexed",
    "get_value",
    "quicksum",
    "set_objective",
    "solve",
    "sum_over",
]
