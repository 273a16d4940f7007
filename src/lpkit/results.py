from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import TYPE_CHECKING, Dict, Mapping, Optional

from .errors import NoSolutionError, UnknownConstraintError, UnknownVariableError
from .expressions import Variable, as_expression
from .schemas import LPSolution

if TYPE_CHECKING:  # pragma: no cover
    from .model import Constraint, Model


class SolveStatus(str, Enum):
    """Terminal classification of a solve attempt."""

    OPTIMAL = "optimal"
    INFEASIBLE = "infeasible"
    UNBOUNDED = "unbounded"
    SUBOPTIMAL = "suboptimal"
    ERROR = "error"
    TIMEOUT = "timeout"

    @property
    def has_solution(self) -> bool:
        return self in (SolveStatus.OPTIMAL, SolveStatus.SUBOPTIMAL)


@dataclass(frozen=True)
class SolveResult:
    """
    Outcome of one solve of a Model.

    ``model_version`` records the model's mutation counter at solve time; once
    the model changes, ``is_stale`` turns true and the values describe the
    earlier model.
    """

    model: "Model"
    status: SolveStatus
    model_version: int
    backend: str
    objective_value: Optional[float] = None
    variable_values: Optional[Mapping[Variable, float]] = None
    reduced_costs: Optional[Mapping[Variable, float]] = None
    duals: Optional[Mapping["Constraint", float]] = None
    iterations: int = 0
    message: str = ""
    solved_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def from_solution(cls, model: "Model", solution: LPSolution, backend: str, model_version: int) -> "SolveResult":
        status = SolveStatus(solution.status)
        variable_values = reduced_costs = duals = None
        objective_value = None
        if status.has_solution:
            objective_value = solution.objective_value
            by_name = {var.name: var for var in model.variables}
            variable_values = {by_name[name]: float(value) for name, value in (solution.x or {}).items()}
            if solution.reduced_costs:
                reduced_costs = {by_name[name]: float(v) for name, v in solution.reduced_costs.items() if name in by_name}
            if solution.duals:
                cons_by_name = {cons.name: cons for cons in model.constraints}
                duals = {cons_by_name[name]: float(v) for name, v in solution.duals.items() if name in cons_by_name}
        return cls(
            model=model,
            status=status,
            model_version=model_version,
            backend=backend,
            objective_value=objective_value,
            variable_values=variable_values,
            reduced_costs=reduced_costs,
            duals=duals,
            iterations=solution.iterations,
            message=solution.message,
        )

    @classmethod
    def failed(cls, model: "Model", model_version: int, backend: str, message: str) -> "SolveResult":
        return cls(model=model, status=SolveStatus.ERROR, model_version=model_version, backend=backend, message=message)

    @property
    def has_solution(self) -> bool:
        return self.status.has_solution

    @property
    def is_stale(self) -> bool:
        return self.model.version != self.model_version

    def _require_solution(self) -> Mapping[Variable, float]:
        if not self.has_solution or self.variable_values is None:
            raise NoSolutionError(f"No solution available: solve status is '{self.status.value}'.")
        return self.variable_values

    def get_value(self, variable: Variable) -> float:
        values = self._require_solution()
        if not isinstance(variable, Variable) or variable.model is not self.model:
            raise UnknownVariableError(f"{variable!r} does not belong to model '{self.model.name}'.")
        try:
            return values[variable]
        except KeyError:
            raise UnknownVariableError(
                f"{variable!r} was added to model '{self.model.name}' after this result was produced."
            ) from None

    def get_values(self, variables: Mapping) -> Dict:
        """Values for a mapping of keys to variables, e.g. an IndexedVariableCollection."""
        return {key: self.get_value(var) for key, var in variables.items()}

    def evaluate(self, expression) -> float:
        expr = as_expression(expression)
        return expr.constant + sum(coef * self.get_value(var) for var, coef in expr.terms())

    def get_dual(self, constraint: "Constraint") -> float:
        self._require_solution()
        if constraint.model is not self.model:
            raise UnknownConstraintError(
                f"Constraint '{constraint.name}' does not belong to model '{self.model.name}'."
            )
        if self.duals is None or constraint not in self.duals:
            raise NoSolutionError(f"No dual value available for constraint '{constraint.name}'.")
        return self.duals[constraint]


def get_value(result: SolveResult, variable: Variable) -> float:
    return result.get_value(variable)
