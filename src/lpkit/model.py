"""
Model container: variables, constraints, objective and solve lifecycle.

Example
-------
>>> from lpkit import create_model
>>> m = create_model("toy")
>>> x = m.add_variable(0, None, name="x")
>>> y = m.add_variable(0, None, name="y")
>>> m.add_constraint(x + y <= 1, name="budget")
Constraint(budget: x + y <= 1)
>>> m.maximize(x + 2 * y)
>>> result = m.solve()
>>> result.get_value(y)
1.0
"""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING, Dict, List, Literal, Optional, Tuple

from .errors import DuplicateNameError, InvalidBoundsError, UnknownConstraintError, UnknownVariableError
from .expressions import LinearExpression, Relation, Variable, as_expression, normalize_cmp
from .indexing import IndexedVariableCollection, declare_indexed
from .schemas import ConstraintSpec, LinearExpr, LinearTerm, LPModel, Sense, SolverConfig, VariableSpec

if TYPE_CHECKING:  # pragma: no cover
    from .results import SolveResult

logger = logging.getLogger(__name__)

ModelState = Literal["built", "solving", "solved"]

_SENSE_ALIASES = {
    "max": "max",
    "maximize": "max",
    "maximise": "max",
    "min": "min",
    "minimize": "min",
    "minimise": "min",
}


def normalize_sense(sense: str) -> Sense:
    try:
        return _SENSE_ALIASES[str(sense).strip().lower()]  # type: ignore[return-value]
    except KeyError:
        raise ValueError(f"Objective sense must be 'max' or 'min', got {sense!r}") from None


def _fresh_name(prefix: str, taken, start: int) -> str:
    n = start
    while f"{prefix}{n}" in taken:
        n += 1
    return f"{prefix}{n}"


class Constraint:
    """``expression cmp rhs``, owned by exactly one model."""

    __slots__ = ("model", "index", "name", "expression", "cmp", "rhs")

    def __init__(self, model: "Model", index: int, name: str, expression: LinearExpression, cmp: str, rhs: float):
        self.model = model
        self.index = index
        self.name = name
        self.expression = expression
        self.cmp = cmp
        self.rhs = rhs

    def __repr__(self) -> str:
        return f"Constraint({self.name}: {self.expression!r} {self.cmp} {self.rhs:g})"

    def __hash__(self) -> int:
        return id(self)


class Model:
    def __init__(self, name: str = "problem") -> None:
        self.name = name
        self._variables: List[Variable] = []
        self._constraints: List[Constraint] = []
        self._names: Dict[str, Variable] = {}
        self._constraint_names: Dict[str, Constraint] = {}
        self.objective: Optional[LinearExpression] = None
        self.sense: Sense = "min"
        self.version = 0
        self.state: ModelState = "built"
        self.result: Optional["SolveResult"] = None

    def __repr__(self) -> str:
        return (
            f"Model({self.name!r}, variables={len(self._variables)}, "
            f"constraints={len(self._constraints)}, state={self.state})"
        )

    @property
    def variables(self) -> Tuple[Variable, ...]:
        return tuple(self._variables)

    @property
    def constraints(self) -> Tuple[Constraint, ...]:
        return tuple(self._constraints)

    def _touch(self) -> None:
        self.version += 1

    @staticmethod
    def _normalize_bounds(lb, ub, name: str = "<unnamed>") -> Tuple[Optional[float], Optional[float]]:
        out = []
        for value in (lb, ub):
            if value is None:
                out.append(None)
                continue
            value = float(value)
            if math.isnan(value):
                raise ValueError("Variable bounds must not be NaN")
            out.append(None if math.isinf(value) else value)
        lower, upper = out
        # -inf upper or +inf lower cannot be satisfied by any value
        if lb is not None and lower is None and float(lb) > 0:
            raise InvalidBoundsError(name, float(lb), float("inf") if ub is None else float(ub))
        if ub is not None and upper is None and float(ub) < 0:
            raise InvalidBoundsError(name, float("-inf") if lb is None else float(lb), float(ub))
        return lower, upper

    def add_variable(
        self,
        lower_bound: Optional[float] = 0.0,
        upper_bound: Optional[float] = None,
        name: Optional[str] = None,
        key: Optional[Tuple] = None,
    ) -> Variable:
        """Add a variable; ``None`` (or an infinite value) leaves that side unbounded."""
        name = name or _fresh_name("x", self._names, len(self._variables))
        lb, ub = self._normalize_bounds(lower_bound, upper_bound, name)
        if lb is not None and ub is not None and lb > ub:
            raise InvalidBoundsError(name, lb, ub)
        if name in self._names:
            raise DuplicateNameError(f"Variable name '{name}' is already used in model '{self.name}'.")
        var = Variable(self, len(self._variables), name, lb, ub, key)
        self._variables.append(var)
        self._names[name] = var
        self._touch()
        return var

    def add_variables(
        self,
        n: int,
        name_prefix: str = "x",
        lower_bound: Optional[float] = 0.0,
        upper_bound: Optional[float] = None,
    ) -> IndexedVariableCollection:
        return self.declare_indexed([range(n)], bound_fn=lambda i: (lower_bound, upper_bound), name=name_prefix)

    def declare_indexed(self, index_sets, predicate=None, bound_fn=None, name: str = "x") -> IndexedVariableCollection:
        return declare_indexed(self, index_sets, predicate=predicate, bound_fn=bound_fn, name=name)

    def get_variable(self, name: str) -> Variable:
        try:
            return self._names[name]
        except KeyError:
            raise UnknownVariableError(f"Model '{self.name}' has no variable named '{name}'.") from None

    def get_constraint(self, name: str) -> Constraint:
        try:
            return self._constraint_names[name]
        except KeyError:
            raise UnknownConstraintError(f"Model '{self.name}' has no constraint named '{name}'.") from None

    def _check_owned(self, expr: LinearExpression, where: str) -> None:
        for var in expr.variables:
            if var.model is not self:
                raise UnknownVariableError(
                    f"{where} references variable '{var.name}' from model '{var.model.name}', not '{self.name}'."
                )

    def add_constraint(self, expression, operator: Optional[str] = None, rhs: float = 0.0, name: Optional[str] = None) -> Constraint:
        """
        Append a constraint.

        Either pass a relation built with comparison operators
        (``m.add_constraint(x + y <= 1)``) or the three parts
        (``m.add_constraint(x + y, "<=", 1)``).
        """
        if isinstance(expression, Relation):
            if operator is not None:
                raise TypeError("Do not pass an operator together with a relation")
            expr, cmp, rhs_value = expression.lhs.copy(), expression.cmp, expression.rhs
        else:
            if operator is None:
                raise TypeError("add_constraint needs an operator unless given a relation")
            expr, cmp, rhs_value = as_expression(expression), normalize_cmp(operator), float(rhs)

        name = name or _fresh_name("c", self._constraint_names, len(self._constraints) + 1)
        if name in self._constraint_names:
            raise DuplicateNameError(f"Constraint name '{name}' is already used in model '{self.name}'.")
        self._check_owned(expr, f"Constraint '{name}'")

        cons = Constraint(self, len(self._constraints), name, expr, cmp, rhs_value)
        self._constraints.append(cons)
        self._constraint_names[name] = cons
        self._touch()
        return cons

    def set_objective(self, expression, sense: str = "min") -> None:
        expr = as_expression(expression)
        self._check_owned(expr, "Objective")
        self.objective = expr
        self.sense = normalize_sense(sense)
        self._touch()

    def maximize(self, expression) -> None:
        self.set_objective(expression, "max")

    def minimize(self, expression) -> None:
        self.set_objective(expression, "min")

    def to_lp_model(self) -> LPModel:
        """Flatten into the solver-facing schema."""
        objective = self.objective or LinearExpression()
        return LPModel(
            name=self.name,
            sense=self.sense,
            objective=_flatten_expression(objective),
            variables=[VariableSpec(name=v.name, lb=v.lower_bound, ub=v.upper_bound) for v in self._variables],
            constraints=[
                ConstraintSpec(name=c.name, lhs=_flatten_expression(c.expression), cmp=c.cmp, rhs=c.rhs)
                for c in self._constraints
            ],
        )

    @classmethod
    def from_lp_model(cls, lp: LPModel) -> "Model":
        model = cls(lp.name)
        for spec in lp.variables:
            model.add_variable(spec.lb, spec.ub, name=spec.name)

        def rebuild(flat: LinearExpr, where: str) -> LinearExpression:
            expr = LinearExpression(constant=flat.constant)
            for term in flat.terms:
                if term.var not in model._names:
                    raise ValueError(f"{where} references unknown variable '{term.var}'.")
                expr._add_term(model._names[term.var], term.coef)
            return expr

        model.set_objective(rebuild(lp.objective, "Objective"), lp.sense)
        for spec in lp.constraints:
            model.add_constraint(rebuild(spec.lhs, f"Constraint '{spec.name}'"), spec.cmp, spec.rhs, name=spec.name)
        return model

    def solve(self, solver_config: Optional[SolverConfig] = None) -> "SolveResult":
        from .solvers import solve

        return solve(self, solver_config)

    def _record_result(self, result: "SolveResult") -> None:
        values = result.variable_values or {}
        for var in self._variables:
            var.value = values.get(var)
        self.result = result
        self.state = "solved"
        logger.debug(f"Recorded {result.status.value} result for model '{self.name}' at version {result.model_version}")


def _flatten_expression(expr: LinearExpression) -> LinearExpr:
    return LinearExpr(
        terms=[LinearTerm(var=var.name, coef=coef) for var, coef in expr.terms()],
        constant=expr.constant,
    )


def create_model(name: str = "problem") -> Model:
    return Model(name)


def add_variable(model: Model, lower_bound: Optional[float] = 0.0, upper_bound: Optional[float] = None, name: Optional[str] = None) -> Variable:
    return model.add_variable(lower_bound, upper_bound, name=name)


def add_constraint(model: Model, expression, operator: Optional[str] = None, rhs: float = 0.0, name: Optional[str] = None) -> Constraint:
    return model.add_constraint(expression, operator, rhs, name=name)


def set_objective(model: Model, expression, sense: str = "min") -> None:
    model.set_objective(expression, sense)
