from __future__ import annotations

import os
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field, model_validator

Sense = Literal["min", "max"]
Cmp = Literal["<=", ">=", "=="]
PivotRule = Literal["dantzig", "bland"]
Backend = Literal["highs", "simplex", "glop"]
Status = Literal["optimal", "infeasible", "unbounded", "suboptimal", "error", "timeout"]


class VariableSpec(BaseModel):
    name: str
    lb: float | None = 0.0
    ub: float | None = None


class LinearTerm(BaseModel):
    var: str
    coef: float


class LinearExpr(BaseModel):
    terms: List[LinearTerm] = Field(default_factory=list)
    constant: float = 0.0


class ConstraintSpec(BaseModel):
    name: str
    lhs: LinearExpr
    cmp: Cmp
    rhs: float


class LPModel(BaseModel):
    """Flat, solver-facing form of a model: names, bounds and coefficient lists."""

    name: str = "problem"
    sense: Sense = "min"
    objective: LinearExpr = Field(default_factory=LinearExpr)
    variables: List[VariableSpec] = Field(default_factory=list)
    constraints: List[ConstraintSpec] = Field(default_factory=list)

    def variable_index(self) -> Dict[str, int]:
        return {var.name: idx for idx, var in enumerate(self.variables)}


class SolverConfig(BaseModel):
    backend: Backend = "highs"
    max_iters: int = 10_000
    tol: float = 1e-9
    pivot_rule: PivotRule = "dantzig"
    time_limit: float | None = Field(default=None, gt=0)
    return_duals: bool = True

    @classmethod
    def from_env(cls, **overrides) -> "SolverConfig":
        """Build a config from ``LPKIT_*`` environment variables; keyword overrides win."""
        values: Dict[str, object] = {}
        env_map = {
            "LPKIT_BACKEND": "backend",
            "LPKIT_MAX_ITERS": "max_iters",
            "LPKIT_TOL": "tol",
            "LPKIT_TIME_LIMIT": "time_limit",
        }
        for env_name, field_name in env_map.items():
            raw = os.environ.get(env_name)
            if raw is not None and raw.strip():
                values[field_name] = raw.strip()
        values.update(overrides)
        return cls.model_validate(values)


class LPSolution(BaseModel):
    status: Status
    objective_value: Optional[float] = None
    x: Dict[str, float] | None = None
    reduced_costs: Dict[str, float] | None = None
    duals: Dict[str, float] | None = None
    iterations: int = 0
    message: str = ""

    @model_validator(mode="after")
    def _solution_only_when_solved(self) -> "LPSolution":
        if self.status not in ("optimal", "suboptimal"):
            self.objective_value = None
            self.x = None
        return self
