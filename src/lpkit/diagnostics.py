from __future__ import annotations

import logging
from typing import List, Optional, Union

from pydantic import BaseModel, Field

from .model import Model
from .schemas import LPModel, SolverConfig
from .solvers import solve_lp_model

logger = logging.getLogger(__name__)


class InfeasibilityReport(BaseModel):
    status: str
    message: str
    conflicting_constraints: List[str] = Field(default_factory=list)
    suggestions: List[str] = Field(default_factory=list)


def analyze_infeasibility(model: Union[Model, LPModel], config: Optional[SolverConfig] = None) -> InfeasibilityReport:
    """
    Deletion filter over the constraint rows.

    Each constraint is dropped in turn; if the rest stays infeasible it is
    left out for good, otherwise it is restored. What remains is an
    irreducible set of conflicting constraints (given the variable bounds).
    """
    lp = model.to_lp_model() if isinstance(model, Model) else model
    opts = (config or SolverConfig()).model_copy(update={"return_duals": False})

    try:
        base = solve_lp_model(lp, opts)
    except ValueError as exc:
        logger.warning(f"Could not solve '{lp.name}' for diagnostics: {exc}")
        return _error_report(str(exc))
    if base.status == "error":
        return _error_report(base.message)
    if base.status != "infeasible":
        return InfeasibilityReport(
            status=base.status,
            message=base.message or "Model is not infeasible.",
        )

    kept = list(lp.constraints)
    idx = 0
    while idx < len(kept):
        trial = lp.model_copy(update={"constraints": kept[:idx] + kept[idx + 1:]})
        try:
            still_infeasible = solve_lp_model(trial, opts).status == "infeasible"
        except ValueError as exc:
            return _error_report(str(exc))
        if still_infeasible:
            kept = kept[:idx] + kept[idx + 1:]
        else:
            idx += 1

    conflicts = [cons.name for cons in kept]
    logger.info(f"Infeasibility of '{lp.name}' traced to {len(conflicts)} constraints: {conflicts}")

    if conflicts:
        suggestions = ["Relax or inspect the conflicting constraints above."]
    else:
        suggestions = ["Variable bounds alone are contradictory; check lower and upper bounds."]

    return InfeasibilityReport(
        status="infeasible",
        message="Detected infeasibility; listed constraints form an irreducible conflicting set.",
        conflicting_constraints=conflicts,
        suggestions=suggestions,
    )


def _error_report(message: str) -> InfeasibilityReport:
    return InfeasibilityReport(
        status="error",
        message=message,
        suggestions=["Check variable bounds (lb <= ub) and that every constraint names a declared variable."],
    )
