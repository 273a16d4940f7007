from __future__ import annotations

import logging
from typing import Dict, List, Optional, Tuple

import numpy as np
from scipy.optimize import linprog

from ..schemas import LPModel, LPSolution, SolverConfig

logger = logging.getLogger(__name__)


def solve_highs(model: LPModel, config: Optional[SolverConfig] = None) -> LPSolution:
    """Solve through scipy's HiGHS bindings."""
    opts = config or SolverConfig()
    c, constant = _build_objective(model)
    A_ub, b_ub, A_eq, b_eq, ub_signs = _build_constraint_matrices(model)
    bounds = _build_bounds(model)

    sense_factor = 1.0 if model.sense == "min" else -1.0
    options: Dict[str, object] = {"maxiter": opts.max_iters}
    if opts.time_limit is not None:
        options["time_limit"] = opts.time_limit

    res = linprog(
        c * sense_factor,
        A_ub=A_ub if A_ub.size else None,
        b_ub=b_ub if b_ub.size else None,
        A_eq=A_eq if A_eq.size else None,
        b_eq=b_eq if b_eq.size else None,
        bounds=bounds,
        method="highs",
        options=options,
    )
    logger.debug(f"HiGHS returned status {res.status}: {res.message}")

    status = _map_status(res, opts)
    if status == "suboptimal" and not _is_feasible(res.x, A_ub, b_ub, A_eq, b_eq, bounds, opts.tol):
        status = "timeout" if opts.time_limit is not None else "error"

    if status not in ("optimal", "suboptimal"):
        return LPSolution(
            status=status,
            iterations=int(getattr(res, "nit", 0) or 0),
            message=res.message,
        )

    values = _map_variables(model, res.x)
    objective = float(c @ res.x + constant)
    reduced_costs = _extract_reduced_costs(model, res, sense_factor) if status == "optimal" else None
    duals = _extract_duals(model, res, sense_factor, ub_signs) if opts.return_duals and status == "optimal" else None

    return LPSolution(
        status=status,
        objective_value=objective,
        x=values,
        reduced_costs=reduced_costs,
        duals=duals,
        iterations=int(res.nit),
        message=res.message or "",
    )


def _build_objective(model: LPModel) -> Tuple[np.ndarray, float]:
    n = len(model.variables)
    c = np.zeros(n)
    constant = model.objective.constant
    name_to_idx = model.variable_index()
    for term in model.objective.terms:
        if term.var not in name_to_idx:
            raise ValueError(f"Objective references unknown variable '{term.var}'")
        c[name_to_idx[term.var]] += term.coef
    return c, constant


def _build_constraint_matrices(
    model: LPModel,
) -> Tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray, List[float]]:
    n = len(model.variables)
    A_ub: List[List[float]] = []
    b_ub: List[float] = []
    A_eq: List[List[float]] = []
    b_eq: List[float] = []
    ub_signs: List[float] = []
    name_to_idx = model.variable_index()

    for cons in model.constraints:
        row = [0.0] * n
        for term in cons.lhs.terms:
            if term.var not in name_to_idx:
                raise ValueError(f"Constraint '{cons.name}' references unknown variable '{term.var}'")
            row[name_to_idx[term.var]] += term.coef
        rhs = cons.rhs - cons.lhs.constant

        if cons.cmp == "<=":
            A_ub.append(row)
            b_ub.append(rhs)
            ub_signs.append(1.0)
        elif cons.cmp == ">=":
            A_ub.append([-value for value in row])
            b_ub.append(-rhs)
            ub_signs.append(-1.0)
        else:
            A_eq.append(row)
            b_eq.append(rhs)

    return (
        np.array(A_ub, dtype=float) if A_ub else np.empty((0, n)),
        np.array(b_ub, dtype=float) if b_ub else np.empty(0),
        np.array(A_eq, dtype=float) if A_eq else np.empty((0, n)),
        np.array(b_eq, dtype=float) if b_eq else np.empty(0),
        ub_signs,
    )


def _build_bounds(model: LPModel) -> List[Tuple[float | None, float | None]]:
    bounds: List[Tuple[float | None, float | None]] = []
    for var in model.variables:
        lb = None if var.lb is None or np.isneginf(var.lb) else var.lb
        ub = None if var.ub is None or np.isposinf(var.ub) else var.ub
        if lb is not None and ub is not None and lb > ub:
            raise ValueError(f"Variable {var.name} has inconsistent bounds {lb}>{ub}")
        bounds.append((lb, ub))
    return bounds


def _is_feasible(x, A_ub, b_ub, A_eq, b_eq, bounds, tol: float) -> bool:
    if x is None:
        return False
    x = np.asarray(x, dtype=float)
    slack = max(tol, 1e-7)
    if A_ub.size and np.any(A_ub @ x > b_ub + slack):
        return False
    if A_eq.size and np.any(np.abs(A_eq @ x - b_eq) > slack):
        return False
    for value, (lb, ub) in zip(x, bounds):
        if lb is not None and value < lb - slack:
            return False
        if ub is not None and value > ub + slack:
            return False
    return True


def _map_variables(model: LPModel, values: np.ndarray) -> Dict[str, float]:
    result: Dict[str, float] = {}
    for var, value in zip(model.variables, values):
        result[var.name] = float(value)
    return result


def _extract_reduced_costs(model: LPModel, res, sense_factor: float) -> Dict[str, float]:
    lower = getattr(res, "lower", None)
    upper = getattr(res, "upper", None)
    if lower is None or upper is None:
        return {}
    costs = np.asarray(lower.marginals) + np.asarray(upper.marginals)
    return {var.name: float(value * sense_factor) for var, value in zip(model.variables, costs)}


def _extract_duals(model: LPModel, res, sense_factor: float, ub_signs: List[float]) -> Dict[str, float]:
    """Shadow prices as d(objective)/d(rhs) in the model's own sense."""
    duals: Dict[str, float] = {}
    ineqlin = getattr(res, "ineqlin", None)
    if ineqlin is not None:
        inequality_rows = [c for c in model.constraints if c.cmp != "=="]
        for cons, sign, value in zip(inequality_rows, ub_signs, ineqlin.marginals):
            duals[cons.name] = float(value * sense_factor * sign)
    eqlin = getattr(res, "eqlin", None)
    if eqlin is not None:
        for cons, value in zip([c for c in model.constraints if c.cmp == "=="], eqlin.marginals):
            duals[cons.name] = float(value * sense_factor)
    return duals


def _map_status(res, opts: SolverConfig) -> str:
    if res.status == 1:
        message = (res.message or "").lower()
        if opts.time_limit is not None and "time" in message:
            return "timeout"
        return "suboptimal"
    mapping = {
        0: "optimal",
        2: "infeasible",
        3: "unbounded",
        4: "error",
    }
    return mapping.get(res.status, "error")
