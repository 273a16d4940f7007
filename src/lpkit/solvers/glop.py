from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from ortools.linear_solver import pywraplp

from ..errors import SolverUnavailableError
from ..schemas import LPModel, LPSolution, SolverConfig

logger = logging.getLogger(__name__)

_STATUS_MAP = {
    pywraplp.Solver.OPTIMAL: "optimal",
    pywraplp.Solver.FEASIBLE: "suboptimal",
    pywraplp.Solver.INFEASIBLE: "infeasible",
    pywraplp.Solver.UNBOUNDED: "unbounded",
    pywraplp.Solver.ABNORMAL: "error",
    pywraplp.Solver.NOT_SOLVED: "error",
}


def solve_glop(model: LPModel, config: Optional[SolverConfig] = None) -> LPSolution:
    """Solve with OR-Tools' GLOP simplex through pywraplp."""
    opts = config or SolverConfig()
    solver = pywraplp.Solver.CreateSolver("GLOP")
    if solver is None:
        raise SolverUnavailableError("Failed to create OR-Tools GLOP solver")
    if opts.time_limit is not None:
        solver.SetTimeLimit(int(opts.time_limit * 1000))

    infinity = solver.infinity()
    variables: Dict[str, Any] = {}
    for var in model.variables:
        lb = var.lb if var.lb is not None else -infinity
        ub = var.ub if var.ub is not None else infinity
        variables[var.name] = solver.NumVar(lb, ub, var.name)

    constraints: Dict[str, Any] = {}
    for cons in model.constraints:
        rhs = cons.rhs - cons.lhs.constant
        if cons.cmp == "<=":
            row = solver.Constraint(-infinity, rhs, cons.name)
        elif cons.cmp == ">=":
            row = solver.Constraint(rhs, infinity, cons.name)
        else:
            row = solver.Constraint(rhs, rhs, cons.name)
        for term in cons.lhs.terms:
            if term.var not in variables:
                raise ValueError(f"Constraint '{cons.name}' references unknown variable '{term.var}'")
            target = variables[term.var]
            row.SetCoefficient(target, row.GetCoefficient(target) + term.coef)
        constraints[cons.name] = row

    objective = solver.Objective()
    for term in model.objective.terms:
        if term.var not in variables:
            raise ValueError(f"Objective references unknown variable '{term.var}'")
        target = variables[term.var]
        objective.SetCoefficient(target, objective.GetCoefficient(target) + term.coef)
    objective.SetOffset(model.objective.constant)
    if model.sense == "max":
        objective.SetMaximization()
    else:
        objective.SetMinimization()

    result_status = solver.Solve()
    status = _STATUS_MAP.get(result_status, "error")
    if result_status == pywraplp.Solver.NOT_SOLVED and opts.time_limit is not None:
        status = "timeout"
    iterations = int(solver.iterations())
    logger.debug(f"GLOP returned status {status} after {iterations} iterations")

    if status not in ("optimal", "suboptimal"):
        return LPSolution(status=status, iterations=iterations, message=f"OR-Tools GLOP returned status {status}")

    duals = None
    if opts.return_duals and status == "optimal":
        duals = {name: float(row.dual_value()) for name, row in constraints.items()}

    return LPSolution(
        status=status,
        objective_value=float(objective.Value()),
        x={name: float(var.solution_value()) for name, var in variables.items()},
        reduced_costs={name: float(var.reduced_cost()) for name, var in variables.items()},
        duals=duals,
        iterations=iterations,
        message="Solved via OR-Tools GLOP",
    )
