import logging
import time
from typing import Dict, Tuple, Any, List, Optional, Set

import numpy as np

from .standard_form import StandardForm, build_standard_form
from ..schemas import LPModel, SolverConfig, LPSolution

logger = logging.getLogger(__name__)


def solve_simplex(model: LPModel, config: Optional[SolverConfig] = None) -> LPSolution:
    """
    Dense primal simplex with Phase I/II and an optional Bland rule against cycling.
    Works on small/medium LPs; engineered for clarity, not speed.
    """
    opts = config or SolverConfig()
    try:
        form = build_standard_form(model, opts.tol)
    except ValueError as exc:
        return _without_solution("error", 0, str(exc))

    use_bland = opts.pivot_rule == "bland"
    deadline = time.perf_counter() + opts.time_limit if opts.time_limit is not None else None

    phase1 = _phase_I(form, use_bland, opts, deadline)
    iterations = phase1.get("iterations", 0)
    logger.debug(f"Phase I finished with status {phase1['status']} after {iterations} pivots")

    if phase1["status"] == "infeasible":
        return _without_solution("infeasible", iterations, "Infeasible.")
    if phase1["status"] == "timeout":
        return _without_solution("timeout", iterations, "Time limit reached in Phase I.")
    if phase1["status"] == "iteration_limit":
        return _without_solution("error", iterations, "Hit iteration limit in Phase I.")
    if phase1["status"] == "unbounded":
        return _without_solution(
            "error", iterations, "Phase I detected unbounded auxiliary problem (likely modelling error)."
        )

    remaining_iters = max(opts.max_iters - iterations, 1)
    phase2 = _phase_II(form, phase1["basis"], use_bland, opts, remaining_iters, deadline)
    iterations += phase2.get("iterations", 0)
    status = phase2["status"]
    logger.debug(f"Phase II finished with status {status} after {iterations} pivots in total")

    if status == "unbounded":
        return _without_solution("unbounded", iterations, "Unbounded.")
    if status == "timeout":
        return _without_solution("timeout", iterations, "Time limit reached in Phase II.")

    # Phase II keeps a basic feasible solution, so an iteration limit still has usable values.
    message = ""
    if status == "iteration_limit":
        status = "suboptimal"
        message = "Hit iteration limit in Phase II; returning last feasible basis."

    duals = None
    if status == "optimal" and opts.return_duals and phase2["duals"].size:
        duals = form.recover_duals(phase2["duals"], opts.tol)

    return LPSolution(
        status=status,
        objective_value=float(form.objective_constant + form.sense_mult * phase2["objective"]),
        x=form.recover_values(phase2["x"], opts.tol),
        reduced_costs=form.recover_reduced_costs(phase2["reduced_costs"], opts.tol),
        duals=duals,
        iterations=iterations,
        message=message,
    )


def _without_solution(status: str, iterations: int, message: str) -> LPSolution:
    return LPSolution(status=status, iterations=iterations, message=message)


def _phase_I(
    form: StandardForm,
    use_bland: bool,
    opts: SolverConfig,
    deadline: Optional[float],
) -> Dict[str, Any]:
    A, b = form.A, form.b
    artificial = set(form.artificial)
    if not artificial or A.shape[0] == 0:
        return {
            "status": "feasible",
            "basis": form.basis.copy(),
            "x": _basic_solution(A, b, form.basis, opts.tol),
            "iterations": 0,
        }

    c_phase1 = np.zeros_like(form.c)
    for idx in artificial:
        c_phase1[idx] = -1.0  # maximise => drives artificials to zero

    result = _run_simplex(A, b, c_phase1, form.basis.copy(), opts, use_bland, opts.max_iters, None, deadline)
    if result["status"] != "optimal":
        return result

    x = result["x"]
    status = "feasible"
    if float(sum(x[idx] for idx in artificial)) > max(opts.tol, 1e-9):
        status = "infeasible"
    return {
        "status": status,
        "basis": result["basis"],
        "x": x,
        "iterations": result["iterations"],
    }


def _phase_II(
    form: StandardForm,
    basis: List[int],
    use_bland: bool,
    opts: SolverConfig,
    max_iterations: int,
    deadline: Optional[float],
) -> Dict[str, Any]:
    forbidden = set(form.artificial)
    return _run_simplex(form.A, form.b, form.c, basis.copy(), opts, use_bland, max_iterations, forbidden, deadline)

def _solve_basis(B: np.ndarray, rhs: np.ndarray) -> np.ndarray:
    try:
        return np.linalg.solve(B, rhs)
    except np.linalg.LinAlgError:
        return np.linalg.lstsq(B, rhs, rcond=None)[0]


def _run_simplex(
    A: np.ndarray,
    b: np.ndarray,
    c: np.ndarray,
    basis: List[int],
    opts: SolverConfig,
    use_bland: bool,
    max_iterations: Optional[int],
    forbidden: Optional[Set[int]],
    deadline: Optional[float] = None,
) -> Dict[str, Any]:
    basis = basis.copy()
    forbidden = set() if forbidden is None else set(forbidden)
    tol = opts.tol
    m, n = A.shape
    iterations = 0
    max_iter = max(max_iterations if max_iterations is not None else opts.max_iters, 1)

    def snapshot(status: str, x: np.ndarray, objective: float, duals: np.ndarray, reduced: np.ndarray) -> Dict[str, Any]:
        return {
            "status": status,
            "basis": basis.copy(),
            "iterations": iterations,
            "x": x,
            "objective": objective,
            "duals": duals,
            "reduced_costs": reduced,
        }

    if m == 0:
        if any(j not in forbidden and c[j] > tol for j in range(n)):
            return snapshot("unbounded", np.zeros(n), np.inf, np.zeros(0), c.copy())
        reduced = c.copy()
        reduced[np.abs(reduced) < tol] = 0.0
        return snapshot("optimal", np.zeros(n), 0.0, np.zeros(0), reduced)

    while True:
        B = A[:, basis]
        xB = _solve_basis(B, b)
        xB[np.abs(xB) < tol] = 0.0
        if np.any(xB < -tol):
            xB = np.maximum(xB, 0.0)

        y = _solve_basis(B.T, c[basis])
        reduced = c - A.T @ y
        reduced[np.abs(reduced) < tol] = 0.0
        reduced[basis] = 0.0

        x = np.zeros(n)
        x[basis] = xB
        objective = float(c[basis] @ xB)

        entering_candidates = [
            (j, reduced[j]) for j in range(n) if j not in basis and j not in forbidden and reduced[j] > tol
        ]
        if not entering_candidates:
            return snapshot("optimal", x, objective, y, reduced)
        if iterations >= max_iter:
            return snapshot("iteration_limit", x, objective, y, reduced)
        if deadline is not None and time.perf_counter() > deadline:
            return snapshot("timeout", x, objective, y, reduced)

        if use_bland:
            entering = min(j for j, _ in entering_candidates)
        else:
            entering = max(entering_candidates, key=lambda item: item[1])[0]

        d = _solve_basis(B, A[:, entering])
        d[np.abs(d) < tol] = 0.0
        ratios: List[Tuple[float, int]] = [(xB[idx] / value, idx) for idx, value in enumerate(d) if value > tol]
        if not ratios:
            return snapshot("unbounded", np.zeros(n), np.inf, y, reduced)

        if use_bland:
            _, pivot_row = min(ratios, key=lambda item: (item[0], basis[item[1]]))
        else:
            _, pivot_row = min(ratios, key=lambda item: item[0])

        basis[pivot_row] = entering
        iterations += 1


def _basic_solution(A: np.ndarray, b: np.ndarray, basis: List[int], tol: float) -> np.ndarray:
    n = A.shape[1] if A.ndim == 2 else len(basis)
    x = np.zeros(n)
    if A.shape[0] == 0 or len(basis) == 0:
        return x
    xB = _solve_basis(A[:, basis], b)
    xB[np.abs(xB) < tol] = 0.0
    x[basis] = xB
    return x
