"""Solver backends and the solve entry point.

Each backend is a function ``(LPModel, SolverConfig) -> LPSolution`` living in
its own module so that a missing third-party library only disables that
backend.
"""

from __future__ import annotations

import logging
import time
from importlib import import_module
from typing import TYPE_CHECKING, Callable, Dict, Optional, Tuple

from ..errors import SolverUnavailableError
from ..schemas import LPModel, LPSolution, SolverConfig

if TYPE_CHECKING:  # pragma: no cover
    from ..model import Model
    from ..results import SolveResult

logger = logging.getLogger(__name__)

BackendFn = Callable[[LPModel, SolverConfig], LPSolution]

_BACKENDS: Dict[str, Tuple[str, str]] = {
    "highs": (".highs", "solve_highs"),
    "simplex": (".simplex", "solve_simplex"),
    "glop": (".glop", "solve_glop"),
}

__all__ = ["available_backends", "get_backend", "solve", "solve_lp_model"]


def get_backend(name: str) -> BackendFn:
    try:
        module_name, attr = _BACKENDS[name]
    except KeyError:
        raise SolverUnavailableError(
            f"Unknown solver backend '{name}'; expected one of {sorted(_BACKENDS)}."
        ) from None
    try:
        module = import_module(module_name, __name__)
    except ImportError as exc:
        raise SolverUnavailableError(f"Solver backend '{name}' is not installed: {exc}") from exc
    return getattr(module, attr)


def available_backends() -> Dict[str, bool]:
    status: Dict[str, bool] = {}
    for name in _BACKENDS:
        try:
            get_backend(name)
        except SolverUnavailableError:
            status[name] = False
        else:
            status[name] = True
    return status


def _solve_constant_model(model: LPModel, opts: SolverConfig) -> LPSolution:
    # No columns: every constraint reduces to ``constant cmp rhs``.
    slack = max(opts.tol, 1e-9)
    for cons in model.constraints:
        lhs = cons.lhs.constant
        violated = (
            (cons.cmp == "<=" and lhs > cons.rhs + slack)
            or (cons.cmp == ">=" and lhs < cons.rhs - slack)
            or (cons.cmp == "==" and abs(lhs - cons.rhs) > slack)
        )
        if violated:
            return LPSolution(status="infeasible", message=f"Constant constraint '{cons.name}' is violated.")
    duals = {cons.name: 0.0 for cons in model.constraints} if opts.return_duals else None
    return LPSolution(status="optimal", objective_value=model.objective.constant, x={}, reduced_costs={}, duals=duals)


def solve_lp_model(model: LPModel, config: Optional[SolverConfig] = None) -> LPSolution:
    """Solve a flat model with the configured backend."""
    opts = config or SolverConfig()
    backend = get_backend(opts.backend)
    if not model.variables:
        return _solve_constant_model(model, opts)
    return backend(model, opts)


def solve(model: "Model", solver_config: Optional[SolverConfig] = None) -> "SolveResult":
    """
    Solve ``model`` and record the result on it.

    Only an unreachable backend raises (SolverUnavailableError); infeasible,
    unbounded and numerically failed solves come back as statuses.
    """
    from ..results import SolveResult, SolveStatus

    opts = solver_config or SolverConfig()
    get_backend(opts.backend)
    lp = model.to_lp_model()
    version = model.version
    previous_state = model.state
    logger.debug(
        f"Solving model '{model.name}' (v{version}) with {len(lp.variables)} variables and "
        f"{len(lp.constraints)} constraints via {opts.backend}"
    )

    model.state = "solving"
    start = time.perf_counter()
    try:
        solution = solve_lp_model(lp, opts)
    except SolverUnavailableError:
        model.state = previous_state
        raise
    except (ValueError, ArithmeticError) as exc:
        logger.exception(f"Backend {opts.backend} failed on model '{model.name}'")
        result = SolveResult.failed(model, version, opts.backend, str(exc))
    else:
        result = SolveResult.from_solution(model, solution, opts.backend, version)
    elapsed_ms = (time.perf_counter() - start) * 1000

    model._record_result(result)
    if result.status is SolveStatus.OPTIMAL:
        logger.info(
            f"Model '{model.name}' solved to optimality: objective {result.objective_value} in {elapsed_ms:.1f} ms"
        )
    else:
        logger.warning(f"Model '{model.name}' finished with status {result.status.value}: {result.message}")
    return result
