from __future__ import annotations

import logging
import os
import sys

from mcp.server.fastmcp import FastMCP

from .diagnostics import analyze_infeasibility
from .errors import SolverUnavailableError
from .parser import parse_lp_text as _parse_lp_text
from .schemas import LPModel, SolverConfig
from .solvers import solve_lp_model

logger = logging.getLogger(__name__)

mcp = FastMCP("lpkit")


@mcp.tool()
def solve_linear_program(model: LPModel, options: SolverConfig | None = None) -> dict:
    "Solve a linear program with the configured backend and return the solution dict."
    opts = options or SolverConfig.from_env()
    try:
        return solve_lp_model(model, opts).model_dump()
    except (SolverUnavailableError, ValueError) as exc:
        return {"status": "error", "message": str(exc)}


@mcp.tool()
def parse_lp_text(spec: str) -> dict:
    "Parse a small textual LP ('maximize 3x + 2y subject to ...') into LPModel JSON."
    return _parse_lp_text(spec).to_lp_model().model_dump()


@mcp.tool()
def diagnose_infeasibility(model: LPModel, options: SolverConfig | None = None) -> dict:
    "Return an irreducible set of conflicting constraints for an infeasible LP."
    return analyze_infeasibility(model, options or SolverConfig.from_env()).model_dump()


def main() -> None:
    logging.basicConfig(level=os.environ.get("LPKIT_LOG_LEVEL", "INFO"), stream=sys.stderr)
    transport = os.environ.get("LPKIT_TRANSPORT", "stdio")
    if transport == "stdio" or "--stdio" in sys.argv:
        mcp.run(transport="stdio")
    else:
        mcp.settings.host = os.environ.get("HOST", "127.0.0.1")
        mcp.settings.port = int(os.environ.get("PORT", "8081"))
        mcp.run(transport="streamable-http")


if __name__ == "__main__":
    main()
