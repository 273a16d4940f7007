import pytest

pytest.importorskip("mcp")

from lpkit.schemas import LPModel, VariableSpec  # noqa: E402
from lpkit.server import diagnose_infeasibility, parse_lp_text, solve_linear_program  # noqa: E402


def test_parse_then_solve_round_trip():
    payload = parse_lp_text("maximize x + 2y subject to x + y <= 1")
    solution = solve_linear_program(LPModel.model_validate(payload))

    assert solution["status"] == "optimal"
    assert solution["objective_value"] == pytest.approx(2.0)
    assert solution["x"]["y"] == pytest.approx(1.0)


def test_diagnose_reports_conflict():
    payload = parse_lp_text("minimize x subject to x + y <= 1, x + y >= 3")
    report = diagnose_infeasibility(LPModel.model_validate(payload))

    assert report["status"] == "infeasible"
    assert sorted(report["conflicting_constraints"]) == ["c1", "c2"]


def test_contradictory_bounds_return_error_payloads():
    model = LPModel(name="bad-bounds", variables=[VariableSpec(name="x", lb=2.0, ub=1.0)])

    solution = solve_linear_program(model)
    report = diagnose_infeasibility(model)

    assert solution["status"] == "error"
    assert "inconsistent bounds" in solution["message"]
    assert report["status"] == "error"
    assert report["suggestions"]
