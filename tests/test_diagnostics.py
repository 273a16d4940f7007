import pytest

from lpkit import create_model
from lpkit.diagnostics import analyze_infeasibility
from lpkit.schemas import ConstraintSpec, LinearExpr, LinearTerm, LPModel, SolverConfig, VariableSpec


def make_conflicting_model():
    model = create_model("conflict")
    x = model.add_variable(name="x")
    y = model.add_variable(name="y")
    model.add_constraint(x + y <= 10, name="capacity")
    model.add_constraint(x >= 6, name="min_x")
    model.add_constraint(y >= 6, name="min_y")
    model.add_constraint(x - y <= 3, name="balance")
    model.maximize(x + y)
    return model


def test_deletion_filter_finds_the_conflict():
    report = analyze_infeasibility(make_conflicting_model())

    assert report.status == "infeasible"
    assert sorted(report.conflicting_constraints) == ["capacity", "min_x", "min_y"]
    assert report.suggestions


def test_feasible_model_has_no_conflicts():
    model = create_model("fine")
    x = model.add_variable(name="x")
    model.add_constraint(x <= 1)
    model.maximize(x)

    report = analyze_infeasibility(model)

    assert report.status == "optimal"
    assert report.conflicting_constraints == []


@pytest.mark.parametrize("backend", ["highs", "simplex"])
def test_contradictory_bounds_come_back_as_error_report(backend):
    lp = LPModel(
        name="bad-bounds",
        variables=[VariableSpec(name="x", lb=2.0, ub=1.0)],
        constraints=[
            ConstraintSpec(name="cap", lhs=LinearExpr(terms=[LinearTerm(var="x", coef=1.0)]), cmp="<=", rhs=5.0)
        ],
    )

    report = analyze_infeasibility(lp, SolverConfig(backend=backend))

    assert report.status == "error"
    assert "inconsistent bounds" in report.message
    assert report.conflicting_constraints == []
    assert report.suggestions
