import pytest

from lpkit import (
    NoSolutionError,
    SolveStatus,
    SolverConfig,
    SolverUnavailableError,
    UnknownConstraintError,
    UnknownVariableError,
    create_model,
    get_value,
    solve,
)
from lpkit.catalog import two_variable_lp

BACKENDS = ["highs", "simplex", "glop"]


@pytest.fixture(params=BACKENDS)
def config(request):
    if request.param == "glop":
        pytest.importorskip("ortools")
    return SolverConfig(backend=request.param)


def make_scenario_one():
    model = create_model("scenario-1")
    x = model.add_variable(0, None, name="x")
    y = model.add_variable(0, None, name="y")
    model.add_constraint(x + y <= 1, name="budget")
    model.maximize(x + 2 * y)
    return model, x, y


def make_scenario_two():
    model = create_model("scenario-2")
    x = model.add_variable(0, None, name="x")
    y = model.add_variable(0, 1, name="y")
    model.add_constraint(x + 2 * y >= 1, name="cover")
    model.minimize(3 * x - y)
    return model, x, y


def test_maximise_two_variables(config):
    model, x, y = make_scenario_one()
    result = solve(model, config)

    assert result.status is SolveStatus.OPTIMAL
    assert result.objective_value == pytest.approx(2.0, abs=1e-7)
    assert get_value(result, y) == pytest.approx(1.0, abs=1e-7)
    assert get_value(result, x) == pytest.approx(0.0, abs=1e-7)
    assert result.backend == config.backend


def test_minimise_with_upper_bound(config):
    model, x, y = make_scenario_two()
    result = solve(model, config)

    assert result.status is SolveStatus.OPTIMAL
    assert result.objective_value == pytest.approx(-1.0, abs=1e-7)
    assert result.get_value(x) == pytest.approx(0.0, abs=1e-7)
    assert result.get_value(y) == pytest.approx(1.0, abs=1e-7)


def test_infeasible_is_a_status_not_an_error(config):
    model = create_model("infeasible")
    x = model.add_variable(0, None, name="x")
    model.add_constraint(x <= -1)
    model.minimize(x)

    result = solve(model, config)

    assert result.status is SolveStatus.INFEASIBLE
    assert result.objective_value is None
    assert result.variable_values is None
    with pytest.raises(NoSolutionError):
        get_value(result, x)


@pytest.mark.parametrize("backend", ["highs", "simplex"])
def test_unbounded_is_reported(backend):
    config = SolverConfig(backend=backend)
    model = create_model("unbounded")
    x = model.add_variable(0, None, name="x")
    y = model.add_variable(0, None, name="y")
    model.add_constraint(x - y <= 1)
    model.maximize(x + y)

    assert solve(model, config).status is SolveStatus.UNBOUNDED


def test_catalog_two_variable_lp(config):
    built = two_variable_lp()
    result = built.model.solve(config)

    assert result.objective_value == pytest.approx(400.0, rel=1e-7)
    assert result.get_value(built.handles["x"]) == pytest.approx(4.0, rel=1e-7)
    assert result.get_value(built.handles["y"]) == pytest.approx(8.0, rel=1e-7)


def test_values_are_written_back_and_state_advances():
    model, x, y = make_scenario_one()
    assert model.state == "built"

    result = model.solve()

    assert model.state == "solved"
    assert model.result is result
    assert y.value == pytest.approx(1.0)
    assert result.evaluate(x + 2 * y) == pytest.approx(result.objective_value)


def test_result_goes_stale_after_mutation():
    model, x, y = make_scenario_one()
    result = model.solve()
    assert not result.is_stale

    z = model.add_variable(name="z")

    assert result.is_stale
    assert model.state == "solved"
    assert result.get_value(y) == pytest.approx(1.0)
    with pytest.raises(UnknownVariableError):
        result.get_value(z)


def test_variable_from_other_model_is_unknown():
    model, _, _ = make_scenario_one()
    other = create_model("other")
    stranger = other.add_variable(name="x")
    result = model.solve()

    with pytest.raises(UnknownVariableError):
        get_value(result, stranger)


def test_unknown_backend_raises_and_keeps_state():
    model, _, _ = make_scenario_one()
    config = SolverConfig.model_construct(backend="cplex")

    with pytest.raises(SolverUnavailableError):
        solve(model, config)
    assert model.state == "built"
    assert model.result is None


def test_model_without_objective_is_a_feasibility_problem():
    model = create_model("feasibility")
    x = model.add_variable(1, 3, name="x")
    model.add_constraint(x >= 2)

    result = model.solve()

    assert result.status is SolveStatus.OPTIMAL
    assert result.objective_value == pytest.approx(0.0)
    assert 2.0 - 1e-7 <= result.get_value(x) <= 3.0 + 1e-7


def test_model_without_variables():
    model = create_model("constant")
    model.add_constraint(0, "<=", 1)

    assert model.solve().status is SolveStatus.OPTIMAL


def test_simplex_iteration_limit_keeps_feasible_values():
    built = two_variable_lp()
    result = built.model.solve(SolverConfig(backend="simplex", max_iters=1))

    assert result.status is SolveStatus.SUBOPTIMAL
    assert result.objective_value == pytest.approx(320.0)
    assert result.get_value(built.handles["x"]) == pytest.approx(8.0)


def test_simplex_time_limit_reports_timeout():
    model, x, _ = make_scenario_one()
    result = model.solve(SolverConfig(backend="simplex", time_limit=1e-12))

    assert result.status is SolveStatus.TIMEOUT
    with pytest.raises(NoSolutionError):
        result.get_value(x)


def test_shadow_price_of_binding_constraint():
    model, _, _ = make_scenario_one()
    result = model.solve()

    assert result.get_dual(model.get_constraint("budget")) == pytest.approx(2.0)


def test_dual_of_foreign_constraint_is_unknown():
    model, _, _ = make_scenario_one()
    other, _, _ = make_scenario_one()
    result = model.solve()

    with pytest.raises(UnknownConstraintError):
        result.get_dual(other.get_constraint("budget"))
