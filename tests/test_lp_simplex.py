import json
from pathlib import Path

import pytest

from lpkit import Model
from lpkit.schemas import SolverConfig, LPModel
from lpkit.solvers.simplex import solve_simplex


def load_example(name: str) -> LPModel:
    data = json.loads(Path(__file__).parent.parent.joinpath("examples", name).read_text())
    return LPModel.model_validate(data)


def test_simplex_solves_small_lp():
    model = load_example("small_lp.json")
    solution = solve_simplex(model, SolverConfig(backend="simplex"))

    assert solution.status == "optimal"
    assert solution.objective_value == pytest.approx(9.6, rel=1e-6)
    assert solution.x is not None
    assert solution.x["x"] == pytest.approx(0.8, rel=1e-6)
    assert solution.x["y"] == pytest.approx(3.6, rel=1e-6)


@pytest.mark.parametrize("pivot_rule", ["dantzig", "bland"])
def test_small_lp_through_the_builder(pivot_rule):
    model = Model.from_lp_model(load_example("small_lp.json"))
    result = model.solve(SolverConfig(backend="simplex", pivot_rule=pivot_rule))

    assert result.objective_value == pytest.approx(9.6, rel=1e-6)
    assert result.get_value(model.get_variable("y")) == pytest.approx(3.6, rel=1e-6)


def test_free_variable_and_shifted_lower_bound():
    model = Model("shifted")
    x = model.add_variable(None, None, name="x")
    y = model.add_variable(2, 5, name="y")
    model.add_constraint(x + y >= -10)
    model.add_constraint(x >= -4)
    model.minimize(x + y)

    result = model.solve(SolverConfig(backend="simplex"))

    assert result.objective_value == pytest.approx(-2.0)
    assert result.get_value(x) == pytest.approx(-4.0)
    assert result.get_value(y) == pytest.approx(2.0)
