import math

import pytest

from lpkit import (
    DuplicateNameError,
    InvalidBoundsError,
    Model,
    UnknownConstraintError,
    UnknownHandleError,
    UnknownVariableError,
    add_constraint,
    add_variable,
    create_model,
    set_objective,
)


@pytest.mark.parametrize("lo, hi", [(0.0, 0.0), (-5.0, 3.0), (None, 2.0), (1.0, None), (None, None)])
def test_valid_bounds_are_kept(lo, hi):
    model = create_model()
    var = add_variable(model, lo, hi, name="v")

    assert var.bounds == (lo, hi)
    assert var.model is model
    assert model.variables == (var,)


def test_lower_above_upper_is_rejected():
    model = create_model()
    with pytest.raises(InvalidBoundsError):
        add_variable(model, 2.0, 1.0, name="bad")
    assert model.variables == ()


def test_infinite_bounds_mean_unbounded():
    model = create_model()
    var = model.add_variable(-math.inf, math.inf, name="free")

    assert var.bounds == (None, None)
    with pytest.raises(InvalidBoundsError):
        model.add_variable(math.inf, None, name="impossible")


def test_new_model_is_empty():
    model = create_model("fresh")

    assert model.variables == ()
    assert model.constraints == ()
    assert model.objective is None
    assert model.state == "built"


def test_auto_names_and_duplicates():
    model = create_model()
    first = model.add_variable()
    assert first.name == "x0"
    with pytest.raises(DuplicateNameError):
        model.add_variable(name="x0")


def test_auto_names_skip_names_already_taken():
    model = create_model()
    chosen = model.add_variable(name="x1")
    first = model.add_variable()
    second = model.add_variable()

    assert first.name == "x2"
    assert second.name == "x3"
    assert model.get_variable("x1") is chosen
    assert len({v.name for v in model.variables}) == 3


def test_constraint_auto_names_skip_names_already_taken():
    model = create_model()
    x = model.add_variable(name="x")
    model.add_constraint(x <= 5, name="c2")
    first = model.add_constraint(x >= 0)
    second = model.add_constraint(x <= 9)

    assert first.name == "c3"
    assert second.name == "c4"


def test_unknown_constraint_name_is_a_handle_error():
    model = create_model()
    with pytest.raises(UnknownConstraintError):
        model.get_constraint("missing")
    with pytest.raises(UnknownHandleError):
        model.get_variable("missing")


def test_add_constraint_forms():
    model = create_model()
    x = model.add_variable(name="x")
    y = model.add_variable(name="y")

    c1 = add_constraint(model, x + y, "≤", 4)
    c2 = model.add_constraint(x - y >= 1, name="gap")
    c3 = model.add_constraint(x, "=", 2)

    assert [c.cmp for c in model.constraints] == ["<=", ">=", "=="]
    assert c1.name == "c1" and c2.name == "gap" and c3.rhs == 2.0
    assert model.get_constraint("gap") is c2


def test_add_constraint_rejects_unknown_operator():
    model = create_model()
    x = model.add_variable(name="x")
    with pytest.raises(ValueError):
        model.add_constraint(x, "<", 1)


def test_variables_from_another_model_are_rejected():
    first, second = create_model("a"), create_model("b")
    x = first.add_variable(name="x")
    with pytest.raises(UnknownVariableError):
        second.add_constraint(x <= 1)
    with pytest.raises(UnknownVariableError):
        second.minimize(x)


def test_objective_last_write_wins_and_versions_bump():
    model = create_model()
    x = model.add_variable(name="x")
    version = model.version

    set_objective(model, 2 * x, "maximize")
    set_objective(model, x + 1, "min")

    assert model.sense == "min"
    assert model.objective.coefficients == {x: 1.0}
    assert model.objective.constant == 1.0
    assert model.version == version + 2
    with pytest.raises(ValueError):
        model.set_objective(x, "sideways")


def test_flat_form_and_back():
    model = create_model("flat")
    x = model.add_variable(0, 4, name="x")
    y = model.add_variable(None, None, name="y")
    model.add_constraint(x + 2 * y + 1 <= 7, name="row")
    model.maximize(3 * x - y)

    lp = model.to_lp_model()
    assert lp.sense == "max"
    assert [(v.name, v.lb, v.ub) for v in lp.variables] == [("x", 0.0, 4.0), ("y", None, None)]
    assert lp.constraints[0].lhs.constant == 1.0

    rebuilt = Model.from_lp_model(lp)
    assert rebuilt.to_lp_model() == lp
    assert rebuilt.get_variable("y").bounds == (None, None)
