import numpy as np
import pytest

from lpkit import create_model
from lpkit.solvers.standard_form import build_standard_form


def make_mixed_model():
    model = create_model("mixed")
    x = model.add_variable(1, 4, name="x")
    y = model.add_variable(None, None, name="y")
    model.add_constraint(x + y >= 3, name="cover")
    model.add_constraint(x - y <= -1, name="gap")
    model.minimize(2 * x + y + 5)
    return model.to_lp_model()


def test_bounds_become_offsets_splits_and_rows():
    form = build_standard_form(make_mixed_model())

    assert form.offsets == {"x": 1.0, "y": 0.0}
    assert len(form.components["x"]) == 1
    assert [coef for _, coef in form.components["y"]] == [1.0, -1.0]
    assert form.row_names == ["cover", "gap", "bound_x_ub"]
    assert form.model_rows == [True, True, False]
    assert np.all(form.b >= 0)


def test_negative_rhs_rows_are_flipped():
    form = build_standard_form(make_mixed_model())

    # x - y <= -1 shifts to x' - y <= -2 and is negated into a >= row with an artificial.
    assert form.row_signs == [1.0, -1.0, 1.0]
    assert form.b.tolist() == pytest.approx([2.0, 2.0, 3.0])
    assert len(form.artificial) == 2
    assert len(form.basis) == form.A.shape[0]


def test_minimisation_is_negated_and_offset_lands_in_constant():
    form = build_standard_form(make_mixed_model())

    assert form.sense_mult == -1.0
    assert form.objective_constant == pytest.approx(7.0)
    x_col = form.components["x"][0][0]
    assert form.c[x_col] == pytest.approx(-2.0)


def test_inconsistent_bounds_raise():
    model = create_model("bad")
    model.add_variable(0, 1, name="x")
    lp = model.to_lp_model()
    lp.variables[0].ub = -1.0

    with pytest.raises(ValueError):
        build_standard_form(lp)
