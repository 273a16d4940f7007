import pytest

from lpkit import ParseError, SolveStatus
from lpkit.parser import parse_lp_text


def test_parser_outputs_expected_variables():
    spec = "maximize 3x + 2y subject to x + 2y <= 14, 3x - y >= 0, x <= 5, x,y >= 0"
    model = parse_lp_text(spec)

    assert [v.name for v in model.variables] == ["x", "y"]
    assert model.sense == "max"
    assert len(model.constraints) == 2

    bounds = {var.name: var.bounds for var in model.variables}
    assert bounds["x"] == (0.0, 5.0)
    assert bounds["y"] == (0.0, None)


def test_parsed_model_solves():
    model = parse_lp_text("maximize 3x + 2y subject to x + 2y <= 14, 3x - y >= 0, x <= 5, x,y >= 0")
    result = model.solve()

    assert result.status is SolveStatus.OPTIMAL
    assert result.objective_value == pytest.approx(24.0)
    assert result.get_value(model.get_variable("x")) == pytest.approx(5.0)
    assert result.get_value(model.get_variable("y")) == pytest.approx(4.5)


def test_explicit_lower_bound_replaces_default():
    model = parse_lp_text("minimize x + 2*z s.t. x >= -3; -2z <= 8; x + z = 1")

    assert model.get_variable("x").bounds == (-3.0, None)
    assert model.get_variable("z").bounds == (-4.0, None)
    assert [c.cmp for c in model.constraints] == ["=="]


@pytest.mark.parametrize(
    "text",
    [
        "",
        "find x subject to x <= 1",
        "maximize",
        "maximize x subject to x + y",
        "maximize x subject to x + y <= many",
    ],
)
def test_malformed_text_raises(text):
    with pytest.raises(ParseError):
        parse_lp_text(text)
