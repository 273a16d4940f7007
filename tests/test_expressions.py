import pytest

from lpkit import LinearExpression, Relation, create_model, quicksum


@pytest.fixture
def xyz():
    model = create_model("expr")
    return model, model.add_variable(name="x"), model.add_variable(name="y"), model.add_variable(name="z")


def test_repeated_variables_accumulate(xyz):
    _, x, y, _ = xyz
    expr = x + 2 * y + 3 * x - y

    assert expr.coefficients == {x: 4.0, y: 1.0}
    assert len(expr) == 2


def test_construction_order_does_not_change_coefficients(xyz):
    _, x, y, z = xyz
    forward = quicksum([x, (2.0, y), 3 * z, 5.0])
    backward = 5.0 + 3 * z + 2 * y + x
    shuffled = (z * 3) + (x - y) + (y * 3) + 5

    assert forward.coefficients == backward.coefficients == shuffled.coefficients
    assert forward.constant == backward.constant == shuffled.constant == 5.0


def test_scalar_multiplication_and_subtraction(xyz):
    _, x, y, _ = xyz
    expr = 2 * (x - 3 * y + 1) - (x / 2)

    assert expr.coefficient(x) == pytest.approx(1.5)
    assert expr.coefficient(y) == pytest.approx(-6.0)
    assert expr.constant == pytest.approx(2.0)
    assert (-expr).coefficient(x) == pytest.approx(-1.5)


def test_rsub_with_number(xyz):
    _, x, _, _ = xyz
    expr = 10 - x

    assert expr.coefficients == {x: -1.0}
    assert expr.constant == 10.0


def test_product_of_variables_is_rejected(xyz):
    _, x, y, _ = xyz
    with pytest.raises(TypeError):
        (x + 1) * (y + 2)


def test_product_with_constant_expression_is_linear(xyz):
    _, x, _, _ = xyz
    expr = (x + 1) * LinearExpression.from_constant(3.0)

    assert expr.coefficients == {x: 3.0}
    assert expr.constant == 3.0


def test_comparisons_build_relations(xyz):
    _, x, y, _ = xyz
    rel = x + y + 2 <= 5
    assert isinstance(rel, Relation)
    assert rel.cmp == "<="
    assert rel.rhs == 5.0
    assert rel.lhs.constant == 2.0

    rel = x + 1 >= y + 3
    assert rel.cmp == ">="
    assert rel.lhs.coefficients == {x: 1.0, y: -1.0}
    assert rel.rhs == 2.0

    rel = 1 * x == 4
    assert rel.cmp == "=="


def test_relation_has_no_truth_value(xyz):
    _, x, _, _ = xyz
    with pytest.raises(TypeError):
        bool(x <= 1)


def test_quicksum_of_nothing_is_zero():
    expr = quicksum([])

    assert expr.coefficients == {}
    assert expr.constant == 0.0
