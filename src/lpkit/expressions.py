"""
Variables, linear expressions and relations.

Expressions store a coefficient per variable identity, so the same expression
built in any order ends up with the same coefficient mapping:

>>> from lpkit import create_model
>>> m = create_model()
>>> x = m.add_variable(name="x")
>>> y = m.add_variable(name="y")
>>> (x + 2 * y - x + x).coefficients == (2 * y + x).coefficients
True
"""

from __future__ import annotations

import math
import numbers
from typing import TYPE_CHECKING, Dict, Iterable, Iterator, Mapping, Optional, Tuple, Union

if TYPE_CHECKING:  # pragma: no cover
    from .model import Model

Number = Union[int, float]

CMP_ALIASES = {
    "<=": "<=",
    "≤": "<=",
    ">=": ">=",
    "≥": ">=",
    "==": "==",
    "=": "==",
}


def normalize_cmp(operator: str) -> str:
    try:
        return CMP_ALIASES[operator.strip()]
    except (KeyError, AttributeError):
        raise ValueError(f"Unsupported constraint operator {operator!r}; use '<=', '>=' or '=='.") from None


def _is_scalar(value: object) -> bool:
    return isinstance(value, numbers.Real)


class Variable:
    """
    A decision variable owned by one Model.

    Variables hash by identity and are never equal to each other unless they
    are the same object, which makes them safe dictionary keys. Only ``<=`` and
    ``>=`` are overloaded; use an expression (``1 * x == 3``) for equalities.
    """

    __slots__ = ("model", "index", "name", "lower_bound", "upper_bound", "key", "value")
    # numpy scalars defer to our reflected operators instead of building object arrays
    __array_ufunc__ = None

    def __init__(
        self,
        model: "Model",
        index: int,
        name: str,
        lower_bound: Optional[float] = 0.0,
        upper_bound: Optional[float] = None,
        key: Optional[Tuple] = None,
    ) -> None:
        self.model = model
        self.index = index
        self.name = name
        self.lower_bound = lower_bound
        self.upper_bound = upper_bound
        self.key = key
        self.value: Optional[float] = None

    @property
    def bounds(self) -> Tuple[Optional[float], Optional[float]]:
        return self.lower_bound, self.upper_bound

    def __repr__(self) -> str:
        return f"Variable({self.name})"

    def __hash__(self) -> int:
        return id(self)

    def __add__(self, other):
        return LinearExpression.from_variable(self) + other

    def __radd__(self, other):
        return LinearExpression.from_variable(self) + other

    def __sub__(self, other):
        return LinearExpression.from_variable(self) - other

    def __rsub__(self, other):
        return other - LinearExpression.from_variable(self)

    def __mul__(self, other):
        return LinearExpression.from_variable(self) * other

    def __rmul__(self, other):
        return LinearExpression.from_variable(self) * other

    def __truediv__(self, other):
        return LinearExpression.from_variable(self) / other

    def __neg__(self):
        return LinearExpression.from_variable(self) * -1

    def __le__(self, other):
        return LinearExpression.from_variable(self) <= other

    def __ge__(self, other):
        return LinearExpression.from_variable(self) >= other


class LinearExpression:
    """Sum of coefficient * variable terms plus a constant."""

    __slots__ = ("_coefficients", "constant")
    __hash__ = None  # type: ignore[assignment]
    __array_ufunc__ = None

    def __init__(self, coefficients: Optional[Mapping[Variable, Number]] = None, constant: Number = 0.0) -> None:
        self._coefficients: Dict[Variable, float] = {}
        self.constant = float(constant)
        if coefficients:
            for var, coef in coefficients.items():
                self._add_term(var, coef)

    @classmethod
    def from_variable(cls, var: Variable, coef: Number = 1.0) -> "LinearExpression":
        expr = cls()
        expr._add_term(var, coef)
        return expr

    @classmethod
    def from_constant(cls, value: Number) -> "LinearExpression":
        return cls(constant=value)

    @property
    def coefficients(self) -> Dict[Variable, float]:
        return dict(self._coefficients)

    @property
    def variables(self) -> Tuple[Variable, ...]:
        return tuple(self._coefficients)

    def coefficient(self, var: Variable) -> float:
        return self._coefficients.get(var, 0.0)

    def is_constant(self) -> bool:
        return all(coef == 0.0 for coef in self._coefficients.values())

    def terms(self) -> Iterator[Tuple[Variable, float]]:
        """Yield (variable, coefficient) pairs with non-zero coefficient."""
        for var, coef in self._coefficients.items():
            if coef != 0.0:
                yield var, coef

    def copy(self) -> "LinearExpression":
        expr = LinearExpression(constant=self.constant)
        expr._coefficients = dict(self._coefficients)
        return expr

    def evaluate(self, values: Mapping[Variable, float]) -> float:
        return self.constant + sum(coef * values[var] for var, coef in self._coefficients.items())

    def _add_term(self, var: Variable, coef: Number) -> None:
        if not isinstance(var, Variable):
            raise TypeError(f"Expected a Variable, got {type(var).__name__}")
        self._coefficients[var] = self._coefficients.get(var, 0.0) + float(coef)

    def _iadd(self, other, factor: float = 1.0) -> "LinearExpression":
        if isinstance(other, LinearExpression):
            for var, coef in other._coefficients.items():
                self._add_term(var, factor * coef)
            self.constant += factor * other.constant
        elif isinstance(other, Variable):
            self._add_term(other, factor)
        elif _is_scalar(other):
            self.constant += factor * float(other)
        else:
            return NotImplemented
        return self

    def __len__(self) -> int:
        return len(self._coefficients)

    def __repr__(self) -> str:
        parts = []
        for var, coef in self._coefficients.items():
            if coef == 1.0:
                parts.append(f"{var.name}")
            elif coef == -1.0:
                parts.append(f"-{var.name}")
            else:
                parts.append(f"{coef:g}*{var.name}")
        if self.constant or not parts:
            parts.append(f"{self.constant:g}")
        return " + ".join(parts).replace("+ -", "- ")

    def __add__(self, other):
        return self.copy()._iadd(other)

    def __radd__(self, other):
        return self.copy()._iadd(other)

    def __sub__(self, other):
        return self.copy()._iadd(other, -1.0)

    def __rsub__(self, other):
        return (self * -1.0)._iadd(other)

    def __mul__(self, other):
        if isinstance(other, (LinearExpression, Variable)):
            other_expr = as_expression(other)
            if other_expr.is_constant():
                other = other_expr.constant
            elif self.is_constant():
                return other_expr * self.constant
            else:
                raise TypeError("Product of two non-constant expressions is not linear")
        if not _is_scalar(other):
            return NotImplemented
        factor = float(other)
        expr = LinearExpression(constant=self.constant * factor)
        expr._coefficients = {var: coef * factor for var, coef in self._coefficients.items()}
        return expr

    def __rmul__(self, other):
        return self.__mul__(other)

    def __truediv__(self, other):
        if not _is_scalar(other):
            raise TypeError("Can only divide an expression by a scalar")
        if other == 0:
            raise ZeroDivisionError("Division of an expression by zero")
        return self * (1.0 / float(other))

    def __neg__(self):
        return self * -1.0

    def __le__(self, other):
        return Relation.build(self, "<=", other)

    def __ge__(self, other):
        return Relation.build(self, ">=", other)

    def __eq__(self, other):
        return Relation.build(self, "==", other)


class Relation:
    """``lhs cmp rhs`` produced by comparison operators, consumed by Model.add_constraint."""

    __slots__ = ("lhs", "cmp", "rhs")

    def __init__(self, lhs: LinearExpression, cmp: str, rhs: float) -> None:
        self.lhs = lhs
        self.cmp = normalize_cmp(cmp)
        self.rhs = float(rhs)

    @classmethod
    def build(cls, lhs: LinearExpression, cmp: str, other) -> "Relation":
        if _is_scalar(other):
            return cls(lhs.copy(), cmp, float(other))
        if isinstance(other, (LinearExpression, Variable)):
            diff = lhs - other
            rhs = -diff.constant
            diff.constant = 0.0
            return cls(diff, cmp, rhs)
        raise TypeError(f"Cannot compare an expression with {type(other).__name__}")

    def __bool__(self) -> bool:
        raise TypeError("A Relation has no truth value; pass it to Model.add_constraint")

    def __repr__(self) -> str:
        return f"Relation({self.lhs!r} {self.cmp} {self.rhs:g})"


def as_expression(term) -> LinearExpression:
    """Coerce a Variable, expression, number or ``(coef, var)`` pair into a new expression."""
    if isinstance(term, LinearExpression):
        return term.copy()
    if isinstance(term, Variable):
        return LinearExpression.from_variable(term)
    if _is_scalar(term):
        value = float(term)
        if math.isnan(value):
            raise ValueError("NaN is not a valid expression constant")
        return LinearExpression.from_constant(value)
    if isinstance(term, tuple) and len(term) == 2:
        coef, var = term
        if isinstance(coef, Variable) and _is_scalar(var):
            coef, var = var, coef
        if _is_scalar(coef) and isinstance(var, Variable):
            return LinearExpression.from_variable(var, coef)
    raise TypeError(f"Cannot build a linear expression from {term!r}")


def quicksum(terms: Iterable) -> LinearExpression:
    """Sum terms into a single expression without building intermediates."""
    total = LinearExpression()
    for term in terms:
        if isinstance(term, (LinearExpression, Variable)) or _is_scalar(term):
            total._iadd(term)
        else:
            total._iadd(as_expression(term))
    return total
