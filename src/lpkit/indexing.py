"""
Indexed variable collections and summations over (filtered) index sets.

An index set argument is a sequence of iterables whose cartesian product is
enumerated in the order given. Elements that are themselves tuples are spliced
into the index, so ``[arcs]`` with ``arcs = [("A", "B"), ...]`` yields the
two-part indices ``("A", "B")``. Predicates, bound functions and term
functions receive the index unpacked: ``predicate(o, d)``.
"""

from __future__ import annotations

import itertools
import logging
from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Callable, Dict, Iterator, List, Optional, Sequence, Tuple

from .expressions import LinearExpression, Variable, quicksum

if TYPE_CHECKING:  # pragma: no cover
    from .model import Model

logger = logging.getLogger(__name__)

Index = Tuple
Predicate = Callable[..., bool]
BoundFn = Callable[..., Tuple[Optional[float], Optional[float]]]


def _is_atom(value: object) -> bool:
    return isinstance(value, (str, bytes)) or not isinstance(value, Iterable)


def _normalize_index_sets(index_sets) -> List[List]:
    if isinstance(index_sets, IndexedVariableCollection):
        return [list(index_sets.keys())]
    if isinstance(index_sets, (range, set, frozenset)) or _is_atom(index_sets):
        return [list(index_sets) if not _is_atom(index_sets) else [index_sets]]
    sets = list(index_sets)
    if not sets:
        return [[]]
    if any(_is_atom(s) for s in sets):
        # A flat list of labels is a single index set.
        return [sets]
    return [list(s) for s in sets]


def _flatten(combo: Tuple) -> Index:
    index: List = []
    for part in combo:
        if isinstance(part, tuple):
            index.extend(part)
        else:
            index.append(part)
    return tuple(index)


def iter_index(index_sets, predicate: Optional[Predicate] = None) -> Iterator[Index]:
    """Yield index tuples of the cartesian product that satisfy ``predicate``."""
    for combo in itertools.product(*_normalize_index_sets(index_sets)):
        index = _flatten(combo)
        if predicate is None or predicate(*index):
            yield index


def format_index_name(name: str, index: Index) -> str:
    return f"{name}[{','.join(str(part) for part in index)}]"


class IndexedVariableCollection(Mapping):
    """Read-only mapping from index tuple to Variable."""

    def __init__(self, name: str, variables: Dict[Index, Variable]) -> None:
        self.name = name
        self._variables = variables

    @staticmethod
    def _key(key) -> Index:
        return key if isinstance(key, tuple) else (key,)

    def __getitem__(self, key) -> Variable:
        try:
            return self._variables[self._key(key)]
        except KeyError:
            raise KeyError(f"{self.name} has no variable for index {key!r}") from None

    def __contains__(self, key) -> bool:
        return self._key(key) in self._variables

    def __iter__(self) -> Iterator[Index]:
        return iter(self._variables)

    def __len__(self) -> int:
        return len(self._variables)

    def __repr__(self) -> str:
        return f"IndexedVariableCollection({self.name}, {len(self)} variables)"

    def sum(self, predicate: Optional[Predicate] = None, term_fn: Optional[Callable] = None) -> LinearExpression:
        return sum_over(self, predicate, term_fn)


def declare_indexed(
    model: "Model",
    index_sets,
    predicate: Optional[Predicate] = None,
    bound_fn: Optional[BoundFn] = None,
    name: str = "x",
) -> IndexedVariableCollection:
    """
    Create one variable per index tuple that passes ``predicate``.

    Names and bounds for every index are computed and checked before any
    variable is added, so an invalid bound or a name clash leaves the model
    untouched.
    """
    from .errors import DuplicateNameError, InvalidBoundsError

    sets = _normalize_index_sets(index_sets)
    pending: List[Tuple[Index, str, Optional[float], Optional[float]]] = []
    seen = set()
    for index in iter_index(sets, predicate):
        var_name = format_index_name(name, index)
        if var_name in model._names or var_name in seen:
            raise DuplicateNameError(f"Variable name '{var_name}' is already used in model '{model.name}'.")
        seen.add(var_name)
        lb, ub = bound_fn(*index) if bound_fn is not None else (0.0, None)
        lb, ub = model._normalize_bounds(lb, ub, var_name)
        if lb is not None and ub is not None and lb > ub:
            raise InvalidBoundsError(var_name, lb, ub)
        pending.append((index, var_name, lb, ub))

    variables: Dict[Index, Variable] = {}
    for index, var_name, lb, ub in pending:
        variables[index] = model.add_variable(lb, ub, name=var_name, key=index)

    logger.debug(f"Declared {len(variables)} of {product_size(sets)} candidate variables for {name}")
    return IndexedVariableCollection(name, variables)


def sum_over(
    index_sets,
    predicate: Optional[Predicate] = None,
    term_fn: Optional[Callable] = None,
) -> LinearExpression:
    """
    Sum ``term_fn(*index)`` over every index passing ``predicate``.

    Terms may be variables, expressions, numbers or ``(coef, var)`` pairs.
    When ``index_sets`` is an IndexedVariableCollection, ``term_fn`` defaults
    to the collection's own variable. An empty index set gives the zero
    expression.
    """
    if term_fn is None:
        if not isinstance(index_sets, IndexedVariableCollection):
            raise TypeError("term_fn is required unless summing over an IndexedVariableCollection")
        collection = index_sets
        term_fn = lambda *index: collection[index]  # noqa: E731
    return quicksum(term_fn(*index) for index in iter_index(index_sets, predicate))


def product_size(index_sets: Sequence) -> int:
    size = 1
    for s in _normalize_index_sets(index_sets):
        size *= len(s)
    return size
