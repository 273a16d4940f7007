"""
Rewrite an LPModel as ``max c.x  s.t.  A x = b, x >= 0`` for the dense simplex.

Finite lower bounds become offsets, free variables are split into a positive
and a negative part, and finite upper bounds become extra ``<=`` rows. Every
row gets a slack (``<=``), a surplus plus artificial (``>=``) or an artificial
(``==``) column, so the starting basis is always the identity.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Tuple

import numpy as np

from ..schemas import LPModel, Sense

Component = Tuple[int, float]


@dataclass
class StandardForm:
    A: np.ndarray
    b: np.ndarray
    c: np.ndarray
    basis: List[int]
    sense: Sense
    variable_names: List[str]
    components: Dict[str, List[Component]]
    offsets: Dict[str, float]
    objective_constant: float = 0.0
    row_names: List[str] = field(default_factory=list)
    row_signs: List[float] = field(default_factory=list)
    model_rows: List[bool] = field(default_factory=list)
    artificial: List[int] = field(default_factory=list)

    @property
    def sense_mult(self) -> float:
        return 1.0 if self.sense == "max" else -1.0

    def recover_values(self, x_std: np.ndarray, tol: float) -> Dict[str, float]:
        values: Dict[str, float] = {}
        for name in self.variable_names:
            value = self.offsets[name] + sum(coef * x_std[idx] for idx, coef in self.components[name])
            values[name] = 0.0 if abs(value) < tol else float(value)
        return values

    def recover_reduced_costs(self, reduced: np.ndarray, tol: float) -> Dict[str, float]:
        # Free variables are split in two; the positive part carries the reduced cost.
        costs: Dict[str, float] = {}
        for name in self.variable_names:
            idx, coef = self.components[name][0]
            value = self.sense_mult * coef * float(reduced[idx])
            costs[name] = 0.0 if abs(value) < tol else value
        return costs

    def recover_duals(self, y: np.ndarray, tol: float) -> Dict[str, float]:
        """d(objective)/d(rhs) for the model's own rows, undoing any row negation."""
        duals: Dict[str, float] = {}
        for idx, name in enumerate(self.row_names):
            if not self.model_rows[idx]:
                continue
            value = self.sense_mult * self.row_signs[idx] * float(y[idx])
            duals[name] = 0.0 if abs(value) < tol else value
        return duals


class _Builder:
    def __init__(self) -> None:
        self.objective: List[float] = []
        self.rows: List[Dict[int, float]] = []

    def column(self) -> int:
        self.objective.append(0.0)
        return len(self.objective) - 1

    def dense(self) -> np.ndarray:
        A = np.zeros((len(self.rows), len(self.objective)), dtype=float)
        for i, row in enumerate(self.rows):
            for j, value in row.items():
                A[i, j] = value
        return A


def build_standard_form(model: LPModel, tol: float = 1e-9) -> StandardForm:
    """Raise ValueError on contradictory bounds or unknown variable names."""
    builder = _Builder()
    components: Dict[str, List[Component]] = {}
    offsets: Dict[str, float] = {}
    upper_rows: List[Tuple[str, float]] = []

    for var in model.variables:
        lb = None if var.lb is None or np.isneginf(var.lb) else var.lb
        ub = None if var.ub is None or np.isposinf(var.ub) else var.ub
        if lb is not None and ub is not None and lb > ub:
            raise ValueError(f"Variable {var.name} has inconsistent bounds (lb {lb} > ub {ub}).")
        if lb is None:
            components[var.name] = [(builder.column(), 1.0), (builder.column(), -1.0)]
            offsets[var.name] = 0.0
        else:
            components[var.name] = [(builder.column(), 1.0)]
            offsets[var.name] = lb
        if ub is not None:
            upper_rows.append((var.name, ub))

    def expand(terms, where: str) -> Tuple[Dict[int, float], float]:
        entries: Dict[int, float] = {}
        shift = 0.0
        for var_name, coef in terms:
            if var_name not in components:
                raise ValueError(f"{where} references unknown variable '{var_name}'.")
            shift += coef * offsets[var_name]
            for idx, part in components[var_name]:
                entries[idx] = entries.get(idx, 0.0) + coef * part
        return entries, shift

    objective_entries, objective_shift = expand(((t.var, t.coef) for t in model.objective.terms), "Objective")
    for idx, value in objective_entries.items():
        builder.objective[idx] = value

    rows = [
        (cons.name, [(t.var, t.coef) for t in cons.lhs.terms], cons.lhs.constant, cons.cmp, cons.rhs, True)
        for cons in model.constraints
    ]
    rows.extend((f"bound_{name}_ub", [(name, 1.0)], 0.0, "<=", ub, False) for name, ub in upper_rows)

    form = StandardForm(
        A=np.zeros((0, 0)),
        b=np.zeros(0),
        c=np.zeros(0),
        basis=[],
        sense=model.sense,
        variable_names=[var.name for var in model.variables],
        components=components,
        offsets=offsets,
        objective_constant=model.objective.constant + objective_shift,
    )
    rhs_values: List[float] = []
    for name, terms, constant, cmp, rhs, from_model in rows:
        entries, shift = expand(terms, f"Constraint '{name}'")
        rhs_value = rhs - constant - shift
        sign = 1.0
        # Keep b >= 0 so the slack/artificial basis starts feasible.
        if rhs_value < 0:
            entries = {idx: -value for idx, value in entries.items()}
            rhs_value = -rhs_value
            sign = -1.0
            cmp = {"<=": ">=", ">=": "<="}.get(cmp, cmp)
        if rhs_value <= tol:
            rhs_value = 0.0

        if cmp == "<=":
            slack = builder.column()
            entries[slack] = 1.0
            form.basis.append(slack)
        else:
            if cmp == ">=":
                entries[builder.column()] = -1.0
            artificial = builder.column()
            entries[artificial] = 1.0
            form.basis.append(artificial)
            form.artificial.append(artificial)

        builder.rows.append(entries)
        rhs_values.append(rhs_value)
        form.row_names.append(name)
        form.row_signs.append(sign)
        form.model_rows.append(from_model)

    form.A = builder.dense()
    form.b = np.array(rhs_values, dtype=float)
    form.c = form.sense_mult * np.array(builder.objective, dtype=float)
    return form
