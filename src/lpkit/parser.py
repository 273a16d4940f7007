from __future__ import annotations

import logging
import re
from collections import OrderedDict
from typing import Dict, List, Optional, Tuple

from .errors import ParseError
from .expressions import LinearExpression
from .model import Model

logger = logging.getLogger(__name__)

_OBJECTIVE = re.compile(r"^(maximize|minimize|maximise|minimise|max|min)\s*:?\s*(.*)$", re.IGNORECASE)
_CMP = re.compile(r"(<=|>=|==|=|≤|≥)")
_TERM = re.compile(r"([+-]?\s*\d*\.?\d*)\s*([A-Za-z_][\w]*)")
_NUMBER = re.compile(r"[+-]?\s*\d+(?:\.\d+)?(?:[eE][+-]?\d+)?")
_MULTI_BOUND = re.compile(
    r"^([A-Za-z_][\w]*(?:\s*,\s*[A-Za-z_][\w]*)+)\s*(<=|>=|≤|≥)\s*(-?\d+(?:\.\d+)?)$"
)

ParsedExpr = Tuple["OrderedDict[str, float]", float]


class _Bounds:
    __slots__ = ("lb", "ub", "explicit_lb")

    def __init__(self) -> None:
        self.lb: Optional[float] = 0.0
        self.ub: Optional[float] = None
        self.explicit_lb = False

    def tighten(self, cmp: str, value: float) -> None:
        if cmp == "<=":
            self.ub = value if self.ub is None else min(self.ub, value)
        elif self.explicit_lb:
            self.lb = max(self.lb, value)
        else:
            # An explicit lower bound replaces the default non-negativity.
            self.lb = value
            self.explicit_lb = True


def parse_lp_text(text: str, name: str = "parsed") -> Model:
    """
    Small rule-based parser for toy LPs written the way exercises state them:

      "maximize 3x + 2y subject to x + 2y <= 14, 3x - y >= 0, x <= 5, x,y >= 0"

    Variables default to ``>= 0``. An inequality on a single variable becomes
    a bound rather than a row.
    """
    if not text or not text.strip():
        raise ParseError("Specification is empty")

    normalised = " ".join(text.replace("\n", " ").split())
    parts = re.split(r"subject to|such that|s\.t\.\s*", normalised, flags=re.IGNORECASE)
    obj_part = parts[0].strip()
    cons_part = parts[1].strip() if len(parts) > 1 else ""

    match = _OBJECTIVE.match(obj_part)
    if not match:
        raise ParseError("Objective must start with 'maximize' or 'minimize'")
    sense_word, expr_text = match.groups()
    sense = "max" if sense_word.lower().startswith("max") else "min"
    if not expr_text.strip():
        raise ParseError("Objective expression is missing")
    objective = _parse_expression(expr_text)

    bounds: "OrderedDict[str, _Bounds]" = OrderedDict((var, _Bounds()) for var in objective[0])
    rows: List[Tuple[ParsedExpr, str, float]] = []

    for token in _split_constraints(cons_part):
        m = _MULTI_BOUND.match(token)
        if m:
            names, cmp, rhs = m.groups()
            cmp = _normalise_cmp(cmp)
            for var_name in [n.strip() for n in names.split(",") if n.strip()]:
                bounds.setdefault(var_name, _Bounds()).tighten(cmp, float(rhs))
            continue

        cmp_match = _CMP.search(token)
        if not cmp_match:
            raise ParseError(f"Could not parse constraint segment '{token}'")
        cmp = _normalise_cmp(cmp_match.group(1))
        left = token[: cmp_match.start()].strip()
        right = token[cmp_match.end():].strip()
        if not left or not right:
            raise ParseError(f"Constraint '{token}' missing lhs or rhs")
        try:
            rhs_value = float(right.replace(" ", ""))
        except ValueError as exc:
            raise ParseError(f"Right-hand side '{right}' is not numeric") from exc

        coeffs, constant = _parse_expression(left)
        if len(coeffs) == 1 and abs(constant) < 1e-12 and cmp in {"<=", ">="}:
            (var_name, coef), = coeffs.items()
            if coef < 0:
                cmp = ">=" if cmp == "<=" else "<="
            bounds.setdefault(var_name, _Bounds()).tighten(cmp, rhs_value / coef)
            continue

        rows.append(((coeffs, constant), cmp, rhs_value))
        for var_name in coeffs:
            bounds.setdefault(var_name, _Bounds())

    model = Model(name)
    variables = {var_name: model.add_variable(b.lb, b.ub, name=var_name) for var_name, b in bounds.items()}

    def build(parsed: ParsedExpr) -> LinearExpression:
        coeffs, constant = parsed
        return LinearExpression({variables[v]: coef for v, coef in coeffs.items()}, constant)

    model.set_objective(build(objective), sense)
    for parsed, cmp, rhs_value in rows:
        model.add_constraint(build(parsed), cmp, rhs_value)

    logger.debug(f"Parsed {len(variables)} variables and {len(rows)} constraints from text")
    return model


def _normalise_cmp(cmp: str) -> str:
    return {"=": "==", "≤": "<=", "≥": ">="}.get(cmp, cmp)


def _split_constraints(cons_part: str) -> List[str]:
    # Commas separate constraints but also variable lists ("x, y >= 0"); buffer until a comparator shows up.
    tokens: List[str] = []
    if not cons_part:
        return tokens
    chunks = [chunk.strip() for chunk in re.split(r";|\band\b", cons_part, flags=re.IGNORECASE) if chunk.strip()]
    for chunk in chunks:
        buffer: List[str] = []
        for piece in [p.strip() for p in chunk.split(",") if p.strip()]:
            buffer.append(piece)
            candidate = ", ".join(buffer)
            if _CMP.search(candidate):
                tokens.append(candidate)
                buffer.clear()
        if buffer:
            raise ParseError(f"Could not parse constraint segment '{', '.join(buffer)}'")
    return tokens


def _parse_expression(text: str) -> ParsedExpr:
    expr = text.replace("*", "")
    coeffs: Dict[str, float] = OrderedDict()
    spans: List[Tuple[int, int]] = []

    for match in _TERM.finditer(expr):
        coef_text = match.group(1).replace(" ", "")
        var_name = match.group(2)
        if coef_text in ("", "+"):
            coef = 1.0
        elif coef_text == "-":
            coef = -1.0
        else:
            try:
                coef = float(coef_text)
            except ValueError as exc:
                raise ParseError(f"Bad coefficient '{coef_text}' for '{var_name}'") from exc
        coeffs[var_name] = coeffs.get(var_name, 0.0) + coef
        spans.append(match.span())

    remaining = list(expr)
    for start, end in spans:
        for idx in range(start, end):
            remaining[idx] = " "
    constant = 0.0
    for num in _NUMBER.finditer("".join(remaining)):
        val = num.group(0).replace(" ", "")
        if val:
            constant += float(val)

    return OrderedDict((v, c) for v, c in coeffs.items() if abs(c) > 1e-12), constant
