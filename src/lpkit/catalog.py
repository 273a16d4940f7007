"""
Worked LP exercises built with the modeling API.

Random instance data is only ever drawn from an explicit seed or
``numpy.random.Generator``; nothing here touches global random state.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Hashable, Optional, Sequence, Tuple, Union

import numpy as np

from .indexing import sum_over
from .model import Model

logger = logging.getLogger(__name__)

Leg = Tuple[Hashable, Hashable]
RandomSource = Union[int, np.random.Generator, None]


@dataclass
class CatalogModel:
    model: Model
    handles: Dict[str, object] = field(default_factory=dict)


def two_variable_lp() -> CatalogModel:
    """maximize 40x + 30y  s.t.  x + y <= 12,  2x + y <= 16,  x, y >= 0  (optimum x=4, y=8, 400)."""
    m = Model("two-variable")
    x = m.add_variable(0, None, name="x")
    y = m.add_variable(0, None, name="y")
    m.add_constraint(x + y <= 12, name="labor")
    m.add_constraint(2 * x + y <= 16, name="material")
    m.maximize(40 * x + 30 * y)
    return CatalogModel(m, {"x": x, "y": y})


def _rng(source: RandomSource) -> np.random.Generator:
    if isinstance(source, np.random.Generator):
        return source
    return np.random.default_rng(source)


def hub_legs(origin: Hashable, destination: Hashable, hub: Hashable) -> Tuple[Leg, ...]:
    """Flight legs used by an itinerary routed through ``hub``."""
    if origin == hub or destination == hub:
        return ((origin, destination),)
    return ((origin, hub), (hub, destination))


def random_revenue_data(
    locations: Sequence[Hashable],
    hub: Hashable,
    seed: RandomSource = None,
    demand_range: Tuple[float, float] = (20.0, 120.0),
    fare_range: Tuple[float, float] = (50.0, 400.0),
    capacity: float = 150.0,
) -> Tuple[Dict[Leg, float], Dict[Leg, float], Dict[Leg, float]]:
    """Draw (demand, fares, leg capacities) for every ordered pair of distinct locations."""
    rng = _rng(seed)
    pairs = [(o, d) for o in locations for d in locations if o != d]
    low, high = int(demand_range[0]), int(demand_range[1])
    demand = {pair: float(rng.integers(low, high + 1)) for pair in pairs}
    fares = {pair: float(np.round(rng.uniform(*fare_range), 2)) for pair in pairs}
    legs = {leg for o, d in pairs for leg in hub_legs(o, d, hub)}
    capacities = {leg: float(capacity) for leg in sorted(legs, key=str)}
    return demand, fares, capacities


def network_revenue_management(
    locations: Sequence[Hashable],
    hub: Hashable,
    demand: Dict[Leg, float],
    fares: Dict[Leg, float],
    capacities: Dict[Leg, float],
) -> CatalogModel:
    """
    Seat allocation on a hub-and-spoke network.

    x[o,d] is the number of o→d tickets sold; every itinerary through the hub
    consumes one seat on each of its legs. Pairs missing from ``demand`` get
    no variable.
    """
    m = Model("network-revenue-management")
    x = m.declare_indexed(
        [locations, locations],
        predicate=lambda o, d: o != d and (o, d) in demand,
        bound_fn=lambda o, d: (0.0, demand[(o, d)]),
        name="x",
    )
    for leg, cap in capacities.items():
        load = sum_over(x, predicate=lambda o, d: leg in hub_legs(o, d, hub))
        m.add_constraint(load <= cap, name=f"cap[{leg[0]},{leg[1]}]")
    m.maximize(sum_over(x, term_fn=lambda o, d: (fares[(o, d)], x[o, d])))
    logger.debug(f"Revenue model has {len(x)} itineraries over {len(capacities)} legs")
    return CatalogModel(m, {"x": x})


def chebyshev_center(A, b) -> CatalogModel:
    """
    Largest ball inside {x : A x <= b}.

    maximize r  s.t.  a_i . x + ||a_i|| r <= b_i,  r >= 0,  x free.
    """
    A = np.atleast_2d(np.asarray(A, dtype=float))
    b = np.asarray(b, dtype=float).ravel()
    if A.shape[0] != b.shape[0]:
        raise ValueError(f"A has {A.shape[0]} rows but b has {b.shape[0]} entries")

    m = Model("chebyshev-center")
    x = m.declare_indexed([range(A.shape[1])], bound_fn=lambda j: (None, None), name="x")
    r = m.add_variable(0.0, None, name="r")
    norms = np.linalg.norm(A, axis=1)
    for i in range(A.shape[0]):
        row = sum_over([range(A.shape[1])], term_fn=lambda j: (A[i, j], x[j]))
        m.add_constraint(row + float(norms[i]) * r <= float(b[i]), name=f"halfspace[{i}]")
    m.maximize(r)
    return CatalogModel(m, {"x": x, "r": r})


def box_halfspaces(lower: Sequence[float], upper: Sequence[float], seed: Optional[int] = None) -> Tuple[np.ndarray, np.ndarray]:
    """Halfspace form of an axis-aligned box; ``seed`` adds a random redundant cut."""
    lower = np.asarray(lower, dtype=float)
    upper = np.asarray(upper, dtype=float)
    n = lower.shape[0]
    eye = np.eye(n)
    A = np.vstack([eye, -eye])
    b = np.concatenate([upper, -lower])
    if seed is not None:
        rng = np.random.default_rng(seed)
        direction = rng.normal(size=n)
        direction /= np.linalg.norm(direction)
        # Support value of the box in this direction, so the cut never trims it.
        support = float(np.sum(np.maximum(direction * upper, direction * lower)))
        A = np.vstack([A, direction])
        b = np.append(b, support + 1.0)
    return A, b
