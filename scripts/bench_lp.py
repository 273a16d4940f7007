#!/usr/bin/env python3
import json
import logging
import time
from pathlib import Path

from lpkit import Model, SolverConfig, SolverUnavailableError
from lpkit.catalog import chebyshev_center, box_halfspaces, network_revenue_management, random_revenue_data
from lpkit.schemas import LPModel
from scripts.generate_instances import generate_random_lp


def load_example(name: str) -> Model:
    path = Path(__file__).resolve().parent.parent / "examples" / name
    return Model.from_lp_model(LPModel.model_validate(json.loads(path.read_text())))


def main() -> None:
    logging.basicConfig(level=logging.WARNING)
    locations = ["HUB", "A", "B", "C"]
    demand, fares, capacities = random_revenue_data(locations, "HUB", seed=7)
    cases = [
        ("examples/small_lp.json", lambda: load_example("small_lp.json")),
        ("revenue-management", lambda: network_revenue_management(locations, "HUB", demand, fares, capacities).model),
        ("chebyshev-box", lambda: chebyshev_center(*box_halfspaces([0, 0], [2, 1], seed=3)).model),
    ]
    for seed in range(3):
        cases.append((f"random-{seed}", lambda seed=seed: generate_random_lp(8, 6, seed)))

    print("name,backend,status,objective,iterations,time_ms")
    for backend in ("highs", "simplex", "glop"):
        for name, build in cases:
            model = build()
            start = time.perf_counter()
            try:
                result = model.solve(SolverConfig(backend=backend))
            except SolverUnavailableError as exc:
                print(f"{name},{backend},unavailable,,,{exc}")
                break
            elapsed_ms = (time.perf_counter() - start) * 1000
            print(
                f"{name},{backend},{result.status.value},{result.objective_value},{result.iterations},{elapsed_ms:.2f}"
            )


if __name__ == "__main__":
    main()
