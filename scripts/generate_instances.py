#!/usr/bin/env python3
import argparse
import json
from pathlib import Path
from typing import Optional

import numpy as np

from lpkit import Model, sum_over


def generate_random_lp(num_vars: int, num_constraints: int, seed: Optional[int] = None) -> Model:
    """Random packing LP: positive rows, rhs large enough that x = 1 is feasible."""
    rng = np.random.default_rng(seed)
    model = Model("random-lp")
    x = model.add_variables(num_vars, name_prefix="x")
    for j in range(num_constraints):
        weights = rng.uniform(0.5, 5.0, size=num_vars)
        rhs = rng.uniform(num_vars * 5.0, num_vars * 6.0)
        row = sum_over(x, term_fn=lambda i: (weights[i], x[i]))
        model.add_constraint(row <= rhs, name=f"c{j}")
    profits = rng.uniform(1.0, 4.0, size=num_vars)
    model.maximize(sum_over(x, term_fn=lambda i: (profits[i], x[i])))
    return model


def main() -> None:
    parser = argparse.ArgumentParser(description="Generate random feasible LP instances.")
    parser.add_argument("--vars", type=int, default=3, help="Number of variables")
    parser.add_argument("--constraints", type=int, default=3, help="Number of constraints")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument("--count", type=int, default=1, help="Number of instances")
    parser.add_argument("--out", type=Path, default=None, help="Optional output file")
    args = parser.parse_args()

    instances = [
        generate_random_lp(args.vars, args.constraints, (args.seed or 0) + idx)
        for idx in range(args.count)
    ]
    payload = [instance.to_lp_model().model_dump() for instance in instances]

    if args.out:
        Path(args.out).write_text(json.dumps(payload, indent=2))
    else:
        print(json.dumps(payload, indent=2))


if __name__ == "__main__":
    main()
