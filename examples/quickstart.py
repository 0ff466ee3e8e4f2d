"""
Quickstart example for the enetcv package.

Runs the full harness on scikit-learn's copy of the Wisconsin diagnostic
breast cancer data. Run with:

    python examples/quickstart.py
"""

from __future__ import annotations

import logging

from sklearn.datasets import load_breast_cancer

from enetcv import Dataset, HarnessConfig, run_harness


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    frame = load_breast_cancer(as_frame=True).frame
    # target 0 is malignant
    data = Dataset.from_frame(frame, "target", positive_label=0)

    config = HarnessConfig(n_folds=5, alphas=(0.5, 1.0), n_lambdas=10)
    result = run_harness(data, config)

    print("champion:", result.champion.as_dict())
    print("held-out:", result.counts.as_dict())
    print(result.model.coef_frame()[result.model.coef != 0.0].sort_values())


if __name__ == "__main__":
    main()
