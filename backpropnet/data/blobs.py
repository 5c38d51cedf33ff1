"""Pure in-memory Gaussian cluster classification data."""

from __future__ import annotations

from pathlib import Path

import numpy as np

from ..core.types import Dataset
from .registry import DatasetSpec, register_dataset
from .utils import one_hot


def _sample(
    rng: np.random.Generator, centers: np.ndarray, count: int, spread: float
) -> Dataset:
    num_classes = centers.shape[0]
    labels = np.arange(count) % num_classes
    noise = spread * rng.standard_normal((count, centers.shape[1]))
    return Dataset(inputs=centers[labels] + noise, targets=one_hot(labels, num_classes))


@register_dataset("blobs")
def build_blobs(
    *,
    num_classes: int = 3,
    n_features: int = 2,
    n_train: int = 150,
    n_test: int = 60,
    spread: float = 0.5,
    seed: int = 0,
    offline: bool = True,
    cache_dir: str | Path | None = None,
    **_: object,
) -> DatasetSpec:
    rng = np.random.default_rng(seed)
    centers = rng.uniform(-3.0, 3.0, size=(num_classes, n_features))
    train = _sample(rng, centers, n_train, spread)
    test = _sample(rng, centers, n_test, spread)
    provenance = {
        "type": "synthetic",
        "num_classes": num_classes,
        "n_features": n_features,
        "spread": spread,
        "seed": seed,
    }
    return DatasetSpec(
        name="blobs",
        train=train,
        test=test,
        num_classes=num_classes,
        provenance=provenance,
    )


__all__ = ["build_blobs"]
