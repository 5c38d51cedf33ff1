"""Utility helpers for dataset loaders and the training loop."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterator

import numpy as np

from ..core.types import Array, Batch, Dataset

DEFAULT_CACHE_SUBDIR = Path.home() / ".cache" / "backpropnet"


def resolve_cache_dir(cache_dir: str | Path | None = None) -> Path:
    """Resolve the effective cache directory for datasets."""

    env_dir = os.environ.get("BACKPROPNET_CACHE_DIR")
    base = Path(cache_dir or env_dir or DEFAULT_CACHE_SUBDIR)
    base.mkdir(parents=True, exist_ok=True)
    return base


def one_hot(labels: Array, num_classes: int) -> Array:
    labels = np.asarray(labels, dtype=np.int64).reshape(-1)
    out = np.zeros((labels.shape[0], num_classes), dtype=np.float64)
    out[np.arange(labels.shape[0]), labels] = 1.0
    return out


def shuffle_pairs(dataset: Dataset, rng: np.random.Generator) -> Dataset:
    """Return ``dataset`` reordered by one permutation shared by inputs and targets."""

    order = rng.permutation(len(dataset))
    return Dataset(inputs=dataset.inputs[order], targets=dataset.targets[order])


def iter_minibatches(dataset: Dataset, batch_size: int) -> Iterator[Batch]:
    """Yield consecutive batches of ``batch_size``; the last may be smaller."""

    if batch_size <= 0:
        raise ValueError(f"batch_size must be positive, got {batch_size}")
    for start in range(0, len(dataset), batch_size):
        end = start + batch_size
        yield Batch(inputs=dataset.inputs[start:end], targets=dataset.targets[start:end])


__all__ = ["iter_minibatches", "one_hot", "resolve_cache_dir", "shuffle_pairs"]
