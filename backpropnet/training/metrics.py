"""Classification scoring for the training loop."""

from __future__ import annotations

import numpy as np

from ..core.types import Array


def predicted_class(output: Array) -> int:
    """Index of the largest activation; ties resolve to the lowest index."""

    return int(np.argmax(output))


def predicted_classes(outputs: Array) -> Array:
    return np.argmax(np.asarray(outputs), axis=-1)


def count_correct(outputs: Array, targets: Array) -> int:
    """Number of rows whose predicted class matches the one-hot target."""

    outputs = np.atleast_2d(outputs)
    targets = np.atleast_2d(targets)
    if outputs.shape != targets.shape:
        raise ValueError(f"outputs {outputs.shape} and targets {targets.shape} differ in shape")
    return int(np.sum(predicted_classes(outputs) == predicted_classes(targets)))


def accuracy(outputs: Array, targets: Array) -> float:
    total = np.atleast_2d(targets).shape[0]
    return count_correct(outputs, targets) / total if total else 0.0


__all__ = ["accuracy", "count_correct", "predicted_class", "predicted_classes"]
