"""Core typing contracts for backpropnet."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Sequence, Tuple

import numpy as np

Array = np.ndarray


@dataclass(frozen=True)
class Batch:
    """A single mini-batch of data."""

    inputs: Array
    targets: Array

    def __len__(self) -> int:
        return int(self.inputs.shape[0])


@dataclass(frozen=True)
class Dataset:
    """Paired input vectors and one-hot expected outputs.

    Both arrays are two dimensional and share the same number of rows; row
    ``i`` of ``targets`` is the expected output for row ``i`` of ``inputs``.
    """

    inputs: Array
    targets: Array

    def __post_init__(self) -> None:
        if self.inputs.ndim != 2 or self.targets.ndim != 2:
            raise ValueError("Dataset inputs and targets must be 2-D arrays")
        if self.inputs.shape[0] != self.targets.shape[0]:
            raise ValueError(
                f"Dataset has {self.inputs.shape[0]} inputs but "
                f"{self.targets.shape[0]} targets"
            )

    def __len__(self) -> int:
        return int(self.inputs.shape[0])

    @property
    def input_size(self) -> int:
        return int(self.inputs.shape[1])

    @property
    def output_size(self) -> int:
        return int(self.targets.shape[1])

    def take(self, count: int) -> "Dataset":
        """Return the first ``count`` examples."""

        return Dataset(inputs=self.inputs[:count], targets=self.targets[:count])


@dataclass(frozen=True)
class GradientBundle:
    """Per-layer error signals and activations from one backward pass.

    ``errors[l]`` is dCost/dZ for layer ``l`` and ``activations[l]`` is the
    post-sigmoid output of layer ``l``. Bundles add element-wise and divide by
    a scalar so that a mini-batch can be summed and averaged before the update.
    """

    errors: Tuple[Array, ...]
    activations: Tuple[Array, ...]

    def __post_init__(self) -> None:
        if len(self.errors) != len(self.activations):
            raise ValueError("errors and activations must cover the same layers")

    @classmethod
    def zeros(cls, layer_sizes: Sequence[int]) -> "GradientBundle":
        return cls(
            errors=tuple(np.zeros(size, dtype=np.float64) for size in layer_sizes),
            activations=tuple(np.zeros(size, dtype=np.float64) for size in layer_sizes),
        )

    @property
    def num_layers(self) -> int:
        return len(self.errors)

    def __add__(self, other: "GradientBundle") -> "GradientBundle":
        if not isinstance(other, GradientBundle):
            return NotImplemented
        if other.num_layers != self.num_layers:
            raise ValueError(
                f"Cannot add bundles with {self.num_layers} and {other.num_layers} layers"
            )
        return GradientBundle(
            errors=tuple(a + b for a, b in zip(self.errors, other.errors)),
            activations=tuple(a + b for a, b in zip(self.activations, other.activations)),
        )

    def __truediv__(self, divisor: float) -> "GradientBundle":
        return GradientBundle(
            errors=tuple(e / divisor for e in self.errors),
            activations=tuple(a / divisor for a in self.activations),
        )

    def layer_gradients(self, layer: int) -> Tuple[Array, Array]:
        """Return ``(dW, dB)`` for computed layer ``layer``."""

        if not 1 <= layer < self.num_layers:
            raise IndexError(f"Layer {layer} has no trainable parameters")
        error = self.errors[layer]
        return np.outer(error, self.activations[layer - 1]), error


@dataclass(frozen=True)
class EpochReport:
    """Test-set score emitted after every epoch."""

    epoch: int
    correct: int
    total: int

    @property
    def accuracy(self) -> float:
        return self.correct / self.total if self.total else 0.0

    def as_dict(self) -> dict:
        return {
            "epoch": self.epoch,
            "correct": self.correct,
            "total": self.total,
            "accuracy": self.accuracy,
        }


@dataclass(frozen=True)
class RunResult:
    """Summary returned by :meth:`backpropnet.training.trainer.Trainer.run`."""

    epochs: int
    reports: List[EpochReport] = field(default_factory=list)
    metrics_path: str = ""
    manifest_path: str = ""
