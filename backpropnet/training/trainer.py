"""Mini-batch stochastic gradient descent driver."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence

import numpy as np

from ..core.backprop import compute_error
from ..core.network import DimensionMismatchError, Network
from ..core.propagation import process
from ..core.types import Batch, Dataset, EpochReport, GradientBundle, RunResult
from ..core.update import apply_update
from ..data.utils import iter_minibatches, shuffle_pairs
from .metrics import count_correct


class ConfigurationError(ValueError):
    """Raised for training settings that cannot produce a valid run."""


@dataclass
class SGDOptimizer:
    """Plain gradient descent with a fixed learning rate."""

    lr: float

    def __post_init__(self) -> None:
        if not self.lr > 0:
            raise ConfigurationError(f"Learning rate must be positive, got {self.lr}")

    def step(self, network: Network, bundle: GradientBundle) -> None:
        apply_update(network, bundle, self.lr)


class Trainer:
    """Shuffle, batch, backpropagate, update and score once per epoch."""

    def __init__(
        self,
        network: Network,
        optimizer: SGDOptimizer,
        rng: np.random.Generator,
        callbacks: Sequence[object] | None = None,
    ) -> None:
        self.network = network
        self.optimizer = optimizer
        self.rng = rng
        self.callbacks = list(callbacks or [])

    def run(
        self,
        train: Dataset,
        test: Dataset,
        *,
        epochs: int,
        batch_size: int,
    ) -> RunResult:
        self._check_config(train, epochs, batch_size)
        self._check_dataset(train, "train")
        self._check_dataset(test, "test")

        reports: List[EpochReport] = []
        for epoch in range(epochs):
            shuffled = shuffle_pairs(train, self.rng)
            for batch in iter_minibatches(shuffled, batch_size):
                self.optimizer.step(self.network, self.accumulate(batch))
            correct, total = self.evaluate(test)
            report = EpochReport(epoch=epoch, correct=correct, total=total)
            reports.append(report)
            self._emit_epoch(report)
        return RunResult(epochs=epochs, reports=reports)

    def accumulate(self, batch: Batch) -> GradientBundle:
        """Sum the per-example bundles of ``batch`` and divide by its size."""

        if len(batch) == 0:
            raise ConfigurationError("Cannot accumulate an empty batch")
        total = GradientBundle.zeros(self.network.topology.layer_sizes)
        for inputs, expected in zip(batch.inputs, batch.targets):
            total = total + compute_error(self.network, inputs, expected)
        return total / float(len(batch))

    def evaluate(self, dataset: Dataset) -> tuple[int, int]:
        """Return ``(correct, total)`` for ``dataset`` under the current weights."""

        if len(dataset) == 0:
            return 0, 0
        outputs = process(self.network, dataset.inputs)
        return count_correct(outputs, dataset.targets), len(dataset)

    # ------------------------------------------------------------------
    # Internal helpers

    @staticmethod
    def _check_config(train: Dataset, epochs: int, batch_size: int) -> None:
        if epochs < 0:
            raise ConfigurationError(f"epochs must be non-negative, got {epochs}")
        if batch_size <= 0:
            raise ConfigurationError(f"batch_size must be positive, got {batch_size}")
        if batch_size > len(train):
            raise ConfigurationError(
                f"batch_size {batch_size} exceeds the {len(train)} training examples"
            )

    def _check_dataset(self, dataset: Dataset, split: str) -> None:
        topology = self.network.topology
        if dataset.input_size != topology.input_size:
            raise DimensionMismatchError(
                f"{split} inputs have {dataset.input_size} features, layer 0 has "
                f"{topology.input_size} neurons"
            )
        if dataset.output_size != topology.output_size:
            raise DimensionMismatchError(
                f"{split} targets have width {dataset.output_size}, output layer has "
                f"{topology.output_size} neurons"
            )

    def _emit_epoch(self, report: EpochReport) -> None:
        for callback in self.callbacks:
            if hasattr(callback, "on_epoch"):
                callback.on_epoch(report)  # type: ignore[attr-defined]
            elif callable(callback):
                callback(report)


__all__ = ["ConfigurationError", "SGDOptimizer", "Trainer"]
