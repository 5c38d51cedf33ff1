"""Layer topology and network state."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, List, Mapping, MutableSequence, Tuple

import numpy as np

from .types import Array


class DimensionMismatchError(ValueError):
    """Raised when a vector or parameter does not match the network topology."""


@dataclass(frozen=True)
class Topology:
    """Immutable neuron counts per layer.

    Layer 0 is the input layer, the last layer is the output layer.
    """

    layer_sizes: Tuple[int, ...]

    def __post_init__(self) -> None:
        sizes = tuple(self.layer_sizes)
        if not sizes:
            raise ValueError("Topology requires at least one layer")
        for size in sizes:
            if isinstance(size, bool) or not isinstance(size, (int, np.integer)):
                raise ValueError(f"Layer sizes must be integers, got {size!r}")
            if size <= 0:
                raise ValueError(f"Layer sizes must be positive, got {size}")
        object.__setattr__(self, "layer_sizes", tuple(int(s) for s in sizes))

    def __len__(self) -> int:
        return len(self.layer_sizes)

    def __iter__(self) -> Iterator[int]:
        return iter(self.layer_sizes)

    @property
    def num_layers(self) -> int:
        return len(self.layer_sizes)

    @property
    def input_size(self) -> int:
        return self.layer_sizes[0]

    @property
    def output_size(self) -> int:
        return self.layer_sizes[-1]

    def weight_shape(self, layer: int) -> Tuple[int, int]:
        """Shape of ``W[layer]``; layer 0 has one virtual input per neuron."""

        if layer == 0:
            return (self.layer_sizes[0], 1)
        return (self.layer_sizes[layer], self.layer_sizes[layer - 1])


@dataclass
class Network:
    """Weights and biases of a fully-connected sigmoid network.

    Only computed layers (``1 .. L-1``) own trainable storage. The input layer
    is a fixed identity pass-through described by the read-only
    :attr:`input_weights` (all ``1.0``) and :attr:`input_biases` (all ``0``).
    """

    topology: Topology
    weights: MutableSequence[Array] = field(init=False, repr=False)
    biases: MutableSequence[Array] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        if not isinstance(self.topology, Topology):
            self.topology = Topology(self.topology)
        n_inputs = self.topology.input_size
        input_weights = np.ones((n_inputs, 1), dtype=np.float64)
        input_biases = np.zeros(n_inputs, dtype=np.float64)
        input_weights.flags.writeable = False
        input_biases.flags.writeable = False
        self._input_weights = input_weights
        self._input_biases = input_biases
        self.weights = [
            np.zeros(self.topology.weight_shape(layer), dtype=np.float64)
            for layer in range(1, self.topology.num_layers)
        ]
        self.biases = [
            np.zeros(self.topology.layer_sizes[layer], dtype=np.float64)
            for layer in range(1, self.topology.num_layers)
        ]

    @property
    def num_layers(self) -> int:
        return self.topology.num_layers

    @property
    def input_weights(self) -> Array:
        return self._input_weights

    @property
    def input_biases(self) -> Array:
        return self._input_biases

    def parameters(self, layer: int) -> Tuple[Array, Array]:
        """Return ``(W, B)`` for ``layer``."""

        if not 0 <= layer < self.num_layers:
            raise IndexError(f"Layer {layer} out of range for {self.num_layers} layers")
        if layer == 0:
            return self._input_weights, self._input_biases
        return self.weights[layer - 1], self.biases[layer - 1]

    def trainable_layers(self) -> range:
        return range(1, self.num_layers)

    def randomize(self, rng: np.random.Generator) -> None:
        """Draw every trainable weight and bias from N(0, 1) using ``rng``."""

        for idx, layer in enumerate(self.trainable_layers()):
            self.weights[idx] = rng.standard_normal(self.topology.weight_shape(layer))
            self.biases[idx] = rng.standard_normal(self.topology.layer_sizes[layer])

    def state_dict(self) -> Mapping[str, Array]:
        state = {}
        for idx, layer in enumerate(self.trainable_layers()):
            state[f"W{layer}"] = self.weights[idx].copy()
            state[f"b{layer}"] = self.biases[idx].copy()
        return state

    def load_state_dict(self, state: Mapping[str, Array]) -> None:
        weights: List[Array] = []
        biases: List[Array] = []
        for layer in self.trainable_layers():
            for key in (f"W{layer}", f"b{layer}"):
                if key not in state:
                    raise KeyError(f"Missing parameter {key} in state dict")
            W = np.array(state[f"W{layer}"], dtype=np.float64)
            b = np.array(state[f"b{layer}"], dtype=np.float64)
            if W.shape != self.topology.weight_shape(layer):
                raise DimensionMismatchError(
                    f"W{layer} has shape {W.shape}, expected "
                    f"{self.topology.weight_shape(layer)}"
                )
            if b.shape != (self.topology.layer_sizes[layer],):
                raise DimensionMismatchError(
                    f"b{layer} has shape {b.shape}, expected "
                    f"({self.topology.layer_sizes[layer]},)"
                )
            weights.append(W)
            biases.append(b)
        self.weights = weights
        self.biases = biases

    def parameter_count(self) -> int:
        return int(sum(W.size + b.size for W, b in zip(self.weights, self.biases)))


__all__ = ["DimensionMismatchError", "Network", "Topology"]
