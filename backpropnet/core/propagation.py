"""Forward propagation through a :class:`~backpropnet.core.network.Network`."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Tuple

import numpy as np

from .activations import sigmoid
from .network import DimensionMismatchError, Network
from .types import Array


@dataclass
class ForwardPass:
    """Intermediate values captured during the forward pass."""

    activations: List[Array]
    pre_activations: List[Array]

    @property
    def output(self) -> Array:
        return self.activations[-1]


def check_inputs(network: Network, inputs: Array) -> Array:
    """Return ``inputs`` as float64, rejecting widths that do not match layer 0."""

    x = np.asarray(inputs, dtype=np.float64)
    if x.ndim not in (1, 2):
        raise DimensionMismatchError(f"Inputs must be 1-D or 2-D, got {x.ndim}-D")
    if x.shape[-1] != network.topology.input_size:
        raise DimensionMismatchError(
            f"Input has {x.shape[-1]} features but layer 0 has "
            f"{network.topology.input_size} neurons"
        )
    return x


def layer_activation(network: Network, inputs: Array, layer_index: int) -> Tuple[Array, Array]:
    """Return ``(activation, pre_activation)`` of ``layer_index`` for ``inputs``.

    ``inputs`` is the previous layer's activation, or the raw input vector for
    layer 0, where each feature feeds its own neuron through a weight of 1.
    Rows of a 2-D ``inputs`` are treated as independent vectors.
    """

    W, b = network.parameters(layer_index)
    inputs = np.asarray(inputs, dtype=np.float64)
    sizes = network.topology.layer_sizes
    expected = sizes[0] if layer_index == 0 else sizes[layer_index - 1]
    if inputs.ndim not in (1, 2) or inputs.shape[-1] != expected:
        raise DimensionMismatchError(
            f"Layer {layer_index} expects inputs of width {expected}, got shape {inputs.shape}"
        )
    if layer_index == 0:
        z = inputs * W[:, 0] + b
    else:
        z = inputs @ W.T + b
    return sigmoid(z), z


def forward_pass(network: Network, inputs: Array) -> ForwardPass:
    x = check_inputs(network, inputs)
    activations: List[Array] = []
    pre_activations: List[Array] = []
    for layer in range(network.num_layers):
        x, z = layer_activation(network, x, layer)
        activations.append(x)
        pre_activations.append(z)
    return ForwardPass(activations=activations, pre_activations=pre_activations)


def process(network: Network, inputs: Array) -> Array:
    """Return the network output for ``inputs`` without keeping intermediates."""

    x = check_inputs(network, inputs)
    for layer in range(network.num_layers):
        x, _ = layer_activation(network, x, layer)
    return x


__all__ = ["ForwardPass", "check_inputs", "forward_pass", "layer_activation", "process"]
