"""Backpropagation of the quadratic-cost error signal.

The equations follow the usual numbering:

* BP1 ``Err[L-1] = (A[L-1] - y) * sigmoid'(Z[L-1])``
* BP2 ``Err[l] = (W[l+1].T @ Err[l+1]) * sigmoid'(Z[l])``
* BP3 ``dC/dB[l] = Err[l]``
* BP4 ``dC/dW[l] = outer(Err[l], A[l-1])``

BP3 and BP4 are applied by :mod:`backpropnet.core.update`.
"""

from __future__ import annotations

from typing import List

import numpy as np

from .activations import sigmoid_prime
from .network import DimensionMismatchError, Network
from .propagation import forward_pass
from .types import Array, GradientBundle


def output_error(expected: Array, pre_activation: Array, activation: Array) -> Array:
    return (activation - expected) * sigmoid_prime(pre_activation)


def hidden_error(next_weights: Array, next_error: Array, pre_activation: Array) -> Array:
    return (next_weights.T @ next_error) * sigmoid_prime(pre_activation)


def compute_error(network: Network, inputs: Array, expected: Array) -> GradientBundle:
    """Return the error signal and activation of every layer for one example."""

    x = np.asarray(inputs, dtype=np.float64)
    y = np.asarray(expected, dtype=np.float64)
    if x.ndim != 1:
        raise DimensionMismatchError(f"compute_error expects a single input vector, got {x.ndim}-D")
    if y.shape != (network.topology.output_size,):
        raise DimensionMismatchError(
            f"Expected output has shape {y.shape} but the output layer has "
            f"{network.topology.output_size} neurons"
        )

    cache = forward_pass(network, x)
    last = network.num_layers - 1
    errors: List[Array] = [np.empty(0)] * network.num_layers
    errors[last] = output_error(y, cache.pre_activations[last], cache.activations[last])
    for layer in reversed(range(last)):
        next_weights, _ = network.parameters(layer + 1)
        errors[layer] = hidden_error(next_weights, errors[layer + 1], cache.pre_activations[layer])
    return GradientBundle(errors=tuple(errors), activations=tuple(cache.activations))


__all__ = ["compute_error", "hidden_error", "output_error"]
