"""Gradient descent step on the trainable layers of a network."""

from __future__ import annotations

from .network import DimensionMismatchError, Network
from .types import GradientBundle


def _check_bundle(network: Network, bundle: GradientBundle) -> None:
    if bundle.num_layers != network.num_layers:
        raise DimensionMismatchError(
            f"Gradient bundle covers {bundle.num_layers} layers, network has "
            f"{network.num_layers}"
        )
    for layer, size in enumerate(network.topology.layer_sizes):
        if bundle.errors[layer].shape != (size,) or bundle.activations[layer].shape != (size,):
            raise DimensionMismatchError(
                f"Gradient bundle layer {layer} does not have {size} neurons"
            )


def apply_update(network: Network, bundle: GradientBundle, learning_rate: float) -> None:
    """Move every trainable weight and bias against the gradient in ``bundle``.

    ``bundle`` is expected to be already averaged over the mini-batch. The
    input layer has no trainable parameters and is left untouched.
    """

    _check_bundle(network, bundle)
    for idx, layer in enumerate(network.trainable_layers()):
        grad_w, grad_b = bundle.layer_gradients(layer)
        network.biases[idx] -= learning_rate * grad_b
        network.weights[idx] -= learning_rate * grad_w


__all__ = ["apply_update"]
