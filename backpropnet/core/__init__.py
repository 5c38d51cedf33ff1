"""Core numerical primitives for backpropnet."""

from . import activations, backprop, network, propagation, types, update

__all__ = ["activations", "backprop", "network", "propagation", "types", "update"]
