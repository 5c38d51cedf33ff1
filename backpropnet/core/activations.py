"""Activation utilities for backpropnet."""

from __future__ import annotations

import numpy as np

from .types import Array


def sigmoid(x: Array) -> Array:
    """Return the logistic sigmoid of ``x``.

    Evaluated through ``exp(-|x|)`` so neither branch can overflow for large
    magnitude inputs.
    """

    x = np.asarray(x, dtype=np.float64)
    e = np.exp(-np.abs(x))
    return np.where(x >= 0, 1.0 / (1.0 + e), e / (1.0 + e))


def sigmoid_prime(x: Array) -> Array:
    """Derivative of :func:`sigmoid` evaluated at ``x``."""

    s = sigmoid(x)
    return s * (1.0 - s)
