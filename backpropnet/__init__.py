"""backpropnet public API."""

from .core import activations
from .core import types
from .core.backprop import compute_error
from .core.network import DimensionMismatchError, Network, Topology
from .core.propagation import layer_activation, process
from .core.types import Dataset, EpochReport, GradientBundle, RunResult
from .core.update import apply_update
from .training.pipelines import load_preset, presets, run_pipeline
from .training.trainer import ConfigurationError, SGDOptimizer, Trainer

__all__ = [
    "ConfigurationError",
    "Dataset",
    "DimensionMismatchError",
    "EpochReport",
    "GradientBundle",
    "Network",
    "RunResult",
    "SGDOptimizer",
    "Topology",
    "Trainer",
    "activations",
    "apply_update",
    "compute_error",
    "layer_activation",
    "load_preset",
    "presets",
    "process",
    "run_pipeline",
    "types",
]
