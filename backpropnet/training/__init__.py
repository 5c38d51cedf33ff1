"""Training loop, scoring and pipeline assembly."""

from .trainer import ConfigurationError, SGDOptimizer, Trainer

__all__ = ["ConfigurationError", "SGDOptimizer", "Trainer"]
