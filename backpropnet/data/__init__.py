"""Dataset registry and loader helpers."""

# Ensure built-in datasets register themselves when the package is imported.
from . import blobs as _blobs  # noqa: F401
from . import mnist as _mnist  # noqa: F401
from .idx import IdxFormatError, load_idx_dataset, read_idx_images, read_idx_labels
from .registry import DatasetSpec, available_datasets, get_dataset, register_dataset

__all__ = [
    "DatasetSpec",
    "IdxFormatError",
    "available_datasets",
    "get_dataset",
    "load_idx_dataset",
    "read_idx_images",
    "read_idx_labels",
    "register_dataset",
]
