"""Reader and writer for the IDX binary image/label format.

An IDX file starts with a big-endian int32 magic number followed by one
big-endian int32 per dimension, then the unsigned byte payload. Images use
magic ``2051`` with dimensions ``(count, rows, cols)``; labels use ``2049``
with a single ``count`` dimension. Paths ending in ``.gz`` are read and
written through gzip.
"""

from __future__ import annotations

import gzip
from pathlib import Path
from typing import BinaryIO, Tuple

import numpy as np

from ..core.types import Array, Dataset
from .utils import one_hot

IMAGES_MAGIC = 2051
LABELS_MAGIC = 2049


class IdxFormatError(ValueError):
    """Raised when an IDX file has the wrong header or a truncated payload."""


def _open(path: Path, mode: str) -> BinaryIO:
    if path.suffix == ".gz":
        return gzip.open(path, mode)  # type: ignore[return-value]
    return path.open(mode)


def _read_header(handle: BinaryIO, path: Path, magic: int, n_dims: int) -> Tuple[int, ...]:
    raw = handle.read(4 * (n_dims + 1))
    if len(raw) < 4 * (n_dims + 1):
        raise IdxFormatError(f"{path}: header truncated")
    values = tuple(int(v) for v in np.frombuffer(raw, dtype=">i4"))
    if values[0] != magic:
        raise IdxFormatError(f"{path}: magic number {values[0]} does not match {magic}")
    dims = values[1:]
    if any(d < 0 for d in dims):
        raise IdxFormatError(f"{path}: negative dimension in header {dims}")
    return dims


def _read_payload(handle: BinaryIO, path: Path, size: int) -> Array:
    payload = handle.read(size)
    if len(payload) < size:
        raise IdxFormatError(f"{path}: expected {size} bytes of data, found {len(payload)}")
    return np.frombuffer(payload, dtype=np.uint8, count=size)


def read_idx_images(path: str | Path) -> Array:
    """Return the images in ``path`` as raw 0-255 floats, one flattened row each."""

    path = Path(path)
    with _open(path, "rb") as handle:
        count, rows, cols = _read_header(handle, path, IMAGES_MAGIC, 3)
        pixels = _read_payload(handle, path, count * rows * cols)
    return pixels.reshape(count, rows * cols).astype(np.float64)


def read_idx_labels(path: str | Path) -> Array:
    path = Path(path)
    with _open(path, "rb") as handle:
        (count,) = _read_header(handle, path, LABELS_MAGIC, 1)
        labels = _read_payload(handle, path, count)
    return labels.astype(np.int64)


def load_idx_dataset(
    images_path: str | Path, labels_path: str | Path, *, num_classes: int = 10
) -> Dataset:
    """Pair an IDX image file with its label file as one-hot targets."""

    images = read_idx_images(images_path)
    labels = read_idx_labels(labels_path)
    if images.shape[0] != labels.shape[0]:
        raise IdxFormatError(
            f"{images_path} holds {images.shape[0]} images but {labels_path} "
            f"holds {labels.shape[0]} labels"
        )
    if labels.size and int(labels.max()) >= num_classes:
        raise IdxFormatError(f"{labels_path}: label {int(labels.max())} >= {num_classes} classes")
    return Dataset(inputs=images, targets=one_hot(labels, num_classes))


def _write(path: Path, magic: int, data: Array) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    header = np.array([magic, *data.shape], dtype=">i4")
    with _open(path, "wb") as handle:
        handle.write(header.tobytes())
        handle.write(np.ascontiguousarray(data, dtype=np.uint8).tobytes())
    return path


def write_idx_images(path: str | Path, images: Array) -> Path:
    """Write ``images`` shaped ``(count, rows, cols)`` with values 0-255."""

    images = np.asarray(images)
    if images.ndim != 3:
        raise ValueError(f"IDX images must be (count, rows, cols), got shape {images.shape}")
    return _write(Path(path), IMAGES_MAGIC, images)


def write_idx_labels(path: str | Path, labels: Array) -> Path:
    labels = np.asarray(labels)
    if labels.ndim != 1:
        raise ValueError(f"IDX labels must be 1-D, got shape {labels.shape}")
    return _write(Path(path), LABELS_MAGIC, labels)


__all__ = [
    "IMAGES_MAGIC",
    "LABELS_MAGIC",
    "IdxFormatError",
    "load_idx_dataset",
    "read_idx_images",
    "read_idx_labels",
    "write_idx_images",
    "write_idx_labels",
]
