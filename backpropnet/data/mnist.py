"""MNIST read from the four standard IDX files, with an offline fixture."""

from __future__ import annotations

from pathlib import Path

import numpy as np

from .idx import load_idx_dataset, write_idx_images, write_idx_labels
from .registry import DatasetSpec, register_dataset
from .utils import resolve_cache_dir

TRAIN_FILES = ("train-images-idx3-ubyte", "train-labels-idx1-ubyte")
TEST_FILES = ("t10k-images-idx3-ubyte", "t10k-labels-idx1-ubyte")

_FIXTURE_TRAIN = 200
_FIXTURE_TEST = 50
_SIDE = 28


def _locate(data_dir: Path, filename: str) -> Path:
    plain = data_dir / filename
    if plain.exists():
        return plain
    gz = data_dir / f"{filename}.gz"
    if gz.exists():
        return gz
    raise FileNotFoundError(f"Neither {plain} nor {gz} exists")


def _fixture_split(count: int, offset: int) -> tuple[np.ndarray, np.ndarray]:
    # Generated from integer sequences only so the bytes on disk are identical
    # across NumPy releases.
    labels = (np.arange(count, dtype=np.int64) + offset) % 10
    images = np.zeros((count, _SIDE, _SIDE), dtype=np.int64)
    texture = np.arange(_SIDE * _SIDE, dtype=np.int64).reshape(_SIDE, _SIDE)
    for idx, digit in enumerate(labels):
        images[idx] = (texture * (idx + offset + 1)) % 48
        row = 2 * int(digit) + 4
        images[idx, row : row + 3, 4:24] = 255
    return images.astype(np.uint8), labels.astype(np.uint8)


def _build_offline_fixture(root: Path) -> Path:
    """Write a deterministic MNIST-like fixture in IDX format under ``root``."""

    for (images_name, labels_name), count, offset in (
        (TRAIN_FILES, _FIXTURE_TRAIN, 0),
        (TEST_FILES, _FIXTURE_TEST, 3),
    ):
        images_path = root / images_name
        labels_path = root / labels_name
        if images_path.exists() and labels_path.exists():
            continue
        images, labels = _fixture_split(count, offset)
        write_idx_images(images_path, images)
        write_idx_labels(labels_path, labels)
    return root


@register_dataset("mnist")
def build_mnist(
    *,
    offline: bool = False,
    cache_dir: str | Path | None = None,
    data_dir: str | Path = "data",
    max_items: int | None = None,
    num_classes: int = 10,
    **_: object,
) -> DatasetSpec:
    """Create a :class:`DatasetSpec` for MNIST.

    Pixels are kept as raw byte values in ``[0, 255]``; no normalisation is
    applied.
    """

    if offline:
        root = _build_offline_fixture(resolve_cache_dir(cache_dir) / "offline" / "mnist")
        mode = "offline"
    else:
        root = Path(data_dir)
        mode = "files"

    train_images, train_labels = (_locate(root, name) for name in TRAIN_FILES)
    test_images, test_labels = (_locate(root, name) for name in TEST_FILES)
    train = load_idx_dataset(train_images, train_labels, num_classes=num_classes)
    test = load_idx_dataset(test_images, test_labels, num_classes=num_classes)

    if max_items is not None:
        train = train.take(max_items)
        test = test.take(max(1, min(max_items, len(test))))

    provenance = {
        "mode": mode,
        "root": str(root),
        "train_images": str(train_images),
        "test_images": str(test_images),
        "max_items": max_items,
        "num_classes": num_classes,
    }
    return DatasetSpec(
        name="mnist",
        train=train,
        test=test,
        num_classes=num_classes,
        provenance=provenance,
    )


__all__ = ["TEST_FILES", "TRAIN_FILES", "build_mnist"]
