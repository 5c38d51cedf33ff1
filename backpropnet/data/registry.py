"""Dataset registry and metadata contracts."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, MutableMapping

from ..core.types import Dataset


@dataclass(frozen=True)
class DatasetSpec:
    """A dataset registered in the system: train/test splits plus provenance.

    Attributes
    ----------
    name:
        Registry identifier.
    train, test:
        Paired inputs and one-hot targets.
    num_classes:
        Width of the one-hot targets.
    provenance:
        Free-form metadata describing where the data came from, preserved in
        the run manifest.
    """

    name: str
    train: Dataset
    test: Dataset
    num_classes: int
    provenance: Dict[str, Any] = field(default_factory=dict)

    @property
    def input_size(self) -> int:
        return self.train.input_size

    @property
    def splits(self) -> Dict[str, int]:
        return {"train": len(self.train), "test": len(self.test)}


DatasetFactory = Callable[..., DatasetSpec]


_REGISTRY: MutableMapping[str, DatasetFactory] = {}


def register_dataset(
    name: str | None = None,
    factory: DatasetFactory | None = None,
) -> Callable[[DatasetFactory], DatasetFactory] | DatasetFactory:
    """Register a dataset factory.

    ``register_dataset`` can be used both as a decorator::

        @register_dataset("mnist")
        def build_mnist(**kwargs):
            ...

    or directly::

        register_dataset("mnist", build_mnist)
    """

    def _decorator(func: DatasetFactory) -> DatasetFactory:
        _REGISTRY[str(name or func.__name__)] = func
        return func

    if factory is not None:
        return _decorator(factory)
    if name is None:
        raise TypeError("register_dataset requires a name when used without a decorator")
    return _decorator


def get_dataset(
    dataset: str,
    /,
    *,
    offline: bool = False,
    cache_dir: str | Path | None = None,
    **options: Any,
) -> DatasetSpec:
    """Build and validate the :class:`DatasetSpec` registered as ``dataset``."""

    if dataset not in _REGISTRY:
        available = ", ".join(sorted(_REGISTRY))
        raise KeyError(f"Unknown dataset {dataset!r}. Available datasets: {available}")

    factory = _REGISTRY[dataset]
    spec = factory(offline=offline, cache_dir=cache_dir, **options)
    _validate_spec(spec)
    return spec


def available_datasets() -> Iterable[str]:
    """Return the sorted list of available dataset identifiers."""

    return sorted(_REGISTRY)


def _validate_spec(spec: DatasetSpec) -> None:
    if spec.train.input_size != spec.test.input_size:
        raise ValueError(
            f"Dataset {spec.name!r}: train inputs have {spec.train.input_size} features, "
            f"test inputs have {spec.test.input_size}"
        )
    for split, data in (("train", spec.train), ("test", spec.test)):
        if data.output_size != spec.num_classes:
            raise ValueError(
                f"Dataset {spec.name!r}: {split} targets have width {data.output_size}, "
                f"expected {spec.num_classes}"
            )
    if len(spec.train) == 0:
        raise ValueError(f"Dataset {spec.name!r} has an empty train split")


__all__ = [
    "DatasetSpec",
    "available_datasets",
    "get_dataset",
    "register_dataset",
]
