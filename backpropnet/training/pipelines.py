"""Pipeline assembly: presets, config resolution and single training runs."""

from __future__ import annotations

import json
import time
from copy import deepcopy
from pathlib import Path
from typing import Dict, List, Mapping, Sequence

import numpy as np

from ..core.network import Network, Topology
from ..core.types import RunResult
from ..data import registry
from ..reporting.artifacts import write_manifest
from ..reporting.metrics import ConsoleSink, CsvSink, JsonlSink
from ..reporting.plots import PlotAdapter
from .trainer import SGDOptimizer, Trainer

_PRESETS: Dict[str, Mapping[str, object]] = {
    "mnist-784-30-10": {
        "data": {"name": "mnist", "options": {"data_dir": "data"}},
        "model": {"topology": [784, 30, 10]},
        "train": {
            "epochs": 30,
            "batch_size": 10,
            "lr": 3.0,
            "seed": 0,
            "run_dir": "runs/mnist-784-30-10",
            "enable_plots": False,
        },
        "offline": False,
    },
    "mnist-offline-smoke": {
        "data": {"name": "mnist", "options": {"max_items": 100}},
        "model": {"topology": [784, 16, 10]},
        "train": {
            "epochs": 2,
            "batch_size": 10,
            "lr": 3.0,
            "seed": 1,
            "run_dir": "runs/mnist-offline-smoke",
            "enable_plots": False,
        },
        "offline": True,
    },
    "blobs-min": {
        "data": {
            "name": "blobs",
            "options": {"num_classes": 3, "n_features": 2, "n_train": 150, "n_test": 60},
        },
        "model": {"hidden": [8]},
        "train": {
            "epochs": 5,
            "batch_size": 10,
            "lr": 3.0,
            "seed": 7,
            "run_dir": "runs/blobs-min",
            "enable_plots": False,
        },
        "offline": True,
    },
}

_PRESET_DIR = Path(__file__).resolve().parents[1] / "configs" / "presets"
_FILE_PRESETS_CACHE: Dict[str, Mapping[str, object]] | None = None


def read_config_file(path: Path) -> Mapping[str, object]:
    """Load a JSON or YAML mapping from ``path``."""

    text = path.read_text()
    suffix = path.suffix.lower()
    if suffix in {".yaml", ".yml"}:
        try:
            import yaml  # type: ignore
        except Exception as exc:  # pragma: no cover - optional dependency
            raise RuntimeError("PyYAML is required to load YAML configs") from exc
        data = yaml.safe_load(text) or {}
    elif suffix == ".json":
        data = json.loads(text or "{}")
    else:
        raise ValueError(f"Unsupported config file type: {path.suffix}")

    if not isinstance(data, Mapping):
        raise TypeError(f"Config {path.name} must decode to a mapping")
    return data


def _file_presets() -> Dict[str, Mapping[str, object]]:
    global _FILE_PRESETS_CACHE
    if _FILE_PRESETS_CACHE is None:
        found: Dict[str, Mapping[str, object]] = {}
        if _PRESET_DIR.exists():
            for file in sorted(_PRESET_DIR.iterdir()):
                if file.suffix.lower() not in {".yaml", ".yml", ".json"}:
                    continue
                data = read_config_file(file)
                missing = {"data", "model", "train"} - set(data)
                if missing:
                    missing_str = ", ".join(sorted(missing))
                    raise KeyError(f"Preset {file.name} is missing required sections: {missing_str}")
                found[file.stem] = json.loads(json.dumps(data))
        _FILE_PRESETS_CACHE = found
    return {name: deepcopy(cfg) for name, cfg in _FILE_PRESETS_CACHE.items()}


def presets() -> Mapping[str, Mapping[str, object]]:
    combined: Dict[str, Mapping[str, object]] = {}
    combined.update({name: deepcopy(cfg) for name, cfg in _PRESETS.items()})
    combined.update(_file_presets())
    return combined


def load_preset(name: str) -> Mapping[str, object]:
    file_overrides = _file_presets()
    if name in file_overrides:
        return file_overrides[name]
    try:
        return deepcopy(_PRESETS[name])
    except KeyError as exc:
        raise KeyError(f"Unknown preset: {name}") from exc


def run_pipeline(config: Mapping[str, object]) -> RunResult:
    """Build the dataset and network described by ``config`` and train it."""

    data_cfg = dict(config["data"])  # type: ignore[arg-type]
    model_cfg = dict(config["model"])  # type: ignore[arg-type]
    train_cfg = dict(config["train"])  # type: ignore[arg-type]

    dataset = registry.get_dataset(
        str(data_cfg["name"]),
        offline=bool(config.get("offline", False)),
        cache_dir=train_cfg.get("cache_dir"),
        **dict(data_cfg.get("options", {})),  # type: ignore[arg-type]
    )
    topology = _build_topology(model_cfg, dataset.input_size, dataset.num_classes)

    epochs = int(train_cfg.get("epochs", 1))
    batch_size = int(train_cfg.get("batch_size", 10))
    seed = int(train_cfg.get("seed", 0))
    lr = float(train_cfg.get("lr", 3.0))

    rng = np.random.default_rng(seed)
    network = Network(topology)
    network.randomize(rng)
    optimizer = SGDOptimizer(lr=lr)

    run_dir = _resolve_run_dir(train_cfg, dataset.name)
    run_dir.mkdir(parents=True, exist_ok=True)

    _print_startup_summary(
        dataset_name=dataset.name,
        splits=dataset.splits,
        topology=topology.layer_sizes,
        epochs=epochs,
        batch_size=batch_size,
        lr=lr,
        param_count=network.parameter_count(),
    )

    jsonl = JsonlSink(run_dir / "metrics.jsonl", split="test", seed=seed)
    csv_sink = CsvSink(run_dir / "metrics.csv")
    plots = PlotAdapter(run_dir, enable_plots=bool(train_cfg.get("enable_plots", False)))
    trainer = Trainer(
        network=network,
        optimizer=optimizer,
        rng=rng,
        callbacks=[ConsoleSink(), jsonl, csv_sink, plots],
    )
    result = trainer.run(dataset.train, dataset.test, epochs=epochs, batch_size=batch_size)
    plots.close()

    resolved = _safe_config(config, topology.layer_sizes)
    manifest = write_manifest(
        run_dir / "manifest.json",
        config=resolved,
        dataset_provenance=dataset.provenance,
    )
    (run_dir / "config.json").write_text(json.dumps(resolved, indent=2))

    return RunResult(
        epochs=result.epochs,
        reports=result.reports,
        metrics_path=str(jsonl.path),
        manifest_path=manifest,
    )


def _build_topology(model_cfg: Mapping[str, object], d_in: int, d_out: int) -> Topology:
    if "topology" in model_cfg:
        topology = Topology(tuple(int(s) for s in model_cfg["topology"]))  # type: ignore[union-attr]
    else:
        hidden: List[int] = [int(h) for h in model_cfg.get("hidden", [])]  # type: ignore[union-attr]
        topology = Topology((d_in, *hidden, d_out))
    if topology.input_size != d_in:
        raise ValueError(f"Configured input layer has {topology.input_size} neurons but data has {d_in} features")
    if topology.output_size != d_out:
        raise ValueError(f"Configured output layer has {topology.output_size} neurons but data has {d_out} classes")
    return topology


def _resolve_run_dir(train_cfg: Mapping[str, object], dataset: str) -> Path:
    if "run_dir" in train_cfg:
        return Path(str(train_cfg["run_dir"]))
    timestamp = time.strftime("%Y%m%d-%H%M%S")
    return Path("runs") / timestamp / dataset


def _safe_config(config: Mapping[str, object], layer_sizes: Sequence[int]) -> Mapping[str, object]:
    copied = json.loads(json.dumps(config))
    copied.setdefault("model", {})["topology"] = list(layer_sizes)
    return copied


def _print_startup_summary(
    *,
    dataset_name: str,
    splits: Mapping[str, int],
    topology: Sequence[int],
    epochs: int,
    batch_size: int,
    lr: float,
    param_count: int,
) -> None:
    print("=== backpropnet run ===")
    print(f"Dataset       : {dataset_name} (train={splits['train']}, test={splits['test']})")
    print(f"Topology      : {list(topology)}")
    print(f"Epochs        : {epochs}")
    print(f"Batch size    : {batch_size}")
    print(f"Learning rate : {lr}")
    print(f"Parameters    : {param_count}")
    print("=======================")


__all__ = ["load_preset", "presets", "read_config_file", "run_pipeline"]
