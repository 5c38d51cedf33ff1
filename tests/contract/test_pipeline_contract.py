import json
from pathlib import Path

import pytest

import backpropnet
from backpropnet.training import pipelines


def _config(name, tmp_path, **train):
    config = json.loads(json.dumps(pipelines.load_preset(name)))
    config["train"].update({"run_dir": str(tmp_path / "run"), **train})
    return config


def test_builtin_presets_are_listed():
    names = set(pipelines.presets())
    assert {"mnist-784-30-10", "mnist-offline-smoke", "blobs-min", "mnist-784-100-10"} <= names


def test_unknown_preset_raises():
    with pytest.raises(KeyError):
        pipelines.load_preset("does-not-exist")


def test_yaml_preset_matches_reference_setup():
    preset = pipelines.load_preset("mnist-784-100-10")
    assert preset["model"]["topology"] == [784, 100, 10]
    assert preset["train"]["batch_size"] == 10
    assert preset["train"]["lr"] == 3.0


def test_preset_files_live_inside_the_package():
    package_root = Path(backpropnet.__file__).resolve().parent
    assert pipelines._PRESET_DIR.is_relative_to(package_root)
    assert (pipelines._PRESET_DIR / "mnist-784-100-10.yaml").is_file()


def test_blobs_pipeline_writes_artifacts(tmp_path, capsys):
    result = pipelines.run_pipeline(_config("blobs-min", tmp_path))
    run_dir = tmp_path / "run"

    assert result.epochs == 5
    assert len(result.reports) == 5
    lines = (run_dir / "metrics.jsonl").read_text().strip().splitlines()
    assert len(lines) == 5
    first = json.loads(lines[0])
    assert first["split"] == "test"
    assert first["seed"] == 7
    assert first["total"] == 60
    assert (run_dir / "metrics.csv").read_text().startswith("epoch,correct,total,accuracy")

    manifest = json.loads((run_dir / "manifest.json").read_text())
    assert manifest["config"]["model"]["topology"] == [2, 8, 3]
    assert manifest["dataset"]["type"] == "synthetic"
    assert manifest["environment"]["numpy"]
    assert json.loads((run_dir / "config.json").read_text())["train"]["seed"] == 7

    out = capsys.readouterr().out
    assert "=== backpropnet run ===" in out
    assert "Epoch 4: " in out


def test_pipeline_is_deterministic_for_a_seed(tmp_path):
    first = pipelines.run_pipeline(_config("blobs-min", tmp_path / "a"))
    second = pipelines.run_pipeline(_config("blobs-min", tmp_path / "b"))
    assert [r.correct for r in first.reports] == [r.correct for r in second.reports]


def test_offline_mnist_smoke(tmp_path, monkeypatch):
    monkeypatch.setenv("BACKPROPNET_CACHE_DIR", str(tmp_path / "cache"))
    result = pipelines.run_pipeline(_config("mnist-offline-smoke", tmp_path))
    assert [r.epoch for r in result.reports] == [0, 1]
    assert all(r.total == 50 for r in result.reports)


def test_topology_must_agree_with_dataset(tmp_path):
    config = _config("blobs-min", tmp_path)
    config["model"] = {"topology": [3, 8, 3]}
    with pytest.raises(ValueError):
        pipelines.run_pipeline(config)


def test_read_config_file_rejects_unknown_suffix(tmp_path):
    path = tmp_path / "config.toml"
    path.write_text("")
    with pytest.raises(ValueError):
        pipelines.read_config_file(path)
