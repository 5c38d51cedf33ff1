"""Per-epoch sinks for test-set scores."""

from __future__ import annotations

import csv
import json
import subprocess
import sys
from pathlib import Path
from typing import TextIO

from ..core.types import EpochReport


def _git_sha() -> str:
    try:
        out = subprocess.check_output(["git", "rev-parse", "HEAD"], stderr=subprocess.DEVNULL)
        return out.decode().strip()
    except Exception:  # pragma: no cover - git may be unavailable in tests
        return "unknown"


class ConsoleSink:
    """Print ``Epoch <i>: <correct>/<total>`` after every epoch."""

    def __init__(self, stream: TextIO | None = None) -> None:
        self.stream = stream

    def on_epoch(self, report: EpochReport) -> None:
        print(
            f"Epoch {report.epoch}: {report.correct}/{report.total}",
            file=self.stream or sys.stdout,
        )

    __call__ = on_epoch


class JsonlSink:
    """Append-only JSONL writer for epoch reports."""

    def __init__(
        self,
        path: str | Path,
        *,
        split: str = "test",
        seed: int | None = None,
        sha: str | None = None,
    ) -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text("")
        self.split = split
        self.seed = seed
        self.sha = sha or _git_sha()

    def on_epoch(self, report: EpochReport) -> None:
        record = {"split": self.split, "seed": self.seed, "sha": self.sha}
        record.update(report.as_dict())
        with self.path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(record) + "\n")

    __call__ = on_epoch


class CsvSink:
    """Write epoch reports to CSV with a stable schema."""

    fieldnames = ("epoch", "correct", "total", "accuracy")

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text("")

    def on_epoch(self, report: EpochReport) -> None:
        with self.path.open("a", encoding="utf-8", newline="") as handle:
            writer = csv.DictWriter(handle, fieldnames=self.fieldnames)
            if handle.tell() == 0:
                writer.writeheader()
            writer.writerow(report.as_dict())

    __call__ = on_epoch


__all__ = ["ConsoleSink", "CsvSink", "JsonlSink"]
