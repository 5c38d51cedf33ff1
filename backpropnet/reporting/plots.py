"""Headless-safe plotting adapters."""

from __future__ import annotations

from pathlib import Path
from typing import List, Tuple

import numpy as np

from ..core.types import Array, EpochReport


def _pyplot():
    import matplotlib

    matplotlib.use("Agg", force=True)
    import matplotlib.pyplot as plt  # imported lazily for headless safety

    return plt


class PlotAdapter:
    """Collect test accuracy per epoch and optionally emit a matplotlib figure."""

    def __init__(self, run_dir: str | Path, enable_plots: bool = False):
        self.enable_plots = enable_plots
        self.run_dir = Path(run_dir)
        self._history: List[Tuple[int, float]] = []
        if self.enable_plots:
            self.run_dir.mkdir(parents=True, exist_ok=True)

    def on_epoch(self, report: EpochReport) -> None:
        if not self.enable_plots:
            return
        self._history.append((report.epoch, report.accuracy))

    def close(self) -> None:
        if not self.enable_plots or not self._history:
            return
        plt = _pyplot()
        epochs, accuracies = zip(*self._history)
        fig, ax = plt.subplots()
        ax.plot(epochs, accuracies, marker="o")
        ax.set_xlabel("Epoch")
        ax.set_ylabel("Test accuracy")
        ax.set_ylim(0.0, 1.0)
        ax.set_title("Test Accuracy")
        fig.savefig(self.run_dir / "accuracy.png")
        plt.close(fig)

    __call__ = on_epoch


def render_image(
    pixels: Array, width: int, height: int, path: str | Path, *, scale: int = 2
) -> Path:
    """Save one flattened grayscale input vector (values 0-255) as a PNG."""

    pixels = np.asarray(pixels, dtype=np.float64)
    if pixels.size != width * height:
        raise ValueError(f"{pixels.size} pixels cannot form a {width}x{height} image")
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    plt = _pyplot()
    fig, ax = plt.subplots(figsize=(width * scale / 100.0, height * scale / 100.0), dpi=100)
    ax.imshow(
        pixels.reshape(height, width),
        cmap="gray",
        vmin=0,
        vmax=255,
        interpolation="bilinear",
    )
    ax.axis("off")
    fig.savefig(path)
    plt.close(fig)
    return path


__all__ = ["PlotAdapter", "render_image"]
