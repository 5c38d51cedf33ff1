import numpy as np
import pytest

from backpropnet.core.types import EpochReport
from backpropnet.reporting.plots import PlotAdapter, render_image


def test_plot_adapter_writes_accuracy_curve(tmp_path):
    adapter = PlotAdapter(tmp_path, enable_plots=True)
    for epoch in range(3):
        adapter(EpochReport(epoch=epoch, correct=epoch + 5, total=10))
    adapter.close()
    assert (tmp_path / "accuracy.png").exists()


def test_plot_adapter_is_inert_when_disabled(tmp_path):
    adapter = PlotAdapter(tmp_path / "off", enable_plots=False)
    adapter.on_epoch(EpochReport(epoch=0, correct=1, total=2))
    adapter.close()
    assert not (tmp_path / "off").exists()


def test_render_image_saves_png(tmp_path):
    pixels = np.arange(28 * 28) % 256
    path = render_image(pixels, 28, 28, tmp_path / "digit.png")
    assert path.exists()
    with pytest.raises(ValueError):
        render_image(pixels[:10], 28, 28, tmp_path / "bad.png")
