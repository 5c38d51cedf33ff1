"""Reporting utilities for backpropnet."""

from .artifacts import write_manifest
from .metrics import ConsoleSink, CsvSink, JsonlSink
from .plots import PlotAdapter, render_image

__all__ = ["ConsoleSink", "CsvSink", "JsonlSink", "PlotAdapter", "render_image", "write_manifest"]
