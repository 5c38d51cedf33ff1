"""Command line interface for backpropnet."""
