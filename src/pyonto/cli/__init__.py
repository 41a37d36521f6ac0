"""Command-line interface for pyonto."""
