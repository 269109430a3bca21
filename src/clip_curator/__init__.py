"""Clip Curator - CC-licensed video to reviewed short-form clip pipeline."""

__version__ = "0.1.0"
