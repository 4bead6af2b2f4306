"""Pose-anchored pattern overlay for live camera feeds."""

__version__ = "0.1.0"
