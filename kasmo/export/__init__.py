"""Snapshot exporters for the explorer scene."""

from .viewer import render_snapshot_html, render_svg

__all__ = ["render_snapshot_html", "render_svg"]
