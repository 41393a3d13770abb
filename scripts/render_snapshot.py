#!/usr/bin/env python3
"""Render a settled explorer view of the term network to a standalone HTML file."""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from kasmo.config import ConfigError, load_config
from kasmo.export.viewer import render_snapshot_html
from kasmo.graph.loader import DatasetLoadError
from kasmo.ui.history import MemoryAddressBar, encode_fragment
from kasmo.ui.panel import MemorySurface, SidebarPanel
from kasmo.ui.service import ExplorerApp


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse command line arguments for the snapshot renderer.

    Returns:
        argparse.Namespace: Parsed command line arguments.
    """
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "dataset",
        nargs="?",
        default=None,
        help="Dataset URL or path (default: dataset.location from config.yaml)",
    )
    parser.add_argument("--config", type=Path, default=None, help="Alternative config.yaml")
    parser.add_argument("--select", default=None, help="Node id to select, as if given by #id=")
    parser.add_argument("--lang", choices=("so", "en"), default=None, help="Display language")
    parser.add_argument("--search", default=None, help="Search query to apply after selection")
    parser.add_argument("--ticks", type=int, default=300, help="Maximum simulation ticks (default: 300)")
    parser.add_argument("--width", type=float, default=1280.0, help="Window width (default: 1280)")
    parser.add_argument("--height", type=float, default=800.0, help="Window height (default: 800)")
    parser.add_argument("--output", type=Path, default=Path("kasmo_snapshot.html"), help="Output HTML path")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Entry point for the snapshot CLI.

    Returns:
        int: Exit status code where ``0`` indicates success.
    """
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="[%(levelname)s] %(message)s",
    )
    try:
        config = load_config(args.config)
    except ConfigError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 1

    updates = {}
    if args.dataset:
        updates["dataset"] = config.dataset.model_copy(update={"location": args.dataset})
    if args.lang:
        updates["language"] = config.language.model_copy(update={"default": args.lang})
    if updates:
        config = config.model_copy(update=updates)

    address = MemoryAddressBar(hash=encode_fragment(args.select) if args.select else "")
    surface = MemorySurface()
    app = ExplorerApp(config, SidebarPanel.in_memory(), surface, address)
    try:
        app.start(args.width, args.height)
    except DatasetLoadError as exc:
        print(str(exc), file=sys.stderr)
        return 1

    ticks = app.components.engine.settle(args.ticks)
    if args.search:
        app.on_search_input(args.search)
    args.output.write_text(render_snapshot_html(app), encoding="utf-8")
    print(
        "Snapshot written",
        f"path={args.output}",
        f"ticks={ticks}",
        f"selected={app.state.current_id}",
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
