"""Utilities for rendering explorer snapshots as SVG and standalone HTML."""

from __future__ import annotations

import html
import json
from typing import Final, List

from kasmo.ui.panel import SidebarPanel
from kasmo.ui.scene import RenderingLayer, TextMark, format_number
from kasmo.ui.service import ExplorerApp
from kasmo.ui.viewport import IDENTITY, ZoomTransform

SNAPSHOT_TITLE: Final[str] = "Kasmo"


def _escape_script_value(value: str) -> str:
    """Escape a JSON string so it is safe for inline ``<script>`` embedding.

    Args:
        value: Raw JSON string produced by ``json.dumps``.

    Returns:
        The escaped string that will not prematurely close the surrounding script
        tag and preserves line separator characters.
    """

    return (
        value.replace("</", "<\\/")
        .replace("\u2028", "\\u2028")
        .replace("\u2029", "\\u2029")
    )


def _attr(value: object) -> str:
    if isinstance(value, float):
        return format_number(value)
    return html.escape(str(value), quote=True)


def _text_element(mark: TextMark, scene: RenderingLayer) -> str:
    config = scene.config
    common = (
        f'x="{_attr(mark.x)}" y="{_attr(mark.y)}" text-anchor="middle" '
        f'font-size="{_attr(mark.font_size)}px" font-weight="{mark.font_weight}" '
        f'font-family="{_attr(config.font_family)}" opacity="{_attr(mark.opacity)}" '
        f'pointer-events="none" data-id="{_attr(mark.node_id)}"'
    )
    if mark.css_class == "halo":
        paint = (
            f'fill="white" stroke="white" stroke-width="{_attr(config.halo_stroke_width)}" '
            'paint-order="stroke"'
        )
    else:
        paint = f'fill="{_attr(config.label_color)}"'
    return f'<text class="{mark.css_class}" {common} {paint}>{html.escape(mark.text)}</text>'


def render_svg(scene: RenderingLayer, transform: ZoomTransform = IDENTITY) -> str:
    """Serialise the scene's current marks into an SVG document fragment.

    Edges are drawn first, then circles, then halos and labels, so labels stay
    on top of the graph.
    """

    lines: List[str] = [
        (
            f'<svg xmlns="http://www.w3.org/2000/svg" width="{_attr(float(scene.width))}" '
            f'height="{_attr(float(scene.height))}" role="img" aria-label="{_attr(scene.config.aria_label)}">'
        ),
        f'<g transform="{transform.to_svg()}">',
        '<g fill="none">',
    ]
    for path in scene.paths:
        lines.append(
            f'<path d="{path.d}" stroke="{_attr(path.stroke)}" stroke-opacity="{_attr(path.stroke_opacity)}" '
            f'stroke-width="{_attr(path.stroke_width)}" data-source="{_attr(path.source)}" '
            f'data-target="{_attr(path.target)}"/>'
        )
    lines.append("</g>")
    lines.append("<g>")
    for circle in scene.circles:
        lines.append(
            f'<circle cx="{_attr(circle.cx)}" cy="{_attr(circle.cy)}" r="{_attr(circle.r)}" '
            f'fill="{_attr(circle.fill)}" stroke="{_attr(circle.stroke)}" '
            f'stroke-width="{_attr(circle.stroke_width)}" opacity="{_attr(circle.opacity)}" '
            f'tabindex="{circle.tabindex}" data-id="{_attr(circle.node_id)}"/>'
        )
    lines.append("</g>")
    lines.append("<g>")
    lines.extend(_text_element(mark, scene) for mark in scene.halos)
    lines.extend(_text_element(mark, scene) for mark in scene.labels)
    lines.append("</g>")
    lines.append("</g>")
    lines.append("</svg>")
    return "\n".join(lines)


def _widget_markup(widget: object) -> str:
    html_value = getattr(widget, "html", "")
    if html_value:
        return str(html_value)
    return html.escape(str(getattr(widget, "text", "")))


def _sidebar_markup(panel: SidebarPanel) -> str:
    return "\n".join(
        [
            f'<h2 id="selected-label">{_widget_markup(panel.selected_label)}</h2>',
            f'<div id="definition">{_widget_markup(panel.definition)}</div>',
            f'<div id="related">{_widget_markup(panel.related)}</div>',
            f'<div id="tags">{_widget_markup(panel.tags)}</div>',
        ]
    )


def render_snapshot_html(app: ExplorerApp) -> str:
    """Render the explorer's current scene and sidebar as a standalone page."""

    components = app.components
    state_payload = _escape_script_value(
        json.dumps(
            {
                "selected": components.state.current_id,
                "language": components.state.language.value,
                "fragment": app.address.hash,
                "nodes": len(components.state.graph.nodes),
                "edges": len(components.state.graph.edges),
            },
            separators=(",", ":"),
            ensure_ascii=False,
        )
    )
    html_template = """<!DOCTYPE html>
<html lang="__LANG__">
  <head>
    <meta charset="utf-8" />
    <title>__TITLE__</title>
    <style>
      body { margin: 0; display: flex; font-family: system-ui, -apple-system, "Segoe UI", sans-serif; }
      #quarto-sidebar { width: 280px; padding: 1rem; border-right: 1px solid #e5e7eb; }
      #graph { flex: 1; }
      .text-muted, .muted { color: #6b7280; }
      .related-list { padding-left: 1.2rem; }
    </style>
  </head>
  <body>
    <aside id="quarto-sidebar">
__SIDEBAR__
    </aside>
    <main id="graph">
__SVG__
    </main>
    <script type="application/json" id="kasmo-state">__STATE__</script>
  </body>
</html>
"""
    return (
        html_template.replace("__LANG__", components.state.language.value)
        .replace("__TITLE__", html.escape(SNAPSHOT_TITLE))
        .replace("__SIDEBAR__", _sidebar_markup(app.panel))
        .replace("__SVG__", render_svg(components.scene, components.viewport.zoom.transform))
        .replace("__STATE__", state_payload)
    )


__all__ = ["render_snapshot_html", "render_svg"]
