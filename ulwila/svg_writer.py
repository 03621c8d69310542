"""Serialize a :class:`Scene` into a standalone SVG document."""

from __future__ import annotations

import re

from ulwila.scene import (
    Circle,
    Ellipse,
    Group,
    HalfEllipse,
    Line,
    Node,
    Path,
    Rect,
    Scene,
    Text,
)

SVG_NAMESPACE = "http://www.w3.org/2000/svg"

# Anything outside the XML 1.0 Char production, e.g. vertical tab or NUL.
_INVALID_XML_CHARS = re.compile(r"[^\x09\x0A\x0D\x20-\uD7FF\uE000-\uFFFD\U00010000-\U0010FFFF]")


def _escape_xml(text: str) -> str:
    """Escape characters that are unsafe in XML text and attribute values; drop ones XML cannot hold."""
    return (
        _INVALID_XML_CHARS.sub("", text)
        .replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
    )


def _num(value: float) -> str:
    """Compact number formatting: 60.0 -> '60', 12.5 -> '12.5'."""
    return format(round(float(value), 3), "g")


def _paint(fill: str | None, stroke: str | None, stroke_width: float) -> str:
    parts = [f'fill="{_escape_xml(fill) if fill else "none"}"']
    if stroke:
        parts.append(f'stroke="{_escape_xml(stroke)}" stroke-width="{_num(stroke_width)}"')
    return " ".join(parts)


def _class_attr(css_class: str) -> str:
    return f' class="{_escape_xml(css_class)}"' if css_class else ""


def half_ellipse_path(shape: HalfEllipse) -> str:
    """Arc path for one vertical half of an ellipse, closed along its axis."""
    sweep = 0 if shape.side == "left" else 1
    top = shape.cy - shape.ry
    bottom = shape.cy + shape.ry
    return (
        f"M {_num(shape.cx)} {_num(top)} "
        f"A {_num(shape.rx)} {_num(shape.ry)} 0 1 {sweep} {_num(shape.cx)} {_num(bottom)} Z"
    )


def _element(node: Node, indent: str) -> list[str]:
    if isinstance(node, Group):
        attrs = _class_attr(node.css_class)
        if node.target is not None:
            part_index, note_index = node.target
            attrs += f' data-part="{part_index}" data-note="{note_index}" style="cursor: pointer"'
        lines = [f"{indent}<g{attrs}>"]
        for child in node.children:
            lines.extend(_element(child, indent + "  "))
        lines.append(f"{indent}</g>")
        return lines

    if isinstance(node, Line):
        markup = (
            f'<line x1="{_num(node.x1)}" y1="{_num(node.y1)}" x2="{_num(node.x2)}" y2="{_num(node.y2)}" '
            f'stroke="{_escape_xml(node.stroke)}" stroke-width="{_num(node.stroke_width)}"'
            f"{_class_attr(node.css_class)} />"
        )
    elif isinstance(node, Rect):
        rounding = f' rx="{_num(node.rx)}"' if node.rx else ""
        markup = (
            f'<rect x="{_num(node.x)}" y="{_num(node.y)}" width="{_num(node.width)}" '
            f'height="{_num(node.height)}"{rounding} {_paint(node.fill, node.stroke, node.stroke_width)}'
            f"{_class_attr(node.css_class)} />"
        )
    elif isinstance(node, Ellipse):
        markup = (
            f'<ellipse cx="{_num(node.cx)}" cy="{_num(node.cy)}" rx="{_num(node.rx)}" ry="{_num(node.ry)}" '
            f"{_paint(node.fill, node.stroke, node.stroke_width)}{_class_attr(node.css_class)} />"
        )
    elif isinstance(node, Circle):
        markup = (
            f'<circle cx="{_num(node.cx)}" cy="{_num(node.cy)}" r="{_num(node.r)}" '
            f"{_paint(node.fill, node.stroke, node.stroke_width)}{_class_attr(node.css_class)} />"
        )
    elif isinstance(node, HalfEllipse):
        markup = (
            f'<path d="{half_ellipse_path(node)}" {_paint(node.fill, None, 0)}'
            f"{_class_attr(node.css_class)} />"
        )
    elif isinstance(node, Path):
        transform = f' transform="translate({_num(node.x)},{_num(node.y)})"' if (node.x or node.y) else ""
        markup = (
            f'<path d="{_escape_xml(node.d)}"{transform} '
            f"{_paint(node.fill, node.stroke, node.stroke_width)}{_class_attr(node.css_class)} />"
        )
    elif isinstance(node, Text):
        weight = ' font-weight="bold"' if node.bold else ""
        markup = (
            f'<text x="{_num(node.x)}" y="{_num(node.y)}" font-size="{_num(node.font_size)}"{weight} '
            f'text-anchor="{node.anchor}" fill="{_escape_xml(node.fill)}"'
            f"{_class_attr(node.css_class)}>{_escape_xml(node.text)}</text>"
        )
    else:
        raise TypeError(f"Unsupported scene node: {type(node).__name__}")
    return [indent + markup]


def scene_to_svg(scene: Scene, xml_declaration: bool = False) -> str:
    """
    Render ``scene`` as a self-contained SVG document with a fixed pixel size.

    Args:
        scene:           Scene produced by one of the score renderers.
        xml_declaration: Prefix an ``<?xml ...?>`` line, as standalone ``.svg`` files expect.
    """
    width = _num(scene.width)
    height = _num(scene.height)
    test_id = f' data-testid="{_escape_xml(scene.test_id)}"' if scene.test_id else ""
    lines: list[str] = []
    if xml_declaration:
        lines.append('<?xml version="1.0" encoding="UTF-8"?>')
    lines.append(
        f'<svg xmlns="{SVG_NAMESPACE}" width="{width}" height="{height}" '
        f'viewBox="0 0 {width} {height}"{test_id}>'
    )
    lines.append(f'  <rect x="0" y="0" width="{width}" height="{height}" fill="white" />')
    for node in scene.children:
        lines.extend(_element(node, "  "))
    lines.append("</svg>")
    return "\n".join(lines) + "\n"
