"""Toolkit-independent scene graph produced by the renderers.

A :class:`Scene` is a tree of :class:`Group` nodes and drawing primitives.
Groups that stand for a note or rest carry its ``(part_index, note_index)``
as ``target`` and the caller's click callback, so a front end only has to
hit-test and call :meth:`Group.activate`.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from typing import Literal, Union

NoteClickHandler = Callable[[int, int], None]


@dataclass(frozen=True)
class Line:
    x1: float
    y1: float
    x2: float
    y2: float
    stroke: str = "black"
    stroke_width: float = 1.0
    css_class: str = ""


@dataclass(frozen=True)
class Rect:
    x: float
    y: float
    width: float
    height: float
    fill: str | None = None
    stroke: str | None = "black"
    stroke_width: float = 1.0
    rx: float = 0.0
    css_class: str = ""


@dataclass(frozen=True)
class Ellipse:
    cx: float
    cy: float
    rx: float
    ry: float
    fill: str | None = None
    stroke: str | None = None
    stroke_width: float = 1.0
    css_class: str = ""


@dataclass(frozen=True)
class Circle:
    cx: float
    cy: float
    r: float
    fill: str | None = None
    stroke: str | None = None
    stroke_width: float = 1.0
    css_class: str = ""


@dataclass(frozen=True)
class HalfEllipse:
    """The left or right half of an ellipse, split along its vertical axis."""

    cx: float
    cy: float
    rx: float
    ry: float
    side: Literal["left", "right"]
    fill: str | None = None
    css_class: str = ""


@dataclass(frozen=True)
class Path:
    """Path data in local coordinates, translated by ``(x, y)``."""

    d: str
    x: float = 0.0
    y: float = 0.0
    fill: str | None = None
    stroke: str | None = "black"
    stroke_width: float = 1.0
    css_class: str = ""


@dataclass(frozen=True)
class Text:
    x: float
    y: float
    text: str
    font_size: float = 12.0
    fill: str = "black"
    anchor: Literal["start", "middle", "end"] = "middle"
    bold: bool = False
    css_class: str = ""


Primitive = Union[Line, Rect, Ellipse, Circle, HalfEllipse, Path, Text]


@dataclass
class Group:
    children: list[Node] = field(default_factory=list)
    css_class: str = ""
    target: tuple[int, int] | None = None
    on_click: NoteClickHandler | None = None

    def add(self, *nodes: Node) -> Group:
        self.children.extend(nodes)
        return self

    def activate(self) -> bool:
        """Fire the click callback for this group's note. Returns whether anything was called."""
        if self.target is None or self.on_click is None:
            return False
        self.on_click(*self.target)
        return True


Node = Union[Primitive, Group]


def has_class(node: Node, css_class: str) -> bool:
    return css_class in node.css_class.split()


@dataclass
class Scene:
    """
    Root of a rendered score.

    ``width`` and ``height`` are the natural pixel size; exporters scale from
    there and never re-run the layout.
    """

    width: float
    height: float
    children: list[Node] = field(default_factory=list)
    test_id: str = ""

    def walk(self) -> Iterator[Node]:
        """Depth-first traversal of every group and primitive in paint order."""
        stack: list[Node] = list(reversed(self.children))
        while stack:
            node = stack.pop()
            yield node
            if isinstance(node, Group):
                stack.extend(reversed(node.children))

    def primitives(self) -> Iterator[Primitive]:
        for node in self.walk():
            if not isinstance(node, Group):
                yield node

    def find(self, css_class: str) -> list[Node]:
        return [node for node in self.walk() if has_class(node, css_class)]

    def note_groups(self) -> list[Group]:
        return [node for node in self.walk() if isinstance(node, Group) and node.target is not None]

    def group_for(self, part_index: int, note_index: int) -> Group | None:
        for group in self.note_groups():
            if group.target == (part_index, note_index):
                return group
        return None

    def click(self, part_index: int, note_index: int) -> bool:
        """Simulate activating the primitive drawn for ``(part_index, note_index)``."""
        group = self.group_for(part_index, note_index)
        return group.activate() if group is not None else False
