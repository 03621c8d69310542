"""Paint a :class:`Scene` onto a Pillow image for PNG and PDF export."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from functools import lru_cache
from typing import Final

from PIL import Image, ImageDraw, ImageFont

from ulwila.scene import (
    Circle,
    Ellipse,
    HalfEllipse,
    Line,
    Path,
    Primitive,
    Rect,
    Scene,
    Text,
)
from ulwila.staff_symbols import parse_path

logger = logging.getLogger(__name__)

PNG_SCALE: Final[int] = 2
_CURVE_STEPS: Final[int] = 12
_PILLOW_ANCHORS: Final[dict[str, str]] = {"start": "ls", "middle": "ms", "end": "rs"}

Point = tuple[float, float]


class ExportError(RuntimeError):
    """Raised when a scene cannot be turned into an image or document."""


@lru_cache(maxsize=32)
def _font(size: int) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
    try:
        return ImageFont.truetype("DejaVuSans.ttf", size)
    except OSError:
        return ImageFont.load_default(size=size)


def _cubic(p0: Point, p1: Point, p2: Point, p3: Point) -> list[Point]:
    points = []
    for step in range(1, _CURVE_STEPS + 1):
        t = step / _CURVE_STEPS
        u = 1 - t
        points.append(
            (
                u**3 * p0[0] + 3 * u**2 * t * p1[0] + 3 * u * t**2 * p2[0] + t**3 * p3[0],
                u**3 * p0[1] + 3 * u**2 * t * p1[1] + 3 * u * t**2 * p2[1] + t**3 * p3[1],
            )
        )
    return points


def _quadratic(p0: Point, p1: Point, p2: Point) -> list[Point]:
    points = []
    for step in range(1, _CURVE_STEPS + 1):
        t = step / _CURVE_STEPS
        u = 1 - t
        points.append(
            (
                u**2 * p0[0] + 2 * u * t * p1[0] + t**2 * p2[0],
                u**2 * p0[1] + 2 * u * t * p1[1] + t**2 * p2[1],
            )
        )
    return points


def flatten_path(d: str) -> list[tuple[list[Point], bool]]:
    """
    Turn path data into polylines.

    Returns:
        One ``(points, closed)`` entry per subpath, in local coordinates.
    """
    subpaths: list[tuple[list[Point], bool]] = []
    points: list[Point] = []

    for command, args in parse_path(d):
        if command == "M":
            if len(points) > 1:
                subpaths.append((points, False))
            points = [(args[0], args[1])]
        elif command == "L":
            points.append((args[0], args[1]))
        elif command == "C":
            points.extend(_cubic(points[-1], (args[0], args[1]), (args[2], args[3]), (args[4], args[5])))
        elif command == "Q":
            points.extend(_quadratic(points[-1], (args[0], args[1]), (args[2], args[3])))
        elif command == "Z":
            subpaths.append((points, True))
            points = [points[0]] if points else []
    if len(points) > 1:
        subpaths.append((points, False))
    return subpaths


class ScenePainter:
    """Rasterize scene primitives with ``ImageDraw`` at a fixed scale."""

    def __init__(self, scale: float = 1.0) -> None:
        if scale <= 0:
            raise ValueError(f"Scale must be positive, got {scale}.")
        self.scale = scale

    def paint(self, scene: Scene) -> Image.Image:
        """
        Paint ``scene`` onto a new white RGB image.

        Raises:
            ExportError: If a primitive cannot be drawn.
        """
        size = (max(1, math.ceil(scene.width * self.scale)), max(1, math.ceil(scene.height * self.scale)))
        image = Image.new("RGB", size, "white")
        draw = ImageDraw.Draw(image)
        for primitive in scene.primitives():
            try:
                self._draw(draw, primitive)
            except (ValueError, TypeError) as exc:
                raise ExportError(f"Could not draw {type(primitive).__name__}: {exc}") from exc
        logger.debug("painted %dx%d image at scale %s", size[0], size[1], self.scale)
        return image

    # ------------------------------------------------------------------
    # Primitive dispatch
    # ------------------------------------------------------------------

    def _px(self, value: float) -> float:
        return value * self.scale

    def _width(self, stroke_width: float) -> int:
        return max(1, round(stroke_width * self.scale))

    def _box(self, cx: float, cy: float, rx: float, ry: float) -> list[float]:
        return [self._px(cx - rx), self._px(cy - ry), self._px(cx + rx), self._px(cy + ry)]

    def _draw(self, draw: ImageDraw.ImageDraw, primitive: Primitive) -> None:
        if isinstance(primitive, Line):
            draw.line(
                [(self._px(primitive.x1), self._px(primitive.y1)), (self._px(primitive.x2), self._px(primitive.y2))],
                fill=primitive.stroke,
                width=self._width(primitive.stroke_width),
            )
        elif isinstance(primitive, Rect):
            box = [
                self._px(primitive.x),
                self._px(primitive.y),
                self._px(primitive.x + primitive.width),
                self._px(primitive.y + primitive.height),
            ]
            draw.rounded_rectangle(
                box,
                radius=self._px(primitive.rx),
                fill=primitive.fill,
                outline=primitive.stroke,
                width=self._width(primitive.stroke_width),
            )
        elif isinstance(primitive, (Ellipse, Circle)):
            if isinstance(primitive, Circle):
                rx = ry = primitive.r
            else:
                rx, ry = primitive.rx, primitive.ry
            if rx <= 0 or ry <= 0:
                return
            draw.ellipse(
                self._box(primitive.cx, primitive.cy, rx, ry),
                fill=primitive.fill,
                outline=primitive.stroke,
                width=self._width(primitive.stroke_width) if primitive.stroke else 0,
            )
        elif isinstance(primitive, HalfEllipse):
            # Pillow angles run clockwise from three o'clock.
            start, end = (90, 270) if primitive.side == "left" else (-90, 90)
            draw.chord(
                self._box(primitive.cx, primitive.cy, primitive.rx, primitive.ry),
                start,
                end,
                fill=primitive.fill,
            )
        elif isinstance(primitive, Path):
            self._draw_path(draw, primitive)
        elif isinstance(primitive, Text):
            font = _font(max(1, round(primitive.font_size * self.scale)))
            draw.text(
                (self._px(primitive.x), self._px(primitive.y)),
                primitive.text,
                fill=primitive.fill,
                font=font,
                anchor=_PILLOW_ANCHORS[primitive.anchor],
                stroke_width=1 if primitive.bold else 0,
                stroke_fill=primitive.fill,
            )
        else:
            raise TypeError(f"unsupported primitive {primitive!r}")

    def _draw_path(self, draw: ImageDraw.ImageDraw, path: Path) -> None:
        for local_points, closed in flatten_path(path.d):
            points = [(self._px(x + path.x), self._px(y + path.y)) for x, y in local_points]
            if len(points) < 2:
                continue
            if closed and path.fill:
                draw.polygon(points, fill=path.fill)
            if path.stroke:
                outline = points + [points[0]] if closed else points
                draw.line(outline, fill=path.stroke, width=self._width(path.stroke_width), joint="curve")


# ── PNG ──────────────────────────────────────────────────────────────────────

def scene_to_png(scene: Scene, output_path: str, scale: float = PNG_SCALE) -> None:
    """
    Write ``scene`` as a PNG at ``scale`` times its natural pixel size.

    Raises:
        ExportError: If the scene cannot be rasterized.
        OSError:     If the output file cannot be written.
    """
    image = ScenePainter(scale).paint(scene)
    image.save(output_path, format="PNG")
    logger.info("wrote PNG %s (%dx%d)", output_path, image.width, image.height)


# ── PDF ──────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Placement:
    """Position and size of the score image on the page, in millimetres."""

    x: float
    y: float
    width: float
    height: float


class PdfPageLayout:
    """A4 portrait page with a title block above a fitted score image."""

    PAGE_WIDTH: Final[float] = 210
    PAGE_HEIGHT: Final[float] = 297
    MARGIN: Final[float] = 15
    TITLE_AREA_HEIGHT: Final[float] = 20
    TITLE_FONT_PT: Final[float] = 16
    DPI: Final[int] = 150
    RASTER_SCALE: Final[int] = 3

    @property
    def content_width(self) -> float:
        return self.PAGE_WIDTH - 2 * self.MARGIN

    @property
    def content_height(self) -> float:
        return self.PAGE_HEIGHT - 2 * self.MARGIN

    def mm_to_px(self, mm: float) -> int:
        return round(mm / 25.4 * self.DPI)

    def fit(self, scene_width: float, scene_height: float) -> Placement:
        """Scale to the content width, shrink to the free height if needed, center horizontally."""
        aspect_ratio = scene_height / scene_width
        available_height = self.content_height - self.TITLE_AREA_HEIGHT

        width = self.content_width
        height = width * aspect_ratio
        if height > available_height:
            height = available_height
            width = available_height / aspect_ratio

        x = self.MARGIN + (self.content_width - width) / 2
        return Placement(x=x, y=self.MARGIN + self.TITLE_AREA_HEIGHT, width=width, height=height)

    def compose(self, scene: Scene, title: str) -> Image.Image:
        page = Image.new("RGB", (self.mm_to_px(self.PAGE_WIDTH), self.mm_to_px(self.PAGE_HEIGHT)), "white")
        draw = ImageDraw.Draw(page)
        title_px = round(self.TITLE_FONT_PT / 72 * self.DPI)
        draw.text(
            (self.mm_to_px(self.PAGE_WIDTH / 2), self.mm_to_px(self.MARGIN + 10)),
            title,
            fill="black",
            font=_font(title_px),
            anchor="ms",
        )

        placement = self.fit(scene.width, scene.height)
        raster = ScenePainter(self.RASTER_SCALE).paint(scene)
        size = (max(1, self.mm_to_px(placement.width)), max(1, self.mm_to_px(placement.height)))
        page.paste(raster.resize(size, Image.Resampling.LANCZOS), (self.mm_to_px(placement.x), self.mm_to_px(placement.y)))
        return page


def scene_to_pdf(scene: Scene, output_path: str, title: str) -> None:
    """
    Write ``scene`` onto a single A4 PDF page under a centered ``title``.

    Raises:
        ExportError: If the scene cannot be rasterized.
        OSError:     If the output file cannot be written.
    """
    layout = PdfPageLayout()
    page = layout.compose(scene, title)
    page.save(output_path, format="PDF", resolution=float(layout.DPI))
    logger.info("wrote PDF %s", output_path)
