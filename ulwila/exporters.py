"""ScoreExporter: writes a score to SVG, PNG, PDF, HTML or JSON files."""

from __future__ import annotations

import logging
from typing import Final

from ulwila.i18n import DEFAULT_LANGUAGE, display_title
from ulwila.persistence import sanitize_filename, save_score
from ulwila.raster import PNG_SCALE, PdfPageLayout, scene_to_pdf, scene_to_png
from ulwila.scene import Scene
from ulwila.score_models import Score, Selection
from ulwila.score_renderers import DEFAULT_WIDTH, build_renderer
from ulwila.svg_writer import scene_to_svg

logger = logging.getLogger(__name__)

SUPPORTED_FORMATS: Final[set[str]] = {"svg", "png", "pdf", "html", "json"}

FORMAT_EXTENSIONS: Final[dict[str, str]] = {
    "svg": ".svg",
    "png": ".png",
    "pdf": ".pdf",
    "html": ".html",
    "json": ".json",
}


def _escape_html(text: str) -> str:
    """Escape the three characters that are unsafe in HTML text content."""
    return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def default_filename(score: Score, output_format: str) -> str:
    """``<sanitized title>.<ext>``, e.g. ``Twinkle_Twinkle.pdf``."""
    return sanitize_filename(score.title) + FORMAT_EXTENSIONS[output_format]


def build_html(title: str, svg: str, scene_width: float = DEFAULT_WIDTH) -> str:
    """
    Wrap one rendered SVG in a self-contained HTML sheet.

    The sheet mirrors the PDF export: an A4 portrait page with 15 mm margins,
    the title on top and the score scaled down to the printable width. On
    screen the score keeps its natural ``scene_width`` at most. The ``<h1>``
    is only emitted for a non-empty title.
    """
    layout = PdfPageLayout()
    title_safe = _escape_html(title)
    heading = f'    <h1 class="score-title">{title_safe}</h1>\n' if title else ""

    return f"""<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8" />
  <meta name="viewport" content="width=device-width, initial-scale=1.0" />
  <title>{title_safe}</title>
  <style>
    @page {{ size: A4 portrait; margin: {layout.MARGIN:g}mm; }}
    body {{ margin: 0; background: #e8e8e8; font-family: sans-serif; }}
    .sheet {{
      background: #fff;
      width: {layout.content_width:g}mm;
      min-height: {layout.content_height:g}mm;
      margin: 1.5rem auto;
      padding: {layout.MARGIN:g}mm;
    }}
    .score-title {{
      height: {layout.TITLE_AREA_HEIGHT:g}mm;
      margin: 0;
      text-align: center;
      font-size: {layout.TITLE_FONT_PT:g}pt;
    }}
    .score svg {{ display: block; width: 100%; max-width: {scene_width:g}px; height: auto; margin: 0 auto; }}
    @media print {{
      body {{ background: none; }}
      .sheet {{ margin: 0; padding: 0; min-height: auto; }}
    }}
  </style>
</head>
<body>
  <main class="sheet">
{heading}    <figure class="score">{svg}</figure>
  </main>
</body>
</html>
"""


class ScoreExporter:
    """
    Export a score through the renderer matching its rendering mode.

    Supported formats:
    - ``svg``:  standalone vector scene at the natural pixel size.
    - ``png``:  raster at 2x the natural pixel size.
    - ``pdf``:  one A4 page with the title and the score scaled to fit.
    - ``html``: printable page with the inline SVG.
    - ``json``: the score document itself.
    """

    def __init__(
        self,
        output_format: str = "svg",
        width: float = DEFAULT_WIDTH,
        language: str = DEFAULT_LANGUAGE,
        png_scale: float = PNG_SCALE,
    ) -> None:
        normalized = output_format.strip().lower()
        if normalized not in SUPPORTED_FORMATS:
            supported = ", ".join(sorted(SUPPORTED_FORMATS))
            raise ValueError(f"Unsupported output format '{output_format}'. Use one of: {supported}.")
        if width <= 0:
            raise ValueError(f"Width must be positive, got {width}.")
        self.output_format = normalized
        self.width = width
        self.language = language
        self.png_scale = png_scale

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _render_scene(self, score: Score, selection: Selection | None) -> Scene:
        renderer = build_renderer(score.rendering_mode, self.width)
        return renderer.render(score, selection)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def render_svg(self, score: Score, selection: Selection | None = None) -> str:
        return scene_to_svg(self._render_scene(score, selection), xml_declaration=True)

    def render_html(self, score: Score, selection: Selection | None = None) -> str:
        scene = self._render_scene(score, selection)
        return build_html(score.title, scene_to_svg(scene), scene.width)

    def export(self, score: Score, output_path: str, selection: Selection | None = None) -> None:
        """
        Write ``score`` to ``output_path`` in the configured format.

        Raises:
            ExportError: If the scene cannot be rasterized (png, pdf).
            OSError:     If the output file cannot be written.
        """
        logger.info(
            "exporting %r as %s (%s mode) to %s",
            score.title,
            self.output_format,
            score.rendering_mode,
            output_path,
        )
        if self.output_format == "json":
            save_score(score, output_path)
            return

        if self.output_format == "png":
            scene_to_png(self._render_scene(score, selection), output_path, scale=self.png_scale)
        elif self.output_format == "pdf":
            scene_to_pdf(
                self._render_scene(score, selection),
                output_path,
                title=display_title(score.title, self.language),
            )
        else:
            content = (
                self.render_html(score, selection)
                if self.output_format == "html"
                else self.render_svg(score, selection)
            )
            with open(output_path, "w", encoding="utf-8") as fh:
                fh.write(content)
