"""
pdf_page.py

Write a decoration as a single-page PDF whose page is exactly the
decoration's bounding box. The page is described in SVG (svgwrite) and
converted with cairosvg.
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path

import cairosvg
import svgwrite

from underline_paths import Decoration


OUTPUT_FILENAME = "elegant-underline.pdf"


class EmptyArtworkError(Exception):
    """The composed path covers no area, so there is no page to write."""


def output_path_for(interactive: bool, standalone_path: str = OUTPUT_FILENAME) -> Path:
    """
    Standalone runs write next to the caller (a second run overwrites).
    Interactive runs get a fresh temporary directory each time.
    """
    if interactive:
        return Path(tempfile.mkdtemp(prefix="elegant-underline-")) / OUTPUT_FILENAME
    return Path(os.path.abspath(standalone_path))


def build_page_svg(decoration: Decoration) -> svgwrite.Drawing:
    if decoration.is_empty:
        raise EmptyArtworkError(f"style '{decoration.style}' produced nothing to draw")

    bounding_box = decoration.bounding_box
    width = f"{bounding_box.width:.4f}"
    height = f"{bounding_box.height:.4f}"
    # path data may carry exponent notation, which the attribute validator rejects
    drawing = svgwrite.Drawing(
        size=(f"{width}pt", f"{height}pt"),
        viewBox=f"0 0 {width} {height}",
        debug=False,
    )

    # y-up path coordinates; bounding box minimum lands on the page's bottom-left corner
    page_group = drawing.g(
        transform=f"matrix(1 0 0 -1 {-bounding_box.min_x:.4f} {bounding_box.max_y:.4f})"
    )
    path_attributes = {"d": decoration.d, "fill_rule": decoration.fill_rule}
    if decoration.fill is not None:
        path_attributes["fill"] = decoration.fill.to_hex()
    page_group.add(drawing.path(**path_attributes))
    drawing.add(page_group)
    return drawing


def write_pdf(decoration: Decoration, output_path: Path) -> Path:
    drawing = build_page_svg(decoration)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    cairosvg.svg2pdf(bytestring=drawing.tostring().encode("utf-8"), write_to=str(output_path))
    return output_path
