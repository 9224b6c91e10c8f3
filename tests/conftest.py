from __future__ import annotations

from pathlib import Path

import pytest
from fontTools.fontBuilder import FontBuilder
from fontTools.pens.ttGlyphPen import TTGlyphPen


UNITS_PER_EM = 1000
FAMILY_NAME = "Underline Test"
POSTSCRIPT_NAME = "UnderlineTest-Regular"


def rectangle_contour(pen: TTGlyphPen, x_min: int, y_min: int, x_max: int, y_max: int, clockwise: bool = True) -> None:
    corners = [(x_min, y_min), (x_min, y_max), (x_max, y_max), (x_max, y_min)]
    if not clockwise:
        corners.reverse()
    pen.moveTo(corners[0])
    for corner in corners[1:]:
        pen.lineTo(corner)
    pen.closePath()


def build_glyphs():
    """
    Box-shaped glyphs at 1000 units per em:
      H  100..600 x    0..700               advance 700
      i  100..250 x    0..500               advance 350
      g  100..500 x -200..500, counter      advance 600
    """
    glyphs = {}

    glyphs[".notdef"] = TTGlyphPen(None).glyph()
    glyphs["space"] = TTGlyphPen(None).glyph()

    pen = TTGlyphPen(None)
    rectangle_contour(pen, 100, 0, 600, 700)
    glyphs["H"] = pen.glyph()

    pen = TTGlyphPen(None)
    rectangle_contour(pen, 100, 0, 250, 500)
    glyphs["i"] = pen.glyph()

    pen = TTGlyphPen(None)
    rectangle_contour(pen, 100, -200, 500, 500)
    rectangle_contour(pen, 200, 100, 400, 400, clockwise=False)
    glyphs["g"] = pen.glyph()
    return glyphs


@pytest.fixture(scope="session")
def font_directory(tmp_path_factory) -> Path:
    directory = tmp_path_factory.mktemp("fonts")
    glyph_order = [".notdef", "space", "H", "i", "g"]
    advance_widths = {".notdef": 500, "space": 250, "H": 700, "i": 350, "g": 600}

    builder = FontBuilder(UNITS_PER_EM, isTTF=True)
    builder.setupGlyphOrder(glyph_order)
    builder.setupCharacterMap({ord(" "): "space", ord("H"): "H", ord("i"): "i", ord("g"): "g"})
    builder.setupGlyf(build_glyphs())
    builder.setupMaxp()
    glyph_table = builder.font["glyf"]
    builder.setupHorizontalMetrics(
        {name: (advance_widths[name], getattr(glyph_table[name], "xMin", 0)) for name in glyph_order}
    )
    builder.setupHorizontalHeader(ascent=800, descent=-200)
    builder.setupNameTable(
        {
            "familyName": FAMILY_NAME,
            "styleName": "Regular",
            "fullName": f"{FAMILY_NAME} Regular",
            "psName": POSTSCRIPT_NAME,
        }
    )
    builder.setupOS2(sTypoAscender=800, sTypoDescender=-200, usWinAscent=800, usWinDescent=200)
    builder.setupPost(underlinePosition=-100, underlineThickness=50)
    builder.save(str(directory / f"{POSTSCRIPT_NAME}.ttf"))
    return directory


@pytest.fixture(scope="session")
def font_path(font_directory) -> Path:
    return font_directory / f"{POSTSCRIPT_NAME}.ttf"
