"""
glyph_outlines.py

Shape a line of text and merge its glyph outlines into one path.

Font lookup accepts a font file path, or a family / full / PostScript name
that is matched through fontconfig and then against the `name` table of the
fonts in the usual system font folders. Outlines come out in points, in the
font's own y-up space with the baseline at y = 0.
"""

from __future__ import annotations

import re
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Sequence, Set, Tuple

import uharfbuzz as hb
from fontTools.pens.svgPathPen import SVGPathPen
from fontTools.ttLib import TTCollection, TTFont, TTLibError
from shapely.geometry import Polygon
from shapely.geometry.base import BaseGeometry
from shapely.ops import unary_union
from svgpathtools import Line
from svgpathtools import Path as SvgPath
from svgpathtools import parse_path


FONT_FILE_SUFFIXES = (".ttf", ".otf", ".ttc", ".otc")
COLLECTION_SUFFIXES = (".ttc", ".otc")
FONT_DIRECTORIES = (
    "/System/Library/Fonts",
    "/Library/Fonts",
    "~/Library/Fonts",
    "/usr/share/fonts",
    "/usr/local/share/fonts",
    "~/.fonts",
    "~/.local/share/fonts",
)
# name IDs: family, full name, PostScript name, typographic family
MATCHED_NAME_IDS = (1, 4, 6, 16)
DEFAULT_CURVE_SAMPLES = 16
FALLBACK_UNDERLINE_THICKNESS_EM = 1.0 / 20.0


class FontNotFoundError(Exception):
    pass


# ------------------------------------------------------------ #
# Geometry records                                             #
# ------------------------------------------------------------ #
@dataclass(frozen=True)
class BoundingBox:
    min_x: float
    min_y: float
    width: float
    height: float

    @property
    def max_x(self) -> float:
        return self.min_x + self.width

    @property
    def max_y(self) -> float:
        return self.min_y + self.height

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0

    @classmethod
    def empty(cls) -> "BoundingBox":
        return cls(0.0, 0.0, 0.0, 0.0)

    @classmethod
    def from_bounds(cls, min_x: float, min_y: float, max_x: float, max_y: float) -> "BoundingBox":
        """Build from shapely's (minx, miny, maxx, maxy) ordering."""
        return cls(min_x, min_y, max_x - min_x, max_y - min_y)

    @classmethod
    def from_svg_bbox(cls, x_min: float, x_max: float, y_min: float, y_max: float) -> "BoundingBox":
        """Build from svgpathtools' (xmin, xmax, ymin, ymax) ordering."""
        return cls(x_min, y_min, x_max - x_min, y_max - y_min)


@dataclass(frozen=True)
class UnderlineMetrics:
    position: float
    thickness: float


@dataclass(frozen=True)
class FontMetrics:
    font_size: float
    units_per_em: int
    descent: float
    underline_position: float
    underline_thickness: float

    @property
    def underline(self) -> UnderlineMetrics:
        return UnderlineMetrics(position=self.underline_position, thickness=self.underline_thickness)

    @classmethod
    def from_font(cls, font: TTFont, font_size: float) -> "FontMetrics":
        """All values in points; descent is a positive distance below the baseline."""
        units_per_em = font["head"].unitsPerEm
        scale = font_size / units_per_em
        underline_position = 0
        underline_thickness = 0
        if "post" in font:
            underline_position = font["post"].underlinePosition
            underline_thickness = font["post"].underlineThickness
        if underline_thickness <= 0:
            underline_thickness = units_per_em * FALLBACK_UNDERLINE_THICKNESS_EM
        return cls(
            font_size=font_size,
            units_per_em=units_per_em,
            descent=abs(font["hhea"].descent) * scale,
            underline_position=underline_position * scale,
            underline_thickness=underline_thickness * scale,
        )


@dataclass
class LoadedFont:
    path: Path
    face_index: int
    font: TTFont
    data: bytes = field(repr=False)


@dataclass(frozen=True)
class GlyphOutline:
    glyph_name: str
    path: SvgPath
    pen_position: Tuple[float, float]


@dataclass
class TextOutline:
    glyphs: List[GlyphOutline] = field(default_factory=list)

    def merged_path(self) -> SvgPath:
        return SvgPath(*[segment for glyph in self.glyphs for segment in glyph.path])

    def svg_d(self) -> str:
        if not self.glyphs:
            return ""
        return self.merged_path().d()

    @property
    def bounding_box(self) -> BoundingBox:
        if not self.glyphs:
            return BoundingBox.empty()
        return BoundingBox.from_svg_bbox(*self.merged_path().bbox())

    def silhouette(self, curve_samples: int = DEFAULT_CURVE_SAMPLES) -> BaseGeometry:
        """
        Filled area covered by the glyphs, with curves flattened.

        Contours of one glyph combine even-odd so counters stay open;
        separate glyphs are unioned so overlapping neighbours do not cancel.
        """
        glyph_shapes = [glyph_silhouette(glyph.path, curve_samples) for glyph in self.glyphs]
        return unary_union(glyph_shapes)


# ------------------------------------------------------------ #
# Font lookup                                                  #
# ------------------------------------------------------------ #
def normalize_font_name(name: str) -> str:
    return re.sub(r"[^a-z0-9]+", "", name.lower().lstrip("."))


def face_names(font: TTFont) -> Set[str]:
    names: Set[str] = set()
    if "name" not in font:
        return names
    for name_id in MATCHED_NAME_IDS:
        value = font["name"].getDebugName(name_id)
        if value:
            names.add(normalize_font_name(value))
    return names


def iter_font_faces(font_file: Path) -> Iterator[Tuple[int, TTFont]]:
    if font_file.suffix.lower() in COLLECTION_SUFFIXES:
        collection = TTCollection(str(font_file), lazy=True)
        for face_index, font in enumerate(collection.fonts):
            yield face_index, font
    else:
        yield 0, TTFont(str(font_file), lazy=True)


def match_font_with_fontconfig(font_name: str) -> Optional[Tuple[Path, int]]:
    """Ask fontconfig for its best match. It always answers, so callers verify the face."""
    try:
        result = subprocess.run(
            ["fc-match", "--format=%{file}\\n%{index}", font_name],
            capture_output=True,
            text=True,
            timeout=5,
        )
    except (OSError, subprocess.SubprocessError):
        return None
    if result.returncode != 0:
        return None
    lines = result.stdout.strip().splitlines()
    if not lines:
        return None
    font_file = Path(lines[0])
    face_index = int(lines[1]) if len(lines) > 1 and lines[1].isdigit() else 0
    if not font_file.is_file():
        return None
    return font_file, face_index


def font_face_matches(font_file: Path, face_index: int, font_name: str) -> bool:
    wanted = normalize_font_name(font_name)
    try:
        for index, font in iter_font_faces(font_file):
            if index == face_index:
                return wanted in face_names(font)
    except (TTLibError, OSError):
        return False
    return False


def scan_font_directories(font_name: str, directories: Optional[Iterable[str]] = None) -> Optional[Tuple[Path, int]]:
    wanted = normalize_font_name(font_name)
    for directory in directories or FONT_DIRECTORIES:
        root = Path(directory).expanduser()
        if not root.is_dir():
            continue
        for font_file in sorted(root.rglob("*")):
            if font_file.suffix.lower() not in FONT_FILE_SUFFIXES or not font_file.is_file():
                continue
            try:
                for face_index, font in iter_font_faces(font_file):
                    if wanted in face_names(font):
                        return font_file, face_index
            except (TTLibError, OSError):
                continue
    return None


def resolve_font_file(font_name: str, directories: Optional[Sequence[str]] = None) -> Tuple[Path, int]:
    """Return (font file, face index) for a path or an installed font's name."""
    candidate = Path(font_name).expanduser()
    if candidate.is_file():
        return candidate, 0

    fontconfig_match = match_font_with_fontconfig(font_name)
    if fontconfig_match and font_face_matches(fontconfig_match[0], fontconfig_match[1], font_name):
        return fontconfig_match

    scanned_match = scan_font_directories(font_name, directories)
    if scanned_match:
        return scanned_match

    if fontconfig_match:
        print(f"INFO: no font named '{font_name}', substituting {fontconfig_match[0].name}")
        return fontconfig_match

    raise FontNotFoundError(f"No installed font matches '{font_name}'")


def load_font(font_name: str, directories: Optional[Sequence[str]] = None) -> LoadedFont:
    font_file, face_index = resolve_font_file(font_name, directories)
    font = TTFont(str(font_file), fontNumber=face_index)
    return LoadedFont(path=font_file, face_index=face_index, font=font, data=font_file.read_bytes())


# ------------------------------------------------------------ #
# Outlines                                                     #
# ------------------------------------------------------------ #
def glyph_d(glyph_name: str, glyph_set) -> str:
    pen = SVGPathPen(glyph_set)
    glyph_set[glyph_name].draw(pen)
    return pen.getCommands()


def shape_text(loaded_font: LoadedFont, text: str) -> List[Tuple[str, float, float]]:
    """Return (glyph name, pen x, pen y) in font units, in shaping order."""
    units_per_em = loaded_font.font["head"].unitsPerEm
    face = hb.Face(hb.Blob(loaded_font.data), loaded_font.face_index)
    hb_font = hb.Font(face)
    hb_font.scale = (units_per_em, units_per_em)

    buffer = hb.Buffer()
    buffer.add_str(text)
    buffer.guess_segment_properties()
    hb.shape(hb_font, buffer)

    shaped: List[Tuple[str, float, float]] = []
    pen_x = 0
    pen_y = 0
    for info, position in zip(buffer.glyph_infos, buffer.glyph_positions):
        glyph_name = loaded_font.font.getGlyphName(info.codepoint)
        shaped.append((glyph_name, pen_x + position.x_offset, pen_y + position.y_offset))
        pen_x += position.x_advance
        pen_y += position.y_advance
    return shaped


def extract_text_outline(loaded_font: LoadedFont, text: str, font_size: float) -> Tuple[TextOutline, FontMetrics]:
    metrics = FontMetrics.from_font(loaded_font.font, font_size)
    scale = font_size / metrics.units_per_em
    glyph_set = loaded_font.font.getGlyphSet()

    outline = TextOutline()
    for glyph_name, pen_x, pen_y in shape_text(loaded_font, text):
        raw = glyph_d(glyph_name, glyph_set)
        if not raw.strip():
            continue
        glyph_path = parse_path(raw).translated(complex(pen_x, pen_y)).scaled(scale)
        if len(glyph_path) == 0:
            continue
        outline.glyphs.append(
            GlyphOutline(glyph_name=glyph_name, path=glyph_path, pen_position=(pen_x * scale, pen_y * scale))
        )
    return outline, metrics


def flatten_subpath(subpath: SvgPath, curve_samples: int) -> List[Tuple[float, float]]:
    points: List[complex] = []
    for segment in subpath:
        if isinstance(segment, Line):
            points.append(segment.start)
        else:
            points.extend(segment.point(step / curve_samples) for step in range(curve_samples))
    points.append(subpath[-1].end)
    return [(point.real, point.imag) for point in points]


def glyph_silhouette(glyph_path: SvgPath, curve_samples: int = DEFAULT_CURVE_SAMPLES) -> BaseGeometry:
    shape: BaseGeometry = Polygon()
    for subpath in glyph_path.continuous_subpaths():
        points = flatten_subpath(subpath, curve_samples)
        if len(points) < 4:
            continue
        contour = Polygon(points).buffer(0)
        shape = shape.symmetric_difference(contour)
    return shape
