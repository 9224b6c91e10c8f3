"""
underline_paths.py

Decorative underline geometry for a line of text.

  jagged   a zig-zag between position - thickness/2 and position + thickness/2,
           one rise or fall per `thickness` of horizontal travel, stroked to a
           filled outline.
  elegant  a straight underline with the descenders (plus a clearance band)
           cut out of it, so the line never crosses through them.

Any other style leaves the text outline as the only path.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

from shapely.geometry import LineString, MultiPolygon, Polygon, box
from shapely.geometry.base import BaseGeometry

from glyph_outlines import DEFAULT_CURVE_SAMPLES, BoundingBox, TextOutline, UnderlineMetrics
from underline_request import RGBColor, UnderlineStyle


# line width handed to the stroker, as a fraction of the underline thickness
STROKE_WIDTH_FACTOR = 0.5
MITRE_LIMIT = 10.0
# corners of the clearance band around the descenders
CLEARANCE_JOIN_STYLE = "round"

Point = Tuple[float, float]


class UnsupportedStyleError(NotImplementedError):
    pass


@dataclass(frozen=True)
class Decoration:
    style: str
    d: str
    bounding_box: BoundingBox
    fill: Optional[RGBColor]
    fill_rule: str = "nonzero"

    @property
    def is_empty(self) -> bool:
        return not self.d or self.bounding_box.is_empty


def jagged_polyline(bounding_box: BoundingBox, metrics: UnderlineMetrics) -> List[Point]:
    thickness = metrics.thickness
    y_low = metrics.position - thickness / 2.0
    y_high = metrics.position + thickness / 2.0
    x = bounding_box.min_x
    end = x + bounding_box.width

    vertices: List[Point] = [(x, y_low)]
    while x < end:
        x += thickness
        vertices.append((x, y_high))
        peak_x = x
        x += thickness
        # a peak short of the right edge is always followed by a low vertex
        if peak_x < end:
            vertices.append((x, y_low))
    return vertices


def stroke_polyline(vertices: List[Point], width: float) -> BaseGeometry:
    """Filled outline of the polyline: butt caps, mitred joins."""
    if len(vertices) < 2 or width <= 0:
        return Polygon()
    return LineString(vertices).buffer(
        width / 2.0,
        cap_style="flat",
        join_style="mitre",
        mitre_limit=MITRE_LIMIT,
    )


def jagged_underline_shape(bounding_box: BoundingBox, metrics: UnderlineMetrics) -> BaseGeometry:
    vertices = jagged_polyline(bounding_box, metrics)
    return stroke_polyline(vertices, metrics.thickness * STROKE_WIDTH_FACTOR)


def elegant_underline_shape(
        text_outline: TextOutline,
        metrics: UnderlineMetrics,
        gap: Optional[float] = None,
        curve_samples: int = DEFAULT_CURVE_SAMPLES,
) -> BaseGeometry:
    """
    Straight underline with the descenders punched out.

    1) keep the part of the glyph silhouette below the baseline
    2) stroke that part's outline into a band `gap` wide
    3) subtract the band from the underline rectangle

    The band width has no font-derived value, so it must be given.
    """
    if gap is None:
        # left unimplemented by the reference renderer, so the clearance width is not settled
        raise UnsupportedStyleError("the elegant style needs an explicit clearance width (--gap)")
    bounding_box = text_outline.bounding_box
    if bounding_box.is_empty:
        return Polygon()
    band_width = gap

    underline = box(
        bounding_box.min_x,
        metrics.position,
        bounding_box.max_x,
        metrics.position + metrics.thickness,
    )

    silhouette = text_outline.silhouette(curve_samples)
    above_baseline = box(
        bounding_box.min_x,
        0.0,
        bounding_box.max_x,
        max(bounding_box.max_y, 0.0),
    )
    descenders = silhouette.difference(above_baseline)
    if descenders.is_empty or band_width <= 0:
        return underline

    clearance = descenders.boundary.buffer(band_width / 2.0, join_style=CLEARANCE_JOIN_STYLE)
    return underline.difference(clearance)


def geometry_to_svg_d(geometry: BaseGeometry) -> str:
    if geometry.is_empty:
        return ""
    if isinstance(geometry, Polygon):
        polygons = [geometry]
    elif isinstance(geometry, MultiPolygon):
        polygons = list(geometry.geoms)
    else:
        polygons = [part for part in getattr(geometry, "geoms", []) if isinstance(part, Polygon)]

    path_segments: List[str] = []
    for polygon in polygons:
        for ring in [polygon.exterior, *polygon.interiors]:
            coordinates = list(ring.coords)
            if len(coordinates) < 3:
                continue
            move_segment = f"M {coordinates[0][0]:.4f},{coordinates[0][1]:.4f}"
            line_segments = " ".join(f"L {x:.4f},{y:.4f}" for x, y in coordinates[1:])
            path_segments.append(f"{move_segment} {line_segments} Z")
    return " ".join(path_segments)


def geometry_bounding_box(geometry: BaseGeometry) -> BoundingBox:
    if geometry.is_empty:
        return BoundingBox.empty()
    return BoundingBox.from_bounds(*geometry.bounds)


def synthesize_decoration(
        style: str,
        text_outline: TextOutline,
        metrics: UnderlineMetrics,
        color: RGBColor,
        gap: Optional[float] = None,
        curve_samples: int = DEFAULT_CURVE_SAMPLES,
) -> Decoration:
    if style == UnderlineStyle.JAGGED:
        shape = jagged_underline_shape(text_outline.bounding_box, metrics)
    elif style == UnderlineStyle.ELEGANT:
        shape = elegant_underline_shape(text_outline, metrics, gap=gap, curve_samples=curve_samples)
    else:
        return Decoration(
            style=style,
            d=text_outline.svg_d(),
            bounding_box=text_outline.bounding_box,
            fill=None,
            fill_rule="nonzero",
        )

    return Decoration(
        style=style,
        d=geometry_to_svg_d(shape),
        bounding_box=geometry_bounding_box(shape),
        fill=color,
        fill_rule="evenodd",
    )
