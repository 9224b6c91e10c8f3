"""
underline_request.py

Turns the command line (or a reply from the presentation host) into a
RenderRequest. The invocation shape is decided once, here:

  <style> <color> <font name> <size in points> <text>   -> LiteralInvocation
  <style> <color>                                       -> InteractiveInvocation
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import List, Optional, Sequence, Union

from PIL import ImageColor


DEFAULT_FONT_SIZE = 72.0
LITERAL_FIELD_COUNT = 5
MINIMUM_FIELD_COUNT = 2

USAGE_TEXT = """elegant-underline [style] [color] [font name] [size in points] [text]
   style: jagged, elegant
   color: sRGB color in hex format FF00FF"""

HOST_GUIDANCE_TEXT = (
    "Open Keynote and present one text item on the current slide or use standalone mode:"
)

_HEX_COLOR_PATTERN = re.compile(r"[0-9A-Fa-f]{6}")


class UsageError(Exception):
    """Not enough positional values to run in either mode."""


class HostUnavailableError(Exception):
    """The presentation host has no document or text item, or scripting failed."""


class MalformedColorError(ValueError):
    pass


class UnderlineStyle:
    JAGGED = "jagged"
    ELEGANT = "elegant"

    RECOGNIZED = (JAGGED, ELEGANT)


@dataclass(frozen=True)
class RGBColor:
    red: float
    green: float
    blue: float
    alpha: float = 1.0

    def to_rgb255(self) -> tuple:
        return (
            int(round(self.red * 255)),
            int(round(self.green * 255)),
            int(round(self.blue * 255)),
        )

    def to_hex(self) -> str:
        red, green, blue = self.to_rgb255()
        return f"#{red:02x}{green:02x}{blue:02x}"


@dataclass(frozen=True)
class LiteralInvocation:
    style: str
    color: str
    font_name: str
    size: str
    text: str


@dataclass(frozen=True)
class InteractiveInvocation:
    style: str
    color: str


Invocation = Union[LiteralInvocation, InteractiveInvocation]


@dataclass(frozen=True)
class HostReply:
    """What the host reports about its first text item: (size, font, text)."""
    size: float
    font_name: str
    text: str


@dataclass(frozen=True)
class RenderRequest:
    style: str
    color: RGBColor
    font_name: str
    font_size: float
    text: str
    interactive: bool = False

    @classmethod
    def from_literal(cls, invocation: LiteralInvocation) -> "RenderRequest":
        return cls(
            style=invocation.style,
            color=parse_color(invocation.color),
            font_name=invocation.font_name,
            font_size=parse_font_size(invocation.size),
            text=invocation.text,
            interactive=False,
        )

    @classmethod
    def from_host_reply(cls, invocation: InteractiveInvocation, reply: HostReply) -> "RenderRequest":
        return cls(
            style=invocation.style,
            color=parse_color(invocation.color),
            font_name=reply.font_name,
            font_size=reply.size,
            text=reply.text,
            interactive=True,
        )


def classify_invocation(positionals: Sequence[Optional[str]]) -> Invocation:
    """
    Decide the run mode from the positional values that follow the program name.

    Fewer than two values is a usage error. Five or more values run
    standalone with the first five; anything in between asks the host.
    """
    values: List[str] = [value for value in positionals if value is not None]
    if len(values) < MINIMUM_FIELD_COUNT:
        raise UsageError("style and color are required")
    if len(values) >= LITERAL_FIELD_COUNT:
        style, color, font_name, size, text = values[:LITERAL_FIELD_COUNT]
        return LiteralInvocation(style=style, color=color, font_name=font_name, size=size, text=text)
    return InteractiveInvocation(style=values[0], color=values[1])


def parse_color(token: str) -> RGBColor:
    """Parse RRGGBB (no prefix) into an sRGB color with alpha forced to 1.0."""
    if not _HEX_COLOR_PATTERN.fullmatch(token or ""):
        raise MalformedColorError(f"Color must be six hex digits like FF00FF, got {token!r}")
    red, green, blue = ImageColor.getrgb(f"#{token}")
    return RGBColor(red=red / 255.0, green=green / 255.0, blue=blue / 255.0, alpha=1.0)


def parse_font_size(token: str) -> float:
    try:
        size = float(token)
    except (TypeError, ValueError):
        return DEFAULT_FONT_SIZE
    if not math.isfinite(size) or size <= 0:
        return DEFAULT_FONT_SIZE
    return size
