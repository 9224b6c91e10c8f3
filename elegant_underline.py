#!/usr/bin/env -S uv run
# /// script
# requires-python = ">=3.11"
# dependencies = [
#   "fonttools>=4.44.0",
#   "uharfbuzz>=0.39",
#   "svgpathtools>=1.6.1",
#   "shapely>=2.0",
#   "svgwrite>=1.4.3",
#   "cairosvg>=2.7.0",
#   "pillow>=10.2.0"
# ]
# ///
"""
elegant_underline.py

Render the underline for a line of text as a tight single-page PDF.

Standalone:
  ./elegant_underline.py jagged FF0000 Helvetica 72 "Hello"

Keynote (style and color only; font, size and text come from the first
text item on the current slide, and the PDF is placed underneath it):
  ./elegant_underline.py jagged FF0000
"""

import argparse
from typing import Callable, List, Optional, Tuple

from glyph_outlines import DEFAULT_CURVE_SAMPLES, FontNotFoundError, extract_text_outline, load_font
from keynote_host import KeynoteSession
from pdf_page import OUTPUT_FILENAME, output_path_for, write_pdf
from underline_paths import UnsupportedStyleError, synthesize_decoration
from underline_request import (
    HOST_GUIDANCE_TEXT,
    USAGE_TEXT,
    HostUnavailableError,
    InteractiveInvocation,
    RenderRequest,
    UsageError,
    classify_invocation,
    parse_color,
)


def parse_arguments(argv: Optional[List[str]] = None) -> Tuple[argparse.Namespace, List[str]]:
    """
    Split the command line into options and positional values.

    Only the options are declared; everything else comes back in argv
    order, so a text like "-20%" is a value rather than an unknown option.
    """
    parser = argparse.ArgumentParser(
        prog="elegant-underline",
        usage="%(prog)s [options] <style> <color> [<font> <size> <text>]",
        description="Render a decorative underline for a line of text into a single-page PDF.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
        add_help=False,
        allow_abbrev=False,
    )
    parser.add_argument("--help", action="help", help="Show this help message and exit.")
    parser.add_argument("--output", default=OUTPUT_FILENAME, help="Output PDF path in standalone mode.")
    parser.add_argument(
        "--gap",
        type=float,
        default=None,
        help="Clearance around descenders for the elegant style, in points (required by that style).",
    )
    parser.add_argument(
        "--curve-samples",
        type=int,
        default=DEFAULT_CURVE_SAMPLES,
        help="Points per curve segment when flattening glyphs for the elegant style.",
    )
    return parser.parse_known_args(argv)


def main(argv: Optional[List[str]] = None, host_factory: Callable[[], KeynoteSession] = KeynoteSession) -> int:
    arguments, positionals = parse_arguments(argv)

    try:
        invocation = classify_invocation(positionals)
    except UsageError:
        print(USAGE_TEXT)
        return 1

    host = None
    if isinstance(invocation, InteractiveInvocation):
        parse_color(invocation.color)
        host = host_factory()
        try:
            reply = host.query()
        except HostUnavailableError:
            print(HOST_GUIDANCE_TEXT)
            print(USAGE_TEXT)
            return 1
        request = RenderRequest.from_host_reply(invocation, reply)
    else:
        request = RenderRequest.from_literal(invocation)

    try:
        loaded_font = load_font(request.font_name)
    except FontNotFoundError as error:
        print(f"FAILURE: {error}")
        return 1

    text_outline, font_metrics = extract_text_outline(loaded_font, request.text, request.font_size)
    try:
        decoration = synthesize_decoration(
            request.style,
            text_outline,
            font_metrics.underline,
            request.color,
            gap=arguments.gap,
            curve_samples=max(1, arguments.curve_samples),
        )
    except UnsupportedStyleError as error:
        print(f"FAILURE: {error}")
        return 1
    if decoration.is_empty:
        print(f"FAILURE: nothing to draw for '{request.text}' in style '{request.style}'")
        return 1

    output_path = output_path_for(request.interactive, arguments.output)
    print(f"Result in {output_path}")
    write_pdf(decoration, output_path)

    if host is not None:
        # TODO: offset by the font's underline position instead of its descent
        host.place(output_path, -font_metrics.descent)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
