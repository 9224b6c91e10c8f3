"""
keynote_host.py

Talks to a running Keynote through `osascript`: asks for the first text item
on the current slide, and later drops the rendered PDF underneath it.
"""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import List

from underline_request import HostReply, HostUnavailableError


QUERY_SCRIPT = """
on run argv
    tell application "Keynote"
        activate

        if not (exists front document) then error number -128
        if playing is true then tell the front document to stop

        tell the front document
            set thisSlide to current slide
            set thisTextItem to text item 1 of thisSlide
            tell thisTextItem
                set thisText to its object text
                set thisSize to the size of its object text
                set thisFont to the font of its object text
            end tell
        end tell
    end tell

    return (thisSize as text) & linefeed & thisFont & linefeed & thisText
end run
"""

PLACE_SCRIPT = """
on run argv
    set artifactPath to item 1 of argv
    set insertPosition to (item 2 of argv) as real
    tell application "Keynote"
        activate
        tell the front document
            tell the current slide
                set thisTextItem to its text item 1
                set thisImage to (POSIX file artifactPath) as alias
                set thisTextPosition to the position of thisTextItem
                set thisImagePosition to {item 1 of thisTextPosition, (item 2 of thisTextPosition) + (height of thisTextItem) + insertPosition}
                make new image with properties {file:thisImage, position:thisImagePosition}
            end tell
        end tell
    end tell
end run
"""


def parse_host_reply(raw_output: str) -> HostReply:
    """Split `size<LF>font<LF>text`; the text keeps any line breaks of its own."""
    if raw_output.endswith("\n"):
        raw_output = raw_output[:-1]
    fields = raw_output.split("\n", 2)
    if len(fields) < 3:
        raise HostUnavailableError(f"Unexpected reply from Keynote: {raw_output!r}")
    size_field, font_name, text = fields
    try:
        size = float(size_field.strip().replace(",", "."))
    except ValueError:
        raise HostUnavailableError(f"Keynote reported a non-numeric text size: {size_field!r}")
    if not font_name or not text:
        raise HostUnavailableError("Keynote reported an empty font or text")
    return HostReply(size=size, font_name=font_name, text=text)


class KeynoteSession:
    def __init__(self, osascript_command: str = "osascript"):
        self.osascript_command = osascript_command

    def _run_script(self, script: str, arguments: List[str]) -> subprocess.CompletedProcess:
        return subprocess.run(
            [self.osascript_command, "-", *arguments],
            input=script,
            capture_output=True,
            text=True,
        )

    def query(self) -> HostReply:
        try:
            result = self._run_script(QUERY_SCRIPT, [])
        except OSError as error:
            raise HostUnavailableError(f"Could not run {self.osascript_command}: {error}")
        if result.returncode != 0:
            raise HostUnavailableError(result.stderr.strip() or "Keynote query failed")
        return parse_host_reply(result.stdout)

    def place(self, artifact_path: Path, vertical_offset: float) -> None:
        result = self._run_script(PLACE_SCRIPT, [str(artifact_path), f"{vertical_offset:.4f}"])
        if result.returncode != 0:
            print(f"INFO: Keynote did not confirm the placement: {result.stderr.strip()}")
