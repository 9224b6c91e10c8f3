import subprocess
from pathlib import Path

import pytest

import keynote_host
from keynote_host import KeynoteSession, parse_host_reply
from underline_request import HostReply, HostUnavailableError


class FakeRun:
    def __init__(self, returncode=0, stdout="", stderr="", error=None):
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        self.error = error
        self.calls = []

    def __call__(self, command, **kwargs):
        self.calls.append((command, kwargs))
        if self.error is not None:
            raise self.error
        return subprocess.CompletedProcess(command, self.returncode, stdout=self.stdout, stderr=self.stderr)


def test_reply_fields_are_size_font_and_text():
    assert parse_host_reply("72\nHelvetica\nHello\n") == HostReply(size=72.0, font_name="Helvetica", text="Hello")


def test_reply_text_keeps_its_own_line_breaks():
    reply = parse_host_reply("36.5\nAvenir-Book\nfirst line\nsecond line\n")
    assert reply.text == "first line\nsecond line"
    assert reply.size == 36.5


def test_reply_size_accepts_a_decimal_comma():
    assert parse_host_reply("40,5\nAvenir-Book\nHi").size == 40.5


@pytest.mark.parametrize("raw_output", ["", "72\nHelvetica", "big\nHelvetica\nHi", "72\n\nHi"])
def test_malformed_reply_means_no_host(raw_output):
    with pytest.raises(HostUnavailableError):
        parse_host_reply(raw_output)


def test_query_runs_the_script_through_osascript(monkeypatch):
    fake_run = FakeRun(stdout="60\nGill Sans\nTitle\n")
    monkeypatch.setattr(keynote_host.subprocess, "run", fake_run)

    reply = KeynoteSession().query()

    assert reply == HostReply(size=60.0, font_name="Gill Sans", text="Title")
    command, options = fake_run.calls[0]
    assert command == ["osascript", "-"]
    assert "text item 1 of thisSlide" in options["input"]


def test_query_failure_means_no_host(monkeypatch):
    monkeypatch.setattr(keynote_host.subprocess, "run", FakeRun(returncode=1, stderr="User canceled. (-128)"))
    with pytest.raises(HostUnavailableError, match="-128"):
        KeynoteSession().query()


def test_missing_osascript_means_no_host(monkeypatch):
    monkeypatch.setattr(keynote_host.subprocess, "run", FakeRun(error=FileNotFoundError("osascript")))
    with pytest.raises(HostUnavailableError):
        KeynoteSession().query()


def test_place_sends_path_and_offset(monkeypatch):
    fake_run = FakeRun()
    monkeypatch.setattr(keynote_host.subprocess, "run", fake_run)

    KeynoteSession().place(Path("/tmp/run/elegant-underline.pdf"), -14.4)

    command, options = fake_run.calls[0]
    assert command == ["osascript", "-", "/tmp/run/elegant-underline.pdf", "-14.4000"]
    assert "make new image" in options["input"]


def test_place_failure_is_reported_but_not_raised(monkeypatch, capsys):
    monkeypatch.setattr(keynote_host.subprocess, "run", FakeRun(returncode=1, stderr="no document"))
    KeynoteSession().place(Path("/tmp/x.pdf"), 0.0)
    assert "INFO:" in capsys.readouterr().out
