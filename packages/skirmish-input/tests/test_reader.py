"""Tests for InputReader."""
from __future__ import annotations

import io
import logging

import pytest

from skirmish_input import InputReader, LineQueue


class _BrokenStream:
    """Yields one line, then fails the way a closed file does."""

    def __iter__(self):
        yield "1\n"
        raise ValueError("I/O operation on closed file.")


class TestInputReader:
    def test_forwards_lines_and_closes(self) -> None:
        reader = InputReader(io.StringIO("1\n2\r\nabc\n"))
        lines = reader.start()
        reader.join(timeout=5)

        assert not reader.is_alive()
        assert lines.drain() == ["1", "2", "abc"]
        assert lines.closed

    def test_empty_stream_closes_immediately(self) -> None:
        reader = InputReader(io.StringIO(""))
        reader.start()
        reader.join(timeout=5)
        assert reader.lines.drain() == []
        assert reader.lines.closed

    def test_uses_supplied_queue(self) -> None:
        lines = LineQueue()
        reader = InputReader(["3\n"], lines)
        assert reader.start() is lines
        reader.join(timeout=5)
        assert lines.drain() == ["3"]

    def test_closed_stream_ends_quietly(self, caplog: pytest.LogCaptureFixture) -> None:
        caplog.set_level(logging.INFO, logger="skirmish_input.reader")
        reader = InputReader(_BrokenStream())
        reader.start()
        reader.join(timeout=5)

        assert reader.lines.drain() == ["1"]
        assert reader.lines.closed
        assert "ended after 1 line" in caplog.text

    def test_thread_is_daemon(self) -> None:
        reader = InputReader(io.StringIO(""))
        assert reader._thread.daemon
