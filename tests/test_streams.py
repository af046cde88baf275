"""Tests for the standard stream bundle.

Every program receives stdin, stdout, and stderr already open.  The
``Streams`` bundle lets the same program run against the real ``sys``
streams or against in-memory buffers.
"""

import io
import sys

import pytest

from py_stdio.streams import StreamError, Streams, copy_stream, read_lines


class TestStreams:
    """Verify stream bundles."""

    def test_from_sys_uses_real_streams(self) -> None:
        """from_sys() should wrap sys.stdin, sys.stdout, and sys.stderr."""
        streams = Streams.from_sys()
        assert streams.stdin is sys.stdin
        assert streams.stdout is sys.stdout
        assert streams.stderr is sys.stderr

    def test_capture_provides_stdin_text(self) -> None:
        """A captured bundle should serve the given text on stdin."""
        streams = Streams.capture("line one\nline two\n")
        assert streams.stdin.read() == "line one\nline two\n"

    def test_out_and_err_are_separate(self) -> None:
        """out() and err() should write to different streams."""
        streams = Streams.capture()
        streams.out("data")
        streams.err("problem")
        assert streams.stdout_text() == "data\n"
        assert streams.stderr_text() == "problem\n"

    def test_out_without_text_writes_newline(self) -> None:
        """out() with no text should write an empty line."""
        streams = Streams.capture()
        streams.out()
        assert streams.stdout_text() == "\n"

    def test_text_of_uncaptured_stream_raises(self) -> None:
        """Reading back a real stream is not possible."""
        streams = Streams.from_sys()
        with pytest.raises(StreamError):
            streams.stdout_text()


class TestCopyStream:
    """Verify chunked stream copying."""

    def test_copies_everything(self) -> None:
        """All input should arrive at the destination."""
        source = io.StringIO("hello world")
        dest = io.StringIO()
        copied = copy_stream(source, dest)
        assert dest.getvalue() == "hello world"
        assert copied == len("hello world")

    def test_small_chunks(self) -> None:
        """Chunk size should not change the result."""
        text = "abcdefghij" * 10
        dest = io.StringIO()
        copy_stream(io.StringIO(text), dest, chunk_size=3)
        assert dest.getvalue() == text

    def test_empty_source(self) -> None:
        """An empty source should copy nothing."""
        dest = io.StringIO()
        assert copy_stream(io.StringIO(""), dest) == 0
        assert dest.getvalue() == ""

    def test_non_positive_chunk_size_raises(self) -> None:
        """A chunk size of zero would never finish."""
        with pytest.raises(ValueError, match="chunk_size"):
            copy_stream(io.StringIO("x"), io.StringIO(), chunk_size=0)


class TestReadLines:
    """Verify line iteration."""

    def test_strips_newlines(self) -> None:
        """Lines should come back without their trailing newline."""
        assert list(read_lines(io.StringIO("a\nb\n"))) == ["a", "b"]

    def test_last_line_without_newline(self) -> None:
        """A final unterminated line should still be yielded."""
        assert list(read_lines(io.StringIO("a\nb"))) == ["a", "b"]
