"""Capture everything written to the process's stdout and stderr descriptors."""

from __future__ import annotations

import os
import sys
import tempfile
from types import TracebackType

__all__ = ["StdCapture"]

_STDOUT_FD = 1
_STDERR_FD = 2


def _flush_streams() -> None:
    for stream in (sys.stdout, sys.stderr):
        if stream is not None:
            try:
                stream.flush()
            except (OSError, ValueError):
                pass


class StdCapture:
    """Redirects file descriptors 1 and 2 into a buffer while capturing.

    Output from Python and from native code alike is collected. Usable as a
    context manager: entering begins a capture, leaving ends it.
    """

    def __init__(self) -> None:
        self._capturing = False
        self._captured = ""
        self._buffer = None
        self._old_stdout: int | None = None
        self._old_stderr: int | None = None
        try:
            self._buffer = tempfile.TemporaryFile()
            self._old_stdout = os.dup(_STDOUT_FD)
            self._old_stderr = os.dup(_STDERR_FD)
        except OSError:
            self._release()

    @property
    def _ready(self) -> bool:
        return (
            self._buffer is not None
            and self._old_stdout is not None
            and self._old_stderr is not None
        )

    def begin_capture(self) -> None:
        """Start capturing, discarding any capture in progress."""
        if not self._ready:
            return
        if self._capturing:
            self.end_capture()
        _flush_streams()
        self._buffer.seek(0)
        self._buffer.truncate()
        target = self._buffer.fileno()
        os.dup2(target, _STDOUT_FD)
        os.dup2(target, _STDERR_FD)
        self._capturing = True

    def end_capture(self) -> bool:
        """Restore the original descriptors; False if nothing was being captured."""
        if not self._ready or not self._capturing:
            return False
        _flush_streams()
        os.dup2(self._old_stdout, _STDOUT_FD)
        os.dup2(self._old_stderr, _STDERR_FD)
        self._capturing = False
        self._buffer.seek(0)
        self._captured = self._buffer.read().decode("utf-8", errors="replace")
        return True

    def get_capture(self) -> str:
        """End any capture in progress and return the text it collected."""
        self.end_capture()
        return self._captured

    def is_capturing(self) -> bool:
        """True while output is being redirected."""
        return self._capturing

    def close(self) -> None:
        """End any capture and release the descriptors held."""
        if self._capturing:
            self.end_capture()
        self._release()

    def _release(self) -> None:
        for fd in (self._old_stdout, self._old_stderr):
            if fd is not None:
                os.close(fd)
        self._old_stdout = None
        self._old_stderr = None
        if self._buffer is not None:
            self._buffer.close()
            self._buffer = None

    def __enter__(self) -> StdCapture:
        self.begin_capture()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.end_capture()

    def __del__(self) -> None:
        try:
            self.close()
        except Exception:
            pass