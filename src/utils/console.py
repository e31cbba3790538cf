"""
User-facing status lines.

Business logic describes what happened as StatusMessage values carrying a
severity; ConsoleReporter is the only place that turns them into text and
decides whether to color them.

Output contract:
    UploadToS3: <message>          (info)
    UploadToS3 Error: <message>    (error)
"""

import sys
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, TextIO

from humanfriendly.terminal import ansi_wrap, terminal_supports_colors

INFO_PREFIX = "UploadToS3:"
ERROR_PREFIX = "UploadToS3 Error:"


class Severity(Enum):
    INFO = "info"
    ERROR = "error"


@dataclass(frozen=True)
class StatusMessage:
    severity: Severity
    text: str

    @property
    def is_error(self) -> bool:
        return self.severity is Severity.ERROR


# Anything that accepts a StatusMessage can act as a reporter
Reporter = Callable[[StatusMessage], None]


def info(text: str) -> StatusMessage:
    return StatusMessage(Severity.INFO, text)


def error(text: str) -> StatusMessage:
    return StatusMessage(Severity.ERROR, text)


def format_status(message: StatusMessage) -> str:
    """Render a message with its prefix, without color."""
    prefix = ERROR_PREFIX if message.is_error else INFO_PREFIX
    return f"{prefix} {message.text}"


class ConsoleReporter:
    """
    Print status messages to a stream (stdout by default).

    The stream is looked up at write time when none is given, so redirected
    or captured stdout is honored. Errors are shown in red only when the
    stream is a terminal that supports colors, unless colors is forced.
    """

    def __init__(self, stream: Optional[TextIO] = None, colors: Optional[bool] = None) -> None:
        self._stream = stream
        self._colors = colors

    @property
    def stream(self) -> TextIO:
        return self._stream if self._stream is not None else sys.stdout

    def _use_colors(self) -> bool:
        if self._colors is not None:
            return self._colors
        return terminal_supports_colors(self.stream)

    def __call__(self, message: StatusMessage) -> None:
        line = format_status(message)
        if message.is_error and self._use_colors():
            line = ansi_wrap(line, color="red")
        print(line, file=self.stream, flush=True)
