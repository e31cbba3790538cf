"""
Error classification shared by the archiver, uploader and dispatcher.
"""

import traceback
from enum import Enum


class ErrorKind(Enum):
    """Why an upload run failed."""

    VALIDATION = "validation"  # bad arguments, caught before any I/O
    PATH_RESOLUTION = "path_resolution"  # source directory has no usable parent
    ARCHIVAL = "archival"  # zipping the directory failed
    TRANSFER = "transfer"  # network, auth or storage failure during upload


def describe_exception(error: BaseException) -> str:
    """Full diagnostic text for an exception, traceback included."""
    return "".join(traceback.format_exception(type(error), error, error.__traceback__)).rstrip()
