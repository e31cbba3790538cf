"""
Upload dispatcher module.

Entry point of the upload pipeline: validation, file vs. directory routing,
temp-archive ownership and exit codes.
"""

from .dispatcher import (
    ExitCode,
    UploadRequest,
    progress_printer,
    run,
    upload_directory,
    upload_file,
    validate_request,
)

__all__ = [
    "ExitCode",
    "UploadRequest",
    "progress_printer",
    "run",
    "upload_directory",
    "upload_file",
    "validate_request",
]
