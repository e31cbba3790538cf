"""
S3 uploader module.

Resolves bucket paths and object keys, and uploads a single local file to
S3 with percentage progress reporting.
"""

from .keys import (
    ResolvedDestination,
    default_directory_name,
    default_file_name,
    resolve_destination,
)
from .uploader import (
    ProgressEvent,
    ProgressObserver,
    S3Uploader,
    UploadResult,
    build_transfer_config,
)

__all__ = [
    "ResolvedDestination",
    "default_directory_name",
    "default_file_name",
    "resolve_destination",
    "ProgressEvent",
    "ProgressObserver",
    "S3Uploader",
    "UploadResult",
    "build_transfer_config",
]
