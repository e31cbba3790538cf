"""
Directory archiver module.

Zips a directory into a fixed-name temporary archive in its parent
directory so it can be uploaded as a single S3 object.
"""

from .archiver import (
    TEMP_ARCHIVE_NAME,
    ArchiveResult,
    create_archive,
    remove_archive,
    temp_archive_path,
)

__all__ = [
    "TEMP_ARCHIVE_NAME",
    "ArchiveResult",
    "create_archive",
    "remove_archive",
    "temp_archive_path",
]
