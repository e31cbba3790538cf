"""
Directory archiver for S3 uploads.

A directory is uploaded as one object: it is zipped into a temporary archive
that lives next to the directory (in its parent), so the archive can never
end up inside the tree being zipped.

The archive name is fixed. Two directory uploads running at the same time
from the same parent directory will race on this file; callers must not run
them concurrently.

Example usage:
    >>> from src.archiver import temp_archive_path, create_archive, remove_archive
    >>> archive_path = temp_archive_path("./site")
    >>> result = create_archive("./site", archive_path)
    >>> if result.success:
    ...     print(f"{result.entry_count} entries in {result.archive_path}")
    >>> remove_archive(archive_path)
"""

import os
import time
import zipfile
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from src.utils.errors import ErrorKind, describe_exception
from src.utils.logging import get_logger, log_function_call

logger = get_logger(__name__)

TEMP_ARCHIVE_NAME = "TempS3Archive.zip"


@dataclass
class ArchiveResult:
    """
    Result of archiving a directory.

    Attributes:
        success: Whether the archive was fully written
        source_dir: Directory that was archived
        archive_path: Location of the zip file
        entry_count: Number of entries written
        archive_size_bytes: Size of the finished archive
        duration_seconds: Time spent zipping
        error_kind: ErrorKind.ARCHIVAL on failure
        error_message: Full diagnostic text on failure
    """

    success: bool
    source_dir: str
    archive_path: str
    entry_count: int = 0
    archive_size_bytes: int = 0
    duration_seconds: float = 0.0
    error_kind: Optional[ErrorKind] = None
    error_message: Optional[str] = None


def temp_archive_path(directory: Union[str, Path]) -> Optional[Path]:
    """
    Fixed temp-archive location for a directory: <parent>/TempS3Archive.zip.

    Returns:
        The archive path, or None when the directory has no parent it could
        be written to (a filesystem root is its own parent).
    """
    resolved = Path(directory).resolve()
    parent = resolved.parent
    if parent == resolved:
        logger.warning(f"Directory has no parent to host a temp archive: {resolved}")
        return None
    return parent / TEMP_ARCHIVE_NAME


def _write_tree(directory: Path, archive: zipfile.ZipFile, archive_path: Path) -> int:
    """
    Add every file under directory, plus empty directories, in sorted order.

    Symlinked subdirectories are followed and archived under the link's
    name. A directory whose real path was already walked (a link back into
    the tree) is skipped so that cycles terminate. The archive being written
    is never added to itself, even when a link leads to its directory.
    """
    entries = 0
    visited = set()
    own_archive = os.path.realpath(archive_path)
    for dirpath, dirnames, filenames in os.walk(directory, followlinks=True):
        real = os.path.realpath(dirpath)
        if real in visited:
            logger.warning(f"Skipping already archived directory reached through a link: {dirpath}")
            dirnames[:] = []
            continue
        visited.add(real)

        dirnames.sort()
        current = Path(dirpath)

        if current != directory and not dirnames and not filenames:
            archive.write(current, current.relative_to(directory).as_posix())
            entries += 1
            continue

        for filename in sorted(filenames):
            file_path = current / filename
            if os.path.realpath(file_path) == own_archive:
                continue
            archive.write(file_path, file_path.relative_to(directory).as_posix())
            entries += 1
    return entries


@log_function_call
def create_archive(directory: Union[str, Path], archive_path: Union[str, Path]) -> ArchiveResult:
    """
    Zip a directory's full contents into archive_path.

    Any file already at archive_path (left over by a crashed run) is removed
    first. Entry names are POSIX paths relative to the directory root.

    Args:
        directory: Directory to archive
        archive_path: Destination zip file, outside the directory

    Returns:
        ArchiveResult; failures carry ErrorKind.ARCHIVAL and the full
        exception text instead of raising.
    """
    source = Path(directory).resolve()
    archive_path = Path(archive_path)
    start_time = time.time()

    try:
        archive_path.unlink(missing_ok=True)

        with zipfile.ZipFile(archive_path, "w", compression=zipfile.ZIP_DEFLATED) as archive:
            entry_count = _write_tree(source, archive, archive_path)

        archive_size = archive_path.stat().st_size
    except Exception as e:
        logger.error(f"Could not archive {source}: {e}", exc_info=True)
        return ArchiveResult(
            success=False,
            source_dir=str(source),
            archive_path=str(archive_path),
            duration_seconds=time.time() - start_time,
            error_kind=ErrorKind.ARCHIVAL,
            error_message=describe_exception(e),
        )

    duration = time.time() - start_time
    logger.info(
        f"Archived {source} -> {archive_path} "
        f"({entry_count} entries, {archive_size} bytes in {duration:.2f}s)"
    )
    return ArchiveResult(
        success=True,
        source_dir=str(source),
        archive_path=str(archive_path),
        entry_count=entry_count,
        archive_size_bytes=archive_size,
        duration_seconds=duration,
    )


def remove_archive(archive_path: Union[str, Path]) -> Optional[str]:
    """
    Delete the temp archive. A missing file is not an error.

    Returns:
        None on success, otherwise the diagnostic text of the failure.
    """
    try:
        Path(archive_path).unlink(missing_ok=True)
    except OSError as e:
        logger.error(f"Could not delete temp archive {archive_path}: {e}", exc_info=True)
        return describe_exception(e)
    logger.debug(f"Removed temp archive {archive_path}")
    return None
