"""
Destination naming for S3 uploads.

Pure functions only: no I/O, same inputs always give the same destination.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional


@dataclass(frozen=True)
class ResolvedDestination:
    """
    Where an object lands in S3.

    Attributes:
        bucket_path: Bucket name, optionally followed by "/<subdir>"
        object_key: Object name inside bucket_path
    """

    bucket_path: str
    object_key: str

    @property
    def bucket_name(self) -> str:
        """Bucket part of bucket_path (S3 bucket names cannot contain '/')."""
        return self.bucket_path.split("/", 1)[0]

    @property
    def key(self) -> str:
        """Full S3 key: the subdir part of bucket_path, then object_key."""
        _, _, prefix = self.bucket_path.partition("/")
        prefix = prefix.strip("/")
        return f"{prefix}/{self.object_key}" if prefix else self.object_key

    @property
    def uri(self) -> str:
        return f"s3://{self.bucket_name}/{self.key}"


def resolve_destination(
    bucket: str,
    subdir: Optional[str],
    name_override: Optional[str],
    default_name: str,
) -> ResolvedDestination:
    """
    Compute bucket path and object key from user overrides and defaults.

    Args:
        bucket: Canonical (already lower-cased) bucket name
        subdir: Optional subdirectory inside the bucket
        name_override: Optional object name chosen by the user
        default_name: Name derived from the source path

    Returns:
        ResolvedDestination

    Example:
        >>> resolve_destination("x", "", "", "foo")
        ResolvedDestination(bucket_path='x', object_key='foo')
        >>> resolve_destination("x", "sub", "custom", "foo")
        ResolvedDestination(bucket_path='x/sub', object_key='custom')
    """
    bucket_path = f"{bucket}/{subdir}" if subdir else bucket
    object_key = name_override if name_override else default_name
    return ResolvedDestination(bucket_path=bucket_path, object_key=object_key)


def default_file_name(path: Path) -> str:
    """Default key for a file upload: its name without the last extension."""
    return path.stem


def default_directory_name(path: Path) -> str:
    """Default key for a directory upload: the directory's own name."""
    return path.resolve().name
