"""
Upload dispatcher.

Validates an UploadRequest, decides between the file and directory flows and
maps the outcome to a process exit code. The directory flow owns the temp
archive for the whole run and always removes it after the upload attempt.

Exit codes:
    0  success
    1  archival or transfer failure
    2  source directory has no parent to host the temp archive
    3  invalid arguments (credentials, source path, bucket, region or
       endpoint rejected by the S3 client)

Example usage:
    >>> from src.dispatcher import UploadRequest, run
    >>> request = UploadRequest(
    ...     source_path="./site",
    ...     bucket="My-Backups",
    ...     access_key="AKIA...",
    ...     secret_key="...",
    ...     subdir="nightly",
    ... )
    >>> exit_code = run(request)
"""

import os
from dataclasses import dataclass, field, replace
from enum import IntEnum
from pathlib import Path
from typing import Callable, Optional, Tuple

from botocore.exceptions import BotoCoreError

from src.archiver import create_archive, remove_archive, temp_archive_path
from src.uploader import (
    ProgressEvent,
    ProgressObserver,
    S3Uploader,
    default_directory_name,
    default_file_name,
    resolve_destination,
)
from src.utils.config import UploaderConfig, get_config
from src.utils.console import ConsoleReporter, Reporter, error, info
from src.utils.errors import ErrorKind, describe_exception
from src.utils.logging import get_logger, log_function_call
from src.utils.metrics import UploadMetrics, get_metrics

logger = get_logger(__name__)

CREDENTIALS_HELP_URL = (
    "https://docs.aws.amazon.com/IAM/latest/UserGuide/id_credentials_access-keys.html"
)


class ExitCode(IntEnum):
    SUCCESS = 0
    FAILURE = 1
    UNRESOLVABLE_PATH = 2
    INVALID_ARGUMENTS = 3


EXIT_CODES = {
    ErrorKind.VALIDATION: ExitCode.INVALID_ARGUMENTS,
    ErrorKind.PATH_RESOLUTION: ExitCode.UNRESOLVABLE_PATH,
    ErrorKind.ARCHIVAL: ExitCode.FAILURE,
    ErrorKind.TRANSFER: ExitCode.FAILURE,
}


@dataclass(frozen=True)
class UploadRequest:
    """
    One upload run.

    Attributes:
        source_path: File or directory to upload
        bucket: Destination bucket (lower-cased by validate_request)
        access_key: AWS access key id (hidden from repr)
        secret_key: AWS secret access key (hidden from repr)
        region: AWS region; the configured default when None
        subdir: Optional subdirectory inside the bucket
        name: Optional object name override
    """

    source_path: str
    bucket: str
    access_key: str = field(repr=False)
    secret_key: str = field(repr=False)
    region: Optional[str] = None
    subdir: Optional[str] = None
    name: Optional[str] = None


UploaderFactory = Callable[[UploadRequest], S3Uploader]


def validate_request(request: UploadRequest) -> Tuple[Optional[UploadRequest], Optional[str]]:
    """
    Check a request before any archive or network work.

    Checks run in order: credentials, source path, bucket. Only stat calls
    are made; nothing is created or deleted.

    Returns:
        (canonical request with a lower-cased bucket, None) when valid,
        otherwise (None, description of the problem).
    """
    if not request.access_key or not request.secret_key:
        return None, (
            "AWS access key or secret key are not valid. You must provide these. "
            f"See here how to generate them: {CREDENTIALS_HELP_URL}"
        )

    if not request.source_path or not os.path.exists(request.source_path):
        return None, (
            "Input path must be a valid file or directory. "
            f"This is neither: {request.source_path}"
        )

    if not request.bucket:
        return None, "You must specify a bucket to use."

    return replace(request, bucket=request.bucket.lower()), None


def _s3_uploader_factory(config: UploaderConfig) -> UploaderFactory:
    def build(request: UploadRequest) -> S3Uploader:
        return S3Uploader.from_credentials(
            request.access_key, request.secret_key, request.region, config
        )

    return build


def progress_printer(reporter: Reporter) -> ProgressObserver:
    """Observer that reports each progress event as a status line."""

    def on_progress(event: ProgressEvent) -> None:
        reporter(info(f"Upload progress: {event.percent_done}%"))

    return on_progress


def _archive_and_upload(
    request: UploadRequest,
    source: Path,
    archive_path: Path,
    uploader: S3Uploader,
    reporter: Reporter,
    metrics: UploadMetrics,
) -> Tuple[ExitCode, int]:
    destination = resolve_destination(
        request.bucket, request.subdir, request.name, default_directory_name(source)
    )

    reporter(info(f"Creating temporary archive to upload in the parent dir: {archive_path}"))
    with metrics.track_archive():
        archived = create_archive(source, archive_path)
    if not archived.success:
        reporter(error(f"Could not upload directory: {archived.error_message}"))
        return EXIT_CODES[archived.error_kind], 0

    reporter(info("Uploading archive..."))
    uploaded = uploader.upload(archive_path, destination, on_progress=progress_printer(reporter))
    if not uploaded.success:
        reporter(error(f"Could not upload directory: {uploaded.error_message}"))
        return EXIT_CODES[uploaded.error_kind], 0

    reporter(info(f"Uploaded {source} to {uploaded.uri}"))
    return ExitCode.SUCCESS, uploaded.file_size_bytes


@log_function_call
def upload_directory(
    request: UploadRequest,
    uploader: S3Uploader,
    reporter: Reporter,
    metrics: UploadMetrics,
) -> ExitCode:
    """
    Zip a directory next to itself, upload the archive, delete the archive.

    The temp archive is removed after every attempt, successful or not.
    A failed removal turns the run into a failure.
    """
    reporter(info(f"Attempting to upload directory {request.source_path}"))
    source = Path(request.source_path).resolve()

    archive_path = temp_archive_path(source)
    if archive_path is None:
        reporter(error(
            f"Could not resolve a parent directory for {source}; "
            "there is nowhere to create the temporary archive."
        ))
        metrics.record_upload(False, kind="directory")
        return EXIT_CODES[ErrorKind.PATH_RESOLUTION]

    exit_code = ExitCode.FAILURE
    uploaded_bytes = 0
    try:
        exit_code, uploaded_bytes = _archive_and_upload(
            request, source, archive_path, uploader, reporter, metrics
        )
    finally:
        reporter(info("Deleting temporary archive."))
        cleanup_problem = remove_archive(archive_path)

    if cleanup_problem is not None:
        reporter(error(f"Could not delete temporary archive {archive_path}: {cleanup_problem}"))
        exit_code = ExitCode.FAILURE

    metrics.record_upload(exit_code == ExitCode.SUCCESS, kind="directory", bytes_uploaded=uploaded_bytes)
    return exit_code


@log_function_call
def upload_file(
    request: UploadRequest,
    uploader: S3Uploader,
    reporter: Reporter,
    metrics: UploadMetrics,
) -> ExitCode:
    """Upload a single file; the key defaults to its name without extension."""
    reporter(info(f"Attempting to upload file {request.source_path}"))
    source = Path(request.source_path)
    destination = resolve_destination(
        request.bucket, request.subdir, request.name, default_file_name(source)
    )

    reporter(info("Uploading file..."))
    uploaded = uploader.upload(source, destination, on_progress=progress_printer(reporter))
    metrics.record_upload(uploaded.success, kind="file", bytes_uploaded=uploaded.file_size_bytes)

    if not uploaded.success:
        reporter(error(f"Could not upload file: {uploaded.error_message}"))
        return EXIT_CODES[uploaded.error_kind]

    reporter(info(f"Uploaded {source} to {uploaded.uri}"))
    return ExitCode.SUCCESS


def run(
    request: UploadRequest,
    uploader_factory: Optional[UploaderFactory] = None,
    reporter: Optional[Reporter] = None,
    config: Optional[UploaderConfig] = None,
    metrics: Optional[UploadMetrics] = None,
) -> int:
    """
    Validate a request and run the matching upload flow.

    Anything that is not a directory (regular files, but also FIFOs and
    other special files) takes the file flow.

    Args:
        request: The upload to perform
        uploader_factory: Builds the uploader for a validated request
            (default: S3Uploader.from_credentials); never called when
            validation fails
        reporter: Receives status messages (default: ConsoleReporter)
        config: UploaderConfig (default: environment singleton)
        metrics: UploadMetrics (default: process-wide instance)

    Returns:
        Process exit code (see ExitCode)
    """
    reporter = reporter or ConsoleReporter()
    config = config or get_config()
    metrics = metrics or get_metrics()

    canonical, problem = validate_request(request)
    if problem is not None:
        logger.warning(f"Rejected upload request: {problem}")
        reporter(error(problem))
        return int(EXIT_CODES[ErrorKind.VALIDATION])

    factory = uploader_factory or _s3_uploader_factory(config)
    try:
        uploader = factory(canonical)
    except (BotoCoreError, ValueError) as e:
        # botocore rejects malformed regions and endpoint URLs here
        logger.warning(f"Could not create S3 client: {e}")
        reporter(error(f"Could not create S3 client: {describe_exception(e)}"))
        return int(EXIT_CODES[ErrorKind.VALIDATION])

    if Path(canonical.source_path).is_dir():
        exit_code = upload_directory(canonical, uploader, reporter, metrics)
    else:
        exit_code = upload_file(canonical, uploader, reporter, metrics)

    logger.info(f"Upload of {canonical.source_path} finished with exit code {int(exit_code)}")

    if config.metrics_textfile:
        try:
            metrics.write_textfile(config.metrics_textfile)
        except OSError as e:
            logger.error(f"Could not write metrics to {config.metrics_textfile}: {e}", exc_info=True)

    return int(exit_code)
