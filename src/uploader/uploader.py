"""
S3 uploader implementation.

Wraps boto3's managed transfer (upload_file), which decides on its own
whether to use a single PUT or a multipart upload. This module only supplies
the call, turns the transfer manager's byte-count callbacks into percentage
progress events, and reports the outcome as an UploadResult instead of
raising.

Example usage:
    >>> from src.uploader import S3Uploader, resolve_destination
    >>> uploader = S3Uploader.from_credentials("AKIA...", "secret", "eu-north-1")
    >>> destination = resolve_destination("my-bucket", "backups", None, "site")
    >>> result = uploader.upload("./site.zip", destination, on_progress=print)
    >>> if result.success:
    ...     print(f"Uploaded to {result.uri}")
"""

import os
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, Union

import boto3
from boto3.s3.transfer import TransferConfig
from botocore.client import BaseClient

from src.uploader.keys import ResolvedDestination
from src.utils.config import UploaderConfig, get_config
from src.utils.errors import ErrorKind, describe_exception
from src.utils.logging import get_logger, log_function_call
from src.utils.metrics import UploadMetrics, get_metrics

logger = get_logger(__name__)

MB = 1024 * 1024


@dataclass(frozen=True)
class ProgressEvent:
    """
    Transfer progress snapshot.

    Attributes:
        percent_done: Integer percentage, 0 to 100
        bytes_transferred: Bytes sent so far
        total_bytes: Size of the local file
    """

    percent_done: int
    bytes_transferred: int = 0
    total_bytes: int = 0


ProgressObserver = Callable[[ProgressEvent], None]


@dataclass
class UploadResult:
    """
    Result of an S3 upload.

    Attributes:
        success: Whether the transfer completed
        uri: s3:// URI of the object (None if failed)
        local_path: Local file that was sent
        destination: Resolved bucket path and key
        file_size_bytes: Size of the local file
        duration_seconds: Transfer time in seconds
        error_kind: ErrorKind.TRANSFER on failure
        error_message: Full diagnostic text on failure
    """

    success: bool
    uri: Optional[str]
    local_path: str
    destination: ResolvedDestination
    file_size_bytes: int
    duration_seconds: float
    error_kind: Optional[ErrorKind] = None
    error_message: Optional[str] = None


class _ProgressTracker:
    """
    Adapts boto3's Callback(bytes_amount) protocol to ProgressEvent.

    Only emits when the integer percentage changes. Monotonicity is whatever
    the transfer manager delivers.
    """

    def __init__(self, total_bytes: int, observer: ProgressObserver) -> None:
        self._total = total_bytes
        self._observer = observer
        self._seen = 0
        self._last_percent: Optional[int] = None

    def __call__(self, bytes_amount: int) -> None:
        self._seen += bytes_amount
        if self._total > 0:
            percent = min(100, self._seen * 100 // self._total)
        else:
            percent = 100

        if percent == self._last_percent:
            return
        self._last_percent = percent
        self._observer(
            ProgressEvent(
                percent_done=percent,
                bytes_transferred=self._seen,
                total_bytes=self._total,
            )
        )


def build_transfer_config(config: UploaderConfig) -> TransferConfig:
    """
    Transfer manager settings.

    use_threads=False keeps every progress callback on the calling thread,
    so events always precede the return of upload().
    """
    return TransferConfig(
        multipart_threshold=config.multipart_threshold_mb * MB,
        multipart_chunksize=config.multipart_chunksize_mb * MB,
        use_threads=False,
    )


class S3Uploader:
    """Upload local files to S3 through a boto3 client."""

    def __init__(
        self,
        client: BaseClient,
        transfer_config: Optional[TransferConfig] = None,
        metrics: Optional[UploadMetrics] = None,
    ) -> None:
        self.client = client
        self.transfer_config = transfer_config or build_transfer_config(get_config())
        self.metrics = metrics or get_metrics()

    @classmethod
    def from_credentials(
        cls,
        access_key: str,
        secret_key: str,
        region: Optional[str] = None,
        config: Optional[UploaderConfig] = None,
    ) -> "S3Uploader":
        """
        Build an uploader with an S3 client for the given credentials.

        Creating the client does not contact the network; the first request
        happens in upload().

        Args:
            access_key: AWS access key id
            secret_key: AWS secret access key
            region: Region name; config.default_region when empty
            config: UploaderConfig (defaults to the environment singleton)
        """
        config = config or get_config()
        region_name = region or config.default_region
        logger.debug(f"Creating S3 client for region {region_name}")

        client = boto3.client(
            "s3",
            aws_access_key_id=access_key,
            aws_secret_access_key=secret_key,
            region_name=region_name,
            endpoint_url=config.endpoint_url,
        )
        return cls(client, transfer_config=build_transfer_config(config))

    @log_function_call
    def upload(
        self,
        local_path: Union[str, Path],
        destination: ResolvedDestination,
        on_progress: Optional[ProgressObserver] = None,
    ) -> UploadResult:
        """
        Upload one local file to the resolved destination.

        Args:
            local_path: File to send
            destination: Bucket path and key from resolve_destination()
            on_progress: Observer called with ProgressEvent during transfer

        Returns:
            UploadResult; failures carry ErrorKind.TRANSFER and the full
            exception text instead of raising.
        """
        local_path = str(local_path)
        start_time = time.time()
        file_size = 0

        try:
            file_size = os.path.getsize(local_path)
            callback = _ProgressTracker(file_size, on_progress) if on_progress else None

            logger.info(
                f"Uploading {local_path} ({file_size} bytes) to {destination.uri}"
            )
            with self.metrics.track_upload():
                self.client.upload_file(
                    local_path,
                    destination.bucket_name,
                    destination.key,
                    Callback=callback,
                    Config=self.transfer_config,
                )

        except Exception as e:
            duration = time.time() - start_time
            logger.error(f"S3 upload failed: {e}", exc_info=True)
            self.metrics.record_s3_error(error_type=type(e).__name__)
            return UploadResult(
                success=False,
                uri=None,
                local_path=local_path,
                destination=destination,
                file_size_bytes=file_size,
                duration_seconds=duration,
                error_kind=ErrorKind.TRANSFER,
                error_message=describe_exception(e),
            )

        duration = time.time() - start_time
        logger.info(
            f"Upload successful: {destination.uri} "
            f"({file_size} bytes in {duration:.2f}s)"
        )
        return UploadResult(
            success=True,
            uri=destination.uri,
            local_path=local_path,
            destination=destination,
            file_size_bytes=file_size,
            duration_seconds=duration,
        )
