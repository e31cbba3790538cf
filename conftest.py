"""Pytest configuration."""

import sys
import zipfile
from pathlib import Path

import pytest

# Add project root to path for imports
project_root = Path(__file__).parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from src.uploader import ProgressEvent, UploadResult  # noqa: E402
from src.utils.errors import ErrorKind  # noqa: E402


class RecordingReporter:
    """Reporter that keeps every StatusMessage instead of printing it."""

    def __init__(self):
        self.messages = []

    def __call__(self, message):
        self.messages.append(message)

    @property
    def lines(self):
        return [m.text for m in self.messages]

    @property
    def errors(self):
        return [m.text for m in self.messages if m.is_error]


class FakeUploader:
    """
    Stand-in for S3Uploader.

    Records each call, snapshots zip archives while they still exist and
    emits progress at 50% and 100% before returning.
    """

    def __init__(self, fail_with=None):
        self.fail_with = fail_with
        self.calls = []
        self.archive_entries = None
        self.existed_during_upload = None

    def upload(self, local_path, destination, on_progress=None):
        local_path = Path(local_path)
        self.calls.append((local_path, destination))
        self.existed_during_upload = local_path.exists()

        if local_path.is_file() and zipfile.is_zipfile(local_path):
            with zipfile.ZipFile(local_path) as archive:
                self.archive_entries = {
                    name: archive.read(name) for name in archive.namelist()
                }

        if on_progress is not None:
            on_progress(ProgressEvent(percent_done=50))
            on_progress(ProgressEvent(percent_done=100))

        if self.fail_with is not None:
            return UploadResult(
                success=False,
                uri=None,
                local_path=str(local_path),
                destination=destination,
                file_size_bytes=0,
                duration_seconds=0.01,
                error_kind=ErrorKind.TRANSFER,
                error_message=self.fail_with,
            )
        return UploadResult(
            success=True,
            uri=destination.uri,
            local_path=str(local_path),
            destination=destination,
            file_size_bytes=123,
            duration_seconds=0.01,
        )


@pytest.fixture
def reporter():
    return RecordingReporter()


@pytest.fixture
def fake_uploader():
    return FakeUploader()
