"""
S3 Directory Uploader

Uploads a local file, or a directory zipped into a temporary archive, to an
S3 bucket with progress reporting.

This package provides one module per pipeline stage:
- archiver: temp-archive creation and cleanup
- uploader: destination naming and the S3 transfer
- dispatcher: validation, file/directory routing, exit codes
- utils: logging, configuration, console output and metrics
"""

import os

__version__ = "0.1.0"

from src.utils.logging import setup_logging

# Initialize default logging configuration
setup_logging(level=os.getenv("LOG_LEVEL", "WARNING"))
