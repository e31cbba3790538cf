#!/usr/bin/env python3
"""
Upload a file or a directory to Amazon S3.

Directories are zipped into TempS3Archive.zip in their parent directory,
uploaded as a single object and the archive is deleted afterwards.

Usage:
    python scripts/upload_to_s3.py -k KEY -s SECRET -p ./report.pdf -b my-bucket
    python scripts/upload_to_s3.py -k KEY -s SECRET -p ./site -b my-bucket -d nightly
    python scripts/upload_to_s3.py -k KEY -s SECRET -p ./site -b my-bucket -n site-v2 -r us-east-1

Exit codes:
    0  success
    1  archive or upload failure
    2  source directory has no parent directory
    3  invalid or missing arguments
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

# Add project root to path for imports (before other imports)
_project_root = Path(__file__).parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

from src.dispatcher import ExitCode, UploadRequest, run  # noqa: E402
from src.utils.config import UploaderConfig  # noqa: E402
from src.utils.console import ConsoleReporter, error  # noqa: E402
from src.utils.logging import get_logger, setup_logging  # noqa: E402
from src.utils.metrics import UploadMetrics  # noqa: E402

logger = get_logger(__name__)


class _ArgumentParser(argparse.ArgumentParser):
    """ArgumentParser whose parse failures exit with INVALID_ARGUMENTS."""

    def error(self, message: str) -> None:  # type: ignore[override]
        self.print_usage(sys.stderr)
        ConsoleReporter()(error(f"Could not parse arguments: {message}"))
        sys.exit(int(ExitCode.INVALID_ARGUMENTS))


def build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        description="Upload a file, or a zipped directory, to Amazon S3",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Upload a file; the key is the file name without extension ("report")
  %(prog)s -k KEY -s SECRET -p ./report.pdf -b my-bucket

  # Zip and upload a directory under a subdirectory of the bucket
  %(prog)s -k KEY -s SECRET -p ./site -b my-bucket -d nightly

  # Choose the object name and region
  %(prog)s -k KEY -s SECRET -p ./site -b my-bucket -n site-v2 -r us-east-1
        """,
    )

    parser.add_argument("-k", "--key", required=True, help="Your S3 access key.")
    parser.add_argument("-s", "--secretkey", required=True, help="Your S3 secret key.")
    parser.add_argument(
        "-r",
        "--region",
        help="Your S3 region (default: S3_UPLOADER_DEFAULT_REGION or eu-north-1).",
    )
    parser.add_argument(
        "-p",
        "--path",
        required=True,
        help="Directory to zip and upload, or file to upload.",
    )
    parser.add_argument("-b", "--bucket", required=True, help="The bucket to upload to.")
    parser.add_argument("-n", "--name", help="Optional new name to use in S3.")
    parser.add_argument("-d", "--subdir", help="Optional subdir to upload to in S3.")
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging on stderr",
    )

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the upload CLI."""
    args = build_parser().parse_args(argv)
    reporter = ConsoleReporter()

    try:
        config = UploaderConfig.from_env()
    except ValueError as e:
        reporter(error(f"Configuration error: {e}"))
        return int(ExitCode.INVALID_ARGUMENTS)

    setup_logging(level="DEBUG" if args.verbose else config.log_level)

    request = UploadRequest(
        source_path=args.path,
        bucket=args.bucket,
        access_key=args.key,
        secret_key=args.secretkey,
        region=args.region,
        subdir=args.subdir,
        name=args.name,
    )

    try:
        return run(
            request,
            reporter=reporter,
            config=config,
            metrics=UploadMetrics(enabled=config.metrics_enabled),
        )
    except KeyboardInterrupt:
        reporter(error("Upload cancelled by user"))
        return 130


if __name__ == "__main__":
    sys.exit(main())
