"""
Utility modules for the S3 uploader.

This package provides shared utilities used across all pipeline stages:
- logging: Diagnostic logging with entry/exit decorators
- config: Environment configuration
- console: User-facing status lines
- errors: Error classification
- metrics: Prometheus counters for upload runs
"""

from src.utils.logging import get_logger, log_function_call

__all__ = ["get_logger", "log_function_call"]
