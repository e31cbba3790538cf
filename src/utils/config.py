"""
Environment configuration loader for the S3 uploader.

Loads settings from a .env file (python-dotenv) and the process environment.
Credentials are never read from here: they come from the command line.
"""

import os
from pathlib import Path
from typing import Optional
from dataclasses import dataclass

from dotenv import load_dotenv

DEFAULT_REGION = "eu-north-1"


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {value}")
    return value


@dataclass
class UploaderConfig:
    """Uploader environment configuration."""

    # S3 client
    default_region: str = DEFAULT_REGION
    endpoint_url: Optional[str] = None

    # Transfer manager tuning (multipart decisions stay with boto3)
    multipart_threshold_mb: int = 8
    multipart_chunksize_mb: int = 8

    # Observability
    log_level: str = "WARNING"
    metrics_enabled: bool = True
    metrics_textfile: Optional[str] = None

    @classmethod
    def from_env(cls, env_file: Optional[Path] = None) -> "UploaderConfig":
        """
        Load configuration from environment variables.

        Loads env_file (default: ./.env) first when it exists; variables
        already set in the environment win over the file.

        Returns:
            UploaderConfig instance with loaded values

        Raises:
            ValueError: If a numeric variable is malformed
        """
        env_path = env_file if env_file is not None else Path.cwd() / ".env"
        if env_path.is_file():
            load_dotenv(env_path, override=False)

        return cls(
            default_region=os.getenv("S3_UPLOADER_DEFAULT_REGION") or DEFAULT_REGION,
            endpoint_url=os.getenv("S3_ENDPOINT_URL") or None,
            multipart_threshold_mb=_env_int("S3_MULTIPART_THRESHOLD_MB", 8),
            multipart_chunksize_mb=_env_int("S3_MULTIPART_CHUNKSIZE_MB", 8),
            log_level=os.getenv("LOG_LEVEL", "WARNING"),
            metrics_enabled=os.getenv("METRICS_ENABLED", "true").lower() == "true",
            metrics_textfile=os.getenv("METRICS_TEXTFILE") or None,
        )


# Global config instance (lazy-loaded)
_config: Optional[UploaderConfig] = None


def get_config() -> UploaderConfig:
    """
    Get or create the configuration singleton.

    Example:
        >>> config = get_config()
        >>> print(config.default_region)
        eu-north-1
    """
    global _config
    if _config is None:
        _config = UploaderConfig.from_env()
    return _config
