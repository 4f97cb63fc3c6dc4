"""
Transfer configuration for s3publish.

Loads credentials and transfer settings from a .env file or environment
variables and validates them before any manifest is built or any network
call is made.
"""

import os
from dataclasses import dataclass, asdict, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv

from s3publish.errors import ConfigError

# Canned ACLs accepted by S3
VALID_ACLS = [
    "private",
    "public-read",
    "public-read-write",
    "authenticated-read",
    "aws-exec-read",
    "bucket-owner-read",
    "bucket-owner-full-control",
]

DEFAULT_ACL = "public-read"
DEFAULT_CONCURRENCY = 3
DEFAULT_ENV_PREFIX = "S3_PUBLISH"

MASK = "********"

_TRUE_VALUES = ("1", "true", "yes", "on")


class JobKind(str, Enum):
    """Kinds of transfer job, each shaping manifest keys and the result URL."""

    SINGLE_FILE = "single_file"
    FOLDER_COPY = "folder_copy"
    FULL_BUCKET_SYNC = "full_bucket_sync"


@dataclass(frozen=True)
class TransferConfig:
    """
    Settings for one transfer job. Immutable for the duration of the job.

    Attributes:
        bucket: S3 bucket name
        region: AWS region of the bucket (e.g. 'us-east-1')
        access_key: AWS access key id
        access_secret: AWS secret access key
        job_kind: Which of the three job kinds to run
        acl: Canned ACL applied to every uploaded object
        concurrency: Number of upload workers (>= 1)
        dry_run: Traverse and report without any mutating remote call
        clean: Clear the whole bucket before a full bucket sync
        verbose: Log per-unit progress at INFO instead of DEBUG
    """

    bucket: str
    region: str
    access_key: str = field(repr=False)
    access_secret: str = field(repr=False)
    job_kind: JobKind = JobKind.FOLDER_COPY
    acl: str = DEFAULT_ACL
    concurrency: int = DEFAULT_CONCURRENCY
    dry_run: bool = False
    clean: bool = False
    verbose: bool = True

    def validate(self) -> None:
        """
        Check required parameters and value ranges.

        Raises:
            ConfigError: On the first missing or invalid parameter
        """
        required = [
            (self.access_key, "Missing access key"),
            (self.access_secret, "Missing access secret"),
            (self.region, "Missing region"),
            (self.bucket, "Missing bucket"),
        ]
        for value, message in required:
            if not value:
                raise ConfigError(message)

        if not isinstance(self.job_kind, JobKind):
            raise ConfigError(f"Unknown job kind: {self.job_kind!r}")

        if self.concurrency < 1:
            raise ConfigError(
                f"Concurrency must be at least 1 (got: {self.concurrency})"
            )

        if self.acl not in VALID_ACLS:
            raise ConfigError(
                f"Invalid ACL {self.acl!r} (valid: {', '.join(VALID_ACLS)})"
            )

    def summary(self) -> Dict[str, Any]:
        """Return the settings as a dict with credentials masked."""
        values = asdict(self)
        values["job_kind"] = self.job_kind.value
        for secret in ("access_key", "access_secret"):
            if values[secret]:
                values[secret] = MASK
        return values

    @classmethod
    def from_env(
        cls,
        job_kind: JobKind = JobKind.FOLDER_COPY,
        prefix: str = DEFAULT_ENV_PREFIX,
    ) -> "TransferConfig":
        """
        Load configuration from environment variables.

        Loads a .env file from the working directory if present, then reads
        ``<PREFIX>_ACCESS_KEY``, ``_ACCESS_SECRET``, ``_REGION``, ``_BUCKET``
        (required) and ``_ACL``, ``_THREADS``, ``_DRY_RUN``, ``_CLEAN``,
        ``_VERBOSE`` (optional).

        Args:
            job_kind: Job kind the configuration is for
            prefix: Environment variable prefix

        Returns:
            Validated TransferConfig

        Raises:
            ConfigError: If required environment variables are missing or invalid
        """
        env_path = Path.cwd() / ".env"
        if env_path.exists():
            load_dotenv(env_path)

        def env(name: str, default: Optional[str] = None) -> Optional[str]:
            return os.getenv(f"{prefix}_{name}", default)

        required = {}
        for name in ("ACCESS_KEY", "ACCESS_SECRET", "REGION", "BUCKET"):
            value = env(name)
            if not value:
                raise ConfigError(
                    f"{prefix}_{name} environment variable is required. "
                    "Set it in .env or export it."
                )
            required[name] = value

        threads = env("THREADS", str(DEFAULT_CONCURRENCY))
        try:
            concurrency = int(threads)
        except ValueError as exc:
            raise ConfigError(
                f"{prefix}_THREADS must be an integer (got: {threads})"
            ) from exc

        config = cls(
            bucket=required["BUCKET"],
            region=required["REGION"],
            access_key=required["ACCESS_KEY"],
            access_secret=required["ACCESS_SECRET"],
            job_kind=job_kind,
            acl=env("ACL", DEFAULT_ACL),
            concurrency=concurrency,
            dry_run=_env_flag(env("DRY_RUN"), False),
            clean=_env_flag(env("CLEAN"), False),
            verbose=_env_flag(env("VERBOSE"), True),
        )
        config.validate()
        return config


def _env_flag(value: Optional[str], default: bool) -> bool:
    if value is None or value == "":
        return default
    return value.strip().lower() in _TRUE_VALUES


# Global config instance (lazy-loaded)
_config: Optional[TransferConfig] = None


def get_config() -> TransferConfig:
    """
    Get or create the process-wide transfer configuration.

    Returns:
        TransferConfig loaded from environment

    Example:
        >>> config = get_config()
        >>> print(config.bucket)
        static-site-prod
    """
    global _config
    if _config is None:
        _config = TransferConfig.from_env()
    return _config
