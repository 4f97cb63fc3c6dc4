"""
Job-file loader and validator for batch publishes.

Loads YAML files describing one or more transfer jobs and validates them
against the expected schema before anything touches the network.

Example job file (publish.yaml):
    ```yaml
    version: "1.0"

    jobs:
      - kind: single_file
        source: build/app-release.apk
        remote: releases/1.4.0

      - kind: folder_copy
        source: build/reports
        remote: reports/1.4.0
        concurrency: 6

      - kind: full_bucket_sync
        source: site/public
        clean: true
    ```

Usage:
    >>> from s3publish.utils.config_loader import load_config, validate_config
    >>> config = load_config("publish.yaml")
    >>> issues = validate_config(config)
    >>> if not issues:
    ...     specs = jobs_from_config(config, get_config())
"""

from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from s3publish.utils.config import VALID_ACLS, JobKind, TransferConfig
from s3publish.utils.logging import get_logger

logger = get_logger(__name__)


# Supported config versions
SUPPORTED_VERSIONS = ["1.0"]

VALID_JOB_KINDS = [kind.value for kind in JobKind]

# Per-job keys that override the base TransferConfig
_OVERRIDE_FIELDS = ("concurrency", "dry_run", "clean", "acl")


@dataclass
class ConfigIssue:
    """Validation problem in a job file."""

    field: str
    message: str
    value: Optional[Any] = None

    def __str__(self) -> str:
        if self.value is not None:
            return f"{self.field}: {self.message} (got: {self.value})"
        return f"{self.field}: {self.message}"


@dataclass(frozen=True)
class JobSpec:
    """A job from a job file, resolved against the base configuration."""

    config: TransferConfig
    source: str
    remote_prefix: str = ""


def load_config(config_path: Union[str, Path]) -> Dict[str, Any]:
    """
    Load a job file.

    Args:
        config_path: Path to YAML job file

    Returns:
        Dictionary containing parsed configuration

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the path is not a file or the file is empty
        yaml.YAMLError: If YAML is malformed
    """
    path = Path(config_path)
    logger.info(f"Loading job file from: {path}")

    if not path.exists():
        raise FileNotFoundError(f"Job file not found: {path}")

    if not path.is_file():
        raise ValueError(f"Job file path is not a file: {path}")

    try:
        with open(path, "r") as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        logger.error(f"Failed to parse YAML: {e}")
        raise

    if config is None:
        raise ValueError("Job file is empty")
    if not isinstance(config, dict):
        raise ValueError(f"Job file must contain a mapping, got {type(config).__name__}")

    logger.info(f"Job file loaded: {len(config.get('jobs') or [])} job(s)")
    return dict(config)


def validate_config(config: Dict[str, Any]) -> List[ConfigIssue]:
    """
    Validate a parsed job file against the expected schema.

    Args:
        config: Configuration dictionary to validate

    Returns:
        List of validation issues (empty if valid)
    """
    issues: List[ConfigIssue] = []

    if "version" not in config:
        issues.append(ConfigIssue("version", "Missing required field"))
    elif str(config["version"]) not in SUPPORTED_VERSIONS:
        issues.append(
            ConfigIssue(
                "version",
                f"Unsupported version (supported: {SUPPORTED_VERSIONS})",
                config["version"],
            )
        )

    if "jobs" not in config:
        issues.append(ConfigIssue("jobs", "Missing required field"))
    else:
        issues.extend(_validate_jobs(config["jobs"]))

    if issues:
        logger.warning(f"Job file validation failed with {len(issues)} issue(s)")
    else:
        logger.info("Job file validation passed")

    return issues


def _validate_jobs(jobs: Any) -> List[ConfigIssue]:
    issues: List[ConfigIssue] = []

    if not isinstance(jobs, list):
        issues.append(ConfigIssue("jobs", "Must be a list", type(jobs).__name__))
        return issues

    if len(jobs) == 0:
        issues.append(ConfigIssue("jobs", "Must contain at least one job"))

    for i, job in enumerate(jobs):
        prefix = f"jobs[{i}]"

        if not isinstance(job, dict):
            issues.append(ConfigIssue(prefix, "Must be a mapping", type(job).__name__))
            continue

        kind = job.get("kind")
        if kind is None:
            issues.append(ConfigIssue(f"{prefix}.kind", "Missing required field"))
        elif kind not in VALID_JOB_KINDS:
            issues.append(
                ConfigIssue(f"{prefix}.kind", f"Invalid job kind (valid: {VALID_JOB_KINDS})", kind)
            )

        if not job.get("source"):
            issues.append(ConfigIssue(f"{prefix}.source", "Missing required field"))

        if kind == JobKind.FOLDER_COPY.value and not job.get("remote"):
            issues.append(ConfigIssue(f"{prefix}.remote", "Required for folder_copy"))

        if "remote" in job and not isinstance(job["remote"], str):
            issues.append(
                ConfigIssue(f"{prefix}.remote", "Must be a string", type(job["remote"]).__name__)
            )

        if "concurrency" in job:
            concurrency = job["concurrency"]
            if isinstance(concurrency, bool) or not isinstance(concurrency, int):
                issues.append(
                    ConfigIssue(
                        f"{prefix}.concurrency", "Must be an integer", type(concurrency).__name__
                    )
                )
            elif concurrency < 1:
                issues.append(ConfigIssue(f"{prefix}.concurrency", "Must be at least 1", concurrency))

        for flag in ("dry_run", "clean"):
            if flag in job and not isinstance(job[flag], bool):
                issues.append(
                    ConfigIssue(f"{prefix}.{flag}", "Must be true or false", job[flag])
                )

        if "acl" in job and job["acl"] not in VALID_ACLS:
            issues.append(ConfigIssue(f"{prefix}.acl", f"Invalid ACL (valid: {VALID_ACLS})", job["acl"]))

    return issues


def jobs_from_config(config: Dict[str, Any], base: TransferConfig) -> List[JobSpec]:
    """
    Resolve each job in a validated job file against ``base``.

    Credentials, bucket and region come from ``base``; each job sets its
    kind and may override concurrency, dry_run, clean and acl.

    Raises:
        ValueError: If the job file does not validate
    """
    issues = validate_config(config)
    if issues:
        raise ValueError("Invalid job file: " + "; ".join(str(issue) for issue in issues))

    specs = []
    for job in config["jobs"]:
        overrides = {key: job[key] for key in _OVERRIDE_FIELDS if key in job}
        job_config = replace(base, job_kind=JobKind(job["kind"]), **overrides)
        specs.append(
            JobSpec(
                config=job_config,
                source=str(job["source"]),
                remote_prefix=str(job.get("remote", "")),
            )
        )
    return specs
