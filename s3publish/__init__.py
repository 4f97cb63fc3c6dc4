"""
S3 Publish

Publishes local file trees (a single file, a build-artifact folder, or a
whole static-site folder) to an S3 bucket using a bounded pool of upload
workers.

This package provides modular components for each stage of a publish:
- transfer: manifest building, work queue, worker pool, precleaning, jobs
- storage: bucket handle abstraction and the boto3-backed implementation
- utils: Logging, configuration, metrics and retry helpers

Command-line entry points live in scripts/publish.py and scripts/find.py.
"""

__version__ = "0.1.0"

# Package-level imports
from s3publish.utils.logging import setup_logging

# Initialize default logging configuration
setup_logging()
