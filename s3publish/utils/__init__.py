"""
Utility modules for s3publish.

This package provides shared utilities used across all transfer stages:
- logging: Structured logging with entry/exit decorators
- config: Transfer configuration loading and validation
- config_loader: YAML job files
- metrics: Prometheus instrumentation
- retry: Backoff retry for transient transport errors
"""

from s3publish.utils.logging import get_logger, log_function_call

__all__ = ["get_logger", "log_function_call"]
