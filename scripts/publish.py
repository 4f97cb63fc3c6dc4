#!/usr/bin/env python3
"""
Publish a file, a folder, or a whole static site to S3.

CLI wrapper for the transfer engine providing command-line access with
environment-based credentials (S3_PUBLISH_* variables or a .env file).

Usage:
    python scripts/publish.py --file build/app.apk --path releases/1.4.0
    python scripts/publish.py --folder build/reports --path reports/1.4.0
    python scripts/publish.py --web-folder site/public --clean
    python scripts/publish.py --jobs publish.yaml --dry-run
"""

import argparse
import dataclasses
import sys
from pathlib import Path

import yaml

# Add project root to path for imports (before other imports)
_project_root = Path(__file__).parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

from s3publish.errors import ConfigError, S3PublishError  # noqa: E402
from s3publish.transfer import run_job  # noqa: E402
from s3publish.utils.config import JobKind, TransferConfig  # noqa: E402
from s3publish.utils.config_loader import jobs_from_config, load_config  # noqa: E402
from s3publish.utils.logging import get_logger, setup_logging  # noqa: E402
from s3publish.utils.metrics import start_metrics_server  # noqa: E402

logger = get_logger(__name__)


def parse_args(argv=None):
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Publish files and folders to an S3 bucket",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Credentials and bucket come from the environment:
  S3_PUBLISH_ACCESS_KEY, S3_PUBLISH_ACCESS_SECRET,
  S3_PUBLISH_REGION, S3_PUBLISH_BUCKET
  (optional) S3_PUBLISH_ACL, S3_PUBLISH_THREADS, S3_PUBLISH_DRY_RUN,
             S3_PUBLISH_CLEAN, S3_PUBLISH_VERBOSE

Examples:
  # Upload one file into a remote folder
  %(prog)s --file app.apk --path releases/1.4.0

  # Copy a folder under a remote prefix with 8 workers
  %(prog)s --folder build/reports --path reports/1.4.0 --threads 8

  # Mirror a static site at the bucket root, clearing the bucket first
  %(prog)s --web-folder site/public --clean

  # Rehearse without touching the bucket
  %(prog)s --folder dist --path v1 --dry-run
        """,
    )

    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--file", help="Single file to upload")
    source.add_argument("--folder", help="Folder to copy under --path")
    source.add_argument("--web-folder", help="Folder to mirror at the bucket root")
    source.add_argument("--jobs", help="YAML job file describing one or more publishes")

    parser.add_argument(
        "-p",
        "--path",
        default="",
        help="Remote path (key prefix) for --file and --folder",
    )
    parser.add_argument(
        "-t",
        "--threads",
        type=int,
        help="Number of upload workers (default: from environment, else 3)",
    )
    parser.add_argument("--acl", help="Canned ACL for uploaded objects (default: public-read)")
    parser.add_argument(
        "--clean",
        action="store_true",
        help="Delete every object in the bucket before a --web-folder sync",
    )
    parser.add_argument(
        "-n",
        "--dry-run",
        action="store_true",
        help="Walk and report without uploading or deleting anything",
    )
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Only log summaries, not per-file progress",
    )
    parser.add_argument(
        "--metrics-port",
        type=int,
        help="Expose Prometheus metrics on this port while publishing",
    )

    return parser.parse_args(argv)


def build_config(args) -> TransferConfig:
    """Environment configuration with command-line overrides applied."""
    if args.file:
        kind = JobKind.SINGLE_FILE
    elif args.web_folder:
        kind = JobKind.FULL_BUCKET_SYNC
    else:
        kind = JobKind.FOLDER_COPY

    config = TransferConfig.from_env(job_kind=kind)

    overrides = {}
    if args.threads is not None:
        overrides["concurrency"] = args.threads
    if args.acl:
        overrides["acl"] = args.acl
    if args.clean:
        overrides["clean"] = True
    if args.dry_run:
        overrides["dry_run"] = True
    if args.quiet:
        overrides["verbose"] = False

    config = dataclasses.replace(config, **overrides)
    config.validate()
    return config


def main(argv=None):
    """Main entry point for publish CLI."""
    args = parse_args(argv)
    setup_logging(level="INFO")

    try:
        config = build_config(args)
    except ConfigError as e:
        print(f"❌ Configuration error: {e}")
        print("\nMake sure .env exists or the environment defines:")
        print("  - S3_PUBLISH_ACCESS_KEY")
        print("  - S3_PUBLISH_ACCESS_SECRET")
        print("  - S3_PUBLISH_REGION")
        print("  - S3_PUBLISH_BUCKET")
        return 1

    if args.metrics_port:
        start_metrics_server(port=args.metrics_port)

    if args.jobs:
        try:
            specs = jobs_from_config(load_config(args.jobs), config)
        except (OSError, ValueError, yaml.YAMLError) as e:
            print(f"❌ Invalid job file: {e}")
            return 1
        if args.dry_run:
            specs = [
                dataclasses.replace(spec, config=dataclasses.replace(spec.config, dry_run=True))
                for spec in specs
            ]
        jobs = [(spec.config, spec.source, spec.remote_prefix) for spec in specs]
    else:
        source = args.file or args.folder or args.web_folder
        jobs = [(config, source, args.path)]

    exit_code = 0
    try:
        for job_config, source, remote_prefix in jobs:
            result = run_job(job_config, source, remote_prefix=remote_prefix)
            failed = result.failed

            print(f"✅ {job_config.job_kind.value}: {source}")
            print(f"  Public URL: {result.public_url}")
            print(f"  Entries: {result.total}")
            if failed:
                exit_code = 1
                print(f"  ❌ Failed: {len(failed)}")
                for event in failed:
                    print(f"    • {event.remote_key}: {event.error}")

    except KeyboardInterrupt:
        print("\n⚠️  Publish cancelled by user")
        return 130

    except S3PublishError as e:
        logger.error(f"Publish failed: {e}")
        print(f"❌ Publish failed: {e}")
        return 1

    return exit_code


if __name__ == "__main__":
    sys.exit(main())
