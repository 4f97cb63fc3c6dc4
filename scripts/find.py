#!/usr/bin/env python3
"""
Find a published object on S3 and print its public URL.

Usage:
    python scripts/find.py --prefix releases/ --filename app-1.4.0.apk
    python scripts/find.py --prefix releases/ --filename app.apk --fail
"""

import argparse
import sys
from pathlib import Path

# Add project root to path for imports (before other imports)
_project_root = Path(__file__).parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

from s3publish.errors import ConfigError, ObjectNotFoundError, StorageError  # noqa: E402
from s3publish.storage import S3BucketHandle, find_object  # noqa: E402
from s3publish.utils.config import get_config  # noqa: E402
from s3publish.utils.logging import get_logger  # noqa: E402

logger = get_logger(__name__)


def parse_args(argv=None):
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Find an object in an S3 bucket by prefix and file name",
    )
    parser.add_argument(
        "--prefix",
        required=True,
        help="Key prefix (folder path) to search in",
    )
    parser.add_argument(
        "--filename",
        required=True,
        help="Name (or part of the name) of the object to find",
    )
    parser.add_argument(
        "--fail",
        action="store_true",
        help="Exit with an error if nothing matches",
    )
    return parser.parse_args(argv)


def main(argv=None):
    """Main entry point for find CLI."""
    args = parse_args(argv)

    try:
        config = get_config()
    except ConfigError as e:
        print(f"❌ Configuration error: {e}")
        return 1

    bucket = S3BucketHandle.from_config(config)

    try:
        url = find_object(bucket, args.prefix, args.filename, fail=args.fail)
    except (ObjectNotFoundError, StorageError) as e:
        print(f"❌ {e}")
        return 1

    if url is None:
        print(f"⚠️  No object found for {args.filename}")
        return 0

    print(url)
    return 0


if __name__ == "__main__":
    sys.exit(main())
