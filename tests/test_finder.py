"""Unit tests for find_object."""

import pytest

from s3publish.errors import ObjectNotFoundError
from s3publish.storage.finder import find_object

BASE_URL = "https://test-bucket.s3.us-east-1.amazonaws.com"


class TestFindObject:
    """Test lookup by prefix and file name."""

    def test_returns_url_of_match(self, make_bucket):
        bucket = make_bucket(keys=["releases/app-1.3.0.apk", "releases/app-1.4.0.apk"])

        url = find_object(bucket, "releases/", "app-1.4.0")

        assert url == f"{BASE_URL}/releases/app-1.4.0.apk"

    def test_first_match_wins(self, make_bucket):
        bucket = make_bucket(keys=["releases/1/app.apk", "releases/2/app.apk"])

        assert find_object(bucket, "releases/", "app.apk") == f"{BASE_URL}/releases/1/app.apk"

    def test_prefix_limits_search(self, make_bucket):
        bucket = make_bucket(keys=["other/app.apk"])

        assert find_object(bucket, "releases/", "app.apk") is None

    def test_no_match_with_fail(self, make_bucket):
        bucket = make_bucket(keys=["releases/app.apk"])

        with pytest.raises(ObjectNotFoundError, match="No files were found with filename: x.ipa"):
            find_object(bucket, "releases/", "x.ipa", fail=True)
