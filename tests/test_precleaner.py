"""Unit tests for the full-bucket wipe before a sync."""

from pathlib import Path

import pytest

from s3publish.errors import PrecleanError
from s3publish.transfer.job import JobState, TransferJob
from s3publish.transfer.precleaner import preclean, should_preclean
from s3publish.utils.config import JobKind


class TestShouldPreclean:
    """Only a full bucket sync with clean enabled wipes the bucket."""

    @pytest.mark.parametrize(
        "kind, clean, expected",
        [
            (JobKind.FULL_BUCKET_SYNC, True, True),
            (JobKind.FULL_BUCKET_SYNC, False, False),
            (JobKind.FOLDER_COPY, True, False),
            (JobKind.SINGLE_FILE, True, False),
        ],
    )
    def test_matrix(self, make_config, kind, clean, expected):
        assert should_preclean(make_config(job_kind=kind, clean=clean)) is expected


class TestPreclean:
    """Test preclean against the recording bucket."""

    def test_deletes_once(self, bucket, make_config):
        config = make_config(job_kind=JobKind.FULL_BUCKET_SYNC, clean=True)

        assert preclean(bucket, config) is True
        assert bucket.count("delete_all") == 1

    def test_skipped_without_clean(self, bucket, make_config):
        config = make_config(job_kind=JobKind.FULL_BUCKET_SYNC, clean=False)

        assert preclean(bucket, config) is False
        assert bucket.calls == []

    def test_dry_run_never_deletes(self, bucket, make_config):
        config = make_config(job_kind=JobKind.FULL_BUCKET_SYNC, clean=True, dry_run=True)

        assert preclean(bucket, config) is False
        assert bucket.calls == []

    def test_failure_raises_preclean_error(self, make_bucket, make_config):
        bucket = make_bucket(fail_delete=True)
        config = make_config(job_kind=JobKind.FULL_BUCKET_SYNC, clean=True)

        with pytest.raises(PrecleanError, match="Failed to clear bucket test-bucket"):
            preclean(bucket, config)


class TestPrecleanInJob:
    """Ordering of the wipe relative to uploads inside a job."""

    def test_delete_before_first_put(self, bucket, make_config, site_tree: Path):
        config = make_config(job_kind=JobKind.FULL_BUCKET_SYNC, clean=True)

        TransferJob(config, bucket, site_tree).run()

        assert bucket.calls[0] == ("delete_all", None)
        assert bucket.count("delete_all") == 1
        assert sorted(bucket.put_keys) == ["a.txt", "sub/b.css"]

    def test_failed_wipe_uploads_nothing(self, make_bucket, make_config, site_tree: Path):
        bucket = make_bucket(fail_delete=True)
        config = make_config(job_kind=JobKind.FULL_BUCKET_SYNC, clean=True)
        job = TransferJob(config, bucket, site_tree)

        with pytest.raises(PrecleanError):
            job.run()

        assert bucket.put_keys == []
        assert job.state is JobState.ABORTED

    def test_dry_run_sync_touches_nothing(self, bucket, make_config, site_tree: Path):
        config = make_config(job_kind=JobKind.FULL_BUCKET_SYNC, clean=True, dry_run=True)

        result = TransferJob(config, bucket, site_tree).run()

        assert bucket.calls == []
        assert result.total == 3
