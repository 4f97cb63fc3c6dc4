"""Tests for CLI scripts."""

import os
import subprocess
import sys
from pathlib import Path
from unittest.mock import patch

# Project paths
project_root = Path(__file__).parent.parent
scripts_dir = project_root / "scripts"

sys.path.insert(0, str(scripts_dir))

import publish  # noqa: E402


def scrubbed_env():
    """Environment without S3_PUBLISH_* variables."""
    env = {k: v for k, v in os.environ.items() if not k.startswith("S3_PUBLISH_")}
    env["METRICS_ENABLED"] = "false"
    return env


def run_script(name, *args, cwd):
    return subprocess.run(
        [sys.executable, str(scripts_dir / name), *args],
        capture_output=True,
        text=True,
        cwd=cwd,
        env=scrubbed_env(),
    )


class TestPublishCLI:
    """Tests for publish.py CLI script."""

    def test_help_message(self, tmp_path):
        result = run_script("publish.py", "--help", cwd=tmp_path)

        assert result.returncode == 0
        assert "Publish files and folders to an S3 bucket" in result.stdout
        assert "--web-folder" in result.stdout
        assert "--dry-run" in result.stdout

    def test_missing_source_argument(self, tmp_path):
        result = run_script("publish.py", cwd=tmp_path)

        assert result.returncode != 0
        assert "required" in result.stderr.lower()

    def test_sources_are_exclusive(self, tmp_path):
        result = run_script("publish.py", "--file", "a", "--folder", "b", cwd=tmp_path)

        assert result.returncode != 0
        assert "not allowed with" in result.stderr

    def test_missing_environment(self, tmp_path):
        result = run_script("publish.py", "--folder", str(tmp_path), "--path", "v1", cwd=tmp_path)

        assert result.returncode == 1
        assert "Configuration error" in result.stdout
        assert "S3_PUBLISH_ACCESS_KEY" in result.stdout


class TestPublishMain:
    """In-process tests of publish.main with the transfer engine patched."""

    def test_build_config_overrides(self, monkeypatch, tmp_path):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("S3_PUBLISH_ACCESS_KEY", "k")
        monkeypatch.setenv("S3_PUBLISH_ACCESS_SECRET", "s")
        monkeypatch.setenv("S3_PUBLISH_REGION", "us-east-1")
        monkeypatch.setenv("S3_PUBLISH_BUCKET", "site")

        args = publish.parse_args(["--web-folder", "public", "--clean", "-t", "6", "-n", "-q"])
        config = publish.build_config(args)

        assert config.job_kind.value == "full_bucket_sync"
        assert config.clean is True
        assert config.concurrency == 6
        assert config.dry_run is True
        assert config.verbose is False

    def test_main_runs_job(self, monkeypatch, tmp_path, make_config, site_tree):
        monkeypatch.chdir(tmp_path)
        config = make_config()

        with patch.object(publish, "build_config", return_value=config), patch.object(
            publish, "run_job"
        ) as mock_run_job:
            mock_run_job.return_value.failed = []
            mock_run_job.return_value.public_url = "https://test-bucket.s3.us-east-1.amazonaws.com/v1"
            mock_run_job.return_value.total = 3

            exit_code = publish.main(["--folder", str(site_tree), "--path", "v1"])

        assert exit_code == 0
        mock_run_job.assert_called_once_with(config, str(site_tree), remote_prefix="v1")

    def test_malformed_job_file(self, monkeypatch, tmp_path, make_config, capsys):
        monkeypatch.chdir(tmp_path)
        jobs_file = tmp_path / "publish.yaml"
        jobs_file.write_text("jobs: [unclosed\n")

        with patch.object(publish, "build_config", return_value=make_config()), patch.object(
            publish, "run_job"
        ) as mock_run_job:
            exit_code = publish.main(["--jobs", str(jobs_file)])

        assert exit_code == 1
        assert "Invalid job file" in capsys.readouterr().out
        mock_run_job.assert_not_called()


class TestFindCLI:
    """Tests for find.py CLI script."""

    def test_help_message(self, tmp_path):
        result = run_script("find.py", "--help", cwd=tmp_path)

        assert result.returncode == 0
        assert "Find an object in an S3 bucket" in result.stdout
        assert "--filename" in result.stdout

    def test_missing_required_args(self, tmp_path):
        result = run_script("find.py", cwd=tmp_path)

        assert result.returncode != 0
        assert "required" in result.stderr.lower()
