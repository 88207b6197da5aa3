"""Tests for tool image management."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
import requests

from flowbox.config import Settings
from flowbox.errors import DockerError, ImageBuildError
from flowbox.image import (
    build_image,
    ensure_image,
    fetch_latest_version,
    find_local_image,
    generate_dockerfile,
    get_image_tag,
    resolve_sql_cli_version,
    write_build_files,
)


@pytest.fixture
def config_dir(tmp_path: Path):
    with patch("flowbox.image.get_config_dir", return_value=tmp_path):
        yield tmp_path


class TestFetchLatestVersion:
    """Tests for fetch_latest_version function."""

    def test_success(self) -> None:
        with patch("flowbox.image.requests.get") as mock_get:
            mock_get.return_value = MagicMock(status_code=200)
            mock_get.return_value.json.return_value = {"info": {"version": "1.8.0"}}
            assert fetch_latest_version() == "1.8.0"
            assert "astro-sql-cli" in mock_get.call_args.args[0]

    def test_http_error_status(self) -> None:
        with patch("flowbox.image.requests.get") as mock_get:
            mock_get.return_value = MagicMock(status_code=404)
            assert fetch_latest_version() is None

    def test_network_error(self) -> None:
        with patch(
            "flowbox.image.requests.get", side_effect=requests.ConnectionError("offline")
        ):
            assert fetch_latest_version() is None

    def test_missing_version_field(self) -> None:
        with patch("flowbox.image.requests.get") as mock_get:
            mock_get.return_value = MagicMock(status_code=200)
            mock_get.return_value.json.return_value = {"info": {}}
            assert fetch_latest_version() is None


class TestResolveSqlCliVersion:
    """Tests for resolve_sql_cli_version function."""

    def test_pinned_version_skips_pypi(self) -> None:
        with patch("flowbox.image.fetch_latest_version") as mock_fetch:
            assert resolve_sql_cli_version(Settings(sql_cli_version="1.5.0")) == "1.5.0"
            mock_fetch.assert_not_called()

    def test_latest_from_pypi(self) -> None:
        with patch("flowbox.image.fetch_latest_version", return_value="1.8.0"):
            assert resolve_sql_cli_version(Settings()) == "1.8.0"

    def test_pypi_unreachable(self) -> None:
        with patch("flowbox.image.fetch_latest_version", return_value=None):
            with pytest.raises(ImageBuildError, match="FLOWBOX_SQL_CLI_VERSION"):
                resolve_sql_cli_version(Settings())


class TestDockerfile:
    """Tests for generate_dockerfile and write_build_files."""

    def test_contents(self) -> None:
        dockerfile = generate_dockerfile(Settings(base_image="python:3.12-slim"), "1.8.0")
        assert dockerfile.startswith("FROM python:3.12-slim\n")
        assert "pip install --no-cache-dir astro-sql-cli==1.8.0" in dockerfile
        assert 'ENTRYPOINT ["flow"]' in dockerfile

    def test_image_tag(self) -> None:
        assert get_image_tag(Settings(image_name="my-flow"), "1.8.0") == "my-flow:1.8.0"

    def test_written_per_version(self, config_dir: Path) -> None:
        build_dir = write_build_files(Settings(), "1.8.0")
        assert build_dir == config_dir / "build" / "1.8.0"
        assert "astro-sql-cli==1.8.0" in (build_dir / "Dockerfile").read_text(encoding="utf-8")


class TestBuildImage:
    """Tests for build_image function."""

    def test_success(self, config_dir: Path) -> None:
        with patch("flowbox.image.safe_docker_run") as mock_run:
            mock_run.return_value = MagicMock(returncode=0)
            tag = build_image(Settings(), "1.8.0")

        assert tag == "flowbox-sql-cli:1.8.0"
        cmd = mock_run.call_args.args[0]
        assert cmd == ["docker", "build", "-t", tag, str(config_dir / "build" / "1.8.0")]

    def test_failure_reports_last_line(self, config_dir: Path) -> None:
        with patch("flowbox.image.safe_docker_run") as mock_run:
            mock_run.return_value = MagicMock(returncode=1, stderr="step 1\nno matching distribution\n")
            with pytest.raises(ImageBuildError, match="no matching distribution"):
                build_image(Settings(), "9.9.9")


class TestEnsureImage:
    """Tests for ensure_image function."""

    def test_existing_image_reused(self) -> None:
        with patch("flowbox.image.image_exists", return_value=True), patch(
            "flowbox.image.build_image"
        ) as mock_build:
            assert ensure_image(Settings(sql_cli_version="1.8.0")) == "flowbox-sql-cli:1.8.0"
            mock_build.assert_not_called()

    def test_missing_image_built(self) -> None:
        settings = Settings(sql_cli_version="1.8.0")
        with patch("flowbox.image.image_exists", return_value=False), patch(
            "flowbox.image.check_docker_status", return_value=True
        ), patch("flowbox.image.build_image", return_value="flowbox-sql-cli:1.8.0") as mock_build:
            assert ensure_image(settings) == "flowbox-sql-cli:1.8.0"
            mock_build.assert_called_once_with(settings, "1.8.0")

    def test_daemon_not_running(self) -> None:
        with patch("flowbox.image.image_exists", return_value=False), patch(
            "flowbox.image.check_docker_status", return_value=False
        ), patch("flowbox.image.build_image") as mock_build:
            with pytest.raises(DockerError, match="not running"):
                ensure_image(Settings(sql_cli_version="1.8.0"))
            mock_build.assert_not_called()

    def test_offline_uses_newest_local_image(self) -> None:
        with patch(
            "flowbox.image.requests.get", side_effect=requests.ConnectionError("offline")
        ), patch(
            "flowbox.image.list_image_tags", return_value=["1.7.2", "1.6.0"]
        ), patch("flowbox.image.build_image") as mock_build:
            assert ensure_image(Settings()) == "flowbox-sql-cli:1.7.2"
            mock_build.assert_not_called()

    def test_offline_without_local_image(self) -> None:
        with patch(
            "flowbox.image.requests.get", side_effect=requests.ConnectionError("offline")
        ), patch("flowbox.image.list_image_tags", return_value=[]):
            with pytest.raises(ImageBuildError, match="Cannot determine astro-sql-cli version"):
                ensure_image(Settings())

    def test_pinned_version_never_falls_back(self) -> None:
        with patch("flowbox.image.image_exists", return_value=True), patch(
            "flowbox.image.list_image_tags"
        ) as mock_tags:
            assert ensure_image(Settings(sql_cli_version="1.5.0")) == "flowbox-sql-cli:1.5.0"
            mock_tags.assert_not_called()


class TestFindLocalImage:
    """Tests for find_local_image function."""

    def test_newest_tag(self) -> None:
        with patch("flowbox.image.list_image_tags", return_value=["2.0.0", "1.9.0"]) as mock_tags:
            assert find_local_image(Settings(image_name="my-flow")) == "my-flow:2.0.0"
            mock_tags.assert_called_once_with("my-flow")

    def test_none(self) -> None:
        with patch("flowbox.image.list_image_tags", return_value=[]):
            assert find_local_image(Settings()) is None
