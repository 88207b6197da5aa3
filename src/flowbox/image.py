"""Tool image management.

The SQL workflow CLI runs from a small image: a Python base image with
``astro-sql-cli`` installed and ``flow`` as entrypoint. The image is
tagged with the tool version and built once, on first use.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import requests

from .config import Settings, get_config_dir
from .constants import (
    BUILD_DIR_NAME,
    DOCKER_BUILD_TIMEOUT,
    PYPI_URL,
    REQUEST_TIMEOUT,
    SQL_CLI_ENTRYPOINT,
    SQL_CLI_PACKAGE,
)
from .docker import check_docker_status, image_exists, list_image_tags, safe_docker_run
from .errors import DockerError, ImageBuildError
from .logging import get_logger

logger = get_logger(__name__)


def _safe_http_get(url: str) -> dict[str, Any] | None:
    """GET a JSON document, returning None on any error."""
    try:
        resp = requests.get(url, timeout=REQUEST_TIMEOUT)
        if resp.status_code != 200:
            logger.debug("GET %s returned %d", url, resp.status_code)
            return None
        result: dict[str, Any] = resp.json()
        return result
    except (requests.RequestException, json.JSONDecodeError) as e:
        logger.debug("GET %s failed: %s", url, e)
        return None


def fetch_latest_version(package: str = SQL_CLI_PACKAGE) -> str | None:
    """Latest released version of a package on PyPI."""
    data = _safe_http_get(PYPI_URL.format(package=package))
    if not data:
        return None
    version = data.get("info", {}).get("version", "")
    return version or None


def resolve_sql_cli_version(settings: Settings) -> str:
    """Version of the tool to install: pinned in settings, else latest.

    Raises:
        ImageBuildError: If no version is pinned and PyPI is unreachable.
    """
    if settings.sql_cli_version:
        return settings.sql_cli_version

    version = fetch_latest_version()
    if version is None:
        raise ImageBuildError(
            f"Cannot determine {SQL_CLI_PACKAGE} version from PyPI; "
            "set FLOWBOX_SQL_CLI_VERSION to pin one"
        )
    return version


def get_image_tag(settings: Settings, version: str) -> str:
    """Full image reference for a tool version."""
    return f"{settings.image_name}:{version}"


def generate_dockerfile(settings: Settings, version: str) -> str:
    """Render the Dockerfile for the tool image."""
    return f"""FROM {settings.base_image}

ENV PYTHONUNBUFFERED=1 \\
    PIP_DISABLE_PIP_VERSION_CHECK=1

RUN pip install --no-cache-dir {SQL_CLI_PACKAGE}=={version}

ENTRYPOINT ["{SQL_CLI_ENTRYPOINT}"]
"""


def write_build_files(settings: Settings, version: str) -> Path:
    """Write the Dockerfile to a per-version build directory."""
    build_dir = get_config_dir() / BUILD_DIR_NAME / version
    build_dir.mkdir(parents=True, exist_ok=True)

    with open(build_dir / "Dockerfile", "w", encoding="utf-8", newline="\n") as f:
        f.write(generate_dockerfile(settings, version))

    return build_dir


def build_image(settings: Settings, version: str) -> str:
    """Build the tool image and return its tag.

    Raises:
        ImageBuildError: If ``docker build`` fails.
    """
    tag = get_image_tag(settings, version)
    build_dir = write_build_files(settings, version)
    logger.info("Building %s from %s", tag, build_dir)

    result = safe_docker_run(
        ["docker", "build", "-t", tag, str(build_dir)],
        timeout=DOCKER_BUILD_TIMEOUT,
    )
    if result.returncode != 0:
        detail = (result.stderr or "").strip().splitlines()
        raise ImageBuildError(
            f"Failed to build {tag}" + (f": {detail[-1]}" if detail else "")
        )
    return tag


def find_local_image(settings: Settings) -> str | None:
    """Most recently built local tool image, if any."""
    tags = list_image_tags(settings.image_name)
    if not tags:
        return None
    return get_image_tag(settings, tags[0])


def ensure_image(settings: Settings) -> str:
    """Return the tag of the tool image, building it if missing.

    Without a pinned version and without PyPI, the newest local tool
    image is used instead.

    Raises:
        DockerError: If the image is missing and the daemon is not running.
        ImageBuildError: If the version cannot be resolved and no local
            image exists, or the build fails.
    """
    try:
        version = resolve_sql_cli_version(settings)
    except ImageBuildError:
        local = find_local_image(settings)
        if local is None:
            raise
        logger.warning("PyPI unreachable, using local image %s", local)
        return local

    tag = get_image_tag(settings, version)
    if image_exists(tag):
        logger.debug("Using existing image %s", tag)
        return tag
    if not check_docker_status():
        raise DockerError("Docker daemon is not running")
    return build_image(settings, version)
