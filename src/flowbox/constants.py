"""Constants module for flowbox.

All timeout values and shared constants are defined here (SSOT).
"""

from __future__ import annotations

# === Docker Timeouts (seconds) ===
DOCKER_COMMAND_TIMEOUT = 30  # Quick docker commands (info, inspect)
DOCKER_BUILD_TIMEOUT = 600  # 10 min for image builds

# === HTTP ===
REQUEST_TIMEOUT = 5  # PyPI version lookup
PYPI_URL = "https://pypi.org/pypi/{package}/json"

# === Containerized tool ===
SQL_CLI_PACKAGE = "astro-sql-cli"
SQL_CLI_ENTRYPOINT = "flow"
DEFAULT_BASE_IMAGE = "python:3.11-slim"
DEFAULT_IMAGE_NAME = "flowbox-sql-cli"

# Nested config query: command token and the keys queried, in order
CONFIG_COMMAND = ("config",)
GLOBAL_CONFIG_KEYS = ("airflow_home", "airflow_dags_folder", "data_dir")

# === Flag names forwarded to the tool ===
FLAG_PROJECT_DIR = "project-dir"
FLAG_AIRFLOW_HOME = "airflow-home"
FLAG_AIRFLOW_DAGS_FOLDER = "airflow-dags-folder"
FLAG_DATA_DIR = "data-dir"
FLAG_ENV = "env"
FLAG_CONNECTION = "connection"

# === CLI defaults ===
DEFAULT_ENVIRONMENT = "default"
DEFAULT_PROJECT_DIR = "."

# Mode used when creating the project directory (before umask)
PROJECT_DIR_MODE = 0o777

# Build paths
BUILD_DIR_NAME = "build"
