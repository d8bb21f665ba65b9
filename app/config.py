"""
app/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from db.config import load_env_files


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading app settings.
    """

    load_env_files()


def _get_int_env(name: str, default: int) -> int:
    """
    Read an integer from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    """
    Read a string from environment variables with fallback.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    stripped = value.strip()
    return stripped if stripped else default


def _get_optional_str_env(name: str) -> str | None:
    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return None
    stripped = value.strip()
    return stripped if stripped else None


@dataclass(frozen=True)
class AppSettings:
    """
    Process-wide settings reported by the health endpoint and logging setup.
    """

    environment: str = "local"
    log_level: str = "INFO"


@dataclass(frozen=True)
class SummarySettings:
    """
    Runtime settings for CSV summarization and artifact output.
    """

    key_column: str = "Department Name"
    quantity_column: str = "Number of Sales"
    output_key_label: str = "Department Name"
    output_total_label: str = "Total Number of Sales"
    artifact_root: str = "data/results"
    artifact_file_name: str = "department-totals.csv"
    public_base_url: str | None = None
    max_upload_bytes: int = 50 * 1024 * 1024
    jobs_list_limit: int = 50


@lru_cache(maxsize=1)
def get_app_settings() -> AppSettings:
    """
    Return cached application settings from environment variables.
    """

    return AppSettings(
        environment=_get_str_env("ENVIRONMENT", "local").lower(),
        log_level=_get_str_env("LOG_LEVEL", "INFO").upper(),
    )


@lru_cache(maxsize=1)
def get_summary_settings() -> SummarySettings:
    """
    Return cached summary settings from environment variables.
    """

    return SummarySettings(
        key_column=_get_str_env("SUMMARY_KEY_COLUMN", "Department Name"),
        quantity_column=_get_str_env("SUMMARY_QUANTITY_COLUMN", "Number of Sales"),
        output_key_label=_get_str_env("SUMMARY_OUTPUT_KEY_LABEL", "Department Name"),
        output_total_label=_get_str_env("SUMMARY_OUTPUT_TOTAL_LABEL", "Total Number of Sales"),
        artifact_root=_get_str_env("SUMMARY_ARTIFACT_ROOT", "data/results"),
        artifact_file_name=_get_str_env("SUMMARY_ARTIFACT_FILE_NAME", "department-totals.csv"),
        public_base_url=_get_optional_str_env("SUMMARY_PUBLIC_BASE_URL"),
        max_upload_bytes=max(1, _get_int_env("SUMMARY_MAX_UPLOAD_BYTES", 50 * 1024 * 1024)),
        jobs_list_limit=max(1, _get_int_env("SUMMARY_JOBS_LIST_LIMIT", 50)),
    )
