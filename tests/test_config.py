"""
Unit tests for environment-driven configuration.
"""

import os

import pytest
from pydantic import ValidationError

from petrovision.config import (DATA_PATH, PRICE_DATA_PATH, REFRESH_INTERVAL_MS, ROWS_PER_PAGE,
                                DashboardConfig, load_config)


def test_defaults(monkeypatch):
    for name in ("PETROVISION_DATA_PATH", "PETROVISION_EIA_API_KEY",
                 "PETROVISION_REFRESH_INTERVAL_MS", "PETROVISION_ROWS_PER_PAGE",
                 "PETROVISION_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)

    config = load_config()

    assert config.data_path == DATA_PATH
    assert config.eia_api_key is None
    assert config.refresh_interval_ms == REFRESH_INTERVAL_MS
    assert config.rows_per_page == ROWS_PER_PAGE
    assert config.log_level == "INFO"
    assert config.refresh_enabled


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("PETROVISION_DATA_PATH", "/tmp/wells.csv")
    monkeypatch.setenv("PETROVISION_EIA_API_KEY", "abc123")
    monkeypatch.setenv("PETROVISION_REFRESH_INTERVAL_MS", "0")
    monkeypatch.setenv("PETROVISION_ROWS_PER_PAGE", "25")
    monkeypatch.setenv("PETROVISION_LOG_LEVEL", "debug")

    config = load_config()

    assert config.data_path == "/tmp/wells.csv"
    assert config.eia_api_key == "abc123"
    assert config.refresh_interval_ms == 0
    assert not config.refresh_enabled
    assert config.rows_per_page == 25
    assert config.log_level == "DEBUG"


def test_bad_numbers_fall_back_to_defaults(monkeypatch):
    monkeypatch.setenv("PETROVISION_REFRESH_INTERVAL_MS", "soon")
    monkeypatch.setenv("PETROVISION_ROWS_PER_PAGE", "-3")

    config = load_config()

    assert config.refresh_interval_ms == REFRESH_INTERVAL_MS
    assert config.rows_per_page == 1


def test_empty_api_key_is_none(monkeypatch):
    monkeypatch.setenv("PETROVISION_EIA_API_KEY", "")

    assert load_config().eia_api_key is None


def test_config_is_immutable():
    config = DashboardConfig()

    with pytest.raises(ValidationError):
        config.rows_per_page = 50


def test_bad_numbers_passed_directly_fall_back():
    config = DashboardConfig(refresh_interval_ms="never", rows_per_page=None)

    assert config.refresh_interval_ms == REFRESH_INTERVAL_MS
    assert config.rows_per_page == ROWS_PER_PAGE


def test_bundled_paths_do_not_depend_on_working_directory(monkeypatch, tmp_path):
    """Default data paths point at the project's data folder from any cwd."""
    monkeypatch.chdir(tmp_path)

    assert os.path.isabs(DATA_PATH)
    assert os.path.isfile(DATA_PATH)
    assert os.path.isfile(PRICE_DATA_PATH)
