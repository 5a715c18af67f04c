"""Unit tests for loading the settings file."""

import logging
from unittest.mock import patch, mock_open

import yaml

from catalog.config import DEFAULT_SETTINGS, load_settings


def test_load_settings_success():
    """Test values from the settings file override the defaults."""
    mock_yaml_content = yaml.dump(
        {"store_path": "/tmp/catalog.json", "language_overrides": {"yue": "Cantonese"}}
    )

    with patch("builtins.open", mock_open(read_data=mock_yaml_content)), patch(
        "os.path.exists", return_value=True
    ):
        settings = load_settings("fake_path.yaml")

    assert settings["store_path"] == "/tmp/catalog.json"
    assert settings["language_overrides"] == {"yue": "Cantonese"}
    assert settings["batch_delay_seconds"] == DEFAULT_SETTINGS["batch_delay_seconds"]


def test_load_settings_file_not_found(caplog):
    """Test a missing settings file gives the defaults."""
    with patch("os.path.exists", return_value=False):
        settings = load_settings("nonexistent_file.yaml")

    assert settings == DEFAULT_SETTINGS
    assert "Settings file not found" in caplog.text


def test_load_settings_invalid_yaml(caplog):
    """Test an unparseable settings file gives the defaults."""
    with patch("builtins.open", mock_open(read_data="store_path: [unclosed")), patch(
        "os.path.exists", return_value=True
    ):
        settings = load_settings("bad.yaml")

    assert settings == DEFAULT_SETTINGS
    assert "Failed to load settings file" in caplog.text


def test_load_settings_unknown_keys_and_bad_overrides(caplog):
    """Test unknown keys are dropped and non-mapping overrides are reset."""
    mock_yaml_content = yaml.dump({"colour": "blue", "language_overrides": ["yue"]})

    with caplog.at_level(logging.WARNING), patch(
        "builtins.open", mock_open(read_data=mock_yaml_content)
    ), patch("os.path.exists", return_value=True):
        settings = load_settings("fake_path.yaml")

    assert "colour" not in settings
    assert settings["language_overrides"] == {}
    assert "Unknown settings ignored: colour" in caplog.text


def test_load_settings_returns_copy():
    """Test changing loaded settings doesn't change the defaults."""
    with patch("os.path.exists", return_value=False):
        settings = load_settings("nonexistent_file.yaml")
    settings["language_overrides"]["x"] = "y"

    assert DEFAULT_SETTINGS["language_overrides"] == {}


def test_packaged_settings_file_loads():
    """Test the settings file shipped with the package is valid."""
    settings = load_settings()
    assert settings["language_overrides"]["yue"] == "Cantonese"
    assert settings["batch_delay_seconds"] == 0.2
