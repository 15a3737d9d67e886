"""
Tests for settings loading (environment > .env file > defaults).
"""
from pathlib import Path

import pytest

from config import DEFAULT_DATA_DIR, DEFAULT_PALETTE, Settings, normalize_hex, read_env_file, truthy


@pytest.fixture
def no_env_file(tmp_path):
    return tmp_path / "missing.env"


def test_defaults(no_env_file):
    settings = Settings.load(env={}, env_file=no_env_file)
    assert settings.data_dir == DEFAULT_DATA_DIR
    assert settings.log_level == "WARNING"
    assert settings.log_file is None
    assert settings.alt_screen is True
    assert settings.no_color is False
    assert settings.palette == DEFAULT_PALETTE


def test_environment_values(tmp_path, no_env_file):
    env = {
        "TASKBOARD_DATA_DIR": str(tmp_path / "data"),
        "TASKBOARD_LOG_LEVEL": "debug",
        "TASKBOARD_LOG_FILE": str(tmp_path / "board.log"),
        "TASKBOARD_ALT_SCREEN": "off",
        "NO_COLOR": "",
        "TASKBOARD_DONE": "00ff00",
    }
    settings = Settings.load(env=env, env_file=no_env_file)
    assert settings.data_dir == tmp_path / "data"
    assert settings.log_level == "DEBUG"
    assert settings.log_file == tmp_path / "board.log"
    assert settings.alt_screen is False
    assert settings.no_color is True
    assert settings.palette["done"] == "#00ff00"


def test_env_file_is_fallback(tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text(
        "# comment\n"
        "TASKBOARD_DATA_DIR=/from/file\n"
        "TASKBOARD_LOG_LEVEL=INFO\n"
        "TASKBOARD_TODO=#123456\n"
        "UNRELATED=1\n"
        "garbage line\n"
    )
    settings = Settings.load(env={"TASKBOARD_LOG_LEVEL": "ERROR"}, env_file=env_file)
    assert settings.data_dir == Path("/from/file")
    assert settings.log_level == "ERROR"
    assert settings.palette["todo"] == "#123456"
    assert "UNRELATED" not in read_env_file(env_file)


def test_malformed_values_fall_back(tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text("TASKBOARD_PRIMARY=#abcdef\n")
    env = {"TASKBOARD_LOG_LEVEL": "chatty", "TASKBOARD_PRIMARY": "blue"}
    settings = Settings.load(env=env, env_file=env_file)
    assert settings.log_level == "WARNING"
    assert settings.palette["primary"] == "#abcdef"


@pytest.mark.parametrize("value,expected", [
    (None, True), ("1", True), ("yes", True), ("0", False), ("Off", False), ("", False),
])
def test_truthy(value, expected):
    assert truthy(value) is expected


@pytest.mark.parametrize("value,expected", [
    ("#A1b2C3", "#A1b2C3"), ("a1b2c3", "#a1b2c3"), ("#abc", None), ("zzzzzz", None), (None, None),
])
def test_normalize_hex(value, expected):
    assert normalize_hex(value) == expected
