"""Tests for rotation settings and saved defaults."""

import json
import os
from pathlib import Path

import pytest

from pyrotating.config import DEFAULT_BACKUP_COUNT, RotatingSettings, RotationConfig
from pyrotating.file import DEFAULT_MODE, DEFAULT_PERM
from pyrotating.rotation import RotationUnit


class TestRotationConfig:
    """Test validation of rotation settings."""

    def test_defaults(self, temp_dir):
        """Test a daily interval keeping thirty backups."""
        config = RotationConfig(os.path.join(temp_dir, "app.log"))
        assert config.unit is RotationUnit.DAY
        assert config.multiplier == 1
        assert config.backup_count == DEFAULT_BACKUP_COUNT == 30
        assert config.mode == DEFAULT_MODE
        assert config.permission == DEFAULT_PERM
        assert config.terminator == "\n"
        assert config.interval == 86400

    def test_filename_is_absolute(self, temp_dir, monkeypatch):
        """Test relative names are resolved against the working directory."""
        monkeypatch.chdir(temp_dir)
        config = RotationConfig("logs/app.log")
        assert os.path.isabs(config.filename)
        assert config.filename == os.path.join(os.getcwd(), "logs", "app.log")

    def test_accepts_path_objects(self, temp_dir):
        """Test a Path is accepted as the filename."""
        config = RotationConfig(Path(temp_dir) / "app.log")
        assert config.filename == os.path.join(temp_dir, "app.log")

    def test_unit_by_name(self):
        """Test the unit may be given as a string."""
        config = RotationConfig("/tmp/app.log", unit="week", multiplier=2)
        assert config.unit is RotationUnit.WEEK
        assert config.interval == 2 * 604800

    @pytest.mark.parametrize(
        "changes, error",
        [
            ({"multiplier": 0}, ValueError),
            ({"backup_count": -1}, ValueError),
            ({"unit": "minute"}, ValueError),
            ({"multiplier": 1.5}, TypeError),
            ({"backup_count": True}, TypeError),
            ({"terminator": None}, TypeError),
        ],
    )
    def test_rejects_invalid(self, changes, error):
        """Test invalid settings fail at construction."""
        with pytest.raises(error):
            RotationConfig("/tmp/app.log", **changes)

    def test_empty_filename(self):
        """Test a filename is required."""
        with pytest.raises(ValueError):
            RotationConfig("")

    def test_replace_validates(self):
        """Test replace returns a new validated copy."""
        config = RotationConfig("/tmp/app.log")
        hourly = config.replace(unit="hour", multiplier=6)
        assert hourly.interval == 6 * 3600
        assert config.unit is RotationUnit.DAY
        with pytest.raises(ValueError):
            config.replace(backup_count=-5)

    def test_frozen(self):
        """Test settings cannot be changed in place."""
        config = RotationConfig("/tmp/app.log")
        with pytest.raises(AttributeError):
            config.backup_count = 3


class TestRotatingSettings:
    """Test defaults kept in a JSON file."""

    @pytest.fixture
    def config_file(self, temp_dir):
        """Path of a settings file that does not exist yet."""
        return Path(temp_dir) / "conf" / "config.json"

    def test_defaults_without_file(self, config_file):
        """Test built-in defaults are used and nothing is written."""
        settings = RotatingSettings(config_file)
        assert settings.get_unit() is RotationUnit.DAY
        assert settings.get_multiplier() == 1
        assert settings.get_backup_count() == 30
        assert settings.get_debug_mode() is False
        assert settings.get_log_dir() == settings.default_log_dir
        assert not config_file.exists()

    def test_changes_persist(self, config_file, temp_dir):
        """Test setters write the file and a new instance reads them."""
        settings = RotatingSettings(config_file)
        settings.set_interval("hour", 6)
        settings.set_backup_count(5)
        settings.set_debug_mode(True)
        settings.set_log_dir(temp_dir)

        reloaded = RotatingSettings(config_file)
        assert reloaded.get_unit() is RotationUnit.HOUR
        assert reloaded.get_multiplier() == 6
        assert reloaded.get_backup_count() == 5
        assert reloaded.get_debug_mode() is True
        assert reloaded.get_log_dir() == Path(temp_dir)

        with open(config_file) as f:
            assert json.load(f)["interval"] == "hour"

    def test_invalid_values_rejected(self, config_file):
        """Test invalid defaults are not saved."""
        settings = RotatingSettings(config_file)
        with pytest.raises(ValueError):
            settings.set_interval("minute")
        with pytest.raises(ValueError):
            settings.set_interval("day", 0)
        with pytest.raises(ValueError):
            settings.set_backup_count(-1)
        assert not config_file.exists()

    def test_corrupt_file_falls_back(self, config_file):
        """Test an unreadable file leaves the built-in defaults."""
        config_file.parent.mkdir(parents=True)
        config_file.write_text("{not json")
        settings = RotatingSettings(config_file)
        assert settings.get_backup_count() == 30

    def test_override_log_dir(self, config_file, temp_dir):
        """Test a command-line directory wins over the saved one."""
        settings = RotatingSettings(config_file)
        assert settings.get_log_dir(temp_dir) == Path(temp_dir)

    def test_to_rotation_config(self, config_file, temp_dir):
        """Test bare names are placed in the log directory."""
        settings = RotatingSettings(config_file)
        settings.set_log_dir(temp_dir)
        settings.set_interval("week", 2)

        config = settings.to_rotation_config("app.log")
        assert config.filename == os.path.join(temp_dir, "app.log")
        assert config.unit is RotationUnit.WEEK
        assert config.multiplier == 2

        elsewhere = os.path.join(temp_dir, "other", "app.log")
        assert settings.to_rotation_config(elsewhere).filename == elsewhere
