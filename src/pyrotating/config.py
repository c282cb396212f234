"""Configuration management for PyRotating."""

import dataclasses
import json
import logging
import os
import platform
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from .file import DEFAULT_MODE, DEFAULT_PERM
from .rotation import RotationUnit

logger = logging.getLogger(__name__)

DEFAULT_BACKUP_COUNT = 30


@dataclass(frozen=True)
class RotationConfig:
    """Immutable settings of one timed rotating file.

    ``filename`` is resolved to an absolute path on construction, so a later
    change of working directory does not move the log.
    """

    filename: str
    unit: RotationUnit = RotationUnit.DAY
    multiplier: int = 1
    backup_count: int = DEFAULT_BACKUP_COUNT
    mode: int = DEFAULT_MODE
    permission: int = DEFAULT_PERM
    terminator: str = "\n"
    encoding: str = "utf-8"
    debug: bool = False

    def __post_init__(self):
        """Validate and normalize the settings."""
        if not self.filename:
            raise ValueError("filename is required")
        object.__setattr__(self, "filename", os.path.abspath(os.fspath(self.filename)))
        object.__setattr__(self, "unit", RotationUnit.parse(self.unit))

        for name in ("multiplier", "backup_count", "mode", "permission"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise TypeError(f"{name} must be an integer")
        if self.multiplier < 1:
            raise ValueError("multiplier must be at least 1")
        if self.backup_count < 0:
            raise ValueError("backup_count must not be negative")
        if not isinstance(self.terminator, str):
            raise TypeError("terminator must be a string")

    @property
    def interval(self) -> int:
        """Length of the rotation interval in seconds."""
        return self.unit.seconds * self.multiplier

    def replace(self, **changes: Any) -> "RotationConfig":
        """Return a validated copy with ``changes`` applied."""
        return dataclasses.replace(self, **changes)


class RotatingSettings:
    """User defaults for the command-line tools, kept in a JSON file."""

    def __init__(self, config_file: Optional[Path] = None):
        """Initialize the settings manager.

        Args:
        ----
            config_file: Path of the JSON file. Defaults to ``config.json``
                         in the platform-specific configuration directory.

        """
        self.system = platform.system().lower()
        self._config_file = Path(config_file) if config_file else None
        self.config_data: Dict[str, Any] = {}
        self._load_config()

    @property
    def default_log_dir(self) -> Path:
        """Get the platform-specific default log directory."""
        if self.system == "darwin":  # macOS
            return Path.home() / "Library" / "Logs" / "pyrotating"
        elif self.system == "linux":
            return Path.home() / ".local" / "state" / "pyrotating"
        elif self.system == "windows":
            return Path(os.environ.get("LOCALAPPDATA", "")) / "pyrotating" / "logs"
        else:
            return Path.home() / ".pyrotating" / "logs"

    @property
    def config_dir(self) -> Path:
        """Get the platform-specific configuration directory."""
        if self.system == "darwin":  # macOS
            return Path.home() / "Library" / "Preferences" / "pyrotating"
        elif self.system == "linux":
            return Path.home() / ".config" / "pyrotating"
        elif self.system == "windows":
            return Path(os.environ.get("APPDATA", "")) / "pyrotating"
        else:
            return Path.home() / ".pyrotating"

    @property
    def config_file(self) -> Path:
        """Get the path to the configuration file."""
        if self._config_file is not None:
            return self._config_file
        return self.config_dir / "config.json"

    def _defaults(self) -> Dict[str, Any]:
        return {
            "log_dir": str(self.default_log_dir),
            "interval": RotationUnit.DAY.value,
            "multiplier": 1,
            "backup_count": DEFAULT_BACKUP_COUNT,
            "debug_mode": False,
        }

    def _load_config(self) -> None:
        """Load configuration from file."""
        self.config_data = self._defaults()
        try:
            if self.config_file.exists():
                with open(self.config_file) as f:
                    self.config_data.update(json.load(f))
        except (OSError, ValueError) as e:
            logger.warning("Could not load config file %s: %s", self.config_file, e)

    def _save_config(self) -> None:
        """Save configuration to file."""
        try:
            self.config_file.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_file, "w") as f:
                json.dump(self.config_data, f, indent=2)
        except OSError as e:
            logger.warning("Could not save config file %s: %s", self.config_file, e)

    def get_log_dir(self, override_dir: Optional[str] = None) -> Path:
        """Get the log directory path.

        Args:
        ----
            override_dir: Optional override directory from command line

        Returns:
        -------
            Path object for the log directory

        """
        if override_dir:
            return Path(override_dir)
        return Path(self.config_data.get("log_dir", self.default_log_dir))

    def get_unit(self) -> RotationUnit:
        """Get the configured rotation unit."""
        return RotationUnit.parse(self.config_data.get("interval", "day"))

    def get_multiplier(self) -> int:
        """Get the configured interval multiplier."""
        return int(self.config_data.get("multiplier", 1))

    def get_backup_count(self) -> int:
        """Get the configured retention count."""
        return int(self.config_data.get("backup_count", DEFAULT_BACKUP_COUNT))

    def get_debug_mode(self) -> bool:
        """Get the debug mode setting."""
        return bool(self.config_data.get("debug_mode", False))

    def set_log_dir(self, log_dir: str) -> None:
        """Set the log directory in configuration."""
        self.config_data["log_dir"] = log_dir
        self._save_config()

    def set_interval(self, unit: str, multiplier: int = 1) -> None:
        """Set the rotation interval in configuration."""
        if multiplier < 1:
            raise ValueError("multiplier must be at least 1")
        self.config_data["interval"] = RotationUnit.parse(unit).value
        self.config_data["multiplier"] = multiplier
        self._save_config()

    def set_backup_count(self, backup_count: int) -> None:
        """Set the retention count in configuration."""
        if backup_count < 0:
            raise ValueError("backup_count must not be negative")
        self.config_data["backup_count"] = backup_count
        self._save_config()

    def set_debug_mode(self, debug_mode: bool) -> None:
        """Set the debug mode in configuration."""
        self.config_data["debug_mode"] = debug_mode
        self._save_config()

    def to_rotation_config(self, name: str, log_dir: Optional[str] = None) -> RotationConfig:
        """Build a RotationConfig for the log file ``name`` from these defaults."""
        path = Path(name)
        if not path.is_absolute() and path.parent == Path("."):
            path = self.get_log_dir(log_dir) / path
        return RotationConfig(
            filename=str(path),
            unit=self.get_unit(),
            multiplier=self.get_multiplier(),
            backup_count=self.get_backup_count(),
            debug=self.get_debug_mode(),
        )
