import json
import os
import sys
from pathlib import Path
from typing import Dict, Optional

from .errors import ConfigReadError, ConfigWriteError, InvalidConfigKeyError

# Platform names as stored in the config file
LINUX = "linux"
MACOS = "darwin"
WINDOWS = "windows"

SERVER_DIRECTORY_KEY = "server-directory"
PLATFORM_KEY = "platform"

DEFAULT_STEAM_LINUX_INSTALL_PATH = "~/.steam/SteamApps/common/Valheim dedicated server"
DEFAULT_STEAM_MACOS_INSTALL_PATH = (
    "~/Library/Application Support/Steam/steamapps/common/Valheim dedicated server"
)
DEFAULT_STEAM_WINDOWS_INSTALL_PATH = (
    "C:\\Program Files (x86)\\Steam\\steamapps\\common\\Valheim Dedicated Server"
)


def current_platform() -> str:
    """Maps sys.platform onto the platform names used in the config file"""
    if sys.platform.startswith("win"):
        return WINDOWS
    if sys.platform == "darwin":
        return MACOS
    return LINUX


def default_install_path(platform: str) -> str:
    """Default Steam install location of the dedicated server for a platform"""
    if platform == WINDOWS:
        return DEFAULT_STEAM_WINDOWS_INSTALL_PATH
    if platform == MACOS:
        return os.path.expanduser(DEFAULT_STEAM_MACOS_INSTALL_PATH)
    return os.path.expanduser(DEFAULT_STEAM_LINUX_INSTALL_PATH)


class AppConfig:
    """Manages the HearthMods configuration file"""

    VALID_KEYS = (SERVER_DIRECTORY_KEY, PLATFORM_KEY)

    def __init__(self, config_dir: Optional[Path] = None):
        self.config_dir = Path(config_dir) if config_dir else Path.home() / ".hearthmods"
        self.config_file = self.config_dir / "config.json"
        self.database_file = self.config_dir / "hearthmods.db"
        self._values: Dict[str, str] = {}

    def load(self) -> Dict[str, str]:
        """
        Loads the configuration, creating the file with default values
        the first time it is used

        Returns:
            The configuration values

        Raises:
            ConfigReadError: The file exists but is not valid JSON
            ConfigWriteError: The default file could not be written
        """
        platform = current_platform()
        defaults = {
            SERVER_DIRECTORY_KEY: default_install_path(platform),
            PLATFORM_KEY: platform,
        }

        if not self.config_file.exists():
            self._values = defaults
            self.save()
            return dict(self._values)

        try:
            with open(self.config_file, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, ValueError) as exc:
            raise ConfigReadError(f"unable to read config from {self.config_file}") from exc

        if not isinstance(data, dict):
            raise ConfigReadError(f"{self.config_file} does not contain a JSON object")

        defaults.update({key: str(value) for key, value in data.items()})
        self._values = defaults
        return dict(self._values)

    def save(self) -> None:
        """Writes the current values to the config file"""
        try:
            self.config_dir.mkdir(parents=True, exist_ok=True)
            with open(self.config_file, 'w', encoding='utf-8') as f:
                json.dump(self._values, f, indent=2)
        except OSError as exc:
            raise ConfigWriteError(f"unable to write config to {self.config_file}") from exc

    def get(self, key: str) -> Optional[str]:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        """Updates a value in memory and persists it"""
        if key not in self.VALID_KEYS:
            raise InvalidConfigKeyError(f"'{key}' is not a valid config setting")
        self._values[key] = value
        self.save()

    def items(self):
        return sorted(self._values.items())

    @property
    def server_directory(self) -> Path:
        return Path(os.path.expanduser(self._values[SERVER_DIRECTORY_KEY]))

    @property
    def platform(self) -> str:
        return self._values[PLATFORM_KEY]
