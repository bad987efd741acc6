import tomllib
from pathlib import Path

from .errors import ConfigurationError


# Settings key constants
SETTING_FILES = 'files'
SETTING_KEY_PATTERN = 'key_pattern'
SETTING_STORE_PATH = 'store.path'
SETTING_STORE_RETENTION_DAYS = 'store.retention_days'
SETTING_LOGGING_PATH = 'logging.path'

DEFAULT_RETENTION_DAYS = 90


def get_settings_directory_path(root: Path) -> Path:
    """Generate the .sizecompare directory path for a given workspace root."""
    return root / '.sizecompare'


class Settings:
    """Values from .sizecompare/settings.toml under a workspace root.

    A missing file behaves like an empty one. Nested tables are addressed with dots, so
    'store.path' reads the 'path' key of the [store] table.
    """

    def __init__(self, root: Path):
        self.root = root
        self.file = get_settings_directory_path(root) / 'settings.toml'

        try:
            with open(self.file, 'rb') as f:
                self._data = tomllib.load(f)
        except FileNotFoundError:
            self._data = {}
        except tomllib.TOMLDecodeError as e:
            raise ConfigurationError(f"Invalid settings file {self.file}: {e}") from e

    def get(self, key: str, default=None):
        node = self._data
        for part in key.split('.'):
            if not isinstance(node, dict) or part not in node:
                return default
            node = node[part]
        return node

    def get_path(self, key: str, default: Path | None = None) -> Path | None:
        """Look up a path setting. Relative values are taken relative to the workspace root."""
        value = self.get(key)
        if value is None:
            return default
        return self.root / value
