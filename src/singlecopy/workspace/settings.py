import copy
import tomllib
from pathlib import Path


# Settings key constants
SETTING_TARGET_PACKAGE = 'target.package'
SETTING_WORKSPACE_AREAS = 'workspace.areas'
SETTING_MAX_DEPTH = 'resolve.max_depth'
SETTING_CONDITIONS = 'resolve.conditions'
SETTING_STORE_DIRECTORIES = 'store.directories'
SETTING_STORE_PATTERN = 'store.pattern'
SETTING_ALLOWLIST = 'allowlist'
SETTING_LOG_PATH = 'logging.path'

DEFAULT_TARGET_PACKAGE = 'yjs'
DEFAULT_WORKSPACE_AREAS = ('apps', 'packages')
DEFAULT_MAX_DEPTH = 12
DEFAULT_CONDITIONS = ('node', 'require', 'default')
DEFAULT_STORE_DIRECTORIES = ('node_modules/.pnpm',)
DEFAULT_STORE_PATTERN = '^{name}@'


def get_settings_file_path(root_path: Path) -> Path:
    """Return the settings file location for a workspace root (root/.singlecopy/settings.toml)."""
    return root_path / '.singlecopy' / 'settings.toml'


class ScanSettings:
    """Settings manager for scan configuration.

    Provides a read-only key-value interface to access settings from .singlecopy/settings.toml
    in the workspace root. This class is agnostic to the schema and usage of settings - it simply
    loads the TOML file and provides access to the raw data structure. Consumers of this class are
    responsible for interpreting and validating the settings according to their needs.

    Example:
        settings = ScanSettings(root_path)
        package_name = settings.get(SETTING_TARGET_PACKAGE, DEFAULT_TARGET_PACKAGE)
        areas = settings.get(SETTING_WORKSPACE_AREAS, list(DEFAULT_WORKSPACE_AREAS))
    """

    def __init__(self, root_path: Path, overrides: dict | None = None):
        """Initialize settings from TOML file.

        Loads settings from .singlecopy/settings.toml if it exists. If the file does not exist,
        an empty settings dictionary is used, and all get() calls will return their defaults.

        Args:
            root_path: Path to workspace root directory
            overrides: Dotted keys whose values take precedence over the file (e.g. from CLI flags).
                       Keys mapped to None are ignored.

        Raises:
            tomllib.TOMLDecodeError: The settings file exists but is not valid TOML
            OSError: The settings file exists but cannot be read
        """
        self._root_path = root_path
        self._settings = {}
        self._overrides = {k: v for k, v in (overrides or {}).items() if v is not None}

        settings_file = get_settings_file_path(root_path)
        if settings_file.exists():
            with open(settings_file, 'rb') as f:
                self._settings = tomllib.load(f)

    def with_overrides(self, overrides: dict) -> 'ScanSettings':
        """Return a copy whose given dotted keys take precedence; keys mapped to None are ignored."""
        merged = copy.copy(self)
        merged._overrides = {**self._overrides, **{k: v for k, v in overrides.items() if v is not None}}
        return merged

    def get(self, key: str, default=None):
        """Get a setting value by key with optional default.

        Supports both simple keys (e.g., 'allowlist') and dot notation for accessing nested
        keys (e.g., 'target.package' accesses settings['target']['package']). Returns the
        default value if the key path does not exist or if any intermediate value is not a
        dictionary. Overrides passed at construction are consulted first.

        Examples:
            >>> settings.get(SETTING_WORKSPACE_AREAS, [])
            ['apps', 'packages']
            >>> settings.get('nonexistent.key', 'fallback')
            'fallback'
        """
        if key in self._overrides:
            return self._overrides[key]

        keys = key.split('.')
        value = self._settings

        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default

        return value
