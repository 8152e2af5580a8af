import logging
import os
import re
from pathlib import Path

from .commands.scan import ScanArgs, do_scan
from .report.store import Report
from .workspace.settings import (
    ScanSettings,
    SETTING_TARGET_PACKAGE, SETTING_WORKSPACE_AREAS, SETTING_MAX_DEPTH, SETTING_CONDITIONS,
    SETTING_STORE_DIRECTORIES, SETTING_STORE_PATTERN, SETTING_ALLOWLIST, SETTING_LOG_PATH,
    DEFAULT_TARGET_PACKAGE, DEFAULT_WORKSPACE_AREAS, DEFAULT_MAX_DEPTH, DEFAULT_CONDITIONS,
    DEFAULT_STORE_DIRECTORIES, DEFAULT_STORE_PATTERN,
)
from .workspace.walker import StoreSweep, compile_store_pattern


class WorkspaceNotFound(FileNotFoundError):
    """The workspace root does not exist or is not a directory."""


def _as_tuple(value, name: str) -> tuple[str, ...]:
    if isinstance(value, str):
        return (value,)
    if not isinstance(value, (list, tuple)) or not all(isinstance(v, str) for v in value):
        raise ValueError(f"Setting {name} must be a list of strings, got {value!r}")
    return tuple(value)


class Scanner:
    """Workflow layer for checking one workspace for duplicate copies of a singleton package.

    Scanner turns settings (from .singlecopy/settings.toml, overridden by explicit values
    such as CLI flags) into the arguments of a scan and runs it. Each call to scan() is
    independent: nothing is cached between scans.
    """

    def __init__(self, path: str | os.PathLike, settings: ScanSettings | None = None):
        """Initialize scanner for a workspace root.

        Args:
            path: Workspace root directory path
            settings: Settings to use; loaded from the workspace root if None

        Raises:
            WorkspaceNotFound: Root directory does not exist or is not a directory
        """
        root = Path(path).absolute()
        if not root.is_dir():
            raise WorkspaceNotFound(f"Directory not found: {root}")

        self._root = root
        self._settings = settings if settings is not None else ScanSettings(root)

    @property
    def root(self) -> Path:
        return self._root

    @property
    def settings(self) -> ScanSettings:
        return self._settings

    def configure_logging_from_settings(self) -> bool:
        """Configure logging from settings if a log path is specified.

        Preserves the current logging level if already configured (e.g., from CLI arguments).
        Only changes the log file path.

        Returns:
            True if logging was configured, False otherwise
        """
        log_path_setting = self._settings.get(SETTING_LOG_PATH)
        if log_path_setting:
            log_path = str(log_path_setting)
            current_level = logging.root.level if logging.root.level != logging.NOTSET else logging.INFO

            for handler in logging.root.handlers[:]:
                logging.root.removeHandler(handler)

            logging.basicConfig(
                filename=log_path,
                level=current_level,
                format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
            )
            return True
        return False

    def scan_args(self) -> ScanArgs:
        """Build scan arguments from settings.

        Raises:
            ValueError: A setting has the wrong type
        """
        settings = self._settings
        package_name = settings.get(SETTING_TARGET_PACKAGE, DEFAULT_TARGET_PACKAGE)
        if not isinstance(package_name, str) or not package_name:
            raise ValueError(f"Setting {SETTING_TARGET_PACKAGE} must be a package name, got {package_name!r}")

        max_depth = settings.get(SETTING_MAX_DEPTH, DEFAULT_MAX_DEPTH)
        if not isinstance(max_depth, int) or max_depth < 1:
            raise ValueError(f"Setting {SETTING_MAX_DEPTH} must be a positive integer, got {max_depth!r}")

        store_directories = _as_tuple(
            settings.get(SETTING_STORE_DIRECTORIES, DEFAULT_STORE_DIRECTORIES), SETTING_STORE_DIRECTORIES)
        store_pattern = settings.get(SETTING_STORE_PATTERN, DEFAULT_STORE_PATTERN)
        if not isinstance(store_pattern, str):
            raise ValueError(f"Setting {SETTING_STORE_PATTERN} must be a string, got {store_pattern!r}")
        try:
            compile_store_pattern(store_pattern, package_name)
        except re.error as e:
            raise ValueError(f"Setting {SETTING_STORE_PATTERN} is not a valid pattern: {e}") from e
        store_sweep = StoreSweep(store_directories, store_pattern) if store_directories and store_pattern else None

        return ScanArgs(
            root=self._root,
            package_name=package_name,
            areas=_as_tuple(settings.get(SETTING_WORKSPACE_AREAS, DEFAULT_WORKSPACE_AREAS), SETTING_WORKSPACE_AREAS),
            max_depth=max_depth,
            conditions=_as_tuple(settings.get(SETTING_CONDITIONS, DEFAULT_CONDITIONS), SETTING_CONDITIONS),
            store_sweep=store_sweep,
            allowlist=_as_tuple(settings.get(SETTING_ALLOWLIST, ()), SETTING_ALLOWLIST),
        )

    def scan(self) -> Report:
        """Scan the workspace and build the report.

        Per-consumer resolution problems are recorded in the report, not raised.

        Raises:
            WorkspaceError: A workspace area cannot be listed
            ValueError: A setting has the wrong type
        """
        return do_scan(self.scan_args())
