"""Node-style module resolution for a single package name."""

import logging
from enum import StrEnum
from pathlib import Path
from typing import Any, Iterable

from .manifest import MANIFEST_NAME, ManifestParseError, read_manifest
from ..utils.walker import resolve_real_path

logger = logging.getLogger(__name__)

NODE_MODULES = 'node_modules'
MAIN_EXTENSIONS = ('', '.js', '.json', '.node')
DEFAULT_CONDITIONS = ('node', 'require', 'default')


class ResolutionFailureKind(StrEnum):
    NOT_INSTALLED = 'not-installed'
    BROKEN_INSTALL = 'broken-install'


class ResolutionFailure(Exception):
    """The target package could not be resolved from a consumer directory."""

    def __init__(self, kind: ResolutionFailureKind, package_name: str, location: Path, detail: str = ''):
        message = f"{package_name} is {kind} at {location}"
        if detail:
            message += f": {detail}"
        super().__init__(message)
        self.kind = ResolutionFailureKind(kind)
        self.package_name = package_name
        self.location = location


class ResolutionCache:
    """Memoization for a single scan.

    Consumers in one workspace share most of their ancestor directories, so the
    node_modules lookups and the entry-point resolution of each installed copy
    are computed once per scan. A new cache must be created for every scan.
    """

    def __init__(self):
        # (directory, package name) -> candidate package directory or None
        self.lookups: dict[tuple[Path, str], Path | None] = {}
        # package directory -> real entry path, or the failure that resolving it raised
        self.entries: dict[Path, Path | ResolutionFailure] = {}


def find_package_dir(consumer_dir: Path, package_name: str, cache: ResolutionCache, *,
                     max_depth: int = 12) -> Path | None:
    """Find the node_modules/<package_name> directory that Node would load from consumer_dir.

    Walks upward through at most max_depth directories, starting with consumer_dir itself.
    Directories named node_modules are skipped, as Node never looks for
    node_modules/node_modules.
    """
    current = consumer_dir.absolute()
    for _ in range(max_depth):
        if current.name != NODE_MODULES:
            key = (current, package_name)
            if key not in cache.lookups:
                candidate = current / NODE_MODULES / package_name
                cache.lookups[key] = candidate if candidate.is_dir() else None
            found = cache.lookups[key]
            if found is not None:
                return found

        parent = current.parent
        if parent == current:
            break
        current = parent
    return None


def _match_exports(target: Any, conditions: tuple[str, ...]) -> list[str]:
    """Expand an exports target into candidate relative paths, in preference order.

    Handles string targets, fallback arrays, and condition maps matched in key order.
    """
    if isinstance(target, str):
        return [target]
    if isinstance(target, list):
        candidates = []
        for item in target:
            candidates.extend(_match_exports(item, conditions))
        return candidates
    if isinstance(target, dict):
        for key, value in target.items():
            if key in conditions or key == 'default':
                candidates = _match_exports(value, conditions)
                if candidates:
                    return candidates
    return []


def _entry_candidates(manifest: dict[str, Any], conditions: tuple[str, ...]) -> tuple[list[str], str]:
    """Return (candidate relative paths, source field) for a package manifest.

    An empty candidate list means the package exports subpaths but not its root.
    """
    exports = manifest.get('exports')
    if exports is not None:
        if isinstance(exports, dict) and any(key.startswith('.') for key in exports):
            if '.' not in exports:
                # Subpath-only exports hide the package root from bare imports
                return [], 'exports'
            exports = exports['.']
        candidates = _match_exports(exports, conditions)
        if candidates:
            return candidates, 'exports'

    main = manifest.get('main')
    if isinstance(main, str) and main:
        candidates = [main + ext for ext in MAIN_EXTENSIONS]
        candidates.append(main.rstrip('/') + '/index.js')
        return candidates, 'main'

    return ['index.js'], 'index'


def resolve_package_dir(package_dir: Path, package_name: str, cache: ResolutionCache, *,
                        conditions: Iterable[str] = DEFAULT_CONDITIONS) -> Path:
    """Resolve the entry file of an installed package copy to its real path.

    Args:
        package_dir: Directory of the installed copy (e.g. node_modules/yjs)
        package_name: Package name, used in failure messages
        cache: Scan-scoped memoization
        conditions: Active export conditions

    Returns:
        Real path of the entry file

    Raises:
        ResolutionFailure: BROKEN_INSTALL when the entry file is missing or unreadable
    """
    if package_dir in cache.entries:
        cached = cache.entries[package_dir]
        if isinstance(cached, ResolutionFailure):
            raise cached
        return cached

    try:
        result: Path | ResolutionFailure = _resolve_entry(package_dir, package_name, tuple(conditions))
    except ResolutionFailure as e:
        result = e
    cache.entries[package_dir] = result

    if isinstance(result, ResolutionFailure):
        raise result
    return result


def _resolve_entry(package_dir: Path, package_name: str, conditions: tuple[str, ...]) -> Path:
    try:
        manifest = read_manifest(package_dir / MANIFEST_NAME)
    except FileNotFoundError:
        manifest = {}
    except ManifestParseError as e:
        logger.warning(f"{e}; falling back to index.js")
        manifest = {}

    candidates, source = _entry_candidates(manifest, conditions)
    if not candidates:
        raise ResolutionFailure(
            ResolutionFailureKind.BROKEN_INSTALL, package_name, package_dir, "no root export")

    for candidate in candidates:
        entry = package_dir / candidate
        real_path = resolve_real_path(entry)
        if real_path is not None and real_path.is_file():
            logger.debug(f"Resolved {package_name} entry via {source}: {entry} -> {real_path}")
            return real_path

    raise ResolutionFailure(
        ResolutionFailureKind.BROKEN_INSTALL, package_name, package_dir,
        f"no entry file among {', '.join(candidates)} (from {source})")


def resolve(consumer_dir: Path, package_name: str, cache: ResolutionCache, *,
            max_depth: int = 12, conditions: Iterable[str] = DEFAULT_CONDITIONS) -> Path:
    """Resolve where require(package_name) would load from when issued in consumer_dir.

    Args:
        consumer_dir: Directory of the importing package
        package_name: Name of the package to resolve
        cache: Scan-scoped memoization, passed explicitly by the caller
        max_depth: Maximum number of ancestor directories searched for node_modules
        conditions: Active export conditions

    Returns:
        Real path of the module file that would be loaded, with all symlinks followed

    Raises:
        ResolutionFailure: NOT_INSTALLED if no node_modules/<package_name> is reachable within
                           max_depth, BROKEN_INSTALL if one is found but its entry file is missing
    """
    package_dir = find_package_dir(consumer_dir, package_name, cache, max_depth=max_depth)
    if package_dir is None:
        raise ResolutionFailure(ResolutionFailureKind.NOT_INSTALLED, package_name, consumer_dir,
                                f"not found within {max_depth} levels")

    return resolve_package_dir(package_dir, package_name, cache, conditions=conditions)
