"""Enumeration of consumer packages in a workspace."""

import logging
import re
from pathlib import Path
from typing import Iterable, NamedTuple

from ..resolution.manifest import declared_name
from ..resolution.resolver import NODE_MODULES
from ..utils.walker import list_directories

logger = logging.getLogger(__name__)


class WorkspaceError(OSError):
    """A workspace directory exists but cannot be walked."""


class Consumer(NamedTuple):
    """A package directory that may import the singleton package.

    Attributes:
        path: Absolute path of the package directory; identifies the consumer
        name: Name declared in the package's manifest, if any
        synthetic: True for installed copies found by the store sweep rather than
                   for workspace packages
    """
    path: Path
    name: str | None = None
    synthetic: bool = False


class StoreSweep(NamedTuple):
    """Parameters of the secondary sweep over the package manager's store.

    Attributes:
        directories: Store directories relative to the workspace root (e.g. node_modules/.pnpm)
        pattern: Regular expression template matched against store entry names. "{name}" is
                 replaced with the escaped, store-encoded package name.
    """
    directories: tuple[str, ...]
    pattern: str


def encode_store_name(package_name: str) -> str:
    """Encode a package name the way content-addressed stores name their folders (@scope/pkg -> @scope+pkg)."""
    return package_name.replace('/', '+')


def compile_store_pattern(template: str, package_name: str) -> re.Pattern:
    return re.compile(template.replace('{name}', re.escape(encode_store_name(package_name))))


def _is_allowlisted(path: Path, root: Path, allowlist: Iterable[str]) -> bool:
    try:
        relative = path.relative_to(root).as_posix()
    except ValueError:
        relative = path.as_posix()
    return any(token and token in relative for token in allowlist)


def enumerate_workspace_packages(root: Path, areas: Iterable[str]) -> list[Consumer]:
    """List the immediate child directories of each workspace area as consumers.

    Areas are visited in the given order and children sorted by name. A missing area is
    skipped.

    Raises:
        WorkspaceError: An area exists but cannot be listed
    """
    consumers = []
    for area in areas:
        area_path = root / area
        if not area_path.is_dir():
            logger.debug(f"Workspace area {area_path} does not exist, skipping")
            continue

        try:
            children = list_directories(area_path)
        except OSError as e:
            raise WorkspaceError(f"Cannot list workspace area {area_path}: {e}") from e

        for child in children:
            consumers.append(Consumer(child, declared_name(child)))
    return consumers


def sweep_store(root: Path, package_name: str, sweep: StoreSweep) -> list[Consumer]:
    """Find installed copies of package_name by matching store folder names.

    Every store entry whose name matches the sweep pattern and that contains
    node_modules/<package_name> contributes one synthetic consumer for that copy. Store
    directories that are missing or unreadable, and entries that do not match, produce no
    findings.
    """
    pattern = compile_store_pattern(sweep.pattern, package_name)
    consumers = []
    for directory in sweep.directories:
        store_path = root / directory
        if not store_path.is_dir():
            continue

        try:
            entries = list_directories(store_path)
        except OSError as e:
            logger.warning(f"Cannot list package store {store_path}: {e}")
            continue

        for entry in entries:
            if not pattern.search(entry.name):
                continue
            copy_dir = entry / NODE_MODULES / package_name
            if copy_dir.is_dir():
                logger.debug(f"Store sweep found {package_name} copy at {copy_dir}")
                consumers.append(Consumer(copy_dir, declared_name(copy_dir), synthetic=True))
    return consumers


def enumerate_consumers(root: Path, areas: Iterable[str], *, package_name: str,
                        store_sweep: StoreSweep | None = None,
                        allowlist: Iterable[str] = ()) -> list[Consumer]:
    """Enumerate every consumer to check, in deterministic walk order.

    Workspace packages come first (area order, then name order), followed by the copies
    discovered by the store sweep. Consumers whose root-relative path contains an
    allowlisted substring are left out.

    Args:
        root: Workspace root directory
        areas: Workspace areas relative to root (e.g. apps, packages)
        package_name: The singleton package being checked
        store_sweep: Parameters of the secondary store sweep, or None to skip it
        allowlist: Substrings of root-relative paths to leave out

    Raises:
        WorkspaceError: A workspace area exists but cannot be listed
    """
    root = root.absolute()
    allowlist = tuple(allowlist)

    consumers = enumerate_workspace_packages(root, areas)
    if store_sweep is not None:
        consumers.extend(sweep_store(root, package_name, store_sweep))

    kept = []
    for consumer in consumers:
        if _is_allowlisted(consumer.path, root, allowlist):
            logger.info(f"Skipping allowlisted consumer {consumer.path}")
            continue
        kept.append(consumer)
    return kept
