"""Package manifest (package.json) reading and version lookup."""

import json
import logging
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

MANIFEST_NAME = 'package.json'


class ManifestParseError(ValueError):
    """A package.json exists but is not a JSON object."""

    def __init__(self, path: Path, reason: str):
        super().__init__(f"Cannot parse manifest {path}: {reason}")
        self.path = path
        self.reason = reason


def read_manifest(path: Path) -> dict[str, Any]:
    """Parse a package.json file.

    Args:
        path: Path to the manifest file

    Returns:
        The manifest as a dictionary

    Raises:
        FileNotFoundError: The manifest does not exist
        ManifestParseError: The manifest is unreadable, not valid JSON, or not a JSON object
    """
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except FileNotFoundError:
        raise
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ManifestParseError(path, str(e)) from e

    if not isinstance(data, dict):
        raise ManifestParseError(path, f"expected an object, got {type(data).__name__}")
    return data


def declared_name(package_dir: Path) -> str | None:
    """Return the name declared in package_dir/package.json, or None if absent or unreadable."""
    try:
        manifest = read_manifest(package_dir / MANIFEST_NAME)
    except FileNotFoundError:
        return None
    except ManifestParseError as e:
        logger.warning(str(e))
        return None

    name = manifest.get('name')
    return name if isinstance(name, str) else None


def version_of(real_path: Path, *, max_depth: int = 12) -> str | None:
    """Find the declared version of the package that owns a resolved file.

    Walks upward from the file's directory to the nearest package.json. Manifests declaring
    neither a name nor a version (such as {"type": "module"} markers inside dist/) do not
    describe a package and are skipped.

    Args:
        real_path: Resolved real path of a module file
        max_depth: Maximum number of directories examined

    Returns:
        The version string, or None when no manifest is found within max_depth, the nearest
        manifest cannot be parsed, or it lacks a string version
    """
    current = real_path.parent
    for _ in range(max_depth):
        manifest_path = current / MANIFEST_NAME
        try:
            manifest = read_manifest(manifest_path)
        except FileNotFoundError:
            manifest = None
        except ManifestParseError as e:
            logger.warning(f"{e}; version recorded as unknown")
            return None

        if manifest is not None and ('name' in manifest or 'version' in manifest):
            version = manifest.get('version')
            if isinstance(version, str):
                return version
            logger.info(f"Manifest {manifest_path} has no version field")
            return None

        parent = current.parent
        if parent == current:
            break
        current = parent

    logger.info(f"No package manifest found above {real_path}")
    return None
