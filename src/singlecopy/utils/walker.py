import os
from pathlib import Path

# Matches the conventional kernel limit on symlink traversals per lookup
MAX_SYMLINK_HOPS = 40


def resolve_real_path(file_path: Path, max_hops: int = MAX_SYMLINK_HOPS) -> Path | None:
    """Canonicalize a path by following every symlink in every component.

    Walks the path one component at a time. Whenever a component is a symlink, its target is spliced
    into the remaining components and walking continues from the link's parent (or from the filesystem
    root for absolute targets). The number of links followed is bounded by max_hops, so a symlink loop
    ends the walk instead of recursing forever.

    Args:
        file_path: Path to canonicalize (will be converted to absolute)
        max_hops: Maximum number of symlinks followed before giving up

    Returns:
        The real path of an existing file or directory, or None if the path is dangling, part of a
        symlink loop, exceeds max_hops, or cannot be inspected
    """
    absolute = file_path.absolute()
    current = Path(absolute.anchor)
    remaining = list(absolute.parts[1:])
    hops = 0

    while remaining:
        part = remaining.pop(0)
        if part in ('', '.'):
            continue
        if part == '..':
            # current never contains symlinks, so its lexical parent is its real parent
            current = current.parent
            continue

        candidate = current / part
        try:
            is_link = candidate.is_symlink()
        except OSError:
            return None

        if not is_link:
            current = candidate
            continue

        hops += 1
        if hops > max_hops:
            return None

        try:
            target = candidate.readlink()
        except OSError:
            return None

        if target.is_absolute():
            current = Path(target.anchor)
            remaining = list(target.parts[1:]) + remaining
        else:
            remaining = list(target.parts) + remaining

    try:
        # Verify the final target exists and is accessible
        current.stat()
    except OSError:
        return None
    return current


def list_directories(path: Path) -> list[Path]:
    """List immediate child directories of path, sorted by name.

    Symlinks to directories count as directories. Raises OSError if path cannot be listed.
    """
    children = []
    with os.scandir(path) as entries:
        for entry in entries:
            try:
                if entry.is_dir():
                    children.append(Path(entry.path))
            except OSError:
                continue
    return sorted(children, key=lambda p: p.name)
