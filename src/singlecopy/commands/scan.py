import logging
from pathlib import Path
from typing import NamedTuple

from ..report.analysis import ResolutionRecord, analyze
from ..report.store import Report, build_report
from ..resolution.manifest import version_of
from ..resolution.resolver import (
    ResolutionCache, ResolutionFailure, ResolutionFailureKind, resolve, resolve_package_dir
)
from ..workspace.walker import Consumer, StoreSweep, enumerate_consumers

logger = logging.getLogger(__name__)


class ScanArgs(NamedTuple):
    """Arguments for the scan operation."""
    root: Path  # Workspace root
    package_name: str  # Singleton package to check
    areas: tuple[str, ...]  # Workspace areas relative to root
    max_depth: int  # Bound on every upward walk
    conditions: tuple[str, ...]  # Active export conditions
    store_sweep: StoreSweep | None  # Secondary sweep parameters, None to skip
    allowlist: tuple[str, ...]  # Root-relative path substrings to leave out


def resolve_consumer(consumer: Consumer, args: ScanArgs, cache: ResolutionCache) -> ResolutionRecord:
    """Resolve the singleton package for one consumer, recovering from per-consumer failures."""
    try:
        if consumer.synthetic:
            real_path = resolve_package_dir(consumer.path, args.package_name, cache, conditions=args.conditions)
        else:
            real_path = resolve(consumer.path, args.package_name, cache,
                                max_depth=args.max_depth, conditions=args.conditions)
    except ResolutionFailure as e:
        if e.kind == ResolutionFailureKind.BROKEN_INSTALL:
            logger.warning(str(e))
        else:
            logger.info(str(e))
        return ResolutionRecord(consumer, None, None, e.kind)

    version = version_of(real_path, max_depth=args.max_depth)
    logger.debug(f"{consumer.path} -> {real_path} ({version})")
    return ResolutionRecord(consumer, real_path, version)


def do_scan(args: ScanArgs) -> Report:
    """Run the detection pipeline: walk, resolve each consumer, analyze, build the report.

    Raises:
        WorkspaceError: A workspace area cannot be listed
    """
    consumers = enumerate_consumers(
        args.root, args.areas,
        package_name=args.package_name,
        store_sweep=args.store_sweep,
        allowlist=args.allowlist)
    logger.info(f"Checking {args.package_name} for {len(consumers)} consumer(s) under {args.root}")

    cache = ResolutionCache()
    records = [resolve_consumer(consumer, args, cache) for consumer in consumers]

    analysis = analyze(records)
    for group in analysis.groups:
        logger.info(f"Copy {group.group_id} at {group.real_path}: {len(group)} consumer(s)")
    if len(analysis.groups) > 1:
        logger.warning(f"Found {len(analysis.groups)} distinct copies of {args.package_name} "
                       f"(severity: {analysis.severity})")

    return build_report(consumers, records, analysis)
