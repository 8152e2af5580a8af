"""Grouping of resolution records by real path and severity assessment."""

from enum import StrEnum
from pathlib import Path
from typing import Iterable, NamedTuple

import mmh3

from ..resolution.resolver import ResolutionFailureKind
from ..workspace.walker import Consumer


class Severity(StrEnum):
    NONE = 'none'
    WARNING = 'warning'
    ERROR = 'error'


class ResolutionRecord(NamedTuple):
    """Outcome of resolving the singleton package from one consumer.

    Attributes:
        consumer: The consumer this record belongs to
        real_path: Real path of the loaded module file, or None if resolution failed
        version: Version declared by the owning package manifest, or None if unknown
        failure: Why resolution failed, or None on success
    """
    consumer: Consumer
    real_path: Path | None
    version: str | None = None
    failure: ResolutionFailureKind | None = None


def compute_group_id(real_path: Path) -> str:
    """Compute a stable identifier for a real path (hex of its 128-bit Murmur3 hash)."""
    hash_value = mmh3.hash128(str(real_path).encode('utf-8'), signed=False)
    return hash_value.to_bytes(16, byteorder='big').hex()


class DuplicationGroup:
    """Consumers bound to one physical copy of the singleton package.

    Attributes:
        real_path: Real path shared by every consumer in the group
        group_id: Stable identifier derived from real_path
        consumers: Consumers bound to this copy, in walk order
        versions: Version observed for each consumer, parallel to consumers
    """

    def __init__(self, real_path: Path):
        self.real_path = real_path
        self.group_id = compute_group_id(real_path)
        self.consumers: list[Consumer] = []
        self.versions: list[str | None] = []

    def add(self, record: ResolutionRecord) -> None:
        self.consumers.append(record.consumer)
        self.versions.append(record.version)

    def __len__(self) -> int:
        return len(self.consumers)

    def __repr__(self) -> str:
        return f"DuplicationGroup({self.real_path}, consumers={len(self.consumers)})"


class Analysis(NamedTuple):
    """Result of analyzing all resolution records of one scan.

    Attributes:
        groups: One group per distinct real path, ordered by first appearance in walk order
        flagged_count: Number of consumers flagged; every grouped consumer once more than
                       one group exists, otherwise 0
        severity: Severity tier of the scan
    """
    groups: list[DuplicationGroup]
    flagged_count: int
    severity: Severity

    def group_for(self, real_path: Path | None) -> DuplicationGroup | None:
        if real_path is None:
            return None
        for group in self.groups:
            if group.real_path == real_path:
                return group
        return None


def assess_severity(groups: list[DuplicationGroup]) -> Severity:
    """Derive the severity tier from the distinct groups.

    none: at most one copy. warning: exactly two copies whose declared versions are all
    textually identical. error: two copies with differing or unknown versions, or more
    than two copies.
    """
    if len(groups) <= 1:
        return Severity.NONE
    if len(groups) > 2:
        return Severity.ERROR

    versions = {version for group in groups for version in group.versions}
    if len(versions) == 1 and None not in versions:
        return Severity.WARNING
    return Severity.ERROR


def analyze(records: Iterable[ResolutionRecord]) -> Analysis:
    """Group records by real path and decide whether the workspace is duplicated.

    Records without a real path are ignored. Groups partition the remaining consumers by
    exact path equality, so two copies declaring the same version are still two groups.
    """
    groups: dict[Path, DuplicationGroup] = {}
    for record in records:
        if record.real_path is None:
            continue
        group = groups.get(record.real_path)
        if group is None:
            group = groups[record.real_path] = DuplicationGroup(record.real_path)
        group.add(record)

    ordered = list(groups.values())
    if len(ordered) <= 1:
        flagged_count = 0
    else:
        flagged_count = sum(len(group) for group in ordered)

    return Analysis(ordered, flagged_count, assess_severity(ordered))
