"""Report assembly, serialization and persistence."""

import json
import logging
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable

from .analysis import Analysis, ResolutionRecord, Severity
from ..workspace.walker import Consumer

logger = logging.getLogger(__name__)


class ReportWriteFailure(OSError):
    """The report file could not be written."""


@dataclass
class MatchEntry:
    """Resolution outcome of one consumer as it appears in the report."""
    consumer: str
    resolved_path: str | None = None
    version: str | None = None
    group_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            'consumer': self.consumer,
            'resolvedPath': self.resolved_path,
            'version': self.version,
            'groupId': self.group_id,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "MatchEntry":
        return cls(
            consumer=data['consumer'],
            resolved_path=data.get('resolvedPath'),
            version=data.get('version'),
            group_id=data.get('groupId'),
        )


@dataclass
class Report:
    """Externally visible result of one scan.

    Serialized as a JSON object with exactly the fields scannedFiles, matches,
    flaggedFiles and severity, in that order.
    """
    scanned_files: int = 0
    """Number of consumers examined"""

    matches: list[MatchEntry] = field(default_factory=list)
    """One entry per consumer, in walk order"""

    flagged_files: int = 0
    """Number of consumers bound to one of several distinct copies"""

    severity: Severity = Severity.NONE
    """Severity tier of the scan"""

    def to_dict(self) -> dict[str, Any]:
        return {
            'scannedFiles': self.scanned_files,
            'matches': [match.to_dict() for match in self.matches],
            'flaggedFiles': self.flagged_files,
            'severity': str(self.severity),
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2) + '\n'

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Report":
        """Load a report from its dictionary form.

        Raises:
            ValueError: A top-level field is missing or has the wrong type
        """
        scanned_files = data.get('scannedFiles')
        matches = data.get('matches')
        flagged_files = data.get('flaggedFiles')
        if not isinstance(scanned_files, int) or scanned_files < 0:
            raise ValueError(f"Invalid scannedFiles: {scanned_files!r}")
        if not isinstance(matches, list):
            raise ValueError(f"Invalid matches: {matches!r}")
        if not isinstance(flagged_files, int) or not 0 <= flagged_files <= scanned_files:
            raise ValueError(f"Invalid flaggedFiles: {flagged_files!r}")
        return cls(
            scanned_files=scanned_files,
            matches=[MatchEntry.from_dict(m) for m in matches],
            flagged_files=flagged_files,
            severity=Severity(data.get('severity')),
        )


def build_report(consumers: list[Consumer], records: Iterable[ResolutionRecord], analysis: Analysis) -> Report:
    """Assemble the report from the walk, the per-consumer records and the analysis.

    Records must be given in walk order; matches preserve that order.
    """
    matches = []
    for record in records:
        group = analysis.group_for(record.real_path)
        matches.append(MatchEntry(
            consumer=str(record.consumer.path),
            resolved_path=None if record.real_path is None else str(record.real_path),
            version=record.version,
            group_id=None if group is None else group.group_id,
        ))

    return Report(
        scanned_files=len(consumers),
        matches=matches,
        flagged_files=analysis.flagged_count,
        severity=analysis.severity,
    )


def _current_umask() -> int:
    umask = os.umask(0)
    os.umask(umask)
    return umask


def write_report(report: Report, path: Path) -> None:
    """Write the report as JSON, atomically.

    The content is written to a temporary file next to path and renamed over it, so a
    failed write never leaves a partial report behind. The file gets the same permissions
    a plain open() would give it.

    Raises:
        ReportWriteFailure: The report could not be written
    """
    path = Path(path)
    content = report.to_json()
    temp_name = None
    try:
        fd, temp_name = tempfile.mkstemp(prefix=f'.{path.name}.', suffix='.tmp', dir=path.parent)
        with os.fdopen(fd, 'w', encoding='utf-8') as f:
            f.write(content)
        os.chmod(temp_name, 0o666 & ~_current_umask())
        os.replace(temp_name, path)
    except OSError as e:
        if temp_name is not None:
            try:
                os.unlink(temp_name)
            except FileNotFoundError:
                pass
        raise ReportWriteFailure(f"Cannot write report to {path}: {e}") from e

    logger.info(f"Wrote report to {path}")


def read_report(path: Path) -> Report:
    """Read a report written by write_report().

    Raises:
        FileNotFoundError: The report does not exist
        ValueError: The file is not a valid report
    """
    with open(path, 'r', encoding='utf-8') as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"Report {path} is not a JSON object")
    return Report.from_dict(data)
