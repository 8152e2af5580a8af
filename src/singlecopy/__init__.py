from .scanner import Scanner, WorkspaceNotFound
from .workspace.settings import ScanSettings
from .workspace.walker import Consumer, StoreSweep, WorkspaceError, enumerate_consumers
from .resolution.resolver import ResolutionCache, ResolutionFailure, ResolutionFailureKind, resolve
from .resolution.manifest import ManifestParseError, version_of
from .report.analysis import Analysis, DuplicationGroup, ResolutionRecord, Severity, analyze
from .report.store import MatchEntry, Report, ReportWriteFailure, build_report, read_report, write_report
