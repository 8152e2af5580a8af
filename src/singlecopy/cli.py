import argparse
import logging
import os
import sys
import textwrap
from pathlib import Path

from . import Scanner, ScanSettings, ReportWriteFailure
from .report.analysis import Severity
from .report.store import write_report
from .utils.profiling import profile_main
from .workspace.settings import (
    SETTING_TARGET_PACKAGE, SETTING_WORKSPACE_AREAS, SETTING_MAX_DEPTH, SETTING_ALLOWLIST
)

EXIT_OK = 0
EXIT_REPORT_WRITE_FAILURE = 1
EXIT_WORKSPACE_ERROR = 2
EXIT_STRICT_ERROR = 3

DEFAULT_SUMMARY_REPORT = 'singlecopy-report.json'


@profile_main
def singlecopy_main(argv: list[str] | None = None):
    parser = argparse.ArgumentParser(
        prog='singlecopy',
        description='Detect workspace packages that load physically distinct installed copies of a package that '
                    'must be a singleton (such as yjs).',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=textwrap.dedent('''
            Examples:
              singlecopy --dir /path/to/workspace
              singlecopy --dir /path/to/workspace --report duplicate-report.json
              singlecopy --report duplicate-report.json summary
            ''').strip()
    )
    parser.add_argument(
        '--dir',
        metavar='PATH',
        help='Workspace root directory to scan (default: current working directory)')
    parser.add_argument(
        '--report',
        metavar='PATH',
        help='Write the JSON report to this file instead of stdout. For "summary", the report to read '
             f'(default: {DEFAULT_SUMMARY_REPORT}).')
    parser.add_argument(
        '--package',
        metavar='NAME',
        help='Package that must be loaded from a single copy. Defaults to target.package from settings, or yjs.')
    parser.add_argument(
        '--workspace',
        metavar='AREA',
        action='append',
        help='Workspace area whose child directories are consumers; may be repeated. Defaults to workspace.areas '
             'from settings, or apps and packages.')
    parser.add_argument(
        '--max-depth',
        type=int,
        metavar='N',
        help='Maximum number of directories examined when walking upward (default: 12)')
    parser.add_argument(
        '--allowlist',
        metavar='A,B',
        help='Comma-separated substrings; consumers whose workspace-relative path contains one are skipped. Added to '
             'allowlist from settings.')
    parser.add_argument(
        '--strict',
        action='store_true',
        help='Exit with status 3 when the severity is "error" (default: exit 0 regardless of findings)')
    parser.add_argument(
        '--verbose',
        action='store_true',
        help='Log progress to stderr')
    parser.add_argument(
        '--log-file',
        metavar='PATH',
        help='Path to log file. If not provided, uses logging.path from settings or no log file.')
    parser.add_argument(
        '--log-level',
        metavar='LEVEL',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
        help='Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL). Defaults to INFO when --log-file is provided.')
    subparsers = parser.add_subparsers(
        dest='command',
        title='Commands',
        description='Available commands (default: scan)',
        help='Use "singlecopy COMMAND --help" for command-specific help'
    )

    parser_scan = subparsers.add_parser(
        'scan',
        help='Scan the workspace and report duplicate copies',
        description='Resolves the package from every workspace package and every copy found in the package store, '
                    'groups them by real path, and reports whether more than one copy is in use. This is the default '
                    'command.')
    parser_scan.set_defaults(method=_scan)

    parser_summary = subparsers.add_parser(
        'summary',
        help='Print a one-line summary of an existing report',
        description='Prints "scanned:N flagged:N severity:TIER" for the report given by --report, or "no report". '
                    'When GITHUB_OUTPUT is set, the line is also appended to that file. Always exits 0.')
    parser_summary.set_defaults(method=_summary)

    args = parser.parse_args(argv)

    if args.log_file:
        logging.basicConfig(
            filename=args.log_file,
            level=getattr(logging, args.log_level or 'INFO'),
            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )
    elif args.verbose:
        logging.basicConfig(
            stream=sys.stderr,
            level=getattr(logging, args.log_level or 'INFO'),
            format='%(levelname)s: %(message)s'
        )

    method = getattr(args, 'method', _scan)
    sys.exit(method(args))


def _load_scanner(args) -> Scanner:
    root = Path(args.dir) if args.dir else Path(os.getcwd())
    settings = ScanSettings(root)

    allowlist = None
    if args.allowlist:
        extra = [token.strip() for token in args.allowlist.split(',') if token.strip()]
        configured = settings.get(SETTING_ALLOWLIST, [])
        if isinstance(configured, str):
            configured = [configured]
        allowlist = list(configured) + extra

    settings = settings.with_overrides({
        SETTING_TARGET_PACKAGE: args.package,
        SETTING_WORKSPACE_AREAS: args.workspace,
        SETTING_MAX_DEPTH: args.max_depth,
        SETTING_ALLOWLIST: allowlist,
    })
    return Scanner(root, settings)


def _scan(args) -> int:
    try:
        scanner = _load_scanner(args)
        if not (args.log_file or args.verbose):
            scanner.configure_logging_from_settings()
        report = scanner.scan()
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_WORKSPACE_ERROR

    if args.report:
        try:
            write_report(report, Path(args.report))
        except ReportWriteFailure as e:
            print(f"Error: {e}", file=sys.stderr)
            return EXIT_REPORT_WRITE_FAILURE
    else:
        sys.stdout.write(report.to_json())

    package_name = scanner.scan_args().package_name
    print(f"Scanned {report.scanned_files} consumer(s). Flagged {report.flagged_files} consumer(s) bound to "
          f"duplicate copies of {package_name} (severity: {report.severity}).", file=sys.stderr)
    if args.report:
        print(f"Wrote report to {args.report}", file=sys.stderr)

    if args.strict and report.severity == Severity.ERROR:
        return EXIT_STRICT_ERROR
    return EXIT_OK


def _summary(args) -> int:
    from .commands.summary import do_summary

    do_summary(Path(args.report or DEFAULT_SUMMARY_REPORT))
    return EXIT_OK


if __name__ == '__main__':
    singlecopy_main()
