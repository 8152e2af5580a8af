import logging
import os
from pathlib import Path

from ..report.store import read_report

logger = logging.getLogger(__name__)

NO_REPORT = 'no report'


def summarize(report_path: Path) -> str:
    """Summarize a report as one machine-friendly line.

    Returns "scanned:<n> flagged:<n> severity:<tier>", or "no report" if the report is
    missing or unreadable.
    """
    try:
        report = read_report(report_path)
    except (OSError, ValueError) as e:
        logger.info(f"Cannot read report {report_path}: {e}")
        return NO_REPORT

    return f"scanned:{report.scanned_files} flagged:{report.flagged_files} severity:{report.severity}"


def do_summary(report_path: Path) -> str:
    """Print the summary line and append it to $GITHUB_OUTPUT when that is set."""
    line = summarize(report_path)
    print(line)

    github_output = os.environ.get('GITHUB_OUTPUT')
    if github_output:
        try:
            with open(github_output, 'a', encoding='utf-8') as f:
                f.write(f"summary<<EOF\n{line}\nEOF\n")
        except OSError as e:
            logger.warning(f"Cannot append summary to {github_output}: {e}")

    return line
