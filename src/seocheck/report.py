"""Report generation and writing."""

import logging
from pathlib import Path
from typing import Optional, Union

from seocheck.exceptions import ReportWriteError
from seocheck.formatters import format_report, resolve_format
from seocheck.models import ScanSummary
from seocheck.summary import build_summary, render_summary

logger = logging.getLogger(__name__)


def write_report(content: str, path: Union[str, Path]) -> Path:
    """Write a finished report, replacing any previous one.

    The destination directory is created when missing.

    Raises:
        ReportWriteError: If the directory or file cannot be written
    """
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    except OSError as e:
        raise ReportWriteError(path, e.strerror or str(e)) from e
    return path


def generate_report(
    broken_links,
    issues,
    file_path: Optional[Union[str, Path]],
    report_format: Optional[str] = None,
    elapsed_seconds: float = 0.0,
    pages_scanned: int = 0,
) -> ScanSummary:
    """Format the registries, write the report and log the summary.

    Args:
        broken_links: Broken link registry snapshot
        issues: Issue registry snapshot
        file_path: Destination of the report; when None the report is logged
        report_format: Optional format override
        elapsed_seconds: Scan duration for the summary
        pages_scanned: Number of documents analyzed

    Returns:
        ScanSummary of the run

    Raises:
        ReportWriteError: If the report cannot be written
    """
    fmt = resolve_format(file_path, report_format)
    content = format_report(broken_links, issues, fmt)

    written = None
    if file_path:
        written = write_report(content, file_path)
    else:
        logger.info(content)

    summary = build_summary(
        broken_links,
        issues,
        elapsed_seconds,
        pages_scanned=pages_scanned,
        report_path=written,
        report_format=fmt,
    )
    logger.info(render_summary(summary))
    return summary
