"""
Report formatters.

Every formatter receives the same two registries and must carry the same
information: each broken link with all referring documents, and each issue
with its category, description and all affected documents. Output is
deterministic so unchanged input produces a byte-identical report.
"""

import csv
import io
import json
import logging
from pathlib import Path
from typing import Callable, Dict, List, Optional, Union

from seocheck.constants import (
    DEFAULT_REPORT_FORMAT,
    FORMAT_ALIASES,
    FORMAT_EXTENSIONS,
)
from seocheck.registries import BrokenLinkRegistry, IssueRegistry, ordered_categories

logger = logging.getLogger(__name__)

BrokenLinks = Dict[str, List[str]]
Issues = Dict[str, Dict[str, List[str]]]

CSV_HEADER = ["type", "category", "item", "document"]
CSV_BROKEN_LINK = "broken_link"
CSV_SEO_ISSUE = "seo_issue"


def resolve_format(file_path: Optional[Union[str, Path]], override: Optional[str] = None) -> str:
    """Pick the report format.

    An explicit override wins, then the file extension, then the default
    plain-text log format.
    """
    if override:
        resolved = FORMAT_ALIASES.get(override.strip().lower())
        if resolved:
            return resolved
        logger.warning(f"Unknown report format '{override}', inferring from file extension")

    if file_path:
        resolved = FORMAT_EXTENSIONS.get(Path(file_path).suffix.lower())
        if resolved:
            return resolved

    return DEFAULT_REPORT_FORMAT


def _snapshots(broken_links, issues):
    """Sorted plain-dict views of registries or of already taken snapshots."""
    if isinstance(broken_links, BrokenLinkRegistry):
        broken_links = broken_links.snapshot()
    if isinstance(issues, IssueRegistry):
        issues = issues.snapshot()

    broken_links = {link: sorted(set(broken_links[link])) for link in sorted(broken_links)}
    issues = {
        category: {issue: sorted(set(issues[category][issue])) for issue in sorted(issues[category])}
        for category in ordered_categories(issues)
        if issues[category]
    }
    return broken_links, issues


def _issue_count(issues: Issues) -> int:
    return sum(len(keys) for keys in issues.values())


def format_markdown(broken_links: BrokenLinks, issues: Issues) -> str:
    lines = [
        "# SEO Check Report",
        "",
        f"- **Broken links:** {len(broken_links)}",
        f"- **SEO issues:** {_issue_count(issues)}",
        "",
        "## Broken Links",
        "",
    ]

    if not broken_links:
        lines += ["No broken links found.", ""]
    for link, documents in broken_links.items():
        lines += [f"### `{link}`", "", "Found in:", ""]
        lines += [f"- `{document}`" for document in documents]
        lines.append("")

    lines += ["## SEO Issues", ""]
    if not issues:
        lines += ["No SEO issues found.", ""]
    for category, keys in issues.items():
        lines += [f"### {category.capitalize()}", ""]
        for issue, documents in keys.items():
            lines += [f"#### {issue}", ""]
            lines += [f"- `{document}`" for document in documents]
            lines.append("")

    return "\n".join(lines)


def format_json(broken_links: BrokenLinks, issues: Issues) -> str:
    data = {
        "summary": {
            "brokenLinks": len(broken_links),
            "seoIssues": _issue_count(issues),
        },
        "brokenLinks": [
            {"link": link, "documents": documents}
            for link, documents in broken_links.items()
        ],
        "seoIssues": [
            {"category": category, "issue": issue, "documents": documents}
            for category, keys in issues.items()
            for issue, documents in keys.items()
        ],
    }
    return json.dumps(data, indent=2, ensure_ascii=False) + "\n"


def format_csv(broken_links: BrokenLinks, issues: Issues) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADER)

    for link, documents in broken_links.items():
        for document in documents:
            writer.writerow([CSV_BROKEN_LINK, "", link, document])

    for category, keys in issues.items():
        for issue, documents in keys.items():
            for document in documents:
                writer.writerow([CSV_SEO_ISSUE, category, issue, document])

    return buffer.getvalue()


def format_log(broken_links: BrokenLinks, issues: Issues) -> str:
    lines = []

    if broken_links:
        lines.append("Broken links found:")
        for link, documents in broken_links.items():
            lines.append(f"Broken link: {link}")
            lines.append("  Found in:")
            lines += [f"    - {document}" for document in documents]
    else:
        lines.append("No broken links found.")

    lines.append("")

    if issues:
        lines.append("SEO issues found:")
        for category, keys in issues.items():
            for issue, documents in keys.items():
                lines.append(f"[{category}] {issue}")
                lines.append("  Found in:")
                lines += [f"    - {document}" for document in documents]
    else:
        lines.append("No SEO issues found.")

    return "\n".join(lines) + "\n"


FORMATTERS: Dict[str, Callable[[BrokenLinks, Issues], str]] = {
    "markdown": format_markdown,
    "json": format_json,
    "csv": format_csv,
    "log": format_log,
}

OUTPUT_FORMATS = tuple(FORMATTERS)


def format_report(broken_links, issues, report_format: str = DEFAULT_REPORT_FORMAT) -> str:
    """Serialize the registries in the requested format.

    Args:
        broken_links: BrokenLinkRegistry or its snapshot
        issues: IssueRegistry or its snapshot
        report_format: One of OUTPUT_FORMATS (aliases accepted)

    Returns:
        The complete report text
    """
    broken_links, issues = _snapshots(broken_links, issues)
    formatter = FORMATTERS[resolve_format(None, report_format)]
    return formatter(broken_links, issues)
