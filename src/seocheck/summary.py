"""Console summary of a scan, grouped by issue category."""

from pathlib import Path
from typing import Dict, List, Optional

from seocheck.constants import CATEGORY_EMOJIS
from seocheck.models import CategoryBreakdown, ScanSummary
from seocheck.registries import ordered_categories

RULE = "━" * 48


def _plural(count: int, word: str) -> str:
    return f"{count} {word}{'' if count == 1 else 's'}"


def build_summary(
    broken_links: Dict[str, List[str]],
    issues: Dict[str, Dict[str, List[str]]],
    elapsed_seconds: float,
    pages_scanned: int = 0,
    report_path: Optional[Path] = None,
    report_format: str = "log",
) -> ScanSummary:
    """Summarize registry snapshots.

    Categories follow the fixed display priority; inside a category issues
    are ranked by the number of affected documents, most first.
    """
    categories = []
    for category in ordered_categories(issues):
        ranked = sorted(
            ((issue, len(documents)) for issue, documents in issues[category].items()),
            key=lambda item: (-item[1], item[0]),
        )
        if ranked:
            categories.append(CategoryBreakdown(category=category, issues=ranked))

    return ScanSummary(
        elapsed_seconds=elapsed_seconds,
        pages_scanned=pages_scanned,
        broken_link_count=len(broken_links),
        issue_count=sum(len(keys) for keys in issues.values()),
        categories=categories,
        report_path=report_path,
        report_format=report_format,
    )


def render_summary(summary: ScanSummary) -> str:
    """Human-readable multi-line summary for the console."""
    if summary.broken_link_count:
        broken_line = f"⚠️  {_plural(summary.broken_link_count, 'broken link')}"
    else:
        broken_line = "✅ No broken links detected"

    if summary.issue_count:
        issues_line = f"⚠️  {_plural(summary.issue_count, 'SEO issue')}"
    else:
        issues_line = "✅ No SEO issues detected"

    lines = [
        "",
        "✨ SEO Checker Report ✨",
        RULE,
        f"✓ Scanned {_plural(summary.pages_scanned, 'page')} in {summary.elapsed_seconds:.2f} seconds",
        "",
        "📊 Summary:",
        f"  {broken_line}",
        f"  {issues_line}",
    ]

    if summary.categories:
        lines += ["", "  Issue breakdown:"]
        for group in summary.categories:
            emoji = CATEGORY_EMOJIS.get(group.category, "•")
            lines.append(f"    {emoji} {group.category.capitalize()}: {_plural(group.total, 'issue')}")
            for issue, count in group.issues:
                lines.append(f"      • {issue}: {_plural(count, 'page')}")

    if summary.report_path is not None:
        lines += [
            "",
            f"📄 Full {summary.report_format.upper()} report written to:",
            f"  {summary.report_path}",
        ]

    return "\n".join(lines) + "\n"
