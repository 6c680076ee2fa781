"""Metadata & Semantic Structure phase."""

from typing import Optional
from urllib.parse import urlsplit

from seocheck.constants import (
    META_DESCRIPTION_MAX_LENGTH,
    META_DESCRIPTION_MIN_LENGTH,
    TITLE_MAX_LENGTH,
    TITLE_MIN_LENGTH,
)
from seocheck.models import Document, IssueCategory
from seocheck.phases.base import Phase, PhaseContext, element_text
from seocheck.source import comparable_path


def _meta_content(soup, **attrs) -> Optional[str]:
    tag = soup.find("meta", attrs=attrs)
    if tag is None:
        return None
    return " ".join((tag.get("content") or "").split())


def canonical_matches(canonical_href: str, document_path: str) -> bool:
    """Whether a canonical URL points at the document itself.

    Only the path is compared; scheme and host are ignored because the
    built site does not know its production origin. Trailing slashes and
    ``index.html`` / ``.html`` suffixes are normalized on both sides.
    """
    try:
        path = urlsplit(canonical_href.strip()).path or "/"
    except ValueError:
        return False
    return comparable_path(path) == comparable_path(document_path)


class MetadataPhase(Phase):
    """Title, description, social and canonical tags plus heading structure."""

    id = "metadata"
    name = "Metadata & Semantic Structure"

    async def analyze(self, document: Document, context: PhaseContext) -> None:
        self._check_title(document, context)
        self._check_description(document, context)
        self._check_meta_tags(document, context)
        if context.config.check_canonical:
            self._check_canonical(document, context)
        self._check_headings(document, context)

    def _check_title(self, document: Document, context: PhaseContext) -> None:
        title_tag = document.soup.find("title")
        title = element_text(title_tag) if title_tag else ""

        if not title:
            context.report(IssueCategory.METADATA, "Missing page title", document)
        elif len(title) < TITLE_MIN_LENGTH:
            context.report(
                IssueCategory.METADATA, f"Page title shorter than {TITLE_MIN_LENGTH} characters", document
            )
        elif len(title) > TITLE_MAX_LENGTH:
            context.report(
                IssueCategory.METADATA, f"Page title longer than {TITLE_MAX_LENGTH} characters", document
            )

    def _check_description(self, document: Document, context: PhaseContext) -> None:
        description = _meta_content(document.soup, name="description")

        if not description:
            context.report(IssueCategory.METADATA, "Missing meta description", document)
        elif len(description) < META_DESCRIPTION_MIN_LENGTH:
            context.report(
                IssueCategory.METADATA,
                f"Meta description shorter than {META_DESCRIPTION_MIN_LENGTH} characters",
                document,
            )
        elif len(description) > META_DESCRIPTION_MAX_LENGTH:
            context.report(
                IssueCategory.METADATA,
                f"Meta description longer than {META_DESCRIPTION_MAX_LENGTH} characters",
                document,
            )

    def _check_meta_tags(self, document: Document, context: PhaseContext) -> None:
        soup = document.soup

        if soup.find("meta", attrs={"name": "viewport"}) is None:
            context.report(IssueCategory.METADATA, "Missing viewport meta tag", document)
        if not _meta_content(soup, property="og:title"):
            context.report(IssueCategory.METADATA, "Missing Open Graph title (og:title)", document)
        if not _meta_content(soup, property="og:description"):
            context.report(IssueCategory.METADATA, "Missing Open Graph description (og:description)", document)

    def _check_canonical(self, document: Document, context: PhaseContext) -> None:
        canonical = None
        for link in document.soup.find_all("link", href=True):
            if "canonical" in [rel.lower() for rel in link.get("rel", [])]:
                canonical = link["href"]
                break

        if canonical is None or not canonical.strip():
            context.report(IssueCategory.METADATA, "Missing canonical link", document)
        elif not canonical_matches(canonical, document.path):
            context.report(IssueCategory.METADATA, "Canonical link points to a different page", document)

    def _check_headings(self, document: Document, context: PhaseContext) -> None:
        headings = document.soup.find_all(["h1", "h2", "h3", "h4", "h5", "h6"])
        h1_count = sum(1 for h in headings if h.name == "h1")

        if h1_count == 0:
            context.report(IssueCategory.SEMANTIC, "Missing <h1> heading", document)
        elif h1_count > 1:
            context.report(IssueCategory.SEMANTIC, "Multiple <h1> headings", document)

        previous = 0
        for heading in headings:
            level = int(heading.name[1])
            if previous and level > previous + 1:
                context.report(IssueCategory.SEMANTIC, "Skipped heading level", document)
                break
            previous = level
