"""Crawlability & Linking phase."""

from seocheck.link_checker import INTERNAL
from seocheck.models import Document, IssueCategory
from seocheck.phases.base import Phase, PhaseContext
from seocheck.source import comparable_path

SITEMAP_GLOBS = ("sitemap*.xml",)


class CrawlabilityPhase(Phase):
    """Robots directives, internal linking and sitemap hints."""

    id = "crawlability"
    name = "Crawlability & Linking"

    async def analyze(self, document: Document, context: PhaseContext) -> None:
        self._check_robots(document, context)
        self._check_links(document, context)
        if comparable_path(document.path) == "/":
            self._check_sitemap(document, context)

    def _check_robots(self, document: Document, context: PhaseContext) -> None:
        directives = set()
        for meta in document.soup.find_all("meta", attrs={"name": True, "content": True}):
            if meta["name"].strip().lower() in ("robots", "googlebot"):
                directives.update(part.strip().lower() for part in meta["content"].split(","))

        if "noindex" in directives or "none" in directives:
            context.report(IssueCategory.CRAWLABILITY, "Page blocked from indexing (noindex)", document)
        if "nofollow" in directives or "none" in directives:
            context.report(IssueCategory.CRAWLABILITY, "Page links not followed (nofollow)", document)

    def _check_links(self, document: Document, context: PhaseContext) -> None:
        config = context.config
        verifier = context.verifier
        own_path = comparable_path(document.path)
        internal_targets = set()
        nofollow_internal = False
        bad_href = False

        for anchor in document.soup.find_all("a", href=True):
            href = anchor["href"].strip()
            if not href or href.lower().startswith("javascript:"):
                bad_href = True
                continue

            kind, identity, _ = verifier.classify(href, document)
            if kind != INTERNAL:
                continue
            if identity != own_path:
                internal_targets.add(identity)
            if "nofollow" in [rel.lower() for rel in anchor.get("rel", [])]:
                nofollow_internal = True

        count = len(internal_targets)
        if count < config.min_internal_links:
            context.report(
                IssueCategory.LINKING, f"Fewer than {config.min_internal_links} internal links", document
            )
        elif count > config.max_internal_links:
            context.report(
                IssueCategory.LINKING, f"More than {config.max_internal_links} internal links", document
            )

        if nofollow_internal:
            context.report(IssueCategory.LINKING, "Internal link with rel=\"nofollow\"", document)
        if bad_href:
            context.report(IssueCategory.LINKING, "Link with empty or javascript: href", document)

    def _check_sitemap(self, document: Document, context: PhaseContext) -> None:
        references_sitemap = any(
            "sitemap" in [rel.lower() for rel in link.get("rel", [])]
            for link in document.soup.find_all("link")
        )
        if not references_sitemap:
            context.report(IssueCategory.CRAWLABILITY, "Home page does not reference a sitemap", document)

        has_sitemap_file = any(
            any(context.root.glob(pattern)) for pattern in SITEMAP_GLOBS
        )
        if not has_sitemap_file:
            context.report(IssueCategory.CRAWLABILITY, "No sitemap file found in site output", document)
