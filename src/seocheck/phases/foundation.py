"""
Foundation & Privacy phase.

Structural validity signals, tracking scripts, exposed e-mail addresses and
link liveness. Every anchor is handed to the link verifier; broken ones end
up in the broken link registry.
"""

import asyncio
import logging
import re
from collections import Counter
from typing import Set
from urllib.parse import unquote

from bs4.element import Doctype

from seocheck.constants import (
    DEPRECATED_ELEMENTS,
    EMAIL_FALSE_POSITIVE_SUFFIXES,
    EMAIL_PATTERN,
    TRACKING_SIGNATURES,
)
from seocheck.models import Document, IssueCategory
from seocheck.phases.base import Phase, PhaseContext, visible_text

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(EMAIL_PATTERN)


class FoundationPhase(Phase):
    """Structural, privacy and link checks."""

    id = "foundation"
    name = "Foundation & Privacy"

    async def analyze(self, document: Document, context: PhaseContext) -> None:
        self._check_structure(document, context)
        self._check_tracking(document, context)
        self._check_emails(document, context)
        await self._check_links(document, context)

    def _check_structure(self, document: Document, context: PhaseContext) -> None:
        soup = document.soup

        doctypes = [item for item in soup.contents if isinstance(item, Doctype)]
        if not doctypes or not doctypes[0].strip().lower().startswith("html"):
            context.report(IssueCategory.TECHNICAL, "Missing <!DOCTYPE html> declaration", document)

        has_charset = soup.find("meta", attrs={"charset": True}) is not None
        if not has_charset:
            for meta in soup.find_all("meta", attrs={"http-equiv": True}):
                if meta["http-equiv"].lower() == "content-type" and "charset" in meta.get("content", "").lower():
                    has_charset = True
                    break
        if not has_charset:
            context.report(IssueCategory.TECHNICAL, "Missing character encoding declaration", document)

        for name in DEPRECATED_ELEMENTS:
            if soup.find(name) is not None:
                context.report(IssueCategory.TECHNICAL, f"Deprecated <{name}> element", document)

        ids = Counter(tag["id"] for tag in soup.find_all(attrs={"id": True}) if tag["id"])
        duplicates = sorted(value for value, count in ids.items() if count > 1)
        if duplicates:
            logger.debug(f"Duplicate ids in {document.path}: {', '.join(duplicates)}")
            context.report(IssueCategory.TECHNICAL, "Duplicate id attributes", document)

    def _check_tracking(self, document: Document, context: PhaseContext) -> None:
        sources = []
        for script in document.soup.find_all("script"):
            if script.get("src"):
                sources.append(script["src"].lower())
            if script.string:
                sources.append(script.string)
        for img in document.soup.find_all("img", src=True):
            # Tracking pixels (e.g. facebook.com/tr) live in <noscript><img>
            sources.append(img["src"].lower())
        haystack = "\n".join(sources)

        for tracker, signatures in TRACKING_SIGNATURES.items():
            if any(signature in haystack for signature in signatures):
                context.report(IssueCategory.PRIVACY, f"Tracking script detected: {tracker}", document)

        for iframe in document.soup.find_all("iframe", src=True):
            src = iframe["src"].lower()
            if "youtube.com/embed" in src and "youtube-nocookie.com" not in src:
                context.report(
                    IssueCategory.PRIVACY,
                    "YouTube embed without privacy-enhanced mode (youtube-nocookie.com)",
                    document,
                )
                break

    def _check_emails(self, document: Document, context: PhaseContext) -> None:
        allowlist = {address.lower() for address in context.config.email_allowlist}
        found: Set[str] = set()

        for match in EMAIL_RE.findall(visible_text(document.soup)):
            found.add(match.lower())

        for anchor in document.soup.find_all("a", href=True):
            href = anchor["href"].strip()
            if href.lower().startswith("mailto:"):
                address = unquote(href[len("mailto:"):].split("?", 1)[0]).strip()
                for part in address.split(","):
                    if EMAIL_RE.fullmatch(part.strip()):
                        found.add(part.strip().lower())

        for address in sorted(found):
            if address.endswith(EMAIL_FALSE_POSITIVE_SUFFIXES) or address in allowlist:
                continue
            context.report(IssueCategory.PRIVACY, f"Exposed email address: {address}", document)

    async def _check_links(self, document: Document, context: PhaseContext) -> None:
        hrefs = []
        seen = set()
        for anchor in document.soup.find_all(["a", "area"], href=True):
            href = anchor["href"]
            if href not in seen:
                seen.add(href)
                hrefs.append(href)

        results = await asyncio.gather(
            *(context.verifier.check(href, document) for href in hrefs), return_exceptions=True
        )
        for href, result in zip(hrefs, results):
            if isinstance(result, Exception):
                logger.warning(f"Could not verify link {href!r} in {document.path}: {result}")
