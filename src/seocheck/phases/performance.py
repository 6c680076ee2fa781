"""Performance & Technical SEO phase."""

import asyncio
import logging
from typing import List, Optional, Tuple

from seocheck.constants import JAVASCRIPT_TYPES, LAZY_LOAD_THRESHOLD, MAX_BLOCKING_STYLESHEETS
from seocheck.link_checker import SKIPPED
from seocheck.models import Document, IssueCategory
from seocheck.phases.base import Phase, PhaseContext

logger = logging.getLogger(__name__)


def _kb(value: float) -> str:
    return f"{value:g}KB"


def _content_bytes(tag) -> int:
    return len((tag.string or "").encode("utf-8"))


class PerformancePhase(Phase):
    """Render-blocking resources, inline code size and image hygiene."""

    id = "performance"
    name = "Performance & Technical SEO"

    async def analyze(self, document: Document, context: PhaseContext) -> None:
        self._check_render_blocking(document, context)
        self._check_inline_code(document, context)
        self._check_images(document, context)
        if context.config.check_resource_sizes:
            await self._check_image_sizes(document, context)

    def _check_render_blocking(self, document: Document, context: PhaseContext) -> None:
        head = document.soup.head
        if head is None:
            return

        for script in head.find_all("script", src=True):
            script_type = (script.get("type") or "").strip().lower()
            if script_type == "module" or script.has_attr("async") or script.has_attr("defer"):
                continue
            if script_type not in JAVASCRIPT_TYPES:
                continue
            context.report(IssueCategory.PERFORMANCE, "Render-blocking script in <head>", document)
            break

        blocking_styles = 0
        for link in head.find_all("link", href=True):
            rels = [rel.lower() for rel in link.get("rel", [])]
            media = (link.get("media") or "all").strip().lower()
            if "stylesheet" in rels and media in ("all", "screen", ""):
                blocking_styles += 1
        if blocking_styles > MAX_BLOCKING_STYLESHEETS:
            context.report(
                IssueCategory.PERFORMANCE,
                f"More than {MAX_BLOCKING_STYLESHEETS} render-blocking stylesheets",
                document,
            )

    def _check_inline_code(self, document: Document, context: PhaseContext) -> None:
        config = context.config
        script_limit = config.inline_script_threshold * 1024
        style_limit = config.inline_style_threshold * 1024

        for script in document.soup.find_all("script"):
            if script.get("src"):
                continue
            if (script.get("type") or "").strip().lower() not in JAVASCRIPT_TYPES:
                continue
            size = _content_bytes(script)
            if size > script_limit:
                logger.debug(f"Inline script of {size} bytes in {document.path}")
                context.report(
                    IssueCategory.PERFORMANCE,
                    f"Inline script larger than {_kb(config.inline_script_threshold)}",
                    document,
                )
                break

        for style in document.soup.find_all("style"):
            size = _content_bytes(style)
            if size > style_limit:
                logger.debug(f"Inline style of {size} bytes in {document.path}")
                context.report(
                    IssueCategory.PERFORMANCE,
                    f"Inline style larger than {_kb(config.inline_style_threshold)}",
                    document,
                )
                break

    def _check_images(self, document: Document, context: PhaseContext) -> None:
        images = document.soup.find_all("img")

        if any(not img.get("width") or not img.get("height") for img in images):
            context.report(IssueCategory.PERFORMANCE, "Image missing width/height attributes", document)

        for position, img in enumerate(images):
            if position < LAZY_LOAD_THRESHOLD:
                continue
            if (img.get("loading") or "").lower() != "lazy":
                context.report(
                    IssueCategory.PERFORMANCE, "Below-the-fold image without lazy loading", document
                )
                break

    async def _check_image_sizes(self, document: Document, context: PhaseContext) -> None:
        verifier = context.verifier
        limit = context.config.image_size_threshold * 1024

        targets: List[Tuple[str, str]] = []
        seen = set()
        for img in document.soup.find_all("img", src=True):
            kind, identity, _ = verifier.classify(img["src"], document)
            if kind == SKIPPED or identity in seen:
                continue
            seen.add(identity)
            targets.append((img["src"], identity))

        sizes: List[Optional[int]] = await asyncio.gather(
            *(verifier.measure(src, document) for src, _ in targets), return_exceptions=True
        )

        for (_, identity), size in zip(targets, sizes):
            if isinstance(size, Exception):
                logger.warning(f"Could not measure {identity} in {document.path}: {size}")
                continue
            if size is not None and size > limit:
                context.report(
                    IssueCategory.PERFORMANCE,
                    f"Large image ({size / 1024:.0f}KB, over {_kb(context.config.image_size_threshold)}): {identity}",
                    document,
                )
