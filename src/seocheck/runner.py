"""
Phase Runner and scan orchestration.

One scan analyzes every HTML document of a built site concurrently. Each
document is parsed once and handed to the enabled phases in catalogue
order; all phases write into the shared registries. The report is only
produced after every document analysis has finished.
"""

import asyncio
import logging
import time
from pathlib import Path
from typing import List, Optional, Tuple, Union

import httpx

from seocheck.config import CheckerConfig
from seocheck.constants import PROGRESS_LOG_EVERY, PROGRESS_LOG_MIN_PAGES
from seocheck.link_checker import LinkVerifier
from seocheck.models import Document, ScanResult
from seocheck.phases import Phase, PhaseContext, enabled_phases
from seocheck.registries import BrokenLinkRegistry, IssueRegistry
from seocheck.report import generate_report
from seocheck.source import discover_documents, load_document, normalize_html_file_path

logger = logging.getLogger(__name__)


class PhaseRunner:
    """Run the enabled phases of a configuration over single documents."""

    def __init__(self, config: CheckerConfig):
        self.config = config
        self.phases: Tuple[Phase, ...] = enabled_phases(config)

    async def run(self, document: Document, context: PhaseContext) -> None:
        """Run every enabled phase on ``document``.

        A phase that fails is logged and skipped for this document only.
        """
        for phase in self.phases:
            try:
                await phase.analyze(document, context)
            except Exception as e:
                logger.warning(f"Phase '{phase.id}' failed on {document.path}: {e}")
                logger.debug(f"Traceback for phase '{phase.id}' on {document.path}", exc_info=True)


class SiteChecker:
    """Scan a built site and produce the report."""

    def __init__(
        self,
        config: Optional[CheckerConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize checker.

        Args:
            config: Run configuration (defaults apply when None)
            transport: Optional httpx transport for external probes (used by tests)
        """
        self.config = config or CheckerConfig()
        self.runner = PhaseRunner(self.config)
        self.transport = transport

        self.broken_links = BrokenLinkRegistry()
        self.issues = IssueRegistry()
        self.skipped_documents: List[str] = []
        self.pages_processed = 0

    def report_path(self, root: Union[str, Path]) -> Optional[Path]:
        """Absolute report destination; relative paths live in the site root."""
        if not self.config.report_file_path:
            return None
        path = Path(self.config.report_file_path)
        return path if path.is_absolute() else Path(root) / path

    async def scan(self, root: Union[str, Path]) -> int:
        """Analyze every document below ``root`` into the registries.

        Returns:
            Number of documents discovered
        """
        root = Path(root)
        files = discover_documents(root)
        total = len(files)
        known = frozenset(normalize_html_file_path(path, root) for path in files)

        phase_names = ", ".join(phase.name for phase in self.runner.phases) or "none"
        logger.info(
            f"🔍 Starting SEO check on {total} HTML pages\n"
            f"   Running {len(self.runner.phases)} enabled phases: {phase_names}"
        )

        semaphore = asyncio.Semaphore(max(1, self.config.max_concurrent_documents))

        async with LinkVerifier(
            self.config, root, known, self.broken_links, transport=self.transport
        ) as verifier:
            context = PhaseContext(
                config=self.config,
                root=root,
                known_documents=known,
                broken_links=self.broken_links,
                issues=self.issues,
                verifier=verifier,
            )

            async def analyze(file_path: Path) -> None:
                async with semaphore:
                    try:
                        document = await asyncio.to_thread(load_document, file_path, root)
                    except Exception as e:
                        logger.warning(f"Skipping unreadable document {file_path}: {e}")
                        self.skipped_documents.append(str(file_path))
                        return

                    await self.runner.run(document, context)

                self.pages_processed += 1
                if total > PROGRESS_LOG_MIN_PAGES and self.pages_processed % PROGRESS_LOG_EVERY == 0:
                    percent = round(self.pages_processed / total * 100)
                    logger.info(f"   Progress: {percent}% ({self.pages_processed}/{total} pages scanned)")

            await asyncio.gather(*(analyze(path) for path in files))

            if verifier.probes_attempted:
                logger.debug(f"External probes attempted: {verifier.probes_attempted}")

        return total

    async def run(self, root: Union[str, Path]) -> ScanResult:
        """Scan ``root``, write the report and return the final registries.

        Raises:
            ReportWriteError: If the report cannot be written
        """
        start_time = time.monotonic()
        await self.scan(root)
        elapsed = time.monotonic() - start_time

        broken_links = self.broken_links.snapshot()
        issues = self.issues.snapshot()

        summary = generate_report(
            broken_links,
            issues,
            self.report_path(root),
            report_format=self.config.report_format,
            elapsed_seconds=elapsed,
            pages_scanned=self.pages_processed,
        )

        return ScanResult(
            broken_links=broken_links,
            issues=issues,
            summary=summary,
            skipped_documents=sorted(self.skipped_documents),
        )


def check_site(root: Union[str, Path], config: Optional[CheckerConfig] = None) -> ScanResult:
    """Synchronous entry point: scan a built site and write its report."""
    return asyncio.run(SiteChecker(config).run(root))
