"""
Link Verification Service.

Resolves links found in documents to ok / broken / skipped. Internal links
are checked against the known document set and the site root on disk;
external links are probed over HTTP when enabled.

Each distinct normalized link is verified at most once per run: the first
caller starts a verification task and every later caller awaits that same
task. Outbound probes share a global semaphore so many documents
referencing external links cannot flood the network.
"""

import asyncio
import logging
from pathlib import Path
from typing import Dict, Iterable, Optional, Tuple, Union
from urllib.parse import urljoin, urlsplit, urlunsplit

import httpx

from seocheck.config import CheckerConfig
from seocheck.constants import EXTERNAL_SCHEMES, HEAD_REJECTED_STATUS_CODES
from seocheck.models import Document, LinkStatus, VerificationResult
from seocheck.registries import BrokenLinkRegistry
from seocheck.source import comparable_path

logger = logging.getLogger(__name__)

INTERNAL = "internal"
EXTERNAL = "external"
SKIPPED = "skipped"


class LinkVerifier:
    """Verify links with a single-flight cache and bounded network probing."""

    def __init__(
        self,
        config: CheckerConfig,
        root: Union[str, Path],
        known_documents: Iterable[str],
        broken_links: BrokenLinkRegistry,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize verifier.

        Args:
            config: Run configuration
            root: Output directory of the site build
            known_documents: Logical paths of every document in the site
            broken_links: Registry receiving broken links and their referrers
            transport: Optional httpx transport (used by tests)
        """
        self.config = config
        self.root = Path(root)
        self.broken_links = broken_links
        self._known = {comparable_path(path) for path in known_documents}
        self._redirects = self._load_redirects(config.redirects)
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None
        self._semaphore = asyncio.Semaphore(max(1, config.max_concurrent_probes))

        # Single-flight caches: identity -> task
        self._cache: Dict[str, asyncio.Task] = {}
        self._sizes: Dict[str, asyncio.Task] = {}

        # Statistics
        self.probes_attempted = 0

    async def __aenter__(self) -> "LinkVerifier":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the HTTP client if one was opened."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    @staticmethod
    def _load_redirects(redirects: dict) -> Dict[str, str]:
        table = {}
        for source, target in (redirects or {}).items():
            # Build tools also express redirects as {"status": 301, "destination": "/x"}
            if isinstance(target, dict):
                target = target.get("destination")
            if not target:
                continue
            table[comparable_path(source)] = str(target)
        return table

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.config.request_timeout,
                follow_redirects=True,
                headers={"User-Agent": self.config.user_agent},
                transport=self._transport,
            )
        return self._client

    # ------------------------------------------------------------------
    # Normalization
    # ------------------------------------------------------------------

    def classify(self, href: str, document: Document) -> Tuple[str, str, str]:
        """Classify and normalize a link as written in ``document``.

        Returns:
            Tuple of (kind, identity, reason). ``kind`` is internal, external
            or skipped; ``identity`` is the normalized link used for caching
            and reporting; ``reason`` explains a skip.
        """
        href = (href or "").strip()
        if not href:
            return SKIPPED, href, "empty link"
        if href.startswith("#"):
            return SKIPPED, href, "fragment-only link"
        if href.startswith("//"):
            href = "https:" + href

        try:
            parsed = urlsplit(href)
            scheme = parsed.scheme.lower()

            if scheme:
                if scheme not in EXTERNAL_SCHEMES:
                    return SKIPPED, href, f"unsupported scheme '{scheme}'"
                identity = urlunsplit((scheme, parsed.netloc.lower(), parsed.path or "/", parsed.query, ""))
                return EXTERNAL, identity, ""

            if not parsed.path:
                # "?page=2" points back at the referring document
                return INTERNAL, comparable_path(document.path), ""

            resolved = urljoin(document.source_path, parsed.path)
        except ValueError:
            return SKIPPED, href, "malformed URL"
        return INTERNAL, comparable_path(resolved), ""

    # ------------------------------------------------------------------
    # Verification
    # ------------------------------------------------------------------

    async def verify(self, href: str, document: Document) -> VerificationResult:
        """Verify one link found in ``document``.

        Cached outcomes are returned without any I/O.
        """
        kind, identity, reason = self.classify(href, document)

        if kind == SKIPPED:
            return VerificationResult(identity, LinkStatus.SKIPPED, reason)
        if kind == EXTERNAL and not self.config.check_external_links:
            return VerificationResult(identity, LinkStatus.SKIPPED, "external link checking disabled")

        task = self._cache.get(identity)
        if task is None:
            task = asyncio.ensure_future(self._verify_uncached(kind, identity))
            self._cache[identity] = task

        return await asyncio.shield(task)

    async def check(self, href: str, document: Document) -> VerificationResult:
        """Verify a link and record ``document`` as a referrer when broken."""
        result = await self.verify(href, document)

        if result.is_broken:
            is_new = self.broken_links.add(result.link, document.path)
            if is_new:
                message = f"Broken link {result.link} in {document.path} ({result.reason})"
                if self.config.verbose:
                    logger.info(message)
                else:
                    logger.debug(message)

        return result

    async def _verify_uncached(self, kind: str, identity: str) -> VerificationResult:
        if kind == EXTERNAL:
            return await self._probe(identity)
        return await self._verify_internal(identity)

    async def _verify_internal(self, path: str) -> VerificationResult:
        target = self._redirects.get(path)

        if target is not None:
            try:
                parsed = urlsplit(target)
            except ValueError:
                return VerificationResult(path, LinkStatus.BROKEN, f"malformed redirect target {target}")
            if parsed.scheme:
                if parsed.scheme.lower() not in EXTERNAL_SCHEMES or not self.config.check_external_links:
                    return VerificationResult(path, LinkStatus.OK, f"redirects to {target}")
                result = await self._probe(urlunsplit(parsed._replace(fragment="")))
                return VerificationResult(path, result.status, f"redirects to {target}: {result.reason}",
                                          result.status_code)

            destination = comparable_path(target)
            if self._internal_exists(destination):
                return VerificationResult(path, LinkStatus.OK, f"redirects to {destination}")
            return VerificationResult(path, LinkStatus.BROKEN, f"redirect target {destination} not found")

        if self._internal_exists(path):
            return VerificationResult(path, LinkStatus.OK)
        return VerificationResult(path, LinkStatus.BROKEN, "not found in site output")

    def _internal_exists(self, path: str) -> bool:
        if path in self._known:
            return True

        relative = path.lstrip("/")
        if not relative:
            return (self.root / "index.html").is_file()

        candidates = (
            self.root / relative,
            self.root / f"{relative}.html",
            self.root / relative / "index.html",
        )
        return any(candidate.is_file() for candidate in candidates)

    async def _probe(self, url: str) -> VerificationResult:
        async with self._semaphore:
            self.probes_attempted += 1
            try:
                response = await asyncio.wait_for(self._request(url), timeout=self.config.request_timeout)
            except (asyncio.TimeoutError, httpx.TimeoutException):
                return VerificationResult(
                    url, LinkStatus.BROKEN, f"timed out after {self.config.request_timeout:g}s"
                )
            except (httpx.HTTPError, httpx.InvalidURL, ValueError) as e:
                return VerificationResult(url, LinkStatus.BROKEN, f"{type(e).__name__}: {e}")

        if 200 <= response.status_code < 400:
            return VerificationResult(url, LinkStatus.OK, status_code=response.status_code)
        return VerificationResult(
            url, LinkStatus.BROKEN, f"HTTP {response.status_code}", status_code=response.status_code
        )

    async def _request(self, url: str) -> httpx.Response:
        client = self._get_client()
        response = await client.head(url)
        if response.status_code in HEAD_REJECTED_STATUS_CODES:
            response = await client.get(url)
        return response

    # ------------------------------------------------------------------
    # Resource sizes
    # ------------------------------------------------------------------

    async def measure(self, src: str, document: Document) -> Optional[int]:
        """Byte size of a linked resource, measured once per run.

        Internal resources are measured on disk. External resources are
        measured from the Content-Length of a HEAD response, only when
        external checking is enabled.

        Returns:
            Size in bytes, or None when it cannot be determined
        """
        kind, identity, _ = self.classify(src, document)
        if kind == SKIPPED or (kind == EXTERNAL and not self.config.check_external_links):
            return None

        task = self._sizes.get(identity)
        if task is None:
            task = asyncio.ensure_future(self._measure_uncached(kind, identity))
            self._sizes[identity] = task

        return await asyncio.shield(task)

    async def _measure_uncached(self, kind: str, identity: str) -> Optional[int]:
        if kind == INTERNAL:
            path = self.root / identity.lstrip("/")
            try:
                return path.stat().st_size if path.is_file() else None
            except OSError:
                return None

        async with self._semaphore:
            try:
                response = await asyncio.wait_for(
                    self._get_client().head(identity), timeout=self.config.request_timeout
                )
            except (asyncio.TimeoutError, httpx.HTTPError, httpx.InvalidURL, ValueError) as e:
                logger.debug(f"Could not measure {identity}: {e}")
                return None

        length = response.headers.get("content-length")
        if response.status_code >= 400 or not length or not length.isdigit():
            return None
        return int(length)
