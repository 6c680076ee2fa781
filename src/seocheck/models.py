"""Data models for site checking."""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from bs4 import BeautifulSoup


class IssueCategory(str, Enum):
    """Fixed taxonomy of SEO issue categories."""
    PERFORMANCE = "performance"
    ACCESSIBILITY = "accessibility"
    METADATA = "metadata"
    CRAWLABILITY = "crawlability"
    SEMANTIC = "semantic"
    PRIVACY = "privacy"
    TECHNICAL = "technical"
    CONTENT = "content"
    LINKING = "linking"


class LinkStatus(str, Enum):
    """Outcome of verifying a single link."""
    OK = "ok"
    BROKEN = "broken"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class VerificationResult:
    """Verification outcome for a normalized link."""

    link: str  # normalized identity used for caching and the broken link registry
    status: LinkStatus
    reason: str = ""
    status_code: Optional[int] = None

    @property
    def is_broken(self) -> bool:
        return self.status is LinkStatus.BROKEN


@dataclass
class Document:
    """One parsed HTML page of the built site."""

    path: str  # normalized logical path, e.g. "/blog/post/"
    source_path: str  # "/"-rooted path of the file, e.g. "/blog/post/index.html"
    file_path: Path
    html: str
    soup: BeautifulSoup


@dataclass
class CategoryBreakdown:
    """Issues of one category for the console summary."""

    category: str
    issues: List[Tuple[str, int]] = field(default_factory=list)  # (issue key, document count)

    @property
    def total(self) -> int:
        return len(self.issues)


@dataclass
class ScanSummary:
    """Console summary of one scan."""

    elapsed_seconds: float
    pages_scanned: int
    broken_link_count: int
    issue_count: int
    categories: List[CategoryBreakdown] = field(default_factory=list)
    report_path: Optional[Path] = None
    report_format: str = "log"


@dataclass
class ScanResult:
    """Final registries and summary of a completed scan."""

    broken_links: Dict[str, List[str]]  # link -> sorted documents
    issues: Dict[str, Dict[str, List[str]]]  # category -> issue key -> sorted documents
    summary: ScanSummary
    skipped_documents: List[str] = field(default_factory=list)

    @property
    def has_broken_links(self) -> bool:
        return bool(self.broken_links)
