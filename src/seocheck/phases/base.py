"""Base class and shared context for analysis phases."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import FrozenSet, List

from bs4 import BeautifulSoup, Tag
from bs4.element import CData, Comment, Declaration, Doctype, ProcessingInstruction

from seocheck.config import CheckerConfig
from seocheck.link_checker import LinkVerifier
from seocheck.models import Document, IssueCategory
from seocheck.registries import BrokenLinkRegistry, IssueRegistry


@dataclass(frozen=True)
class PhaseContext:
    """Everything a phase may touch while analyzing a document.

    Configuration is read-only; registries are written only through their
    insert-or-merge operations.
    """

    config: CheckerConfig
    root: Path
    known_documents: FrozenSet[str]
    broken_links: BrokenLinkRegistry
    issues: IssueRegistry
    verifier: LinkVerifier

    def report(self, category: IssueCategory, issue: str, document: Document) -> None:
        """Record an issue found on ``document``."""
        self.issues.add(category, issue, document.path)


class Phase(ABC):
    """A named, independently toggleable unit of analysis."""

    #: Identifier used in the ``phases`` configuration map
    id: str = ""
    #: Human-readable name used in logs
    name: str = ""

    @abstractmethod
    async def analyze(self, document: Document, context: PhaseContext) -> None:
        """Analyze one document and record findings in the context registries."""

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.id}>"


def visible_text(soup: BeautifulSoup) -> str:
    """Text of the document body without scripts, styles and templates."""
    body = soup.body or soup
    parts: List[str] = []
    for text in body.find_all(string=True):
        parent = text.parent
        if parent is not None and parent.name in ("script", "style", "noscript", "template"):
            continue
        if isinstance(text, (Comment, Doctype, CData, Declaration, ProcessingInstruction)):
            continue
        stripped = text.strip()
        if stripped:
            parts.append(stripped)
    return " ".join(parts)


def element_text(tag: Tag) -> str:
    """Collapsed text content of an element."""
    return " ".join(tag.get_text(" ", strip=True).split())
