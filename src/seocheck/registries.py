"""
Shared registries for findings collected across documents.

Every document analysis merges its findings into the same two registries.
Writers only get an atomic insert-or-merge operation; the lookup, the
creation of an empty set and the add happen under one lock. Locks are
sharded by key hash so unrelated keys do not contend.
"""

import threading
from typing import Dict, Hashable, List, Set

from seocheck.constants import CATEGORY_DISPLAY_ORDER

DEFAULT_SHARDS = 16


class _ShardedLocks:
    """Fixed pool of locks selected by key hash."""

    def __init__(self, shards: int = DEFAULT_SHARDS):
        self._locks = [threading.Lock() for _ in range(max(1, shards))]

    def for_key(self, key: Hashable) -> threading.Lock:
        return self._locks[hash(key) % len(self._locks)]


class BrokenLinkRegistry:
    """Broken link -> set of documents that reference it."""

    def __init__(self, shards: int = DEFAULT_SHARDS):
        self._links: Dict[str, Set[str]] = {}
        self._locks = _ShardedLocks(shards)
        self._keys_lock = threading.Lock()

    def add(self, link: str, document: str) -> bool:
        """Record that ``document`` references the broken ``link``.

        Returns:
            True if the document was not yet recorded for this link
        """
        with self._locks.for_key(link):
            referrers = self._links.get(link)
            if referrers is None:
                referrers = set()
                with self._keys_lock:
                    self._links[link] = referrers
            if document in referrers:
                return False
            referrers.add(document)
            return True

    def __len__(self) -> int:
        with self._keys_lock:
            return len(self._links)

    def __contains__(self, link: str) -> bool:
        with self._keys_lock:
            return link in self._links

    def referrers(self, link: str) -> List[str]:
        """Sorted documents referencing ``link`` (empty when not broken)."""
        with self._locks.for_key(link):
            return sorted(self._links.get(link, ()))

    def snapshot(self) -> Dict[str, List[str]]:
        """Sorted, detached copy of the registry for reporting."""
        with self._keys_lock:
            links = list(self._links)
        return {link: self.referrers(link) for link in sorted(links)}


class IssueRegistry:
    """Category -> issue key -> set of affected documents."""

    def __init__(self, shards: int = DEFAULT_SHARDS):
        self._categories: Dict[str, Dict[str, Set[str]]] = {}
        self._locks = _ShardedLocks(shards)
        self._keys_lock = threading.Lock()

    def add(self, category, issue: str, document: str) -> bool:
        """Record ``issue`` of ``category`` on ``document``.

        Args:
            category: IssueCategory member or its string value
            issue: Human-readable issue key
            document: Logical path of the affected document

        Returns:
            True if the document was not yet recorded for this issue
        """
        category = getattr(category, "value", category)
        key = (category, issue)
        with self._locks.for_key(key):
            documents = self._categories.get(category, {}).get(issue)
            if documents is None:
                with self._keys_lock:
                    issues = self._categories.setdefault(category, {})
                    documents = issues.setdefault(issue, set())
            if document in documents:
                return False
            documents.add(document)
            return True

    def __len__(self) -> int:
        """Number of distinct issues across all categories."""
        with self._keys_lock:
            return sum(len(issues) for issues in self._categories.values())

    def categories(self) -> List[str]:
        """Categories with at least one issue, in display priority order."""
        with self._keys_lock:
            present = list(self._categories)
        return ordered_categories(present)

    def documents(self, category, issue: str) -> List[str]:
        category = getattr(category, "value", category)
        with self._locks.for_key((category, issue)):
            return sorted(self._categories.get(category, {}).get(issue, ()))

    def snapshot(self) -> Dict[str, Dict[str, List[str]]]:
        """Sorted, detached copy of the registry for reporting."""
        result = {}
        for category in self.categories():
            with self._keys_lock:
                keys = sorted(self._categories[category])
            result[category] = {issue: self.documents(category, issue) for issue in keys}
        return result


def ordered_categories(categories) -> List[str]:
    """Known categories in display order, then any others alphabetically."""
    known = [c for c in CATEGORY_DISPLAY_ORDER if c in categories]
    extra = sorted(c for c in categories if c not in CATEGORY_DISPLAY_ORDER)
    return known + extra
