# tests/test_registries.py
"""Tests for the shared broken link and issue registries."""

from concurrent.futures import ThreadPoolExecutor

from seocheck.models import IssueCategory
from seocheck.registries import BrokenLinkRegistry, IssueRegistry, ordered_categories


class TestBrokenLinkRegistry:
    """Test suite for BrokenLinkRegistry."""

    def test_add_deduplicates_referrers(self):
        """Test that a document is recorded once per link."""
        registry = BrokenLinkRegistry()

        assert registry.add("/missing", "/a") is True
        assert registry.add("/missing", "/a") is False
        assert registry.add("/missing", "/b") is True

        assert len(registry) == 1
        assert "/missing" in registry
        assert registry.referrers("/missing") == ["/a", "/b"]

    def test_snapshot_is_sorted_and_detached(self):
        """Test that snapshots are sorted and unaffected by later writes."""
        registry = BrokenLinkRegistry()
        registry.add("/z", "/b")
        registry.add("/a", "/c")
        registry.add("/z", "/a")

        snapshot = registry.snapshot()
        registry.add("/z", "/d")

        assert list(snapshot) == ["/a", "/z"]
        assert snapshot["/z"] == ["/a", "/b"]

    def test_concurrent_adds_lose_nothing(self):
        """Test that parallel writers never drop or duplicate referrers."""
        registry = BrokenLinkRegistry(shards=4)

        def work(worker):
            for i in range(200):
                registry.add(f"/missing-{i % 10}", f"/page-{i}")
                registry.add(f"/missing-{i % 10}", f"/worker-{worker}")

        with ThreadPoolExecutor(max_workers=8) as pool:
            list(pool.map(work, range(8)))

        assert len(registry) == 10
        for i in range(10):
            referrers = registry.referrers(f"/missing-{i}")
            assert len(referrers) == len(set(referrers)) == 20 + 8


class TestIssueRegistry:
    """Test suite for IssueRegistry."""

    def test_add_accepts_enum_and_string(self):
        """Test that enum members and their values address the same issue."""
        registry = IssueRegistry()

        assert registry.add(IssueCategory.METADATA, "Missing page title", "/a") is True
        assert registry.add("metadata", "Missing page title", "/a") is False

        assert registry.documents("metadata", "Missing page title") == ["/a"]
        assert len(registry) == 1

    def test_len_counts_distinct_issue_keys(self):
        """Test that the issue count ignores how many documents are affected."""
        registry = IssueRegistry()
        for page in ("/a", "/b", "/c"):
            registry.add(IssueCategory.METADATA, "Missing page title", page)
        registry.add(IssueCategory.PRIVACY, "Exposed email address: a@b.io", "/a")

        assert len(registry) == 2

    def test_categories_follow_display_order(self):
        """Test that categories come out in display priority."""
        registry = IssueRegistry()
        registry.add(IssueCategory.PRIVACY, "x", "/a")
        registry.add(IssueCategory.PERFORMANCE, "y", "/a")
        registry.add(IssueCategory.METADATA, "z", "/a")

        assert registry.categories() == ["performance", "metadata", "privacy"]
        assert list(registry.snapshot()) == ["performance", "metadata", "privacy"]

    def test_concurrent_adds_lose_nothing(self):
        """Test that parallel writers across categories keep every document."""
        registry = IssueRegistry()
        categories = list(IssueCategory)

        def work(worker):
            for i in range(100):
                registry.add(categories[i % len(categories)], f"issue {i % 5}", f"/w{worker}/p{i}")

        with ThreadPoolExecutor(max_workers=8) as pool:
            list(pool.map(work, range(8)))

        snapshot = registry.snapshot()
        total = sum(len(docs) for keys in snapshot.values() for docs in keys.values())
        assert total == 800

    def test_existing_key_does_not_wait_on_key_table(self):
        """Test that adds to a known issue only take that issue's lock."""
        registry = IssueRegistry()
        registry.add(IssueCategory.METADATA, "Missing page title", "/a")

        with ThreadPoolExecutor(max_workers=1) as pool:
            with registry._keys_lock:
                future = pool.submit(registry.add, IssueCategory.METADATA, "Missing page title", "/b")
                assert future.result(timeout=1) is True

        assert registry.snapshot()["metadata"]["Missing page title"] == ["/a", "/b"]


def test_ordered_categories_puts_unknown_last():
    """Test that unknown categories sort alphabetically after known ones."""
    assert ordered_categories(["zeta", "privacy", "alpha", "performance"]) == [
        "performance",
        "privacy",
        "alpha",
        "zeta",
    ]
