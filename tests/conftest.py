# tests/conftest.py
"""Shared fixtures: small built sites written to a temporary directory."""

from pathlib import Path

import pytest

from seocheck.config import CheckerConfig
from seocheck.link_checker import LinkVerifier
from seocheck.phases.base import PhaseContext
from seocheck.registries import BrokenLinkRegistry, IssueRegistry
from seocheck.source import discover_documents, load_document, normalize_html_file_path

NAV_LINKS = (
    ("/", "Home"),
    ("/about/", "About"),
    ("/blog/", "Blog"),
    ("/contact/", "Contact"),
)

DEFAULT_PAGES = {
    "index.html": "/",
    "about/index.html": "/about/",
    "blog/index.html": "/blog/",
    "contact/index.html": "/contact/",
}


def clean_page(path="/", body="", head="", links=NAV_LINKS, title="Example Site page for tests"):
    """A page that passes every check with the default configuration."""
    nav = "\n".join(f'<a href="{href}">{text}</a>' for href, text in links)
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width, initial-scale=1">
<title>{title}</title>
<meta name="description" content="A description of the example page that is long enough for search engines.">
<meta property="og:title" content="Example Site">
<meta property="og:description" content="A description of the example page for social cards.">
<link rel="canonical" href="https://example.com{path}">
<link rel="sitemap" href="/sitemap-index.xml">
{head}
</head>
<body>
<nav>
{nav}
</nav>
<main>
<h1>Example heading</h1>
{body}
</main>
</body>
</html>
"""


@pytest.fixture
def make_site(tmp_path):
    """Write files below a fresh ``dist`` directory and return its path.

    The four navigation pages and a sitemap are added unless
    ``defaults=False``; ``files`` maps relative paths to text or bytes.
    """
    def _make(files=None, defaults=True):
        root = tmp_path / "dist"
        root.mkdir(exist_ok=True)

        content = {}
        if defaults:
            content.update({rel: clean_page(path) for rel, path in DEFAULT_PAGES.items()})
            content["sitemap-index.xml"] = "<sitemapindex></sitemapindex>"
        content.update(files or {})

        for relative, data in content.items():
            target = root / relative
            target.parent.mkdir(parents=True, exist_ok=True)
            if isinstance(data, bytes):
                target.write_bytes(data)
            else:
                target.write_text(data, encoding="utf-8")
        return root

    return _make


@pytest.fixture
def make_context():
    """Build a PhaseContext over a written site."""
    def _make(root, config=None, transport=None):
        config = config or CheckerConfig()
        root = Path(root)
        known = frozenset(normalize_html_file_path(path, root) for path in discover_documents(root))
        broken_links = BrokenLinkRegistry()
        verifier = LinkVerifier(config, root, known, broken_links, transport=transport)
        return PhaseContext(
            config=config,
            root=root,
            known_documents=known,
            broken_links=broken_links,
            issues=IssueRegistry(),
            verifier=verifier,
        )

    return _make


@pytest.fixture
def document():
    """Load one document of a written site."""
    def _load(root, relative):
        return load_document(Path(root) / relative, root)

    return _load
