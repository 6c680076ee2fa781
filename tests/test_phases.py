# tests/test_phases.py
"""Tests for the individual analysis phases."""

import asyncio

import pytest

from seocheck.config import CheckerConfig
from seocheck.link_checker import LinkVerifier
from seocheck.phases import (
    PHASES,
    AccessibilityPhase,
    AIDetectionPhase,
    CrawlabilityPhase,
    FoundationPhase,
    MetadataPhase,
    PerformancePhase,
    enabled_phases,
)
from seocheck.phases.ai_detection import is_excluded, score_ai_content
from seocheck.phases.metadata import canonical_matches

from conftest import NAV_LINKS, clean_page

AI_TEXT = (
    "Furthermore, it is important to note that we delve into the rich tapestry of modern solutions. "
    "Moreover, in today's fast-paced world we must navigate the complexities of every digital landscape. "
) * 4

HUMAN_TEXT = (
    "We bought the house in March. "
    "The roof leaked for two weeks before anyone came to look at it, and by then the plaster in the "
    "back bedroom had turned the colour of weak tea. "
    "My daughter called it the map room. "
    "She drew coastlines around the stains with a pencil, named the islands after her cousins, and "
    "charged admission to the neighbours. "
    "Nobody paid. "
    "When the roofer finally arrived he stood in the garden, squinted up at the chimney, and said the "
    "flashing was older than he was. "
    "I believed him. "
    "He fixed it in an afternoon, drank three cups of coffee, and left a ladder behind that we still "
    "use for picking apples every September. "
    "The stains stayed until winter."
)


async def run_phase(phase, context, doc):
    await phase.analyze(doc, context)
    return context.issues.snapshot()


class TestCatalogue:
    """Test suite for the phase catalogue."""

    def test_catalogue_order_and_ids(self):
        """Test that phases run in a fixed order with unique ids."""
        assert [phase.id for phase in PHASES] == [
            "foundation", "metadata", "accessibility", "performance", "crawlability", "ai_detection"
        ]

    def test_enabled_phases_respects_toggles(self):
        """Test that disabled phases are left out and order is kept."""
        config = CheckerConfig(phases={"accessibility": False, "ai_detection": False})

        assert [phase.id for phase in enabled_phases(config)] == [
            "foundation", "metadata", "performance", "crawlability"
        ]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("rel", ["index.html", "about/index.html"])
    async def test_clean_page_has_no_issues(self, make_site, make_context, document, rel):
        """Test that a well-formed page passes every phase."""
        root = make_site()
        context = make_context(root)
        doc = document(root, rel)

        for phase in PHASES:
            await phase.analyze(doc, context)

        assert context.issues.snapshot() == {}
        assert context.broken_links.snapshot() == {}


class TestFoundationPhase:
    """Test suite for FoundationPhase."""

    @pytest.mark.asyncio
    async def test_missing_doctype_and_charset(self, make_site, make_context, document):
        """Test structural checks on a bare page."""
        root = make_site({"bare.html": "<html><body><p id='x'></p><p id='x'></p><center>hi</center></body></html>"})
        context = make_context(root)

        issues = await run_phase(FoundationPhase(), context, document(root, "bare.html"))

        assert set(issues["technical"]) == {
            "Missing <!DOCTYPE html> declaration",
            "Missing character encoding declaration",
            "Deprecated <center> element",
            "Duplicate id attributes",
        }

    @pytest.mark.asyncio
    async def test_tracking_and_youtube(self, make_site, make_context, document):
        """Test that trackers and non-private embeds are privacy issues."""
        body = (
            '<script async src="https://www.googletagmanager.com/gtag/js?id=G-1"></script>'
            '<iframe src="https://www.youtube.com/embed/abc" title="Video"></iframe>'
        )
        root = make_site({"page.html": clean_page("/page", body=body)})
        context = make_context(root)

        issues = await run_phase(FoundationPhase(), context, document(root, "page.html"))

        assert set(issues["privacy"]) == {
            "Tracking script detected: Google Analytics",
            "YouTube embed without privacy-enhanced mode (youtube-nocookie.com)",
        }

    @pytest.mark.asyncio
    async def test_email_allowlist(self, make_site, make_context, document):
        """Test that only addresses outside the allowlist are reported."""
        root = make_site({
            "a.html": clean_page("/a", body="<p>Write to Allowlisted@Example.com</p>"),
            "b.html": clean_page("/b", body='<p><a href="mailto:leaked@example.com">Email us</a></p>'),
        })
        context = make_context(root, CheckerConfig(email_allowlist=["allowlisted@example.com"]))

        for rel in ("a.html", "b.html"):
            await FoundationPhase().analyze(document(root, rel), context)

        assert context.issues.snapshot() == {
            "privacy": {"Exposed email address: leaked@example.com": ["/b"]}
        }

    @pytest.mark.asyncio
    async def test_broken_links_go_to_registry(self, make_site, make_context, document):
        """Test that the phase verifies every anchor of the page."""
        links = NAV_LINKS + (("/missing", "Missing"), ("#top", "Top"), ("mailto:x@example.com", "Mail"))
        root = make_site({"page.html": clean_page("/page", links=links)})
        context = make_context(root)

        await FoundationPhase().analyze(document(root, "page.html"), context)

        assert context.broken_links.snapshot() == {"/missing": ["/page"]}

    @pytest.mark.asyncio
    async def test_malformed_href_is_skipped(self, make_site, make_context, document):
        links = NAV_LINKS + (("http://[bad", "Bad"), ("/missing", "Missing"))
        root = make_site({"page.html": clean_page("/page", links=links)})
        context = make_context(root)

        await FoundationPhase().analyze(document(root, "page.html"), context)

        assert context.broken_links.snapshot() == {"/missing": ["/page"]}

    @pytest.mark.asyncio
    async def test_failed_link_check_waits_for_the_rest(self, make_site, make_context, document, monkeypatch):
        """Test that one failing check neither aborts nor orphans its siblings."""
        check = LinkVerifier.check

        async def flaky_check(verifier, href, doc):
            if href == "/explode":
                raise RuntimeError("verifier failed")
            await asyncio.sleep(0.05)
            return await check(verifier, href, doc)

        monkeypatch.setattr(LinkVerifier, "check", flaky_check)
        links = NAV_LINKS + (("/explode", "Explode"), ("/missing", "Missing"))
        root = make_site({"page.html": clean_page("/page", links=links)})
        context = make_context(root)

        await FoundationPhase().analyze(document(root, "page.html"), context)

        assert context.broken_links.snapshot() == {"/missing": ["/page"]}


class TestMetadataPhase:
    """Test suite for MetadataPhase."""

    @pytest.mark.parametrize(
        "canonical",
        ["/about", "/about/", "/about.html", "/about/index.html", "https://example.com/about/",
         "https://other.example/about?utm=1"],
    )
    def test_canonical_matches_equivalent_forms(self, canonical):
        """Test that every form of the page's own URL is accepted."""
        assert canonical_matches(canonical, "/about/")

    def test_canonical_mismatch(self):
        """Test that a different page is detected."""
        assert not canonical_matches("https://example.com/contact/", "/about/")
        assert not canonical_matches("/", "/about/")
        assert not canonical_matches("http://[bad", "/about/")

    @pytest.mark.asyncio
    async def test_canonical_to_other_page(self, make_site, make_context, document):
        """Test the issue key for a canonical link to another page."""
        html = clean_page("/about/").replace("https://example.com/about/", "https://example.com/contact/")
        root = make_site({"about/index.html": html})
        context = make_context(root)

        issues = await run_phase(MetadataPhase(), context, document(root, "about/index.html"))

        assert issues == {"metadata": {"Canonical link points to a different page": ["/about/"]}}

    @pytest.mark.asyncio
    async def test_malformed_canonical(self, make_site, make_context, document):
        html = clean_page("/about/").replace("https://example.com/about/", "http://[bad")
        root = make_site({"about/index.html": html})
        context = make_context(root)

        issues = await run_phase(MetadataPhase(), context, document(root, "about/index.html"))

        assert issues == {"metadata": {"Canonical link points to a different page": ["/about/"]}}

    @pytest.mark.asyncio
    async def test_canonical_check_can_be_disabled(self, make_site, make_context, document):
        """Test that a missing canonical link is ignored when disabled."""
        html = clean_page("/page").replace('<link rel="canonical" href="https://example.com/page">', "")
        root = make_site({"page.html": html})

        enabled = await run_phase(MetadataPhase(), make_context(root), document(root, "page.html"))
        disabled = await run_phase(
            MetadataPhase(), make_context(root, CheckerConfig(check_canonical=False)), document(root, "page.html")
        )

        assert enabled == {"metadata": {"Missing canonical link": ["/page"]}}
        assert disabled == {}

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "title, expected",
        [
            ("", "Missing page title"),
            ("Short", "Page title shorter than 10 characters"),
            ("A" * 61, "Page title longer than 60 characters"),
        ],
    )
    async def test_title_length(self, make_site, make_context, document, title, expected):
        """Test title presence and length bounds."""
        root = make_site({"page.html": clean_page("/page", title=title)})

        issues = await run_phase(MetadataPhase(), make_context(root), document(root, "page.html"))

        assert issues == {"metadata": {expected: ["/page"]}}

    @pytest.mark.asyncio
    async def test_heading_structure(self, make_site, make_context, document):
        """Test multiple h1 headings and skipped levels."""
        root = make_site({"page.html": clean_page("/page", body="<h1>Second</h1><h4>Deep</h4>")})

        issues = await run_phase(MetadataPhase(), make_context(root), document(root, "page.html"))

        assert set(issues["semantic"]) == {"Multiple <h1> headings", "Skipped heading level"}


class TestAccessibilityPhase:
    """Test suite for AccessibilityPhase."""

    @pytest.mark.asyncio
    async def test_image_alt_text(self, make_site, make_context, document):
        """Test missing and empty alt attributes."""
        body = '<img src="/a.png"><img src="/b.png" alt="">'
        root = make_site({"page.html": clean_page("/page", body=body)})

        strict = await run_phase(AccessibilityPhase(), make_context(root), document(root, "page.html"))
        lenient = await run_phase(
            AccessibilityPhase(),
            make_context(root, CheckerConfig(ignore_empty_alt=True)),
            document(root, "page.html"),
        )

        assert set(strict["accessibility"]) == {"Image missing alt attribute", "Image with empty alt attribute"}
        assert set(lenient["accessibility"]) == {"Image missing alt attribute"}

    @pytest.mark.asyncio
    async def test_names_labels_and_focus(self, make_site, make_context, document):
        """Test links, buttons, form fields and tabindex."""
        body = (
            '<a href="/about/"><span></span></a>'
            '<a href="/blog/">Click here</a>'
            '<button></button>'
            '<input type="text" name="q">'
            '<div tabindex="3">focus</div>'
        )
        root = make_site({"page.html": clean_page("/page", body=body)})

        issues = await run_phase(AccessibilityPhase(), make_context(root), document(root, "page.html"))

        assert set(issues["accessibility"]) == {
            "Link without accessible text",
            'Non-descriptive link text (e.g. "click here")',
            "Button without accessible name",
            "Form field without label",
            "Positive tabindex disrupts focus order",
        }

    @pytest.mark.asyncio
    async def test_labelled_fields_pass(self, make_site, make_context, document):
        """Test the ways a form field can be labelled."""
        body = (
            '<label for="name">Name</label><input id="name">'
            '<label>Email <input type="email"></label>'
            '<input aria-label="Search">'
            '<input type="submit" value="Send">'
        )
        root = make_site({"page.html": clean_page("/page", body=body)})

        issues = await run_phase(AccessibilityPhase(), make_context(root), document(root, "page.html"))

        assert issues == {}

    @pytest.mark.asyncio
    async def test_missing_lang(self, make_site, make_context, document):
        root = make_site({"page.html": clean_page("/page").replace('<html lang="en">', "<html>")})

        issues = await run_phase(AccessibilityPhase(), make_context(root), document(root, "page.html"))

        assert issues == {"accessibility": {"Missing lang attribute on <html>": ["/page"]}}


class TestPerformancePhase:
    """Test suite for PerformancePhase."""

    @pytest.mark.asyncio
    async def test_inline_script_threshold(self, make_site, make_context, document):
        """Test that only the page over the inline script threshold is flagged."""
        large = "<script>" + "var a = 1;\n" * 300 + "</script>"  # ~3KB
        small = "<script>" + "var a = 1;\n" * 90 + "</script>"  # ~1KB
        root = make_site({
            "a.html": clean_page("/a", body=large),
            "b.html": clean_page("/b", body=small),
        })
        context = make_context(root, CheckerConfig(inline_script_threshold=2))

        for rel in ("a.html", "b.html"):
            await PerformancePhase().analyze(document(root, rel), context)

        performance = context.issues.snapshot()["performance"]
        assert performance == {"Inline script larger than 2KB": ["/a"]}

    @pytest.mark.asyncio
    async def test_non_javascript_scripts_are_ignored(self, make_site, make_context, document):
        """Test that JSON-LD and other data blocks do not count as inline code."""
        data = '<script type="application/ld+json">' + '{"a": 1}' * 500 + "</script>"
        root = make_site({"page.html": clean_page("/page", body=data)})

        issues = await run_phase(PerformancePhase(), make_context(root), document(root, "page.html"))

        assert issues == {}

    @pytest.mark.asyncio
    async def test_render_blocking_and_images(self, make_site, make_context, document):
        """Test blocking head resources and image hygiene."""
        head = '<script src="/app.js"></script>' + "".join(
            f'<link rel="stylesheet" href="/s{i}.css">' for i in range(4)
        )
        body = "".join(f'<img src="/i{i}.png" alt="Image {i}" width="10" height="10">' for i in range(4))
        body += '<img src="/late.png" alt="Late" loading="lazy">'
        root = make_site({"page.html": clean_page("/page", head=head, body=body)})

        issues = await run_phase(PerformancePhase(), make_context(root), document(root, "page.html"))

        assert set(issues["performance"]) == {
            "Render-blocking script in <head>",
            "More than 3 render-blocking stylesheets",
            "Image missing width/height attributes",
            "Below-the-fold image without lazy loading",
        }

    @pytest.mark.asyncio
    async def test_large_images(self, make_site, make_context, document):
        """Test that oversized local images are reported when sizes are checked."""
        body = '<img src="/big.jpg" alt="Big" width="1" height="1"><img src="/small.jpg" alt="Small" width="1" height="1">'
        root = make_site({
            "page.html": clean_page("/page", body=body),
            "big.jpg": b"x" * 300 * 1024,
            "small.jpg": b"x" * 1024,
        })
        context = make_context(root, CheckerConfig(check_resource_sizes=True, image_size_threshold=200))

        issues = await run_phase(PerformancePhase(), context, document(root, "page.html"))

        assert issues == {"performance": {"Large image (300KB, over 200KB): /big.jpg": ["/page"]}}

    @pytest.mark.asyncio
    async def test_failed_measurement_keeps_other_images(self, make_site, make_context, document, monkeypatch):
        measure = LinkVerifier.measure

        async def flaky_measure(verifier, src, doc):
            if src == "/broken.jpg":
                raise RuntimeError("measurement failed")
            await asyncio.sleep(0.05)
            return await measure(verifier, src, doc)

        monkeypatch.setattr(LinkVerifier, "measure", flaky_measure)
        body = '<img src="/broken.jpg" alt="Broken" width="1" height="1"><img src="/big.jpg" alt="Big" width="1" height="1">'
        root = make_site({"page.html": clean_page("/page", body=body), "big.jpg": b"x" * 300 * 1024})
        context = make_context(root, CheckerConfig(check_resource_sizes=True, image_size_threshold=200))

        issues = await run_phase(PerformancePhase(), context, document(root, "page.html"))

        assert issues == {"performance": {"Large image (300KB, over 200KB): /big.jpg": ["/page"]}}


class TestCrawlabilityPhase:
    """Test suite for CrawlabilityPhase."""

    @pytest.mark.asyncio
    async def test_robots_directives(self, make_site, make_context, document):
        head = '<meta name="robots" content="noindex, nofollow">'
        root = make_site({"page.html": clean_page("/page", head=head)})

        issues = await run_phase(CrawlabilityPhase(), make_context(root), document(root, "page.html"))

        assert set(issues["crawlability"]) == {
            "Page blocked from indexing (noindex)",
            "Page links not followed (nofollow)",
        }

    @pytest.mark.asyncio
    async def test_internal_link_counts(self, make_site, make_context, document):
        """Test that self links and external links do not count as internal links."""
        links = (("/page", "Self"), ("/about/", "About"), ("https://example.org/", "Elsewhere"))
        root = make_site({"page.html": clean_page("/page", links=links)})

        issues = await run_phase(CrawlabilityPhase(), make_context(root), document(root, "page.html"))

        assert issues == {"linking": {"Fewer than 3 internal links": ["/page"]}}

    @pytest.mark.asyncio
    async def test_nofollow_and_javascript_links(self, make_site, make_context, document):
        body = '<a href="/blog/" rel="nofollow">Blog</a><a href="javascript:void(0)">Menu</a>'
        root = make_site({"page.html": clean_page("/page", body=body)})

        issues = await run_phase(CrawlabilityPhase(), make_context(root), document(root, "page.html"))

        assert set(issues["linking"]) == {
            'Internal link with rel="nofollow"',
            "Link with empty or javascript: href",
        }

    @pytest.mark.asyncio
    async def test_malformed_href_keeps_other_findings(self, make_site, make_context, document):
        links = (("/", "Home"), ("http://[bad", "Bad"), ("javascript:void(0)", "Menu"))
        root = make_site({"page.html": clean_page("/page", links=links)})

        issues = await run_phase(CrawlabilityPhase(), make_context(root), document(root, "page.html"))

        assert set(issues["linking"]) == {
            "Fewer than 3 internal links",
            "Link with empty or javascript: href",
        }

    @pytest.mark.asyncio
    async def test_home_page_sitemap(self, make_site, make_context, document):
        """Test sitemap hints, which only apply to the home page."""
        home = clean_page("/").replace('<link rel="sitemap" href="/sitemap-index.xml">', "")
        root = make_site({"index.html": home}, defaults=False)

        issues = await run_phase(CrawlabilityPhase(), make_context(root), document(root, "index.html"))

        assert set(issues["crawlability"]) == {
            "Home page does not reference a sitemap",
            "No sitemap file found in site output",
        }


class TestAIDetection:
    """Test suite for AI content scoring and the detection phase."""

    def test_short_text_is_not_scored(self):
        assert score_ai_content("Just a few words here.") is None

    def test_generated_text_scores_high(self):
        """Test that formulaic prose scores well above natural prose."""
        generated = score_ai_content(AI_TEXT)
        natural = score_ai_content(HUMAN_TEXT)

        assert generated >= 80
        assert natural is not None and natural < 30

    @pytest.mark.parametrize(
        "path, patterns, expected",
        [
            ("/legal/", ["/legal"], True),
            ("/legal/terms/", ["/legal/"], True),
            ("/blog/post/", ["/blog/*"], True),
            ("/blog/", ["/legal"], False),
            ("/legality/", ["/legal"], False),
            ("/", [], False),
            ("/blog/", ["/"], False),
            ("/", ["/"], True),
            ("/index.html", ["/"], True),
        ],
    )
    def test_is_excluded(self, path, patterns, expected):
        assert is_excluded(path, patterns) is expected

    @pytest.mark.asyncio
    async def test_phase_reports_and_excludes(self, make_site, make_context, document):
        """Test the issue key and path exclusion of the phase."""
        root = make_site({
            "post.html": clean_page("/post", body=f"<p>{AI_TEXT}</p>"),
            "legal.html": clean_page("/legal", body=f"<p>{AI_TEXT}</p>"),
            "story.html": clean_page("/story", body=f"<p>{HUMAN_TEXT}</p>"),
        })
        context = make_context(
            root, CheckerConfig(ai_detection_threshold=50, ai_detection_exclude_paths=["/legal"])
        )

        for rel in ("post.html", "legal.html", "story.html"):
            await AIDetectionPhase().analyze(document(root, rel), context)

        assert context.issues.snapshot() == {
            "content": {"Possible AI-generated content (score at or above 50)": ["/post"]}
        }
