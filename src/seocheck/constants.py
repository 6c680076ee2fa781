# src/seocheck/constants.py
"""Centralized constants for the site checker.

User-configurable values live in config.py (CheckerConfig). This module holds
the fixed taxonomy, display tables and heuristics shared across phases.
"""

# =============================================================================
# Issue taxonomy
# =============================================================================

# Display priority for the console summary and report ordering
CATEGORY_DISPLAY_ORDER = (
    "performance",
    "accessibility",
    "metadata",
    "crawlability",
    "linking",
    "technical",
    "content",
    "privacy",
    "semantic",
)

CATEGORY_EMOJIS = {
    "performance": "⚡",
    "accessibility": "♿",
    "metadata": "📄",
    "crawlability": "🔍",
    "linking": "🔗",
    "technical": "🔧",
    "content": "📝",
    "privacy": "🔒",
    "semantic": "🏗️",
}


# =============================================================================
# Phase catalogue
# =============================================================================

# Execution order of the phases on every document
PHASE_ORDER = (
    "foundation",
    "metadata",
    "accessibility",
    "performance",
    "crawlability",
    "ai_detection",
)


# =============================================================================
# Link verification
# =============================================================================

# Schemes probed over the network
EXTERNAL_SCHEMES = {"http", "https"}

# Status codes that make us retry a HEAD probe as GET
HEAD_REJECTED_STATUS_CODES = {403, 405, 501}

# Global ceiling on simultaneous outbound probes
DEFAULT_MAX_CONCURRENT_PROBES = 10

# Per-probe timeout in seconds
DEFAULT_REQUEST_TIMEOUT_SECONDS = 10.0

# Default concurrent document analyses
DEFAULT_MAX_CONCURRENT_DOCUMENTS = 20


# =============================================================================
# Scan / report
# =============================================================================

DEFAULT_REPORT_FILE = "site-report.log"

# Sites above this size get periodic progress lines
PROGRESS_LOG_MIN_PAGES = 50
PROGRESS_LOG_EVERY = 10

# Report format aliases -> canonical name
FORMAT_ALIASES = {
    "markdown": "markdown",
    "md": "markdown",
    "json": "json",
    "csv": "csv",
    "log": "log",
    "text": "log",
    "txt": "log",
}

# File extension -> canonical format name
FORMAT_EXTENSIONS = {
    ".md": "markdown",
    ".markdown": "markdown",
    ".json": "json",
    ".csv": "csv",
}

DEFAULT_REPORT_FORMAT = "log"


# =============================================================================
# Metadata thresholds
# =============================================================================

TITLE_MIN_LENGTH = 10
TITLE_MAX_LENGTH = 60
META_DESCRIPTION_MIN_LENGTH = 50
META_DESCRIPTION_MAX_LENGTH = 160


# =============================================================================
# Foundation / privacy
# =============================================================================

DEPRECATED_ELEMENTS = ("center", "font", "marquee", "blink", "big", "strike", "tt", "frame", "frameset")

# Tracker name -> substrings found in script src or inline script text
TRACKING_SIGNATURES = {
    "Google Analytics": ("google-analytics.com", "gtag(", "googletagmanager.com/gtag"),
    "Google Tag Manager": ("googletagmanager.com/gtm.js", "GTM-"),
    "Facebook Pixel": ("connect.facebook.net", "fbq("),
    "Hotjar": ("static.hotjar.com", "hotjar"),
    "Microsoft Clarity": ("clarity.ms",),
    "LinkedIn Insight": ("snap.licdn.com",),
    "TikTok Pixel": ("analytics.tiktok.com",),
}

EMAIL_PATTERN = r"[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}"

# File-like suffixes that look like e-mail TLDs but are asset names (logo@2x.png)
EMAIL_FALSE_POSITIVE_SUFFIXES = (".png", ".jpg", ".jpeg", ".gif", ".webp", ".svg", ".avif")


# =============================================================================
# Accessibility
# =============================================================================

GENERIC_LINK_TEXTS = {
    "click here",
    "here",
    "read more",
    "more",
    "learn more",
    "link",
    "this link",
    "click",
}


# =============================================================================
# Performance
# =============================================================================

# Images after this position should be lazy loaded
LAZY_LOAD_THRESHOLD = 3

# More blocking stylesheets than this in <head> is flagged
MAX_BLOCKING_STYLESHEETS = 3

# Script types that execute as JavaScript
JAVASCRIPT_TYPES = {"", "text/javascript", "application/javascript", "module", "text/ecmascript"}


# =============================================================================
# AI content detection
# =============================================================================

# Pages with fewer words are not scored
AI_DETECTION_MIN_WORDS = 100

AI_TYPICAL_PHRASES = (
    "delve",
    "tapestry",
    "in today's fast-paced",
    "in today's digital",
    "it's important to note",
    "it is important to note",
    "it's worth noting",
    "navigate the complexities",
    "ever-evolving",
    "ever-changing landscape",
    "game-changer",
    "unlock the power",
    "unlock the potential",
    "harness the power",
    "embark on",
    "a testament to",
    "seamless",
    "seamlessly",
    "robust",
    "elevate",
    "leverage",
    "realm",
    "vibrant",
    "in conclusion",
    "in summary",
    "plays a crucial role",
    "plays a pivotal role",
    "when it comes to",
    "look no further",
    "dive into",
    "dive deep",
)

AI_TRANSITION_WORDS = (
    "furthermore",
    "moreover",
    "additionally",
    "consequently",
    "nevertheless",
    "ultimately",
    "notably",
    "overall",
    "thus",
    "hence",
)

# Weights of the individual signals (sum to 100)
AI_WEIGHT_PHRASES = 40
AI_WEIGHT_UNIFORMITY = 25
AI_WEIGHT_TRANSITIONS = 20
AI_WEIGHT_DIVERSITY = 15
