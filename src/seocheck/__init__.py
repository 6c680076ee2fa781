"""Broken link and SEO checker for built static sites."""

__version__ = "0.1.0"

from seocheck.config import CheckerConfig, settings
from seocheck.exceptions import ConfigError, ReportWriteError, SeoCheckError
from seocheck.formatters import OUTPUT_FORMATS, format_report, resolve_format
from seocheck.link_checker import LinkVerifier
from seocheck.models import (
    Document,
    IssueCategory,
    LinkStatus,
    ScanResult,
    ScanSummary,
    VerificationResult,
)
from seocheck.phases import PHASES, Phase, PhaseContext, enabled_phases
from seocheck.registries import BrokenLinkRegistry, IssueRegistry
from seocheck.runner import PhaseRunner, SiteChecker, check_site

__all__ = [
    # Core
    "SiteChecker",
    "PhaseRunner",
    "check_site",
    "LinkVerifier",
    "BrokenLinkRegistry",
    "IssueRegistry",
    # Phases
    "PHASES",
    "Phase",
    "PhaseContext",
    "enabled_phases",
    # Reports
    "OUTPUT_FORMATS",
    "format_report",
    "resolve_format",
    # Models
    "Document",
    "IssueCategory",
    "LinkStatus",
    "ScanResult",
    "ScanSummary",
    "VerificationResult",
    # Configuration
    "CheckerConfig",
    "settings",
    # Errors
    "SeoCheckError",
    "ConfigError",
    "ReportWriteError",
]
