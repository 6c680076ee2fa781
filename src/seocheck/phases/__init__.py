"""
Phase catalogue.

The catalogue is fixed and immutable; a run selects the enabled subset once
from its configuration and never changes the phase objects themselves.
"""

from typing import Tuple

from .base import Phase, PhaseContext
from .foundation import FoundationPhase
from .metadata import MetadataPhase
from .accessibility import AccessibilityPhase
from .performance import PerformancePhase
from .crawlability import CrawlabilityPhase
from .ai_detection import AIDetectionPhase

# Execution order on every document
PHASES: Tuple[Phase, ...] = (
    FoundationPhase(),
    MetadataPhase(),
    AccessibilityPhase(),
    PerformancePhase(),
    CrawlabilityPhase(),
    AIDetectionPhase(),
)


def enabled_phases(config) -> Tuple[Phase, ...]:
    """Phases switched on in ``config``, in catalogue order."""
    enabled = set(config.enabled_phase_ids())
    return tuple(phase for phase in PHASES if phase.id in enabled)


__all__ = [
    "Phase",
    "PhaseContext",
    "PHASES",
    "enabled_phases",
    "FoundationPhase",
    "MetadataPhase",
    "AccessibilityPhase",
    "PerformancePhase",
    "CrawlabilityPhase",
    "AIDetectionPhase",
]
