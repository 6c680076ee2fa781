"""
AI Content Detection phase.

Heuristic 0-100 score of how likely the visible prose of a page was
machine generated. Four signals contribute, weighted in constants.py:

- density of phrases typical of generated text ("delve", "in today's
  fast-paced ...")
- uniformity of sentence lengths (low coefficient of variation)
- density of transition words ("furthermore", "moreover", ...)
- low lexical diversity (moving-window type/token ratio)

This is a hint for editors, not a classifier; short pages are not scored.
"""

import logging
import re
import statistics
from fnmatch import fnmatch
from typing import List, Optional

from seocheck.constants import (
    AI_DETECTION_MIN_WORDS,
    AI_TRANSITION_WORDS,
    AI_TYPICAL_PHRASES,
    AI_WEIGHT_DIVERSITY,
    AI_WEIGHT_PHRASES,
    AI_WEIGHT_TRANSITIONS,
    AI_WEIGHT_UNIFORMITY,
)
from seocheck.models import Document, IssueCategory
from seocheck.phases.base import Phase, PhaseContext, visible_text
from seocheck.source import comparable_path

logger = logging.getLogger(__name__)

WORD_RE = re.compile(r"[a-z][a-z'\-]*")
SENTENCE_SPLIT_RE = re.compile(r"[.!?]+(?:\s+|$)")

# Phrase hits per 100 words that saturate the phrase signal
PHRASE_SATURATION = 1.5
# Transition words per 100 words that saturate the transition signal
TRANSITION_SATURATION = 1.0
DIVERSITY_WINDOW = 100


def _clamp(value: float) -> float:
    return max(0.0, min(1.0, value))


def _phrase_signal(text: str, word_count: int) -> float:
    hits = sum(len(re.findall(r"\b" + re.escape(phrase) + r"\b", text)) for phrase in AI_TYPICAL_PHRASES)
    return _clamp((hits * 100 / word_count) / PHRASE_SATURATION)


def _uniformity_signal(text: str) -> float:
    lengths = [
        len(WORD_RE.findall(sentence))
        for sentence in SENTENCE_SPLIT_RE.split(text)
    ]
    lengths = [length for length in lengths if length >= 3]
    if len(lengths) < 5:
        return 0.0
    mean = statistics.mean(lengths)
    variation = statistics.pstdev(lengths) / mean if mean else 1.0
    # cv <= 0.2 reads as very uniform, >= 0.6 as natural
    return _clamp((0.6 - variation) / 0.4)


def _transition_signal(words: List[str]) -> float:
    transitions = set(AI_TRANSITION_WORDS)
    hits = sum(1 for word in words if word in transitions)
    return _clamp((hits * 100 / len(words)) / TRANSITION_SATURATION)


def _diversity_signal(words: List[str]) -> float:
    if len(words) <= DIVERSITY_WINDOW:
        ratio = len(set(words)) / len(words)
    else:
        ratios = [
            len(set(words[start:start + DIVERSITY_WINDOW])) / DIVERSITY_WINDOW
            for start in range(0, len(words) - DIVERSITY_WINDOW + 1, DIVERSITY_WINDOW // 2)
        ]
        ratio = statistics.mean(ratios)
    return _clamp((0.72 - ratio) / 0.2)


def score_ai_content(text: str) -> Optional[int]:
    """Score prose from 0 (human-like) to 100 (very likely generated).

    Returns:
        The score, or None when the text is too short to judge
    """
    text = " ".join(text.lower().replace("’", "'").split())
    words = WORD_RE.findall(text)
    if len(words) < AI_DETECTION_MIN_WORDS:
        return None

    score = (
        AI_WEIGHT_PHRASES * _phrase_signal(text, len(words))
        + AI_WEIGHT_UNIFORMITY * _uniformity_signal(text)
        + AI_WEIGHT_TRANSITIONS * _transition_signal(words)
        + AI_WEIGHT_DIVERSITY * _diversity_signal(words)
    )
    return int(round(score))


def is_excluded(path: str, patterns) -> bool:
    """Whether a document path matches one of the exclusion patterns.

    A pattern matches the exact path, any path below it, or as an
    ``fnmatch`` glob (``/blog/*``). The root pattern ``/`` matches only
    the home page.
    """
    normalized = comparable_path(path)
    for pattern in patterns:
        pattern = pattern.strip()
        if not pattern:
            continue
        if fnmatch(path, pattern) or fnmatch(normalized, pattern):
            return True
        prefix = comparable_path(pattern)
        if normalized == prefix:
            return True
        if prefix != "/" and normalized.startswith(prefix.rstrip("/") + "/"):
            return True
    return False


class AIDetectionPhase(Phase):
    """Flag pages whose prose scores above the configured threshold."""

    id = "ai_detection"
    name = "AI Content Detection"

    async def analyze(self, document: Document, context: PhaseContext) -> None:
        config = context.config
        if is_excluded(document.path, config.ai_detection_exclude_paths):
            return

        score = score_ai_content(visible_text(document.soup))
        if score is None:
            return

        logger.debug(f"AI content score for {document.path}: {score}")
        if score >= config.ai_detection_threshold:
            context.report(
                IssueCategory.CONTENT,
                f"Possible AI-generated content (score at or above {config.ai_detection_threshold})",
                document,
            )
