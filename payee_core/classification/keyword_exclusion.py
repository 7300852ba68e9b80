"""Keyword exclusion: decide whether a payee name is a known business or institution.

Each keyword is tried with exact, token, whole-word and bounded fuzzy
matching, in that order. Fuzzy matching only ever compares whole name tokens
with the keyword; it never looks at substrings, so "VALLEY" cannot match "VA".
"""

import logging
import re
from functools import lru_cache
from typing import List, Optional, Sequence, Tuple

from payee_core.classification.constants import (
    EXACT_MATCH_CONFIDENCE,
    FUZZY_EXCLUSION_THRESHOLD,
    FUZZY_MIN_LENGTH,
    NO_MATCH_REASONING,
)
from payee_core.classification.models import KeywordExclusionResult, clamp_confidence
from payee_core.matching.normalization import NormalizedName, normalize
from payee_core.matching.similarity import combined_similarity

logger = logging.getLogger(__name__)


class MatchStrategy:
    """Names of the keyword matching strategies."""
    EXACT = "exact"
    TOKEN = "token"
    WHOLE_WORD = "whole-word"
    FUZZY = "fuzzy"


def _token_match(keyword: NormalizedName, name: NormalizedName) -> bool:
    if not keyword.tokens or len(keyword.tokens) > len(name.tokens):
        return False
    name_tokens = set(name.tokens)
    return all(token in name_tokens for token in keyword.tokens)


def _whole_word_match(keyword: NormalizedName, name: NormalizedName) -> bool:
    pattern = r"\b" + re.escape(keyword.normalized) + r"\b"
    return re.search(pattern, name.normalized) is not None


def _fuzzy_token_match(
    keyword: NormalizedName,
    name: NormalizedName,
    threshold: float = FUZZY_EXCLUSION_THRESHOLD,
) -> Optional[float]:
    """
    Best similarity between the keyword and any window of whole name tokens.

    Windows have the same token count as the keyword. Returns None when no
    window reaches ``threshold``.
    """
    if len(keyword.normalized) < FUZZY_MIN_LENGTH:
        return None

    width = len(keyword.tokens)
    best: Optional[float] = None
    for start in range(len(name.tokens) - width + 1):
        window = " ".join(name.tokens[start:start + width])
        if len(window) < FUZZY_MIN_LENGTH:
            continue
        score = combined_similarity(window, keyword.normalized).combined
        if score >= threshold and (best is None or score > best):
            best = score
    return best


@lru_cache(maxsize=4096)
def _normalize_keyword(keyword: str) -> NormalizedName:
    return normalize(keyword)


def match_keyword(name: NormalizedName, keyword: str) -> Optional[Tuple[str, float]]:
    """
    Match one keyword against a normalized name.

    Returns:
        (strategy, confidence) for the first strategy that matches, or None
    """
    normalized_keyword = _normalize_keyword(keyword)
    if not normalized_keyword.normalized or not name.normalized:
        return None

    if name.normalized == normalized_keyword.normalized:
        return MatchStrategy.EXACT, EXACT_MATCH_CONFIDENCE
    if _token_match(normalized_keyword, name):
        return MatchStrategy.TOKEN, EXACT_MATCH_CONFIDENCE
    if _whole_word_match(normalized_keyword, name):
        return MatchStrategy.WHOLE_WORD, EXACT_MATCH_CONFIDENCE

    score = _fuzzy_token_match(normalized_keyword, name)
    if score is not None:
        return MatchStrategy.FUZZY, score
    return None


def check_exclusion(payee_name: str, keywords: Sequence[str]) -> KeywordExclusionResult:
    """
    Check a payee name against the exclusion keywords.

    Every keyword is checked, so several can match; matched keywords keep
    the order of ``keywords``. Confidence is the highest confidence among
    the matches.

    Args:
        payee_name: Raw payee name
        keywords: Exclusion keywords (raw or already cleaned)

    Returns:
        KeywordExclusionResult
    """
    name = normalize(payee_name)
    if not name.normalized:
        return KeywordExclusionResult.empty("Empty payee name")
    if not keywords:
        return KeywordExclusionResult.empty("No exclusion keywords configured")

    matched: List[str] = []
    descriptions: List[str] = []
    best_confidence = 0.0

    for keyword in keywords:
        if not isinstance(keyword, str):
            continue
        match = match_keyword(name, keyword)
        if match is None:
            continue
        strategy, confidence = match
        matched.append(keyword)
        if strategy == MatchStrategy.FUZZY:
            descriptions.append(f"'{keyword}' ({strategy}, {confidence:.1f}% similar)")
        else:
            descriptions.append(f"'{keyword}' ({strategy})")
        best_confidence = max(best_confidence, confidence)

    if not matched:
        return KeywordExclusionResult.empty(NO_MATCH_REASONING)

    logger.debug(f"Payee '{payee_name}' excluded by keywords: {matched}")
    return KeywordExclusionResult(
        is_excluded=True,
        matched_keywords=tuple(matched),
        confidence=clamp_confidence(best_confidence),
        reasoning=f"Excluded due to keyword match: {', '.join(descriptions)}",
    )
