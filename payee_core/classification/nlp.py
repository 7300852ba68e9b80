"""NLP-based classification: fuzzy matching against prior results and token scoring."""

import logging
import re
from typing import Optional

from payee_core.classification.constants import (
    NAME_SIMILARITY_THRESHOLD,
    NLP_MAX_CONFIDENCE,
    Classification,
    ProcessingTier,
)
from payee_core.classification.memory import ClassificationMemory
from payee_core.classification.models import ClassificationResult
from payee_core.classification.patterns import SPECIAL_SYMBOL_PATTERN, is_all_caps
from payee_core.matching.normalization import analyze_tokens

logger = logging.getLogger(__name__)

_DIGIT = re.compile(r"\d")


def apply_nlp_classification(
    payee_name: str,
    memory: Optional[ClassificationMemory] = None,
) -> Optional[ClassificationResult]:
    """
    Classify a name from prior results or from its tokens.

    A remembered name at least ``NAME_SIMILARITY_THRESHOLD`` similar wins;
    otherwise business and individual indicator tokens are scored. The
    confidence never exceeds ``NLP_MAX_CONFIDENCE``.

    Args:
        payee_name: Raw payee name
        memory: Prior classifications to match against

    Returns:
        ClassificationResult with tier "NLP-Based", or None for blank input
    """
    raw = (payee_name or "").strip()
    if not raw:
        return None

    if memory is not None:
        fuzzy_result = _match_memory(raw, memory)
        if fuzzy_result is not None:
            return fuzzy_result

    return _score_tokens(raw)


def _match_memory(raw: str, memory: ClassificationMemory) -> Optional[ClassificationResult]:
    match = memory.find_similar(raw, threshold=NAME_SIMILARITY_THRESHOLD)
    if match is None:
        return None

    similarity = match.scores.combined
    confidence = min(NLP_MAX_CONFIDENCE, match.result.confidence, round(similarity))
    logger.debug(f"'{raw}' matched prior payee '{match.payee_name}' ({similarity:.1f}%)")
    return ClassificationResult(
        classification=match.result.classification,
        confidence=confidence,
        reasoning=(
            f"Similar to previously classified '{match.payee_name}' "
            f"({similarity:.1f}% similar, {match.result.classification})"
        ),
        processing_tier=ProcessingTier.NLP_BASED,
        processing_method="Fuzzy match against prior classifications",
        matching_rules=(f"Similar payee: {match.payee_name}",),
        similarity_scores=match.scores,
        sic_code=match.result.sic_code,
        sic_description=match.result.sic_description,
    )


def _score_tokens(raw: str) -> ClassificationResult:
    analysis = analyze_tokens(raw)
    words = raw.split()
    has_numbers = bool(_DIGIT.search(raw))
    has_symbols = bool(SPECIAL_SYMBOL_PATTERN.search(raw))
    all_caps = is_all_caps(raw) and len(raw) > 5

    business_score = len(analysis.business_indicators) * 20
    business_score += 15 if len(words) > 3 else 0
    business_score += 10 if has_numbers else 0
    business_score += 15 if has_symbols else 0
    business_score += 10 if all_caps else 0
    business_score += 10 if len(raw) > 25 else 0

    individual_score = len(analysis.individual_indicators) * 25
    individual_score += 20 if len(words) == 2 else 0
    individual_score += 15 if len(words) == 3 else 0
    individual_score += 10 if not has_numbers else 0
    individual_score += 5 if not all_caps else 0

    if business_score > individual_score:
        classification = Classification.BUSINESS
    else:
        classification = Classification.INDIVIDUAL

    rules = [f"Business indicator: {token}" for token in analysis.business_indicators]
    rules += [f"Individual indicator: {token}" for token in analysis.individual_indicators]

    return ClassificationResult(
        classification=classification,
        confidence=min(NLP_MAX_CONFIDENCE, max(business_score, individual_score)),
        reasoning=(
            f"Token analysis (business score {business_score}, "
            f"individual score {individual_score})"
        ),
        processing_tier=ProcessingTier.NLP_BASED,
        processing_method="NLP token analysis",
        matching_rules=tuple(rules),
    )
