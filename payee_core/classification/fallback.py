"""Terminal fallback heuristics; these always produce a classification."""

from payee_core.classification.constants import (
    Classification,
    ConfidenceThreshold,
    ProcessingTier,
)
from payee_core.classification.models import ClassificationResult, KeywordExclusionResult
from payee_core.classification.patterns import (
    SIMPLE_PERSON_NAME_PATTERN,
    SPECIAL_SYMBOL_PATTERN,
    is_all_caps,
)

BUSINESS_INDICATORS_REQUIRED = 2


def count_business_indicators(payee_name: str) -> int:
    """Count the five structural business indicators of a name."""
    raw = (payee_name or "").strip()
    indicators = (
        len(raw) > 15,
        len(raw.split()) > 3,
        bool(SPECIAL_SYMBOL_PATTERN.search(raw)),
        is_all_caps(raw) and len(raw) > 8,
        not SIMPLE_PERSON_NAME_PATTERN.match(raw),
    )
    return sum(1 for indicator in indicators if indicator)


def fallback_classification(
    payee_name: str,
    keyword_exclusion: KeywordExclusionResult,
) -> ClassificationResult:
    """Classify as Business when at least two indicators fire, else Individual."""
    score = count_business_indicators(payee_name)
    if score >= BUSINESS_INDICATORS_REQUIRED:
        classification = Classification.BUSINESS
    else:
        classification = Classification.INDIVIDUAL

    return ClassificationResult(
        classification=classification,
        confidence=ConfidenceThreshold.REVIEW_REQUIRED,
        reasoning=(
            f"Fallback heuristic classification as {classification.lower()} "
            f"({score}/5 business indicators)"
        ),
        processing_tier=ProcessingTier.RULE_BASED,
        processing_method="Fallback heuristic analysis",
        keyword_exclusion=keyword_exclusion,
    )


def invalid_input_result() -> ClassificationResult:
    return ClassificationResult(
        classification=Classification.INDIVIDUAL,
        confidence=ConfidenceThreshold.FORCE_WEB_SEARCH,
        reasoning="Invalid input: empty payee name, defaulting to Individual",
        processing_tier=ProcessingTier.RULE_BASED,
        processing_method="Input validation fallback",
        keyword_exclusion=KeywordExclusionResult.empty("Empty payee name"),
    )


def emergency_result(error: Exception) -> ClassificationResult:
    return ClassificationResult(
        classification=Classification.INDIVIDUAL,
        confidence=ConfidenceThreshold.FORCE_WEB_SEARCH,
        reasoning=f"Emergency fallback due to classification error: {error}",
        processing_tier=ProcessingTier.RULE_BASED,
        processing_method="Emergency fallback",
        keyword_exclusion=KeywordExclusionResult.empty(
            "Emergency fallback - no keyword exclusion applied"
        ),
    )
