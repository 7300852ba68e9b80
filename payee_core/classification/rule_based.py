"""Rule-based payee classification from name patterns, suffixes and word lists."""

import logging
import re
from typing import List, Optional

import probablepeople

from payee_core.classification.constants import Classification, ProcessingTier
from payee_core.classification.models import ClassificationResult
from payee_core.classification.patterns import (
    BRAND_PATTERNS,
    BUSINESS_KEYWORDS,
    ENHANCED_BUSINESS_TERMS,
    GOVERNMENT_PATTERNS,
    INDUSTRY_IDENTIFIERS,
    LEGAL_SUFFIXES,
    OBVIOUS_BUSINESS_NAMES,
    PERSONAL_NAME_PATTERNS,
    PROFESSIONAL_TITLES,
    contains_phrase,
    is_all_caps,
)

logger = logging.getLogger(__name__)

BASE_CONFIDENCE = 80

# Names the structure tagger is trusted on: 2-4 words of letters, no digits
STRUCTURE_ANALYSIS_NAME = re.compile(r"^[A-Za-z][A-Za-z.,'&\- ]*$")


def apply_rules(payee_name: str) -> Optional[ClassificationResult]:
    """
    Classify a payee name with deterministic rules.

    Every check runs and adds its evidence to ``matching_rules``. When only
    business or only individual indicators fired, that classification is
    returned; when both or neither fired the result is None and the caller
    moves on to the next tier.

    Args:
        payee_name: Raw payee name

    Returns:
        ClassificationResult with tier "Rule-Based", or None
    """
    raw = (payee_name or "").strip()
    if not raw:
        return None

    name = raw.upper()
    words = name.split()
    matching_rules: List[str] = []
    is_business = False
    is_individual = False
    confidence = BASE_CONFIDENCE

    for literal in OBVIOUS_BUSINESS_NAMES:
        if contains_phrase(name, literal):
            matching_rules.append(f"Obvious business entity: {literal}")
            is_business = True
            confidence = 95
            break

    for pattern in BRAND_PATTERNS:
        if pattern.search(name):
            matching_rules.append(f"Brand/company pattern detected: {pattern.pattern}")
            is_business = True
            confidence = 95
            break

    if is_all_caps(raw) and len(raw) > 5 and " " not in raw:
        matching_rules.append("Single word all-caps business name")
        is_business = True
        confidence = max(confidence, 85)

    if is_all_caps(raw) and len(words) > 1 and len(raw) > 8:
        matching_rules.append("Multi-word all-caps business name")
        is_business = True
        confidence = max(confidence, 90)

    name_type = _name_structure(raw, words)
    if name_type == "Corporation":
        matching_rules.append("Identified as corporation by name structure analysis")
        is_business = True
        confidence = max(confidence, 85)
    elif name_type == "Person" and not is_business:
        matching_rules.append("Identified as person by name structure analysis")
        is_individual = True

    for suffix in LEGAL_SUFFIXES:
        if contains_phrase(name, suffix):
            matching_rules.append(f"Legal suffix: {suffix}")
            is_business = True
            confidence = 95
            break

    for keyword in BUSINESS_KEYWORDS:
        if keyword in name:
            matching_rules.append(f"Business keyword: {keyword}")
            is_business = True
            confidence = max(confidence, 85)
            break

    industry_match = _find_industry_identifier(name)
    if industry_match:
        industry, keyword = industry_match
        matching_rules.append(f"Industry identifier ({industry}): {keyword}")
        is_business = True
        confidence = max(confidence, 85)

    for pattern in GOVERNMENT_PATTERNS:
        if contains_phrase(name, pattern):
            matching_rules.append(f"Government entity pattern: {pattern}")
            is_business = True
            confidence = max(confidence, 90)
            break

    for title in PROFESSIONAL_TITLES:
        if contains_phrase(name, title):
            matching_rules.append(f"Professional title: {title}")
            is_individual = True
            break

    if not is_individual:
        for term in ENHANCED_BUSINESS_TERMS:
            if contains_phrase(name, term):
                matching_rules.append(f"Contains enhanced business term: {term}")
                is_business = True
                confidence = max(confidence, 85)
                break

    if not is_business and _looks_like_personal_name(raw, name, words):
        matching_rules.append("Individual name pattern detected")
        is_individual = True
        confidence = 80

    if is_business and not is_individual:
        classification = Classification.BUSINESS
    elif is_individual and not is_business:
        classification = Classification.INDIVIDUAL
    else:
        if is_business and is_individual:
            logger.debug(f"Conflicting rule indicators for '{raw}': {matching_rules}")
        return None

    return ClassificationResult(
        classification=classification,
        confidence=confidence,
        reasoning=f"Classified as {classification.lower()} based on {', '.join(matching_rules)}",
        processing_tier=ProcessingTier.RULE_BASED,
        processing_method="Rule-based pattern matching",
        matching_rules=tuple(matching_rules),
    )


def _find_industry_identifier(name: str):
    for industry, keywords in INDUSTRY_IDENTIFIERS.items():
        for keyword in keywords:
            if contains_phrase(name, keyword):
                return industry, keyword
    return None


def _looks_like_personal_name(raw: str, name: str, words: List[str]) -> bool:
    if len(words) > 3:
        return False
    if any(contains_phrase(name, suffix) for suffix in ("LLC", "INC", "CORP")):
        return False
    return any(pattern.match(raw) for pattern in PERSONAL_NAME_PATTERNS)


def _name_structure(raw: str, words: List[str]) -> Optional[str]:
    """Return probablepeople's name type ("Person", "Corporation", "Household") or None."""
    if not 2 <= len(words) <= 4 or not STRUCTURE_ANALYSIS_NAME.match(raw):
        return None
    try:
        _, name_type = probablepeople.tag(raw)
    except probablepeople.RepeatedLabelError as e:
        logger.debug(f"Name structure analysis skipped for '{raw}': {e}")
        return None
    return name_type
