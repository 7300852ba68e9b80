"""Extended business and individual detectors used after the core rule tier.

Each detector returns the list of rules that fired and whether they are
enough for a verdict: one strong rule, or at least two weak ones.
"""

import re
from dataclasses import dataclass, field
from typing import List

from payee_core.classification.patterns import GENERATIONAL_SUFFIXES, SPECIAL_SYMBOL_PATTERN
from payee_core.matching.normalization import (
    BUSINESS_INDICATOR_WORDS,
    COMMON_PERSONAL_NAMES,
    normalize,
)

_WEB_ADDRESS = re.compile(r"(\bWWW\.|\.(COM|NET|ORG|IO|BIZ|US)\b)", re.IGNORECASE)
_DIGIT_AND_LETTER = re.compile(r"(?=.*\d)(?=.*[A-Za-z])")
_POSSESSIVE = re.compile(r"[A-Za-z]'S\b", re.IGNORECASE)
_FAMILY_BUSINESS = ("BROS", "BROTHERS", "SONS", "DAUGHTERS", "AND SONS")
_BUSINESS_WORD_ENDINGS = ("WORKS", "WARE", "TECH", "MART", "LAND", "CORP", "SOFT", "TRONICS")

_LAST_FIRST = re.compile(r"^[A-Za-z'-]+,\s*[A-Za-z'-]+(\s+[A-Za-z]\.?)?$")
_INITIALS_SURNAME = re.compile(r"^([A-Za-z]\.?\s+){1,2}[A-Za-z'-]{2,}$")
_HYPHENATED_NAME = re.compile(r"^[A-Za-z]+\s+[A-Za-z]+-[A-Za-z]+$")
_TITLE_CASE_NAME = re.compile(r"^[A-Z][a-z'-]+(\s+[A-Z]\.?)?(\s+[A-Z][a-z'-]+){1,2}$")


@dataclass
class ExtendedRuleCheck:
    """Rules matched by an extended detector."""

    strong_rules: List[str] = field(default_factory=list)
    weak_rules: List[str] = field(default_factory=list)

    @property
    def rules(self) -> List[str]:
        return self.strong_rules + self.weak_rules

    @property
    def is_match(self) -> bool:
        return bool(self.strong_rules) or len(self.weak_rules) >= 2


def detect_business_by_extended_rules(payee_name: str) -> ExtendedRuleCheck:
    """Look for structural signs of a business name."""
    check = ExtendedRuleCheck()
    raw = (payee_name or "").strip()
    tokens = normalize(raw).tokens
    if not tokens:
        return check

    if _WEB_ADDRESS.search(raw):
        check.strong_rules.append("Contains web address")

    indicator_words = [token for token in tokens if token in BUSINESS_INDICATOR_WORDS]
    if indicator_words:
        check.strong_rules.append(f"Business indicator word: {indicator_words[0]}")

    normalized = " ".join(tokens)
    for phrase in _FAMILY_BUSINESS:
        if re.search(r"\b" + phrase + r"\b", normalized):
            check.strong_rules.append(f"Family business term: {phrase}")
            break

    for token in tokens:
        ending = next((e for e in _BUSINESS_WORD_ENDINGS if token.endswith(e) and len(token) > len(e)), None)
        if ending:
            check.strong_rules.append(f"Business word ending: {token}")
            break

    if _DIGIT_AND_LETTER.match(raw):
        check.weak_rules.append("Contains numbers")
    if _POSSESSIVE.search(raw):
        check.weak_rules.append("Possessive name")
    if tokens[0] == "THE" and len(tokens) > 1:
        check.weak_rules.append("Begins with 'THE'")
    if SPECIAL_SYMBOL_PATTERN.search(raw):
        check.weak_rules.append("Contains business symbol")
    if len(tokens) > 4:
        check.weak_rules.append("Long multi-word name")

    return check


def detect_individual_by_extended_rules(payee_name: str) -> ExtendedRuleCheck:
    """Look for structural signs of a personal name."""
    check = ExtendedRuleCheck()
    raw = (payee_name or "").strip()
    tokens = normalize(raw).tokens
    if not tokens:
        return check

    if any(token in BUSINESS_INDICATOR_WORDS for token in tokens):
        return check

    suffix = next((token for token in tokens[1:] if token in GENERATIONAL_SUFFIXES), None)
    if suffix:
        check.strong_rules.append(f"Generational suffix: {suffix}")

    if _LAST_FIRST.match(raw):
        check.strong_rules.append("Last, First name format")

    if _INITIALS_SURNAME.match(raw):
        check.strong_rules.append("Initials followed by surname")

    known = [token for token in tokens if token in COMMON_PERSONAL_NAMES]
    if known and len(tokens) <= 4:
        check.strong_rules.append(f"Common personal name: {known[0]}")

    if _HYPHENATED_NAME.match(raw):
        check.weak_rules.append("Hyphenated surname")
    if _TITLE_CASE_NAME.match(raw):
        check.weak_rules.append("Title-case personal name structure")
    if 2 <= len(tokens) <= 3 and all(token.isalpha() for token in tokens):
        check.weak_rules.append("Two or three alphabetic words")

    return check
