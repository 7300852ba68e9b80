"""Exclusion keyword lists: built-in defaults, validation, merging and the refreshable keyword service."""

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from payee_core.classification.constants import (
    DEFAULT_KEYWORD_CACHE_TTL_SECONDS,
    MAX_KEYWORD_LENGTH,
)
from payee_core.utils.cache import TTLValue

logger = logging.getLogger(__name__)


# Built-in exclusion keywords grouped by category. Names matching any of these
# are institutions or service providers rather than individual payees.
KEYWORD_CATEGORIES: Dict[str, Tuple[str, ...]] = {
    "financial": (
        "BANK", "BANCORP", "CREDIT UNION", "FEDERAL CREDIT UNION", "SAVINGS AND LOAN",
        "TRUST COMPANY", "MORTGAGE", "LENDING", "BANK OF AMERICA", "WELLS FARGO",
        "JPMORGAN CHASE", "CITIBANK", "US BANK", "PNC BANK", "CAPITAL ONE",
        "AMERICAN EXPRESS", "DISCOVER FINANCIAL", "SYNCHRONY", "FIDELITY INVESTMENTS",
        "CHARLES SCHWAB", "VANGUARD", "MERRILL LYNCH", "EDWARD JONES",
    ),
    "government": (
        "IRS", "INTERNAL REVENUE SERVICE", "DEPARTMENT OF", "DEPT OF", "VA",
        "VETERANS AFFAIRS", "SOCIAL SECURITY ADMINISTRATION", "USPS", "POSTMASTER",
        "TREASURER", "TAX COLLECTOR", "COUNTY OF", "CITY OF", "STATE OF",
        "TOWN OF", "VILLAGE OF", "SCHOOL DISTRICT", "MUNICIPAL", "SECRETARY OF STATE",
        "DEPARTMENT OF MOTOR VEHICLES", "DMV", "FRANCHISE TAX BOARD", "COMPTROLLER",
    ),
    "insurance": (
        "INSURANCE", "ASSURANCE", "MUTUAL", "STATE FARM", "ALLSTATE", "GEICO",
        "PROGRESSIVE", "NATIONWIDE", "LIBERTY MUTUAL", "TRAVELERS", "AFLAC",
        "METLIFE", "PRUDENTIAL", "BLUE CROSS", "BLUE SHIELD", "AETNA", "CIGNA",
        "HUMANA", "UNITEDHEALTHCARE", "KAISER PERMANENTE",
    ),
    "utility": (
        "UTILITIES", "UTILITY", "ELECTRIC", "POWER COMPANY", "GAS COMPANY",
        "WATER DEPARTMENT", "WATER DISTRICT", "SEWER", "WASTE MANAGEMENT",
        "REPUBLIC SERVICES", "DUKE ENERGY", "PACIFIC GAS AND ELECTRIC", "CON EDISON",
    ),
    "technology": (
        "VERIZON", "COMCAST", "XFINITY", "SPECTRUM", "CENTURYLINK", "FRONTIER COMMUNICATIONS",
        "T MOBILE", "SPRINT", "AT&T", "MICROSOFT", "GOOGLE", "AMAZON WEB SERVICES",
        "ADOBE", "ORACLE", "SALESFORCE", "INTUIT", "DROPBOX", "ZOOM VIDEO",
    ),
    "healthcare": (
        "HOSPITAL", "MEDICAL CENTER", "HEALTH SYSTEM", "HEALTHCARE", "CLINIC",
        "PHARMACY", "LABCORP", "QUEST DIAGNOSTICS", "CVS", "WALGREENS",
    ),
    "payroll": (
        "ADP", "PAYCHEX", "GUSTO", "PAYCOM", "PAYLOCITY", "CERIDIAN", "WORKDAY",
        "TRINET", "INSPERITY", "PAYROLL",
    ),
    "payments": (
        "PAYPAL", "STRIPE", "SQUARE INC", "VENMO", "WESTERN UNION", "MONEYGRAM",
        "VISA", "MASTERCARD",
    ),
    "automotive": (
        "AUTO PARTS", "AUTOZONE", "NAPA AUTO", "PEP BOYS", "JIFFY LUBE", "FIRESTONE",
        "GOODYEAR", "DISCOUNT TIRE",
    ),
}


@dataclass
class KeywordValidationResult:
    """Validation outcome for a keyword list."""

    is_valid: bool
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"is_valid": self.is_valid, "errors": self.errors, "warnings": self.warnings}


def clean_keyword(keyword: str) -> str:
    """Trim, uppercase and collapse inner whitespace of a keyword."""
    return " ".join(str(keyword).upper().split())


def merge_keyword_lists(*keyword_lists: Iterable[str]) -> Tuple[str, ...]:
    """
    Merge keyword lists into one ordered, deduplicated tuple.

    Keywords are cleaned with ``clean_keyword``; blank entries are dropped and
    the first occurrence of each keyword keeps its position.
    """
    seen = set()
    merged = []
    for keywords in keyword_lists:
        for keyword in keywords or ():
            if not isinstance(keyword, str):
                continue
            cleaned = clean_keyword(keyword)
            if cleaned and cleaned not in seen:
                seen.add(cleaned)
                merged.append(cleaned)
    return tuple(merged)


BUILTIN_EXCLUSION_KEYWORDS: Tuple[str, ...] = merge_keyword_lists(*KEYWORD_CATEGORIES.values())


def validate_keywords(keywords: Sequence) -> KeywordValidationResult:
    """
    Validate an exclusion keyword list.

    Errors: not a list, empty list, blank or non-string entries, entries
    longer than the maximum keyword length. Warnings: duplicates (after
    cleaning) and one-character keywords.
    """
    errors: List[str] = []
    warnings: List[str] = []

    if isinstance(keywords, (str, bytes)) or not isinstance(keywords, (list, tuple)):
        errors.append("Keywords must be a list")
        return KeywordValidationResult(is_valid=False, errors=errors, warnings=warnings)

    if len(keywords) == 0:
        errors.append("No exclusion keywords provided")

    invalid = [k for k in keywords if not isinstance(k, str) or not k.strip()]
    if invalid:
        errors.append(f"{len(invalid)} empty or invalid keywords found")

    too_long = [k for k in keywords if isinstance(k, str) and len(k.strip()) > MAX_KEYWORD_LENGTH]
    if too_long:
        errors.append(f"{len(too_long)} keywords exceed {MAX_KEYWORD_LENGTH} characters")

    seen = set()
    duplicates = []
    for keyword in keywords:
        if not isinstance(keyword, str) or not keyword.strip():
            continue
        cleaned = clean_keyword(keyword)
        if cleaned in seen and cleaned not in duplicates:
            duplicates.append(cleaned)
        seen.add(cleaned)
    if duplicates:
        warnings.append(f"Duplicate keywords found: {', '.join(duplicates)}")

    short = [k.strip() for k in keywords if isinstance(k, str) and len(k.strip()) == 1]
    if short:
        warnings.append(f"Single-character keywords may over-match: {', '.join(short)}")

    return KeywordValidationResult(is_valid=not errors, errors=errors, warnings=warnings)


def keyword_statistics(keywords: Iterable[str]) -> Dict[str, object]:
    """Count keywords per built-in category; unknown keywords count as custom."""
    category_lookup = {
        keyword: category
        for category, category_keywords in KEYWORD_CATEGORIES.items()
        for keyword in merge_keyword_lists(category_keywords)
    }
    by_category: Dict[str, int] = {category: 0 for category in KEYWORD_CATEGORIES}
    by_category["custom"] = 0

    cleaned = merge_keyword_lists(keywords)
    for keyword in cleaned:
        by_category[category_lookup.get(keyword, "custom")] += 1
    return {"total": len(cleaned), "by_category": by_category}


def search_keywords(keywords: Iterable[str], term: str) -> List[str]:
    """Return keywords containing ``term`` (case-insensitive)."""
    needle = clean_keyword(term)
    if not needle:
        return []
    return [keyword for keyword in merge_keyword_lists(keywords) if needle in keyword]


class KeywordService:
    """Serves the effective exclusion keyword list.

    The list is the built-in keywords merged with custom keywords from a
    store. It is cached for ``ttl_seconds`` and handed out as an immutable
    tuple, so a batch iterating a snapshot is unaffected by a later refresh.
    """

    def __init__(
        self,
        custom_loader: Optional[Callable[[], Sequence[str]]] = None,
        ttl_seconds: float = DEFAULT_KEYWORD_CACHE_TTL_SECONDS,
        builtin_keywords: Sequence[str] = BUILTIN_EXCLUSION_KEYWORDS,
    ):
        """
        Args:
            custom_loader: Callable returning active custom keywords (e.g.
                ``KeywordDBManager.load_custom_keywords``). None means built-ins only.
            ttl_seconds: How long a merged list is reused before reloading
            builtin_keywords: Built-in keyword list to merge with
        """
        self.builtin_keywords = tuple(builtin_keywords)
        self._custom_loader = custom_loader
        self._snapshot = TTLValue(
            loader=self._load,
            ttl_seconds=ttl_seconds,
            on_error=self._log_load_error,
        )

    def _load(self) -> Tuple[str, ...]:
        custom = list(self._custom_loader()) if self._custom_loader else []
        merged = merge_keyword_lists(self.builtin_keywords, custom)
        logger.info(
            f"Loaded {len(merged)} exclusion keywords "
            f"({len(self.builtin_keywords)} built-in, {len(custom)} custom)"
        )
        return merged

    @staticmethod
    def _log_load_error(error: Exception) -> None:
        logger.warning(f"Failed to refresh custom keywords, keeping previous list: {error}")

    def get_keywords(self) -> Tuple[str, ...]:
        """
        Return the current keyword snapshot.

        If the very first load of custom keywords fails, the built-in list is
        returned on its own.
        """
        try:
            return self._snapshot.get()
        except Exception as e:
            logger.error(f"Failed to load custom keywords, using built-in list: {e}", exc_info=True)
            return merge_keyword_lists(self.builtin_keywords)

    def invalidate(self) -> None:
        """Force the next ``get_keywords`` call to reload custom keywords."""
        self._snapshot.invalidate()
