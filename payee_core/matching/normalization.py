"""Payee name normalization and tokenization."""

import re
from dataclasses import dataclass, field
from typing import Any, List, Tuple

# Symbol expansions applied before punctuation is stripped
SYMBOL_REPLACEMENTS: Tuple[Tuple[str, str], ...] = (
    ("&", " AND "),
    ("+", " PLUS "),
    ("@", " AT "),
    ("#", " NUMBER "),
    ("*", " STAR "),
)

_NON_WORD_PATTERN = re.compile(r"[^\w\s]")
_WHITESPACE_PATTERN = re.compile(r"\s+")

BUSINESS_INDICATOR_WORDS = frozenset({
    "LLC", "INC", "CORP", "CORPORATION", "COMPANY", "CO", "LTD", "LIMITED",
    "LP", "LLP", "PC", "PLLC", "GROUP", "HOLDINGS", "ENTERPRISES", "PARTNERS",
    "ASSOCIATES", "SERVICES", "SOLUTIONS", "SYSTEMS", "TECHNOLOGIES",
    "INDUSTRIES", "INTERNATIONAL", "GLOBAL", "NATIONAL", "AMERICAN",
    "MANAGEMENT", "CONSULTING", "CONSTRUCTION", "SUPPLY", "SUPPLIES",
    "DISTRIBUTION", "MANUFACTURING", "PROPERTIES", "REALTY", "INVESTMENTS",
    "CAPITAL", "FINANCIAL", "BANK", "INSURANCE", "HOSPITAL", "CLINIC",
    "CENTER", "CENTRE", "UNIVERSITY", "COLLEGE", "SCHOOL", "DISTRICT",
    "COUNTY", "CITY", "STATE", "DEPARTMENT", "AUTHORITY", "FOUNDATION",
    "TRUST", "FUND", "ASSOCIATION", "SOCIETY", "INSTITUTE", "STORE", "SHOP",
    "MARKET", "RESTAURANT", "HOTEL", "MOTEL", "INN", "CAFE", "BAR", "GRILL",
})

INDIVIDUAL_INDICATOR_WORDS = frozenset({
    "MR", "MRS", "MS", "MISS", "DR", "JR", "SR", "II", "III", "IV", "ESQ",
    "PHD", "MD", "DDS", "DVM", "RN", "CPA",
})

# Common given names and surnames
COMMON_PERSONAL_NAMES = frozenset({
    "JOHN", "JANE", "MICHAEL", "SARAH", "DAVID", "MARY", "ROBERT", "JENNIFER",
    "WILLIAM", "ELIZABETH", "JAMES", "PATRICIA", "RICHARD", "LINDA", "JOSEPH",
    "BARBARA", "THOMAS", "SUSAN", "CHARLES", "JESSICA", "CHRISTOPHER", "NANCY",
    "DANIEL", "KAREN", "MATTHEW", "BETTY", "ANTHONY", "HELEN", "DONALD", "SANDRA",
    "MARK", "DONNA", "PAUL", "CAROL", "STEVEN", "RUTH", "ANDREW", "SHARON",
    "JOSHUA", "MICHELLE", "KENNETH", "LAURA", "KEVIN", "BRIAN", "KIMBERLY",
    "GEORGE", "DEBORAH", "EDWARD", "DOROTHY", "RONALD", "LISA", "TIMOTHY",
    "JASON", "JEFFREY", "RYAN", "JACOB", "GARY", "NICHOLAS", "ERIC", "JONATHAN",
    "STEPHEN", "LARRY", "JUSTIN", "SCOTT", "BRANDON", "BENJAMIN", "SAMUEL",
    "GREGORY", "FRANK", "RAYMOND", "ALEXANDER", "PATRICK", "JACK", "DENNIS",
    "JERRY", "TYLER", "AARON", "JOSE", "HENRY", "ADAM", "DOUGLAS", "NATHAN",
    "PETER", "ZACHARY", "KYLE", "NOAH", "ALAN", "ETHAN", "JEREMY", "RUSSELL",
    "MASON", "CODY", "MIKE",
    "SMITH", "JOHNSON", "WILLIAMS", "BROWN", "JONES", "GARCIA", "MILLER", "DAVIS",
    "RODRIGUEZ", "MARTINEZ", "HERNANDEZ", "LOPEZ", "GONZALEZ", "WILSON",
    "ANDERSON", "TAYLOR", "MOORE", "JACKSON", "MARTIN", "LEE", "PEREZ",
    "THOMPSON", "WHITE", "HARRIS", "SANCHEZ", "CLARK", "RAMIREZ", "LEWIS",
    "ROBINSON", "WALKER", "YOUNG", "ALLEN", "KING", "WRIGHT", "TORRES", "NGUYEN",
    "HILL", "FLORES", "GREEN", "ADAMS", "NELSON", "BAKER", "HALL", "RIVERA",
    "CAMPBELL", "MITCHELL", "CARTER", "ROBERTS",
})

# Legal suffixes dropped when comparing names for duplicate detection
_DUPLICATE_SUFFIXES = (
    "LLC", "INC", "INCORPORATED", "CORP", "CORPORATION", "CO", "COMPANY",
    "LTD", "LIMITED", "LP", "LLP", "PC", "PLLC", "THE",
)


@dataclass(frozen=True)
class NormalizedName:
    """Canonical form of a payee name."""

    normalized: str
    tokens: Tuple[str, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict:
        return {"normalized": self.normalized, "tokens": list(self.tokens)}


def normalize(raw: Any) -> NormalizedName:
    """
    Normalize a raw payee name into an uppercase, whitespace-collapsed form.

    The function is total: ``None`` and blank strings produce an empty result
    and any other value is coerced with ``str()``. Applying it to its own
    output returns the same string.

    Args:
        raw: Raw payee name

    Returns:
        NormalizedName with the normalized string and its tokens
    """
    if raw is None:
        return NormalizedName(normalized="", tokens=())

    text = str(raw).upper().strip()
    for symbol, replacement in SYMBOL_REPLACEMENTS:
        text = text.replace(symbol, replacement)
    text = _NON_WORD_PATTERN.sub(" ", text)
    text = _WHITESPACE_PATTERN.sub(" ", text).strip()

    tokens = tuple(token for token in text.split(" ") if token)
    return NormalizedName(normalized=text, tokens=tokens)


def tokenize(raw: Any) -> List[str]:
    """Return the normalized tokens of a raw name."""
    return list(normalize(raw).tokens)


def classify_token(token: str) -> str:
    """
    Tag a single token as a business or individual indicator.

    Returns:
        "business", "individual" or "neutral"
    """
    upper = token.upper().strip(".")
    if upper in BUSINESS_INDICATOR_WORDS:
        return "business"
    if upper in INDIVIDUAL_INDICATOR_WORDS or upper in COMMON_PERSONAL_NAMES:
        return "individual"
    return "neutral"


@dataclass(frozen=True)
class TokenAnalysis:
    """Normalized name with its business and individual indicator tokens."""

    normalized: str
    tokens: Tuple[str, ...]
    business_indicators: Tuple[str, ...]
    individual_indicators: Tuple[str, ...]


def analyze_tokens(raw: Any) -> TokenAnalysis:
    """Normalize a name and split its tokens into indicator groups."""
    name = normalize(raw)
    tags = [(token, classify_token(token)) for token in name.tokens]
    return TokenAnalysis(
        normalized=name.normalized,
        tokens=name.tokens,
        business_indicators=tuple(token for token, tag in tags if tag == "business"),
        individual_indicators=tuple(token for token, tag in tags if tag == "individual"),
    )


def normalize_for_duplicate_detection(name: Any) -> str:
    """
    Reduce a name to a key suitable for spotting the same entity.

    Trailing legal suffixes and a leading "THE" are removed so that
    "The Acme Company, Inc." and "ACME" share a key.
    """
    tokens = list(normalize(name).tokens)
    if tokens and tokens[0] == "THE":
        tokens = tokens[1:]
    while len(tokens) > 1 and tokens[-1] in _DUPLICATE_SUFFIXES:
        tokens.pop()
    return " ".join(tokens)

