"""Word lists and regular expressions used by the rule-based tiers."""

import re
from functools import lru_cache
from typing import Dict, Tuple

OBVIOUS_BUSINESS_NAMES: Tuple[str, ...] = (
    "PEPSI", "COCA-COLA", "FEDROOMS", "DATAART", "INVOTECH",
    "ALTOUR", "CHAMBER", "COMMERCE", "INDUSTRIAL", "CHEVROLET",
    "CADILLAC", "STORAGE", "BABY BOY", "DATABASICS", "NYSBO", "PAPCC",
)

BRAND_PATTERNS: Tuple[re.Pattern, ...] = tuple(re.compile(pattern) for pattern in (
    r"\b(PEPSI|COCA|COLA|COKE)\b",
    r"\b(FORD|CHEVY|CHEVROLET|CADILLAC|BMW|HONDA|TOYOTA|NISSAN)\b",
    r"\b(MICROSOFT|APPLE|GOOGLE|AMAZON|META)\b",
    r"\b(MCDONALDS|WALMART|TARGET|COSTCO|KROGER)\b",
    r"\b(STORAGE|WAREHOUSE|INDUSTRIAL|COMMERCIAL)\b",
    r"\b(CHAMBER|COMMERCE|ASSOCIATION|FEDERATION)\b",
    r"\b(DATAART|INVOTECH|FEDROOMS|DATABASICS)\b",
))

LEGAL_SUFFIXES: Tuple[str, ...] = (
    "LLC", "INC", "CORP", "LTD", "LP", "LLP", "PC", "PLLC", "CO", "COMPANY",
    "CORPORATION", "INCORPORATED", "LIMITED", "TRUST", "GROUP", "ASSOCIATES",
    "PARTNERS", "FOUNDATION", "FUND", "ASSOCIATION", "SOCIETY", "INSTITUTE",
)

BUSINESS_KEYWORDS: Tuple[str, ...] = (
    "SERVICES", "CONSULTING", "SOLUTIONS", "MANAGEMENT", "ENTERPRISES",
    "INTERNATIONAL", "SYSTEMS", "TECHNOLOGIES", "PROPERTIES", "INVESTMENTS",
    "GLOBAL", "INDUSTRIES", "COMMUNICATIONS", "RESOURCES", "DEVELOPMENT",
)

INDUSTRY_IDENTIFIERS: Dict[str, Tuple[str, ...]] = {
    "healthcare": (
        "HOSPITAL", "CLINIC", "MEDICAL CENTER", "HEALTH", "PHARMACY", "MEDICAL",
        "HEALTHCARE", "DENTAL", "PHYSICIANS", "LABORATORIES", "DIAGNOSTIC",
        "WELLNESS", "THERAPY", "REHABILITATION", "NURSING", "HOSPICE",
    ),
    "retail": (
        "STORE", "SHOP", "MARKET", "RETAIL", "OUTLET", "MART", "BOUTIQUE",
        "EMPORIUM", "SUPERMARKET", "MALL", "PLAZA", "GALLERY", "WHOLESALE",
        "DISCOUNT", "WAREHOUSE", "BAZAAR", "SHOPPES",
    ),
    "hospitality": (
        "HOTEL", "RESTAURANT", "CAFE", "CATERING", "RESORT", "DINER", "BAKERY",
        "BISTRO", "PIZZERIA", "GRILL", "TAVERN", "PUB", "BAR", "LODGE", "INN",
        "MOTEL", "SUITES", "SPA", "HOSTEL", "ACCOMMODATION", "LOUNGE", "EATERY",
    ),
    "finance": (
        "BANK", "FINANCIAL", "INSURANCE", "CAPITAL", "WEALTH", "ADVISORS",
        "INVESTMENT", "FINANCE", "MORTGAGE", "ASSET", "CREDIT", "SAVINGS",
        "LOAN", "SECURITIES", "BROKERAGE", "ADVISORY", "EXCHANGE", "BANKING",
        "ACCOUNTING", "TAX", "AUDIT", "HOLDINGS", "EQUITY", "VENTURE", "MUTUAL",
    ),
    "education": (
        "SCHOOL", "UNIVERSITY", "COLLEGE", "ACADEMY", "EDUCATION", "CAMPUS",
        "ELEMENTARY", "HIGH SCHOOL", "KINDERGARTEN", "PRESCHOOL", "SEMINARY",
        "TUTORING", "LEARNING CENTER", "TRAINING", "POLYTECHNIC", "MONTESSORI",
    ),
    "technology": (
        "TECH", "SOFTWARE", "HARDWARE", "COMPUTING", "DATA", "DIGITAL", "IT",
        "INFORMATION TECHNOLOGY", "WEB", "CYBER", "NETWORK", "NETWORKS",
        "ELECTRONICS", "TELECOM", "SEMICONDUCTOR", "CLOUD", "ROBOTICS",
        "INNOVATIONS", "GRAPHICS",
    ),
    "services": (
        "MAINTENANCE", "CLEANING", "REPAIR", "INSTALLATION", "PLUMBING",
        "ELECTRICAL", "LANDSCAPING", "GARDENING", "PROFESSIONAL", "LEGAL",
        "MARKETING", "ADVERTISING", "DESIGN", "CREATIVE", "ARCHITECTURE",
        "ENGINEERING", "CONSTRUCTION", "REMODELING", "RENOVATION", "HVAC",
        "ROOFING", "POOLS", "MECHANICAL", "EVENTS", "PLANNERS", "TRAVEL",
        "DISTRIBUTORS", "FLORAL", "ENTERTAINMENT",
    ),
}

GOVERNMENT_PATTERNS: Tuple[str, ...] = (
    "CITY OF", "COUNTY OF", "STATE OF", "UNITED STATES", "U.S.", "US", "FEDERAL",
    "DEPARTMENT OF", "OFFICE OF", "BUREAU OF", "AGENCY", "COMMISSION", "AUTHORITY",
    "DISTRICT", "BOARD OF", "ADMINISTRATION", "DIVISION OF", "COMMITTEE", "COUNCIL OF",
    "MINISTRY OF", "NATIONAL", "COMMONWEALTH", "REPUBLIC OF", "GOVERNMENT OF",
    "PROVINCIAL", "MUNICIPAL", "PARLIAMENT", "SENATE", "EMBASSY OF",
    "CONSULATE", "PUBLIC WORKS", "COURT OF", "JUDICIARY", "REVENUE", "POLICE",
)

PROFESSIONAL_TITLES: Tuple[str, ...] = (
    "DR", "DOCTOR", "PROF", "PROFESSOR", "MR", "MRS", "MS", "MISS",
    "MD", "JD", "CPA", "ESQ", "PHD", "DDS", "DVM", "RN", "DO", "DC",
    "LPN", "PA", "NP", "LCSW", "CRNA", "PTA", "OT", "PT",
    "CAPT", "CPT", "COL", "GEN", "MAJ", "LT", "SGT", "ADM", "CMDR",
    "REV", "FR", "PASTOR", "RABBI", "IMAM", "BISHOP", "DEACON",
    "HON", "SIR", "DAME", "LORD", "LADY", "SHEIKH",
)

ENHANCED_BUSINESS_TERMS: Tuple[str, ...] = (
    "GRAPHICS", "POOLS", "TRAVEL", "EVENTS", "PLANNERS", "MAINTENANCE",
    "DISTRIBUTORS", "BAKERY", "CREATIVE", "ENDEAVOR", "MECHANICAL", "PRO",
    "HVAC", "RESOURCING", "GAS", "LOCAL", "CRUISE", "DESIGNS", "IMAGE",
    "CURATED", "ENTERTAINMENT", "AIR", "ADVANCED", "AV", "EXPERT",
    "STORAGE", "WAREHOUSE", "INDUSTRIAL", "COMMERCIAL", "SOLUTIONS",
    "TECHNOLOGIES", "SYSTEMS", "SERVICES", "GROUP", "HOLDINGS",
)

PERSONAL_NAME_PATTERNS: Tuple[re.Pattern, ...] = tuple(re.compile(pattern) for pattern in (
    r"^[A-Za-z]+\s+[A-Za-z]+$",
    r"^[A-Za-z]+\s+[A-Za-z]\s+[A-Za-z]+$",
    r"^[A-Za-z]+\s+[A-Za-z]\.\s+[A-Za-z]+$",
    r"^[A-Za-z]+,\s*[A-Za-z]+$",
))

# Generational suffixes only found on personal names
GENERATIONAL_SUFFIXES: Tuple[str, ...] = ("JR", "SR", "II", "III", "IV")

SIMPLE_PERSON_NAME_PATTERN = re.compile(r"^[A-Z][a-z]+\s+[A-Z][a-z]+$")
SPECIAL_SYMBOL_PATTERN = re.compile(r"[&@#$%]")


@lru_cache(maxsize=1024)
def _phrase_regex(phrase: str) -> re.Pattern:
    return re.compile(r"(?<![A-Z0-9])" + re.escape(phrase) + r"(?![A-Z0-9])")


def contains_phrase(text: str, phrase: str) -> bool:
    """
    Whole-word, case-sensitive phrase search.

    The phrase must not be preceded or followed by a letter or digit, so
    "US" matches "US POSTAL" but not "AUGUSTUS".
    """
    return _phrase_regex(phrase).search(text) is not None


def is_all_caps(text: str) -> bool:
    """True when the text has letters and none of them are lowercase."""
    return any(char.isalpha() for char in text) and text == text.upper()
