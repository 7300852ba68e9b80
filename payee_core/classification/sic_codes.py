"""Standard Industrial Classification (SIC) reference codes."""

import re
from dataclasses import dataclass
from typing import Dict, List, Optional

SIC_CODE_PATTERN = re.compile(r"^\d{4}$")

DEFAULT_BUSINESS_SIC_CODE = "7389"


@dataclass(frozen=True)
class SicCodeInfo:
    """A SIC code with its description and industry category."""

    code: str
    description: str
    category: str

    def to_dict(self) -> dict:
        return {"code": self.code, "description": self.description, "category": self.category}


def _entry(code: str, description: str, category: str):
    return code, SicCodeInfo(code=code, description=description, category=category)


COMMON_SIC_CODES: Dict[str, SicCodeInfo] = dict([
    # Agriculture
    _entry("0111", "Wheat", "Agriculture"),
    _entry("0181", "Ornamental Floriculture and Nursery Products", "Agriculture"),
    # Construction
    _entry("1521", "General Building Contractors-Single-Family Houses", "Construction"),
    _entry("1522", "General Building Contractors-Residential Buildings, Other Than Single-Family", "Construction"),
    _entry("1541", "General Contractors-Industrial Buildings and Warehouses", "Construction"),
    _entry("1542", "General Contractors-Nonresidential Buildings", "Construction"),
    # Manufacturing
    _entry("2011", "Meat Packing Plants", "Manufacturing"),
    _entry("2834", "Pharmaceutical Preparations", "Manufacturing"),
    _entry("3571", "Electronic Computers", "Manufacturing"),
    # Transportation & utilities
    _entry("4213", "Trucking, Except Local", "Transportation"),
    _entry("4812", "Radiotelephone Communications", "Communications"),
    _entry("4911", "Electric Services", "Utilities"),
    # Wholesale
    _entry("5045", "Computers and Computer Peripheral Equipment and Software", "Wholesale"),
    _entry("5122", "Drugs, Drug Proprietaries, and Druggists' Sundries", "Wholesale"),
    # Retail
    _entry("5311", "Department Stores", "Retail"),
    _entry("5411", "Grocery Stores", "Retail"),
    _entry("5541", "Gasoline Service Stations", "Retail"),
    _entry("5812", "Eating Places", "Retail"),
    # Finance, insurance & real estate
    _entry("6021", "National Commercial Banks", "Finance"),
    _entry("6311", "Life Insurance", "Insurance"),
    _entry("6531", "Real Estate Agents and Managers", "Real Estate"),
    # Services
    _entry("7011", "Hotels and Motels", "Services"),
    _entry("7372", "Prepackaged Software", "Services"),
    _entry("7389", "Business Services, NEC", "Services"),
    _entry("8011", "Offices of Doctors of Medicine", "Healthcare"),
    _entry("8021", "Offices of Dentists", "Healthcare"),
    _entry("8111", "Legal Services", "Professional Services"),
    _entry("8721", "Accounting, Auditing, and Bookkeeping Services", "Professional Services"),
    # Government
    _entry("9199", "General Government, NEC", "Government"),
    _entry("9211", "Courts", "Government"),
    _entry("9311", "Public Finance, Taxation, and Monetary Policy", "Government"),
])

# Business-type hints mapped to default codes, checked in order
_DEFAULT_CODE_HINTS = (
    (("government", "city", "county", "state"), "9199"),
    (("doctor", "physician", "medical"), "8011"),
    (("dentist", "dental"), "8021"),
    (("law", "attorney", "legal"), "8111"),
    (("account", "cpa"), "8721"),
    (("construction", "contractor"), "1521"),
    (("restaurant", "food"), "5812"),
    (("retail", "store"), "5311"),
    (("software", "tech"), "7372"),
    (("bank",), "6021"),
)


def is_valid_sic_code(code: Optional[str]) -> bool:
    """A SIC code is exactly four digits."""
    return bool(code) and bool(SIC_CODE_PATTERN.match(str(code).strip()))


def get_sic_info(code: Optional[str]) -> Optional[SicCodeInfo]:
    """Look up a code in the reference table; None for unknown or malformed codes."""
    if not is_valid_sic_code(code):
        return None
    return COMMON_SIC_CODES.get(str(code).strip())


def get_default_sic_code(business_type: Optional[str] = None) -> SicCodeInfo:
    """Best-guess reference code for a free-text business type."""
    lowered = (business_type or "").lower()
    for hints, code in _DEFAULT_CODE_HINTS:
        if any(hint in lowered for hint in hints):
            return COMMON_SIC_CODES[code]
    return COMMON_SIC_CODES[DEFAULT_BUSINESS_SIC_CODE]


def search_sic_codes(query: str) -> List[SicCodeInfo]:
    lowered = (query or "").lower()
    return [
        info for info in COMMON_SIC_CODES.values()
        if lowered in info.description.lower() or lowered in info.category.lower()
    ]


def describe_sic_code(code: Optional[str], description: Optional[str] = None) -> Optional[str]:
    """Prefer a supplied description, otherwise fall back to the reference table."""
    if description and str(description).strip():
        return str(description).strip()
    info = get_sic_info(code)
    return info.description if info else None
