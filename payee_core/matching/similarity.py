"""String similarity metrics used for fuzzy name matching.

All scores are percentages in the range 0-100. ``combined_similarity`` is the
single scoring formula used across the classifier; its weights are fixed.
Edit-distance and Jaro metrics come from rapidfuzz.
"""

from dataclasses import dataclass
from typing import Tuple

from rapidfuzz.distance import Jaro, JaroWinkler, Levenshtein

# Weights of the combined score, in percent
LEVENSHTEIN_WEIGHT = 30
JARO_WEIGHT = 20
JARO_WINKLER_WEIGHT = 20
DICE_WEIGHT = 15
TOKEN_SORT_WEIGHT = 15

JARO_WINKLER_PREFIX_SCALE = 0.1


@dataclass(frozen=True)
class SimilarityScores:
    """Similarity of two strings under each metric, as percentages."""

    levenshtein: float
    jaro: float
    jaro_winkler: float
    dice: float
    token_sort: float
    combined: float

    def to_dict(self) -> dict:
        return {
            "levenshtein": self.levenshtein,
            "jaro": self.jaro,
            "jaro_winkler": self.jaro_winkler,
            "dice": self.dice,
            "token_sort": self.token_sort,
            "combined": self.combined,
        }


def levenshtein_distance(str1: str, str2: str) -> int:
    """Classic edit distance (insert, delete, substitute all cost 1)."""
    return Levenshtein.distance(str1, str2)


def levenshtein_similarity(str1: str, str2: str) -> float:
    """Levenshtein similarity; two empty strings are 100% similar."""
    return Levenshtein.normalized_similarity(str1, str2) * 100


def jaro_similarity(str1: str, str2: str) -> float:
    """Jaro similarity in the range 0-1."""
    return Jaro.similarity(str1, str2)


def jaro_winkler_similarity(str1: str, str2: str) -> float:
    """Jaro-Winkler similarity in the range 0-1 (common prefix up to 4 characters)."""
    return JaroWinkler.similarity(str1, str2, prefix_weight=JARO_WINKLER_PREFIX_SCALE)


def _bigrams(text: str) -> set:
    return {text[i:i + 2] for i in range(len(text) - 1)}


def dice_coefficient(str1: str, str2: str) -> float:
    """Dice coefficient over character bigram sets, in the range 0-1."""
    if str1 == str2:
        return 1.0
    if len(str1) < 2 or len(str2) < 2:
        return 0.0

    bigrams1 = _bigrams(str1)
    bigrams2 = _bigrams(str2)
    intersection = len(bigrams1 & bigrams2)
    return 2 * intersection / (len(bigrams1) + len(bigrams2))


def token_sort_ratio(str1: str, str2: str) -> float:
    """Levenshtein similarity of the lowercase tokens sorted alphabetically."""
    sorted1 = " ".join(sorted(str1.lower().split()))
    sorted2 = " ".join(sorted(str2.lower().split()))
    return levenshtein_similarity(sorted1, sorted2)


def _canonical_pair(str1: str, str2: str) -> Tuple[str, str]:
    return (str1, str2) if str1 <= str2 else (str2, str1)


def combined_similarity(str1: str, str2: str) -> SimilarityScores:
    """
    Compute every similarity metric and the weighted combined score.

    The pair is scored in a canonical order so that the result does not
    depend on argument order.

    Args:
        str1: First string
        str2: Second string

    Returns:
        SimilarityScores with all metrics as percentages
    """
    first, second = _canonical_pair(str1 or "", str2 or "")

    levenshtein = levenshtein_similarity(first, second)
    jaro = jaro_similarity(first, second) * 100
    jaro_winkler = jaro_winkler_similarity(first, second) * 100
    dice = dice_coefficient(first, second) * 100
    token_sort = token_sort_ratio(first, second)

    combined = (
        LEVENSHTEIN_WEIGHT * levenshtein
        + JARO_WEIGHT * jaro
        + JARO_WINKLER_WEIGHT * jaro_winkler
        + DICE_WEIGHT * dice
        + TOKEN_SORT_WEIGHT * token_sort
    ) / 100

    return SimilarityScores(
        levenshtein=levenshtein,
        jaro=jaro,
        jaro_winkler=jaro_winkler,
        dice=dice,
        token_sort=token_sort,
        combined=combined,
    )
