"""Name normalization and string similarity."""

from payee_core.matching.normalization import (
    NormalizedName,
    TokenAnalysis,
    analyze_tokens,
    classify_token,
    normalize,
    normalize_for_duplicate_detection,
    tokenize,
)
from payee_core.matching.similarity import SimilarityScores, combined_similarity

__all__ = [
    "NormalizedName",
    "SimilarityScores",
    "TokenAnalysis",
    "analyze_tokens",
    "classify_token",
    "combined_similarity",
    "normalize",
    "normalize_for_duplicate_detection",
    "tokenize",
]
