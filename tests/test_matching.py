"""
Tests for name normalization and string similarity.
"""

import pytest

from payee_core.matching.normalization import (
    analyze_tokens,
    classify_token,
    normalize,
    normalize_for_duplicate_detection,
    tokenize,
)
from payee_core.matching.similarity import (
    combined_similarity,
    dice_coefficient,
    jaro_similarity,
    jaro_winkler_similarity,
    levenshtein_distance,
    levenshtein_similarity,
    token_sort_ratio,
)


# =============================================================================
# NORMALIZATION
# =============================================================================

class TestNormalize:

    def test_uppercases_and_expands_symbols(self):
        assert normalize("  Acme & Sons, Inc. ").normalized == "ACME AND SONS INC"

    def test_tokens_match_normalized_string(self):
        name = normalize("o'brien   plumbing #2")
        assert name.tokens == tuple(name.normalized.split(" "))
        assert name.normalized == "O BRIEN PLUMBING NUMBER 2"

    @pytest.mark.parametrize("raw", ["AT&T Mobility", "  j. smith jr. ", "Café 5*Star", "a+b@c"])
    def test_idempotent(self, raw):
        once = normalize(raw).normalized
        assert normalize(once).normalized == once

    @pytest.mark.parametrize("raw", [None, "", "   ", "..."])
    def test_blank_inputs_normalize_to_empty(self, raw):
        name = normalize(raw)
        assert name.normalized == ""
        assert name.tokens == ()

    def test_non_string_values_are_coerced(self):
        assert normalize(12345).normalized == "12345"

    def test_tokenize(self):
        assert tokenize("Wells-Fargo Bank") == ["WELLS", "FARGO", "BANK"]


class TestTokenAnalysis:

    @pytest.mark.parametrize("token,expected", [
        ("llc", "business"),
        ("Hospital", "business"),
        ("Mr", "individual"),
        ("Smith", "individual"),
        ("blue", "neutral"),
    ])
    def test_classify_token(self, token, expected):
        assert classify_token(token) == expected

    def test_analyze_tokens_groups_indicators(self):
        analysis = analyze_tokens("Dr John Miller Clinic")
        assert analysis.business_indicators == ("CLINIC",)
        assert analysis.individual_indicators == ("DR", "JOHN", "MILLER")


class TestDuplicateDetection:

    def test_strips_leading_the_and_legal_suffixes(self):
        assert normalize_for_duplicate_detection("The Acme Company, Inc.") == "ACME"

    def test_keeps_single_token(self):
        assert normalize_for_duplicate_detection("Company") == "COMPANY"

    def test_suffix_variants_share_a_key(self):
        assert normalize_for_duplicate_detection("Acme LLC") == "ACME"
        assert normalize_for_duplicate_detection("ACME Inc") == "ACME"
        assert normalize_for_duplicate_detection("Apex LLC") == "APEX"
        assert normalize_for_duplicate_detection("") == ""


# =============================================================================
# SIMILARITY
# =============================================================================

class TestSimilarityMetrics:

    def test_levenshtein_distance(self):
        assert levenshtein_distance("kitten", "sitting") == 3
        assert levenshtein_distance("", "abc") == 3
        assert levenshtein_distance("same", "same") == 0

    def test_levenshtein_similarity_of_empty_strings(self):
        assert levenshtein_similarity("", "") == 100.0

    def test_levenshtein_similarity_scales_by_longer_string(self):
        assert levenshtein_similarity("WALGREEN", "WALGREENS") == pytest.approx(800 / 9)
        assert levenshtein_similarity("", "ABC") == 0.0

    def test_jaro_winkler_boosts_common_prefix(self):
        assert jaro_winkler_similarity("DIXON", "DICKSONX") > jaro_similarity("DIXON", "DICKSONX")
        assert jaro_winkler_similarity("ABC", "XYZ") == 0.0

    def test_jaro_and_jaro_winkler_reference_values(self):
        assert jaro_similarity("MARTHA", "MARHTA") == pytest.approx(0.9444, abs=1e-3)
        assert jaro_winkler_similarity("MARTHA", "MARHTA") == pytest.approx(0.9611, abs=1e-3)

    def test_dice_coefficient(self):
        assert dice_coefficient("NIGHT", "NACHT") == pytest.approx(0.25)
        assert dice_coefficient("A", "AB") == 0.0

    def test_token_sort_ignores_word_order(self):
        assert token_sort_ratio("John Smith", "smith john") == 100.0


class TestCombinedSimilarity:

    def test_identical_strings_score_100(self):
        scores = combined_similarity("ACME SUPPLY", "ACME SUPPLY")
        assert scores.combined == pytest.approx(100.0)
        assert scores.levenshtein == pytest.approx(100.0)
        assert scores.dice == pytest.approx(100.0)

    def test_symmetric(self):
        forward = combined_similarity("WALGREEN", "WALGREENS")
        backward = combined_similarity("WALGREENS", "WALGREEN")
        assert forward == backward

    def test_empty_against_text_scores_zero(self):
        assert combined_similarity("", "ABC").combined == pytest.approx(0.0)

    def test_scores_within_bounds(self):
        scores = combined_similarity("BLUE RIVER FARMS", "RIVER BLUE FARM")
        for value in scores.to_dict().values():
            assert 0.0 <= value <= 100.0

    def test_close_names_score_higher_than_distant_names(self):
        close = combined_similarity("WALGREEN", "WALGREENS").combined
        distant = combined_similarity("WALGREEN", "ZEBRA").combined
        assert close > 90 > distant
