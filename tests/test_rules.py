"""
Tests for the deterministic tiers: core rules, extended rules, NLP scoring,
classification memory, fallback heuristics and SIC reference data.
"""

from unittest.mock import patch

import probablepeople
import pytest

from payee_core.classification.constants import Classification, ProcessingTier
from payee_core.classification.extended_rules import (
    detect_business_by_extended_rules,
    detect_individual_by_extended_rules,
)
from payee_core.classification.fallback import (
    count_business_indicators,
    emergency_result,
    fallback_classification,
    invalid_input_result,
)
from payee_core.classification.memory import ClassificationMemory
from payee_core.classification.models import KeywordExclusionResult
from payee_core.classification.nlp import apply_nlp_classification
from payee_core.classification.patterns import contains_phrase, is_all_caps
from payee_core.classification.rule_based import apply_rules
from payee_core.classification.sic_codes import (
    describe_sic_code,
    get_default_sic_code,
    get_sic_info,
    is_valid_sic_code,
    search_sic_codes,
)


# =============================================================================
# PATTERN HELPERS
# =============================================================================

class TestPatternHelpers:

    def test_contains_phrase_is_whole_word(self):
        assert contains_phrase("US POSTAL SERVICE", "US")
        assert not contains_phrase("AUGUSTUS", "US")
        assert contains_phrase("DR. JANE DOE", "DR")

    def test_is_all_caps(self):
        assert is_all_caps("ACME 123")
        assert not is_all_caps("Acme")
        assert not is_all_caps("12345")


# =============================================================================
# CORE RULES
# =============================================================================

class TestApplyRules:

    def test_legal_suffix(self):
        result = apply_rules("Acme Widgets LLC")
        assert result.classification == Classification.BUSINESS
        assert result.confidence == 95
        assert result.processing_tier == ProcessingTier.RULE_BASED
        assert "Legal suffix: LLC" in result.matching_rules

    def test_title_case_two_word_name_is_individual(self):
        result = apply_rules("John Smith")
        assert result.classification == Classification.INDIVIDUAL
        assert result.confidence == 80
        assert "Individual name pattern detected" in result.matching_rules

    def test_all_caps_two_word_name_is_business(self):
        result = apply_rules("JOHN SMITH")
        assert result.classification == Classification.BUSINESS
        assert result.confidence == 90
        assert "Multi-word all-caps business name" in result.matching_rules

    def test_professional_title(self):
        result = apply_rules("Dr. Jane Doe")
        assert result.classification == Classification.INDIVIDUAL
        assert "Professional title: DR" in result.matching_rules

    def test_conflicting_indicators_defer_to_next_tier(self):
        assert apply_rules("Dr Smith Consulting") is None

    def test_government_pattern(self):
        result = apply_rules("City of Springfield")
        assert result.classification == Classification.BUSINESS
        assert "Government entity pattern: CITY OF" in result.matching_rules

    @pytest.mark.parametrize("name", ["", "   ", None])
    def test_blank(self, name):
        assert apply_rules(name) is None

    def test_reasoning_lists_rules(self):
        result = apply_rules("Acme Widgets LLC")
        assert result.reasoning.startswith("Classified as business based on")

    def test_obvious_business_literal_is_whole_word(self):
        with patch.object(probablepeople, "tag", return_value=({}, "Person")):
            result = apply_rules("Richard Chamberlain")
        assert result.classification == Classification.INDIVIDUAL
        assert not any(rule.startswith("Obvious business entity") for rule in result.matching_rules)

    @pytest.mark.parametrize("name,literal", [
        ("Chamber of Commerce", "CHAMBER"),
        ("Pepsi Bottling", "PEPSI"),
        ("Coca-Cola Refreshments", "COCA-COLA"),
    ])
    def test_obvious_business_literal(self, name, literal):
        result = apply_rules(name)
        assert result.classification == Classification.BUSINESS
        assert result.confidence == 95
        assert f"Obvious business entity: {literal}" in result.matching_rules


class TestNameStructure:

    def test_corporation_structure_is_business(self):
        with patch.object(probablepeople, "tag", return_value=({}, "Corporation")):
            result = apply_rules("Blue Heron Outfitters")
        assert result.classification == Classification.BUSINESS
        assert result.confidence == 85
        assert result.matching_rules == ("Identified as corporation by name structure analysis",)

    def test_person_structure_is_individual(self):
        with patch.object(probablepeople, "tag", return_value=({}, "Person")):
            result = apply_rules("Mary Ann Johnson")
        assert result.classification == Classification.INDIVIDUAL
        assert result.confidence == 80
        assert result.matching_rules == ("Identified as person by name structure analysis",)

    def test_person_structure_ignored_when_business_indicator_fired(self):
        with patch.object(probablepeople, "tag", return_value=({}, "Person")):
            result = apply_rules("JOHN SMITH")
        assert result.classification == Classification.BUSINESS
        assert "Identified as person by name structure analysis" not in result.matching_rules

    def test_repeated_label_leaves_other_rules_to_decide(self):
        error = probablepeople.RepeatedLabelError("Mary Ann Johnson", [], "GivenName")
        with patch.object(probablepeople, "tag", side_effect=error):
            assert apply_rules("Mary Ann Johnson") is None
            assert apply_rules("John Smith").classification == Classification.INDIVIDUAL

    @pytest.mark.parametrize("name", ["Zorblax", "Joe's 24", "Vendor 3 Holdings", "A B C D E"])
    def test_only_short_alphabetic_names_are_tagged(self, name):
        with patch.object(probablepeople, "tag") as tag:
            apply_rules(name)
        tag.assert_not_called()

    def test_real_tagger_on_person_name(self):
        result = apply_rules("Mary Ann Johnson")
        assert result.classification == Classification.INDIVIDUAL


# =============================================================================
# EXTENDED RULES
# =============================================================================

class TestExtendedRules:

    def test_web_address_is_strong_business_rule(self):
        check = detect_business_by_extended_rules("shopwidgets.com")
        assert check.is_match
        assert "Contains web address" in check.strong_rules

    def test_two_weak_business_rules_match(self):
        check = detect_business_by_extended_rules("Joe's 24")
        assert check.strong_rules == []
        assert check.weak_rules == ["Contains numbers", "Possessive name"]
        assert check.is_match

    def test_single_weak_rule_is_not_enough(self):
        assert not detect_business_by_extended_rules("Zorblax 9").is_match

    def test_last_first_format(self):
        check = detect_individual_by_extended_rules("Doe, Jane")
        assert "Last, First name format" in check.strong_rules
        assert check.is_match

    def test_generational_suffix(self):
        check = detect_individual_by_extended_rules("Robert Jones Jr")
        assert "Generational suffix: JR" in check.strong_rules

    def test_business_words_block_individual_detection(self):
        assert detect_individual_by_extended_rules("Smith Holdings").rules == []

    def test_blank(self):
        assert not detect_business_by_extended_rules("").is_match
        assert not detect_individual_by_extended_rules("  ").is_match


# =============================================================================
# NLP TIER AND MEMORY
# =============================================================================

class TestNlpClassification:

    def test_token_scoring_caps_confidence(self):
        result = apply_nlp_classification("Mr Smith Jones")
        assert result.processing_tier == ProcessingTier.NLP_BASED
        assert result.classification == Classification.INDIVIDUAL
        assert result.confidence <= 85

    def test_unknown_word_scores_low(self):
        result = apply_nlp_classification("Zorblax")
        assert result.confidence < 75
        assert result.processing_method == "NLP token analysis"

    def test_memory_match(self, make_result):
        memory = ClassificationMemory()
        memory.remember("Acme Widgets LLC", make_result(confidence=95, sic_code="5084"))

        result = apply_nlp_classification("ACME WIDGETS, INC.", memory)
        assert result.classification == Classification.BUSINESS
        assert result.confidence == 85
        assert result.processing_method == "Fuzzy match against prior classifications"
        assert result.similarity_scores.combined == pytest.approx(100.0)
        assert result.sic_code == "5084"
        assert "Acme Widgets LLC" in result.reasoning

    def test_blank(self):
        assert apply_nlp_classification("  ") is None


class TestClassificationMemory:

    def test_only_trusted_confident_results_are_remembered(self, make_result):
        memory = ClassificationMemory()
        memory.remember("Acme LLC", make_result(confidence=75))
        memory.remember("Apex LLC", make_result(confidence=90, tier=ProcessingTier.NLP_BASED))
        memory.remember("Omni LLC", make_result(confidence=90, tier=ProcessingTier.AI_POWERED))
        assert len(memory) == 1

    def test_fuzzy_lookup_shares_a_token(self, make_result):
        memory = ClassificationMemory()
        memory.remember("Northwind Traders", make_result())
        match = memory.find_similar("Northwind Trader")
        assert match is not None
        assert match.payee_name == "Northwind Traders"
        assert memory.find_similar("Southwind Traders", threshold=99) is None

    def test_eviction_is_least_recently_used(self, make_result):
        memory = ClassificationMemory(max_size=2)
        memory.remember("Alpha LLC", make_result())
        memory.remember("Bravo LLC", make_result())
        memory.remember("Alpha LLC", make_result())
        memory.remember("Charlie LLC", make_result())
        assert len(memory) == 2
        assert memory.find_similar("Bravo", threshold=100) is None
        assert memory.find_similar("Alpha", threshold=100) is not None

    def test_suffix_variants_share_one_entry(self, make_result):
        memory = ClassificationMemory()
        memory.remember("The Acme Company, Inc.", make_result())
        memory.remember("ACME LLC", make_result(confidence=95))
        assert len(memory) == 1
        match = memory.find_similar("Acme Corp")
        assert match.payee_name == "ACME LLC"
        assert match.result.confidence == 95

    def test_clear(self, make_result):
        memory = ClassificationMemory()
        memory.remember_all([("Alpha LLC", make_result()), ("Bravo LLC", make_result())])
        memory.clear()
        assert len(memory) == 0


# =============================================================================
# FALLBACK
# =============================================================================

class TestFallback:

    def test_indicator_count(self):
        assert count_business_indicators("Jane Doe") == 0
        assert count_business_indicators("Northwind Traders & Co") == 4

    def test_business_when_two_indicators_fire(self):
        result = fallback_classification("Northwind Traders & Co", KeywordExclusionResult.empty())
        assert result.classification == Classification.BUSINESS
        assert result.confidence == 75
        assert result.processing_method == "Fallback heuristic analysis"
        assert result.keyword_exclusion is not None

    def test_individual_otherwise(self):
        result = fallback_classification("Zorblax", KeywordExclusionResult.empty())
        assert result.classification == Classification.INDIVIDUAL
        assert "(1/5 business indicators)" in result.reasoning

    def test_invalid_input_result(self):
        result = invalid_input_result()
        assert result.classification == Classification.INDIVIDUAL
        assert result.confidence == 50
        assert not result.keyword_exclusion.is_excluded

    def test_emergency_result_mentions_error(self):
        result = emergency_result(RuntimeError("kaboom"))
        assert result.processing_method == "Emergency fallback"
        assert "kaboom" in result.reasoning


# =============================================================================
# SIC CODES
# =============================================================================

class TestSicCodes:

    @pytest.mark.parametrize("code,expected", [
        ("7372", True), (" 5812 ", True), ("737", False), ("73A2", False), (None, False),
    ])
    def test_is_valid_sic_code(self, code, expected):
        assert is_valid_sic_code(code) is expected

    def test_lookup(self):
        assert get_sic_info("7372").description == "Prepackaged Software"
        assert get_sic_info("abcd") is None

    def test_default_code_from_business_type(self):
        assert get_default_sic_code("Italian restaurant").code == "5812"
        assert get_default_sic_code(None).code == "7389"

    def test_search(self):
        assert any(info.code == "5812" for info in search_sic_codes("eating"))

    def test_describe_prefers_supplied_description(self):
        assert describe_sic_code("7372", "Custom software") == "Custom software"
        assert describe_sic_code("7372") == "Prepackaged Software"
        assert describe_sic_code("0000") is None
