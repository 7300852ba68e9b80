"""
Tests for the DSPy payee classification agent, driven by a stub predictor.
"""

import time

import pytest

from payee_core.agents.payee_classification.agent import PayeeClassificationAgent, _parse_rules
from payee_core.classification.constants import Classification
from payee_core.classification.exceptions import AIClassificationError
from payee_core.utils.retry import classify_error_kind


def _agent(predictor, **kwargs):
    kwargs.setdefault("timeout", 5)
    kwargs.setdefault("max_retries", 0)
    return PayeeClassificationAgent(
        predictor=predictor, enable_tracing=False, retry_delay=0, **kwargs
    )


# =============================================================================
# SINGLE CALL PARSING
# =============================================================================

class TestClassify:

    def test_business_with_sic_code(self, stub_predictor, make_prediction):
        predictor = stub_predictor(make_prediction(
            sic_code="7372", matching_rules='["Brand-like name", "Software suffix"]'
        ))
        result = _agent(predictor).classify("Zorblax")

        assert predictor.calls == ["Zorblax"]
        assert result.classification == Classification.BUSINESS
        assert result.confidence == 90
        assert result.sic_code == "7372"
        assert result.sic_description == "Prepackaged Software"
        assert result.matching_rules == ["Brand-like name", "Software suffix"]

    def test_label_is_normalized(self, stub_predictor, make_prediction):
        predictor = stub_predictor(make_prediction(classification="  individual. "))
        assert _agent(predictor).classify("Jo").classification == Classification.INDIVIDUAL

    def test_sic_dropped_for_individuals(self, stub_predictor, make_prediction):
        predictor = stub_predictor(make_prediction(classification="Individual", sic_code="7372"))
        result = _agent(predictor).classify("Jane Doe")
        assert result.sic_code is None
        assert result.sic_description is None

    def test_malformed_sic_dropped(self, stub_predictor, make_prediction):
        predictor = stub_predictor(make_prediction(sic_code="73A"))
        assert _agent(predictor).classify("Zorblax").sic_code is None

    def test_confidence_is_clamped(self, stub_predictor, make_prediction):
        predictor = stub_predictor(make_prediction(confidence="140"))
        assert _agent(predictor).classify("Zorblax").confidence == 100

    def test_unknown_label_is_parse_error(self, stub_predictor, make_prediction):
        predictor = stub_predictor(make_prediction(classification="maybe"))
        with pytest.raises(AIClassificationError) as exc_info:
            _agent(predictor).classify("Zorblax")
        assert exc_info.value.kind == "parse"

    def test_non_numeric_confidence_is_parse_error(self, stub_predictor, make_prediction):
        predictor = stub_predictor(make_prediction(confidence="very sure"))
        with pytest.raises(AIClassificationError) as exc_info:
            _agent(predictor).classify("Zorblax")
        assert exc_info.value.kind == "parse"


# =============================================================================
# FAILURES, RETRIES AND TIMEOUTS
# =============================================================================

class TestFailures:

    def test_auth_error_is_classified(self, stub_predictor):
        predictor = stub_predictor(Exception("Invalid API key provided"))
        with pytest.raises(AIClassificationError) as exc_info:
            _agent(predictor, max_retries=2).classify("Zorblax")
        assert exc_info.value.kind == "auth"
        assert len(predictor.calls) == 1

    def test_transient_error_is_retried(self, stub_predictor, make_prediction):
        predictor = stub_predictor(ConnectionError("connection reset"), make_prediction())
        result = _agent(predictor, max_retries=1).classify("Zorblax")
        assert result.classification == Classification.BUSINESS
        assert len(predictor.calls) == 2

    def test_timeout(self, make_prediction):
        def slow_predictor(payee_name):
            time.sleep(0.5)
            return make_prediction()

        with pytest.raises(AIClassificationError) as exc_info:
            _agent(slow_predictor, timeout=0.05).classify("Zorblax")
        assert exc_info.value.kind == "timeout"

    @pytest.mark.parametrize("error,kind", [
        (Exception("Rate limit reached for requests"), "quota"),
        (Exception("Error code: 401 - unauthorized"), "auth"),
        (TimeoutError("read timed out"), "timeout"),
        (ConnectionError("refused"), "network"),
        (ValueError("something odd"), "unknown"),
        (AIClassificationError("bad output", kind="parse"), "parse"),
    ])
    def test_error_kinds(self, error, kind):
        assert classify_error_kind(error) == kind


# =============================================================================
# CONSENSUS
# =============================================================================

class TestConsensus:

    def test_agreeing_runs(self, stub_predictor, make_prediction):
        predictor = stub_predictor(make_prediction(sic_code="7372"))
        result = _agent(predictor).consensus_classify("Zorblax", runs=2)

        assert len(predictor.calls) == 2
        assert result.classification == Classification.BUSINESS
        assert result.confidence == 90
        assert result.agreement == 1.0
        assert result.runs == 2
        assert result.sic_code == "7372"
        assert result.reasoning.startswith("Consensus classification (100% agreement)")

    def test_tie_goes_to_individual(self, stub_predictor, make_prediction):
        predictor = stub_predictor(
            make_prediction(classification="Business", confidence=90, sic_code="7372"),
            make_prediction(classification="Individual", confidence=80),
        )
        result = _agent(predictor).consensus_classify("Zorblax", runs=2)

        assert result.classification == Classification.INDIVIDUAL
        assert result.confidence == 40
        assert result.agreement == 0.5
        assert result.sic_code is None

    def test_majority_wins(self, stub_predictor, make_prediction):
        predictor = stub_predictor(
            make_prediction(classification="Individual", confidence=70),
            make_prediction(classification="Business", confidence=80, sic_code="5812"),
            make_prediction(classification="Business", confidence=90, sic_code="5812"),
        )
        result = _agent(predictor).consensus_classify("Zorblax", runs=3)

        assert result.classification == Classification.BUSINESS
        assert result.confidence == round(85 * 2 / 3)
        assert result.sic_code == "5812"

    def test_failed_run_is_skipped(self, stub_predictor, make_prediction):
        predictor = stub_predictor(ConnectionError("connection reset"), make_prediction())
        result = _agent(predictor).consensus_classify("Zorblax", runs=2)
        assert result.runs == 1
        assert result.classification == Classification.BUSINESS

    def test_auth_failure_stops_consensus(self, stub_predictor):
        predictor = stub_predictor(Exception("Invalid API key provided"))
        with pytest.raises(AIClassificationError) as exc_info:
            _agent(predictor).consensus_classify("Zorblax", runs=3)
        assert exc_info.value.kind == "auth"
        assert len(predictor.calls) == 1


# =============================================================================
# RULE PARSING
# =============================================================================

class TestParseRules:

    @pytest.mark.parametrize("value,expected", [
        ('["A", "B"]', ["A", "B"]),
        ("A; B\nC", ["A", "B", "C"]),
        ("A, B", ["A", "B"]),
        (["A", " ", "B"], ["A", "B"]),
        ("", []),
        (None, []),
    ])
    def test_parse_rules(self, value, expected):
        assert _parse_rules(value) == expected
