"""Decision engine running the classification cascade for a single payee name."""

import logging
from dataclasses import replace
from typing import Optional, Protocol, Sequence

from payee_core.classification.constants import (
    DEFAULT_AI_CONSENSUS_RUNS,
    EXTENDED_BUSINESS_WEIGHT,
    EXTENDED_INDIVIDUAL_WEIGHT,
    Classification,
    ConfidenceThreshold,
    ProcessingTier,
)
from payee_core.classification.exceptions import AIClassificationError
from payee_core.classification.extended_rules import (
    ExtendedRuleCheck,
    detect_business_by_extended_rules,
    detect_individual_by_extended_rules,
)
from payee_core.classification.fallback import (
    emergency_result,
    fallback_classification,
    invalid_input_result,
)
from payee_core.classification.keyword_exclusion import check_exclusion
from payee_core.classification.keywords import BUILTIN_EXCLUSION_KEYWORDS, KeywordService
from payee_core.classification.memory import ClassificationMemory
from payee_core.classification.models import ClassificationResult, KeywordExclusionResult
from payee_core.classification.nlp import apply_nlp_classification
from payee_core.classification.rule_based import apply_rules
from payee_core.config import get_config
from payee_core.utils.retry import classify_error_kind
from payee_core.utils.values import coerce_payee_name, sanitize_for_logging

logger = logging.getLogger(__name__)


class AIClassifier(Protocol):
    """Anything able to reconcile several model answers for one name."""

    def consensus_classify(self, payee_name: str, runs: int = ...): ...


class ClassificationEngine:
    """
    Runs keyword exclusion, rules, extended rules, NLP matching, AI and the
    fallback heuristic in that order and returns the first accepted result.

    ``classify`` never raises: an unexpected error produces an emergency
    Individual result. Every result carries the keyword-exclusion outcome
    computed at the start of the cascade.
    """

    def __init__(
        self,
        keywords: Optional[Sequence[str]] = None,
        ai_classifier: Optional[AIClassifier] = None,
        memory: Optional[ClassificationMemory] = None,
        offline_mode: bool = False,
        ai_consensus_runs: int = DEFAULT_AI_CONSENSUS_RUNS,
        keyword_service: Optional[KeywordService] = None,
    ):
        """
        Args:
            keywords: Exclusion keywords (default: built-in list)
            ai_classifier: AI adapter, e.g. ``PayeeClassificationAgent``
            memory: Prior classifications for the NLP tier; results this
                engine decides are added to it
            offline_mode: Skip the AI tier entirely
            ai_consensus_runs: Model calls per AI classification
            keyword_service: Source of the keyword list; takes precedence
                over ``keywords`` when given
        """
        self.keywords = tuple(keywords) if keywords is not None else BUILTIN_EXCLUSION_KEYWORDS
        self.keyword_service = keyword_service
        self.ai_classifier = ai_classifier
        self.memory = memory
        self.offline_mode = offline_mode
        self.ai_consensus_runs = ai_consensus_runs

    @property
    def ai_enabled(self) -> bool:
        return not self.offline_mode and self.ai_classifier is not None

    def current_keywords(self) -> Sequence[str]:
        """Keyword snapshot used when ``classify`` is called without keywords."""
        if self.keyword_service is not None:
            return self.keyword_service.get_keywords()
        return self.keywords

    def classify(
        self,
        payee_name: str,
        keywords: Optional[Sequence[str]] = None,
    ) -> ClassificationResult:
        """
        Classify a single payee name.

        Args:
            payee_name: Raw payee name (any value; missing values count as blank)
            keywords: Keyword snapshot to use instead of the engine's own list

        Returns:
            ClassificationResult (always; never raises)
        """
        name = ""
        try:
            name = coerce_payee_name(payee_name)
            if not name:
                return invalid_input_result()

            result = self._run_cascade(
                name, keywords if keywords is not None else self.current_keywords()
            )
            if self.memory is not None:
                self.memory.remember(name, result)
            return result
        except Exception as e:
            logger.error(
                f"Classification failed for '{sanitize_for_logging(name)}': {e}", exc_info=True
            )
            return emergency_result(e)

    def _run_cascade(self, name: str, keywords: Sequence[str]) -> ClassificationResult:
        exclusion = check_exclusion(name, keywords)
        if exclusion.is_excluded:
            return self._excluded_result(exclusion)

        rule_result = apply_rules(name)
        if rule_result is not None and rule_result.confidence >= ConfidenceThreshold.REVIEW_REQUIRED:
            return replace(
                rule_result,
                processing_method="Enhanced rule-based classification",
                keyword_exclusion=exclusion,
            )

        business_check = detect_business_by_extended_rules(name)
        if business_check.is_match:
            return self._extended_result(
                Classification.BUSINESS, business_check, EXTENDED_BUSINESS_WEIGHT, exclusion
            )

        individual_check = detect_individual_by_extended_rules(name)
        if individual_check.is_match:
            return self._extended_result(
                Classification.INDIVIDUAL, individual_check, EXTENDED_INDIVIDUAL_WEIGHT, exclusion
            )

        nlp_result = apply_nlp_classification(name, self.memory)
        if nlp_result is not None and nlp_result.confidence >= ConfidenceThreshold.REVIEW_REQUIRED:
            return replace(nlp_result, keyword_exclusion=exclusion)

        if self.ai_enabled:
            ai_result = self._classify_with_ai(name, exclusion)
            if ai_result is not None:
                return ai_result

        return fallback_classification(name, exclusion)

    @staticmethod
    def _excluded_result(exclusion: KeywordExclusionResult) -> ClassificationResult:
        return ClassificationResult(
            classification=Classification.BUSINESS,
            confidence=max(exclusion.confidence, ConfidenceThreshold.MEDIUM),
            reasoning=exclusion.reasoning,
            processing_tier=ProcessingTier.EXCLUDED,
            processing_method="Keyword exclusion",
            matching_rules=tuple(f"Excluded keyword: {k}" for k in exclusion.matched_keywords),
            keyword_exclusion=exclusion,
        )

    @staticmethod
    def _extended_result(
        classification: str,
        check: ExtendedRuleCheck,
        weight: int,
        exclusion: KeywordExclusionResult,
    ) -> ClassificationResult:
        rules = check.rules
        label = "business" if classification == Classification.BUSINESS else "individual"
        return ClassificationResult(
            classification=classification,
            confidence=min(
                ConfidenceThreshold.HIGH, ConfidenceThreshold.MEDIUM + weight * len(rules)
            ),
            reasoning=f"Extended {label} detection: {', '.join(rules)}",
            processing_tier=ProcessingTier.RULE_BASED,
            processing_method=f"Extended {label} rules",
            matching_rules=tuple(rules),
            keyword_exclusion=exclusion,
        )

    def _classify_with_ai(
        self,
        name: str,
        exclusion: KeywordExclusionResult,
    ) -> Optional[ClassificationResult]:
        try:
            ai = self.ai_classifier.consensus_classify(name, runs=self.ai_consensus_runs)
        except AIClassificationError as e:
            logger.warning(f"AI tier failed for '{sanitize_for_logging(name)}' ({e.kind}): {e}")
            return None
        except Exception as e:
            logger.warning(
                f"AI tier failed for '{sanitize_for_logging(name)}' ({classify_error_kind(e)}): {e}",
                exc_info=True,
            )
            return None

        return ClassificationResult(
            classification=ai.classification,
            confidence=max(ai.confidence, ConfidenceThreshold.REVIEW_REQUIRED),
            reasoning=f"AI classification: {ai.reasoning}",
            processing_tier=ProcessingTier.AI_POWERED,
            processing_method="AI consensus classification",
            matching_rules=tuple(ai.matching_rules),
            keyword_exclusion=exclusion,
            sic_code=ai.sic_code,
            sic_description=ai.sic_description,
        )


def create_classification_engine(
    keyword_service: Optional[KeywordService] = None,
    memory: Optional[ClassificationMemory] = None,
    offline_mode: Optional[bool] = None,
    ai_classifier: Optional[AIClassifier] = None,
) -> ClassificationEngine:
    """
    Build an engine from configuration.

    Unless offline, the DSPy agent is created for the AI tier when no
    ``ai_classifier`` is passed.
    """
    settings = get_config().classification
    offline = settings.offline_mode if offline_mode is None else offline_mode

    if ai_classifier is None and not offline:
        from payee_core.agents.payee_classification import PayeeClassificationAgent

        ai_classifier = PayeeClassificationAgent(timeout=settings.ai_timeout)

    return ClassificationEngine(
        ai_classifier=ai_classifier,
        memory=memory if memory is not None else ClassificationMemory(settings.memory_size),
        offline_mode=offline,
        ai_consensus_runs=settings.ai_consensus_runs,
        keyword_service=keyword_service,
    )
