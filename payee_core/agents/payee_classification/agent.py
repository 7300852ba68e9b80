"""Payee classification agent backed by a DSPy language model."""

import json
import logging
import re
import statistics
from collections import Counter
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FuturesTimeoutError
from contextlib import nullcontext
from typing import Any, List, Optional

import dspy

from payee_core.agents.payee_classification.model import AIClassification
from payee_core.agents.payee_classification.signature import PayeeClassificationSignature
from payee_core.classification.constants import Classification
from payee_core.classification.exceptions import AIClassificationError
from payee_core.classification.models import clamp_confidence
from payee_core.classification.sic_codes import describe_sic_code, is_valid_sic_code
from payee_core.config import get_config
from payee_core.llms.llm import get_llm_for_agent
from payee_core.utils.infrastructure.mlflow import setup_mlflow_tracing
from payee_core.utils.retry import NON_RETRYABLE_KINDS, classify_error_kind, retry_with_backoff

logger = logging.getLogger(__name__)

_RULE_SEPARATOR = re.compile(r"[;\n]|,\s*")


class PayeeClassificationAgent:
    """Classifies payee names with an LLM and reconciles repeated runs by majority vote"""

    def __init__(
        self,
        lm: Optional[dspy.LM] = None,
        enable_tracing: bool = True,
        predictor: Optional[Any] = None,
        timeout: Optional[float] = None,
        max_retries: int = 1,
        retry_delay: float = 1.0,
    ):
        """
        Initialize the payee classification agent

        Args:
            lm: DSPy language model (if None and no predictor is given, uses config for this agent)
            enable_tracing: Whether to enable MLflow tracing (default: True)
            predictor: Callable taking ``payee_name`` and returning a prediction;
                defaults to ``dspy.Predict`` over the classification signature
            timeout: Per-call timeout in seconds (default: AI_TIMEOUT)
            max_retries: Retries for transient failures (auth and quota are never retried)
            retry_delay: Initial delay before the first retry
        """
        if enable_tracing:
            setup_mlflow_tracing(experiment_name="payee_classification")

        if predictor is None:
            if lm is None:
                lm = get_llm_for_agent("payee_classification")
            predictor = dspy.Predict(PayeeClassificationSignature)

        # dspy.context per call keeps the LM thread-local for batch workers
        self.lm = lm
        self.predictor = predictor
        self.timeout = timeout if timeout is not None else get_config().classification.ai_timeout
        self.max_retries = max_retries
        self.retry_delay = retry_delay

    def _predict(self, payee_name: str):
        context = dspy.context(lm=self.lm) if self.lm is not None else nullcontext()
        with context:
            return self.predictor(payee_name=payee_name)

    def _predict_with_timeout(self, payee_name: str):
        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="payee-ai")
        future = executor.submit(self._predict, payee_name)
        try:
            return future.result(timeout=self.timeout)
        except FuturesTimeoutError as e:
            raise AIClassificationError(
                f"AI classification timed out after {self.timeout}s", kind="timeout", cause=e
            ) from e
        finally:
            executor.shutdown(wait=False)

    def classify(self, payee_name: str) -> AIClassification:
        """
        Classify a single payee name with one model call (plus retries)

        Args:
            payee_name: Raw payee name

        Returns:
            AIClassification parsed from the model output

        Raises:
            AIClassificationError: With ``kind`` set to auth, quota, network,
                timeout, parse or unknown
        """
        @retry_with_backoff(
            max_retries=self.max_retries,
            initial_delay=self.retry_delay,
            exceptions=(Exception,),
        )
        def _attempt() -> AIClassification:
            prediction = self._predict_with_timeout(payee_name)
            return self._parse_prediction(prediction)

        try:
            return _attempt()
        except AIClassificationError:
            raise
        except Exception as e:
            kind = classify_error_kind(e)
            raise AIClassificationError(
                f"AI classification failed ({kind}): {e}", kind=kind, cause=e
            ) from e

    def consensus_classify(self, payee_name: str, runs: int = 2) -> AIClassification:
        """
        Run the model several times and reconcile the answers

        The majority label wins, ties going to Individual. Confidence is the
        median confidence of the majority scaled by the agreement ratio, and
        the SIC code is the most common valid code among business answers.

        Args:
            payee_name: Raw payee name
            runs: Number of model calls

        Returns:
            Reconciled AIClassification

        Raises:
            AIClassificationError: When every run failed
        """
        results: List[AIClassification] = []
        failures: List[AIClassificationError] = []
        for run in range(max(1, runs)):
            try:
                results.append(self.classify(payee_name))
            except AIClassificationError as e:
                failures.append(e)
                logger.warning(f"AI run {run + 1}/{runs} failed for '{payee_name}' ({e.kind}): {e}")
                if e.kind in NON_RETRYABLE_KINDS:
                    break

        if not results:
            last = failures[-1]
            raise AIClassificationError(
                f"All AI classification runs failed: {last}", kind=last.kind, cause=last
            )

        business = [r for r in results if r.classification == Classification.BUSINESS]
        individual = [r for r in results if r.classification == Classification.INDIVIDUAL]
        majority = business if len(business) > len(individual) else individual
        agreement = len(majority) / len(results)
        confidence = round(statistics.median(r.confidence for r in majority) * agreement)

        sic_code = None
        sic_description = None
        if majority is business:
            codes = Counter(r.sic_code for r in majority if is_valid_sic_code(r.sic_code))
            if codes:
                sic_code = codes.most_common(1)[0][0]
                sic_description = next(
                    r.sic_description for r in majority if r.sic_code == sic_code
                )

        rules: List[str] = []
        for result in majority:
            rules.extend(rule for rule in result.matching_rules if rule not in rules)

        return AIClassification(
            classification=majority[0].classification,
            confidence=clamp_confidence(confidence),
            reasoning=f"Consensus classification ({agreement:.0%} agreement): {majority[0].reasoning}",
            sic_code=sic_code,
            sic_description=sic_description,
            matching_rules=rules,
            runs=len(results),
            agreement=agreement,
        )

    def _parse_prediction(self, prediction) -> AIClassification:
        raw_label = str(getattr(prediction, "classification", "") or "").strip().lower()
        if raw_label.startswith("bus"):
            classification = Classification.BUSINESS
        elif raw_label.startswith("ind"):
            classification = Classification.INDIVIDUAL
        else:
            raise AIClassificationError(
                f"Model returned an unknown classification: {raw_label!r}", kind="parse"
            )

        raw_confidence = getattr(prediction, "confidence", None)
        try:
            confidence = clamp_confidence(float(raw_confidence))
        except (TypeError, ValueError) as e:
            raise AIClassificationError(
                f"Model returned a non-numeric confidence: {raw_confidence!r}", kind="parse", cause=e
            ) from e

        sic_code = None
        sic_description = None
        if classification == Classification.BUSINESS:
            candidate = str(getattr(prediction, "sic_code", "") or "").strip()
            if is_valid_sic_code(candidate):
                sic_code = candidate
                sic_description = describe_sic_code(
                    candidate, getattr(prediction, "sic_description", None)
                )
            elif candidate:
                logger.debug(f"Ignoring malformed SIC code from model: {candidate!r}")

        return AIClassification(
            classification=classification,
            confidence=confidence,
            reasoning=str(getattr(prediction, "reasoning", "") or "").strip(),
            sic_code=sic_code,
            sic_description=sic_description,
            matching_rules=_parse_rules(getattr(prediction, "matching_rules", None)),
        )


def _parse_rules(value: Any) -> List[str]:
    """Accept a list, a JSON list string, or a delimited string."""
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [str(item).strip() for item in value if str(item).strip()]

    text = str(value).strip()
    if not text:
        return []
    if text.startswith("["):
        try:
            parsed = json.loads(text)
        except json.JSONDecodeError:
            text = text.strip("[]")
        else:
            if isinstance(parsed, list):
                return [str(item).strip() for item in parsed if str(item).strip()]
    return [part.strip().strip("\"'") for part in _RULE_SEPARATOR.split(text) if part.strip()]
