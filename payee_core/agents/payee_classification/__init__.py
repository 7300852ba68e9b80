"""Payee classification agent."""

from payee_core.agents.payee_classification.agent import PayeeClassificationAgent
from payee_core.agents.payee_classification.model import AIClassification
from payee_core.agents.payee_classification.signature import PayeeClassificationSignature

__all__ = ["PayeeClassificationAgent", "AIClassification", "PayeeClassificationSignature"]
