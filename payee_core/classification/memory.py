"""Memory of prior classifications used for fuzzy look-ups."""

import threading
from collections import OrderedDict
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Set, Tuple

from payee_core.classification.constants import (
    NAME_SIMILARITY_THRESHOLD,
    ConfidenceThreshold,
    ProcessingTier,
)
from payee_core.classification.models import ClassificationResult
from payee_core.matching.normalization import normalize, normalize_for_duplicate_detection
from payee_core.matching.similarity import SimilarityScores, combined_similarity

# Upper bound on fuzzy comparisons per look-up
MAX_FUZZY_CANDIDATES = 50

# Tiers whose results are trusted enough to be remembered
_REMEMBERED_TIERS = (
    ProcessingTier.EXCLUDED,
    ProcessingTier.RULE_BASED,
    ProcessingTier.AI_POWERED,
)


@dataclass(frozen=True)
class MemoryMatch:
    """A prior classification similar to the queried name."""

    payee_name: str
    result: ClassificationResult
    scores: SimilarityScores


class ClassificationMemory:
    """Bounded, thread-safe store of prior classifications keyed by entity name.

    Entries are indexed by token so a look-up compares the query only with
    names that share at least one token. The memory is owned by whoever
    creates it and injected into the engine; nothing here is global.
    """

    def __init__(self, max_size: int = 5000):
        self.max_size = max_size
        self._entries: "OrderedDict[str, Tuple[str, ClassificationResult]]" = OrderedDict()
        self._token_index: Dict[str, Set[str]] = {}
        self._lock = threading.Lock()

    def remember(self, payee_name: str, result: ClassificationResult) -> None:
        """Store a result decided above the review threshold by a trusted tier."""
        if result.processing_tier not in _REMEMBERED_TIERS:
            return
        if result.confidence <= ConfidenceThreshold.REVIEW_REQUIRED:
            return
        key = normalize_for_duplicate_detection(payee_name)
        if not key:
            return

        with self._lock:
            if key in self._entries:
                self._entries.move_to_end(key)
            else:
                for token in key.split(" "):
                    self._token_index.setdefault(token, set()).add(key)
            self._entries[key] = (payee_name, result)

            while len(self._entries) > self.max_size:
                evicted_key, _ = self._entries.popitem(last=False)
                self._unindex(evicted_key)

    def remember_all(self, items: Iterable[Tuple[str, ClassificationResult]]) -> None:
        for payee_name, result in items:
            self.remember(payee_name, result)

    def _unindex(self, key: str) -> None:
        for token in key.split(" "):
            keys = self._token_index.get(token)
            if keys is None:
                continue
            keys.discard(key)
            if not keys:
                del self._token_index[token]

    def find_similar(
        self,
        payee_name: str,
        threshold: float = NAME_SIMILARITY_THRESHOLD,
    ) -> Optional[MemoryMatch]:
        """
        Find the most similar remembered name.

        Args:
            payee_name: Name to look up
            threshold: Minimum combined similarity (0-100)

        Returns:
            MemoryMatch for the best candidate at or above threshold, or None
        """
        key = normalize_for_duplicate_detection(payee_name)
        if not key:
            return None

        with self._lock:
            exact = self._entries.get(key)
            if exact is not None:
                candidates: List[Tuple[str, Tuple[str, ClassificationResult]]] = [(key, exact)]
            else:
                candidate_keys: List[str] = []
                for token in normalize(key).tokens:
                    for candidate in sorted(self._token_index.get(token, ())):
                        if candidate not in candidate_keys:
                            candidate_keys.append(candidate)
                        if len(candidate_keys) >= MAX_FUZZY_CANDIDATES:
                            break
                    if len(candidate_keys) >= MAX_FUZZY_CANDIDATES:
                        break
                candidates = [(k, self._entries[k]) for k in candidate_keys]

        best: Optional[MemoryMatch] = None
        for candidate_key, (candidate_name, result) in candidates:
            scores = combined_similarity(key, candidate_key)
            if scores.combined < threshold:
                continue
            if best is None or scores.combined > best.scores.combined:
                best = MemoryMatch(payee_name=candidate_name, result=result, scores=scores)
        return best

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._token_index.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
