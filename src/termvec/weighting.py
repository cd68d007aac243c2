"""
Term weighting schemes and vector normalization.

Weights are computed from a term's raw count in one document, the document's
total token count, and two corpus statistics supplied by the vocabulary:

    BOOLEAN      1
    OCCURRENCES  count
    FREQUENCY    count / total_tokens
    TFIDF        count / total_tokens * ln(document_count / document_frequency)
"""

from __future__ import annotations

import math
from enum import Enum
from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from numpy.typing import NDArray


class WeightingMethod(str, Enum):
    BOOLEAN = "boolean"
    OCCURRENCES = "occurrences"
    FREQUENCY = "frequency"
    TFIDF = "tfidf"

    @classmethod
    def from_name(cls, name: str | WeightingMethod) -> WeightingMethod:
        """Resolve a case-insensitive method name (``"tfidf"``, ``"TFIDF"``...)."""
        if isinstance(name, cls):
            return name
        try:
            return cls(name.strip().lower())
        except ValueError:
            valid = ", ".join(m.value for m in cls)
            raise ValueError(f"Unknown weighting method '{name}' (expected one of: {valid})") from None


def term_frequency(count: float, total_tokens: float) -> float:
    """Relative frequency of a term; 0.0 for a document without a usable token count."""
    if not math.isfinite(total_tokens) or total_tokens <= 0:
        return 0.0
    return count / total_tokens


def term_score(
    method: WeightingMethod,
    count: float,
    total_tokens: float,
    document_frequency: float,
    document_count: float,
) -> float:
    """
    Weight of a single term in a single document.

    Args:
        method: Weighting scheme.
        count: Raw occurrences of the term in the document.
        total_tokens: Number of tokens the document was built from.
        document_frequency: Number of documents containing the term (> 0).
        document_count: Number of documents in the collection.

    Returns:
        The term weight.
    """
    if method is WeightingMethod.BOOLEAN:
        return 1.0
    if method is WeightingMethod.OCCURRENCES:
        return float(count)
    frequency = term_frequency(count, total_tokens)
    if method is WeightingMethod.FREQUENCY:
        return frequency
    if method is WeightingMethod.TFIDF:
        if document_count <= 0:
            return 0.0
        return frequency * math.log(document_count / document_frequency)
    raise ValueError(f"Unsupported weighting method: {method!r}")


def normalize_l2(scores: NDArray[np.float64]) -> None:
    """Scale ``scores`` in place to unit L2 norm. All-zero input is left as is."""
    norm = float(np.sqrt(np.dot(scores, scores)))
    if norm != 0.0:
        scores /= norm
