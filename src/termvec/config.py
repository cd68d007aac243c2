"""
Default vectorizer settings.

Configure via environment variables:
    TERMVEC_WEIGHTING=tfidf      # boolean, occurrences, frequency or tfidf
    TERMVEC_NORMALIZE=1          # L2-normalize feature vectors
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from termvec.weighting import WeightingMethod

DEFAULT_WEIGHTING = os.environ.get("TERMVEC_WEIGHTING", WeightingMethod.OCCURRENCES.value)
DEFAULT_NORMALIZE = os.environ.get("TERMVEC_NORMALIZE", "0")

_TRUTHY = {"1", "true", "yes", "on"}


def _parse_flag(value: str) -> bool:
    return value.strip().lower() in _TRUTHY


@dataclass
class VectorizerConfig:
    """How a vocabulary weights and scales the vectors built against it."""

    method: WeightingMethod = WeightingMethod.OCCURRENCES
    normalize: bool = False

    def __post_init__(self) -> None:
        self.method = WeightingMethod.from_name(self.method)

    @classmethod
    def from_env(cls) -> VectorizerConfig:
        return cls(
            method=WeightingMethod.from_name(os.environ.get("TERMVEC_WEIGHTING", DEFAULT_WEIGHTING)),
            normalize=_parse_flag(os.environ.get("TERMVEC_NORMALIZE", DEFAULT_NORMALIZE)),
        )
