"""
Vocabulary: term identifiers and corpus statistics.

Documents never own a vocabulary; it is passed into every call that needs one.
Anything implementing ``VocabularyProtocol`` can be used. ``Lexicon`` is the
in-memory implementation shipped with the package.
"""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, Protocol

from termvec.config import VectorizerConfig
from termvec.weighting import WeightingMethod

if TYPE_CHECKING:
    from termvec.document import Document

logger = logging.getLogger(__name__)


class VocabularyProtocol(Protocol):
    """Protocol defining what documents need from a vocabulary."""

    def lookup_identifier(self, term: str) -> int | None: ...

    def get_or_create_identifier(self, term: str) -> int: ...

    def document_frequency(self, term_id: int) -> int: ...

    def document_count(self) -> float: ...

    def weighting_method(self) -> WeightingMethod: ...

    def normalize_flag(self) -> bool: ...


class Lexicon:
    """
    In-memory vocabulary shared by many documents.

    Identifiers start at 1. ``get_or_create_identifier`` is called once per
    distinct term per document, so every call on a known term increments that
    term's document frequency.

    Args:
        method: Weighting method reported to documents. Defaults to ``config``.
        normalize: Whether documents should L2-normalize their vectors.
        config: Source of defaults for whichever of ``method`` and ``normalize``
            is not given; ``VectorizerConfig.from_env()`` if omitted.

    Attributes:
        labels (dict[str, int]): Label name to label identifier (from 1).
    """

    def __init__(
        self,
        method: WeightingMethod | str | None = None,
        normalize: bool | None = None,
        config: VectorizerConfig | None = None,
    ):
        if config is None and (method is None or normalize is None):
            config = VectorizerConfig.from_env()
        self.method = WeightingMethod.from_name(method if method is not None else config.method)
        self.normalize = normalize if normalize is not None else config.normalize
        self.labels: dict[str, int] = {}
        self._term_to_id: dict[str, int] = {}
        self._df: dict[int, int] = {}
        self._next_id = 1
        self._num_docs = 0
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._term_to_id)

    def __contains__(self, term: str) -> bool:
        return term in self._term_to_id

    # ----- VocabularyProtocol -----

    def lookup_identifier(self, term: str) -> int | None:
        return self._term_to_id.get(term)

    def get_or_create_identifier(self, term: str) -> int:
        with self._lock:
            term_id = self._term_to_id.get(term)
            if term_id is None:
                term_id = self._next_id
                self._next_id += 1
                self._term_to_id[term] = term_id
                self._df[term_id] = 1
            else:
                self._df[term_id] += 1
            return term_id

    def document_frequency(self, term_id: int) -> int:
        return self._df.get(term_id, 0)

    def document_count(self) -> float:
        return float(self._num_docs)

    def weighting_method(self) -> WeightingMethod:
        return self.method

    def normalize_flag(self) -> bool:
        return self.normalize

    # ----- labels and document bookkeeping -----

    def label_identifier(self, label: str) -> int:
        """Identifier for ``label``, allocated on first use."""
        with self._lock:
            label_id = self.labels.get(label)
            if label_id is None:
                label_id = len(self.labels) + 1
                self.labels[label] = label_id
            return label_id

    def add_document(self, document: Document, label: str | None = None) -> None:
        """Count ``document`` in the collection and assign its label."""
        if label is not None:
            document._assign_label(self.label_identifier(label))
        with self._lock:
            self._num_docs += 1

    def size(self) -> int:
        """Highest identifier in use, 0 for an empty lexicon."""
        return max(self._df, default=0)

    def terms(self) -> dict[str, int]:
        return dict(self._term_to_id)

    # ----- pruning -----

    def prune(self, min_df: int = 1, max_df: int | None = None) -> int:
        """
        Remove terms whose document frequency falls outside ``[min_df, max_df]``.

        Pruned identifiers report a document frequency of 0 afterwards, so
        documents built earlier drop them from their feature vectors.

        Returns:
            Number of terms removed.
        """
        if max_df is not None and max_df < min_df:
            raise ValueError(f"max_df ({max_df}) is lower than min_df ({min_df})")
        with self._lock:
            doomed = [
                term
                for term, term_id in self._term_to_id.items()
                if self._df[term_id] < min_df or (max_df is not None and self._df[term_id] > max_df)
            ]
            for term in doomed:
                del self._df[self._term_to_id.pop(term)]
        logger.debug("Pruned %d terms (min_df=%s, max_df=%s), %d left", len(doomed), min_df, max_df, len(self))
        return len(doomed)

    def compact(self) -> dict[int, int]:
        """
        Renumber the surviving identifiers densely from 1.

        Returns:
            Equivalence map ``{old_id: new_id}`` for re-indexing existing documents.
        """
        with self._lock:
            equivalence = {old: new for new, old in enumerate(sorted(self._df), start=1)}
            self._term_to_id = {term: equivalence[old] for term, old in self._term_to_id.items()}
            self._df = {equivalence[old]: df for old, df in self._df.items()}
            self._next_id = len(equivalence) + 1
        logger.debug("Compacted lexicon to %d identifiers", len(equivalence))
        return equivalence
