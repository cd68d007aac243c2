"""
Bag-of-words documents for text classification.

A ``Document`` holds the raw counts of its terms, keyed by the integer
identifiers a vocabulary assigned to them and kept in ascending identifier
order. Weights are never stored: ``feature_vector`` computes them on demand from
the counts and the vocabulary's current statistics, so the same document can be
re-weighted after the vocabulary grows or is pruned.

Documents round-trip through a one-line, tab-separated text format:

    Document<TAB>label<TAB>total_tokens<TAB>id:count<TAB>id:count...

Usage:
    lexicon = Lexicon(method="tfidf")
    doc = Document.from_tokens(["cat", "dog", "cat"], lexicon)
    lexicon.add_document(doc, label="pets")
    vector = doc.feature_vector(lexicon)
"""

from __future__ import annotations

import logging
import math
import re
from collections import Counter
from collections.abc import Iterable, Iterator, Mapping
from typing import TYPE_CHECKING

import numpy as np

from termvec.sorting import merge_duplicate_keys, sort_by_key
from termvec.vector import WeightedVector
from termvec.weighting import WeightingMethod, normalize_l2, term_score

if TYPE_CHECKING:
    from numpy.typing import NDArray

    from termvec.vocabulary import VocabularyProtocol

logger = logging.getLogger(__name__)

# Identifier given to terms the vocabulary does not know. Largest 32-bit int, so
# unresolved terms always sort after every real one.
UNRESOLVED_TERM_ID = 2**31 - 1

TYPE_TAG = "Document"

_WHITESPACE = re.compile(r"\s+")
_INTEGER = re.compile(r"-?[0-9]+")
_DECIMAL = re.compile(r"[-+]?([0-9]+\.?[0-9]*|\.[0-9]+)([eE][-+]?[0-9]+)?")


def normalize_token(token: str) -> str:
    """Replace each run of whitespace with ``_`` so a term never spans fields."""
    return _WHITESPACE.sub("_", token)


def _parse_int(text: str) -> int:
    """Strict decimal integer: optional minus sign and ASCII digits only."""
    if not _INTEGER.fullmatch(text):
        raise ValueError(f"invalid integer {text!r}")
    return int(text)


class Document:
    """
    Sorted term counts of a single document.

    Build documents with ``from_tokens`` or ``parse``; the constructor takes
    arrays that already satisfy the ordering invariant.

    Args:
        term_ids: Term identifiers, strictly ascending.
        counts: Raw count of each term, aligned with ``term_ids``.
        total_tokens: Number of tokens the document was built from.
        label: Label identifier (0 = unset).
    """

    def __init__(
        self,
        term_ids: Iterable[int] = (),
        counts: Iterable[int] = (),
        total_tokens: float = 0.0,
        label: int = 0,
    ):
        self.term_ids: NDArray[np.int64] = np.asarray(list(term_ids), dtype=np.int64)
        self.counts: NDArray[np.int64] = np.asarray(list(counts), dtype=np.int64)
        if self.term_ids.shape != self.counts.shape:
            raise ValueError(
                f"term_ids and counts differ in length: {len(self.term_ids)} != {len(self.counts)}"
            )
        self._total_tokens = float(total_tokens)
        self._label = label

    @classmethod
    def from_tokens(
        cls,
        tokens: Iterable[str | None],
        vocabulary: VocabularyProtocol,
        create: bool = True,
    ) -> Document:
        """
        Aggregate ``tokens`` into sorted term counts.

        Args:
            tokens: Pre-split tokens. ``None`` and empty strings are ignored.
            vocabulary: Resolves terms to identifiers.
            create: Allocate identifiers for unknown terms. When False, unknown
                terms get ``UNRESOLVED_TERM_ID`` and never reach a feature vector.

        Returns:
            The new document, label unset.
        """
        total_tokens = 0
        term_counts: Counter[str] = Counter()
        for token in tokens:
            if not token:
                continue
            total_tokens += 1
            term_counts[normalize_token(token)] += 1

        term_ids = np.empty(len(term_counts), dtype=np.int64)
        counts = np.empty(len(term_counts), dtype=np.int64)
        for pos, (term, count) in enumerate(term_counts.items()):
            if create:
                term_id = vocabulary.get_or_create_identifier(term)
            else:
                term_id = vocabulary.lookup_identifier(term)
            term_ids[pos] = UNRESOLVED_TERM_ID if term_id is None else term_id
            counts[pos] = count

        sort_by_key(term_ids, counts)
        return cls(term_ids, counts, total_tokens=total_tokens)

    @property
    def label(self) -> int:
        return self._label

    def _assign_label(self, label: int) -> None:
        self._label = label

    @property
    def total_tokens(self) -> float:
        return self._total_tokens

    def __len__(self) -> int:
        return len(self.term_ids)

    def __iter__(self) -> Iterator[tuple[int, int]]:
        return zip(self.term_ids.tolist(), self.counts.tolist())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Document):
            return NotImplemented
        return (
            self._label == other._label
            and self._total_tokens == other._total_tokens
            and np.array_equal(self.term_ids, other.term_ids)
            and np.array_equal(self.counts, other.counts)
        )

    def __repr__(self) -> str:
        return f"Document(label={self._label}, total_tokens={self._total_tokens}, terms={list(self)})"

    def terms(self) -> list[tuple[int, int]]:
        return list(self)

    # =========================================================================
    # Weighting
    # =========================================================================

    def remap(self, equivalence: Mapping[int, int]) -> None:
        """
        Replace every term identifier through ``equivalence``, in place.

        Identifiers missing from the map become ``UNRESOLVED_TERM_ID``. The
        terms are re-sorted, and terms mapped onto the same identifier are
        merged by summing their counts.
        """
        self.term_ids[:] = [equivalence.get(term_id, UNRESOLVED_TERM_ID) for term_id in self.term_ids.tolist()]
        sort_by_key(self.term_ids, self.counts)
        self.term_ids, self.counts = merge_duplicate_keys(self.term_ids, self.counts)
        logger.debug("Remapped document to %d distinct identifiers", len(self))

    def feature_vector(
        self,
        vocabulary: VocabularyProtocol,
        method: WeightingMethod | str | None = None,
        equivalence: Mapping[int, int] | None = None,
    ) -> WeightedVector:
        """
        Weight the document's terms against ``vocabulary``.

        Args:
            vocabulary: Supplies document frequencies, the document count and
                the normalization flag.
            method: Weighting scheme; the vocabulary's own when None.
            equivalence: Old-to-new identifier map from a vocabulary pruning.
                Applied to this document in place before weighting, so it is
                consumed: pass it once per document, never again.

        Returns:
            Weights of the terms still present in the vocabulary, ascending by
            identifier. Unresolved and pruned terms are left out.
        """
        method = WeightingMethod.from_name(method if method is not None else vocabulary.weighting_method())
        if equivalence is not None:
            self.remap(equivalence)

        document_count = vocabulary.document_count()
        kept_ids: list[int] = []
        kept_scores: list[float] = []
        for term_id, count in self:
            # sentinels sort last, nothing after them is weighted
            if term_id == UNRESOLVED_TERM_ID:
                break
            df = vocabulary.document_frequency(term_id)
            if df <= 0:
                continue
            kept_ids.append(term_id)
            kept_scores.append(term_score(method, count, self._total_tokens, df, document_count))

        scores = np.array(kept_scores, dtype=np.float64)
        if vocabulary.normalize_flag():
            normalize_l2(scores)
        return WeightedVector(np.array(kept_ids, dtype=np.int64), scores)

    # =========================================================================
    # Serialization
    # =========================================================================

    def to_line(self) -> str:
        """Serialize to one tab-separated line, newline included."""
        fields = [TYPE_TAG, str(self._label), repr(self._total_tokens)]
        fields.extend(f"{term_id}:{count}" for term_id, count in self)
        return "\t".join(fields) + "\n"

    @classmethod
    def parse(cls, line: str) -> Document | None:
        """
        Rebuild a document from ``to_line`` output.

        Returns:
            The document, or None when the line is malformed (fewer than four
            fields, a bad number, or a term field without ``:``).
        """
        fields = line.rstrip("\r\n").split("\t")
        if len(fields) < 4:
            return None
        try:
            label = _parse_int(fields[1])
            if not _DECIMAL.fullmatch(fields[2]):
                raise ValueError(f"invalid total token count {fields[2]!r}")
            total_tokens = float(fields[2])
            if not math.isfinite(total_tokens):
                raise ValueError(f"non-finite total token count {fields[2]!r}")
            term_ids = []
            counts = []
            for term_field in fields[3:]:
                term_id, sep, count = term_field.partition(":")
                if not sep:
                    raise ValueError(f"missing ':' in term field {term_field!r}")
                term_ids.append(_parse_int(term_id))
                counts.append(_parse_int(count))
        except ValueError as e:
            logger.debug("Rejected serialized document: %s", e)
            return None
        return cls(term_ids, counts, total_tokens=total_tokens, label=label)
