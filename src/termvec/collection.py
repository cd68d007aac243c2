"""
Batches of documents: building, reading, writing and matrix export.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator, Mapping
from typing import TYPE_CHECKING, TextIO

import numpy as np
from scipy.sparse import csr_matrix
from tqdm import tqdm

from termvec.document import Document
from termvec.vector import stack_vectors

if TYPE_CHECKING:
    from numpy.typing import NDArray

    from termvec.vocabulary import Lexicon, VocabularyProtocol
    from termvec.weighting import WeightingMethod

logger = logging.getLogger(__name__)


def read_documents(stream: Iterable[str]) -> Iterator[Document]:
    """
    Parse serialized documents, one per line.

    Blank lines are ignored; malformed lines are logged and skipped.
    """
    for line_number, line in enumerate(stream, start=1):
        if not line.strip():
            continue
        document = Document.parse(line)
        if document is None:
            logger.warning("Skipping malformed document on line %d", line_number)
            continue
        yield document


def write_documents(documents: Iterable[Document], stream: TextIO) -> int:
    """Write ``documents`` to ``stream``. Returns the number written."""
    written = 0
    for document in documents:
        stream.write(document.to_line())
        written += 1
    return written


class DocumentCollection:
    """
    An ordered set of documents built against one vocabulary.

    Args:
        documents: Initial documents.
    """

    def __init__(self, documents: Iterable[Document] = ()):
        self.documents = list(documents)

    def __len__(self) -> int:
        return len(self.documents)

    def __getitem__(self, index: int) -> Document:
        return self.documents[index]

    def __iter__(self) -> Iterator[Document]:
        return iter(self.documents)

    def append(self, document: Document) -> None:
        self.documents.append(document)

    @property
    def labels(self) -> NDArray[np.int64]:
        return np.array([doc.label for doc in self.documents], dtype=np.int64)

    @classmethod
    def from_token_lists(
        cls,
        token_lists: Iterable[list[str]],
        lexicon: Lexicon,
        labels: Iterable[str] | None = None,
        create: bool = True,
    ) -> DocumentCollection:
        """
        Build one document per token list and register each with ``lexicon``.

        Raises:
            ValueError: ``labels`` and ``token_lists`` differ in length.
        """
        token_lists = list(token_lists)
        if labels is None:
            labels = [None] * len(token_lists)
        collection = cls()
        for tokens, label in zip(token_lists, labels, strict=True):
            document = Document.from_tokens(tokens, lexicon, create=create)
            lexicon.add_document(document, label=label)
            collection.append(document)
        return collection

    @classmethod
    def from_huggingface_dataset(
        cls,
        dataset,
        lexicon: Lexicon,
        text_field: str = "content",
        label_field: str | None = None,
        tokenizer: Callable[[str], list[str]] = str.split,
        create: bool = True,
        show_progress: bool = False,
    ) -> DocumentCollection:
        """
        Build documents from the rows of a Hugging Face dataset.

        Args:
            dataset: Any iterable of mappings, typically a ``datasets.Dataset``.
            lexicon: Vocabulary to resolve terms and count documents in.
            text_field: Column holding the raw text.
            label_field: Column holding the label, if any.
            tokenizer: Splits raw text into tokens.
            create: Allocate identifiers for unseen terms.
            show_progress: Display a tqdm progress bar.
        """
        collection = cls()
        for row in tqdm(dataset, desc="Building documents", unit="doc", disable=not show_progress):
            document = Document.from_tokens(tokenizer(row[text_field]), lexicon, create=create)
            label = str(row[label_field]) if label_field is not None else None
            lexicon.add_document(document, label=label)
            collection.append(document)
        logger.info("Built %d documents, vocabulary has %d terms", len(collection), len(lexicon))
        return collection

    def feature_matrix(
        self,
        vocabulary: VocabularyProtocol,
        n_features: int,
        method: WeightingMethod | str | None = None,
        equivalence: Mapping[int, int] | None = None,
    ) -> tuple[csr_matrix, NDArray[np.int64]]:
        """
        Weight every document and stack the vectors.

        Args:
            vocabulary: Source of statistics for weighting.
            n_features: Matrix width; must exceed the largest term identifier.
                ``lexicon.size() + 1`` for a ``Lexicon``.
            method: Weighting scheme; the vocabulary's own when None.
            equivalence: Identifier remap applied to every document first. The
                remap happens in place, so the map is consumed: later calls on
                the same collection must not pass it again.

        Returns:
            (matrix, labels) with one row per document.
        """
        vectors = [doc.feature_vector(vocabulary, method=method, equivalence=equivalence) for doc in self.documents]
        return stack_vectors(vectors, n_features), self.labels

    def save(self, stream: TextIO) -> int:
        return write_documents(self.documents, stream)

    @classmethod
    def load(cls, stream: Iterable[str]) -> DocumentCollection:
        collection = cls(read_documents(stream))
        logger.info("Loaded %d documents", len(collection))
        return collection
