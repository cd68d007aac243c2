import pytest

from termvec.weighting import WeightingMethod


class StaticVocabulary:
    """Vocabulary with fixed identifiers and statistics."""

    def __init__(
        self,
        ids: dict[str, int],
        df: dict[int, int],
        num_docs: float,
        method: WeightingMethod = WeightingMethod.OCCURRENCES,
        normalize: bool = False,
    ):
        self.ids = dict(ids)
        self.df = dict(df)
        self.num_docs = num_docs
        self.method = method
        self.normalize = normalize
        self.created: list[str] = []

    def lookup_identifier(self, term: str) -> int | None:
        return self.ids.get(term)

    def get_or_create_identifier(self, term: str) -> int:
        if term not in self.ids:
            self.ids[term] = max(self.ids.values(), default=0) + 1
            self.created.append(term)
        return self.ids[term]

    def document_frequency(self, term_id: int) -> int:
        return self.df.get(term_id, 0)

    def document_count(self) -> float:
        return self.num_docs

    def weighting_method(self) -> WeightingMethod:
        return self.method

    def normalize_flag(self) -> bool:
        return self.normalize


@pytest.fixture
def pets_vocabulary():
    return StaticVocabulary(
        ids={"cat": 1, "dog": 2},
        df={1: 5, 2: 3},
        num_docs=10.0,
        method=WeightingMethod.TFIDF,
    )


@pytest.fixture
def make_vocabulary():
    return StaticVocabulary
