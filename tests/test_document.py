import math

import numpy as np
import pytest

from termvec.document import UNRESOLVED_TERM_ID, Document, normalize_token
from termvec.weighting import WeightingMethod


@pytest.mark.parametrize(
    "token, expected",
    [
        ("cat", "cat"),
        ("new york", "new_york"),
        ("new \t\n york", "new_york"),
        (" padded ", "_padded_"),
    ],
)
def test_normalize_token(token, expected):
    assert normalize_token(token) == expected


@pytest.mark.parametrize(
    "tokens",
    [
        [],
        ["cat"],
        ["cat", "dog", "cat"],
        ["a", None, "", "b", "a", None, "c", "a"],
        ["z", "y", "x", "w", "v", "u", "t"],
    ],
)
def test_counts_add_up_to_non_empty_tokens(tokens, make_vocabulary):
    vocabulary = make_vocabulary(ids={}, df={}, num_docs=1.0)
    doc = Document.from_tokens(tokens, vocabulary)

    non_empty = sum(1 for t in tokens if t)
    assert doc.total_tokens == non_empty
    assert int(doc.counts.sum()) == non_empty
    assert np.all(doc.counts >= 1)
    assert np.all(np.diff(doc.term_ids) > 0)


def test_terms_are_sorted_by_identifier_not_text(make_vocabulary):
    vocabulary = make_vocabulary(ids={"apple": 30, "mango": 10, "zebra": 20}, df={}, num_docs=1.0)

    doc = Document.from_tokens(["apple", "zebra", "mango", "zebra"], vocabulary)

    assert doc.terms() == [(10, 1), (20, 2), (30, 1)]
    assert doc.label == 0


def test_whitespace_tokens_share_a_term(make_vocabulary):
    vocabulary = make_vocabulary(ids={}, df={}, num_docs=1.0)

    doc = Document.from_tokens(["new york", "new  york", "new\tyork"], vocabulary)

    assert vocabulary.created == ["new_york"]
    assert doc.terms() == [(1, 3)]


def test_unknown_terms_get_sentinel_without_create(pets_vocabulary):
    doc = Document.from_tokens(["cat", "bird", "fish", "dog"], pets_vocabulary, create=False)

    assert doc.term_ids.tolist() == [1, 2, UNRESOLVED_TERM_ID, UNRESOLVED_TERM_ID]
    assert pets_vocabulary.created == []


def test_tfidf_example(pets_vocabulary):
    doc = Document.from_tokens(["cat", "dog", "cat"], pets_vocabulary)

    vector = doc.feature_vector(pets_vocabulary)

    assert doc.total_tokens == 3
    assert vector.term_ids.tolist() == [1, 2]
    assert np.allclose(vector.weights, [(2 / 3) * math.log(10 / 5), (1 / 3) * math.log(10 / 3)])


@pytest.mark.parametrize(
    "method, expected",
    [
        (WeightingMethod.BOOLEAN, [1.0, 1.0]),
        (WeightingMethod.OCCURRENCES, [2.0, 1.0]),
        (WeightingMethod.FREQUENCY, [2 / 3, 1 / 3]),
        ("frequency", [2 / 3, 1 / 3]),
    ],
)
def test_method_override(method, expected, pets_vocabulary):
    doc = Document.from_tokens(["cat", "dog", "cat"], pets_vocabulary)

    vector = doc.feature_vector(pets_vocabulary, method=method)

    assert np.allclose(vector.weights, expected)


def test_unresolved_and_pruned_terms_are_excluded(pets_vocabulary):
    pets_vocabulary.ids["owl"] = 3
    doc = Document.from_tokens(["owl", "cat", "bird", "dog", "owl"], pets_vocabulary, create=False)

    vector = doc.feature_vector(pets_vocabulary, method=WeightingMethod.OCCURRENCES)

    # owl (3) has no document frequency, bird was never resolved
    assert vector.term_ids.tolist() == [1, 2]
    assert vector.weights.tolist() == [1.0, 1.0]


def test_pruned_term_in_the_middle_is_compacted_out(make_vocabulary):
    vocabulary = make_vocabulary(ids={"a": 1, "b": 2, "c": 3}, df={1: 1, 2: 0, 3: 1}, num_docs=2.0)
    doc = Document.from_tokens(["a", "b", "c", "c"], vocabulary)

    vector = doc.feature_vector(vocabulary)

    assert vector.as_dict() == {1: 1.0, 3: 2.0}


def test_normalized_vector_has_unit_norm(pets_vocabulary):
    pets_vocabulary.normalize = True
    doc = Document.from_tokens(["cat", "dog", "cat", "cat"], pets_vocabulary)

    vector = doc.feature_vector(pets_vocabulary, method=WeightingMethod.OCCURRENCES)

    assert np.isclose(vector.norm(), 1.0)
    assert np.allclose(vector.weights, np.array([3.0, 1.0]) / math.sqrt(10))


def test_document_without_tokens(pets_vocabulary):
    doc = Document.from_tokens([None, "", None], pets_vocabulary)

    assert doc.total_tokens == 0
    assert len(doc) == 0
    vector = doc.feature_vector(pets_vocabulary)
    assert len(vector) == 0
    assert vector.as_dict() == {}


def test_zero_total_tokens_does_not_produce_nan(pets_vocabulary):
    doc = Document([1, 2], [1, 1], total_tokens=0)

    vector = doc.feature_vector(pets_vocabulary, method=WeightingMethod.TFIDF)

    assert not np.any(np.isnan(vector.weights))
    assert vector.weights.tolist() == [0.0, 0.0]


def test_remap_collapses_colliding_identifiers(pets_vocabulary):
    pets_vocabulary.df[5] = 4
    doc = Document.from_tokens(["cat", "dog", "cat"], pets_vocabulary)

    vector = doc.feature_vector(pets_vocabulary, method=WeightingMethod.OCCURRENCES, equivalence={1: 5, 2: 5})

    assert doc.terms() == [(5, 3)]
    assert doc.total_tokens == 3
    assert vector.as_dict() == {5: 3.0}


def test_remap_resorts_and_drops_unmapped(make_vocabulary):
    vocabulary = make_vocabulary(ids={"a": 1, "b": 2, "c": 3}, df={1: 1, 2: 1, 3: 1}, num_docs=1.0)
    doc = Document.from_tokens(["a", "b", "b", "c", "c", "c"], vocabulary)

    doc.remap({1: 3, 3: 1})

    assert doc.terms() == [(1, 3), (3, 1), (UNRESOLVED_TERM_ID, 2)]
    vector = doc.feature_vector(vocabulary)
    assert vector.as_dict() == {1: 3.0, 3: 1.0}


def test_serialization_format():
    doc = Document([1, 4], [2, 1], total_tokens=3, label=2)

    assert doc.to_line() == "Document\t2\t3.0\t1:2\t4:1\n"


def test_serialization_round_trip(pets_vocabulary):
    doc = Document.from_tokens(["cat", "dog", "cat", "wolf"], pets_vocabulary)
    doc._assign_label(7)

    parsed = Document.parse(doc.to_line())

    assert parsed == doc
    assert parsed.label == 7
    assert parsed.total_tokens == 4
    assert parsed.terms() == doc.terms()


@pytest.mark.parametrize(
    "line",
    [
        "",
        "Document\t1\t3.0\n",
        "Document\t1\t3.0",
        "Document\tx\t3.0\t1:2\n",
        "Document\t1\tmany\t1:2\n",
        "Document\t1\t3.0\t1-2\n",
        "Document\t1\t3.0\t1:2\ta:1\n",
        "Document\t1\t3.0\t1:2\t3:\n",
        "Document\t0\tnan\t1:2",
        "Document\t0\tinf\t1:2",
        "Document\t0\t1_0.0\t1:2",
        "Document\t0\t3.0\t1_0:2",
        "Document\t0\t3.0\t 1:2",
        "Document\t0\t3.0\t1:+2",
        "Document\t 0\t3.0\t1:2",
    ],
)
def test_parse_rejects_malformed_lines(line):
    assert Document.parse(line) is None


def test_parse_does_not_resort():
    doc = Document.parse("Document\t0\t5.0\t9:1\t2:4")

    assert doc.terms() == [(9, 1), (2, 4)]


@pytest.mark.parametrize(
    "line, total_tokens, terms",
    [
        ("Document\t-1\t3\t1:2", 3.0, [(1, 2)]),
        ("Document\t0\t1e2\t7:100", 100.0, [(7, 100)]),
        ("Document\t0\t.5\t2:1\r\n", 0.5, [(2, 1)]),
    ],
)
def test_parse_accepts_plain_numbers(line, total_tokens, terms):
    doc = Document.parse(line)

    assert doc.total_tokens == total_tokens
    assert doc.terms() == terms


def test_non_finite_total_tokens_never_produce_nan(pets_vocabulary):
    doc = Document([1, 2], [2, 1], total_tokens=float("nan"))

    vector = doc.feature_vector(pets_vocabulary, method=WeightingMethod.FREQUENCY)

    assert vector.weights.tolist() == [0.0, 0.0]
