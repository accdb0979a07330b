import math

import pytest

from relay_shared import EmbeddingRecord

from app.services.corpus import CorpusStore
from app.services.similarity import cosine_similarity, rank_documents, top_k


def _corpus(*vectors):
    return CorpusStore(
        [EmbeddingRecord(id=f"doc-{index}", text=f"text {index}", vector=list(vector)) for index, vector in enumerate(vectors)]
    )


def test_self_similarity_is_one():
    vector = [0.3, -1.2, 4.5, 0.0001]
    assert cosine_similarity(vector, vector) == pytest.approx(1.0)


def test_zero_vector_similarity_is_zero():
    assert cosine_similarity([1.0, 2.0, 3.0], [0.0, 0.0, 0.0]) == 0.0
    assert cosine_similarity([0.0, 0.0], [0.0, 0.0]) == 0.0


def test_orthogonal_and_opposite_vectors():
    assert cosine_similarity([1.0, 0.0], [0.0, 5.0]) == pytest.approx(0.0)
    assert cosine_similarity([1.0, 2.0], [-2.0, -4.0]) == pytest.approx(-1.0)


def test_similarity_rejects_length_mismatch():
    with pytest.raises(ValueError):
        cosine_similarity([1.0, 2.0], [1.0, 2.0, 3.0])


def test_rank_is_sorted_non_increasing():
    corpus = _corpus([0.0, 1.0], [1.0, 0.0], [1.0, 1.0], [-1.0, 0.0], [0.5, 0.1])
    ranked = rank_documents(corpus, [1.0, 0.2])

    scores = [doc.similarity for doc in ranked]
    assert scores == sorted(scores, reverse=True)
    assert len(ranked) == len(corpus)
    assert ranked[0].id == "doc-4"
    assert ranked[-1].id == "doc-3"
    assert all(-1.0 <= score <= 1.0 for score in scores)


def test_rank_ties_keep_corpus_order():
    corpus = _corpus([2.0, 0.0], [0.0, 1.0], [1.0, 0.0], [3.0, 0.0])
    ranked = rank_documents(corpus, [1.0, 0.0])

    assert [doc.id for doc in ranked] == ["doc-0", "doc-2", "doc-3", "doc-1"]


def test_rank_scores_match_pairwise_similarity():
    vectors = ([0.2, 0.7, -0.1], [1.0, 1.0, 1.0], [0.0, 0.0, 0.0])
    query = [0.5, 0.5, 0.0]
    ranked = {doc.id: doc.similarity for doc in rank_documents(_corpus(*vectors), query)}

    for index, vector in enumerate(vectors):
        assert ranked[f"doc-{index}"] == pytest.approx(cosine_similarity(vector, query))
    assert ranked["doc-2"] == 0.0


def test_rank_empty_corpus_and_dimension_mismatch():
    assert rank_documents(CorpusStore.empty(), [1.0, 2.0]) == []

    with pytest.raises(ValueError):
        rank_documents(_corpus([1.0, 0.0]), [1.0, 0.0, 0.0])


def test_top_k_takes_prefix():
    ranked = rank_documents(_corpus([1.0, 0.0], [0.9, 0.1], [0.0, 1.0]), [1.0, 0.0])

    assert [doc.id for doc in top_k(ranked, 2)] == ["doc-0", "doc-1"]
    assert len(top_k(ranked, 10)) == 3
    assert top_k(ranked, 0) == []
    assert math.isclose(top_k(ranked, 1)[0].similarity, 1.0)
