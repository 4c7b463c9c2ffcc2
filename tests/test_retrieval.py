"""Tests for civicscoach/retrieval.py and civicscoach/corpus.py."""

import json
from pathlib import Path

import pytest

from civicscoach.corpus import load_corpus
from civicscoach.models import CorpusChunk
from civicscoach.retrieval import rank, score_chunk


def test_score_counts_keywords_and_domain_bonus():
    chunk = CorpusChunk("a", "Article 110 defines Money Bills.", {})
    # "money", "bills" match; "article" triggers the domain bonus
    assert score_chunk(["money", "bills", "zebra"], chunk) == pytest.approx(2.5)


def test_score_without_domain_terms():
    chunk = CorpusChunk("w", "The monsoon arrives in June.", {})
    assert score_chunk(["monsoon"], chunk) == pytest.approx(1.0)
    assert score_chunk([], chunk) == 0


def test_rank_orders_by_score(sample_corpus):
    ranked = rank("money bill", sample_corpus, 4)
    assert [c.id for c in ranked][:2] == ["money", "rajya"]
    assert [c.score for c in ranked] == sorted((c.score for c in ranked), reverse=True)


def test_rank_ties_keep_corpus_order():
    corpus = tuple(CorpusChunk(f"c{i}", "identical text", {}) for i in range(5))
    assert [c.id for c in rank("identical", corpus, 5)] == ["c0", "c1", "c2", "c3", "c4"]


def test_rank_top_k_is_at_least_one(sample_corpus):
    assert len(rank("money", sample_corpus, 0)) == 1
    assert len(rank("money", sample_corpus, -3)) == 1


def test_rank_top_k_larger_than_corpus_returns_all(sample_corpus):
    assert len(rank("money", sample_corpus, 50)) == len(sample_corpus)


def test_rank_does_not_mutate_corpus(sample_corpus):
    before = list(sample_corpus)
    rank("structure doctrine", sample_corpus, 2)
    assert list(sample_corpus) == before


def test_rank_carries_metadata(sample_corpus):
    top = rank("money", sample_corpus, 1)[0]
    assert top.id == "money"
    assert top.metadata["source"] == "Constitution"


def test_bundled_corpus_loads():
    corpus = load_corpus()
    assert len(corpus) >= 5
    ids = [c.id for c in corpus]
    assert "basic_structure" in ids
    assert all(c.text for c in corpus)
    with pytest.raises(TypeError):
        corpus[0].metadata["x"] = 1  # type: ignore[index]


def test_load_corpus_defaults_missing_ids(tmp_path: Path):
    path = tmp_path / "chunks.json"
    path.write_text(json.dumps([{"text": "first"}, {"id": "named", "text": "second"}]), encoding="utf-8")
    corpus = load_corpus(path)
    assert [c.id for c in corpus] == ["chunk0", "named"]


def test_load_corpus_missing_file(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        load_corpus(tmp_path / "missing.json")


@pytest.mark.parametrize("content", ['{"text": "not a list"}', '[{"id": "no-text"}]'])
def test_load_corpus_rejects_bad_shape(tmp_path: Path, content):
    path = tmp_path / "chunks.json"
    path.write_text(content, encoding="utf-8")
    with pytest.raises(ValueError):
        load_corpus(path)
