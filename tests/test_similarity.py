from dataclasses import replace

import pytest

from pr_skills.models import CandidateRecord, Category, ExistingRecord, SourceInfo
from pr_skills.similarity import SimilarityMatcher


def record(title, description="", keywords=(), path=""):
    return ExistingRecord(
        title=title,
        description=description,
        instructions="",
        category=Category.BEST_PRACTICE,
        keywords=tuple(keywords),
        path=path,
    )


@pytest.fixture
def matcher():
    return SimilarityMatcher()


def test_significant_words_skip_short_words(matcher):
    words = matcher.significant_words(record("Use the API for DOM access", "Prefer services."))
    assert words == {"access", "prefer", "services"}


def test_score_is_symmetric(matcher):
    a = record("Viewport state mutation", "Avoid mutating viewport state directly")
    b = record("Viewport service usage", "Update viewport through the service")

    assert matcher.score(a, b) == matcher.score(b, a)
    assert 0.0 < matcher.score(a, b) < 1.0


def test_identical_records_score_one(matcher, candidate):
    assert matcher.score(candidate, candidate) == 1.0


def test_empty_word_sets_score_zero(matcher):
    assert matcher.score(record("a b"), record("c d")) == 0.0


def test_find_similar_with_empty_corpus(matcher, candidate):
    assert matcher.find_similar(candidate, []) == []


def test_find_similar_excludes_empty_union_pairs(matcher):
    empty = record("a b")
    assert matcher.find_similar(empty, [record("c d")], threshold=0.0) == []


def test_find_similar_ranks_by_score_with_stable_ties(matcher):
    candidate = record("Viewport state mutation", keywords=["viewport", "state"])
    partial = record("Viewport rendering", path="partial")
    exact = record("Viewport state mutation", path="exact")
    exact_again = record("Mutation of viewport state", path="exact-again")

    matches = matcher.find_similar(candidate, [partial, exact, exact_again], threshold=0.0)

    assert [m.record.path for m in matches] == ["exact", "exact-again", "partial"]
    assert matches[0].score == 1.0
    assert matches[2].score == pytest.approx(1 / 4)


def test_find_similar_applies_default_threshold(matcher):
    candidate = record("Viewport state mutation")
    close = record("Viewport state mutation", path="close")
    far = record("Viewport rendering pipeline", path="far")

    matches = matcher.find_similar(candidate, [far, close])

    assert [m.record.path for m in matches] == ["close"]


def test_merge_appends_exactly_one_source(matcher, existing, candidate):
    merged = matcher.merge(existing, candidate)

    assert len(merged.sources) == len(existing.sources) + 1
    assert merged.sources[:len(existing.sources)] == existing.sources
    assert merged.sources[-1] == candidate.source


def test_merge_appends_placeholder_when_incoming_has_no_source(matcher, existing, candidate):
    merged = matcher.merge(existing, replace(candidate, source=None))
    assert len(merged.sources) == len(existing.sources) + 1


def test_merge_keeps_both_instructions(matcher, existing, candidate):
    merged = matcher.merge(existing, candidate)

    assert merged.instructions == (
        f"{existing.instructions}\n\n---\n\n{candidate.instructions}"
    )


def test_merge_unions_keywords_in_first_seen_order(matcher, existing, candidate):
    merged = matcher.merge(existing, candidate)
    assert merged.keywords == ("state", "viewport", "mutation")


def test_merge_description_prefers_non_empty_incoming(matcher, existing, candidate):
    newer = replace(candidate, description="Routes viewport updates through the service.")
    assert matcher.merge(existing, newer).description == newer.description
    assert matcher.merge(existing, replace(candidate, description="")).description == existing.description


def test_merge_keeps_identity_of_existing_record(matcher, existing, candidate):
    merged = matcher.merge(existing, candidate)

    assert merged.path == existing.path
    assert merged.name == existing.name
    assert merged.category == existing.category
    assert merged.detail == candidate.detail
    assert existing.sources == (SourceInfo(reference_id="7", author="alice", date="2024-01-02", file="src/a.ts"),)
    assert isinstance(merged, ExistingRecord)
    assert isinstance(candidate, CandidateRecord)
