from dataclasses import replace

import pytest

from pr_skills.classification import ClassificationResult
from pr_skills.config import ClassificationSettings
from pr_skills.models import Category, SourceInfo
from pr_skills.pipeline import SkillExtractor, SkillStore


class MemoryStore(SkillStore):
    def __init__(self, corpus=None):
        self.corpus = list(corpus or [])
        self.saved = {}

    def load_corpus(self):
        return list(self.corpus)

    def save(self, path, document):
        self.saved[path] = document


@pytest.fixture
def extractor():
    return SkillExtractor()


@pytest.fixture
def plain_source():
    return SourceInfo(reference_id="42", author="octocat", date="2024-05-01", file="src/state.ts")


def test_neutral_result_is_skipped(extractor, classification, plain_source):
    classification.category = Category.NEUTRAL
    outcome = extractor.extract(classification, plain_source, [])

    assert outcome.skipped
    assert outcome.document is None
    assert "neutral" in outcome.reason


def test_low_confidence_result_is_skipped(extractor, classification, plain_source):
    classification.confidence = 0.1
    assert extractor.extract(classification, plain_source, []).skipped


def test_confidence_threshold_is_configurable(classification, plain_source):
    extractor = SkillExtractor(settings=ClassificationSettings(min_confidence=0.95))
    assert extractor.extract(classification, plain_source, []).skipped


def test_new_skill_is_created(extractor, classification, plain_source):
    outcome = extractor.extract(classification, plain_source, [])

    assert outcome.is_new
    assert outcome.name == "avoiding-direct-state"
    assert outcome.path == "general/anti-patterns/avoiding-direct-state/SKILL.md"
    assert outcome.merge_score is None
    assert outcome.validation.valid
    assert outcome.document.main_document.startswith("---\nname: avoiding-direct-state\n")


def test_domain_is_detected_from_file_path(extractor, classification, source):
    outcome = extractor.extract(classification, source, [])

    assert outcome.path == "ohif/anti-patterns/avoiding-direct-state/SKILL.md"
    assert "in OHIF codebase" in outcome.document.main_document


def test_domain_is_detected_from_comment(extractor, classification, plain_source):
    outcome = extractor.extract(
        classification, plain_source, [], comment_body="The renderingEngine owns this."
    )
    assert outcome.path.startswith("cornerstone3d/")


def test_classified_domain_is_kept(extractor, classification, source):
    classification.domain = "dicom"
    assert extractor.extract(classification, source, []).path.startswith("dicom/")


def test_similar_skill_is_merged(extractor, classification, plain_source, existing):
    outcome = extractor.extract(classification, plain_source, [existing])

    assert outcome.action == "merged"
    assert not outcome.is_new
    assert outcome.path == existing.path
    assert outcome.merge_score == 1.0
    main = outcome.document.main_document
    assert "Additional sources:\n  - PR #7 by @alice" in main
    assert "PR: #42" in main
    assert "Never assign to viewport state." in main


def test_dissimilar_skill_is_not_merged(extractor, classification, plain_source, existing):
    unrelated = replace(
        existing,
        title="Memoize Selectors",
        description="Caches derived data.",
        keywords=(),
        path="general/best-practices/memoizing-selectors/SKILL.md",
    )
    outcome = extractor.extract(classification, plain_source, [unrelated])

    assert outcome.is_new


def test_process_saves_to_store(extractor, classification, plain_source, existing):
    store = MemoryStore([existing])
    outcome = extractor.process(classification, plain_source, store)

    assert list(store.saved) == [existing.path]
    assert store.saved[existing.path] is outcome.document


def test_process_does_not_save_skipped(extractor, classification, plain_source):
    store = MemoryStore()
    classification.category = Category.NEUTRAL

    assert extractor.process(classification, plain_source, store).skipped
    assert store.saved == {}


def test_skill_at_the_same_path_is_merged(extractor, classification, plain_source, existing):
    reworded = replace(existing, title="Viewport Writes", description="Routes writes through services.")
    outcome = extractor.extract(classification, plain_source, [reworded])

    assert outcome.action == "merged"
    assert outcome.path == existing.path
    assert outcome.merge_score < 0.8
    assert "Additional sources:\n  - PR #7 by @alice" in outcome.document.main_document


def test_store_must_implement_both_methods():
    class LoadOnly(SkillStore):
        def load_corpus(self):
            return []

    with pytest.raises(TypeError):
        SkillStore()
    with pytest.raises(TypeError):
        LoadOnly()


def test_zero_confidence_is_skipped(extractor, plain_source, classification):
    payload = classification.to_dict()
    payload["confidence"] = 0
    result = ClassificationResult.from_dict(payload)

    assert extractor.extract(result, plain_source, []).skipped


def test_missing_skill_name_falls_back_to_title(extractor, plain_source, classification):
    payload = classification.to_dict()
    del payload["skillName"]
    outcome = extractor.extract(ClassificationResult.from_dict(payload), plain_source, [])

    assert outcome.name == "avoiding-direct-state-mutation"
    assert outcome.path == "general/anti-patterns/avoiding-direct-state-mutation/SKILL.md"
