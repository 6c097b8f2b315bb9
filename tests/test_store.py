from dataclasses import replace

import pytest

from pr_skills.builder import DocumentBuilder
from pr_skills.models import BuiltDocument, Category
from pr_skills.store import DirectorySkillStore


@pytest.fixture
def store(tmp_path):
    return DirectorySkillStore(tmp_path / "skills")


def test_missing_root_is_an_empty_corpus(store):
    assert store.load_corpus() == []


def test_saved_skill_loads_back(store, candidate, source):
    path = "ohif/anti-patterns/avoiding-direct-state/SKILL.md"
    store.save(path, DocumentBuilder().build(candidate, source))

    [record] = store.load_corpus()

    assert record.path == path
    assert record.domain == "ohif"
    assert record.category == Category.ANTI_PATTERN
    assert record.name == "avoiding-direct-state"
    assert record.sources == (source,)
    assert record.bad_example == candidate.bad_example


def test_category_comes_from_folder(store, candidate, source):
    path = "general/best-practices/avoiding-direct-state/SKILL.md"
    store.save(path, DocumentBuilder().build(candidate, source))

    assert store.load_corpus()[0].category == Category.BEST_PRACTICE


def test_skill_outside_the_layout_infers_category(store, candidate, source):
    store.save("loose/SKILL.md", DocumentBuilder().build(candidate, source))

    [record] = store.load_corpus()

    assert record.domain == "general"
    assert record.category == Category.ANTI_PATTERN


def test_split_skill_loads_reference_documents(store, candidate, source):
    record = replace(candidate, bad_example="\n".join(f"line {i};" for i in range(600)))
    path = "general/anti-patterns/avoiding-direct-state/SKILL.md"
    store.save(path, DocumentBuilder().build(record, source))

    assert (store.root / "general/anti-patterns/avoiding-direct-state/EXAMPLES.md").exists()
    assert store.load_corpus()[0].bad_example == record.bad_example


def test_save_removes_stale_reference_documents(store):
    path = "general/anti-patterns/x/SKILL.md"
    store.save(path, BuiltDocument("main", {"EXAMPLES.md": "examples"}))
    store.save(path, BuiltDocument("main again"))

    skill_dir = store.root / "general/anti-patterns/x"
    assert (skill_dir / "SKILL.md").read_text() == "main again"
    assert not (skill_dir / "EXAMPLES.md").exists()


def test_unreadable_skill_is_skipped(store, candidate, source):
    store.save("general/anti-patterns/good/SKILL.md", DocumentBuilder().build(candidate, source))
    bad = store.root / "general/anti-patterns/bad/SKILL.md"
    bad.parent.mkdir(parents=True)
    bad.write_bytes(b"\xff\xfe\x00broken")

    assert [r.path for r in store.load_corpus()] == ["general/anti-patterns/good/SKILL.md"]
