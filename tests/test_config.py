from pathlib import Path

import pytest

from pr_skills.config import ClassificationSettings, Config, SkillRules
from pr_skills.exceptions import ConfigError


SHIPPED_CONFIG = Path(__file__).resolve().parent.parent / "config" / "config.yaml"


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    monkeypatch.delenv("SKILL_SIMILARITY_THRESHOLD", raising=False)


def write_config(tmp_path, text):
    path = tmp_path / "config.yaml"
    path.write_text(text)
    return str(path)


def test_missing_file_uses_defaults(tmp_path):
    config = Config(str(tmp_path / "missing.yaml"))

    assert config.rules == SkillRules()
    assert config.classification == ClassificationSettings()
    assert config.log_level == "INFO"
    assert not config.log_to_file
    assert config.log_dir == Path("logs")


def test_empty_file_uses_defaults(tmp_path):
    assert Config(write_config(tmp_path, "")).rules == SkillRules()


def test_yaml_overrides(tmp_path):
    config = Config(write_config(tmp_path, (
        "rules:\n"
        "  max_skill_lines: 200\n"
        "  reserved_words: [Acme]\n"
        "classification:\n"
        "  min_confidence: 0.6\n"
        "  domain_hints:\n"
        "    dicom: [DICOM, dcm]\n"
        "logging:\n"
        "  level: debug\n"
    )))

    assert config.rules.max_skill_lines == 200
    assert config.rules.reserved_words == ("acme",)
    assert config.rules.max_name_length == 64
    assert config.classification.min_confidence == 0.6
    assert config.classification.domain_hints == {"dicom": ("dicom", "dcm")}
    assert config.log_level == "DEBUG"


def test_get_with_dotted_keys(tmp_path):
    config = Config(write_config(tmp_path, "rules:\n  min_word_length: 5\n"))

    assert config.get("rules.min_word_length") == 5
    assert config.get("rules.unknown", "x") == "x"
    assert config.get("rules.min_word_length.deeper", "x") == "x"


def test_environment_variable_substitution(tmp_path, monkeypatch):
    path = write_config(tmp_path, 'rules:\n  fallback_name: "${SKILL_FALLBACK}"\n')

    monkeypatch.setenv("SKILL_FALLBACK", "generic-skill")
    assert Config(path).fallback_name == "generic-skill"

    monkeypatch.delenv("SKILL_FALLBACK")
    assert Config(path).fallback_name == "unnamed-skill"


def test_similarity_threshold_environment_override(tmp_path, monkeypatch):
    path = write_config(tmp_path, "rules:\n  similarity_threshold: 0.7\n")
    assert Config(path).similarity_threshold == 0.7

    monkeypatch.setenv("SKILL_SIMILARITY_THRESHOLD", "0.5")
    assert Config(path).rules.similarity_threshold == 0.5

    monkeypatch.setenv("SKILL_SIMILARITY_THRESHOLD", "high")
    with pytest.raises(ConfigError):
        Config(path).similarity_threshold


def test_invalid_yaml_raises(tmp_path):
    with pytest.raises(ConfigError):
        Config(write_config(tmp_path, "rules: [unclosed\n"))


def test_non_mapping_yaml_raises(tmp_path):
    with pytest.raises(ConfigError):
        Config(write_config(tmp_path, "- a\n- b\n"))


def test_shipped_config_matches_defaults():
    config = Config(str(SHIPPED_CONFIG))

    assert config.rules == SkillRules()
    assert config.classification == ClassificationSettings()
