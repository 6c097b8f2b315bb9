"""Configuration loader for PR Skills Extractor."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Tuple

import yaml
from dotenv import load_dotenv

from .exceptions import ConfigError


logger = logging.getLogger(__name__)


DEFAULT_DOMAIN_HINTS: Dict[str, Tuple[str, ...]] = {
    "ohif": ("ohif", "viewer", "viewport"),
    "cornerstone3d": ("cornerstone", "cs3d", "renderingengine"),
}


@dataclass(frozen=True)
class SkillRules:
    """Limits and thresholds applied when naming, validating and building skills."""

    max_name_length: int = 64
    max_description_length: int = 1024
    max_skill_lines: int = 500
    reserved_words: Tuple[str, ...] = ("anthropic", "claude")
    similarity_threshold: float = 0.8
    min_word_length: int = 4
    detail_split_chars: int = 500
    fallback_name: str = "unnamed-skill"


@dataclass(frozen=True)
class ClassificationSettings:
    """Settings for turning a classification result into a skill."""

    min_confidence: float = 0.3
    domain_hints: Dict[str, Tuple[str, ...]] = field(
        default_factory=lambda: dict(DEFAULT_DOMAIN_HINTS)
    )


class Config:
    """Configuration manager for PR Skills Extractor."""

    def __init__(self, config_path: str = "config/config.yaml"):
        """Initialize configuration.

        Args:
            config_path: Path to main configuration file. A missing file
                leaves every setting at its default.
        """
        load_dotenv()
        self.config_path = Path(config_path)
        self._config: Dict[str, Any] = {}
        self._load_config()

    def _load_config(self) -> None:
        """Load configuration from the YAML file."""
        if not self.config_path.exists():
            logger.debug(f"Config file {self.config_path} not found, using defaults")
            return

        try:
            with open(self.config_path, "r") as f:
                loaded = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {self.config_path}: {e}") from e

        if loaded is None:
            return
        if not isinstance(loaded, dict):
            raise ConfigError(f"Top level of {self.config_path} must be a mapping")
        self._config = loaded

    def _substitute_env_vars(self, value: str) -> str:
        """Substitute environment variables in configuration values.

        Args:
            value: String that may contain ${VAR} patterns

        Returns:
            String with environment variables substituted
        """
        if isinstance(value, str) and value.startswith("${") and value.endswith("}"):
            var_name = value[2:-1]
            return os.environ.get(var_name, "")
        return value

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value by dot-separated key.

        Args:
            key: Dot-separated configuration key (e.g., 'rules.max_skill_lines')
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        keys = key.split(".")
        value = self._config

        for k in keys:
            if isinstance(value, dict):
                value = value.get(k)
                if value is None:
                    return default
            else:
                return default

        # Substitute environment variables for string values
        if isinstance(value, str):
            value = self._substitute_env_vars(value)
            if value == "":
                return default

        return value

    # ========== Rules Configuration ==========

    @property
    def max_name_length(self) -> int:
        """Get maximum skill name length."""
        return int(self.get("rules.max_name_length", 64))

    @property
    def max_description_length(self) -> int:
        """Get maximum description length."""
        return int(self.get("rules.max_description_length", 1024))

    @property
    def max_skill_lines(self) -> int:
        """Get the line limit of a skill document."""
        return int(self.get("rules.max_skill_lines", 500))

    @property
    def reserved_words(self) -> List[str]:
        """Get substrings a skill name may not contain."""
        return [str(w).lower() for w in self.get("rules.reserved_words", ["anthropic", "claude"])]

    @property
    def similarity_threshold(self) -> float:
        """Get the score at or above which skills are merged."""
        override = os.environ.get("SKILL_SIMILARITY_THRESHOLD")
        if override:
            try:
                return float(override)
            except ValueError:
                raise ConfigError(f"SKILL_SIMILARITY_THRESHOLD is not a number: {override!r}")
        return float(self.get("rules.similarity_threshold", 0.8))

    @property
    def min_word_length(self) -> int:
        """Get the minimum length of a word counted by the similarity matcher."""
        return int(self.get("rules.min_word_length", 4))

    @property
    def detail_split_chars(self) -> int:
        """Get the detail length above which it moves to a reference document."""
        return int(self.get("rules.detail_split_chars", 500))

    @property
    def fallback_name(self) -> str:
        """Get the placeholder name for skills whose name normalizes to nothing."""
        return self.get("rules.fallback_name", "unnamed-skill")

    @property
    def rules(self) -> SkillRules:
        """Build the rules struct handed to the components."""
        return SkillRules(
            max_name_length=self.max_name_length,
            max_description_length=self.max_description_length,
            max_skill_lines=self.max_skill_lines,
            reserved_words=tuple(self.reserved_words),
            similarity_threshold=self.similarity_threshold,
            min_word_length=self.min_word_length,
            detail_split_chars=self.detail_split_chars,
            fallback_name=self.fallback_name,
        )

    # ========== Classification Configuration ==========

    @property
    def min_confidence(self) -> float:
        """Get the confidence below which classifications are not persisted."""
        return float(self.get("classification.min_confidence", 0.3))

    @property
    def domain_hints(self) -> Dict[str, Tuple[str, ...]]:
        """Get domain name -> hint words used for domain detection."""
        hints = self.get("classification.domain_hints")
        if not isinstance(hints, dict):
            return dict(DEFAULT_DOMAIN_HINTS)
        return {
            str(domain): tuple(str(w).lower() for w in words or [])
            for domain, words in hints.items()
        }

    @property
    def classification(self) -> ClassificationSettings:
        """Build the classification settings struct."""
        return ClassificationSettings(
            min_confidence=self.min_confidence,
            domain_hints=self.domain_hints,
        )

    # ========== Paths & Logging ==========

    @property
    def log_dir(self) -> Path:
        """Get log directory path."""
        return Path(self.get("paths.log_dir", "logs"))

    @property
    def log_to_file(self) -> bool:
        """Check if logs should also be written to a file."""
        return bool(self.get("logging.file", False))

    @property
    def log_level(self) -> str:
        """Get the logging level name."""
        return str(self.get("logging.level", "INFO")).upper()
