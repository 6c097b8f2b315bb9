"""Data model shared by the normalizer, validator, matcher and builder."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple


# ========== Enums ==========

class Category(str, Enum):
    """Classification of a review comment."""
    ANTI_PATTERN = "anti-pattern"
    BEST_PRACTICE = "best-practice"
    NEUTRAL = "neutral"

    @classmethod
    def parse(cls, value: Optional[str]) -> "Category":
        """Map a free-form category string to a member, defaulting to neutral."""
        if isinstance(value, cls):
            return value
        normalized = (value or "").strip().lower().replace("_", "-").replace(" ", "-")
        for member in cls:
            if member.value == normalized:
                return member
        return cls.NEUTRAL

    @property
    def section_title(self) -> str:
        """Heading used for the category-specific detail section."""
        return {
            Category.ANTI_PATTERN: "Anti-Pattern",
            Category.BEST_PRACTICE: "Best Practice",
        }.get(self, "General")

    @property
    def folder(self) -> str:
        """Directory name used for skills of this category."""
        return {
            Category.ANTI_PATTERN: "anti-patterns",
            Category.BEST_PRACTICE: "best-practices",
        }.get(self, "general")


class Severity(str, Enum):
    """Severity of a validation issue."""
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


# ========== Records ==========

@dataclass(frozen=True)
class SourceInfo:
    """Attribution for a skill: the review comment it came from."""

    reference_id: str = ""
    author: str = ""
    date: str = ""
    file: str = ""

    def is_empty(self) -> bool:
        return not (self.reference_id or self.author or self.date or self.file)


@dataclass(frozen=True)
class CandidateRecord:
    """A skill produced by classifying a review comment.

    ``detail`` holds the anti-pattern or best-practice text; which one it is
    follows from ``category``.
    """

    title: str
    description: str
    instructions: str
    category: Category
    domain: str = "general"
    keywords: Tuple[str, ...] = ()
    detail: str = ""
    bad_example: str = ""
    good_example: str = ""
    source: Optional[SourceInfo] = None
    name: str = ""

    def attributions(self) -> Tuple[SourceInfo, ...]:
        """All sources attributed to this record, oldest first."""
        return (self.source,) if self.source is not None else ()


@dataclass(frozen=True)
class ExistingRecord(CandidateRecord):
    """A persisted skill. ``sources`` only ever grows, through merging."""

    path: str = ""
    sources: Tuple[SourceInfo, ...] = ()

    def attributions(self) -> Tuple[SourceInfo, ...]:
        return self.sources


# ========== Results ==========

@dataclass(frozen=True)
class ValidationIssue:
    """A single rule violation found in a skill document."""
    severity: Severity
    code: str
    message: str
    fix: str


@dataclass
class ValidationResult:
    """Outcome of validating one skill document."""
    issues: List[ValidationIssue] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        """True when no issue has error severity."""
        return self.errors == 0

    @property
    def errors(self) -> int:
        return self._count(Severity.ERROR)

    @property
    def warnings(self) -> int:
        return self._count(Severity.WARNING)

    @property
    def info(self) -> int:
        return self._count(Severity.INFO)

    def _count(self, severity: Severity) -> int:
        return sum(1 for issue in self.issues if issue.severity == severity)

    @property
    def summary(self) -> str:
        """One-line summary of the issue counts."""
        if not self.issues:
            return "Skill passes all validations"

        parts = []
        if self.errors:
            parts.append(f"{self.errors} error(s)")
        if self.warnings:
            parts.append(f"{self.warnings} warning(s)")
        if self.info:
            parts.append(f"{self.info} suggestion(s)")
        return f"Found {', '.join(parts)}"

    def codes(self) -> List[str]:
        return [issue.code for issue in self.issues]


@dataclass(frozen=True)
class SimilarMatch:
    """An existing record paired with its similarity to a candidate."""
    record: ExistingRecord
    score: float


@dataclass
class BuiltDocument:
    """Rendered skill: the main document plus split-off reference documents."""
    main_document: str
    reference_documents: Dict[str, str] = field(default_factory=dict)
