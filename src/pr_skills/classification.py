"""Classification results for review comments.

The LLM call itself happens outside this package. This module parses its
JSON answer, provides the keyword-based fallback used when that call fails,
and detects the domain a comment belongs to.
"""

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence

from .exceptions import ClassificationParseError
from .models import CandidateRecord, Category, SourceInfo


logger = logging.getLogger(__name__)


ANTI_PATTERN_KEYWORDS = [
    "avoid", "don't", "never", "should not", "shouldn't",
    "wrong", "incorrect", "bad", "anti-pattern", "antipattern",
    "problem", "issue", "bug", "error", "fix", "remove",
]

BEST_PRACTICE_KEYWORDS = [
    "should", "prefer", "recommend", "good", "best", "better",
    "correct", "proper", "use", "implement", "follow", "pattern",
]

FALLBACK_CONFIDENCE = 0.3


@dataclass
class ClassificationResult:
    """Classification of one review comment, as returned by the LLM."""

    category: Category
    confidence: float
    skill_name: str = ""
    title: str = "Untitled Skill"
    description: str = ""
    instructions: str = ""
    anti_pattern: str = ""
    best_practice: str = ""
    bad_example: str = ""
    good_example: str = ""
    domain: str = "general"
    keywords: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ClassificationResult":
        """Build a result from the JSON payload, filling in defaults."""
        keywords = data.get("keywords") or []
        if isinstance(keywords, str):
            keywords = [k.strip() for k in keywords.split(",")]

        raw_confidence = data.get("confidence")
        try:
            confidence = 0.5 if raw_confidence is None else float(raw_confidence)
        except (TypeError, ValueError):
            confidence = 0.5

        return cls(
            category=Category.parse(data.get("category")),
            confidence=confidence,
            skill_name=data.get("skillName") or "",
            title=data.get("title") or "Untitled Skill",
            description=data.get("description") or "",
            instructions=data.get("instructions") or "",
            anti_pattern=data.get("antiPattern") or "",
            best_practice=data.get("bestPractice") or "",
            bad_example=data.get("badExample") or "",
            good_example=data.get("goodExample") or "",
            domain=data.get("domain") or "general",
            keywords=[str(k) for k in keywords if k],
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize back to the JSON payload shape."""
        return {
            "category": self.category.value,
            "confidence": self.confidence,
            "skillName": self.skill_name,
            "title": self.title,
            "description": self.description,
            "instructions": self.instructions,
            "antiPattern": self.anti_pattern,
            "bestPractice": self.best_practice,
            "badExample": self.bad_example,
            "goodExample": self.good_example,
            "domain": self.domain,
            "keywords": list(self.keywords),
        }

    def is_actionable(self, min_confidence: float) -> bool:
        """Check if this result should become a skill."""
        return self.category != Category.NEUTRAL and self.confidence >= min_confidence

    @property
    def detail(self) -> str:
        """The anti-pattern or best-practice text matching the category."""
        if self.category == Category.ANTI_PATTERN:
            return self.anti_pattern
        if self.category == Category.BEST_PRACTICE:
            return self.best_practice
        return ""

    def to_candidate(self, source: Optional[SourceInfo] = None, domain: Optional[str] = None) -> CandidateRecord:
        """Convert to a candidate record.

        Args:
            source: Attribution of the comment
            domain: Domain overriding the classified one

        Returns:
            CandidateRecord for matching and building
        """
        seen = set()
        keywords = []
        for keyword in self.keywords:
            if keyword not in seen:
                seen.add(keyword)
                keywords.append(keyword)

        return CandidateRecord(
            title=self.title,
            description=self.description,
            instructions=self.instructions,
            category=self.category,
            domain=domain or self.domain or "general",
            keywords=tuple(keywords),
            detail=self.detail,
            bad_example=self.bad_example,
            good_example=self.good_example,
            source=source,
            name=self.skill_name,
        )


def parse_classification_response(response_text: str) -> ClassificationResult:
    """Parse the LLM answer, tolerating a surrounding Markdown code fence.

    Raises:
        ClassificationParseError: If the answer is not a JSON object
    """
    json_text = (response_text or "").strip()
    if json_text.startswith("```"):
        match = re.search(r"```(?:json)?\s*\n(.*?)\n\s*```", json_text, re.DOTALL)
        if match:
            json_text = match.group(1)

    try:
        parsed = json.loads(json_text)
    except json.JSONDecodeError as e:
        raise ClassificationParseError(f"Invalid classification response: {e}") from e

    if not isinstance(parsed, dict):
        raise ClassificationParseError("Classification response must be a JSON object")

    return ClassificationResult.from_dict(parsed)


def fallback_classification(comment_body: str) -> ClassificationResult:
    """Categorize a comment by keyword matching.

    Used when the LLM is unavailable. A comment matching both or neither
    keyword list is neutral.
    """
    lower_body = (comment_body or "").lower()

    has_anti_pattern = any(kw in lower_body for kw in ANTI_PATTERN_KEYWORDS)
    has_best_practice = any(kw in lower_body for kw in BEST_PRACTICE_KEYWORDS)

    category = Category.NEUTRAL
    if has_anti_pattern and not has_best_practice:
        category = Category.ANTI_PATTERN
    elif has_best_practice and not has_anti_pattern:
        category = Category.BEST_PRACTICE

    words = [w for w in re.split(r"\s+", re.sub(r"[^\w\s]", " ", lower_body)) if len(w) > 3][:4]
    skill_name = "-".join(words)

    logger.info(f"Fallback classification: {category.value} ({skill_name})")

    return ClassificationResult(
        category=category,
        confidence=FALLBACK_CONFIDENCE,
        skill_name=skill_name,
        title=comment_body[:50],
        description=comment_body[:200],
        instructions=comment_body,
        anti_pattern=comment_body if category == Category.ANTI_PATTERN else "",
        best_practice=comment_body if category == Category.BEST_PRACTICE else "",
        domain="general",
        keywords=words,
    )


def detect_domain(file_path: str, content: str, domain_hints: Mapping[str, Sequence[str]]) -> str:
    """Pick the first domain whose hint words occur in the path or content.

    Args:
        file_path: Path of the file the comment is on
        content: Comment text
        domain_hints: Domain name -> hint words, checked in order

    Returns:
        Domain name, or "general"
    """
    lower_path = (file_path or "").lower()
    lower_content = (content or "").lower()

    for domain, hints in domain_hints.items():
        if any(hint in lower_path or hint in lower_content for hint in hints):
            return domain
    return "general"
