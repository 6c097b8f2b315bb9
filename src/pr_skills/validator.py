"""Skill validation against the skill authoring rules.

Every rule is a row in a table: a predicate over the parsed document, the
issue it raises and a fix suggestion. All rules are evaluated and their
issues are reported in table order.
"""

import logging
import re
from dataclasses import dataclass
from typing import Callable, List, Optional, Union

from .config import SkillRules
from .document import ParsedDocument, parse_document
from .models import Severity, ValidationIssue, ValidationResult


logger = logging.getLogger(__name__)


# ========== Patterns ==========

GERUND_WHITELIST = ("setting-up", "working-with")

PERSON_PATTERNS = [
    re.compile(r"\bI\s+(can|will|help|am|have)\b", re.IGNORECASE),
    re.compile(r"\byou\s+(can|will|should|could|may|might|are|have)\b", re.IGNORECASE),
    re.compile(r"\bwe\s+(can|will|should|are|have)\b", re.IGNORECASE),
    re.compile(r"\bhelps? you\b", re.IGNORECASE),
]

USAGE_CONTEXT_PATTERNS = [
    re.compile(r"\buse when\b", re.IGNORECASE),
    re.compile(r"\buse for\b", re.IGNORECASE),
    re.compile(r"\bwhen (working|dealing|processing|handling)\b", re.IGNORECASE),
    re.compile(r"\bfor (working|dealing|processing|handling)\b", re.IGNORECASE),
    re.compile(r"\bif (the user|you need|working)\b", re.IGNORECASE),
]

TIME_SENSITIVE_PATTERNS = [
    re.compile(r"before \w+ \d{4}", re.IGNORECASE),
    re.compile(r"after \w+ \d{4}", re.IGNORECASE),
    re.compile(r"starting \w+ \d{4}", re.IGNORECASE),
    re.compile(r"until \w+ \d{4}", re.IGNORECASE),
    re.compile(r"as of \d{4}", re.IGNORECASE),
]

WINDOWS_PATH_PATTERN = re.compile(r"[a-zA-Z]:\\|\\[a-zA-Z]+\\")
SECTION_PATTERN = re.compile(r"^##[ \t]+\S", re.MULTILINE)
REFERENCE_PATTERN = re.compile(r"See \[.*?\]\((.*?)\)")
MARKUP_PATTERN = re.compile(r"<[^>]+>")
NAME_CHARSET_PATTERN = re.compile(r"^[a-z0-9-]+$")

# (pattern, minimum occurrences, message)
VERBOSE_PATTERNS = [
    (re.compile(r"there are many (libraries|options|ways)", re.IGNORECASE), 1,
     "Avoid listing multiple options - provide a default"),
    (re.compile(r"first,? you('ll| will) need to", re.IGNORECASE), 1,
     "Remove step-by-step explanations of obvious actions"),
    (re.compile(r"this (is|means|allows)", re.IGNORECASE), 5,
     "Excessive explanatory phrases detected"),
    (re.compile(r"\b(basically|essentially|simply|just)\b", re.IGNORECASE), 3,
     "Remove filler words"),
]

COMMON_CONCEPTS = ("pdf", "json", "api", "http", "database", "function", "class")


def has_usage_context(text: str) -> bool:
    """Check if text says when to use the skill."""
    return any(p.search(text) for p in USAGE_CONTEXT_PATTERNS)


def is_first_or_second_person(text: str) -> bool:
    """Check if text is written in first or second person."""
    return any(p.search(text) for p in PERSON_PATTERNS)


def is_gerund_form(name: str) -> bool:
    """Check if a name leads with a gerund."""
    first_word = name.split("-")[0]
    return first_word.endswith("ing") or any(name.startswith(g) for g in GERUND_WHITELIST)


def find_nested_references(body: str) -> List[str]:
    """Return reference link targets nested more than one directory deep."""
    return [
        target for target in REFERENCE_PATTERN.findall(body)
        if "/" in target and len(target.split("/")) > 2
    ]


def find_explained_concept(body: str) -> Optional[str]:
    """Return the first well-known concept the body explains at length."""
    for concept in COMMON_CONCEPTS:
        pattern = re.compile(rf"\b{concept}[^.]*is a[^.]*that[^.]*\.", re.IGNORECASE)
        if pattern.search(body):
            return concept
    return None


# ========== Rule Table ==========

@dataclass(frozen=True)
class ValidationRule:
    """A single check: predicate, issue code, severity, message and fix."""

    code: str
    severity: Severity
    predicate: Callable[[ParsedDocument], bool]
    message: Union[str, Callable[[ParsedDocument], str]]
    fix: str

    def check(self, document: ParsedDocument) -> Optional[ValidationIssue]:
        if not self.predicate(document):
            return None
        message = self.message(document) if callable(self.message) else self.message
        return ValidationIssue(
            severity=self.severity,
            code=self.code,
            message=message,
            fix=self.fix,
        )


class SkillValidator:
    """Validate skill documents and report issues with fix suggestions."""

    def __init__(self, rules: Optional[SkillRules] = None):
        """Initialize skill validator.

        Args:
            rules: Limits to validate against; defaults apply when omitted
        """
        self.rules = rules or SkillRules()
        self.rule_table = self._build_rules()

    def _build_rules(self) -> List[ValidationRule]:
        limits = self.rules
        reserved = limits.reserved_words

        def reserved_word(doc: ParsedDocument) -> Optional[str]:
            return next((w for w in reserved if w in doc.name), None)

        def verbose_rule(pattern: "re.Pattern", threshold: int, message: str) -> ValidationRule:
            return ValidationRule(
                code="VERBOSE_CONTENT",
                severity=Severity.INFO,
                predicate=lambda doc: len(pattern.findall(doc.body)) >= threshold,
                message=message,
                fix="Assume the model already knows common patterns - be more concise",
            )

        table = [
            # Frontmatter: name
            ValidationRule(
                "MISSING_NAME", Severity.ERROR,
                lambda doc: not doc.name,
                "Skill must have a name field in frontmatter",
                'Add "name: your-skill-name" to the YAML frontmatter',
            ),
            ValidationRule(
                "NAME_TOO_LONG", Severity.ERROR,
                lambda doc: len(doc.name) > limits.max_name_length,
                lambda doc: f"Name exceeds {limits.max_name_length} characters ({len(doc.name)})",
                f"Shorten the name to {limits.max_name_length} characters or less",
            ),
            ValidationRule(
                "INVALID_NAME_FORMAT", Severity.ERROR,
                lambda doc: bool(doc.name) and not NAME_CHARSET_PATTERN.match(doc.name),
                "Name must contain only lowercase letters, numbers, and hyphens",
                'Use kebab-case with lowercase letters: "my-skill-name"',
            ),
            ValidationRule(
                "RESERVED_WORD", Severity.ERROR,
                lambda doc: bool(doc.name) and reserved_word(doc) is not None,
                lambda doc: f"Name contains reserved word: {reserved_word(doc)}",
                f"Remove {', '.join(repr(w) for w in reserved)} from the skill name",
            ),
            ValidationRule(
                "NON_GERUND_NAME", Severity.WARNING,
                lambda doc: bool(doc.name) and not is_gerund_form(doc.name),
                "Skill name should use gerund form (verb + -ing)",
                'Rename to gerund form: e.g., "avoiding-x" instead of "avoid-x"',
            ),
            # Frontmatter: description
            ValidationRule(
                "MISSING_DESCRIPTION", Severity.ERROR,
                lambda doc: not doc.description,
                "Skill must have a description field in frontmatter",
                'Add "description: Your skill description" to the YAML frontmatter',
            ),
            ValidationRule(
                "DESCRIPTION_TOO_LONG", Severity.ERROR,
                lambda doc: len(doc.description) > limits.max_description_length,
                lambda doc: (
                    f"Description exceeds {limits.max_description_length} characters "
                    f"({len(doc.description)})"
                ),
                f"Shorten the description to {limits.max_description_length} characters or less",
            ),
            ValidationRule(
                "XML_IN_DESCRIPTION", Severity.ERROR,
                lambda doc: bool(MARKUP_PATTERN.search(doc.description)),
                "Description cannot contain XML tags",
                "Remove any XML/HTML tags from the description",
            ),
            ValidationRule(
                "NON_THIRD_PERSON", Severity.WARNING,
                lambda doc: bool(doc.description) and is_first_or_second_person(doc.description),
                "Description should be written in third person",
                'Rewrite to third person: "Processes files..." not "I process files..." '
                'or "You can process..."',
            ),
            ValidationRule(
                "MISSING_WHEN_TO_USE", Severity.WARNING,
                lambda doc: bool(doc.description) and not has_usage_context(doc.description),
                "Description should include when to use the skill",
                'Add context: "...Use when working with X" or "Use for Y scenarios"',
            ),
            # Content
            ValidationRule(
                "TOO_MANY_LINES", Severity.WARNING,
                lambda doc: doc.line_count > limits.max_skill_lines,
                lambda doc: (
                    f"Skill exceeds recommended {limits.max_skill_lines} lines ({doc.line_count})"
                ),
                "Split content into separate reference files using progressive disclosure",
            ),
            ValidationRule(
                "TIME_SENSITIVE_INFO", Severity.WARNING,
                lambda doc: any(p.search(doc.body) for p in TIME_SENSITIVE_PATTERNS),
                "Content contains time-sensitive information",
                'Move time-sensitive info to an "old patterns" section or remove it',
            ),
            ValidationRule(
                "WINDOWS_PATHS", Severity.WARNING,
                lambda doc: bool(WINDOWS_PATH_PATTERN.search(doc.body)),
                "Content contains Windows-style paths",
                "Use forward slashes for cross-platform compatibility",
            ),
            # Structure
            ValidationRule(
                "NO_SECTIONS", Severity.WARNING,
                lambda doc: not SECTION_PATTERN.search(doc.body),
                "Skill should have structured sections",
                'Add sections like "## Instructions", "## Examples"',
            ),
            ValidationRule(
                "DEEPLY_NESTED_REFS", Severity.WARNING,
                lambda doc: bool(find_nested_references(doc.body)),
                lambda doc: (
                    "References should be one level deep from SKILL.md: "
                    + ", ".join(find_nested_references(doc.body))
                ),
                "Keep all reference files directly accessible from SKILL.md",
            ),
        ]

        # Conciseness
        table.extend(verbose_rule(p, n, m) for p, n, m in VERBOSE_PATTERNS)
        table.append(ValidationRule(
            "UNNECESSARY_EXPLANATION", Severity.INFO,
            lambda doc: find_explained_concept(doc.body) is not None,
            lambda doc: (
                f'Unnecessary explanation of "{find_explained_concept(doc.body)}" '
                f"- it is a well-known concept"
            ),
            "Remove explanations of well-known concepts",
        ))

        return table

    def validate(self, document: ParsedDocument) -> ValidationResult:
        """Run every rule over a parsed document.

        Args:
            document: Parsed skill document

        Returns:
            ValidationResult with the issues in rule order
        """
        issues = []
        for rule in self.rule_table:
            issue = rule.check(document)
            if issue is not None:
                issues.append(issue)

        result = ValidationResult(issues=issues)
        logger.debug(f"Validated '{document.name or '<unnamed>'}': {result.summary}")
        return result

    def validate_content(self, content: str) -> ValidationResult:
        """Parse and validate skill document text."""
        return self.validate(parse_document(content))
