"""Rendering of skill records into Markdown skill documents.

Long skills are split with progressive disclosure: the main document keeps
a short overview and links to reference documents holding the examples and
the detailed guidance.
"""

import logging
import re
from typing import List, Optional

import yaml

from .config import SkillRules
from .document import DETAILS_FILE, EXAMPLES_FILE, SOURCES_FILE, count_lines
from .models import BuiltDocument, CandidateRecord, Category, SourceInfo
from .normalizer import Normalizer
from .validator import has_usage_context


logger = logging.getLogger(__name__)

CONCISE_REPLACEMENTS = [
    (re.compile(r"\b(basically|essentially|simply|just)\b\s*", re.IGNORECASE), ""),
    (re.compile(r"first,?\s*you('ll| will) need to\s*", re.IGNORECASE), ""),
    (re.compile(r"there are many (options|ways|approaches) (to|for)\s*", re.IGNORECASE), ""),
    (re.compile(r"this (is|means|allows)\s+", re.IGNORECASE), ""),
]


def make_concise(text: str) -> str:
    """Drop filler phrases and collapse whitespace."""
    if not text:
        return ""
    for pattern, replacement in CONCISE_REPLACEMENTS:
        text = pattern.sub(replacement, text)
    return re.sub(r"\s+", " ", text).strip()


def _one_line(text: str) -> str:
    return re.sub(r"\s+", " ", text or "").strip()


def _code_block(code: str) -> str:
    return f"```\n{code.strip()}\n```\n\n"


def _source_line(item: SourceInfo) -> str:
    line = f"- PR #{item.reference_id} by @{item.author or 'unknown'}"
    if item.date:
        line += f" on {item.date}"
    if item.file:
        line += f" in {item.file}"
    return line


class DocumentBuilder:
    """Render skill records as skill documents."""

    def __init__(self, rules: Optional[SkillRules] = None, normalizer: Optional[Normalizer] = None):
        """Initialize document builder.

        Args:
            rules: Line, length and split limits; defaults apply when omitted
            normalizer: Name normalizer; one using ``rules`` is created when omitted
        """
        self.rules = rules or SkillRules()
        self.normalizer = normalizer or Normalizer(self.rules)

    def build(self, record: CandidateRecord, source: Optional[SourceInfo] = None) -> BuiltDocument:
        """Render a record, splitting it when it exceeds the line limit.

        Args:
            record: Skill to render (new or merged)
            source: Attribution for this revision; defaults to ``record.source``

        Returns:
            BuiltDocument with the main document and any reference documents
        """
        if source is None:
            source = record.source

        name = self.normalizer.resolve(record.name, record.title)
        description = self.enhance_description(
            record.description or record.title, record.category, record.domain
        )

        content = self._render_full(record, name, description, source)
        line_count = count_lines(content)
        if line_count <= self.rules.max_skill_lines:
            return BuiltDocument(main_document=content)

        logger.info(
            f"Skill '{name}' exceeds {self.rules.max_skill_lines} lines ({line_count}), "
            f"applying progressive disclosure"
        )
        return self._render_split(record, name, description, source)

    def enhance_description(self, description: str, category: Category, domain: str = "general") -> str:
        """Single-line description with usage context, within the length limit."""
        text = _one_line(description)
        if not has_usage_context(text):
            clause = self._usage_clause(category, domain)
            if clause and text and not text.endswith((".", "!", "?")):
                text += "."
            text = f"{text} {clause}".strip()

        limit = self.rules.max_description_length
        if len(text) > limit:
            text = text[:limit - 3] + "..."
        return text

    @staticmethod
    def _usage_clause(category: Category, domain: str) -> str:
        domain_context = f" in {domain.upper()} codebase" if domain and domain != "general" else ""
        if category == Category.ANTI_PATTERN:
            return f"Use when reviewing code{domain_context} to avoid this pattern."
        if category == Category.BEST_PRACTICE:
            return f"Use when implementing similar functionality{domain_context}."
        return ""

    @staticmethod
    def _frontmatter(name: str, description: str) -> str:
        fields = yaml.safe_dump(
            {"name": name, "description": description},
            sort_keys=False,
            allow_unicode=True,
            width=float("inf"),
        )
        return f"---\n{fields}---\n\n"

    def _render_full(
        self,
        record: CandidateRecord,
        name: str,
        description: str,
        source: Optional[SourceInfo],
    ) -> str:
        content = self._frontmatter(name, description)
        content += f"# {_one_line(record.title)}\n\n"

        content += "## Instructions\n\n"
        content += f"{make_concise(record.instructions)}\n\n"

        if record.detail and record.category != Category.NEUTRAL:
            content += f"## {record.category.section_title}\n\n"
            content += f"{make_concise(record.detail)}\n\n"

        if record.bad_example or record.good_example:
            content += "## Examples\n\n"
            if record.bad_example:
                content += "### Bad\n\n" + _code_block(record.bad_example)
            if record.good_example:
                content += "### Good\n\n" + _code_block(record.good_example)

        content += self.build_source_metadata(record, source)
        return content

    def _render_split(
        self,
        record: CandidateRecord,
        name: str,
        description: str,
        source: Optional[SourceInfo],
    ) -> BuiltDocument:
        references = {}

        content = self._frontmatter(name, description)
        content += f"# {_one_line(record.title)}\n\n"
        content += "## Overview\n\n"
        content += f"{make_concise(record.instructions)}\n\n"

        if record.bad_example or record.good_example:
            references[EXAMPLES_FILE] = self.build_examples_document(record)
            content += f"## Examples\n\nSee [{EXAMPLES_FILE}]({EXAMPLES_FILE}) for code examples.\n\n"

        section = record.category.section_title
        if record.detail and record.category != Category.NEUTRAL:
            if len(record.detail) > self.rules.detail_split_chars:
                references[DETAILS_FILE] = self.build_details_document(record)
                content += (
                    f"## {section} Details\n\n"
                    f"See [{DETAILS_FILE}]({DETAILS_FILE}) for detailed guidance.\n\n"
                )
            else:
                content += f"## {section}\n\n{make_concise(record.detail)}\n\n"

        prior = self.prior_sources(record, source)
        if prior:
            references[SOURCES_FILE] = self.build_sources_document(prior)
        content += self.build_source_metadata(record, source, SOURCES_FILE if prior else None)
        return BuiltDocument(main_document=content, reference_documents=references)

    @staticmethod
    def build_examples_document(record: CandidateRecord) -> str:
        """Build the examples reference document."""
        content = "# Examples\n\n"
        if record.bad_example:
            content += "## Bad Example\n\n" + _code_block(record.bad_example)
        if record.good_example:
            content += "## Good Example\n\n" + _code_block(record.good_example)
        return content

    @staticmethod
    def build_details_document(record: CandidateRecord) -> str:
        """Build the detailed guidance reference document."""
        return f"# {record.category.section_title} Details\n\n{record.detail.strip()}\n"

    @staticmethod
    def prior_sources(record: CandidateRecord, source: Optional[SourceInfo]) -> List[SourceInfo]:
        """Attributions of the record other than ``source``, oldest first, empty ones dropped."""
        prior: List[SourceInfo] = list(record.attributions())
        if source is not None and source in prior:
            # current revision is the last matching attribution
            del prior[len(prior) - 1 - prior[::-1].index(source)]
        return [s for s in prior if not s.is_empty()]

    @staticmethod
    def build_sources_document(prior: List[SourceInfo]) -> str:
        """Build the reference document listing earlier attributions."""
        return "# Sources\n\n" + "".join(f"{_source_line(item)}\n" for item in prior)

    def build_source_metadata(
        self,
        record: CandidateRecord,
        source: Optional[SourceInfo],
        sources_file: Optional[str] = None,
    ) -> str:
        """Build the trailing comment block holding attribution metadata.

        The primary source is the one for this revision; every other
        attribution of the record is listed under "Additional sources",
        or named by ``sources_file`` when the list lives in a reference
        document.
        """
        metadata = "\n<!--\nSource Metadata:\n"
        if source is not None:
            if source.reference_id:
                metadata += f"PR: #{source.reference_id}\n"
            if source.author:
                metadata += f"Author: @{source.author}\n"
            if source.date:
                metadata += f"Date: {source.date}\n"
            if source.file:
                metadata += f"File: {source.file}\n"
        if record.keywords:
            metadata += f"Keywords: {', '.join(record.keywords)}\n"

        if sources_file:
            metadata += f"Additional sources: {sources_file}\n"
        else:
            prior = self.prior_sources(record, source)
            if prior:
                metadata += "Additional sources:\n"
                metadata += "".join(f"  {_source_line(item)}\n" for item in prior)
        metadata += "-->\n"
        return metadata
