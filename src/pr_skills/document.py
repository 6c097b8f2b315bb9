"""Parsing of skill documents: frontmatter, sections and source metadata."""

import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

import yaml

from .exceptions import DocumentParseError
from .models import Category, ExistingRecord, SourceInfo


logger = logging.getLogger(__name__)

EXAMPLES_FILE = "EXAMPLES.md"
DETAILS_FILE = "DETAILS.md"
SOURCES_FILE = "SOURCES.md"

FRONTMATTER_PATTERN = re.compile(r"^---[ \t]*\n(.*?)\n---[ \t]*(?:\n|$)", re.DOTALL)
METADATA_BLOCK_PATTERN = re.compile(r"<!--\s*\nSource Metadata[^\n]*\n(.*?)-->", re.DOTALL)
ADDITIONAL_SOURCE_PATTERN = re.compile(
    r"^\s*-\s*PR #(?P<ref>\S*) by @(?P<author>\S*)"
    r"(?: on (?P<date>\S+))?(?: in (?P<file>.+))?\s*$"
)


@dataclass
class ParsedDocument:
    """A skill document split into frontmatter and body."""

    frontmatter: str
    body: str
    name: str
    description: str
    line_count: int
    has_frontmatter: bool


def count_lines(content: str) -> int:
    """Count lines the way the line limit is measured."""
    return len(content.split("\n"))


def _load_frontmatter(frontmatter: str) -> Dict[str, Any]:
    """Parse the frontmatter as YAML, reading raw ``key: value`` lines if it is not."""
    try:
        metadata = yaml.safe_load(frontmatter)
        if isinstance(metadata, dict):
            return metadata
    except yaml.YAMLError as e:
        logger.debug(f"Frontmatter is not valid YAML, reading fields line by line: {e}")

    return {
        key: value.strip()
        for key, value in re.findall(r"^([\w-]+):[ \t]*(.*)$", frontmatter, re.MULTILINE)
    }


def _field(metadata: Dict[str, Any], key: str) -> str:
    value = metadata.get(key)
    return "" if value is None else str(value).strip()


def parse_document(content: str) -> ParsedDocument:
    """Split a skill document into its frontmatter fields and body.

    A document without a frontmatter block yields empty name and
    description rather than an error.
    """
    match = FRONTMATTER_PATTERN.match(content)
    frontmatter = match.group(1) if match else ""
    body = content[match.end():].lstrip("\n") if match else content
    metadata = _load_frontmatter(frontmatter) if match else {}

    return ParsedDocument(
        frontmatter=frontmatter,
        body=body,
        name=_field(metadata, "name"),
        description=_field(metadata, "description"),
        line_count=count_lines(content),
        has_frontmatter=match is not None,
    )


def parse_document_strict(content: str) -> ParsedDocument:
    """Like :func:`parse_document`, but require a frontmatter block.

    Raises:
        DocumentParseError: If no frontmatter block is found
    """
    parsed = parse_document(content)
    if not parsed.has_frontmatter:
        raise DocumentParseError("Document has no frontmatter block")
    return parsed


def _section(body: str, heading: str) -> str:
    """Return the text under a second-level heading, up to the next one."""
    pattern = rf"^## {re.escape(heading)}[ \t]*\n(.*?)(?=^## |^<!--|\Z)"
    match = re.search(pattern, body, re.MULTILINE | re.DOTALL)
    return match.group(1).strip() if match else ""


def _example(body: str, heading: str, level: str = "###") -> str:
    pattern = rf"^{level} {heading}[ \t]*\n+```[^\n]*\n(.*?)\n```"
    match = re.search(pattern, body, re.MULTILINE | re.DOTALL)
    return match.group(1) if match else ""


def _listed_source(line: str) -> Optional[SourceInfo]:
    item = ADDITIONAL_SOURCE_PATTERN.match(line)
    if not item:
        return None
    return SourceInfo(
        reference_id=item.group("ref"),
        author="" if item.group("author") == "unknown" else item.group("author"),
        date=item.group("date") or "",
        file=(item.group("file") or "").strip(),
    )


def parse_sources_document(content: str) -> List[SourceInfo]:
    """Recover the earlier attributions listed in a sources reference document."""
    return [s for s in map(_listed_source, content.splitlines()) if s is not None]


def parse_source_metadata(content: str) -> List[SourceInfo]:
    """Recover attributions from the trailing metadata comment.

    Returns:
        Sources oldest first: the additional sources, then the primary one
    """
    match = METADATA_BLOCK_PATTERN.search(content)
    if not match:
        return []

    primary = {"reference_id": "", "author": "", "date": "", "file": ""}
    additional: List[SourceInfo] = []
    in_additional = False

    for line in match.group(1).splitlines():
        if in_additional:
            item = _listed_source(line)
            if item is not None:
                additional.append(item)
                continue
            in_additional = False

        key, _, value = line.partition(":")
        value = value.strip()
        if key == "PR":
            primary["reference_id"] = value.lstrip("#")
        elif key == "Author":
            primary["author"] = value.lstrip("@")
        elif key == "Date":
            primary["date"] = value
        elif key == "File":
            primary["file"] = value
        elif key == "Additional sources":
            in_additional = True

    sources = list(additional)
    current = SourceInfo(**primary)
    if not current.is_empty():
        sources.append(current)
    return sources


def parse_keywords(content: str) -> List[str]:
    """Recover the keyword list stored in the metadata comment."""
    match = METADATA_BLOCK_PATTERN.search(content)
    if not match:
        return []
    keywords = re.search(r"^Keywords:[ \t]*(.*)$", match.group(1), re.MULTILINE)
    if not keywords:
        return []
    return [k.strip() for k in keywords.group(1).split(",") if k.strip()]


def parse_existing_record(
    content: str,
    path: str = "",
    domain: str = "general",
    category: Optional[Category] = None,
    references: Optional[Mapping[str, str]] = None,
) -> ExistingRecord:
    """Rebuild a record from a persisted skill document.

    Args:
        content: Skill document text
        path: Where the document is stored
        domain: Domain the document is filed under
        category: Category the document is filed under; inferred from its
            sections when omitted
        references: Reference documents stored beside it, by filename;
            examples, details and earlier sources moved there are read back

    Returns:
        ExistingRecord with the fields the document carries
    """
    parsed = parse_document(content)
    body = parsed.body

    title = re.search(r"^#[ \t]+(.+)$", body, re.MULTILINE)
    instructions = _section(body, "Instructions") or _section(body, "Overview")

    if category is None:
        if re.search(r"^## Anti-Pattern", body, re.MULTILINE):
            category = Category.ANTI_PATTERN
        elif re.search(r"^## Best Practice", body, re.MULTILINE):
            category = Category.BEST_PRACTICE
        else:
            category = Category.NEUTRAL

    references = references or {}
    detail = _section(body, category.section_title) if category != Category.NEUTRAL else ""
    if not detail and DETAILS_FILE in references:
        detail = re.sub(r"\A#[^\n]*\n+", "", references[DETAILS_FILE]).strip()

    bad_example = _example(body, "Bad")
    good_example = _example(body, "Good")
    if EXAMPLES_FILE in references:
        bad_example = bad_example or _example(references[EXAMPLES_FILE], "Bad Example", "##")
        good_example = good_example or _example(references[EXAMPLES_FILE], "Good Example", "##")

    sources = parse_source_metadata(content)
    if SOURCES_FILE in references:
        sources = parse_sources_document(references[SOURCES_FILE]) + sources

    return ExistingRecord(
        title=title.group(1).strip() if title else "",
        description=parsed.description,
        instructions=instructions,
        category=category,
        domain=domain,
        keywords=tuple(parse_keywords(content)),
        detail=detail,
        bad_example=bad_example,
        good_example=good_example,
        source=sources[-1] if sources else None,
        name=parsed.name,
        path=path,
        sources=tuple(sources),
    )
