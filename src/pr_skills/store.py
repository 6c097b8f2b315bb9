"""Skill store backed by a directory tree of SKILL.md files."""

import logging
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

from .document import DETAILS_FILE, EXAMPLES_FILE, SOURCES_FILE, parse_existing_record
from .models import BuiltDocument, Category, ExistingRecord
from .pipeline import SKILL_FILE, SkillStore


logger = logging.getLogger(__name__)

REFERENCE_FILES = (EXAMPLES_FILE, DETAILS_FILE, SOURCES_FILE)

FOLDER_CATEGORIES = {category.folder: category for category in (Category.ANTI_PATTERN, Category.BEST_PRACTICE)}


class DirectorySkillStore(SkillStore):
    """Skills laid out as ``<domain>/<category-folder>/<name>/SKILL.md`` below a root."""

    def __init__(self, root: Union[str, Path]):
        """Initialize directory skill store.

        Args:
            root: Directory holding the skill tree; created on first save
        """
        self.root = Path(root)

    def load_corpus(self) -> List[ExistingRecord]:
        """Parse every SKILL.md below the root, with the reference documents beside it."""
        if not self.root.is_dir():
            return []

        records = []
        for skill_file in sorted(self.root.rglob(SKILL_FILE)):
            relative = skill_file.relative_to(self.root)
            domain, category = self._classify(relative)
            try:
                content = skill_file.read_text(encoding="utf-8")
                references = self._read_references(skill_file.parent)
            except (OSError, UnicodeDecodeError) as e:
                logger.warning(f"Skipping unreadable skill {skill_file}: {e}")
                continue

            records.append(parse_existing_record(
                content,
                path=relative.as_posix(),
                domain=domain,
                category=category,
                references=references,
            ))

        logger.debug(f"Loaded {len(records)} skills from {self.root}")
        return records

    def save(self, path: str, document: BuiltDocument) -> None:
        """Write the main document at ``path`` and replace its reference documents.

        Raises:
            OSError: If the files cannot be written
        """
        skill_file = self.root / path
        skill_file.parent.mkdir(parents=True, exist_ok=True)
        skill_file.write_text(document.main_document, encoding="utf-8")

        for filename in REFERENCE_FILES:
            reference = skill_file.parent / filename
            if filename in document.reference_documents:
                reference.write_text(document.reference_documents[filename], encoding="utf-8")
            elif reference.exists():
                # left over from an earlier split rendering
                reference.unlink()

    @staticmethod
    def _classify(relative: Path) -> Tuple[str, Optional[Category]]:
        """Domain and category implied by a skill's place in the tree."""
        parts = relative.parts
        if len(parts) < 4:
            return "general", None
        return parts[-4], FOLDER_CATEGORIES.get(parts[-3])

    @staticmethod
    def _read_references(directory: Path) -> Dict[str, str]:
        return {
            filename: (directory / filename).read_text(encoding="utf-8")
            for filename in REFERENCE_FILES
            if (directory / filename).is_file()
        }
