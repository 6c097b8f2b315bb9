"""Turn a classified review comment into a new or merged skill document."""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import List, Optional, Sequence

from .builder import DocumentBuilder
from .classification import ClassificationResult, detect_domain
from .config import ClassificationSettings, SkillRules
from .document import parse_document
from .models import BuiltDocument, CandidateRecord, ExistingRecord, SourceInfo, ValidationResult
from .normalizer import Normalizer
from .similarity import SimilarityMatcher
from .validator import SkillValidator


logger = logging.getLogger(__name__)

SKILL_FILE = "SKILL.md"

ISSUE_ICONS = {"error": "❌", "warning": "⚠️", "info": "ℹ️"}


class SkillStore(ABC):
    """Where skills are read from and written to."""

    @abstractmethod
    def load_corpus(self) -> List[ExistingRecord]:
        """Return every persisted skill."""
        raise NotImplementedError

    @abstractmethod
    def save(self, path: str, document: BuiltDocument) -> None:
        """Persist a main document (at ``path``) and its reference documents."""
        raise NotImplementedError


@dataclass
class ExtractionOutcome:
    """What happened to one classified comment."""

    action: str  # 'skipped', 'created', 'merged'
    reason: str = ""
    name: str = ""
    path: str = ""
    document: Optional[BuiltDocument] = None
    validation: Optional[ValidationResult] = None
    merge_score: Optional[float] = None

    @property
    def skipped(self) -> bool:
        return self.action == "skipped"

    @property
    def is_new(self) -> bool:
        return self.action == "created"


class SkillExtractor:
    """Match, merge, build and validate skills from classification results."""

    def __init__(
        self,
        rules: Optional[SkillRules] = None,
        settings: Optional[ClassificationSettings] = None,
    ):
        """Initialize skill extractor.

        Args:
            rules: Naming, similarity and size rules
            settings: Confidence threshold and domain hints
        """
        self.rules = rules or SkillRules()
        self.settings = settings or ClassificationSettings()
        self.normalizer = Normalizer(self.rules)
        self.matcher = SimilarityMatcher(self.rules)
        self.builder = DocumentBuilder(self.rules, self.normalizer)
        self.validator = SkillValidator(self.rules)

    def skill_path(self, record: CandidateRecord, name: str) -> str:
        """Relative path of a new skill: domain/category-folder/name/SKILL.md."""
        return str(PurePosixPath(record.domain or "general", record.category.folder, name, SKILL_FILE))

    def extract(
        self,
        result: ClassificationResult,
        source: SourceInfo,
        corpus: Sequence[ExistingRecord],
        comment_body: str = "",
    ) -> ExtractionOutcome:
        """Build the skill for one classification result.

        Args:
            result: Classification of the comment
            source: Attribution of the comment
            corpus: Existing skills to deduplicate against
            comment_body: Comment text, used for domain detection

        Returns:
            ExtractionOutcome; ``skipped`` when the result is not actionable
        """
        if not result.is_actionable(self.settings.min_confidence):
            reason = (
                f"categorized as {result.category.value} "
                f"with confidence {result.confidence}"
            )
            logger.info(f"Comment {reason}, skipping skill creation")
            return ExtractionOutcome(action="skipped", reason=reason)

        domain = result.domain
        if not domain or domain == "general":
            domain = detect_domain(source.file, comment_body, self.settings.domain_hints)

        candidate = result.to_candidate(source, domain=domain)
        matches = self.matcher.find_similar(candidate, corpus)

        target: Optional[ExistingRecord] = None
        score: Optional[float] = None
        if matches:
            target, score = matches[0].record, matches[0].score
            logger.info(f"Merging with existing skill: {target.path} (similarity {score:.2f})")
        else:
            new_path = self.skill_path(candidate, self.normalizer.resolve(candidate.name, candidate.title))
            target = next((r for r in corpus if r.path == new_path), None)
            if target is not None:
                score = self.matcher.score(candidate, target)
                logger.info(f"Skill {new_path} already exists, merging (similarity {score:.2f})")

        if target is not None:
            record: CandidateRecord = self.matcher.merge(target, candidate)
            name = self.normalizer.resolve(record.name, record.title)
            path = target.path
            action = "merged"
        else:
            name = self.normalizer.resolve(candidate.name, candidate.title)
            record = candidate
            path = self.skill_path(candidate, name)
            action = "created"
            logger.info(f"Creating new skill: {path}")

        document = self.builder.build(record, source)
        validation = self.validate(document)

        return ExtractionOutcome(
            action=action,
            name=name,
            path=path,
            document=document,
            validation=validation,
            merge_score=score,
        )

    def validate(self, document: BuiltDocument) -> ValidationResult:
        """Validate a built main document and log its issues."""
        validation = self.validator.validate(parse_document(document.main_document))

        if validation.valid:
            logger.info("Skill passes validation")
        else:
            logger.warning(f"Skill validation issues: {validation.summary}")

        for issue in validation.issues:
            icon = ISSUE_ICONS.get(issue.severity.value, "")
            logger.info(f"  {icon} [{issue.code}] {issue.message} (fix: {issue.fix})")

        return validation

    def process(
        self,
        result: ClassificationResult,
        source: SourceInfo,
        store: SkillStore,
        comment_body: str = "",
    ) -> ExtractionOutcome:
        """Extract a skill against the store's corpus and save it."""
        corpus = store.load_corpus()
        logger.debug(f"Loaded {len(corpus)} existing skills")

        outcome = self.extract(result, source, corpus, comment_body=comment_body)
        if outcome.skipped or outcome.document is None:
            return outcome

        store.save(outcome.path, outcome.document)
        verb = "Created new" if outcome.is_new else "Updated existing"
        logger.info(f"{verb} skill: {outcome.path}")
        return outcome
