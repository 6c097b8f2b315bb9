"""
PR Skills Extractor

Turns pull request review comments into skill documents: names are
normalized, near-duplicates are merged, long skills are split into
reference documents and every skill is checked against the authoring rules.
"""

__version__ = "1.0.0"

from .builder import DocumentBuilder
from .classification import ClassificationResult, fallback_classification, parse_classification_response
from .config import ClassificationSettings, Config, SkillRules
from .document import ParsedDocument, parse_document, parse_existing_record
from .models import (
    BuiltDocument,
    CandidateRecord,
    Category,
    ExistingRecord,
    Severity,
    SimilarMatch,
    SourceInfo,
    ValidationIssue,
    ValidationResult,
)
from .normalizer import Normalizer
from .pipeline import ExtractionOutcome, SkillExtractor, SkillStore
from .similarity import SimilarityMatcher
from .store import DirectorySkillStore
from .validator import SkillValidator

__all__ = [
    "BuiltDocument",
    "CandidateRecord",
    "Category",
    "ClassificationResult",
    "ClassificationSettings",
    "Config",
    "DirectorySkillStore",
    "DocumentBuilder",
    "ExistingRecord",
    "ExtractionOutcome",
    "Normalizer",
    "ParsedDocument",
    "Severity",
    "SimilarMatch",
    "SimilarityMatcher",
    "SkillExtractor",
    "SkillRules",
    "SkillStore",
    "SkillValidator",
    "SourceInfo",
    "ValidationIssue",
    "ValidationResult",
    "fallback_classification",
    "parse_classification_response",
    "parse_document",
    "parse_existing_record",
]
