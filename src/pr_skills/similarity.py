"""Keyword-overlap similarity between skills, and merging of near-duplicates."""

import logging
import re
from typing import Iterable, List, Optional, Sequence, Set

from .config import SkillRules
from .models import CandidateRecord, ExistingRecord, SimilarMatch, SourceInfo


logger = logging.getLogger(__name__)

INSTRUCTIONS_SEPARATOR = "\n\n---\n\n"


def _dedupe(items: Iterable[str]) -> List[str]:
    seen = set()
    result = []
    for item in items:
        if item not in seen:
            seen.add(item)
            result.append(item)
    return result


class SimilarityMatcher:
    """Find existing skills that cover the same ground as a new one."""

    def __init__(self, rules: Optional[SkillRules] = None):
        """Initialize similarity matcher.

        Args:
            rules: Threshold and word-length settings; defaults apply when omitted
        """
        self.rules = rules or SkillRules()

    def significant_words(self, record: CandidateRecord) -> Set[str]:
        """Lowercased words of title, description and keywords long enough to count."""
        text = " ".join([record.title, record.description, " ".join(record.keywords)])
        return {
            word for word in re.findall(r"\w+", text.lower())
            if len(word) >= self.rules.min_word_length
        }

    def score(self, first: CandidateRecord, second: CandidateRecord) -> float:
        """Jaccard similarity of the significant word sets, in [0, 1]."""
        words1 = self.significant_words(first)
        words2 = self.significant_words(second)

        union = words1 | words2
        if not union:
            return 0.0
        return len(words1 & words2) / len(union)

    def find_similar(
        self,
        candidate: CandidateRecord,
        corpus: Sequence[ExistingRecord],
        threshold: Optional[float] = None,
    ) -> List[SimilarMatch]:
        """Rank corpus records at or above the similarity threshold.

        Args:
            candidate: Newly classified skill
            corpus: Existing skills
            threshold: Minimum score; defaults to the configured threshold

        Returns:
            Matches sorted by descending score, ties in corpus order
        """
        if threshold is None:
            threshold = self.rules.similarity_threshold

        candidate_words = self.significant_words(candidate)
        matches = []

        for existing in corpus:
            existing_words = self.significant_words(existing)
            union = candidate_words | existing_words
            if not union:
                continue

            similarity = len(candidate_words & existing_words) / len(union)
            if similarity >= threshold:
                matches.append(SimilarMatch(record=existing, score=similarity))

        matches.sort(key=lambda m: m.score, reverse=True)

        if matches:
            logger.debug(
                f"Found {len(matches)} similar skill(s) for '{candidate.title}', "
                f"best {matches[0].score:.2f}"
            )
        return matches

    def merge(self, existing: ExistingRecord, incoming: CandidateRecord) -> ExistingRecord:
        """Fold a new skill into an existing one.

        Instructions from both are kept, keywords are unioned and the
        incoming source is appended to the existing attributions.

        Args:
            existing: Persisted skill
            incoming: Newly classified skill

        Returns:
            New record; neither input is modified
        """
        if existing.instructions and incoming.instructions:
            instructions = f"{existing.instructions}{INSTRUCTIONS_SEPARATOR}{incoming.instructions}"
        else:
            instructions = existing.instructions or incoming.instructions

        sources = tuple(existing.sources) + (incoming.source or SourceInfo(),)

        return ExistingRecord(
            title=existing.title or incoming.title,
            description=incoming.description or existing.description,
            instructions=instructions,
            category=existing.category,
            domain=existing.domain,
            keywords=tuple(_dedupe(list(existing.keywords) + list(incoming.keywords))),
            detail=existing.detail or incoming.detail,
            bad_example=existing.bad_example or incoming.bad_example,
            good_example=existing.good_example or incoming.good_example,
            source=incoming.source or existing.source,
            name=existing.name or incoming.name,
            path=existing.path,
            sources=sources,
        )
