"""Shared fixtures for the PR Skills Extractor tests."""

import pytest

from pr_skills.classification import ClassificationResult
from pr_skills.config import SkillRules
from pr_skills.models import CandidateRecord, Category, ExistingRecord, SourceInfo


VALID_SKILL = """---
name: avoiding-direct-state
description: Prevents direct state mutation. Use when modifying viewport properties.
---

# Avoiding Direct State

## Instructions

Call the service layer instead of mutating state.
"""


@pytest.fixture
def rules():
    return SkillRules()


@pytest.fixture
def source():
    return SourceInfo(reference_id="42", author="octocat", date="2024-05-01", file="src/viewer.ts")


@pytest.fixture
def prior_source():
    return SourceInfo(reference_id="7", author="alice", date="2024-01-02", file="src/a.ts")


@pytest.fixture
def candidate(source):
    return CandidateRecord(
        title="Avoid Direct State Mutation",
        description="Prevents direct viewport state mutation.",
        instructions="Update viewport properties through the viewport service.",
        category=Category.ANTI_PATTERN,
        keywords=("viewport", "state", "mutation"),
        detail="Writing to viewport.state bypasses change notifications.",
        bad_example="viewport.state.zoom = 2;",
        good_example="viewportService.setZoom(viewport, 2);",
        source=source,
        name="avoid direct state",
    )


@pytest.fixture
def existing(prior_source):
    return ExistingRecord(
        title="Avoid Direct State Mutation",
        description="Prevents direct viewport state mutation.",
        instructions="Never assign to viewport state.",
        category=Category.ANTI_PATTERN,
        keywords=("state", "viewport"),
        source=prior_source,
        name="avoiding-direct-state",
        path="general/anti-patterns/avoiding-direct-state/SKILL.md",
        sources=(prior_source,),
    )


@pytest.fixture
def classification():
    return ClassificationResult.from_dict({
        "category": "anti-pattern",
        "confidence": 0.9,
        "skillName": "avoid direct state",
        "title": "Avoid Direct State Mutation",
        "description": "Prevents direct viewport state mutation.",
        "instructions": "Update viewport properties through the viewport service.",
        "antiPattern": "Writing to viewport.state bypasses change notifications.",
        "badExample": "viewport.state.zoom = 2;",
        "goodExample": "viewportService.setZoom(viewport, 2);",
        "domain": "general",
        "keywords": ["viewport", "state", "mutation"],
    })
