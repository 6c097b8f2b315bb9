"""Skill name normalization into kebab-case gerund identifiers."""

import logging
import re
from typing import Optional

from .config import SkillRules
from .exceptions import DegenerateNameError


logger = logging.getLogger(__name__)


# Leading verb -> gerund. Only the first matching "{verb}-" prefix is rewritten.
GERUND_MAPPINGS = {
    "avoid": "avoiding",
    "prefer": "preferring",
    "use": "using",
    "implement": "implementing",
    "handle": "handling",
    "manage": "managing",
    "process": "processing",
    "validate": "validating",
    "check": "checking",
    "test": "testing",
    "create": "creating",
    "update": "updating",
    "delete": "deleting",
    "remove": "removing",
    "add": "adding",
    "fix": "fixing",
    "optimize": "optimizing",
    "refactor": "refactoring",
    "extract": "extracting",
    "configure": "configuring",
    "set-up": "setting-up",
    "setup": "setting-up",
    "initialize": "initializing",
}

NAME_PATTERN = re.compile(r"^[a-z0-9]+(-[a-z0-9]+)*$")


class Normalizer:
    """Turn free-text skill names into valid identifiers."""

    def __init__(self, rules: Optional[SkillRules] = None):
        """Initialize normalizer.

        Args:
            rules: Naming limits; defaults apply when omitted
        """
        self.rules = rules or SkillRules()

    def normalize(self, raw_name: str) -> str:
        """Normalize a skill name.

        The result is lowercase kebab-case, uses the gerund form for known
        leading verbs and is at most ``max_name_length`` characters. It may be
        empty; see :meth:`normalize_strict` and :meth:`resolve`.

        Args:
            raw_name: Free-text name, e.g. "Avoid Direct State"

        Returns:
            Normalized name, e.g. "avoiding-direct-state"
        """
        name = (raw_name or "").lower()
        name = re.sub(r"[^a-z0-9_\s-]", "", name)
        name = re.sub(r"[\s_]+", "-", name)
        name = re.sub(r"-+", "-", name)
        name = name.strip("-")

        name = self.to_gerund_form(name)

        if len(name) > self.rules.max_name_length:
            name = name[:self.rules.max_name_length].rstrip("-")

        return name

    @staticmethod
    def to_gerund_form(name: str) -> str:
        """Rewrite a leading verb segment to its gerund.

        Args:
            name: Kebab-case name

        Returns:
            Name with at most one leading substitution
        """
        for verb, gerund in GERUND_MAPPINGS.items():
            prefix = f"{verb}-"
            if name.startswith(prefix):
                return f"{gerund}-{name[len(prefix):]}"
        return name

    def normalize_strict(self, raw_name: str) -> str:
        """Normalize a skill name, refusing degenerate results.

        Raises:
            DegenerateNameError: If the name normalizes to an empty string
        """
        name = self.normalize(raw_name)
        if not name:
            raise DegenerateNameError(raw_name)
        return name

    def resolve(self, *candidates: Optional[str]) -> str:
        """Return the first candidate that normalizes to a non-empty name.

        Falls back to the configured placeholder name when every candidate
        is degenerate.
        """
        for candidate in candidates:
            name = self.normalize(candidate or "")
            if name:
                return name

        logger.warning(
            f"No usable skill name among {candidates!r}, using '{self.rules.fallback_name}'"
        )
        return self.rules.fallback_name

    def is_valid(self, name: str) -> bool:
        """Check a name against the identifier invariant."""
        if not name or len(name) > self.rules.max_name_length:
            return False
        if not NAME_PATTERN.match(name):
            return False
        return not any(word in name for word in self.rules.reserved_words)
