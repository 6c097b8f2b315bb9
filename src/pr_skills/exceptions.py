"""Exception types raised by PR Skills Extractor."""


class SkillExtractorError(Exception):
    """Base class for all errors raised by this package."""


class ConfigError(SkillExtractorError):
    """Configuration file could not be read or parsed."""


class DocumentParseError(SkillExtractorError):
    """A skill document has no recoverable frontmatter block.

    Only raised by strict parsing; the default parser treats a missing
    frontmatter block as empty fields.
    """


class DegenerateNameError(SkillExtractorError):
    """A raw skill name normalized to an empty identifier."""

    def __init__(self, raw_name: str):
        super().__init__(f"Skill name {raw_name!r} normalizes to an empty identifier")
        self.raw_name = raw_name


class ClassificationParseError(SkillExtractorError):
    """A classification payload is not valid JSON or not a JSON object."""
