"""Command-line interface for PR Skills Extractor.

Usage:
    pr-skills validate .claude/skills            # Validate every SKILL.md below a directory
    pr-skills validate path/to/SKILL.md          # Validate a single skill
    pr-skills normalize "Avoid direct state"     # Print the normalized skill name
    pr-skills build result.json --reference-id 42 --author octocat
"""

import logging
import sys
from datetime import date
from pathlib import Path
from typing import List, Optional, Tuple

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .classification import parse_classification_response
from .config import Config
from .exceptions import ClassificationParseError, ConfigError, DegenerateNameError
from .models import Severity, SourceInfo, ValidationIssue, ValidationResult
from .normalizer import Normalizer
from .pipeline import SKILL_FILE, SkillExtractor
from .store import DirectorySkillStore
from .validator import SkillValidator


logger = logging.getLogger(__name__)
console = Console()

SEVERITY_STYLES = {
    Severity.ERROR: ("❌", "red"),
    Severity.WARNING: ("⚠️", "yellow"),
    Severity.INFO: ("ℹ️", "cyan"),
}


def setup_logging(config: Config) -> logging.Logger:
    """Set up logging configuration.

    Args:
        config: Configuration object

    Returns:
        Configured logger
    """
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stderr)]

    if config.log_to_file:
        log_dir = config.log_dir
        log_dir.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_dir / "pr-skills.log"))

    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=handlers,
    )

    return logging.getLogger("pr_skills")


def collect_skill_files(paths: Tuple[str, ...]) -> List[Path]:
    """Expand directories into the SKILL.md files below them."""
    files: List[Path] = []
    for raw in paths:
        path = Path(raw)
        if path.is_dir():
            files.extend(sorted(path.rglob(SKILL_FILE)))
        else:
            files.append(path)
    return files


def validate_file(validator: SkillValidator, path: Path) -> ValidationResult:
    """Validate a skill file, reporting unreadable files as an error issue."""
    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.debug(f"Cannot read {path}: {e}")
        return ValidationResult(issues=[ValidationIssue(
            severity=Severity.ERROR,
            code="FILE_ERROR",
            message=f"Cannot read skill file: {e}",
            fix="Ensure the skill file exists and is readable",
        )])
    return validator.validate_content(content)


def print_result(path: Path, result: ValidationResult) -> None:
    """Print the issues found in one skill file."""
    status = "[green]✓ VALID[/green]" if result.valid else "[red]✗ INVALID[/red]"
    console.print(f"{status} {escape(str(path))}")

    for issue in result.issues:
        icon, color = SEVERITY_STYLES[issue.severity]
        console.print(f"  {icon} [{color}]\\[{issue.code}][/{color}] {escape(issue.message)}")
        console.print(f"     [dim]└─ Fix: {escape(issue.fix)}[/dim]")
    console.print("")


@click.group()
@click.option("--config", "config_path", default="config/config.yaml", help="Path to configuration file")
@click.pass_context
def cli(ctx: click.Context, config_path: str):
    """Extract skills from pull request review comments."""
    try:
        config = Config(config_path)
    except ConfigError as e:
        raise click.ClickException(str(e))

    setup_logging(config)
    ctx.obj = config


@cli.command("validate")
@click.argument("paths", nargs=-1, required=True)
@click.pass_obj
def validate_command(config: Config, paths: Tuple[str, ...]):
    """Validate skill files against the authoring rules.

    \b
    Examples:
        pr-skills validate .claude/skills
        pr-skills validate .claude/skills/general/anti-patterns/avoiding-x/SKILL.md
    """
    validator = SkillValidator(config.rules)
    files = collect_skill_files(paths)

    if not files:
        console.print("[yellow]No skills found to validate.[/yellow]")
        return

    results = []
    for path in files:
        result = validate_file(validator, path)
        print_result(path, result)
        results.append(result)

    table = Table(title="Summary", show_header=True, header_style="bold magenta")
    table.add_column("Skills validated")
    table.add_column("Valid")
    table.add_column("Errors", style="red")
    table.add_column("Warnings", style="yellow")
    table.add_column("Suggestions", style="cyan")
    table.add_row(
        str(len(results)),
        str(sum(1 for r in results if r.valid)),
        str(sum(r.errors for r in results)),
        str(sum(r.warnings for r in results)),
        str(sum(r.info for r in results)),
    )
    console.print(table)

    if not all(r.valid for r in results):
        sys.exit(1)


@cli.command("normalize")
@click.argument("name")
@click.pass_obj
def normalize_command(config: Config, name: str):
    """Print the normalized form of a skill name.

    \b
    Examples:
        pr-skills normalize "Avoid Direct State"
    """
    normalizer = Normalizer(config.rules)
    try:
        click.echo(normalizer.normalize_strict(name))
    except DegenerateNameError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        sys.exit(1)


@cli.command("build")
@click.argument("classification_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--reference-id", "-r", default="", help="Pull request number")
@click.option("--author", "-a", default="", help="Comment author login")
@click.option("--date", "source_date", default=None, help="Comment date (default: today)")
@click.option("--file", "-f", "source_file", default="N/A", help="File the comment is on")
@click.option("--comment", "-c", default="", help="Comment text, used for domain detection")
@click.option("--output-dir", "-o", default=None, help="Write the documents below this directory")
@click.pass_obj
def build_command(
    config: Config,
    classification_file: str,
    reference_id: str,
    author: str,
    source_date: Optional[str],
    source_file: str,
    comment: str,
    output_dir: Optional[str],
):
    """Build a skill document from a classification result (JSON).

    With --output-dir the skills already below that directory are loaded
    first, so a near-duplicate is merged into the existing skill.

    \b
    Examples:
        pr-skills build result.json --reference-id 42 --author octocat
        pr-skills build result.json -r 42 -a octocat -o .claude/skills
    """
    text = Path(classification_file).read_text(encoding="utf-8")
    try:
        result = parse_classification_response(text)
    except ClassificationParseError as e:
        raise click.ClickException(str(e))

    source = SourceInfo(
        reference_id=reference_id,
        author=author,
        date=source_date or date.today().isoformat(),
        file=source_file,
    )

    extractor = SkillExtractor(config.rules, config.classification)
    if output_dir is None:
        outcome = extractor.extract(result, source, corpus=[], comment_body=comment)
    else:
        store = DirectorySkillStore(output_dir)
        try:
            outcome = extractor.process(result, source, store, comment_body=comment)
        except OSError as e:
            raise click.ClickException(f"Cannot write skill below {output_dir}: {e}")

    if outcome.skipped or outcome.document is None:
        console.print(f"[yellow]Skipped: {escape(outcome.reason)}[/yellow]")
        return

    if output_dir is None:
        click.echo(outcome.document.main_document, nl=False)
        for filename, content in outcome.document.reference_documents.items():
            click.echo(f"\n<!-- {filename} -->\n")
            click.echo(content, nl=False)
    else:
        skill_path = Path(output_dir) / outcome.path
        verb = "Created" if outcome.is_new else "Merged into existing"
        console.print(f"[green]✓ {verb} skill: {escape(str(skill_path))}[/green]", highlight=False)

    if outcome.validation is not None and not outcome.validation.valid:
        sys.exit(1)


def main() -> None:
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
