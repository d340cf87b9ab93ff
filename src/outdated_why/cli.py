"""Command-line interface for outdated-why."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Annotated

import typer
from pydantic import ValidationError
from rich.console import Console

from outdated_why import __version__
from outdated_why.analysis.freshness import build_package_age
from outdated_why.analysis.known_breaking_changes import load_knowledge_base
from outdated_why.config import (
    OutdatedWhyConfig,
    find_config_file,
    generate_example_config,
    load_config,
)
from outdated_why.core.analyzer import analyze_packages, select_packages
from outdated_why.core.models import AnalysisReport, PackageAssessment, Priority
from outdated_why.errors import InputError, OutdatedWhyError
from outdated_why.report.markdown import MarkdownConfig, MarkdownReportGenerator, full_command
from outdated_why.sources.cache import RegistryCache
from outdated_why.sources.npm import (
    RegistryMetadata,
    parse_audit_json,
    parse_outdated_json,
    parse_registry_json,
)
from outdated_why.utils.logging import configure_logging, get_logger, level_for_verbosity

app = typer.Typer(
    name="outdated-why",
    help="Know which updates actually matter. Combines outdated, audit and breaking-change context into one prioritized view.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

config_app = typer.Typer(
    name="config",
    help="Configuration management.",
    no_args_is_help=True,
)
app.add_typer(config_app, name="config")

console = Console()
stderr_console = Console(stderr=True)
logger = get_logger(__name__)


OutdatedOption = Annotated[
    Path,
    typer.Option(
        "--outdated",
        help="File containing `npm outdated --json` output.",
        exists=True,
        dir_okay=False,
        readable=True,
    ),
]
AuditOption = Annotated[
    Path | None,
    typer.Option(
        "--audit",
        help="File containing `npm audit --json` output.",
        exists=True,
        dir_okay=False,
        readable=True,
    ),
]
RegistryOption = Annotated[
    Path | None,
    typer.Option(
        "--registry",
        help="JSON object mapping package names to `npm view <pkg> --json` output.",
        exists=True,
        dir_okay=False,
        readable=True,
    ),
]


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"outdated-why version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable verbose output.",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Suppress non-essential output.",
        ),
    ] = False,
    config: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to configuration file.",
            exists=True,
            file_okay=True,
            dir_okay=False,
            readable=True,
        ),
    ] = None,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = False,
) -> None:
    """outdated-why - Know which updates actually matter."""
    configure_logging(level_for_verbosity(verbose, quiet), show_time=verbose)

    ctx.obj = config
    if config:
        logger.debug("Using configuration file: %s", config)


def _handle_cli_error(error: Exception) -> None:
    """Handle exceptions and display user-friendly error messages.

    Args:
        error: The exception to handle.

    Raises:
        typer.Exit: Always exits with code 1.
    """
    if isinstance(error, OutdatedWhyError):
        stderr_console.print(f"[bold red]Error:[/bold red] {error.message}")
        if error.hint:
            stderr_console.print(f"[yellow]Hint:[/yellow] {error.hint}")
    else:
        stderr_console.print(f"[red]Error: {error}[/red]")
        logger.exception("Command failed")

    raise typer.Exit(code=1)


def _load_settings(ctx: typer.Context) -> OutdatedWhyConfig:
    config_path = ctx.obj if isinstance(ctx.obj, Path) else None
    return load_config(config_path)


def _read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise InputError(str(path), e) from e


def _run_analysis(
    settings: OutdatedWhyConfig,
    outdated: Path,
    audit: Path | None,
    registry: Path | None,
) -> AnalysisReport:
    """Load captured npm output and run the engine."""
    facts = parse_outdated_json(_read_text(outdated))
    advisories = parse_audit_json(_read_text(audit)) if audit else {}

    extra_kb = settings.analysis.breaking_changes_file
    knowledge_base = load_knowledge_base(Path(extra_kb) if extra_kb else None)

    ages = None
    healths = None
    if registry:
        raw = json.loads(_read_text(registry) or "{}")
        if not isinstance(raw, dict):
            raise InputError(str(registry), message=f"{registry} must contain a JSON object keyed by package name")

        cache: RegistryCache[RegistryMetadata] = RegistryCache()
        selected = select_packages(
            facts,
            ignore=settings.analysis.ignore,
            include_dev=settings.analysis.include_dev,
        )
        ages = []
        healths = []
        for fact in selected:
            meta = cache.get_or_load(fact.name, lambda name: parse_registry_json(name, raw.get(name)))
            ages.append(build_package_age(fact, meta.times, meta.versions))
            if fact.name in raw:
                healths.append(meta.to_health())

    return analyze_packages(
        facts,
        advisories,
        ages=ages,
        health=healths,
        knowledge_base=knowledge_base,
        ignore=settings.analysis.ignore,
        include_dev=settings.analysis.include_dev,
    )


def _fails_ci(report: AnalysisReport, threshold: Priority) -> list[PackageAssessment]:
    return [a for a in report.all_assessments() if a.priority.rank >= threshold.rank]


@app.command()
def analyze(
    ctx: typer.Context,
    outdated: OutdatedOption,
    audit: AuditOption = None,
    registry: RegistryOption = None,
    output_format: Annotated[
        str | None,
        typer.Option(
            "--format",
            "-f",
            help="Output format (json, markdown). Defaults to the configured format.",
        ),
    ] = None,
    ci: Annotated[
        bool,
        typer.Option(
            "--ci",
            help="Exit with code 1 when packages reach the configured fail_on priority.",
        ),
    ] = False,
) -> None:
    """Analyze outdated packages and prioritize them by risk."""
    try:
        settings = _load_settings(ctx)
        fmt = (output_format or settings.output.format).lower()
        if fmt not in ("json", "markdown", "md"):
            raise OutdatedWhyError(f"Unknown format: {fmt}", hint="Use json or markdown.")

        report = _run_analysis(settings, outdated, audit, registry)
    except (OutdatedWhyError, ValidationError, json.JSONDecodeError) as e:
        _handle_cli_error(e)
        return

    if fmt == "json":
        typer.echo(report.model_dump_json(indent=2))
    else:
        generator = MarkdownReportGenerator(MarkdownConfig(package_manager=settings.analysis.package_manager))
        typer.echo(generator.generate(report))

    if ci:
        failing = _fails_ci(report, settings.ci.fail_on)
        if failing:
            stderr_console.print(
                f"[red]CI check failed: {len(failing)} package(s) at or above "
                f"{settings.ci.fail_on.value} priority[/red]"
            )
            raise typer.Exit(code=1)


@app.command()
def why(
    ctx: typer.Context,
    package: Annotated[str, typer.Argument(help="Package name to explain.")],
    outdated: OutdatedOption,
    audit: AuditOption = None,
) -> None:
    """Explain why a specific package needs updating."""
    try:
        settings = _load_settings(ctx)
        report = _run_analysis(settings, outdated, audit, None)
    except (OutdatedWhyError, ValidationError, json.JSONDecodeError) as e:
        _handle_cli_error(e)
        return

    a = report.find(package)
    if a is None:
        console.print(f"{package} is up to date or not in your dependencies.")
        return

    console.print(f"[bold]{a.package.name}[/bold]")
    console.print(f"  Version: {a.package.current_version} -> {a.package.latest_version}")
    console.print(f"  Priority: {a.priority.value.upper()}")
    console.print(f"  Type: {a.package.dependency_kind.value}")
    console.print(f"  Effort: {a.effort.value}")
    console.print(f"  Risk Score: {a.risk_score}/100")
    console.print(f"  Why update? {a.reason}", markup=False)
    console.print(f"  Why it matters: {a.why_it_matters}", markup=False)

    for advisory in a.advisories:
        console.print(f"  - [{advisory.severity.value.upper()}] {advisory.title}", markup=False)

    if a.breaking_change and a.breaking_change.known_issues:
        console.print("  Known issues:")
        for issue in a.breaking_change.known_issues:
            console.print(f"  - {issue}", markup=False)

    if a.read_more_url:
        console.print(f"  Read more: {a.read_more_url}")

    console.print(f"  Update: {full_command(a, settings.analysis.package_manager)}", markup=False)


@app.command()
def fix(
    ctx: typer.Context,
    outdated: OutdatedOption,
    audit: AuditOption = None,
) -> None:
    """Show commands to fix issues, most urgent first."""
    try:
        settings = _load_settings(ctx)
        report = _run_analysis(settings, outdated, audit, None)
    except (OutdatedWhyError, ValidationError, json.JSONDecodeError) as e:
        _handle_cli_error(e)
        return

    pm = settings.analysis.package_manager

    if report.total_packages == 0:
        console.print("Nothing to fix - all packages are up to date!")
        return

    if report.critical:
        console.print("[bold red]1. Critical security fixes (run these first):[/bold red]")
        for a in report.critical:
            console.print(f"   {full_command(a, pm)}", markup=False)

    if report.important:
        limit = settings.output.max_important
        console.print("[bold yellow]2. Important updates (one at a time):[/bold yellow]")
        for a in report.important[:limit]:
            console.print(f"   {full_command(a, pm)}", markup=False)
            if a.read_more_url:
                console.print(f"   # See: {a.read_more_url}", markup=False)
        if len(report.important) > limit:
            console.print(f"   ... and {len(report.important) - limit} more")

    if report.safe or report.skip:
        console.print("[bold green]3. Safe updates (batch):[/bold green]")
        console.print(f"   {pm} update", markup=False)


@config_app.command("init")
def config_init(
    path: Annotated[
        Path,
        typer.Option(
            "--path",
            "-p",
            help="Where to write the configuration file.",
        ),
    ] = Path(".outdated-why.yml"),
    force: Annotated[
        bool,
        typer.Option(
            "--force",
            help="Overwrite an existing file.",
        ),
    ] = False,
) -> None:
    """Create an example configuration file."""
    if path.exists() and not force:
        stderr_console.print(f"[red]Error:[/red] {path} already exists")
        stderr_console.print("[yellow]Hint:[/yellow] Use --force to overwrite it.")
        raise typer.Exit(code=1)

    path.write_text(generate_example_config())
    console.print(f"Created configuration file: {path}")


@config_app.command("validate")
def config_validate(
    path: Annotated[
        Path | None,
        typer.Argument(help="Configuration file (searches upwards from cwd if omitted)."),
    ] = None,
) -> None:
    """Validate a configuration file."""
    config_path = path or find_config_file()
    if config_path is None or not config_path.exists():
        stderr_console.print("[red]Error:[/red] No configuration file found")
        stderr_console.print("[yellow]Hint:[/yellow] Run `outdated-why config init` to create one.")
        raise typer.Exit(code=1)

    try:
        load_config(config_path)
    except ValidationError as e:
        stderr_console.print(f"[red]Invalid configuration in {config_path}:[/red]")
        for err in e.errors():
            loc = ".".join(str(part) for part in err["loc"])
            stderr_console.print(f"  {loc}: {err['msg']}", markup=False)
        raise typer.Exit(code=1)
    except OutdatedWhyError as e:
        _handle_cli_error(e)

    console.print(f"Configuration is valid: {config_path}")


@config_app.command("show")
def config_show(ctx: typer.Context) -> None:
    """Show the effective configuration."""
    try:
        settings = _load_settings(ctx)
    except (OutdatedWhyError, ValidationError) as e:
        _handle_cli_error(e)
        return

    typer.echo(json.dumps(settings.model_dump(mode="json"), indent=2))


if __name__ == "__main__":
    app()
