"""CLI for the sclscore scoring engine."""

import asyncio
import json
from pathlib import Path
from typing import Annotated

import typer
from pydantic import ValidationError as PydanticValidationError
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from sclscore import __version__
from sclscore.config import Settings, load_settings
from sclscore.io import load_answers, write_jsonl
from sclscore.log import configure_logging
from sclscore.registry import (
    InventoryNotFoundError,
    InventoryRegistry,
    InventorySpec,
    InventoryValidationError,
)
from sclscore.scoring import ScoreReport, ScoringEngine, ScoringError

app = typer.Typer(
    name="sclscore",
    help="Scoring engine for the SCL-90 symptom inventory.",
    no_args_is_help=True,
)
console = Console()

SCHEMAS = {
    "inventory": "inventory_spec.schema.json",
    "knowledge": "knowledge_base.schema.json",
}


def version_callback(value: bool) -> None:
    if value:
        console.print(f"sclscore version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option("--version", "-v", callback=version_callback, is_eager=True),
    ] = None,
) -> None:
    """sclscore: Scoring engine for the SCL-90 symptom inventory."""
    pass


def _load_settings(**overrides) -> Settings:
    try:
        return load_settings(**overrides)
    except (PydanticValidationError, ValueError) as e:
        console.print(f"[red]Invalid configuration:[/red] {e}")
        raise typer.Exit(1)


def _load_engine(settings: Settings) -> ScoringEngine:
    registry = InventoryRegistry(settings.registry_path)
    try:
        return ScoringEngine.from_registry(
            registry,
            settings.inventory_id,
            settings.inventory_version,
            overall_rule=settings.overall_rule,
        )
    except (InventoryNotFoundError, InventoryValidationError) as e:
        console.print(f"[red]Error loading inventory:[/red] {e}")
        raise typer.Exit(1)


def _print_report(report: ScoreReport) -> None:
    stats = report.stats
    overall = report.overall_assessment
    console.print(f"\n[bold]Overall:[/bold] [{overall.color}]{overall.text}[/{overall.color}]")
    console.print(f"  Total score: {stats.total_score}")
    console.print(f"  Item average: {stats.item_average_score:.2f}")
    console.print(
        f"  Positive items: {stats.positive_item_count} ({stats.positive_item_percentage})"
    )

    table = Table(title="Factors")
    table.add_column("Factor")
    table.add_column("Total", justify="right")
    table.add_column("Average", justify="right")
    table.add_column("Level")
    for factor in report.factor_details:
        status = factor.status
        table.add_row(
            factor.name,
            str(factor.total_score),
            f"{factor.average_score:.2f}",
            f"[{status.color}]{status.text}[/{status.color}]",
        )
    console.print(table)

    for explanation in report.detailed_explanations:
        console.print(f"\n[bold]{explanation.name}[/bold] ({explanation.status.text})")
        console.print(f"  {explanation.symptoms}")
        console.print(f"  [dim]Advice:[/dim] {explanation.advice}")

    if report.diagnostics and report.diagnostics.warnings:
        console.print(f"\n[yellow]Warnings ({len(report.diagnostics.warnings)}):[/yellow]")
        for warning in report.diagnostics.warnings:
            console.print(f"  {warning.code}: {warning.message}")


@app.command()
def score(
    answers_path: Annotated[
        Path,
        typer.Argument(help="JSON file with a list of {id, score} answers"),
    ],
    as_json: Annotated[
        bool,
        typer.Option("--json", help="Print the report as JSON"),
    ] = False,
    overall_rule: Annotated[
        str | None,
        typer.Option("--overall-rule", help="Overall rule: mean or decision_table"),
    ] = None,
) -> None:
    """Score a single submission."""
    settings = _load_settings(overall_rule=overall_rule)
    configure_logging(settings.log_level, json_output=False)

    if not answers_path.exists():
        console.print(f"[red]Error:[/red] Answers file not found: {answers_path}")
        raise typer.Exit(1)

    try:
        answers = load_answers(answers_path)
    except json.JSONDecodeError as e:
        console.print(f"[red]Error:[/red] Invalid JSON in {answers_path}: {e}")
        raise typer.Exit(1)

    engine = _load_engine(settings)
    try:
        report = engine.score(answers)
    except ScoringError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    if as_json:
        console.print_json(data=report.to_response())
    else:
        _print_report(report)


@app.command()
def batch(
    input_path: Annotated[
        Path,
        typer.Option("--in", "-i", help="Input JSONL file, one {answers} record per line"),
    ],
    output_path: Annotated[
        Path,
        typer.Option("--out", "-o", help="Output JSONL file for reports"),
    ],
) -> None:
    """Score a JSONL file of submissions."""
    settings = _load_settings()
    configure_logging(settings.log_level, json_output=False)

    if not input_path.exists():
        console.print(f"[red]Error:[/red] Input file not found: {input_path}")
        raise typer.Exit(1)

    engine = _load_engine(settings)
    failed = 0

    def reports():
        nonlocal failed
        with open(input_path, encoding="utf-8") as f_in:
            for line_num, line in enumerate(f_in, 1):
                line = line.strip()
                if not line:
                    continue
                try:
                    record = json.loads(line)
                except json.JSONDecodeError as e:
                    console.print(f"[yellow]Warning:[/yellow] Invalid JSON on line {line_num}: {e}")
                    failed += 1
                    continue

                answers = record.get("answers") if isinstance(record, dict) else record
                try:
                    report = engine.score(answers)
                except ScoringError as e:
                    console.print(f"[yellow]Warning:[/yellow] Line {line_num}: {e}")
                    failed += 1
                    continue

                progress.update(task, description=f"Scored {line_num} submissions...")
                yield report.to_response()

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
    ) as progress:
        task = progress.add_task("Scoring submissions...", total=None)
        written = write_jsonl(output_path, reports())

    console.print("\n[bold]Summary:[/bold]")
    console.print(f"  [green]Scored:[/green] {written}")
    if failed:
        console.print(f"  [red]Failed:[/red] {failed}")


@app.command()
def serve(
    host: Annotated[str | None, typer.Option("--host", help="Bind address")] = None,
    port: Annotated[int | None, typer.Option("--port", "-p", help="Port")] = None,
    memory_store: Annotated[
        bool,
        typer.Option("--memory-store", help="Keep credentials in process memory instead of Redis"),
    ] = False,
) -> None:
    """Run the HTTP service."""
    import uvicorn

    from sclscore.api import create_app
    from sclscore.gate import MemoryCredentialStore

    settings = _load_settings(host=host, port=port)
    configure_logging(settings.log_level, json_output=settings.log_json)

    store = MemoryCredentialStore(token_ttl=settings.token_ttl_seconds) if memory_store else None
    application = create_app(settings, store=store)
    uvicorn.run(application, host=settings.host, port=settings.port, log_config=None)


@app.command("issue-code")
def issue_code(
    count: Annotated[int, typer.Option("--count", "-n", min=1, help="Number of codes")] = 1,
) -> None:
    """Issue redemption codes through the configured Redis store."""
    from sclscore.gate import GateUnavailableError, RedisCredentialStore

    settings = _load_settings()
    if not settings.redis_url:
        console.print("[red]Error:[/red] No Redis URL configured (set SCLSCORE_REDIS_URL or REDIS_URL)")
        raise typer.Exit(1)

    async def issue_all() -> list[str]:
        store = RedisCredentialStore.from_url(settings.redis_url, settings.token_ttl_seconds)
        try:
            return [await store.issue() for _ in range(count)]
        finally:
            await store.close()

    try:
        codes = asyncio.run(issue_all())
    except GateUnavailableError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    for code in codes:
        console.print(code)


@app.command()
def validate(
    spec_type: Annotated[
        str,
        typer.Argument(help="Type of file to validate: inventory, knowledge"),
    ],
    spec_path: Annotated[
        Path,
        typer.Argument(help="Path to the file"),
    ],
    schema_path: Annotated[
        Path | None,
        typer.Option("--schema", "-s", help="Path to the schema file"),
    ] = None,
) -> None:
    """Validate an inventory or knowledge base file against its schema."""
    import jsonschema

    if not spec_path.exists():
        console.print(f"[red]Error:[/red] File not found: {spec_path}")
        raise typer.Exit(1)

    if schema_path is None:
        if spec_type not in SCHEMAS:
            console.print(f"[red]Error:[/red] Unknown spec type: {spec_type}")
            raise typer.Exit(1)
        schema_path = InventoryRegistry().schemas_path / SCHEMAS[spec_type]

    if not schema_path.exists():
        console.print(f"[red]Error:[/red] Schema file not found: {schema_path}")
        raise typer.Exit(1)

    with open(spec_path, encoding="utf-8") as f:
        spec = json.load(f)

    with open(schema_path) as f:
        schema = json.load(f)

    try:
        jsonschema.validate(spec, schema)
    except jsonschema.ValidationError as e:
        console.print(f"[red]Invalid:[/red] {e.message}")
        raise typer.Exit(1)

    if spec_type == "inventory":
        try:
            InventorySpec.model_validate(spec)
        except PydanticValidationError as e:
            console.print(f"[red]Invalid:[/red] {e}")
            raise typer.Exit(1)

    console.print(f"[green]Valid:[/green] {spec_path}")


if __name__ == "__main__":
    app()
