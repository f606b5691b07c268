"""AiValidator CLI using typer."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from aivalidator.cache import get_cache_store
from aivalidator.config import get_config
from aivalidator.errors import ConfigurationError, ProviderError
from aivalidator.logging_utils import setup_logging
from aivalidator.providers import ProviderManager
from aivalidator.schemas import ValidationResult
from aivalidator.services import AiValidator

app = typer.Typer(
    name="aivalidator",
    help="Validate, retry and correct structured JSON output from LLMs.",
    no_args_is_help=True,
)
cache_app = typer.Typer(help="Manage cached validation results.")
app.add_typer(cache_app, name="cache")

console = Console()


def _load_json_option(value: str, option: str) -> Dict[str, Any]:
    """Parse an inline JSON object, or read one from a file given as @path."""
    try:
        if value.startswith("@"):
            value = Path(value[1:]).read_text(encoding="utf-8")
        loaded = json.loads(value)
    except (OSError, ValueError) as e:
        console.print(f"[red]Invalid {option}: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    if not isinstance(loaded, dict):
        console.print(f"[red]Invalid {option}: expected a JSON object[/red]")
        raise typer.Exit(1)
    return loaded


def _print_result(result: ValidationResult, show_responses: bool) -> None:
    if result.failed:
        console.print(f"[red]Validation failed after {result.attempt_count} attempt(s).[/red]")
        console.print(f"  {escape(result.error or '')}")
    else:
        console.print(f"[green]Validated after {result.attempt_count} attempt(s).[/green]")
        if result.was_retried:
            console.print("[yellow]Earlier attempts were corrected by retrying.[/yellow]")
        console.print_json(json.dumps(result.data, default=str))

    table = Table(title="Attempts")
    table.add_column("#", justify="right")
    table.add_column("JSON", justify="center")
    table.add_column("Schema", justify="center")
    table.add_column("Tokens", justify="right")
    table.add_column("Duration", justify="right")
    table.add_column("Errors")
    if show_responses:
        table.add_column("Response", style="dim")

    for attempt in result.attempts:
        errors = "; ".join(
            f"{field}: {', '.join(messages)}"
            for field, messages in attempt.validation_errors.items()
        )
        row = [
            str(attempt.attempt),
            "[green]yes[/green]" if attempt.json_valid else "[red]no[/red]",
            "[green]yes[/green]" if attempt.schema_valid else "[red]no[/red]",
            str(attempt.usage.total_tokens),
            f"{attempt.duration_ms:.0f} ms",
            errors or "-",
        ]
        if show_responses:
            row.append(attempt.raw_response[:200])
        table.add_row(*row)

    console.print(table)
    console.print(
        f"[dim]Tokens: {result.usage.prompt_tokens} prompt, "
        f"{result.usage.completion_tokens} completion, {result.usage.total_tokens} total[/dim]"
    )


@app.command()
def run(
    prompt: str = typer.Option(..., "--prompt", "-p", help="Prompt to send to the model"),
    rules: str = typer.Option(..., "--rules", "-r", help="Field rules as JSON, or @path to a JSON file"),
    messages: Optional[str] = typer.Option(None, "--messages", help="Custom error messages as JSON or @path"),
    provider: Optional[str] = typer.Option(None, "--provider", help="Provider name (defaults to configured)"),
    max_attempts: Optional[int] = typer.Option(None, "--max-attempts", min=1, help="Override max attempts"),
    model: Optional[str] = typer.Option(None, "--model", help="Model override"),
    temperature: Optional[float] = typer.Option(None, "--temperature", help="Sampling temperature override"),
    show_responses: bool = typer.Option(False, "--show-responses", help="Show raw responses per attempt"),
) -> None:
    """Send a prompt and validate the JSON response against rules."""
    config = get_config()
    setup_logging(config.logging.level)

    rule_set = _load_json_option(rules, "--rules")
    message_set = _load_json_option(messages, "--messages") if messages else None

    options: Dict[str, Any] = {}
    if model:
        options["model"] = model
    if temperature is not None:
        options["temperature"] = temperature

    validator = AiValidator(config=config)

    try:
        with console.status("[bold green]Validating AI output..."):
            result = validator.validate_with_rules(
                prompt,
                rule_set,
                options,
                messages=message_set,
                provider=provider,
                max_attempts=max_attempts,
            )
    except (ConfigurationError, ProviderError) as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1)
    finally:
        validator.providers.close()

    _print_result(result, show_responses)

    if result.failed:
        raise typer.Exit(1)


@app.command()
def providers() -> None:
    """List configured AI providers."""
    config = get_config()
    manager = ProviderManager(config)

    table = Table(title="Providers")
    table.add_column("Name")
    table.add_column("Model")
    table.add_column("Base URL", style="dim")
    table.add_column("API key", justify="center")

    for name in manager.available():
        settings = config.providers.get(name)
        marker = " [bold](default)[/bold]" if name == config.default_provider else ""
        if settings is None:
            table.add_row(f"{name}{marker}", "-", "-", "-")
            continue
        table.add_row(
            f"{name}{marker}",
            settings.model,
            settings.base_url,
            "yes" if settings.api_key else "-",
        )

    console.print(table)


@cache_app.command("clear")
def cache_clear() -> None:
    """Remove every cached validation result."""
    config = get_config()

    try:
        store = get_cache_store(config)
    except ConfigurationError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    store.clear()
    console.print("[green]Cache cleared.[/green]")


@app.command("api")
def run_api(
    host: str = typer.Option("127.0.0.1", "--host", help="Host to bind to"),
    port: int = typer.Option(8765, "--port", help="Port to bind to"),
) -> None:
    """Run the local FastAPI server."""
    import uvicorn

    setup_logging(get_config().logging.level)
    console.print(f"[green]Starting AiValidator API at http://{host}:{port}[/green]")
    console.print("[dim]Press Ctrl+C to stop[/dim]")

    uvicorn.run(
        "aivalidator.api.main:app",
        host=host,
        port=port,
        reload=False,
    )


if __name__ == "__main__":
    app()
