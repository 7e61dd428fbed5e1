"""
Command-line interface for recsan using Typer.

Sanitizes JSON documents from files or standard input, with Rich formatted
diagnostics on stderr and exit codes derived from the error category.
"""

import json
import sys
from pathlib import Path
from typing import Any

import typer
from rich.console import Console
from rich.table import Table
from rich.traceback import install as install_rich_traceback

from .. import __version__
from ..config import Settings, get_settings
from ..core.encoders import resolve_encoder
from ..core.options import SanitizeOptions
from ..core.sanitizer import Sanitizer
from ..utils.exceptions import (
    ConfigurationError,
    ErrorCategory,
    ErrorSeverity,
    InputError,
    RecsanError,
    ValidationError,
)
from ..utils.logging import (
    generate_correlation_id,
    get_logger,
    operation_logger,
    setup_logging,
)

install_rich_traceback(show_locals=False)

app = typer.Typer(
    name="recsan",
    help="[bold blue]recsan[/bold blue] - mask, remove and filter fields of JSON records",
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)

# Diagnostics go to stderr; sanitized documents go to stdout
console = Console(stderr=True)

_logger = get_logger(__name__)


class ExitCodes:
    SUCCESS = 0
    GENERAL_ERROR = 1
    CONFIGURATION_ERROR = 2
    VALIDATION_ERROR = 5
    INPUT_ERROR = 6
    USER_INTERRUPTED = 130  # Standard SIGINT exit code


def get_exit_code_for_error(error: BaseException) -> int:
    """Determine appropriate exit code based on error type."""
    if isinstance(error, KeyboardInterrupt):
        return ExitCodes.USER_INTERRUPTED

    if isinstance(error, RecsanError):
        category_to_exit_code = {
            ErrorCategory.CONFIGURATION_ERROR: ExitCodes.CONFIGURATION_ERROR,
            ErrorCategory.USER_ERROR: ExitCodes.VALIDATION_ERROR,
            ErrorCategory.DATA_ERROR: ExitCodes.INPUT_ERROR,
        }
        return category_to_exit_code.get(error.category, ExitCodes.GENERAL_ERROR)

    return ExitCodes.GENERAL_ERROR


def get_configured_settings(config_path: Path | None = None) -> Settings:
    """Load settings, optionally from an explicit .env file."""
    try:
        if config_path is not None:
            settings = Settings(_env_file=str(config_path))
            _logger.debug("Loaded configuration", config_file=str(config_path))
        else:
            settings = get_settings()
    except Exception as e:
        raise ConfigurationError(
            f"Failed to load configuration: {e!s}",
            config_key="configuration_file" if config_path else "environment",
            actual_value=str(config_path) if config_path else "default",
        ) from e

    return settings


def display_enhanced_error(
    message: str,
    exception: BaseException | None = None,
    show_hints: bool = True,
) -> None:
    """Display an error message with troubleshooting hints."""
    console.print(f"[red]✗ Error:[/red] {message}")

    if isinstance(exception, RecsanError):
        console.print(f"[dim red]Details: {exception.user_message}[/dim red]")
        console.print(
            f"[dim]Category: {exception.category.value.replace('_', ' ').title()}[/dim]"
        )
        if exception.severity in [ErrorSeverity.HIGH, ErrorSeverity.CRITICAL]:
            console.print(
                f"[dim red]Severity: {exception.severity.value.upper()}[/dim red]"
            )

        if show_hints and exception.troubleshooting_hints:
            console.print("\n[bold yellow]Troubleshooting Tips:[/bold yellow]")
            for i, hint in enumerate(exception.troubleshooting_hints, 1):
                console.print(f"  {i}. {hint}")

    elif exception is not None:
        console.print(f"[dim red]Details: {exception}[/dim red]")


def display_success(message: str, quiet: bool = False) -> None:
    if not quiet:
        console.print(f"[green]✓[/green] {message}")


def handle_cli_exception(operation: str, exception: BaseException) -> int:
    """Centralized CLI exception handling with proper exit codes."""
    exit_code = get_exit_code_for_error(exception)

    if isinstance(exception, KeyboardInterrupt):
        console.print("[yellow]⚠[/yellow] Operation cancelled by user")
    else:
        display_enhanced_error(f"{operation} failed", exception)

    return exit_code


def parse_mask_pairs(pairs: list[str] | None) -> dict[str, str] | None:
    """Parse repeated ``field=replacement`` arguments."""
    if not pairs:
        return None

    mask = {}
    for pair in pairs:
        field, sep, replacement = pair.partition("=")
        if not sep or not field:
            raise ValidationError(
                f"Invalid --mask value '{pair}', expected FIELD=REPLACEMENT",
                field_name="mask",
                field_value=pair,
                validation_rule="field_equals_replacement",
            )
        mask[field] = replacement
    return mask


def load_document(source: str) -> Any:
    """Read and decode a JSON document from a path or '-' for stdin."""
    try:
        if source == "-":
            text = sys.stdin.read()
        else:
            text = Path(source).read_text(encoding="utf-8")
    except OSError as e:
        raise InputError(f"Cannot read '{source}': {e.strerror or e}", source=source) from e

    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise InputError(
            f"'{source}' is not valid JSON: {e.msg} (line {e.lineno}, column {e.colno})",
            source=source,
        ) from e


def build_cli_options(
    options_file: Path | None,
    mask: list[str] | None,
    remove: list[str] | None,
    only: list[str] | None,
    except_: list[str] | None,
    deep: bool | None,
) -> SanitizeOptions:
    """Merge an options file with command-line overrides."""
    base: dict[str, Any] = {}
    if options_file is not None:
        loaded = load_document(str(options_file))
        if not isinstance(loaded, dict):
            raise ValidationError(
                "Options file must contain a JSON object",
                field_value=type(loaded).__name__,
                validation_rule="options_object",
            )
        base = loaded
    base_options = SanitizeOptions.build(base)

    overrides: dict[str, Any] = {}
    parsed_mask = parse_mask_pairs(mask)
    if parsed_mask:
        overrides["mask"] = {**(base_options.mask or {}), **parsed_mask}
    if remove:
        overrides["remove"] = remove
    if only:
        overrides["only"] = only
    if except_:
        overrides["except"] = except_
    if deep is not None:
        overrides["deep"] = deep

    return SanitizeOptions.build(base_options, **overrides)


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable verbose logging"
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Only show errors and warnings"
    ),
    log_format: str | None = typer.Option(
        None, "--log-format", help="Log format: console or json"
    ),
    config: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help="Configuration file path (.env)",
        exists=True,
        file_okay=True,
        dir_okay=False,
    ),
    correlation_id: str | None = typer.Option(
        None, "--correlation-id", help="Set correlation ID for log tracking"
    ),
):
    """
    [bold blue]recsan[/bold blue] - record sanitization for JSON documents

    [bold]Examples:[/bold]
        recsan sanitize users.json --mask password=******** --remove token
        cat users.json | recsan sanitize - --only id --only name
        recsan config-validate
    """
    try:
        settings = get_configured_settings(config)
    except ConfigurationError as e:
        display_enhanced_error("Configuration error", e)
        raise typer.Exit(get_exit_code_for_error(e))

    correlation_id = correlation_id or generate_correlation_id()

    setup_logging(
        verbose=verbose,
        quiet=quiet,
        json_logs=(log_format or settings.log_format) == "json",
        level=settings.log_level,
        log_file=str(settings.log_file) if settings.log_file else None,
    )
    _logger.with_correlation_id(correlation_id)

    ctx.ensure_object(dict)
    ctx.obj["settings"] = settings
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["correlation_id"] = correlation_id


@app.command("sanitize")
def sanitize_command(
    ctx: typer.Context,
    source: str = typer.Argument(
        "-", help="JSON file to sanitize, or '-' for standard input"
    ),
    output: Path | None = typer.Option(
        None, "--output", "-o", help="Write the result to this file instead of stdout"
    ),
    mask: list[str] | None = typer.Option(
        None, "--mask", "-m", help="Mask a field: FIELD=REPLACEMENT (repeatable)"
    ),
    remove: list[str] | None = typer.Option(
        None, "--remove", "-r", help="Remove a field (repeatable)"
    ),
    only: list[str] | None = typer.Option(
        None, "--only", help="Keep only this field (repeatable)"
    ),
    except_: list[str] | None = typer.Option(
        None, "--except", "-x", help="Exclude this field (repeatable)"
    ),
    deep: bool | None = typer.Option(
        None, "--deep/--no-deep", help="Apply the rules to nested records"
    ),
    options_file: Path | None = typer.Option(
        None,
        "--options",
        help="JSON file with mask, remove, only, except and deep",
        exists=True,
        dir_okay=False,
    ),
    encoder: str | None = typer.Option(
        None, "--encoder", help="Encoder import path for non-pair tuples"
    ),
    indent: int | None = typer.Option(
        2, "--indent", help="Indentation of the JSON output (0 for compact)"
    ),
):
    """
    Sanitize a JSON object or array of objects.

    [bold]Examples:[/bold]
        recsan sanitize users.json --mask password=**** --except internal_id
        recsan sanitize users.json --options rules.json -o clean.json
    """
    settings: Settings = ctx.obj["settings"]
    quiet = ctx.obj["quiet"]

    try:
        with operation_logger(
            "sanitize", ctx.obj["correlation_id"], source=source
        ) as op_logger:
            options = build_cli_options(
                options_file, mask, remove, only, except_, deep
            )
            document = load_document(source)

            sanitizer = Sanitizer(
                encoder=resolve_encoder(encoder) if encoder else None,
                settings=settings,
            )
            result = sanitizer.sanitize(document, options)

            rendered = json.dumps(
                result, indent=indent or None, ensure_ascii=False, default=str
            )
            if output is not None:
                output.write_text(rendered + "\n", encoding="utf-8")
            else:
                typer.echo(rendered)

            count = len(result) if isinstance(result, list) else 1
            op_logger.info("Document sanitized", records=count)
    except (RecsanError, KeyboardInterrupt) as e:
        raise typer.Exit(handle_cli_exception("Sanitize", e))

    if output is not None:
        display_success(f"Sanitized {count} record(s) into {output}", quiet)


@app.command("config-validate")
def config_validate_command(
    ctx: typer.Context,
    config_path: Path | None = typer.Argument(
        None, help="Configuration file to validate (defaults to current config)"
    ),
):
    """
    Validate configuration settings and show their effective values.

    [bold]Examples:[/bold]
        recsan config-validate
        recsan config-validate /path/to/config.env
    """
    try:
        settings = (
            get_configured_settings(config_path)
            if config_path is not None
            else ctx.obj["settings"]
        )
    except ConfigurationError as e:
        display_enhanced_error("Failed to load configuration", e)
        raise typer.Exit(ExitCodes.CONFIGURATION_ERROR)

    table = Table(
        title="[bold magenta]Configuration Validation[/bold magenta]",
        show_header=True,
        border_style="blue",
    )
    table.add_column("Setting", style="cyan", min_width=16)
    table.add_column("Value", style="white", min_width=20)
    table.add_column("Status", style="green", min_width=8)
    table.add_column("Notes", style="dim", min_width=20)

    if settings.json_encoder:
        try:
            resolve_encoder(settings.json_encoder)
            encoder_row = ("JSON Encoder", settings.json_encoder, "✅", "")
        except ConfigurationError as e:
            encoder_row = ("JSON Encoder", settings.json_encoder, "❌", e.message)
    else:
        encoder_row = (
            "JSON Encoder",
            "Not Set",
            "⚠️",
            "Tuples other than key/value pairs will fail",
        )

    config_items = [
        ("Log Level", settings.log_level, "✅", ""),
        ("Log Format", settings.log_format, "✅", ""),
        ("Log File", str(settings.log_file) if settings.log_file else "Not Set", "✅", ""),
        encoder_row,
        (
            "Strict Options",
            "Yes" if settings.strict_options else "No",
            "✅",
            "Reject 'only' combined with 'except'",
        ),
    ]

    errors_count = 0
    warnings_count = 0
    for setting, value, status, notes in config_items:
        if status == "❌":
            value_display = f"[red]{value}[/red]"
            errors_count += 1
        elif status == "⚠️":
            value_display = f"[yellow]{value}[/yellow]"
            warnings_count += 1
        else:
            value_display = value
        table.add_row(setting, value_display, status, notes)

    console.print(table)

    if errors_count:
        console.print(f"[red]❌ {errors_count} invalid setting(s)[/red]")
        console.print("  RECSAN_JSON_ENCODER=recsan.core.encoders:json_encoder")
    elif warnings_count:
        console.print(f"[yellow]⚠️ {warnings_count} optional setting(s) missing[/yellow]")
    else:
        display_success("Configuration is complete and valid!")

    _logger.audit(
        "configuration_validation",
        errors_count=errors_count,
        warnings_count=warnings_count,
        config_file=str(config_path) if config_path else "default",
    )

    if errors_count:
        raise typer.Exit(ExitCodes.CONFIGURATION_ERROR)


@app.command("version")
def version_command():
    """Print the recsan version."""
    typer.echo(__version__)


if __name__ == "__main__":
    try:
        app()
    except KeyboardInterrupt:
        console.print("[yellow]⚠[/yellow] Operation cancelled by user")
        sys.exit(ExitCodes.USER_INTERRUPTED)
