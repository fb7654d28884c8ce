"""
tagextract CLI - inspect tag indexes and try extractions from the shell.

Record types are referenced as ``package.module:TypeName``.
"""

import dataclasses
import importlib
import json
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Any, Optional

import typer
from pydantic import BaseModel, ValidationError
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from tagextract.exceptions import TagExtractError
from tagextract.extractor import ObjectParser
from tagextract.index import build_tag_index
from tagextract.logging_config import setup_logging

app = typer.Typer(
    name="tagextract",
    help="tagextract - Tag-driven field extraction for dataclasses and pydantic models",
    no_args_is_help=True,
)

console = Console()


@app.callback()
def main(
    log_level: Optional[str] = typer.Option(
        None, "--log-level", help="Log level (defaults to TAGEXTRACT_LOG_LEVEL)"
    ),
) -> None:
    """Configure logging for every command."""
    try:
        setup_logging(level=log_level)
    except ValueError as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        raise typer.Exit(1)


@app.command()
def index(
    target: str = typer.Argument(..., help="Record type as module:TypeName"),
    metadata_key: Optional[str] = typer.Option(
        None, help="Metadata key holding tag strings"
    ),
) -> None:
    """Show the tag index of a record type."""
    record_type = _load_record_type(target)

    try:
        tag_index = build_tag_index(record_type, metadata_key=metadata_key)
    except TagExtractError as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        raise typer.Exit(1)

    table = Table(title=f"Tag index: {record_type.__qualname__}")
    table.add_column("Field", style="cyan")
    table.add_column("Optional")
    table.add_column("Namespace", style="magenta")
    table.add_column("Key", style="green")
    table.add_column("Modifiers")

    for descriptor in tag_index:
        nilable = "yes" if descriptor.nilable else "no"
        field_tag = tag_index.fields[descriptor.name]
        if not field_tag.tags:
            table.add_row(descriptor.name, nilable, "-", "-", "-")
            continue
        for declaration in field_tag.tags.values():
            table.add_row(
                descriptor.name,
                nilable,
                declaration.namespace,
                declaration.key,
                ",".join(declaration.modifiers) or "-",
            )

    console.print(table)
    console.print(f"Namespaces: {', '.join(tag_index.namespaces) or 'none'}")


@app.command()
def extract(
    target: str = typer.Argument(..., help="Record type as module:TypeName"),
    namespace: str = typer.Option(..., "--namespace", "-n", help="Tag namespace"),
    data: str = typer.Option(
        "{}", "--data", "-d", help="JSON object of field values for the record"
    ),
    metadata_key: Optional[str] = typer.Option(
        None, help="Metadata key holding tag strings"
    ),
) -> None:
    """Build a record from JSON and print its extracted values."""
    record_type = _load_record_type(target)

    try:
        values = json.loads(data)
    except json.JSONDecodeError as e:
        console.print(
            f"[bold red]Error:[/bold red] Invalid JSON data: {escape(str(e))}"
        )
        raise typer.Exit(1)
    if not isinstance(values, dict):
        console.print("[bold red]Error:[/bold red] --data must be a JSON object")
        raise typer.Exit(1)

    try:
        record = _build_record(record_type, values)
    except (TypeError, ValidationError) as e:
        console.print(
            f"[bold red]Error:[/bold red] Cannot build record: {escape(str(e))}"
        )
        raise typer.Exit(1)

    try:
        result = ObjectParser(record, metadata_key=metadata_key).tag_value_map(
            namespace
        )
    except (TagExtractError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        raise typer.Exit(1)

    console.print_json(data=result, default=json_default)


def json_default(value: Any) -> Any:
    """Render extracted values that json cannot serialize natively."""
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, timedelta):
        return value.total_seconds()
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    return str(value)


def _load_record_type(target: str) -> type:
    module_name, sep, attr = target.partition(":")
    if not sep or not module_name or not attr:
        console.print(
            f"[bold red]Error:[/bold red] Expected module:TypeName, got {target!r}"
        )
        raise typer.Exit(1)

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        console.print(
            f"[bold red]Error:[/bold red] Cannot import {module_name}: "
            f"{escape(str(e))}"
        )
        raise typer.Exit(1)

    record_type = module
    for part in attr.split("."):
        record_type = getattr(record_type, part, None)
        if record_type is None:
            console.print(
                f"[bold red]Error:[/bold red] {attr} not found in {module_name}"
            )
            raise typer.Exit(1)

    if not isinstance(record_type, type):
        console.print(f"[bold red]Error:[/bold red] {target} is not a class")
        raise typer.Exit(1)

    return record_type


def _build_record(record_type: type, values: dict[str, Any]) -> Any:
    if issubclass(record_type, BaseModel):
        return record_type.model_validate(values)
    return record_type(**values)


if __name__ == "__main__":
    app()
