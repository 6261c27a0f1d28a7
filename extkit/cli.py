from __future__ import annotations

import json
from dataclasses import asdict
from enum import Enum
from pathlib import Path
from typing import Callable, NoReturn, Optional

import typer
from rich.console import Console
from rich.table import Table

from . import __version__
from .config import ScaffoldSettings, load_settings
from .errors import (
    ConfigError,
    InvalidIdentifier,
    InvalidLanguageSelection,
    ScaffoldError,
    TargetAlreadyExists,
    TemplateNotFound,
)
from .naming import DerivedNames, Language, derive_names, parse_language, validate_identifier
from .scaffold import ScaffoldOptions, scaffold_extension

app = typer.Typer(help="Create new QuPath extensions from the extension template.")
console = Console()

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_INVALID_INPUT = 2
EXIT_NOT_FOUND = 3

ERROR_CODES: dict[type[ScaffoldError], tuple[int, str]] = {
    ConfigError: (EXIT_INVALID_INPUT, "config_error"),
    InvalidIdentifier: (EXIT_INVALID_INPUT, "invalid_identifier"),
    InvalidLanguageSelection: (EXIT_INVALID_INPUT, "invalid_language"),
    TargetAlreadyExists: (EXIT_ERROR, "target_exists"),
    TemplateNotFound: (EXIT_NOT_FOUND, "template_not_found"),
}


class OutputFormat(str, Enum):
    table = "table"
    json = "json"
    md = "md"


def _echo_envelope(command: str, exit_code: int, **body: object) -> None:
    envelope = {"ok": exit_code == EXIT_OK, "command": command, "exit_code": exit_code, **body}
    typer.echo(json.dumps(envelope, ensure_ascii=True, sort_keys=True))


def _print_key_value_table(title: str, rows: list[tuple[str, str]]) -> None:
    table = Table(title=title)
    table.add_column("Field")
    table.add_column("Value")
    for key, value in rows:
        table.add_row(key, value)
    console.print(table)


def _emit_success(
    command: str,
    output_format: OutputFormat,
    data: dict,
    md_renderer: Callable[[dict], str] | None = None,
    table_renderer: Callable[[dict], None] | None = None,
) -> None:
    if output_format == OutputFormat.json:
        _echo_envelope(command, EXIT_OK, data=data)
    elif output_format == OutputFormat.md:
        if md_renderer is None:
            bullets = [f"- **{key}**: {value}" for key, value in data.items()]
            console.print("\n".join([f"# {command}", "", *bullets]))
        else:
            console.print(md_renderer(data))
    elif table_renderer is None:
        _print_key_value_table(command, [(str(key), str(value)) for key, value in data.items()])
    else:
        table_renderer(data)


def _fail(command: str, output_format: OutputFormat, error: ScaffoldError) -> NoReturn:
    """Report ``error`` in the requested format and exit with its mapped code."""
    exit_code, code = ERROR_CODES[type(error)]
    message = str(error)
    if output_format == OutputFormat.json:
        _echo_envelope(command, exit_code, error={"code": code, "message": message})
    elif output_format == OutputFormat.md:
        console.print(f"# {command}\n\n- **status**: error\n- **code**: {code}\n- **message**: {message}")
    else:
        console.print(f"[red]Error ({code}):[/red] {message}")
    raise typer.Exit(code=exit_code)


def _name_rows(names: DerivedNames) -> list[tuple[str, str]]:
    return [
        ("Extension name", names.identifier),
        ("Kebab-case", names.kebab),
        ("Lowercase", names.lower),
        ("Package name", names.package_name),
        ("Artifact ID", names.artifact_id),
        ("Module ID", names.module_id),
    ]


def _prompt_name(settings: ScaffoldSettings) -> str:
    value = typer.prompt("Enter extension name (e.g., MyExtension)", default=settings.default_name)
    return value.strip() or settings.default_name


def _resolve_language(language: str | None, name: str | None, settings: ScaffoldSettings) -> Language:
    if language is not None:
        return parse_language(language)
    if name is not None:
        return parse_language(settings.default_language)
    value = typer.prompt("Language [java/groovy/both]", default=settings.default_language)
    return parse_language(value.strip() or settings.default_language)


def _confirmed() -> bool:
    answer = typer.prompt("Continue? (y/n)", default="", show_default=False)
    return answer.strip().lower() in ("y", "yes")


@app.command("new")
def new_extension(
    name: Optional[str] = typer.Option(None, "--name", "-n", help="Extension name in CamelCase, e.g. MyExtension."),
    language: Optional[str] = typer.Option(None, "--language", "-l", help="java, groovy or both (default: java)."),
    template: Path = typer.Option(Path("."), "--template", "-t", help="Template root directory."),
    output_format: OutputFormat = typer.Option(OutputFormat.table, "--format", help="Output format."),
):
    """Create a new extension next to the template directory."""
    template_root = template.resolve()
    interactive = name is None and language is None

    try:
        settings = load_settings(template_root)
    except ConfigError as error:
        _fail("new", output_format, error)

    try:
        identifier = validate_identifier(name if name is not None else _prompt_name(settings))
        selected = _resolve_language(language, name, settings)
    except (InvalidIdentifier, InvalidLanguageSelection) as error:
        _fail("new", output_format, error)

    if interactive:
        names = derive_names(identifier)
        _print_key_value_table("Creating extension with", [*_name_rows(names), ("Language", selected.value)])
        if not _confirmed():
            console.print("Cancelled.")
            raise typer.Exit(code=EXIT_OK)

    options = ScaffoldOptions(
        identifier=identifier,
        template_root=template_root,
        language=selected,
        settings=settings,
    )
    try:
        report = scaffold_extension(options)
    except (TargetAlreadyExists, TemplateNotFound) as error:
        _fail("new", output_format, error)

    data = {
        "path": str(report.target),
        "language": report.language.value,
        "names": asdict(report.names),
        "updated": list(report.updated),
        "renamed": [{"from": source, "to": destination} for source, destination in report.renamed],
        "deleted": list(report.deleted),
        "removed_dirs": list(report.removed_dirs),
        "warnings": list(report.warnings),
    }
    pruned = "Groovy" if selected == Language.java else "Java"

    def render_md(payload: dict) -> str:
        lines = [f"# Extension created: `{payload['path']}`", ""]
        lines.append(f"- **language**: `{payload['language']}`")
        lines.extend(f"- **{key}**: `{value}`" for key, value in payload["names"].items())
        lines.append(f"- **updated_count**: {len(payload['updated'])}")
        lines.append(f"- **renamed_count**: {len(payload['renamed'])}")
        lines.append(f"- **deleted_count**: {len(payload['deleted'])}")
        lines.append(f"- **removed_dirs_count**: {len(payload['removed_dirs'])}")
        if payload["renamed"]:
            lines.append("\n## Renamed")
            lines.extend(f"- `{item['from']}` -> `{item['to']}`" for item in payload["renamed"])
        if payload["deleted"]:
            lines.append("\n## Deleted")
            lines.extend(f"- `{item}`" for item in payload["deleted"])
        if payload["warnings"]:
            lines.append("\n## Warnings")
            lines.extend(f"- {item}" for item in payload["warnings"])
        return "\n".join(lines)

    def render_table(payload: dict) -> None:
        for item in payload["updated"]:
            console.print(f"  Updated: {item}")
        for item in payload["renamed"]:
            console.print(f"  Renamed: {item['from']} -> {item['to']}")
        for item in payload["deleted"]:
            console.print(f"  Deleted (not {pruned} project): {item}")
        for item in payload["removed_dirs"]:
            console.print(f"  Removed empty dir: {item}")
        for item in payload["warnings"]:
            console.print(f"  [yellow]WARNING:[/yellow] {item}")

        _print_key_value_table(
            title="Extension summary",
            rows=[
                ("path", payload["path"]),
                ("language", payload["language"]),
                ("updated", str(len(payload["updated"]))),
                ("renamed", str(len(payload["renamed"]))),
                ("deleted", str(len(payload["deleted"]))),
                ("removed empty dirs", str(len(payload["removed_dirs"]))),
                ("warnings", str(len(payload["warnings"]))),
            ],
        )
        artifact_id = payload["names"]["artifact_id"]
        console.print(f"[green]Extension created successfully at:[/green] {payload['path']}")
        console.print("Next steps:")
        console.print(f"  1. cd {artifact_id}")
        console.print("  2. ./gradlew build")
        console.print(f"  3. Drag build/libs/{artifact_id}-*.jar onto QuPath")

    _emit_success(command="new", output_format=output_format, data=data, md_renderer=render_md, table_renderer=render_table)


@app.command("names")
def show_names(
    name: str = typer.Argument(..., help="Extension name in CamelCase."),
    output_format: OutputFormat = typer.Option(OutputFormat.table, "--format", help="Output format."),
):
    """Show the names derived from an extension name without writing anything."""
    try:
        names = derive_names(validate_identifier(name))
    except InvalidIdentifier as error:
        _fail("names", output_format, error)

    def render_table(payload: dict) -> None:
        _print_key_value_table(title=f"Derived names: {name}", rows=_name_rows(names))

    _emit_success(command="names", output_format=output_format, data=asdict(names), table_renderer=render_table)


@app.command("version")
def version(
    output_format: OutputFormat = typer.Option(OutputFormat.table, "--format", help="Output format."),
) -> None:
    """Print version."""
    _emit_success(command="version", output_format=output_format, data={"version": __version__})


if __name__ == "__main__":
    app()
