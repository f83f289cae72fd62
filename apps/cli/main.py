"""CLI application for pkgshape."""

import json
import logging
import sys
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from pkgshape.classify import DependencySpecifier, GitHubShorthand, GitRemote, NpmAlias, Workspace, classify
from pkgshape.diagnostics import build_diagnostic, render_diagnostic
from pkgshape.errors import PackageJsonError
from pkgshape.fields import DEPENDENCY_SECTIONS
from pkgshape.parse_node import parse_package_json, serialize_package_json

console = Console()
err_console = Console(stderr=True)


def read_input(file_path: str) -> tuple[str, str]:
    """Read manifest text from a path or stdin ('-')."""
    if file_path == "-":
        return sys.stdin.read(), "<stdin>"
    path_obj = Path(file_path)
    if path_obj.is_dir():
        path_obj = path_obj / "package.json"
    if not path_obj.exists():
        console.print(f"Error: File {file_path} not found", style="red")
        raise typer.Exit(1)
    return path_obj.read_text(encoding="utf-8"), str(path_obj)


def describe(specifier: DependencySpecifier) -> str:
    """One-line detail for a classified specifier."""
    if isinstance(specifier, NpmAlias):
        return f"{specifier.name} ({specifier.specifier.protocol.value}: {specifier.specifier})"
    if isinstance(specifier, GitRemote):
        ref = f" @ {specifier.ref}" if specifier.ref else ""
        return f"{specifier.scheme}: {specifier.url}{ref}"
    if isinstance(specifier, GitHubShorthand):
        ref = f" @ {specifier.ref}" if specifier.ref else ""
        return f"{specifier.owner}/{specifier.repo}{ref}"
    if isinstance(specifier, Workspace):
        return specifier.range_suffix
    return str(specifier)


def fail(error: PackageJsonError, source: str | None, display_path: str) -> None:
    render_diagnostic(build_diagnostic(error, source), console=err_console, source=source, path=display_path)
    raise typer.Exit(1)


app = typer.Typer(
    name="pkgshape",
    help="pkgshape - Inspect and rewrite package.json manifests",
    add_completion=False,
)


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging")) -> None:
    """pkgshape - Inspect and rewrite package.json manifests."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")


@app.command()
def deps(
    file_path: str = typer.Argument(help="Path to package.json or its directory (use '-' for stdin)"),
    section: str | None = typer.Option(None, "--section", "-s", help="Only this dependency map"),
    format_type: str = typer.Option("table", "--format", help="Output format: table or json"),
) -> None:
    """Classify every declared dependency."""
    content, display_path = read_input(file_path)
    if section is not None and section not in DEPENDENCY_SECTIONS:
        console.print(f"Error: Unknown section {section}", style="red")
        raise typer.Exit(1)

    rows = []
    try:
        manifest = parse_package_json(content)
        for entry in manifest.iter_dependencies():
            if section and entry.section != section:
                continue
            specifier = entry.classify()
            rows.append((entry.section, entry.name, entry.spec, specifier))
    except PackageJsonError as e:
        fail(e, content, display_path)

    if format_type == "json":
        reports = [
            {"section": sec, "name": name, "spec": spec, "protocol": specifier.protocol.value, "detail": describe(specifier)}
            for sec, name, spec, specifier in rows
        ]
        typer.echo(json.dumps({"dependencies": reports}, indent=2))
        return

    if not rows:
        console.print("No dependencies declared")
        return

    table = Table(title=manifest.name or display_path)
    table.add_column("Section", style="dim")
    table.add_column("Name", style="bold")
    table.add_column("Specifier")
    table.add_column("Protocol", style="cyan")
    table.add_column("Detail")
    for sec, name, spec, specifier in rows:
        table.add_row(sec, name, spec, specifier.protocol.value, describe(specifier))
    console.print(table)


@app.command()
def check(
    file_path: str = typer.Argument(help="Path to package.json or its directory (use '-' for stdin)"),
) -> None:
    """Validate field shapes and dependency specifiers."""
    content, display_path = read_input(file_path)
    try:
        manifest = parse_package_json(content)
        count = 0
        for entry in manifest.iter_dependencies():
            entry.classify()
            count += 1
    except PackageJsonError as e:
        fail(e, content, display_path)

    console.print(
        f"[green]OK[/green] {manifest.name or display_path}: "
        f"{len(manifest.key_order)} fields, {len(manifest.extras)} unknown, {count} dependencies"
    )


@app.command()
def fmt(
    file_path: str = typer.Argument(help="Path to package.json or its directory (use '-' for stdin)"),
    normalize: bool = typer.Option(False, "--normalize", help="Rewrite polymorphic fields in normalized shape"),
    indent: int | None = typer.Option(None, "--indent", help="Indent width (default: keep the file's)"),
    output: str | None = typer.Option(None, "--out", "-o", help="Output file (use '-' for stdout)"),
    in_place: bool = typer.Option(False, "--in-place", "-i", help="Rewrite the file in place"),
) -> None:
    """Re-serialize a manifest."""
    content, display_path = read_input(file_path)
    try:
        manifest = parse_package_json(content)
    except PackageJsonError as e:
        fail(e, content, display_path)

    shape_policy = "normalized" if normalize else "preserve"
    output_content = serialize_package_json(manifest, indent=indent, shape_policy=shape_policy)

    if in_place and file_path != "-":
        Path(display_path).write_text(output_content, encoding="utf-8")
        console.print(f"Updated {display_path}")
    elif output and output != "-":
        Path(output).write_text(output_content, encoding="utf-8")
        console.print(f"Wrote manifest to {output}")
    else:
        sys.stdout.write(output_content)


@app.command("classify")
def classify_command(
    specs: list[str] = typer.Argument(help="Dependency specifiers to classify"),
) -> None:
    """Classify raw specifier strings."""
    for raw in specs:
        try:
            specifier = classify(raw)
        except PackageJsonError as e:
            fail(e, None, "<argument>")
        console.print(f"{raw!r}: [cyan]{specifier.protocol.value}[/cyan] {describe(specifier)}")


if __name__ == "__main__":
    app()
