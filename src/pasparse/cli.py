"""pasparse command line interface."""

from __future__ import annotations

import dataclasses
from pathlib import Path

import click

from pasparse import __version__
from pasparse.ast_nodes import Node
from pasparse.config import resolve_config
from pasparse.errors import DiagnosticRenderer, PascalError
from pasparse.lexer import Lexer
from pasparse.parser import Parser


def _collect_sources(target: Path, extensions: list[str]) -> list[Path]:
    if target.is_file():
        return [target]
    suffixes = {ext.lower() for ext in extensions}
    return sorted(p for p in target.rglob("*") if p.is_file() and p.suffix.lower() in suffixes)


def _read_source(file: Path) -> str:
    try:
        return file.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise PascalError(f"File is not valid UTF-8: {e.reason} at byte {e.start}") from None


def _report(
    renderer: DiagnosticRenderer, error: PascalError, filename: str, source: str | None = None,
) -> None:
    if source is not None:
        renderer.add_source(filename, source)
    click.echo(renderer.render(error.to_diagnostic(filename)), err=True)


@click.group()
@click.version_option(__version__, prog_name="pasparse")
def main() -> None:
    """Lexer and parser for a subset of Pascal."""


@main.command()
@click.argument("path", default=".", type=click.Path(exists=True))
@click.option("--no-color", is_flag=True, help="Disable colored diagnostics.")
def check(path: str, no_color: bool) -> None:
    """Parse Pascal sources and report syntax errors."""
    config = resolve_config(Path(path))
    files = _collect_sources(Path(path), config.check.extensions)
    if not files:
        click.echo("warning: no Pascal sources found", err=True)
        return

    renderer = DiagnosticRenderer(color=config.check.color and not no_color)
    failed = 0
    for file in files:
        source = None
        try:
            source = _read_source(file)
            Parser(Lexer(source)).parse()
        except PascalError as e:
            failed += 1
            _report(renderer, e, str(file), source)
            continue
        click.echo(f"ok {file}")

    if failed:
        click.echo(f"{failed} of {len(files)} file(s) failed to parse", err=True)
        raise SystemExit(1)


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
def tokens(file: str) -> None:
    """Print the token stream of a Pascal source file."""
    config = resolve_config(Path(file))
    source = None
    try:
        source = _read_source(Path(file))
        for tok in Lexer(source):
            pos = tok.location
            where = f"{pos.line}:{pos.column}" if pos is not None else "?:?"
            click.echo(f"{where:<8} {tok.kind.name:<15} {tok.value!r}")
    except PascalError as e:
        _report(DiagnosticRenderer(color=config.check.color), e, file, source)
        raise SystemExit(1)


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option("--locations", is_flag=True, help="Show node locations.")
def view(file: str, locations: bool) -> None:
    """View the AST of a Pascal source file."""
    config = resolve_config(Path(file))
    source = None

    try:
        source = _read_source(Path(file))
        program = Parser(Lexer(source)).parse()
    except PascalError as e:
        _report(DiagnosticRenderer(color=config.check.color), e, file, source)
        raise SystemExit(1)

    _dump_ast(program, 0, show_locations=locations or config.view.locations)


@main.command()
def lsp() -> None:
    """Start the pasparse language server."""
    from pasparse.lsp import main as lsp_main

    lsp_main()


def _dump_ast(node: Node, depth: int, *, show_locations: bool = False) -> None:
    """Print a readable AST dump."""
    indent = "  " * depth

    header = f"{indent}{node.type}"
    if show_locations:
        header += f" @{node.location.start}-{node.location.end}"
    click.echo(header)
    for f in dataclasses.fields(node):
        field_name = f.name
        if field_name == "location":
            continue
        value = getattr(node, field_name)
        if isinstance(value, tuple):
            if value:
                click.echo(f"{indent}  {field_name}:")
                for item in value:
                    _dump_ast(item, depth + 2, show_locations=show_locations)
            else:
                click.echo(f"{indent}  {field_name}: []")
        elif dataclasses.is_dataclass(value):
            click.echo(f"{indent}  {field_name}:")
            _dump_ast(value, depth + 2, show_locations=show_locations)
        elif value is not None:
            click.echo(f"{indent}  {field_name}: {value!r}")
