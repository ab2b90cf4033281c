"""Typer CLI entrypoints."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Annotated

import typer
from loguru import logger
from rich.console import Console
from rich.markup import escape

from l5infer.api import check_forms, infer_source
from l5infer.cli.interactive import InteractiveCli
from l5infer.config.settings import InferSettings, load_settings
from l5infer.core.errors import TypeCheckError
from l5infer.logging_utils import configure_logging
from l5infer.surface.parser import ParseError
from l5infer.surface.unparse import unparse, unparse_texp

app = typer.Typer(name="l5infer", help="Type inference for the L5 language", add_completion=False)


def _prepare() -> InferSettings:
    configure_logging()
    settings = load_settings()
    if sys.getrecursionlimit() < settings.recursion_limit:
        sys.setrecursionlimit(settings.recursion_limit)
    return settings


@app.command()
def infer(
    source: Annotated[str, typer.Argument(help="A single L5 expression")],
) -> None:
    """Infer the type of one expression."""
    settings = _prepare()
    console = Console()
    try:
        result = infer_source(
            source, tvar_prefix=settings.tvar_prefix, max_depth=settings.recursion_limit
        )
    except ParseError as e:
        console.print(f"[red]Parse error:[/red] {escape(str(e))}")
        raise typer.Exit(code=2) from e

    match result:
        case TypeCheckError() as error:
            console.print(f"[red]Type error:[/red] {escape(error.message)}")
            raise typer.Exit(code=1)
        case texp:
            console.print(escape(unparse_texp(texp)))


@app.command()
def check(
    path: Annotated[Path, typer.Argument(exists=True, dir_okay=False, readable=True)],
) -> None:
    """Infer the type of every top-level form in a file."""
    settings = _prepare()
    console = Console()
    logger.info("check.start path={}", str(path))
    try:
        results = check_forms(
            path.read_text(encoding="utf-8"),
            tvar_prefix=settings.tvar_prefix,
            filename=str(path),
            max_depth=settings.recursion_limit,
        )
    except ParseError as e:
        console.print(f"[red]Parse error:[/red] {escape(str(e))}")
        raise typer.Exit(code=2) from e

    if not results:
        console.print("[dim]No forms found[/dim]")
    for item in results:
        color = "green" if item.ok else "red"
        console.print(f"{escape(unparse(item.exp))} => [{color}]{escape(item.text)}[/{color}]")
    if not all(item.ok for item in results):
        raise typer.Exit(code=1)


@app.command()
def repl() -> None:
    """Type expressions interactively."""
    settings = _prepare()
    InteractiveCli(settings).run()


if __name__ == "__main__":
    app()
