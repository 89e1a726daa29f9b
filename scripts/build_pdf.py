#!/usr/bin/env python3
"""
PDF Build CLI

Renders LaTeX source to PDF through an external engine using the rendering context.

Commands:
    build    - Render a LaTeX file (or stdin) to PDF
    engines  - List the configured engine presets
    command  - Show the command line a build would run

Examples:\n

    build_pdf.py build paper.tex                              # Writes paper.pdf

    build_pdf.py build paper.tex -e lualatex -p 2             # Different engine, two passes

    cat paper.tex | build_pdf.py build - -o out.pdf           # Read source from stdin

    build_pdf.py build paper.tex --post-process "qpdf --linearize --replace-input %file%"
"""

import shutil
import sys
from pathlib import Path
from typing import Optional

import typer
from typing_extensions import Annotated

from texwrap.contexts.rendering import DocumentBuilder
from texwrap.contexts.rendering.command import materialize
from texwrap.contexts.rendering.config import LOGS_PATH, load_engine_presets, resolve_command
from texwrap.contexts.rendering.exceptions import UnknownEnginePresetError
from texwrap.contexts.rendering.logger import _log_info, setup_rendering_logger
from texwrap.utils.timestamp import now

app = typer.Typer(
    help="Render LaTeX to PDF with an external engine",
    add_completion=False,
    invoke_without_command=True,
)


@app.callback()
def main(ctx: typer.Context):
    """Show help by default when no command is provided."""
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()


def _read_source(source: str) -> str:
    if source == "-":
        return sys.stdin.read()
    source_path = Path(source)
    if not source_path.exists():
        typer.secho(f"Error: Source file not found: {source_path}\n", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    return source_path.read_text(encoding="utf-8")


def _print_errors(errors: dict, verbose: bool) -> None:
    for category, message in errors.items():
        lines = message.strip().splitlines() or [""]
        typer.secho(f"  - {category}: {lines[0]}", fg=typer.colors.RED)
        limit = len(lines) if verbose else 10
        for line in lines[1:limit]:
            typer.echo(f"      {line}")
        if len(lines) > limit:
            typer.echo(f"      ... and {len(lines) - limit} more lines (use --verbose)")


@app.command("build")
def build_command(
    source: Annotated[
        str,
        typer.Argument(help="LaTeX source file, or '-' to read from stdin"),
    ],
    output: Annotated[
        Optional[Path],
        typer.Option(
            "--output",
            "-o",
            help="Where to write the PDF (default: source with .pdf suffix)",
        ),
    ] = None,
    engine: Annotated[
        Optional[str],
        typer.Option(
            "--engine",
            "-e",
            help="Engine preset name or command template with %dir% and %file%",
        ),
    ] = None,
    num_passes: Annotated[
        Optional[int],
        typer.Option(
            "--passes",
            "-p",
            help="Number of engine passes (default: 3 for cross-references)",
            min=1,
            max=10,
        ),
    ] = None,
    timeout: Annotated[
        Optional[float],
        typer.Option(
            "--timeout",
            "-t",
            help="Abort an engine pass after this many seconds",
        ),
    ] = None,
    post_process: Annotated[
        Optional[str],
        typer.Option(
            "--post-process",
            help="Command run on the PDF after a successful build (%file% is the PDF)",
        ),
    ] = None,
    quote_paths: Annotated[
        bool,
        typer.Option(
            "--quote-paths",
            help="Shell-quote substituted paths",
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Show debug logging and the full engine output",
        ),
    ] = False,
):
    """
    Render a LaTeX file to PDF.

    The source is copied into a temporary file, built there, and the PDF is
    copied to the output path. Engine side-files never touch the source directory.

    Examples:\n

        $ build_pdf.py build paper.tex                       # Writes paper.pdf

        $ build_pdf.py build paper.tex --passes 1            # Single pass

        $ build_pdf.py build - -o out.pdf < paper.tex        # From stdin
    """
    if output is None:
        if source == "-":
            typer.secho("Error: --output is required when reading from stdin\n", fg=typer.colors.RED, err=True)
            raise typer.Exit(code=1)
        output = Path(source).with_suffix(".pdf")

    content = _read_source(source)

    try:
        builder = DocumentBuilder(
            command=engine, passes=num_passes, timeout=timeout, quote_paths=quote_paths
        )
    except ValueError as e:
        typer.secho(f"Error: {e}\n", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    log_dir = LOGS_PATH / f"build_{now()}"
    log_file = setup_rendering_logger(log_dir, command=builder.command, verbose=verbose)

    typer.secho(f"\nBuilding: {source}", fg=typer.colors.BLUE, bold=True)
    typer.echo(f"Passes: {builder.passes}")
    typer.echo("")

    with builder:
        if not builder.save_source(content):
            typer.secho(f"Error: Could not write {builder.source_path}\n", fg=typer.colors.RED, err=True)
            raise typer.Exit(code=1)

        result = builder.build()
        if result and post_process:
            result = builder.post_process(post_process)

        if result:
            output.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(result.pdf_path, output)
            _log_info(f"PDF saved to: {output}")
        builder.delete_source()
        if builder.output_file:
            builder.output_file.unlink()

    typer.echo("")
    if result:
        typer.secho("✓ Build succeeded", fg=typer.colors.GREEN, bold=True)
        if result.page_count is not None:
            typer.echo(f"  Pages: {result.page_count}")
        typer.echo(f"  PDF: {output}")
        if result.errors:
            typer.secho("\nWarnings:", fg=typer.colors.YELLOW)
            _print_errors(result.errors, verbose)
    else:
        typer.secho("✗ Build failed", fg=typer.colors.RED, bold=True)
        _print_errors(result.errors, verbose)

    typer.echo(f"  Log: {log_file}")
    typer.echo("")

    raise typer.Exit(code=0 if result else 1)


@app.command("engines")
def engines_command():
    """
    List the configured engine presets.

    Examples:\n

        $ build_pdf.py engines
    """
    presets = load_engine_presets()
    width = max(len(name) for name in presets)
    for name, template in presets.items():
        typer.echo(f"{name:<{width}}  {template}")


@app.command("command")
def command_command(
    source: Annotated[
        Optional[Path],
        typer.Argument(help="Source path to substitute (default: sample temporary path)"),
    ] = None,
    engine: Annotated[
        Optional[str],
        typer.Option(
            "--engine",
            "-e",
            help="Engine preset name or command template with %dir% and %file%",
        ),
    ] = None,
    quote_paths: Annotated[
        bool,
        typer.Option("--quote-paths", help="Shell-quote substituted paths"),
    ] = False,
):
    """
    Show the command line a build would run, without running it.

    Examples:\n

        $ build_pdf.py command /tmp/doc123 -e "engine --batch --out=%dir% %file%"
    """
    try:
        template = resolve_command(engine)
    except UnknownEnginePresetError as e:
        typer.secho(f"Error: {e}\n", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    source = (source or Path("/tmp/textempXXXXXX")).absolute()
    typer.echo(materialize(template, source.parent, source, quote=quote_paths))


if __name__ == "__main__":
    app()
