"""
CLI entry point for project-packer.

Packs a directory into one LLM-ready bundle and unpacks (possibly LLM-edited)
bundles back into files.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.progress import Progress, SpinnerColumn, TextColumn

from . import __version__
from .archive import ArchiveReport, extract_to_directory, write_zip
from .bundle import decode_bundle
from .config import EXTRA_FILES_DIR, PROMPT_HINT, Config
from .config_loader import load_config, merge_cli_with_config
from .errors import ConfigError, NoMarkersFound
from .scanner import scan_directory
from .utils import estimate_tokens, is_binary_file, read_file_safe, safe_file_stem

# Initialize CLI app
app = typer.Typer(
    name="project-packer",
    help="Pack a project into one LLM-ready text bundle, and unpack bundles back into files.",
    add_completion=False,
)

console = Console()
err_console = Console(stderr=True)


def configure_logging(verbose: bool) -> None:
    """Route library logging through rich on stderr."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"project-packer version {__version__}")
        raise typer.Exit()


def read_text_source(source: str) -> str:
    """Read text from a file path, or from stdin when `source` is `-`."""
    if source == "-":
        return sys.stdin.read()
    path = Path(source)
    if not path.is_file():
        raise FileNotFoundError(f"File not found: {source}")
    content, _ = read_file_safe(path)
    return content


@app.callback()
def main_callback(
    version: bool = typer.Option(
        False,
        "--version", "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """Pack a project into one LLM-ready text bundle, and unpack bundles back into files."""


@app.command()
def pack(
    path: Path = typer.Argument(
        ...,
        help="Project directory to pack.",
        exists=True,
        file_okay=False,
        dir_okay=True,
        resolve_path=True,
    ),
    output_dir: Optional[Path] = typer.Option(
        None,
        "--output-dir", "-o",
        help="Directory for the generated bundle (default: ./out).",
    ),
    to_stdout: bool = typer.Option(
        False,
        "--stdout",
        help="Write the bundle to stdout instead of a file.",
    ),
    extra: Optional[list[Path]] = typer.Option(
        None,
        "--extra", "-x",
        help="Extra file to append under Extra_Files/ (repeatable).",
        exists=True,
        file_okay=True,
        dir_okay=False,
    ),
    exclude_glob: Optional[str] = typer.Option(
        None,
        "--exclude-glob", "-e",
        help="Comma-separated gitignore-style globs to exclude (e.g., 'docs/**,*.md').",
    ),
    max_file_bytes: Optional[int] = typer.Option(
        None,
        "--max-file-bytes",
        help="Files larger than this keep only a placeholder (default: 1 MiB).",
    ),
    no_ignore_file: bool = typer.Option(
        False,
        "--no-ignore-file",
        help="Don't load the project's .gitignore rules.",
    ),
    ignore_file: Optional[Path] = typer.Option(
        None,
        "--ignore-file",
        help="Load ignore rules from this file instead of <path>/.gitignore.",
        exists=True,
        file_okay=True,
        dir_okay=False,
    ),
    no_root_name: bool = typer.Option(
        False,
        "--no-root-name",
        help="Don't prefix bundle paths with the project folder name.",
    ),
    config_file: Optional[Path] = typer.Option(
        None,
        "--config", "-c",
        help="Config file (default: project-packer.toml / packer.yml in <path>).",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        help="Show debug logging.",
    ),
) -> None:
    """
    Pack a directory into a single text bundle.

    Examples:

        # Pack a project into ./out/<name>_<timestamp>.txt
        project-packer pack ./my-project

        # Pipe the bundle somewhere else
        project-packer pack ./my-project --stdout | pbcopy

        # Add loose files and skip docs
        project-packer pack ./my-project -x notes.txt -e "docs/**"
    """
    configure_logging(verbose)
    out = err_console if to_stdout else console

    try:
        project_config = load_config(path, config_file)
        settings = merge_cli_with_config(
            project_config,
            exclude_glob=exclude_glob,
            max_file_bytes=max_file_bytes,
            output_dir=output_dir,
            no_ignore_file=no_ignore_file,
            no_root_name=no_root_name,
        )
        config = Config(path=path, ignore_file=ignore_file, **settings)
    except (ConfigError, ValueError) as e:
        out.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=out,
        transient=True,
    ) as progress:
        progress.add_task("Scanning files...", total=None)
        session, stats = scan_directory(config)

    for extra_path in extra or []:
        if is_binary_file(extra_path):
            out.print(f"[yellow]Warning: Skipped binary file {escape(str(extra_path))}[/yellow]")
            continue
        try:
            content, _ = read_file_safe(extra_path)
        except OSError as e:
            out.print(f"[yellow]Warning: Skipped {escape(str(extra_path))}: {escape(str(e))}[/yellow]")
            continue
        extra_name = f"{EXTRA_FILES_DIR}/{extra_path.name}"
        if extra_name in session:
            out.print(f"[yellow]Warning: {escape(extra_name)} replaced by {escape(str(extra_path))}[/yellow]")
        session.add_extra_file(extra_path.name, content)

    if not session.selected_entries():
        out.print("[red]Error: No valid code files found (everything was filtered).[/red]")
        raise typer.Exit(1)

    bundle = session.encode()
    tokens = estimate_tokens(bundle)

    if to_stdout:
        sys.stdout.write(bundle)
        sys.stdout.flush()
    else:
        config.output_dir.mkdir(parents=True, exist_ok=True)
        bundle_path = config.output_dir / session.bundle_filename()
        try:
            with open(bundle_path, "w", encoding="utf-8", newline="") as f:
                f.write(bundle)
        except OSError as e:
            out.print(f"[red]Error: Could not write bundle: {escape(str(e))}[/red]")
            raise typer.Exit(1)

    out.print()
    out.print(f"[bold green]✓ Packed {len(session.selected_entries())} files[/bold green]")
    out.print()
    out.print("[cyan]Statistics:[/cyan]")
    out.print(f"  Files scanned: {stats.files_scanned}")
    out.print(f"  Files included: {stats.files_included}")
    out.print(f"  Files skipped (ignored): {stats.files_skipped_ignored}")
    out.print(f"  Files skipped (glob): {stats.files_skipped_glob}")
    out.print(f"  Files skipped (binary/unreadable): {stats.files_skipped_unreadable}")
    out.print(f"  Oversized (placeholder): {stats.files_oversized}")
    out.print(f"  Estimated tokens: ~{tokens:,}")
    if not to_stdout:
        out.print()
        out.print("[cyan]Output file:[/cyan]")
        out.print(f"  {escape(str(bundle_path))}")


def _print_report(report: ArchiveReport, kind: str) -> None:
    console.print(f"[cyan]{kind}:[/cyan] {escape(str(report.target))}")
    for failure in report.failures:
        console.print(f"[yellow]Warning: {escape(str(failure))}[/yellow]")


@app.command()
def unpack(
    bundle: str = typer.Argument(
        ...,
        help="Bundle text file to unpack, or '-' to read stdin.",
    ),
    output_dir: Path = typer.Option(
        Path("./out"),
        "--output-dir", "-o",
        help="Directory for the zip archive or extracted files.",
    ),
    extract: bool = typer.Option(
        False,
        "--extract",
        help="Write files into <output-dir>/ (or <output-dir>/<name>/ with --name) instead of a zip archive.",
    ),
    name: Optional[str] = typer.Option(
        None,
        "--name", "-n",
        help="Archive/folder name (default: first folder in the bundle).",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        help="Show debug logging.",
    ),
) -> None:
    """
    Restore files from a bundle into a zip archive or a directory.

    Marker lines may use any run of '=' or '-' and loose spacing, e.g.
    '---- File: src/app.py ----'.
    """
    configure_logging(verbose)

    try:
        text = read_text_source(bundle)
    except OSError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    if not text.strip():
        console.print("[red]Error: Bundle is empty. Paste or pass the packed text first.[/red]")
        raise typer.Exit(1)

    try:
        result = decode_bundle(text)
    except NoMarkersFound as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    if not result.files:
        console.print("[red]Error: No valid files could be extracted.[/red]")
        raise typer.Exit(1)

    base_name = safe_file_stem(name or result.project_name, result.project_name)

    if extract:
        # Decoded paths usually start with the project folder already
        prefix = f"{result.project_name}/"
        if name is None and all(f.path.startswith(prefix) for f in result.files):
            dest = output_dir
        else:
            dest = output_dir / base_name
        report = extract_to_directory(result.files, dest)
    else:
        try:
            report = write_zip(result.files, base_name, output_dir)
        except OSError as e:
            console.print(f"[red]Error: Could not create archive: {escape(str(e))}[/red]")
            raise typer.Exit(1)

    console.print()
    console.print(f"[bold green]✓ Restored {len(report.written)} files[/bold green]")
    console.print(f"  {result.summary().capitalize()}")
    if result.skipped:
        console.print(f"  Skipped (empty or unsafe path): {len(result.skipped)}")
    _print_report(report, "Directory" if extract else "Archive")

    if report.failures:
        raise typer.Exit(1)


@app.command()
def tokens(
    source: str = typer.Argument(
        ...,
        help="Text file to measure, or '-' to read stdin.",
    ),
) -> None:
    """Show an approximate LLM token count for a text file."""
    try:
        text = read_text_source(source)
    except OSError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1)
    console.print(f"~{estimate_tokens(text):,} tokens (approximate)")


@app.command()
def hint() -> None:
    """Print a prompt telling an LLM to answer in raw bundle format."""
    typer.echo(PROMPT_HINT, nl=False)


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
