#!/usr/bin/env python3
"""
Command-line interface for candidate longlist decks.

Subcommands:
- render: Fill a presentation template with candidate records
- summary: Format candidate records as markdown for manual copy
- inspect: List the templated slides of a template and their placeholder keys
"""

import os
from pathlib import Path
from typing import List

import typer
from dotenv import load_dotenv

from longlist.contexts.rendering.archive_store import PackageArchive
from longlist.contexts.rendering.slide_package import list_slide_parts
from longlist.contexts.templating.candidate_data_structure import load_records
from longlist.contexts.templating.config_resolver import resolve_deck_config
from longlist.contexts.templating.exceptions import DeckGenerationError
from longlist.contexts.templating.markdown_formatter import format_candidates_markdown
from longlist.contexts.templating.placeholder_grammar import find_placeholder_keys
from longlist.contexts.templating.run_injector import merge_split_runs
from longlist.contexts.templating.template_engine import generate_deck

load_dotenv()
DECK_TEMPLATE_PATH = Path(os.getenv("DECK_TEMPLATE_PATH", "template_with_placeholders.pptx"))


def display_path(path: Path) -> str:
    """Return path relative to the working directory for cleaner display."""
    try:
        return str(Path(path).resolve().relative_to(Path.cwd()))
    except ValueError:
        return str(path)


app = typer.Typer(
    add_completion=False,
    help="Generate candidate longlist decks from a presentation template",
    invoke_without_command=True,
)


@app.callback()
def main(ctx: typer.Context):
    """Show help by default when no command is provided."""
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()


@app.command("render")
def render_command(
    records_file: Path = typer.Argument(
        ...,
        help="YAML or JSON file with candidate records",
        exists=True,
        file_okay=True,
        dir_okay=False,
    ),
    template: Path = typer.Option(
        DECK_TEMPLATE_PATH,
        "--template",
        "-t",
        help="Presentation template with placeholders",
    ),
    output: Path = typer.Option(
        None,
        "--output",
        "-o",
        help="Output path (default: outs/decks/Candidate_Summary_Generated.pptx)",
    ),
    preset: List[str] = typer.Option(
        None,
        "--preset",
        "-p",
        help="Deck preset to apply (repeatable, e.g. -p layout_compact -p history_short)",
    ),
    page_capacity: int = typer.Option(
        None,
        "--page-capacity",
        "-k",
        help="Candidate slots per slide",
        min=1,
    ),
    max_records: int = typer.Option(
        None,
        "--max-records",
        "-m",
        help="Maximum number of candidates rendered",
        min=0,
    ),
    work_history_cap: int = typer.Option(
        None,
        "--work-history-cap",
        help="Maximum jobs shown per candidate",
        min=0,
    ),
    workers: int = typer.Option(
        None,
        "--workers",
        "-w",
        help="Threads used to render slides",
        min=1,
    ),
):
    """
    Render a candidate longlist deck from a template.

    Placeholders on each templated slide are filled with one page of candidates.
    Extra pages are added as copies of the last templated slide.

    Logs are saved to outs/logs/render_TIMESTAMP/.

    Examples:\n

        $ render_deck.py render candidates.yaml -t template_with_placeholders.pptx

        $ render_deck.py render candidates.yaml -p layout_compact -m 30 -o deck.pptx
    """
    try:
        config = resolve_deck_config(
            preset_names=preset,
            overrides={
                "page_capacity": page_capacity,
                "max_records": max_records,
                "work_history_cap": work_history_cap,
                "workers": workers,
            },
        )
        records = load_records(records_file)
    except ValueError as e:
        typer.secho(f"Error: {e}\n", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    typer.secho(
        f"\nRendering {len(records)} candidates into {display_path(template)}\n",
        fg=typer.colors.BLUE,
        bold=True,
    )

    result = generate_deck(template, records, output_path=output, config=config)

    if result.success:
        typer.secho("\n✓ Deck generation succeeded", fg=typer.colors.GREEN)
        typer.echo(f"  Time: {result.time_s:.2f}s")
        typer.echo(f"  Pages: {result.pages}")
        typer.echo(f"  Candidates: {result.records_rendered}")
        if result.records_truncated:
            typer.secho(
                f"  Not rendered (over --max-records): {result.records_truncated}",
                fg=typer.colors.YELLOW,
            )
        if result.injection_fallbacks:
            typer.secho(
                f"  Values without run formatting: {result.injection_fallbacks}",
                fg=typer.colors.YELLOW,
            )
        typer.echo(f"  Deck: {display_path(result.output_path)}")
    else:
        typer.secho("\n✗ Deck generation failed", fg=typer.colors.RED, err=True)
        typer.secho(f"  Error: {result.error}", err=True)

    if result.log_dir:
        typer.echo(f"  Log: {display_path(result.log_dir / 'template.log')}")
    typer.echo("")

    raise typer.Exit(code=0 if result.success else 1)


@app.command("summary")
def summary_command(
    records_file: Path = typer.Argument(
        ...,
        help="YAML or JSON file with candidate records",
        exists=True,
        file_okay=True,
        dir_okay=False,
    ),
    output: Path = typer.Option(
        None,
        "--output",
        "-o",
        help="Write markdown to this file (default: print to stdout)",
    ),
):
    """
    Format candidate records as markdown for manual copy into a deck.

    Examples:\n

        $ render_deck.py summary candidates.yaml

        $ render_deck.py summary candidates.yaml -o longlist.md
    """
    try:
        records = load_records(records_file)
    except ValueError as e:
        typer.secho(f"Error: {e}\n", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    markdown = format_candidates_markdown(records)

    if output is None:
        typer.echo(markdown)
        return

    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(markdown, encoding="utf-8")
    typer.secho(f"✓ Wrote {len(records)} candidates to {display_path(output)}", fg=typer.colors.GREEN)


@app.command("inspect")
def inspect_command(
    template: Path = typer.Argument(
        DECK_TEMPLATE_PATH,
        help="Presentation template to inspect",
    ),
):
    """
    List the slides of a template and the placeholder keys each one uses.

    Slides without placeholders are shown dimmed; they are copied to the output
    unchanged.

    Example:\n

        $ render_deck.py inspect template_with_placeholders.pptx
    """
    try:
        archive = PackageArchive.from_path(template)
        slides = list_slide_parts(archive)
        keys_by_slide = {
            name: find_placeholder_keys(merge_split_runs(archive.read_text(name))[0]) for name in slides
        }
    except DeckGenerationError as e:
        typer.secho(f"Error: {e}\n", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    templated = [name for name in slides if keys_by_slide[name]]
    typer.secho(
        f"\nSlides in {display_path(template)} ({len(templated)}/{len(slides)} templated):",
        fg=typer.colors.BLUE,
        bold=True,
    )

    for name in slides:
        keys = keys_by_slide[name]
        if keys:
            typer.secho(f"  ✓ {name}", fg=typer.colors.GREEN)
            typer.echo(f"      {', '.join(keys)}")
        else:
            typer.secho(f"  • {name}", dim=True)

    typer.echo("")
    raise typer.Exit(code=0 if templated else 1)


if __name__ == "__main__":
    app()
