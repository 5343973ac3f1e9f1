"""CLI entry point for hippocampus.

Invoked as::

    hippocampus [OPTIONS] COMMAND [ARGS]...

or, during development::

    python -m hippocampus.cli.main

Commands
--------
- version      — Show version information
- compact      — Compact a JSON message log into a digest
- inspect      — Show per-message scores as a table
- score        — Score a Markdown memory file
- config show  — Print the effective configuration
"""
from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from hippocampus.config.settings import HippocampusConfig

console = Console()
err_console = Console(stderr=True)

_TIER_STYLES = {"keep": "green", "compress": "yellow", "sparse": "dim"}

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _resolve_config(config_path: str | None) -> HippocampusConfig:
    """Load ``--config`` strictly, or the working directory's file leniently."""
    from hippocampus.config.loader import load_config, load_config_file
    from hippocampus.config.settings import ConfigError

    if config_path is None:
        return load_config(Path.cwd())
    try:
        return load_config_file(config_path)
    except ConfigError as exc:
        console.print(f"[red]Invalid configuration:[/red] {escape(str(exc))}")
        sys.exit(1)


def _read_messages(path: str) -> list[object]:
    """Read a JSON array of messages, or an object with a ``messages`` key."""
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except (ValueError, OSError) as exc:
        console.print(f"[red]Failed to read messages:[/red] {escape(str(exc))}")
        sys.exit(1)
    if isinstance(data, dict):
        data = data.get("messages")
    if not isinstance(data, list):
        console.print(
            "[red]Expected a JSON array of messages or an object with 'messages'.[/red]"
        )
        sys.exit(1)
    return data


# ---------------------------------------------------------------------------
# Root group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(package_name="hippocampus-md")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
def cli(verbose: bool) -> None:
    """Retention-based context compaction for agent conversations"""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(levelname)s %(name)s: %(message)s",
        )


# ---------------------------------------------------------------------------
# version
# ---------------------------------------------------------------------------


@cli.command(name="version")
def version_command() -> None:
    """Show version information."""
    from hippocampus import __version__

    console.print(f"[bold]hippocampus[/bold] v{__version__}")


# ---------------------------------------------------------------------------
# compact
# ---------------------------------------------------------------------------


@cli.command(name="compact")
@click.argument("messages_json", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--config",
    "config_path",
    default=None,
    type=click.Path(exists=True, dir_okay=False),
    help="JSON or YAML configuration file.",
)
@click.option(
    "--previous-summary",
    "previous_path",
    default=None,
    type=click.Path(exists=True, dir_okay=False),
    help="File holding an earlier digest to carry forward.",
)
@click.option(
    "--output",
    "output_file",
    default=None,
    type=click.Path(dir_okay=False),
    help="Write the digest here instead of stdout.",
)
def compact_command(
    messages_json: str,
    config_path: str | None,
    previous_path: str | None,
    output_file: str | None,
) -> None:
    """Compact the messages in MESSAGES_JSON into a digest."""
    from hippocampus.convenience import Hippocampus

    config = _resolve_config(config_path)
    messages = _read_messages(messages_json)
    previous = (
        Path(previous_path).read_text(encoding="utf-8") if previous_path else None
    )

    digest = Hippocampus(config).compact(messages, previous_summary=previous)

    if output_file:
        output_path = Path(output_file)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(digest.text, encoding="utf-8")
        console.print(f"[green]Digest written:[/green] {output_file}")
    else:
        click.echo(digest.text)

    stats = digest.stats
    table = Table(title="Compaction", show_lines=False)
    table.add_column("Entries", justify="right")
    table.add_column("Kept", justify="right", style="green")
    table.add_column("Compressed", justify="right", style="yellow")
    table.add_column("Sparse", justify="right")
    table.add_column("Dropped", justify="right", style="red")
    table.add_column("Tokens")
    table.add_row(
        str(stats.total),
        str(stats.kept),
        str(stats.compressed),
        str(stats.sparse),
        str(stats.dropped),
        f"{stats.tokens_before} → {stats.tokens_after} ({stats.ratio_label}×)",
    )
    err_console.print(table)


# ---------------------------------------------------------------------------
# inspect
# ---------------------------------------------------------------------------


@cli.command(name="inspect")
@click.argument("messages_json", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--config",
    "config_path",
    default=None,
    type=click.Path(exists=True, dir_okay=False),
    help="JSON or YAML configuration file.",
)
def inspect_command(messages_json: str, config_path: str | None) -> None:
    """Show the score of every message in MESSAGES_JSON."""
    from hippocampus.scoring.entry import MessageScorer

    config = _resolve_config(config_path)
    scored = MessageScorer(config=config).score_messages(_read_messages(messages_json))

    if not scored:
        console.print("[yellow]No messages found.[/yellow]")
        return

    table = Table(title="Message retention", show_lines=False)
    table.add_column("#", justify="right", style="cyan")
    table.add_column("Role")
    table.add_column("Type")
    table.add_column("Importance", justify="right")
    table.add_column("Retention", justify="right")
    table.add_column("Tier")
    table.add_column("Tokens", justify="right")
    table.add_column("Preview")

    for entry in scored:
        tier = entry.tier(config).value
        style = _TIER_STYLES.get(tier, "white")
        table.add_row(
            str(entry.index),
            escape(entry.role),
            entry.entry_type.value,
            f"{entry.importance:.2f}",
            f"{entry.retention:.2f}",
            f"[{style}]{tier}[/{style}]",
            str(entry.token_estimate),
            escape(entry.content_preview[:60]),
        )

    console.print(table)


# ---------------------------------------------------------------------------
# score
# ---------------------------------------------------------------------------


@cli.command(name="score")
@click.argument("memory_file", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--config",
    "config_path",
    default=None,
    type=click.Path(exists=True, dir_okay=False),
    help="JSON or YAML configuration file.",
)
def score_command(memory_file: str, config_path: str | None) -> None:
    """Score the entries of MEMORY_FILE and write a .scores.json report."""
    from hippocampus.memory_file.scorer import MemoryFileScorer, write_report

    config = _resolve_config(config_path)
    try:
        report = MemoryFileScorer(config).score_file(memory_file)
    except (OSError, UnicodeDecodeError) as exc:
        console.print(f"[red]Failed to read memory file:[/red] {escape(str(exc))}")
        sys.exit(1)

    output = write_report(report, memory_file)
    stats = report.stats
    console.print(
        f"Scored {stats.total} entries: {stats.kept} kept, "
        f"{stats.compressed} compressed, {stats.sparse} sparse "
        f"({stats.total_tokens} tokens)"
    )
    console.print(f"[green]Report written:[/green] {output}")


# ---------------------------------------------------------------------------
# config command group
# ---------------------------------------------------------------------------


@cli.group(name="config")
def config_group() -> None:
    """Inspect configuration."""


@config_group.command(name="show")
@click.option(
    "--config",
    "config_path",
    default=None,
    type=click.Path(exists=True, dir_okay=False),
    help="JSON or YAML configuration file.",
)
def config_show(config_path: str | None) -> None:
    """Print the effective configuration as JSON."""
    config = _resolve_config(config_path)
    click.echo(config.model_dump_json(indent=2))


if __name__ == "__main__":
    cli()
