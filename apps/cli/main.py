"""Typer CLI entrypoint for salesbot."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated

import typer

from core.orchestrator.pipeline import DEFAULT_TIMEZONE, report_date_label, summarize_transcript
from core.report.layout import load_layout
from core.targets.commands import COMMAND_PREFIX
from core.targets.store import TargetStore, render_targets
from core.utils.errors import InvalidCommandError

app = typer.Typer(help="Daily sales summary CLI", rich_markup_mode=None)
targets_app = typer.Typer(help="Inspect and update daily targets", rich_markup_mode=None)
app.add_typer(targets_app, name="targets")

TargetsOption = Annotated[
    Path,
    typer.Option("--targets", envvar="SALESBOT_TARGETS_PATH", dir_okay=False),
]


@app.callback()
def cli_callback(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log pipeline steps.")] = False,
) -> None:
    """CLI root callback to keep subcommands explicit."""

    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@app.command("report")
def report_command(
    transcript: Annotated[Path, typer.Option(..., exists=True, dir_okay=False, file_okay=True)],
    targets: TargetsOption = Path("targets.json"),
    layout: Annotated[
        Path | None,
        typer.Option(envvar="SALESBOT_LAYOUT_PATH", exists=True, dir_okay=False),
    ] = None,
    date: Annotated[
        str | None, typer.Option("--date", help="Report date label; defaults to today.")
    ] = None,
    timezone: Annotated[str, typer.Option(envvar="SALESBOT_TIMEZONE")] = DEFAULT_TIMEZONE,
) -> None:
    """Summarize an OCR transcript file against the stored targets."""

    try:
        layout_model = load_layout(layout)
    except ValueError as exc:
        typer.echo(f"ERROR: {exc}")
        raise typer.Exit(code=1) from exc

    text = transcript.read_text(encoding="utf-8")
    result = summarize_transcript(
        text,
        TargetStore(targets),
        layout_model,
        date or report_date_label(timezone),
    )
    typer.echo(result.message)
    if not result.ok:
        raise typer.Exit(code=2)


@targets_app.command("show")
def targets_show_command(targets: TargetsOption = Path("targets.json")) -> None:
    """Print the stored targets."""

    typer.echo(render_targets(TargetStore(targets).read(), title="เป้ารายวัน"))


@targets_app.command("set")
def targets_set_command(
    pairs: Annotated[list[str], typer.Argument(help="KEY=VALUE pairs, e.g. HW=5000")],
    targets: TargetsOption = Path("targets.json"),
) -> None:
    """Overwrite targets for the given departments."""

    command = COMMAND_PREFIX + " ".join(pairs)
    try:
        confirmation = TargetStore(targets).apply_command(command)
    except InvalidCommandError as exc:
        typer.echo(f"ERROR: {exc.user_message}")
        raise typer.Exit(code=1) from exc

    typer.echo(confirmation)


def main() -> None:
    """Console script entrypoint."""

    app()


if __name__ == "__main__":
    main()
