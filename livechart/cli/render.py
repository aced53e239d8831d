"""Render command for livechart CLI.

Loads raw OHLCV records from a JSON file, runs them through the engine and
displays the resulting scene geometry.
"""

import json
import time
from pathlib import Path
from typing import Optional

import click
from pydantic import ValidationError
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from livechart.chart import LiveSeries, build_scene, build_volume_scene
from livechart.config import ChartSettings, load_settings
from livechart.models import STYLE_LABELS, ChartStyle, Scene, VolumeScene

console = Console()

VALID_STYLES = [style.value for style in ChartStyle]


def _error(message: str) -> None:
    """Print an error panel and exit."""
    console.print(Panel(
        message,
        title="[bold red]Error[/bold red]",
        border_style="red",
    ))
    raise SystemExit(1)


def get_settings(ctx: click.Context) -> ChartSettings:
    """Load settings from the config path given to the CLI group."""
    config_path = (ctx.obj or {}).get("config_path")
    try:
        return load_settings(config_path)
    except ValidationError as e:
        _error(f"[red]Invalid configuration:[/red]\n\n{e}")


def load_records(path: Path) -> list:
    """Load raw records from a JSON file.

    Accepts either a top-level array or an object with a "data" array.
    """
    try:
        payload = json.loads(path.read_text())
    except (OSError, json.JSONDecodeError) as e:
        _error(f"[red]Failed to read {path}:[/red]\n\n{e}")

    if isinstance(payload, dict):
        payload = payload.get("data")

    if not isinstance(payload, list):
        _error(f"[red]{path} does not contain a list of records.[/red]")

    return payload


def now_ms() -> int:
    return int(time.time() * 1000)


def print_no_data(title: str) -> None:
    console.print(Panel(
        "[yellow]No chart data available[/yellow]\n\n"
        "[dim]None of the records had usable prices.[/dim]",
        title=f"[bold yellow]{title}[/bold yellow]",
        border_style="yellow",
    ))


def print_scene(scene: Scene, limit: int = 20) -> None:
    """Display a price scene as a summary panel and a geometry table."""
    domain = scene.domain
    badge = " [dim](Micro movements)[/dim]" if scene.is_micro else ""
    labels = "  ".join(label.text for label in scene.price_labels)

    console.print(Panel(
        f"Domain: [cyan]{domain.min:.5f}[/cyan] - [cyan]{domain.max:.5f}[/cyan]{badge}\n"
        f"Raw range: {domain.raw_range:.5f}\n"
        f"Price axis: {labels}\n"
        f"Surface: {scene.width:g} x {scene.height:g}, {len(scene.candles)} of {scene.count} candles drawn",
        title=f"[bold]{STYLE_LABELS[scene.style]}[/bold]",
        border_style="cyan",
    ))

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("#", justify="right", style="dim")
    table.add_column("x", justify="right")
    table.add_column("Width", justify="right")
    table.add_column("High Y", justify="right", style="green")
    table.add_column("Low Y", justify="right", style="red")
    table.add_column("Body Top", justify="right")
    table.add_column("Body Bottom", justify="right")
    table.add_column("Dir", justify="center")

    shown = scene.candles[-limit:]
    for g in shown:
        direction = "[green]up[/green]" if g.is_bullish else "[red]down[/red]"
        table.add_row(
            str(g.index),
            f"{g.x:.1f}",
            f"{g.candle_width:.1f}",
            f"{g.high_y:.1f}",
            f"{g.low_y:.1f}",
            f"{g.body_top_y:.1f}",
            f"{g.body_bottom_y:.1f}",
            direction,
        )

    console.print(table)

    if len(scene.candles) > limit:
        console.print(f"[dim]Showing last {limit} of {len(scene.candles)} candles[/dim]")


def print_volume(volume: VolumeScene) -> None:
    if volume.is_empty:
        console.print("[dim]Volume: unknown for every candle[/dim]")
        return
    console.print(
        f"[dim]Volume pane: {len(volume.bars)} bars, "
        f"max {volume.max_volume:,.0f} on {volume.width:g} x {volume.height:g}[/dim]"
    )


@click.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "-s", "--style",
    default=None,
    type=click.Choice(VALID_STYLES),
    help="Chart style (default from config: line)",
)
@click.option("-w", "--width", default=None, type=click.IntRange(min=1), help="Surface width in pixels")
@click.option("-H", "--height", default=None, type=click.IntRange(min=1), help="Surface height in pixels")
@click.option("--json", "as_json", is_flag=True, help="Print the scene as JSON")
@click.option("--volume", is_flag=True, help="Include the volume pane")
@click.pass_context
def render(
    ctx: click.Context,
    file: Path,
    style: Optional[str],
    width: Optional[int],
    height: Optional[int],
    as_json: bool,
    volume: bool,
) -> None:
    """Render a JSON file of OHLCV records into chart geometry.

    FILE is a JSON array of records (or an object with a "data" array) with
    open/high/low/close fields and optional volume, timestamp or time.

    \b
    Examples:
      livechart render eurusd.json
      livechart render eurusd.json --style candlestick --volume
      livechart render eurusd.json -w 1200 -H 600 --json
    """
    settings = get_settings(ctx)
    records = load_records(file)

    series = LiveSeries(settings)
    series.apply(records, now_ms())
    snapshot = series.snapshot()

    chart_style = ChartStyle(style) if style else settings.default_style
    scene = build_scene(chart_style, snapshot, width, height, settings)
    volume_scene = build_volume_scene(snapshot, width, None, settings) if volume else None

    if as_json:
        payload = {"price": scene.model_dump(mode="json")}
        if volume_scene is not None:
            payload["volume"] = volume_scene.model_dump(mode="json")
        click.echo(json.dumps(payload, indent=2))
        return

    if scene.is_empty:
        print_no_data(STYLE_LABELS[chart_style])
        return

    print_scene(scene)
    if volume_scene is not None:
        print_volume(volume_scene)
