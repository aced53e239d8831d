"""Replay command for livechart CLI.

Simulates a polling feed by delivering growing prefixes of a record file on
a simulated clock, showing how each delivery is merged.
"""

from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from livechart.chart import LiveSeries, MergeMode, build_scene
from livechart.cli.render import get_settings, load_records, now_ms, print_no_data, print_scene
from livechart.models import STYLE_LABELS

console = Console()

MODE_STYLES = {
    MergeMode.FULL: "yellow",
    MergeMode.INCREMENTAL: "green",
    MergeMode.UNCHANGED: "dim",
}


def replay_deliveries(
    records: list,
    series: LiveSeries,
    batch_size: int,
    interval_ms: int,
    start: int,
) -> list[dict]:
    """Feed growing prefixes of records into a series on a simulated clock.

    Args:
        records: All raw records, oldest first.
        series: Series to feed.
        batch_size: Records added per delivery.
        interval_ms: Simulated time between deliveries.
        start: Clock value of the first delivery.

    Returns:
        One summary dict per delivery.
    """
    deliveries = []
    clock = start

    for end in range(batch_size, len(records) + batch_size, batch_size):
        delivered = records[:end]
        # Whether the feed was still live when this delivery arrived
        was_live = series.is_live(clock)
        result = series.apply(delivered, clock)
        deliveries.append({
            "clock": clock,
            "delivered": len(delivered),
            "mode": result.mode,
            "buffer": len(result.buffer),
            "live": was_live,
        })
        clock += interval_ms

    return deliveries


@click.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "-b", "--batch-size",
    default=1,
    type=click.IntRange(min=1),
    help="Records added per delivery (default: 1)",
)
@click.option(
    "-i", "--interval-ms",
    default=1000,
    type=click.IntRange(min=0),
    help="Simulated milliseconds between deliveries (default: 1000)",
)
@click.pass_context
def replay(ctx: click.Context, file: Path, batch_size: int, interval_ms: int) -> None:
    """Replay a record file as a live feed.

    Each delivery contains everything up to the next batch, as a polling
    endpoint would return it. Deliveries closer together than the real-time
    window are merged incrementally; slower ones replace the series.

    \b
    Examples:
      livechart replay eurusd.json
      livechart replay eurusd.json -b 10 -i 500
      livechart replay eurusd.json -i 5000     # every delivery is a full replace
    """
    settings = get_settings(ctx)
    records = load_records(file)

    series = LiveSeries(settings)
    deliveries = replay_deliveries(records, series, batch_size, interval_ms, now_ms())

    table = Table(
        title=f"Replay of {file.name} ({len(deliveries)} deliveries)",
        show_header=True,
        header_style="bold cyan",
    )
    table.add_column("#", justify="right", style="dim")
    table.add_column("Clock", justify="right")
    table.add_column("Delivered", justify="right")
    table.add_column("Mode")
    table.add_column("Buffer", justify="right")
    table.add_column("Live", justify="center")

    start = deliveries[0]["clock"] if deliveries else 0
    for n, delivery in enumerate(deliveries, start=1):
        style = MODE_STYLES[delivery["mode"]]
        table.add_row(
            str(n),
            f"+{delivery['clock'] - start}ms",
            str(delivery["delivered"]),
            f"[{style}]{delivery['mode'].value}[/{style}]",
            str(delivery["buffer"]),
            "[green]●[/green]" if delivery["live"] else "",
        )

    console.print(table)

    scene = build_scene(settings.default_style, series.snapshot(), settings=settings)
    if scene.is_empty:
        print_no_data(STYLE_LABELS[settings.default_style])
        return

    print_scene(scene, limit=5)
