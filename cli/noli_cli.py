#!/usr/bin/env python3
"""
Terminal viewer for a running noli network.

Each neuron is a column: the top row shows its current state
(O = off, F = firing, R = refractory) and the rows below scroll its
history, newest first. Ctrl+C stops the run after the current tick.
"""

import argparse
import os
import signal
import sys
import traceback
from typing import List, Optional

from rich.console import Console
from rich.live import Live
from rich.table import Table

# Add the parent directory to the Python path
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from noli import (
    EventTickDriver,
    NetworkSnapshot,
    NeuronState,
    NoliError,
    create_simulation,
    default_config,
    load_config,
    override_config,
    setup_logger,
)

STATE_STYLES = {
    NeuronState.OFF: "dim",
    NeuronState.ON: "bold red",
    NeuronState.RCVR: "yellow",
}


def build_table(snapshot: NetworkSnapshot) -> Table:
    """Render one snapshot as a table of per-neuron state columns."""
    fired = snapshot.fired
    table = Table(
        title=f"Tick {snapshot.tick}",
        caption=f"{len(fired)} firing: {fired}" if fired else "quiet",
        show_header=True,
        box=None,
        pad_edge=False,
    )
    for neuron in snapshot.neurons:
        table.add_column(str(neuron.id), justify="center", no_wrap=True)

    depth = max((len(n.state_trace) for n in snapshot.neurons), default=0)
    for row in range(depth):
        cells: List[str] = []
        for neuron in snapshot.neurons:
            trace = neuron.state_trace
            if row >= len(trace):
                cells.append("")
                continue
            state = trace[-1 - row]
            cells.append(f"[{STATE_STYLES[state]}]{state.value}[/]")
        table.add_row(*cells)

    return table


class TerminalRenderer:
    """Draws each snapshot into a rich Live display."""

    def __init__(self, live: Live):
        self.live = live

    def render(self, snapshot: NetworkSnapshot) -> None:
        self.live.update(build_table(snapshot), refresh=True)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run a random noli network in the terminal")
    parser.add_argument("--config", type=str, default=None, help="YAML simulation config (default: built-in demo)")
    parser.add_argument("--ticks", type=int, default=None, help="Stop after this many ticks")
    parser.add_argument("--interval", type=float, default=None, help="Seconds to wait between ticks")
    parser.add_argument("--seed", type=int, default=None, help="Seed for the random topology")
    parser.add_argument("--log-level", type=str, default="WARNING", help="Log level (DEBUG, INFO, WARNING, ...)")
    parser.add_argument("--no-display", action="store_true", help="Run without the live view")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point"""
    args = parse_args(argv)
    console = Console()
    setup_logger(args.log_level)

    try:
        config = load_config(args.config) if args.config else default_config()
        config = override_config(
            config, seed=args.seed, interval=args.interval, max_ticks=args.ticks
        )

        simulation = create_simulation(config, log_level=args.log_level)
        driver = EventTickDriver(config.run.interval)
    except (NoliError, FileNotFoundError) as e:
        console.print(f"[bold red]Error: {e}[/bold red]")
        return 1

    def handle_sigint(sig, frame):
        """Handle Ctrl+C gracefully"""
        driver.stop()

    signal.signal(signal.SIGINT, handle_sigint)

    try:
        if args.no_display:
            ticks = simulation.run(driver, max_ticks=config.run.max_ticks)
        else:
            with Live(console=console, auto_refresh=False) as live:
                ticks = simulation.run(
                    driver, TerminalRenderer(live), max_ticks=config.run.max_ticks
                )
    except Exception as e:
        console.print(f"[bold red]A critical error occurred: {e}[/bold red]")
        console.print(f"[red]{traceback.format_exc()}[/red]")
        return 1

    stats = simulation.network.get_network_statistics()
    console.print(
        f"[dim]Ran {ticks} ticks on {stats['num_neurons']} neurons / "
        f"{stats['num_synapses']} synapses[/dim]"
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
