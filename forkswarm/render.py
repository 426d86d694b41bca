"""
Rendering functions for forkswarm output.

This module handles all pretty-printing for humans. It writes to stderr
so stdout stays clean for the JSON summary.
"""

from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich import box

from .domain.health import HealthTier
from .domain.operation import PublishStatus
from .services.coordinator import CoordinationResult

console = Console(stderr=True)

MAX_LISTED_FORKS = 20

HEALTH_STYLES = {
    HealthTier.HEALTHY: "bold green",
    HealthTier.STABLE: "green",
    HealthTier.VULNERABLE: "yellow",
    HealthTier.DEGRADED: "red",
}

PUBLISH_STYLES = {
    PublishStatus.PUSHED: "green",
    PublishStatus.COMMITTED: "green",
    PublishStatus.NO_CHANGES: "cyan",
    PublishStatus.DRY_RUN: "cyan",
    PublishStatus.NOT_A_REPOSITORY: "yellow",
    PublishStatus.COMMIT_FAILED: "yellow",
}


def render_run_report(result: CoordinationResult, target: Optional[Console] = None) -> None:
    """
    Render a summary of one coordination run.

    Lists at most MAX_LISTED_FORKS forks, then a count of the rest.
    """
    out = target or console
    manifest = result.manifest

    table = Table(
        title="Swarm Coordinator",
        box=box.ROUNDED,
        show_header=False,
    )
    table.add_column("Field", style="bold magenta")
    table.add_column("Value")

    health_style = HEALTH_STYLES.get(manifest.health, "white")
    publish_style = PUBLISH_STYLES.get(result.publish.status, "white")

    table.add_row("Platform", manifest.platform.value)
    table.add_row("Repository", escape(manifest.repository))
    table.add_row("Forge host", escape(manifest.forge_host))
    table.add_row("Node ID", manifest.node_id)
    table.add_row("Forks", str(manifest.fork_count))
    table.add_row("Health", f"[{health_style}]{manifest.health.value}[/{health_style}]")
    table.add_row("Manifest", f"[{publish_style}]{result.publish.status.value}[/{publish_style}]")
    out.print(table)

    forks = manifest.topology.forks
    if not forks:
        out.print("[cyan]No forks discovered yet[/cyan]")
        return

    out.print(f"[green]Discovered {len(forks)} forks:[/green]")
    for fork in forks[:MAX_LISTED_FORKS]:
        out.print(f"  {escape(fork)}", highlight=False)
    if len(forks) > MAX_LISTED_FORKS:
        out.print(f"[cyan]... and {len(forks) - MAX_LISTED_FORKS} more[/cyan]")
