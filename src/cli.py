import asyncio
import dataclasses
from typing import Optional

import typer

from config.environment import EnvironmentConfig
from config.sync_config import ConfigurationError, SyncConfig
from core.dependencies import DependencyContainer
from services.sync_types import SyncOutcome

app = typer.Typer(
    name="pihole_sync",
    help="Copy the Pi-hole teleporter backup of a primary host to its secondary hosts.",
    add_completion=False
)


async def run_sync_loop(container: DependencyContainer) -> SyncOutcome:
    """Run sync cycles until run-once mode ends the loop; returns the last outcome."""
    config = container.config
    while True:
        outcome = await container.sync_service().perform()
        if config.run_once:
            return outcome

        container.logger.info(f"Waiting {config.interval_minutes:g} minutes...")
        await asyncio.sleep(config.interval_minutes * 60)


def _apply_overrides(
    config: SyncConfig, once: Optional[bool], interval: Optional[float], verbose: bool
) -> SyncConfig:
    overrides = {}
    if once is not None:
        overrides["run_once"] = once
    if interval is not None:
        overrides["interval_minutes"] = interval
    if verbose:
        overrides["verbose"] = True
    return dataclasses.replace(config, **overrides) if overrides else config


@app.callback()
def main():
    """
    Pi-hole Sync. Hosts and options are read from the environment
    (PRIMARY_HOST_BASE_URL, SECONDARY_HOSTS_1_BASE_URL, ...).
    """


@app.command()
def sync(
    once: Optional[bool] = typer.Option(
        None,
        "--once/--loop",
        help="Run a single cycle and exit, or keep syncing on an interval. Overrides RUN_ONCE."
    ),
    interval: Optional[float] = typer.Option(
        None,
        "--interval",
        "-i",
        help="Minutes to wait between cycles. Overrides INTERVAL_MINUTES."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging. Overrides VERBOSE.")
):
    """
    Sync the primary host's backup to every secondary host.
    """
    try:
        config = _apply_overrides(EnvironmentConfig.load(), once, interval, verbose)
    except ConfigurationError as e:
        typer.secho(f"Configuration error: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    container = DependencyContainer(config)
    mode = "once" if config.run_once else f"every {config.interval_minutes:g} minutes"
    typer.echo(f"Syncing {len(config.secondary_hosts)} secondary host(s) {mode}.")

    try:
        outcome = asyncio.run(run_sync_loop(container))
    except KeyboardInterrupt:
        typer.echo("Interrupted, stopping.")
        raise typer.Exit(code=130)

    if outcome is SyncOutcome.SUCCESS:
        typer.secho("Sync completed.", fg=typer.colors.GREEN)
    else:
        typer.secho(f"Sync finished with {outcome.value.replace('_', ' ')}.", fg=typer.colors.RED, err=True)
    raise typer.Exit(code=outcome.exit_code)


if __name__ == "__main__":
    app()
