#!/usr/bin/env python3

import click
from pathlib import Path

from forkswarm import __version__
from forkswarm.cli_utils import standard_command, add_common_options
from forkswarm.config import load_config, configure_logging
from forkswarm.exit_codes import ConfigError
from forkswarm.render import render_run_report
from forkswarm.services.coordinator import SwarmCoordinator


@click.command(name='forkswarm')
@click.option('-C', '--repo-path', default='.', show_default=True,
              type=click.Path(file_okay=False, path_type=Path),
              help='Repository checkout to snapshot')
@click.option('--config', 'config_path', default=None,
              type=click.Path(dir_okay=False, path_type=Path),
              help='Config file (default: FORKSWARM_CONFIG or ~/.forkswarm/config.*)')
@click.option('--no-push', is_flag=True, help='Commit the manifest but do not push')
@click.option('--report/--no-report', default=True, help='Print a human-readable report to stderr')
@add_common_options('dry_run', 'verbose', 'quiet')
@click.version_option(__version__, prog_name='forkswarm')
@standard_command
def cli(repo_path, config_path, no_push, report, dry_run, verbose, quiet):
    """forkswarm - Snapshot the fork swarm of this repository.

    \b
    Detects the forge, lists the repository's forks through its API,
    classifies swarm health and updates .swarm/manifest.json. The manifest
    is committed (and pushed, when permitted) only if the forks changed.

    Examples:

    \b
        forkswarm                    # Snapshot the current directory
        forkswarm -C ~/src/project   # Snapshot another checkout
        forkswarm --dry-run          # Print the manifest, touch nothing
        forkswarm --no-push          # Commit locally only
    """
    if config_path is not None and not config_path.exists():
        raise ConfigError(f"Config file not found: {config_path}")

    config = load_config(config_path)
    configure_logging(config, verbose=verbose)

    coordinator = SwarmCoordinator(
        repo_path=str(repo_path),
        config=config,
        dry_run=dry_run,
        push=False if no_push else None,
    )
    result = coordinator.run()

    if report:
        render_run_report(result)

    summary = result.to_dict()
    if dry_run:
        summary['manifest'] = result.manifest.to_dict()
    return summary


def main():
    cli()

if __name__ == "__main__":
    main()
