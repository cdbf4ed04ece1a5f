"""CLI entry point for ccmk."""

from __future__ import annotations

import logging
from pathlib import Path

import click

from ccmk import __version__
from ccmk.cli.create_torrent import create_torrent
from ccmk.cli.inspect_torrent import inspect_torrent
from ccmk.config.config import init_config
from ccmk.utils.exceptions import ConfigurationError


@click.group()
@click.version_option(__version__, prog_name="ccmk")
@click.option(
    "--config",
    "config_file",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Path to a ccmk.toml config file",
)
@click.option(
    "--verbose",
    "-v",
    count=True,
    help="Increase verbosity (-v: debug, -vv: debug for all loggers)",
)
def cli(config_file: Path | None, verbose: int) -> None:
    """Build BitTorrent metainfo files."""
    try:
        init_config(config_file)
    except ConfigurationError as e:
        raise click.ClickException(str(e)) from e

    if verbose:
        ccmk_logger = logging.getLogger("ccmk")
        ccmk_logger.setLevel(logging.DEBUG)
        for handler in ccmk_logger.handlers:
            handler.setLevel(logging.DEBUG)
    if verbose > 1:
        logging.getLogger().setLevel(logging.DEBUG)


cli.add_command(create_torrent)
cli.add_command(inspect_torrent)


def main() -> None:
    """Console script entry point."""
    cli()
