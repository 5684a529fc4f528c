"""Entry point of the qolsysclient command line tool."""

import logging
from importlib import metadata

import click

from .arm import arm
from .events import events
from .server import server

LOG_LEVELS = ["error", "warning", "info", "debug"]
LOG_FORMAT = "%(asctime)s.%(msecs)03d %(threadName)-25s %(levelname)-8s %(message)s"

_LOGGER = logging.getLogger(__name__)


def package_version() -> str:
    """Get the installed version of qolsysclient."""
    return metadata.version("qolsysclient")


@click.group(help="Talk to a Qolsys IQ panel, or emulate one")
@click.option("--log-level", type=click.Choice(LOG_LEVELS), default="warning")
@click.version_option(package_name="qolsysclient")
def cli(log_level: str) -> None:
    """Configure logging for every qolsysclient command."""
    logging.basicConfig(format=LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
    logging.getLogger().setLevel(log_level.upper())
    _LOGGER.debug("qolsysclient %s, log level %s", package_version(), log_level)


@cli.command(help="Print the installed qolsysclient version")
def version() -> None:
    """Print the installed qolsysclient version."""
    click.echo(package_version())


for command in (events, arm, server):
    cli.add_command(command)

if __name__ == "__main__":
    cli()
