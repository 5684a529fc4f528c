"""Provide the 'server' qolsysclient CLI command and the panel emulator."""

import logging
import ssl

import click

from qolsysclient.controller import Controller

from .panel_server import PanelServer

__all__ = ["DEFAULT_PORT", "PanelServer", "server"]

DEFAULT_PORT = Controller.DEFAULT_PORT

_LOGGER = logging.getLogger(__name__)


@click.command(help="Run a Qolsys panel emulator")
@click.option("--host", default="127.0.0.1")
@click.option("--port", type=int, default=DEFAULT_PORT)
@click.option("--token", default="", help="Required secure token (default: any)")
@click.option("--user-code", default="1234")
@click.option("--zones", type=int, default=6)
@click.option("--partitions", type=int, default=1)
@click.option("--certfile", type=click.Path(exists=True, dir_okay=False), default=None)
@click.option("--keyfile", type=click.Path(exists=True, dir_okay=False), default=None)
@click.option("--fragment/--no-fragment", default=False)
def server(  # noqa: PLR0913 # One argument per CLI option
    *,
    host: str,
    port: int,
    token: str,
    user_code: str,
    zones: int,
    partitions: int,
    certfile: str | None,
    keyfile: str | None,
    fragment: bool,
) -> None:
    """Add the 'server' CLI command which runs an interactive panel emulator."""
    ssl_context = None
    if certfile is not None:
        ssl_context = ssl.create_default_context(ssl.Purpose.CLIENT_AUTH)
        ssl_context.load_cert_chain(certfile, keyfile)
    _LOGGER.debug("Starting emulator on %s:%s (tls=%s)", host, port, certfile)

    panel_server = PanelServer(
        host=host,
        port=port,
        token=token,
        user_code=user_code,
        num_zones=zones,
        num_partitions=partitions,
        ssl_context=ssl_context,
        fragment=fragment,
    )
    panel_server.start(interactive=True)
