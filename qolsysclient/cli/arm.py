"""Provide the 'arm' qolsysclient CLI command."""

import asyncio
import logging

import click

from qolsysclient.connection import TLSConnection
from qolsysclient.controller import Controller
from qolsysclient.errors import ControllerErrorType
from qolsysclient.partition import SecuritySystemState, arming_request

from .server import DEFAULT_PORT

_LOGGER = logging.getLogger(__name__)

ARM_STATES = {
    "disarm": SecuritySystemState.DISARMED,
    "arm-stay": SecuritySystemState.STAY_ARM,
    "arm-away": SecuritySystemState.AWAY_ARM,
    "arm-night": SecuritySystemState.NIGHT_ARM,
}


@click.command(help="Arm or disarm a partition")
@click.option("--host", default="localhost")
@click.option("--port", type=int, default=DEFAULT_PORT)
@click.option("--token", envvar="QOLSYS_TOKEN", default="")
@click.option("--user-code", envvar="QOLSYS_USER_CODE", default="")
@click.option("--tls/--no-tls", default=True)
@click.option("--partition", type=int, default=0)
@click.option("--delay", type=int, default=0, help="Exit delay in seconds")
@click.option("--bypass/--no-bypass", default=False)
@click.argument("mode", type=click.Choice(list(ARM_STATES)))
def arm(  # noqa: PLR0913 # One argument per CLI option
    *,
    host: str,
    port: int,
    token: str,
    user_code: str,
    tls: bool,
    partition: int,
    delay: int,
    bypass: bool,
    mode: str,
) -> None:
    """Add the 'arm' CLI command which sends one arming command."""
    _LOGGER.debug("arm %s:%s partition=%s mode=%s", host, port, partition, mode)
    loop = asyncio.new_event_loop()
    controller = Controller(
        connection=TLSConnection(host, port, use_tls=tls),
        token=token,
        user_code=user_code,
    )

    @controller.on_error
    def on_error(kind: ControllerErrorType, message: str) -> None:
        print(f"Error: {kind.value}: {message}")  # noqa: T201 # Valid CLI print

    loop.run_until_complete(controller.connect())
    alarm_mode, exit_delay = arming_request(
        ARM_STATES[mode], stay_delay=delay, away_delay=delay
    )
    loop.run_until_complete(
        controller.send_arm_command(alarm_mode, partition, exit_delay, bypass=bypass)
    )
    loop.run_until_complete(controller.close())
    loop.close()
