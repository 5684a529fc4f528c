"""Provide the 'events' qolsysclient CLI command."""

import asyncio
import logging
from collections.abc import Coroutine
from typing import Any

import click
from justbackoff import Backoff

from qolsysclient.connection import TLSConnection
from qolsysclient.controller import Controller
from qolsysclient.errors import ControllerErrorType
from qolsysclient.partition import Partition
from qolsysclient.zone import Zone

from .server import DEFAULT_PORT

_LOGGER = logging.getLogger(__name__)


@click.command(help="Listen for panel events")
@click.option("--host", default="localhost")
@click.option("--port", type=int, default=DEFAULT_PORT)
@click.option("--token", envvar="QOLSYS_TOKEN", default="")
@click.option("--tls/--no-tls", default=True)
@click.option(
    "--keepalive-timeout", type=float, default=Controller.DEFAULT_KEEPALIVE_TIMEOUT
)
@click.option("--reconnect-delay", type=float, default=60)
def events(  # noqa: PLR0913 # One argument per CLI option
    *,
    host: str,
    port: int,
    token: str,
    tls: bool,
    keepalive_timeout: float,
    reconnect_delay: float,
) -> None:
    """Add the 'events' CLI command which prints panel changes until cancelled."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    controller = Controller(
        connection=TLSConnection(host, port, use_tls=tls),
        token=token,
        keepalive_timeout=keepalive_timeout,
    )
    delay_ms = reconnect_delay * 1000
    backoff = Backoff(min_ms=delay_ms, max_ms=delay_ms)
    tasks: set[asyncio.Task[None]] = set()

    def _run(coro: Coroutine[Any, Any, None]) -> None:
        task = loop.create_task(coro)
        tasks.add(task)
        task.add_done_callback(tasks.discard)

    @controller.on_panel_ready
    def on_panel_ready(ready: bool) -> None:  # noqa: FBT001 # Bool part of Pre-defined API
        print(f"Panel ready for operation: {ready}")  # noqa: T201 # Valid CLI print
        backoff.reset()
        _run(controller.start_operation())

    @controller.on_receiving_notification
    def on_receiving_notification(receiving: bool) -> None:  # noqa: FBT001 # Bool part of Pre-defined API
        print(f"Receiving notifications: {receiving}")  # noqa: T201 # Valid CLI print

    @controller.on_zone_change
    def on_zone_change(zone: Zone) -> None:
        print(  # noqa: T201 # Valid CLI print
            f"Zone {zone.zone_id} ({zone.name}) changed to {zone.status.value}"
        )

    @controller.on_partition_change
    def on_partition_change(partition: Partition) -> None:
        print(  # noqa: T201 # Valid CLI print
            f"Partition {partition.partition_id} ({partition.name}) changed to "
            f"{partition.status.value} "
            f"(current:{partition.current_security_state()} "
            f"target:{partition.target_security_state()})"
        )

    @controller.on_error
    def on_error(kind: ControllerErrorType, message: str) -> None:
        print(f"Error: {kind.value}: {message}")  # noqa: T201 # Valid CLI print
        if kind == ControllerErrorType.CONNECTION_ERROR:
            duration = backoff.duration()
            _LOGGER.info("Reconnecting in %s seconds", duration)
            loop.call_later(duration, lambda: _run(controller.connect()))

    _run(controller.connect())
    try:
        loop.run_forever()
    except KeyboardInterrupt:
        print("Cancelled - shutting down")  # noqa: T201 # Valid CLI print
    finally:
        loop.run_until_complete(controller.close())
        loop.close()
