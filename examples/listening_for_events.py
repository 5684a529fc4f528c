"""
Example that prints events received by qolsysclient from a Qolsys panel.

Defaults to running forever - use ctrl-C to end.
"""

import asyncio

from qolsysclient import (
    BaseEvent,
    Controller,
    ControllerErrorType,
    Partition,
    TLSConnection,
    Zone,
)

host = "127.0.0.1"
port = 12345
token = ""


def main(timeout: int = 0, *, use_tls: bool = True) -> None:
    """Register event handlers then awaits events from qolsysclient."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    controller = Controller(
        connection=TLSConnection(host, port, use_tls=use_tls), token=token
    )
    pending: set[asyncio.Task[None]] = set()

    @controller.on_panel_ready
    def on_panel_ready(ready: bool) -> None:  # noqa: FBT001 # Bool part of Pre-defined API
        print(f"Panel ready: {ready}")  # noqa: T201 # Valid CLI print
        # Ask for zone and partition notifications
        task = loop.create_task(controller.start_operation())
        pending.add(task)
        task.add_done_callback(pending.discard)

    @controller.on_zone_change
    def on_zone_change(zone: Zone) -> None:
        print(f"Zone {zone.zone_id} changed to {zone.status.value}")  # noqa: T201 # Valid CLI print

    @controller.on_partition_change
    def on_partition_change(partition: Partition) -> None:
        print(  # noqa: T201 # Valid CLI print
            f"Partition {partition.partition_id} changed to {partition.status.value}"
        )

    @controller.on_error
    def on_error(kind: ControllerErrorType, message: str) -> None:
        print(f"Error {kind.value}: {message}")  # noqa: T201 # Valid CLI print

    @controller.on_event_received
    def on_event_received(event: BaseEvent) -> None:
        print(f"Event received: {event}")  # noqa: T201 # Valid CLI print

    async def _run(
        timeout: float = 0,  # noqa: ASYNC109 # asyncio.timeout unavailable in Python3.10
    ) -> None:
        await controller.connect()
        if timeout != 0:
            await asyncio.sleep(timeout)
        else:
            await asyncio.Event().wait()

    try:
        loop.run_until_complete(_run(timeout))
    except KeyboardInterrupt:
        print("Cancelled - shutting down")  # noqa: T201 # Valid CLI print

    loop.run_until_complete(controller.close())
    loop.close()


if __name__ == "__main__":
    main()
