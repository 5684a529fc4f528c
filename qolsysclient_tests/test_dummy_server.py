"""End-to-end tests using the controller and the panel-emulator server."""

import asyncio
import logging
import threading
import time
import unittest
from collections.abc import Callable, Coroutine
from typing import Any, TypeVar

from qolsysclient import (
    AlarmMode,
    Controller,
    ControllerErrorType,
    Partition,
    TLSConnection,
    Zone,
    ZoneStatus,
)
from qolsysclient.cli.server import PanelServer

localhost = "127.0.0.1"
USER_CODE = "4321"

T = TypeVar("T")

_LOGGER = logging.getLogger(__name__)

logging.basicConfig(
    format="%(asctime)s.%(msecs)03d %(threadName)-25s %(levelname)-8s %(message)s",
    level=logging.DEBUG,
    datefmt="%Y-%m-%d %H:%M:%S",
)


def wait_for(predicate: Callable[[], bool], timeout: float = 5) -> bool:
    """Poll until predicate() is true, returning False on timeout."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.05)
    return predicate()


class ClientServerPair:
    """
    Provides a qolsysclient Controller connected to a test panel emulator.

    Facilitates end-to-end tests. The controller runs on its own event loop
    thread; the emulator runs on another.
    """

    test_port = 12350  # Different from the default CLI server port

    server: PanelServer
    controller: Controller
    loop: asyncio.AbstractEventLoop
    loop_thread: threading.Thread

    def __init__(  # noqa: PLR0913 # Not worth reducing arg count for test
        self,
        *,
        server_token: str = "",
        client_token: str = "",
        client_user_code: str = USER_CODE,
        fragment: bool = False,
        num_zones: int = 4,
    ) -> None:
        """Create a Controller and emulated-panel server pair."""
        _LOGGER.info("ClientServerPair init")
        self.server = PanelServer(
            host=localhost,
            port=self.test_port,
            token=server_token,
            user_code=USER_CODE,
            num_zones=num_zones,
            fragment=fragment,
        )
        self.controller = Controller(
            connection=TLSConnection(localhost, self.test_port, use_tls=False),
            token=client_token,
            user_code=client_user_code,
        )
        self.zone_changes: list[tuple[int, ZoneStatus]] = []
        self.partition_changes: list[tuple[int, AlarmMode]] = []
        self.receiving: list[bool] = []
        self.errors: list[tuple[ControllerErrorType, str]] = []

        self.controller.on_panel_ready(self._on_panel_ready)
        self.controller.on_zone_change(self._on_zone_change)
        self.controller.on_partition_change(self._on_partition_change)
        self.controller.on_receiving_notification(self.receiving.append)
        self.controller.on_error(self._on_error)

        self.loop = asyncio.new_event_loop()
        self.loop_thread = threading.Thread(
            target=self.loop.run_forever, name="asyncio event loop"
        )
        self.loop_thread.start()

    def _on_panel_ready(self, ready: bool) -> None:  # noqa: FBT001 # Bool part of Pre-defined API
        _LOGGER.info("Panel ready: %s", ready)
        self.loop.create_task(self.controller.start_operation())  # noqa: RUF006 # Completes before stop()

    def _on_zone_change(self, zone: Zone) -> None:
        _LOGGER.info("Zone %s changed to %s", zone.zone_id, zone.status)
        self.zone_changes.append((zone.zone_id, zone.status))

    def _on_partition_change(self, partition: Partition) -> None:
        _LOGGER.info(
            "Partition %s changed to %s", partition.partition_id, partition.status
        )
        self.partition_changes.append((partition.partition_id, partition.status))

    def _on_error(self, kind: ControllerErrorType, message: str) -> None:
        _LOGGER.info("Controller error %s: %s", kind, message)
        self.errors.append((kind, message))

    def run_async(self, coro: Coroutine[Any, Any, T]) -> T:
        """Run a coroutine on the controller's loop and wait for its result."""
        return asyncio.run_coroutine_threadsafe(coro, self.loop).result()

    def run(self) -> None:
        """Start the emulated panel, then connect the controller to it."""
        self.server.start(interactive=False)
        self.run_async(self.controller.connect())

    def stop(self) -> None:
        """Stop and close the Controller + emulated panel server."""
        self.run_async(self.controller.close())
        self.server.stop()
        self.loop.call_soon_threadsafe(self.loop.stop)
        self.loop_thread.join()
        self.loop.close()
        _LOGGER.info("Pair stopped")


class ClientServerConnectionTests(unittest.TestCase):
    """End-to-end tests using the controller and panel-emulator server."""

    def setup_client_server(self, **kwargs: Any) -> ClientServerPair:
        """Start a controller + panel-emulator pair, and wait for operation."""
        pair = ClientServerPair(**kwargs)
        pair.run()
        assert wait_for(lambda: pair.controller.receiving_notifications)
        # The first summary after start_operation() announces every partition
        assert wait_for(lambda: bool(pair.partition_changes))
        assert pair.controller.connected_count == 1
        return pair

    def test_basic_connection(self) -> None:
        """Check that the panel's summary is loaded and announced."""
        pair = self.setup_client_server()
        try:
            assert wait_for(lambda: len(pair.zone_changes) == 4)  # noqa: PLR2004
            assert pair.controller.ready_for_operation
            assert list(pair.controller.get_partitions()) == [0]
            assert sorted(pair.controller.get_zones()) == [1, 2, 3, 4]
            assert pair.partition_changes == [(0, AlarmMode.DISARM)]
            assert pair.receiving == [True]
            assert pair.errors == []
        finally:
            pair.stop()

    def test_zone_update(self) -> None:
        """Check zone events from the panel are announced."""
        pair = self.setup_client_server()
        try:
            assert wait_for(lambda: len(pair.zone_changes) == 4)  # noqa: PLR2004
            pair.zone_changes.clear()

            pair.server.panel.update_zone(1, ZoneStatus.OPEN)
            assert wait_for(lambda: pair.zone_changes == [(1, ZoneStatus.OPEN)])
            pair.server.interactive_command("C1")
            assert wait_for(lambda: len(pair.zone_changes) == 2)  # noqa: PLR2004
            assert pair.zone_changes[-1] == (1, ZoneStatus.CLOSED)
        finally:
            pair.stop()

    def test_arm_with_exit_delay(self) -> None:
        """
        Check arming with a delay passes through EXIT_DELAY.

        Messages from the panel are fragmented to exercise reassembly.
        """
        pair = self.setup_client_server(fragment=True)
        try:
            pair.run_async(pair.controller.send_arm_command(AlarmMode.ARM_AWAY, 0, 1))
            assert wait_for(lambda: (0, AlarmMode.ARM_AWAY) in pair.partition_changes)
            assert pair.partition_changes[-2:] == [
                (0, AlarmMode.EXIT_DELAY),
                (0, AlarmMode.ARM_AWAY),
            ]
            assert pair.server.panel.get_partition(0).mode == AlarmMode.ARM_AWAY

            pair.run_async(pair.controller.send_arm_command(AlarmMode.DISARM, 0))
            assert wait_for(
                lambda: bool(pair.partition_changes)
                and pair.partition_changes[-1] == (0, AlarmMode.DISARM)
            )
        finally:
            pair.stop()

    def test_stay_trip(self) -> None:
        """Check an entry delay from ARM_STAY, then the alarm, are announced."""
        pair = self.setup_client_server()
        pair.server.panel.ENTRY_DELAY = 0.5
        try:
            pair.server.interactive_command("AS")
            assert wait_for(
                lambda: bool(pair.partition_changes)
                and pair.partition_changes[-1] == (0, AlarmMode.ARM_STAY)
            )
            pair.server.interactive_command("T")
            assert wait_for(
                lambda: bool(pair.partition_changes)
                and pair.partition_changes[-1] == (0, AlarmMode.ALARM_POLICE)
            )
            assert (0, AlarmMode.ENTRY_DELAY) in pair.partition_changes
            assert pair.controller.get_partitions()[0].alarm_active()
        finally:
            pair.stop()

    def test_bad_user_code(self) -> None:
        """Check the panel rejects an arming command with the wrong user code."""
        pair = self.setup_client_server(client_user_code="0000")
        try:
            pair.run_async(pair.controller.send_arm_command(AlarmMode.ARM_STAY, 0))
            assert wait_for(lambda: len(pair.errors) == 1)
            assert pair.errors[0][0] == ControllerErrorType.QOLSYS_PANEL_ERROR
            assert pair.server.panel.get_partition(0).mode == AlarmMode.DISARM
        finally:
            pair.stop()

    def test_bad_token(self) -> None:
        """Check a controller with the wrong token never becomes ready."""
        pair = ClientServerPair(server_token="secret", client_token="guess")
        pair.run()
        try:
            assert wait_for(lambda: len(pair.errors) == 1)
            assert pair.errors[0] == (
                ControllerErrorType.QOLSYS_PANEL_ERROR,
                "Error received(token):Invalid secure token",
            )
            assert not pair.controller.ready_for_operation
        finally:
            pair.stop()

    def test_server_stop(self) -> None:
        """Check losing the panel is reported and stops notifications."""
        pair = self.setup_client_server()
        try:
            pair.server.stop()
            assert wait_for(lambda: len(pair.errors) == 1)
            assert pair.errors[0][0] == ControllerErrorType.CONNECTION_ERROR
            assert pair.receiving == [True, False]
            assert not pair.controller.receiving_notifications
            assert not pair.controller.ready_for_operation
        finally:
            pair.stop()
