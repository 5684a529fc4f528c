"""Implements a Qolsys panel emulator with an interactive CLI UI."""

import logging
import ssl
from typing import Any

from qolsysclient.event import (
    AlarmEvent,
    ArmingEvent,
    PanelErrorEvent,
    ZoneEvent,
)
from qolsysclient.partition import ALARM_MODES, AlarmMode
from qolsysclient.zone import ZoneStatus

from .panel import Panel
from .server import Server
from .zone import Zone

_LOGGER = logging.getLogger(__name__)

ARMING_TYPES = {
    "DISARM": AlarmMode.DISARM,
    "ARM_STAY": AlarmMode.ARM_STAY,
    "ARM_AWAY": AlarmMode.ARM_AWAY,
}


class PanelServer:
    """Implements a Qolsys panel emulator with an interactive CLI UI."""

    panel: Panel
    server: Server

    PORT_MIN = 0
    PORT_MAX = 65535

    def __init__(  # noqa: PLR0913 # Emulator options
        self,
        host: str,
        port: int,
        *,
        token: str = "",
        user_code: str = "1234",
        num_zones: int = 6,
        num_partitions: int = 1,
        ssl_context: ssl.SSLContext | None = None,
        fragment: bool = False,
    ) -> None:
        """
        Create a new panel emulator that listens on a specific host+port.

        :param token: Secure token required on every command ("" accepts any)
        :param user_code: User code required on arming commands
        :param ssl_context: Server TLS context; plain TCP if None
        :param fragment: Split each outgoing message over two writes
        """
        if not isinstance(host, str):
            msg = "Host must be a valid string"
            raise TypeError(msg)
        if (
            not isinstance(port, int)
            or port < PanelServer.PORT_MIN
            or port > PanelServer.PORT_MAX
        ):
            msg = "Port must be a valid integer 0-65535"
            raise ValueError(msg)

        self.panel = Panel.create(
            num_zones=num_zones,
            num_partitions=num_partitions,
            mode_changed=self._mode_changed,
            zone_changed=self._zone_changed,
        )
        self.server = Server(handle_command=self._handle_command, fragment=fragment)
        self._host = host
        self._port = port
        self._token = token
        self._user_code = user_code
        self._ssl_context = ssl_context

    def start(self, *, interactive: bool = True) -> None:
        """Start running the panel emulator."""
        self.server.start(host=self._host, port=self._port, ssl_context=self._ssl_context)

        if interactive:
            while True:
                try:
                    command = input("Command: ")
                except EOFError:
                    self.stop()
                    break
                if not self.interactive_command(command):
                    _LOGGER.debug("Stopping interactive commands")
                    break

    def stop(self) -> None:
        """Stop the panel emulator."""
        _LOGGER.debug("Stopping PanelServer")
        self.panel.cancel_all()
        self.server.stop()

    def interactive_command(self, command: str) -> bool:  # noqa: PLR0911 # One branch per command
        """Handle a user CLI command. Arming commands act on the first partition."""
        print(f"Got command {command}")  # noqa: T201 # Valid CLI print

        command = command.upper().strip()
        partition_id = self.panel.partitions[0].id
        if command == "D":
            self.panel.disarm(partition_id)
        elif command == "AS":
            self.panel.arm(partition_id, AlarmMode.ARM_STAY)
        elif command in ("A", "AA"):
            self.panel.arm(partition_id, AlarmMode.ARM_AWAY)
        elif command == "T":
            self.panel.trip(partition_id, delay=True)
        elif command == "P":
            self.panel.trip(partition_id, AlarmMode.ALARM_POLICE)
        elif command == "F":
            self.panel.trip(partition_id, AlarmMode.ALARM_FIRE)
        elif command == "X":
            self.panel.trip(partition_id, AlarmMode.ALARM_AUXILIARY)
        elif command[:1] in ("O", "C") and command[1:].isdigit():
            status = ZoneStatus.OPEN if command[0] == "O" else ZoneStatus.CLOSED
            try:
                self.panel.update_zone(int(command[1:]), status)
            except StopIteration:
                print(f"No zone {command[1:]}")  # noqa: T201 # Valid CLI print
        elif command == "E":
            self.server.write_event(
                PanelErrorEvent(error_type="test", description="Emulated panel error")
            )
        elif command == "Q":
            self.stop()
            return False
        else:
            print("Commands:")  # noqa: T201 # Valid CLI print
            print("  D  : Disarm")  # noqa: T201 # Valid CLI print
            print("  AS : Arm Stay")  # noqa: T201 # Valid CLI print
            print("  A  : Arm Away")  # noqa: T201 # Valid CLI print
            print("  AA : Arm Away")  # noqa: T201 # Valid CLI print
            print("  T  : Trip (entry delay, then police alarm)")  # noqa: T201 # Valid CLI print
            print("  P  : Police alarm")  # noqa: T201 # Valid CLI print
            print("  F  : Fire alarm")  # noqa: T201 # Valid CLI print
            print("  X  : Auxiliary alarm")  # noqa: T201 # Valid CLI print
            print("  O<n> / C<n> : Open / close zone n")  # noqa: T201 # Valid CLI print
            print("  E  : Send a panel error")  # noqa: T201 # Valid CLI print
            print("  Q  : Quit")  # noqa: T201 # Valid CLI print

        return True

    def _mode_changed(self, partition_id: int, mode: AlarmMode) -> None:
        """Send an ARMING or ALARM event for a partition mode change."""
        _LOGGER.debug("Partition %s mode change to %s", partition_id, mode)
        if mode in ALARM_MODES:
            self.server.write_event(AlarmEvent(partition_id=partition_id, mode=mode))
        else:
            self.server.write_event(ArmingEvent(partition_id=partition_id, mode=mode))

    def _zone_changed(self, zone: Zone) -> None:
        """Send a ZONE_EVENT for a zone status change."""
        event_type = ZoneEvent.EventType.ZONE_UPDATE
        if zone.status in (ZoneStatus.ACTIVE, ZoneStatus.IDLE):
            event_type = ZoneEvent.EventType.ZONE_ACTIVE
        self.server.write_event(
            ZoneEvent(event_type=event_type, zone_id=zone.id, status=zone.status.value)
        )

    def _reject(self, error_type: str, description: str) -> None:
        _LOGGER.info("Rejecting command: %s", description)
        self.server.write_event(
            PanelErrorEvent(error_type=error_type, description=description)
        )

    def _handle_command(self, payload: Any) -> None:
        """
        Respond to commands from a client.

        Handles INFO/SUMMARY requests and ARMING commands.
        """
        _LOGGER.info("Incoming command: %s", payload)
        if not isinstance(payload, dict):
            self._reject("format", "Command is not a JSON object")
            return

        if self._token and payload.get("token") != self._token:
            self._reject("token", "Invalid secure token")
            return

        action = payload.get("action")
        if action == "INFO" and payload.get("info_type") == "SUMMARY":
            self.server.write_event(self.panel.summary())
        elif action == "ARMING":
            self._handle_arming_command(payload)
        else:
            self._reject("action", f"Unsupported action: {action}")

    def _handle_arming_command(self, payload: dict[str, Any]) -> None:
        if payload.get("user_code") != self._user_code:
            self._reject("usercode", "Invalid user code")
            return

        mode = ARMING_TYPES.get(str(payload.get("arming_type")))
        if mode is None:
            self._reject("arming_type", "Invalid arming type")
            return

        try:
            partition_id = int(payload["partition_id"])
            delay = float(payload.get("delay", 0))
            self.panel.get_partition(partition_id)
        except (KeyError, TypeError, ValueError) as e:
            self._reject("partition_id", f"Invalid partition: {e}")
            return

        self.server.write_ack()
        self.panel.arm(partition_id, mode, delay)
