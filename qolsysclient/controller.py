"""Provides the user API for communicating with a Qolsys panel."""

import asyncio
import datetime
import logging
from collections.abc import Callable, Mapping
from enum import Enum
from types import MappingProxyType
from typing import Any

from .connection import Connection, TLSConnection
from .errors import BufferOverflowError, ControllerErrorType, PayloadError
from .event import (
    AlarmEvent,
    ArmingCommand,
    ArmingEvent,
    BaseEvent,
    Command,
    PanelErrorEvent,
    SummaryEvent,
    SummaryRequest,
    ZoneEvent,
)
from .packet import Frame, MessageBuffer
from .partition import AlarmMode, Partition
from .zone import Zone, ZoneType

_LOGGER = logging.getLogger(__name__)


class ControllerEvent(Enum):
    """Notifications published by the controller."""

    PANEL_READY_FOR_OPERATION = "PanelReadyForOperation"
    PANEL_RECEIVING_NOTIFICATION = "PanelReceivingNotification"
    CONTROLLER_ERROR = "ControllerError"
    ZONE_STATUS_CHANGE = "ZoneStatusChange"
    PARTITION_ALARM_MODE_CHANGE = "PartitionAlarmModeChange"
    EVENT_RECEIVED = "EventReceived"


class Controller:
    """
    Main class that contains the user API for communicating with a Qolsys panel.

    Holds one session at a time: connect() discards the partitions and zones
    of any previous session and rebuilds them from the panel's summary.
    Connection failures are reported through the on_error listeners and are
    never raised; reconnecting is left to the caller.
    """

    connected_count: int
    disconnection_count: int
    bad_received_messages: int
    _connection: Connection
    _token: str
    _user_code: str
    _keepalive_timeout: float
    _socket_timeout: float
    _buffer: MessageBuffer
    _listeners: dict[ControllerEvent, list[Callable[..., Any]]]
    _partitions: dict[int, Partition]
    _zones: dict[int, Zone]
    _ready_for_operation: bool
    _receiving_notifications: bool
    _first_run: bool
    _connected: bool
    _session_id: int
    _last_refresh_at: datetime.datetime
    _recv_task: asyncio.Task[None] | None
    _keepalive_task: asyncio.Task[None] | None

    DEFAULT_PORT = 12345
    DEFAULT_KEEPALIVE_TIMEOUT = 15.0
    DEFAULT_SOCKET_TIMEOUT = 180.0

    def __init__(  # noqa: PLR0913 # Cannot easily reduce argument count on public API
        self,
        *,
        connection: Connection | None = None,
        host: str | None = None,
        port: int = DEFAULT_PORT,
        token: str = "",
        user_code: str = "",
        keepalive_timeout: float = DEFAULT_KEEPALIVE_TIMEOUT,
        socket_timeout: float = DEFAULT_SOCKET_TIMEOUT,
        max_buffer_size: int = MessageBuffer.DEFAULT_MAX_SIZE,
    ) -> None:
        """
        Create a Qolsys Controller for a specific panel.

        :param token: The panel's secure token for third-party control
        :param user_code: The user PIN sent with arming commands
        :param keepalive_timeout: Maximum time (in seconds) without a message
            from the panel before a summary refresh is requested
        :param socket_timeout: Time (in seconds) without any data from the
            panel after which the connection is considered lost
        :param max_buffer_size: Maximum size of a partial message
        """
        if connection is None:
            if host is None:
                msg = "Must provide host or connection object"
                raise ValueError(msg)
            connection = TLSConnection(host=host, port=port)

        self._connection = connection
        self._token = token
        self._user_code = user_code
        self._keepalive_timeout = keepalive_timeout
        self._socket_timeout = socket_timeout
        self._buffer = MessageBuffer(max_size=max_buffer_size)
        self._listeners = {event: [] for event in ControllerEvent}
        self._connected = False
        self._session_id = 0
        self._recv_task = None
        self._keepalive_task = None
        self.connected_count = 0
        self.disconnection_count = 0
        self.bad_received_messages = 0
        self._reset_session()

    def _reset_session(self) -> None:
        """Discard the model and all per-connection state."""
        self._partitions = {}
        self._zones = {}
        self._ready_for_operation = False
        self._receiving_notifications = False
        self._first_run = False
        self._buffer.reset()
        self._last_refresh_at = datetime.datetime.now()  # noqa: DTZ005 - local timezone - No function available

    @property
    def ready_for_operation(self) -> bool:
        """Whether the first summary of this connection has been processed."""
        return self._ready_for_operation

    @property
    def receiving_notifications(self) -> bool:
        """Whether zone and partition changes are being published."""
        return self._receiving_notifications

    @property
    def first_run(self) -> bool:
        """Whether the next summary will announce every zone and partition."""
        return self._first_run

    @property
    def last_refresh_at(self) -> datetime.datetime:
        """When a message was last successfully parsed."""
        return self._last_refresh_at

    def get_partitions(self) -> Mapping[int, Partition]:
        """Get a read-only snapshot of the partitions, keyed by partition id."""
        return MappingProxyType(dict(self._partitions))

    def get_zones(self) -> Mapping[int, Zone]:
        """Get a read-only snapshot of the zones, keyed by zone id."""
        return MappingProxyType(dict(self._zones))

    async def connect(self) -> None:
        """
        (Re)connect to the panel and request a summary.

        Any state from a previous connection is discarded first.
        """
        _LOGGER.debug("connect() - resetting session")
        self._session_id += 1
        self._connected = False
        await self._stop_tasks()
        await self._connection.close()
        self._reset_session()

        try:
            await asyncio.wait_for(self._connection.connect(), self._socket_timeout)
        except asyncio.TimeoutError:
            await self._connection_lost("Timeout")
            return
        except OSError as e:
            await self._connection_lost(str(e) or e.__class__.__name__)
            return

        self._connected = True
        self.connected_count += 1
        _LOGGER.debug("connect() - connected")
        self._recv_task = asyncio.create_task(
            self._recv_loop(self._session_id), name="qolsys receive loop"
        )
        await self.refresh()

    async def start_operation(self) -> None:
        """
        Start publishing zone and partition changes.

        The next summary announces every zone and partition. A keepalive
        task then requests a summary whenever the panel has been silent for
        the keepalive timeout.
        """
        _LOGGER.debug("start_operation()")
        self._receiving_notifications = True
        self._first_run = True
        self._emit(ControllerEvent.PANEL_RECEIVING_NOTIFICATION, True)  # noqa: FBT003 # Bool is the event payload
        self._start_keepalive()
        await self.refresh()

    async def refresh(self) -> None:
        """Request a full summary from the panel."""
        await self._send(SummaryRequest(token=self._token))

    async def send_arm_command(
        self,
        mode: AlarmMode,
        partition_id: int,
        delay: int = 0,
        *,
        bypass: bool = False,
    ) -> None:
        """
        Arm or disarm a partition.

        :param mode: One of AlarmMode.DISARM, ARM_STAY or ARM_AWAY. Other
            modes are reported as INVALID_ARMING_TYPE and nothing is sent
        :param delay: Exit delay in seconds
        :param bypass: Force-arm, bypassing open zones
        """
        try:
            command = ArmingCommand(
                token=self._token,
                user_code=self._user_code,
                partition_id=partition_id,
                mode=mode,
                delay=delay,
                bypass=bypass,
            )
        except PayloadError as e:
            _LOGGER.warning("Not sending arm command: %s", e)
            self._report_error(e.kind, str(e))
            return

        await self._send(command)

    async def check_refresh_needed(self) -> None:
        """Request a summary if nothing was received for the keepalive timeout."""
        now = datetime.datetime.now()  # noqa: DTZ005 - local timezone - No function available
        elapsed = (now - self._last_refresh_at).total_seconds()
        _LOGGER.debug("%.1f seconds since last message", elapsed)
        if elapsed >= self._keepalive_timeout:
            await self.refresh()

    async def close(self) -> None:
        """
        Stop the controller.

        Closes the connection and stops the receive and keepalive tasks.
        No error is reported.
        """
        _LOGGER.debug("Closing Controller")
        self._session_id += 1
        self._connected = False
        await self._stop_tasks()
        await self._connection.close()

    async def _send(self, command: Command) -> None:
        _LOGGER.debug("Sending command: %s", command)
        try:
            await self._connection.write(command.encode())
        except OSError as e:
            reason = str(e) or e.__class__.__name__
            if self._connected:
                await self._connection_lost(reason)
            else:
                self._report_error(ControllerErrorType.CONNECTION_ERROR, reason)

    async def _recv_loop(self, session_id: int) -> None:
        while session_id == self._session_id:
            try:
                data = await asyncio.wait_for(
                    self._connection.read(), self._socket_timeout
                )
            except asyncio.TimeoutError:
                reason = "Timeout"
            except OSError as e:
                reason = str(e) or e.__class__.__name__
            else:
                if data is None:
                    reason = "Connection closed by panel"
                else:
                    try:
                        self.process_received_data(data)
                        continue
                    except BufferOverflowError as e:
                        reason = str(e)

            if session_id == self._session_id:
                await self._connection_lost(reason)
            return

    async def _keepalive_loop(self, session_id: int) -> None:
        """Check periodically whether a keepalive refresh is needed."""
        interval = self._keepalive_timeout / 2
        while session_id == self._session_id:
            _LOGGER.debug("_keepalive_loop sleeping for %s", interval)
            await asyncio.sleep(interval)
            if session_id != self._session_id:
                break
            await self.check_refresh_needed()

    def _start_keepalive(self) -> None:
        if self._keepalive_task is not None:
            self._keepalive_task.cancel()
        self._keepalive_task = asyncio.create_task(
            self._keepalive_loop(self._session_id), name="qolsys keepalive"
        )

    async def _stop_tasks(self) -> None:
        """Cancel the receive and keepalive tasks, other than the calling task."""
        current = asyncio.current_task()
        tasks = [
            t
            for t in (self._recv_task, self._keepalive_task)
            if t is not None and t is not current
        ]
        self._recv_task = None
        self._keepalive_task = None
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

    async def _connection_lost(self, reason: str) -> None:
        """Tear down the connection after a transport failure and report it."""
        _LOGGER.warning("Panel connection error: %s", reason)
        self._session_id += 1
        if self._connected:
            self.disconnection_count += 1
        self._connected = False
        self._ready_for_operation = False
        self._receiving_notifications = False
        self._emit(ControllerEvent.PANEL_RECEIVING_NOTIFICATION, False)  # noqa: FBT003 # Bool is the event payload
        await self._stop_tasks()
        await self._connection.close()
        self._report_error(ControllerErrorType.CONNECTION_ERROR, reason)

    def process_received_data(self, data: bytes) -> None:
        """
        Process a chunk of data received from the panel.

        :raises BufferOverflowError: if unparsable data has been buffered
            beyond the configured limit
        """
        _LOGGER.debug("Received data: %s", data)
        for frame in self._buffer.feed(data):
            self._process_frame(frame)
            self._last_refresh_at = datetime.datetime.now()  # noqa: DTZ005 - local timezone - No function available

    def _process_frame(self, frame: Frame) -> None:
        try:
            event = BaseEvent.decode(frame.payload, frame.text)
        except PayloadError as e:
            self.bad_received_messages += 1
            _LOGGER.warning("Dropping message: %s", e)
            self._report_error(e.kind, str(e))
            return

        _LOGGER.debug("Decoded event: %s", event)
        self._emit(ControllerEvent.EVENT_RECEIVED, event)

        if isinstance(event, SummaryEvent):
            self._handle_summary(event)
        elif isinstance(event, ZoneEvent):
            self._handle_zone_event(event)
        elif isinstance(event, ArmingEvent | AlarmEvent):
            self._handle_partition_mode(event.partition_id, event.mode)
        elif isinstance(event, PanelErrorEvent):
            self._report_error(
                ControllerErrorType.QOLSYS_PANEL_ERROR,
                f"Error received({event.error_type}):{event.description}",
            )

    @property
    def _notifying(self) -> bool:
        return self._ready_for_operation and self._receiving_notifications

    def _handle_zone_event(self, event: ZoneEvent) -> None:
        zone = self._zones.get(event.zone_id)
        if zone is None:
            _LOGGER.debug("Ignoring %s for unknown zone", event)
            return

        if zone.set_status_from_string(event.status) and self._notifying:
            self._emit(ControllerEvent.ZONE_STATUS_CHANGE, zone)

    def _handle_partition_mode(self, partition_id: int, mode: AlarmMode) -> None:
        partition = self._partitions.get(partition_id)
        if partition is None:
            _LOGGER.debug("Ignoring %s for unknown partition %s", mode, partition_id)
            return

        if partition.set_alarm_mode(mode) and self._notifying:
            self._emit(ControllerEvent.PARTITION_ALARM_MODE_CHANGE, partition)

    def _handle_summary(self, event: SummaryEvent) -> None:
        """
        Update the model from a full summary.

        Changes are announced once the panel is ready. The first summary
        after start_operation() announces everything, changed or not.
        """
        _LOGGER.debug(
            "Handling summary - ready: %s first_run: %s",
            self._ready_for_operation,
            self._first_run,
        )
        for part in event.partitions:
            partition = self._partitions.get(part.partition_id)
            if partition is None:
                partition = Partition(part.partition_id)
                self._partitions[part.partition_id] = partition

            partition.name = part.name
            partition.secure_arm = part.secure_arm
            changed = partition.set_alarm_mode_from_string(part.status)
            if (changed and self._ready_for_operation) or self._first_run:
                self._emit(ControllerEvent.PARTITION_ALARM_MODE_CHANGE, partition)

            for zone_summary in part.zones:
                zone = self._zones.get(zone_summary.zone_id)
                if zone is None:
                    zone = Zone(zone_summary.zone_id)
                    self._zones[zone_summary.zone_id] = zone
                    if zone.set_type(zone_summary.zone_type) == ZoneType.UNKNOWN:
                        _LOGGER.info(
                            "Zone %s: no handler available for type '%s'",
                            zone.zone_id,
                            zone_summary.zone_type,
                        )
                else:
                    zone.set_type(zone_summary.zone_type)

                zone.name = zone_summary.name
                zone.partition_id = zone_summary.partition_id
                changed = zone.set_status_from_string(zone_summary.status)
                if (changed and self._ready_for_operation) or self._first_run:
                    self._emit(ControllerEvent.ZONE_STATUS_CHANGE, zone)

        if not self._ready_for_operation:
            self._ready_for_operation = True
            self._emit(ControllerEvent.PANEL_READY_FOR_OPERATION, True)  # noqa: FBT003 # Bool is the event payload

        self._first_run = False

    def _report_error(self, kind: ControllerErrorType, message: str) -> None:
        self._emit(ControllerEvent.CONTROLLER_ERROR, kind, message)

    def _emit(self, event: ControllerEvent, *args: Any) -> None:
        for listener in list(self._listeners[event]):
            try:
                listener(*args)
            except Exception:
                _LOGGER.exception("Error in %s listener %s", event.value, listener)

    def add_listener(
        self, event: ControllerEvent, f: Callable[..., Any]
    ) -> Callable[..., Any]:
        """Subscribe a callback to a controller event."""
        self._listeners[event].append(f)
        return f

    def remove_listener(self, event: ControllerEvent, f: Callable[..., Any]) -> None:
        """Unsubscribe a callback from a controller event."""
        if f in self._listeners[event]:
            self._listeners[event].remove(f)

    def on_panel_ready(self, f: Callable[[bool], None]) -> Callable[[bool], None]:
        """
        Provide a decorator @controller.on_panel_ready for panel-ready handlers.

        Called once per connection, after the first summary is processed.
        """
        return self.add_listener(ControllerEvent.PANEL_READY_FOR_OPERATION, f)

    def on_receiving_notification(
        self, f: Callable[[bool], None]
    ) -> Callable[[bool], None]:
        """
        Provide a decorator @controller.on_receiving_notification.

        Called with True by start_operation() and with False when the
        connection is lost.
        """
        return self.add_listener(ControllerEvent.PANEL_RECEIVING_NOTIFICATION, f)

    def on_error(
        self, f: Callable[[ControllerErrorType, str], None]
    ) -> Callable[[ControllerErrorType, str], None]:
        """Provide a decorator @controller.on_error for error handlers."""
        return self.add_listener(ControllerEvent.CONTROLLER_ERROR, f)

    def on_zone_change(self, f: Callable[[Zone], None]) -> Callable[[Zone], None]:
        """Provide a decorator @controller.on_zone_change for zone status handlers."""
        return self.add_listener(ControllerEvent.ZONE_STATUS_CHANGE, f)

    def on_partition_change(
        self, f: Callable[[Partition], None]
    ) -> Callable[[Partition], None]:
        """
        Provide a decorator @controller.on_partition_change.

        Called with the partition whenever its alarm mode changes.
        """
        return self.add_listener(ControllerEvent.PARTITION_ALARM_MODE_CHANGE, f)

    def on_event_received(
        self, f: Callable[[BaseEvent], None]
    ) -> Callable[[BaseEvent], None]:
        """Provide a decorator @controller.on_event_received for every decoded event."""
        return self.add_listener(ControllerEvent.EVENT_RECEIVED, f)
