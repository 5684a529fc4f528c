"""Provides the state machine logic for the panel emulator."""

import logging
import threading
import uuid
from collections.abc import Callable
from dataclasses import dataclass, field

from qolsysclient.event import PartitionSummary, SummaryEvent
from qolsysclient.partition import ALARM_MODES, AlarmMode
from qolsysclient.zone import ZoneStatus, ZoneType

from .zone import Zone

_LOGGER = logging.getLogger(__name__)

# Zone types handed out in turn by Panel.create()
DEFAULT_ZONE_TYPES = [
    ZoneType.DOOR_WINDOW,
    ZoneType.MOTION,
    ZoneType.SMOKE_DETECTOR,
    ZoneType.WATER,
    ZoneType.CO_DETECTOR,
    ZoneType.GLASS_BREAK,
]

# Status a zone rests in, per type
IDLE_STATUS = {
    ZoneType.DOOR_WINDOW: ZoneStatus.CLOSED,
    ZoneType.WATER: ZoneStatus.CLOSED,
}


@dataclass
class PartitionState:
    """Holds the current state of a partition within the panel emulator."""

    id: int
    name: str
    mode: AlarmMode = AlarmMode.DISARM
    secure_arm: bool = False
    zones: list[Zone] = field(default_factory=list)
    pending_event: str | None = None


class Panel:
    """Represents the state machine of the panel emulator."""

    ENTRY_DELAY: float = 10

    partitions: list[PartitionState]
    _mode_changed: Callable[[int, AlarmMode], None]
    _zone_changed: Callable[[Zone], None]
    _scheduled_timers: list[threading.Timer]

    def __init__(
        self,
        partitions: list[PartitionState],
        mode_changed: Callable[[int, AlarmMode], None],
        zone_changed: Callable[[Zone], None],
    ) -> None:
        """Create a panel object."""
        self.partitions = partitions
        self._mode_changed = mode_changed
        self._zone_changed = zone_changed
        self._scheduled_timers = []

    @staticmethod
    def create(
        num_zones: int,
        mode_changed: Callable[[int, AlarmMode], None],
        zone_changed: Callable[[Zone], None],
        num_partitions: int = 1,
    ) -> "Panel":
        """Create a disarmed panel with zones spread over its partitions."""
        partitions = [
            PartitionState(id=i, name=f"partition{i + 1}")
            for i in range(num_partitions)
        ]
        for i in range(num_zones):
            partition = partitions[i % num_partitions]
            zone_type = DEFAULT_ZONE_TYPES[i % len(DEFAULT_ZONE_TYPES)]
            partition.zones.append(
                Zone(
                    id=i + 1,
                    name=f"Zone {i + 1}",
                    partition_id=partition.id,
                    zone_type=zone_type,
                    status=IDLE_STATUS.get(zone_type, ZoneStatus.IDLE),
                )
            )
        return Panel(
            partitions=partitions, mode_changed=mode_changed, zone_changed=zone_changed
        )

    @property
    def zones(self) -> list[Zone]:
        """All zones of all partitions."""
        return [z for p in self.partitions for z in p.zones]

    def get_partition(self, partition_id: int) -> PartitionState:
        """
        Get a partition by id.

        :raises ValueError: if there is no such partition
        """
        for partition in self.partitions:
            if partition.id == partition_id:
                return partition
        msg = f"No partition {partition_id}"
        raise ValueError(msg)

    def summary(self) -> SummaryEvent:
        """Get the summary the panel reports for its current state."""
        return SummaryEvent(
            partitions=[
                PartitionSummary(
                    partition_id=p.id,
                    name=p.name,
                    secure_arm=p.secure_arm,
                    status=p.mode.value,
                    zones=[z.to_summary() for z in p.zones],
                )
                for p in self.partitions
            ]
        )

    def arm(self, partition_id: int, mode: AlarmMode, delay: float = 0) -> None:
        """
        Arm (or disarm) a partition.

        With a delay, the partition sits in EXIT_DELAY before reaching mode.
        """
        partition = self.get_partition(partition_id)
        if mode == AlarmMode.DISARM or delay <= 0:
            self._cancel_pending_update(partition)
            self._update_mode(partition, mode)
            return

        self._update_mode(partition, AlarmMode.EXIT_DELAY)

        def _arm_complete() -> None:
            _LOGGER.debug("Arm completed")
            self._update_mode(partition, mode)

        self._schedule(partition, delay, _arm_complete)

    def disarm(self, partition_id: int) -> None:
        """Disarm a partition."""
        self.arm(partition_id, AlarmMode.DISARM)

    def trip(
        self,
        partition_id: int,
        alarm: AlarmMode = AlarmMode.ALARM_POLICE,
        *,
        delay: bool = False,
    ) -> None:
        """
        Put a partition into alarm.

        If delay: an armed partition first goes through ENTRY_DELAY
        """
        if alarm not in ALARM_MODES:
            msg = f"{alarm} is not an alarm mode"
            raise ValueError(msg)

        partition = self.get_partition(partition_id)
        if delay and partition.mode in (AlarmMode.ARM_STAY, AlarmMode.ARM_AWAY):
            self._update_mode(partition, AlarmMode.ENTRY_DELAY)

            def _trip_complete() -> None:
                _LOGGER.debug("Trip completed")
                self._update_mode(partition, alarm)

            self._schedule(partition, self.ENTRY_DELAY, _trip_complete)
        else:
            self._cancel_pending_update(partition)
            self._update_mode(partition, alarm)

    def update_zone(self, zone_id: int, status: ZoneStatus) -> None:
        """Set the status of a zone."""
        zone = next(z for z in self.zones if z.id == zone_id)
        if zone.status == status:
            return
        zone.status = status
        self._zone_changed(zone)

    def cancel_all(self) -> None:
        """Cancel all scheduled entry/exit delay completions."""
        for partition in self.partitions:
            self._cancel_pending_update(partition)
        for timer in self._scheduled_timers:
            timer.cancel()
        self._scheduled_timers = []

    def _cancel_pending_update(self, partition: PartitionState) -> None:
        """Cancel scheduled changes for entry/exit delays."""
        partition.pending_event = None

    def _schedule(
        self, partition: PartitionState, delay: float, fn: Callable[[], None]
    ) -> None:
        """Schedule a change after a delay - for entry/exit delays."""
        event = uuid.uuid4().hex
        partition.pending_event = event

        def _run() -> None:
            if event == partition.pending_event:
                partition.pending_event = None
                fn()

        self._scheduled_timers = [t for t in self._scheduled_timers if t.is_alive()]
        timer = threading.Timer(delay, _run)
        timer.name = f"panel schedule {fn}"
        timer.start()
        self._scheduled_timers.append(timer)

    def _update_mode(self, partition: PartitionState, mode: AlarmMode) -> None:
        _LOGGER.debug("setting partition %s mode to %s", partition.id, mode)
        partition.mode = mode
        self._mode_changed(partition.id, mode)
