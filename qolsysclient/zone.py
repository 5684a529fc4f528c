"""Provides the in-memory state of a single Qolsys zone (sensor point)."""

import logging
from enum import Enum

_LOGGER = logging.getLogger(__name__)


class ZoneType(Enum):
    """Zone sensor types, valued with the panel's protocol strings."""

    MOTION = "Motion"
    PANEL_MOTION = "Panel Motion"
    DOOR_WINDOW = "Door_Window"
    WATER = "Water"
    SMOKE_DETECTOR = "SmokeDetector"
    CO_DETECTOR = "CODetector"
    BLUETOOTH = "Bluetooth"
    GLASS_BREAK = "GlassBreak"
    PANEL_GLASS_BREAK = "Panel Glass Break"
    TAKEOVER_MODULE = "TakeoverModule"
    UNKNOWN = "Unknown"


class ZoneStatus(Enum):
    """
    Zone statuses, valued with the panel's protocol strings.

    The status space is shared by every zone type. Consumers interpret it per
    type, e.g. a WATER zone that is OPEN has detected a leak.
    """

    OPEN = "Open"
    CLOSED = "Closed"
    ACTIVE = "Active"
    IDLE = "Idle"
    UNKNOWN = "Unknown"


TRIGGERED_STATUSES = (ZoneStatus.OPEN, ZoneStatus.ACTIVE)


class Zone:
    """Represents a zone and its current status."""

    zone_id: int
    name: str
    partition_id: int
    zone_type: ZoneType
    status: ZoneStatus

    def __init__(self, zone_id: int) -> None:
        """Create a zone with unknown type and status."""
        self.zone_id = zone_id
        self.name = ""
        self.partition_id = 0
        self.zone_type = ZoneType.UNKNOWN
        self.status = ZoneStatus.UNKNOWN

    def __repr__(self) -> str:
        """Get a string representation of the zone."""
        return f"<{self.__class__.__name__} {self.__dict__}>"

    @property
    def triggered(self) -> bool:
        """Whether the zone currently reports an open/active condition."""
        return self.status in TRIGGERED_STATUSES

    def set_type(self, raw_type: str) -> ZoneType:
        """
        Set the zone type from a protocol type string.

        Unrecognised strings map to ZoneType.UNKNOWN.
        """
        try:
            self.zone_type = ZoneType(raw_type)
        except ValueError:
            self.zone_type = ZoneType.UNKNOWN
        return self.zone_type

    def set_status(self, status: ZoneStatus) -> bool:
        """Set the zone status, returning True if it changed."""
        if status == self.status:
            return False

        _LOGGER.debug("Zone %s change status:%s->%s", self.zone_id, self.status, status)
        self.status = status
        return True

    def set_status_from_string(self, raw_status: str) -> bool:
        """
        Set the zone status from a protocol status string.

        Unrecognised strings map to ZoneStatus.UNKNOWN.

        :return: True if the status changed
        """
        try:
            status = ZoneStatus(raw_status)
        except ValueError:
            status = ZoneStatus.UNKNOWN
        return self.set_status(status)
