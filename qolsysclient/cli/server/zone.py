"""Provides the current state of a zone within the panel emulator."""

from dataclasses import dataclass

from qolsysclient.event import ZoneSummary
from qolsysclient.zone import ZoneStatus, ZoneType


@dataclass
class Zone:
    """Holds the current state of a zone within the panel emulator."""

    id: int
    name: str
    partition_id: int
    zone_type: ZoneType
    status: ZoneStatus

    def to_summary(self) -> ZoneSummary:
        """Get the summary entry the panel reports for this zone."""
        return ZoneSummary(
            zone_id=self.id,
            name=self.name,
            partition_id=self.partition_id,
            zone_type=self.zone_type.value,
            status=self.status.value,
        )
