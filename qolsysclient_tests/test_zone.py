import unittest

from qolsysclient.zone import Zone, ZoneStatus, ZoneType


class ZoneTestCase(unittest.TestCase):
    def test_new_zone_is_unknown(self) -> None:
        zone = Zone(3)
        assert zone.zone_id == 3  # noqa: PLR2004
        assert zone.zone_type == ZoneType.UNKNOWN
        assert zone.status == ZoneStatus.UNKNOWN
        assert not zone.triggered

    def test_set_status_from_string_reports_change_once(self) -> None:
        """Setting the same status twice reports a change only the first time."""
        for raw in ("Open", "Closed", "Active", "Idle", "Bogus"):
            zone = Zone(1)
            zone.set_status_from_string("Closed" if raw == "Open" else "Open")
            assert zone.set_status_from_string(raw)
            assert not zone.set_status_from_string(raw)

    def test_unknown_status_string(self) -> None:
        zone = Zone(1)
        zone.set_status_from_string("Open")
        assert zone.set_status_from_string("Tampered")
        assert zone.status == ZoneStatus.UNKNOWN

    def test_set_type(self) -> None:
        zone = Zone(1)
        assert zone.set_type("Door_Window") == ZoneType.DOOR_WINDOW
        assert zone.set_type("Panel Glass Break") == ZoneType.PANEL_GLASS_BREAK
        assert zone.set_type("KeyFob") == ZoneType.UNKNOWN
        assert zone.zone_type == ZoneType.UNKNOWN

    def test_triggered(self) -> None:
        zone = Zone(1)
        zone.set_status(ZoneStatus.OPEN)
        assert zone.triggered
        zone.set_status(ZoneStatus.ACTIVE)
        assert zone.triggered
        zone.set_status(ZoneStatus.IDLE)
        assert not zone.triggered
