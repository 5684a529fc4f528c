import json
import unittest
from typing import Any

import pytest

from qolsysclient.errors import ControllerErrorType, PayloadError
from qolsysclient.event import (
    AlarmEvent,
    ArmingCommand,
    ArmingEvent,
    BaseEvent,
    PanelErrorEvent,
    PartitionSummary,
    SummaryEvent,
    SummaryRequest,
    ZoneEvent,
    ZoneSummary,
)
from qolsysclient.partition import AlarmMode

SUMMARY: dict[str, Any] = {
    "event": "INFO",
    "info_type": "SUMMARY",
    "partition_list": [
        {
            "partition_id": "0",
            "name": "partition1",
            "secure_arm": False,
            "status": "DISARM",
            "zone_list": [
                {
                    "zone_id": 1,
                    "name": "Front Door",
                    "partition_id": "0",
                    "type": "Door_Window",
                    "status": "Closed",
                },
            ],
        }
    ],
    "nonce": "",
}


def _decode_error(payload: Any) -> PayloadError:
    with pytest.raises(PayloadError) as info:
        BaseEvent.decode(payload, json.dumps(payload))
    return info.value


class BaseEventTestCase(unittest.TestCase):
    def test_decode_summary(self) -> None:
        event = BaseEvent.decode(SUMMARY)
        assert isinstance(event, SummaryEvent)
        partition = event.partitions[0]
        assert partition.partition_id == 0
        assert partition.status == "DISARM"
        assert partition.zones[0].zone_id == 1
        assert partition.zones[0].zone_type == "Door_Window"

    def test_decode_zone_event(self) -> None:
        event = BaseEvent.decode(
            {
                "event": "ZONE_EVENT",
                "zone_event_type": "ZONE_ACTIVE",
                "version": 1,
                "zone": {"zone_id": 2, "status": "Active"},
            }
        )
        assert isinstance(event, ZoneEvent)
        assert event.event_type == ZoneEvent.EventType.ZONE_ACTIVE
        assert event.zone_id == 2  # noqa: PLR2004
        assert event.status == "Active"

    def test_decode_arming_event(self) -> None:
        event = BaseEvent.decode(
            {"event": "ARMING", "arming_type": "ENTRY_DELAY", "partition_id": 0}
        )
        assert isinstance(event, ArmingEvent)
        assert event.mode == AlarmMode.ENTRY_DELAY

    def test_decode_alarm_event(self) -> None:
        event = BaseEvent.decode(
            {"event": "ALARM", "alarm_type": "FIRE", "partition_id": 1}
        )
        assert isinstance(event, AlarmEvent)
        assert event.mode == AlarmMode.ALARM_FIRE
        assert event.partition_id == 1

    def test_decode_panel_error(self) -> None:
        event = BaseEvent.decode(
            {"event": "ERROR", "error_type": "usercode", "description": "Bad PIN"}
        )
        assert isinstance(event, PanelErrorEvent)
        assert event.error_type == "usercode"
        assert event.description == "Bad PIN"


class InvalidPayloadTestCase(unittest.TestCase):
    def test_unknown_event(self) -> None:
        error = _decode_error({"event": "WEATHER"})
        assert error.kind == ControllerErrorType.INVALID_PAYLOAD_EVENT
        assert "WEATHER" in str(error)

    def test_not_an_object(self) -> None:
        error = _decode_error(["event", "INFO"])
        assert error.kind == ControllerErrorType.INVALID_PAYLOAD_EVENT

    def test_unknown_info_type(self) -> None:
        error = _decode_error({"event": "INFO", "info_type": "SECURE_ARM"})
        assert error.kind == ControllerErrorType.INVALID_PAYLOAD_INFO_TYPE

    def test_summary_missing_partition_list(self) -> None:
        error = _decode_error({"event": "INFO", "info_type": "SUMMARY"})
        assert error.kind == ControllerErrorType.INVALID_PAYLOAD_INFO_TYPE

    def test_unknown_zone_event_type(self) -> None:
        error = _decode_error(
            {"event": "ZONE_EVENT", "zone_event_type": "ZONE_ADD", "zone": {}}
        )
        assert error.kind == ControllerErrorType.INVALID_ZONE_EVENT_TYPE
        assert "ZONE_ADD" in str(error)

    def test_zone_event_missing_zone(self) -> None:
        error = _decode_error({"event": "ZONE_EVENT", "zone_event_type": "ZONE_UPDATE"})
        assert error.kind == ControllerErrorType.INVALID_ZONE_EVENT_TYPE

    def test_unknown_arming_type(self) -> None:
        error = _decode_error(
            {"event": "ARMING", "arming_type": "ARM_NIGHT", "partition_id": 0}
        )
        assert error.kind == ControllerErrorType.INVALID_ARMING_TYPE

    def test_unknown_alarm_type(self) -> None:
        error = _decode_error(
            {"event": "ALARM", "alarm_type": "FLOOD", "partition_id": 0}
        )
        assert error.kind == ControllerErrorType.INVALID_ALARM_TYPE


class CommandTestCase(unittest.TestCase):
    def test_summary_request(self) -> None:
        assert SummaryRequest(token="abc").encode() == (
            b'{"nonce":"","action":"INFO","info_type":"SUMMARY",'
            b'"version":1,"source":"C4","token":"abc"}'
        )

    def test_arming_command(self) -> None:
        command = ArmingCommand(
            token="abc",
            user_code="1234",
            partition_id=0,
            mode=AlarmMode.ARM_AWAY,
            delay=30,
            bypass=True,
        )
        assert command.encode() == (
            b'{"version":1,"source":"C4","action":"ARMING","nonce":"",'
            b'"token":"abc","user_code":"1234","partition_id":0,'
            b'"arming_type":"ARM_AWAY","delay":30,"bypass":true}'
        )

    def test_arming_command_invalid_mode(self) -> None:
        with pytest.raises(PayloadError) as info:
            ArmingCommand(
                token="abc",
                user_code="1234",
                partition_id=0,
                mode=AlarmMode.ENTRY_DELAY,
            )
        assert info.value.kind == ControllerErrorType.INVALID_ARMING_TYPE

    def test_repr_hides_secrets(self) -> None:
        command = ArmingCommand(
            token="secret-token",
            user_code="9876",
            partition_id=0,
            mode=AlarmMode.DISARM,
        )
        assert "secret-token" not in repr(command)
        assert "9876" not in repr(command)


class EmulatorEncodingTestCase(unittest.TestCase):
    """Events encoded by the panel emulator decode back to the same values."""

    def test_summary(self) -> None:
        summary = SummaryEvent(
            partitions=[
                PartitionSummary(
                    partition_id=1,
                    name="upstairs",
                    secure_arm=True,
                    status="ARM_STAY",
                    zones=[ZoneSummary(5, "Hall", 1, "Motion", "Idle")],
                )
            ]
        )
        event = BaseEvent.decode(json.loads(summary.encode()))
        assert isinstance(event, SummaryEvent)
        assert event.partitions == summary.partitions

    def test_alarm(self) -> None:
        encoded = AlarmEvent(partition_id=0, mode=AlarmMode.ALARM_AUXILIARY).encode()
        assert json.loads(encoded)["alarm_type"] == "AUXILIARY"
