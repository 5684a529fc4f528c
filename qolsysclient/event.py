"""Translate between Qolsys JSON payloads and typed events and commands."""

import json
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, TypeVar

from .errors import ControllerErrorType, PayloadError
from .partition import AlarmMode

PROTOCOL_VERSION = 1
PROTOCOL_SOURCE = "C4"

T = TypeVar("T")


def encode_json(payload: dict[str, Any]) -> bytes:
    """Serialise a payload in the compact form the panel expects."""
    return json.dumps(payload, separators=(",", ":")).encode("utf-8")


def _decode_fields(
    text: str, kind: ControllerErrorType, decoder: Callable[[], T]
) -> T:
    """
    Run a payload field decoder, converting missing/malformed fields.

    :raises PayloadError: of the given kind if a field is missing or has the
        wrong type
    """
    try:
        return decoder()
    except (KeyError, TypeError, ValueError) as e:
        msg = f"{kind.value} - missing or malformed field {e}:{text}"
        raise PayloadError(msg, kind) from e


class BaseEvent:
    """
    Represents a message received from a Qolsys panel.

    Subclasses correspond to the top-level "event" discriminator.
    """

    def __repr__(self) -> str:
        """Get a string representation of the event."""
        return f"<{self.__class__.__name__} {self.__dict__}>"

    @classmethod
    def decode(cls, payload: Any, text: str = "") -> "BaseEvent":
        """
        Decode a parsed JSON document received from the panel.

        :param payload: The parsed JSON document
        :param text: The raw message text, used in error reports
        :raises PayloadError: if the document is not a recognised event
        """
        text = text or str(payload)
        if not isinstance(payload, dict):
            msg = f"Received Invalid Payload Event:{text}"
            raise PayloadError(msg, ControllerErrorType.INVALID_PAYLOAD_EVENT)

        event = payload.get("event")
        if event == "INFO":
            return InfoEvent.decode(payload, text)
        if event == "ZONE_EVENT":
            return ZoneEvent.decode(payload, text)
        if event == "ARMING":
            return ArmingEvent.decode(payload, text)
        if event == "ALARM":
            return AlarmEvent.decode(payload, text)
        if event == "ERROR":
            return PanelErrorEvent.decode(payload, text)

        msg = f"Received Invalid Payload Event:{text}"
        raise PayloadError(msg, ControllerErrorType.INVALID_PAYLOAD_EVENT)

    def encode(self) -> bytes:
        """
        Abstract method - do not call.

        Provides a prototype for subclasses which the panel emulator encodes
        onto the wire.
        """
        raise NotImplementedError


class InfoEvent(BaseEvent):
    """An INFO response. Only the SUMMARY info type is understood."""

    @classmethod
    def decode(cls, payload: Any, text: str = "") -> "BaseEvent":
        """Decode an INFO payload by its info_type."""
        if payload.get("info_type") == "SUMMARY":
            return SummaryEvent.decode(payload, text)

        msg = f"Received Invalid Payload Info Type:{text}"
        raise PayloadError(msg, ControllerErrorType.INVALID_PAYLOAD_INFO_TYPE)


@dataclass
class ZoneSummary:
    """A zone as listed in a summary."""

    zone_id: int
    name: str
    partition_id: int
    zone_type: str
    status: str

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "ZoneSummary":
        """Create from a zone_list entry."""
        return cls(
            zone_id=int(payload["zone_id"]),
            name=str(payload["name"]),
            partition_id=int(payload["partition_id"]),
            zone_type=str(payload["type"]),
            status=str(payload["status"]),
        )

    def to_payload(self) -> dict[str, Any]:
        """Get the zone_list entry for this zone."""
        return {
            "zone_id": self.zone_id,
            "name": self.name,
            "partition_id": str(self.partition_id),
            "type": self.zone_type,
            "status": self.status,
        }


@dataclass
class PartitionSummary:
    """A partition, with its zones, as listed in a summary."""

    partition_id: int
    name: str
    secure_arm: bool
    status: str
    zones: list[ZoneSummary] = field(default_factory=list)

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "PartitionSummary":
        """Create from a partition_list entry."""
        return cls(
            partition_id=int(payload["partition_id"]),
            name=str(payload["name"]),
            secure_arm=bool(payload["secure_arm"]),
            status=str(payload["status"]),
            zones=[ZoneSummary.from_payload(z) for z in payload.get("zone_list", [])],
        )

    def to_payload(self) -> dict[str, Any]:
        """Get the partition_list entry for this partition."""
        return {
            "partition_id": str(self.partition_id),
            "name": self.name,
            "secure_arm": self.secure_arm,
            "status": self.status,
            "zone_list": [z.to_payload() for z in self.zones],
        }


class SummaryEvent(InfoEvent):
    """The full partition and zone roster of the panel."""

    partitions: list[PartitionSummary]

    def __init__(self, partitions: list[PartitionSummary]) -> None:
        """Create a summary event."""
        self.partitions = partitions

    @classmethod
    def decode(cls, payload: Any, text: str = "") -> "SummaryEvent":
        """Decode an INFO/SUMMARY payload."""
        return _decode_fields(
            text,
            ControllerErrorType.INVALID_PAYLOAD_INFO_TYPE,
            lambda: cls(
                partitions=[
                    PartitionSummary.from_payload(p) for p in payload["partition_list"]
                ]
            ),
        )

    def encode(self) -> bytes:
        """Encode as sent by the panel."""
        return encode_json(
            {
                "event": "INFO",
                "info_type": "SUMMARY",
                "partition_list": [p.to_payload() for p in self.partitions],
                "nonce": "",
            }
        )


class ZoneEvent(BaseEvent):
    """A single zone changed status."""

    class EventType(Enum):
        """Zone event types."""

        ZONE_UPDATE = "ZONE_UPDATE"
        ZONE_ACTIVE = "ZONE_ACTIVE"

    event_type: EventType
    zone_id: int
    status: str

    def __init__(self, *, event_type: EventType, zone_id: int, status: str) -> None:
        """Create a zone event."""
        self.event_type = event_type
        self.zone_id = zone_id
        self.status = status

    @classmethod
    def decode(cls, payload: Any, text: str = "") -> "ZoneEvent":
        """Decode a ZONE_EVENT payload."""
        kind = ControllerErrorType.INVALID_ZONE_EVENT_TYPE
        try:
            event_type = ZoneEvent.EventType(payload.get("zone_event_type"))
        except ValueError:
            msg = f"Received Invalid Zone Event Type:{text}"
            raise PayloadError(msg, kind) from None

        return _decode_fields(
            text,
            kind,
            lambda: cls(
                event_type=event_type,
                zone_id=int(payload["zone"]["zone_id"]),
                status=str(payload["zone"]["status"]),
            ),
        )

    def encode(self) -> bytes:
        """Encode as sent by the panel."""
        return encode_json(
            {
                "event": "ZONE_EVENT",
                "zone_event_type": self.event_type.value,
                "version": PROTOCOL_VERSION,
                "zone": {"zone_id": self.zone_id, "status": self.status},
            }
        )


class ArmingEvent(BaseEvent):
    """A partition changed arming state."""

    ARMING_TYPES = {
        "EXIT_DELAY": AlarmMode.EXIT_DELAY,
        "ENTRY_DELAY": AlarmMode.ENTRY_DELAY,
        "DISARM": AlarmMode.DISARM,
        "ARM_STAY": AlarmMode.ARM_STAY,
        "ARM_AWAY": AlarmMode.ARM_AWAY,
    }

    partition_id: int
    mode: AlarmMode

    def __init__(self, *, partition_id: int, mode: AlarmMode) -> None:
        """Create an arming event."""
        self.partition_id = partition_id
        self.mode = mode

    @classmethod
    def decode(cls, payload: Any, text: str = "") -> "ArmingEvent":
        """Decode an ARMING payload."""
        kind = ControllerErrorType.INVALID_ARMING_TYPE
        mode = ArmingEvent.ARMING_TYPES.get(str(payload.get("arming_type")))
        if mode is None:
            msg = f"Received Invalid Arming Type:{text}"
            raise PayloadError(msg, kind)

        return _decode_fields(
            text,
            kind,
            lambda: cls(partition_id=int(payload["partition_id"]), mode=mode),
        )

    def encode(self) -> bytes:
        """Encode as sent by the panel."""
        return encode_json(
            {
                "event": "ARMING",
                "arming_type": self.mode.value,
                "partition_id": self.partition_id,
                "version": PROTOCOL_VERSION,
            }
        )


class AlarmEvent(BaseEvent):
    """A partition went into alarm."""

    ALARM_TYPES = {
        "POLICE": AlarmMode.ALARM_POLICE,
        "FIRE": AlarmMode.ALARM_FIRE,
        "AUXILIARY": AlarmMode.ALARM_AUXILIARY,
    }

    partition_id: int
    mode: AlarmMode

    def __init__(self, *, partition_id: int, mode: AlarmMode) -> None:
        """Create an alarm event."""
        self.partition_id = partition_id
        self.mode = mode

    @classmethod
    def decode(cls, payload: Any, text: str = "") -> "AlarmEvent":
        """Decode an ALARM payload."""
        kind = ControllerErrorType.INVALID_ALARM_TYPE
        mode = AlarmEvent.ALARM_TYPES.get(str(payload.get("alarm_type")))
        if mode is None:
            msg = f"Received Invalid Alarm Type:{text}"
            raise PayloadError(msg, kind)

        return _decode_fields(
            text,
            kind,
            lambda: cls(partition_id=int(payload["partition_id"]), mode=mode),
        )

    def encode(self) -> bytes:
        """Encode as sent by the panel."""
        alarm_type = next(k for k, v in AlarmEvent.ALARM_TYPES.items() if v == self.mode)
        return encode_json(
            {
                "event": "ALARM",
                "alarm_type": alarm_type,
                "partition_id": self.partition_id,
                "version": PROTOCOL_VERSION,
            }
        )


class PanelErrorEvent(BaseEvent):
    """The panel reported an application-level error."""

    error_type: str
    description: str

    def __init__(self, *, error_type: str, description: str) -> None:
        """Create a panel error event."""
        self.error_type = error_type
        self.description = description

    @classmethod
    def decode(cls, payload: Any, text: str = "") -> "PanelErrorEvent":  # noqa: ARG003
        """Decode an ERROR payload. Both fields are optional on the wire."""
        return cls(
            error_type=str(payload.get("error_type", "")),
            description=str(payload.get("description", "")),
        )

    def encode(self) -> bytes:
        """Encode as sent by the panel."""
        return encode_json(
            {
                "event": "ERROR",
                "error_type": self.error_type,
                "description": self.description,
                "version": PROTOCOL_VERSION,
            }
        )


class Command:
    """Represents a command sent to the panel."""

    token: str

    def __init__(self, token: str) -> None:
        """Create a command authenticated with the panel's secure token."""
        self.token = token

    def __repr__(self) -> str:
        """Get a string representation of the command, without the token."""
        attrs = {k: v for k, v in self.__dict__.items() if k not in ("token", "user_code")}
        return f"<{self.__class__.__name__} {attrs}>"

    def encode(self) -> bytes:
        """
        Abstract method - do not call.

        :return: The bytes to write to the panel
        """
        raise NotImplementedError


class SummaryRequest(Command):
    """Request a full summary (INFO/SUMMARY) from the panel."""

    def encode(self) -> bytes:
        """Encode the request."""
        return encode_json(
            {
                "nonce": "",
                "action": "INFO",
                "info_type": "SUMMARY",
                "version": PROTOCOL_VERSION,
                "source": PROTOCOL_SOURCE,
                "token": self.token,
            }
        )


class ArmingCommand(Command):
    """Arm or disarm a partition."""

    VALID_MODES = (AlarmMode.DISARM, AlarmMode.ARM_AWAY, AlarmMode.ARM_STAY)

    user_code: str
    partition_id: int
    mode: AlarmMode
    delay: int
    bypass: bool

    def __init__(  # noqa: PLR0913 # Mirrors the fields of the wire message
        self,
        *,
        token: str,
        user_code: str,
        partition_id: int,
        mode: AlarmMode,
        delay: int = 0,
        bypass: bool = False,
    ) -> None:
        """
        Create an arming command.

        :param delay: Exit delay in seconds
        :param bypass: Force-arm, bypassing open zones
        :raises PayloadError: if mode is not DISARM, ARM_AWAY or ARM_STAY
        """
        if mode not in ArmingCommand.VALID_MODES:
            msg = f"Sending Invalid Arming Type:{mode.value}"
            raise PayloadError(msg, ControllerErrorType.INVALID_ARMING_TYPE)

        super().__init__(token)
        self.user_code = user_code
        self.partition_id = partition_id
        self.mode = mode
        self.delay = delay
        self.bypass = bypass

    def encode(self) -> bytes:
        """Encode the command."""
        return encode_json(
            {
                "version": PROTOCOL_VERSION,
                "source": PROTOCOL_SOURCE,
                "action": "ARMING",
                "nonce": "",
                "token": self.token,
                "user_code": self.user_code,
                "partition_id": self.partition_id,
                "arming_type": self.mode.value,
                "delay": self.delay,
                "bypass": self.bypass,
            }
        )
