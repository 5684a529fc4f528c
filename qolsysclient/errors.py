"""Error classes reported by the Qolsys controller."""

from enum import Enum


class ControllerErrorType(Enum):
    """Kinds of error reported through the controller's error listeners."""

    UNDEFINED_ERROR = "Undefined Error"
    CONNECTION_ERROR = "Panel Connection Error"
    INVALID_PAYLOAD_EVENT = "Received Invalid Payload Event"
    INVALID_PAYLOAD_INFO_TYPE = "Received Invalid Payload Info Type"
    INVALID_ZONE_EVENT_TYPE = "Received Invalid Zone Event Type"
    INVALID_ARMING_TYPE = "Received Invalid Arming Type"
    INVALID_ALARM_TYPE = "Received Invalid Alarm Type"
    QOLSYS_PANEL_ERROR = "Qolsys Panel Error"


class QolsysError(Exception):
    """Base exception for qolsysclient."""

    kind: ControllerErrorType

    def __init__(
        self,
        message: str,
        kind: ControllerErrorType = ControllerErrorType.UNDEFINED_ERROR,
    ) -> None:
        """
        Create an error of a specific kind.

        :param message: Human-readable description, including the raw
            message text where one is involved
        :param kind: The ControllerErrorType reported to listeners
        """
        super().__init__(message)
        self.kind = kind

    def __repr__(self) -> str:
        """Get a string representation of the error."""
        return f"{self.__class__.__name__}({str(self)!r}, kind={self.kind!r})"


class PayloadError(QolsysError):
    """A well-formed JSON message that could not be interpreted."""


class BufferOverflowError(QolsysError):
    """Unparsable inbound data exceeded the reassembly buffer limit."""

    def __init__(self, message: str) -> None:
        """Create a buffer overflow error, reported as a connection error."""
        super().__init__(message, ControllerErrorType.CONNECTION_ERROR)
