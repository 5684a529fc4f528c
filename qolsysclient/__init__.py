"""Module file for qolsysclient."""

from .connection import Connection, TLSConnection
from .controller import Controller, ControllerEvent
from .errors import ControllerErrorType, QolsysError
from .event import BaseEvent
from .partition import AlarmMode, Partition, SecuritySystemState
from .zone import Zone, ZoneStatus, ZoneType

__all__ = [
    "AlarmMode",
    "BaseEvent",
    "Connection",
    "Controller",
    "ControllerErrorType",
    "ControllerEvent",
    "Partition",
    "QolsysError",
    "SecuritySystemState",
    "TLSConnection",
    "Zone",
    "ZoneStatus",
    "ZoneType",
]
__version__ = "0.0.0-dev"
