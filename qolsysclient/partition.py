"""Provides the in-memory arming state of a single Qolsys partition."""

import logging
from enum import Enum

_LOGGER = logging.getLogger(__name__)


class AlarmMode(Enum):
    """Arming and alarm modes of a partition."""

    DISARM = "DISARM"
    EXIT_DELAY = "EXIT_DELAY"
    ENTRY_DELAY = "ENTRY_DELAY"
    ARM_STAY = "ARM_STAY"
    ARM_AWAY = "ARM_AWAY"
    ALARM_POLICE = "ALARM_POLICE"
    ALARM_FIRE = "ALARM_FIRE"
    ALARM_AUXILIARY = "ALARM_AUXILIARY"
    UNKNOWN = "UNKNOWN"


class SecuritySystemState(Enum):
    """Security-system states as presented to a home-automation consumer."""

    STAY_ARM = "STAY_ARM"
    AWAY_ARM = "AWAY_ARM"
    NIGHT_ARM = "NIGHT_ARM"
    DISARMED = "DISARMED"
    ALARM_TRIGGERED = "ALARM_TRIGGERED"


# Modes the panel reports via ARMING status strings
ARMING_STRING_MODES = {
    "DISARM": AlarmMode.DISARM,
    "EXIT_DELAY": AlarmMode.EXIT_DELAY,
    "ENTRY_DELAY": AlarmMode.ENTRY_DELAY,
    "ARM_STAY": AlarmMode.ARM_STAY,
    "ARM_AWAY": AlarmMode.ARM_AWAY,
}

ALARM_MODES = (
    AlarmMode.ALARM_POLICE,
    AlarmMode.ALARM_FIRE,
    AlarmMode.ALARM_AUXILIARY,
)

TARGET_STATES = {
    AlarmMode.DISARM: SecuritySystemState.DISARMED,
    AlarmMode.EXIT_DELAY: SecuritySystemState.AWAY_ARM,
    AlarmMode.ENTRY_DELAY: SecuritySystemState.DISARMED,
    AlarmMode.ARM_STAY: SecuritySystemState.STAY_ARM,
    AlarmMode.ARM_AWAY: SecuritySystemState.AWAY_ARM,
}


class Partition:
    """
    Represents a partition (independently armable area) of the panel.

    previous_status holds the status in force immediately before the current
    one, which is what distinguishes an ENTRY_DELAY entered from ARM_STAY
    from one entered from ARM_AWAY.
    """

    partition_id: int
    name: str
    secure_arm: bool
    status: AlarmMode
    previous_status: AlarmMode

    def __init__(self, partition_id: int) -> None:
        """Create a partition with unknown status."""
        self.partition_id = partition_id
        self.name = ""
        self.secure_arm = False
        self.status = AlarmMode.UNKNOWN
        self.previous_status = AlarmMode.UNKNOWN

    def __repr__(self) -> str:
        """Get a string representation of the partition."""
        return f"<{self.__class__.__name__} {self.__dict__}>"

    def set_alarm_mode(self, mode: AlarmMode) -> bool:
        """Set the partition status, returning True if it changed."""
        if mode == self.status:
            return False

        _LOGGER.debug(
            "Partition %s change status:%s->%s", self.partition_id, self.status, mode
        )
        self.previous_status = self.status
        self.status = mode
        return True

    def set_alarm_mode_from_string(self, raw_mode: str) -> bool:
        """
        Set the partition status from a protocol arming string.

        Strings other than DISARM, EXIT_DELAY, ENTRY_DELAY, ARM_STAY and
        ARM_AWAY map to AlarmMode.UNKNOWN.

        :return: True if the status changed
        """
        return self.set_alarm_mode(ARMING_STRING_MODES.get(raw_mode, AlarmMode.UNKNOWN))

    def alarm_active(self) -> bool:
        """Whether the partition is currently in a police, fire or aux alarm."""
        return self.status in ALARM_MODES

    def current_security_state(self) -> SecuritySystemState:
        """Map the current status to the state the security system is in."""
        if self.alarm_active():
            return SecuritySystemState.ALARM_TRIGGERED
        if self.status == AlarmMode.ARM_STAY:
            return SecuritySystemState.STAY_ARM
        if self.status == AlarmMode.ARM_AWAY:
            return SecuritySystemState.AWAY_ARM
        if self.status == AlarmMode.ENTRY_DELAY:
            # Still armed until the entry delay ends
            if self.previous_status == AlarmMode.ARM_STAY:
                return SecuritySystemState.STAY_ARM
            return SecuritySystemState.AWAY_ARM
        return SecuritySystemState.DISARMED

    def target_security_state(self) -> SecuritySystemState:
        """Map the current status to the state the security system is heading to."""
        return TARGET_STATES.get(self.status, SecuritySystemState.DISARMED)


def arming_request(
    state: SecuritySystemState, *, stay_delay: int = 0, away_delay: int = 0
) -> tuple[AlarmMode, int]:
    """
    Get the send_arm_command() mode and exit delay that request a state.

    NIGHT_ARM is a stay arm without exit delay.

    :raises ValueError: for ALARM_TRIGGERED, which cannot be requested
    """
    if state == SecuritySystemState.DISARMED:
        return AlarmMode.DISARM, 0
    if state == SecuritySystemState.STAY_ARM:
        return AlarmMode.ARM_STAY, stay_delay
    if state == SecuritySystemState.AWAY_ARM:
        return AlarmMode.ARM_AWAY, away_delay
    if state == SecuritySystemState.NIGHT_ARM:
        return AlarmMode.ARM_STAY, 0

    msg = f"{state} cannot be requested"
    raise ValueError(msg)
