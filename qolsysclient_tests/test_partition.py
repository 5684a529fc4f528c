"""Test the Partition state machine and its security-system state mapping."""

import unittest

import pytest

from qolsysclient.partition import (
    AlarmMode,
    Partition,
    SecuritySystemState,
    arming_request,
)


class PartitionTestCase(unittest.TestCase):
    def test_set_alarm_mode_reports_change_once(self) -> None:
        partition = Partition(0)
        assert partition.set_alarm_mode(AlarmMode.DISARM)
        assert not partition.set_alarm_mode(AlarmMode.DISARM)

    def test_previous_status_follows_one_step_behind(self) -> None:
        """After A->B->C, previous_status is B."""
        partition = Partition(0)
        partition.set_alarm_mode(AlarmMode.DISARM)
        partition.set_alarm_mode(AlarmMode.EXIT_DELAY)
        partition.set_alarm_mode(AlarmMode.ARM_AWAY)
        assert partition.previous_status == AlarmMode.EXIT_DELAY
        assert partition.status == AlarmMode.ARM_AWAY

    def test_previous_status_unchanged_without_transition(self) -> None:
        partition = Partition(0)
        partition.set_alarm_mode(AlarmMode.DISARM)
        partition.set_alarm_mode(AlarmMode.ARM_STAY)
        partition.set_alarm_mode(AlarmMode.ARM_STAY)
        assert partition.previous_status == AlarmMode.DISARM

    def test_set_alarm_mode_from_string(self) -> None:
        partition = Partition(0)
        assert partition.set_alarm_mode_from_string("ARM_STAY")
        assert partition.status == AlarmMode.ARM_STAY
        # Alarm modes are not reported as arming strings
        assert partition.set_alarm_mode_from_string("ALARM_POLICE")
        assert partition.status == AlarmMode.UNKNOWN

    def test_alarm_active(self) -> None:
        partition = Partition(0)
        assert not partition.alarm_active()
        for mode in (
            AlarmMode.ALARM_POLICE,
            AlarmMode.ALARM_FIRE,
            AlarmMode.ALARM_AUXILIARY,
        ):
            partition.set_alarm_mode(mode)
            assert partition.alarm_active()
        partition.set_alarm_mode(AlarmMode.ENTRY_DELAY)
        assert not partition.alarm_active()


class SecurityStateTestCase(unittest.TestCase):
    def test_entry_delay_from_stay(self) -> None:
        """An entry delay entered from ARM_STAY is still stay-armed."""
        partition = Partition(0)
        partition.set_alarm_mode(AlarmMode.ARM_STAY)
        partition.set_alarm_mode_from_string("ENTRY_DELAY")
        assert partition.status == AlarmMode.ENTRY_DELAY
        assert partition.previous_status == AlarmMode.ARM_STAY
        assert partition.current_security_state() == SecuritySystemState.STAY_ARM
        assert partition.target_security_state() == SecuritySystemState.DISARMED

    def test_entry_delay_from_away(self) -> None:
        partition = Partition(0)
        partition.set_alarm_mode(AlarmMode.ARM_AWAY)
        partition.set_alarm_mode(AlarmMode.ENTRY_DELAY)
        assert partition.current_security_state() == SecuritySystemState.AWAY_ARM

    def test_exit_delay(self) -> None:
        partition = Partition(0)
        partition.set_alarm_mode(AlarmMode.EXIT_DELAY)
        assert partition.current_security_state() == SecuritySystemState.DISARMED
        assert partition.target_security_state() == SecuritySystemState.AWAY_ARM

    def test_armed_and_alarm(self) -> None:
        partition = Partition(0)
        partition.set_alarm_mode(AlarmMode.ARM_STAY)
        assert partition.current_security_state() == SecuritySystemState.STAY_ARM
        assert partition.target_security_state() == SecuritySystemState.STAY_ARM
        partition.set_alarm_mode(AlarmMode.ALARM_FIRE)
        assert partition.current_security_state() == (
            SecuritySystemState.ALARM_TRIGGERED
        )
        assert partition.target_security_state() == SecuritySystemState.DISARMED

    def test_unknown(self) -> None:
        partition = Partition(0)
        assert partition.current_security_state() == SecuritySystemState.DISARMED
        assert partition.target_security_state() == SecuritySystemState.DISARMED


class ArmingRequestTestCase(unittest.TestCase):
    def test_requested_states(self) -> None:
        assert arming_request(SecuritySystemState.DISARMED, stay_delay=5) == (
            AlarmMode.DISARM,
            0,
        )
        assert arming_request(SecuritySystemState.STAY_ARM, stay_delay=5) == (
            AlarmMode.ARM_STAY,
            5,
        )
        assert arming_request(SecuritySystemState.AWAY_ARM, away_delay=30) == (
            AlarmMode.ARM_AWAY,
            30,
        )

    def test_night_arm_is_stay_without_delay(self) -> None:
        assert arming_request(
            SecuritySystemState.NIGHT_ARM, stay_delay=5, away_delay=30
        ) == (AlarmMode.ARM_STAY, 0)

    def test_alarm_cannot_be_requested(self) -> None:
        with pytest.raises(ValueError, match="cannot be requested"):
            arming_request(SecuritySystemState.ALARM_TRIGGERED)
