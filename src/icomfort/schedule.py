#!/usr/bin/env python3
"""iComfort - a zone's scheduling mode, as inferred from its schedule id.

Each zone has two schedule ids reserved for it: a manual schedule (16 + zone id),
and an override schedule (32 + zone id). A zone following any other schedule is
following a (user) schedule. These offsets are inferred from observed traffic.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Final


class ScheduleMode(StrEnum):
    MANUAL = "manual"
    OVERRIDE = "override"
    FOLLOWING_SCHEDULE = "following_schedule"
    UNKNOWN = "unknown"  # treat as FOLLOWING_SCHEDULE


class ScheduleModeClassifier:
    """Classify a zone's scheduling mode (and the schedule a change targets)."""

    MANUAL_OFFSET: Final[int] = 16
    OVERRIDE_OFFSET: Final[int] = 32

    @staticmethod
    def _check_zone_id(zone_id: int) -> int:
        if zone_id < 0:
            raise ValueError(f"Invalid zone id: {zone_id}")
        return zone_id

    @classmethod
    def manual_schedule_id(cls, zone_id: int) -> int:
        return cls.MANUAL_OFFSET + cls._check_zone_id(zone_id)

    @classmethod
    def override_schedule_id(cls, zone_id: int) -> int:
        return cls.OVERRIDE_OFFSET + cls._check_zone_id(zone_id)

    @classmethod
    def classify(cls, zone_id: int, schedule_id: int | None) -> ScheduleMode:
        """Return the scheduling mode of a zone, given its current schedule id."""

        cls._check_zone_id(zone_id)

        if schedule_id is None:
            return ScheduleMode.UNKNOWN
        if schedule_id == cls.manual_schedule_id(zone_id):
            return ScheduleMode.MANUAL
        if schedule_id == cls.override_schedule_id(zone_id):
            return ScheduleMode.OVERRIDE
        return ScheduleMode.FOLLOWING_SCHEDULE

    @staticmethod
    def requires_hold(mode: ScheduleMode) -> bool:
        """Return True if a hold is needed to make a setpoint change durable.

        A hold creates an override, so is needed unless the zone is already in
        manual mode or already overridden.
        """
        return mode not in (ScheduleMode.MANUAL, ScheduleMode.OVERRIDE)

    @classmethod
    def target_schedule_id(cls, zone_id: int, mode: ScheduleMode) -> int:
        """Return the id of the schedule to be updated by a setpoint change."""

        if mode == ScheduleMode.MANUAL:
            return cls.manual_schedule_id(zone_id)
        return cls.override_schedule_id(zone_id)
