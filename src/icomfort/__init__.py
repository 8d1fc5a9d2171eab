#!/usr/bin/env python3
"""iComfort - a Lennox iComfort protocol engine.

Works with (amongst others):
- iComfort S30, E30 & M30 (via the cloud)
"""

from __future__ import annotations

from icomfort_tx import VERSION, Command, ZoneStatus  # noqa: F401

from .gateway import Gateway  # noqa: F401
from .schedule import ScheduleMode, ScheduleModeClassifier  # noqa: F401
from .setpoint import SetpointCommandBuilder, split_target_temp  # noqa: F401
from .zone import Zone  # noqa: F401
