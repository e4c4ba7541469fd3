"""Collect battery presence, charge and condition."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Optional

import psutil

from .cim import as_int, query_cim
from .commands import CommandRunner, run_command
from .platforms import Platform, dispatch
from .textparse import first_line_containing, parse_int, value_after_colon

logger = logging.getLogger(__name__)

MAC_SOURCE = "macOS:pmset+system_profiler"
WINDOWS_SOURCE = "Windows:CIM(Win32_Battery)"
PSUTIL_SOURCE = "psutil:sensors_battery"

# Win32_Battery.BatteryStatus codes.
_CHARGING_CODES = (2, 6)
_DISCHARGING_CODE = 3


@dataclass(frozen=True)
class BatteryRecord:
    is_present: bool
    percentage: Optional[int] = None
    is_charging: Optional[bool] = None
    condition: Optional[str] = None
    cycle_count: Optional[int] = None
    design_capacity_mah: Optional[int] = None
    full_charge_capacity_mah: Optional[int] = None
    source: str = "unknown"
    notes: str = ""


def collect_battery(runner: CommandRunner = run_command, platform: Optional[Platform] = None) -> BatteryRecord:
    """Return the battery state for this host; never raises."""
    try:
        return dispatch(
            {
                Platform.MACOS: lambda: _mac_battery(runner),
                Platform.WINDOWS: lambda: _windows_battery(runner),
            },
            platform,
            _psutil_battery,
        )
    except Exception as exc:
        logger.debug("battery probe failed", exc_info=True)
        return BatteryRecord(is_present=False, notes=f"Battery query error: {exc.__class__.__name__}")


def _mac_battery(runner: CommandRunner) -> BatteryRecord:
    try:
        pmset = runner("pmset", ["-g", "batt"])
        if "internalbattery" not in pmset.lower():
            return BatteryRecord(
                is_present=False,
                source=MAC_SOURCE,
                notes="No InternalBattery found (desktop or no battery).",
            )

        profile = runner("system_profiler", ["SPPowerDataType"])
        return BatteryRecord(
            is_present=True,
            percentage=parse_pmset_percentage(pmset),
            is_charging=parse_charging_state(pmset),
            condition=value_after_colon(first_line_containing(profile, "Condition")) or None,
            cycle_count=_int_after_label(profile, "Cycle Count"),
            design_capacity_mah=_int_after_label(profile, "Design Capacity"),
            full_charge_capacity_mah=_int_after_label(profile, "Full Charge Capacity"),
            source=MAC_SOURCE,
        )
    except Exception as exc:
        logger.debug("pmset/system_profiler parsing failed", exc_info=True)
        return BatteryRecord(
            is_present=False,
            source=MAC_SOURCE,
            notes=f"macOS battery parse error: {exc.__class__.__name__}",
        )


def parse_pmset_percentage(text: str) -> Optional[int]:
    token = next((t for t in text.split() if t.endswith("%;")), None)
    if token is None:
        return None
    return parse_int(token[:-2])


def parse_charging_state(text: str) -> Optional[bool]:
    lowered = text.lower()
    if "discharging" in lowered or "not charging" in lowered:
        return False
    if re.search(r"\bcharging\b", lowered):
        return True
    if "charged" in lowered:
        return False
    return None


def _int_after_label(text: str, label: str) -> Optional[int]:
    value = value_after_colon(first_line_containing(text, label))
    return parse_int(value)


def _windows_battery(runner: CommandRunner) -> BatteryRecord:
    try:
        rows = query_cim(runner, "Win32_Battery", ["EstimatedChargeRemaining", "BatteryStatus"])
        if not rows:
            return BatteryRecord(
                is_present=False,
                source=WINDOWS_SOURCE,
                notes="Win32_Battery returned no results (desktop or no battery).",
            )

        first = rows[0]
        status = as_int(first.get("BatteryStatus"))
        is_charging: Optional[bool] = None
        if status in _CHARGING_CODES:
            is_charging = True
        elif status == _DISCHARGING_CODE:
            is_charging = False
        return BatteryRecord(
            is_present=True,
            percentage=as_int(first.get("EstimatedChargeRemaining")),
            is_charging=is_charging,
            source=WINDOWS_SOURCE,
        )
    except Exception as exc:
        logger.debug("Win32_Battery query failed", exc_info=True)
        return BatteryRecord(
            is_present=False,
            source=WINDOWS_SOURCE,
            notes=f"Windows battery query error: {exc.__class__.__name__}",
        )


def _psutil_battery() -> BatteryRecord:
    battery = psutil.sensors_battery() if hasattr(psutil, "sensors_battery") else None
    if battery is None:
        return BatteryRecord(
            is_present=False,
            source=PSUTIL_SOURCE,
            notes="Battery info not available on this platform.",
        )
    return BatteryRecord(
        is_present=True,
        percentage=int(round(battery.percent)),
        is_charging=battery.power_plugged,
        source=PSUTIL_SOURCE,
    )
