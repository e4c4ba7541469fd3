"""Collect a one-shot snapshot of the host's hardware and connectivity state."""

from __future__ import annotations

import getpass
import logging
import os
import platform as _platform
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Tuple

import psutil

from .battery import BatteryRecord, collect_battery
from .commands import CommandRunner, run_command
from .config import ProbeSettings
from .network import NetworkRecord, collect_network
from .performance import LoadSample, sample_load
from .platforms import Platform, detect_platform
from .storage import StorageRecord, collect_storage
from .wireless import WirelessRecord, collect_wireless

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DiskUsage:
    mount_point: str
    total_bytes: int
    used_bytes: int
    free_bytes: int
    percent: float

    @property
    def free_percent(self) -> float:
        if not self.total_bytes:
            return 0.0
        return self.free_bytes / self.total_bytes * 100


@dataclass(frozen=True)
class SystemInfo:
    os_description: str
    architecture: str
    machine_name: str
    user: str
    cpu_count: int
    python_version: str


@dataclass(frozen=True)
class SystemSnapshot:
    timestamp: datetime
    platform: Platform
    system: SystemInfo
    load: LoadSample
    battery: BatteryRecord
    storage: StorageRecord
    wireless: WirelessRecord
    network: NetworkRecord
    system_disk: Optional[DiskUsage] = None
    disk_usages: Tuple[DiskUsage, ...] = ()


def gather_snapshot(
    runner: CommandRunner = run_command,
    platform: Optional[Platform] = None,
    settings: Optional[ProbeSettings] = None,
) -> SystemSnapshot:
    """Run every collector once, in sequence. Individual collectors never raise."""
    settings = settings or ProbeSettings()
    resolved = platform if platform is not None else detect_platform()
    logger.debug("gathering snapshot for %s", resolved.value)

    return SystemSnapshot(
        timestamp=datetime.now(),
        platform=resolved,
        system=system_info(),
        load=sample_load(runner, resolved),
        battery=collect_battery(runner, resolved),
        storage=collect_storage(runner, resolved),
        wireless=collect_wireless(runner, resolved, settings.wifi_source),
        network=collect_network(settings.probe_host, settings.probe_port, settings.probe_timeout),
        system_disk=system_volume_usage(resolved),
        disk_usages=_disk_usage_summary(),
    )


def system_info() -> SystemInfo:
    try:
        user = getpass.getuser()
    except (KeyError, OSError):
        user = "unknown"
    return SystemInfo(
        os_description=_platform.platform(),
        architecture=_platform.machine(),
        machine_name=_platform.node(),
        user=user,
        cpu_count=psutil.cpu_count() or 0,
        python_version=_platform.python_version(),
    )


def system_mount_point(platform: Platform) -> str:
    if platform == Platform.WINDOWS:
        return os.environ.get("SystemDrive", "C:") + "\\"
    return "/"


def system_volume_usage(platform: Platform) -> Optional[DiskUsage]:
    """Usage of the volume the OS boots from, or ``None`` if it cannot be measured."""
    mount_point = system_mount_point(platform)
    try:
        return _usage_for(mount_point)
    except OSError:
        logger.debug("cannot measure system volume %s", mount_point, exc_info=True)
        return None


def _usage_for(mount_point: str) -> DiskUsage:
    usage = psutil.disk_usage(mount_point)
    return DiskUsage(
        mount_point=mount_point,
        total_bytes=usage.total,
        used_bytes=usage.used,
        free_bytes=usage.free,
        percent=usage.percent,
    )


def _disk_usage_summary() -> Tuple[DiskUsage, ...]:
    disk_usages: List[DiskUsage] = []
    for partition in psutil.disk_partitions(all=False):
        if "rw" not in partition.opts:
            continue
        try:
            disk_usages.append(_usage_for(partition.mountpoint))
        except OSError:
            continue
    return tuple(disk_usages)
