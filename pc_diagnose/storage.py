"""Enumerate physical disks and their SSD / SMART / TRIM details."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

from .cim import as_int, as_text, query_cim
from .commands import CommandRunner, run_command
from .platforms import Platform, dispatch

logger = logging.getLogger(__name__)

MAC_SOURCE = "macOS:system_profiler(SPNVMeDataType+SPSerialATADataType)"
WINDOWS_SOURCE = "Windows:CIM(MSFT_PhysicalDisk -> fallback Win32_DiskDrive)"

# system_profiler prints each device name at this indent.
DEVICE_HEADER_INDENT = 6

_STORAGE_NAMESPACE = "root/Microsoft/Windows/Storage"
_MEDIA_TYPE_SSD = 3
_MEDIA_TYPE_HDD = 4
_HEALTH_LABELS = {0: "Healthy", 1: "Warning", 2: "Unhealthy", 5: "Unknown"}
_BYTES_IN_CAPACITY = re.compile(r"\(([\d,.\s]+)\s*bytes\)", re.IGNORECASE)


@dataclass(frozen=True)
class PhysicalDiskRecord:
    name: Optional[str] = None
    model: Optional[str] = None
    serial: Optional[str] = None
    is_ssd: Optional[bool] = None
    capacity_text: Optional[str] = None
    capacity_bytes: Optional[int] = None
    smart_status: Optional[str] = None
    trim_support: Optional[str] = None
    interface_type: Optional[str] = None
    health_status: Optional[str] = None
    medium_type: Optional[str] = None

    @property
    def identity(self) -> Tuple[str, str]:
        return ((self.name or "").strip(), (self.model or "").strip())


@dataclass(frozen=True)
class StorageRecord:
    is_available: bool
    disks: Tuple[PhysicalDiskRecord, ...] = ()
    source: str = "unknown"
    notes: str = ""


def collect_storage(runner: CommandRunner = run_command, platform: Optional[Platform] = None) -> StorageRecord:
    """Return the physical disks on this host; never raises."""
    try:
        return dispatch(
            {
                Platform.MACOS: lambda: _mac_storage(runner),
                Platform.WINDOWS: lambda: _windows_storage(runner),
            },
            platform,
            lambda: StorageRecord(is_available=False, notes="Storage info not available on this platform."),
        )
    except Exception as exc:
        logger.debug("storage probe failed", exc_info=True)
        return StorageRecord(is_available=False, notes=f"Storage query error: {exc.__class__.__name__}")


def _mac_storage(runner: CommandRunner) -> StorageRecord:
    try:
        disks: List[PhysicalDiskRecord] = []
        nvme = runner("system_profiler", ["SPNVMeDataType"])
        disks.extend(parse_profiler_disks(nvme, assume_ssd=True, interface_type="NVMe"))
        sata = runner("system_profiler", ["SPSerialATADataType"])
        disks.extend(parse_profiler_disks(sata, assume_ssd=False, interface_type="SATA"))

        unique = dedupe_disks(disks)
        if not unique:
            return StorageRecord(
                is_available=False,
                source=MAC_SOURCE,
                notes="No physical disks found in system_profiler output.",
            )
        return StorageRecord(is_available=True, disks=unique, source=MAC_SOURCE)
    except Exception as exc:
        logger.debug("system_profiler storage parsing failed", exc_info=True)
        return StorageRecord(
            is_available=False,
            source=MAC_SOURCE,
            notes=f"macOS storage parse error: {exc.__class__.__name__}",
        )


def is_device_header(raw_line: str) -> bool:
    trimmed = raw_line.strip()
    indent = len(raw_line) - len(raw_line.lstrip(" "))
    return (
        trimmed.endswith(":")
        and ": " not in trimmed
        and len(trimmed) > 2
        and indent == DEVICE_HEADER_INDENT
    )


def parse_profiler_disks(
    text: str,
    assume_ssd: Optional[bool],
    interface_type: Optional[str] = None,
) -> List[PhysicalDiskRecord]:
    """Split a system_profiler storage dump into one record per device header."""
    disks: List[PhysicalDiskRecord] = []
    current: Optional[Dict[str, object]] = None

    for raw in text.splitlines():
        line = raw.rstrip("\r")
        if is_device_header(line):
            if current is not None:
                disks.append(PhysicalDiskRecord(**current))
            current = {
                "name": line.strip().rstrip(":").strip(),
                "is_ssd": assume_ssd,
                "interface_type": interface_type,
            }
            continue

        if current is None or ":" not in line:
            continue
        key, value = (part.strip() for part in line.strip().split(":", 1))
        _apply_profiler_field(current, key.lower(), value)

    if current is not None:
        disks.append(PhysicalDiskRecord(**current))
    return disks


_PROFILER_FIELDS = {
    "model": "model",
    "capacity": "capacity_text",
    "smart status": "smart_status",
    "s.m.a.r.t. status": "smart_status",
    "trim support": "trim_support",
    "serial number": "serial",
    "medium type": "medium_type",
}


def _apply_profiler_field(disk: Dict[str, object], key: str, value: str) -> None:
    field = _PROFILER_FIELDS.get(key)
    # First value wins; nested volume blocks repeat keys such as Capacity.
    if field is None or field in disk:
        return
    disk[field] = value
    if field == "capacity_text":
        disk["capacity_bytes"] = _bytes_from_capacity(value)
    elif field == "medium_type":
        lowered = value.lower()
        if "ssd" in lowered or "solid state" in lowered:
            disk["is_ssd"] = True
        elif "hdd" in lowered or "hard disk" in lowered:
            disk["is_ssd"] = False


def _bytes_from_capacity(value: str) -> Optional[int]:
    match = _BYTES_IN_CAPACITY.search(value)
    if not match:
        return None
    digits = "".join(ch for ch in match.group(1) if ch.isdigit())
    return int(digits) if digits else None


def named_disks(disks: Iterable[PhysicalDiskRecord]) -> Tuple[PhysicalDiskRecord, ...]:
    """Drop records with neither a name nor a model."""
    return tuple(disk for disk in disks if any(disk.identity))


def dedupe_disks(disks: Iterable[PhysicalDiskRecord]) -> Tuple[PhysicalDiskRecord, ...]:
    """Drop nameless records and keep the first record per (name, model)."""
    seen = set()
    unique: List[PhysicalDiskRecord] = []
    for disk in named_disks(disks):
        key = disk.identity
        if key in seen:
            continue
        seen.add(key)
        unique.append(disk)
    return tuple(unique)


def _windows_storage(runner: CommandRunner) -> StorageRecord:
    try:
        try:
            disks = _msft_physical_disks(runner)
        except ValueError:
            # Older Windows builds lack the Storage namespace entirely.
            logger.debug("MSFT_PhysicalDisk unavailable, falling back", exc_info=True)
            disks = []
        named = named_disks(disks)
        if named:
            return StorageRecord(is_available=True, disks=named, source=WINDOWS_SOURCE)

        named = named_disks(_win32_disk_drives(runner))
        if not named:
            return StorageRecord(
                is_available=False,
                source=WINDOWS_SOURCE,
                notes="No physical disks found via CIM.",
            )
        return StorageRecord(is_available=True, disks=named, source=WINDOWS_SOURCE)
    except Exception as exc:
        logger.debug("Windows storage query failed", exc_info=True)
        return StorageRecord(
            is_available=False,
            source=WINDOWS_SOURCE,
            notes=f"Windows storage query error: {exc.__class__.__name__}",
        )


def _msft_physical_disks(runner: CommandRunner) -> List[PhysicalDiskRecord]:
    rows = query_cim(
        runner,
        "MSFT_PhysicalDisk",
        ["FriendlyName", "MediaType", "Size", "SerialNumber", "HealthStatus"],
        namespace=_STORAGE_NAMESPACE,
    )
    disks = []
    for row in rows:
        media_type = as_int(row.get("MediaType"))
        is_ssd: Optional[bool] = None
        if media_type == _MEDIA_TYPE_SSD:
            is_ssd = True
        elif media_type == _MEDIA_TYPE_HDD:
            is_ssd = False
        disks.append(
            PhysicalDiskRecord(
                name=as_text(row.get("FriendlyName")),
                serial=as_text(row.get("SerialNumber")),
                is_ssd=is_ssd,
                capacity_bytes=as_int(row.get("Size")),
                health_status=_health_label(row.get("HealthStatus")),
                medium_type=str(media_type) if media_type is not None else None,
            )
        )
    return disks


def _health_label(value: object) -> Optional[str]:
    code = as_int(value)
    if code in _HEALTH_LABELS:
        return _HEALTH_LABELS[code]
    return as_text(value)


def _win32_disk_drives(runner: CommandRunner) -> List[PhysicalDiskRecord]:
    rows = query_cim(runner, "Win32_DiskDrive", ["Model", "Size", "SerialNumber", "MediaType", "InterfaceType"])
    disks = []
    for row in rows:
        model = as_text(row.get("Model"))
        medium = as_text(row.get("MediaType"))
        disks.append(
            PhysicalDiskRecord(
                name=model,
                model=model,
                serial=as_text(row.get("SerialNumber")),
                is_ssd=True if medium and "ssd" in medium.lower() else None,
                capacity_bytes=as_int(row.get("Size")),
                interface_type=as_text(row.get("InterfaceType")),
                medium_type=medium,
            )
        )
    return disks
