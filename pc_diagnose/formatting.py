"""Console-friendly formatting utilities."""

from __future__ import annotations

from typing import Iterable, Optional, Sequence

from .diagnostics import HealthSummary, HealthTier
from .network import ReachabilityResult
from .storage import PhysicalDiskRecord
from .system_state import DiskUsage, SystemSnapshot


def format_bytes(num: float) -> str:
    suffixes = ["B", "KiB", "MiB", "GiB", "TiB"]
    value = float(num)
    for suffix in suffixes:
        if value < 1024 or suffix == suffixes[-1]:
            return f"{value:.1f} {suffix}"
        value /= 1024
    return f"{value:.1f} TiB"


def show(value: object, suffix: str = "") -> str:
    """Render an optional field, ``-`` when absent."""
    if value is None or value == "":
        return "-"
    if isinstance(value, bool):
        return "yes" if value else "no"
    if isinstance(value, float):
        return f"{value:.0f}{suffix}"
    return f"{value}{suffix}"


def render_table(headers: Sequence[str], rows: Sequence[Sequence[str]]) -> str:
    widths = [len(h) for h in headers]
    for row in rows:
        for index, cell in enumerate(row):
            widths[index] = max(widths[index], len(cell))
    lines = []
    lines.append(_format_row(headers, widths))
    lines.append(_format_row(["-" * w for w in widths], widths))
    for row in rows:
        lines.append(_format_row(row, widths))
    return "\n".join(lines)


def disk_capacity(disk: PhysicalDiskRecord) -> str:
    if disk.capacity_text:
        return disk.capacity_text
    if disk.capacity_bytes is not None:
        return format_bytes(disk.capacity_bytes)
    return "-"


def format_physical_disks(disks: Iterable[PhysicalDiskRecord]) -> str:
    rows = [
        [
            show(disk.name),
            show(disk.model),
            show(disk.is_ssd),
            disk_capacity(disk),
            show(disk.smart_status or disk.health_status),
            show(disk.trim_support),
            show(disk.interface_type),
        ]
        for disk in disks
    ]
    headers = ["Name", "Model", "SSD", "Capacity", "Health", "TRIM", "Interface"]
    return render_table(headers, rows) if rows else "No physical disks"


def format_disk_table(disks: Iterable[DiskUsage]) -> str:
    rows = [
        [
            disk.mount_point,
            f"{format_bytes(disk.used_bytes)} / {format_bytes(disk.total_bytes)}",
            f"{disk.percent:.0f}%",
            f"{disk.free_percent:.0f}%",
        ]
        for disk in disks
    ]
    return render_table(["Mount", "Used / Total", "Used", "Free"], rows) if rows else "No volume data"


def format_health(summary: HealthSummary) -> str:
    rows = [
        [item.subject, item.tier.value, "-" if item.tier == HealthTier.UNKNOWN else str(item.score), item.explanation]
        for item in summary.items
    ]
    table = render_table(["Subject", "Tier", "Score", "Details"], rows)
    return f"{table}\nOverall: {summary.overall_score} ({summary.overall_tier.value})"


def format_snapshot(snapshot: SystemSnapshot, summary: Optional[HealthSummary] = None) -> str:
    system = snapshot.system
    battery = snapshot.battery
    wireless = snapshot.wireless
    reach = snapshot.network.reachability
    lines = [
        f"Time: {snapshot.timestamp:%Y-%m-%d %H:%M:%S}",
        f"OS: {system.os_description} ({system.architecture}) | Host: {system.machine_name} | User: {system.user}",
        f"CPU cores: {system.cpu_count} | CPU: {show(snapshot.load.cpu_percent, '%')} | RAM: {show(snapshot.load.ram_percent, '%')}",
        "",
        "Battery:",
    ]
    if battery.is_present:
        lines.append(
            f"  Charge {show(battery.percentage, '%')} | Charging {show(battery.is_charging)} | "
            f"Condition {show(battery.condition)} | Cycles {show(battery.cycle_count)} | "
            f"Capacity {show(battery.full_charge_capacity_mah, ' mAh')}"
            f" / {show(battery.design_capacity_mah, ' mAh')}"
        )
    else:
        lines.append(f"  Not available: {battery.notes or '-'}")

    lines.append("Wi-Fi:")
    if wireless.is_available:
        lines.append(
            f"  SSID {wireless.ssid} on {show(wireless.interface_name)} | Signal {show(wireless.signal_percent, '%')} "
            f"({show(wireless.rssi_dbm, ' dBm')}, noise {show(wireless.noise_dbm, ' dBm')}) | "
            f"Channel {show(wireless.channel)} | PHY {show(wireless.phy_mode)} | "
            f"Security {show(wireless.security)} | Tx {show(wireless.tx_rate_mbps, ' Mbps')}"
        )
    else:
        lines.append(f"  Not available: {wireless.notes or '-'}")

    lines.append("Physical disks:")
    if snapshot.storage.is_available:
        lines.append(format_physical_disks(snapshot.storage.disks))
    else:
        lines.append(f"  Not available: {snapshot.storage.notes or '-'}")

    if snapshot.disk_usages:
        lines.append("Volumes:")
        lines.append(format_disk_table(snapshot.disk_usages))

    lines.append("Network:")
    for adapter in snapshot.network.adapters:
        addresses = ", ".join(adapter.ipv4 + adapter.ipv6)
        lines.append(f"  {adapter.name}: {addresses} | MAC {show(adapter.mac)} | {show(adapter.speed_mbps, ' Mbps')}")
    lines.append(f"  Probe {reach.target}: {_reachability_status(reach)}")

    if summary is not None:
        lines.append("")
        lines.append("Health:")
        lines.append(format_health(summary))
    return "\n".join(lines)


def _format_row(row: Sequence[str], widths: Sequence[int]) -> str:
    padded = [cell.ljust(width) for cell, width in zip(row, widths)]
    return " | ".join(padded)


def _reachability_status(reach: ReachabilityResult) -> str:
    if not reach.reachable:
        return reach.notes or "unreachable"
    if reach.latency_ms is None:
        return "OK"
    return f"OK ({reach.latency_ms:.0f} ms)"
