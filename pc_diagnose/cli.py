"""Entry point for the pc-diagnose command line tool."""

from __future__ import annotations

import argparse
import json
import logging
from dataclasses import asdict
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from .config import ProbeSettings
from .diagnostics import HealthSummary, HealthTier, score_health
from .formatting import disk_capacity, format_bytes, format_snapshot, show
from .system_state import SystemSnapshot, gather_snapshot
from .wireless import MAC_SOURCES

_TIER_STYLES = {
    HealthTier.GREEN: "bold green",
    HealthTier.YELLOW: "bold yellow",
    HealthTier.RED: "bold red",
    HealthTier.UNKNOWN: "dim",
}


def build_parser() -> argparse.ArgumentParser:
    defaults = ProbeSettings()
    parser = argparse.ArgumentParser(
        description="Probe battery, storage, Wi-Fi and load, and score overall machine health.",
    )
    output = parser.add_mutually_exclusive_group()
    output.add_argument("--json", action="store_true", help="print the snapshot and health summary as JSON")
    output.add_argument("--ui", action="store_true", help="render a Rich terminal report")
    parser.add_argument(
        "--wifi-source",
        choices=MAC_SOURCES,
        default=defaults.wifi_source,
        help="macOS tool used to read Wi-Fi details",
    )
    parser.add_argument("--probe-host", default=defaults.probe_host, help="host used for the reachability test")
    parser.add_argument("--probe-port", type=int, default=defaults.probe_port, help="TCP port for the reachability test")
    parser.add_argument(
        "--probe-timeout",
        type=float,
        default=defaults.probe_timeout,
        help="reachability test timeout in seconds",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="log collector details to stderr")
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)

    settings = ProbeSettings(
        probe_host=args.probe_host,
        probe_port=args.probe_port,
        probe_timeout=args.probe_timeout,
        wifi_source=args.wifi_source,
    )
    snapshot = gather_snapshot(settings=settings)
    summary = score_health(snapshot)

    if args.json:
        print(to_json(snapshot, summary))
        return

    if args.ui:
        _render_rich(snapshot, summary)
        return

    print(format_snapshot(snapshot, summary))


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(name)s: %(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


def _json_default(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    raise TypeError(f"{type(value).__name__} is not JSON serializable")


def to_json(snapshot: SystemSnapshot, summary: HealthSummary) -> str:
    snapshot_dict: Dict[str, Any] = asdict(snapshot)
    if snapshot.system_disk is not None:
        snapshot_dict["system_disk"]["free_percent"] = round(snapshot.system_disk.free_percent, 1)
    payload: Dict[str, Any] = {"snapshot": snapshot_dict, "health": asdict(summary)}
    return json.dumps(payload, default=_json_default, ensure_ascii=False, indent=2)


def _render_rich(snapshot: SystemSnapshot, summary: HealthSummary) -> None:
    console = Console()

    console.print(Panel(f"System snapshot - {snapshot.timestamp:%Y-%m-%d %H:%M:%S}", style="bold cyan"))

    system = snapshot.system
    overview = Table(show_header=False, box=box.ROUNDED)
    overview.add_row("OS", escape(f"{system.os_description} ({system.architecture})"))
    overview.add_row("Host", escape(f"{system.machine_name} | {system.user} | {system.cpu_count} cores"))
    overview.add_row("Load", f"CPU {show(snapshot.load.cpu_percent, '%')} | RAM {show(snapshot.load.ram_percent, '%')}")
    battery = snapshot.battery
    if battery.is_present:
        battery_text = f"{show(battery.percentage, '%')} | charging {show(battery.is_charging)} | {show(battery.condition)}"
    else:
        battery_text = battery.notes or "-"
    overview.add_row("Battery", escape(battery_text))
    wireless = snapshot.wireless
    if wireless.is_available:
        wifi_text = (
            f"{wireless.ssid} | {show(wireless.signal_percent, '%')} | "
            f"{show(wireless.rssi_dbm, ' dBm')} | {show(wireless.phy_mode)}"
        )
    else:
        wifi_text = wireless.notes or "-"
    # SSIDs and tool notes may contain square brackets.
    overview.add_row("Wi-Fi", escape(wifi_text))
    console.print(overview)

    if snapshot.storage.disks:
        disk_table = Table(title="Physical disks", box=box.SIMPLE_HEAD)
        for column in ("Name", "Model", "SSD", "Capacity", "Health", "TRIM"):
            disk_table.add_column(column)
        for disk in snapshot.storage.disks:
            disk_table.add_row(
                escape(show(disk.name)),
                escape(show(disk.model)),
                show(disk.is_ssd),
                escape(disk_capacity(disk)),
                escape(show(disk.smart_status or disk.health_status)),
                escape(show(disk.trim_support)),
            )
        console.print(disk_table)
    else:
        console.print(Panel(escape(snapshot.storage.notes or "No physical disks"), style="dim"))

    if snapshot.disk_usages:
        volume_table = Table(title="Volumes", box=box.SIMPLE_HEAD)
        volume_table.add_column("Mount", style="bold")
        volume_table.add_column("Used / Total")
        volume_table.add_column("Free", justify="right")
        for disk in snapshot.disk_usages:
            volume_table.add_row(
                escape(disk.mount_point),
                f"{format_bytes(disk.used_bytes)} / {format_bytes(disk.total_bytes)}",
                f"{disk.free_percent:.0f}%",
            )
        console.print(volume_table)

    health = Table(title="Health", box=box.SIMPLE_HEAD)
    health.add_column("Subject", style="bold")
    health.add_column("Tier")
    health.add_column("Score", justify="right")
    health.add_column("Details")
    for item in summary.items:
        health.add_row(
            item.subject,
            f"[{_TIER_STYLES[item.tier]}]{item.tier.value}[/]",
            "-" if item.tier == HealthTier.UNKNOWN else str(item.score),
            escape(item.explanation),
        )
    console.print(health)
    console.print(
        Panel(
            f"Overall health: {summary.overall_score} ({summary.overall_tier.value})",
            style=_TIER_STYLES[summary.overall_tier],
        )
    )


if __name__ == "__main__":
    main()
