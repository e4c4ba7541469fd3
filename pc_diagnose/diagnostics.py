"""Turn a system snapshot into per-subject health tiers and an overall score."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import List, Optional, Sequence, Tuple

from .battery import BatteryRecord
from .config import DEFAULT_POLICY, Band, HealthPolicy
from .network import ReachabilityResult
from .system_state import DiskUsage, SystemSnapshot
from .wireless import WirelessRecord


class HealthTier(str, Enum):
    GREEN = "Green"
    YELLOW = "Yellow"
    RED = "Red"
    UNKNOWN = "Unknown"


@dataclass(frozen=True)
class HealthItem:
    subject: str
    tier: HealthTier
    score: int
    explanation: str


@dataclass(frozen=True)
class HealthSummary:
    items: Tuple[HealthItem, ...]
    overall_score: int
    overall_tier: HealthTier


def score_health(snapshot: SystemSnapshot, policy: HealthPolicy = DEFAULT_POLICY) -> HealthSummary:
    """Score every subject of ``snapshot`` independently and aggregate the result."""
    items = [
        score_cpu(snapshot.load.cpu_percent, policy),
        score_ram(snapshot.load.ram_percent, policy),
        score_disk(snapshot.system_disk, policy),
        score_network(snapshot.network.reachability, policy),
        score_wireless(snapshot.wireless, policy),
        score_battery(snapshot.battery, policy),
    ]
    return summarize(items, policy)


def summarize(items: Sequence[HealthItem], policy: HealthPolicy = DEFAULT_POLICY) -> HealthSummary:
    scored = [item.score for item in scorable(items)]
    if not scored:
        return HealthSummary(items=tuple(items), overall_score=0, overall_tier=HealthTier.UNKNOWN)

    mean = Decimal(sum(scored)) / Decimal(len(scored))
    overall = int(mean.quantize(Decimal(1), rounding=ROUND_HALF_UP))
    if overall >= policy.overall_green:
        tier = HealthTier.GREEN
    elif overall >= policy.overall_yellow:
        tier = HealthTier.YELLOW
    else:
        tier = HealthTier.RED
    return HealthSummary(items=tuple(items), overall_score=overall, overall_tier=tier)


def classify(value: float, band: Band) -> Tuple[HealthTier, int]:
    green_score, yellow_score, red_score = band.scores
    if band.higher_is_better:
        if value >= band.green:
            return HealthTier.GREEN, green_score
        if value >= band.yellow:
            return HealthTier.YELLOW, yellow_score
    else:
        if value < band.green:
            return HealthTier.GREEN, green_score
        if value < band.yellow:
            return HealthTier.YELLOW, yellow_score
    return HealthTier.RED, red_score


def _unknown(subject: str, explanation: str) -> HealthItem:
    return HealthItem(subject=subject, tier=HealthTier.UNKNOWN, score=0, explanation=explanation)


def score_cpu(cpu_percent: Optional[float], policy: HealthPolicy = DEFAULT_POLICY) -> HealthItem:
    if cpu_percent is None:
        return _unknown("CPU", "CPU usage could not be sampled.")
    tier, score = classify(cpu_percent, policy.cpu)
    return HealthItem("CPU", tier, score, f"CPU usage {cpu_percent:.0f}%.")


def score_ram(ram_percent: Optional[float], policy: HealthPolicy = DEFAULT_POLICY) -> HealthItem:
    if ram_percent is None:
        return _unknown("RAM", "Memory usage could not be sampled.")
    tier, score = classify(ram_percent, policy.ram)
    return HealthItem("RAM", tier, score, f"Memory usage {ram_percent:.0f}%.")


def score_disk(system_disk: Optional[DiskUsage], policy: HealthPolicy = DEFAULT_POLICY) -> HealthItem:
    if system_disk is None or not system_disk.total_bytes:
        return _unknown("Disk", "System volume could not be measured.")
    free = system_disk.free_percent
    tier, score = classify(free, policy.disk_free)
    return HealthItem("Disk", tier, score, f"{free:.0f}% free on system volume {system_disk.mount_point}.")


def score_network(reachability: ReachabilityResult, policy: HealthPolicy = DEFAULT_POLICY) -> HealthItem:
    if reachability.reachable:
        latency = f" in {reachability.latency_ms:.0f} ms" if reachability.latency_ms is not None else ""
        return HealthItem(
            "Network",
            HealthTier.GREEN,
            policy.reachable_score,
            f"{reachability.target} reachable{latency}.",
        )
    detail = f" {reachability.notes}" if reachability.notes else ""
    return HealthItem(
        "Network",
        HealthTier.RED,
        policy.unreachable_score,
        f"{reachability.target} unreachable.{detail}",
    )


def score_wireless(wireless: WirelessRecord, policy: HealthPolicy = DEFAULT_POLICY) -> HealthItem:
    if not wireless.is_available:
        return _unknown("Wi-Fi", wireless.notes or "Not connected to Wi-Fi.")
    if wireless.signal_percent is not None:
        tier, score = classify(wireless.signal_percent, policy.wifi_percent)
        return HealthItem("Wi-Fi", tier, score, f"Signal {wireless.signal_percent}% on {wireless.ssid}.")
    if wireless.rssi_dbm is not None:
        tier, score = classify(wireless.rssi_dbm, policy.wifi_dbm)
        return HealthItem("Wi-Fi", tier, score, f"RSSI {wireless.rssi_dbm} dBm on {wireless.ssid}.")
    return _unknown("Wi-Fi", f"Connected to {wireless.ssid} but signal strength is unknown.")


def score_battery(battery: BatteryRecord, policy: HealthPolicy = DEFAULT_POLICY) -> HealthItem:
    if not battery.is_present:
        return _unknown("Battery", battery.notes or "No battery present.")
    condition = (battery.condition or "").strip()
    if not condition:
        return _unknown("Battery", "Battery condition not reported.")
    if condition.lower() == "normal":
        return HealthItem("Battery", HealthTier.GREEN, policy.battery_normal_score, "Battery condition Normal.")
    return HealthItem(
        "Battery",
        HealthTier.YELLOW,
        policy.battery_degraded_score,
        f"Battery condition {condition}.",
    )


def scorable(items: Sequence[HealthItem]) -> List[HealthItem]:
    return [item for item in items if item.tier != HealthTier.UNKNOWN]
