from datetime import datetime

import pytest

from pc_diagnose.battery import BatteryRecord
from pc_diagnose.config import Band, HealthPolicy
from pc_diagnose.diagnostics import (
    HealthItem,
    HealthTier,
    classify,
    score_battery,
    score_cpu,
    score_disk,
    score_health,
    score_network,
    score_ram,
    score_wireless,
    summarize,
)
from pc_diagnose.network import NetworkRecord, ReachabilityResult
from pc_diagnose.performance import LoadSample
from pc_diagnose.platforms import Platform
from pc_diagnose.storage import StorageRecord
from pc_diagnose.system_state import DiskUsage, SystemInfo, SystemSnapshot
from pc_diagnose.wireless import WirelessRecord

GIB = 1024**3


def make_disk(free_percent: float) -> DiskUsage:
    total = 100 * GIB
    free = int(total * free_percent / 100)
    return DiskUsage(
        mount_point="/",
        total_bytes=total,
        used_bytes=total - free,
        free_bytes=free,
        percent=100 - free_percent,
    )


def make_snapshot(
    *,
    cpu_percent=None,
    ram_percent=None,
    system_disk=None,
    reachable: bool = True,
    wireless=None,
    battery=None,
) -> SystemSnapshot:
    return SystemSnapshot(
        timestamp=datetime.now(),
        platform=Platform.MACOS,
        system=SystemInfo("macOS-14.5-arm64", "arm64", "studio", "dev", 10, "3.12.4"),
        load=LoadSample(cpu_percent=cpu_percent, ram_percent=ram_percent),
        battery=battery or BatteryRecord(is_present=False, notes="No InternalBattery found."),
        storage=StorageRecord(is_available=False),
        wireless=wireless or WirelessRecord(is_available=False, notes="Not connected to a Wi-Fi network."),
        network=NetworkRecord(
            host_name="studio",
            adapters=(),
            reachability=ReachabilityResult(target="1.1.1.1:443", reachable=reachable, latency_ms=12.0 if reachable else None),
        ),
        system_disk=system_disk,
    )


@pytest.mark.parametrize(
    "cpu, tier, score",
    [(10, HealthTier.GREEN, 95), (69.9, HealthTier.GREEN, 95), (70, HealthTier.YELLOW, 70), (89.9, HealthTier.YELLOW, 70), (90, HealthTier.RED, 35)],
)
def test_cpu_tiers(cpu, tier, score):
    item = score_cpu(cpu)
    assert (item.tier, item.score) == (tier, score)


@pytest.mark.parametrize(
    "ram, tier, score",
    [(74.9, HealthTier.GREEN, 95), (75, HealthTier.YELLOW, 65), (90, HealthTier.RED, 25)],
)
def test_ram_tiers(ram, tier, score):
    item = score_ram(ram)
    assert (item.tier, item.score) == (tier, score)


def test_missing_load_sample_is_unknown():
    assert score_cpu(None).tier == HealthTier.UNKNOWN
    assert score_ram(None).tier == HealthTier.UNKNOWN


@pytest.mark.parametrize(
    "free, tier, score",
    [(45, HealthTier.GREEN, 95), (20, HealthTier.GREEN, 95), (15, HealthTier.YELLOW, 60), (10, HealthTier.YELLOW, 60), (5, HealthTier.RED, 20)],
)
def test_disk_tiers(free, tier, score):
    item = score_disk(make_disk(free))
    assert (item.tier, item.score) == (tier, score)


def test_unmeasured_system_volume_is_unknown():
    assert score_disk(None).tier == HealthTier.UNKNOWN


def test_network_is_binary():
    ok = score_network(ReachabilityResult("1.1.1.1:443", True, 8.0))
    down = score_network(ReachabilityResult("1.1.1.1:443", False, notes="Error (TimeoutError)"))
    assert (ok.tier, ok.score) == (HealthTier.GREEN, 95)
    assert (down.tier, down.score) == (HealthTier.RED, 15)
    assert "TimeoutError" in down.explanation


@pytest.mark.parametrize(
    "percent, tier, score",
    [(70, HealthTier.GREEN, 95), (69, HealthTier.YELLOW, 65), (40, HealthTier.YELLOW, 65), (39, HealthTier.RED, 25)],
)
def test_wireless_percent_tiers(percent, tier, score):
    item = score_wireless(WirelessRecord(is_available=True, ssid="HomeNet", signal_percent=percent, rssi_dbm=-90))
    assert (item.tier, item.score) == (tier, score)


@pytest.mark.parametrize(
    "dbm, tier, score",
    [(-60, HealthTier.GREEN, 95), (-67, HealthTier.GREEN, 95), (-75, HealthTier.YELLOW, 65), (-76, HealthTier.RED, 25)],
)
def test_wireless_dbm_fallback(dbm, tier, score):
    item = score_wireless(WirelessRecord(is_available=True, ssid="HomeNet", rssi_dbm=dbm))
    assert (item.tier, item.score) == (tier, score)


def test_wireless_unknown_cases():
    assert score_wireless(WirelessRecord(is_available=False)).tier == HealthTier.UNKNOWN
    assert score_wireless(WirelessRecord(is_available=True, ssid="HomeNet")).tier == HealthTier.UNKNOWN


@pytest.mark.parametrize(
    "condition, tier, score",
    [("Normal", HealthTier.GREEN, 95), ("normal", HealthTier.GREEN, 95), ("Service Recommended", HealthTier.YELLOW, 60), ("  ", HealthTier.UNKNOWN, 0), (None, HealthTier.UNKNOWN, 0)],
)
def test_battery_condition(condition, tier, score):
    item = score_battery(BatteryRecord(is_present=True, percentage=80, condition=condition))
    assert (item.tier, item.score) == (tier, score)


def test_absent_battery_is_unknown():
    assert score_battery(BatteryRecord(is_present=False)).tier == HealthTier.UNKNOWN


def test_aggregation_ignores_unknown_items():
    summary = score_health(make_snapshot(cpu_percent=50, ram_percent=96, reachable=True))
    assert [item.subject for item in summary.items] == ["CPU", "RAM", "Disk", "Network", "Wi-Fi", "Battery"]
    assert [item.tier for item in summary.items] == [
        HealthTier.GREEN,
        HealthTier.RED,
        HealthTier.UNKNOWN,
        HealthTier.GREEN,
        HealthTier.UNKNOWN,
        HealthTier.UNKNOWN,
    ]
    assert summary.overall_score == 72
    assert summary.overall_tier == HealthTier.YELLOW


def test_all_unknown_is_not_red():
    items = [HealthItem("CPU", HealthTier.UNKNOWN, 0, "n/a"), HealthItem("RAM", HealthTier.UNKNOWN, 0, "n/a")]
    summary = summarize(items)
    assert summary.overall_score == 0
    assert summary.overall_tier == HealthTier.UNKNOWN


def test_overall_rounds_half_up():
    items = [HealthItem("A", HealthTier.GREEN, 95, ""), HealthItem("B", HealthTier.YELLOW, 60, "")]
    assert summarize(items).overall_score == 78


def test_healthy_machine_is_green():
    summary = score_health(
        make_snapshot(
            cpu_percent=12,
            ram_percent=40,
            system_disk=make_disk(50),
            wireless=WirelessRecord(is_available=True, ssid="HomeNet", signal_percent=90),
            battery=BatteryRecord(is_present=True, condition="Normal"),
        )
    )
    assert summary.overall_score == 95
    assert summary.overall_tier == HealthTier.GREEN


def test_unreachable_network_drags_score_down():
    summary = score_health(make_snapshot(cpu_percent=95, ram_percent=95, reachable=False))
    assert summary.overall_score == 25
    assert summary.overall_tier == HealthTier.RED


def test_custom_policy_thresholds():
    policy = HealthPolicy(cpu=Band(green=50, yellow=60, scores=(100, 50, 0)))
    assert score_cpu(55, policy).score == 50
    assert classify(-70, Band(green=-60, yellow=-80, scores=(3, 2, 1), higher_is_better=True)) == (HealthTier.YELLOW, 2)
