from types import SimpleNamespace

import pytest

from pc_diagnose import performance
from pc_diagnose.performance import (
    LoadSample,
    parse_top_cpu_percent,
    parse_vm_stat_used_bytes,
    sample_load,
)
from pc_diagnose.platforms import Platform

TOP_OUTPUT = """\
Processes: 612 total, 3 running, 609 sleeping, 3120 threads
Load Avg: 2.10, 2.31, 2.40
CPU usage: 18.21% user, 12.73% sys, 69.4% idle
SharedLibs: 512M resident, 96M data, 48M linkedit.
Processes: 612 total, 2 running, 610 sleeping, 3118 threads
Load Avg: 2.10, 2.31, 2.40
CPU usage: 7.50% user, 5.00% sys, 87.50% idle
"""

VM_STAT_OUTPUT = """\
Mach Virtual Memory Statistics: (page size of 16384 bytes)
Pages free:                               10000.
Pages active:                            100000.
Pages inactive:                           50000.
Pages speculative:                         2000.
Pages wired down:                         40000.
Pages purgeable:                           1000.
Pages occupied by compressor:             10000.
"""

GIB = 1024**3


def test_top_uses_last_sample():
    assert parse_top_cpu_percent(TOP_OUTPUT) == pytest.approx(12.5)


def test_top_without_cpu_line():
    assert parse_top_cpu_percent("Processes: 1 total") is None


def test_vm_stat_used_bytes():
    used = parse_vm_stat_used_bytes(VM_STAT_OUTPUT)
    assert used == (100000 + 50000 + 40000 + 10000) * 16384


def test_vm_stat_default_page_size():
    assert parse_vm_stat_used_bytes("Pages active: 10.\nPages wired down: 5.\n") == 15 * 4096


def test_vm_stat_unrecognised_output():
    assert parse_vm_stat_used_bytes("vm_stat: command not found") is None


def test_mac_load_sample(fake_runner):
    runner = fake_runner({"top": TOP_OUTPUT, "vm_stat": VM_STAT_OUTPUT})
    sample = sample_load(runner, Platform.MACOS, total_memory=lambda: 8 * GIB)
    assert sample.cpu_percent == pytest.approx(12.5)
    assert sample.ram_percent == pytest.approx(200000 * 16384 / (8 * GIB) * 100)
    assert ("top", ("-l", "2", "-n", "0", "-s", "1")) in runner.calls


def test_mac_load_keeps_cpu_when_vm_stat_fails(fake_runner):
    runner = fake_runner({"top": TOP_OUTPUT})
    sample = sample_load(runner, Platform.MACOS, total_memory=lambda: 8 * GIB)
    assert sample == LoadSample(cpu_percent=pytest.approx(12.5), ram_percent=None)


def test_mac_load_with_failing_runner(broken_runner):
    assert sample_load(broken_runner, Platform.MACOS, total_memory=lambda: GIB) == LoadSample()


def test_other_platforms_use_psutil(monkeypatch, broken_runner):
    intervals = []

    def fake_cpu_percent(interval=None):
        intervals.append(interval)
        return 42.0

    monkeypatch.setattr(performance.psutil, "cpu_percent", fake_cpu_percent)
    monkeypatch.setattr(performance.psutil, "virtual_memory", lambda: SimpleNamespace(percent=63.5, total=GIB))
    sample = sample_load(broken_runner, Platform.WINDOWS)
    assert sample == LoadSample(cpu_percent=42.0, ram_percent=63.5)
    assert intervals == [performance.SAMPLE_WINDOW_SECONDS]


def test_psutil_failure_is_contained(monkeypatch, broken_runner):
    def boom(interval=None):
        raise RuntimeError("no /proc")

    monkeypatch.setattr(performance.psutil, "cpu_percent", boom)
    assert sample_load(broken_runner, Platform.UNSUPPORTED) == LoadSample()
