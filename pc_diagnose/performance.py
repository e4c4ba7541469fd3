"""Sample CPU and RAM utilisation over a one second window."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Callable, Optional

import psutil

from .commands import CommandRunner, run_command
from .platforms import Platform, dispatch
from .textparse import first_line_containing, parse_int, value_after_colon

logger = logging.getLogger(__name__)

SAMPLE_WINDOW_SECONDS = 1.0

_DEFAULT_PAGE_SIZE = 4096
_IDLE = re.compile(r"([\d.]+)%\s*idle")
_PAGE_SIZE = re.compile(r"page size of (\d+) bytes")
_USED_PAGE_LABELS = (
    "Pages active",
    "Pages inactive",
    "Pages wired down",
    "Pages occupied by compressor",
)


@dataclass(frozen=True)
class LoadSample:
    cpu_percent: Optional[float] = None
    ram_percent: Optional[float] = None


def sample_load(
    runner: CommandRunner = run_command,
    platform: Optional[Platform] = None,
    total_memory: Optional[Callable[[], int]] = None,
) -> LoadSample:
    """Measure CPU and RAM utilisation; blocks for :data:`SAMPLE_WINDOW_SECONDS`. Never raises."""
    memory_total = total_memory or (lambda: psutil.virtual_memory().total)
    try:
        return dispatch(
            {Platform.MACOS: lambda: _mac_load(runner, memory_total)},
            platform,
            _psutil_load,
        )
    except Exception:
        logger.debug("load sampling failed", exc_info=True)
        return LoadSample()


def _mac_load(runner: CommandRunner, total_memory: Callable[[], int]) -> LoadSample:
    # Two samples one second apart; only the second reflects the interval.
    top = runner("top", ["-l", "2", "-n", "0", "-s", str(int(SAMPLE_WINDOW_SECONDS))])
    cpu = parse_top_cpu_percent(top)

    try:
        total = total_memory()
        used = parse_vm_stat_used_bytes(runner("vm_stat", []))
    except Exception:
        logger.debug("vm_stat sampling failed", exc_info=True)
        return LoadSample(cpu_percent=cpu)
    if not total or used is None:
        return LoadSample(cpu_percent=cpu)
    return LoadSample(cpu_percent=cpu, ram_percent=min(100.0, used / total * 100.0))


def parse_top_cpu_percent(text: str) -> Optional[float]:
    """Return ``100 - idle`` from the last ``CPU usage:`` line of ``top -l`` output."""
    lines = [line for line in text.splitlines() if "CPU usage:" in line]
    if not lines:
        return None
    match = _IDLE.search(lines[-1])
    if not match:
        return None
    try:
        idle = float(match.group(1))
    except ValueError:
        return None
    return max(0.0, 100.0 - idle)


def parse_vm_stat_used_bytes(text: str) -> Optional[int]:
    """Active + inactive + wired + compressed pages, in bytes."""
    if "Pages" not in text:
        return None
    match = _PAGE_SIZE.search(text)
    page_size = int(match.group(1)) if match else _DEFAULT_PAGE_SIZE
    pages = 0
    for label in _USED_PAGE_LABELS:
        count = parse_int(value_after_colon(first_line_containing(text, label + ":")))
        pages += count or 0
    return pages * page_size


def _psutil_load() -> LoadSample:
    cpu = psutil.cpu_percent(interval=SAMPLE_WINDOW_SECONDS)
    memory = psutil.virtual_memory()
    return LoadSample(cpu_percent=cpu, ram_percent=memory.percent)
