"""Tunable thresholds and probe settings.

The tier cut-offs are rules of thumb rather than calibrated values, so they
live here instead of being buried in the scoring code.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from .network import DEFAULT_PROBE_HOST, DEFAULT_PROBE_PORT, DEFAULT_PROBE_TIMEOUT


@dataclass(frozen=True)
class Band:
    """Two cut-offs splitting a measurement into green / yellow / red, with the score for each tier.

    With ``higher_is_better`` a value must reach ``green`` (or ``yellow``);
    otherwise it must stay below it.
    """

    green: float
    yellow: float
    scores: Tuple[int, int, int]
    higher_is_better: bool = False


@dataclass(frozen=True)
class HealthPolicy:
    cpu: Band = Band(green=70, yellow=90, scores=(95, 70, 35))
    ram: Band = Band(green=75, yellow=90, scores=(95, 65, 25))
    disk_free: Band = Band(green=20, yellow=10, scores=(95, 60, 20), higher_is_better=True)
    wifi_percent: Band = Band(green=70, yellow=40, scores=(95, 65, 25), higher_is_better=True)
    wifi_dbm: Band = Band(green=-67, yellow=-75, scores=(95, 65, 25), higher_is_better=True)
    reachable_score: int = 95
    unreachable_score: int = 15
    battery_normal_score: int = 95
    battery_degraded_score: int = 60
    overall_green: int = 80
    overall_yellow: int = 55


@dataclass(frozen=True)
class ProbeSettings:
    probe_host: str = DEFAULT_PROBE_HOST
    probe_port: int = DEFAULT_PROBE_PORT
    probe_timeout: float = DEFAULT_PROBE_TIMEOUT
    wifi_source: str = "auto"


DEFAULT_POLICY = HealthPolicy()
