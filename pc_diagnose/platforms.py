"""Decide which operating-system strategy a collector should run."""

from __future__ import annotations

import platform as _platform
from enum import Enum
from typing import Callable, Mapping, Optional, TypeVar

T = TypeVar("T")


class Platform(str, Enum):
    MACOS = "macos"
    WINDOWS = "windows"
    UNSUPPORTED = "unsupported"


def detect_platform(system: Optional[str] = None) -> Platform:
    name = (system if system is not None else _platform.system()).lower()
    if name == "darwin":
        return Platform.MACOS
    if name == "windows":
        return Platform.WINDOWS
    return Platform.UNSUPPORTED


def dispatch(
    strategies: Mapping[Platform, Callable[[], T]],
    platform: Optional[Platform],
    fallback: Callable[[], T],
) -> T:
    """Run the strategy registered for ``platform`` (detected when ``None``), or ``fallback``."""
    resolved = platform if platform is not None else detect_platform()
    return strategies.get(resolved, fallback)()
