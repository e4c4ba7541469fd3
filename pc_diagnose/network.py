"""Summarise active network adapters and test outbound reachability."""

from __future__ import annotations

import ipaddress
import logging
import socket
import time
from dataclasses import dataclass
from typing import List, Optional, Tuple

import psutil

logger = logging.getLogger(__name__)

DEFAULT_PROBE_HOST = "1.1.1.1"
DEFAULT_PROBE_PORT = 443
DEFAULT_PROBE_TIMEOUT = 1.5

_LINK_FAMILIES = tuple(
    family for family in (getattr(psutil, "AF_LINK", None), getattr(socket, "AF_PACKET", None)) if family is not None
)


@dataclass(frozen=True)
class NetworkAdapter:
    name: str
    ipv4: Tuple[str, ...] = ()
    ipv6: Tuple[str, ...] = ()
    mac: Optional[str] = None
    speed_mbps: Optional[int] = None


@dataclass(frozen=True)
class ReachabilityResult:
    target: str
    reachable: bool
    latency_ms: Optional[float] = None
    notes: str = ""


@dataclass(frozen=True)
class NetworkRecord:
    host_name: str
    adapters: Tuple[NetworkAdapter, ...]
    reachability: ReachabilityResult


def collect_network(
    probe_host: str = DEFAULT_PROBE_HOST,
    probe_port: int = DEFAULT_PROBE_PORT,
    probe_timeout: float = DEFAULT_PROBE_TIMEOUT,
) -> NetworkRecord:
    try:
        adapters = tuple(active_adapters())
    except (OSError, psutil.Error):
        logger.debug("adapter enumeration failed", exc_info=True)
        adapters = ()
    return NetworkRecord(
        host_name=socket.gethostname(),
        adapters=adapters,
        reachability=probe_reachability(probe_host, probe_port, probe_timeout),
    )


def probe_reachability(
    host: str = DEFAULT_PROBE_HOST,
    port: int = DEFAULT_PROBE_PORT,
    timeout: float = DEFAULT_PROBE_TIMEOUT,
) -> ReachabilityResult:
    """Open a TCP connection to ``host:port``; failures are reported, not raised."""
    target = f"{host}:{port}"
    started = time.perf_counter()
    # Malformed host names fail IDNA encoding with a UnicodeError (a ValueError).
    try:
        with socket.create_connection((host, port), timeout=timeout):
            pass
    except (OSError, ValueError, OverflowError) as exc:
        logger.debug("reachability probe to %s failed: %s", target, exc)
        return ReachabilityResult(target=target, reachable=False, notes=f"Error ({exc.__class__.__name__})")
    latency = (time.perf_counter() - started) * 1000
    return ReachabilityResult(target=target, reachable=True, latency_ms=round(latency, 1))


def active_adapters() -> List[NetworkAdapter]:
    """Adapters that are up and carry at least one routable (non-loopback, non-link-local) address."""
    stats = psutil.net_if_stats()
    adapters: List[NetworkAdapter] = []
    for name, addresses in psutil.net_if_addrs().items():
        stat = stats.get(name)
        if stat is None or not stat.isup:
            continue
        ipv4: List[str] = []
        ipv6: List[str] = []
        mac: Optional[str] = None
        for address in addresses:
            if address.family == socket.AF_INET and _is_routable(address.address):
                ipv4.append(address.address)
            elif address.family == socket.AF_INET6 and _is_routable(address.address):
                ipv6.append(address.address)
            elif address.family in _LINK_FAMILIES:
                mac = address.address or None
        if not ipv4 and not ipv6:
            continue
        adapters.append(
            NetworkAdapter(
                name=name,
                ipv4=tuple(ipv4),
                ipv6=tuple(ipv6),
                mac=mac,
                speed_mbps=stat.speed or None,
            )
        )
    return adapters


def _is_routable(address: str) -> bool:
    try:
        ip = ipaddress.ip_address(address.split("%", 1)[0])
    except ValueError:
        return False
    return not (ip.is_loopback or ip.is_link_local)
