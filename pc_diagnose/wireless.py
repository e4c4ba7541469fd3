"""Read the current Wi-Fi link: SSID, signal, noise, rate and security.

macOS ships several tools that report this, each in its own text shape:

* ``airport -I``: a flat ``key: value`` dump of the radio (removed from
  recent macOS releases, so the binary may be missing).
* ``networksetup``: finds the Wi-Fi device among the hardware ports and asks
  for the joined network name. No signal figures, but no root needed.
* ``wdutil info``: a multi-section diagnostic dump with a ``WIFI`` section.
  Prints a usage banner asking for ``sudo`` when run unprivileged.

Windows reports everything through ``netsh wlan show interfaces``.

Signal quality is normalised to a percentage. When only an RSSI in dBm is
known, ``percent = clamp((dBm + 100) * 2, 0, 100)``: a fixed linear
heuristic treating -100 dBm as 0% and -50 dBm as 100%, not a calibrated
curve.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Optional

from .commands import CommandRunner, run_command
from .platforms import Platform, dispatch
from .textparse import extract_section, parse_float, parse_int, value_for_key

logger = logging.getLogger(__name__)

AIRPORT_PATH = "/System/Library/PrivateFrameworks/Apple80211.framework/Versions/Current/Resources/airport"

MAC_SOURCES = ("auto", "airport", "networksetup", "wdutil")

# Lines scanned after a "Hardware Port:" line when looking for its "Device:".
HARDWARE_PORT_LOOKAHEAD = 5

_WIFI_PORT_LABELS = ("wi-fi", "airport")
_NOT_CONNECTED = "none"


@dataclass(frozen=True)
class WirelessRecord:
    is_available: bool
    interface_name: Optional[str] = None
    ssid: Optional[str] = None
    signal_percent: Optional[int] = None
    rssi_dbm: Optional[int] = None
    noise_dbm: Optional[int] = None
    tx_rate_mbps: Optional[float] = None
    channel: Optional[str] = None
    phy_mode: Optional[str] = None
    security: Optional[str] = None
    source: str = "unknown"
    notes: str = ""


def rssi_to_percent(rssi_dbm: int) -> int:
    return max(0, min(100, (rssi_dbm + 100) * 2))


def collect_wireless(
    runner: CommandRunner = run_command,
    platform: Optional[Platform] = None,
    source: str = "auto",
) -> WirelessRecord:
    """Return the active Wi-Fi link; never raises.

    ``source`` picks the macOS tool (see :data:`MAC_SOURCES`) and is ignored elsewhere.
    """
    try:
        return dispatch(
            {
                Platform.MACOS: lambda: _mac_wireless(runner, source),
                Platform.WINDOWS: lambda: _windows_wireless(runner),
            },
            platform,
            lambda: WirelessRecord(is_available=False, notes="Wi-Fi info not available on this platform."),
        )
    except Exception as exc:
        logger.debug("wireless probe failed", exc_info=True)
        return WirelessRecord(is_available=False, notes=f"Wi-Fi query error: {exc.__class__.__name__}")


def select_mac_source(source: str = "auto") -> str:
    if source != "auto":
        if source not in MAC_SOURCES:
            raise ValueError(f"unknown Wi-Fi source: {source}")
        return source
    if os.path.exists(AIRPORT_PATH):
        return "airport"
    if hasattr(os, "geteuid") and os.geteuid() == 0:
        return "wdutil"
    return "networksetup"


def _mac_wireless(runner: CommandRunner, source: str) -> WirelessRecord:
    chosen = select_mac_source(source)
    parsers = {
        "airport": _airport_wireless,
        "networksetup": _networksetup_wireless,
        "wdutil": _wdutil_wireless,
    }
    try:
        return parsers[chosen](runner)
    except Exception as exc:
        logger.debug("%s Wi-Fi parsing failed", chosen, exc_info=True)
        return WirelessRecord(
            is_available=False,
            source=f"macOS:{chosen}",
            notes=f"macOS Wi-Fi query error: {exc.__class__.__name__}",
        )


def resolve_ssid(value: Optional[str]) -> Optional[str]:
    """Return the SSID, or ``None`` when blank or the tool's "not connected" placeholder."""
    if value is None:
        return None
    ssid = value.strip()
    if not ssid or ssid.strip("<>").lower() == _NOT_CONNECTED:
        return None
    return ssid


def _build_record(
    *,
    source: str,
    ssid: Optional[str],
    signal_percent: Optional[int] = None,
    rssi_dbm: Optional[int] = None,
    **fields,
) -> WirelessRecord:
    resolved = resolve_ssid(ssid)
    if signal_percent is None and rssi_dbm is not None:
        signal_percent = rssi_to_percent(rssi_dbm)
    elif signal_percent is not None:
        signal_percent = max(0, min(100, signal_percent))
    return WirelessRecord(
        is_available=resolved is not None,
        ssid=resolved,
        signal_percent=signal_percent,
        rssi_dbm=rssi_dbm,
        source=source,
        notes="" if resolved else "Not connected to a Wi-Fi network.",
        **fields,
    )


def _airport_wireless(runner: CommandRunner) -> WirelessRecord:
    output = runner(AIRPORT_PATH, ["-I"])
    return parse_airport(output)


def parse_airport(output: str) -> WirelessRecord:
    return _build_record(
        source="macOS:airport -I",
        ssid=value_for_key(output, "SSID"),
        rssi_dbm=parse_int(value_for_key(output, "agrCtlRSSI")),
        noise_dbm=parse_int(value_for_key(output, "agrCtlNoise")),
        tx_rate_mbps=parse_float(value_for_key(output, "lastTxRate")),
        channel=value_for_key(output, "channel") or None,
        security=value_for_key(output, "link auth") or None,
    )


def find_wifi_device(hardware_ports: str) -> Optional[str]:
    """Return the BSD device behind the Wi-Fi (or legacy AirPort) hardware port."""
    lines = [line.strip() for line in hardware_ports.splitlines()]
    for index, line in enumerate(lines):
        if not line.lower().startswith("hardware port:"):
            continue
        port = line.split(":", 1)[1].strip().lower()
        if port not in _WIFI_PORT_LABELS:
            continue
        for candidate in lines[index + 1 : index + 1 + HARDWARE_PORT_LOOKAHEAD]:
            if candidate.lower().startswith("hardware port:"):
                break
            if candidate.lower().startswith("device:"):
                return candidate.split(":", 1)[1].strip() or None
    return None


def parse_current_network(output: str) -> Optional[str]:
    # "Current Wi-Fi Network: HomeNet" or "You are not associated with an AirPort network."
    for line in output.splitlines():
        if "network:" in line.lower():
            return line.split(":", 1)[1].strip() or None
    return None


def _networksetup_wireless(runner: CommandRunner) -> WirelessRecord:
    source = "macOS:networksetup"
    device = find_wifi_device(runner("networksetup", ["-listallhardwareports"]))
    if device is None:
        return WirelessRecord(is_available=False, source=source, notes="No Wi-Fi hardware port found.")
    ssid = parse_current_network(runner("networksetup", ["-getairportnetwork", device]))
    return _build_record(source=source, ssid=ssid, interface_name=device)


def needs_privilege(output: str) -> bool:
    lowered = output.lower()
    return "usage:" in lowered and "sudo" in lowered


def _wdutil_wireless(runner: CommandRunner) -> WirelessRecord:
    return parse_wdutil(runner("wdutil", ["info"]))


def parse_wdutil(output: str) -> WirelessRecord:
    source = "macOS:wdutil info"
    if needs_privilege(output):
        return WirelessRecord(
            is_available=False,
            source=source,
            notes="wdutil requires elevated privileges; run with sudo to read Wi-Fi details.",
        )
    section = extract_section(output, "WIFI")
    return _build_record(
        source=source,
        ssid=value_for_key(section, "SSID"),
        rssi_dbm=parse_int(value_for_key(section, "RSSI")),
        interface_name=value_for_key(section, "Interface Name") or None,
        noise_dbm=parse_int(value_for_key(section, "Noise")),
        tx_rate_mbps=parse_float(value_for_key(section, "Tx Rate")),
        channel=value_for_key(section, "Channel") or None,
        phy_mode=value_for_key(section, "PHY Mode") or None,
        security=value_for_key(section, "Security") or None,
    )


def _windows_wireless(runner: CommandRunner) -> WirelessRecord:
    source = "Windows:netsh wlan show interfaces"
    try:
        return parse_netsh(runner("netsh", ["wlan", "show", "interfaces"]))
    except Exception as exc:
        logger.debug("netsh parsing failed", exc_info=True)
        return WirelessRecord(
            is_available=False,
            source=source,
            notes=f"Windows Wi-Fi query error: {exc.__class__.__name__}",
        )


def parse_netsh(output: str) -> WirelessRecord:
    source = "Windows:netsh wlan show interfaces"
    lowered = output.lower()
    if "no wireless interface" in lowered:
        return WirelessRecord(is_available=False, source=source, notes="No wireless interface found.")
    if "wlansvc" in lowered and "not running" in lowered:
        return WirelessRecord(
            is_available=False,
            source=source,
            notes="The WLAN AutoConfig service (wlansvc) is not running.",
        )
    return _build_record(
        source=source,
        ssid=value_for_key(output, "SSID"),
        signal_percent=parse_int(value_for_key(output, "Signal")),
        interface_name=value_for_key(output, "Name") or None,
        tx_rate_mbps=parse_float(value_for_key(output, "Transmit rate (Mbps)")),
        channel=value_for_key(output, "Channel") or None,
        phy_mode=value_for_key(output, "Radio type") or None,
        security=value_for_key(output, "Authentication") or None,
    )
