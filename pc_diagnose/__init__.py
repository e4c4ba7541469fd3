"""
Host diagnostic tool that probes battery, storage, Wi-Fi and load and scores overall machine health.
"""

__all__ = [
    "battery",
    "cli",
    "diagnostics",
    "network",
    "performance",
    "storage",
    "system_state",
    "wireless",
]
__version__ = "0.1.0"
