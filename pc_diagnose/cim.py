"""Query Windows CIM classes through PowerShell and read the rows back as JSON."""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional, Sequence

from .commands import CommandRunner

logger = logging.getLogger(__name__)

POWERSHELL = "powershell"


class CimQueryError(ValueError):
    """PowerShell answered with something other than JSON rows (usually an error message)."""


def build_query(class_name: str, properties: Sequence[str], namespace: Optional[str] = None) -> str:
    script = f"Get-CimInstance -ClassName {class_name}"
    if namespace:
        script += f" -Namespace {namespace}"
    script += f" | Select-Object {', '.join(properties)} | ConvertTo-Json -Compress"
    return script


def query_cim(
    runner: CommandRunner,
    class_name: str,
    properties: Sequence[str],
    namespace: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """Return one dict per instance of ``class_name``; an empty list when there are none."""
    script = build_query(class_name, properties, namespace)
    output = runner(POWERSHELL, ["-NoProfile", "-NonInteractive", "-Command", script])
    rows = parse_rows(output)
    logger.debug("%s returned %d row(s)", class_name, len(rows))
    return rows


def parse_rows(output: str) -> List[Dict[str, Any]]:
    text = output.strip()
    if not text:
        return []
    if text[0] not in "[{":
        raise CimQueryError(text.splitlines()[0])
    data = json.loads(text)
    # ConvertTo-Json collapses a single instance to a bare object.
    if isinstance(data, dict):
        return [data]
    if isinstance(data, list):
        return [row for row in data if isinstance(row, dict)]
    raise CimQueryError(f"unexpected JSON payload: {type(data).__name__}")


def as_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def as_int(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None
