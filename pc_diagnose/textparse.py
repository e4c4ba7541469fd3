"""Small, forgiving helpers for picking values out of diagnostic tool output.

Nothing in here raises on a missing match: lookups return ``None`` and
section extraction hands back its input when the section is absent.
"""

from __future__ import annotations

import re
from typing import List, Optional

_DIVIDER = re.compile(r"^[-–—─━═]{10,}$")


def first_line_containing(text: str, label: str) -> Optional[str]:
    """Return the first trimmed line that starts with ``label``, else the first that contains it."""
    needle = label.lower()
    lines = [line.strip() for line in text.splitlines()]
    for line in lines:
        if line.lower().startswith(needle):
            return line
    for line in lines:
        if needle in line.lower():
            return line
    return None


def value_after_colon(line: Optional[str]) -> Optional[str]:
    if line is None or ":" not in line:
        return None
    return line.split(":", 1)[1].strip()


def value_for_label(text: str, label: str) -> Optional[str]:
    """Shortcut for ``value_after_colon(first_line_containing(text, label))``."""
    return value_after_colon(first_line_containing(text, label))


def value_for_key(text: str, key: str) -> Optional[str]:
    """Return the value of the first ``key: value`` line whose key equals ``key`` (case-insensitive)."""
    wanted = key.strip().lower()
    for line in text.splitlines():
        name, sep, value = line.partition(":")
        if sep and name.strip().lower() == wanted:
            return value.strip()
    return None


def digits_only(token: str) -> str:
    return "".join(ch for ch in token if ch.isdigit() or ch == "-")


def decimal_only(token: str) -> str:
    return "".join(ch for ch in token if ch.isdigit() or ch == ".")


def parse_int(token: Optional[str]) -> Optional[int]:
    if token is None:
        return None
    try:
        return int(digits_only(token))
    except ValueError:
        return None


def parse_float(token: Optional[str]) -> Optional[float]:
    if token is None:
        return None
    cleaned = decimal_only(token)
    if token.strip().startswith("-"):
        cleaned = "-" + cleaned
    try:
        return float(cleaned)
    except ValueError:
        return None


def is_divider(line: str) -> bool:
    return bool(_DIVIDER.match(line.strip()))


def extract_section(text: str, section_title: str) -> str:
    """Return the block titled ``section_title`` up to the next divider line.

    Dividers directly below the title (its underline) are skipped. When the
    title does not occur the whole input is returned unchanged.
    """
    lines = text.splitlines()
    wanted = section_title.strip().lower()
    start = next((i for i, line in enumerate(lines) if line.strip().lower() == wanted), None)
    if start is None:
        return text

    section: List[str] = [lines[start]]
    index = start + 1
    while index < len(lines) and is_divider(lines[index]):
        index += 1
    for line in lines[index:]:
        if is_divider(line):
            break
        section.append(line)
    return "\n".join(section)
