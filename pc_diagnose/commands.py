"""Run platform diagnostic utilities and capture their text output."""

from __future__ import annotations

import logging
import subprocess
from typing import Callable, Sequence

logger = logging.getLogger(__name__)

CommandRunner = Callable[[str, Sequence[str]], str]


class CommandError(RuntimeError):
    """Raised when an external program could not be started at all."""

    def __init__(self, program: str, reason: str) -> None:
        super().__init__(f"{program}: {reason}")
        self.program = program
        self.reason = reason


def run_command(program: str, args: Sequence[str] = ()) -> str:
    """Run ``program`` synchronously and return stdout, or stderr when stdout is blank.

    A program that runs but prints nothing yields an empty string; a program
    that cannot be started raises :class:`CommandError`.
    """
    logger.debug("running %s %s", program, " ".join(args))
    try:
        completed = subprocess.run(
            [program, *args],
            capture_output=True,
            text=True,
            errors="replace",
            check=False,
        )
    except OSError as exc:
        raise CommandError(program, exc.__class__.__name__) from exc

    if completed.stdout and completed.stdout.strip():
        return completed.stdout
    return completed.stderr or ""
