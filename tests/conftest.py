from typing import Dict, List, Sequence, Tuple, Union

import pytest

from pc_diagnose.commands import CommandError

Response = Union[str, Exception]


class FakeRunner:
    """Stands in for ``run_command`` and replays canned output.

    A response key matches when it equals the full command line, or occurs in
    it (longest key wins), so ``"Win32_Battery"`` picks out one PowerShell query.
    """

    def __init__(self, responses: Dict[str, Response]):
        self.responses = responses
        self.calls: List[Tuple[str, Tuple[str, ...]]] = []

    def __call__(self, program: str, args: Sequence[str] = ()) -> str:
        self.calls.append((program, tuple(args)))
        key = f"{program} {' '.join(args)}".strip()
        matches = sorted((k for k in self.responses if k == key or k in key), key=len, reverse=True)
        if not matches:
            raise CommandError(program, "FileNotFoundError")
        response = self.responses[matches[0]]
        if isinstance(response, Exception):
            raise response
        return response

    def programs(self) -> List[str]:
        return [program for program, _ in self.calls]


@pytest.fixture
def fake_runner():
    return FakeRunner


def failing_runner(program: str, args: Sequence[str] = ()) -> str:
    raise CommandError(program, "FileNotFoundError")


@pytest.fixture
def broken_runner():
    return failing_runner
