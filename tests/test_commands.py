import subprocess
from types import SimpleNamespace

import pytest

from pc_diagnose import commands
from pc_diagnose.commands import CommandError, run_command


def _fake_run(stdout, stderr):
    def run(argv, **kwargs):
        return SimpleNamespace(args=argv, stdout=stdout, stderr=stderr, returncode=0)

    return run


def test_stdout_preferred(monkeypatch):
    monkeypatch.setattr(commands.subprocess, "run", _fake_run("out\n", "err\n"))
    assert run_command("pmset", ["-g", "batt"]) == "out\n"


def test_stderr_when_stdout_blank(monkeypatch):
    monkeypatch.setattr(commands.subprocess, "run", _fake_run("  \n", "usage: sudo wdutil\n"))
    assert run_command("wdutil", ["info"]) == "usage: sudo wdutil\n"


def test_no_output_at_all(monkeypatch):
    monkeypatch.setattr(commands.subprocess, "run", _fake_run("", None))
    assert run_command("true") == ""


def test_missing_program_raises_command_error(monkeypatch):
    def missing(argv, **kwargs):
        raise FileNotFoundError(2, "No such file or directory", argv[0])

    monkeypatch.setattr(commands.subprocess, "run", missing)
    with pytest.raises(CommandError) as excinfo:
        run_command("airport", ["-I"])
    assert excinfo.value.program == "airport"
    assert excinfo.value.reason == "FileNotFoundError"


def test_argv_is_passed_without_shell(monkeypatch):
    seen = {}

    def run(argv, **kwargs):
        seen["argv"] = argv
        seen.update(kwargs)
        return subprocess.CompletedProcess(argv, 0, "ok", "")

    monkeypatch.setattr(commands.subprocess, "run", run)
    run_command("netsh", ["wlan", "show", "interfaces"])
    assert seen["argv"] == ["netsh", "wlan", "show", "interfaces"]
    assert "shell" not in seen
