import pytest

from pc_diagnose.cim import CimQueryError, as_int, as_text, build_query, parse_rows, query_cim


def test_build_query_with_namespace():
    script = build_query("MSFT_PhysicalDisk", ["FriendlyName", "Size"], namespace="root/Microsoft/Windows/Storage")
    assert script == (
        "Get-CimInstance -ClassName MSFT_PhysicalDisk -Namespace root/Microsoft/Windows/Storage"
        " | Select-Object FriendlyName, Size | ConvertTo-Json -Compress"
    )


def test_single_instance_becomes_one_row():
    assert parse_rows('{"Model":"X"}') == [{"Model": "X"}]


def test_array_rows_and_blank_output():
    assert parse_rows('[{"A":1},{"A":2}]') == [{"A": 1}, {"A": 2}]
    assert parse_rows("  \r\n") == []


def test_error_text_is_rejected():
    with pytest.raises(CimQueryError):
        parse_rows("Get-CimInstance : Invalid class\r\nAt line:1 char:1")


def test_query_runs_powershell(fake_runner):
    runner = fake_runner({"Win32_Battery": '{"BatteryStatus":2}'})
    assert query_cim(runner, "Win32_Battery", ["BatteryStatus"]) == [{"BatteryStatus": 2}]
    program, args = runner.calls[0]
    assert program == "powershell"
    assert args[:3] == ("-NoProfile", "-NonInteractive", "-Command")


def test_value_coercion():
    assert as_int("42") == 42
    assert as_int(None) is None
    assert as_int("n/a") is None
    assert as_int(True) is None
    assert as_text("  ") is None
    assert as_text(7) == "7"
