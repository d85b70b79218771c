# tests/test_runner.py
from __future__ import annotations

import re
from pathlib import Path

import pytest

from sshfan.runner import build_parser, main


@pytest.fixture()
def settings(tmp_path: Path, fake_ssh) -> Path:
    """Settings file pointing remote_shell at the fake ssh script."""
    p = tmp_path / "sshfan.yaml"
    shell = ", ".join(f'"{part}"' for part in fake_ssh)
    p.write_text(f"remote_shell: [{shell}]\n", encoding="utf-8")
    return p


def test_parser_uses_dash_h_for_host_file() -> None:
    args = build_parser().parse_args(["-h", "hosts.txt", "-i", "uptime", "-u", "deploy"])

    assert args.host_file == Path("hosts.txt")
    assert args.command == "uptime"
    assert args.user == "deploy"


def test_prints_one_block_per_host(settings: Path, capsys) -> None:
    code = main(["--config", str(settings), "-H", "a b c", "-i", "fail-on:c", "--no-color"])

    out = capsys.readouterr().out
    headers = re.findall(r"^\[(\d)\] \d\d:\d\d:\d\d \[(\w+)\] (\w)", out, re.MULTILINE)
    assert sorted(headers) == [("0", "SUCCESS", "a"), ("1", "SUCCESS", "b"), ("2", "FAILURE", "c")]
    assert "exit status 1" in out
    # Per-host failures don't change the exit code
    assert code == 0


def test_host_file(settings: Path, tmp_path: Path, capsys) -> None:
    hosts = tmp_path / "hosts"
    hosts.write_text("web1\nweb2\n", encoding="utf-8")

    code = main(["--config", str(settings), "-h", str(hosts), "-i", "uptime"])

    out = capsys.readouterr().out
    assert code == 0
    assert "Stdout: web1 ran uptime" in out
    assert "Stdout: web2 ran uptime" in out


def test_missing_command(capsys) -> None:
    code = main(["-H", "a"])

    assert code == 1
    assert "command" in capsys.readouterr().err


def test_missing_hosts(capsys) -> None:
    code = main(["-i", "uptime"])

    assert code == 1
    assert "Error:" in capsys.readouterr().err


def test_empty_host_file(tmp_path: Path, capsys) -> None:
    hosts = tmp_path / "hosts"
    hosts.write_text("\n", encoding="utf-8")

    code = main(["-h", str(hosts), "-i", "uptime"])

    assert code == 1
    assert "empty" in capsys.readouterr().err
