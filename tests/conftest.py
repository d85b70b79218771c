"""Shared test fixtures."""

from __future__ import annotations

import sys
import textwrap
from pathlib import Path

import pytest

# Stands in for the ssh client: ``fake_ssh HOST [ARGS...] COMMAND``.
# Behavior is chosen by host name, or by a ``fail-on:HOST,...`` command.
FAKE_SSH = textwrap.dedent(
    """
    import sys
    import time

    host = sys.argv[1]
    args = sys.argv[2:]
    command = args[-1] if args else ""
    payload = bytes(range(256)) * 4096

    if command.startswith("fail-on:") and host in command[8:].split(","):
        sys.stderr.write(host + ": boom\\n")
        sys.exit(1)

    if host.startswith("exit-"):
        sys.exit(int(host[5:]))
    elif host == "bigerr":
        sys.stderr.buffer.write(payload)
    elif host == "bigout":
        sys.stdout.buffer.write(payload)
    elif host == "args":
        sys.stdout.write("\\n".join(args) + "\\n")
    elif host.startswith("slow-"):
        time.sleep(float(host[5:]))
        for i in range(5):
            print(host + " line " + str(i), flush=True)
    else:
        print(host + " ran " + command)
    """
)

PAYLOAD = bytes(range(256)) * 4096


@pytest.fixture()
def fake_ssh(tmp_path: Path) -> tuple[str, ...]:
    """remote_shell prefix that runs the fake ssh script."""
    script = tmp_path / "fake_ssh.py"
    script.write_text(FAKE_SSH, encoding="utf-8")
    return (sys.executable, str(script))


@pytest.fixture()
def payload() -> bytes:
    return PAYLOAD
