"""Configuration loader for sshfan."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

DEFAULT_REMOTE_SHELL: tuple[str, ...] = ("ssh",)

_FILE_KEYS = {"hosts", "user", "ssh_options", "remote_shell", "max_workers", "log_dir"}


class ConfigError(ValueError):
    """Invalid or incomplete run configuration."""


@dataclass(frozen=True)
class RunConfig:
    """Everything a single dispatch round needs."""

    hosts: tuple[str, ...]
    command: str
    user: str | None = None
    ssh_options: tuple[str, ...] = ()
    remote_shell: tuple[str, ...] = DEFAULT_REMOTE_SHELL
    max_workers: int | None = None
    log_dir: Path | None = None
    source_path: Path | None = field(default=None, compare=False)


def remote_argv(config: RunConfig) -> tuple[str, ...]:
    """Arguments passed to the remote shell after the host name."""
    argv: list[str] = []
    if config.user:
        argv.extend(["-l", config.user])
    for option in config.ssh_options:
        argv.extend(["-o", option])
    argv.append(config.command)
    return tuple(argv)


def parse_hosts_string(hosts: str) -> tuple[str, ...]:
    """Split a whitespace-separated host string."""
    parsed = tuple(hosts.split())
    if not parsed:
        raise ConfigError("can't parse hosts string")
    return parsed


def read_host_file(path: str | Path) -> tuple[str, ...]:
    """Read one host per line, skipping blank lines and comments."""
    path = Path(path).expanduser()
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Can't read hosts file {path}: {e}") from e

    hosts = []
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        hosts.append(line)

    if not hosts:
        raise ConfigError(f"Hosts file is empty: {path}")
    return tuple(hosts)


def load_file(config_path: str | Path) -> dict[str, Any]:
    """Load and validate the optional YAML settings file."""
    config_path = Path(config_path).expanduser().resolve()

    if not config_path.is_file():
        raise ConfigError(f"Config file not found: {config_path}")

    try:
        with open(config_path, encoding="utf-8") as f:
            raw = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"{config_path}: invalid YAML") from e

    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ConfigError(f"{config_path}: top-level value must be a mapping")

    unknown = sorted(set(raw) - _FILE_KEYS)
    if unknown:
        raise ConfigError(f"{config_path}: unknown keys: {', '.join(map(str, unknown))}")

    settings = _parse_settings(raw, config_path)
    settings["source_path"] = config_path
    return settings


def _parse_settings(raw: dict[str, Any], source: Path) -> dict[str, Any]:
    """Normalize raw YAML values into RunConfig keyword arguments."""
    settings: dict[str, Any] = {}

    if "hosts" in raw:
        hosts = raw["hosts"]
        if isinstance(hosts, str):
            settings["hosts"] = tuple(hosts.split())
        elif isinstance(hosts, list) and all(isinstance(h, str) for h in hosts):
            settings["hosts"] = tuple(h.strip() for h in hosts if h.strip())
        else:
            raise ConfigError(f"{source}: 'hosts' must be a list of strings")

    if raw.get("user") is not None:
        if not isinstance(raw["user"], str):
            raise ConfigError(f"{source}: 'user' must be a string")
        settings["user"] = raw["user"]

    if "ssh_options" in raw:
        settings["ssh_options"] = _string_list(raw["ssh_options"], "ssh_options", source)

    if "remote_shell" in raw:
        remote_shell = _string_list(raw["remote_shell"], "remote_shell", source)
        if not remote_shell:
            raise ConfigError(f"{source}: 'remote_shell' can't be empty")
        settings["remote_shell"] = remote_shell

    if raw.get("max_workers") is not None:
        settings["max_workers"] = _positive_int(raw["max_workers"], source)

    if raw.get("log_dir") is not None:
        settings["log_dir"] = Path(str(raw["log_dir"])).expanduser()

    return settings


def _string_list(value: Any, key: str, source: Path) -> tuple[str, ...]:
    if isinstance(value, str):
        return tuple(value.split())
    if isinstance(value, list) and all(isinstance(v, str) for v in value):
        return tuple(value)
    raise ConfigError(f"{source}: '{key}' must be a string or a list of strings")


def _positive_int(value: Any, source: Path) -> int:
    # bool is an int subclass
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ConfigError(f"{source}: 'max_workers' must be a positive integer")
    return value


def build_config(
    *,
    command: str | None,
    host_string: str | None = None,
    host_file: str | Path | None = None,
    user: str | None = None,
    ssh_options: str | None = None,
    max_workers: int | None = None,
    log_dir: str | Path | None = None,
    config_file: str | Path | None = None,
) -> RunConfig:
    """Merge the settings file (if any) with command-line values.

    Command-line values win over file values. The host string wins over the
    host file, which wins over hosts listed in the settings file.
    """
    settings: dict[str, Any] = load_file(config_file) if config_file else {}

    if host_string:
        settings["hosts"] = parse_hosts_string(host_string)
    elif host_file:
        settings["hosts"] = read_host_file(host_file)

    if not settings.get("hosts"):
        raise ConfigError("No hosts given, use -h or -H")

    if not command or not command.strip():
        raise ConfigError("Please specify command to execute")

    if user:
        settings["user"] = user
    if ssh_options:
        settings["ssh_options"] = tuple(ssh_options.split())
    if max_workers is not None:
        if max_workers < 1:
            raise ConfigError("max workers must be a positive integer")
        settings["max_workers"] = max_workers
    if log_dir:
        settings["log_dir"] = Path(log_dir).expanduser()

    return RunConfig(command=command, **settings)
