from __future__ import annotations

import json

import typer
from rich import print

from quotesync.config import QuoteSyncConfig, coerce_config_value


def config_show_cmd(*, load_config, get_config_path) -> None:
    """Print the effective configuration."""

    config = load_config()
    print(f"- Config file: {get_config_path()}")
    print(json.dumps(config.to_dict(), indent=2))


def config_set_cmd(
    *,
    read_config_or_exit,
    write_config_or_exit,
    key: str,
    value: str,
) -> None:
    """Persist one configuration value."""

    defaults = QuoteSyncConfig()
    if not hasattr(defaults, key):
        print(f"[red]Unknown config key: {key}[/red]")
        raise typer.Exit(code=1)
    config_data = read_config_or_exit()
    config_data[key] = coerce_config_value(key, value, getattr(defaults, key))
    write_config_or_exit(config_data)
    print(f"[green]Set {key} = {config_data[key]!r}[/green]")
