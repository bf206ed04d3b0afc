"""CLI: qmp config show|set"""

import click
from rich.console import Console
from rich.table import Table

console = Console()

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


def _load_config() -> dict:
    from qmp_protocol.cli.main import _load_config
    return _load_config()


def _save_config(cfg: dict) -> None:
    from qmp_protocol.cli.main import _save_config
    _save_config(cfg)


@click.group()
def config():
    """Configuration commands."""


@config.command("show")
def config_show():
    """Show the current configuration."""
    table = Table(title="Configuration")
    table.add_column("Key", style="bold")
    table.add_column("Value")
    for key, value in _load_config().items():
        table.add_row(key, "" if value is None else str(value))
    console.print(table)


@config.command("set")
@click.argument("key", type=click.Choice(["log_level", "indent"]))
@click.argument("value")
def config_set(key: str, value: str):
    """Set a configuration value."""
    cfg = _load_config()
    if key == "log_level":
        value = value.upper()
        if value not in LOG_LEVELS:
            raise click.BadParameter(f"must be one of {', '.join(LOG_LEVELS)}", param_hint="value")
        cfg[key] = value
    else:
        try:
            indent = int(value)
        except ValueError:
            raise click.BadParameter("must be an integer", param_hint="value")
        cfg[key] = indent if indent > 0 else None
    _save_config(cfg)
    console.print(f"[green]{key} set to {cfg[key]}[/green]")
