"""
QMP CLI, `qmp` command.

Commands:
  qmp build <command>      Print an encoded command
  qmp decode [file]        Decode one JSON message per line
  qmp config show|set      Manage ~/.qmp/config.json
"""

import json
import logging
import os
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler

from qmp_protocol import __version__

console = Console()
DEFAULT_CONFIG_FILE = Path.home() / ".qmp" / "config.json"
DEFAULTS = {"log_level": "WARNING", "indent": None}


def _config_file() -> Path:
    return Path(os.environ.get("QMP_CONFIG", DEFAULT_CONFIG_FILE))


def _load_config() -> dict:
    try:
        return {**DEFAULTS, **json.loads(_config_file().read_text())}
    except (FileNotFoundError, json.JSONDecodeError):
        return dict(DEFAULTS)


def _save_config(cfg: dict) -> None:
    path = _config_file()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(cfg, indent=2))


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


@click.group()
@click.version_option(__version__)
def main():
    """QMP CLI: build and inspect QEMU Machine Protocol messages."""
    _setup_logging(_load_config()["log_level"])


# Register subcommands from separate modules
from qmp_protocol.cli.build import build
from qmp_protocol.cli.config import config
from qmp_protocol.cli.decode import decode_cmd

main.add_command(build)
main.add_command(config)
main.add_command(decode_cmd)


if __name__ == "__main__":
    main()
