"""CLI: qmp build <command>"""

import json
from typing import Callable, Optional

import click

from qmp_protocol import commands
from qmp_protocol.codec import encode, to_wire
from qmp_protocol.models.generic import Command
from qmp_protocol.models.monitor import QmpCapability
from qmp_protocol.models.run_state import PanicAction, RebootAction, ShutdownAction, WatchdogAction


def _load_config() -> dict:
    from qmp_protocol.cli.main import _load_config
    return _load_config()


def _tokens(enum_cls) -> click.Choice:
    return click.Choice([member.value for member in enum_cls])


def _parse_id(raw: str):
    """Ids are JSON values; anything that is not valid JSON is taken as a string."""
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return raw


def _envelope_options(func):
    func = click.option("--oob", is_flag=True, help="Send as an out-of-band command.")(func)
    func = click.option("--id", "command_id", default=None, help="Correlation id (JSON value).")(func)
    return func


def _emit(command: Command, command_id: Optional[str], oob: bool) -> None:
    if command_id is not None:
        command = command.with_id(_parse_id(command_id))
    message = command.as_oob() if oob else command
    indent = _load_config().get("indent")
    if indent:
        click.echo(json.dumps(to_wire(message), indent=indent))
    else:
        click.echo(encode(message))


@click.group()
def build():
    """Print an encoded command."""


def _simple(name: str, builder: Callable[[], Command]) -> click.Command:
    @click.command(name, help=builder.__doc__ or f"Build {name}.")
    @_envelope_options
    def cmd(command_id, oob):
        _emit(builder(), command_id, oob)

    return cmd


for _name, _builder in {
    "query-version": commands.query_version,
    "query-status": commands.query_status,
    "stop": commands.stop,
    "cont": commands.cont,
    "system-reset": commands.system_reset,
    "system-powerdown": commands.system_powerdown,
    "quit": commands.quit,
}.items():
    build.add_command(_simple(_name, _builder))


@build.command("qmp-capabilities")
@click.option("--enable", multiple=True, type=_tokens(QmpCapability), help="Capability to enable.")
@_envelope_options
def build_qmp_capabilities(enable, command_id, oob):
    """Leave capabilities negotiation mode."""
    capabilities = [QmpCapability(token) for token in enable] if enable else None
    _emit(commands.qmp_capabilities(capabilities), command_id, oob)


@build.command("watchdog-set-action")
@click.argument("action", type=_tokens(WatchdogAction))
@_envelope_options
def build_watchdog_set_action(action, command_id, oob):
    """Set the action taken when the guest watchdog expires."""
    _emit(commands.watchdog_set_action(WatchdogAction(action)), command_id, oob)


@build.command("set-action")
@click.option("--reboot", type=_tokens(RebootAction), default=None)
@click.option("--shutdown", type=_tokens(ShutdownAction), default=None)
@click.option("--panic", type=_tokens(PanicAction), default=None)
@click.option("--watchdog", type=_tokens(WatchdogAction), default=None)
@_envelope_options
def build_set_action(reboot, shutdown, panic, watchdog, command_id, oob):
    """Set the actions taken on guest events."""
    _emit(
        commands.set_action(
            reboot=RebootAction(reboot) if reboot else None,
            shutdown=ShutdownAction(shutdown) if shutdown else None,
            panic=PanicAction(panic) if panic else None,
            watchdog=WatchdogAction(watchdog) if watchdog else None,
        ),
        command_id,
        oob,
    )
