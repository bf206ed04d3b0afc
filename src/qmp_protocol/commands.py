"""
Command constructors.

Each builder is a pure function returning a ``Command`` with the right
``execute`` name and argument shape. None of them sets ``id``; the caller
assigns correlation ids with ``Command.with_id``.
"""

from typing import Any, Iterable, Optional

from qmp_protocol.models.generic import Command
from qmp_protocol.models.monitor import QmpCapabilitiesArguments, QmpCapability
from qmp_protocol.models.run_state import (
    PanicAction,
    RebootAction,
    SetActionArguments,
    ShutdownAction,
    WatchdogAction,
    WatchdogSetActionArguments,
)


def query_version() -> Command[None, Any]:
    """Return the current version of the server."""
    return Command(execute="query-version")


def qmp_capabilities(enable: Optional[Iterable[QmpCapability]] = None) -> Command[QmpCapabilitiesArguments, Any]:
    """Leave capabilities negotiation mode, optionally enabling capabilities."""
    if enable is None:
        return Command(execute="qmp_capabilities")
    return Command(
        execute="qmp_capabilities",
        arguments=QmpCapabilitiesArguments(enable=list(enable)),
    )


def query_status() -> Command[None, Any]:
    return Command(execute="query-status")


def stop() -> Command[None, Any]:
    """Pause guest execution."""
    return Command(execute="stop")


def cont() -> Command[None, Any]:
    """Resume guest execution."""
    return Command(execute="cont")


def system_reset() -> Command[None, Any]:
    return Command(execute="system_reset")


def system_powerdown() -> Command[None, Any]:
    """Request an ACPI power-down of the guest."""
    return Command(execute="system_powerdown")


def quit() -> Command[None, Any]:
    """Terminate the server process."""
    return Command(execute="quit")


def watchdog_set_action(action: WatchdogAction) -> Command[WatchdogSetActionArguments, Any]:
    """Set the action taken when the guest watchdog expires."""
    return Command(
        execute="watchdog-set-action",
        arguments=WatchdogSetActionArguments(action=action),
    )


def set_action(
    reboot: Optional[RebootAction] = None,
    shutdown: Optional[ShutdownAction] = None,
    panic: Optional[PanicAction] = None,
    watchdog: Optional[WatchdogAction] = None,
) -> Command[SetActionArguments, Any]:
    """Set the actions taken on guest events. Omitted actions are unchanged."""
    return Command(
        execute="set-action",
        arguments=SetActionArguments(
            reboot=reboot,
            shutdown=shutdown,
            panic=panic,
            watchdog=watchdog,
        ),
    )
