"""
Run-state control records: actions, status and lifecycle event payloads.
"""

from enum import Enum
from typing import Optional

from pydantic import StrictBool

from qmp_protocol.models.base import WireModel


class WatchdogAction(str, Enum):
    """Action taken when the guest watchdog timer expires."""
    RESET = "reset"
    SHUTDOWN = "shutdown"
    POWEROFF = "poweroff"
    PAUSE = "pause"
    DEBUG = "debug"
    NONE = "none"
    INJECT_NMI = "inject-nmi"


class RebootAction(str, Enum):
    """Action taken on guest reboot."""
    RESET = "reset"
    SHUTDOWN = "shutdown"


class ShutdownAction(str, Enum):
    """Action taken on guest shutdown."""
    POWEROFF = "poweroff"
    PAUSE = "pause"


class PanicAction(str, Enum):
    """Action taken on guest panic."""
    PAUSE = "pause"
    SHUTDOWN = "shutdown"
    EXIT_FAILURE = "exit-failure"
    NONE = "none"


class RunState(str, Enum):
    DEBUG = "debug"
    INMIGRATE = "inmigrate"
    INTERNAL_ERROR = "internal-error"
    IO_ERROR = "io-error"
    PAUSED = "paused"
    POSTMIGRATE = "postmigrate"
    PRELAUNCH = "prelaunch"
    FINISH_MIGRATE = "finish-migrate"
    RESTORE_VM = "restore-vm"
    RUNNING = "running"
    SAVE_VM = "save-vm"
    SHUTDOWN = "shutdown"
    SUSPENDED = "suspended"
    WATCHDOG = "watchdog"
    GUEST_PANICKED = "guest-panicked"
    COLO = "colo"


class ShutdownCause(str, Enum):
    NONE = "none"
    HOST_ERROR = "host-error"
    HOST_QMP_QUIT = "host-qmp-quit"
    HOST_QMP_SYSTEM_RESET = "host-qmp-system-reset"
    HOST_SIGNAL = "host-signal"
    HOST_UI = "host-ui"
    GUEST_SHUTDOWN = "guest-shutdown"
    GUEST_RESET = "guest-reset"
    GUEST_PANIC = "guest-panic"
    SUBSYSTEM_RESET = "subsystem-reset"
    SNAPSHOT_LOAD = "snapshot-load"


class WatchdogSetActionArguments(WireModel):
    """watchdog-set-action arguments"""
    action: WatchdogAction


class SetActionArguments(WireModel):
    """set-action arguments; members left out keep their current setting."""
    reboot: Optional[RebootAction] = None
    shutdown: Optional[ShutdownAction] = None
    panic: Optional[PanicAction] = None
    watchdog: Optional[WatchdogAction] = None


class StatusInfo(WireModel):
    """query-status return value"""
    running: StrictBool
    status: RunState


class ShutdownEventData(WireModel):
    """SHUTDOWN event data"""
    guest: StrictBool
    reason: ShutdownCause


class ResetEventData(WireModel):
    """RESET event data"""
    guest: StrictBool
    reason: ShutdownCause


class WatchdogEventData(WireModel):
    """WATCHDOG event data"""
    action: WatchdogAction
