"""
qmp-protocol: QEMU Machine Protocol (QMP) message models for Python.

Typed envelopes for the greeting, commands, responses and events, a
JSON codec that keeps absent members off the wire, and typed command
constructors.
"""

__version__ = "0.1.0"

from qmp_protocol import commands
from qmp_protocol.codec import (
    MessageKind,
    classify,
    decode_command,
    decode_event,
    decode_greeting,
    decode_message,
    decode_response,
    decode_server_message,
    encode,
    to_wire,
)
from qmp_protocol.errors import DecodeError, HandshakeError, QmpError, SchemaViolationError, UnknownTokenError
from qmp_protocol.handshake import Handshake, HandshakeState
from qmp_protocol.models.generic import (
    Command,
    Error,
    Event,
    OobCommand,
    Response,
    Return,
    ReturnOrError,
    ServerGreeting,
    Timestamp,
)
from qmp_protocol.models.monitor import QmpCapability, UnknownCapability, VersionInfo, VersionTriple
from qmp_protocol.models.run_state import PanicAction, RebootAction, RunState, ShutdownAction, StatusInfo, WatchdogAction
from qmp_protocol.throttle import EventThrottle

__all__ = [
    "commands",
    "MessageKind",
    "classify",
    "decode_command",
    "decode_event",
    "decode_greeting",
    "decode_message",
    "decode_response",
    "decode_server_message",
    "encode",
    "to_wire",
    "QmpError",
    "DecodeError",
    "SchemaViolationError",
    "UnknownTokenError",
    "HandshakeError",
    "Handshake",
    "HandshakeState",
    "Command",
    "OobCommand",
    "Response",
    "Return",
    "Error",
    "ReturnOrError",
    "Event",
    "Timestamp",
    "ServerGreeting",
    "QmpCapability",
    "UnknownCapability",
    "VersionInfo",
    "VersionTriple",
    "WatchdogAction",
    "RebootAction",
    "ShutdownAction",
    "PanicAction",
    "RunState",
    "StatusInfo",
    "EventThrottle",
]
