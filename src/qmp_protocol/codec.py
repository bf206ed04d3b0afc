"""
Envelope encoding and decoding.

Decoders take JSON text (``str`` or UTF-8 ``bytes``) or an already parsed
mapping, and raise ``SchemaViolationError`` or ``UnknownTokenError``
instead of returning partial values.
"""

import json
import logging
from collections.abc import Mapping
from enum import Enum
from typing import Any, Union

from pydantic import ValidationError

from qmp_protocol.errors import SchemaViolationError, UnknownTokenError
from qmp_protocol.models.base import WireModel
from qmp_protocol.models.generic import (
    RETURN_OR_ERROR_KEYS,
    Command,
    Event,
    OobCommand,
    Response,
    ServerGreeting,
)

logger = logging.getLogger("qmp_protocol.codec")

Raw = Union[str, bytes, bytearray, Mapping[str, Any]]
ServerMessage = Union[ServerGreeting, Response, Event]


class MessageKind(str, Enum):
    GREETING = "greeting"
    COMMAND = "command"
    OOB_COMMAND = "oob-command"
    RESPONSE = "response"
    EVENT = "event"


def encode(message: WireModel) -> str:
    """Serialize an envelope to compact JSON text."""
    return message.model_dump_json(by_alias=True)


def to_wire(message: WireModel) -> dict[str, Any]:
    """Serialize an envelope to a JSON-ready dict."""
    return message.model_dump(mode="json", by_alias=True)


def _load(raw: Raw) -> dict[str, Any]:
    if isinstance(raw, Mapping):
        return dict(raw)
    if isinstance(raw, (bytes, bytearray)):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise SchemaViolationError(f"Message is not valid UTF-8: {e}")
    try:
        obj = json.loads(raw)
    except json.JSONDecodeError as e:
        raise SchemaViolationError(f"Message is not valid JSON: {e}")
    if not isinstance(obj, dict):
        raise SchemaViolationError(f"Expected a JSON object, got {type(obj).__name__}")
    return obj


def _validate(model: Any, obj: Mapping[str, Any], what: str) -> Any:
    try:
        return model.model_validate(obj)
    except ValidationError as e:
        errors = e.errors(include_url=False, include_context=False, include_input=False)
        logger.debug("Failed to decode %s: %s", what, e)
        details = {"errors": errors}
        if errors and all(err["type"] == "enum" for err in errors):
            raise UnknownTokenError(f"Unknown enumeration token in {what}: {e}", details=details)
        raise SchemaViolationError(f"Invalid {what}: {e}", details=details)


def classify(obj: Mapping[str, Any]) -> MessageKind:
    """Tell envelopes apart by which keys they carry."""
    if "QMP" in obj or ("version" in obj and "capabilities" in obj):
        return MessageKind.GREETING
    if "event" in obj:
        return MessageKind.EVENT
    if "execute" in obj and "exec-oob" in obj:
        raise SchemaViolationError("Command carries both 'execute' and 'exec-oob'")
    if "execute" in obj:
        return MessageKind.COMMAND
    if "exec-oob" in obj:
        return MessageKind.OOB_COMMAND
    if any(key in obj for key in RETURN_OR_ERROR_KEYS):
        return MessageKind.RESPONSE
    raise SchemaViolationError(f"Unrecognized message shape with keys {sorted(obj)}")


def decode_greeting(raw: Raw) -> ServerGreeting:
    obj = _load(raw)
    # servers wrap the greeting as {"QMP": {...}}
    inner = obj.get("QMP")
    if isinstance(inner, Mapping):
        obj = dict(inner)
    return _validate(ServerGreeting, obj, "greeting")


def decode_command(raw: Raw, arguments_type: Any = Any) -> Union[Command, OobCommand]:
    obj = _load(raw)
    kind = classify(obj)
    if kind is MessageKind.OOB_COMMAND:
        return _validate(OobCommand[arguments_type, Any], obj, "out-of-band command")
    if kind is not MessageKind.COMMAND:
        raise SchemaViolationError(f"Expected a command, got a {kind.value}")
    return _validate(Command[arguments_type, Any], obj, "command")


def decode_response(raw: Raw, value_type: Any = Any, id_type: Any = Any) -> Response:
    return _validate(Response[value_type, id_type], _load(raw), "response")


def decode_event(raw: Raw, data_type: Any = Any) -> Event:
    return _validate(Event[data_type], _load(raw), "event")


def decode_server_message(raw: Raw) -> ServerMessage:
    """Decode anything a server may send: greeting, response or event."""
    obj = _load(raw)
    kind = classify(obj)
    if kind is MessageKind.GREETING:
        return decode_greeting(obj)
    if kind is MessageKind.EVENT:
        return decode_event(obj)
    if kind is MessageKind.RESPONSE:
        return decode_response(obj)
    raise SchemaViolationError(f"Expected a server message, got a {kind.value}")


def decode_message(raw: Raw) -> Union[ServerMessage, Command, OobCommand]:
    """Decode a message sent in either direction."""
    obj = _load(raw)
    kind = classify(obj)
    if kind in (MessageKind.COMMAND, MessageKind.OOB_COMMAND):
        return decode_command(obj)
    return decode_server_message(obj)
