"""
Protocol envelopes: greeting, commands, responses and asynchronous events.

A client receives one ``ServerGreeting`` on connect, then sends ``Command``
or ``OobCommand`` messages and receives ``Response`` messages matched by
``id``. ``Event`` messages may arrive at any time in between.
"""

import time
from collections.abc import Mapping
from datetime import datetime, timedelta, timezone
from typing import Annotated, Any, ClassVar, Generic, Optional, TypeVar, Union

from pydantic import Discriminator, Field, SerializationInfo, StrictInt, Tag, field_validator, model_validator

from qmp_protocol.models.base import WireModel
from qmp_protocol.models.monitor import Capability, VersionInfo, parse_capability

ArgsT = TypeVar("ArgsT")
IdT = TypeVar("IdT")
ValueT = TypeVar("ValueT")
DataT = TypeVar("DataT")

# Wire value of a timestamp member when the host clock could not be read.
TIMESTAMP_UNAVAILABLE = -1
_U64_MAX = 2**64 - 1

RETURN_OR_ERROR_KEYS = ("return", "error", "desc")


class ServerGreeting(WireModel):
    """Sent by the server right after the connection is established.

    It signals that the server is ready for capabilities negotiation. The
    order of ``capabilities`` has no significance.
    """

    version: VersionInfo
    capabilities: list[str]

    @property
    def capability_set(self) -> frozenset[Capability]:
        return frozenset(parse_capability(token) for token in self.capabilities)

    def supports(self, capability: Union[Capability, str]) -> bool:
        if isinstance(capability, str):
            capability = parse_capability(capability)
        return capability in self.capability_set


class Command(WireModel, Generic[ArgsT, IdT]):
    """An in-band command.

    ``arguments`` is left out when the command takes none. ``id`` is echoed
    back in the matching response; any JSON value works, an integer
    incremented per command is the usual choice.
    """

    execute: str
    arguments: Optional[ArgsT] = None
    id: Optional[IdT] = None

    nullable_fields: ClassVar[frozenset[str]] = frozenset({"arguments", "id"})

    def with_id(self, id: Any) -> "Command[ArgsT, Any]":
        return self.model_copy(update={"id": id})

    def as_oob(self) -> "OobCommand[ArgsT, IdT]":
        fields: dict[str, Any] = {"exec_oob": self.execute}
        for name in self.nullable_fields & self.model_fields_set:
            fields[name] = getattr(self, name)
        return OobCommand(**fields)


class OobCommand(WireModel, Generic[ArgsT, IdT]):
    """A command executed out-of-band, ahead of the in-band queue.

    Only valid once the ``oob`` capability has been negotiated.
    """

    exec_oob: str = Field(alias="exec-oob")
    arguments: Optional[ArgsT] = None
    id: Optional[IdT] = None

    nullable_fields: ClassVar[frozenset[str]] = frozenset({"arguments", "id"})

    def with_id(self, id: Any) -> "OobCommand[ArgsT, Any]":
        return self.model_copy(update={"id": id})


class Return(WireModel, Generic[ValueT]):
    """Successful outcome.

    The value is defined per command; it is an empty object when the
    command returns no data.
    """

    value: ValueT = Field(alias="return")

    nullable_fields: ClassVar[frozenset[str]] = frozenset({"value"})


class Error(WireModel):
    """Failed outcome.

    ``class_`` is the error class name (e.g. "GenericError"). ``description``
    is meant for humans; do not parse it.
    """

    class_: str = Field(alias="error")
    description: str = Field(alias="desc")


def _return_or_error_tag(value: Any) -> Optional[str]:
    if isinstance(value, Return):
        return "return"
    if isinstance(value, Error):
        return "error"
    if isinstance(value, Mapping):
        # wire aliases, or field names as left by a plain model_dump()
        has_return = "return" in value or "value" in value
        error_keys = sum(key in value for key in ("error", "desc", "class_", "description"))
        if has_return and error_keys == 0:
            return "return"
        if not has_return and error_keys == 2:
            return "error"
    return None


def return_or_error(value_type: Any) -> Any:
    """Build the success-or-error union type for a given return value type.

    There is no discriminant member on the wire: a ``return`` key selects
    ``Return``, an ``error`` plus ``desc`` pair selects ``Error`` and every
    other combination fails validation.
    """
    return Annotated[
        Union[
            Annotated[Return[value_type], Tag("return")],
            Annotated[Error, Tag("error")],
        ],
        Discriminator(
            _return_or_error_tag,
            custom_error_type="return_or_error",
            custom_error_message="expected a 'return' member or both 'error' and 'desc' members",
        ),
    ]


ReturnOrError = return_or_error(Any)


class Response(WireModel, Generic[ValueT, IdT]):
    """Outcome of a command.

    ``response`` is flattened into the message, next to ``id``. ``id`` is
    present only when the command carried one; clients should drop
    responses whose id they do not know.
    """

    response: return_or_error(ValueT)
    id: Optional[IdT] = None

    nullable_fields: ClassVar[frozenset[str]] = frozenset({"id"})

    @model_validator(mode="before")
    @classmethod
    def _nest_response(cls, data: Any) -> Any:
        if isinstance(data, Mapping) and "response" not in data:
            nested = {key: data[key] for key in RETURN_OR_ERROR_KEYS if key in data}
            data = {key: value for key, value in data.items() if key not in RETURN_OR_ERROR_KEYS}
            data["response"] = nested
        return data

    def _to_wire(self, data: dict[str, Any], info: SerializationInfo) -> dict[str, Any]:
        if not info.by_alias:
            return data
        flattened = dict(data.pop("response"))
        flattened.update(data)
        return flattened

    @property
    def is_error(self) -> bool:
        return isinstance(self.response, Error)

    @property
    def value(self) -> Optional[ValueT]:
        return None if self.is_error else self.response.value

    @property
    def error(self) -> Optional[Error]:
        return self.response if self.is_error else None


class Timestamp(WireModel):
    """When an event occurred in the server, relative to the Unix epoch.

    Both members are -1 when the host time could not be retrieved. Some
    events are rate-limited to one per second per type: later ones within
    the window replace earlier ones and are delivered delayed.
    """

    seconds: StrictInt
    microseconds: StrictInt

    @field_validator("seconds", "microseconds")
    @classmethod
    def _fold_unsigned_sentinel(cls, value: int) -> int:
        # -1 reinterpreted as an unsigned 64-bit integer
        if value == _U64_MAX:
            return TIMESTAMP_UNAVAILABLE
        return value

    @model_validator(mode="after")
    def _check_pair(self) -> "Timestamp":
        if self.seconds == TIMESTAMP_UNAVAILABLE and self.microseconds == TIMESTAMP_UNAVAILABLE:
            return self
        if self.seconds < 0 or self.microseconds < 0:
            raise ValueError("timestamp members must both be -1 or both be non-negative")
        return self

    @classmethod
    def now(cls) -> "Timestamp":
        seconds, microseconds = divmod(time.time_ns() // 1000, 1_000_000)
        return cls(seconds=seconds, microseconds=microseconds)

    @classmethod
    def unavailable(cls) -> "Timestamp":
        return cls(seconds=TIMESTAMP_UNAVAILABLE, microseconds=TIMESTAMP_UNAVAILABLE)

    @property
    def is_available(self) -> bool:
        return self.seconds != TIMESTAMP_UNAVAILABLE

    def to_datetime(self) -> Optional[datetime]:
        if not self.is_available:
            return None
        epoch = datetime(1970, 1, 1, tzinfo=timezone.utc)
        return epoch + timedelta(seconds=self.seconds, microseconds=self.microseconds)


class Event(WireModel, Generic[DataT]):
    """Asynchronous event sent unilaterally by the server."""

    event: str
    data: Optional[DataT] = None
    timestamp: Timestamp

    nullable_fields: ClassVar[frozenset[str]] = frozenset({"data"})
