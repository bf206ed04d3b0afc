"""
Client-side handshake state and id correlation.

AWAITING_GREETING -> (greeting received) -> NEGOTIATED. Commands are only
prepared once negotiated; each prepared command gets the next integer id
and responses are matched back against the ids still pending.
"""

import itertools
import logging
from enum import Enum
from typing import Any, Optional, Union

from qmp_protocol.codec import Raw, decode_greeting
from qmp_protocol.errors import HandshakeError
from qmp_protocol.models.generic import Command, OobCommand, Response, ServerGreeting
from qmp_protocol.models.monitor import Capability

logger = logging.getLogger("qmp_protocol.handshake")


class HandshakeState(str, Enum):
    AWAITING_GREETING = "awaiting-greeting"
    NEGOTIATED = "negotiated"


class Handshake:
    def __init__(self, first_id: int = 1):
        self._ids = itertools.count(first_id)
        self._pending: set[Any] = set()
        self.state = HandshakeState.AWAITING_GREETING
        self.greeting: Optional[ServerGreeting] = None

    @property
    def negotiated(self) -> bool:
        return self.state is HandshakeState.NEGOTIATED

    @property
    def capabilities(self) -> frozenset[Capability]:
        if self.greeting is None:
            return frozenset()
        return self.greeting.capability_set

    @property
    def pending(self) -> frozenset[Any]:
        return frozenset(self._pending)

    def receive_greeting(self, greeting: Union[ServerGreeting, Raw]) -> ServerGreeting:
        if self.negotiated:
            raise HandshakeError("Greeting already received")
        if not isinstance(greeting, ServerGreeting):
            greeting = decode_greeting(greeting)
        self.greeting = greeting
        self.state = HandshakeState.NEGOTIATED
        logger.debug("Negotiated with server %s", greeting.version.qemu)
        return greeting

    def prepare(self, command: Union[Command, OobCommand]) -> Union[Command, OobCommand]:
        """Return ``command`` carrying the next id, recording it as pending."""
        if not self.negotiated:
            raise HandshakeError("Cannot send commands before the server greeting")
        command_id = next(self._ids)
        self._pending.add(command_id)
        return command.with_id(command_id)

    def accept(self, response: Response) -> bool:
        """Clear the pending id a response answers. False means drop it."""
        if "id" not in response.model_fields_set:
            logger.warning("Dropping response without id")
            return False
        try:
            self._pending.remove(response.id)
        except (KeyError, TypeError):
            logger.warning("Dropping response with unknown id %r", response.id)
            return False
        return True
