"""
Monitor control records: capabilities and version information.
"""

from enum import Enum
from typing import NamedTuple, Optional, Union

from pydantic import Field, StrictInt

from qmp_protocol.models.base import WireModel


class QmpCapability(str, Enum):
    """Capabilities advertised during initial client connection.

    Used for agreeing on particular QMP extension behaviors. New members
    may be added by later protocol revisions, so greetings keep the raw
    tokens and unknown ones parse to ``UnknownCapability``.
    """

    OOB = "oob"  # out-of-band command execution


class UnknownCapability(NamedTuple):
    """A capability token this library does not recognize."""
    token: str


Capability = Union[QmpCapability, UnknownCapability]


def parse_capability(token: str) -> Capability:
    try:
        return QmpCapability(token)
    except ValueError:
        return UnknownCapability(token)


class VersionTriple(WireModel):
    """A three-part version number.

    The server does not define the integer width of these members; Python
    integers are unbounded so nothing is truncated.
    """
    major: StrictInt = Field(ge=0)
    minor: StrictInt = Field(ge=0)
    micro: StrictInt = Field(ge=0)

    @property
    def is_development(self) -> bool:
        return self.micro == 50

    @property
    def is_release_candidate(self) -> bool:
        return self.micro >= 90

    @property
    def is_stable(self) -> bool:
        return self.micro < 50

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.micro}"


class VersionInfo(WireModel):
    """query-version return value, also embedded in the server greeting."""
    qemu: VersionTriple
    package: str  # empty for upstream builds, a unique name for downstream ones


class QmpCapabilitiesArguments(WireModel):
    """qmp_capabilities arguments"""
    enable: Optional[list[QmpCapability]] = None
