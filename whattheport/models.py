from __future__ import annotations

from enum import Enum
from typing import Annotated, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, model_serializer, model_validator


MAX_PORT = 65535


class PortCategory(str, Enum):
    """Fixed banding of the port number space."""

    WELL_KNOWN = "well-known"  # 0 to 1023
    REGISTERED = "registered"  # 1024 to 49151
    DYNAMIC = "dynamic"  # 49152 to 65535

    def __str__(self) -> str:
        return self.value


def category_of(port: int) -> PortCategory:
    if not 0 <= port <= MAX_PORT:
        raise ValueError(f"{port} is not a valid port number")
    if port <= 1023:
        return PortCategory.WELL_KNOWN
    if port <= 49151:
        return PortCategory.REGISTERED
    return PortCategory.DYNAMIC


class ProtocolSupport(str, Enum):
    """How a transport protocol is listed for a port."""

    UNUSED = "Unused"
    # assigned by IANA and standardized, specified or widely used
    YES = "Yes"
    # not assigned by IANA, but standardized, specified or widely used
    UNOFFICIAL = "Unofficial"
    # assigned by IANA, but not standardized, specified or widely used
    ASSIGNED = "Assigned"
    NO = "No"
    # reserved by IANA, usually after a previous use was removed
    RESERVED = "Reserved"

    def __str__(self) -> str:
        return self.value

    @property
    def is_unused(self) -> bool:
        return self is ProtocolSupport.UNUSED


class Protocol(str, Enum):
    ANY = "any"
    TCP = "tcp"
    UDP = "udp"
    SCTP = "sctp"
    DCCP = "dccp"

    def __str__(self) -> str:
        return self.value


# Column order of the protocol cells in the port tables.
PROTOCOL_COLUMNS: Tuple[Protocol, ...] = (Protocol.TCP, Protocol.UDP, Protocol.SCTP, Protocol.DCCP)


class PortSelection(BaseModel):
    """A requested port number, optionally restricted to one protocol."""

    model_config = ConfigDict(frozen=True)

    number: int = Field(ge=0, le=MAX_PORT)
    protocol: Protocol = Protocol.ANY

    def __str__(self) -> str:
        if self.protocol is Protocol.ANY:
            return str(self.number)
        return f"{self.number}/{self.protocol}"

    @model_serializer
    def serialize_as_text(self) -> str:
        return str(self)


class PortRange(BaseModel):
    """Inclusive range of port numbers."""

    model_config = ConfigDict(frozen=True)

    start: int = Field(ge=0, le=MAX_PORT)
    end: int = Field(ge=0, le=MAX_PORT)

    @classmethod
    def single(cls, port: int) -> "PortRange":
        return cls(start=port, end=port)

    def __contains__(self, port: object) -> bool:
        return isinstance(port, int) and self.start <= port <= self.end

    def __str__(self) -> str:
        if self.start == self.end:
            return str(self.start)
        return f"{self.start}-{self.end}"

    @model_serializer
    def serialize_as_pair(self) -> List[int]:
        return [self.start, self.end]


# =====================
# Rich-text description
# =====================

class _Span(BaseModel):
    model_config = ConfigDict(frozen=True)


class Text(_Span):
    type: Literal["text"] = "text"
    text: str


class SiteLink(_Span):
    type: Literal["site-link"] = "site-link"
    text: str
    dest: str


class SiteLinkMissing(_Span):
    """Link to a page on the same site that does not exist yet."""

    type: Literal["site-link-missing"] = "site-link-missing"
    text: str
    dest: str


class ExternalLink(_Span):
    type: Literal["external-link"] = "external-link"
    text: str
    dest: str


class Note(_Span):
    type: Literal["note"] = "note"
    number: int
    id: str


class Reference(_Span):
    type: Literal["reference"] = "reference"
    number: int
    id: str


class Annotation(_Span):
    """Inline template marker such as "[citation needed]"."""

    type: Literal["annotation"] = "annotation"
    text: str
    dest: str


class Subscript(_Span):
    type: Literal["subscript"] = "subscript"
    text: str


class Unknown(_Span):
    """A node that could not be classified; keeps its raw text and the error message."""

    type: Literal["unknown"] = "unknown"
    text: str
    error: str


RichTextSpan = Annotated[
    Union[
        Text,
        SiteLink,
        SiteLinkMissing,
        ExternalLink,
        Note,
        Reference,
        Annotation,
        Subscript,
        Unknown,
    ],
    Field(discriminator="type"),
]

LINK_SPANS = (SiteLink, SiteLinkMissing, ExternalLink)
FOOTNOTE_SPANS = (Note, Reference, Annotation)


class PortRecord(BaseModel):
    """One documented use of a port range (one table row)."""

    model_config = ConfigDict(frozen=True)

    number: PortRange
    tcp: ProtocolSupport = ProtocolSupport.UNUSED
    udp: ProtocolSupport = ProtocolSupport.UNUSED
    sctp: ProtocolSupport = ProtocolSupport.UNUSED
    dccp: ProtocolSupport = ProtocolSupport.UNUSED
    description: Tuple[RichTextSpan, ...] = ()

    @model_validator(mode="after")
    def check_same_category(self) -> "PortRecord":
        if category_of(self.number.start) != category_of(self.number.end):
            raise ValueError(f'Port range "{self.number}" crossed a category border')
        return self

    @property
    def category(self) -> PortCategory:
        return category_of(self.number.start)

    def support_for(self, protocol: Protocol) -> ProtocolSupport:
        if protocol is Protocol.ANY:
            raise ValueError("A specific protocol is required")
        return getattr(self, protocol.value)


# =====================
# Output models
# =====================

def _kebab(name: str) -> str:
    return name.replace("_", "-")


class _OutputModel(BaseModel):
    model_config = ConfigDict(alias_generator=_kebab, populate_by_name=True)


class UseCase(_OutputModel):
    """A record rendered for display; unused protocols are left as None."""

    tcp: Optional[ProtocolSupport] = None
    udp: Optional[ProtocolSupport] = None
    sctp: Optional[ProtocolSupport] = None
    dccp: Optional[ProtocolSupport] = None
    description: str
    # (tag, url)
    links: List[Tuple[str, str]] = Field(default_factory=list)
    notes_and_refs: List[Tuple[str, str]] = Field(default_factory=list)
    rich_description: Tuple[RichTextSpan, ...] = ()


class MatchedPorts(_OutputModel):
    number: PortRange
    use_cases: List[UseCase] = Field(default_factory=list)

    @property
    def category(self) -> PortCategory:
        return category_of(self.number.start)


class PortLookupResult(_OutputModel):
    lookup: PortSelection
    matched: Optional[MatchedPorts] = None

    @property
    def category(self) -> PortCategory:
        return category_of(self.lookup.number)


class SearchResult(_OutputModel):
    search: str
    matched: List[MatchedPorts] = Field(default_factory=list)
