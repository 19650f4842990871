from __future__ import annotations

import re
from typing import Union

from .models import MAX_PORT, PortSelection, Protocol

_NUMBER = re.compile(r"[0-9]+")


def parse_port_selection(text: str) -> PortSelection:
    """Parse ``80`` or ``443/udp``; raises ValueError otherwise."""
    number_str, sep, proto_str = text.partition("/")
    protocol = Protocol.ANY
    if sep:
        try:
            protocol = Protocol(proto_str.strip().lower())
        except ValueError:
            raise ValueError(f'Unknown protocol: "{proto_str}"') from None

    number_str = number_str.strip()
    if not _NUMBER.fullmatch(number_str) or int(number_str) > MAX_PORT:
        raise ValueError(f'"{number_str}" is not a valid port number')
    return PortSelection(number=int(number_str), protocol=protocol)


def parse_query(text: str) -> Union[PortSelection, str]:
    """A port selection when ``text`` is one, otherwise a plain search term."""
    try:
        return parse_port_selection(text)
    except ValueError:
        return text
