from __future__ import annotations

from io import StringIO
from typing import List, Sequence, Union

from ..models import PortLookupResult, SearchResult, UseCase
from .style import PLAIN, Styler

INDENT = "    "


def _plural(count: int, word: str) -> str:
    return f"{count} {word}" if count == 1 else f"{count} {word}s"


def render_use_case(use_case: UseCase, styler: Styler = PLAIN) -> str:
    """Description line, protocol line, then the optional link and note sections."""
    lines = [use_case.description]

    protocols = [
        f"{label}: {styler.support(support)}"
        for label, support in (
            ("TCP", use_case.tcp),
            ("UDP", use_case.udp),
            ("SCTP", use_case.sctp),
            ("DCCP", use_case.dccp),
        )
        if support is not None
    ]
    if protocols:
        lines.append(INDENT + ", ".join(protocols))

    for title, entries in (("Links:", use_case.links), ("Notes and References:", use_case.notes_and_refs)):
        if entries:
            lines.append(title)
            lines.extend(f"{INDENT}{tag}: {url}" for tag, url in entries)
    return "\n".join(lines)


def render_use_cases(use_cases: Sequence[UseCase], styler: Styler = PLAIN) -> str:
    blocks: List[str] = []
    for i, use_case in enumerate(use_cases, start=1):
        block = f"{i}: {render_use_case(use_case, styler)}"
        blocks.append("\n".join(INDENT + line for line in block.split("\n")))
    return "\n\n".join(blocks)


def render_text(result: Union[PortLookupResult, SearchResult], styler: Styler = PLAIN) -> str:
    """Render a lookup or search result for humans."""
    buf = StringIO()

    if isinstance(result, PortLookupResult):
        category = styler.category(str(result.category))
        if result.matched is None:
            port = styler.port(str(result.lookup), matched=False)
            buf.write(f"Port {port} is a {category} port with no known use cases\n")
            return buf.getvalue()
        use_cases = result.matched.use_cases
        port = styler.port(str(result.lookup), matched=True)
        buf.write(
            f"Port {port} is a {category} port with {_plural(len(use_cases), 'known use case')}\n\n"
        )
        buf.write(render_use_cases(use_cases, styler) + "\n")
        return buf.getvalue()

    if isinstance(result, SearchResult):
        if not result.matched:
            buf.write(f'Search "{result.search}" matched no known ports\n')
            return buf.getvalue()
        buf.write(f'Search "{result.search}" matched {_plural(len(result.matched), "port range")}\n')
        for group in result.matched:
            number = group.number
            label = "Port" if number.start == number.end else "Ports"
            port = styler.port(str(number), matched=True)
            category = styler.category(str(group.category))
            buf.write(
                f"\n{label} {port} ({category}) with "
                f"{_plural(len(group.use_cases), 'known use case')}\n\n"
            )
            buf.write(render_use_cases(group.use_cases, styler) + "\n")
        return buf.getvalue()

    raise TypeError("render_text expects a PortLookupResult or a SearchResult")
