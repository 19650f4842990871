from __future__ import annotations

from typing import Dict, Iterable, Iterator, List, NamedTuple, Optional, Tuple

from .models import (
    FOOTNOTE_SPANS,
    LINK_SPANS,
    Note,
    PortRange,
    PortRecord,
    PortSelection,
    Protocol,
    Reference,
    RichTextSpan,
)
from .parsing.wiki_table import parse_page


class PortMatch(NamedTuple):
    """All records covering one requested port, in database order."""

    selection: PortSelection
    records: Tuple[PortRecord, ...]


class RangeGroup(NamedTuple):
    """Search matches sharing the exact same port range."""

    number: PortRange
    records: Tuple[PortRecord, ...]


def matches_port(record: PortRecord, selection: PortSelection) -> bool:
    """Whether ``record`` documents the requested port (and protocol, if any)."""
    if selection.number not in record.number:
        return False
    if selection.protocol is Protocol.ANY:
        return True
    return not record.support_for(selection.protocol).is_unused


def _span_search_texts(
    span: RichTextSpan, show_links: bool, show_notes_and_references: bool
) -> Iterator[str]:
    if isinstance(span, LINK_SPANS):
        yield span.text
        if show_links:
            yield span.dest
    elif isinstance(span, (Note, Reference)):
        if show_notes_and_references:
            yield span.id
    elif isinstance(span, FOOTNOTE_SPANS):
        # annotations are never searchable
        return
    else:
        yield span.text


def joined_text(description: Iterable[RichTextSpan]) -> str:
    """Concatenated text of every span except notes, references and annotations."""
    return "".join(
        span.text for span in description if not isinstance(span, FOOTNOTE_SPANS)
    )


def matches_term(
    record: PortRecord,
    term: str,
    show_links: bool = False,
    show_notes_and_references: bool = False,
) -> bool:
    """Case-insensitive substring match against a record's description.

    A term matches a single span's searchable text, or the joined description
    text so that a term may straddle adjacent spans.
    """
    needle = term.casefold()
    for span in record.description:
        for text in _span_search_texts(span, show_links, show_notes_and_references):
            if needle in text.casefold():
                return True
    return needle in joined_text(record.description).casefold()


class PortDatabase:
    """Read-only collection of port records, in page order."""

    def __init__(self, records: Iterable[PortRecord]):
        self._records: Tuple[PortRecord, ...] = tuple(records)

    @classmethod
    def from_html(cls, html: str) -> "PortDatabase":
        """Parse a page; raises PageParseError without building a partial database."""
        return cls(parse_page(html))

    @property
    def records(self) -> Tuple[PortRecord, ...]:
        return self._records

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[PortRecord]:
        return iter(self._records)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PortDatabase):
            return NotImplemented
        return self._records == other._records

    def __hash__(self) -> int:
        return hash(self._records)

    def lookup(self, selection: PortSelection) -> Optional[PortMatch]:
        """Records covering the selected port, or None when nothing matches."""
        matched = tuple(r for r in self._records if matches_port(r, selection))
        if not matched:
            return None
        return PortMatch(selection=selection, records=matched)

    def search(
        self,
        term: str,
        show_links: bool = False,
        show_notes_and_references: bool = False,
    ) -> List[RangeGroup]:
        """Records whose description contains ``term``, grouped by identical range.

        Groups are ordered by range start; records keep database order within a group.
        """
        groups: Dict[PortRange, List[PortRecord]] = {}
        for record in self._records:
            if matches_term(record, term, show_links, show_notes_and_references):
                groups.setdefault(record.number, []).append(record)
        ordered = sorted(groups.items(), key=lambda kv: kv[0].start)
        return [RangeGroup(number=number, records=tuple(records)) for number, records in ordered]
