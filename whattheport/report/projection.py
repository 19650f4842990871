"""Projection of port records into display-ready use cases.

Link tags are numbered from a counter that the caller passes in and gets back,
so several records rendered into one output share one contiguous numbering.
"""

from __future__ import annotations

from typing import Iterable, List, Optional, Tuple

from pydantic import BaseModel

from ..config import ORIGIN_BASE_URL, PAGE_URL, Settings
from ..models import (
    Annotation,
    ExternalLink,
    LINK_SPANS,
    MatchedPorts,
    Note,
    PortLookupResult,
    PortRange,
    PortRecord,
    PortSelection,
    ProtocolSupport,
    Reference,
    SearchResult,
    UseCase,
)
from ..store import PortDatabase
from .style import PLAIN, Styler


class DisplayOptions(BaseModel):
    show_links: bool = False
    show_notes_and_references: bool = False
    origin_base_url: str = ORIGIN_BASE_URL
    page_url: str = PAGE_URL

    @classmethod
    def from_settings(
        cls, settings: Settings, show_links: bool = False, show_notes_and_references: bool = False
    ) -> "DisplayOptions":
        return cls(
            show_links=show_links,
            show_notes_and_references=show_notes_and_references,
            origin_base_url=settings.origin_base_url,
            page_url=settings.page_url,
        )


def _shown(support: ProtocolSupport) -> Optional[ProtocolSupport]:
    return None if support.is_unused else support


def project_use_case(
    record: PortRecord,
    options: DisplayOptions,
    next_tag: int = 1,
    styler: Styler = PLAIN,
) -> Tuple[UseCase, int]:
    """Render one record. Returns the use case and the next free link tag."""
    parts: List[str] = []
    links: List[Tuple[str, str]] = []
    notes_and_refs: List[Tuple[str, str]] = []

    for span in record.description:
        if isinstance(span, LINK_SPANS):
            if isinstance(span, ExternalLink):
                url = span.dest
            else:
                url = f"{options.origin_base_url}{span.dest}"
            parts.append(styler.link(span.text, url, span))
            if options.show_links:
                tag = styler.tag(f"[{next_tag}]", span)
                next_tag += 1
                parts.append(tag)
                links.append((tag, url))
        elif isinstance(span, (Note, Reference, Annotation)):
            if not options.show_notes_and_references:
                continue
            if isinstance(span, Note):
                tag = styler.tag(f"[note {span.number}]", span)
                url = f"{options.page_url}#{span.id}"
            elif isinstance(span, Reference):
                tag = styler.tag(f"[ref {span.number}]", span)
                url = f"{options.page_url}#{span.id}"
            else:
                tag = styler.tag(span.text, span)
                url = f"{options.origin_base_url}{span.dest}"
            parts.append(tag)
            notes_and_refs.append((tag, url))
        else:
            # text, subscript and unknown spans
            parts.append(span.text)

    use_case = UseCase(
        tcp=_shown(record.tcp),
        udp=_shown(record.udp),
        sctp=_shown(record.sctp),
        dccp=_shown(record.dccp),
        description="".join(parts),
        links=links,
        notes_and_refs=notes_and_refs,
        rich_description=record.description,
    )
    return use_case, next_tag


def project_records(
    records: Iterable[PortRecord],
    options: DisplayOptions,
    next_tag: int = 1,
    styler: Styler = PLAIN,
) -> Tuple[List[UseCase], int]:
    """Render records in order, threading the link tag counter through them."""
    use_cases: List[UseCase] = []
    for record in records:
        use_case, next_tag = project_use_case(record, options, next_tag, styler)
        use_cases.append(use_case)
    return use_cases, next_tag


def build_lookup_result(
    db: PortDatabase,
    selection: PortSelection,
    options: DisplayOptions,
    styler: Styler = PLAIN,
) -> PortLookupResult:
    match = db.lookup(selection)
    if match is None:
        return PortLookupResult(lookup=selection, matched=None)
    use_cases, _ = project_records(match.records, options, 1, styler)
    return PortLookupResult(
        lookup=selection,
        matched=MatchedPorts(number=PortRange.single(selection.number), use_cases=use_cases),
    )


def build_search_result(
    db: PortDatabase,
    term: str,
    options: DisplayOptions,
    styler: Styler = PLAIN,
) -> SearchResult:
    groups = db.search(term, options.show_links, options.show_notes_and_references)
    matched: List[MatchedPorts] = []
    next_tag = 1
    for group in groups:
        use_cases, next_tag = project_records(group.records, options, next_tag, styler)
        matched.append(MatchedPorts(number=group.number, use_cases=use_cases))
    return SearchResult(search=term, matched=matched)
