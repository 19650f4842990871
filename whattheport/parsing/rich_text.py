"""Conversion of a description cell into rich-text spans.

A description cell is a small markup tree: text mixed with links, bold and
italic wrappers and superscripts for footnotes or inline templates. Each child
node becomes zero or more spans. A node that cannot be classified becomes an
``Unknown`` span carrying its visible text and the error, so one odd node
never fails the page.
"""

from __future__ import annotations

import logging
import re
from typing import List, Optional

from bs4 import BeautifulSoup
from bs4.element import (
    Comment,
    Declaration,
    Doctype,
    NavigableString,
    PageElement,
    ProcessingInstruction,
    Tag,
)

from ..errors import RichTextError
from ..models import (
    Annotation,
    ExternalLink,
    Note,
    Reference,
    RichTextSpan,
    SiteLink,
    SiteLinkMissing,
    Subscript,
    Text,
    Unknown,
)

logger = logging.getLogger(__name__)

TRANSPARENT_TAGS = {"b", "i", "strong", "em"}

# Class markers used by the page's markup
MISSING_PAGE_CLASS = "new"
EXTERNAL_LINK_CLASS = "external"
MAINTENANCE_CLASS = "update"
INLINE_TEMPLATE_CLASS = "Inline-Template"
FOOTNOTE_CLASS = "reference"

REFERENCE_PATTERN = re.compile(r"\[(\d+)\]")
NOTE_PATTERN = re.compile(r"\[note (\d+)\]")


def parse_rich_text(cell: Tag) -> List[RichTextSpan]:
    """Convert all children of ``cell`` into spans, in display order."""
    spans: List[RichTextSpan] = []
    for child in cell.children:
        spans.extend(parse_node(child))
    return spans


def parse_node(node: PageElement) -> List[RichTextSpan]:
    """Convert one node, recovering from errors with an Unknown span."""
    try:
        return _convert(node)
    except RichTextError as e:
        text = visible_text(node)
        logger.debug(f"Unrecognised description node {text!r}: {e}")
        return [Unknown(text=text, error=str(e))]


def visible_text(node: PageElement) -> str:
    if isinstance(node, Tag):
        return node.get_text()
    return str(node)


def _classes(tag: Tag) -> List[str]:
    classes = tag.get("class") or []
    if isinstance(classes, str):
        return classes.split()
    return list(classes)


def _link_dest(anchor: Tag) -> str:
    href = anchor.get("href")
    if href is None:
        raise RichTextError("Anchor has no href attribute")
    return str(href)


def _nested_anchor(tag: Tag) -> Tag:
    anchor: Optional[Tag] = tag.find("a")
    if anchor is None:
        raise RichTextError(f"Superscript {tag.get_text()!r} has no nested anchor")
    return anchor


def _convert(node: PageElement) -> List[RichTextSpan]:
    # BeautifulSoup is itself a Tag, so it has to be checked first
    if isinstance(node, BeautifulSoup):
        raise RichTextError("Unexpected document node")
    if isinstance(node, Comment):
        return []
    if isinstance(node, (Doctype, Declaration, ProcessingInstruction)):
        raise RichTextError(f"Unexpected {type(node).__name__} node")
    if isinstance(node, NavigableString):
        text = str(node).replace("\n", "")
        return [Text(text=text)] if text else []
    if not isinstance(node, Tag):
        raise RichTextError(f"Unsupported node type {type(node).__name__}")

    if node.name in TRANSPARENT_TAGS:
        spans: List[RichTextSpan] = []
        for child in node.children:
            spans.extend(parse_node(child))
        return spans
    if node.name == "a":
        return [_convert_anchor(node)]
    if node.name == "sup":
        return _convert_superscript(node)
    if node.name == "sub":
        return [Subscript(text=node.get_text())]
    raise RichTextError(f"Unsupported element <{node.name}>")


def _convert_anchor(anchor: Tag) -> RichTextSpan:
    text = anchor.get_text()
    dest = _link_dest(anchor)
    classes = _classes(anchor)
    if MISSING_PAGE_CLASS in classes:
        return SiteLinkMissing(text=text, dest=dest)
    if EXTERNAL_LINK_CLASS in classes:
        return ExternalLink(text=text, dest=dest)
    return SiteLink(text=text, dest=dest)


def _convert_superscript(sup: Tag) -> List[RichTextSpan]:
    classes = _classes(sup)
    # hidden "update" maintenance tag
    if MAINTENANCE_CLASS in classes:
        return []

    text = sup.get_text()
    if INLINE_TEMPLATE_CLASS in classes:
        anchor = _nested_anchor(sup)
        return [Annotation(text=text, dest=_link_dest(anchor))]

    if FOOTNOTE_CLASS in classes:
        label = text.strip()
        ref = REFERENCE_PATTERN.fullmatch(label)
        if ref:
            anchor_id = _link_dest(_nested_anchor(sup)).removeprefix("#")
            return [Reference(number=int(ref.group(1)), id=anchor_id)]
        note = NOTE_PATTERN.fullmatch(label)
        if note:
            anchor_id = _link_dest(_nested_anchor(sup)).removeprefix("#")
            return [Note(number=int(note.group(1)), id=anchor_id)]
        raise RichTextError(f"Unrecognised footnote {label!r}")

    raise RichTextError(f"Unrecognised superscript {text!r}")
