from __future__ import annotations

import logging
import re
from typing import List, Optional, Sequence, Tuple

from bs4 import BeautifulSoup
from bs4.element import Comment, Tag
from pydantic import ValidationError

from ..errors import PageParseError
from ..models import (
    MAX_PORT,
    PROTOCOL_COLUMNS,
    PortRange,
    PortRecord,
    ProtocolSupport,
    category_of,
)
from .rich_text import parse_rich_text

logger = logging.getLogger(__name__)

TABLE_SELECTOR = ".wikitable.sortable"
RANGE_SEPARATOR = re.compile("[-–]")
_DIGITS = re.compile(r"[0-9]+")

# First exact match wins; anything else is Unused.
SUPPORT_KEYWORDS = {
    "Yes": ProtocolSupport.YES,
    "Unofficial": ProtocolSupport.UNOFFICIAL,
    "Assigned": ProtocolSupport.ASSIGNED,
    "No": ProtocolSupport.NO,
    "Reserved": ProtocolSupport.RESERVED,
}


def parse_page(html: str) -> List[PortRecord]:
    """Parse the port list page into records, in table and row order.

    Every ``.wikitable.sortable`` element is a port table and must be a
    ``table``. Any structural defect raises PageParseError for the whole page.
    """
    soup = BeautifulSoup(html, "lxml")
    records: List[PortRecord] = []
    tables = soup.select(TABLE_SELECTOR)
    for table in tables:
        records.extend(parse_table(table))
    logger.debug(f"Parsed {len(records)} records from {len(tables)} tables")
    return records


def _span_attr(cell: Tag, name: str) -> int:
    raw = cell.get(name)
    if raw is None:
        return 1
    raw = str(raw).strip()
    if not _DIGITS.fullmatch(raw) or int(raw) < 1:
        raise PageParseError(f'Invalid {name} value "{raw}"')
    return int(raw)


def _table_rows(table: Tag) -> List[Tag]:
    # rows of nested tables belong to those tables
    return [tr for tr in table.find_all("tr") if tr.find_parent("table") is table]


def _data_cells(row: Tag) -> List[Tag]:
    return row.find_all("td", recursive=False)


def parse_table(table: Tag) -> List[PortRecord]:
    """Parse a single port table.

    Rows are walked with a cursor; a range cell with ``rowspan=N`` makes the
    next N-1 rows further use cases of the same range.
    """
    if table.name != "table":
        raise PageParseError("A port table should be a `table` element")

    rows = _table_rows(table)
    if not rows:
        raise PageParseError("Table has 0 rows")
    # the first row may be a header made of `th` cells only
    if not _data_cells(rows[0]):
        rows = rows[1:]

    records: List[PortRecord] = []
    current: Optional[PortRange] = None
    remaining = 0
    for row in rows:
        cells = _data_cells(row)
        if remaining:
            records.append(parse_row(current, cells))
            remaining -= 1
            continue

        if not cells:
            raise PageParseError("Encountered an empty row")
        current, span = parse_port_range(cells[0])
        records.append(parse_row(current, cells[1:]))
        remaining = span - 1

    if remaining:
        raise PageParseError(
            f'No more rows while parsing a multi-row port "{current}" ({remaining} missing)'
        )
    return records


def range_cell_text(cell: Tag) -> str:
    """Text of a range cell without its footnote superscripts."""
    parts: List[str] = []
    for child in cell.children:
        if isinstance(child, Tag):
            if child.name == "sup":
                continue
            parts.extend(s.strip() for s in child.strings)
        elif not isinstance(child, Comment):
            parts.append(str(child).strip())
    return "".join(parts).strip()


def _parse_port(text: str) -> int:
    text = text.strip()
    if not _DIGITS.fullmatch(text) or int(text) > MAX_PORT:
        raise PageParseError(f'"{text}" is not a valid port number')
    return int(text)


def parse_range_text(text: str) -> PortRange:
    """Parse "80", "80-81" or "80–81" into an inclusive range.

    Both ends must fall into the same port category.
    """
    parts = RANGE_SEPARATOR.split(text, maxsplit=1)
    if len(parts) == 2:
        start, end = _parse_port(parts[0]), _parse_port(parts[1])
    else:
        start = end = _parse_port(parts[0])

    if category_of(start) != category_of(end):
        raise PageParseError(f'Port range "{start}-{end}" crossed a category border')
    return PortRange(start=start, end=end)


def parse_port_range(cell: Tag) -> Tuple[PortRange, int]:
    """Parse the first cell of a row. Returns the range and its row span."""
    if cell.name != "td":
        raise PageParseError("A port range cell should be a `td` element")
    span = _span_attr(cell, "rowspan")
    return parse_range_text(range_cell_text(cell)), span


def classify_cell(cell: Tag) -> ProtocolSupport:
    if cell.name != "td":
        raise PageParseError("A port type cell should be a `td` element")
    for fragment in cell.strings:
        support = SUPPORT_KEYWORDS.get(fragment.strip())
        if support is not None:
            return support
    return ProtocolSupport.UNUSED


def classify_protocols(cells: Sequence[Tag]) -> Tuple[List[ProtocolSupport], int]:
    """Fill the four protocol columns from the leading cells of a row.

    Returns the per-column support and the number of cells consumed.
    """
    columns = len(PROTOCOL_COLUMNS)
    supports: List[ProtocolSupport] = []
    consumed = 0
    while len(supports) < columns:
        if consumed >= len(cells):
            raise PageParseError(f"Row ran out of cells after {len(supports)} protocol columns")
        cell = cells[consumed]
        span = _span_attr(cell, "colspan")
        if len(supports) + span > columns:
            raise PageParseError(f"Port type cells span > {columns}")
        supports.extend([classify_cell(cell)] * span)
        consumed += 1
    return supports, consumed


def parse_row(port_range: PortRange, cells: Sequence[Tag]) -> PortRecord:
    """Parse the protocol and description cells of a row."""
    supports, consumed = classify_protocols(cells)
    rest = cells[consumed:]
    if len(rest) != 1:
        raise PageParseError(
            f'Port "{port_range}": expected one description cell, found {len(rest)}'
        )

    tcp, udp, sctp, dccp = supports
    try:
        return PortRecord(
            number=port_range,
            tcp=tcp,
            udp=udp,
            sctp=sctp,
            dccp=dccp,
            description=tuple(parse_rich_text(rest[0])),
        )
    except ValidationError as e:
        raise PageParseError(str(e)) from e
