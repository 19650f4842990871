import pytest

from whattheport.errors import PageParseError
from whattheport.models import (
    Annotation,
    PortRange,
    ProtocolSupport,
    Reference,
    SiteLink,
    Text,
)
from whattheport.parsing.wiki_table import (
    classify_cell,
    classify_protocols,
    parse_page,
    parse_port_range,
    parse_range_text,
)

Y = ProtocolSupport.YES
U = ProtocolSupport.UNUSED


def test_range_with_en_dash():
    assert parse_range_text("80–81") == PortRange(start=80, end=81)


def test_range_with_hyphen_and_single_port():
    assert parse_range_text("6000-6063") == PortRange(start=6000, end=6063)
    assert parse_range_text("443") == PortRange(start=443, end=443)


@pytest.mark.parametrize("text", ["", "abc", "70000", "80-", "-81", "+80"])
def test_range_rejects_bad_numbers(text):
    with pytest.raises(PageParseError):
        parse_range_text(text)


def test_range_crossing_category_is_fatal():
    with pytest.raises(PageParseError, match="category"):
        parse_range_text("1000-1100")


def test_range_cell_ignores_footnotes_and_reads_rowspan(make_cell):
    cell = make_cell(
        '<td rowspan="3"><span>1194</span><sup class="reference"><a href="#n">[5]</a></sup></td>'
    )
    port_range, span = parse_port_range(cell)
    assert port_range == PortRange.single(1194)
    assert span == 3


def test_range_cell_bad_rowspan(make_cell):
    with pytest.raises(PageParseError):
        parse_port_range(make_cell('<td rowspan="two">22</td>'))


def test_classify_first_keyword_wins(make_cell):
    assert classify_cell(make_cell("<td>Unofficial<br/>Yes</td>")) is ProtocolSupport.UNOFFICIAL
    assert classify_cell(make_cell("<td> Reserved </td>")) is ProtocolSupport.RESERVED


def test_classify_no_keyword_is_unused(make_cell):
    assert classify_cell(make_cell("<td></td>")) is U
    # matching is case-sensitive
    assert classify_cell(make_cell("<td>yes</td>")) is U


def test_single_cell_spanning_all_protocols(make_cell):
    cells = [make_cell('<td colspan="4">Reserved</td>'), make_cell("<td>desc</td>")]
    supports, consumed = classify_protocols(cells)
    assert supports == [ProtocolSupport.RESERVED] * 4
    assert consumed == 1


def test_protocol_span_over_four_is_fatal(make_cell):
    cells = [make_cell("<td>Yes</td>"), make_cell('<td colspan="4">No</td>')]
    with pytest.raises(PageParseError):
        classify_protocols(cells)


def test_protocol_cells_running_out_is_fatal(make_cell):
    cells = [make_cell("<td>Yes</td>"), make_cell("<td>Yes</td>")]
    with pytest.raises(PageParseError):
        classify_protocols(cells)


def test_parse_sample_page(sample_html):
    records = parse_page(sample_html)

    assert [str(r.number) for r in records] == ["20", "25", "25", "80", "1024-1025", "5000", "49152-65535"]

    ftp = records[0]
    assert (ftp.tcp, ftp.udp, ftp.sctp, ftp.dccp) == (Y, ProtocolSupport.ASSIGNED, Y, U)
    assert ftp.description == (
        SiteLink(text="File Transfer Protocol", dest="/wiki/File_Transfer_Protocol"),
        Text(text=" (FTP) data transfer"),
        Reference(number=9, id="cite_note-rfc959-9"),
    )

    # the continuation row of port 25 has its own protocol cells
    smtp, relay = records[1], records[2]
    assert smtp.number == relay.number
    assert (smtp.tcp, smtp.udp) == (Y, U)
    assert (relay.tcp, relay.udp, relay.sctp, relay.dccp) == (ProtocolSupport.UNOFFICIAL, U, U, U)

    reserved = records[4]
    assert {reserved.tcp, reserved.udp, reserved.sctp, reserved.dccp} == {ProtocolSupport.RESERVED}
    assert reserved.description == (
        Text(text="Reserved"),
        Annotation(text="[citation needed]", dest="/wiki/Wikipedia:Citation_needed"),
    )


def test_parse_is_deterministic(sample_html):
    assert parse_page(sample_html) == parse_page(sample_html)


def test_page_without_port_tables_is_empty():
    assert parse_page("<html><body><p>nothing</p></body></html>") == []


def test_header_row_is_optional():
    page = (
        '<table class="wikitable sortable"><tbody>'
        "<tr><td>7</td><td>Yes</td><td>Yes</td><td></td><td></td><td>Echo</td></tr>"
        "</tbody></table>"
    )
    records = parse_page(page)
    assert len(records) == 1
    assert records[0].description == (Text(text="Echo"),)


@pytest.mark.parametrize(
    "rows",
    [
        # empty row
        ["<tr></tr>"],
        # declared row span longer than the table
        ['<tr><td rowspan="3">9</td><td>Yes</td><td></td><td></td><td></td><td>Discard</td></tr>',
         "<tr><td>Yes</td><td></td><td></td><td></td><td>More</td></tr>"],
        # no description cell
        ['<tr><td>9</td><td colspan="4">Yes</td></tr>'],
        # two cells after the protocol columns
        ['<tr><td>9</td><td colspan="4">Yes</td><td>a</td><td>b</td></tr>'],
        # unparsable port
        ["<tr><td>nine</td><td>Yes</td><td></td><td></td><td></td><td>Discard</td></tr>"],
        # range crossing a category border
        ["<tr><td>1000–1100</td><td>Yes</td><td></td><td></td><td></td><td>Bad</td></tr>"],
        # protocol cells spanning five columns
        ['<tr><td>9</td><td colspan="5">Yes</td><td>Discard</td></tr>'],
        # unparsable column span
        ['<tr><td>9</td><td colspan="x">Yes</td><td></td><td></td><td></td><td>Discard</td></tr>'],
    ],
)
def test_structural_defects_abort_the_whole_page(make_page, rows):
    good = "<tr><td>7</td><td>Yes</td><td>Yes</td><td></td><td></td><td>Echo</td></tr>"
    with pytest.raises(PageParseError):
        parse_page(make_page(good, *rows))


def test_non_table_element_with_port_table_classes_is_fatal(make_page):
    good = "<tr><td>7</td><td>Yes</td><td>Yes</td><td></td><td></td><td>Echo</td></tr>"
    page = make_page(good).replace(
        "<body>", '<body><div class="wikitable sortable">not a table</div>', 1
    )
    with pytest.raises(PageParseError, match="`table` element"):
        parse_page(page)
