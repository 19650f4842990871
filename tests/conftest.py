import pytest
from bs4 import BeautifulSoup

from whattheport.store import PortDatabase


HEADER_ROW = "<tr><th>Port</th><th>TCP</th><th>UDP</th><th>SCTP</th><th>DCCP</th><th>Description</th></tr>"

SAMPLE_PAGE = f"""
<!DOCTYPE html>
<html>
<body>
<h2>Well-known ports</h2>
<table class="wikitable sortable">
<tbody>
{HEADER_ROW}
<tr><td>20</td><td>Yes</td><td>Assigned</td><td>Yes</td><td></td><td><a href="/wiki/File_Transfer_Protocol" title="File Transfer Protocol">File Transfer Protocol</a> (FTP) data transfer<sup id="cite_ref-rfc959_9-0" class="reference"><a href="#cite_note-rfc959-9">[9]</a></sup></td></tr>
<tr><td rowspan="2">25</td><td>Yes</td><td></td><td></td><td></td><td>Mail (<a href="/wiki/Simple_Mail_Transfer_Protocol">SMTP</a>)</td></tr>
<tr><td>Unofficial</td><td colspan="3"></td><td>Relay <b>mail</b> <i><a class="new" href="/w/index.php?title=Mailrelay&amp;action=edit&amp;redlink=1">relay</a></i></td></tr>
<tr><td>80<sup class="reference"><a href="#cite_note-x-1">[1]</a></sup></td><td>Yes</td><td>Yes</td><td colspan="2"></td><td>Hypertext Transfer Protocol (<a class="external text" href="https://www.rfc-editor.org/rfc/rfc9110">HTTP</a>)<sup class="reference"><a href="#cite_note-http-3">[note 2]</a></sup></td></tr>
</tbody>
</table>
<h2>Registered ports</h2>
<table class="wikitable sortable">
<tbody>
{HEADER_ROW}
<tr><td>1024–1025</td><td colspan="4">Reserved</td><td>Reserved<sup class="noprint Inline-Template"><a href="/wiki/Wikipedia:Citation_needed">[citation needed]</a></sup></td></tr>
<tr><td>5000</td><td>Assigned</td><td>Assigned</td><td></td><td></td><td>UPnP<sup class="update noprint">[update]</sup> <span>odd</span> CO<sub>2</sub></td></tr>
<tr><td>49152–65535</td><td>Yes</td><td>Yes</td><td></td><td></td><td>Dynamic range <!-- comment --> ports</td></tr>
</tbody>
</table>
<table class="wikitable"><tr><td>not a port table</td></tr></table>
</body>
</html>
"""


def page_with_rows(*rows: str) -> str:
    """A page with one port table made of the given `tr` elements."""
    body = "".join(rows)
    return f'<html><body><table class="wikitable sortable"><tbody>{HEADER_ROW}{body}</tbody></table></body></html>'


@pytest.fixture
def sample_html() -> str:
    return SAMPLE_PAGE


@pytest.fixture
def db() -> PortDatabase:
    return PortDatabase.from_html(SAMPLE_PAGE)


@pytest.fixture
def make_cell():
    """Build a `td` element from its HTML."""

    def _make(html: str):
        soup = BeautifulSoup(f"<table><tr>{html}</tr></table>", "lxml")
        return soup.find("td")

    return _make


@pytest.fixture
def make_page():
    return page_with_rows
