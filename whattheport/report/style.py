from __future__ import annotations

import typer

from ..models import ProtocolSupport, RichTextSpan, SiteLinkMissing


class Styler:
    """Decorates display strings. The base class leaves text untouched."""

    def link(self, text: str, url: str, span: RichTextSpan) -> str:
        return text

    def tag(self, tag: str, span: RichTextSpan) -> str:
        return tag

    def port(self, text: str, matched: bool) -> str:
        return text

    def category(self, text: str) -> str:
        return text

    def support(self, support: ProtocolSupport) -> str:
        return str(support)


PLAIN = Styler()


SUPPORT_COLORS = {
    ProtocolSupport.YES: typer.colors.GREEN,
    ProtocolSupport.UNOFFICIAL: typer.colors.CYAN,
    ProtocolSupport.ASSIGNED: typer.colors.YELLOW,
    ProtocolSupport.NO: typer.colors.RED,
    ProtocolSupport.RESERVED: typer.colors.BRIGHT_BLACK,
}


def hyperlink(text: str, url: str) -> str:
    """Wrap text in an OSC 8 terminal hyperlink."""
    return f"\x1b]8;;{url}\x1b\\{text}\x1b]8;;\x1b\\"


class TerminalStyler(Styler):
    """ANSI colors and inline hyperlinks for interactive terminals."""

    def _link_color(self, span: RichTextSpan) -> str:
        if isinstance(span, SiteLinkMissing):
            return typer.colors.RED
        return typer.colors.CYAN

    def link(self, text: str, url: str, span: RichTextSpan) -> str:
        return hyperlink(typer.style(text, fg=self._link_color(span), italic=True), url)

    def tag(self, tag: str, span: RichTextSpan) -> str:
        if span.type in ("note", "reference", "annotation"):
            return typer.style(tag, fg=typer.colors.YELLOW)
        return typer.style(tag, fg=self._link_color(span))

    def port(self, text: str, matched: bool) -> str:
        return typer.style(text, fg=typer.colors.GREEN if matched else typer.colors.RED)

    def category(self, text: str) -> str:
        return typer.style(text, fg=typer.colors.BLUE)

    def support(self, support: ProtocolSupport) -> str:
        color = SUPPORT_COLORS.get(support)
        if color is None:
            return str(support)
        return typer.style(str(support), fg=color)
