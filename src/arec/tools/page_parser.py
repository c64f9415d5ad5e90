"""Page parsing utilities."""

from __future__ import annotations

from bs4 import BeautifulSoup
from readability import Document

from arec.logging import get_logger
from arec.models.document import ScrapedPage

logger = get_logger(__name__)


class PageParser:
    """Extract paragraph text from HTML.

    Paragraphs are taken from readability's main-content block first; when that yields
    nothing the whole page is searched.
    """

    def parse_html(self, url: str, html: str) -> ScrapedPage:
        title: str | None = None
        paragraphs: list[str] = []

        try:
            doc = Document(html)
            title = doc.short_title() or None
            paragraphs = self._paragraphs(doc.summary(html_partial=True))
        except Exception as e:
            logger.warning("Readability failed for url=%s: %s", url, e)

        if not paragraphs:
            soup = BeautifulSoup(html, "lxml")
            if title is None and soup.title:
                title = soup.title.get_text(strip=True) or None
            paragraphs = self._paragraphs(soup)

        # Every paragraph is followed by one space, and that space counts toward the total.
        text = "".join(f"{p} " for p in paragraphs)
        return ScrapedPage(url=url, title=title, text=text, total_chars=len(text))

    @staticmethod
    def _paragraphs(markup: str | BeautifulSoup) -> list[str]:
        soup = markup if isinstance(markup, BeautifulSoup) else BeautifulSoup(markup, "lxml")
        out: list[str] = []
        for p in soup.find_all("p"):
            text = " ".join(p.get_text(" ", strip=True).split())
            if text:
                out.append(text)
        return out
