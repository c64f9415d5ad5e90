"""Scraped document models."""

from __future__ import annotations

from pydantic import BaseModel, Field


class ScrapedPage(BaseModel):
    """Paragraph text extracted from a fetched web page."""

    url: str
    title: str | None = None
    text: str
    total_chars: int = Field(ge=0)

    def snippet(self, max_chars: int) -> str:
        return self.text[:max_chars]
