from __future__ import annotations

from pydantic import BaseModel, Field


class TextRun(BaseModel):
    text: str
    x: float = 0.0
    y: float = 0.0
    width: float = 0.0

    @property
    def x_end(self) -> float:
        return self.x + self.width


class ParsedPage(BaseModel):
    page: int
    text: str
    runs: int = 0


class ParsedPdf(BaseModel):
    text: str
    pages: list[ParsedPage] = Field(default_factory=list)
    parsing_warnings: list[str] = Field(default_factory=list)

    @property
    def page_count(self) -> int:
        return len(self.pages)
