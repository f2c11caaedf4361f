from __future__ import annotations

from io import BytesIO
import logging
from typing import Any, Iterable

from pypdf import PdfReader
from pypdf.errors import PdfReadError

from app.enhance.normalize import normalize_text

from .models import ParsedPage, ParsedPdf, TextRun

logger = logging.getLogger(__name__)

LINE_BREAK_THRESHOLD = 10.0
WORD_GAP_THRESHOLD = 5.0
# Average glyph advance as a fraction of the font size; pypdf does not report run widths.
_AVG_GLYPH_WIDTH_EM = 0.5


def _combine(tm: Any, cm: Any) -> tuple[float, float, float]:
    """Return (x, y, horizontal scale) of the text matrix in page space."""
    try:
        a, b, c, d, e, f = (float(v) for v in cm)
        ta, _tb, _tc, _td, te, tf = (float(v) for v in tm)
    except (TypeError, ValueError):
        return 0.0, 0.0, 1.0
    x = te * a + tf * c + e
    y = te * b + tf * d + f
    scale = abs(ta * a) or 1.0
    return x, y, scale


def reconstruct_lines(
    runs: Iterable[TextRun],
    *,
    line_threshold: float = LINE_BREAK_THRESHOLD,
    gap_threshold: float = WORD_GAP_THRESHOLD,
) -> str:
    """Join positioned runs into text: a vertical jump starts a new line, a horizontal gap adds a space."""
    parts: list[str] = []
    last_y: float | None = None
    last_x_end: float | None = None

    for run in runs:
        if not run.text.strip():
            continue
        if last_y is not None and abs(run.y - last_y) > line_threshold:
            parts.append("\n")
            last_x_end = None
        elif last_x_end is not None and run.x - last_x_end > gap_threshold:
            parts.append(" ")
        parts.append(run.text)
        last_y = run.y
        last_x_end = run.x_end

    return "".join(parts)


def _collect_runs(page: Any) -> list[TextRun]:
    runs: list[TextRun] = []

    def visitor(text: str, cm: Any, tm: Any, _font_dict: Any, font_size: Any) -> None:
        clean = (text or "").replace("\n", " ").replace("\r", " ")
        if not clean.strip():
            return
        x, y, scale = _combine(tm, cm)
        size = float(font_size or 0.0) * scale
        runs.append(TextRun(text=clean, x=x, y=y, width=len(clean) * size * _AVG_GLYPH_WIDTH_EM))

    page.extract_text(visitor_text=visitor)
    return runs


def extract_pdf_text(content: bytes) -> ParsedPdf:
    if not content:
        raise ValueError("Uploaded PDF is empty.")
    try:
        reader = PdfReader(BytesIO(content))
        raw_pages = list(reader.pages)
    except (PdfReadError, ValueError, OSError) as exc:
        raise ValueError("Unable to extract text from this PDF file.") from exc

    pages: list[ParsedPage] = []
    warnings: list[str] = []
    for index, page in enumerate(raw_pages, start=1):
        try:
            runs = _collect_runs(page)
            page_text = reconstruct_lines(runs)
            if not page_text.strip():
                page_text = page.extract_text() or ""
        except Exception as exc:  # noqa: BLE001
            logger.warning("pdf_page_extract_failed page=%s: %s", index, exc)
            warnings.append(f"Page {index} could not be read.")
            continue
        pages.append(ParsedPage(page=index, text=page_text, runs=len(runs)))

    text = normalize_text("\n\n".join(page.text for page in pages))
    if not text:
        warnings.append("No extractable text found in PDF.")
    logger.info("pdf_extracted pages=%s chars=%s", len(raw_pages), len(text))
    return ParsedPdf(text=text, pages=pages, parsing_warnings=warnings)
