from __future__ import annotations

from io import BytesIO

from reportlab.lib.pagesizes import A4
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfgen import canvas

TITLE = "Enhanced Resume"
MARGIN = 50
TITLE_FONT = "Times-Bold"
TITLE_SIZE = 16
BODY_FONT = "Times-Roman"
BODY_SIZE = 11
LEADING = 14
BULLET_INDENT = 10
# Standard Type 1 fonts have no text mapping for U+2022, so bullets are drawn as a dash.
BULLET = "-"
PARAGRAPH_GAP = LEADING * 0.5


def _split_word(word: str, font: str, size: float, max_width: float) -> list[str]:
    """Break a word wider than the line (long URLs) into pieces that fit."""
    if stringWidth(word, font, size) <= max_width:
        return [word]
    pieces: list[str] = []
    current = ""
    for ch in word:
        if current and stringWidth(current + ch, font, size) > max_width:
            pieces.append(current)
            current = ch
        else:
            current += ch
    pieces.append(current)
    return pieces


def _wrap(text: str, font: str, size: float, max_width: float) -> list[str]:
    words = [piece for word in text.split() for piece in _split_word(word, font, size, max_width)]
    if not words:
        return [""]
    lines: list[str] = []
    current = words[0]
    for word in words[1:]:
        candidate = f"{current} {word}"
        if stringWidth(candidate, font, size) <= max_width:
            current = candidate
        else:
            lines.append(current)
            current = word
    lines.append(current)
    return lines


def _is_bullet(line: str) -> bool:
    stripped = line.strip()
    return stripped.startswith("-") or stripped.startswith("*")


def _strip_bullet(line: str) -> str:
    stripped = line.strip()
    body = stripped[1:]
    return body[1:] if body.startswith(" ") else body


def render_resume_pdf(text: str) -> bytes:
    buf = BytesIO()
    c = canvas.Canvas(buf, pagesize=A4)
    c.setTitle(TITLE)
    width, height = A4
    max_width = width - 2 * MARGIN
    y = height - MARGIN

    def ensure_space(amount: float) -> None:
        nonlocal y
        if y - amount < MARGIN:
            c.showPage()
            c.setFont(BODY_FONT, BODY_SIZE)
            y = height - MARGIN

    def draw(line: str, *, indent: float = 0.0) -> None:
        nonlocal y
        for chunk in _wrap(line, BODY_FONT, BODY_SIZE, max_width - indent):
            ensure_space(LEADING)
            c.drawString(MARGIN + indent, y - BODY_SIZE, chunk)
            y -= LEADING

    c.setFont(TITLE_FONT, TITLE_SIZE)
    c.drawCentredString(width / 2, y - TITLE_SIZE, TITLE)
    y -= TITLE_SIZE + LEADING

    c.setFont(BODY_FONT, BODY_SIZE)
    for paragraph in text.split("\n\n"):
        for line in paragraph.split("\n"):
            if _is_bullet(line):
                draw(f"{BULLET} {_strip_bullet(line)}", indent=BULLET_INDENT)
            else:
                draw(line)
        y -= PARAGRAPH_GAP

    c.save()
    return buf.getvalue()
