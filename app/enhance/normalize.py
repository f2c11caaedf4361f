from __future__ import annotations

import re

_CONTROL_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]+")
_MULTI_SPACE_RE = re.compile(r" {2,}")
_MULTI_HSPACE_RE = re.compile(r"[ \t]{2,}")
_EXCESS_NEWLINES_RE = re.compile(r"\n{3,}")
_BULLET_RE = re.compile(r"^\s*[•*-]\s*")

# UTF-8 punctuation decoded as cp1252, plus typographic ligatures from PDF text layers.
# Longer sequences first so the bare "â€" prefix only catches what is left.
_MOJIBAKE = (
    ("â€œ", '"'),
    ("â€\x9d", '"'),
    ("â€™", "'"),
    ("â€˜", "'"),
    ("â€“", "-"),
    ("â€”", "-"),
    ("â€¢", "-"),
    ("â€¦", "..."),
    ("â€", '"'),
    ("ﬁ", "fi"),
    ("ﬂ", "fl"),
    ("ﬀ", "ff"),
    ("ﬃ", "ffi"),
    ("ﬄ", "ffl"),
)


def fix_mojibake(text: str) -> str:
    for broken, plain in _MOJIBAKE:
        if broken in text:
            text = text.replace(broken, plain)
    return text


def _clean_line(line: str) -> str:
    return _MULTI_HSPACE_RE.sub(" ", line.rstrip(" \t"))


def _collapse_blank_lines(lines: list[str]) -> list[str]:
    out: list[str] = []
    for line in lines:
        if not line.strip():
            if out and out[-1]:
                out.append("")
            continue
        out.append(line)
    while out and not out[-1]:
        out.pop()
    return out


def normalize_bullet(line: str) -> str:
    if _BULLET_RE.match(line):
        return "- " + _BULLET_RE.sub("", line, count=1)
    return line


def normalize_text(raw: str | None) -> str:
    """Clean pasted or PDF-extracted resume text into a stable line-oriented form.

    Control characters are dropped (page breaks become paragraph breaks first),
    whitespace runs are collapsed, at most one blank line separates paragraphs
    and every bullet starts with ``- ``. Applying it twice changes nothing.
    """
    if not raw:
        return ""

    s = str(raw).replace("\u00a0", " ")
    s = s.replace("\f", "\n\n")
    s = _CONTROL_RE.sub("", s)
    s = _MULTI_SPACE_RE.sub(" ", s)
    s = fix_mojibake(s)
    s = s.replace("\r\n", "\n").replace("\r", "\n")
    s = _EXCESS_NEWLINES_RE.sub("\n\n", s)

    lines = _collapse_blank_lines([_clean_line(line) for line in s.split("\n")])
    lines = [normalize_bullet(line) for line in lines]
    return "\n".join(lines).strip()
