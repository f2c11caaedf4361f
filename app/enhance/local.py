from __future__ import annotations

import logging
import re

logger = logging.getLogger(__name__)

# Common resume typos and informal terms. Matched as whole words, case-insensitively.
_TYPO_FIXES: tuple[tuple[str, str], ...] = (
    ("wnat", "want"),
    ("develper", "developer"),
    ("develp", "develop"),
    ("front end", "frontend"),
    ("front-end", "frontend"),
    ("fronted", "frontend"),
    ("back end", "backend"),
    ("back-end", "backend"),
    ("teh", "the"),
    ("recieve", "receive"),
    ("recieved", "received"),
    ("acheive", "achieve"),
    ("acheived", "achieved"),
    ("managment", "management"),
    ("experiance", "experience"),
    ("responsable", "responsible"),
    ("sucessful", "successful"),
    ("sucessfully", "successfully"),
    ("mgmt", "management"),
    ("dept", "department"),
    ("yrs", "years"),
    ("js", "JavaScript"),
    ("php", "PHP"),
    ("i", "I"),
)

_WEAK_VERBS: tuple[tuple[str, str], ...] = (
    ("worked", "developed"),
    ("made", "created"),
    ("did", "executed"),
    ("got", "achieved"),
)

_SENTENCE_SPLIT_RE = re.compile(r"(?<=[.!?])(\s+)")
_FIRST_VISIBLE_RE = re.compile(r"^(\s*)(\S)")
_BULLET_RE = re.compile(r"^[*-]\s*")
_HEADER_MARKERS = ("resume", "curriculum")
HEADER = "RESUME"


def _word_pattern(term: str, *, guard: str = "") -> re.Pattern[str]:
    # "." is excluded on the left so "Node.js" keeps its suffix.
    return re.compile(rf"(?<![\w.]){re.escape(term)}(?!\w){guard}", re.IGNORECASE)


# A lone "i" is the pronoun; "i.e.", "i/o" and "i'm" are left alone.
_PRONOUN_GUARD = r"(?![./'\u2019]\w)"

_TYPO_PATTERNS = tuple(
    (_word_pattern(term, guard=_PRONOUN_GUARD if term == "i" else ""), replacement)
    for term, replacement in _TYPO_FIXES
)
_VERB_PATTERNS = tuple((_word_pattern(term), replacement) for term, replacement in _WEAK_VERBS)


def _match_case(matched: str, replacement: str) -> str:
    if matched == "i":
        return "I"
    if matched[:1].isupper():
        return replacement[:1].upper() + replacement[1:]
    return replacement


def _apply_table(text: str, patterns: tuple[tuple[re.Pattern[str], str], ...]) -> str:
    for pattern, replacement in patterns:
        text = pattern.sub(lambda m, r=replacement: _match_case(m.group(0), r), text)
    return text


def _capitalize_first(segment: str) -> str:
    return _FIRST_VISIBLE_RE.sub(lambda m: m.group(1) + m.group(2).upper(), segment, count=1)


def sentence_case(text: str) -> str:
    """Capitalize each sentence; breaks that span lines are kept, others become one space."""
    parts = _SENTENCE_SPLIT_RE.split(text)
    out = [_capitalize_first(parts[0])]
    for separator, segment in zip(parts[1::2], parts[2::2]):
        out.append(separator if "\n" in separator else " ")
        out.append(_capitalize_first(segment))
    return "".join(out)


def _polish_line(line: str) -> str:
    line = line.strip()
    if not line:
        return ""
    if _BULLET_RE.match(line):
        line = "- " + _BULLET_RE.sub("", line, count=1)
    return _apply_table(line, _VERB_PATTERNS)


def _needs_header(text: str) -> bool:
    lowered = text.lower()
    return not any(marker in lowered for marker in _HEADER_MARKERS)


def enhance_locally(text: str | None) -> str:
    """Rule-based rewrite used when no remote provider answers.

    Fixes known typos, sentence-cases, tidies bullets, swaps weak verbs and adds
    a RESUME header when the text does not name itself. Any internal failure
    returns the input unchanged. Empty input still receives the header.
    """
    source = text or ""
    try:
        fixed = _apply_table(source, _TYPO_PATTERNS)
        cased = sentence_case(fixed)
        lines = [_polish_line(line) for line in cased.split("\n")]
        enhanced = "\n".join(line for line in lines if line)
        if _needs_header(enhanced):
            enhanced = f"{HEADER}\n\n{enhanced}"
        return enhanced
    except Exception:
        logger.exception("local_enhance_failed chars=%s", len(source))
        return source
