from __future__ import annotations

import re
from typing import Any

PDF_MAGIC = b"%PDF-"

ALLOWED_UPLOAD_EXTENSIONS = {"pdf", "txt"}

ALLOWED_CONTENT_TYPES = {
    "pdf": {"application/pdf", "application/x-pdf", "application/octet-stream", ""},
    "txt": {"text/plain", "application/octet-stream", ""},
}

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9._ -]+")


def _safe_str(value: Any, max_len: int = 255) -> str:
    if value is None:
        return ""
    text = str(value).strip()
    if not text:
        return ""
    return text[:max_len]


def extension_from_filename(filename: str) -> str:
    if "." not in (filename or ""):
        return ""
    return _safe_str(filename.rsplit(".", 1)[-1], 20).lower()


def _is_probably_text_payload(content: bytes) -> bool:
    if not content:
        return False
    sample = content[:4096]
    if b"\x00" in sample:
        return False
    printable = 0
    for byte in sample:
        if byte in (9, 10, 12, 13) or 32 <= byte <= 126 or byte >= 128:
            printable += 1
    return (printable / len(sample)) >= 0.75


def validate_upload(*, filename: str, content_type: str | None, content: bytes) -> str:
    """Check extension, declared type and magic bytes; return the extension."""
    ext = extension_from_filename(filename)
    if ext not in ALLOWED_UPLOAD_EXTENSIONS:
        allowed = ", ".join(sorted(ALLOWED_UPLOAD_EXTENSIONS))
        raise ValueError(f"Unsupported file type '.{ext}'. Allowed: {allowed}.")

    declared = _safe_str((content_type or "").split(";")[0], 120).lower()
    if declared not in ALLOWED_CONTENT_TYPES[ext]:
        raise ValueError(f"Content type '{declared}' does not match .{ext} upload.")

    validate_upload_signature(filename=filename, content=content)
    return ext


def validate_upload_signature(*, filename: str, content: bytes) -> None:
    ext = extension_from_filename(filename)
    if not content:
        raise ValueError("Uploaded file is empty.")

    if ext == "pdf":
        if not content.startswith(PDF_MAGIC):
            raise ValueError("File signature does not match .pdf content.")
        return

    if ext == "txt":
        if not _is_probably_text_payload(content):
            raise ValueError("File signature does not match .txt text content.")
        return


def decode_text_upload(content: bytes) -> str:
    for encoding in ("utf-8-sig", "cp1252", "latin-1"):
        try:
            return content.decode(encoding)
        except UnicodeDecodeError:
            continue
    return content.decode("utf-8", errors="replace")


def safe_download_filename(raw: str | None, *, default: str = "enhanced_resume") -> str:
    name = _safe_str(raw, 120)
    if name.lower().endswith(".pdf"):
        name = name[:-4]
    name = _UNSAFE_FILENAME_CHARS.sub("", name).strip(" .")
    return f"{name or default}.pdf"


def safe_upload_filename(raw: str | None, *, max_len: int = 255) -> str:
    """Base name of an uploaded file, shortened to ``max_len`` with its extension kept."""
    name = _safe_str(raw, 4096).replace("\\", "/").rsplit("/", 1)[-1]
    if len(name) <= max_len:
        return name
    ext = extension_from_filename(name)
    suffix = f".{ext}" if ext else ""
    return name[: max_len - len(suffix)] + suffix
