from __future__ import annotations

from dataclasses import asdict
import logging
import time
import uuid
from typing import Any

from app.ai.config import load_provider_credentials
from app.analytics.db import log_enhancement_run
from app.core import history_store
from app.core.config import settings
from app.enhance import EnhancementOrchestrator, normalize_text
from app.parsing.pdf_extract import extract_pdf_text
from app.schemas.resume import EnhanceResponse, ProviderAttemptOut, UploadResponse
from app.services.upload_security import decode_text_upload, safe_upload_filename, validate_upload

logger = logging.getLogger("app.enhance")


def get_orchestrator() -> EnhancementOrchestrator:
    """Build the provider chain from the credentials present right now."""
    return EnhancementOrchestrator.from_credentials(
        load_provider_credentials(),
        timeout_s=settings.provider_attempt_timeout_s,
    )


def _log_run(
    *,
    run_id: str,
    user_id: str | None,
    source_provider: str,
    input_chars: int,
    output_chars: int,
    attempts: list[dict[str, Any]],
    latency_ms: int,
) -> None:
    try:
        log_enhancement_run(
            run_id=run_id,
            user_id=user_id,
            source_provider=source_provider,
            input_chars=input_chars,
            output_chars=output_chars,
            attempts=attempts,
            latency_ms=latency_ms,
        )
    except Exception:  # pragma: no cover
        logger.debug("enhancement_run_logging_failed", exc_info=True)


async def enhance_resume(
    text: str,
    *,
    orchestrator: EnhancementOrchestrator,
    user_id: str | None,
) -> EnhanceResponse:
    run_id = uuid.uuid4().hex
    started = time.perf_counter()

    outcome = await orchestrator.enhance(text)
    result = outcome.result
    latency_ms = int((time.perf_counter() - started) * 1000)

    entry = history_store.add_history_entry(
        user_id=user_id,
        original_text=outcome.normalized_text,
        enhanced_text=result.text,
        source_provider=result.source_provider,
    )
    attempts = [
        {k: v for k, v in asdict(attempt).items() if k != "text"}
        for attempt in outcome.attempts
    ]
    _log_run(
        run_id=run_id,
        user_id=user_id,
        source_provider=result.source_provider,
        input_chars=len(outcome.normalized_text),
        output_chars=len(result.text),
        attempts=attempts,
        latency_ms=latency_ms,
    )
    logger.info(
        "enhance_request run_id=%s provider=%s attempts=%s latency_ms=%s",
        run_id,
        result.source_provider,
        len(attempts),
        latency_ms,
    )
    return EnhanceResponse(
        enhanced=result.text,
        source_provider=result.source_provider,
        history_id=entry["id"],
        attempts=[ProviderAttemptOut(**attempt) for attempt in attempts],
    )


def extract_resume_text(*, filename: str, content_type: str | None, content: bytes) -> UploadResponse:
    ext = validate_upload(filename=filename, content_type=content_type, content=content)
    display_name = safe_upload_filename(filename)
    if ext == "txt":
        return UploadResponse(
            text=normalize_text(decode_text_upload(content)),
            filename=display_name,
            source_type="text",
        )

    parsed = extract_pdf_text(content)
    return UploadResponse(
        text=parsed.text,
        filename=display_name,
        source_type="pdf",
        pages=parsed.page_count,
        warnings=parsed.parsing_warnings,
    )
