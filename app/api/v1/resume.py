from typing import Any

from fastapi import APIRouter, Depends, File, HTTPException, Request, UploadFile, status
from fastapi.responses import Response

from app.core.config import settings
from app.core.rate_limit import rate_limit
from app.core.security import optional_user
from app.enhance import EnhancementOrchestrator
from app.schemas.resume import DownloadRequest, EnhanceRequest, EnhanceResponse, UploadResponse
from app.services.enhance_service import enhance_resume, extract_resume_text, get_orchestrator
from app.services.pdf_render import render_resume_pdf
from app.services.upload_security import safe_download_filename

router = APIRouter()

_READ_CHUNK_BYTES = 1024 * 64


async def _read_limited(file: UploadFile) -> bytes:
    max_bytes = settings.max_upload_mb * 1024 * 1024
    chunks: list[bytes] = []
    total = 0
    while True:
        chunk = await file.read(_READ_CHUNK_BYTES)
        if not chunk:
            break
        total += len(chunk)
        if total > max_bytes:
            raise HTTPException(
                status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                detail=f"File too large. Maximum allowed size is {settings.max_upload_mb} MB.",
            )
        chunks.append(chunk)
    return b"".join(chunks)


@router.post("/resume/upload", response_model=UploadResponse)
@rate_limit()
async def upload_resume(
    request: Request,
    file: UploadFile = File(...),
    _user: dict[str, Any] | None = Depends(optional_user),
):
    _ = request
    filename = file.filename or "resume.pdf"
    content = await _read_limited(file)
    try:
        return extract_resume_text(filename=filename, content_type=file.content_type, content=content)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc


@router.post("/resume/enhance", response_model=EnhanceResponse)
@rate_limit()
async def enhance(
    request: Request,
    payload: EnhanceRequest,
    user: dict[str, Any] | None = Depends(optional_user),
    orchestrator: EnhancementOrchestrator = Depends(get_orchestrator),
):
    _ = request
    if not payload.text.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No text provided")
    return await enhance_resume(
        payload.text,
        orchestrator=orchestrator,
        user_id=user["id"] if user else None,
    )


@router.post("/resume/download")
@rate_limit()
async def download(request: Request, payload: DownloadRequest):
    _ = request
    if not payload.enhanced_text.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No enhanced text provided")
    pdf_bytes = render_resume_pdf(payload.enhanced_text)
    filename = safe_download_filename(payload.filename)
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
