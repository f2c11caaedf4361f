from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

SourceProvider = Literal["jules", "openai", "local"]


class EnhanceRequest(BaseModel):
    text: str = Field(default="", max_length=100000)


class ProviderAttemptOut(BaseModel):
    provider: SourceProvider
    outcome: Literal["success", "empty", "error"]
    error_code: str | None = None
    latency_ms: int = 0


class EnhanceResponse(BaseModel):
    enhanced: str
    source_provider: SourceProvider
    history_id: str
    attempts: list[ProviderAttemptOut] = Field(default_factory=list)


class UploadResponse(BaseModel):
    text: str
    filename: str = Field(default="", max_length=255)
    source_type: Literal["pdf", "text"] = "pdf"
    pages: int = Field(default=0, ge=0)
    warnings: list[str] = Field(default_factory=list)


class DownloadRequest(BaseModel):
    enhanced_text: str = Field(default="", max_length=200000)
    filename: str | None = Field(default=None, max_length=200)


class HistoryEntry(BaseModel):
    id: str
    user_id: str
    original_text: str
    enhanced_text: str
    full_original_text: str
    full_enhanced_text: str
    source_provider: SourceProvider
    created_at: datetime


class SuccessResponse(BaseModel):
    success: bool = True
