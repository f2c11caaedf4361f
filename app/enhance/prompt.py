from __future__ import annotations

from app.ai.types import EnhancementRequest

INSTRUCTION_PROMPT = (
    "You are a professional resume writer. Enhance this resume text to make it professional, "
    "ATS-friendly, and job-ready. Improve tone, use action verbs, and keep the meaning the same. "
    "Do not invent employers, dates, degrees, or metrics. Return only the enhanced text."
)


def build_enhancement_request(normalized_text: str, *, instruction_prompt: str = INSTRUCTION_PROMPT) -> EnhancementRequest:
    return EnhancementRequest(normalized_text=normalized_text, instruction_prompt=instruction_prompt)
