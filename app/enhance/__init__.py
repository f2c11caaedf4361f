from .local import enhance_locally
from .normalize import normalize_text
from .orchestrator import EnhancementOrchestrator, EnhancementOutcome, ProviderAttempt, attempt_provider
from .prompt import INSTRUCTION_PROMPT, build_enhancement_request

__all__ = [
    "normalize_text",
    "enhance_locally",
    "INSTRUCTION_PROMPT",
    "build_enhancement_request",
    "EnhancementOrchestrator",
    "EnhancementOutcome",
    "ProviderAttempt",
    "attempt_provider",
]
