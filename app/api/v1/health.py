from fastapi import APIRouter

from app.ai.config import load_provider_credentials

router = APIRouter()


@router.get("/health", summary="Health Check", description="Check the health status and configured enhancement providers.")
async def health_check():
    return {
        "status": "healthy",
        "providers": list(load_provider_credentials().configured()) + ["local"],
    }
