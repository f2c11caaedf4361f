import logging

from fastapi import FastAPI
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi import _rate_limit_exceeded_handler
import sentry_sdk

from app.api.v1.health import router as health_router
from app.api.v1.auth import router as auth_router
from app.api.v1.resume import router as resume_router
from app.api.v1.history import router as history_router
from app.api.v1.analytics import router as analytics_router
from app.core.cors import install_cors
from app.core.rate_limit import limiter
from app.core.config import settings
from app.core.lifespan import lifespan

logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s %(name)s %(message)s")
if settings.sentry_dsn:
    sentry_sdk.init(dsn=settings.sentry_dsn)

app = FastAPI(title="Resume Enhancer API", version="0.1.0", lifespan=lifespan)

install_cors(app)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)

app.include_router(health_router, prefix="/v1", tags=["Health"])
app.include_router(auth_router, prefix="/v1", tags=["Auth"])
app.include_router(resume_router, prefix="/v1", tags=["Resume"])
app.include_router(history_router, prefix="/v1", tags=["History"])
app.include_router(analytics_router, prefix="/v1", tags=["Analytics"])
