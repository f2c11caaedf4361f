import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request, status

from app.core import user_store
from app.core.rate_limit import auth_rate_limit
from app.core.security import generate_token, hash_password, require_user, verify_password
from app.schemas.auth import (
    AuthResponse,
    LoginRequest,
    MeResponse,
    MessageResponse,
    SignupRequest,
    UserOut,
    is_valid_email,
)

logger = logging.getLogger("app.auth")

router = APIRouter()

MIN_PASSWORD_LENGTH = 6


def _bad_request(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


@router.post("/auth/signup", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
@auth_rate_limit()
async def signup(request: Request, payload: SignupRequest):
    _ = request
    if not payload.email or not payload.password or not payload.name.strip():
        raise _bad_request("Email, password, and name are required")
    if len(payload.password) < MIN_PASSWORD_LENGTH:
        raise _bad_request(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
    if not is_valid_email(payload.email):
        raise _bad_request("Invalid email format")

    try:
        user = user_store.create_user(
            email=payload.email,
            name=payload.name,
            password_hash=hash_password(payload.password),
        )
    except user_store.UserExistsError as exc:
        raise _bad_request(str(exc)) from exc

    logger.info("auth_signup user_id=%s", user["id"])
    return AuthResponse(
        message="User created successfully",
        user=UserOut(**user),
        token=generate_token(user["id"]),
    )


@router.post("/auth/login", response_model=AuthResponse)
@auth_rate_limit()
async def login(request: Request, payload: LoginRequest):
    _ = request
    if not payload.email.strip() or not payload.password:
        raise _bad_request("Email and password are required")

    record = user_store.get_user_credentials(payload.email)
    if record is None or not verify_password(payload.password, record[1]):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    user = record[0]
    logger.info("auth_login user_id=%s", user["id"])
    return AuthResponse(
        message="Login successful",
        user=UserOut(**user),
        token=generate_token(user["id"]),
    )


@router.get("/auth/me", response_model=MeResponse)
async def me(user: dict[str, Any] = Depends(require_user)):
    return MeResponse(user=UserOut(**user))


@router.post("/auth/logout", response_model=MessageResponse)
async def logout(_user: dict[str, Any] = Depends(require_user)):
    # Tokens are stateless; the client drops its copy.
    return MessageResponse(message="Logout successful")
