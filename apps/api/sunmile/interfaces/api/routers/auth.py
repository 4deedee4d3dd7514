import logging
import os

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from sunmile.application import auth_service
from sunmile.core.domain.auth import Identity
from sunmile.infrastructure.security import rate_limit
from sunmile.interfaces.api.schemas import (
    LoginRequest,
    LoginResponse,
    MessageResponse,
    ProfessionalPublic,
    ProfessionalSummary,
    UserPublic,
)

router = APIRouter(tags=["auth"])
bearer_scheme = HTTPBearer(auto_error=False)
logger = logging.getLogger("auth")

LOGIN_RATE_LIMIT = int(os.environ.get("LOGIN_RATE_LIMIT", "5"))
LOGIN_RATE_WINDOW_SECONDS = int(os.environ.get("LOGIN_RATE_WINDOW_SECONDS", "60"))


def _client_ip(request: Request) -> str:
    return request.client.host if request.client else "unknown"


def _enforce_rate_limit(
    request: Request, bucket: str, limit: int, window_seconds: int
) -> None:
    try:
        rate_limit.enforce(bucket, _client_ip(request), limit, window_seconds)
    except rate_limit.RateLimitExceeded:
        logger.warning("Rate limit hit", extra={"bucket": bucket, "ip": _client_ip(request)})
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Muitas tentativas, tente novamente mais tarde.",
        )


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
) -> Identity:
    token = None
    if credentials is not None and credentials.scheme.lower() == "bearer":
        token = credentials.credentials
    return auth_service.identity_from_token(token)


@router.post("/login", response_model=LoginResponse)
def login(payload: LoginRequest, request: Request) -> LoginResponse:
    _enforce_rate_limit(
        request,
        bucket="login",
        limit=LOGIN_RATE_LIMIT,
        window_seconds=LOGIN_RATE_WINDOW_SECONDS,
    )
    _, token = auth_service.login(payload)
    return LoginResponse(token=token)


@router.get("/me/user", response_model=UserPublic)
def me_user(current_user: Identity = Depends(get_current_user)) -> UserPublic:
    user, professional = auth_service.current_user(current_user)
    body = UserPublic.model_validate(user)
    if professional is not None:
        body.professional = ProfessionalSummary.model_validate(professional)
    return body


@router.get("/me/pro", response_model=ProfessionalPublic)
def me_professional(current_user: Identity = Depends(get_current_user)) -> ProfessionalPublic:
    return ProfessionalPublic.model_validate(auth_service.current_professional(current_user))


@router.post("/logout", response_model=MessageResponse)
def logout(request: Request, current_user: Identity = Depends(get_current_user)) -> MessageResponse:
    # Stateless tokens: nothing to revoke server-side.
    logger.info("Logout", extra={"user_id": current_user.id, "ip": _client_ip(request)})
    return MessageResponse(message="Logout realizado com sucesso")
