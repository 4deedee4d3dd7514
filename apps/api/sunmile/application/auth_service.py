import logging
from typing import Optional, Tuple

from sunmile.application import checks
from sunmile.core.domain.auth import Identity
from sunmile.core.domain.errors import AuthenticationError, NotFoundError
from sunmile.core.domain.professional import Professional
from sunmile.core.domain.user import ROLE_PRO, User
from sunmile.infrastructure.db import professional_repository, user_repository
from sunmile.infrastructure.security import auth as security
from sunmile.interfaces.api.schemas import LoginRequest

logger = logging.getLogger("auth")

INVALID_CREDENTIALS = "Email ou senha inválidos"


def login(payload: LoginRequest) -> Tuple[User, str]:
    """
    Exchange email + password for an access token. Unknown email and wrong
    password fail identically.
    """
    checks.require(payload.email, payload.password, message="Email e senha são obrigatórios")
    email = checks.normalize_email(payload.email)
    user = user_repository.get_user_by_email(email)
    if user is None or not security.verify_password(payload.password, user.password_hash):
        logger.warning("Login failed: invalid credentials", extra={"email": email})
        raise AuthenticationError(INVALID_CREDENTIALS)

    token = security.create_access_token(user_id=user.id, role=user.role)
    logger.info("Login success", extra={"user_id": user.id})
    return user, token


def identity_from_token(token: Optional[str]) -> Identity:
    if not token:
        raise AuthenticationError("Token não fornecido")
    payload = security.decode_token(token, expected_type="access")
    if payload is None:
        raise AuthenticationError("Token inválido ou expirado")
    return Identity(id=int(payload["sub"]), role=payload["role"])


def current_user(actor: Identity) -> Tuple[User, Optional[Professional]]:
    user = user_repository.get_user_by_id(actor.id)
    if user is None:
        # Tokens outlive deleted accounts until they expire.
        raise NotFoundError("Usuário não encontrado")
    professional = None
    if user.role == ROLE_PRO:
        professional = professional_repository.get_professional_by_user_id(user.id)
    return user, professional


def current_professional(actor: Identity) -> Professional:
    professional = professional_repository.get_professional_by_user_id(actor.id)
    if professional is None:
        raise NotFoundError("Profissional não encontrado")
    return professional
