import logging
from typing import List

from sunmile.application import checks
from sunmile.application.access import ensure_can_manage
from sunmile.core.domain.auth import Identity
from sunmile.core.domain.errors import AuthenticationError, NotFoundError, ValidationError
from sunmile.core.domain.patches import UserPatch
from sunmile.core.domain.user import User
from sunmile.core.validation import is_strong_password, normalize_cpf, parse_birth_date
from sunmile.infrastructure.db import user_repository
from sunmile.infrastructure.security import auth as security
from sunmile.interfaces.api.schemas import (
    AvatarUpdate,
    PasswordChange,
    UserCreate,
    UserUpdate,
)

logger = logging.getLogger("users")

NOT_FOUND_MESSAGE = "Usuário não encontrado"


def register_user(payload: UserCreate) -> User:
    checks.require(
        payload.name,
        payload.username,
        payload.email,
        payload.cpf,
        payload.birth_date,
        payload.password,
    )
    email = checks.normalize_email(payload.email)
    cpf = normalize_cpf(payload.cpf)

    checks.ensure_unique_user_fields(email=email, username=payload.username, cpf=cpf)
    checks.ensure_format("birth_date", payload.birth_date)
    checks.ensure_format("password", payload.password)
    checks.ensure_format("cpf", payload.cpf)
    checks.ensure_format("username", payload.username)
    checks.ensure_format("email", email)

    user = user_repository.create_user(
        name=payload.name.strip(),
        username=payload.username,
        email=email,
        cpf=cpf,
        birth_date=parse_birth_date(payload.birth_date),
        password_hash=security.hash_password(payload.password),
    )
    logger.info("User registered", extra={"user_id": user.id})
    return user


def list_users() -> List[User]:
    return user_repository.list_users()


def get_user(user_id: int) -> User:
    user = user_repository.get_user_by_id(user_id)
    if user is None:
        raise NotFoundError(NOT_FOUND_MESSAGE)
    return user


def _save(user: User, patch: UserPatch) -> User:
    if not patch.changes(user):
        return user
    saved = user_repository.save_user(patch.apply(user))
    if saved is None:
        raise NotFoundError(NOT_FOUND_MESSAGE)
    return saved


def update_user(actor: Identity, user_id: int, payload: UserUpdate) -> User:
    ensure_can_manage(actor, user_id)
    user = get_user(user_id)
    patch = checks.prepare_user_patch(
        user, name=payload.name, username=payload.username, email=payload.email
    )
    updated = _save(user, patch)
    logger.info(
        "User updated",
        extra={"user_id": user.id, "actor_id": actor.id, "fields": sorted(patch.changes(user))},
    )
    return updated


def delete_user(actor: Identity, user_id: int) -> None:
    ensure_can_manage(actor, user_id)
    user = get_user(user_id)
    if not user_repository.delete_user(user.id):
        raise NotFoundError(NOT_FOUND_MESSAGE)
    logger.info("User deleted", extra={"user_id": user.id, "actor_id": actor.id})


def update_avatar(actor: Identity, payload: AvatarUpdate) -> User:
    checks.require(payload.profile_pic_url, message="URL da imagem é obrigatória")
    user = get_user(actor.id)
    return _save(user, UserPatch(profile_pic_url=payload.profile_pic_url))


def change_password(actor: Identity, payload: PasswordChange) -> None:
    checks.require(
        payload.current_password,
        payload.new_password,
        message="Senha atual e nova senha são obrigatórias",
    )
    if not is_strong_password(payload.new_password):
        raise ValidationError(checks.FORMAT_MESSAGES["password"])

    user = get_user(actor.id)
    if not security.verify_password(payload.current_password, user.password_hash):
        logger.warning("Password change rejected: wrong current password", extra={"user_id": user.id})
        raise AuthenticationError("Senha atual incorreta")

    _save(user, UserPatch(password_hash=security.hash_password(payload.new_password)))
    logger.info("Password changed", extra={"user_id": user.id})
