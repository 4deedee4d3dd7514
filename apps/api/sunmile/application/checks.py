"""
Input checks shared by the user and professional flows: presence,
uniqueness against the repositories, and format rules.
"""

from typing import Any, Optional

from sunmile.core import validation
from sunmile.core.domain.errors import ConflictError, ValidationError
from sunmile.core.domain.patches import UserPatch
from sunmile.core.domain.user import User
from sunmile.infrastructure.db import professional_repository, user_repository

REQUIRED_MESSAGE = "Informações obrigatórias não preenchidas"

FORMAT_MESSAGES = {
    "birth_date": "Data de nascimento inválida ou idade não permitida",
    "password": (
        "Senha fraca (mínimo 6 caracteres - 1 maiúscula - 1 minúscula - "
        "1 número - 1 caractere especial)"
    ),
    "cpf": "CPF inválido",
    "username": "Nome de usuário inválido. Use apenas letras, números, ponto e underline",
    "phone_number": "Número de telefone inválido. Exemplo: (11) 99999-9999",
    "email": "Email inválido",
}

FORMAT_RULES = {
    "birth_date": validation.is_valid_birth_date,
    "password": validation.is_strong_password,
    "cpf": validation.is_valid_cpf,
    "username": validation.is_valid_username,
    "phone_number": validation.is_valid_phone,
    "email": validation.is_valid_email,
}


def _missing(value: Any) -> bool:
    if isinstance(value, str):
        return not value.strip()
    return not value


def require(*values: Any, message: str = REQUIRED_MESSAGE) -> None:
    if any(_missing(v) for v in values):
        raise ValidationError(message)



def ensure_format(field: str, value: Any) -> None:
    if not FORMAT_RULES[field](value):
        raise ValidationError(FORMAT_MESSAGES[field])


def normalize_email(value: Optional[str]) -> Optional[str]:
    return value.strip().lower() if value else value


def ensure_unique_user_fields(
    *,
    email: Optional[str] = None,
    username: Optional[str] = None,
    cpf: Optional[str] = None,
    exclude_user_id: Optional[int] = None,
) -> None:
    lookups = (
        ("email", email, user_repository.get_user_by_email),
        ("username", username, user_repository.get_user_by_username),
        ("cpf", cpf, user_repository.get_user_by_cpf),
    )
    for field, value, lookup in lookups:
        if not value:
            continue
        existing = lookup(value)
        if existing is not None and existing.id != exclude_user_id:
            raise ConflictError.for_field(field)


def ensure_unique_professional_fields(
    *,
    phone_number: Optional[str] = None,
    pro_registration: Optional[str] = None,
    exclude_professional_id: Optional[int] = None,
) -> None:
    lookups = (
        ("phone_number", phone_number, professional_repository.get_professional_by_phone),
        (
            "pro_registration",
            pro_registration,
            professional_repository.get_professional_by_registration,
        ),
    )
    for field, value, lookup in lookups:
        if not value:
            continue
        existing = lookup(value)
        if existing is not None and existing.id != exclude_professional_id:
            raise ConflictError.for_field(field)


def prepare_user_patch(
    current: User,
    *,
    name: Optional[str] = None,
    username: Optional[str] = None,
    email: Optional[str] = None,
) -> UserPatch:
    """
    Build the patch for profile fields, re-validating only the unique fields
    whose value actually changes. Blank values count as not supplied.
    """
    patch = UserPatch(
        name=name.strip() if name and name.strip() else None,
        username=username or None,
        email=normalize_email(email) or None,
    )
    changed = patch.changes(current)
    if "email" in changed:
        ensure_format("email", changed["email"])
        ensure_unique_user_fields(email=changed["email"], exclude_user_id=current.id)
    if "username" in changed:
        ensure_format("username", changed["username"])
        ensure_unique_user_fields(username=changed["username"], exclude_user_id=current.id)
    return patch
