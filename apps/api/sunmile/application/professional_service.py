import logging
from typing import List

from sunmile.application import checks
from sunmile.application.access import ensure_can_manage
from sunmile.core.domain.auth import Identity
from sunmile.core.domain.errors import NotFoundError
from sunmile.core.domain.patches import ProfessionalPatch
from sunmile.core.domain.professional import Professional
from sunmile.core.validation import normalize_cpf, parse_birth_date
from sunmile.infrastructure.db import professional_repository
from sunmile.infrastructure.security import auth as security
from sunmile.interfaces.api.schemas import ProfessionalCreate, ProfessionalUpdate

logger = logging.getLogger("professionals")

NOT_FOUND_MESSAGE = "Profissional não encontrado"


def register_professional(payload: ProfessionalCreate) -> Professional:
    """
    Create a ``pro`` user and its professional profile. Every check runs
    before the first write, and both rows are inserted in one transaction.
    """
    checks.require(
        payload.name,
        payload.username,
        payload.email,
        payload.cpf,
        payload.phone_number,
        payload.birth_date,
        payload.password,
        payload.pro_registration,
    )
    email = checks.normalize_email(payload.email)
    cpf = normalize_cpf(payload.cpf)

    checks.ensure_unique_user_fields(email=email, username=payload.username, cpf=cpf)
    checks.ensure_unique_professional_fields(
        phone_number=payload.phone_number, pro_registration=payload.pro_registration
    )
    checks.ensure_format("birth_date", payload.birth_date)
    checks.ensure_format("password", payload.password)
    checks.ensure_format("cpf", payload.cpf)
    checks.ensure_format("username", payload.username)
    checks.ensure_format("phone_number", payload.phone_number)
    checks.ensure_format("email", email)

    professional = professional_repository.create_professional(
        name=payload.name.strip(),
        username=payload.username,
        email=email,
        cpf=cpf,
        birth_date=parse_birth_date(payload.birth_date),
        password_hash=security.hash_password(payload.password),
        bio=payload.bio,
        phone_number=payload.phone_number,
        pro_registration=payload.pro_registration,
    )
    logger.info(
        "Professional registered",
        extra={"professional_id": professional.id, "user_id": professional.user_id},
    )
    return professional


def list_professionals() -> List[Professional]:
    return professional_repository.list_professionals()


def get_professional(professional_id: int) -> Professional:
    professional = professional_repository.get_professional_by_id(professional_id)
    if professional is None:
        raise NotFoundError(NOT_FOUND_MESSAGE)
    return professional


def get_professional_for_user(user_id: int) -> Professional:
    professional = professional_repository.get_professional_by_user_id(user_id)
    if professional is None:
        raise NotFoundError(NOT_FOUND_MESSAGE)
    return professional


def update_professional(
    actor: Identity, professional_id: int, payload: ProfessionalUpdate
) -> Professional:
    professional = get_professional(professional_id)
    ensure_can_manage(actor, professional.user_id)

    user_patch = checks.prepare_user_patch(
        professional.user,
        name=payload.name,
        username=payload.username,
        email=payload.email,
    )
    phone_number = payload.phone_number or None
    if phone_number and phone_number != professional.phone_number:
        checks.ensure_format("phone_number", phone_number)
        checks.ensure_unique_professional_fields(
            phone_number=phone_number, exclude_professional_id=professional.id
        )

    patch = ProfessionalPatch(user=user_patch, bio=payload.bio or None, phone_number=phone_number)
    if not patch.changes(professional) and not user_patch.changes(professional.user):
        return professional

    saved = professional_repository.save_professional(patch.apply(professional))
    if saved is None:
        raise NotFoundError(NOT_FOUND_MESSAGE)
    logger.info(
        "Professional updated",
        extra={"professional_id": professional.id, "actor_id": actor.id},
    )
    return saved


def delete_professional(actor: Identity, professional_id: int) -> None:
    professional = get_professional(professional_id)
    ensure_can_manage(actor, professional.user_id)
    professional_repository.delete_professional(professional)
    logger.info(
        "Professional deleted",
        extra={"professional_id": professional.id, "user_id": professional.user_id, "actor_id": actor.id},
    )
