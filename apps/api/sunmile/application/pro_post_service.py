import logging
from typing import Any, List, Optional

from sunmile.application.access import ensure_can_manage
from sunmile.core.domain.auth import Identity
from sunmile.core.domain.errors import AuthorizationError, NotFoundError, ValidationError
from sunmile.core.domain.patches import ProPostPatch
from sunmile.core.domain.pro_post import ProPost
from sunmile.infrastructure.db import pro_post_repository, professional_repository
from sunmile.interfaces.api.schemas import ProPostCreate, ProPostUpdate

logger = logging.getLogger("pro_posts")

NOT_FOUND_MESSAGE = "Post profissional não encontrado"


def _image_urls(value: Any) -> Optional[List[str]]:
    if value is None:
        return None
    if not isinstance(value, list) or not all(isinstance(url, str) for url in value):
        raise ValidationError("image_urls deve ser uma lista de URLs")
    return list(value)


def _owner_user_id(post: ProPost) -> int:
    professional = post.professional
    if professional is None:
        professional = professional_repository.get_professional_by_id(post.professional_id)
    if professional is None:
        raise NotFoundError(NOT_FOUND_MESSAGE)
    return professional.user_id


def list_posts() -> List[ProPost]:
    return pro_post_repository.list_posts()


def get_post(post_id: int) -> ProPost:
    post = pro_post_repository.get_post_by_id(post_id)
    if post is None:
        raise NotFoundError(NOT_FOUND_MESSAGE)
    return post


def create_post(actor: Identity, payload: ProPostCreate) -> ProPost:
    title = (payload.title or "").strip()
    content = (payload.content or "").strip()
    if not title or not content:
        raise ValidationError("Título e conteúdo são obrigatórios")
    image_urls = _image_urls(payload.image_urls) or []

    professional = professional_repository.get_professional_by_user_id(actor.id)
    if professional is None:
        raise AuthorizationError("Apenas profissionais podem criar posts")

    post = pro_post_repository.create_post(
        professional_id=professional.id,
        title=title,
        content=content,
        image_urls=image_urls,
    )
    logger.info(
        "Post created", extra={"post_id": post.id, "professional_id": professional.id}
    )
    return post


def update_post(actor: Identity, post_id: int, payload: ProPostUpdate) -> ProPost:
    post = get_post(post_id)
    ensure_can_manage(actor, _owner_user_id(post))

    for value in (payload.title, payload.content):
        if value is not None and not value.strip():
            raise ValidationError("Título e conteúdo não podem ficar vazios")
    patch = ProPostPatch(
        title=payload.title.strip() if payload.title is not None else None,
        content=payload.content.strip() if payload.content is not None else None,
        image_urls=_image_urls(payload.image_urls),
    )
    if not patch.changes(post):
        return post

    saved = pro_post_repository.save_post(patch.apply(post))
    if saved is None:
        raise NotFoundError(NOT_FOUND_MESSAGE)
    logger.info("Post updated", extra={"post_id": post.id, "actor_id": actor.id})
    return saved


def delete_post(actor: Identity, post_id: int) -> None:
    post = get_post(post_id)
    ensure_can_manage(actor, _owner_user_id(post))
    if not pro_post_repository.delete_post(post.id):
        raise NotFoundError(NOT_FOUND_MESSAGE)
    logger.info("Post deleted", extra={"post_id": post.id, "actor_id": actor.id})
