from sunmile.core.domain.auth import Identity
from sunmile.core.domain.errors import AuthorizationError


def can_manage(actor: Identity, owner_user_id: int) -> bool:
    return actor.is_admin or actor.id == owner_user_id


def ensure_can_manage(actor: Identity, owner_user_id: int) -> None:
    """Admins manage anything; everyone else only what their user owns."""
    if not can_manage(actor, owner_user_id):
        raise AuthorizationError("Acesso negado")
