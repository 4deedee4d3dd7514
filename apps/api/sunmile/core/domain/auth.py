from dataclasses import dataclass

from sunmile.core.domain.user import ROLE_ADMIN


@dataclass(frozen=True)
class Identity:
    """Caller attached to a request once its bearer token is verified."""

    id: int
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN
