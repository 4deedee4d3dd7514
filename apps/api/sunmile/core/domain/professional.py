from dataclasses import dataclass
from typing import Optional

from sunmile.core.domain.user import User


@dataclass
class Professional:
    id: int
    user_id: int
    bio: Optional[str]
    phone_number: str
    pro_registration: str
    user: Optional[User] = None
