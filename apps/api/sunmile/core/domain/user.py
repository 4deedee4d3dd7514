from dataclasses import dataclass
from datetime import date
from typing import Optional

ROLE_USER = "user"
ROLE_PRO = "pro"
ROLE_ADMIN = "admin"
ROLES = (ROLE_USER, ROLE_PRO, ROLE_ADMIN)


@dataclass
class User:
    id: int
    name: str
    username: str
    email: str
    cpf: str
    birth_date: date
    password_hash: str
    role: str
    profile_pic_url: Optional[str] = None
