import copy
import importlib
import itertools
import os
import sys
from pathlib import Path

import pytest

# Ensure apps/api is on path for imports inside the API package (e.g., `sunmile.interfaces.api.schemas`).
ROOT = Path(__file__).resolve().parents[1]
API_PATH = ROOT / "apps" / "api"
if str(API_PATH) not in sys.path:
    sys.path.insert(0, str(API_PATH))

# Security settings are read at import time.
os.environ.setdefault("JWT_SECRET", "sunmile-test-secret-" * 3)
os.environ.setdefault("APP_ENV", "test")

from sunmile.core.domain.errors import ConflictError  # noqa: E402
from sunmile.core.domain.pro_post import ProPost  # noqa: E402
from sunmile.core.domain.professional import Professional  # noqa: E402
from sunmile.core.domain.user import ROLE_PRO, ROLE_USER, User  # noqa: E402


class FakeStore:
    """
    In-memory stand-in for the three repositories. Mirrors their contracts:
    unique constraints raise ConflictError, deletes cascade, reads return
    detached copies with joined owners.
    """

    def __init__(self):
        self.users = {}
        self.professionals = {}
        self.posts = {}
        self._ids = itertools.count(1)

    # -- helpers -----------------------------------------------------
    def _check_user_unique(self, email, username, cpf, exclude_id=None):
        for u in self.users.values():
            if u.id == exclude_id:
                continue
            if u.email == email:
                raise ConflictError.for_field("email")
            if u.username == username:
                raise ConflictError.for_field("username")
            if u.cpf == cpf:
                raise ConflictError.for_field("cpf")

    def _check_pro_unique(self, phone_number, pro_registration, exclude_id=None):
        for p in self.professionals.values():
            if p.id == exclude_id:
                continue
            if p.phone_number == phone_number:
                raise ConflictError.for_field("phone_number")
            if p.pro_registration == pro_registration:
                raise ConflictError.for_field("pro_registration")

    def _joined_pro(self, pro):
        joined = copy.deepcopy(pro)
        joined.user = copy.deepcopy(self.users.get(pro.user_id))
        return joined

    def _joined_post(self, post):
        joined = copy.deepcopy(post)
        joined.professional = self._joined_pro(self.professionals[post.professional_id])
        return joined

    # -- users ---------------------------------------------------------
    def create_user(self, *, name, username, email, cpf, birth_date, password_hash, role=ROLE_USER):
        email = email.lower()
        self._check_user_unique(email, username, cpf)
        user = User(
            id=next(self._ids),
            name=name,
            username=username,
            email=email,
            cpf=cpf,
            birth_date=birth_date,
            password_hash=password_hash,
            role=role,
        )
        self.users[user.id] = user
        return copy.deepcopy(user)

    def get_user_by_id(self, user_id):
        user = self.users.get(user_id)
        return copy.deepcopy(user) if user else None

    def _find_user(self, **criteria):
        for u in self.users.values():
            if all(getattr(u, k) == v for k, v in criteria.items()):
                return copy.deepcopy(u)
        return None

    def get_user_by_email(self, email):
        return self._find_user(email=email.lower())

    def get_user_by_username(self, username):
        return self._find_user(username=username)

    def get_user_by_cpf(self, cpf):
        return self._find_user(cpf=cpf)

    def list_users(self):
        return [copy.deepcopy(u) for _, u in sorted(self.users.items())]

    def save_user(self, user):
        if user.id not in self.users:
            return None
        self._check_user_unique(user.email.lower(), user.username, user.cpf, exclude_id=user.id)
        self.users[user.id] = copy.deepcopy(user)
        return copy.deepcopy(user)

    def delete_user(self, user_id):
        if self.users.pop(user_id, None) is None:
            return False
        for pro in [p for p in self.professionals.values() if p.user_id == user_id]:
            del self.professionals[pro.id]
            for post in [x for x in self.posts.values() if x.professional_id == pro.id]:
                del self.posts[post.id]
        return True

    # -- professionals -----------------------------------------------
    def create_professional(self, *, name, username, email, cpf, birth_date, password_hash,
                            bio, phone_number, pro_registration):
        self._check_user_unique(email.lower(), username, cpf)
        self._check_pro_unique(phone_number, pro_registration)
        user = self.create_user(
            name=name, username=username, email=email, cpf=cpf,
            birth_date=birth_date, password_hash=password_hash, role=ROLE_PRO,
        )
        pro = Professional(
            id=next(self._ids),
            user_id=user.id,
            bio=bio,
            phone_number=phone_number,
            pro_registration=pro_registration,
        )
        self.professionals[pro.id] = pro
        return self._joined_pro(pro)

    def _find_pro(self, **criteria):
        for p in self.professionals.values():
            if all(getattr(p, k) == v for k, v in criteria.items()):
                return self._joined_pro(p)
        return None

    def get_professional_by_id(self, professional_id):
        return self._find_pro(id=professional_id)

    def get_professional_by_user_id(self, user_id):
        return self._find_pro(user_id=user_id)

    def get_professional_by_phone(self, phone_number):
        return self._find_pro(phone_number=phone_number)

    def get_professional_by_registration(self, pro_registration):
        return self._find_pro(pro_registration=pro_registration)

    def list_professionals(self):
        return [self._joined_pro(p) for _, p in sorted(self.professionals.items())]

    def save_professional(self, professional):
        if professional.id not in self.professionals:
            return None
        self._check_pro_unique(
            professional.phone_number, professional.pro_registration, exclude_id=professional.id
        )
        if professional.user is not None:
            self.save_user(professional.user)
        stored = copy.deepcopy(professional)
        stored.user = None
        self.professionals[professional.id] = stored
        return self._joined_pro(stored)

    def delete_professional(self, professional):
        return self.delete_user(professional.user_id)

    # -- posts -----------------------------------------------------------
    def create_post(self, *, professional_id, title, content, image_urls):
        post = ProPost(
            id=next(self._ids),
            professional_id=professional_id,
            title=title,
            content=content,
            image_urls=list(image_urls),
        )
        self.posts[post.id] = post
        return self._joined_post(post)

    def get_post_by_id(self, post_id):
        post = self.posts.get(post_id)
        return self._joined_post(post) if post else None

    def list_posts(self):
        return [self._joined_post(p) for _, p in sorted(self.posts.items())]

    def save_post(self, post):
        if post.id not in self.posts:
            return None
        stored = copy.deepcopy(post)
        stored.professional = None
        self.posts[post.id] = stored
        return self._joined_post(stored)

    def delete_post(self, post_id):
        return self.posts.pop(post_id, None) is not None

    # -- wiring ----------------------------------------------------------
    def install(self, monkeypatch):
        user_repository = importlib.import_module("sunmile.infrastructure.db.user_repository")
        professional_repository = importlib.import_module(
            "sunmile.infrastructure.db.professional_repository"
        )
        pro_post_repository = importlib.import_module(
            "sunmile.infrastructure.db.pro_post_repository"
        )
        for name in (
            "create_user", "get_user_by_id", "get_user_by_email", "get_user_by_username",
            "get_user_by_cpf", "list_users", "save_user", "delete_user",
        ):
            monkeypatch.setattr(user_repository, name, getattr(self, name))
        for name in (
            "create_professional", "get_professional_by_id", "get_professional_by_user_id",
            "get_professional_by_phone", "get_professional_by_registration",
            "list_professionals", "save_professional", "delete_professional",
        ):
            monkeypatch.setattr(professional_repository, name, getattr(self, name))
        for name in ("create_post", "get_post_by_id", "list_posts", "save_post", "delete_post"):
            monkeypatch.setattr(pro_post_repository, name, getattr(self, name))
        for module in (user_repository, professional_repository, pro_post_repository):
            monkeypatch.setattr(module, "ensure_table", lambda: None)


def cpf_from_base(base: str) -> str:
    """Append the two modulo-11 check digits to a 9-digit base."""
    digits = [int(d) for d in base]
    for _ in range(2):
        weight = len(digits) + 1
        total = sum(d * (weight - i) for i, d in enumerate(digits))
        rest = total % 11
        digits.append(0 if rest < 2 else 11 - rest)
    return "".join(str(d) for d in digits)


@pytest.fixture
def store(monkeypatch):
    fake = FakeStore()
    fake.install(monkeypatch)
    return fake


@pytest.fixture
def make_cpf():
    counter = itertools.count(123456780)
    return lambda: cpf_from_base(str(next(counter)))


@pytest.fixture
def user_payload(make_cpf):
    counter = itertools.count(1)

    def build(**overrides):
        n = next(counter)
        payload = {
            "name": f"Maria Silva {n}",
            "username": f"maria.silva_{n}",
            "email": f"maria{n}@example.com",
            "cpf": make_cpf(),
            "birth_date": "1990-05-20",
            "password": "Senha@123",
        }
        payload.update(overrides)
        return payload

    return build


@pytest.fixture
def professional_payload(user_payload):
    counter = itertools.count(10)

    def build(**overrides):
        n = next(counter)
        payload = user_payload(
            phone_number=f"(11) 9{n:04d}-{n:04d}",
            pro_registration=f"CRO-SP {n:05d}",
            bio="Dentista",
        )
        payload.update(overrides)
        return payload

    return build
