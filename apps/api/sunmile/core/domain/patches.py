"""
Partial updates expressed as values.

A patch never mutates the record it is applied to: ``apply`` returns a new
record with only the supplied, actually-different fields replaced, so a
failure between validation and persistence leaves the fetched record
untouched.
"""

from dataclasses import dataclass, field, fields, replace
from typing import Any, Dict, List, Optional

from sunmile.core.domain.pro_post import ProPost
from sunmile.core.domain.professional import Professional
from sunmile.core.domain.user import User


def _changes(patch: Any, current: Any, names: List[str]) -> Dict[str, Any]:
    changed = {}
    for name in names:
        value = getattr(patch, name)
        if value is not None and getattr(current, name) != value:
            changed[name] = value
    return changed


@dataclass(frozen=True)
class UserPatch:
    name: Optional[str] = None
    username: Optional[str] = None
    email: Optional[str] = None
    profile_pic_url: Optional[str] = None
    password_hash: Optional[str] = None

    def changes(self, current: User) -> Dict[str, Any]:
        return _changes(self, current, [f.name for f in fields(self)])

    def apply(self, current: User) -> User:
        return replace(current, **self.changes(current))


@dataclass(frozen=True)
class ProfessionalPatch:
    user: UserPatch = field(default_factory=UserPatch)
    bio: Optional[str] = None
    phone_number: Optional[str] = None

    def changes(self, current: Professional) -> Dict[str, Any]:
        return _changes(self, current, ["bio", "phone_number"])

    def apply(self, current: Professional) -> Professional:
        user = self.user.apply(current.user) if current.user is not None else None
        return replace(current, user=user, **self.changes(current))


@dataclass(frozen=True)
class ProPostPatch:
    title: Optional[str] = None
    content: Optional[str] = None
    image_urls: Optional[List[str]] = None

    def changes(self, current: ProPost) -> Dict[str, Any]:
        changed = _changes(self, current, ["title", "content", "image_urls"])
        if "image_urls" in changed:
            changed["image_urls"] = list(changed["image_urls"])
        return changed

    def apply(self, current: ProPost) -> ProPost:
        return replace(current, **self.changes(current))
