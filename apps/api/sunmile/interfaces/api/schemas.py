from datetime import date, datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field

# Request models keep every field optional: presence is checked by the
# services so a missing field answers 400 with a readable message.


class UserCreate(BaseModel):
    name: Optional[str] = None
    username: Optional[str] = None
    email: Optional[str] = None
    cpf: Optional[str] = None
    birth_date: Optional[str] = None
    password: Optional[str] = None


class UserUpdate(BaseModel):
    name: Optional[str] = None
    username: Optional[str] = None
    email: Optional[str] = None


class AvatarUpdate(BaseModel):
    profile_pic_url: Optional[str] = None


class PasswordChange(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    current_password: Optional[str] = Field(default=None, alias="currentPassword")
    new_password: Optional[str] = Field(default=None, alias="newPassword")


class ProfessionalCreate(UserCreate):
    phone_number: Optional[str] = None
    pro_registration: Optional[str] = None
    bio: Optional[str] = None


class ProfessionalUpdate(UserUpdate):
    bio: Optional[str] = None
    phone_number: Optional[str] = None


class ProPostCreate(BaseModel):
    title: Optional[str] = None
    content: Optional[str] = None
    # Shape (list of strings) is checked by the service.
    image_urls: Optional[Any] = None


class ProPostUpdate(ProPostCreate):
    pass


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class LoginResponse(BaseModel):
    message: str = "Login realizado com sucesso"
    token: str
    token_type: str = "bearer"


class MessageResponse(BaseModel):
    message: str


class ProfessionalSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    bio: Optional[str] = None
    phone_number: str
    pro_registration: str


class UserPublic(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    username: str
    email: str
    cpf: str
    birth_date: date
    role: str
    profile_pic_url: Optional[str] = None
    professional: Optional[ProfessionalSummary] = None


class ProfessionalPublic(ProfessionalSummary):
    user_id: int
    user: Optional[UserPublic] = None


class ProPostPublic(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    professional_id: int
    title: str
    content: str
    image_urls: List[str] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    professional: Optional[ProfessionalPublic] = None
