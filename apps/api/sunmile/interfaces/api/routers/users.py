from typing import List

from fastapi import APIRouter, Depends, status

from sunmile.application import user_service
from sunmile.core.domain.auth import Identity
from sunmile.interfaces.api.routers.auth import get_current_user
from sunmile.interfaces.api.schemas import (
    AvatarUpdate,
    MessageResponse,
    PasswordChange,
    UserCreate,
    UserPublic,
    UserUpdate,
)

router = APIRouter(tags=["users"])


@router.get("/users", response_model=List[UserPublic])
def list_users() -> List[UserPublic]:
    return [UserPublic.model_validate(u) for u in user_service.list_users()]


@router.post("/users", response_model=UserPublic, status_code=status.HTTP_201_CREATED)
def create_user(payload: UserCreate) -> UserPublic:
    return UserPublic.model_validate(user_service.register_user(payload))


@router.patch("/users/me/avatar", response_model=UserPublic)
def update_avatar(
    payload: AvatarUpdate, current_user: Identity = Depends(get_current_user)
) -> UserPublic:
    return UserPublic.model_validate(user_service.update_avatar(current_user, payload))


@router.patch("/users/change-password", response_model=MessageResponse)
def change_password(
    payload: PasswordChange, current_user: Identity = Depends(get_current_user)
) -> MessageResponse:
    user_service.change_password(current_user, payload)
    return MessageResponse(message="Senha alterada com sucesso")


@router.get("/users/{user_id}", response_model=UserPublic)
def get_user(user_id: int) -> UserPublic:
    return UserPublic.model_validate(user_service.get_user(user_id))


@router.put("/users/{user_id}", response_model=UserPublic)
def update_user(
    user_id: int,
    payload: UserUpdate,
    current_user: Identity = Depends(get_current_user),
) -> UserPublic:
    return UserPublic.model_validate(user_service.update_user(current_user, user_id, payload))


@router.delete("/users/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(user_id: int, current_user: Identity = Depends(get_current_user)) -> None:
    user_service.delete_user(current_user, user_id)
