from typing import List

from fastapi import APIRouter, Depends, status

from sunmile.application import pro_post_service
from sunmile.core.domain.auth import Identity
from sunmile.interfaces.api.routers.auth import get_current_user
from sunmile.interfaces.api.schemas import ProPostCreate, ProPostPublic, ProPostUpdate

router = APIRouter(tags=["pro-posts"])


@router.get("/pro-posts", response_model=List[ProPostPublic])
def list_posts() -> List[ProPostPublic]:
    return [ProPostPublic.model_validate(p) for p in pro_post_service.list_posts()]


@router.get("/pro-posts/{post_id}", response_model=ProPostPublic)
def get_post(post_id: int) -> ProPostPublic:
    return ProPostPublic.model_validate(pro_post_service.get_post(post_id))


@router.post("/pro-posts", response_model=ProPostPublic, status_code=status.HTTP_201_CREATED)
def create_post(
    payload: ProPostCreate, current_user: Identity = Depends(get_current_user)
) -> ProPostPublic:
    return ProPostPublic.model_validate(pro_post_service.create_post(current_user, payload))


@router.put("/pro-posts/{post_id}", response_model=ProPostPublic)
def update_post(
    post_id: int,
    payload: ProPostUpdate,
    current_user: Identity = Depends(get_current_user),
) -> ProPostPublic:
    return ProPostPublic.model_validate(
        pro_post_service.update_post(current_user, post_id, payload)
    )


@router.delete("/pro-posts/{post_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_post(post_id: int, current_user: Identity = Depends(get_current_user)) -> None:
    pro_post_service.delete_post(current_user, post_id)
