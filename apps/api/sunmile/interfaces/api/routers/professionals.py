from typing import List

from fastapi import APIRouter, Depends, status

from sunmile.application import professional_service
from sunmile.core.domain.auth import Identity
from sunmile.interfaces.api.routers.auth import get_current_user
from sunmile.interfaces.api.schemas import (
    ProfessionalCreate,
    ProfessionalPublic,
    ProfessionalUpdate,
)

router = APIRouter(tags=["professionals"])


@router.get("/professionals", response_model=List[ProfessionalPublic])
def list_professionals() -> List[ProfessionalPublic]:
    return [
        ProfessionalPublic.model_validate(p)
        for p in professional_service.list_professionals()
    ]


@router.post(
    "/professionals",
    response_model=ProfessionalPublic,
    status_code=status.HTTP_201_CREATED,
)
def create_professional(payload: ProfessionalCreate) -> ProfessionalPublic:
    return ProfessionalPublic.model_validate(
        professional_service.register_professional(payload)
    )


@router.get("/professionals/{professional_id}", response_model=ProfessionalPublic)
def get_professional(professional_id: int) -> ProfessionalPublic:
    return ProfessionalPublic.model_validate(
        professional_service.get_professional(professional_id)
    )


# /pro/{id} is the path the profile page submits to.
@router.put("/pro/{professional_id}", response_model=ProfessionalPublic, include_in_schema=False)
@router.put("/professionals/{professional_id}", response_model=ProfessionalPublic)
def update_professional(
    professional_id: int,
    payload: ProfessionalUpdate,
    current_user: Identity = Depends(get_current_user),
) -> ProfessionalPublic:
    return ProfessionalPublic.model_validate(
        professional_service.update_professional(current_user, professional_id, payload)
    )


@router.delete("/professionals/{professional_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_professional(
    professional_id: int, current_user: Identity = Depends(get_current_user)
) -> None:
    professional_service.delete_professional(current_user, professional_id)
