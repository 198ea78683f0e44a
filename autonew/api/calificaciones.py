"""평가 라우터 — 완료 예약 평가 생성 및 조회.

Ratings Router — Rate a completed reservation and read its rating.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from autonew.api.deps import Principal, get_current_principal, get_current_user
from autonew.database import get_db
from autonew.models.user import User
from autonew.schemas.common import ApiResponse
from autonew.schemas.rating import RatingCreate, RatingResponse
from autonew.services.rating_service import rating_service

router: APIRouter = APIRouter()


@router.post("/crear", response_model=ApiResponse[RatingResponse], status_code=status.HTTP_201_CREATED)
async def create_rating(
    data: RatingCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> ApiResponse[RatingResponse]:
    """완료된 본인 예약 평가 — 예약당 1회.

    Rate one of the customer's completed reservations, once.
    """
    result: RatingResponse = await rating_service.create(db, current_user, data)
    await db.commit()
    return ApiResponse(message="Calificación enviada exitosamente", data=result)


@router.get("/reserva/{reserva_id}", response_model=ApiResponse[RatingResponse])
async def rating_for_reservation(
    reserva_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
    _principal: Annotated[Principal, Depends(get_current_principal)],
) -> ApiResponse[RatingResponse]:
    """예약의 평가 — 아직 없으면 data=null (Null when not rated yet)."""
    return ApiResponse(data=await rating_service.for_reservation(db, reserva_id))
