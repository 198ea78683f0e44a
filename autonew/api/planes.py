"""요금제 라우터 — 요금제 조회, 구독 가입/해지, 내 구독.

Plans Router — Public plan catalog, and the customer's subscription:
subscribe, current subscription, history and cancel.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from autonew.api.deps import get_current_user
from autonew.database import get_db
from autonew.models.user import User
from autonew.schemas.common import ApiResponse
from autonew.schemas.subscription import (
    ActiveSubscriptionResponse,
    PlanResponse,
    SubscribeRequest,
    SubscribeResult,
    SubscriptionHistoryItem,
)
from autonew.services.subscription_service import subscription_service
from autonew.utils.clock import Clock, get_clock

router: APIRouter = APIRouter()


@router.get("/disponibles", response_model=ApiResponse[list[PlanResponse]])
async def list_plans(db: Annotated[AsyncSession, Depends(get_db)]) -> ApiResponse[list[PlanResponse]]:
    """활성 요금제와 포함 서비스 (Active plans with included services)."""
    return ApiResponse(data=await subscription_service.list_plans(db))


@router.get("/mi-suscripcion/activa", response_model=ApiResponse[ActiveSubscriptionResponse])
async def my_active_subscription(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
    clock: Annotated[Clock, Depends(get_clock)],
) -> ApiResponse[ActiveSubscriptionResponse]:
    """현재 활성 구독 — 없으면 data=null.

    The current subscription after the monthly quota reset, or null.
    """
    result = await subscription_service.active_subscription(db, current_user, clock.now())
    await db.commit()
    if result is None:
        return ApiResponse(message="No tienes una suscripción activa", data=None)
    return ApiResponse(data=result)


@router.get("/mi-suscripcion/historial", response_model=ApiResponse[list[SubscriptionHistoryItem]])
async def my_subscription_history(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> ApiResponse[list[SubscriptionHistoryItem]]:
    return ApiResponse(data=await subscription_service.history(db, current_user))


@router.get("/{plan_id}", response_model=ApiResponse[PlanResponse])
async def get_plan(plan_id: int, db: Annotated[AsyncSession, Depends(get_db)]) -> ApiResponse[PlanResponse]:
    return ApiResponse(data=await subscription_service.get_plan(db, plan_id))


@router.post("/suscribirse", response_model=ApiResponse[SubscribeResult], status_code=status.HTTP_201_CREATED)
async def subscribe(
    data: SubscribeRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
    clock: Annotated[Clock, Depends(get_clock)],
) -> ApiResponse[SubscribeResult]:
    """요금제 가입 — 활성 구독이 있으면 409.

    Subscribe to a plan for 30 days.
    """
    result: SubscribeResult = await subscription_service.subscribe(db, current_user, data, clock.now())
    await db.commit()
    return ApiResponse(message="Suscripción creada exitosamente", data=result)


@router.put("/cancelar/{suscripcion_id}", response_model=ApiResponse[None])
async def cancel_subscription(
    suscripcion_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> ApiResponse[None]:
    await subscription_service.cancel(db, current_user, suscripcion_id)
    await db.commit()
    return ApiResponse(message="Suscripción cancelada. Podrás seguir usándola hasta la fecha de vencimiento.")
