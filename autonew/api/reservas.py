"""예약 라우터 — 서비스/업체 검색, 시간대 조회, 고객 예약 수명주기.

Reservations Router — Public catalog and slot lookups, and the customer
side of the booking lifecycle: create, list, cancel, reschedule, recover
an expired booking, and complete by scanning the business QR.
"""

from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from autonew.api.deps import get_current_user
from autonew.database import get_db
from autonew.models.user import User
from autonew.schemas.catalog import BusinessMatch, CatalogServiceResponse
from autonew.schemas.common import ApiResponse
from autonew.schemas.reservation import (
    QrCompletion,
    QrVerifyRequest,
    RecoverRequest,
    RecoveryQuote,
    RecoveryResult,
    ReservationCreate,
    ReservationResponse,
    RescheduleRequest,
    RescheduleResult,
    SlotAvailability,
)
from autonew.schemas.subscription import SubscriptionCheck
from autonew.services.availability_service import availability_service
from autonew.services.catalog_service import catalog_service
from autonew.services.reservation_service import reservation_service
from autonew.services.subscription_service import subscription_service
from autonew.utils.clock import Clock, get_clock
from autonew.utils.exceptions import BadRequestError

router: APIRouter = APIRouter()

DbSession = Annotated[AsyncSession, Depends(get_db)]
CurrentUser = Annotated[User, Depends(get_current_user)]
CurrentClock = Annotated[Clock, Depends(get_clock)]


def _parse_ids(raw: str) -> list[int]:
    """"1,2,3" 형식의 ID 목록 파싱 (Comma-separated id list)."""
    try:
        return [int(part) for part in raw.split(",") if part.strip()]
    except ValueError:
        raise BadRequestError("Lista de servicios inválida")


# === 공개 조회 (Public lookups) ===


@router.get("/servicios", response_model=ApiResponse[list[CatalogServiceResponse]])
async def list_services(db: DbSession) -> ApiResponse[list[CatalogServiceResponse]]:
    """전체 서비스 목록, 가격순 (All services by price)."""
    return ApiResponse(data=await catalog_service.list_services(db))


@router.get("/empresas-por-servicios", response_model=ApiResponse[list[BusinessMatch]])
async def businesses_for_services(
    db: DbSession,
    servicios: Annotated[str, Query()] = "",
) -> ApiResponse[list[BusinessMatch]]:
    """요청 서비스를 모두 제공하는 검증 업체 (``servicios=1,2,3``).

    Verified businesses offering every requested service.
    """
    return ApiResponse(data=await catalog_service.businesses_offering_all(db, _parse_ids(servicios)))


@router.get("/horarios-disponibles", response_model=ApiResponse[SlotAvailability])
async def available_slots(
    db: DbSession,
    clock: CurrentClock,
    empresaId: Annotated[int, Query()],
    fecha: Annotated[date, Query()],
) -> ApiResponse[SlotAvailability]:
    """업체의 하루 시간대 현황 (Hourly slot grid of a business)."""
    return ApiResponse(data=await availability_service.available_slots(db, empresaId, fecha, clock.now()))


# === 고객 예약 (Customer bookings) ===


@router.get("/verificar-suscripcion", response_model=ApiResponse[SubscriptionCheck])
async def check_subscription(db: DbSession, current_user: CurrentUser, clock: CurrentClock) -> ApiResponse[SubscriptionCheck]:
    """예약 화면용 구독 확인 (Subscription check for the booking screen)."""
    result: SubscriptionCheck = await subscription_service.check_subscription(db, current_user, clock.now())
    await db.commit()
    return ApiResponse(data=result)


@router.post("/crear", response_model=ApiResponse[ReservationResponse], status_code=status.HTTP_201_CREATED)
async def create_reservation(
    data: ReservationCreate,
    db: DbSession,
    current_user: CurrentUser,
    clock: CurrentClock,
) -> ApiResponse[ReservationResponse]:
    """예약 생성 — 구독 한도 사용, 번호 발급, 항목 가격 책정을 한 트랜잭션으로.

    Create a reservation. Quota use, the reservation row and its lines
    are committed together or not at all.
    """
    result: ReservationResponse = await reservation_service.create(db, current_user, data, clock.now())
    await db.commit()
    return ApiResponse(message="Reserva creada exitosamente", data=result)


@router.get("/usuario/{usuario_id}", response_model=ApiResponse[list[ReservationResponse]])
async def list_user_reservations(
    usuario_id: int,
    db: DbSession,
    current_user: CurrentUser,
    clock: CurrentClock,
    estado: Annotated[str | None, Query()] = None,
) -> ApiResponse[list[ReservationResponse]]:
    """고객 예약 목록 — 지난 예약은 먼저 만료 처리.

    The customer's reservations, after overdue ones are marked expired.
    """
    result = await reservation_service.list_for_user(db, current_user, usuario_id, estado, clock.now())
    await db.commit()
    return ApiResponse(data=result)


@router.get("/por-numero/{numero_reserva}", response_model=ApiResponse[ReservationResponse])
async def get_by_code(
    numero_reserva: str,
    db: DbSession,
    current_user: CurrentUser,
    clock: CurrentClock,
) -> ApiResponse[ReservationResponse]:
    result: ReservationResponse = await reservation_service.get_by_code(db, current_user, numero_reserva, clock.now())
    await db.commit()
    return ApiResponse(data=result)


@router.put("/cancelar/{reserva_id}", response_model=ApiResponse[ReservationResponse])
async def cancel_reservation(
    reserva_id: int,
    db: DbSession,
    current_user: CurrentUser,
    clock: CurrentClock,
) -> ApiResponse[ReservationResponse]:
    result: ReservationResponse = await reservation_service.cancel(db, current_user, reserva_id, clock.now())
    await db.commit()
    return ApiResponse(message="Reserva cancelada exitosamente", data=result)


@router.put("/reagendar/{reserva_id}", response_model=ApiResponse[RescheduleResult])
async def reschedule_reservation(
    reserva_id: int,
    data: RescheduleRequest,
    db: DbSession,
    current_user: CurrentUser,
    clock: CurrentClock,
) -> ApiResponse[RescheduleResult]:
    """예약 일정 변경 (Move an open reservation to a free slot)."""
    result: RescheduleResult = await reservation_service.reschedule(db, current_user, reserva_id, data, clock.now())
    await db.commit()
    return ApiResponse(message="Reserva reagendada exitosamente", data=result)


@router.get("/recargo-recuperacion/{reserva_id}", response_model=ApiResponse[RecoveryQuote])
async def recovery_quote(
    reserva_id: int,
    db: DbSession,
    current_user: CurrentUser,
    clock: CurrentClock,
) -> ApiResponse[RecoveryQuote]:
    """만료 예약 복구 수수료 견적 (Recovery surcharge quote)."""
    result: RecoveryQuote = await reservation_service.recovery_quote(db, current_user, reserva_id, clock.now())
    await db.commit()
    return ApiResponse(data=result)


@router.put("/recuperar-vencida/{reserva_id}", response_model=ApiResponse[RecoveryResult])
async def recover_reservation(
    reserva_id: int,
    data: RecoverRequest,
    db: DbSession,
    current_user: CurrentUser,
    clock: CurrentClock,
) -> ApiResponse[RecoveryResult]:
    """수수료 결제 후 만료 예약 복구 (Recover an expired booking after payment)."""
    result: RecoveryResult = await reservation_service.recover(db, current_user, reserva_id, data, clock.now())
    await db.commit()
    return ApiResponse(message="Reserva recuperada exitosamente", data=result)


@router.post("/verificar-qr", response_model=ApiResponse[QrCompletion])
async def verify_qr(
    data: QrVerifyRequest,
    db: DbSession,
    current_user: CurrentUser,
    clock: CurrentClock,
) -> ApiResponse[QrCompletion]:
    """업체 QR 스캔으로 당일 예약 완료 (Complete today's booking by QR)."""
    result: QrCompletion = await reservation_service.complete_by_qr(db, current_user, data, clock.now())
    await db.commit()
    return ApiResponse(message="Reserva completada exitosamente", data=result)
