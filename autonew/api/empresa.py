"""업체 라우터 — 업체 예약 관리, 서비스 포트폴리오, 프로필, 정산 조회.

Business Router — Endpoints used by the business app: reservations and
their QR codes, the service portfolio and service requests, the business
profile, and the read-only payout ledger.
"""

from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends, File, Query, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from autonew.api.deps import get_current_business
from autonew.database import get_db
from autonew.models.business import Business
from autonew.schemas.auth import BusinessAuthData, BusinessLoginRequest, BusinessProfileResponse
from autonew.schemas.business import (
    BankingInfo,
    BusinessBasicUpdate,
    BusinessFullProfile,
    BusinessPasswordChange,
    BusinessPhotoResponse,
)
from autonew.schemas.catalog import BusinessServicesOverview, ServiceRequestCreate, ServiceRequestCreated, ServiceResponse
from autonew.schemas.common import ApiResponse
from autonew.schemas.payout import PayoutSummary, PeriodDetail, PeriodResponse, SettlementReservation
from autonew.schemas.reservation import BusinessReservationPage, BusinessStatusUpdate, QrPayload, ReservationResponse
from autonew.services.auth_service import auth_service
from autonew.services.business_profile_service import business_profile_service
from autonew.services.catalog_service import catalog_service
from autonew.services.payout_service import payout_service
from autonew.services.profile_service import profile_service
from autonew.services.reservation_service import reservation_service
from autonew.utils.clock import Clock, get_clock
from autonew.utils.exceptions import AppError

router: APIRouter = APIRouter()

DbSession = Annotated[AsyncSession, Depends(get_db)]
CurrentBusiness = Annotated[Business, Depends(get_current_business)]


# === 인증 (Auth) ===


@router.post("/login", response_model=ApiResponse[BusinessAuthData])
async def login(
    data: BusinessLoginRequest,
    db: DbSession,
    clock: Annotated[Clock, Depends(get_clock)],
) -> ApiResponse[BusinessAuthData]:
    """업체 로그인 (``/auth/empresa/login``과 동일)."""
    try:
        result: BusinessAuthData = await auth_service.login_business(db, data, clock.now())
    except AppError:
        await db.commit()
        raise
    await db.commit()
    return ApiResponse(message="Login exitoso", data=result)


@router.get("/profile", response_model=ApiResponse[BusinessProfileResponse])
async def get_profile(db: DbSession, business: CurrentBusiness) -> ApiResponse[BusinessProfileResponse]:
    return ApiResponse(data=await auth_service.get_business_profile(db, business))


# === 예약 (Reservations) ===


@router.get("/reservas", response_model=ApiResponse[BusinessReservationPage])
async def list_reservations(
    db: DbSession,
    business: CurrentBusiness,
    estado: Annotated[str | None, Query()] = None,
    fecha: Annotated[date | None, Query()] = None,
    pagina: Annotated[int, Query(ge=1)] = 1,
    limite: Annotated[int, Query(ge=1, le=100)] = 20,
) -> ApiResponse[BusinessReservationPage]:
    """업체 예약 목록 — 상태/날짜 필터, 페이지네이션.

    Paginated reservations of the business, newest first.
    """
    page: BusinessReservationPage = await reservation_service.list_for_business(
        db, business, estado, fecha, pagina, limite
    )
    return ApiResponse(data=page)


@router.put("/reservas/{reserva_id}/estado", response_model=ApiResponse[ReservationResponse])
async def update_reservation_status(
    reserva_id: int,
    data: BusinessStatusUpdate,
    db: DbSession,
    business: CurrentBusiness,
) -> ApiResponse[ReservationResponse]:
    """예약 완료/취소 처리 — 종료 상태에서는 409.

    Complete or cancel one of the business's reservations.
    """
    result: ReservationResponse = await reservation_service.update_status_by_business(
        db, business, reserva_id, data.estado
    )
    await db.commit()
    return ApiResponse(message="Estado actualizado correctamente", data=result)


@router.get("/reservas/{reserva_id}/qr", response_model=ApiResponse[QrPayload])
async def reservation_qr(reserva_id: int, db: DbSession, business: CurrentBusiness) -> ApiResponse[QrPayload]:
    """대기 중 예약의 QR 데이터 (QR payload of a pending reservation)."""
    return ApiResponse(data=await reservation_service.qr_payload(db, business, reserva_id))


# === 서비스 (Services) ===


@router.get("/servicios", response_model=ApiResponse[list[ServiceResponse]])
async def list_services(db: DbSession, business: CurrentBusiness) -> ApiResponse[list[ServiceResponse]]:
    return ApiResponse(data=await catalog_service.services_for_business(db, business.id_empresa))


@router.get("/servicios-completos", response_model=ApiResponse[BusinessServicesOverview])
async def services_overview(db: DbSession, business: CurrentBusiness) -> ApiResponse[BusinessServicesOverview]:
    """배정/미배정 서비스와 요청 이력 (Assigned, available and requests)."""
    return ApiResponse(data=await catalog_service.business_overview(db, business))


@router.post(
    "/servicios/solicitar",
    response_model=ApiResponse[ServiceRequestCreated],
    status_code=status.HTTP_201_CREATED,
)
async def request_service(
    data: ServiceRequestCreate,
    db: DbSession,
    business: CurrentBusiness,
) -> ApiResponse[ServiceRequestCreated]:
    """카탈로그 서비스 추가 요청 (Ask to offer a catalog service)."""
    result: ServiceRequestCreated = await catalog_service.request_service(db, business, data)
    await db.commit()
    return ApiResponse(message="Solicitud enviada exitosamente", data=result)


@router.delete("/servicios/solicitud/{solicitud_id}", response_model=ApiResponse[None])
async def cancel_service_request(solicitud_id: int, db: DbSession, business: CurrentBusiness) -> ApiResponse[None]:
    await catalog_service.cancel_request(db, business, solicitud_id)
    await db.commit()
    return ApiResponse(message="Solicitud cancelada exitosamente")


# === 프로필 (Profile) ===


@router.get("/perfil", response_model=ApiResponse[BusinessFullProfile])
async def get_full_profile(db: DbSession, business: CurrentBusiness) -> ApiResponse[BusinessFullProfile]:
    """계좌 정보와 통계를 포함한 업체 프로필 (Profile with banking and stats)."""
    return ApiResponse(data=await business_profile_service.get_full_profile(db, business))


@router.put("/perfil/basico", response_model=ApiResponse[BusinessFullProfile])
async def update_basic(
    data: BusinessBasicUpdate,
    db: DbSession,
    business: CurrentBusiness,
) -> ApiResponse[BusinessFullProfile]:
    result: BusinessFullProfile = await business_profile_service.update_basic(db, business, data)
    await db.commit()
    return ApiResponse(message="Perfil actualizado correctamente", data=result)


@router.put("/perfil/bancario", response_model=ApiResponse[BusinessFullProfile])
async def update_banking(
    data: BankingInfo,
    db: DbSession,
    business: CurrentBusiness,
) -> ApiResponse[BusinessFullProfile]:
    """계좌 정보 수정 — 관리자 재검증 대기 (Pending back-office verification)."""
    result: BusinessFullProfile = await business_profile_service.update_banking(db, business, data)
    await db.commit()
    return ApiResponse(
        message="Información bancaria actualizada correctamente. Pendiente de verificación por el administrador.",
        data=result,
    )


@router.put("/perfil/contrasena", response_model=ApiResponse[None])
async def change_password(
    data: BusinessPasswordChange,
    db: DbSession,
    business: CurrentBusiness,
) -> ApiResponse[None]:
    await business_profile_service.change_password(db, business, data)
    await db.commit()
    return ApiResponse(message="Contraseña actualizada correctamente")


@router.put("/perfil/foto", response_model=ApiResponse[BusinessPhotoResponse])
async def update_photo(
    db: DbSession,
    business: CurrentBusiness,
    profile_image: UploadFile = File(...),
) -> ApiResponse[BusinessPhotoResponse]:
    """업체 이미지 업로드 (form field ``profile_image``)."""
    content: bytes = await profile_image.read()
    url: str = await profile_service.replace_business_photo(
        db, business, content, profile_image.filename or "empresa.jpg", profile_image.content_type
    )
    await db.commit()
    return ApiResponse(message="Foto de perfil actualizada correctamente", data=BusinessPhotoResponse(profile_image=url))


@router.delete("/perfil/foto", response_model=ApiResponse[None])
async def delete_photo(db: DbSession, business: CurrentBusiness) -> ApiResponse[None]:
    await profile_service.delete_business_photo(db, business)
    await db.commit()
    return ApiResponse(message="Foto de perfil eliminada correctamente")


# === 정산 (Payouts) ===


@router.get("/pagos/resumen", response_model=ApiResponse[PayoutSummary])
async def payout_summary(db: DbSession, business: CurrentBusiness) -> ApiResponse[PayoutSummary]:
    return ApiResponse(data=await payout_service.summary(db, business))


@router.get("/pagos/periodos", response_model=ApiResponse[list[PeriodResponse]])
async def list_periods(
    db: DbSession,
    business: CurrentBusiness,
    estado: Annotated[str | None, Query()] = None,
) -> ApiResponse[list[PeriodResponse]]:
    """정산 기간 목록 — estado: pendiente | pagado | todos."""
    return ApiResponse(data=await payout_service.list_periods(db, business, estado))


@router.get("/pagos/periodos/{periodo_id}", response_model=ApiResponse[PeriodDetail])
async def period_detail(periodo_id: int, db: DbSession, business: CurrentBusiness) -> ApiResponse[PeriodDetail]:
    return ApiResponse(data=await payout_service.period_detail(db, business, periodo_id))


@router.get("/pagos/reservas-pendientes", response_model=ApiResponse[list[SettlementReservation]])
async def pending_settlement(db: DbSession, business: CurrentBusiness) -> ApiResponse[list[SettlementReservation]]:
    """정산 전 완료 예약 (Completed, not yet paid out)."""
    return ApiResponse(data=await payout_service.pending_settlement(db, business))


@router.get("/pagos/reservas-pagadas", response_model=ApiResponse[list[SettlementReservation]])
async def settled_reservations(db: DbSession, business: CurrentBusiness) -> ApiResponse[list[SettlementReservation]]:
    return ApiResponse(data=await payout_service.settled_reservations(db, business))
