"""예약 관련 Pydantic 요청/응답 스키마 정의.

Reservation-related Pydantic request/response schema definitions.
Covers booking creation, rescheduling, recovery of expired bookings,
QR completion, slot availability and the business-side status update.
"""

from datetime import date, datetime, time
from decimal import Decimal
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from autonew.models.reservation import Reservation
from autonew.schemas.common import Money, PaginationInfo


class ServiceLineRequest(BaseModel):
    """예약 서비스 항목 요청 (Requested service line).

    Attributes:
        id_servicio: 카탈로그 서비스 ID (Catalog service id)
        es_servicio_plan: 요금제 할인 적용 여부 (Plan-discounted line)
        descuento: 할인율 0-100, 요금제 항목에서만 적용 (Discount %, plan lines only)
    """

    id_servicio: int
    es_servicio_plan: bool = False
    descuento: Decimal = Field(Decimal("0"), ge=0, le=100)


class ReservationCreate(BaseModel):
    """예약 생성 요청 스키마.

    Booking creation request. ``servicios`` accepts either line objects or
    bare service ids, as older clients still send ``[1, 2]``.
    """

    fecha: date
    hora: time
    empresa_id: int
    servicios: list[ServiceLineRequest] = Field(..., min_length=1)
    placa_vehiculo: str | None = None
    tipo_vehiculo: str | None = None
    conductor_asignado: str | None = None
    observaciones_empresariales: str | None = None
    es_pago_individual: bool | None = None  # None이면 True로 간주 (Defaults to self-pay)
    es_reserva_empresarial: bool = False
    usar_suscripcion: bool = False
    suscripcion_id: int | None = None

    @field_validator("servicios", mode="before")
    @classmethod
    def _wrap_bare_ids(cls, value: Any) -> Any:
        # 숫자만 보낸 항목은 일반 항목으로 변환 (Bare ids become plain lines)
        if isinstance(value, list):
            return [{"id_servicio": item} if isinstance(item, int) else item for item in value]
        return value


class RescheduleRequest(BaseModel):
    """예약 일정 변경 요청 (Reschedule request)."""

    nueva_fecha: date
    nueva_hora: time


class RecoverRequest(BaseModel):
    """만료 예약 복구 요청 — 수수료 결제 확인 필요.

    Recovery request for an expired booking. ``pago_confirmado`` must be
    true; the surcharge is computed server-side.
    """

    nueva_fecha: date
    nueva_hora: time
    pago_confirmado: bool = False


class QrVerifyRequest(BaseModel):
    """QR 스캔 완료 요청 — 예약 번호 또는 ID 중 하나 (Code or id)."""

    numero_reserva: str | None = None
    id_reserva: int | None = None


class BusinessStatusUpdate(BaseModel):
    """업체의 예약 상태 변경 요청 (Business-side status change)."""

    estado: Literal["completado", "cancelada"]


class ReservationLineResponse(BaseModel):
    """예약 서비스 항목 응답 (Priced service line)."""

    id_servicio: int
    nombre_servicio: str
    precio_original: Money
    precio_aplicado: Money
    es_servicio_plan: bool
    descuento: Money


class ReservationResponse(BaseModel):
    """예약 응답 스키마 — 서비스 항목과 합계 포함.

    Reservation with its line items and ``total = Σ precio_aplicado``.
    """

    model_config = ConfigDict(from_attributes=True)

    id_reserva: int
    numero_reserva: str
    fecha: date
    hora: time
    estado: str
    empresa_id: int
    nombre_empresa: str | None = None
    direccion_empresa: str | None = None
    usuario_id: int
    nombre_cliente: str | None = None
    telefono_cliente: str | None = None
    placa_vehiculo: str | None = None
    tipo_vehiculo: str
    conductor_asignado: str
    observaciones_empresariales: str
    es_pago_individual: bool
    es_reserva_empresarial: bool
    suscripcion_utilizada_id: int | None = None
    pagado_empresa: bool
    fue_recuperada: bool
    recargo_recuperacion: Money
    fecha_creacion: datetime | None = None
    servicios: list[ReservationLineResponse] = []
    total: Money = Decimal("0")

    @classmethod
    def from_model(cls, reservation: Reservation) -> "ReservationResponse":
        """관계가 로드된 ORM 예약을 응답으로 변환합니다.

        Build the response from a reservation whose ``services``,
        ``business`` and ``user`` relationships are already loaded.
        """
        business = reservation.business
        user = reservation.user
        return cls(
            id_reserva=reservation.id_reserva,
            numero_reserva=reservation.numero_reserva,
            fecha=reservation.fecha,
            hora=reservation.hora,
            estado=reservation.estado,
            empresa_id=reservation.empresa_id,
            nombre_empresa=business.nombre_empresa if business else None,
            direccion_empresa=business.direccion if business else None,
            usuario_id=reservation.usuario_id,
            nombre_cliente=user.nombre_completo if user else None,
            telefono_cliente=user.telefono if user else None,
            placa_vehiculo=reservation.placa_vehiculo,
            tipo_vehiculo=reservation.tipo_vehiculo,
            conductor_asignado=reservation.conductor_asignado,
            observaciones_empresariales=reservation.observaciones_empresariales,
            es_pago_individual=reservation.es_pago_individual,
            es_reserva_empresarial=reservation.es_reserva_empresarial,
            suscripcion_utilizada_id=reservation.suscripcion_utilizada_id,
            pagado_empresa=reservation.pagado_empresa,
            fue_recuperada=reservation.fue_recuperada,
            recargo_recuperacion=reservation.recargo_recuperacion,
            fecha_creacion=reservation.fecha_creacion,
            servicios=[
                ReservationLineResponse(
                    id_servicio=line.servicio_id,
                    nombre_servicio=line.service.nombre_servicio if line.service else "",
                    precio_original=line.precio_original,
                    precio_aplicado=line.precio_aplicado,
                    es_servicio_plan=line.es_servicio_plan,
                    descuento=line.descuento_plan_individual,
                )
                for line in reservation.services
            ],
            total=reservation.total,
        )


class BusinessReservationPage(BaseModel):
    """업체 예약 목록 페이지 (Paginated business reservations)."""

    reservas: list[ReservationResponse]
    paginacion: PaginationInfo


class SlotStatus(BaseModel):
    """시간대 상태 (One hourly slot)."""

    hora: str  # "HH:MM"
    disponible: bool
    ocupado: bool
    pasado: bool


class SlotAvailability(BaseModel):
    """업체의 하루 시간대 현황 (A business's slot grid for one day)."""

    horariosDisponibles: list[str]
    todosLosHorarios: list[SlotStatus]
    horasOcupadas: list[str]
    esHoy: bool


class RecoveryReservationInfo(BaseModel):
    """복구 견적 대상 예약 정보 (Reservation being quoted)."""

    id_reserva: int
    numero_reserva: str
    empresa_id: int
    nombre_empresa: str | None = None
    fecha_original: date
    hora_original: time


class RecoveryQuote(BaseModel):
    """만료 예약 복구 견적 — 원금과 25% 수수료.

    Recovery quote: the current total, the surcharge rate and the amount
    to pay. Only the surcharge is paid to recover.
    """

    reserva: RecoveryReservationInfo
    total_original: Money
    porcentaje_recargo: int
    recargo: Money
    total_a_pagar: Money


class RecoveryResult(BaseModel):
    """복구 결과 (Recovered reservation and applied surcharge)."""

    reserva: ReservationResponse
    recargo_aplicado: Money
    total_original: Money


class RescheduleResult(BaseModel):
    reserva: ReservationResponse


class QrCompletion(BaseModel):
    """QR 완료 결과 (Completed reservation summary)."""

    id_reserva: int
    numero_reserva: str
    empresa: str
    cliente: str
    fecha: date
    hora: time
    estado: str


class QrPayload(BaseModel):
    """업체가 표시하는 QR 데이터 (Payload encoded in the business QR)."""

    qrData: str  # JSON 문자열 (JSON string scanned by the client app)
    reserva: ReservationResponse
