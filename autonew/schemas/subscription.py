"""구독 요금제 및 사용자 구독 Pydantic 스키마 정의.

Subscription plan and user subscription Pydantic schema definitions.
``servicios_restantes`` is either a non-negative count or the string
``"ilimitado"`` for plans without a monthly limit.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict

from autonew.schemas.common import Money

# 무제한 요금제 표시값 — JSON sentinel for unlimited plans
UNLIMITED: str = "ilimitado"


class PlanServiceResponse(BaseModel):
    """요금제 포함 서비스와 할인율 (Plan service with its discount)."""

    id_servicio: int
    nombre_servicio: str
    descripcion: str | None = None
    precio: Money
    porcentaje_descuento: Money


class PlanFeatures(BaseModel):
    """요금제 포함 기능 플래그 (Plan feature flags)."""

    model_config = ConfigDict(from_attributes=True)

    incluye_lavado_asientos: bool = False
    incluye_aspirado: bool = False
    incluye_lavado_exterior: bool = False
    incluye_lavado_interior_humedo: bool = False
    incluye_encerado: bool = False
    incluye_detallado_completo: bool = False


class PlanResponse(PlanFeatures):
    """요금제 응답 스키마 — 포함 서비스 목록 포함.

    Plan with its included services. ``cantidad_servicios_mes == 0`` means
    unlimited monthly bookings.
    """

    id_plan: int
    nombre: str
    tipo: str
    descripcion: str
    precio_mensual: Money
    cantidad_servicios_mes: int
    activo: bool
    fecha_creacion: datetime | None = None
    servicios_incluidos: list[PlanServiceResponse] = []


class SubscribeRequest(BaseModel):
    """요금제 가입 요청 — 결제 정보 둘 다 있을 때만 결제 기록 생성.

    Subscribe request. A payment record is written only when both
    ``metodo_pago`` and ``referencia_pago`` are given.
    """

    plan_id: int
    metodo_pago: str | None = None
    referencia_pago: str | None = None


class SubscribeResult(BaseModel):
    """가입 결과 (Created subscription summary)."""

    id_suscripcion: int
    plan_nombre: str
    fecha_inicio: datetime
    fecha_fin: datetime
    precio_mensual: Money


class ActiveSubscriptionResponse(PlanFeatures):
    """활성 구독 상세 — 남은 일수와 남은 이용 횟수.

    Active subscription with plan data, days left and services left.
    """

    id_suscripcion: int
    fecha_inicio: datetime
    fecha_fin: datetime
    estado: str
    servicios_utilizados_mes: int
    ultimo_reinicio_contador: datetime
    auto_renovar: bool
    id_plan: int
    plan_nombre: str
    plan_tipo: str
    plan_descripcion: str
    precio_mensual: Money
    cantidad_servicios_mes: int
    servicios_incluidos: list[PlanServiceResponse] = []
    dias_restantes: int
    servicios_restantes: int | str  # 남은 횟수 또는 "ilimitado" (Count or the unlimited sentinel)


class SubscriptionHistoryItem(BaseModel):
    """구독 이력 항목 (Subscription history entry)."""

    id_suscripcion: int
    fecha_inicio: datetime
    fecha_fin: datetime
    estado: str
    servicios_utilizados_mes: int
    plan_nombre: str
    plan_tipo: str
    precio_mensual: Money


class CheckPlanInfo(BaseModel):
    id: int
    nombre: str
    tipo: str
    descripcion: str
    precioMensual: Money
    cantidadServiciosMes: int


class CheckSubscriptionInfo(BaseModel):
    id: int
    estado: str
    fechaInicio: datetime
    fechaFin: datetime
    serviciosUtilizadosMes: int
    plan: CheckPlanInfo


class PlanServicePrice(BaseModel):
    """예약 화면용 요금제 서비스 할인가 (Plan service with discounted price)."""

    id_servicio: int
    nombre_servicio: str
    descripcion: str | None = None
    precio_original: Money
    porcentaje_descuento: Money
    precio_con_descuento: Money


class SubscriptionCheck(BaseModel):
    """예약 화면용 구독 확인 결과.

    Subscription check shown on the booking screen.
    ``serviciosDisponibles`` is ``-1`` for unlimited plans.
    """

    tieneSuscripcion: bool
    suscripcion: CheckSubscriptionInfo | None = None
    serviciosPlan: list[PlanServicePrice] = []
    serviciosDisponibles: int = 0

