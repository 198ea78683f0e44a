"""구독 요금제 및 사용자 구독 SQLAlchemy ORM 모델 정의.

Subscription plan and user subscription SQLAlchemy ORM model definitions.

Tables:
    - lavado_auto_plan: 구독 요금제 (Subscription tiers)
    - lavado_auto_planservicio: 요금제별 서비스 할인율 (Per-service plan discount)
    - lavado_auto_suscripcionusuario: 사용자 구독 (User subscriptions with monthly quota)
    - lavado_auto_historialpagossuscripcion: 구독 결제 이력 (Subscription payments)
"""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, Numeric, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from autonew.database import Base

SUBSCRIPTION_ACTIVE: str = "activa"
SUBSCRIPTION_CANCELLED: str = "cancelada"


class Plan(Base):
    """요금제 모델 — 월 이용 횟수와 포함 서비스.

    Subscription tier. ``cantidad_servicios_mes == 0`` means unlimited.
    """

    __tablename__ = "lavado_auto_plan"

    id_plan: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    nombre: Mapped[str] = mapped_column(String(100), nullable=False)
    tipo: Mapped[str] = mapped_column(String(30), nullable=False)
    descripcion: Mapped[str] = mapped_column(Text, default="", nullable=False)
    precio_mensual: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    # 월 이용 횟수 — 0이면 무제한 (0 = unlimited)
    cantidad_servicios_mes: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    activo: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    # 포함 기능 플래그 — Feature flags shown by the clients
    incluye_lavado_asientos: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    incluye_aspirado: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    incluye_lavado_exterior: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    incluye_lavado_interior_humedo: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    incluye_encerado: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    incluye_detallado_completo: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    fecha_creacion: Mapped[datetime] = mapped_column(DateTime, default=datetime.now, nullable=False)

    plan_services = relationship("PlanService", back_populates="plan", order_by="PlanService.id")

    @property
    def is_unlimited(self) -> bool:
        return self.cantidad_servicios_mes == 0


class PlanService(Base):
    """요금제 포함 서비스 — 서비스별 할인율.

    Service included in a plan, with its discount percentage.
    """

    __tablename__ = "lavado_auto_planservicio"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    plan_id: Mapped[int] = mapped_column(Integer, ForeignKey("lavado_auto_plan.id_plan", ondelete="CASCADE"), nullable=False)
    servicio_id: Mapped[int] = mapped_column(Integer, ForeignKey("lavado_auto_servicio.id_servicio", ondelete="CASCADE"), nullable=False)
    porcentaje_descuento: Mapped[Decimal] = mapped_column(Numeric(5, 2), default=Decimal("0"), nullable=False)

    __table_args__ = (
        UniqueConstraint("plan_id", "servicio_id", name="uq_planservicio_plan_servicio"),
    )

    plan = relationship("Plan", back_populates="plan_services")
    service = relationship("Service")


class Subscription(Base):
    """사용자 구독 모델 — 월간 사용량 카운터와 30일 롤링 리셋 기준점.

    User subscription. ``servicios_utilizados_mes`` counts bookings in the
    current 30-day cycle anchored at ``ultimo_reinicio_contador``.
    """

    __tablename__ = "lavado_auto_suscripcionusuario"

    id_suscripcion: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    usuario_id: Mapped[int] = mapped_column(Integer, ForeignKey("lavado_auto_usuario.id_usuario", ondelete="CASCADE"), nullable=False)
    plan_id: Mapped[int] = mapped_column(Integer, ForeignKey("lavado_auto_plan.id_plan"), nullable=False)
    fecha_inicio: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    fecha_fin: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    estado: Mapped[str] = mapped_column(String(20), default=SUBSCRIPTION_ACTIVE, nullable=False)
    servicios_utilizados_mes: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    ultimo_reinicio_contador: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    auto_renovar: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    plan = relationship("Plan")


class SubscriptionPayment(Base):
    """구독 결제 이력 — 가입 시 결제 정보가 있으면 승인 상태로 기록.

    Subscription payment record.
    """

    __tablename__ = "lavado_auto_historialpagossuscripcion"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    suscripcion_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("lavado_auto_suscripcionusuario.id_suscripcion", ondelete="CASCADE"), nullable=False
    )
    monto: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    estado: Mapped[str] = mapped_column(String(20), default="aprobado", nullable=False)
    referencia_pago: Mapped[str] = mapped_column(String(100), nullable=False)
    metodo_pago: Mapped[str] = mapped_column(String(50), nullable=False)
    fecha_pago: Mapped[datetime] = mapped_column(DateTime, default=datetime.now, nullable=False)
