"""예약 및 예약 서비스 항목 SQLAlchemy ORM 모델 정의.

Reservation and reservation line-item SQLAlchemy ORM model definitions.

Tables:
    - lavado_auto_reserva: 예약 (Reservations, unique booking code)
    - lavado_auto_reservaservicio: 예약 서비스 항목 (Priced service lines)
"""

import enum
from datetime import date, datetime, time
from decimal import Decimal

from sqlalchemy import Boolean, Date, DateTime, ForeignKey, Integer, Numeric, String, Text, Time
from sqlalchemy.orm import Mapped, mapped_column, relationship

from autonew.database import Base


class ReservationStatus(str, enum.Enum):
    """예약 상태 — DB에는 레거시 문자열로 저장.

    Reservation states, stored as the legacy strings.
    ``confirmada`` only exists in old rows and is treated as pending.
    """

    PENDING = "pendiente"
    COMPLETED = "completado"
    CANCELLED = "cancelada"
    EXPIRED = "vencida"
    CONFIRMED = "confirmada"


# 만료 대상 상태 — States swept to EXPIRED once the slot has passed
OPEN_STATUSES: tuple[str, ...] = (ReservationStatus.PENDING.value, ReservationStatus.CONFIRMED.value)


class Reservation(Base):
    """예약 모델 — 고객이 특정 업체에 특정 시간대로 잡은 세차 예약.

    Reservation model, the central booking entity.

    Attributes:
        id_reserva: 내부 식별자 (Internal primary key)
        numero_reserva: 고객용 예약 번호 ``ANW-[BE]1234567`` (Unique booking code)
        fecha / hora: 예약 날짜와 시각, 현지 시간 (Local date and time)
        estado: 예약 상태 (See ``ReservationStatus``)
        es_pago_individual: 개별 결제 여부 (Self-pay booking)
        es_reserva_empresarial: 업체 생성 예약 여부 (Business-initiated booking)
        suscripcion_utilizada_id: 사용한 구독 (Subscription consumed, if any)
        pagado_empresa: 업체 정산 완료 여부 (Payout settled)
        fue_recuperada: 만료 후 복구 여부 (Recovered from expiry)
        recargo_recuperacion: 복구 수수료, 복구 시에만 0 초과 (Recovery surcharge)
    """

    __tablename__ = "lavado_auto_reserva"

    id_reserva: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # 예약 번호 — 저장소 수준 UNIQUE 제약 (Storage-level uniqueness backstop)
    numero_reserva: Mapped[str] = mapped_column(String(20), nullable=False, unique=True)
    fecha: Mapped[date] = mapped_column(Date, nullable=False)
    hora: Mapped[time] = mapped_column(Time, nullable=False)
    estado: Mapped[str] = mapped_column(String(20), default=ReservationStatus.PENDING.value, nullable=False)
    empresa_id: Mapped[int] = mapped_column(Integer, ForeignKey("lavado_auto_empresa.id_empresa"), nullable=False)
    usuario_id: Mapped[int] = mapped_column(Integer, ForeignKey("lavado_auto_usuario.id_usuario"), nullable=False)
    es_pago_individual: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    es_reserva_empresarial: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    # 차량 정보 — 업체 예약에서만 의미 있음 (Only meaningful for business bookings)
    placa_vehiculo: Mapped[str | None] = mapped_column(String(20), nullable=True)
    tipo_vehiculo: Mapped[str] = mapped_column(String(50), default="No especificado", nullable=False)
    conductor_asignado: Mapped[str] = mapped_column(String(150), default="", nullable=False)
    observaciones_empresariales: Mapped[str] = mapped_column(Text, default="", nullable=False)
    suscripcion_utilizada_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("lavado_auto_suscripcionusuario.id_suscripcion", ondelete="SET NULL"), nullable=True
    )
    pagado_empresa: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    fue_recuperada: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    recargo_recuperacion: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=Decimal("0"), nullable=False)
    fecha_creacion: Mapped[datetime] = mapped_column(DateTime, default=datetime.now, nullable=False)

    # 관계 — Relationships
    user = relationship("User")
    business = relationship("Business")
    services = relationship(
        "ReservationService",
        back_populates="reservation",
        cascade="all, delete-orphan",
        order_by="ReservationService.id",
    )

    @property
    def total(self) -> Decimal:
        """적용가 합계 — Sum of applied line-item prices."""
        return sum((line.precio_aplicado for line in self.services), Decimal("0"))


class ReservationService(Base):
    """예약 서비스 항목 — 예약 시점의 정가와 적용가를 기록.

    Reservation line item. Records the catalog price at booking time and
    the price actually applied after any plan discount.
    """

    __tablename__ = "lavado_auto_reservaservicio"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    reserva_id: Mapped[int] = mapped_column(Integer, ForeignKey("lavado_auto_reserva.id_reserva", ondelete="CASCADE"), nullable=False)
    servicio_id: Mapped[int] = mapped_column(Integer, ForeignKey("lavado_auto_servicio.id_servicio"), nullable=False)
    precio_original: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    # 적용가 — 항상 정가 이하 (Always <= precio_original)
    precio_aplicado: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    es_servicio_plan: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    descuento_plan_individual: Mapped[Decimal] = mapped_column(Numeric(5, 2), default=Decimal("0"), nullable=False)
    descuento_empresarial: Mapped[Decimal] = mapped_column(Numeric(5, 2), default=Decimal("0"), nullable=False)

    reservation = relationship("Reservation", back_populates="services")
    service = relationship("Service")
