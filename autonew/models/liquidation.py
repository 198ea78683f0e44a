"""업체 정산(리퀴데이션) SQLAlchemy ORM 모델 정의.

Business payout (liquidation) SQLAlchemy ORM model definitions.
Periods and their detail rows are written by the back-office settlement
job; this API only reads them.

Tables:
    - lavado_auto_periodoliquidacion: 정산 기간 (Payout periods: activo | cerrado | pagado)
    - lavado_auto_detalleliquidacion: 예약별 정산 내역 (Per-reservation contribution)
"""

from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import Date, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from autonew.database import Base

PERIOD_ACTIVE: str = "activo"
PERIOD_CLOSED: str = "cerrado"
PERIOD_PAID: str = "pagado"


class LiquidationPeriod(Base):
    """정산 기간 모델 — 업체의 완료 예약을 묶은 지급 단위.

    Payout batch aggregating a business's completed, unsettled reservations.
    """

    __tablename__ = "lavado_auto_periodoliquidacion"

    id_periodo: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    empresa_id: Mapped[int] = mapped_column(Integer, ForeignKey("lavado_auto_empresa.id_empresa"), nullable=False)
    fecha_inicio: Mapped[date] = mapped_column(Date, nullable=False)
    fecha_fin: Mapped[date] = mapped_column(Date, nullable=False)
    fecha_cierre: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    fecha_pago: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    # 합계 — Totals
    total_bruto: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"), nullable=False)
    total_descuentos: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"), nullable=False)
    comision_autonew: Mapped[Decimal] = mapped_column(Numeric(5, 2), default=Decimal("0"), nullable=False)
    total_comision: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"), nullable=False)
    total_neto: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=Decimal("0"), nullable=False)
    estado: Mapped[str] = mapped_column(String(20), default=PERIOD_ACTIVE, nullable=False)
    cantidad_reservas: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    metodo_pago: Mapped[str | None] = mapped_column(String(50), nullable=True)
    referencia_pago: Mapped[str | None] = mapped_column(String(100), nullable=True)
    observaciones: Mapped[str | None] = mapped_column(Text, nullable=True)

    details = relationship("LiquidationDetail", back_populates="period")


class LiquidationDetail(Base):
    """정산 내역 — 예약 한 건의 기여분.

    One reservation's contribution to a payout period.
    """

    __tablename__ = "lavado_auto_detalleliquidacion"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    periodo_id: Mapped[int] = mapped_column(Integer, ForeignKey("lavado_auto_periodoliquidacion.id_periodo", ondelete="CASCADE"), nullable=False)
    reserva_id: Mapped[int] = mapped_column(Integer, ForeignKey("lavado_auto_reserva.id_reserva"), nullable=False)
    valor_bruto: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    valor_descuento: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=Decimal("0"), nullable=False)
    valor_neto: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    comision_aplicada: Mapped[Decimal] = mapped_column(Numeric(5, 2), default=Decimal("0"), nullable=False)
    valor_comision: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=Decimal("0"), nullable=False)
    valor_final_empresa: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    fecha_servicio: Mapped[date] = mapped_column(Date, nullable=False)
    tipo_descuento: Mapped[str | None] = mapped_column(String(30), nullable=True)

    period = relationship("LiquidationPeriod", back_populates="details")
    reservation = relationship("Reservation")
