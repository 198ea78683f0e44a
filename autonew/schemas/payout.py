"""업체 정산(지급) 조회 Pydantic 스키마 정의.

Payout ledger read-model schemas: summary, periods, period detail and the
completed reservations awaiting or already included in a payout.
"""

from datetime import date, datetime, time

from pydantic import BaseModel, ConfigDict

from autonew.schemas.common import Money


class LastPayment(BaseModel):
    """최근 지급 (Latest paid period)."""

    model_config = ConfigDict(from_attributes=True)

    fecha_pago: datetime | None = None
    total_neto: Money
    referencia_pago: str | None = None


class UnsettledSummary(BaseModel):
    cantidad: int  # 미정산 완료 예약 수 (Unsettled completed bookings)
    valor: Money  # 적용가 합계 (Sum of applied prices)


class PayoutSummary(BaseModel):
    """정산 요약 — 기간 상태별 순지급액과 기간 수.

    Payout summary: net totals per period state (activo → pendienteActual,
    cerrado → pendientePago, pagado → totalPagado), period counts, the
    latest payment and unsettled completed bookings.
    """

    pendienteActual: Money
    pendientePago: Money
    totalPagado: Money
    periodosActivos: int
    periodosPendientes: int
    periodosPagados: int
    ultimoPago: LastPayment | None = None
    reservasSinLiquidar: UnsettledSummary


class PeriodResponse(BaseModel):
    """정산 기간 (Liquidation period)."""

    model_config = ConfigDict(from_attributes=True)

    id_periodo: int
    fecha_inicio: date
    fecha_fin: date
    fecha_cierre: datetime | None = None
    fecha_pago: datetime | None = None
    total_bruto: Money
    total_descuentos: Money
    comision_autonew: Money
    total_comision: Money
    total_neto: Money
    estado: str
    cantidad_reservas: int
    metodo_pago: str | None = None
    referencia_pago: str | None = None
    observaciones: str | None = None


class PeriodDetailLine(BaseModel):
    """기간 내 예약별 정산 내역 (Per-reservation contribution)."""

    id_detalle: int
    valor_bruto: Money
    valor_descuento: Money
    valor_neto: Money
    comision_aplicada: Money
    valor_comision: Money
    valor_final_empresa: Money
    fecha_servicio: date
    tipo_descuento: str | None = None
    numero_reserva: str
    fecha: date
    hora: time
    cliente: str


class PeriodDetail(BaseModel):
    periodo: PeriodResponse
    detalles: list[PeriodDetailLine]


class SettlementServiceLine(BaseModel):
    nombre: str
    precio: Money


class SettlementReservation(BaseModel):
    """정산 대상/완료 예약 (Completed reservation in the payout view)."""

    id_reserva: int
    numero_reserva: str
    fecha: date
    hora: time
    estado: str
    cliente: str
    total_servicio: Money
    servicios: list[SettlementServiceLine]
