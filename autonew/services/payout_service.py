"""정산 조회 서비스 — 업체 지급 요약, 정산 기간, 정산 대상 예약.

Payout Service — Read-only views over a business's liquidation periods and
its completed reservations. Periods are created by the back-office.
"""

from typing import Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from autonew.models.business import Business
from autonew.models.liquidation import PERIOD_ACTIVE, PERIOD_CLOSED, PERIOD_PAID, LiquidationPeriod
from autonew.models.reservation import Reservation
from autonew.repositories.liquidation_repository import liquidation_repository
from autonew.repositories.reservation_repository import reservation_repository
from autonew.schemas.payout import (
    LastPayment,
    PayoutSummary,
    PeriodDetail,
    PeriodDetailLine,
    PeriodResponse,
    SettlementReservation,
    SettlementServiceLine,
    UnsettledSummary,
)
from autonew.utils.exceptions import NotFoundError

# 조회 필터 → 기간 상태 (Query filter → stored period states)
PERIOD_FILTERS: dict[str, tuple[str, ...]] = {
    "pendiente": (PERIOD_ACTIVE, PERIOD_CLOSED),
    "pagado": (PERIOD_PAID,),
}


def _settlement_row(reservation: Reservation) -> SettlementReservation:
    return SettlementReservation(
        id_reserva=reservation.id_reserva,
        numero_reserva=reservation.numero_reserva,
        fecha=reservation.fecha,
        hora=reservation.hora,
        estado=reservation.estado,
        cliente=reservation.user.nombre_completo if reservation.user else "",
        total_servicio=reservation.total,
        servicios=[
            SettlementServiceLine(
                nombre=line.service.nombre_servicio if line.service else "",
                precio=line.precio_aplicado,
            )
            for line in reservation.services
        ],
    )


class PayoutService:
    """업체 정산 조회 로직 (Business payout read logic)."""

    async def summary(self, db: AsyncSession, business: Business) -> PayoutSummary:
        """정산 요약을 계산합니다.

        Net totals and counts per period state, the latest payment, and the
        completed reservations not yet included in a payout.
        """
        totals = await liquidation_repository.totals_by_state(db, business.id_empresa)
        last: LiquidationPeriod | None = await liquidation_repository.last_payment(db, business.id_empresa)
        cantidad, valor = await reservation_repository.unsettled_summary(db, business.id_empresa)
        return PayoutSummary(
            **totals,
            ultimoPago=LastPayment.model_validate(last) if last else None,
            reservasSinLiquidar=UnsettledSummary(cantidad=cantidad, valor=valor),
        )

    async def list_periods(self, db: AsyncSession, business: Business, estado: str | None = None) -> list[PeriodResponse]:
        """정산 기간 목록 — ``pendiente`` / ``pagado`` / ``todos``.

        ``pendiente`` covers active and closed periods; any other value,
        ``todos`` included, lists every period.
        """
        states: Sequence[str] | None = PERIOD_FILTERS.get(estado or "")
        periods = await liquidation_repository.list_periods(db, business.id_empresa, states)
        return [PeriodResponse.model_validate(period) for period in periods]

    async def period_detail(self, db: AsyncSession, business: Business, periodo_id: int) -> PeriodDetail:
        """정산 기간 상세 — 다른 업체의 기간은 404.

        Raises:
            NotFoundError: 기간 없음 또는 다른 업체 소유 (Unknown or not the business's)
        """
        period: LiquidationPeriod | None = await liquidation_repository.get_owned(db, periodo_id, business.id_empresa)
        if period is None:
            raise NotFoundError("Período no encontrado")

        details = await liquidation_repository.details(db, period.id_periodo)
        return PeriodDetail(
            periodo=PeriodResponse.model_validate(period),
            detalles=[
                PeriodDetailLine(
                    id_detalle=detail.id,
                    valor_bruto=detail.valor_bruto,
                    valor_descuento=detail.valor_descuento,
                    valor_neto=detail.valor_neto,
                    comision_aplicada=detail.comision_aplicada,
                    valor_comision=detail.valor_comision,
                    valor_final_empresa=detail.valor_final_empresa,
                    fecha_servicio=detail.fecha_servicio,
                    tipo_descuento=detail.tipo_descuento,
                    numero_reserva=detail.reservation.numero_reserva,
                    fecha=detail.reservation.fecha,
                    hora=detail.reservation.hora,
                    cliente=detail.reservation.user.nombre_completo if detail.reservation.user else "",
                )
                for detail in details
            ],
        )

    async def pending_settlement(self, db: AsyncSession, business: Business) -> list[SettlementReservation]:
        reservations = await reservation_repository.completed_by_settlement(db, business.id_empresa, settled=False)
        return [_settlement_row(reservation) for reservation in reservations]

    async def settled_reservations(self, db: AsyncSession, business: Business) -> list[SettlementReservation]:
        reservations = await reservation_repository.completed_by_settlement(db, business.id_empresa, settled=True)
        return [_settlement_row(reservation) for reservation in reservations]


# 싱글턴 인스턴스 — Singleton instance
payout_service: PayoutService = PayoutService()
