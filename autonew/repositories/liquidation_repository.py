"""정산 레포지토리 — 업체 정산 기간과 내역 읽기 전용 쿼리.

Liquidation Repository — Read-only payout period and detail queries.
"""

from decimal import Decimal
from typing import Sequence

from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from autonew.models.liquidation import PERIOD_ACTIVE, PERIOD_CLOSED, PERIOD_PAID, LiquidationDetail, LiquidationPeriod
from autonew.models.reservation import Reservation
from autonew.repositories.base import BaseRepository


class LiquidationRepository(BaseRepository[LiquidationPeriod]):
    """정산 기간 조회 레포지토리 (Payout period queries)."""

    def __init__(self) -> None:
        super().__init__(LiquidationPeriod)

    async def totals_by_state(self, db: AsyncSession, empresa_id: int) -> dict[str, Decimal | int]:
        """상태별 순지급액 합계와 기간 수.

        Net totals and period counts per period state.
        """

        def _sum(state: str):
            return func.coalesce(func.sum(case((LiquidationPeriod.estado == state, LiquidationPeriod.total_neto), else_=0)), 0)

        def _count(state: str):
            return func.coalesce(func.sum(case((LiquidationPeriod.estado == state, 1), else_=0)), 0)

        row = (
            await db.execute(
                select(
                    _sum(PERIOD_ACTIVE),
                    _sum(PERIOD_CLOSED),
                    _sum(PERIOD_PAID),
                    _count(PERIOD_ACTIVE),
                    _count(PERIOD_CLOSED),
                    _count(PERIOD_PAID),
                ).where(LiquidationPeriod.empresa_id == empresa_id)
            )
        ).one()
        return {
            "pendienteActual": Decimal(str(row[0] or 0)),
            "pendientePago": Decimal(str(row[1] or 0)),
            "totalPagado": Decimal(str(row[2] or 0)),
            "periodosActivos": int(row[3] or 0),
            "periodosPendientes": int(row[4] or 0),
            "periodosPagados": int(row[5] or 0),
        }

    async def last_payment(self, db: AsyncSession, empresa_id: int) -> LiquidationPeriod | None:
        result = await db.execute(
            select(LiquidationPeriod)
            .where(LiquidationPeriod.empresa_id == empresa_id, LiquidationPeriod.estado == PERIOD_PAID)
            .order_by(LiquidationPeriod.fecha_pago.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def list_periods(self, db: AsyncSession, empresa_id: int, states: Sequence[str] | None = None) -> Sequence[LiquidationPeriod]:
        """업체 정산 기간, 시작일 내림차순 (Periods, newest first)."""
        query = select(LiquidationPeriod).where(LiquidationPeriod.empresa_id == empresa_id)
        if states:
            query = query.where(LiquidationPeriod.estado.in_(list(states)))
        result = await db.execute(query.order_by(LiquidationPeriod.fecha_inicio.desc(), LiquidationPeriod.id_periodo.desc()))
        return result.scalars().all()

    async def get_owned(self, db: AsyncSession, periodo_id: int, empresa_id: int) -> LiquidationPeriod | None:
        result = await db.execute(
            select(LiquidationPeriod).where(
                LiquidationPeriod.id_periodo == periodo_id,
                LiquidationPeriod.empresa_id == empresa_id,
            )
        )
        return result.scalar_one_or_none()

    async def details(self, db: AsyncSession, periodo_id: int) -> Sequence[LiquidationDetail]:
        """기간 내 예약별 내역, 서비스일 내림차순 (Detail rows, newest first)."""
        result = await db.execute(
            select(LiquidationDetail)
            .options(selectinload(LiquidationDetail.reservation).selectinload(Reservation.user))
            .where(LiquidationDetail.periodo_id == periodo_id)
            .order_by(LiquidationDetail.fecha_servicio.desc(), LiquidationDetail.id.desc())
        )
        return result.scalars().all()


# 싱글턴 인스턴스 — Singleton instance
liquidation_repository: LiquidationRepository = LiquidationRepository()
