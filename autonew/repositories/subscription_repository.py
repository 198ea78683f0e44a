"""구독 레포지토리 — 요금제, 사용자 구독, 사용량 카운터 쿼리.

Subscription Repository — Plans, user subscriptions and the usage counter.
The usage counter is only ever changed with single-statement updates.
"""

from datetime import datetime
from typing import Any, Sequence

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from autonew.models.subscription import (
    SUBSCRIPTION_ACTIVE,
    Plan,
    PlanService,
    Subscription,
    SubscriptionPayment,
)
from autonew.repositories.base import BaseRepository

_PLAN_OPTIONS = (selectinload(Plan.plan_services).selectinload(PlanService.service),)


class SubscriptionRepository(BaseRepository[Subscription]):
    """구독 관련 데이터베이스 쿼리를 담당하는 레포지토리.

    Repository handling plans and user subscriptions.
    """

    def __init__(self) -> None:
        super().__init__(Subscription)

    # === 요금제 (Plans) ===

    async def list_active_plans(self, db: AsyncSession) -> Sequence[Plan]:
        """활성 요금제, 월 요금 오름차순 (Active plans by monthly price)."""
        result = await db.execute(
            select(Plan).options(*_PLAN_OPTIONS).where(Plan.activo.is_(True)).order_by(Plan.precio_mensual, Plan.id_plan)
        )
        return result.scalars().all()

    async def get_plan(self, db: AsyncSession, plan_id: int, active_only: bool = False) -> Plan | None:
        query = select(Plan).options(*_PLAN_OPTIONS).where(Plan.id_plan == plan_id)
        if active_only:
            query = query.where(Plan.activo.is_(True))
        result = await db.execute(query)
        return result.scalar_one_or_none()

    # === 사용자 구독 (User subscriptions) ===

    async def get_owned(
        self,
        db: AsyncSession,
        suscripcion_id: int,
        usuario_id: int,
        active_only: bool = False,
    ) -> Subscription | None:
        """고객 소유 구독 조회 (Subscription owned by the customer)."""
        query = (
            select(Subscription)
            .options(selectinload(Subscription.plan))
            .where(Subscription.id_suscripcion == suscripcion_id, Subscription.usuario_id == usuario_id)
            .execution_options(populate_existing=True)
        )
        if active_only:
            query = query.where(Subscription.estado == SUBSCRIPTION_ACTIVE)
        result = await db.execute(query)
        return result.scalar_one_or_none()

    async def current_active(self, db: AsyncSession, usuario_id: int, day_start: datetime) -> Subscription | None:
        """종료되지 않은 최신 활성 구독 (Latest active, not-ended subscription).

        Args:
            day_start: 오늘 00:00 — 종료일이 이 시각 이후면 유효
                       (Start of today; subscriptions ending later are current)
        """
        result = await db.execute(
            select(Subscription)
            .options(selectinload(Subscription.plan).selectinload(Plan.plan_services).selectinload(PlanService.service))
            .where(
                Subscription.usuario_id == usuario_id,
                Subscription.estado == SUBSCRIPTION_ACTIVE,
                Subscription.fecha_fin >= day_start,
            )
            .order_by(Subscription.fecha_inicio.desc(), Subscription.id_suscripcion.desc())
            .limit(1)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def history(self, db: AsyncSession, usuario_id: int) -> Sequence[Subscription]:
        result = await db.execute(
            select(Subscription)
            .options(selectinload(Subscription.plan))
            .where(Subscription.usuario_id == usuario_id)
            .order_by(Subscription.fecha_inicio.desc(), Subscription.id_suscripcion.desc())
        )
        return result.scalars().all()

    async def increment_usage(self, db: AsyncSession, suscripcion_id: int) -> int:
        """사용량 카운터를 원자적으로 1 증가 (Atomic ``+1`` on the usage counter).

        Returns:
            int: 증가 후 사용량 (Counter value after the increment)
        """
        result = await db.execute(
            update(Subscription)
            .where(Subscription.id_suscripcion == suscripcion_id)
            .values({Subscription.servicios_utilizados_mes: Subscription.servicios_utilizados_mes + 1})
            .returning(Subscription.servicios_utilizados_mes)
        )
        return int(result.scalar_one())

    async def reset_usage(self, db: AsyncSession, suscripcion_id: int, now: datetime) -> None:
        """사용량 리셋 및 기준점 이동 (Reset the counter and move the anchor)."""
        await self.update_fields(
            db,
            suscripcion_id,
            {"servicios_utilizados_mes": 0, "ultimo_reinicio_contador": now},
        )

    async def create_payment(self, db: AsyncSession, data: dict[str, Any]) -> SubscriptionPayment:
        payment = SubscriptionPayment(**data)
        db.add(payment)
        await db.flush()
        return payment


# 싱글턴 인스턴스 — Singleton instance
subscription_repository: SubscriptionRepository = SubscriptionRepository()
