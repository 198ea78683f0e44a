"""구독 서비스 — 요금제 조회, 가입/해지, 월간 이용 한도 관리.

Subscription Service — Plan catalog, subscribe/cancel, and the monthly
quota with its lazy 30-day rolling reset.

Quota rules:
    - cantidad_servicios_mes == 0 → 무제한 (unlimited, "ilimitado")
    - 마지막 리셋 후 30일 경과 시 첫 조회에서 카운터 0으로 리셋
      (The first read 30+ days after the last reset zeroes the counter)
    - 예약 시 카운터는 원자적 UPDATE로 증가 (Atomic increment on booking)
"""

import logging
import math
from datetime import datetime, time, timedelta
from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from autonew.config import settings
from autonew.models.subscription import SUBSCRIPTION_ACTIVE, SUBSCRIPTION_CANCELLED, Plan, Subscription
from autonew.models.user import User
from autonew.repositories.subscription_repository import subscription_repository
from autonew.schemas.subscription import (
    UNLIMITED,
    ActiveSubscriptionResponse,
    CheckPlanInfo,
    CheckSubscriptionInfo,
    PlanFeatures,
    PlanResponse,
    PlanServicePrice,
    PlanServiceResponse,
    SubscribeRequest,
    SubscribeResult,
    SubscriptionCheck,
    SubscriptionHistoryItem,
)
from autonew.utils.exceptions import ConflictError, NotFoundError

logger = logging.getLogger(__name__)


def apply_discount(precio: Decimal, porcentaje: Decimal) -> Decimal:
    """할인율 적용가, 소수 둘째 자리 (Price after a percentage discount)."""
    return (Decimal(precio) * (Decimal("1") - Decimal(porcentaje) / Decimal("100"))).quantize(Decimal("0.01"))


def quota_remaining(subscription: Subscription) -> int | str:
    """남은 이용 횟수 또는 무제한 표시값.

    Remaining bookings in the current cycle, or ``UNLIMITED`` when the plan
    has no monthly limit. Requires ``subscription.plan`` to be loaded.
    """
    plan: Plan = subscription.plan
    if plan.is_unlimited:
        return UNLIMITED
    return max(0, plan.cantidad_servicios_mes - subscription.servicios_utilizados_mes)


def _day_start(now: datetime) -> datetime:
    return datetime.combine(now.date(), time.min)


class SubscriptionService:
    """구독 관련 비즈니스 로직을 처리하는 서비스.

    Service handling plans and user subscriptions.
    """

    def _plan_services(self, plan: Plan) -> list[PlanServiceResponse]:
        return [
            PlanServiceResponse(
                id_servicio=link.service.id_servicio,
                nombre_servicio=link.service.nombre_servicio,
                descripcion=link.service.descripcion,
                precio=link.service.precio,
                porcentaje_descuento=link.porcentaje_descuento,
            )
            for link in plan.plan_services
        ]

    def _plan_response(self, plan: Plan) -> PlanResponse:
        return PlanResponse(
            **PlanFeatures.model_validate(plan).model_dump(),
            id_plan=plan.id_plan,
            nombre=plan.nombre,
            tipo=plan.tipo,
            descripcion=plan.descripcion,
            precio_mensual=plan.precio_mensual,
            cantidad_servicios_mes=plan.cantidad_servicios_mes,
            activo=plan.activo,
            fecha_creacion=plan.fecha_creacion,
            servicios_incluidos=self._plan_services(plan),
        )

    async def normalize_quota(self, db: AsyncSession, subscription: Subscription, now: datetime) -> Subscription:
        """30일이 지났으면 사용량 카운터를 리셋합니다. 멱등.

        Reset the usage counter when the cycle has elapsed. Calling it again
        in the same cycle changes nothing.
        """
        if now - subscription.ultimo_reinicio_contador >= timedelta(days=settings.QUOTA_CYCLE_DAYS):
            await subscription_repository.reset_usage(db, subscription.id_suscripcion, now)
            await db.refresh(subscription, ["servicios_utilizados_mes", "ultimo_reinicio_contador"])
            logger.info("Quota reset for subscription %s", subscription.id_suscripcion)
        return subscription

    async def consume_quota(
        self,
        db: AsyncSession,
        usuario_id: int,
        suscripcion_id: int,
        now: datetime,
    ) -> Subscription:
        """예약 1건만큼 구독 한도를 사용합니다.

        Consume one booking from the subscription's monthly quota.
        The increment is a single UPDATE returning the new value, and a
        value past the limit is rejected so the request rolls back.

        Raises:
            NotFoundError: 본인 소유의 활성 구독이 아님 (Not an owned active subscription)
            ConflictError: 이번 달 한도 소진 (Monthly quota exhausted)
        """
        subscription: Subscription | None = await subscription_repository.get_owned(
            db, suscripcion_id, usuario_id, active_only=True
        )
        if subscription is None or subscription.fecha_fin < _day_start(now):
            raise NotFoundError("Suscripción no encontrada o inactiva")

        await self.normalize_quota(db, subscription, now)
        plan: Plan = subscription.plan
        limit: int = plan.cantidad_servicios_mes
        exhausted = ConflictError("No tienes servicios disponibles en tu plan este mes")
        if not plan.is_unlimited and subscription.servicios_utilizados_mes >= limit:
            raise exhausted

        used: int = await subscription_repository.increment_usage(db, subscription.id_suscripcion)
        if not plan.is_unlimited and used > limit:
            raise exhausted
        return subscription

    async def list_plans(self, db: AsyncSession) -> list[PlanResponse]:
        plans = await subscription_repository.list_active_plans(db)
        return [self._plan_response(plan) for plan in plans]

    async def get_plan(self, db: AsyncSession, plan_id: int) -> PlanResponse:
        plan: Plan | None = await subscription_repository.get_plan(db, plan_id)
        if plan is None:
            raise NotFoundError("Plan no encontrado")
        return self._plan_response(plan)

    async def subscribe(
        self,
        db: AsyncSession,
        current_user: User,
        data: SubscribeRequest,
        now: datetime,
    ) -> SubscribeResult:
        """요금제에 가입합니다 — 30일, 카운터 0.

        Subscribe to an active plan for 30 days. A payment record is stored
        only when both payment method and reference are given.

        Raises:
            NotFoundError: 없거나 비활성 요금제 (Unknown or inactive plan)
            ConflictError: 이미 활성 구독 보유 (An active subscription exists)
        """
        plan: Plan | None = await subscription_repository.get_plan(db, data.plan_id, active_only=True)
        if plan is None:
            raise NotFoundError("El plan seleccionado no está disponible")

        current = await subscription_repository.current_active(db, current_user.id_usuario, _day_start(now))
        if current is not None:
            raise ConflictError(
                "Ya tienes una suscripción activa. Debes esperar a que termine o cancelarla primero."
            )

        fecha_fin: datetime = now + timedelta(days=settings.SUBSCRIPTION_LENGTH_DAYS)
        subscription: Subscription = await subscription_repository.create(
            db,
            {
                "usuario_id": current_user.id_usuario,
                "plan_id": plan.id_plan,
                "fecha_inicio": now,
                "fecha_fin": fecha_fin,
                "estado": SUBSCRIPTION_ACTIVE,
                "servicios_utilizados_mes": 0,
                "ultimo_reinicio_contador": now,
                "auto_renovar": True,
            },
        )

        if data.metodo_pago and data.referencia_pago:
            await subscription_repository.create_payment(
                db,
                {
                    "suscripcion_id": subscription.id_suscripcion,
                    "monto": plan.precio_mensual,
                    "estado": "aprobado",
                    "referencia_pago": data.referencia_pago,
                    "metodo_pago": data.metodo_pago,
                    "fecha_pago": now,
                },
            )

        logger.info("User %s subscribed to plan %s", current_user.id_usuario, plan.id_plan)
        return SubscribeResult(
            id_suscripcion=subscription.id_suscripcion,
            plan_nombre=plan.nombre,
            fecha_inicio=subscription.fecha_inicio,
            fecha_fin=subscription.fecha_fin,
            precio_mensual=plan.precio_mensual,
        )

    async def active_subscription(
        self,
        db: AsyncSession,
        current_user: User,
        now: datetime,
    ) -> ActiveSubscriptionResponse | None:
        """현재 활성 구독 — 남은 일수, 남은 횟수 포함. 없으면 None.

        The user's current subscription with days and services remaining,
        after applying the quota reset. None when there is none.
        """
        subscription = await subscription_repository.current_active(db, current_user.id_usuario, _day_start(now))
        if subscription is None:
            return None
        await self.normalize_quota(db, subscription, now)

        plan: Plan = subscription.plan
        dias_restantes: int = math.ceil((subscription.fecha_fin - now).total_seconds() / 86400)
        return ActiveSubscriptionResponse(
            **PlanFeatures.model_validate(plan).model_dump(),
            id_suscripcion=subscription.id_suscripcion,
            fecha_inicio=subscription.fecha_inicio,
            fecha_fin=subscription.fecha_fin,
            estado=subscription.estado,
            servicios_utilizados_mes=subscription.servicios_utilizados_mes,
            ultimo_reinicio_contador=subscription.ultimo_reinicio_contador,
            auto_renovar=subscription.auto_renovar,
            id_plan=plan.id_plan,
            plan_nombre=plan.nombre,
            plan_tipo=plan.tipo,
            plan_descripcion=plan.descripcion,
            precio_mensual=plan.precio_mensual,
            cantidad_servicios_mes=plan.cantidad_servicios_mes,
            servicios_incluidos=self._plan_services(plan),
            dias_restantes=dias_restantes,
            servicios_restantes=quota_remaining(subscription),
        )

    async def check_subscription(self, db: AsyncSession, current_user: User, now: datetime) -> SubscriptionCheck:
        """예약 화면용 구독 확인 — 요금제 서비스 할인가 포함.

        Booking-screen check. ``serviciosDisponibles`` is ``-1`` for
        unlimited plans.
        """
        subscription = await subscription_repository.current_active(db, current_user.id_usuario, _day_start(now))
        if subscription is None:
            return SubscriptionCheck(tieneSuscripcion=False)
        await self.normalize_quota(db, subscription, now)

        plan: Plan = subscription.plan
        remaining = quota_remaining(subscription)
        return SubscriptionCheck(
            tieneSuscripcion=True,
            suscripcion=CheckSubscriptionInfo(
                id=subscription.id_suscripcion,
                estado=subscription.estado,
                fechaInicio=subscription.fecha_inicio,
                fechaFin=subscription.fecha_fin,
                serviciosUtilizadosMes=subscription.servicios_utilizados_mes,
                plan=CheckPlanInfo(
                    id=plan.id_plan,
                    nombre=plan.nombre,
                    tipo=plan.tipo,
                    descripcion=plan.descripcion,
                    precioMensual=plan.precio_mensual,
                    cantidadServiciosMes=plan.cantidad_servicios_mes,
                ),
            ),
            serviciosPlan=[
                PlanServicePrice(
                    id_servicio=link.service.id_servicio,
                    nombre_servicio=link.service.nombre_servicio,
                    descripcion=link.service.descripcion,
                    precio_original=link.service.precio,
                    porcentaje_descuento=link.porcentaje_descuento,
                    precio_con_descuento=apply_discount(link.service.precio, link.porcentaje_descuento),
                )
                for link in plan.plan_services
            ],
            serviciosDisponibles=-1 if remaining == UNLIMITED else remaining,
        )

    async def history(self, db: AsyncSession, current_user: User) -> list[SubscriptionHistoryItem]:
        subscriptions = await subscription_repository.history(db, current_user.id_usuario)
        return [
            SubscriptionHistoryItem(
                id_suscripcion=item.id_suscripcion,
                fecha_inicio=item.fecha_inicio,
                fecha_fin=item.fecha_fin,
                estado=item.estado,
                servicios_utilizados_mes=item.servicios_utilizados_mes,
                plan_nombre=item.plan.nombre,
                plan_tipo=item.plan.tipo,
                precio_mensual=item.plan.precio_mensual,
            )
            for item in subscriptions
        ]

    async def cancel(self, db: AsyncSession, current_user: User, suscripcion_id: int) -> None:
        """구독 해지 — 종료일까지 혜택 유지, 자동 갱신 해제.

        Cancel a subscription of the user; benefits stay until ``fecha_fin``.

        Raises:
            NotFoundError: 본인 구독이 아님 (Not the user's subscription)
        """
        subscription = await subscription_repository.get_owned(db, suscripcion_id, current_user.id_usuario)
        if subscription is None:
            raise NotFoundError("Suscripción no encontrada")
        await subscription_repository.update_fields(
            db,
            subscription.id_suscripcion,
            {"estado": SUBSCRIPTION_CANCELLED, "auto_renovar": False},
        )
        logger.info("Subscription %s cancelled by user %s", suscripcion_id, current_user.id_usuario)


# 싱글턴 인스턴스 — Singleton instance
subscription_service: SubscriptionService = SubscriptionService()
