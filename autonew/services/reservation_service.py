"""예약 서비스 — 예약 생성, 만료, 취소, 일정 변경, 복구, QR 완료.

Reservation Service — The booking lifecycle.

Lifecycle:
    - 생성: 업체 확인 → 시간대 확인 → 구독 한도 사용 → 번호 발급 → 항목 가격 책정
      (Create: business check, slot check, quota, booking code, priced lines)
    - 만료: 예약 시각 + 1시간 경과한 열린 예약은 고객 조회/변경 시 vencida 처리
      (Expiry sweep on every customer read/write path)
    - 복구: vencida 예약을 25% 수수료로 새 시간대에 재예약
      (Paid recovery of an expired booking into a new slot)
    - 완료: 예약 당일 고객이 업체 QR을 스캔하여 완료 처리
      (Same-day completion by scanning the business QR)

All status changes go through ``reservation_state.ensure_transition``.
"""

import json
import logging
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from functools import partial

from sqlalchemy.ext.asyncio import AsyncSession

from autonew.config import settings
from autonew.models.business import Business
from autonew.models.reservation import OPEN_STATUSES, Reservation, ReservationStatus
from autonew.models.user import User
from autonew.repositories.business_repository import business_repository
from autonew.repositories.catalog_repository import catalog_repository
from autonew.repositories.reservation_repository import reservation_repository
from autonew.schemas.reservation import (
    BusinessReservationPage,
    QrCompletion,
    QrPayload,
    QrVerifyRequest,
    RecoverRequest,
    RecoveryQuote,
    RecoveryReservationInfo,
    RecoveryResult,
    ReservationCreate,
    ReservationResponse,
    RescheduleRequest,
    RescheduleResult,
)
from autonew.services.availability_service import availability_service
from autonew.services.reservation_state import ensure_transition
from autonew.services.subscription_service import apply_discount, subscription_service
from autonew.utils.booking_code import generate_booking_code
from autonew.utils.exceptions import BadRequestError, ConflictError, ForbiddenError, NotFoundError
from autonew.utils.pagination import page_info, paginate

logger = logging.getLogger(__name__)

DEFAULT_VEHICLE_TYPE: str = "No especificado"
_CENT: Decimal = Decimal("0.01")


def recovery_surcharge(total: Decimal) -> Decimal:
    """복구 수수료 = 현재 적용가 합계 × 25% (Recovery surcharge)."""
    rate: Decimal = Decimal(str(settings.RECOVERY_SURCHARGE_RATE))
    return (Decimal(total) * rate).quantize(_CENT)


def _ensure_future(fecha: date, hora: time, now: datetime) -> None:
    if datetime.combine(fecha, hora) <= now:
        raise BadRequestError("La nueva fecha y hora deben ser posteriores al momento actual")


class ReservationService:
    """예약 관련 비즈니스 로직을 처리하는 서비스.

    Service handling the reservation lifecycle for customers and businesses.
    Every method receives the request's ``now`` from the injected clock.
    """

    # ─── 공통 (Shared helpers) ───

    async def expire_overdue(self, db: AsyncSession, usuario_id: int, now: datetime) -> int:
        """고객의 지난 열린 예약을 만료 처리합니다.

        Mark every open reservation of the customer whose slot started more
        than ``EXPIRY_GRACE_MINUTES`` ago as expired. Idempotent.

        Returns:
            int: 만료된 예약 수 (Number of reservations expired)
        """
        cutoff: datetime = now - timedelta(minutes=settings.EXPIRY_GRACE_MINUTES)
        expired: int = await reservation_repository.expire_overdue(db, usuario_id, cutoff)
        if expired:
            logger.info("Expired %s overdue reservations for user %s", expired, usuario_id)
        return expired

    async def _get_owned(self, db: AsyncSession, reserva_id: int, current_user: User) -> Reservation:
        reservation: Reservation | None = await reservation_repository.get_detail(db, reserva_id)
        if reservation is None:
            raise NotFoundError("Reserva no encontrada")
        if reservation.usuario_id != current_user.id_usuario:
            raise ForbiddenError("No tienes permiso para modificar esta reserva")
        return reservation

    async def _reload(self, db: AsyncSession, reserva_id: int) -> ReservationResponse:
        reservation: Reservation | None = await reservation_repository.get_detail(db, reserva_id)
        return ReservationResponse.from_model(reservation)

    # ─── 고객 (Customer operations) ───

    async def create(
        self,
        db: AsyncSession,
        current_user: User,
        data: ReservationCreate,
        now: datetime,
    ) -> ReservationResponse:
        """예약을 생성합니다.

        Create a reservation with its priced service lines. Everything runs
        in the request transaction: a failure after the quota increment or
        the insert rolls all of it back.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            current_user: 예약 고객 (Customer making the booking)
            data: 예약 요청 데이터 (Booking request)
            now: 현재 현지 시각 (Current local time)

        Returns:
            ReservationResponse: 생성된 예약과 항목 (Created booking with lines)

        Raises:
            NotFoundError: 업체 없음·미검증, 구독 또는 서비스 없음 (Unknown or unverified business, subscription or service)
            ConflictError: 점유된 시간대 또는 소진된 구독 한도 (Slot taken or quota exhausted)
        """
        business: Business | None = await business_repository.get_by_id(db, data.empresa_id)
        if business is None or not business.is_active or not business.verificada:
            raise NotFoundError("Empresa no encontrada")

        if not await availability_service.is_slot_free(db, data.empresa_id, data.fecha, data.hora):
            raise ConflictError("El horario seleccionado ya no está disponible")

        subscription_id: int | None = None
        if data.usar_suscripcion and data.suscripcion_id:
            subscription = await subscription_service.consume_quota(db, current_user.id_usuario, data.suscripcion_id, now)
            subscription_id = subscription.id_suscripcion

        es_pago_individual: bool = data.es_pago_individual is not False and subscription_id is None
        tipo_vehiculo: str = (data.tipo_vehiculo or DEFAULT_VEHICLE_TYPE) if data.es_reserva_empresarial else DEFAULT_VEHICLE_TYPE

        numero_reserva: str = await generate_booking_code(
            data.es_reserva_empresarial,
            partial(reservation_repository.code_exists, db),
        )

        reservation: Reservation = await reservation_repository.create(
            db,
            {
                "numero_reserva": numero_reserva,
                "fecha": data.fecha,
                "hora": data.hora,
                "estado": ReservationStatus.PENDING.value,
                "empresa_id": data.empresa_id,
                "usuario_id": current_user.id_usuario,
                "es_pago_individual": es_pago_individual,
                "es_reserva_empresarial": data.es_reserva_empresarial,
                "placa_vehiculo": data.placa_vehiculo,
                "tipo_vehiculo": tipo_vehiculo,
                "conductor_asignado": data.conductor_asignado or current_user.nombre_completo,
                "observaciones_empresariales": data.observaciones_empresariales or "",
                "suscripcion_utilizada_id": subscription_id,
            },
        )

        # 항목 가격 — 요금제 항목만 할인 적용 (Only plan lines are discounted)
        catalog = await catalog_repository.get_by_ids(db, [line.id_servicio for line in data.servicios])
        for line in data.servicios:
            service = catalog.get(line.id_servicio)
            if service is None:
                raise NotFoundError(f"Servicio {line.id_servicio} no encontrado")
            descuento: Decimal = line.descuento if line.es_servicio_plan else Decimal("0")
            await reservation_repository.add_line(
                db,
                {
                    "reserva_id": reservation.id_reserva,
                    "servicio_id": service.id_servicio,
                    "precio_original": service.precio,
                    "precio_aplicado": apply_discount(service.precio, descuento),
                    "es_servicio_plan": line.es_servicio_plan,
                    "descuento_plan_individual": descuento,
                },
            )

        logger.info(
            "Reservation %s created for user %s at business %s (%s %s)",
            numero_reserva,
            current_user.id_usuario,
            data.empresa_id,
            data.fecha,
            data.hora,
        )
        return await self._reload(db, reservation.id_reserva)

    async def list_for_user(
        self,
        db: AsyncSession,
        current_user: User,
        usuario_id: int,
        estado: str | None,
        now: datetime,
    ) -> list[ReservationResponse]:
        """본인 예약 목록 — 만료 처리 후 반환 (Own reservations after the sweep)."""
        if usuario_id != current_user.id_usuario:
            raise ForbiddenError("No tienes permiso para ver estas reservas")
        await self.expire_overdue(db, current_user.id_usuario, now)
        reservations = await reservation_repository.list_for_user(db, current_user.id_usuario, estado)
        return [ReservationResponse.from_model(reservation) for reservation in reservations]

    async def get_by_code(
        self,
        db: AsyncSession,
        current_user: User,
        numero_reserva: str,
        now: datetime,
    ) -> ReservationResponse:
        """예약 번호로 본인 예약 조회 — 타인 예약은 404.

        Look up one of the customer's reservations by booking code.
        Another customer's code answers 404, not 403.
        """
        await self.expire_overdue(db, current_user.id_usuario, now)
        reservation: Reservation | None = await reservation_repository.get_by_code(db, numero_reserva)
        if reservation is None or reservation.usuario_id != current_user.id_usuario:
            raise NotFoundError("Reserva no encontrada")
        return ReservationResponse.from_model(reservation)

    async def cancel(
        self,
        db: AsyncSession,
        current_user: User,
        reserva_id: int,
        now: datetime,
    ) -> ReservationResponse:
        """열린 예약을 취소합니다 (Cancel an open reservation).

        Raises:
            NotFoundError: 예약 없음
            ForbiddenError: 본인 예약 아님
            ConflictError: 취소 불가 상태 (``estado_actual`` 포함)
        """
        await self.expire_overdue(db, current_user.id_usuario, now)
        reservation: Reservation = await self._get_owned(db, reserva_id, current_user)
        ensure_transition(reservation.estado, ReservationStatus.CANCELLED, "cancelar")

        await reservation_repository.update_fields(db, reservation.id_reserva, {"estado": ReservationStatus.CANCELLED.value})
        logger.info("Reservation %s cancelled by user %s", reservation.numero_reserva, current_user.id_usuario)
        return await self._reload(db, reservation.id_reserva)

    async def reschedule(
        self,
        db: AsyncSession,
        current_user: User,
        reserva_id: int,
        data: RescheduleRequest,
        now: datetime,
    ) -> RescheduleResult:
        """열린 예약의 날짜/시각을 변경합니다.

        Move an open reservation to another free slot of the same business.
        The reservation's own row never blocks the new slot.
        """
        await self.expire_overdue(db, current_user.id_usuario, now)
        reservation: Reservation = await self._get_owned(db, reserva_id, current_user)
        if reservation.estado not in OPEN_STATUSES:
            raise ConflictError(
                f"No se puede reagendar una reserva en estado: {reservation.estado}",
                extra={"estado_actual": reservation.estado},
            )
        _ensure_future(data.nueva_fecha, data.nueva_hora, now)

        free: bool = await availability_service.is_slot_free(
            db, reservation.empresa_id, data.nueva_fecha, data.nueva_hora, exclude_id=reservation.id_reserva
        )
        if not free:
            raise ConflictError("El horario seleccionado ya no está disponible")

        await reservation_repository.update_fields(
            db, reservation.id_reserva, {"fecha": data.nueva_fecha, "hora": data.nueva_hora}
        )
        return RescheduleResult(reserva=await self._reload(db, reservation.id_reserva))

    async def complete_by_qr(
        self,
        db: AsyncSession,
        current_user: User,
        data: QrVerifyRequest,
        now: datetime,
    ) -> QrCompletion:
        """QR 스캔으로 당일 예약을 완료합니다.

        Complete a pending reservation scanned from the business QR. Only
        the owner can complete it, and only on the reservation's own date.

        Raises:
            BadRequestError: 번호/ID 없음 또는 예약일이 오늘이 아님
                             (``fecha_reserva`` / ``fecha_actual`` 포함)
            NotFoundError: 예약 없음
            ForbiddenError: 본인 예약 아님
            ConflictError: 대기 상태 아님 (``estado_actual`` 포함)
        """
        if not data.numero_reserva and data.id_reserva is None:
            raise BadRequestError("Debes proporcionar el número o el id de la reserva")

        await self.expire_overdue(db, current_user.id_usuario, now)
        if data.numero_reserva:
            reservation: Reservation | None = await reservation_repository.get_by_code(db, data.numero_reserva)
        else:
            reservation = await reservation_repository.get_detail(db, data.id_reserva)
        if reservation is None:
            raise NotFoundError("Reserva no encontrada")
        if reservation.usuario_id != current_user.id_usuario:
            raise ForbiddenError("Esta reserva no te pertenece")
        ensure_transition(reservation.estado, ReservationStatus.COMPLETED, "completar")

        today: date = now.date()
        if reservation.fecha != today:
            raise BadRequestError(
                "Solo puedes completar la reserva el día programado",
                extra={"fecha_reserva": reservation.fecha.isoformat(), "fecha_actual": today.isoformat()},
            )

        await reservation_repository.update_fields(db, reservation.id_reserva, {"estado": ReservationStatus.COMPLETED.value})
        logger.info("Reservation %s completed by QR scan", reservation.numero_reserva)
        return QrCompletion(
            id_reserva=reservation.id_reserva,
            numero_reserva=reservation.numero_reserva,
            empresa=reservation.business.nombre_empresa,
            cliente=reservation.user.nombre_completo,
            fecha=reservation.fecha,
            hora=reservation.hora,
            estado=ReservationStatus.COMPLETED.value,
        )

    async def recovery_quote(
        self,
        db: AsyncSession,
        current_user: User,
        reserva_id: int,
        now: datetime,
    ) -> RecoveryQuote:
        """만료 예약 복구 견적 — 현재 적용가 합계의 25%.

        Quote the surcharge to recover an expired reservation. The amount to
        pay is the surcharge alone.
        """
        await self.expire_overdue(db, current_user.id_usuario, now)
        reservation: Reservation = await self._get_owned(db, reserva_id, current_user)
        ensure_transition(reservation.estado, ReservationStatus.PENDING, "recuperar")

        total: Decimal = await reservation_repository.applied_total(db, reservation.id_reserva)
        recargo: Decimal = recovery_surcharge(total)
        return RecoveryQuote(
            reserva=RecoveryReservationInfo(
                id_reserva=reservation.id_reserva,
                numero_reserva=reservation.numero_reserva,
                empresa_id=reservation.empresa_id,
                nombre_empresa=reservation.business.nombre_empresa if reservation.business else None,
                fecha_original=reservation.fecha,
                hora_original=reservation.hora,
            ),
            total_original=total,
            porcentaje_recargo=round(settings.RECOVERY_SURCHARGE_RATE * 100),
            recargo=recargo,
            total_a_pagar=recargo,
        )

    async def recover(
        self,
        db: AsyncSession,
        current_user: User,
        reserva_id: int,
        data: RecoverRequest,
        now: datetime,
    ) -> RecoveryResult:
        """결제 확인 후 만료 예약을 새 시간대로 복구합니다.

        Recover an expired reservation into a new slot after the surcharge
        payment is confirmed. Expired rows do not block the new slot, the
        reservation's own row included.

        Raises:
            BadRequestError: 결제 미확인 또는 과거 시각 (Payment not confirmed, or past slot)
            NotFoundError / ForbiddenError: 예약 없음 또는 타인 예약
            ConflictError: vencida 아님 또는 점유된 시간대 (Not expired, or slot taken)
        """
        if not data.pago_confirmado:
            raise BadRequestError("Debes confirmar el pago del recargo para recuperar la reserva")

        await self.expire_overdue(db, current_user.id_usuario, now)
        reservation: Reservation = await self._get_owned(db, reserva_id, current_user)
        ensure_transition(reservation.estado, ReservationStatus.PENDING, "recuperar")
        _ensure_future(data.nueva_fecha, data.nueva_hora, now)

        free: bool = await availability_service.is_slot_free(
            db,
            reservation.empresa_id,
            data.nueva_fecha,
            data.nueva_hora,
            exclude_id=reservation.id_reserva,
            ignore_expired=True,
        )
        if not free:
            raise ConflictError("El horario seleccionado ya no está disponible")

        total: Decimal = await reservation_repository.applied_total(db, reservation.id_reserva)
        recargo: Decimal = recovery_surcharge(total)
        await reservation_repository.update_fields(
            db,
            reservation.id_reserva,
            {
                "fecha": data.nueva_fecha,
                "hora": data.nueva_hora,
                "estado": ReservationStatus.PENDING.value,
                "fue_recuperada": True,
                "recargo_recuperacion": recargo,
            },
        )
        logger.info(
            "Reservation %s recovered to %s %s with surcharge %s",
            reservation.numero_reserva,
            data.nueva_fecha,
            data.nueva_hora,
            recargo,
        )
        return RecoveryResult(
            reserva=await self._reload(db, reservation.id_reserva),
            recargo_aplicado=recargo,
            total_original=total,
        )

    # ─── 업체 (Business operations) ───

    async def list_for_business(
        self,
        db: AsyncSession,
        business: Business,
        estado: str | None,
        fecha: date | None,
        page: int,
        per_page: int,
    ) -> BusinessReservationPage:
        """업체 예약 목록, 페이지네이션 (Paginated business reservations)."""
        query = reservation_repository.business_query(business.id_empresa, estado, fecha)
        items, total = await paginate(db, query, page, per_page)
        return BusinessReservationPage(
            reservas=[ReservationResponse.from_model(reservation) for reservation in items],
            paginacion=page_info(page, per_page, total),
        )

    async def _get_for_business(self, db: AsyncSession, business: Business, reserva_id: int) -> Reservation:
        reservation: Reservation | None = await reservation_repository.get_detail(db, reserva_id)
        if reservation is None or reservation.empresa_id != business.id_empresa:
            raise NotFoundError("Reserva no encontrada")
        return reservation

    async def update_status_by_business(
        self,
        db: AsyncSession,
        business: Business,
        reserva_id: int,
        estado: str,
    ) -> ReservationResponse:
        """업체가 자기 예약을 완료 또는 취소합니다.

        Complete or cancel one of the business's reservations. Terminal and
        expired reservations answer 409.
        """
        reservation: Reservation = await self._get_for_business(db, business, reserva_id)
        target = ReservationStatus(estado)
        ensure_transition(reservation.estado, target, "actualizar")

        await reservation_repository.update_fields(db, reservation.id_reserva, {"estado": target.value})
        logger.info("Reservation %s set to %s by business %s", reservation.numero_reserva, target.value, business.id_empresa)
        return await self._reload(db, reservation.id_reserva)

    async def qr_payload(self, db: AsyncSession, business: Business, reserva_id: int) -> QrPayload:
        """업체가 표시할 QR 데이터 — 대기 중 예약만.

        Build the JSON payload the business shows as a QR code. Only pending
        reservations can be encoded.
        """
        reservation: Reservation = await self._get_for_business(db, business, reserva_id)
        if reservation.estado not in OPEN_STATUSES:
            raise ConflictError(
                "Solo se puede generar QR para reservas pendientes",
                extra={"estado_actual": reservation.estado},
            )
        qr_data: str = json.dumps(
            {
                "numero_reserva": reservation.numero_reserva,
                "id_reserva": reservation.id_reserva,
                "empresa": reservation.business.nombre_empresa,
                "cliente": reservation.user.nombre_completo,
                "fecha": reservation.fecha.isoformat(),
                "hora": reservation.hora.strftime("%H:%M:%S"),
            },
            ensure_ascii=False,
        )
        return QrPayload(qrData=qr_data, reserva=ReservationResponse.from_model(reservation))


# 싱글턴 인스턴스 — Singleton instance
reservation_service: ReservationService = ReservationService()
