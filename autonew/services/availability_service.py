"""시간대 가용성 서비스 — 업체별 하루 예약 가능 시간.

Slot Availability Service — Hourly slot grid of a business for one day.
Slots run every hour from 08:00 to 18:00. A slot is occupied by any
non-cancelled reservation at that exact time; on today's date, slots whose
hour is not after the current hour are reported as past.
"""

from datetime import date, datetime, time

from sqlalchemy.ext.asyncio import AsyncSession

from autonew.config import settings
from autonew.models.reservation import ReservationStatus
from autonew.repositories.reservation_repository import reservation_repository
from autonew.schemas.reservation import SlotAvailability, SlotStatus


def slot_grid() -> list[time]:
    """영업 시간대 목록 (Hourly slot grid)."""
    return [time(hour=hour) for hour in range(settings.SLOT_FIRST_HOUR, settings.SLOT_LAST_HOUR + 1)]


def _label(value: time) -> str:
    return value.strftime("%H:%M")


class AvailabilityService:
    """시간대 가용성 비즈니스 로직 (Slot availability logic)."""

    async def available_slots(
        self,
        db: AsyncSession,
        empresa_id: int,
        fecha: date,
        now: datetime,
    ) -> SlotAvailability:
        """업체의 하루 시간대 상태를 계산합니다.

        Compute the slot grid of a business for ``fecha``.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            empresa_id: 업체 ID (Business id)
            fecha: 조회 날짜 (Day to inspect)
            now: 현재 현지 시각 (Current local time)

        Returns:
            SlotAvailability: 전체 시간대 상태와 예약 가능 목록
        """
        occupied: set[time] = await reservation_repository.occupied_times(db, empresa_id, fecha)
        es_hoy: bool = fecha == now.date()

        slots: list[SlotStatus] = []
        for slot in slot_grid():
            ocupado: bool = slot in occupied
            pasado: bool = es_hoy and slot.hour <= now.hour
            slots.append(SlotStatus(hora=_label(slot), disponible=not ocupado and not pasado, ocupado=ocupado, pasado=pasado))

        return SlotAvailability(
            horariosDisponibles=[slot.hora for slot in slots if slot.disponible],
            todosLosHorarios=slots,
            horasOcupadas=sorted(_label(value) for value in occupied),
            esHoy=es_hoy,
        )

    async def is_slot_free(
        self,
        db: AsyncSession,
        empresa_id: int,
        fecha: date,
        hora: time,
        exclude_id: int | None = None,
        ignore_expired: bool = False,
    ) -> bool:
        """해당 시각이 비어 있는지 확인합니다.

        Check whether the business has no occupying reservation at this
        date and time. Cancelled rows never occupy a slot; with
        ``ignore_expired`` expired rows do not either.
        """
        free_states: tuple[str, ...] = (ReservationStatus.CANCELLED.value,)
        if ignore_expired:
            free_states += (ReservationStatus.EXPIRED.value,)
        taken: bool = await reservation_repository.slot_taken(
            db, empresa_id, fecha, hora, exclude_id=exclude_id, free_states=free_states
        )
        return not taken


# 싱글턴 인스턴스 — Singleton instance
availability_service: AvailabilityService = AvailabilityService()
