"""예약 레포지토리 — 예약 조회, 만료 처리, 시간대 점유, 정산 대상 쿼리.

Reservation Repository — Reservation lookups, the expiry sweep, slot
occupancy checks and settlement queries.
"""

from datetime import date, datetime, time
from decimal import Decimal
from typing import Any, Sequence

from sqlalchemy import Select, and_, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from autonew.models.reservation import OPEN_STATUSES, Reservation, ReservationService, ReservationStatus
from autonew.repositories.base import BaseRepository

# 상세 조회 시 함께 로드할 관계 — Relationships loaded with every detail read
_DETAIL_OPTIONS = (
    selectinload(Reservation.services).selectinload(ReservationService.service),
    selectinload(Reservation.business),
    selectinload(Reservation.user),
)


class ReservationRepository(BaseRepository[Reservation]):
    """예약 테이블에 대한 데이터베이스 쿼리를 담당하는 레포지토리.

    Repository handling database queries for reservations and line items.
    """

    def __init__(self) -> None:
        super().__init__(Reservation)

    async def code_exists(self, db: AsyncSession, numero_reserva: str) -> bool:
        """예약 번호 사용 여부 (Whether a booking code is already stored)."""
        result = await db.execute(
            select(Reservation.id_reserva).where(Reservation.numero_reserva == numero_reserva).limit(1)
        )
        return result.scalar_one_or_none() is not None

    async def expire_overdue(self, db: AsyncSession, usuario_id: int, cutoff: datetime) -> int:
        """예약 시각이 cutoff 이전인 열린 예약을 한 번의 UPDATE로 만료 처리합니다.

        Mark every open reservation of the user whose date+time is before
        ``cutoff`` as expired, in a single statement. Idempotent.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            usuario_id: 고객 ID (Customer id)
            cutoff: 기준 시각 = 현재 - 유예 시간 (now minus the grace period)

        Returns:
            int: 만료된 예약 수 (Number of reservations expired)
        """
        cutoff_date: date = cutoff.date()
        cutoff_time: time = cutoff.time()
        result = await db.execute(
            update(Reservation)
            .where(
                Reservation.usuario_id == usuario_id,
                Reservation.estado.in_(OPEN_STATUSES),
                or_(
                    Reservation.fecha < cutoff_date,
                    and_(Reservation.fecha == cutoff_date, Reservation.hora < cutoff_time),
                ),
            )
            .values({Reservation.estado: ReservationStatus.EXPIRED.value})
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount or 0

    async def get_detail(self, db: AsyncSession, reserva_id: int) -> Reservation | None:
        """서비스 항목, 업체, 고객을 포함한 예약 상세 (Reservation with relationships)."""
        result = await db.execute(
            select(Reservation)
            .options(*_DETAIL_OPTIONS)
            .where(Reservation.id_reserva == reserva_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def get_by_code(self, db: AsyncSession, numero_reserva: str) -> Reservation | None:
        result = await db.execute(
            select(Reservation)
            .options(*_DETAIL_OPTIONS)
            .where(Reservation.numero_reserva == numero_reserva)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def list_for_user(
        self,
        db: AsyncSession,
        usuario_id: int,
        estado: str | None = None,
    ) -> Sequence[Reservation]:
        """고객의 예약 목록, 최신 날짜순 (Customer reservations, newest first)."""
        query: Select = (
            select(Reservation)
            .options(*_DETAIL_OPTIONS)
            .where(Reservation.usuario_id == usuario_id)
            .order_by(Reservation.fecha.desc(), Reservation.hora.desc(), Reservation.id_reserva.desc())
            .execution_options(populate_existing=True)
        )
        if estado:
            query = query.where(Reservation.estado == estado)
        result = await db.execute(query)
        return result.scalars().all()

    def business_query(
        self,
        empresa_id: int,
        estado: str | None = None,
        fecha: date | None = None,
    ) -> Select:
        """업체 예약 목록 쿼리 — 상태/날짜 필터 (Business reservations query)."""
        query: Select = (
            select(Reservation)
            .options(*_DETAIL_OPTIONS)
            .where(Reservation.empresa_id == empresa_id)
            .order_by(Reservation.fecha.desc(), Reservation.hora.desc(), Reservation.id_reserva.desc())
        )
        if estado:
            query = query.where(Reservation.estado == estado)
        if fecha is not None:
            query = query.where(Reservation.fecha == fecha)
        return query

    async def slot_taken(
        self,
        db: AsyncSession,
        empresa_id: int,
        fecha: date,
        hora: time,
        exclude_id: int | None = None,
        free_states: Sequence[str] = (ReservationStatus.CANCELLED.value,),
    ) -> bool:
        """업체의 해당 날짜/시각에 점유 예약이 있는지 확인합니다.

        Check whether the business already has a reservation at this exact
        date and time in a state not listed in ``free_states``.

        Args:
            exclude_id: 검사에서 제외할 예약 (Reservation being moved)
            free_states: 점유로 보지 않는 상태 (States that do not occupy a slot)
        """
        query: Select = select(Reservation.id_reserva).where(
            Reservation.empresa_id == empresa_id,
            Reservation.fecha == fecha,
            Reservation.hora == hora,
            Reservation.estado.not_in(list(free_states)),
        )
        if exclude_id is not None:
            query = query.where(Reservation.id_reserva != exclude_id)
        result = await db.execute(query.limit(1))
        return result.scalar_one_or_none() is not None

    async def occupied_times(self, db: AsyncSession, empresa_id: int, fecha: date) -> set[time]:
        """해당 날짜에 취소되지 않은 예약이 있는 시각 (Occupied times for a day)."""
        result = await db.execute(
            select(Reservation.hora).where(
                Reservation.empresa_id == empresa_id,
                Reservation.fecha == fecha,
                Reservation.estado != ReservationStatus.CANCELLED.value,
            )
        )
        return {value.replace(microsecond=0) for value in result.scalars().all()}

    async def add_line(self, db: AsyncSession, line: dict[str, Any]) -> ReservationService:
        item = ReservationService(**line)
        db.add(item)
        await db.flush()
        return item

    async def applied_total(self, db: AsyncSession, reserva_id: int) -> Decimal:
        """현재 서비스 항목 적용가 합계 (Sum of current applied prices)."""
        total = (
            await db.execute(
                select(func.coalesce(func.sum(ReservationService.precio_aplicado), 0)).where(
                    ReservationService.reserva_id == reserva_id
                )
            )
        ).scalar()
        return Decimal(str(total or 0))

    async def completed_by_settlement(
        self,
        db: AsyncSession,
        empresa_id: int,
        settled: bool,
    ) -> Sequence[Reservation]:
        """완료 예약 중 정산 여부로 필터링한 목록.

        Completed reservations of a business filtered by ``pagado_empresa``.
        """
        result = await db.execute(
            select(Reservation)
            .options(*_DETAIL_OPTIONS)
            .where(
                Reservation.empresa_id == empresa_id,
                Reservation.estado == ReservationStatus.COMPLETED.value,
                Reservation.pagado_empresa.is_(settled),
            )
            .order_by(Reservation.fecha.desc(), Reservation.hora.desc())
        )
        return result.scalars().all()

    async def unsettled_summary(self, db: AsyncSession, empresa_id: int) -> tuple[int, Decimal]:
        """미정산 완료 예약 수와 금액 (Count and value of unsettled completed bookings)."""
        row = (
            await db.execute(
                select(
                    func.count(func.distinct(Reservation.id_reserva)),
                    func.coalesce(func.sum(ReservationService.precio_aplicado), 0),
                )
                .select_from(Reservation)
                .join(ReservationService, ReservationService.reserva_id == Reservation.id_reserva)
                .where(
                    Reservation.empresa_id == empresa_id,
                    Reservation.estado == ReservationStatus.COMPLETED.value,
                    Reservation.pagado_empresa.is_(False),
                )
            )
        ).one()
        return int(row[0] or 0), Decimal(str(row[1] or 0))


# 싱글턴 인스턴스 — Singleton instance
reservation_repository: ReservationRepository = ReservationRepository()
