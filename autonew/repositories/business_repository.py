"""업체 레포지토리 — 업체 계정, 프로필 통계 쿼리.

Business Repository — Business account lookups and profile statistics.
"""

from decimal import Decimal

from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from autonew.models.business import Business
from autonew.models.reservation import Reservation, ReservationService, ReservationStatus
from autonew.repositories.credential_repository import CredentialRepository


class BusinessRepository(CredentialRepository[Business]):
    """업체 테이블에 대한 데이터베이스 쿼리를 담당하는 레포지토리.

    Repository handling database queries for the business table.
    """

    login_field = "email"

    def __init__(self) -> None:
        super().__init__(Business)

    async def email_taken_by_other(self, db: AsyncSession, email: str, empresa_id: int) -> bool:
        """다른 업체가 같은 이메일을 쓰는지 확인합니다.

        Check whether another business already uses the email.
        """
        result = await db.execute(
            select(Business.id_empresa).where(Business.email == email, Business.id_empresa != empresa_id).limit(1)
        )
        return result.scalar_one_or_none() is not None

    async def get_stats(self, db: AsyncSession, empresa_id: int) -> dict[str, int | Decimal]:
        """업체 예약 통계 — 전체/완료 예약 수와 완료 예약 매출.

        Booking statistics for the profile screen: total reservations,
        completed reservations, and revenue from completed reservations.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            empresa_id: 업체 ID (Business id)

        Returns:
            dict: totalReservas, reservasCompletadas, ingresosTotales
        """
        completed = ReservationStatus.COMPLETED.value
        counts = (
            await db.execute(
                select(
                    func.count(Reservation.id_reserva),
                    func.coalesce(func.sum(case((Reservation.estado == completed, 1), else_=0)), 0),
                ).where(Reservation.empresa_id == empresa_id)
            )
        ).one()

        revenue = (
            await db.execute(
                select(func.coalesce(func.sum(ReservationService.precio_aplicado), 0))
                .join(Reservation, Reservation.id_reserva == ReservationService.reserva_id)
                .where(Reservation.empresa_id == empresa_id, Reservation.estado == completed)
            )
        ).scalar()

        return {
            "totalReservas": int(counts[0] or 0),
            "reservasCompletadas": int(counts[1] or 0),
            "ingresosTotales": Decimal(str(revenue or 0)),
        }


# 싱글턴 인스턴스 — Singleton instance
business_repository: BusinessRepository = BusinessRepository()
