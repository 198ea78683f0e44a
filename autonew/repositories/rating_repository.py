"""평가 레포지토리 — 예약별 업체 평가 쿼리.

Rating Repository — Per-reservation rating queries.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from autonew.models.rating import Rating
from autonew.repositories.base import BaseRepository


class RatingRepository(BaseRepository[Rating]):
    """평가 테이블 레포지토리 (Rating table repository)."""

    def __init__(self) -> None:
        super().__init__(Rating)

    async def get_by_reservation(self, db: AsyncSession, reserva_id: int) -> Rating | None:
        result = await db.execute(select(Rating).where(Rating.reserva_id == reserva_id))
        return result.scalar_one_or_none()


# 싱글턴 인스턴스 — Singleton instance
rating_repository: RatingRepository = RatingRepository()
