"""업체 평가 서비스 — 완료된 예약에 대한 1회 평가.

Rating Service — One 1-5 rating per completed reservation.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from autonew.models.rating import Rating
from autonew.models.reservation import Reservation, ReservationStatus
from autonew.models.user import User
from autonew.repositories.rating_repository import rating_repository
from autonew.repositories.reservation_repository import reservation_repository
from autonew.schemas.rating import RatingCreate, RatingResponse
from autonew.utils.exceptions import BadRequestError, ConflictError, DuplicateError, ForbiddenError, NotFoundError

logger = logging.getLogger(__name__)

MIN_SCORE: int = 1
MAX_SCORE: int = 5


class RatingService:
    """평가 비즈니스 로직 (Rating business logic)."""

    async def create(self, db: AsyncSession, current_user: User, data: RatingCreate) -> RatingResponse:
        """완료된 본인 예약에 평가를 남깁니다.

        Rate a completed reservation of the customer. The rated business is
        always the reservation's business.

        Raises:
            BadRequestError: 점수가 1-5 범위 밖 (Score out of range)
            NotFoundError: 예약 없음 (Unknown reservation)
            ForbiddenError: 본인 예약 아님 (Not the customer's reservation)
            ConflictError: 완료되지 않은 예약 (Reservation not completed)
            DuplicateError: 이미 평가됨 (Already rated)
        """
        if not MIN_SCORE <= data.puntuacion <= MAX_SCORE:
            raise BadRequestError("La puntuación debe estar entre 1 y 5")

        reservation: Reservation | None = await reservation_repository.get_by_id(db, data.reserva_id)
        if reservation is None:
            raise NotFoundError("Reserva no encontrada")
        if reservation.usuario_id != current_user.id_usuario:
            raise ForbiddenError("No puedes calificar una reserva que no es tuya")
        if reservation.estado != ReservationStatus.COMPLETED.value:
            raise ConflictError(
                "Solo se pueden calificar reservas completadas",
                extra={"estado_actual": reservation.estado},
            )
        if await rating_repository.get_by_reservation(db, reservation.id_reserva) is not None:
            raise DuplicateError("Ya existe una calificación para esta reserva")

        rating: Rating = await rating_repository.create(
            db,
            {
                "reserva_id": reservation.id_reserva,
                "empresa_id": reservation.empresa_id,
                "usuario_id": current_user.id_usuario,
                "puntuacion": data.puntuacion,
                "comentario": data.comentario or "",
            },
        )
        logger.info("Reservation %s rated %s by user %s", reservation.id_reserva, data.puntuacion, current_user.id_usuario)
        return RatingResponse.model_validate(rating)

    async def for_reservation(self, db: AsyncSession, reserva_id: int) -> RatingResponse | None:
        rating: Rating | None = await rating_repository.get_by_reservation(db, reserva_id)
        return RatingResponse.model_validate(rating) if rating else None


# 싱글턴 인스턴스 — Singleton instance
rating_service: RatingService = RatingService()
