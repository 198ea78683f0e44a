"""업체 평가 Pydantic 스키마 정의 (Rating schemas)."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class RatingCreate(BaseModel):
    """평가 생성 요청.

    Rating request. The 1-5 range is checked by the service so an out of
    range score answers 400 with a readable message. ``empresa_id`` is
    accepted for older clients; the business is taken from the reservation.
    """

    reserva_id: int
    puntuacion: int
    comentario: str | None = None
    empresa_id: int | None = None


class RatingResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id_calificacion: int
    reserva_id: int
    empresa_id: int
    usuario_id: int
    puntuacion: int
    comentario: str
    fecha_creacion: datetime
