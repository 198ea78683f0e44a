"""업체 평가 SQLAlchemy ORM 모델 정의.

Business rating SQLAlchemy ORM model definition.

Tables:
    - lavado_auto_calificacionempresa: 완료 예약당 1건의 평가 (One rating per completed reservation)
"""

from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from autonew.database import Base


class Rating(Base):
    """평가 모델 — 1~5점과 코멘트, 재평가 불가.

    Rating of a completed reservation; ``reserva_id`` is unique.
    """

    __tablename__ = "lavado_auto_calificacionempresa"

    id_calificacion: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    reserva_id: Mapped[int] = mapped_column(Integer, ForeignKey("lavado_auto_reserva.id_reserva", ondelete="CASCADE"), nullable=False, unique=True)
    empresa_id: Mapped[int] = mapped_column(Integer, ForeignKey("lavado_auto_empresa.id_empresa"), nullable=False)
    usuario_id: Mapped[int] = mapped_column(Integer, ForeignKey("lavado_auto_usuario.id_usuario"), nullable=False)
    # 점수 — 1~5 (Score 1-5)
    puntuacion: Mapped[int] = mapped_column(Integer, nullable=False)
    comentario: Mapped[str] = mapped_column(Text, default="", nullable=False)
    fecha_creacion: Mapped[datetime] = mapped_column(DateTime, default=datetime.now, nullable=False)
    fecha_actualizacion: Mapped[datetime] = mapped_column(DateTime, default=datetime.now, onupdate=datetime.now, nullable=False)

    __table_args__ = (
        CheckConstraint("puntuacion BETWEEN 1 AND 5", name="ck_calificacion_puntuacion"),
    )
