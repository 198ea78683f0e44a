"""고객 계정 및 로그인 잠금 필드 SQLAlchemy ORM 모델 정의.

Customer account and login-lockout SQLAlchemy ORM model definitions.
The table is shared with a Django back-office, so table and column names
keep the legacy ``lavado_auto_*`` naming.

Tables:
    - lavado_auto_usuario: 고객 계정 (Customer accounts)
"""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from autonew.database import Base


class LockoutMixin:
    """로그인 실패 잠금 필드 — 고객과 업체가 공유.

    Progressive lockout columns shared by customers and businesses.

    Attributes:
        failed_login_attempts: 연속 실패 횟수 (Consecutive failed logins)
        last_failed_login: 마지막 실패 시각 (Last failed login time)
        lockout_time: 잠금 시작 시각, None이면 잠금 없음 (Lock start, None = unlocked)
        first_warning_sent: 첫 잠금 경고 발송 여부 (First lock episode already happened)
    """

    failed_login_attempts: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    last_failed_login: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    lockout_time: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    first_warning_sent: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)


class User(LockoutMixin, Base):
    """고객 모델 — 예약을 생성하는 최종 사용자.

    Customer model. Role is always ``cliente``; accounts are never hard-deleted.

    Attributes:
        id_usuario: 고유 식별자 (Primary key)
        nombre_completo: 이름 (Full name, default driver name for bookings)
        nombre_usuario: 로그인 아이디, 고유 (Unique username)
        correo: 이메일, 고유 (Unique email, login identifier)
        password_hash: 비밀번호 해시, 컬럼명 ``password`` (Credential hash)
        profile_picture: 프로필 이미지 URL (Profile image URL)
    """

    __tablename__ = "lavado_auto_usuario"

    # 고객 고유 식별자 — Customer primary key
    id_usuario: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    nombre_completo: Mapped[str] = mapped_column(String(150), nullable=False)
    nombre_usuario: Mapped[str] = mapped_column(String(150), nullable=False, unique=True)
    correo: Mapped[str] = mapped_column(String(254), nullable=False, unique=True)
    # 비밀번호 해시 — Django pbkdf2_sha256 또는 bcrypt (Legacy column name "password")
    password_hash: Mapped[str] = mapped_column("password", String(128), nullable=False)
    telefono: Mapped[str] = mapped_column(String(20), default="", nullable=False)
    direccion: Mapped[str] = mapped_column(String(255), default="", nullable=False)
    # 역할 — 항상 "cliente" (Always "cliente")
    rol: Mapped[str] = mapped_column(String(20), default="cliente", nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    is_staff: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_superuser: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    fecha_registro: Mapped[datetime] = mapped_column(DateTime, default=datetime.now, nullable=False)
    profile_picture: Mapped[str | None] = mapped_column(String(500), nullable=True)

    @property
    def principal_id(self) -> int:
        return self.id_usuario

    @property
    def contact_email(self) -> str:
        return self.correo
