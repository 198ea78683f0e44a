"""세차 업체 SQLAlchemy ORM 모델 정의.

Car-wash business SQLAlchemy ORM model definitions.
Businesses are created out-of-band (seed or back-office) and must be
verified before clients can book them.

Tables:
    - lavado_auto_empresa: 업체 계정, 위치, 정산 계좌 정보
      (Business accounts, geolocation, banking and tax data)
"""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Float, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from autonew.database import Base
from autonew.models.user import LockoutMixin

# 정산 계좌/세무 필드 — 업체가 수정하면 검증 상태가 초기화됨
# Banking/tax fields; editing them resets the banking verification flag
BANKING_FIELDS: tuple[str, ...] = (
    "titular_cuenta",
    "tipo_documento_titular",
    "numero_documento_titular",
    "banco",
    "tipo_cuenta",
    "numero_cuenta",
    "swift_code",
    "iban",
    "nit_empresa",
    "razon_social",
    "regimen_tributario",
    "email_facturacion",
    "telefono_facturacion",
    "responsable_pagos",
    "notas_bancarias",
)


class Business(LockoutMixin, Base):
    """업체 모델 — 세차 서비스를 제공하는 사업자.

    Business model. Shares the lockout columns with customers.

    Attributes:
        id_empresa: 고유 식별자 (Primary key)
        nombre_empresa: 업체명 (Business name)
        email: 로그인 이메일, 고유 (Unique login email)
        password_hash: 비밀번호 해시, 컬럼명 ``contrasena`` (Credential hash)
        verificada: 검증 여부, True여야 예약 가능 (Must be True to be bookable)
        is_active: 활성 상태 (Active flag)
        datos_bancarios_verificados: 계좌 정보 검증 여부 (Banking data verified)
    """

    __tablename__ = "lavado_auto_empresa"

    # 업체 고유 식별자 — Business primary key
    id_empresa: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    nombre_empresa: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str] = mapped_column(String(254), nullable=False, unique=True)
    # 비밀번호 해시 — Legacy column name "contrasena"
    password_hash: Mapped[str] = mapped_column("contrasena", String(128), nullable=False)
    direccion: Mapped[str] = mapped_column(String(255), default="", nullable=False)
    telefono: Mapped[str] = mapped_column(String(20), default="", nullable=False)
    verificada: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    latitud: Mapped[float | None] = mapped_column(Float, nullable=True)
    longitud: Mapped[float | None] = mapped_column(Float, nullable=True)
    profile_image: Mapped[str | None] = mapped_column(String(500), nullable=True)
    fecha_registro: Mapped[datetime] = mapped_column(DateTime, default=datetime.now, nullable=False)

    # 정산 계좌 정보 — Payout banking information
    titular_cuenta: Mapped[str | None] = mapped_column(String(200), nullable=True)
    tipo_documento_titular: Mapped[str | None] = mapped_column(String(20), nullable=True)
    numero_documento_titular: Mapped[str | None] = mapped_column(String(50), nullable=True)
    banco: Mapped[str | None] = mapped_column(String(100), nullable=True)
    tipo_cuenta: Mapped[str | None] = mapped_column(String(20), nullable=True)
    numero_cuenta: Mapped[str | None] = mapped_column(String(50), nullable=True)
    swift_code: Mapped[str | None] = mapped_column(String(20), nullable=True)
    iban: Mapped[str | None] = mapped_column(String(50), nullable=True)
    # 세무 정보 — Tax information
    nit_empresa: Mapped[str | None] = mapped_column(String(30), nullable=True)
    razon_social: Mapped[str | None] = mapped_column(String(200), nullable=True)
    regimen_tributario: Mapped[str | None] = mapped_column(String(50), nullable=True)
    # 청구 연락처 — Billing contact
    email_facturacion: Mapped[str | None] = mapped_column(String(254), nullable=True)
    telefono_facturacion: Mapped[str | None] = mapped_column(String(20), nullable=True)
    responsable_pagos: Mapped[str | None] = mapped_column(String(150), nullable=True)
    # 검증 상태 — Banking verification state (set by the back-office)
    datos_bancarios_verificados: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    fecha_verificacion_bancaria: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    notas_bancarias: Mapped[str | None] = mapped_column(Text, nullable=True)

    @property
    def principal_id(self) -> int:
        return self.id_empresa

    @property
    def contact_email(self) -> str:
        return self.email
