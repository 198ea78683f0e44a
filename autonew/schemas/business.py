"""업체 프로필 관련 Pydantic 스키마 정의.

Business profile Pydantic schema definitions: the full profile with
banking data and statistics, and the basic / banking / password updates.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from autonew.schemas.auth import EMAIL_PATTERN, BusinessSummary
from autonew.schemas.common import Money


class BankingInfo(BaseModel):
    """업체 정산 계좌 및 세무 정보.

    Banking, tax and billing-contact fields used for payouts.
    Every field is optional; a PUT replaces all of them.
    """

    model_config = ConfigDict(from_attributes=True)

    # 계좌 정보 — Bank account
    titular_cuenta: str | None = None
    tipo_documento_titular: str | None = None
    numero_documento_titular: str | None = None
    banco: str | None = None
    tipo_cuenta: str | None = None
    numero_cuenta: str | None = None
    swift_code: str | None = None
    iban: str | None = None
    # 세무 정보 — Tax data
    nit_empresa: str | None = None
    razon_social: str | None = None
    regimen_tributario: str | None = None
    # 청구 연락처 — Billing contact
    email_facturacion: str | None = None
    telefono_facturacion: str | None = None
    responsable_pagos: str | None = None
    notas_bancarias: str | None = None


class BusinessStats(BaseModel):
    """업체 예약 통계 (Booking statistics)."""

    totalReservas: int
    reservasCompletadas: int
    ingresosTotales: Money


class BusinessFullProfile(BusinessSummary, BankingInfo):
    """업체 전체 프로필 — 기본 정보, 계좌 정보, 통계.

    Full business profile: public fields, banking data, verification
    state and booking statistics.
    """

    fecha_registro: datetime | None = None
    is_active: bool = True
    datos_bancarios_verificados: bool = False
    fecha_verificacion_bancaria: datetime | None = None
    estadisticas: BusinessStats


class BusinessBasicUpdate(BaseModel):
    """업체 기본 정보 수정 — 이름, 주소, 전화, 이메일 필수.

    Basic profile update. Name, address, phone and email are required.
    """

    nombre_empresa: str = Field(..., min_length=1)
    direccion: str = Field(..., min_length=1)
    telefono: str = Field(..., min_length=1)
    email: str = Field(..., pattern=EMAIL_PATTERN)
    latitud: float | None = None
    longitud: float | None = None


class BusinessPasswordChange(BaseModel):
    """업체 비밀번호 변경 요청 (Business password change)."""

    contrasena_actual: str = Field(..., min_length=1)
    nueva_contrasena: str = Field(..., min_length=6)


class BusinessPhotoResponse(BaseModel):
    profile_image: str | None = None
