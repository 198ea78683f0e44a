"""인증 관련 Pydantic 요청/응답 스키마 정의.

Authentication-related Pydantic request/response schema definitions.
Covers customer registration, customer and business login, the customer
profile and password change.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from autonew.schemas.catalog import ServiceResponse

# 이메일 형식 — Same loose check the mobile clients apply
EMAIL_PATTERN: str = r"^[^\s@]+@[^\s@]+\.[^\s@]+$"


class RegisterRequest(BaseModel):
    """고객 회원가입 요청 스키마.

    Customer self-registration request schema.

    Attributes:
        nombre_completo: 실명 (Full display name)
        nombre_usuario: 사용자 아이디, 고유 (Unique username)
        correo: 이메일, 고유 (Unique email address, used for login)
        password: 비밀번호 — 최소 6자 (Plain text, at least 6 characters)
        telefono: 전화번호 (Phone, optional)
        direccion: 주소 (Address, optional)
    """

    nombre_completo: str = Field(..., min_length=1)
    nombre_usuario: str = Field(..., min_length=1)
    correo: str = Field(..., pattern=EMAIL_PATTERN)
    password: str = Field(..., min_length=6)
    telefono: str = ""
    direccion: str = ""


class LoginRequest(BaseModel):
    """고객 로그인 요청 스키마 (Customer login request)."""

    correo: str = Field(..., min_length=1)  # 로그인 이메일 (Login email)
    password: str = Field(..., min_length=1)  # 평문 비밀번호 (Plain text password)


class BusinessLoginRequest(BaseModel):
    """업체 로그인 요청 스키마 (Business login request)."""

    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class UserResponse(BaseModel):
    """고객 정보 응답 스키마 — 비밀번호와 잠금 필드는 제외.

    Customer representation returned by auth and profile endpoints.
    Password hash and lockout counters are never exposed.
    """

    model_config = ConfigDict(from_attributes=True)

    id_usuario: int
    nombre_completo: str
    nombre_usuario: str
    correo: str
    telefono: str
    direccion: str
    rol: str
    fecha_registro: datetime | None = None
    profile_picture: str | None = None


class BusinessSummary(BaseModel):
    """업체 기본 정보 응답 스키마 (Business public fields)."""

    model_config = ConfigDict(from_attributes=True)

    id_empresa: int
    nombre_empresa: str
    email: str
    direccion: str
    telefono: str
    verificada: bool
    latitud: float | None = None
    longitud: float | None = None
    profile_image: str | None = None


class BusinessProfileResponse(BusinessSummary):
    """업체 프로필 + 제공 서비스 (Business profile with offered services)."""

    servicios: list[ServiceResponse] = []


class UserAuthData(BaseModel):
    """고객 로그인/가입 응답 데이터 (Customer login/registration payload)."""

    user: UserResponse
    token: str


class BusinessAuthData(BaseModel):
    """업체 로그인 응답 데이터 (Business login payload)."""

    empresa: BusinessSummary
    token: str


class ProfileUpdate(BaseModel):
    """고객 프로필 수정 요청 — 보낸 필드만 반영 (Partial update).

    Fields left out of the request body are not touched.
    """

    nombre_completo: str | None = Field(None, min_length=1)
    telefono: str | None = None
    direccion: str | None = None


class ChangePasswordRequest(BaseModel):
    """비밀번호 변경 요청 스키마 (Password change request)."""

    currentPassword: str = Field(..., min_length=1)  # 현재 비밀번호 (Current password)
    newPassword: str = Field(..., min_length=6)  # 새 비밀번호, 최소 6자 (New password)


class PhotoResponse(BaseModel):
    """프로필 사진 URL 응답 (Profile picture URL)."""

    profile_picture: str | None = None
