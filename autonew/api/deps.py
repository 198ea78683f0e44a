"""FastAPI 의존성 주입 모듈 — 인증 및 주체 종류 검사.

FastAPI dependency injection module — Authentication and principal-kind
checks for the customer and business surfaces.

Authentication Flow:
    1. 클라이언트가 Authorization: Bearer <token> 헤더를 전송
       (Client sends Authorization: Bearer <token> header)
    2. decode_token()이 JWT를 검증하고 페이로드를 반환
       (decode_token verifies the JWT and returns the payload)
    3. 페이로드의 "rol"로 주체 종류를, "sub"로 ID를 결정
       (The "rol" claim gives the principal kind, "sub" its id)
    4. 종류별 테이블에서 계정을 조회하고 활성 상태를 확인
       (The account is loaded from its table and must be active)
"""

import enum
from dataclasses import dataclass
from typing import Annotated, Awaitable, Callable

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from autonew.database import get_db
from autonew.models.business import Business
from autonew.models.user import User
from autonew.repositories.business_repository import business_repository
from autonew.repositories.user_repository import user_repository
from autonew.utils.exceptions import ForbiddenError, UnauthorizedError
from autonew.utils.jwt import TOKEN_TYPE, decode_token

# HTTP Bearer 토큰 추출기 — 헤더 누락도 401로 응답하도록 auto_error 비활성화
# (Missing header answers 401 through our envelope, not FastAPI's 403)
security: HTTPBearer = HTTPBearer(auto_error=False)


class PrincipalKind(str, enum.Enum):
    """토큰 주체 종류 (Principal kind carried in the ``rol`` claim)."""

    CUSTOMER = "cliente"
    BUSINESS = "empresa"
    ADMIN = "admin"


@dataclass(frozen=True)
class Principal:
    """인증된 주체 — 종류와 ID (Authenticated principal)."""

    kind: PrincipalKind
    id: int
    email: str | None = None


async def get_current_principal(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> Principal:
    """JWT 토큰에서 현재 주체를 추출합니다.

    Decode the bearer token into a ``Principal``.

    Raises:
        UnauthorizedError(401): 토큰 누락, 위조, 만료 또는 형식 오류
                                (Missing, invalid, expired or malformed token)
    """
    if credentials is None:
        raise UnauthorizedError("No autorizado, token no proporcionado")
    try:
        payload: dict = decode_token(credentials.credentials)
    except jwt.ExpiredSignatureError:
        raise UnauthorizedError("Token expirado")
    except jwt.InvalidTokenError:
        raise UnauthorizedError("Token inválido")

    if payload.get("type") != TOKEN_TYPE:
        raise UnauthorizedError("Token inválido")
    try:
        kind = PrincipalKind(payload.get("rol"))
        principal_id = int(payload["sub"])
    except (KeyError, TypeError, ValueError):
        raise UnauthorizedError("Token inválido")
    return Principal(kind=kind, id=principal_id, email=payload.get("email"))


def require_kind(*kinds: PrincipalKind) -> Callable[..., Awaitable[Principal]]:
    """주체 종류 검사 의존성 팩토리.

    Dependency factory rejecting principals whose kind is not listed.

    Returns:
        FastAPI 의존성 — 허용된 주체 반환 또는 403 발생
        (Dependency returning the principal or raising 403)
    """

    async def _check(principal: Annotated[Principal, Depends(get_current_principal)]) -> Principal:
        if principal.kind not in kinds:
            raise ForbiddenError("Acceso denegado para este tipo de cuenta")
        return principal

    return _check


async def get_current_user(
    principal: Annotated[Principal, Depends(require_kind(PrincipalKind.CUSTOMER))],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> User:
    """현재 고객 계정 — 없거나 비활성이면 401/403.

    Load the authenticated customer.
    """
    user: User | None = await user_repository.get_by_id(db, principal.id)
    if user is None:
        raise UnauthorizedError("Usuario no encontrado")
    if not user.is_active:
        raise ForbiddenError("Cuenta desactivada")
    return user


async def get_current_business(
    principal: Annotated[Principal, Depends(require_kind(PrincipalKind.BUSINESS))],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> Business:
    """현재 업체 계정 (Authenticated business)."""
    business: Business | None = await business_repository.get_by_id(db, principal.id)
    if business is None:
        raise UnauthorizedError("Empresa no encontrada")
    if not business.is_active:
        raise ForbiddenError("Cuenta de empresa desactivada")
    return business
