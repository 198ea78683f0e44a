"""JWT 액세스 토큰 유틸리티.

Access tokens for both customers and businesses. There is no refresh
token: the apps log in again when the token expires.

Payload:
    {
        "sub": "42",          # 고객 id_usuario 또는 업체 id_empresa (Principal id)
        "email": "a@b.co",    # 로그인 이메일 (Login email)
        "rol": "cliente",     # cliente | empresa | admin
        "exp": 1234567890,    # 만료 UNIX timestamp (Expiration)
        "type": "access"
    }
"""

from datetime import datetime, timedelta, timezone
from typing import Any

import jwt

from autonew.config import settings

TOKEN_TYPE: str = "access"


def create_access_token(claims: dict[str, Any]) -> str:
    """``sub``/``email``/``rol`` 클레임으로 서명된 토큰을 만듭니다.

    Sign ``claims`` with ``exp`` set JWT_ACCESS_TOKEN_EXPIRE_MINUTES from
    now (UTC) and ``type`` set to ``"access"``.
    """
    expires_at: datetime = datetime.now(timezone.utc) + timedelta(minutes=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES)
    payload: dict[str, Any] = {**claims, "exp": expires_at, "type": TOKEN_TYPE}
    return jwt.encode(payload, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str) -> dict[str, Any]:
    """서명과 만료를 검증하고 페이로드를 반환합니다.

    Raises:
        jwt.ExpiredSignatureError: 만료된 토큰 (Expired token)
        jwt.InvalidTokenError: 서명 불일치 또는 형식 오류 (Bad signature or malformed)
    """
    return jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
