"""커스텀 HTTP 예외 클래스 모듈.

Custom HTTP exception classes module.
Provides pre-configured HTTPException subclasses for common error patterns.
These simplify error raising across services and repositories by
eliminating the need to specify status codes at each call site.

Every exception carries a short machine-readable ``code`` and an optional
``extra`` mapping; the application exception handler merges both into the
``{"success": false, "message": ..., "error": ...}`` envelope.

Usage:
    from autonew.utils.exceptions import NotFoundError, ConflictError
    raise NotFoundError("Reserva no encontrada")
    raise ConflictError("No se puede cancelar", extra={"estado_actual": "completado"})
"""

from typing import Any

from fastapi import HTTPException, status


class AppError(HTTPException):
    """애플리케이션 공통 예외 베이스.

    Base class for application errors rendered through the response envelope.

    Args:
        status_code: HTTP 상태 코드 (HTTP status code)
        detail: 사용자 메시지 (User-facing message)
        code: 오류 코드 (Machine-readable error code)
        extra: 응답에 병합할 추가 필드 (Extra fields merged into the error body)
    """

    code: str = "error"

    def __init__(
        self,
        status_code: int,
        detail: str,
        code: str | None = None,
        extra: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(status_code=status_code, detail=detail)
        if code is not None:
            self.code = code
        self.extra: dict[str, Any] = extra or {}


class NotFoundError(AppError):
    """404 Not Found 예외 — 요청한 리소스를 찾을 수 없을 때 사용.

    404 Not Found exception.
    Raised when a requested resource (reservation, plan, business, etc.) does not exist.
    """

    code = "not_found"

    def __init__(self, detail: str = "Recurso no encontrado", extra: dict[str, Any] | None = None) -> None:
        super().__init__(status.HTTP_404_NOT_FOUND, detail, extra=extra)


class DuplicateError(AppError):
    """409 Conflict 예외 — 중복 리소스 생성 시도 시 사용.

    409 Conflict exception.
    Raised when attempting to create a resource that violates a uniqueness constraint
    (e.g. duplicate email, second rating for the same reservation).
    """

    code = "duplicate"

    def __init__(self, detail: str = "El recurso ya existe", extra: dict[str, Any] | None = None) -> None:
        super().__init__(status.HTTP_409_CONFLICT, detail, extra=extra)


class ConflictError(AppError):
    """409 Conflict 예외 — 상태 충돌 (잘못된 상태 전이, 점유된 시간대, 소진된 쿼터).

    409 Conflict exception for state conflicts: invalid transitions,
    occupied slots, exhausted subscription quota.
    """

    code = "conflict"

    def __init__(self, detail: str = "Conflicto de estado", extra: dict[str, Any] | None = None) -> None:
        super().__init__(status.HTTP_409_CONFLICT, detail, extra=extra)


class ForbiddenError(AppError):
    """403 Forbidden 예외 — 권한 부족 시 사용.

    403 Forbidden exception.
    Raised on role mismatch, ownership mismatch, or a deactivated/unverified account.
    """

    code = "forbidden"

    def __init__(self, detail: str = "Acceso denegado", extra: dict[str, Any] | None = None) -> None:
        super().__init__(status.HTTP_403_FORBIDDEN, detail, extra=extra)


class UnauthorizedError(AppError):
    """401 Unauthorized 예외 — 인증 실패 시 사용.

    401 Unauthorized exception.
    Raised when authentication is missing, invalid, or expired
    (e.g. missing bearer token, expired token, invalid credentials).
    """

    code = "unauthorized"

    def __init__(self, detail: str = "No autorizado", extra: dict[str, Any] | None = None) -> None:
        super().__init__(status.HTTP_401_UNAUTHORIZED, detail, extra=extra)


class BadRequestError(AppError):
    """400 Bad Request 예외 — 잘못된 요청 데이터 시 사용.

    400 Bad Request exception.
    Raised when the request data is invalid beyond what Pydantic validation catches.
    """

    code = "bad_request"

    def __init__(self, detail: str = "Solicitud inválida", extra: dict[str, Any] | None = None) -> None:
        super().__init__(status.HTTP_400_BAD_REQUEST, detail, extra=extra)


class LockedError(AppError):
    """423 Locked 예외 — 로그인 실패 누적으로 계정이 일시 잠김.

    423 Locked exception raised while an account is temporarily locked.
    The remaining lock time is exposed as ``remainingMinutes``.
    """

    code = "locked"

    def __init__(self, detail: str, remaining_minutes: int) -> None:
        super().__init__(
            status.HTTP_423_LOCKED,
            detail,
            extra={"remainingMinutes": remaining_minutes},
        )
        self.remaining_minutes: int = remaining_minutes
