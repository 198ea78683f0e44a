"""FastAPI 애플리케이션 엔트리포인트 — 미들웨어, 예외 처리기, 라우터 등록.

FastAPI application entry point — Middleware, exception handlers and
router registration. Every response, success or error, uses the
``{"success", "message", ...}`` envelope.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

from autonew.config import settings
from autonew.middleware.axiom_logging import AxiomLoggingMiddleware
from autonew.services.storage_service import storage_service
from autonew.utils.exceptions import AppError

# 애플리케이션 로거 — Package-level logger used by every module logger
logger = logging.getLogger("autonew")
if not logger.handlers:
    _handler = logging.StreamHandler()
    _handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s [%(name)s] %(message)s"))
    logger.addHandler(_handler)
logger.setLevel(settings.LOG_LEVEL.upper())

# 상태 코드별 기본 오류 코드 — Error code for plain HTTPExceptions
_STATUS_CODES: dict[int, str] = {
    400: "bad_request",
    401: "unauthorized",
    403: "forbidden",
    404: "not_found",
    405: "method_not_allowed",
    409: "conflict",
    423: "locked",
}

app: FastAPI = FastAPI(
    title=settings.APP_NAME,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# Axiom API 로깅 미들웨어 — Axiom API request/response logging
# CORS보다 먼저 등록하여 모든 요청을 캡처 (Registered before CORS to capture all requests)
app.add_middleware(AxiomLoggingMiddleware)

# CORS 미들웨어 — Mobile app and web dashboard origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _error_body(message: str, code: str, **extra: object) -> dict:
    return {"success": False, "message": message, "error": code, **extra}


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """HTTP 예외 → 오류 봉투 (HTTP errors rendered as the error envelope)."""
    if isinstance(exc, AppError):
        body = _error_body(str(exc.detail), exc.code, **exc.extra)
    else:
        body = _error_body(str(exc.detail), _STATUS_CODES.get(exc.status_code, "error"))
    return JSONResponse(status_code=exc.status_code, content=body, headers=getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """요청 검증 실패 → 400 (Invalid request data answers 400)."""
    errores = [
        {"campo": ".".join(str(part) for part in error.get("loc", ())), "mensaje": error.get("msg", "")}
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=_error_body("Datos de entrada inválidos", "validation_error", errores=errores),
    )


@app.exception_handler(IntegrityError)
async def integrity_exception_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    """저장소 UNIQUE 제약 위반 → 409 (Storage uniqueness violation)."""
    logger.warning("Integrity error on %s %s: %s", request.method, request.url.path, exc.orig)
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content=_error_body("El recurso ya existe o entra en conflicto con otro registro", "duplicate"),
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """처리되지 않은 예외 → 500, 상세는 개발 환경에서만.

    Unhandled errors answer 500; the detail is only exposed in development.
    """
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    extra: dict = {"detalle": str(exc)} if settings.ENVIRONMENT == "development" else {}
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_body("Error interno del servidor", "internal_error", **extra),
    )


@app.get("/api/health")
async def health_check() -> dict[str, str]:
    """서버 상태 확인 엔드포인트.

    Health check endpoint for load balancers and monitoring.
    """
    return {"status": "OK", "message": "AutoNew API funcionando correctamente"}


# ---------------------------------------------------------------------------
# 라우터 등록 — Router registration
# ---------------------------------------------------------------------------
from autonew.api import api_router  # noqa: E402

app.include_router(api_router, prefix="/api")

# 로컬 업로드 정적 파일 — Local image hosting when S3 is not configured
if storage_service.is_local:
    app.mount("/uploads", StaticFiles(directory=storage_service.uploads_dir, check_dir=False), name="uploads")
