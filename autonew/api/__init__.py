"""API 라우터 패키지 — 모든 엔드포인트 통합.

API Router package — Aggregates every endpoint group into a single router
mounted under ``/api``.

Included routers:
    - auth: 고객 회원가입/로그인/프로필, 업체 로그인 (Customer auth and profile, business login)
    - empresa: 업체 예약/서비스/프로필/정산 (Business app endpoints)
    - reservas: 서비스 검색, 시간대, 고객 예약 (Catalog, slots, customer bookings)
    - planes: 요금제와 구독 (Plans and subscriptions)
    - calificaciones: 업체 평가 (Ratings)
"""

from fastapi import APIRouter

from autonew.api.auth import router as auth_router
from autonew.api.calificaciones import router as calificaciones_router
from autonew.api.empresa import router as empresa_router
from autonew.api.planes import router as planes_router
from autonew.api.reservas import router as reservas_router

api_router: APIRouter = APIRouter()

api_router.include_router(auth_router, prefix="/auth", tags=["Auth"])
api_router.include_router(empresa_router, prefix="/empresa", tags=["Empresa"])
api_router.include_router(reservas_router, prefix="/reservas", tags=["Reservas"])
api_router.include_router(planes_router, prefix="/planes", tags=["Planes"])
api_router.include_router(calificaciones_router, prefix="/calificaciones", tags=["Calificaciones"])
