"""테스트 인프라 — 임시 SQLite DB, 요청별 세션, httpx 클라이언트, 고정 시계 픽스처.

Test infrastructure — Temporary SQLite database file per test, one session
per request (like production), an httpx client and a fixed clock.
Fixtures commit their rows so the API sees them from its own sessions.
"""

from collections.abc import AsyncGenerator
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from itertools import count

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from autonew.database import Base, get_db
from autonew.main import app
from autonew.models import *  # noqa: F401,F403 — register all models with metadata
from autonew.models.business import Business
from autonew.models.catalog import BusinessService, Service
from autonew.models.reservation import Reservation, ReservationService
from autonew.models.subscription import Plan, PlanService, Subscription
from autonew.models.user import User
from autonew.utils.clock import FixedClock, get_clock
from autonew.utils.jwt import create_access_token
from autonew.utils.password import hash_password

# ---------------------------------------------------------------------------
# 고정 시각 — 2026-03-10 (화) 09:00 현지 시간
# ---------------------------------------------------------------------------
NOW: datetime = datetime(2026, 3, 10, 9, 0)
TODAY: date = NOW.date()
TOMORROW: date = TODAY + timedelta(days=1)

CUSTOMER_PASSWORD = "cliente123"
BUSINESS_PASSWORD = "empresa123"

# 해시는 한 번만 계산 (PBKDF2 is slow on purpose)
_CUSTOMER_HASH = hash_password(CUSTOMER_PASSWORD)
_BUSINESS_HASH = hash_password(BUSINESS_PASSWORD)

_codes = count(1000000)


# ---------------------------------------------------------------------------
# Function-scoped: 엔진, 세션, 클라이언트
# ---------------------------------------------------------------------------
@pytest_asyncio.fixture
async def engine(tmp_path) -> AsyncGenerator[AsyncEngine, None]:
    """테스트별 SQLite 파일 DB와 스키마."""
    eng = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'autonew.db'}", echo=False)
    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield eng
    await eng.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """픽스처 데이터 생성과 검증용 세션."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(NOW)


@pytest_asyncio.fixture
async def client(session_factory, clock: FixedClock) -> AsyncGenerator[AsyncClient, None]:
    """FastAPI 테스트 클라이언트 — DB 세션과 시계를 오버라이드합니다."""

    async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = _override_get_db
    app.dependency_overrides[get_clock] = lambda: clock

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# 헬퍼 픽스처: 테스트용 데이터 생성
# ---------------------------------------------------------------------------
async def _save(db: AsyncSession, *objects):
    db.add_all(objects)
    await db.commit()
    for obj in objects:
        await db.refresh(obj)
    return objects[0] if len(objects) == 1 else objects


@pytest_asyncio.fixture
async def customer(db: AsyncSession) -> User:
    """기본 고객을 생성합니다."""
    return await _save(db, User(
        nombre_completo="Ana Cliente",
        nombre_usuario="ana",
        correo="ana@test.com",
        password_hash=_CUSTOMER_HASH,
        telefono="3001234567",
        direccion="Calle 10 # 5-20",
    ))


@pytest_asyncio.fixture
async def other_customer(db: AsyncSession) -> User:
    return await _save(db, User(
        nombre_completo="Bruno Otro",
        nombre_usuario="bruno",
        correo="bruno@test.com",
        password_hash=_CUSTOMER_HASH,
    ))


@pytest_asyncio.fixture
async def business(db: AsyncSession) -> Business:
    """검증된 업체를 생성합니다."""
    return await _save(db, Business(
        nombre_empresa="Lavado Express",
        email="empresa@test.com",
        password_hash=_BUSINESS_HASH,
        direccion="Av. Principal 100",
        telefono="6017654321",
        verificada=True,
        latitud=4.65,
        longitud=-74.05,
    ))


@pytest_asyncio.fixture
async def other_business(db: AsyncSession) -> Business:
    return await _save(db, Business(
        nombre_empresa="Brillo Total",
        email="brillo@test.com",
        password_hash=_BUSINESS_HASH,
        direccion="Carrera 7 # 80-10",
        telefono="6011112233",
        verificada=True,
    ))


@pytest_asyncio.fixture
async def services(db: AsyncSession, business: Business) -> list[Service]:
    """카탈로그 서비스 3개 — 앞의 2개는 기본 업체가 제공."""
    exterior = Service(nombre_servicio="Lavado exterior", descripcion="Carrocería y llantas", precio=Decimal("30000"))
    aspirado = Service(nombre_servicio="Aspirado interior", descripcion="Aspirado completo", precio=Decimal("20000"))
    encerado = Service(nombre_servicio="Encerado", descripcion="Cera protectora", precio=Decimal("50000"))
    await _save(db, exterior, aspirado, encerado)
    await _save(
        db,
        BusinessService(empresa_id=business.id_empresa, servicio_id=exterior.id_servicio),
        BusinessService(empresa_id=business.id_empresa, servicio_id=aspirado.id_servicio),
    )
    return [exterior, aspirado, encerado]


@pytest_asyncio.fixture
async def plan(db: AsyncSession, services: list[Service]) -> Plan:
    """월 2회 요금제 — 외부 세차 20% 할인."""
    p = await _save(db, Plan(
        nombre="Plan Básico",
        tipo="basico",
        descripcion="Dos lavados al mes",
        precio_mensual=Decimal("80000"),
        cantidad_servicios_mes=2,
        incluye_lavado_exterior=True,
    ))
    await _save(db, PlanService(plan_id=p.id_plan, servicio_id=services[0].id_servicio, porcentaje_descuento=Decimal("20")))
    return p


@pytest_asyncio.fixture
async def unlimited_plan(db: AsyncSession) -> Plan:
    return await _save(db, Plan(
        nombre="Plan Ilimitado",
        tipo="premium",
        descripcion="Sin límite mensual",
        precio_mensual=Decimal("200000"),
        cantidad_servicios_mes=0,
    ))


async def make_subscription(
    db: AsyncSession,
    user: User,
    plan: Plan,
    used: int = 0,
    started: datetime | None = None,
    last_reset: datetime | None = None,
    estado: str = "activa",
) -> Subscription:
    """구독을 직접 생성합니다 (API를 거치지 않음)."""
    start = started or NOW - timedelta(days=5)
    return await _save(db, Subscription(
        usuario_id=user.id_usuario,
        plan_id=plan.id_plan,
        fecha_inicio=start,
        fecha_fin=start + timedelta(days=30),
        estado=estado,
        servicios_utilizados_mes=used,
        ultimo_reinicio_contador=last_reset or start,
    ))


@pytest_asyncio.fixture
async def subscription(db: AsyncSession, customer: User, plan: Plan) -> Subscription:
    return await make_subscription(db, customer, plan)


async def make_reservation(
    db: AsyncSession,
    user: User,
    business: Business,
    fecha: date,
    hora: time,
    estado: str = "pendiente",
    lines: list[tuple[Service, Decimal]] | None = None,
    pagado_empresa: bool = False,
) -> Reservation:
    """예약과 서비스 항목을 직접 생성합니다.

    ``lines`` is a list of ``(service, applied price)`` pairs.
    """
    reservation = await _save(db, Reservation(
        numero_reserva=f"ANW-B{next(_codes)}",
        fecha=fecha,
        hora=hora,
        estado=estado,
        empresa_id=business.id_empresa,
        usuario_id=user.id_usuario,
        conductor_asignado=user.nombre_completo,
        pagado_empresa=pagado_empresa,
    ))
    if lines:
        await _save(db, *[
            ReservationService(
                reserva_id=reservation.id_reserva,
                servicio_id=service.id_servicio,
                precio_original=service.precio,
                precio_aplicado=applied,
            )
            for service, applied in lines
        ])
    return reservation


async def reload(db: AsyncSession, model, pk):
    """API가 변경한 행을 DB에서 다시 읽습니다."""
    return await db.get(model, pk, populate_existing=True)


# ---------------------------------------------------------------------------
# 토큰
# ---------------------------------------------------------------------------
def make_token(principal_id: int, email: str, rol: str) -> str:
    """테스트용 JWT 액세스 토큰을 생성합니다."""
    return create_access_token({"sub": str(principal_id), "email": email, "rol": rol})


@pytest.fixture
def customer_token(customer: User) -> str:
    return make_token(customer.id_usuario, customer.correo, "cliente")


@pytest.fixture
def other_customer_token(other_customer: User) -> str:
    return make_token(other_customer.id_usuario, other_customer.correo, "cliente")


@pytest.fixture
def business_token(business: Business) -> str:
    return make_token(business.id_empresa, business.email, "empresa")


def auth_header(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}
