"""데이터베이스 엔진, 세션 팩토리, ORM 베이스.

Database engine, session factory and ORM base for the shared AutoNew
PostgreSQL database (tables owned by the Django back-office, hence the
``lavado_auto_*`` names).

Business code never touches the engine: each request gets its own session
from ``get_db`` and hands it down to services and repositories. Routers
commit; anything raised before that rolls the whole request back.
"""

from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from autonew.config import settings

# asyncpg 엔진, 끊긴 연결은 사용 전에 감지 (Stale pooled connections are detected before use)
engine: AsyncEngine = create_async_engine(settings.DATABASE_URL, echo=settings.DEBUG, pool_pre_ping=True)

# 커밋 후에도 응답 직렬화를 위해 속성 유지 (Attributes stay loaded after commit)
async_session: async_sessionmaker[AsyncSession] = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    """모든 레거시 테이블 모델의 선언적 베이스 (Declarative base for every model)."""


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """요청 단위 세션 — 예외 발생 시 롤백.

    Request-scoped session. An exception escaping the handler rolls back
    every write of the request, including counters bumped before the
    failure (quota, booking lines).
    """
    async with async_session() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
