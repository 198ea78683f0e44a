"""기본 레포지토리 — 모든 레포지토리의 부모 클래스.

Base Repository — Parent class for all domain repositories.
Rows are keyed by the model's primary key column whatever its legacy name
(``id_reserva``, ``id_empresa``, ...), so subclasses only pass the model.

Usage:
    class RatingRepository(BaseRepository[Rating]):
        def __init__(self) -> None:
            super().__init__(Rating)
"""

from typing import Any, Generic, TypeVar

from sqlalchemy import Select, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from autonew.database import Base

# 제네릭 타입 변수 — SQLAlchemy 모델을 나타냄
# Generic type variable representing a SQLAlchemy model
ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """레거시 테이블용 제네릭 레포지토리.

    Generic repository over one legacy table.

    Attributes:
        model: SQLAlchemy 모델 클래스 (The SQLAlchemy model class)
        pk: 기본 키 컬럼 (Primary key column, e.g. ``id_reserva``)
    """

    def __init__(self, model: type[ModelType]) -> None:
        self.model: type[ModelType] = model
        # 레거시 테이블은 기본 키 이름이 제각각 — Legacy tables name their PK differently
        self.pk = getattr(model, model.__mapper__.primary_key[0].key)

    async def get_by_id(self, db: AsyncSession, record_id: int) -> ModelType | None:
        """기본 키로 한 행을 조회합니다 (Fetch one row by primary key)."""
        query: Select = select(self.model).where(self.pk == record_id)
        return (await db.execute(query)).scalar_one_or_none()

    async def create(self, db: AsyncSession, values: dict[str, Any]) -> ModelType:
        """행을 추가하고 flush하여 기본 키와 DB 기본값을 채웁니다.

        Insert a row inside the caller's transaction. The row is flushed and
        refreshed so generated keys and server defaults are readable; the
        router decides when to commit.
        """
        row: ModelType = self.model(**values)
        db.add(row)
        await db.flush()
        await db.refresh(row)
        return row

    async def update_fields(
        self,
        db: AsyncSession,
        record_id: int,
        changes: dict[str, Any],
    ) -> int:
        """부분 업데이트 — 필드명→새 값 매핑을 하나의 UPDATE 문으로 적용합니다.

        Apply a partial update expressed as a mapping of field name to new
        value. Only model attributes are accepted; unknown keys raise
        ``ValueError`` instead of reaching SQL. An empty mapping is a no-op.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            record_id: 업데이트할 레코드 ID (Primary key of the record)
            changes: 변경할 필드와 값 (Field → new value)

        Returns:
            int: 변경된 행 수 (Number of rows updated)
        """
        unknown: set[str] = {name for name in changes if not hasattr(self.model, name)}
        if unknown:
            raise ValueError(f"Unknown fields for {self.model.__name__}: {sorted(unknown)}")
        if not changes:
            return 0

        result = await db.execute(
            update(self.model)
            .where(self.pk == record_id)
            .values({getattr(self.model, name): value for name, value in changes.items()})
        )
        return result.rowcount
