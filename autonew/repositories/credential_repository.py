"""자격 증명 레포지토리 — 고객/업체 공통 로그인 잠금 카운터 쿼리.

Credential Repository — Lockout counter queries shared by customers and
businesses. Every counter change is a single UPDATE statement so concurrent
failed logins for the same principal never lose an increment.
"""

from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from autonew.repositories.base import BaseRepository, ModelType


class CredentialRepository(BaseRepository[ModelType]):
    """잠금 필드를 가진 주체(고객, 업체)용 레포지토리 베이스.

    Repository base for principals carrying ``LockoutMixin`` columns
    and a ``password_hash`` attribute.
    """

    # 로그인 식별자 컬럼 — Attribute used as login identifier
    login_field: str = "email"

    async def get_by_login(self, db: AsyncSession, login: str) -> ModelType | None:
        """로그인 식별자(이메일)로 주체를 조회합니다.

        Retrieve a principal by its login email.
        """
        column = getattr(self.model, self.login_field)
        result = await db.execute(select(self.model).where(column == login))
        return result.scalar_one_or_none()

    async def register_failed_attempt(
        self,
        db: AsyncSession,
        principal_id: int,
        now: datetime,
    ) -> tuple[int, bool]:
        """실패 횟수를 원자적으로 1 증가시키고 새 값을 반환합니다.

        Atomically increment the failed-login counter.

        Returns:
            tuple[int, bool]: (증가된 실패 횟수, first_warning_sent)
                              (New attempt count, first warning flag)
        """
        model = self.model
        result = await db.execute(
            update(model)
            .where(self.pk == principal_id)
            .values(
                {
                    model.failed_login_attempts: model.failed_login_attempts + 1,
                    model.last_failed_login: now,
                }
            )
            .returning(model.failed_login_attempts, model.first_warning_sent)
        )
        attempts, warned = result.one()
        return int(attempts), bool(warned)

    async def lock(self, db: AsyncSession, principal_id: int, now: datetime) -> None:
        """첫 잠금 — 잠금 시각 기록 및 경고 플래그 설정 (First lock episode)."""
        await self.update_fields(db, principal_id, {"lockout_time": now, "first_warning_sent": True})

    async def clear_lock(self, db: AsyncSession, principal_id: int) -> None:
        """만료된 잠금 해제 (Clear an elapsed lock)."""
        await self.update_fields(db, principal_id, {"lockout_time": None})

    async def deactivate(self, db: AsyncSession, principal_id: int) -> None:
        """계정 비활성화 — 수동 재활성화 필요 (Requires manual reactivation)."""
        await self.update_fields(db, principal_id, {"is_active": False, "lockout_time": None})

    async def reset_lockout(self, db: AsyncSession, principal_id: int) -> None:
        """로그인 성공 시 잠금 관련 필드 전부 초기화 (Reset after a successful login)."""
        await self.update_fields(
            db,
            principal_id,
            {
                "failed_login_attempts": 0,
                "last_failed_login": None,
                "lockout_time": None,
                "first_warning_sent": False,
            },
        )

    async def set_password_hash(self, db: AsyncSession, principal_id: int, password_hash: str) -> None:
        await self.update_fields(db, principal_id, {"password_hash": password_hash})
