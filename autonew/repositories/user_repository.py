"""고객 레포지토리 — 고객 계정 조회 및 중복 검사.

User Repository — Customer account lookups and uniqueness checks.
"""

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from autonew.models.user import User
from autonew.repositories.credential_repository import CredentialRepository


class UserRepository(CredentialRepository[User]):
    """고객 테이블에 대한 데이터베이스 쿼리를 담당하는 레포지토리.

    Repository handling database queries for the customer table.
    """

    login_field = "correo"

    def __init__(self) -> None:
        super().__init__(User)

    async def find_conflicting(
        self,
        db: AsyncSession,
        correo: str,
        nombre_usuario: str,
    ) -> User | None:
        """이메일 또는 아이디가 겹치는 계정을 조회합니다.

        Return an account that already uses the email or the username.
        """
        result = await db.execute(
            select(User).where(or_(User.correo == correo, User.nombre_usuario == nombre_usuario)).limit(1)
        )
        return result.scalar_one_or_none()

    async def email_taken_by_other(self, db: AsyncSession, correo: str, user_id: int) -> bool:
        result = await db.execute(
            select(User.id_usuario).where(User.correo == correo, User.id_usuario != user_id).limit(1)
        )
        return result.scalar_one_or_none() is not None


# 싱글턴 인스턴스 — Singleton instance
user_repository: UserRepository = UserRepository()
