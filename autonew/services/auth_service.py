"""인증 서비스 — 회원가입, 로그인 잠금 정책, 고객 프로필 비즈니스 로직.

Auth Service — Business logic for customer registration, the shared
customer/business login lockout policy, and the customer profile.

Lockout policy (same for customers and businesses):
    1. 3번째 실패 → 15분 임시 잠금 (423), first_warning_sent 설정
       (3rd failure locks the account for 15 minutes)
    2. 잠금 이후 누적 6번째 실패 → 계정 비활성화 (403)
       (6th cumulative failure after the warning deactivates the account)
    3. 성공 → 모든 잠금 필드 초기화 (Success resets every lockout field)

Counter writes happen in the request transaction; the login routers commit
before re-raising so a failed attempt is never rolled back.
"""

import logging
import math
from datetime import datetime, timedelta
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from autonew.config import settings
from autonew.models.business import Business
from autonew.models.user import User
from autonew.repositories.business_repository import business_repository
from autonew.repositories.catalog_repository import catalog_repository
from autonew.repositories.credential_repository import CredentialRepository
from autonew.repositories.user_repository import user_repository
from autonew.schemas.auth import (
    BusinessAuthData,
    BusinessLoginRequest,
    BusinessProfileResponse,
    BusinessSummary,
    ChangePasswordRequest,
    LoginRequest,
    ProfileUpdate,
    RegisterRequest,
    UserAuthData,
    UserResponse,
)
from autonew.schemas.catalog import ServiceResponse
from autonew.utils.exceptions import (
    DuplicateError,
    ForbiddenError,
    LockedError,
    UnauthorizedError,
)
from autonew.utils.jwt import create_access_token
from autonew.utils.password import hash_password, verify_password

logger = logging.getLogger(__name__)

# 토큰의 주체 종류 — Principal kinds carried in the token "rol" claim
ROLE_CUSTOMER: str = "cliente"
ROLE_BUSINESS: str = "empresa"


class AuthService:
    """인증 관련 비즈니스 로직을 처리하는 서비스.

    Service handling authentication business logic.
    Manages registration, both login flows with the lockout policy, and
    the customer's own profile.
    """

    def _issue_token(self, principal_id: int, email: str, rol: str) -> str:
        """JWT 액세스 토큰 발급 (Issue an access token)."""
        return create_access_token({"sub": str(principal_id), "email": email, "rol": rol})

    async def _check_credentials(
        self,
        db: AsyncSession,
        repository: CredentialRepository[Any],
        principal: User | Business,
        password: str,
        now: datetime,
    ) -> None:
        """잠금 상태 확인 후 비밀번호를 검증하고 카운터를 갱신합니다.

        Apply the lockout window, verify the password and update the
        failure counters.

        Args:
            db: 비동기 데이터베이스 세션 (Async database session)
            repository: 주체 레포지토리 (User or business repository)
            principal: 로그인 대상 (Customer or business row)
            password: 입력 비밀번호 (Submitted password)
            now: 현재 시각 (Current local time)

        Raises:
            LockedError: 잠금 중이거나 이번 실패로 잠김 (423)
            ForbiddenError: 이번 실패로 비활성화됨 (403)
            UnauthorizedError: 비밀번호 불일치, remainingAttempts 포함 (401)
        """
        principal_id: int = principal.principal_id
        lock_window = timedelta(minutes=settings.LOCKOUT_MINUTES)

        if principal.lockout_time is not None:
            elapsed: timedelta = now - principal.lockout_time
            if elapsed < lock_window:
                remaining: int = math.ceil((lock_window - elapsed).total_seconds() / 60)
                raise LockedError(
                    f"Cuenta bloqueada temporalmente. Intenta nuevamente en {remaining} minutos.",
                    remaining,
                )
            # 잠금 시간 경과 — 잠금 해제 (Lock window elapsed)
            await repository.clear_lock(db, principal_id)

        if verify_password(password, principal.password_hash):
            await repository.reset_lockout(db, principal_id)
            return

        attempts, warned = await repository.register_failed_attempt(db, principal_id, now)

        if not warned and attempts >= settings.LOCKOUT_THRESHOLD:
            await repository.lock(db, principal_id, now)
            logger.warning("Account locked after %d failed logins: %s", attempts, principal.contact_email)
            raise LockedError(
                f"Cuenta bloqueada temporalmente por {settings.LOCKOUT_MINUTES} minutos "
                "debido a múltiples intentos fallidos.",
                settings.LOCKOUT_MINUTES,
            )

        if warned and attempts >= settings.DEACTIVATION_THRESHOLD:
            await repository.deactivate(db, principal_id)
            logger.warning("Account deactivated after %d failed logins: %s", attempts, principal.contact_email)
            raise ForbiddenError("Cuenta desactivada por seguridad. Contacta al administrador para reactivarla.")

        limit: int = settings.DEACTIVATION_THRESHOLD if warned else settings.LOCKOUT_THRESHOLD
        remaining_attempts: int = max(limit - attempts, 0)
        raise UnauthorizedError(
            f"Credenciales incorrectas. Te quedan {remaining_attempts} intentos.",
            extra={"remainingAttempts": remaining_attempts},
        )

    async def register(self, db: AsyncSession, data: RegisterRequest) -> UserAuthData:
        """고객 회원가입을 처리합니다.

        Register a customer account with a legacy-format password hash.

        Raises:
            DuplicateError: 이메일 또는 아이디 중복 (Email or username in use)
        """
        existing: User | None = await user_repository.find_conflicting(db, data.correo, data.nombre_usuario)
        if existing is not None:
            if existing.correo == data.correo:
                raise DuplicateError("El correo ya está registrado")
            raise DuplicateError("El nombre de usuario ya está en uso")

        user: User = await user_repository.create(
            db,
            {
                "nombre_completo": data.nombre_completo,
                "nombre_usuario": data.nombre_usuario,
                "correo": data.correo,
                "password_hash": hash_password(data.password),
                "telefono": data.telefono,
                "direccion": data.direccion,
                "rol": ROLE_CUSTOMER,
            },
        )
        logger.info("Customer registered: id=%s", user.id_usuario)
        return UserAuthData(
            user=UserResponse.model_validate(user),
            token=self._issue_token(user.id_usuario, user.correo, ROLE_CUSTOMER),
        )

    async def login(self, db: AsyncSession, data: LoginRequest, now: datetime) -> UserAuthData:
        """고객 로그인 (Customer login with the lockout policy).

        Raises:
            UnauthorizedError: 계정 없음 또는 비밀번호 불일치 (401)
            ForbiddenError: 비활성 계정 (403)
            LockedError: 잠금 (423)
        """
        user: User | None = await user_repository.get_by_login(db, data.correo)
        if user is None or user.rol != ROLE_CUSTOMER:
            raise UnauthorizedError("Credenciales incorrectas")
        if not user.is_active:
            raise ForbiddenError("Tu cuenta ha sido desactivada. Contacta al administrador.")

        await self._check_credentials(db, user_repository, user, data.password, now)
        await db.refresh(user)
        return UserAuthData(
            user=UserResponse.model_validate(user),
            token=self._issue_token(user.id_usuario, user.correo, ROLE_CUSTOMER),
        )

    async def login_business(self, db: AsyncSession, data: BusinessLoginRequest, now: datetime) -> BusinessAuthData:
        """업체 로그인 — 고객과 같은 잠금 정책 + 검증 여부 확인.

        Business login. Same lockout policy as customers, and the business
        must be verified.
        """
        business: Business | None = await business_repository.get_by_login(db, data.email)
        if business is None:
            raise UnauthorizedError("Credenciales incorrectas")
        if not business.is_active:
            raise ForbiddenError("La cuenta de la empresa ha sido desactivada. Contacta al administrador.")
        if not business.verificada:
            raise ForbiddenError("La empresa aún no ha sido verificada por el administrador.")

        await self._check_credentials(db, business_repository, business, data.password, now)
        await db.refresh(business)
        return BusinessAuthData(
            empresa=BusinessSummary.model_validate(business),
            token=self._issue_token(business.id_empresa, business.email, ROLE_BUSINESS),
        )

    async def get_profile(self, db: AsyncSession, current_user: User) -> UserResponse:
        return UserResponse.model_validate(current_user)

    async def update_profile(self, db: AsyncSession, current_user: User, data: ProfileUpdate) -> UserResponse:
        """보낸 필드만 한 번의 UPDATE로 반영합니다.

        Apply only the fields present in the request with one UPDATE.
        """
        changes: dict[str, Any] = {
            field: value for field, value in data.model_dump(exclude_unset=True).items() if value is not None
        }
        await user_repository.update_fields(db, current_user.id_usuario, changes)
        await db.refresh(current_user)
        return UserResponse.model_validate(current_user)

    async def change_password(self, db: AsyncSession, current_user: User, data: ChangePasswordRequest) -> None:
        """현재 비밀번호 확인 후 새 해시 저장 (Verify then store a new hash).

        Raises:
            UnauthorizedError: 현재 비밀번호 불일치 (Wrong current password)
        """
        if not verify_password(data.currentPassword, current_user.password_hash):
            raise UnauthorizedError("La contraseña actual es incorrecta")
        await user_repository.set_password_hash(db, current_user.id_usuario, hash_password(data.newPassword))

    async def get_business_profile(self, db: AsyncSession, business: Business) -> BusinessProfileResponse:
        """업체 프로필과 제공 서비스 (Business profile with offered services)."""
        services = await catalog_repository.services_for_business(db, business.id_empresa)
        summary = BusinessSummary.model_validate(business)
        return BusinessProfileResponse(
            **summary.model_dump(),
            servicios=[ServiceResponse.model_validate(service) for service in services],
        )


# 싱글턴 인스턴스 — Singleton instance
auth_service: AuthService = AuthService()
