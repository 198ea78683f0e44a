"""프로필 사진 서비스 — 고객/업체 프로필 이미지 교체 및 삭제.

Profile Photo Service — Replace or remove the profile image of a customer
or a business. The previous image is deleted from storage once the new
URL is stored.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from autonew.models.business import Business
from autonew.models.user import User
from autonew.repositories.business_repository import business_repository
from autonew.repositories.user_repository import user_repository
from autonew.services.storage_service import storage_service
from autonew.utils.exceptions import BadRequestError


class ProfileService:
    """프로필 사진 관련 비즈니스 로직 (Profile photo business logic)."""

    async def replace_user_photo(
        self,
        db: AsyncSession,
        current_user: User,
        data: bytes,
        filename: str,
        content_type: str | None,
    ) -> str:
        """고객 프로필 사진을 교체하고 새 URL을 반환합니다.

        Upload a new customer picture, store its URL and delete the old one.

        Returns:
            str: 새 이미지 URL (New image URL)
        """
        previous: str | None = current_user.profile_picture
        url: str = storage_service.upload_image(data, filename, content_type, folder="usuarios")
        await user_repository.update_fields(db, current_user.id_usuario, {"profile_picture": url})
        if previous:
            storage_service.delete_image(previous)
        await db.refresh(current_user)
        return url

    async def delete_user_photo(self, db: AsyncSession, current_user: User) -> None:
        """고객 프로필 사진 삭제 — 없으면 400 (400 when no picture is set)."""
        if not current_user.profile_picture:
            raise BadRequestError("No hay foto de perfil para eliminar")
        storage_service.delete_image(current_user.profile_picture)
        await user_repository.update_fields(db, current_user.id_usuario, {"profile_picture": None})
        await db.refresh(current_user)

    async def replace_business_photo(
        self,
        db: AsyncSession,
        business: Business,
        data: bytes,
        filename: str,
        content_type: str | None,
    ) -> str:
        """업체 프로필 이미지 교체 (Replace the business image)."""
        previous: str | None = business.profile_image
        url: str = storage_service.upload_image(data, filename, content_type, folder="empresas")
        await business_repository.update_fields(db, business.id_empresa, {"profile_image": url})
        if previous:
            storage_service.delete_image(previous)
        await db.refresh(business)
        return url

    async def delete_business_photo(self, db: AsyncSession, business: Business) -> None:
        if not business.profile_image:
            raise BadRequestError("No hay foto de perfil para eliminar")
        storage_service.delete_image(business.profile_image)
        await business_repository.update_fields(db, business.id_empresa, {"profile_image": None})
        await db.refresh(business)


# 싱글턴 인스턴스 — Singleton instance
profile_service: ProfileService = ProfileService()
