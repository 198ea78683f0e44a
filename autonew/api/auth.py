"""인증 라우터 — 고객 회원가입/로그인, 업체 로그인, 고객 프로필.

Auth Router — Customer registration and login, business login, and the
customer's own profile and photo.
Follows 3-layer architecture: Router → Service → Repository.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, File, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from autonew.api.deps import get_current_business, get_current_user
from autonew.database import get_db
from autonew.models.business import Business
from autonew.models.user import User
from autonew.schemas.auth import (
    BusinessAuthData,
    BusinessLoginRequest,
    BusinessProfileResponse,
    ChangePasswordRequest,
    LoginRequest,
    PhotoResponse,
    ProfileUpdate,
    RegisterRequest,
    UserAuthData,
    UserResponse,
)
from autonew.schemas.common import ApiResponse
from autonew.services.auth_service import auth_service
from autonew.services.profile_service import profile_service
from autonew.utils.clock import Clock, get_clock
from autonew.utils.exceptions import AppError

router: APIRouter = APIRouter()


@router.post("/register", response_model=ApiResponse[UserAuthData], status_code=status.HTTP_201_CREATED)
async def register(
    data: RegisterRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ApiResponse[UserAuthData]:
    """고객 회원가입 — 토큰 포함 (Register a customer and issue a token)."""
    result: UserAuthData = await auth_service.register(db, data)
    await db.commit()
    return ApiResponse(message="Usuario registrado exitosamente", data=result)


@router.post("/login", response_model=ApiResponse[UserAuthData])
async def login(
    data: LoginRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    clock: Annotated[Clock, Depends(get_clock)],
) -> ApiResponse[UserAuthData]:
    """고객 로그인.

    Customer login. Failed-attempt counters are committed before the
    error is re-raised, so a rejected attempt still counts.
    """
    try:
        result: UserAuthData = await auth_service.login(db, data, clock.now())
    except AppError:
        await db.commit()
        raise
    await db.commit()
    return ApiResponse(message="Login exitoso", data=result)


@router.post("/empresa/login", response_model=ApiResponse[BusinessAuthData])
async def login_business(
    data: BusinessLoginRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    clock: Annotated[Clock, Depends(get_clock)],
) -> ApiResponse[BusinessAuthData]:
    """업체 로그인 — 고객과 같은 잠금 정책 (Same lockout policy as customers)."""
    try:
        result: BusinessAuthData = await auth_service.login_business(db, data, clock.now())
    except AppError:
        await db.commit()
        raise
    await db.commit()
    return ApiResponse(message="Login exitoso", data=result)


@router.get("/profile", response_model=ApiResponse[UserResponse])
async def get_profile(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> ApiResponse[UserResponse]:
    """내 프로필을 조회합니다.

    Get the current customer's profile.
    """
    return ApiResponse(data=await auth_service.get_profile(db, current_user))


@router.put("/profile", response_model=ApiResponse[UserResponse])
async def update_profile(
    data: ProfileUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> ApiResponse[UserResponse]:
    """내 프로필을 업데이트합니다 — 보낸 필드만 반영.

    Update the current customer's profile; absent fields are kept.
    """
    result: UserResponse = await auth_service.update_profile(db, current_user, data)
    await db.commit()
    return ApiResponse(message="Perfil actualizado exitosamente", data=result)


@router.put("/change-password", response_model=ApiResponse[None])
async def change_password(
    data: ChangePasswordRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> ApiResponse[None]:
    await auth_service.change_password(db, current_user, data)
    await db.commit()
    return ApiResponse(message="Contraseña actualizada exitosamente")


@router.put("/profile/foto", response_model=ApiResponse[PhotoResponse])
async def update_photo(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
    imagen: UploadFile = File(...),
) -> ApiResponse[PhotoResponse]:
    """프로필 사진 업로드 — 이전 사진은 삭제.

    Upload a new profile picture (form field ``imagen``) and delete the
    previous one from storage.
    """
    content: bytes = await imagen.read()
    url: str = await profile_service.replace_user_photo(
        db, current_user, content, imagen.filename or "imagen.jpg", imagen.content_type
    )
    await db.commit()
    return ApiResponse(message="Foto de perfil actualizada exitosamente", data=PhotoResponse(profile_picture=url))


@router.delete("/profile/foto", response_model=ApiResponse[None])
async def delete_photo(
    db: Annotated[AsyncSession, Depends(get_db)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> ApiResponse[None]:
    await profile_service.delete_user_photo(db, current_user)
    await db.commit()
    return ApiResponse(message="Foto de perfil eliminada exitosamente")


@router.get("/empresa/profile", response_model=ApiResponse[BusinessProfileResponse])
async def get_business_profile(
    db: Annotated[AsyncSession, Depends(get_db)],
    business: Annotated[Business, Depends(get_current_business)],
) -> ApiResponse[BusinessProfileResponse]:
    """업체 프로필과 제공 서비스 (Business profile with offered services)."""
    return ApiResponse(data=await auth_service.get_business_profile(db, business))
