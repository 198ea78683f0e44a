"""스토리지 서비스 — 프로필 이미지를 S3 또는 로컬에 저장.

Storage Service — Profile image hosting on S3 or the local filesystem.
AWS 키가 비어있으면 자동으로 로컬 모드로 전환됩니다.
(Falls back to local mode when AWS credentials are not configured.)
Public URLs are derived from the storage key, and the key is derived back
from the URL when an image is replaced or deleted.
"""

import logging
import uuid
from datetime import datetime, timezone
from pathlib import Path

from autonew.config import settings
from autonew.utils.exceptions import BadRequestError

logger = logging.getLogger(__name__)

# 로컬 업로드 기본 디렉토리 — Default local directory next to the package
_SERVER_ROOT: Path = Path(__file__).resolve().parent.parent.parent

ALLOWED_IMAGE_TYPES: frozenset[str] = frozenset(
    {"image/jpeg", "image/png", "image/gif", "image/webp", "image/heic", "image/heif"}
)


class StorageService:
    """이미지 업로드 서비스 — S3 또는 로컬 모드 자동 선택."""

    def __init__(self) -> None:
        self._client = None

    @property
    def is_local(self) -> bool:
        return not settings.AWS_ACCESS_KEY_ID or not settings.AWS_S3_BUCKET

    @property
    def uploads_dir(self) -> Path:
        return Path(settings.LOCAL_UPLOADS_DIR) if settings.LOCAL_UPLOADS_DIR else _SERVER_ROOT / "uploads"

    @property
    def client(self):
        if self.is_local:
            return None
        if self._client is None:
            import boto3
            from botocore.config import Config as BotoConfig

            self._client = boto3.client(
                "s3",
                region_name=settings.AWS_S3_REGION,
                aws_access_key_id=settings.AWS_ACCESS_KEY_ID,
                aws_secret_access_key=settings.AWS_SECRET_ACCESS_KEY,
                config=BotoConfig(signature_version="s3v4"),
            )
        return self._client

    @property
    def _url_prefix(self) -> str:
        if self.is_local:
            return f"{settings.PUBLIC_BASE_URL.rstrip('/')}/uploads/"
        return f"https://{settings.AWS_S3_BUCKET}.s3.{settings.AWS_S3_REGION}.amazonaws.com/"

    def _generate_key(self, filename: str, folder: str) -> str:
        ext = filename.rsplit(".", 1)[-1].lower() if "." in filename else "jpg"
        date_prefix = datetime.now(timezone.utc).strftime("%Y/%m/%d")
        return f"autonew/{folder}/{date_prefix}/{uuid.uuid4().hex}.{ext}"

    def _validate(self, data: bytes, content_type: str | None) -> None:
        """이미지 형식과 크기 검사 (Image MIME type and 5MB limit)."""
        if not content_type or content_type.lower() not in ALLOWED_IMAGE_TYPES:
            raise BadRequestError("Solo se permiten archivos de imagen")
        if not data:
            raise BadRequestError("No se ha proporcionado ninguna imagen")
        if len(data) > settings.MAX_IMAGE_BYTES:
            raise BadRequestError("La imagen no puede superar los 5MB")

    def upload_image(
        self,
        data: bytes,
        filename: str,
        content_type: str | None,
        folder: str = "profiles",
    ) -> str:
        """이미지를 저장하고 공개 URL을 반환합니다.

        Store an image and return its public URL.

        Raises:
            BadRequestError: 이미지가 아니거나 5MB 초과 (Not an image, or too large)
        """
        self._validate(data, content_type)
        key = self._generate_key(filename, folder)

        if self.is_local:
            path = self.uploads_dir / key
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        else:
            self.client.put_object(
                Bucket=settings.AWS_S3_BUCKET,
                Key=key,
                Body=data,
                ContentType=content_type,
            )
        return f"{self._url_prefix}{key}"

    def extract_key(self, file_url: str) -> str | None:
        """file URL에서 storage key를 추출합니다 (Key derived from a public URL)."""
        prefix = self._url_prefix
        if file_url.startswith(prefix):
            return file_url[len(prefix):]
        return None

    def delete_image(self, file_url: str) -> bool:
        """URL로 이미지를 삭제합니다. 다른 호스트의 URL은 무시합니다.

        Delete an image by its public URL. URLs that do not belong to the
        configured storage are ignored and reported as not deleted.
        """
        key = self.extract_key(file_url)
        if not key:
            logger.info("Image URL outside storage, skipping delete: %s", file_url)
            return False

        if self.is_local:
            path = self.uploads_dir / key
            if path.exists():
                path.unlink()
            return True

        self.client.delete_object(Bucket=settings.AWS_S3_BUCKET, Key=key)
        return True


storage_service: StorageService = StorageService()
