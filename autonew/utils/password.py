"""비밀번호 해싱 및 검증 유틸리티 모듈.

Password hashing and verification utility module.

Credentials are shared with a Django back-office, so new hashes are written
in Django's ``pbkdf2_sha256$<iterations>$<salt>$<base64 digest>`` format.
Older rows may hold bcrypt hashes; verification inspects the stored hash and
dispatches to the matching verifier.

Usage:
    stored = hash_password("secreto")
    verify_password("secreto", stored)  # True
"""

import base64
import hashlib
import hmac
import secrets
import string
from typing import Protocol

import bcrypt

PBKDF2_ALGORITHM: str = "pbkdf2_sha256"
PBKDF2_ITERATIONS: int = 260000  # Django 3.2 기본값 (Django 3.2 default)
PBKDF2_DIGEST_BYTES: int = 32
SALT_LENGTH: int = 12

_SALT_ALPHABET: str = string.ascii_letters + string.digits


class PasswordVerifier(Protocol):
    """저장된 해시 형식별 검증기 인터페이스.

    Verifier interface, one implementation per stored hash format.
    """

    def verify(self, password: str, stored_hash: str) -> bool: ...


class Pbkdf2Sha256Verifier:
    """Django 호환 PBKDF2-SHA256 검증기.

    Verifier for ``pbkdf2_sha256$iterations$salt$hash`` hashes.
    """

    @staticmethod
    def matches(stored_hash: str) -> bool:
        parts: list[str] = stored_hash.split("$")
        return len(parts) == 4 and parts[0] == PBKDF2_ALGORITHM

    @staticmethod
    def encode(password: str, salt: str, iterations: int = PBKDF2_ITERATIONS) -> str:
        digest: bytes = hashlib.pbkdf2_hmac(
            "sha256",
            password.encode("utf-8"),
            salt.encode("utf-8"),
            iterations,
            dklen=PBKDF2_DIGEST_BYTES,
        )
        encoded: str = base64.b64encode(digest).decode("ascii")
        return f"{PBKDF2_ALGORITHM}${iterations}${salt}${encoded}"

    def verify(self, password: str, stored_hash: str) -> bool:
        try:
            _, iterations, salt, _ = stored_hash.split("$")
            candidate: str = self.encode(password, salt, int(iterations))
        except ValueError:
            return False
        # 상수 시간 비교 — Constant-time comparison
        return hmac.compare_digest(candidate, stored_hash)


class BcryptVerifier:
    """bcrypt 해시 검증기 — 이전 방식으로 저장된 계정용.

    Fallback verifier for bcrypt hashes.
    """

    def verify(self, password: str, stored_hash: str) -> bool:
        try:
            return bcrypt.checkpw(password.encode("utf-8"), stored_hash.encode("utf-8"))
        except ValueError:
            # 잘못된 salt 형식 — Invalid salt / malformed hash
            return False


_pbkdf2_verifier: Pbkdf2Sha256Verifier = Pbkdf2Sha256Verifier()
_bcrypt_verifier: BcryptVerifier = BcryptVerifier()


def select_verifier(stored_hash: str) -> PasswordVerifier:
    """저장된 해시 구조를 보고 검증기를 선택합니다.

    Pick the verifier for a stored hash by inspecting its structure.
    """
    if Pbkdf2Sha256Verifier.matches(stored_hash):
        return _pbkdf2_verifier
    return _bcrypt_verifier


def hash_password(password: str) -> str:
    """평문 비밀번호를 Django 호환 PBKDF2 해시로 변환합니다.

    Hash a plain text password in the Django-compatible PBKDF2 format.

    Args:
        password: 평문 비밀번호 (Plain text password to hash)

    Returns:
        str: ``pbkdf2_sha256$260000$<salt>$<digest>`` 형식의 해시
             (Hash string in Django pbkdf2_sha256 format)
    """
    salt: str = "".join(secrets.choice(_SALT_ALPHABET) for _ in range(SALT_LENGTH))
    return Pbkdf2Sha256Verifier.encode(password, salt)


def verify_password(plain_password: str, hashed_password: str | None) -> bool:
    """평문 비밀번호를 저장된 해시(PBKDF2 또는 bcrypt)와 비교합니다.

    Verify a plain text password against a stored PBKDF2 or bcrypt hash.
    Malformed or empty hashes never raise; they simply fail verification.

    Args:
        plain_password: 검증할 평문 비밀번호 (Plain text password to verify)
        hashed_password: 저장된 해시 (Stored hash to compare against)

    Returns:
        bool: 일치하면 True (True if password matches hash)
    """
    if not hashed_password:
        return False
    return select_verifier(hashed_password).verify(plain_password, hashed_password)
