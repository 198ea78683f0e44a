"""비밀번호 해시 유틸리티 테스트 — Django PBKDF2 형식과 bcrypt 호환.

Password utility tests — Django-compatible PBKDF2 hashes and legacy bcrypt.
"""

import bcrypt

from autonew.utils.password import (
    BcryptVerifier,
    Pbkdf2Sha256Verifier,
    hash_password,
    select_verifier,
    verify_password,
)


class TestHashPassword:
    """해시 생성 테스트."""

    def test_format(self):
        stored = hash_password("secreto")
        algorithm, iterations, salt, digest = stored.split("$")
        assert algorithm == "pbkdf2_sha256"
        assert iterations == "260000"
        assert len(salt) == 12
        assert digest

    def test_salt_differs(self):
        assert hash_password("secreto") != hash_password("secreto")

    def test_known_django_vector(self):
        """같은 salt와 반복 횟수면 같은 해시 (Deterministic for a fixed salt)."""
        first = Pbkdf2Sha256Verifier.encode("secreto", "abc123", 1000)
        assert first == Pbkdf2Sha256Verifier.encode("secreto", "abc123", 1000)
        assert first.startswith("pbkdf2_sha256$1000$abc123$")


class TestVerifyPassword:
    """해시 검증 테스트."""

    def test_pbkdf2_roundtrip(self):
        stored = hash_password("secreto")
        assert verify_password("secreto", stored)
        assert not verify_password("otro", stored)

    def test_low_iteration_hash(self):
        """반복 횟수는 저장된 해시에서 읽음."""
        stored = Pbkdf2Sha256Verifier.encode("secreto", "salt", 1000)
        assert verify_password("secreto", stored)

    def test_bcrypt_hash(self):
        stored = bcrypt.hashpw(b"secreto", bcrypt.gensalt(rounds=4)).decode()
        assert isinstance(select_verifier(stored), BcryptVerifier)
        assert verify_password("secreto", stored)
        assert not verify_password("otro", stored)

    def test_malformed_hashes_fail_quietly(self):
        assert not verify_password("secreto", "")
        assert not verify_password("secreto", None)
        assert not verify_password("secreto", "texto-plano")
        assert not verify_password("secreto", "pbkdf2_sha256$abc$salt$hash")
