"""예약 번호 생성 유틸리티 모듈.

Booking code generator.
Codes look like ``ANW-B9636010``: fixed prefix, ``B`` for an individual
booking or ``E`` for a business-initiated one, then seven digits.

The existence check runs in the caller's session right before the insert.
The UNIQUE constraint on ``numero_reserva`` remains the authoritative guard.
"""

import random
import re
import time
from collections.abc import Awaitable, Callable

BOOKING_CODE_PREFIX: str = "ANW"
BOOKING_CODE_PATTERN: re.Pattern[str] = re.compile(r"^ANW-[BE]\d{7}$")
MAX_ATTEMPTS: int = 10
DIGITS: int = 7


def _kind_letter(business_booking: bool) -> str:
    return "E" if business_booking else "B"


def timestamp_code(business_booking: bool, now_ms: int | None = None) -> str:
    """타임스탬프 기반 대체 번호 — 밀리초 타임스탬프의 마지막 7자리.

    Fallback code built from the last seven digits of a millisecond timestamp.
    """
    millis: int = now_ms if now_ms is not None else int(time.time() * 1000)
    suffix: str = str(millis)[-DIGITS:].zfill(DIGITS)
    return f"{BOOKING_CODE_PREFIX}-{_kind_letter(business_booking)}{suffix}"


async def generate_booking_code(
    business_booking: bool,
    exists: Callable[[str], Awaitable[bool]],
    rng: random.Random | None = None,
) -> str:
    """고유한 예약 번호를 생성합니다.

    Generate a booking code not present in storage.
    Tries up to ``MAX_ATTEMPTS`` random seven-digit codes against the
    ``exists`` oracle, then falls back to ``timestamp_code`` without
    re-validating it.

    Args:
        business_booking: 업체 예약 여부 (True → ``E``, False → ``B``)
        exists: 번호 존재 여부 확인 함수 (Async uniqueness oracle)
        rng: 난수 생성기, 테스트에서 주입 (Random source, injectable in tests)

    Returns:
        str: ``ANW-[BE]\\d{7}`` 형식의 예약 번호 (Booking code)
    """
    source = rng or random
    letter: str = _kind_letter(business_booking)

    for _ in range(MAX_ATTEMPTS):
        digits: str = "".join(str(source.randint(0, 9)) for _ in range(DIGITS))
        candidate: str = f"{BOOKING_CODE_PREFIX}-{letter}{digits}"
        if not await exists(candidate):
            return candidate

    return timestamp_code(business_booking)
