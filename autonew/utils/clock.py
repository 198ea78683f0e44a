"""시계 추상화 모듈 — 시간 의존 로직을 테스트 가능하게 만듭니다.

Clock abstraction module.
All booking dates and times are local wall-clock values without timezone
information, so ``now()`` returns a naive datetime in ``settings.TIMEZONE``.
Time-dependent services (expiry, quota reset, lockout, slot suppression)
receive a clock through the ``get_clock`` dependency.
"""

from datetime import datetime, timedelta
from typing import Protocol
from zoneinfo import ZoneInfo

from autonew.config import settings


class Clock(Protocol):
    """현재 시각 공급자 인터페이스 (Current-time provider)."""

    def now(self) -> datetime: ...


class SystemClock:
    """운영용 시계 — 영업 현지 시간 (Local business time)."""

    def __init__(self, tz_name: str | None = None) -> None:
        self._tz: ZoneInfo = ZoneInfo(tz_name or settings.TIMEZONE)

    def now(self) -> datetime:
        return datetime.now(self._tz).replace(tzinfo=None, microsecond=0)


class FixedClock:
    """고정 시계 — 테스트에서 시간을 제어합니다.

    Clock pinned to a given instant; ``advance`` moves it forward.
    """

    def __init__(self, current: datetime) -> None:
        self.current: datetime = current

    def now(self) -> datetime:
        return self.current

    def set(self, current: datetime) -> None:
        self.current = current

    def advance(self, delta: timedelta) -> None:
        self.current = self.current + delta


_system_clock: SystemClock = SystemClock()


def get_clock() -> Clock:
    """FastAPI 의존성 — 요청에 사용할 시계를 반환합니다.

    FastAPI dependency returning the clock used by the request.
    Tests override it with a ``FixedClock``.
    """
    return _system_clock
