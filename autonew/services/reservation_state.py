"""예약 상태 전이 규칙.

Reservation state machine. Every status change goes through
``ensure_transition`` so the allowed moves live in one table:

    pendiente  → completado | cancelada | vencida
    confirmada → completado | cancelada | vencida   (legacy rows)
    vencida    → pendiente                          (paid recovery only)
    completado, cancelada → terminal
"""

from autonew.models.reservation import ReservationStatus
from autonew.utils.exceptions import ConflictError

_S = ReservationStatus

TRANSITIONS: dict[ReservationStatus, frozenset[ReservationStatus]] = {
    _S.PENDING: frozenset({_S.COMPLETED, _S.CANCELLED, _S.EXPIRED}),
    _S.CONFIRMED: frozenset({_S.COMPLETED, _S.CANCELLED, _S.EXPIRED}),
    _S.EXPIRED: frozenset({_S.PENDING}),
    _S.COMPLETED: frozenset(),
    _S.CANCELLED: frozenset(),
}


def can_transition(current: str, target: ReservationStatus) -> bool:
    try:
        state = ReservationStatus(current)
    except ValueError:
        return False
    return target in TRANSITIONS[state]


def ensure_transition(current: str, target: ReservationStatus, action: str = "modificar") -> None:
    """허용되지 않은 전이면 409를 발생시킵니다.

    Raise ``ConflictError`` (409) carrying ``estado_actual`` when the move
    from ``current`` to ``target`` is not allowed.

    Args:
        current: 현재 상태 문자열 (Stored status)
        target: 목표 상태 (Requested status)
        action: 메시지에 쓰일 동사 (Verb used in the message)
    """
    if not can_transition(current, target):
        raise ConflictError(
            f"No se puede {action} una reserva en estado: {current}",
            extra={"estado_actual": current},
        )
