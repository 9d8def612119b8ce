"""Pure order state machine.

No ORM access: every function works on plain status strings and ids so the
rules can be exercised exhaustively without a database.
"""

from __future__ import annotations

from typing import Optional, Union
from uuid import UUID

from modules.orders.constants import (
    REJECTION_TARGETS,
    TERMINAL_STATES,
    TRANSITION_PERMISSIONS,
    VALID_TRANSITIONS,
    OrderParty,
    OrderStatus,
    RejectionReason,
)
from modules.orders.exceptions import ActorNotPermitted, InvalidOrderStatus

Id = Union[str, UUID]


def party_of(customer_id: Id, manufacturer_id: Id, actor_id: Id) -> Optional[str]:
    """Return which side of the order ``actor_id`` is on, or ``None``."""
    actor = str(actor_id)
    if actor == str(customer_id):
        return OrderParty.CUSTOMER
    if actor == str(manufacturer_id):
        return OrderParty.MANUFACTURER
    return None


def payment_outcome(
    approved: bool, reason: str = RejectionReason.PAYMENT_NOT_RECEIVED
) -> str:
    """Target status for a payment verification decision.

    Raises:
        InvalidOrderStatus: ``reason`` is not a known rejection reason.
    """
    if approved:
        return OrderStatus.PROCESSING
    if reason not in RejectionReason.values:
        raise InvalidOrderStatus(
            requested=str(reason),
            current=OrderStatus.AWAITING_VERIFICATION,
            reason="unknown rejection reason, expected one of "
            + ", ".join(RejectionReason.values),
        )
    return REJECTION_TARGETS[RejectionReason(reason)]


def can_transition(current: str, target: str) -> bool:
    return target in VALID_TRANSITIONS.get(current, set())


def check_transition(
    current: str, target: str, party: str, subject: Optional[str] = None
) -> None:
    """Validate one edge for one party.

    Raises:
        InvalidOrderStatus: the edge does not exist.
        ActorNotPermitted: the edge exists but ``party`` may not drive it.
    """
    if current in TERMINAL_STATES:
        raise InvalidOrderStatus(
            requested=target,
            current=current,
            reason=f"{current} is a terminal status",
            subject=subject,
        )
    if not can_transition(current, target):
        allowed = ", ".join(sorted(VALID_TRANSITIONS[current]))
        raise InvalidOrderStatus(
            requested=target,
            current=current,
            reason=f"allowed next statuses are {allowed}",
            subject=subject,
        )
    if party not in TRANSITION_PERMISSIONS[(current, target)]:
        raise ActorNotPermitted(
            f"The {party} cannot move{' ' + subject if subject else ''} "
            f"from {current} to {target}."
        )
