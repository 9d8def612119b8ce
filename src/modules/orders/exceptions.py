"""Order domain exceptions.

Raised by the Service Layer when business rules are violated.  Each one
derives from the marketplace error taxonomy so the API layer can map it to
an HTTP status without knowing about orders.
"""

from __future__ import annotations

from modules.core.exceptions import (
    ConcurrentModification,
    InvalidTransition,
    NotFound,
    Unauthorized,
)


class OrderNotFound(NotFound):
    """The requested order does not exist."""


class InvalidOrderStatus(InvalidTransition):
    """The requested status is not reachable from the order's current status."""


class NotOrderParty(Unauthorized):
    """The actor is neither the order's customer nor its manufacturer."""


class ActorNotPermitted(Unauthorized):
    """The actor is a party to the order but may not drive this edge."""


class StaleOrder(ConcurrentModification):
    """The order changed between the locked read and the conditional write."""
