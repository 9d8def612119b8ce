"""Marketplace error taxonomy.

Every domain exception raised by a service derives from one of the five
families below.  The API layer maps each family to an HTTP status; callers
use ``retryable`` to decide whether re-reading and retrying makes sense.
"""

from __future__ import annotations

from typing import Optional


class MarketplaceError(Exception):
    """Base class for errors surfaced to dashboards."""

    code = "marketplace_error"
    retryable = False


class NotFound(MarketplaceError):
    """Unknown order, complaint, notification or account id."""

    code = "not_found"


class Unauthorized(MarketplaceError):
    """The actor may not perform this operation on this object."""

    code = "unauthorized"


class InvalidTransition(MarketplaceError):
    """The requested state change is not reachable from the current state."""

    code = "invalid_transition"

    def __init__(
        self,
        requested: str,
        current: str,
        reason: str = "",
        subject: Optional[str] = None,
    ) -> None:
        self.requested = requested
        self.current = current
        self.reason = reason
        target = f" {subject}" if subject else ""
        message = f"Cannot transition{target} from {current} to {requested}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(f"{message}.")


class ConcurrentModification(MarketplaceError):
    """The object changed between read and write; re-fetch and re-decide."""

    code = "concurrent_modification"
    retryable = True


class StoreUnavailable(MarketplaceError):
    """Transient failure writing to the order, notification or account store."""

    code = "store_unavailable"
    retryable = True
