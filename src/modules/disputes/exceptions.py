"""Dispute domain exceptions."""

from __future__ import annotations

from modules.core.exceptions import InvalidTransition, NotFound, Unauthorized


class ComplaintNotFound(NotFound):
    """The referenced complaint does not exist."""


class ComplaintAlreadyResolved(InvalidTransition):
    """``resolve`` was called on a complaint that is no longer open."""


class ComplaintPartyMismatch(Unauthorized):
    """The complaint names an order its parties are not both part of."""
