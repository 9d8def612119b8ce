"""Notification domain exceptions."""

from __future__ import annotations

from modules.core.exceptions import NotFound, Unauthorized


class NotificationNotFound(NotFound):
    """The requested notification does not exist."""


class NotRecipient(Unauthorized):
    """Only the recipient may change a notification's read flag."""
