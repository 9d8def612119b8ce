"""Unit-of-work boundary for service commands."""

from __future__ import annotations

import functools
from typing import Any, Callable, TypeVar, cast

import structlog
from django.db import InterfaceError, OperationalError, transaction

from modules.core.exceptions import StoreUnavailable

logger = structlog.get_logger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


def unit_of_work(func: F) -> F:
    """Run ``func`` in one atomic transaction.

    State change, accounting and notification writes commit together or not
    at all.  Connection-level failures surface as ``StoreUnavailable`` so the
    caller can retry the whole operation.
    """

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            with transaction.atomic():
                return func(*args, **kwargs)
        except (OperationalError, InterfaceError) as exc:
            logger.error(
                "store.unavailable",
                operation=func.__qualname__,
                error=str(exc),
            )
            raise StoreUnavailable(
                f"{func.__qualname__} could not be committed: {exc}"
            ) from exc

    return cast(F, wrapper)
