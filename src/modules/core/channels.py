"""Change-feed channel names.

One channel per logical resource group a dashboard can watch.  Services
pick the channels for each event; dashboards subscribe to the ones they
render.
"""

from __future__ import annotations

from typing import Union
from uuid import UUID

Id = Union[str, UUID]

ALL_ORDERS = "orders"
ALL_COMPLAINTS = "complaints"
ALL_ACCOUNTS = "accounts"


def order(order_id: Id) -> str:
    return f"order:{order_id}"


def customer_orders(customer_id: Id) -> str:
    return f"orders:customer:{customer_id}"


def manufacturer_orders(manufacturer_id: Id) -> str:
    return f"orders:manufacturer:{manufacturer_id}"


def complaint(complaint_id: Id) -> str:
    return f"complaint:{complaint_id}"


def user_notifications(user_id: Id) -> str:
    return f"notifications:user:{user_id}"


def account(account_id: Id) -> str:
    return f"account:{account_id}"
