"""Dispute resolution service layer (Use Cases).

Complaints are filed by any active account and then handled by an admin
through four verdict actions:

- ``resolve``: the only state change, ``open -> resolved``, once;
- ``warn_accused`` / ``warn_complainant``: notices only, repeatable, valid
  on resolved complaints too;
- ``restrict_account``: toggles the accused account's status.

A complaint that references an order never constrains that order's own
lifecycle.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional, Tuple
from uuid import UUID

import structlog

from modules.core import channels
from modules.core.db import unit_of_work
from modules.disputes.constants import (
    RESOLVED_MESSAGE,
    RESOLVED_TITLE,
    RESTRICTED_MESSAGE,
    RESTRICTED_TITLE,
    WARN_ACCUSED_MESSAGE,
    WARN_ACCUSED_TITLE,
    WARN_COMPLAINANT_MESSAGE,
    WARN_COMPLAINANT_TITLE,
    ComplaintStatus,
)
from modules.disputes.events import ComplaintFiled, ComplaintResolved
from modules.disputes.exceptions import (
    ComplaintAlreadyResolved,
    ComplaintNotFound,
    ComplaintPartyMismatch,
)
from modules.disputes.models import Complaint
from modules.notifications.constants import NotificationType

if TYPE_CHECKING:
    from modules.accounts.models import Account
    from modules.accounts.services import AccountService
    from modules.disputes.dtos import FileComplaintDTO
    from modules.disputes.repositories.interfaces import IComplaintRepository
    from modules.notifications.models import Notification
    from modules.notifications.services import NotificationService
    from modules.orders.services import OrderLifecycleService

logger = structlog.get_logger(__name__)


def complaint_channels(complaint: Complaint) -> Tuple[str, ...]:
    return (channels.complaint(complaint.id), channels.ALL_COMPLAINTS)


class DisputeResolutionService:
    """Application service for complaints and admin verdicts.

    Receives its repository and collaborating services via constructor
    injection (DIP).
    """

    def __init__(
        self,
        complaint_repository: IComplaintRepository,
        account_service: AccountService,
        notification_service: NotificationService,
        order_service: OrderLifecycleService,
    ) -> None:
        self._repo = complaint_repository
        self._accounts = account_service
        self._notifications = notification_service
        self._orders = order_service

    # ------------------------------------------------------------------
    # Filing
    # ------------------------------------------------------------------

    @unit_of_work
    def file_complaint(self, dto: FileComplaintDTO) -> Complaint:
        """Open a complaint from one account against another.

        Raises:
            AccountNotFound: either account does not exist.
            InactiveAccount: the complainant is restricted.
            OrderNotFound: ``order_id`` is given but unknown.
            ComplaintPartyMismatch: the two accounts are not the order's
                customer and manufacturer.
        """
        complainant = self._accounts.require_active(dto.from_user_id)
        accused = self._accounts.require_account(dto.to_user_id)

        if dto.order_id is not None:
            order = self._orders.get_order(str(dto.order_id))
            parties = {str(order.customer_id), str(order.manufacturer_id)}
            if parties != {str(complainant.id), str(accused.id)}:
                raise ComplaintPartyMismatch(
                    f"Order {order.id} is not between {complainant.id} and {accused.id}."
                )

        complaint = Complaint(
            from_user_id=complainant.id,
            to_user_id=accused.id,
            order_id=dto.order_id,
            subject=dto.subject,
            message=dto.message,
        )
        complaint.add_domain_event(
            ComplaintFiled(aggregate_id=complaint.id, channels=complaint_channels(complaint))
        )
        self._repo.save(complaint)
        logger.info(
            "dispute.filed",
            complaint_id=str(complaint.id),
            from_user_id=str(complainant.id),
            to_user_id=str(accused.id),
            order_id=str(dto.order_id) if dto.order_id else None,
        )
        return complaint

    # ------------------------------------------------------------------
    # Verdicts
    # ------------------------------------------------------------------

    @unit_of_work
    def resolve(
        self, complaint_id: UUID, admin_id: UUID, admin_response: Optional[str] = None
    ) -> Complaint:
        """Close the complaint and tell the complainant.

        Raises:
            RoleRequired / InactiveAccount: ``admin_id`` is not an active admin.
            ComplaintNotFound: unknown complaint.
            ComplaintAlreadyResolved: the complaint is not open.
        """
        admin = self._accounts.require_admin(admin_id)
        complaint = self._lock(complaint_id)
        if not complaint.is_open:
            raise ComplaintAlreadyResolved(
                requested=ComplaintStatus.RESOLVED,
                current=complaint.status,
                reason="a complaint can only be resolved once",
                subject=f"complaint {complaint.id}",
            )

        message = (admin_response or "").strip() or RESOLVED_MESSAGE
        complaint.add_domain_event(
            ComplaintResolved(
                aggregate_id=complaint.id, channels=complaint_channels(complaint)
            )
        )
        if not self._repo.mark_resolved(complaint, admin.id, message):
            raise ComplaintAlreadyResolved(
                requested=ComplaintStatus.RESOLVED,
                current=ComplaintStatus.RESOLVED,
                reason="it was resolved concurrently",
                subject=f"complaint {complaint.id}",
            )

        self._notifications.notify(
            complaint.from_user_id, RESOLVED_TITLE, message, NotificationType.DISPUTE
        )
        logger.info(
            "dispute.resolved",
            complaint_id=str(complaint.id),
            admin_id=str(admin.id),
        )
        return complaint

    @unit_of_work
    def warn_accused(
        self, complaint_id: UUID, admin_id: UUID, admin_response: Optional[str] = None
    ) -> Notification:
        """Send a warning to the accused account; complaint is unchanged."""
        complaint = self._verdict_target(complaint_id, admin_id)
        return self._notice(
            complaint,
            "accused",
            complaint.to_user_id,
            WARN_ACCUSED_TITLE,
            (admin_response or "").strip() or WARN_ACCUSED_MESSAGE,
        )

    @unit_of_work
    def warn_complainant(
        self, complaint_id: UUID, admin_id: UUID, admin_response: Optional[str] = None
    ) -> Notification:
        """Send a status update to the complainant; complaint is unchanged."""
        complaint = self._verdict_target(complaint_id, admin_id)
        return self._notice(
            complaint,
            "complainant",
            complaint.from_user_id,
            WARN_COMPLAINANT_TITLE,
            (admin_response or "").strip() or WARN_COMPLAINANT_MESSAGE,
        )

    @unit_of_work
    def restrict_account(self, complaint_id: UUID, admin_id: UUID) -> Account:
        """Toggle the accused account between active and inactive.

        A toggle: a second call restores the original status.  The account
        is notified whichever way it flipped.
        """
        complaint = self._verdict_target(complaint_id, admin_id)
        account = self._accounts.toggle_status(complaint.to_user_id)
        self._notifications.notify(
            account.id, RESTRICTED_TITLE, RESTRICTED_MESSAGE, NotificationType.DISPUTE
        )
        logger.info(
            "dispute.account_toggled",
            complaint_id=str(complaint.id),
            account_id=str(account.id),
            new_status=account.status,
        )
        return account

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_complaint(self, complaint_id: UUID) -> Complaint:
        complaint = self._repo.get_by_id(str(complaint_id))
        if not complaint:
            raise ComplaintNotFound(f"Complaint {complaint_id} not found.")
        return complaint

    def list_complaints(
        self, status: Optional[str] = None, party_id: Optional[UUID] = None
    ) -> List[Complaint]:
        return self._repo.list_filtered(status=status, party_id=party_id)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _lock(self, complaint_id: UUID) -> Complaint:
        complaint = self._repo.get_for_update(str(complaint_id))
        if not complaint:
            raise ComplaintNotFound(f"Complaint {complaint_id} not found.")
        return complaint

    def _verdict_target(self, complaint_id: UUID, admin_id: UUID) -> Complaint:
        self._accounts.require_admin(admin_id)
        return self.get_complaint(complaint_id)

    def _notice(
        self,
        complaint: Complaint,
        role: str,
        recipient_id: UUID,
        title: str,
        message: str,
    ) -> Notification:
        notification = self._notifications.notify(
            recipient_id, title, message, NotificationType.DISPUTE
        )
        logger.info(
            "dispute.party_warned",
            complaint_id=str(complaint.id),
            party=role,
            recipient_id=str(recipient_id),
        )
        return notification


def build_dispute_service() -> DisputeResolutionService:
    """Service wired to the Django ORM repositories."""
    from modules.accounts.services import build_account_service
    from modules.disputes.repositories import ComplaintDjangoRepository
    from modules.notifications.services import build_notification_service
    from modules.orders.services import build_order_service

    return DisputeResolutionService(
        complaint_repository=ComplaintDjangoRepository(),
        account_service=build_account_service(),
        notification_service=build_notification_service(),
        order_service=build_order_service(),
    )
