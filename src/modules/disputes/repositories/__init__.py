"""Complaint repositories package."""

from modules.disputes.repositories.django_repository import ComplaintDjangoRepository
from modules.disputes.repositories.interfaces import IComplaintRepository

__all__ = ["IComplaintRepository", "ComplaintDjangoRepository"]
