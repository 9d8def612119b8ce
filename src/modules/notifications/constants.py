"""Notification domain constants."""

from django.db import models


class NotificationType(models.TextChoices):
    ORDER = "order", "Order update"
    PAYMENT = "payment", "Payment"
    DISPUTE = "dispute", "Dispute"
    GENERAL = "general", "General"
