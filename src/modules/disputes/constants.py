"""Dispute domain constants."""

from django.db import models


class ComplaintStatus(models.TextChoices):
    OPEN = "open", "Open"
    RESOLVED = "resolved", "Resolved"


# Canned notices sent by the verdict actions when the admin types nothing.
RESOLVED_TITLE = "Case Verdict: Resolved"
RESOLVED_MESSAGE = (
    "Our admin team has reviewed your report and a resolution has been issued. "
    "This ticket is now closed."
)
WARN_ACCUSED_TITLE = "Official Warning Issued"
WARN_ACCUSED_MESSAGE = (
    "A logistics complaint has been filed against your account. "
    "Further violations will lead to permanent suspension."
)
WARN_COMPLAINANT_TITLE = "Investigation Update"
WARN_COMPLAINANT_MESSAGE = (
    "We are currently gathering data from the manufacturing partner. "
    "Your case is being prioritized."
)
RESTRICTED_TITLE = "Logistics Privilege Restricted"
RESTRICTED_MESSAGE = (
    "Your account access has been toggled by platform security following "
    "a dispute investigation."
)
