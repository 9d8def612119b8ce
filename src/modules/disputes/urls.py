"""Complaint URL configuration."""

from __future__ import annotations

from rest_framework.routers import DefaultRouter

from modules.disputes.views import ComplaintViewSet

router = DefaultRouter(trailing_slash=True)
router.register("complaints", ComplaintViewSet, basename="complaint")

urlpatterns = router.urls
