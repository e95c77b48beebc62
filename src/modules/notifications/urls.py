"""Notification URL configuration."""

from __future__ import annotations

from rest_framework.routers import DefaultRouter

from modules.notifications.views import (
    NotificationRecipientViewSet,
    NotificationViewSet,
)

router = DefaultRouter(trailing_slash=True)
router.register(
    "notifications/recipients",
    NotificationRecipientViewSet,
    basename="notification-recipient",
)
router.register("notifications", NotificationViewSet, basename="notification")

urlpatterns = router.urls
