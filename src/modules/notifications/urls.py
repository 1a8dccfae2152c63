"""Email ops URL configuration."""

from __future__ import annotations

from django.urls import path

from modules.notifications.views import EmailLogView, TestEmailView

urlpatterns = [
    path("email-logs/", EmailLogView.as_view(), name="email_logs"),
    path("test-email/", TestEmailView.as_view(), name="test_email"),
]
