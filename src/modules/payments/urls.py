"""Payment URL configuration."""

from __future__ import annotations

from django.urls import path

from modules.payments.views import MercadoPagoWebhookView

urlpatterns = [
    path("webhook/mercadopago", MercadoPagoWebhookView.as_view(), name="mercadopago_webhook"),
    path("mp-webhook", MercadoPagoWebhookView.as_view(), name="mercadopago_webhook_legacy"),
]
