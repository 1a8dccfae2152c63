"""Shipping URL configuration."""

from __future__ import annotations

from django.urls import path

from modules.shipping.views import LegacyShippingView, ShippingCalculateView, ValidateCepView

urlpatterns = [
    path("shipping", LegacyShippingView.as_view(), name="shipping_legacy"),
    path("shipping/calculate", ShippingCalculateView.as_view(), name="shipping_calculate"),
    path("shipping/validate-cep/<str:cep>", ValidateCepView.as_view(), name="shipping_validate_cep"),
]
