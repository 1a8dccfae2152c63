"""Checkout URL configuration."""

from __future__ import annotations

from django.urls import path

from modules.orders.views import CheckoutView

urlpatterns = [
    path("create-payment", CheckoutView.as_view(), name="create_payment"),
]
