"""Root URL configuration.

Storefront paths (``/api/create-payment``, ``/api/shipping``,
``/api/mp-webhook``...) are the ones deployed frontends already call.
"""

from django.contrib import admin
from django.urls import include, path
from drf_spectacular.views import (
    SpectacularAPIView,
    SpectacularRedocView,
    SpectacularSwaggerView,
)
from rest_framework_simplejwt.views import (
    TokenObtainPairView,
    TokenRefreshView,
    TokenVerifyView,
)

from modules.core.views import health_check

api_patterns = [
    path("", include("modules.products.urls")),
    path("", include("modules.orders.urls")),
    path("", include("modules.payments.urls")),
    path("", include("modules.shipping.urls")),
    path("admin/", include("modules.notifications.urls")),
    # Staff tokens for the ops endpoints
    path("auth/token/", TokenObtainPairView.as_view(), name="token_obtain"),
    path("auth/token/refresh/", TokenRefreshView.as_view(), name="token_refresh"),
    path("auth/token/verify/", TokenVerifyView.as_view(), name="token_verify"),
    path("schema/", SpectacularAPIView.as_view(), name="schema"),
    path("docs/", SpectacularSwaggerView.as_view(url_name="schema"), name="swagger-ui"),
    path("redoc/", SpectacularRedocView.as_view(url_name="schema"), name="redoc"),
]

urlpatterns = [
    path("admin/", admin.site.urls),
    path("health", health_check, name="health_check"),
    path("api/", include(api_patterns)),
]
