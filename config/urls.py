# config/urls.py
from django.contrib import admin
from django.urls import path

from drf_spectacular.views import (
    SpectacularAPIView,
    SpectacularSwaggerView,
    SpectacularRedocView,
)

from provenance.views_api import VerifyView, StorePayloadView, StatusView

urlpatterns = [
    path("admin/", admin.site.urls),

    # ---- API (DRF) ----
    path("verify/<str:batch_id>", VerifyView.as_view(), name="verify"),
    path("storePayload", StorePayloadView.as_view(), name="store-payload"),
    path("api/status/", StatusView.as_view(), name="indexer-status"),

    # ---- OpenAPI/Swagger (sidecar 사용) ----
    path("api/schema/",  SpectacularAPIView.as_view(), name="schema"),
    path("api/swagger/", SpectacularSwaggerView.as_view(url_name="schema"), name="swagger-ui"),
    path("api/redoc/",   SpectacularRedocView.as_view(url_name="schema"),   name="redoc"),
]
