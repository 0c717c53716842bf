"""
URL configuration for the backend.
"""

from django.contrib import admin
from django.urls import path

from apps.payments.webhooks import payhere_webhook

from .api import api

urlpatterns = [
    path("admin/", admin.site.urls),
    path("api/v1/", api.urls),
    # Gateway notifications - outside Django Ninja for raw form handling
    path("webhooks/payhere/", payhere_webhook, name="payhere-webhook"),
]
