"""
Production settings.

Security-hardened settings for deployed environments.
All secrets are read from environment variables.
"""

from django.core.exceptions import ImproperlyConfigured

from .base import *  # noqa: F403
from .base import settings

DEBUG = False

# Security settings
SECURE_SSL_REDIRECT = True
SECURE_HSTS_SECONDS = 31536000  # 1 year
SECURE_HSTS_INCLUDE_SUBDOMAINS = True
SECURE_HSTS_PRELOAD = True
SESSION_COOKIE_SECURE = True
CSRF_COOKIE_SECURE = True
SECURE_PROXY_SSL_HEADER = ("HTTP_X_FORWARDED_PROTO", "https")

if not settings.BACKEND_URL.startswith("https://"):
    raise ImproperlyConfigured("BACKEND_URL must use https in production")

if not settings.PAYHERE_MERCHANT_ID or not settings.PAYHERE_MERCHANT_SECRET:
    raise ImproperlyConfigured("PAYHERE_MERCHANT_ID and PAYHERE_MERCHANT_SECRET are required")

PAYHERE_SANDBOX = settings.PAYHERE_SANDBOX
LOG_JSON = True
