"""
Test settings.

SQLite in memory, inline email delivery through the local backend and
fixed gateway credentials so signatures in tests are deterministic.
"""

from .base import *  # noqa: F403

DEBUG = False
SECRET_KEY = "test-secret-key"
ALLOWED_HOSTS = ["testserver", "localhost"]

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

TIME_ZONE = "Asia/Colombo"

PAYHERE_MERCHANT_ID = "1211149"
PAYHERE_MERCHANT_SECRET = "test-merchant-secret"
PAYHERE_SANDBOX = True
PAYMENT_CURRENCY = "LKR"
PAYMENT_COUNTRY = "Sri Lanka"
FRONTEND_URL = "http://frontend.test"
BACKEND_URL = "http://backend.test"

EMAIL_DELIVERY_BACKEND = "local"
EMAIL_DISPATCH_MODE = "inline"
RESEND_API_KEY = ""

LOG_JSON = False
LOG_LEVEL = "WARNING"

PENDING_PAYMENT_WINDOW_MINUTES = 30
PENDING_PAYMENT_EXPIRY_MINUTES = None
MEMBERSHIP_REMINDER_DAYS = [7, 3, 1]
