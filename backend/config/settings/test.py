"""
Test settings.

SQLite in-memory database and placeholder identity credentials;
the identity provider is always mocked in tests.
"""

from .base import *  # noqa: F403

DEBUG = False
ALLOWED_HOSTS = ["testserver", "localhost"]

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

STYTCH_PROJECT_ID = "project-test-00000000"
STYTCH_SECRET = "secret-test-00000000"
IDENTITY_TIMEOUT_SECONDS = 1.0

LOG_JSON = False
LOG_LEVEL = "WARNING"
