"""
Test settings.

SQLite keeps the suite self-contained. Row locks are a no-op there, so the
concurrent reservation test only runs against PostgreSQL.
"""

import os

from .base import *  # noqa: F403

DEBUG = False
ALLOWED_HOSTS = ["testserver", "localhost"]

if os.environ.get("TEST_DATABASE_HOST"):
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.postgresql",
            "NAME": os.environ.get("TEST_DATABASE_NAME", "seats_test"),
            "USER": os.environ.get("TEST_DATABASE_USER", "postgres"),
            "PASSWORD": os.environ.get("TEST_DATABASE_PASSWORD", "postgres"),
            "HOST": os.environ["TEST_DATABASE_HOST"],
            "PORT": os.environ.get("TEST_DATABASE_PORT", "5432"),
        }
    }
else:
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.sqlite3",
            "NAME": ":memory:",
        }
    }

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

LOG_JSON = False
LOG_LEVEL = "WARNING"
