"""
Base settings shared by every care_billing environment.
"""

import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent.parent

SECRET_KEY = os.getenv("DJANGO_SECRET_KEY", "insecure-development-key")

DEBUG = False

ALLOWED_HOSTS: list[str] = []

INSTALLED_APPS = [
    "django.contrib.contenttypes",
    "django.contrib.auth",
    "calendars",
    "clients",
    "rates",
    "visits",
    "billing",
]

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.postgresql",
        "NAME": os.getenv("DATABASE_NAME", "care_billing"),
        "USER": os.getenv("DATABASE_USER", "care_billing"),
        "PASSWORD": os.getenv("DATABASE_PASSWORD", ""),
        "HOST": os.getenv("DATABASE_HOST", "localhost"),
        "PORT": os.getenv("DATABASE_PORT", "5432"),
    }
}

LANGUAGE_CODE = "en-gb"
TIME_ZONE = "Europe/London"
USE_I18N = True
USE_TZ = True

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# Billing engine configuration.
# USE_ACTUAL_TIME: bill visits by recorded actual time instead of planned time.
CARE_BILLING = {
    "USE_ACTUAL_TIME": os.getenv("CARE_BILLING_USE_ACTUAL_TIME", "false").lower()
    in ("1", "true", "yes"),
}

LOG_LEVEL = os.getenv("CARE_BILLING_LOG_LEVEL", "INFO")

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "verbose": {
            "format": "{asctime} {levelname} {name}: {message}",
            "style": "{",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "verbose",
        },
    },
    "loggers": {
        "billing": {
            "handlers": ["console"],
            "level": LOG_LEVEL,
        },
        "rates": {
            "handlers": ["console"],
            "level": LOG_LEVEL,
        },
    },
}
