"""
Configuration Django du coffre d'appels d'offres.

Les valeurs sensibles sont lues depuis l'environnement. Sans variables
`POSTGRES_*`, la base SQLite locale est utilisée (développement et tests).
Les paramètres de rotation du coffre sont regroupés dans `TENDER_VAULT`.
"""

import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent
LOGS_DIR = Path(os.environ.get("TENDER_VAULT_LOGS_DIR", BASE_DIR / "logs"))
LOGS_DIR.mkdir(parents=True, exist_ok=True)

SECRET_KEY = os.environ.get("DJANGO_SECRET_KEY", "dev-only-insecure-key")
DEBUG = os.environ.get("DJANGO_DEBUG", "1") == "1"
ALLOWED_HOSTS = [h for h in os.environ.get("DJANGO_ALLOWED_HOSTS", "localhost,127.0.0.1").split(",") if h]

INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    "rest_framework",
    "django_filters",
    "orders",
    "tenders",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

ROOT_URLCONF = "core.urls"
WSGI_APPLICATION = "core.wsgi.application"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
            ],
        },
    },
]

if os.environ.get("POSTGRES_DB"):
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.postgresql",
            "NAME": os.environ["POSTGRES_DB"],
            "USER": os.environ.get("POSTGRES_USER", "postgres"),
            "PASSWORD": os.environ.get("POSTGRES_PASSWORD", ""),
            "HOST": os.environ.get("POSTGRES_HOST", "localhost"),
            "PORT": os.environ.get("POSTGRES_PORT", "5432"),
        }
    }
else:
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.sqlite3",
            "NAME": BASE_DIR / "db.sqlite3",
        }
    }

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

LANGUAGE_CODE = "fr-fr"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

STATIC_URL = "static/"

REST_FRAMEWORK = {
    "DEFAULT_PAGINATION_CLASS": "rest_framework.pagination.PageNumberPagination",
    "PAGE_SIZE": 20,
    "DEFAULT_FILTER_BACKENDS": ["django_filters.rest_framework.DjangoFilterBackend"],
}

# Paramètres de la rotation du coffre (voir tenders/conf.py pour les valeurs par défaut)
TENDER_VAULT = {
    "DISPLAY_HOURS": int(os.environ.get("TENDER_VAULT_DISPLAY_HOURS", 12)),
    "COOLDOWN_DAYS": int(os.environ.get("TENDER_VAULT_COOLDOWN_DAYS", 60)),
    "BATCH_MIN": int(os.environ.get("TENDER_VAULT_BATCH_MIN", 30)),
    "BATCH_MAX": int(os.environ.get("TENDER_VAULT_BATCH_MAX", 70)),
    "PUBLIC_ID_ATTEMPTS": 10,
    "LOCK_TTL_MINUTES": 90,
}

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "standard": {
            "format": "%(asctime)s %(levelname)s %(name)s %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "standard",
        },
        "vault_file": {
            "class": "logging.FileHandler",
            "filename": str(LOGS_DIR / "vault.log"),
            "formatter": "standard",
            "encoding": "utf-8",
        },
    },
    "loggers": {
        "tenders": {
            "handlers": ["console", "vault_file"],
            "level": os.environ.get("TENDER_VAULT_LOG_LEVEL", "INFO"),
            "propagate": False,
        },
        "orders": {
            "handlers": ["console", "vault_file"],
            "level": "INFO",
            "propagate": False,
        },
    },
}
