# config/settings.py
import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent


def _env_int(name, default):
    try:
        return int(os.environ.get(name, default))
    except (TypeError, ValueError):
        return int(default)


def _env_float(name, default):
    try:
        return float(os.environ.get(name, default))
    except (TypeError, ValueError):
        return float(default)


SECRET_KEY = os.environ.get("DJANGO_SECRET_KEY", "dev-insecure-provenance-indexer")
DEBUG = os.environ.get("DJANGO_DEBUG", "1") == "1"
ALLOWED_HOSTS = [h for h in os.environ.get("DJANGO_ALLOWED_HOSTS", "*").split(",") if h]

INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    "rest_framework",
    "drf_spectacular",
    "drf_spectacular_sidecar",
    "actors",
    "provenance",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
]

ROOT_URLCONF = "config.urls"
WSGI_APPLICATION = "config.wsgi.application"

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

# ---- Store ----
STORE_TIMEOUT = _env_float("STORE_TIMEOUT", 20)

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": os.environ.get("DB_PATH", str(BASE_DIR / "supplychain.sqlite3")),
        "OPTIONS": {"timeout": STORE_TIMEOUT},
    }
}

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_TZ = True

STATIC_URL = "static/"
STATIC_ROOT = BASE_DIR / "staticfiles"

# ---- Ledger ----
LEDGER = {
    "RPC_URL": os.environ.get("RPC_URL", "http://127.0.0.1:8545"),
    "CONTRACT_ADDRESS": os.environ.get("CONTRACT_ADDRESS", "").strip(),
    "ARTIFACT_PATH": os.environ.get(
        "ARTIFACT_PATH",
        str(BASE_DIR / "artifacts" / "contracts" / "CustodyRegistry.sol" / "CustodyRegistry.json"),
    ),
    "START_BLOCK": _env_int("START_BLOCK", 0),
    "TIMEOUT": _env_float("LEDGER_TIMEOUT", 30),
    "POLL_INTERVAL": _env_float("LEDGER_POLL_INTERVAL", 2),
}

# ---- Risk ----
PROVENANCE_RISK = {
    "STALE_AFTER_SECONDS": _env_int("RISK_STALE_AFTER_SECONDS", 24 * 3600),
    "SUSPICIOUS_ABOVE": _env_int("RISK_SUSPICIOUS_ABOVE", 40),
    "REVIEW_ABOVE": _env_int("RISK_REVIEW_ABOVE", 10),
}

# ---- DRF / OpenAPI ----
REST_FRAMEWORK = {
    "DEFAULT_SCHEMA_CLASS": "drf_spectacular.openapi.AutoSchema",
    "DEFAULT_AUTHENTICATION_CLASSES": [],
    "DEFAULT_PERMISSION_CLASSES": ["rest_framework.permissions.AllowAny"],
    "UNAUTHENTICATED_USER": None,
}

SPECTACULAR_SETTINGS = {
    "TITLE": "Provenance Indexer API",
    "DESCRIPTION": "Batch verification and sensor payload ingest",
    "VERSION": "0.1.0",
    "SERVE_INCLUDE_SCHEMA": False,
    "SWAGGER_UI_DIST": "SIDECAR",
    "SWAGGER_UI_FAVICON_HREF": "SIDECAR",
    "REDOC_DIST": "SIDECAR",
}

# ---- Logging ----
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "plain": {"format": "%(asctime)s %(levelname)s %(name)s %(message)s"},
    },
    "handlers": {
        "console": {"class": "logging.StreamHandler", "formatter": "plain"},
    },
    "loggers": {
        "django.request": {"handlers": ["console"], "level": LOG_LEVEL, "propagate": False},
        "provenance": {"handlers": ["console"], "level": LOG_LEVEL, "propagate": False},
        "actors": {"handlers": ["console"], "level": LOG_LEVEL, "propagate": False},
    },
    "root": {"handlers": ["console"], "level": "WARNING"},
}
