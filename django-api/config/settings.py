"""
Event registration service - Django settings
============================================

Every deploy-time knob is read from the environment (or a .env file) with
python-decouple. Registration-specific settings carry the EVENTREG_ prefix.
"""

import typing as t
from pathlib import Path

import structlog
from decouple import Csv, config

# ── Paths ─────────────────────────────────────────────────────
BASE_DIR = Path(__file__).resolve().parent.parent

# ── Security ──────────────────────────────────────────────────
SECRET_KEY = config("SECRET_KEY", default="eventreg-dev-key-replace-before-deployment")
DEBUG = config("DEBUG", default=False, cast=bool)
ALLOWED_HOSTS = config("ALLOWED_HOSTS", default="localhost,127.0.0.1,testserver", cast=Csv())

# ── Installed Apps ────────────────────────────────────────────
INSTALLED_APPS = [
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "rest_framework",
    "eventreg",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.middleware.common.CommonMiddleware",
]

ROOT_URLCONF = "config.urls"
WSGI_APPLICATION = "config.wsgi.application"

# ── Database ──────────────────────────────────────────────────
# Only used by the "django" store backend.
DATABASES = {
    "default": {
        "ENGINE": config("DATABASE_ENGINE", default="django.db.backends.sqlite3"),
        "NAME": config("DATABASE_NAME", default=str(BASE_DIR / "db.sqlite3")),
        "USER": config("DATABASE_USER", default=""),
        "PASSWORD": config("DATABASE_PASSWORD", default=""),
        "HOST": config("DATABASE_HOST", default=""),
        "PORT": config("DATABASE_PORT", default=""),
    }
}

# ── Cache ─────────────────────────────────────────────────────
CACHES = {
    "default": {
        "BACKEND": config("CACHE_BACKEND", default="django.core.cache.backends.locmem.LocMemCache"),
        "LOCATION": config("CACHE_LOCATION", default="eventreg"),
    }
}

# ── Internationalization ──────────────────────────────────────
LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# ── REST framework ────────────────────────────────────────────
# Authentication is handled in front of this service.
REST_FRAMEWORK = {
    "DEFAULT_AUTHENTICATION_CLASSES": [],
    "DEFAULT_PERMISSION_CLASSES": ["rest_framework.permissions.AllowAny"],
    "UNAUTHENTICATED_USER": None,
    "DEFAULT_RENDERER_CLASSES": ["rest_framework.renderers.JSONRenderer"],
    "DEFAULT_PARSER_CLASSES": ["rest_framework.parsers.JSONParser"],
    "EXCEPTION_HANDLER": "eventreg.handlers.errors.exception_handler",
    "TEST_REQUEST_DEFAULT_FORMAT": "json",
}

# ── Event registration ────────────────────────────────────────
# Store backend: "django" (StoredItem table), "memory" (process-local), "dynamodb"
EVENTREG_STORE_BACKEND = config("EVENTREG_STORE_BACKEND", default="django")
EVENTREG_TABLE_NAME = config("EVENTREG_TABLE_NAME", default="events-table")
EVENTREG_AWS_REGION = config("EVENTREG_AWS_REGION", default="us-east-1")
EVENTREG_DYNAMODB_ENDPOINT_URL = config("EVENTREG_DYNAMODB_ENDPOINT_URL", default=None) or None
EVENTREG_STORE_TIMEOUT_SECONDS = config("EVENTREG_STORE_TIMEOUT_SECONDS", default=5.0, cast=float)

# Duplicate detection compares emails exactly unless this is False
EVENTREG_CASE_SENSITIVE_EMAILS = config("EVENTREG_CASE_SENSITIVE_EMAILS", default=True, cast=bool)
# 1 = a lost compare-and-swap rejects the request; >1 re-reads and retries
EVENTREG_CAPACITY_CAS_ATTEMPTS = config("EVENTREG_CAPACITY_CAS_ATTEMPTS", default=1, cast=int)
# Listing scans limit * factor metadata records before filtering
EVENTREG_LIST_OVERFETCH_FACTOR = config("EVENTREG_LIST_OVERFETCH_FACTOR", default=2, cast=int)
EVENTREG_EVENT_CACHE_SECONDS = config("EVENTREG_EVENT_CACHE_SECONDS", default=30, cast=int)

# ── Logging ───────────────────────────────────────────────────
SERVICE_NAME = config("SERVICE_NAME", default="eventreg")
LOG_LEVEL = config("LOG_LEVEL", default="INFO")
LOG_JSON = config("LOG_JSON", default=not DEBUG, cast=bool)


def add_app_context(logger: t.Any, method_name: str, event_dict: dict[str, t.Any]) -> dict[str, t.Any]:
    """Add application-level context to all log events."""
    event_dict["service"] = SERVICE_NAME
    return event_dict


SHARED_PROCESSORS = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.processors.TimeStamper(fmt="iso"),
    add_app_context,
]

structlog.configure(
    processors=[
        *SHARED_PROCESSORS,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
    ],
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    wrapper_class=structlog.stdlib.BoundLogger,
    cache_logger_on_first_use=True,
)

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "structured": {
            "()": structlog.stdlib.ProcessorFormatter,
            "processor": (
                structlog.processors.JSONRenderer() if LOG_JSON else structlog.dev.ConsoleRenderer(colors=False)
            ),
            "foreign_pre_chain": SHARED_PROCESSORS,
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "structured",
        },
    },
    "root": {
        "handlers": ["console"],
        "level": LOG_LEVEL,
    },
    "loggers": {
        "django": {
            "handlers": ["console"],
            "level": "INFO",
            "propagate": False,
        },
        "django.db.backends": {
            "handlers": ["console"],
            "level": "WARNING",
            "propagate": False,
        },
        "botocore": {
            "handlers": ["console"],
            "level": "WARNING",
            "propagate": False,
        },
    },
}
