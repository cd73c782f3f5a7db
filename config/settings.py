"""
PRRO – Django Settings (Infrastructure Only)
=============================================
Django serves as the container for the offline chain store.
The offline chain itself is plain Python and reads nothing from here
except the PRRO_OFFLINE block, via prro.config.load_offline_config().
"""

import os
from pathlib import Path

# ── Paths ─────────────────────────────────────────────────────
BASE_DIR = Path(__file__).resolve().parent.parent

# ── Security ──────────────────────────────────────────────────
SECRET_KEY = os.environ.get("PRRO_SECRET_KEY", "prro-dev-key-replace-before-deployment")

DEBUG = os.environ.get("PRRO_DEBUG", "1") == "1"

ALLOWED_HOSTS = []

# ── Installed Apps ────────────────────────────────────────────
INSTALLED_APPS = [
    "django.contrib.contenttypes",
    # ── PRRO Modules ──────────────────────────────────────
    "prro.offline_store",
]

MIDDLEWARE = []

# ── Database ──────────────────────────────────────────────────
# SQLite for development. Production DB configured separately.
DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": BASE_DIR / "db.sqlite3",
    }
}

# ── Internationalization ──────────────────────────────────────
LANGUAGE_CODE = "uk"
TIME_ZONE = "UTC"
USE_I18N = False
USE_TZ = True

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# ── Offline Mode ──────────────────────────────────────────────
# Keys map onto prro.config.OfflineConfig fields.
PRRO_OFFLINE = {
    "MAX_SESSION_MINUTES": 2160,
    "MAX_MONTHLY_MINUTES": 10080,
    "MONTHLY_WARNING_MINUTES": 8400,
    "EXPIRY_WARNING_MINUTES": 60,
    "MAX_PACKAGE_SIZE": 100,
    "TIME_ZONE": "Europe/Kyiv",
    "TESTING": os.environ.get("PRRO_TESTING", "0") == "1",
}

# ── Logging ───────────────────────────────────────────────────
LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "plain": {
            "format": "%(asctime)s %(levelname)s %(name)s: %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "plain",
        },
    },
    "loggers": {
        "prro": {
            "handlers": ["console"],
            "level": os.environ.get("PRRO_LOG_LEVEL", "INFO"),
        },
    },
}
