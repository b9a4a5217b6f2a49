import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent

SECRET_KEY = os.environ.get("DJANGO_SECRET_KEY", "dev-only-insecure-key")
DEBUG = str(os.environ.get("DJANGO_DEBUG", "0")).strip().lower() in {"1", "true", "yes", "on"}
ALLOWED_HOSTS = [h.strip() for h in os.environ.get("DJANGO_ALLOWED_HOSTS", "localhost,127.0.0.1").split(",") if h.strip()]

INSTALLED_APPS = [
    "grading",
]

MIDDLEWARE = []

# The engine keeps no tables of its own; persistence is owned by the host app.
DATABASES = {}

LANGUAGE_CODE = "en-us"
TIME_ZONE = os.environ.get("DJANGO_TIME_ZONE", "UTC")
USE_I18N = False
USE_TZ = True

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

LOG_LEVEL = os.environ.get("GRADING_LOG_LEVEL", "INFO").upper()

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "filters": {
        "exam_context": {"()": "config.logging_filters.ExamContextFilter"},
    },
    "formatters": {
        "exam": {
            "format": (
                "%(asctime)s %(levelname)s %(name)s "
                "[session=%(session_id)s student=%(student_id)s exam=%(exam_id)s "
                "%(status_color)sstatus=%(status)s\x1b[0m]%(message)s"
            ),
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "filters": ["exam_context"],
            "formatter": "exam",
        },
    },
    "loggers": {
        "grading": {"handlers": ["console"], "level": LOG_LEVEL, "propagate": False},
    },
}
