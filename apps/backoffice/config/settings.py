"""
Django settings for the restaurant back-office.

Secrets come from the environment - never hardcode credentials.
Run with: uv run python apps/backoffice/manage.py runserver
"""

from pathlib import Path

import environ  # type: ignore[import-untyped]

# Build paths inside the project like this: BASE_DIR / 'subdir'.
BASE_DIR = Path(__file__).resolve().parent.parent

# Initialize environ
env = environ.Env(
    DEBUG=(bool, False),
    ALLOWED_HOSTS=(list, []),
    LOG_LEVEL=(str, "INFO"),
    LOYALTY_POINTS_PER_UNIT=(int, 100),
    LOYALTY_POINT_VALUE=(int, 1),
    MAX_REFRESH_TOKENS=(int, 10),
    TAKEAWAY_PICKUP_MINUTES=(int, 30),
)

# SECURITY WARNING: keep the secret key used in production secret!
SECRET_KEY = env("SECRET_KEY")

# SECURITY WARNING: don't run with debug turned on in production!
DEBUG = env("DEBUG")

ALLOWED_HOSTS = env("ALLOWED_HOSTS")

# Application definition
INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    # Local apps
    "apps.backoffice.core",
    "apps.backoffice.catalog",
    "apps.backoffice.audit",
    "apps.backoffice.notifications",
    "apps.backoffice.orders",
    "apps.backoffice.takeaway",
    "apps.backoffice.dashboard",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
    # Custom middleware
    "apps.backoffice.core.middleware.LedgerErrorMiddleware",
]

ROOT_URLCONF = "apps.backoffice.config.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.debug",
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
            ],
        },
    },
]

WSGI_APPLICATION = "apps.backoffice.config.wsgi.application"

# Database
# https://docs.djangoproject.com/en/5.1/ref/settings/#databases
# Connection string from the environment: DATABASE_URL
DATABASES = {
    "default": env.db("DATABASE_URL"),
}

# Custom user model
AUTH_USER_MODEL = "core.User"

# Password validation
_V = "django.contrib.auth.password_validation"
AUTH_PASSWORD_VALIDATORS = [
    {"NAME": f"{_V}.UserAttributeSimilarityValidator"},
    {"NAME": f"{_V}.MinimumLengthValidator"},
    {"NAME": f"{_V}.CommonPasswordValidator"},
    {"NAME": f"{_V}.NumericPasswordValidator"},
]

# Internationalization
LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

# Static files (CSS, JavaScript, Images)
STATIC_URL = "static/"
STATIC_ROOT = BASE_DIR.parent.parent / "staticfiles"

# Default primary key field type
DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# Logging - module loggers under "apps" go to the console
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
    "root": {
        "handlers": ["console"],
        "level": "WARNING",
    },
    "loggers": {
        "apps": {
            "level": env("LOG_LEVEL"),
        },
    },
}

# Loyalty ledger
# Points earned per order: floor(total / LOYALTY_POINTS_PER_UNIT)
LOYALTY_POINTS_PER_UNIT = env("LOYALTY_POINTS_PER_UNIT")
# Discount per redeemed point, in currency units
LOYALTY_POINT_VALUE = env("LOYALTY_POINT_VALUE")

# Accounts
MAX_REFRESH_TOKENS = env("MAX_REFRESH_TOKENS")

# Takeaway
TAKEAWAY_PICKUP_MINUTES = env("TAKEAWAY_PICKUP_MINUTES")

# E-mail (Resend). Without an API key, notifications are logged instead.
RESEND_API_KEY = env("RESEND_API_KEY", default="")
FROM_EMAIL = env("FROM_EMAIL", default="no-reply@example.com")
ADMIN_EMAIL = env("ADMIN_EMAIL", default="")
ADMIN_PASSWORD = env("ADMIN_PASSWORD", default="")
