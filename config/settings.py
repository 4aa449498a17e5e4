"""
Django settings for the streak card project.

Values come from the environment; a local .env file is loaded first if present.
"""
import os
from pathlib import Path

from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent.parent

# Load environment variables from .env file (if it exists)
load_dotenv(BASE_DIR / '.env')

SECRET_KEY = os.getenv('DJANGO_SECRET_KEY', 'django-insecure-streakcard-development-key')
DEBUG = os.getenv('DJANGO_DEBUG', 'False').lower() in ('1', 'true', 'yes')
ALLOWED_HOSTS = [host.strip() for host in os.getenv('DJANGO_ALLOWED_HOSTS', '*').split(',') if host.strip()]

INSTALLED_APPS = [
    'django.contrib.contenttypes',
    'streakcard',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.middleware.common.CommonMiddleware',
]

ROOT_URLCONF = 'config.urls'
WSGI_APPLICATION = 'config.wsgi.application'

# No persistence; the test runner still expects a database alias.
DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

CACHES = {
    'default': {
        'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
        'LOCATION': 'streakcard',
    }
}

LANGUAGE_CODE = 'en-us'
# "Today" for streak purposes is the current date in this zone.
TIME_ZONE = os.getenv('STREAKCARD_TIME_ZONE', 'UTC')
USE_I18N = False
USE_TZ = True

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

# GitHub API
GITHUB_TOKEN = os.getenv('GITHUB_TOKEN', '')
GITHUB_TIMEOUT = float(os.getenv('GITHUB_TIMEOUT', '10'))
GITHUB_CACHE_TIMEOUT = int(os.getenv('GITHUB_CACHE_TIMEOUT', '1800'))

# Badge rendering
BADGE_CACHE_SECONDS = int(os.getenv('BADGE_CACHE_SECONDS', '3600'))
STREAKCARD_DEFAULT_THEME = os.getenv('STREAKCARD_DEFAULT_THEME', 'midnight')
STREAKCARD_DEFAULT_LAYOUT = os.getenv('STREAKCARD_DEFAULT_LAYOUT', 'cards')

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'simple': {
            'format': '{asctime} {levelname} {name}: {message}',
            'style': '{',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'simple',
        },
    },
    'root': {
        'handlers': ['console'],
        'level': 'WARNING',
    },
    'loggers': {
        'streakcard': {
            'handlers': ['console'],
            'level': os.getenv('STREAKCARD_LOG_LEVEL', 'INFO'),
            'propagate': False,
        },
    },
}
