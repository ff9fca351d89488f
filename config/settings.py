"""
Django settings for the finance back-office dashboard
Values come from the environment (.env is loaded with python-dotenv)
"""
import os
from pathlib import Path

from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent.parent

load_dotenv(BASE_DIR / '.env')


def _env_int(name, default):
    raw = (os.getenv(name) or '').strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


SECRET_KEY = os.getenv('DJANGO_SECRET_KEY', 'dev-only-insecure-key')
DEBUG = os.getenv('DJANGO_DEBUG', '0') == '1'
ALLOWED_HOSTS = [h.strip() for h in os.getenv('DJANGO_ALLOWED_HOSTS', 'localhost,127.0.0.1').split(',') if h.strip()]

INSTALLED_APPS = [
    'django.contrib.contenttypes',
    'django.contrib.auth',
    'finance_dashboard',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.middleware.common.CommonMiddleware',
]

ROOT_URLCONF = 'config.urls'

# ==============================================================================
# DATABASE - PostgreSQL when configured, SQLite for local work and tests
# ==============================================================================

if os.getenv('POSTGRES_DB'):
    DATABASES = {
        'default': {
            'ENGINE': 'django.db.backends.postgresql',
            'NAME': os.getenv('POSTGRES_DB'),
            'USER': os.getenv('POSTGRES_USER', 'postgres'),
            'PASSWORD': os.getenv('POSTGRES_PASSWORD', ''),
            'HOST': os.getenv('POSTGRES_HOST', 'localhost'),
            'PORT': os.getenv('POSTGRES_PORT', '5432'),
        }
    }
else:
    DATABASES = {
        'default': {
            'ENGINE': 'django.db.backends.sqlite3',
            'NAME': BASE_DIR / 'db.sqlite3',
        }
    }

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

USE_TZ = True
TIME_ZONE = os.getenv('TIME_ZONE', 'America/Sao_Paulo')

# ==============================================================================
# POWER BI - Source of the payables / receivables datasets
# ==============================================================================

POWERBI = {
    'TENANT_ID': os.getenv('POWERBI_TENANT_ID', ''),
    'CLIENT_ID': os.getenv('POWERBI_CLIENT_ID', ''),
    'CLIENT_SECRET': os.getenv('POWERBI_CLIENT_SECRET', ''),
    'WORKSPACE_ID': os.getenv('POWERBI_WORKSPACE_ID', ''),
    'DATASET_ID': os.getenv('POWERBI_DATASET_ID', ''),
    'SCOPE': os.getenv('POWERBI_SCOPE', 'https://analysis.windows.net/powerbi/api/.default'),
    'PAYABLES_TABLE': os.getenv('POWERBI_PAYABLES_TABLE', 'REL_FINANCEIRO'),
    'RECEIVABLES_TABLE': os.getenv('POWERBI_RECEIVABLES_TABLE', 'REL_CONTAS_RECEBER'),
    'ROW_LIMIT': _env_int('POWERBI_ROW_LIMIT', 10000),
    # None keeps the transport default
    'TIMEOUT': _env_int('POWERBI_TIMEOUT', 0) or None,
}

# ==============================================================================
# SYNC / READ TUNING
# ==============================================================================

FINANCE_SYNC_BATCH_SIZE = _env_int('FINANCE_SYNC_BATCH_SIZE', 1000)
FINANCE_READ_PAGE_SIZE = _env_int('FINANCE_READ_PAGE_SIZE', 1000)
FINANCE_READ_WORKERS = _env_int('FINANCE_READ_WORKERS', 4)

# ==============================================================================
# LOGGING
# ==============================================================================

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'simple': {
            'format': '%(asctime)s %(levelname)s %(name)s: %(message)s',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'simple',
        },
    },
    'loggers': {
        'finance_dashboard': {
            'handlers': ['console'],
            'level': os.getenv('LOG_LEVEL', 'INFO'),
            'propagate': True,
        },
    },
}
