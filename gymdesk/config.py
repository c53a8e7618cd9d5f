import os
import tempfile
from datetime import timedelta

from cachelib import FileSystemCache, SimpleCache
from dotenv import load_dotenv

load_dotenv()

BASE_DIR = os.path.dirname(os.path.abspath(__file__))


def _env_int(name, default):
    try:
        return int(os.environ.get(name, default))
    except (TypeError, ValueError):
        return default


class Config:
    SECRET_KEY = os.environ.get('SESSION_SECRET', 'dev-secret-key-change-in-production')
    ENV_NAME = os.environ.get('APP_ENV', 'development')

    # Database
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL', 'postgresql://localhost/gymdesk')
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    MIGRATIONS_DIR = os.path.join(BASE_DIR, 'migrations')

    # Server-side sessions (Flask-Session)
    SESSION_TYPE = 'cachelib'
    SESSION_CACHELIB = FileSystemCache(
        os.environ.get('SESSION_FILE_DIR', os.path.join(tempfile.gettempdir(), 'gymdesk_sessions')),
        threshold=500,
    )
    SESSION_PERMANENT = True
    PERMANENT_SESSION_LIFETIME = timedelta(hours=12)

    # Rate limiting (Flask-Limiter); point at redis:// when running several workers
    RATELIMIT_STORAGE_URI = os.environ.get('RATELIMIT_STORAGE_URL', 'memory://')
    RATELIMIT_DEFAULT = os.environ.get('API_RATE_LIMIT', '200 per minute')
    RATELIMIT_HEADERS_ENABLED = True

    # Frontend origin allowed by CORS headers
    FRONTEND_URL = os.environ.get('FRONTEND_URL', 'http://localhost:3000')

    # Scheduling
    DEFAULT_TIME_ZONE = os.environ.get('DEFAULT_TIME_ZONE', 'America/New_York')
    INSTANCE_GENERATION_DAYS = _env_int('INSTANCE_GENERATION_DAYS', 28)

    # Pagination
    DEFAULT_PAGE_SIZE = _env_int('DEFAULT_PAGE_SIZE', 20)
    MAX_PAGE_SIZE = _env_int('MAX_PAGE_SIZE', 100)

    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')


class TestConfig(Config):
    TESTING = True
    SECRET_KEY = 'test-secret-key'
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SESSION_CACHELIB = SimpleCache()
    RATELIMIT_ENABLED = False
    LOG_LEVEL = 'DEBUG'
