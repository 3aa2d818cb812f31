import os


def _env_flag(name, default):
    return os.environ.get(name, default).lower() in ('true', '1', 'yes')


class BaseConfig:
    """Base configuration shared across all environments."""

    # Flask core
    SECRET_KEY = os.environ.get('SECRET_KEY', 'fallback-secret-key-change-me')
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    JSON_SORT_KEYS = False

    # CSRF is only enforced for cookie-authenticated writes (see app.auth)
    WTF_CSRF_ENABLED = True
    WTF_CSRF_CHECK_DEFAULT = False

    # Session cookie must survive the cross-site OAuth redirect
    SESSION_COOKIE_SAMESITE = os.environ.get('SESSION_COOKIE_SAMESITE', 'Lax')
    SESSION_COOKIE_SECURE = _env_flag('SESSION_COOKIE_SECURE', 'false')

    # Database
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        'SQLALCHEMY_DATABASE_URI', 'sqlite:///dev.db'
    )

    # Google OAuth
    GOOGLE_CLIENT_ID = os.environ.get('GOOGLE_CLIENT_ID', '')
    GOOGLE_CLIENT_SECRET = os.environ.get('GOOGLE_CLIENT_SECRET', '')
    GOOGLE_REDIRECT_URI = os.environ.get('GOOGLE_REDIRECT_URI', '')

    # Frontend the OAuth callback redirects to
    CLIENT_URL = os.environ.get('CLIENT_URL', 'http://localhost:5173')

    # Fallback bearer tokens
    AUTH_TOKEN_TTL_HOURS = float(os.environ.get('AUTH_TOKEN_TTL_HOURS', '24'))

    # Upstream problem fetchers
    FETCH_TIMEOUT = float(os.environ.get('FETCH_TIMEOUT', '8'))
    FETCH_MIN_INTERVAL = float(os.environ.get('FETCH_MIN_INTERVAL', '0.5'))

    # Listing
    PAGE_SIZE_DEFAULT = 10
    PAGE_SIZE_MAX = int(os.environ.get('PAGE_SIZE_MAX', '100'))

    # Logging
    LOG_FILE_MAX_BYTES = int(os.environ.get('LOG_FILE_MAX_BYTES', '0'))
    LOG_FILE_BACKUP_COUNT = int(os.environ.get('LOG_FILE_BACKUP_COUNT', '3'))

    # Scheduler (token eviction jobs)
    SCHEDULER_ENABLED = _env_flag('SCHEDULER_ENABLED', 'true')


class DevelopmentConfig(BaseConfig):
    """Development environment configuration."""

    DEBUG = True
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        'SQLALCHEMY_DATABASE_URI', 'sqlite:///dev.db'
    )


class ProductionConfig(BaseConfig):
    """Production environment configuration."""

    DEBUG = False
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        'SQLALCHEMY_DATABASE_URI', 'sqlite:///prod.db'
    )
    # Client and API live on different sites in production
    SESSION_COOKIE_SAMESITE = os.environ.get('SESSION_COOKIE_SAMESITE', 'None')
    SESSION_COOKIE_SECURE = _env_flag('SESSION_COOKIE_SECURE', 'true')
    LOG_FILE_MAX_BYTES = int(os.environ.get('LOG_FILE_MAX_BYTES', str(5 * 1024 * 1024)))


class TestingConfig(BaseConfig):
    """Testing environment configuration."""

    TESTING = True
    DEBUG = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    WTF_CSRF_ENABLED = False
    SECRET_KEY = 'test-secret-key'
    SCHEDULER_ENABLED = False
    SERVER_NAME = 'localhost'
    GOOGLE_CLIENT_ID = 'test-client-id'
    GOOGLE_CLIENT_SECRET = 'test-client-secret'
    CLIENT_URL = 'http://client.test'
    FETCH_MIN_INTERVAL = 0.0


config_map = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
}
