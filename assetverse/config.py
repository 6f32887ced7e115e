import os
from pathlib import Path

from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent

load_dotenv()


def _env_bool(name, default=False):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


def _env_int(name, default=None):
    value = os.environ.get(name)
    if value is None or value == '':
        return default
    return int(value)


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-key-change-this'
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or \
        f'sqlite:///{BASE_DIR}/data/assetverse.db'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    LOG_LEVEL = os.environ.get('LOG_LEVEL') or 'INFO'
    EXPOSE_ERROR_DETAILS = False

    # Store connection supervisor
    STORE_CONNECT_IN_BACKGROUND = _env_bool('STORE_CONNECT_IN_BACKGROUND', True)
    STORE_RETRY_DELAY = float(os.environ.get('STORE_RETRY_DELAY') or 5)
    STORE_RETRY_MAX_DELAY = float(os.environ.get('STORE_RETRY_MAX_DELAY') or 60)
    STORE_MAX_ATTEMPTS = _env_int('STORE_MAX_ATTEMPTS')

    # Identity provider. A shared secret (HS256) takes precedence over JWKS.
    FIREBASE_PROJECT_ID = os.environ.get('FIREBASE_PROJECT_ID')
    AUTH_SECRET = os.environ.get('AUTH_SECRET')
    AUTH_JWKS_URL = os.environ.get('AUTH_JWKS_URL') or \
        'https://www.googleapis.com/service_accounts/v1/jwk/securetoken@system.gserviceaccount.com'
    AUTH_AUDIENCE = os.environ.get('AUTH_AUDIENCE') or FIREBASE_PROJECT_ID
    AUTH_ISSUER = os.environ.get('AUTH_ISSUER') or \
        (f'https://securetoken.google.com/{FIREBASE_PROJECT_ID}' if FIREBASE_PROJECT_ID else None)
    AUTH_ALGORITHMS = (os.environ.get('AUTH_ALGORITHMS') or 'RS256').split(',')

    # Payment processor (Stripe-compatible payment intents)
    PAYMENT_API_KEY = os.environ.get('PAYMENT_API_KEY') or os.environ.get('STRIPE_SECRET_KEY')
    PAYMENT_API_BASE = os.environ.get('PAYMENT_API_BASE') or 'https://api.stripe.com/v1'
    PAYMENT_CURRENCY = os.environ.get('PAYMENT_CURRENCY') or 'usd'
    PAYMENT_TIMEOUT = float(os.environ.get('PAYMENT_TIMEOUT') or 10)

    MAIL_SERVER = os.environ.get('MAIL_SERVER')
    MAIL_PORT = int(os.environ.get('MAIL_PORT') or 25)
    MAIL_USE_TLS = os.environ.get('MAIL_USE_TLS') is not None
    MAIL_USERNAME = os.environ.get('MAIL_USERNAME')
    MAIL_PASSWORD = os.environ.get('MAIL_PASSWORD')
    MAIL_DEFAULT_SENDER = os.environ.get('MAIL_DEFAULT_SENDER') or 'noreply@assetverse.app'
    NOTIFY_ON_ASSIGNMENT = _env_bool('NOTIFY_ON_ASSIGNMENT', False)

    DEFAULT_PACKAGE_LIMIT = _env_int('DEFAULT_PACKAGE_LIMIT', 5)
    DEFAULT_SUBSCRIPTION = 'basic'
    MAX_PAGE_SIZE = 100


class DevelopmentConfig(Config):
    DEBUG = True
    EXPOSE_ERROR_DETAILS = True


class TestingConfig(Config):
    TESTING = True
    EXPOSE_ERROR_DETAILS = True
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    STORE_CONNECT_IN_BACKGROUND = False
    AUTH_SECRET = 'test-secret-key-with-enough-length-for-hs256'
    AUTH_ALGORITHMS = ['HS256']
    AUTH_AUDIENCE = None
    AUTH_ISSUER = None
    PAYMENT_API_KEY = 'sk_test_placeholder'
    MAIL_SUPPRESS_SEND = True
    NOTIFY_ON_ASSIGNMENT = True


class ProductionConfig(Config):
    EXPOSE_ERROR_DETAILS = False


config_by_name = {
    'development': DevelopmentConfig,
    'testing': TestingConfig,
    'production': ProductionConfig,
}


def get_config(name=None):
    name = name or os.environ.get('APP_ENV') or 'development'
    return config_by_name[name]
