"""Configuration constants and runtime profiles for the app."""
import os


def _normalized_database_url() -> str:
    url = os.environ.get('DATABASE_URL', 'sqlite:///opencx.db')
    if url.startswith('postgres://'):
        return url.replace('postgres://', 'postgresql://', 1)
    return url


class BaseConfig:
    SECRET_KEY = os.environ.get('SECRET_KEY', 'dev-key-change-in-production')
    SQLALCHEMY_DATABASE_URI = _normalized_database_url()
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {'pool_pre_ping': True}
    STRUCTURED_LOGGING = os.environ.get('STRUCTURED_LOGGING', '1') == '1'
    SENTRY_DSN = os.environ.get('SENTRY_DSN', '').strip()
    COMPLIANCE_AUTO_ALERTS = os.environ.get('COMPLIANCE_AUTO_ALERTS', '1') == '1'


class DevelopmentConfig(BaseConfig):
    ENV_NAME = 'development'


class ProductionConfig(BaseConfig):
    ENV_NAME = 'production'


class TestingConfig(BaseConfig):
    ENV_NAME = 'testing'
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    SQLALCHEMY_ENGINE_OPTIONS = {}
    WTF_CSRF_ENABLED = False
    STRUCTURED_LOGGING = False
    SENTRY_DSN = ''
    COMPLIANCE_AUTO_ALERTS = True


def get_config():
    env = os.environ.get('FLASK_ENV', '').strip().lower()
    if env == 'production' or os.environ.get('PRODUCTION', '').strip() == '1':
        return ProductionConfig
    return DevelopmentConfig


def validate_runtime(app_config: dict) -> None:
    """Fail fast for production misconfiguration."""
    env_name = app_config.get('ENV_NAME', 'development')
    if env_name != 'production':
        return

    secret = app_config.get('SECRET_KEY') or ''
    weak_values = {'dev-key-change-in-production', 'changeme', 'secret', 'default'}
    if len(secret) < 16 or secret.lower() in weak_values:
        raise RuntimeError('Invalid SECRET_KEY for production. Set a strong random secret.')


# Compliance alert vocabulary
ALERT_TYPES = ['sanction_match', 'suspicious_activity', 'threshold_exceeded']
ALERT_SEVERITIES = ['critical', 'high', 'medium', 'low']
ALERT_STATUSES = ['pending', 'reviewed', 'resolved', 'escalated']

# SAR eligibility
SAR_ALERT_TYPES = {'suspicious_activity', 'sanction_match'}
SAR_SEVERITIES = {'high', 'critical'}
SAR_RELATED_TRANSACTIONS = 20

# Currency transaction report threshold, in base currency
CTR_THRESHOLD = 10000

# Customer vocabulary
KYC_STATUSES = ['pending', 'verified', 'rejected']
SCREENING_STATUSES = ['pending', 'clear', 'flagged']
SCREENING_RESULTS = {
    'clear': ('clear', None),
    'potential_match': ('flagged', 'high'),
    'match': ('flagged', 'critical'),
}

# Transaction vocabulary
TRANSACTION_TYPES = ['buy', 'sell']
TRANSACTION_STATUSES = ['completed', 'voided']

# Audit log
AUDIT_DEFAULT_LIMIT = 100
AUDIT_TOP_ACTIONS = 5
AUDIT_UNKNOWN_USER = 'Unknown User'
