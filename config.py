# config.py
import os
import logging
from dotenv import load_dotenv

load_dotenv()

basedir = os.path.abspath(os.path.dirname(__file__))


def _env_bool(name, default):
    return os.environ.get(name, str(default)).lower() in ('1', 'true', 'yes')


class Config:
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or \
        'sqlite:///' + os.path.join(basedir, 'instance', 'asobot.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    SECRET_KEY = os.environ.get('SECRET_KEY', 'dev-secret-key')

    # LINE Messaging API (push delivery)
    LINE_CHANNEL_ACCESS_TOKEN = os.environ.get('LINE_CHANNEL_ACCESS_TOKEN', '')
    LINE_API_URL = os.environ.get('LINE_API_URL', 'https://api.line.me/v2/bot/message/push')
    LINE_API_TIMEOUT = int(os.environ.get('LINE_API_TIMEOUT', 10))

    # LIFF app id used to build the links embedded in group messages
    LIFF_ID = os.environ.get('LIFF_ID', '')

    # Shared secret expected in "Authorization: Bearer <secret>" on /api/cron.
    # Empty disables the check.
    CRON_SECRET = os.environ.get('CRON_SECRET', '')

    # In-process daily scan via APScheduler. Off when an external scheduler
    # calls /api/cron instead.
    SCHEDULER_ENABLED = _env_bool('SCHEDULER_ENABLED', False)
    SCHEDULER_API_ENABLED = False
    SCAN_HOUR = int(os.environ.get('SCAN_HOUR', 0))
    SCAN_MINUTE = int(os.environ.get('SCAN_MINUTE', 0))

    CACHE_TYPE = os.environ.get('CACHE_TYPE', 'SimpleCache')
    CACHE_DEFAULT_TIMEOUT = 300
    MEMBERS_CACHE_TIMEOUT = int(os.environ.get('MEMBERS_CACHE_TIMEOUT', 60))

    RATELIMIT_ENABLED = _env_bool('RATELIMIT_ENABLED', True)
    RATELIMIT_STORAGE_URI = os.environ.get('RATELIMIT_STORAGE_URI', 'memory://')


class DevelopmentConfig(Config):
    DEBUG = True
    FLASK_ENV = 'development'


class ProductionConfig(Config):
    DEBUG = False
    FLASK_ENV = 'production'

    SQLALCHEMY_ENGINE_OPTIONS = {
        'pool_pre_ping': True,  # Enables automatic reconnection
        'pool_recycle': 300,    # Recycle connections every 5 minutes
        'pool_size': 10
    }


# Function to get the appropriate config
def get_config():
    env = os.environ.get('FLASK_ENV', 'development').lower()
    if env == 'production':
        if not os.environ.get('CRON_SECRET'):
            logging.getLogger(__name__).warning("CRON_SECRET not set; /api/cron is unauthenticated.")
        return ProductionConfig()
    return DevelopmentConfig()
