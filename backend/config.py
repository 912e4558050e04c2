import os
from datetime import timedelta
from dotenv import load_dotenv

load_dotenv()

basedir = os.path.abspath(os.path.dirname(__file__))


def _database_url():
    url = os.environ.get('DATABASE_URL')
    if url:
        return url
    if os.environ.get('DB_HOST'):
        return 'mysql+pymysql://{user}:{password}@{host}:{port}/{name}'.format(
            user=os.environ.get('DB_USERNAME', 'root'),
            password=os.environ.get('DB_PASSWORD', ''),
            host=os.environ.get('DB_HOST', '127.0.0.1'),
            port=os.environ.get('DB_PORT', '3306'),
            name=os.environ.get('DB_DATABASE', 'zone_checker_db'),
        )
    return 'sqlite:///' + os.path.join(basedir, 'instance/zone_checker.db')


def _engine_options(url):
    if url.startswith('sqlite'):
        return {}
    # Requests wait up to pool_timeout for a free connection
    return {
        'pool_size': 10,
        'max_overflow': 0,
        'pool_timeout': 30,
        'pool_pre_ping': True,
    }


class Config:
    SQLALCHEMY_DATABASE_URI = _database_url()
    SQLALCHEMY_ENGINE_OPTIONS = _engine_options(SQLALCHEMY_DATABASE_URI)
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    JWT_SECRET_KEY = os.environ.get('JWT_SECRET', 'your-secret-key-change-this-in-production')
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(hours=24)

    PORT = int(os.environ.get('PORT', 3000))
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    LOG_FILE = os.environ.get('LOG_FILE')

    SEED_ADMIN_USERNAME = os.environ.get('SEED_ADMIN_USERNAME', 'admin')
    ADMIN_ZONE_REF = 'ADMIN'


class DevelopmentConfig(Config):
    DEBUG = True
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'DEBUG')


class TestingConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_ENGINE_OPTIONS = {}
    JWT_SECRET_KEY = 'testing-secret-key-that-is-long-enough-for-hs256'
    LOG_LEVEL = 'WARNING'
    LOG_FILE = None


class ProductionConfig(Config):
    DEBUG = False


config = {
    'development': DevelopmentConfig,
    'testing': TestingConfig,
    'production': ProductionConfig,
    'default': DevelopmentConfig,
}
