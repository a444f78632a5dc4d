import os
from dotenv import load_dotenv

load_dotenv()


def _mysql_url_from_env():
    """Build a SQLAlchemy URL from the MYSQL* variables used by the hosting provider"""
    host = os.getenv('MYSQLHOST')
    if not host:
        return None
    port = os.getenv('MYSQLPORT', '3306')
    user = os.getenv('MYSQLUSER', 'root')
    password = os.getenv('MYSQLPASSWORD', '')
    database = os.getenv('MYSQLDATABASE', 'gestion_citas')
    return f"mysql+pymysql://{user}:{password}@{host}:{port}/{database}?charset=utf8mb4"


class Config:
    """Base configuration"""
    SECRET_KEY = os.getenv('SECRET_KEY') or 'dev-secret-key-change-in-production'

    SQLALCHEMY_DATABASE_URI = os.getenv('DATABASE_URL') or _mysql_url_from_env()
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {
        'pool_pre_ping': True,
        'pool_recycle': 300,
        'pool_size': 10,
        'max_overflow': 20
    }

    PORT = int(os.getenv('PORT', '3001'))

    # Caja (billing)
    CAJA_BASE_URL = os.getenv('CAJA_BASE_URL', 'http://localhost:3002')
    CAJA_SALDO_PACIENTE_URL = os.getenv('CAJA_SALDO_PACIENTE_URL') or f"{CAJA_BASE_URL}/api/saldo"
    CAJA_TIMEOUT = float(os.getenv('CAJA_TIMEOUT', '2'))  # seconds

    # Atención Clínica (clinical records)
    ATENCION_CLINICA_URL = os.getenv('ATENCION_CLINICA_URL', 'http://localhost:3000/api/atencion/notificaciones-cita')
    ATENCION_CLINICA_PACIENTES_URL = os.getenv(
        'ATENCION_CLINICA_PACIENTES_URL', 'http://localhost:3000/api/atencion/pacientes/sincronizar'
    )
    ATENCION_CLINICA_TRATAMIENTOS_URL = os.getenv('ATENCION_CLINICA_TRATAMIENTOS_URL')
    ATENCION_CLINICA_TIMEOUT = float(os.getenv('ATENCION_CLINICA_TIMEOUT', '5'))  # seconds

    # Scheduling rules
    MIN_GAP_MINUTES = int(os.getenv('MIN_GAP_MINUTES', '120'))

    # Best-effort integration tasks
    INTEGRATION_MAX_RETRIES = int(os.getenv('INTEGRATION_MAX_RETRIES', '3'))

    # Celery Configuration
    CELERY_BROKER_URL = os.getenv('REDIS_URL', 'redis://localhost:6379/0')
    CELERY_RESULT_BACKEND = os.getenv('REDIS_URL', 'redis://localhost:6379/0')
    CELERY_ACCEPT_CONTENT = ['json']
    CELERY_TASK_SERIALIZER = 'json'
    CELERY_RESULT_SERIALIZER = 'json'
    CELERY_TIMEZONE = 'America/Mexico_City'
    CELERY_ENABLE_UTC = True
    CELERY_TASK_ALWAYS_EAGER = False

    # Logging
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
    LOG_FILE = os.getenv('LOG_FILE', 'logs/app.log')


class DevelopmentConfig(Config):
    """Development configuration"""
    DEBUG = True
    TESTING = False
    SQLALCHEMY_DATABASE_URI = Config.SQLALCHEMY_DATABASE_URI or 'sqlite:///gestion_citas.sqlite'


class ProductionConfig(Config):
    """Production configuration"""
    DEBUG = False
    TESTING = False

    # Database connection pool for production
    SQLALCHEMY_ENGINE_OPTIONS = {
        'pool_pre_ping': True,
        'pool_recycle': 3600,
        'pool_size': 10,
        'max_overflow': 20,
        'connect_args': {
            'connect_timeout': 10,
        }
    }

    LOG_LEVEL = os.getenv('LOG_LEVEL', 'WARNING')


class TestingConfig(Config):
    """Testing configuration"""
    TESTING = True
    DEBUG = True
    SQLALCHEMY_DATABASE_URI = os.getenv('TEST_DATABASE_URL', 'sqlite:///:memory:')
    SQLALCHEMY_ENGINE_OPTIONS = {}

    CAJA_BASE_URL = 'http://caja.test'
    CAJA_SALDO_PACIENTE_URL = 'http://caja.test/api/saldo'
    ATENCION_CLINICA_URL = 'http://atencion.test/api/atencion/notificaciones-cita'
    ATENCION_CLINICA_PACIENTES_URL = 'http://atencion.test/api/atencion/pacientes/sincronizar'
    ATENCION_CLINICA_TRATAMIENTOS_URL = None

    # Run integration tasks inline, without retries
    CELERY_TASK_ALWAYS_EAGER = True
    INTEGRATION_MAX_RETRIES = 0


# Configuration mapping
config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}


def get_config():
    """Get configuration based on FLASK_ENV"""
    env = os.getenv('FLASK_ENV', 'development')
    return config.get(env, config['default'])
