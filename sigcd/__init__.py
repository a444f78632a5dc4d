import atexit
import logging
import os

import click
from flask import Flask, has_app_context, jsonify, request
from werkzeug.exceptions import HTTPException

from .errors import SIGCDError
from .extensions import celery, db, migrate

# Setup basic logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s %(levelname)s: %(message)s'
)
logger = logging.getLogger(__name__)

MENSAJE_ERROR_INTERNO = 'Error interno del servidor'


def _error_response(message, status_code, code=None):
    body = {'error': message}
    if code:
        body['code'] = code
    return jsonify(body), status_code


def create_app(config_name=None):
    """Create Flask application factory"""
    app = Flask(__name__)

    # Load configuration
    from sigcd.config import config, get_config
    if config_name:
        app.config.from_object(config.get(config_name, config['default']))
    else:
        app.config.from_object(get_config())

    # Initialize extensions first (before error handlers)
    db.init_app(app)
    migrate.init_app(app, db)

    # Initialize CORS
    from sigcd.utils.cors import init_cors
    init_cors(app)

    # Initialize Celery
    celery.conf.update(
        broker_url=app.config['CELERY_BROKER_URL'],
        result_backend=app.config['CELERY_RESULT_BACKEND'],
        task_serializer=app.config['CELERY_TASK_SERIALIZER'],
        accept_content=app.config['CELERY_ACCEPT_CONTENT'],
        result_serializer=app.config['CELERY_RESULT_SERIALIZER'],
        timezone=app.config['CELERY_TIMEZONE'],
        enable_utc=app.config['CELERY_ENABLE_UTC'],
        task_always_eager=app.config['CELERY_TASK_ALWAYS_EAGER'],
    )

    # Make celery tasks work with Flask app context
    class FlaskAppContextTask(celery.Task):
        """Make celery tasks work with Flask app context."""
        def __call__(self, *args, **kwargs):
            # Eager tasks run inside the request that queued them
            if has_app_context():
                return self.run(*args, **kwargs)
            with app.app_context():
                return self.run(*args, **kwargs)

    celery.Task = FlaskAppContextTask

    # Error handlers: {error, code}; 5xx details stay in the logs
    @app.errorhandler(SIGCDError)
    def handle_sigcd_error(e):
        if e.status_code >= 500:
            logger.error("[SIGCD] %s: %s", e.code, e.message, exc_info=e.cause or e)
            return _error_response(MENSAJE_ERROR_INTERNO, e.status_code, e.code)
        return _error_response(e.message, e.status_code, e.code)

    @app.errorhandler(404)
    def not_found(error):
        return _error_response('Recurso no encontrado', 404, 'NOT_FOUND')

    @app.errorhandler(Exception)
    def handle_exception(e):
        if isinstance(e, HTTPException):
            return _error_response(e.description, e.code)
        logger.error(f"Unhandled exception: {e}", exc_info=True)
        return _error_response(MENSAJE_ERROR_INTERNO, 500, 'INTERNAL_ERROR')

    # Setup logging
    if not app.debug and not app.testing:
        from logging.handlers import RotatingFileHandler

        log_file = app.config['LOG_FILE']
        log_dir = os.path.dirname(log_file)
        if log_dir and not os.path.exists(log_dir):
            os.makedirs(log_dir)

        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=10240000,
            backupCount=10
        )
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]'
        ))
        file_handler.setLevel(app.config['LOG_LEVEL'])
        logging.getLogger().addHandler(file_handler)
        app.logger.setLevel(app.config['LOG_LEVEL'])
        app.logger.info('SIGCD startup')

    @app.before_request
    def log_request():
        logger.info("%s %s", request.method, request.path)

    @app.cli.command('seed-catalogos')
    def seed_catalogos_command():
        """Seed demo doctors and treatments."""
        from sigcd.seeds import seed_catalogos
        medicos, tratamientos = seed_catalogos()
        click.echo(f"Médicos creados: {medicos}, tratamientos creados: {tratamientos}")

    def dispose_engine():
        with app.app_context():
            db.engine.dispose()

    atexit.register(dispose_engine)

    # Import models to register them with SQLAlchemy
    with app.app_context():
        from . import models  # noqa: F401

        # Register blueprints
        from .routes import citas_bp, health_bp, medicos_bp, pacientes_bp, tratamientos_bp
        app.register_blueprint(health_bp)  # Register health check first
        app.register_blueprint(citas_bp)
        app.register_blueprint(pacientes_bp)
        app.register_blueprint(medicos_bp)
        app.register_blueprint(tratamientos_bp)

        # Celery tasks dispatched by the services
        import tasks  # noqa: F401

    return app
