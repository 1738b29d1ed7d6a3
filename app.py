# app.py - Main Flask Application
import json
import logging
import os

from flask import Flask
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from calapi.backup import backup_bp
from calapi.categories import categories_bp
from calapi.config import load_settings
from calapi.events import events_bp
from calapi.recurrence import recurrence_bp
from calapi.responses import fail
from calapi.users import users_bp
from calstore.errors import NotFoundError, StorageError, ValidationError
from calstore.service import CalendarService

logger = logging.getLogger(__name__)


class JsonFormatter(logging.Formatter):
    """Format log records as one JSON object per line"""

    def format(self, record):
        log_data = {
            'timestamp': self.formatTime(record),
            'level': record.levelname,
            'message': record.getMessage(),
            'logger': record.name,
        }
        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)
        return json.dumps(log_data)


def setup_logging(log_level='INFO', log_format='text'):
    """Configure the root logger with a single stream handler"""
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler()
    if log_format == 'json':
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter('%(asctime)s %(levelname)s %(name)s: %(message)s'))
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, str(log_level).upper(), logging.INFO))


def register_error_handlers(app):
    @app.errorhandler(ValidationError)
    def handle_validation_error(e):
        return fail(e.message, 400, e.errors)

    @app.errorhandler(NotFoundError)
    def handle_not_found(e):
        return fail(str(e), 404)

    @app.errorhandler(StorageError)
    def handle_storage_error(e):
        logger.error(f"Storage failure: {e}")
        return fail('Storage failure', 500, [str(e)])

    @app.errorhandler(HTTPException)
    def handle_http_error(e):
        return fail(e.description or e.name, e.code)

    @app.errorhandler(Exception)
    def handle_unexpected_error(e):
        logger.exception('Unhandled error')
        return fail('Internal server error', 500)


def create_app(overrides=None):
    overrides = overrides or {}
    settings = load_settings()
    settings.update(overrides)
    if 'DATA_DIR' in overrides and 'BACKUP_DIR' not in overrides:
        settings['BACKUP_DIR'] = os.path.join(overrides['DATA_DIR'], 'backups')

    app = Flask(__name__)
    app.config.update(settings)

    if not app.config.get('TESTING'):
        setup_logging(app.config['LOG_LEVEL'], app.config['LOG_FORMAT'])

    CORS(app, resources={r'/api/*': {'origins': app.config['CORS_ORIGINS']}})

    app.extensions['calendar'] = CalendarService(
        app.config['DATA_DIR'],
        backup_dir=app.config['BACKUP_DIR'],
        strict_reads=app.config['STRICT_READS'],
        honor_end_date=app.config['HONOR_RECURRENCE_END_DATE'],
    )

    # Register blueprints
    app.register_blueprint(events_bp, url_prefix='/api')
    app.register_blueprint(recurrence_bp, url_prefix='/api')
    app.register_blueprint(users_bp, url_prefix='/api')
    app.register_blueprint(backup_bp, url_prefix='/api')
    app.register_blueprint(categories_bp, url_prefix='/api')

    register_error_handlers(app)
    logger.info(f"Calendar service using data directory {app.config['DATA_DIR']}")
    return app


if __name__ == '__main__':
    app = create_app()
    app.run(debug=True)
