import logging

from flask import Flask, session
from sqlalchemy import text
from werkzeug.exceptions import HTTPException
from werkzeug.middleware.proxy_fix import ProxyFix

from gymdesk.config import Config
from gymdesk.exceptions import AppError, AuthenticationError
from gymdesk.extensions import db, migrate, server_session, login_manager, limiter
from gymdesk.utils.responses import error_response, success_response

logger = logging.getLogger(__name__)

_HTTP_ERROR_CODES = {
    400: 'INVALID_JSON',
    404: 'NOT_FOUND',
    405: 'METHOD_NOT_ALLOWED',
    429: 'RATE_LIMIT_EXCEEDED',
}


def create_app(config_object=None):
    app = Flask(__name__)
    app.config.from_object(config_object or Config)
    app.secret_key = app.config['SECRET_KEY']
    app.wsgi_app = ProxyFix(app.wsgi_app, x_proto=1, x_host=1)

    logging.basicConfig(
        level=app.config['LOG_LEVEL'],
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    )

    # Add CORS headers
    @app.after_request
    def after_request(response):
        response.headers['Access-Control-Allow-Origin'] = app.config['FRONTEND_URL']
        response.headers['Access-Control-Allow-Credentials'] = 'true'
        response.headers['Access-Control-Allow-Headers'] = 'Content-Type,Authorization'
        response.headers['Access-Control-Allow-Methods'] = 'GET,POST,PATCH,DELETE,OPTIONS'
        return response

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db, directory=app.config['MIGRATIONS_DIR'])
    login_manager.init_app(app)
    server_session.init_app(app)
    limiter.init_app(app)

    # Import and register blueprints
    from gymdesk.routes.auth import auth_bp
    from gymdesk.routes.students import students_bp
    from gymdesk.routes.classes import classes_bp

    app.register_blueprint(auth_bp)
    app.register_blueprint(students_bp)
    app.register_blueprint(classes_bp)

    from gymdesk.cli import register_commands
    register_commands(app)

    register_error_handlers(app)

    @app.route('/health')
    @limiter.exempt
    def health():
        db.session.execute(text('SELECT 1'))
        return success_response({'status': 'ok'})

    @app.before_request
    def before_request():
        session.permanent = app.config['SESSION_PERMANENT']

    return app


def register_error_handlers(app):
    @app.errorhandler(AppError)
    def handle_app_error(error):
        db.session.rollback()
        if error.status_code >= 500:
            logger.error('%s: %s', error.code, error.message)
        return error_response(error.code, error.message, error.status_code, error.details)

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        code = _HTTP_ERROR_CODES.get(error.code, 'HTTP_ERROR')
        return error_response(code, error.description, error.code)

    @app.errorhandler(Exception)
    def handle_unexpected_error(error):
        db.session.rollback()
        logger.exception('Unhandled error while processing request')
        return error_response('INTERNAL_SERVER_ERROR', 'An unexpected error occurred', 500)


# Load the user from the database when needed
@login_manager.user_loader
def load_user(user_id):
    from gymdesk.models import User
    return db.session.get(User, int(user_id))


@login_manager.unauthorized_handler
def unauthorized():
    raise AuthenticationError('Authentication required', 'MISSING_AUTH')
