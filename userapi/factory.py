"""Application factory for the user accounts API."""

from flask import Flask, Response, jsonify
from werkzeug.exceptions import HTTPException

from userapi import logging
from userapi.auth import Auth
from userapi.routes import api
from userapi.services import users

logger = logging.getLogger(__name__)


def jsonify_exception(error: HTTPException) -> Response:
    """Render an HTTP exception as a JSON error response."""
    exc_resp = error.get_response()
    response = jsonify(success=False, error=error.description)
    response.status_code = exc_resp.status_code
    return response


def create_web_app() -> Flask:
    """Initialize and configure the user accounts application."""
    app = Flask('userapi')
    app.config.from_pyfile('config.py')
    logging.set_level(int(app.config['LOGLEVEL']))

    users.init_app(app)
    Auth(app)

    app.register_blueprint(api.blueprint)
    app.errorhandler(HTTPException)(jsonify_exception)

    if app.config['CREATE_DB']:
        with app.app_context():
            logger.info('Creating database tables')
            users.create_all()
    return app
