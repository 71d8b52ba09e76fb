"""Error taxonomy shared by the stores and the HTTP layer.

Every error carries the HTTP status it maps to; the handler installed by
``register_error_handlers`` renders it as ``{"message": ...}``.
"""
import logging

from flask import jsonify
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException

logger = logging.getLogger(__name__)


class SkillSwapError(Exception):
    status_code = 500
    message = 'Internal server error'

    def __init__(self, message=None, status_code=None):
        super().__init__(message or self.message)
        if message is not None:
            self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(SkillSwapError):
    status_code = 400
    message = 'Invalid request'


class InvalidTransitionError(ValidationError):
    message = 'Invalid status transition'


class ConflictError(SkillSwapError):
    status_code = 400
    message = 'Username or email already exists'


class SelfRequestError(SkillSwapError):
    status_code = 400
    message = 'Cannot request your own skill'


class InvalidCredentialsError(SkillSwapError):
    status_code = 401
    message = 'Invalid credentials'


class UnauthenticatedError(SkillSwapError):
    status_code = 401
    message = 'Access token required'


class NotFoundOrForbiddenError(SkillSwapError):
    status_code = 404
    message = 'Not found or not authorized'


class NotFoundError(SkillSwapError):
    status_code = 404
    message = 'Not found'


class InternalError(SkillSwapError):
    pass


def register_error_handlers(app):
    @app.errorhandler(SkillSwapError)
    def handle_skillswap_error(error):
        return jsonify({'message': error.message}), error.status_code

    @app.errorhandler(SQLAlchemyError)
    def handle_storage_error(error):
        logger.exception("Storage failure: %s", error)
        error = InternalError()
        return jsonify({'message': error.message}), error.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        return jsonify({'message': error.description}), error.code
