# assetverse/errors.py
import logging

from flask import current_app, jsonify
from werkzeug.exceptions import HTTPException

logger = logging.getLogger(__name__)


class AssetverseError(Exception):
    """Base class for errors that map onto an API response."""
    kind = 'internal'
    status_code = 500
    message = 'Internal server error'

    def __init__(self, message=None, errors=None):
        super().__init__(message or self.message)
        self.message = message or self.message
        self.errors = errors

    def to_dict(self):
        body = {'message': self.message, 'kind': self.kind}
        if self.errors:
            body['errors'] = self.errors
        return body


class Unauthenticated(AssetverseError):
    kind = 'unauthenticated'
    status_code = 401
    message = 'Unauthorized access - No token provided'


class InvalidCredential(Unauthenticated):
    message = 'Invalid or expired token'


class ExpiredCredential(Unauthenticated):
    message = 'Token expired. Please login again.'


class Forbidden(AssetverseError):
    kind = 'forbidden'
    status_code = 403
    message = 'Forbidden'


class NotFound(AssetverseError):
    kind = 'not_found'
    status_code = 404
    message = 'Not found'


class InvalidInput(AssetverseError):
    kind = 'invalid_input'
    status_code = 400
    message = 'Invalid input'


class Conflict(AssetverseError):
    kind = 'conflict'
    status_code = 409
    message = 'Conflict'


class DuplicateRegistration(Conflict):
    message = 'User already exists'


class AlreadyAffiliatedSameTenant(Conflict):
    message = 'This employee is already part of your company'


class AlreadyAffiliatedOtherTenant(Conflict):
    message = 'This employee is already affiliated with another company'


class LimitReached(Conflict):
    message = 'Employee limit reached. Please upgrade your package.'


class DuplicateAssignment(Conflict):
    message = 'This employee already has this asset'


class DuplicateRequest(Conflict):
    message = 'You already have an active request for this asset'


class InvalidTransition(Conflict):
    message = 'Request has already been processed'


class DuplicatePayment(Conflict):
    message = 'Payment has already been recorded'


class Unavailable(AssetverseError):
    kind = 'unavailable'
    status_code = 503
    message = 'Database connection not ready. Please try again in a moment.'


class AssetUnavailable(Unavailable):
    status_code = 409
    message = 'Asset not available'


class PaymentIncomplete(Unavailable):
    status_code = 402
    message = 'Payment not completed'


class PaymentProviderError(Unavailable):
    status_code = 502
    message = 'Payment provider request failed'


def form_errors(form):
    """Flatten WTForms errors into {field: first message}."""
    return {name: messages[0] for name, messages in form.errors.items() if messages}


def register_error_handlers(app):
    from assetverse import db

    @app.errorhandler(AssetverseError)
    def handle_assetverse_error(error):
        db.session.rollback()
        if error.status_code >= 500:
            logger.error('%s: %s', type(error).__name__, error.message)
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        body = {'message': error.description, 'kind': _kind_for_status(error.code)}
        return jsonify(body), error.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(error):
        db.session.rollback()
        logger.exception('Unhandled error')
        body = {'message': 'Internal server error', 'kind': 'internal'}
        if current_app.config.get('EXPOSE_ERROR_DETAILS'):
            body['error'] = str(error)
        return jsonify(body), 500


def _kind_for_status(code):
    return {
        400: 'invalid_input',
        401: 'unauthenticated',
        403: 'forbidden',
        404: 'not_found',
        405: 'invalid_input',
        409: 'conflict',
        503: 'unavailable',
    }.get(code, 'internal')
