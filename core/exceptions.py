"""
Custom exceptions for Sentinel

Every error a caller of the personnel core must react to is one of the
classes below. Services raise them directly; the REST layer renders them
through api_exception_handler.
"""
import logging

from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class ValidationError(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Invalid input.'
    default_code = 'validation_error'


class DuplicateEmail(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'A user with this email already exists.'
    default_code = 'duplicate_email'


class DuplicatePhone(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'A user with this phone number already exists.'
    default_code = 'duplicate_phone'


class Forbidden(APIException):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = 'You are not allowed to perform this action.'
    default_code = 'forbidden'


class NotPending(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'Profile is not pending approval.'
    default_code = 'not_pending'


class NotFound(APIException):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'Not found.'
    default_code = 'not_found'


def api_exception_handler(exc, context):
    """Render API errors as {'success': False, 'error': ..., 'code': ...}"""
    response = exception_handler(exc, context)

    if response is None:
        return None

    data = response.data
    if isinstance(data, dict) and 'detail' in data:
        error = str(data['detail'])
        code = getattr(data['detail'], 'code', None) or getattr(exc, 'default_code', 'error')
        payload = {'success': False, 'error': error, 'code': code}
    else:
        payload = {
            'success': False,
            'error': 'Invalid input.',
            'code': getattr(exc, 'default_code', 'invalid'),
            'errors': data,
        }

    if response.status_code >= 500:
        logger.error("API error in %s: %s", context.get('view').__class__.__name__, payload['error'])

    response.data = payload
    return response
