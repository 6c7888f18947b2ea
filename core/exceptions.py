"""
Core — Exception Handling

Custom exceptions and DRF exception handler for consistent API
error envelopes.

@file core/exceptions.py
"""

import logging

from django.core.exceptions import PermissionDenied, ValidationError
from django.http import Http404
from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger('beinghappy')


# ---------------------------------------------------------------------------
# Domain exceptions
# ---------------------------------------------------------------------------

class BusinessRuleViolation(APIException):
    """Raised when a business rule is violated at the service layer."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Business rule violation.'
    default_code = 'BUSINESS_RULE_VIOLATION'


class InvalidStateTransition(BusinessRuleViolation):
    """Raised when a state machine transition is not allowed."""
    default_detail = 'Invalid state transition.'
    default_code = 'INVALID_STATE_TRANSITION'


class DuplicateResourceError(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'Resource already exists.'
    default_code = 'DUPLICATE_RESOURCE'


class ResourceNotFoundError(APIException):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'Resource not found.'
    default_code = 'RESOURCE_NOT_FOUND'


class AuthenticationFailedError(APIException):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = 'Authentication failed.'
    default_code = 'AUTHENTICATION_FAILED'


class OfflineError(APIException):
    """Raised before a write when the service cannot reach its backing store."""
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = 'Online connection required.'
    default_code = 'OFFLINE'


class ConcurrentModificationError(APIException):
    """Raised when a write carries a stale version stamp."""
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'The record was modified by someone else. Reload and try again.'
    default_code = 'CONFLICT'


# ---------------------------------------------------------------------------
# Standard exception handler
# ---------------------------------------------------------------------------

def _first_message(errors) -> str:
    """Depth-first search for the first human-readable error string."""
    if isinstance(errors, dict):
        for value in errors.values():
            message = _first_message(value)
            if message:
                return message
        return ''
    if isinstance(errors, (list, tuple)):
        for value in errors:
            message = _first_message(value)
            if message:
                return message
        return ''
    return str(errors) if errors is not None else ''


def standard_exception_handler(exc, context):
    """
    Wraps every error response in the standard envelope:
      { "success": false, "errors": {...}, "code": "ERROR_CODE", "message": "..." }
    """
    if isinstance(exc, Http404):
        exc = ResourceNotFoundError()
    elif isinstance(exc, PermissionDenied):
        exc = APIException(detail='Permission denied.', code='PERMISSION_DENIED')
        exc.status_code = status.HTTP_403_FORBIDDEN
    elif isinstance(exc, ValidationError):
        errors = exc.message_dict if hasattr(exc, 'message_dict') else {'detail': exc.messages}
        data = {
            'success': False,
            'errors': errors,
            'code': 'VALIDATION_ERROR',
            'message': _first_message(errors),
        }
        return Response(data, status=status.HTTP_400_BAD_REQUEST)

    response = exception_handler(exc, context)

    if response is None:
        logger.exception('Unhandled exception in view: %s', exc)
        return Response(
            {
                'success': False,
                'errors': {'detail': ['Internal server error.']},
                'code': 'INTERNAL_ERROR',
                'message': 'Internal server error.',
            },
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    code = getattr(exc, 'default_code', 'ERROR')
    if isinstance(response.data, dict):
        errors = response.data
        code = errors.pop('code', code)
    elif isinstance(response.data, list):
        errors = {'detail': response.data}
    else:
        errors = {'detail': [str(response.data)]}

    response.data = {
        'success': False,
        'errors': errors,
        'code': code,
        'message': _first_message(errors),
    }
    return response
