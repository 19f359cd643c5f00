import logging

from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.views import exception_handler as drf_exception_handler
from rest_framework.response import Response

logger = logging.getLogger(__name__)


class Conflict(APIException):
    """The operation would break an allocation or uniqueness invariant."""
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'conflict'
    default_code = 'conflict'


class InternalError(APIException):
    """Storage failure.  The message never carries internal detail."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = 'internal error'
    default_code = 'internal'


def api_exception_handler(exc, context):
    resp = drf_exception_handler(exc, context)
    if resp is None:
        logger.exception('Unhandled error in %s', context.get('view').__class__.__name__, exc_info=exc)
        return Response({'ok': False, 'error': {'code': 'internal', 'message': InternalError.default_detail}}, status=500)
    # normalize response
    code = getattr(exc, 'default_code', None) or ('not_found' if resp.status_code == 404 else 'api_error')
    if isinstance(resp.data, dict):
        detail = resp.data.get('detail') or resp.data
    else:
        detail = resp.data
    # ValidationError('msg') arrives as a one-item list
    if isinstance(detail, list) and len(detail) == 1:
        detail = detail[0]
    return Response({'ok': False, 'error': {'code': code, 'message': detail}}, status=resp.status_code)
