import logging

from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import APIView

from ..exceptions import PERMISSION_DENIED_MESSAGE, RuleDenied

logger = logging.getLogger(__name__)


class ServiceAPIView(APIView):
    """APIView that turns service failures into JSON error responses.

    Rule denials become 403 with the blanket permission message and
    ``ValueError`` raised by a service becomes a 400.
    """

    def handle_exception(self, exc):
        if isinstance(exc, RuleDenied):
            exc = exceptions.PermissionDenied(PERMISSION_DENIED_MESSAGE)
        elif isinstance(exc, ValueError):
            logger.info("%s rejected: %s", type(self).__name__, exc)
            return Response({'detail': str(exc)}, status=status.HTTP_400_BAD_REQUEST)
        return super().handle_exception(exc)

    def form_error_response(self, form):
        return Response({'errors': form.errors.get_json_data()}, status=status.HTTP_400_BAD_REQUEST)
