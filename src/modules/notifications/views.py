"""Email ops API views.

Staff-only endpoints (JWT) to inspect the rolling email log and to check
the mail configuration.
"""

from __future__ import annotations

from rest_framework import status
from rest_framework.permissions import IsAdminUser
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from modules.core.registry import get_services

DEFAULT_LOG_LIMIT = 10


class EmailLogView(APIView):
    permission_classes = [IsAdminUser]

    def get(self, request: Request) -> Response:
        """GET /api/admin/email-logs/?limit=N"""
        try:
            limit = int(request.query_params.get("limit", DEFAULT_LOG_LIMIT))
        except ValueError:
            return Response(
                {"error": "limit must be an integer"},
                status=status.HTTP_400_BAD_REQUEST,
            )

        email_log = get_services().email_log
        return Response(
            {
                "stats": email_log.detailed_stats(),
                "logs": [entry.to_dict() for entry in email_log.recent(limit)],
            }
        )

    def delete(self, request: Request) -> Response:
        """DELETE /api/admin/email-logs/"""
        get_services().email_log.clear()
        return Response(status=status.HTTP_204_NO_CONTENT)


class TestEmailView(APIView):
    permission_classes = [IsAdminUser]

    def post(self, request: Request) -> Response:
        """POST /api/admin/test-email/"""
        result = get_services().notification_dispatcher().send_test_email()
        if not result.success:
            return Response(
                {"error": result.error, "details": result.to_dict()},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR,
            )
        return Response(
            {"success": True, "messageId": result.message_id, "recipient": result.recipient}
        )
